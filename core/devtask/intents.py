"""
Structured representation of user requests and conversation turns.

An Intent is produced by the classifier and then corrected in place by the
resolver before it reaches a handler.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class IntentType(str, Enum):
    """Resource family an intent targets."""

    FILE = "file"
    CHAT = "chat"
    TASK = "task"
    GITHUB = "github"
    CODE = "code"


class MessageRole(str, Enum):
    """Role of a message in the conversation buffer."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """A single chat message."""

    role: MessageRole
    content: str

    def to_dict(self) -> dict:
        return {"role": self.role.value, "content": self.content}


class Intent(BaseModel):
    """What the user wants: a type, an action and free-form parameters."""

    type: IntentType
    action: str
    parameters: dict[str, Any] = Field(default_factory=dict)
    original_message: str = ""

    @property
    def key(self) -> tuple[str, str]:
        """(type, action) pair used for dispatch tables."""
        return (self.type.value, self.action)

    def matches(self, type_: IntentType | str, *actions: str) -> bool:
        """True if the intent has the given type and one of the actions."""
        if self.type != IntentType(type_):
            return False
        return not actions or self.action in actions

    def has_param(self, name: str) -> bool:
        value = self.parameters.get(name)
        return value is not None and value != ""

    def get_param(self, *names: str, default: Any = None) -> Any:
        """Return the first non-empty parameter among the given aliases."""
        for name in names:
            if self.has_param(name):
                return self.parameters[name]
        return default

    def force(self, type_: IntentType | str, action: str, **params: Any) -> "Intent":
        """Override type/action in place, keeping parameters already present."""
        self.type = IntentType(type_)
        self.action = action
        self.parameters.update(params)
        return self

    @classmethod
    def chat_fallback(cls, message: str) -> "Intent":
        """The intent used whenever classification fails."""
        return cls(type=IntentType.CHAT, action="respond", parameters={}, original_message=message)


class Interaction(BaseModel):
    """A fully processed turn kept in interaction history."""

    message: str
    intent: Optional[Intent] = None
    response: str = ""
    timestamp: datetime = Field(default_factory=datetime.now)


class ClassifierOutput(BaseModel):
    """Arguments returned by the classifier's extract_intent function call."""

    intent_type: IntentType
    action: str
    parameters: Optional[dict[str, Any]] = None

    def to_intent(self, message: str) -> Intent:
        return Intent(
            type=self.intent_type,
            action=self.action.strip().lower(),
            parameters=dict(self.parameters or {}),
            original_message=message,
        )
