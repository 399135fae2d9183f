"""
Per-session state handed to the router and handlers.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from devtask.config import project_root
from devtask.context.conversation import ConversationContext
from devtask.tools.staging import StagedChanges


@dataclass
class SessionContext:
    """Conversation context and pending change-set of one session, bound to a project root."""

    root: Path = field(default_factory=project_root)
    conversation: ConversationContext = field(default_factory=ConversationContext)
    changes: Optional[StagedChanges] = None

    def __post_init__(self):
        self.root = Path(self.root).resolve()
        if self.changes is None:
            self.changes = StagedChanges(self.root)

    def reset(self) -> None:
        """Start over: fresh conversation and no pending changes."""
        self.conversation.initialize()
        self.changes.clear_pending_changes()
