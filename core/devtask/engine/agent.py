"""
DevTaskAgent runs one conversational turn end to end:
classify -> resolve -> route -> remember.
"""

import re
from pathlib import Path
from typing import Optional

from devtask.context.resolver import IntentResolver
from devtask.context.session import SessionContext
from devtask.engine.classifier import IntentClassifier
from devtask.engine.router import ERROR_TEMPLATE, ActionRouter
from devtask.intents import Intent, IntentType
from devtask.runtime.llm_client import LLMClient
from devtask.tools.github import GitHubClient
from devtask.utils.logging import logger

# Staging commands recognised without asking the model
STAGING_COMMANDS = [
    (re.compile(r"(?i)^\s*(!apply|(aplicar|aplique) (as )?altera[çc][õo]es)\b"), "apply"),
    (re.compile(r"(?i)^\s*(!cancel|(cancelar|cancele) (as )?altera[çc][õo]es)\b"), "cancel"),
    (re.compile(r"(?i)^\s*(!changes|(mostrar|mostre) (as )?altera[çc][õo]es( pendentes)?)\b"), "changes"),
]


def match_staging_command(message: str) -> Optional[Intent]:
    for pattern, action in STAGING_COMMANDS:
        if pattern.search(message):
            return Intent(type=IntentType.FILE, action=action, parameters={}, original_message=message)
    return None


class DevTaskAgent:
    """
    One agent per session. Owns the session context and wires the
    classifier, resolver and router together.
    """

    def __init__(
        self,
        session: Optional[SessionContext] = None,
        llm: Optional[LLMClient] = None,
        classifier: Optional[IntentClassifier] = None,
        router: Optional[ActionRouter] = None,
        github: Optional[GitHubClient] = None,
        root: Optional[Path] = None,
    ):
        if session is None:
            session = SessionContext(root=root) if root is not None else SessionContext()
        self.session = session
        llm = llm or LLMClient()
        self.classifier = classifier or IntentClassifier(llm)
        self.resolver = IntentResolver(session.conversation)
        self.router = router or ActionRouter(session, llm=llm, github=github)
        self.last_intent: Optional[Intent] = None

    @property
    def context(self):
        return self.session.conversation

    async def process_message(self, message: str) -> str:
        """Handle one user message and return the response text. Never raises."""
        try:
            history = self.context.recent_messages()
            self.context.add_user_message(message)

            intent = match_staging_command(message)
            if intent is None:
                intent = await self.classifier.classify(message, history)
                intent = self.resolver.resolve(intent, message, history)
            self.last_intent = intent
            logger.info(f"Final intent: {intent.type.value}.{intent.action} {intent.parameters}")

            response = await self.router.route(intent)
            self.context.add_assistant_message(response)
            return response
        except Exception as e:
            logger.error(f"Error processing message: {e}")
            return ERROR_TEMPLATE.format(error=e)

    def reset(self) -> None:
        self.session.reset()
        self.last_intent = None
