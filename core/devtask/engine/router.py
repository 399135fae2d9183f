"""
The ActionRouter dispatches a finalized intent to the handler for its type.
"""

from typing import Optional

from devtask.context.session import SessionContext
from devtask.handlers import (
    BaseHandler,
    ChatHandler,
    CodeHandler,
    FileHandler,
    GitHubHandler,
    TaskHandler,
)
from devtask.intents import Intent, IntentType
from devtask.runtime.llm_client import LLMClient
from devtask.tools.github import GitHubClient
from devtask.utils.logging import logger

ERROR_TEMPLATE = "Desculpe, ocorreu um erro ao processar sua solicitação: {error}"


class ActionRouter:
    """
    Routes intents to handlers and keeps the session state in step.

    Handler exceptions never escape: they become a user-facing error string.
    Every routed turn is recorded in the interaction history, success or not.
    """

    def __init__(
        self,
        session: SessionContext,
        llm: Optional[LLMClient] = None,
        github: Optional[GitHubClient] = None,
        handlers: Optional[dict[IntentType, BaseHandler]] = None,
    ):
        self.session = session
        llm = llm or LLMClient()
        self.handlers: dict[IntentType, BaseHandler] = handlers or {
            IntentType.FILE: FileHandler(session),
            IntentType.CHAT: ChatHandler(session, llm),
            IntentType.TASK: TaskHandler(session),
            IntentType.GITHUB: GitHubHandler(session, github),
            IntentType.CODE: CodeHandler(session, llm),
        }

    def get_handler(self, intent: Intent) -> BaseHandler:
        return self.handlers.get(intent.type) or self.handlers[IntentType.CHAT]

    async def route(self, intent: Intent) -> str:
        context = self.session.conversation
        response = ""
        try:
            handler = self.get_handler(intent)
            logger.info(f"Routing {intent.type.value}.{intent.action} to {type(handler).__name__}")
            response = await handler.handle(intent)

            context.update_state(intent)
            context.state.pending_changes = self.session.changes.has_pending_changes()
        except Exception as e:
            logger.error(f"Handler failed for {intent.type.value}.{intent.action}: {e}")
            response = ERROR_TEMPLATE.format(error=e)
        finally:
            context.add_interaction(intent.original_message, intent, response)

        return response
