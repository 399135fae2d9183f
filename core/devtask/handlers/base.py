"""
Base class for action handlers.
"""

from abc import ABC
from typing import Awaitable, Callable

from devtask.context.session import SessionContext
from devtask.intents import Intent, IntentType

# What we tell the user each handler family can do
FRIENDLY_ACTIONS = {
    IntentType.TASK: ["criar tarefas", "listar tarefas", "atualizar tarefas"],
    IntentType.GITHUB: ["listar issues", "listar milestones", "ver informações do GitHub"],
    IntentType.FILE: ["listar arquivos", "ler um arquivo", "visualizar a estrutura do projeto"],
    IntentType.CODE: ["gerar código", "explicar código", "executar código"],
}

ENTITY_NAMES = {
    IntentType.TASK: "tarefas",
    IntentType.GITHUB: "repositórios no GitHub",
    IntentType.FILE: "arquivos",
    IntentType.CODE: "código",
}


class BaseHandler(ABC):
    """
    A handler owns one intent type. Subclasses fill `self.actions` with the
    supported action names mapped to coroutines; anything else gets the
    unsupported-action message.
    """

    intent_type: IntentType

    def __init__(self, session: SessionContext):
        self.session = session
        self.actions: dict[str, Callable[[Intent], Awaitable[str]]] = {}

    @property
    def context(self):
        return self.session.conversation

    @property
    def supported_actions(self) -> list[str]:
        return list(self.actions)

    def supports(self, action: str) -> bool:
        return action in self.actions

    async def handle(self, intent: Intent) -> str:
        if not self.supports(intent.action):
            return self.unsupported_action_response(intent)
        return await self.actions[intent.action](intent)

    def unsupported_action_response(self, intent: Intent) -> str:
        friendly = FRIENDLY_ACTIONS.get(intent.type, [])
        if friendly:
            entity = ENTITY_NAMES.get(intent.type, "isso")
            return (
                f"Ainda não sei como {intent.action} {entity}. "
                f"Posso te ajudar com outras ações como: {', '.join(friendly)}."
            )
        return (
            "Ainda não sei como te ajudar com isso. Tente perguntar sobre tarefas, "
            "arquivos, código ou outras funcionalidades do projeto."
        )
