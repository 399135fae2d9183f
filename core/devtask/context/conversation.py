"""
Conversation context for one session.

Holds the message buffer sent to the language model, the interaction log,
the current working state ("where are we") and the reference history used
to resolve "this file" style mentions.
"""

from collections import deque
from dataclasses import asdict, dataclass
from typing import Any, Callable, Optional

from devtask.config import MAX_CONTEXT_MESSAGES, MAX_INTERACTIONS
from devtask.context.entities import ReferenceHistory
from devtask.intents import Intent, Interaction, Message, MessageRole
from devtask.utils.logging import logger
from devtask.utils.response_formatter import extract_directory_reference, extract_file_reference

SYSTEM_PROMPT = (
    "Você é um assistente de desenvolvimento amigável integrado ao DevTask. "
    "Você deve interpretar comandos em linguagem natural e convertê-los em ações no sistema. "
    "Você pode entender e responder a pedidos mesmo quando expressos em linguagem coloquial.\n\n"
    "Suas capacidades incluem:\n"
    "- Gerenciar tarefas: criar, listar, atualizar ou excluir tarefas\n"
    "- Trabalhar com GitHub: consultar issues, milestones e projetos\n"
    "- Explorar arquivos: navegar, ler e modificar arquivos do projeto\n"
    "- Gerar e modificar código: ajudar a escrever, explicar ou executar código\n\n"
    "Exemplos de como os usuários podem te pedir coisas:\n"
    "- 'Quero ver minhas tarefas' = listar tarefas\n"
    "- 'Mostra o que tem na pasta src' = listar arquivos em src\n"
    "- 'Cria uma tarefa para implementar autenticação' = criar nova tarefa\n"
    "- 'O que tem no arquivo index.ts?' = ler conteúdo do arquivo\n\n"
    "Sempre interprete o que o usuário quer, mesmo quando as instruções forem ambíguas, "
    "e tente entender o contexto da conversa para dar continuidade às interações."
)

CAPABILITIES = (
    "Posso te ajudar com:\n\n"
    "🔹 Tarefas: criar, listar, atualizar ou excluir tarefas\n"
    "🔹 GitHub: listar issues, milestones e projetos do repositório\n"
    "🔹 Arquivos: navegar, ler e modificar arquivos do projeto\n"
    "🔹 Código: gerar código, explicar trechos ou executar snippets\n\n"
    "Como posso te ajudar hoje?"
)


@dataclass
class ConversationState:
    """Mutable "where are we" record for a session."""
    current_directory: str = "."
    current_file: Optional[str] = None
    current_task: Optional[str] = None
    last_operation: Optional[str] = None
    last_action: Optional[str] = None
    pending_changes: bool = False
    last_reference: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


class ConversationContext:
    """
    Message buffer, interaction log and working state for a single session.

    The buffer always starts with the pinned system message followed by at
    most `max_messages` recent user/assistant messages.
    """

    def __init__(
        self,
        references: Optional[ReferenceHistory] = None,
        max_messages: int = MAX_CONTEXT_MESSAGES,
        max_interactions: int = MAX_INTERACTIONS,
    ):
        self.references = references or ReferenceHistory()
        self.max_messages = max_messages
        self.max_interactions = max_interactions
        self.messages: list[Message] = []
        self.interactions: deque[Interaction] = deque(maxlen=max_interactions)
        self.state = ConversationState()

        self._state_updaters: dict[tuple[str, str], Callable[[Intent], None]] = {
            ("file", "read"): self._on_file_touched,
            ("file", "modify"): self._on_file_staged,
            ("file", "create"): self._on_file_staged,
            ("file", "delete"): self._on_file_staged,
            ("file", "list"): self._on_directory_touched,
            ("file", "structure"): self._on_directory_touched,
            ("file", "apply"): self._on_changes_resolved,
            ("file", "cancel"): self._on_changes_resolved,
            ("task", "select"): self._on_task_selected,
            ("code", "explain"): self._on_file_touched,
        }

        self.initialize()

    def initialize(self) -> None:
        """Reset to a fresh session: pinned system message and default state."""
        self.messages = [Message(role=MessageRole.SYSTEM, content=SYSTEM_PROMPT)]
        self.interactions.clear()
        self.state = ConversationState()
        self.references.clear()

    # --- Messages ---

    def add_user_message(self, content: str) -> None:
        self.messages.append(Message(role=MessageRole.USER, content=content))
        self._trim()

    def add_assistant_message(self, content: str) -> None:
        """Append an assistant reply and pick up any file/directory it announces."""
        self.messages.append(Message(role=MessageRole.ASSISTANT, content=content))
        self._trim()

        file_path = extract_file_reference(content)
        if file_path:
            self.state.current_file = file_path
            self.state.last_reference = file_path
            self.references.touch_file(file_path, "read")
            logger.debug(f"Context picked up file reference: {file_path}")

        directory = extract_directory_reference(content)
        if directory:
            self.state.current_directory = directory
            self.state.last_reference = directory
            self.references.touch_directory(directory)
            logger.debug(f"Context picked up directory reference: {directory}")

    def _trim(self) -> None:
        if len(self.messages) > self.max_messages + 1:
            system = self.messages[0]
            self.messages = [system] + self.messages[-self.max_messages:]

    def recent_messages(self) -> list[Message]:
        return list(self.messages)

    def history_dicts(self) -> list[dict]:
        """Messages in the shape the chat completion API expects."""
        return [message.to_dict() for message in self.messages]

    # --- Interactions ---

    def add_interaction(self, message: str, intent: Optional[Intent], response: str) -> Interaction:
        interaction = Interaction(
            message=message,
            intent=intent.model_copy(deep=True) if intent else None,
            response=response,
        )
        self.interactions.append(interaction)
        return interaction

    def get_interactions(self) -> list[Interaction]:
        return list(self.interactions)

    # --- State ---

    def get_state(self) -> dict[str, Any]:
        return self.state.to_dict()

    def update_state(self, intent: Intent) -> None:
        """Apply the effects of a successfully handled intent to the state."""
        self.state.last_operation = intent.type.value
        self.state.last_action = intent.action

        updater = self._state_updaters.get(intent.key)
        if updater:
            updater(intent)

    def _on_file_touched(self, intent: Intent) -> None:
        path = intent.get_param("path")
        if not path or path == ".":
            return
        self.state.current_file = path
        self.state.last_reference = path
        self.references.touch_file(path, intent.action)

    def _on_file_staged(self, intent: Intent) -> None:
        self._on_file_touched(intent)
        self.state.pending_changes = True

    def _on_directory_touched(self, intent: Intent) -> None:
        path = intent.get_param("path", default=".")
        self.state.current_directory = path
        self.state.last_reference = path
        self.references.touch_directory(path)

    def _on_changes_resolved(self, intent: Intent) -> None:
        self.state.pending_changes = False

    def _on_task_selected(self, intent: Intent) -> None:
        task_id = intent.get_param("taskId", "task_id", "id")
        if task_id is None:
            return
        self.state.current_task = str(task_id)
        self.state.last_reference = str(task_id)
        self.references.touch_task(task_id)

    def get_capabilities(self) -> str:
        return CAPABILITIES
