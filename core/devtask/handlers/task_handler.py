"""
Task handler: local task CRUD.
"""

from typing import Optional

from devtask.context.session import SessionContext
from devtask.handlers.base import BaseHandler
from devtask.intents import Intent, IntentType
from devtask.tools.tasks import TaskStore
from devtask.utils.errors import TaskNotFoundError

SYNC_GUIDANCE = (
    "Para sincronizar tarefas com o GitHub, use o comando de sincronização diretamente no terminal.\n\n"
    "Ele oferece opções interativas para escolher a direção da sincronização "
    "(Local → GitHub, GitHub → Local, ou ambos) e lida com os casos mais complexos."
)


class TaskHandler(BaseHandler):
    """Handles `task.*` intents."""

    intent_type = IntentType.TASK

    def __init__(self, session: SessionContext, store: Optional[TaskStore] = None):
        super().__init__(session)
        self.store = store or TaskStore(session.root)
        self.actions = {
            "create": self.handle_create,
            "list": self.handle_list,
            "update": self.handle_update,
            "select": self.handle_select,
            "delete": self.handle_delete,
            "sync": self.handle_sync,
        }

    @staticmethod
    def _task_id(intent: Intent):
        return intent.get_param("taskId", "task_id", "id")

    async def handle_create(self, intent: Intent) -> str:
        title = intent.get_param("title")
        if not title:
            return "Por favor, forneça um título para a tarefa."

        task = self.store.create(
            title=title,
            description=intent.get_param("description", default=""),
            milestone=intent.get_param("milestone", default=""),
            project=intent.get_param("project", default=""),
            status=intent.get_param("status", default="todo"),
        )
        intent.parameters["taskId"] = task.id
        return f"✅ Tarefa \"{task.title}\" criada com sucesso!\n\n{task.details()}"

    async def handle_list(self, intent: Intent) -> str:
        tasks = self.store.list_tasks()
        if not tasks:
            return "Nenhuma tarefa ativa encontrada."
        lines = "\n".join(task.summary_line() for task in tasks)
        return f"Tarefas encontradas ({len(tasks)}):\n\n{lines}"

    async def handle_update(self, intent: Intent) -> str:
        task_id = self._task_id(intent)
        if not task_id:
            return "Por favor, forneça o ID da tarefa que deseja atualizar."
        try:
            task = self.store.update(
                task_id,
                title=intent.get_param("title"),
                description=intent.get_param("description"),
                milestone=intent.parameters.get("milestone"),
                project=intent.parameters.get("project"),
                status=intent.get_param("status"),
            )
        except TaskNotFoundError as exc:
            return str(exc)
        return f"✅ Tarefa atualizada com sucesso!\n\nTítulo: {task.title}\n{task.details()}"

    async def handle_select(self, intent: Intent) -> str:
        task_id = self._task_id(intent)
        if not task_id:
            return "Por favor, forneça o ID da tarefa que deseja selecionar."
        try:
            task = self.store.get(task_id)
        except TaskNotFoundError as exc:
            return str(exc)
        intent.parameters["taskId"] = task.id
        return (
            f"✅ Tarefa selecionada: \"{task.title}\"\n\n{task.details()}\n"
            f"Descrição: {task.description or 'Nenhuma'}"
        )

    async def handle_delete(self, intent: Intent) -> str:
        task_id = self._task_id(intent)
        if not task_id:
            return "Por favor, forneça o ID da tarefa que deseja excluir."
        try:
            task = self.store.delete(task_id)
        except TaskNotFoundError as exc:
            return str(exc)
        return f"✅ Tarefa \"{task.title}\" (ID: {task.id}) foi marcada como excluída."

    async def handle_sync(self, intent: Intent) -> str:
        return SYNC_GUIDANCE
