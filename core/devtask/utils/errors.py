"""
Error taxonomy for DevTask.

Classification failures are recovered inside the classifier; every other
error here is turned into a user-facing string by a handler or the router.
"""


class DevTaskError(Exception):
    """Base class for DevTask errors."""


class UnsafePathError(DevTaskError):
    """Path resolves outside the project root or hits the sensitive deny-list."""

    def __init__(self, path: str):
        super().__init__(f"Caminho não seguro: {path}")
        self.path = path


class StagingConflictError(DevTaskError):
    """A new change was proposed while another change-set is still pending."""

    def __init__(self, pending: int):
        super().__init__(
            f"Já existem {pending} alteração(ões) pendente(s). "
            "Aplique ou cancele antes de propor novas alterações."
        )
        self.pending = pending


class TaskNotFoundError(DevTaskError):
    """No local task matches the given id."""

    def __init__(self, task_id: str):
        super().__init__(f"Tarefa com ID {task_id} não encontrada.")
        self.task_id = task_id


class GitHubError(DevTaskError):
    """GitHub is not configured or the API call failed."""


class LLMError(DevTaskError):
    """The language model is not configured or returned an unusable reply."""
