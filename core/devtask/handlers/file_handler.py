"""
File handler: browsing the project and staging file changes.
"""

from devtask.config import DEFAULT_STRUCTURE_DEPTH
from devtask.context.session import SessionContext
from devtask.handlers.base import BaseHandler
from devtask.intents import Intent, IntentType
from devtask.tools.file_ops import FileOperations, is_path_safe
from devtask.utils.errors import StagingConflictError, UnsafePathError
from devtask.utils.logging import logger
from devtask.utils.response_formatter import ResponseFormatter

CONFLICT_WARNING = (
    "⚠️ Já existem alterações pendentes. Use \"aplicar alterações\" para aplicá-las "
    "ou \"cancelar alterações\" para cancelá-las antes de propor novas alterações."
)

NEXT_STEPS = (
    "Para ver as alterações pendentes, digite \"mostrar alterações\".\n"
    "Para aplicar as alterações, digite \"aplicar alterações\".\n"
    "Para cancelar, digite \"cancelar alterações\"."
)


def access_denied(path: str) -> str:
    return f"⚠️ Acesso negado. O caminho \"{path}\" contém diretórios ou arquivos sensíveis ou está fora do projeto."


class FileHandler(BaseHandler):
    """Handles `file.*` intents."""

    intent_type = IntentType.FILE

    def __init__(self, session: SessionContext):
        super().__init__(session)
        self.actions = {
            "list": self.handle_list,
            "read": self.handle_read,
            "structure": self.handle_structure,
            "create": self.handle_create,
            "modify": self.handle_modify,
            "delete": self.handle_delete,
            "apply": self.handle_apply,
            "cancel": self.handle_cancel,
            "changes": self.handle_changes,
        }

    @property
    def changes(self):
        return self.session.changes

    # --- Browsing ---

    async def handle_list(self, intent: Intent) -> str:
        path = intent.get_param("path") or self.context.state.current_directory or "."
        if not is_path_safe(path, self.session.root):
            return access_denied(path)

        if not FileOperations.exists(path, self.session.root):
            return f"O diretório \"{path}\" não existe. Por favor, verifique se o caminho está correto."

        entries = [
            entry for entry in FileOperations.list_directory(path, root=self.session.root)
            if is_path_safe(entry.path, self.session.root)
        ]
        if not entries:
            return f"O diretório \"{path}\" está vazio."
        return ResponseFormatter.directory_listing(path, entries)

    async def handle_read(self, intent: Intent) -> str:
        path = intent.get_param("path")
        if not path or path == ".":
            path = self.context.state.current_file
        if not path:
            intent.parameters.pop("path", None)
            return "Por favor, especifique o caminho do arquivo que deseja ler. Exemplo: 'ler src/index.ts'"
        if not is_path_safe(path, self.session.root):
            intent.parameters.pop("path", None)
            return access_denied(path)

        content = FileOperations.read_file(path, self.session.root)
        if content is None:
            intent.parameters.pop("path", None)
            return (
                f"Não consegui encontrar ou ler o arquivo \"{path}\". "
                "Por favor, verifique se o caminho está correto."
            )
        intent.parameters["path"] = path
        return ResponseFormatter.file_content(path, content)

    async def handle_structure(self, intent: Intent) -> str:
        path = intent.get_param("path") or self.context.state.current_directory or "."
        try:
            depth = int(intent.get_param("depth", default=DEFAULT_STRUCTURE_DEPTH))
        except (TypeError, ValueError):
            depth = DEFAULT_STRUCTURE_DEPTH
        if not is_path_safe(path, self.session.root):
            return access_denied(path)
        if not FileOperations.exists(path, self.session.root):
            return f"O diretório \"{path}\" não existe. Por favor, verifique se o caminho está correto."

        tree = FileOperations.get_file_structure(path, depth, self.session.root)
        return ResponseFormatter.structure(path, tree)

    # --- Staging ---

    async def handle_create(self, intent: Intent) -> str:
        path = intent.get_param("path")
        content = intent.get_param("content")
        if not path:
            return "Por favor, especifique o caminho do arquivo que deseja criar."
        if content is None:
            return "Por favor, forneça o conteúdo do arquivo que deseja criar."

        try:
            self.changes.propose_create(path, ResponseFormatter.strip_code_fence(content))
        except UnsafePathError:
            return access_denied(path)
        except StagingConflictError:
            return CONFLICT_WARNING
        except FileExistsError:
            return f"❌ O arquivo \"{path}\" já existe. Use uma modificação para alterá-lo."
        return f"✅ Criação do arquivo \"{path}\" proposta com sucesso.\n\n{NEXT_STEPS}"

    async def handle_modify(self, intent: Intent) -> str:
        path = intent.get_param("path") or self.context.state.current_file
        content = intent.get_param("content")
        if not path:
            return "Por favor, especifique o caminho do arquivo que deseja modificar."
        if content is None:
            return (
                f"Para modificar o arquivo \"{path}\", preciso que você forneça o novo conteúdo. "
                "Por favor, digite o conteúdo completo que deseja usar."
            )

        intent.parameters["path"] = path
        try:
            staged = self.changes.propose_modify(path, ResponseFormatter.strip_code_fence(content))
        except UnsafePathError:
            return access_denied(path)
        except StagingConflictError:
            return CONFLICT_WARNING
        except FileNotFoundError:
            return f"❌ O arquivo \"{path}\" não existe ou não está acessível."

        if not staged:
            return f"O conteúdo proposto para \"{path}\" é idêntico ao atual. Nenhuma alteração foi registrada."
        return f"✅ Propus a modificação do arquivo \"{path}\".\n\n{NEXT_STEPS}"

    async def handle_delete(self, intent: Intent) -> str:
        path = intent.get_param("path")
        if not path:
            return "Por favor, especifique o caminho do arquivo que deseja excluir."

        try:
            self.changes.propose_delete(path)
        except UnsafePathError:
            return access_denied(path)
        except StagingConflictError:
            return CONFLICT_WARNING
        except FileNotFoundError:
            return f"❌ O arquivo \"{path}\" não existe."
        return f"✅ Exclusão do arquivo \"{path}\" proposta com sucesso.\n\n{NEXT_STEPS}"

    async def handle_apply(self, intent: Intent) -> str:
        result = self.changes.apply_changes()
        if not result.success and self.changes.has_pending_changes():
            logger.warning("Apply stopped early; remaining changes stay pending")
        return result.message

    async def handle_cancel(self, intent: Intent) -> str:
        if not self.changes.has_pending_changes():
            return "Não há alterações pendentes para cancelar."
        self.changes.clear_pending_changes()
        return "✅ Todas as alterações pendentes foram canceladas."

    async def handle_changes(self, intent: Intent) -> str:
        return ResponseFormatter.strip_ansi(self.changes.show_pending_changes())
