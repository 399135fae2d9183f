"""
Staged file changes: propose, preview, then apply or discard.

At most one change-set is outstanding at a time. Once any proposal is
accepted, further proposals are rejected until the set is applied or
cancelled.
"""

import difflib
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from devtask.config import project_root
from devtask.tools.file_ops import FileOperations, is_path_safe, normalize_path
from devtask.utils.errors import StagingConflictError, UnsafePathError
from devtask.utils.logging import logger


class PatchKind(str, Enum):
    CREATE = "create"
    MODIFY = "modify"
    DELETE = "delete"


@dataclass
class FilePatch:
    """One staged operation on a single file."""

    kind: PatchKind
    path: str
    new_content: Optional[str] = None
    original_content: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "path": self.path,
            "new_content": self.new_content,
            "original_content": self.original_content,
        }


@dataclass
class ApplyResult:
    """Outcome of applying the pending change-set."""

    success: bool
    message: str
    created: int = 0
    modified: int = 0
    deleted: int = 0

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "message": self.message,
            "created": self.created,
            "modified": self.modified,
            "deleted": self.deleted,
        }


class StagedChanges:
    """Pending change-set for one session, keyed by normalized path."""

    def __init__(self, root: Optional[Path] = None):
        self.root = Path(root).resolve() if root is not None else project_root()
        self._pending: dict[str, FilePatch] = {}

    # ------------------------------------------------------------------
    # Proposals
    # ------------------------------------------------------------------

    def _check_can_propose(self, path: str) -> str:
        if not is_path_safe(path, self.root):
            logger.warning(f"Rejected unsafe path: {path}")
            raise UnsafePathError(path)
        if self._pending:
            logger.warning(f"Staging conflict on {path}: {len(self._pending)} change(s) pending")
            raise StagingConflictError(len(self._pending))
        return normalize_path(path)

    def propose_create(self, path: str, content: str) -> bool:
        key = self._check_can_propose(path)
        if FileOperations.exists(key, self.root):
            raise FileExistsError(f'O arquivo "{key}" já existe.')
        self._pending[key] = FilePatch(PatchKind.CREATE, key, new_content=content)
        logger.info(f"Staged create: {key}")
        return True

    def propose_modify(self, path: str, new_content: str) -> bool:
        """Stage a modification. Returns False if the content is unchanged."""
        key = self._check_can_propose(path)
        original = FileOperations.read_file(key, self.root)
        if original is None:
            raise FileNotFoundError(f'O arquivo "{key}" não existe.')
        if original == new_content:
            logger.info(f"No changes to stage for {key}")
            return False
        self._pending[key] = FilePatch(PatchKind.MODIFY, key, new_content=new_content, original_content=original)
        logger.info(f"Staged modify: {key}")
        return True

    def propose_delete(self, path: str) -> bool:
        key = self._check_can_propose(path)
        original = FileOperations.read_file(key, self.root)
        if original is None:
            raise FileNotFoundError(f'O arquivo "{key}" não existe.')
        self._pending[key] = FilePatch(PatchKind.DELETE, key, original_content=original)
        logger.info(f"Staged delete: {key}")
        return True

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def has_pending_changes(self) -> bool:
        return bool(self._pending)

    def get_pending_changes(self) -> list[FilePatch]:
        return list(self._pending.values())

    def clear_pending_changes(self) -> None:
        if self._pending:
            logger.info(f"Discarded {len(self._pending)} pending change(s)")
        self._pending.clear()

    def show_pending_changes(self) -> str:
        """Human-readable preview of every staged patch."""
        if not self._pending:
            return "Não há alterações pendentes."

        blocks = ["📝 Alterações pendentes:\n"]
        for patch in self._pending.values():
            if patch.kind == PatchKind.CREATE:
                blocks.append(f"➕ CRIAR: {patch.path}\n```\n{patch.new_content}\n```")
            elif patch.kind == PatchKind.DELETE:
                blocks.append(f"❌ EXCLUIR: {patch.path}\n```\n{patch.original_content}\n```")
            else:
                blocks.append(f"✏️ MODIFICAR: {patch.path}\n```diff\n{self._diff(patch)}\n```")

        blocks.append('Use "!apply" para aplicar ou "!cancel" para cancelar as alterações.')
        return "\n\n".join(blocks)

    @staticmethod
    def _diff(patch: FilePatch) -> str:
        lines = difflib.unified_diff(
            (patch.original_content or "").splitlines(),
            (patch.new_content or "").splitlines(),
            fromfile=f"Remover ({patch.path})",
            tofile=f"Adicionar ({patch.path})",
            lineterm="",
            n=3,
        )
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Apply
    # ------------------------------------------------------------------

    def apply_changes(self) -> ApplyResult:
        """
        Write every staged patch in order.

        Not transactional: if one patch fails, patches written before it stay
        on disk and are dropped from the set, the failing patch and the rest
        stay pending.
        """
        if not self._pending:
            return ApplyResult(False, "Não há alterações pendentes para aplicar.")

        counts = {PatchKind.CREATE: 0, PatchKind.MODIFY: 0, PatchKind.DELETE: 0}
        applied: list[str] = []

        for key, patch in list(self._pending.items()):
            try:
                if patch.kind == PatchKind.DELETE:
                    verification = FileOperations.delete_file(key, self.root)
                else:
                    verification = FileOperations.write_file(key, patch.new_content or "", self.root)
                if not verification.passed:
                    raise OSError(verification.details)
            except OSError as exc:
                for done in applied:
                    self._pending.pop(done, None)
                logger.error(f"Apply failed on {key}: {exc}")
                return ApplyResult(
                    False,
                    f"❌ Erro ao aplicar alterações em {key}: {exc}",
                    created=counts[PatchKind.CREATE],
                    modified=counts[PatchKind.MODIFY],
                    deleted=counts[PatchKind.DELETE],
                )
            counts[patch.kind] += 1
            applied.append(key)

        self._pending.clear()
        result = ApplyResult(
            True,
            (
                "✅ Alterações aplicadas com sucesso: "
                f"{counts[PatchKind.CREATE]} arquivos criados, "
                f"{counts[PatchKind.MODIFY]} modificados, "
                f"{counts[PatchKind.DELETE]} excluídos."
            ),
            created=counts[PatchKind.CREATE],
            modified=counts[PatchKind.MODIFY],
            deleted=counts[PatchKind.DELETE],
        )
        logger.info(result.message)
        return result
