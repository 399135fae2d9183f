"""
Filesystem helpers confined to the project root.
Reads never raise for common not-found cases; writes are verified after the fact.
"""

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from devtask.config import DEFAULT_STRUCTURE_DEPTH, project_root
from devtask.tools.verifier import FilesystemVerifier, VerificationResult
from devtask.utils.logging import logger

# Names that are never read, listed or written, wherever they appear in a path
SENSITIVE_NAMES = {
    # environment files
    ".env",
    # version control metadata
    ".git",
    ".svn",
    ".hg",
    # dependency directories
    "node_modules",
    ".venv",
    "venv",
    "site-packages",
    # credentials
    ".ssh",
    ".aws",
    ".gnupg",
    "id_rsa",
    "id_ed25519",
    ".npmrc",
    ".pypirc",
    "secrets",
    "config.json",
    # lockfiles
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "poetry.lock",
    "Pipfile.lock",
    # OS noise
    ".DS_Store",
}


@dataclass
class DirEntry:
    """One item of a directory listing."""

    name: str
    path: str  # relative to the project root, forward slashes
    is_dir: bool
    size: int = 0
    children: list["DirEntry"] = field(default_factory=list)


def _root(root: Optional[Path]) -> Path:
    return Path(root).resolve() if root is not None else project_root()


def resolve_path(path: str, root: Optional[Path] = None) -> Path:
    """Absolute path for `path`, interpreted relative to the project root."""
    base = _root(root)
    candidate = Path(os.path.expanduser(path or "."))
    if not candidate.is_absolute():
        candidate = base / candidate
    return Path(os.path.normpath(str(candidate)))


def normalize_path(path: str) -> str:
    """Canonical relative form used as a key ("./src//a.ts" -> "src/a.ts")."""
    return os.path.normpath(path or ".").replace("\\", "/")


def _is_sensitive_name(name: str) -> bool:
    return name in SENSITIVE_NAMES or name.startswith(".env.")


def is_path_safe(path: str, root: Optional[Path] = None) -> bool:
    """
    False if the path resolves outside the project root or any component
    matches the sensitive deny-list.
    """
    base = _root(root)
    try:
        resolved = resolve_path(path, base).resolve()
        relative = resolved.relative_to(base)
    except (ValueError, OSError):
        return False

    for part in relative.parts:
        if _is_sensitive_name(part):
            return False
    # The literal request can name a sensitive file even if it resolves elsewhere
    for part in Path(normalize_path(path)).parts:
        if _is_sensitive_name(part):
            return False
    return True


class FileOperations:
    """Read and write helpers used by handlers and the staging engine."""

    @staticmethod
    def list_directory(path: str = ".", recursive: bool = False, root: Optional[Path] = None) -> list[DirEntry]:
        """Directories first, then files, both alphabetical. Empty on not-found."""
        base = _root(root)
        dir_path = resolve_path(path, base)
        if not dir_path.is_dir():
            logger.info(f"Directory not found: {path}")
            return []

        entries: list[DirEntry] = []
        try:
            for item in dir_path.iterdir():
                is_dir = item.is_dir()
                try:
                    relative = item.relative_to(base).as_posix()
                except ValueError:
                    relative = item.as_posix()
                entry = DirEntry(
                    name=item.name,
                    path=relative,
                    is_dir=is_dir,
                    size=0 if is_dir else item.stat().st_size,
                )
                if is_dir and recursive and not _is_sensitive_name(item.name):
                    entry.children = FileOperations.list_directory(relative, True, base)
                entries.append(entry)
        except PermissionError as exc:
            logger.warning(f"Permission denied listing {path}: {exc}")
            return []

        entries.sort(key=lambda e: (not e.is_dir, e.name.lower()))
        return entries

    @staticmethod
    def read_file(path: str, root: Optional[Path] = None) -> Optional[str]:
        """File content as text, or None if missing, not a file or unreadable."""
        file_path = resolve_path(path, root)
        if not file_path.is_file():
            logger.info(f"File not found: {path}")
            return None
        try:
            return file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning(f"Could not read {path}: {exc}")
            return None

    @staticmethod
    def exists(path: str, root: Optional[Path] = None) -> bool:
        return resolve_path(path, root).exists()

    @staticmethod
    def get_file_structure(
        path: str = ".",
        depth: int = DEFAULT_STRUCTURE_DEPTH,
        root: Optional[Path] = None,
    ) -> str:
        """ASCII tree of `path`, `depth` levels deep, without sensitive entries."""
        items = FileOperations.list_directory(path, recursive=True, root=root)

        def render(entries: list[DirEntry], prefix: str, level: int) -> list[str]:
            if level >= depth:
                return [f"{prefix}..."] if prefix else []
            visible = [e for e in entries if not _is_sensitive_name(e.name)]
            lines: list[str] = []
            for index, entry in enumerate(visible):
                last = index == len(visible) - 1
                lines.append(f"{prefix}{'└── ' if last else '├── '}{entry.name}")
                if entry.is_dir and entry.children:
                    lines.extend(render(entry.children, prefix + ("    " if last else "│   "), level + 1))
            return lines

        return "\n".join(render(items, "", 0))

    @staticmethod
    def write_file(path: str, content: str, root: Optional[Path] = None) -> VerificationResult:
        """Atomically replace `path` with `content`, creating parent directories."""
        target = resolve_path(path, root)
        target.parent.mkdir(parents=True, exist_ok=True)
        data = (content or "").encode("utf-8")

        with tempfile.NamedTemporaryFile(delete=False, dir=target.parent) as tmp:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
            temp_name = tmp.name

        try:
            os.replace(temp_name, target)
        except OSError:
            Path(temp_name).unlink(missing_ok=True)
            raise
        return FilesystemVerifier.verify_write(target, data)

    @staticmethod
    def delete_file(path: str, root: Optional[Path] = None) -> VerificationResult:
        target = resolve_path(path, root)
        target.unlink()
        return FilesystemVerifier.verify_delete(target)
