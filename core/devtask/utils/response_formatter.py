"""
Response formatter for handler output.

Handlers put fixed headers in front of file contents and directory listings.
The conversation context scans assistant messages for the same headers to
learn what was just shown to the user, so both sides go through the
constants and helpers defined here.
"""

import re
from typing import Iterable, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from devtask.tools.file_ops import DirEntry


# Marker contract between handlers and the context scanner (version 1).
MARKER_VERSION = 1
FILE_CONTENT_HEADER = 'Conteúdo de "{path}":'
DIRECTORY_LISTING_HEADER = 'Arquivos em "{path}":'
STRUCTURE_HEADER = 'Estrutura de diretórios para "{path}":'

FILE_CONTENT_PATTERN = re.compile(r'Conteúdo de "([^"\n]+)":')
DIRECTORY_LISTING_PATTERN = re.compile(r'Arquivos em "([^"\n]+)":')

ANSI_PATTERN = re.compile(r"\x1b\[[0-9;]*m")


def extract_file_reference(text: str) -> Optional[str]:
    """Path announced by a file-content header, if any."""
    match = FILE_CONTENT_PATTERN.search(text or "")
    return match.group(1) if match else None


def extract_directory_reference(text: str) -> Optional[str]:
    """Path announced by a directory-listing header, if any."""
    match = DIRECTORY_LISTING_PATTERN.search(text or "")
    return match.group(1) if match else None


class ResponseFormatter:
    """Builds the user-facing strings that carry context markers."""

    @staticmethod
    def file_content(path: str, content: str) -> str:
        header = FILE_CONTENT_HEADER.format(path=path)
        return f"{header}\n\n```\n{content}\n```"

    @staticmethod
    def directory_listing(path: str, entries: Iterable["DirEntry"]) -> str:
        lines = [f"{'📁' if entry.is_dir else '📄'} {entry.name}" for entry in entries]
        header = DIRECTORY_LISTING_HEADER.format(path=path)
        return f"{header}\n\n" + "\n".join(lines)

    @staticmethod
    def structure(path: str, tree: str) -> str:
        header = STRUCTURE_HEADER.format(path=path)
        return f"{header}\n\n```\n{tree}\n```"

    @staticmethod
    def strip_ansi(text: str) -> str:
        return ANSI_PATTERN.sub("", text)

    @staticmethod
    def strip_code_fence(code: str) -> str:
        """Return the body of the first fenced block, or the input unchanged."""
        match = re.search(r"```[\w+-]*\n(.*?)```", code, re.DOTALL)
        if match:
            return match.group(1)
        return code
