"""
DevTask tools - filesystem, staged changes, tasks, GitHub and code execution.
"""

from devtask.tools.file_ops import DirEntry, FileOperations, is_path_safe
from devtask.tools.staging import ApplyResult, FilePatch, PatchKind, StagedChanges
from devtask.tools.tasks import Task, TaskStore
from devtask.tools.github import GitHubClient
from devtask.tools.code_runner import ExecutionResult, execute_code

__all__ = [
    "DirEntry",
    "FileOperations",
    "is_path_safe",
    "ApplyResult",
    "FilePatch",
    "PatchKind",
    "StagedChanges",
    "Task",
    "TaskStore",
    "GitHubClient",
    "ExecutionResult",
    "execute_code",
]
