"""
Action handlers, one per intent type.
"""

from devtask.handlers.base import BaseHandler
from devtask.handlers.chat_handler import ChatHandler
from devtask.handlers.code_handler import CodeHandler
from devtask.handlers.file_handler import FileHandler
from devtask.handlers.github_handler import GitHubHandler
from devtask.handlers.task_handler import TaskHandler

__all__ = [
    "BaseHandler",
    "ChatHandler",
    "CodeHandler",
    "FileHandler",
    "GitHubHandler",
    "TaskHandler",
]
