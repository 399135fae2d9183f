"""DevTask - conversational command interpreter for project files, tasks and code."""

__version__ = "0.1.0"
