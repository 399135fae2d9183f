"""
Local task persistence.

Tasks are JSON files under `.task/issues/` named `<id>-<slug>.json`.
Deletion is soft: the task is kept with `deleted=True` and hidden from listings.
"""

import re
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from devtask.config import TASKS_DIR, project_root
from devtask.utils.errors import TaskNotFoundError
from devtask.utils.logging import logger

TASK_FILE_PATTERN = re.compile(r"^(?:#\d+-)?(\d+)-")


def slugify(title: str) -> str:
    slug = re.sub(r"\s+", "-", title.strip().lower())
    return re.sub(r"[^\w-]", "", slug)


class Task(BaseModel):
    """A task as stored on disk."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: int
    title: str
    description: str = ""
    milestone: str = ""
    project: str = ""
    status: str = "todo"
    github_issue_number: Optional[int] = None
    last_sync_at: str = Field(default_factory=lambda: datetime.now().isoformat(), alias="lastSyncAt")
    deleted: bool = False

    def summary_line(self) -> str:
        issue = f"#{self.github_issue_number} - " if self.github_issue_number else ""
        line = f"- {issue}{self.title} ({self.status or 'todo'})"
        if self.milestone:
            line += f" [Sprint: {self.milestone}]"
        if self.project:
            line += f" [Projeto: {self.project}]"
        return line

    def details(self) -> str:
        return (
            f"ID: {self.id}\n"
            f"Status: {self.status}\n"
            f"Milestone: {self.milestone or 'Nenhuma'}\n"
            f"Projeto: {self.project or 'Nenhum'}"
        )


class TaskStore:
    """CRUD over the task directory of a project root."""

    def __init__(self, root: Optional[Path] = None):
        base = Path(root).resolve() if root is not None else project_root()
        self.tasks_dir = base / TASKS_DIR

    def _save(self, path: Path, task: Task) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(task.model_dump_json(by_alias=True, indent=2), encoding="utf-8")

    def _find(self, task_id: Any) -> tuple[Path, Task]:
        if self.tasks_dir.is_dir():
            for path in sorted(self.tasks_dir.glob("*.json")):
                match = TASK_FILE_PATTERN.match(path.name)
                if match and match.group(1) == str(task_id).strip():
                    return path, Task.model_validate_json(path.read_text(encoding="utf-8"))
        raise TaskNotFoundError(str(task_id))

    def create(
        self,
        title: str,
        description: str = "",
        milestone: str = "",
        project: str = "",
        status: str = "todo",
    ) -> Task:
        task = Task(
            id=int(time.time() * 1000),
            title=title,
            description=description or "",
            milestone=milestone or "",
            project=project or "",
            status=status or "todo",
        )
        self._save(self.tasks_dir / f"{task.id}-{slugify(title)}.json", task)
        logger.info(f"Created task {task.id}: {title}")
        return task

    def list_tasks(self, include_deleted: bool = False) -> list[Task]:
        if not self.tasks_dir.is_dir():
            return []
        tasks = []
        for path in sorted(self.tasks_dir.glob("*.json")):
            try:
                task = Task.model_validate_json(path.read_text(encoding="utf-8"))
            except (OSError, ValidationError) as exc:
                logger.warning(f"Skipping unreadable task file {path.name}: {exc}")
                continue
            if task.deleted and not include_deleted:
                continue
            tasks.append(task)
        return tasks

    def get(self, task_id: Any) -> Task:
        return self._find(task_id)[1]

    def update(self, task_id: Any, **fields: Any) -> Task:
        """Update the given non-None fields; a title change renames the file."""
        path, task = self._find(task_id)
        old_title = task.title
        for name, value in fields.items():
            if value is not None and name in Task.model_fields:
                setattr(task, name, value)
        task.last_sync_at = datetime.now().isoformat()

        if task.title != old_title:
            path.unlink()
            prefix = f"#{task.github_issue_number}-" if task.github_issue_number else ""
            path = self.tasks_dir / f"{prefix}{task.id}-{slugify(task.title)}.json"
        self._save(path, task)
        logger.info(f"Updated task {task.id}")
        return task

    def delete(self, task_id: Any) -> Task:
        path, task = self._find(task_id)
        task.deleted = True
        self._save(path, task)
        logger.info(f"Soft-deleted task {task.id}")
        return task
