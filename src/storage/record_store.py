"""
Record store contract for tasks and folders.

Backends: `SqliteRecordStore` (default, single file) and
`PostgresRecordStore` (asyncpg pool). Every method is one transaction and
raises PersistenceError when the backend rejects a read or write.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from taskboard.models import Folder, FolderRef, Task, TaskCandidate

# Columns a task update may touch; anything else is ignored.
TASK_MUTABLE_FIELDS = (
    "text",
    "priority",
    "category",
    "completed",
    "flagged",
    "status",
    "source_text",
    "folder_id",
)

FOLDER_MUTABLE_FIELDS = ("name", "description", "color")

TASK_SELECT = """
    SELECT t.id, t.text, t.priority, t.category, t.completed, t.flagged,
           t.status, t.source_text, t.folder_id, t.created_at, t.updated_at,
           f.name AS folder_name, f.description AS folder_description,
           f.color AS folder_color
    FROM tasks t
    LEFT JOIN folders f ON f.id = t.folder_id
"""

FOLDER_SELECT = """
    SELECT f.id, f.name, f.description, f.color, f.created_at, f.updated_at,
           (SELECT COUNT(*) FROM tasks t WHERE t.folder_id = f.id) AS task_count
    FROM folders f
"""


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(str(value))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def task_from_row(row: Mapping[str, Any]) -> Task:
    folder = None
    if row["folder_id"] is not None and row["folder_name"] is not None:
        folder = FolderRef(
            id=row["folder_id"],
            name=row["folder_name"],
            description=row["folder_description"],
            color=row["folder_color"],
        )
    return Task(
        id=row["id"],
        text=row["text"],
        priority=row["priority"],
        category=row["category"],
        completed=bool(row["completed"]),
        flagged=bool(row["flagged"]),
        status=row["status"],
        source_text=row["source_text"],
        folder_id=row["folder_id"],
        created_at=_as_datetime(row["created_at"]),
        updated_at=_as_datetime(row["updated_at"]),
        folder=folder,
    )


def folder_from_row(row: Mapping[str, Any]) -> Folder:
    return Folder(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        color=row["color"],
        created_at=_as_datetime(row["created_at"]),
        updated_at=_as_datetime(row["updated_at"]),
        task_count=row["task_count"] or 0,
    )


def pick_fields(fields: Mapping[str, Any], allowed: tuple) -> Dict[str, Any]:
    return {k: v for k, v in fields.items() if k in allowed}


class RecordStore(ABC):

    # ---- tasks ----

    @abstractmethod
    async def list_tasks(self) -> List[Task]:
        """All tasks, newest first, with their folder attached."""
        raise NotImplementedError

    @abstractmethod
    async def get_task(self, task_id: str) -> Optional[Task]:
        raise NotImplementedError

    @abstractmethod
    async def insert_tasks(self, candidates: List[TaskCandidate]) -> List[Task]:
        """
        Bulk insert and read the new rows back in the same transaction.
        Rows are returned in candidate order.
        """
        raise NotImplementedError

    @abstractmethod
    async def insert_task(self, fields: Dict[str, Any]) -> Task:
        raise NotImplementedError

    @abstractmethod
    async def update_task(self, task_id: str, fields: Dict[str, Any]) -> Optional[Task]:
        """Overwrite only `fields`; None when the task does not exist."""
        raise NotImplementedError

    @abstractmethod
    async def flip_flag(self, task_id: str) -> Optional[Task]:
        """Negate `flagged` in a single statement."""
        raise NotImplementedError

    @abstractmethod
    async def delete_task(self, task_id: str) -> bool:
        raise NotImplementedError

    # ---- folders ----

    @abstractmethod
    async def list_folders(self) -> List[Folder]:
        """All folders, newest first, with task counts."""
        raise NotImplementedError

    @abstractmethod
    async def get_folder(self, folder_id: str) -> Optional[Folder]:
        raise NotImplementedError

    @abstractmethod
    async def insert_folder(
        self,
        name: str,
        description: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Folder:
        raise NotImplementedError

    @abstractmethod
    async def update_folder(self, folder_id: str, fields: Dict[str, Any]) -> Optional[Folder]:
        raise NotImplementedError

    @abstractmethod
    async def delete_folder(self, folder_id: str) -> Optional[int]:
        """
        Clear `folder_id` on member tasks, then remove the folder.

        Returns the number of tasks that were unfiled, or None when the
        folder does not exist.
        """
        raise NotImplementedError

    async def close(self) -> None:
        return None
