from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from taskboard.errors import TaskBoardError


TaskStatus = Literal["todo", "inProgress", "done"]
ViewType = Literal["all", "today", "flagged", "kanban"]

TASK_STATUSES = ("todo", "inProgress", "done")
VIEW_TYPES = ("all", "today", "flagged", "kanban")


class FolderRef(BaseModel):
    """Folder fields attached to a task when it is read back."""
    id: str
    name: str
    description: Optional[str] = None
    color: Optional[str] = None


class Task(BaseModel):
    id: str
    text: str = Field(..., min_length=1)
    priority: int = 2
    category: str = "general"

    completed: bool = False
    flagged: bool = False
    # independent of `completed`, the two are written by different operations
    status: TaskStatus = "todo"

    source_text: Optional[str] = None
    folder_id: Optional[str] = None

    created_at: datetime
    updated_at: datetime

    folder: Optional[FolderRef] = None


class TaskCandidate(BaseModel):
    """A task produced by extraction, not yet persisted."""
    text: str = Field(..., min_length=1)
    priority: int = 2
    category: str = "general"

    completed: bool = False
    flagged: bool = False
    status: TaskStatus = "todo"

    source_text: Optional[str] = None
    folder_id: Optional[str] = None


class TaskDraft(BaseModel):
    """
    Input of create-or-update. Only the fields the caller actually supplied
    are merged into an existing row (see `model_dump(exclude_unset=True)`).
    """
    id: Optional[str] = None
    text: Optional[str] = None
    priority: Optional[int] = None
    category: Optional[str] = None
    folder_id: Optional[str] = None
    status: Optional[str] = None
    completed: Optional[bool] = None
    flagged: Optional[bool] = None


class Folder(BaseModel):
    id: str
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    # hex-like display tint, not validated beyond the client's pattern hint
    color: Optional[str] = None

    created_at: datetime
    updated_at: datetime

    # derived on read, never stored
    task_count: int = 0


class FolderDraft(BaseModel):
    """Folder request body; a missing name is rejected on create, kept on update."""
    name: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None


class ViewPreferences(BaseModel):
    """Last selected view and folder, persisted apart from the record store."""
    view: ViewType = "all"
    folder_id: Optional[str] = None

    @field_validator("folder_id")
    @classmethod
    def blank_folder_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v


class ActionResult(BaseModel):
    """Success/failure envelope returned by every mutation operation."""
    success: bool
    task: Optional[Task] = None
    tasks: Optional[List[Task]] = None
    folder: Optional[Folder] = None
    folders: Optional[List[Folder]] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def ok(cls, **payload: Any) -> "ActionResult":
        return cls(success=True, **payload)

    @classmethod
    def failure(cls, err: TaskBoardError) -> "ActionResult":
        return cls(
            success=False,
            error=err.message,
            error_kind=err.kind,
            details=err.details,
        )
