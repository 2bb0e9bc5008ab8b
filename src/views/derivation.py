"""
View derivation over in-memory task/folder collections.

Pure and synchronous: every function takes the full collections it needs
and returns new lists. `now` is injectable so "today" is deterministic.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from pydantic import BaseModel, Field

from taskboard.models import Folder, Task, TaskStatus, ViewPreferences, ViewType


KANBAN_COLUMNS = (
    ("To Do", "todo"),
    ("In Progress", "inProgress"),
    ("Done", "done"),
)

VIEW_INFO = {
    "all": ("All Tasks", "View all active tasks"),
    "today": ("Today", "Tasks created today"),
    "flagged": ("Flagged", "Important tasks"),
    "kanban": ("Kanban Board", "View tasks in kanban board"),
}


class KanbanColumn(BaseModel):
    title: str
    status: TaskStatus
    tasks: List[Task] = Field(default_factory=list)


class ViewInfo(BaseModel):
    title: str
    description: str


class Board(BaseModel):
    """Everything a screen needs for the active view/folder."""
    view: ViewType
    folder_id: Optional[str] = None
    title: str
    description: str
    counts: Dict[str, int]
    tasks: List[Task]
    columns: Optional[List[KanbanColumn]] = None
    folders: List[Folder] = Field(default_factory=list)


def _local_now(now: Optional[datetime]) -> datetime:
    # naive values are taken as local time
    return (now or datetime.now()).astimezone()


def created_today(task: Task, now: Optional[datetime] = None) -> bool:
    """Created on the current calendar day, in local time."""
    today = _local_now(now).date()
    return task.created_at.astimezone().date() == today


def matches_view(task: Task, view: str, now: Optional[datetime] = None) -> bool:
    if task.completed:
        return False
    if view == "today":
        return created_today(task, now)
    if view == "flagged":
        return task.flagged
    # all, kanban and anything unknown
    return True


def in_folder(task: Task, folder_id: Optional[str]) -> bool:
    return folder_id is None or task.folder_id == folder_id


def task_counts(
    tasks: Sequence[Task],
    folders: Iterable[Folder] = (),
    folder_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Dict[str, int]:
    """
    Non-completed counts per view (scoped to `folder_id` when given), the
    completed count, and one entry per folder id.
    """
    scoped = [t for t in tasks if in_folder(t, folder_id)]
    counts = {
        view: sum(1 for t in scoped if matches_view(t, view, now))
        for view in VIEW_INFO
    }
    counts["completed"] = sum(1 for t in scoped if t.completed)

    for folder in folders:
        counts[folder.id] = sum(
            1 for t in tasks if not t.completed and t.folder_id == folder.id
        )
    return counts


def filter_tasks(
    tasks: Sequence[Task],
    view: str,
    folder_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[Task]:
    """Visible tasks for a list view, in the order they were given."""
    return [t for t in tasks if in_folder(t, folder_id) and matches_view(t, view, now)]


def kanban_columns(
    tasks: Sequence[Task],
    folder_id: Optional[str] = None,
) -> List[KanbanColumn]:
    """Bucket by status. Completion is ignored: a completed task keeps its column."""
    columns = [KanbanColumn(title=title, status=status) for title, status in KANBAN_COLUMNS]
    by_status = {c.status: c for c in columns}
    for task in tasks:
        if in_folder(task, folder_id) and task.status in by_status:
            by_status[task.status].tasks.append(task)
    return columns


def merge_new_tasks(
    existing: Sequence[Task],
    new_tasks: Sequence[Task],
    folder_id: Optional[str] = None,
) -> List[Task]:
    """
    Merge a freshly extracted batch into the current list.

    The batch is tagged with the active folder and `todo`, then the whole list
    is ordered by priority ascending and creation time descending. This order
    applies at insertion time only.
    """
    tagged = [t.model_copy(update={"folder_id": folder_id, "status": "todo"}) for t in new_tasks]
    merged = tagged + list(existing)
    # two stable passes: secondary key first
    merged.sort(key=lambda t: t.created_at, reverse=True)
    merged.sort(key=lambda t: t.priority)
    return merged


def view_info(view: str, folder_id: Optional[str], folders: Iterable[Folder]) -> ViewInfo:
    if folder_id:
        folder = next((f for f in folders if f.id == folder_id), None)
        name = folder.name if folder else "Folder"
        return ViewInfo(title=name, description=f"Tasks in {name}")
    title, description = VIEW_INFO.get(view, ("Tasks", ""))
    return ViewInfo(title=title, description=description)


def build_board(
    tasks: Sequence[Task],
    folders: Sequence[Folder],
    preferences: ViewPreferences,
    now: Optional[datetime] = None,
) -> Board:
    view = preferences.view
    folder_id = preferences.folder_id
    info = view_info(view, folder_id, folders)

    columns = None
    if view == "kanban":
        columns = kanban_columns(tasks, folder_id)

    return Board(
        view=view,
        folder_id=folder_id,
        title=info.title,
        description=info.description,
        counts=task_counts(tasks, folders, now=now),
        tasks=filter_tasks(tasks, view, folder_id, now),
        columns=columns,
        folders=list(folders),
    )
