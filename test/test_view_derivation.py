from datetime import datetime, timedelta, timezone

from taskboard.models import Folder, ViewPreferences
from views.derivation import (
    build_board,
    filter_tasks,
    kanban_columns,
    merge_new_tasks,
    task_counts,
    view_info,
)

NOW = datetime.now(timezone.utc)


def _folder(folder_id: str, name: str) -> Folder:
    return Folder(id=folder_id, name=name, created_at=NOW, updated_at=NOW)


def test_counts_by_view(make_task):
    tasks = [
        make_task(completed=False, flagged=True, status="todo"),
        make_task(completed=True),
    ]
    counts = task_counts(tasks)
    assert counts["flagged"] == 1
    assert counts["all"] == 1
    assert counts["completed"] == 1
    assert counts["kanban"] == 1


def test_today_uses_creation_day(make_task):
    tasks = [
        make_task(created_at=NOW),
        make_task(created_at=NOW - timedelta(days=3)),
    ]
    assert task_counts(tasks, now=NOW)["today"] == 1
    assert [t.id for t in filter_tasks(tasks, "today", now=NOW)] == [tasks[0].id]


def test_folder_counts_skip_completed(make_task):
    work = _folder("work", "Work")
    tasks = [
        make_task(folder_id="work"),
        make_task(folder_id="work", completed=True),
        make_task(folder_id=None),
    ]
    counts = task_counts(tasks, [work])
    assert counts["work"] == 1
    assert counts["all"] == 2


def test_counts_scoped_to_folder(make_task):
    tasks = [make_task(folder_id="work", flagged=True), make_task(flagged=True)]
    assert task_counts(tasks, folder_id="work")["flagged"] == 1


def test_filter_preserves_order_and_folder(make_task):
    tasks = [make_task(folder_id="a"), make_task(folder_id="b"), make_task(folder_id="a")]
    visible = filter_tasks(tasks, "all", folder_id="a")
    assert [t.id for t in visible] == [tasks[0].id, tasks[2].id]


def test_kanban_buckets(make_task):
    tasks = [make_task(status=s) for s in ("todo", "inProgress", "inProgress", "done")]
    columns = kanban_columns(tasks)

    assert [len(c.tasks) for c in columns] == [1, 2, 1]
    assert [c.title for c in columns] == ["To Do", "In Progress", "Done"]
    placed = [t.id for c in columns for t in c.tasks]
    assert sorted(placed) == sorted(t.id for t in tasks)


def test_kanban_keeps_completed_tasks(make_task):
    task = make_task(status="inProgress", completed=True)
    columns = kanban_columns([task])
    assert columns[1].tasks == [task]


def test_merge_new_tasks_orders_by_priority_then_recency(make_task):
    old = make_task(priority=1, created_at=NOW - timedelta(hours=1))
    new_low = make_task(priority=3, created_at=NOW, status="done")
    new_high = make_task(priority=1, created_at=NOW)

    merged = merge_new_tasks([old], [new_low, new_high], folder_id="work")

    assert [t.id for t in merged] == [new_high.id, old.id, new_low.id]
    assert merged[0].folder_id == "work"
    assert merged[2].status == "todo"
    assert old.folder_id is None


def test_view_info_prefers_folder():
    folders = [_folder("work", "Work")]
    assert view_info("all", "work", folders).title == "Work"
    assert view_info("all", "work", folders).description == "Tasks in Work"
    assert view_info("flagged", None, folders).title == "Flagged"


def test_build_board_for_kanban(make_task):
    work = _folder("work", "Work")
    tasks = [make_task(folder_id="work", status="done"), make_task(status="todo")]

    board = build_board(tasks, [work], ViewPreferences(view="kanban", folder_id="work"), now=NOW)

    assert board.title == "Work"
    assert [len(c.tasks) for c in board.columns] == [0, 0, 1]
    assert len(board.tasks) == 1
    assert board.counts["work"] == 1


def test_build_board_list_view_has_no_columns(make_task):
    board = build_board([make_task()], [], ViewPreferences(), now=NOW)
    assert board.columns is None
    assert board.title == "All Tasks"
