import asyncio

from taskboard.models import TaskCandidate


def _candidates(source: str, folder_id=None):
    return [
        TaskCandidate(text="Draft agenda", priority=2, category="meeting",
                      source_text=source, folder_id=folder_id),
        TaskCandidate(text="Send invite", priority=1, category="meeting",
                      source_text=source, folder_id=folder_id),
    ]


def test_insert_tasks_reads_back_generated_fields(store):
    tasks = asyncio.run(store.insert_tasks(_candidates("plan the offsite")))

    assert [t.text for t in tasks] == ["Draft agenda", "Send invite"]
    assert len({t.id for t in tasks}) == 2
    for t in tasks:
        assert t.created_at.tzinfo is not None
        assert t.source_text == "plan the offsite"


def test_list_tasks_is_newest_first(store):
    first = asyncio.run(store.insert_task({"text": "older"}))
    second = asyncio.run(store.insert_task({"text": "newer"}))

    listed = asyncio.run(store.list_tasks())
    assert [t.id for t in listed] == [second.id, first.id]


def test_task_is_returned_with_folder_attached(store):
    folder = asyncio.run(store.insert_folder("Work", color="#3366ff"))
    tasks = asyncio.run(store.insert_tasks(_candidates("x", folder_id=folder.id)))

    assert tasks[0].folder is not None
    assert tasks[0].folder.name == "Work"
    assert tasks[0].folder.color == "#3366ff"


def test_update_task_only_touches_given_fields(store):
    task = asyncio.run(store.insert_task({"text": "Pay rent", "priority": 1}))
    updated = asyncio.run(store.update_task(task.id, {"status": "inProgress"}))

    assert updated.status == "inProgress"
    assert updated.priority == 1
    assert updated.text == "Pay rent"
    assert updated.updated_at >= task.updated_at


def test_update_missing_task_returns_none(store):
    assert asyncio.run(store.update_task("nope", {"status": "done"})) is None


def test_flip_flag_is_its_own_inverse(store):
    task = asyncio.run(store.insert_task({"text": "Flag me"}))
    once = asyncio.run(store.flip_flag(task.id))
    twice = asyncio.run(store.flip_flag(task.id))
    assert once.flagged is True
    assert twice.flagged is False


def test_delete_task_reports_whether_a_row_was_removed(store):
    task = asyncio.run(store.insert_task({"text": "Temp"}))
    assert asyncio.run(store.delete_task(task.id)) is True
    assert asyncio.run(store.delete_task(task.id)) is False


def test_folder_task_count_and_delete_unfiles(store):
    folder = asyncio.run(store.insert_folder("Home"))
    asyncio.run(store.insert_tasks(_candidates("chores", folder_id=folder.id)))

    listed = asyncio.run(store.list_folders())
    assert listed[0].task_count == 2

    unfiled = asyncio.run(store.delete_folder(folder.id))
    assert unfiled == 2
    assert asyncio.run(store.list_folders()) == []
    assert all(t.folder_id is None for t in asyncio.run(store.list_tasks()))


def test_delete_missing_folder_returns_none(store):
    assert asyncio.run(store.delete_folder("nope")) is None


def test_dangling_folder_reference_is_stored(store):
    task = asyncio.run(store.insert_task({"text": "Loose"}))
    updated = asyncio.run(store.update_task(task.id, {"folder_id": "ghost"}))
    assert updated.folder_id == "ghost"
    assert updated.folder is None
