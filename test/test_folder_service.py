import asyncio

from services.folders import FolderService
from services.tasks import TaskService
from taskboard.models import TaskDraft, ViewPreferences


def test_create_requires_name(store):
    result = asyncio.run(FolderService(store).create(""))
    assert result.success is False
    assert result.error_kind == "ValidationError"


def test_update_merges_fields(store):
    service = FolderService(store)
    folder = asyncio.run(service.create("Work", description="Day job", color="#3366ff")).folder

    result = asyncio.run(service.update(folder.id, color="#ff0000"))

    assert result.folder.name == "Work"
    assert result.folder.description == "Day job"
    assert result.folder.color == "#ff0000"


def test_update_missing_folder(store):
    result = asyncio.run(FolderService(store).update("missing", name="X"))
    assert result.error_kind == "NotFound"


def test_delete_unfiles_all_member_tasks(store):
    folders = FolderService(store)
    tasks = TaskService(store)
    folder = asyncio.run(folders.create("Errands")).folder
    for i in range(3):
        asyncio.run(tasks.create_or_update(TaskDraft(text=f"Errand {i}", folder_id=folder.id)))

    assert asyncio.run(folders.list_folders()).folders[0].task_count == 3

    result = asyncio.run(folders.delete(folder.id))

    assert result.success
    assert result.details["unfiled_tasks"] == 3
    assert all(t.folder_id is None for t in asyncio.run(store.list_tasks()))
    assert asyncio.run(folders.list_folders()).folders == []


def test_delete_missing_folder_is_not_found(store):
    assert asyncio.run(FolderService(store).delete("missing")).error_kind == "NotFound"


def test_delete_active_folder_resets_preferences(store, prefs_store):
    service = FolderService(store, preferences=prefs_store)
    folder = asyncio.run(service.create("Side project")).folder
    prefs_store.save(ViewPreferences(view="kanban", folder_id=folder.id))

    asyncio.run(service.delete(folder.id))

    assert prefs_store.load() == ViewPreferences(view="all", folder_id=None)


def test_update_with_blank_description_clears_it(store):
    service = FolderService(store)
    folder = asyncio.run(service.create("Work", description="Day job", color="#3366ff")).folder

    result = asyncio.run(service.update(folder.id, description="  ", color=""))

    assert result.success
    assert result.folder.description is None
    assert result.folder.color is None
