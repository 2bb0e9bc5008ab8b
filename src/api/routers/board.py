import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from api.dependencies import get_folder_service, get_preferences_store, get_task_service
from api.responses import observe, to_response
from services.folders import FolderService
from services.tasks import TaskService
from storage.preferences_store import PreferencesStore
from taskboard.errors import ValidationError
from taskboard.models import VIEW_TYPES, ActionResult, ViewPreferences
from views.derivation import build_board

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/board")
async def get_board(
    view: Optional[str] = None,
    folder_id: Optional[str] = None,
    tasks: TaskService = Depends(get_task_service),
    folders: FolderService = Depends(get_folder_service),
    preferences: PreferencesStore = Depends(get_preferences_store),
):
    """
    Counts, visible tasks and (for the kanban view) columns.
    Query parameters override the stored preferences for this request only.
    """
    start = time.time()

    if view is not None and view not in VIEW_TYPES:
        err = ValidationError(f"Unknown view: {view}", details={"allowed": list(VIEW_TYPES)})
        return to_response(ActionResult.failure(err), "/board", start)

    task_result = await tasks.list_tasks()
    if not task_result.success:
        return to_response(task_result, "/board", start)
    folder_result = await folders.list_folders()
    if not folder_result.success:
        return to_response(folder_result, "/board", start)

    folder_list = folder_result.folders or []
    prefs = preferences.reconcile(folder_list)
    if view is not None or folder_id is not None:
        prefs = ViewPreferences(
            view=view or prefs.view,
            folder_id=folder_id if folder_id is not None else prefs.folder_id,
        )

    board = build_board(task_result.tasks or [], folder_list, prefs)
    observe("/board", "ok", start)
    return JSONResponse(content=jsonable_encoder({"success": True, "board": board}))


@router.get("/preferences")
async def get_preferences(preferences: PreferencesStore = Depends(get_preferences_store)) -> dict:
    return {"success": True, "preferences": preferences.load().model_dump()}


@router.put("/preferences")
async def save_preferences(
    payload: ViewPreferences,
    preferences: PreferencesStore = Depends(get_preferences_store),
) -> dict:
    preferences.save(payload)
    logger.info(f"Saved view preferences view={payload.view} folder={payload.folder_id}")
    return {"success": True, "preferences": payload.model_dump()}
