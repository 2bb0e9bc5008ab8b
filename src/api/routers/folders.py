import logging
import time

from fastapi import APIRouter, Depends

from api.dependencies import get_folder_service
from api.responses import to_response
from services.folders import FolderService
from taskboard.models import FolderDraft

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/folders")
async def list_folders(service: FolderService = Depends(get_folder_service)):
    """All folders with the number of tasks filed in each."""
    start = time.time()
    return to_response(await service.list_folders(), "/folders", start)


@router.post("/folders")
async def create_folder(payload: FolderDraft, service: FolderService = Depends(get_folder_service)):
    start = time.time()
    result = await service.create(payload.name, description=payload.description, color=payload.color)
    return to_response(result, "/folders", start)


@router.patch("/folders/{folder_id}")
async def update_folder(
    folder_id: str,
    payload: FolderDraft,
    service: FolderService = Depends(get_folder_service),
):
    start = time.time()
    result = await service.update(
        folder_id,
        name=payload.name,
        description=payload.description,
        color=payload.color,
    )
    return to_response(result, "/folders/{folder_id}", start)


@router.delete("/folders/{folder_id}")
async def delete_folder(folder_id: str, service: FolderService = Depends(get_folder_service)):
    """Unfiles the folder's tasks, then removes it."""
    start = time.time()
    return to_response(await service.delete(folder_id), "/folders/{folder_id}", start)
