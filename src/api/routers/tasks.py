import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from api.dependencies import get_task_service
from api.metrics import EXTRACTION_FAILURES_TOTAL, TASKS_EXTRACTED_TOTAL
from api.responses import to_response
from services.tasks import TaskService
from taskboard.models import TaskDraft

router = APIRouter()
logger = logging.getLogger(__name__)


class ExtractIn(BaseModel):
    # empty text is rejected by the service as a ValidationError result
    text: str = ""
    folder_id: Optional[str] = None


class StatusIn(BaseModel):
    status: str = ""


class FolderAssignIn(BaseModel):
    folder_id: Optional[str] = None


@router.get("/tasks")
async def list_tasks(service: TaskService = Depends(get_task_service)):
    """All tasks, newest first."""
    start = time.time()
    return to_response(await service.list_tasks(), "/tasks", start)


@router.post("/tasks/extract")
async def extract_tasks(payload: ExtractIn, service: TaskService = Depends(get_task_service)):
    """Extract tasks from free text and store them in the active folder."""
    start = time.time()
    result = await service.extract_and_save(payload.text, folder_id=payload.folder_id)

    # Prometheus counters (best-effort)
    try:
        if result.success:
            TASKS_EXTRACTED_TOTAL.inc(len(result.tasks or []))
        else:
            EXTRACTION_FAILURES_TOTAL.labels(kind=result.error_kind).inc()
    except Exception:
        pass

    return to_response(result, "/tasks/extract", start)


@router.post("/tasks")
async def create_or_update_task(payload: TaskDraft, service: TaskService = Depends(get_task_service)):
    start = time.time()
    return to_response(await service.create_or_update(payload), "/tasks", start)


@router.put("/tasks/{task_id}")
async def update_task(
    task_id: str,
    payload: TaskDraft,
    service: TaskService = Depends(get_task_service),
):
    """Partial update: only the fields present in the body are written."""
    start = time.time()
    draft = TaskDraft(**{**payload.model_dump(exclude_unset=True), "id": task_id})
    return to_response(await service.create_or_update(draft), "/tasks/{task_id}", start)


@router.post("/tasks/{task_id}/status")
async def update_task_status(
    task_id: str,
    payload: StatusIn,
    service: TaskService = Depends(get_task_service),
):
    start = time.time()
    result = await service.update_status(task_id, payload.status)
    return to_response(result, "/tasks/{task_id}/status", start)


@router.post("/tasks/{task_id}/flag")
async def toggle_task_flag(task_id: str, service: TaskService = Depends(get_task_service)):
    start = time.time()
    return to_response(await service.toggle_flag(task_id), "/tasks/{task_id}/flag", start)


@router.post("/tasks/{task_id}/complete")
async def complete_task(task_id: str, service: TaskService = Depends(get_task_service)):
    start = time.time()
    return to_response(await service.complete(task_id), "/tasks/{task_id}/complete", start)


@router.delete("/tasks/{task_id}")
async def delete_task(task_id: str, service: TaskService = Depends(get_task_service)):
    start = time.time()
    return to_response(await service.delete(task_id), "/tasks/{task_id}", start)


@router.post("/tasks/{task_id}/folder")
async def assign_task_folder(
    task_id: str,
    payload: FolderAssignIn,
    service: TaskService = Depends(get_task_service),
):
    start = time.time()
    result = await service.assign_folder(task_id, payload.folder_id)
    return to_response(result, "/tasks/{task_id}/folder", start)
