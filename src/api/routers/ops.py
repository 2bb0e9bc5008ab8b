import logging
from fastapi import APIRouter, Depends, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from api.dependencies import STORE_BACKEND, get_record_store
from api.metrics import OPEN_TASKS
from storage import db
from storage.record_store import RecordStore
from taskboard.errors import TaskBoardError

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check(store: RecordStore = Depends(get_record_store)) -> dict:
    """Health check endpoint for container orchestration."""
    health = {"status": "healthy", "store_backend": STORE_BACKEND}

    if STORE_BACKEND == "postgres":
        db_health = await db.health_check()
        health["database"] = db_health
        if db_health["status"] != "healthy":
            health["status"] = "degraded"
        return health

    try:
        health["folders"] = len(await store.list_folders())
    except TaskBoardError as e:
        health["status"] = "degraded"
        health["database"] = {"status": "error", "error": e.message}

    return health


@router.get("/metrics")
async def metrics(store: RecordStore = Depends(get_record_store)) -> Response:
    """
    Prometheus scrape endpoint.
    """
    try:
        tasks = await store.list_tasks()
        OPEN_TASKS.set(sum(1 for t in tasks if not t.completed))
    except TaskBoardError as e:
        logger.warning(f"Could not refresh open task gauge: {e}")

    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
