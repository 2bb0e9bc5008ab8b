import logging
import os
import time

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError

from api import state
from api.dependencies import PREFERENCES_PATH, SQLITE_PATH, STORE_BACKEND
from api.responses import to_response
from api.routers import board, folders, ops, tasks
from llm.llm_client import LLMClient
from storage import db
from storage.preferences_store import PreferencesStore
from taskboard.errors import ValidationError
from taskboard.models import ActionResult

# Logging configuration
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Taskboard AI")

app.include_router(tasks.router)
app.include_router(folders.router)
app.include_router(board.router)
app.include_router(ops.router)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies come back in the same envelope as every other failure."""
    start = time.time()
    err = ValidationError("Invalid request body", details={"errors": jsonable_encoder(exc.errors())})
    logger.info(f"Rejected request to {request.url.path}: {len(exc.errors())} validation errors")
    return to_response(ActionResult.failure(err), request.url.path, start)


@app.on_event("startup")
async def startup() -> None:
    if STORE_BACKEND == "postgres":
        from storage.postgres_store import PostgresRecordStore

        await db.init_db_pool()
        await db.init_schema()
        state.record_store = PostgresRecordStore()
    elif state.record_store is None:
        from storage.sqlite_store import SqliteRecordStore

        state.record_store = SqliteRecordStore(SQLITE_PATH)

    if state.preferences_store is None:
        state.preferences_store = PreferencesStore(PREFERENCES_PATH)
    if state.llm_client is None:
        state.llm_client = LLMClient()

    logger.info(f"Taskboard started (store={STORE_BACKEND})")


@app.on_event("shutdown")
async def shutdown() -> None:
    if state.record_store is not None:
        await state.record_store.close()
        state.record_store = None
    logger.info("Taskboard stopped")
