import os

from fastapi import Depends

from api import state
from extraction.task_extractor import TaskExtractor
from llm.llm_client import LLMClient
from services.folders import FolderService
from services.tasks import TaskService
from storage.preferences_store import PreferencesStore
from storage.record_store import RecordStore
from storage.sqlite_store import SqliteRecordStore

# Configuration
STORE_BACKEND = os.getenv("STORE_BACKEND", "sqlite").strip().lower()
SQLITE_PATH = os.getenv("SQLITE_PATH", "data/taskboard.sqlite3")
PREFERENCES_PATH = os.getenv("PREFERENCES_PATH", "data/preferences.json")


def get_record_store() -> RecordStore:
    if state.record_store is None:
        if STORE_BACKEND == "postgres":
            raise RuntimeError("PostgreSQL store not initialized; the startup hook must run first")
        state.record_store = SqliteRecordStore(SQLITE_PATH)
    return state.record_store


def get_preferences_store() -> PreferencesStore:
    if state.preferences_store is None:
        state.preferences_store = PreferencesStore(PREFERENCES_PATH)
    return state.preferences_store


def get_llm_client() -> LLMClient:
    if state.llm_client is None:
        state.llm_client = LLMClient()
    return state.llm_client


def get_task_service(
    store: RecordStore = Depends(get_record_store),
    llm_client: LLMClient = Depends(get_llm_client),
) -> TaskService:
    return TaskService(store, extractor=TaskExtractor(llm_client))


def get_folder_service(
    store: RecordStore = Depends(get_record_store),
    preferences: PreferencesStore = Depends(get_preferences_store),
) -> FolderService:
    return FolderService(store, preferences=preferences)
