"""
PostgreSQL record store on top of the asyncpg pool in `storage.db`.

Selected with STORE_BACKEND=postgres. The pool must be initialized (and the
schema applied) before the first call.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

import asyncpg

from storage import db
from storage.record_store import (
    FOLDER_MUTABLE_FIELDS,
    FOLDER_SELECT,
    TASK_MUTABLE_FIELDS,
    TASK_SELECT,
    RecordStore,
    folder_from_row,
    new_id,
    pick_fields,
    task_from_row,
    utcnow,
)
from taskboard.errors import PersistenceError
from taskboard.models import Folder, Task, TaskCandidate

logger = logging.getLogger(__name__)

TASK_ORDER = " ORDER BY t.created_at DESC, t.seq DESC"
FOLDER_ORDER = " ORDER BY f.created_at DESC"


@asynccontextmanager
async def _store_errors(operation: str):
    try:
        yield
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
        logger.error(f"PostgreSQL {operation} failed: {e}")
        raise PersistenceError(f"Store operation failed: {e}") from e


def _set_clause(values: Dict[str, Any], start: int = 1) -> str:
    return ", ".join(f"{col} = ${i}" for i, col in enumerate(values, start=start))


class PostgresRecordStore(RecordStore):

    # ---- tasks ----

    async def list_tasks(self) -> List[Task]:
        async with _store_errors("list_tasks"):
            rows = await db.fetch(TASK_SELECT + TASK_ORDER)
        return [task_from_row(r) for r in rows]

    async def get_task(self, task_id: str) -> Optional[Task]:
        async with _store_errors("get_task"):
            row = await db.fetchrow(TASK_SELECT + " WHERE t.id = $1", task_id)
        return task_from_row(row) if row else None

    async def insert_tasks(self, candidates: List[TaskCandidate]) -> List[Task]:
        now = utcnow()
        ids = [new_id() for _ in candidates]
        rows = [
            (
                task_id,
                c.text,
                c.priority,
                c.category,
                c.completed,
                c.flagged,
                c.status,
                c.source_text,
                c.folder_id,
                now,
                now,
            )
            for task_id, c in zip(ids, candidates)
        ]

        async with _store_errors("insert_tasks"):
            async with db.transaction() as conn:
                await conn.executemany(
                    """
                    INSERT INTO tasks (id, text, priority, category, completed, flagged,
                                       status, source_text, folder_id, created_at, updated_at)
                    VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11)
                    """,
                    rows,
                )
                records = await conn.fetch(
                    TASK_SELECT + " WHERE t.id = ANY($1::text[])", ids
                )

        by_id = {r["id"]: task_from_row(r) for r in records}
        return [by_id[task_id] for task_id in ids]

    async def insert_task(self, fields: Dict[str, Any]) -> Task:
        now = utcnow()
        values = pick_fields(fields, TASK_MUTABLE_FIELDS)
        values.update({"id": new_id(), "created_at": now, "updated_at": now})
        columns = list(values)
        placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))

        async with _store_errors("insert_task"):
            async with db.transaction() as conn:
                await conn.execute(
                    f"INSERT INTO tasks ({', '.join(columns)}) VALUES ({placeholders})",
                    *values.values(),
                )
                row = await conn.fetchrow(TASK_SELECT + " WHERE t.id = $1", values["id"])
        return task_from_row(row)

    async def update_task(self, task_id: str, fields: Dict[str, Any]) -> Optional[Task]:
        values = pick_fields(fields, TASK_MUTABLE_FIELDS)
        values["updated_at"] = utcnow()
        id_param = len(values) + 1

        async with _store_errors("update_task"):
            async with db.transaction() as conn:
                status = await conn.execute(
                    f"UPDATE tasks SET {_set_clause(values)} WHERE id = ${id_param}",
                    *values.values(),
                    task_id,
                )
                if status.endswith(" 0"):
                    return None
                row = await conn.fetchrow(TASK_SELECT + " WHERE t.id = $1", task_id)
        return task_from_row(row)

    async def flip_flag(self, task_id: str) -> Optional[Task]:
        async with _store_errors("flip_flag"):
            async with db.transaction() as conn:
                status = await conn.execute(
                    "UPDATE tasks SET flagged = NOT flagged, updated_at = $1 WHERE id = $2",
                    utcnow(),
                    task_id,
                )
                if status.endswith(" 0"):
                    return None
                row = await conn.fetchrow(TASK_SELECT + " WHERE t.id = $1", task_id)
        return task_from_row(row)

    async def delete_task(self, task_id: str) -> bool:
        async with _store_errors("delete_task"):
            status = await db.execute("DELETE FROM tasks WHERE id = $1", task_id)
        return not status.endswith(" 0")

    # ---- folders ----

    async def list_folders(self) -> List[Folder]:
        async with _store_errors("list_folders"):
            rows = await db.fetch(FOLDER_SELECT + FOLDER_ORDER)
        return [folder_from_row(r) for r in rows]

    async def get_folder(self, folder_id: str) -> Optional[Folder]:
        async with _store_errors("get_folder"):
            row = await db.fetchrow(FOLDER_SELECT + " WHERE f.id = $1", folder_id)
        return folder_from_row(row) if row else None

    async def insert_folder(
        self,
        name: str,
        description: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Folder:
        folder_id = new_id()
        now = utcnow()

        async with _store_errors("insert_folder"):
            async with db.transaction() as conn:
                await conn.execute(
                    """
                    INSERT INTO folders (id, name, description, color, created_at, updated_at)
                    VALUES ($1, $2, $3, $4, $5, $6)
                    """,
                    folder_id, name, description, color, now, now,
                )
                row = await conn.fetchrow(FOLDER_SELECT + " WHERE f.id = $1", folder_id)
        return folder_from_row(row)

    async def update_folder(self, folder_id: str, fields: Dict[str, Any]) -> Optional[Folder]:
        values = pick_fields(fields, FOLDER_MUTABLE_FIELDS)
        values["updated_at"] = utcnow()
        id_param = len(values) + 1

        async with _store_errors("update_folder"):
            async with db.transaction() as conn:
                status = await conn.execute(
                    f"UPDATE folders SET {_set_clause(values)} WHERE id = ${id_param}",
                    *values.values(),
                    folder_id,
                )
                if status.endswith(" 0"):
                    return None
                row = await conn.fetchrow(FOLDER_SELECT + " WHERE f.id = $1", folder_id)
        return folder_from_row(row)

    async def delete_folder(self, folder_id: str) -> Optional[int]:
        async with _store_errors("delete_folder"):
            async with db.transaction() as conn:
                exists = await conn.fetchval(
                    "SELECT 1 FROM folders WHERE id = $1 FOR UPDATE", folder_id
                )
                if exists is None:
                    return None
                status = await conn.execute(
                    "UPDATE tasks SET folder_id = NULL, updated_at = $1 WHERE folder_id = $2",
                    utcnow(),
                    folder_id,
                )
                await conn.execute("DELETE FROM folders WHERE id = $1", folder_id)
        # asyncpg status strings look like "UPDATE 3"
        return int(status.split()[-1])

    async def close(self) -> None:
        await db.close_db_pool()
