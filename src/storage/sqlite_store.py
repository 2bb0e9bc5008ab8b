"""
SQLite record store.

The default backend for local use and tests. Each call opens its own
connection and runs in a worker thread, so the event loop never blocks on
disk I/O. Every public method is a single transaction.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import sqlite3
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

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

SCHEMA = """
CREATE TABLE IF NOT EXISTS folders (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT,
    color TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS tasks (
    id TEXT PRIMARY KEY,
    text TEXT NOT NULL,
    priority INTEGER NOT NULL DEFAULT 2,
    category TEXT NOT NULL DEFAULT 'general',
    completed INTEGER NOT NULL DEFAULT 0,
    flagged INTEGER NOT NULL DEFAULT 0,
    status TEXT NOT NULL DEFAULT 'todo',
    source_text TEXT,
    folder_id TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_tasks_folder_id ON tasks(folder_id);
"""

TASK_ORDER = " ORDER BY t.created_at DESC, t.rowid DESC"
FOLDER_ORDER = " ORDER BY f.created_at DESC, f.rowid DESC"


class SqliteRecordStore(RecordStore):

    def __init__(self, db_path: str | Path = "data/taskboard.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info(f"SqliteRecordStore ready db={self._db_path}")

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            with conn:
                conn.executescript(SCHEMA)
        finally:
            conn.close()

    def _transaction(self, fn: Callable[[sqlite3.Connection], Any]) -> Any:
        conn = self._get_conn()
        try:
            with conn:
                return fn(conn)
        finally:
            conn.close()

    async def _run(self, fn: Callable[[sqlite3.Connection], Any]) -> Any:
        try:
            return await asyncio.to_thread(self._transaction, fn)
        except sqlite3.Error as e:
            logger.error(f"SQLite operation failed: {e}")
            raise PersistenceError(f"Store operation failed: {e}") from e

    @staticmethod
    def _select_task(conn: sqlite3.Connection, task_id: str) -> Optional[Task]:
        row = conn.execute(TASK_SELECT + " WHERE t.id = ?", (task_id,)).fetchone()
        return task_from_row(row) if row else None

    @staticmethod
    def _select_folder(conn: sqlite3.Connection, folder_id: str) -> Optional[Folder]:
        row = conn.execute(FOLDER_SELECT + " WHERE f.id = ?", (folder_id,)).fetchone()
        return folder_from_row(row) if row else None

    # ---- tasks ----

    async def list_tasks(self) -> List[Task]:
        def op(conn):
            rows = conn.execute(TASK_SELECT + TASK_ORDER).fetchall()
            return [task_from_row(r) for r in rows]

        return await self._run(op)

    async def get_task(self, task_id: str) -> Optional[Task]:
        return await self._run(lambda conn: self._select_task(conn, task_id))

    async def insert_tasks(self, candidates: List[TaskCandidate]) -> List[Task]:
        now = utcnow().isoformat(timespec="microseconds")
        rows = [
            (
                new_id(),
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
            for c in candidates
        ]

        def op(conn):
            conn.executemany(
                """
                INSERT INTO tasks (id, text, priority, category, completed, flagged,
                                   status, source_text, folder_id, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                rows,
            )
            return [self._select_task(conn, r[0]) for r in rows]

        return await self._run(op)

    async def insert_task(self, fields: Dict[str, Any]) -> Task:
        now = utcnow().isoformat(timespec="microseconds")
        values = pick_fields(fields, TASK_MUTABLE_FIELDS)
        values.update({"id": new_id(), "created_at": now, "updated_at": now})
        columns = list(values)

        def op(conn):
            conn.execute(
                f"INSERT INTO tasks ({', '.join(columns)}) "
                f"VALUES ({', '.join('?' for _ in columns)})",
                [values[c] for c in columns],
            )
            return self._select_task(conn, values["id"])

        return await self._run(op)

    async def update_task(self, task_id: str, fields: Dict[str, Any]) -> Optional[Task]:
        values = pick_fields(fields, TASK_MUTABLE_FIELDS)
        values["updated_at"] = utcnow().isoformat(timespec="microseconds")
        assignments = ", ".join(f"{c} = ?" for c in values)

        def op(conn):
            cur = conn.execute(
                f"UPDATE tasks SET {assignments} WHERE id = ?",
                [*values.values(), task_id],
            )
            if cur.rowcount == 0:
                return None
            return self._select_task(conn, task_id)

        return await self._run(op)

    async def flip_flag(self, task_id: str) -> Optional[Task]:
        now = utcnow().isoformat(timespec="microseconds")

        def op(conn):
            cur = conn.execute(
                "UPDATE tasks SET flagged = NOT flagged, updated_at = ? WHERE id = ?",
                (now, task_id),
            )
            if cur.rowcount == 0:
                return None
            return self._select_task(conn, task_id)

        return await self._run(op)

    async def delete_task(self, task_id: str) -> bool:
        def op(conn):
            cur = conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
            return cur.rowcount > 0

        return await self._run(op)

    # ---- folders ----

    async def list_folders(self) -> List[Folder]:
        def op(conn):
            rows = conn.execute(FOLDER_SELECT + FOLDER_ORDER).fetchall()
            return [folder_from_row(r) for r in rows]

        return await self._run(op)

    async def get_folder(self, folder_id: str) -> Optional[Folder]:
        return await self._run(lambda conn: self._select_folder(conn, folder_id))

    async def insert_folder(
        self,
        name: str,
        description: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Folder:
        folder_id = new_id()
        now = utcnow().isoformat(timespec="microseconds")

        def op(conn):
            conn.execute(
                """
                INSERT INTO folders (id, name, description, color, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (folder_id, name, description, color, now, now),
            )
            return self._select_folder(conn, folder_id)

        return await self._run(op)

    async def update_folder(self, folder_id: str, fields: Dict[str, Any]) -> Optional[Folder]:
        values = pick_fields(fields, FOLDER_MUTABLE_FIELDS)
        values["updated_at"] = utcnow().isoformat(timespec="microseconds")
        assignments = ", ".join(f"{c} = ?" for c in values)

        def op(conn):
            cur = conn.execute(
                f"UPDATE folders SET {assignments} WHERE id = ?",
                [*values.values(), folder_id],
            )
            if cur.rowcount == 0:
                return None
            return self._select_folder(conn, folder_id)

        return await self._run(op)

    async def delete_folder(self, folder_id: str) -> Optional[int]:
        now = utcnow().isoformat(timespec="microseconds")

        def op(conn):
            exists = conn.execute("SELECT 1 FROM folders WHERE id = ?", (folder_id,)).fetchone()
            if exists is None:
                return None
            cur = conn.execute(
                "UPDATE tasks SET folder_id = NULL, updated_at = ? WHERE folder_id = ?",
                (now, folder_id),
            )
            unfiled = cur.rowcount
            conn.execute("DELETE FROM folders WHERE id = ?", (folder_id,))
            return unfiled

        return await self._run(op)
