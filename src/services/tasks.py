"""
Task mutation operations.

Each operation is one store call (one transaction) and returns an
`ActionResult`; callers re-fetch or use the returned row, nothing is pushed.
"""

import asyncio
import logging
from typing import List, Optional

from extraction.task_extractor import TaskExtractor
from services.base import require_id, run_operation
from storage.record_store import RecordStore
from taskboard.errors import InvalidStatus, NotFound, ValidationError
from taskboard.models import TASK_STATUSES, ActionResult, TaskCandidate, TaskDraft
from views.derivation import merge_new_tasks

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 2
DEFAULT_CATEGORY = "general"

# Columns that cannot be NULL: an explicit null in a draft means "not supplied".
_NOT_NULLABLE = ("text", "priority", "category", "status", "completed", "flagged")


def _check_status(status) -> str:
    if status not in TASK_STATUSES:
        raise InvalidStatus(
            f"Invalid status: {status!r}",
            details={"allowed": list(TASK_STATUSES)},
        )
    return status


def _blank_to_none(folder_id: Optional[str]) -> Optional[str]:
    if folder_id is None or not str(folder_id).strip():
        return None
    return str(folder_id)


class TaskService:

    def __init__(self, store: RecordStore, extractor: Optional[TaskExtractor] = None):
        self.store = store
        self.extractor = extractor

    async def list_tasks(self) -> ActionResult:
        async def op():
            return ActionResult.ok(tasks=await self.store.list_tasks())

        return await run_operation("list_tasks", op)

    async def extract_and_save(self, text: str, folder_id: Optional[str] = None) -> ActionResult:
        """Free text -> language model -> candidates -> stored rows."""

        async def op():
            if not isinstance(text, str) or not text.strip():
                raise ValidationError("No text provided")
            if self.extractor is None:
                raise ValidationError("Task extraction is not configured")

            active_folder = _blank_to_none(folder_id)
            logger.info(f"Extracting tasks from text: {text[:50]}...")
            candidates = await asyncio.to_thread(self.extractor.extract, text, active_folder)

            if not candidates:
                logger.info("Extraction found no actionable tasks")
                return ActionResult.ok(tasks=[])

            # most urgent first, newest first within a priority
            tasks = merge_new_tasks([], await self.store.insert_tasks(candidates), active_folder)
            logger.info(f"Saved {len(tasks)} extracted tasks (folder={active_folder})")
            return ActionResult.ok(tasks=tasks)

        return await run_operation("extract_and_save", op)

    async def create_from_extraction(self, candidates: List[TaskCandidate]) -> ActionResult:
        async def op():
            if not candidates:
                return ActionResult.ok(tasks=[])
            tasks = await self.store.insert_tasks(list(candidates))
            logger.info(f"Saved {len(tasks)} task candidates")
            return ActionResult.ok(tasks=tasks)

        return await run_operation("create_from_extraction", op)

    async def create_or_update(self, draft: TaskDraft) -> ActionResult:
        """
        With an id: merge the supplied fields into that row.
        Without one: insert a new task with defaults for what is missing.
        """

        async def op():
            fields = draft.model_dump(exclude_unset=True)
            fields.pop("id", None)
            task_id = draft.id
            for key in _NOT_NULLABLE:
                if key in fields and fields[key] is None:
                    del fields[key]

            if "text" in fields and not fields["text"].strip():
                raise ValidationError("Task text is required")
            if "status" in fields:
                _check_status(fields["status"])
            if "folder_id" in fields:
                fields["folder_id"] = _blank_to_none(fields["folder_id"])

            if task_id is not None:
                task_id = require_id(task_id, "task")
                if fields:
                    task = await self.store.update_task(task_id, fields)
                else:
                    task = await self.store.get_task(task_id)
                if task is None:
                    raise NotFound(f"Task {task_id} not found")
                logger.info(f"Updated task {task_id} fields={sorted(fields)}")
                return ActionResult.ok(task=task)

            if "text" not in fields:
                raise ValidationError("Task text is required")

            values = {
                "priority": DEFAULT_PRIORITY,
                "category": DEFAULT_CATEGORY,
                "completed": False,
                "flagged": False,
                "status": "todo",
                "folder_id": None,
            }
            values.update(fields)
            task = await self.store.insert_task(values)
            logger.info(f"Created task {task.id}")
            return ActionResult.ok(task=task)

        return await run_operation("create_or_update", op)

    async def update_status(self, task_id: str, status: str) -> ActionResult:
        async def op():
            tid = require_id(task_id, "task")
            _check_status(status)
            task = await self.store.update_task(tid, {"status": status})
            if task is None:
                raise NotFound(f"Task {tid} not found")
            logger.info(f"Task {tid} moved to {status}")
            return ActionResult.ok(task=task)

        return await run_operation("update_status", op)

    async def toggle_flag(self, task_id: str) -> ActionResult:
        async def op():
            tid = require_id(task_id, "task")
            task = await self.store.flip_flag(tid)
            if task is None:
                raise NotFound(f"Task {tid} not found")
            logger.info(f"Task {tid} flagged={task.flagged}")
            return ActionResult.ok(task=task)

        return await run_operation("toggle_flag", op)

    async def complete(self, task_id: str) -> ActionResult:
        async def op():
            tid = require_id(task_id, "task")
            task = await self.store.update_task(tid, {"completed": True, "status": "done"})
            if task is None:
                raise NotFound(f"Task {tid} not found")
            logger.info(f"Task {tid} completed")
            return ActionResult.ok(task=task)

        return await run_operation("complete", op)

    async def delete(self, task_id: str) -> ActionResult:
        async def op():
            tid = require_id(task_id, "task")
            if not await self.store.delete_task(tid):
                raise NotFound(f"Task {tid} not found")
            logger.info(f"Deleted task {tid}")
            return ActionResult.ok()

        return await run_operation("delete", op)

    async def assign_folder(self, task_id: str, folder_id: Optional[str]) -> ActionResult:
        # No folder existence check: a dangling id is stored as given.
        async def op():
            tid = require_id(task_id, "task")
            target = _blank_to_none(folder_id)
            task = await self.store.update_task(tid, {"folder_id": target})
            if task is None:
                raise NotFound(f"Task {tid} not found")
            logger.info(f"Task {tid} assigned to folder {target}")
            return ActionResult.ok(task=task)

        return await run_operation("assign_folder", op)
