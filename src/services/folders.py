import logging
from typing import Optional

from services.base import require_id, run_operation
from storage.preferences_store import PreferencesStore
from storage.record_store import RecordStore
from taskboard.errors import NotFound, ValidationError
from taskboard.models import ActionResult

logger = logging.getLogger(__name__)


def _optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class FolderService:

    def __init__(self, store: RecordStore, preferences: Optional[PreferencesStore] = None):
        self.store = store
        self.preferences = preferences

    async def list_folders(self) -> ActionResult:
        async def op():
            return ActionResult.ok(folders=await self.store.list_folders())

        return await run_operation("list_folders", op)

    async def create(
        self,
        name: Optional[str],
        description: Optional[str] = None,
        color: Optional[str] = None,
    ) -> ActionResult:
        async def op():
            if not isinstance(name, str) or not name.strip():
                raise ValidationError("Folder name is required")
            folder = await self.store.insert_folder(
                name.strip(),
                description=_optional_text(description),
                color=_optional_text(color),
            )
            logger.info(f"Created folder {folder.id} ({folder.name})")
            return ActionResult.ok(folder=folder)

        return await run_operation("create_folder", op)

    async def update(
        self,
        folder_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        color: Optional[str] = None,
    ) -> ActionResult:
        """Merge-update: fields left as None keep their stored value."""

        async def op():
            fid = require_id(folder_id, "folder")
            fields = {}
            if name is not None:
                if not name.strip():
                    raise ValidationError("Folder name is required")
                fields["name"] = name.strip()
            if description is not None:
                fields["description"] = _optional_text(description)
            if color is not None:
                fields["color"] = _optional_text(color)

            if fields:
                folder = await self.store.update_folder(fid, fields)
            else:
                folder = await self.store.get_folder(fid)
            if folder is None:
                raise NotFound(f"Folder {fid} not found")
            logger.info(f"Updated folder {fid} fields={sorted(fields)}")
            return ActionResult.ok(folder=folder)

        return await run_operation("update_folder", op)

    async def delete(self, folder_id: str) -> ActionResult:
        """Unfile the folder's tasks, then remove the folder."""

        async def op():
            fid = require_id(folder_id, "folder")
            unfiled = await self.store.delete_folder(fid)
            if unfiled is None:
                raise NotFound(f"Folder {fid} not found")
            if self.preferences is not None:
                self.preferences.forget_folder(fid)
            logger.info(f"Deleted folder {fid}, unfiled {unfiled} tasks")
            return ActionResult.ok(details={"unfiled_tasks": unfiled})

        return await run_operation("delete_folder", op)
