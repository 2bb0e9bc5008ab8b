from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable

from taskboard.models import Folder, ViewPreferences

logger = logging.getLogger(__name__)


class PreferencesStore:
    """
    Last selected view/folder, kept in its own JSON file apart from the
    task/folder records. Loaded on start, saved on every change.
    """

    def __init__(self, path: str = "data/preferences.json"):
        self.path = Path(path)

    def load(self) -> ViewPreferences:
        try:
            if not self.path.exists():
                return ViewPreferences()

            data = json.loads(self.path.read_text(encoding="utf-8"))
            return ViewPreferences(**data)
        except Exception as e:
            logger.warning(f"Ignoring unreadable preferences file {self.path}: {e}")
            return ViewPreferences()

    def save(self, prefs: ViewPreferences) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

        self.path.write_text(
            json.dumps(prefs.model_dump(), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )

    def reconcile(self, folders: Iterable[Folder]) -> ViewPreferences:
        """Drop a stored folder selection whose folder no longer exists."""
        prefs = self.load()
        if prefs.folder_id is None:
            return prefs

        if any(f.id == prefs.folder_id for f in folders):
            return prefs

        logger.info(f"Stored folder {prefs.folder_id} no longer exists, clearing selection")
        prefs = prefs.model_copy(update={"folder_id": None})
        self.save(prefs)
        return prefs

    def forget_folder(self, folder_id: str) -> ViewPreferences:
        """Called after a folder is deleted: fall back to the 'all' view."""
        prefs = self.load()
        if prefs.folder_id != folder_id:
            return prefs

        prefs = ViewPreferences(view="all", folder_id=None)
        self.save(prefs)
        return prefs
