# novelfactory/storage.py
"""
JSON files under the data directory:

    current.json    the book being edited (autosaved after every step)
    projects.json   saved projects keyed by id (at most MAX_SAVED_PROJECTS)
    settings.json   Settings, camelCase keys
"""

from __future__ import annotations

import datetime as dt
import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, List

from novelfactory import config
from novelfactory.errors import DataFileError, MissingBookData, ProjectLimitReached, ProjectNotFound
from novelfactory.generators.templates import DEFAULT_PROMPTS
from novelfactory.models import Book, Settings
from novelfactory.utils.validate import validate_bundle, validate_settings

logger = logging.getLogger(__name__)


def _millis() -> int:
    return time.time_ns() // 1_000_000


def _utc_iso() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat()


class ProjectStore:
    def __init__(self, root: Path, max_projects: int = config.MAX_SAVED_PROJECTS):
        self.root = Path(root)
        self.max_projects = max_projects
        self.current_file = self.root / "current.json"
        self.projects_file = self.root / "projects.json"
        self.settings_file = self.root / "settings.json"

    # ─── raw io ──────────────────────────────────────────────────────
    def _read(self, path: Path, default: Any) -> Any:
        if not path.exists():
            return default
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise DataFileError(f"{path} is not valid JSON: {e}") from e

    def _write(self, path: Path, obj: Any) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(json.dumps(obj, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp.replace(path)

    # ─── current book ────────────────────────────────────────────────
    def load_current(self) -> Book:
        data = self._read(self.current_file, None)
        return Book.model_validate(data) if data else Book()

    def save_current(self, book: Book) -> None:
        book.touch()
        self._write(self.current_file, book.to_json())

    # ─── saved projects ──────────────────────────────────────────────
    def _projects(self) -> Dict[str, Dict[str, Any]]:
        return self._read(self.projects_file, {})

    def list_projects(self) -> List[Book]:
        books = [Book.model_validate(p) for p in self._projects().values()]
        return sorted(books, key=lambda b: b.last_saved, reverse=True)

    def remaining_slots(self) -> int:
        return max(0, self.max_projects - len(self._projects()))

    def save_project(self, book: Book, title: str | None = None) -> Book:
        if not book.has_content():
            raise MissingBookData("Please add some content before saving the project.")
        projects = self._projects()
        if book.id not in projects and len(projects) >= self.max_projects:
            raise ProjectLimitReached(
                f"You can save up to {self.max_projects} projects. Please delete some projects first."
            )
        if book.id == "current":
            book.id = f"project_{_millis()}"
        if title:
            book.title = title
        book.touch()
        projects[book.id] = book.to_json()
        self._write(self.projects_file, projects)
        self._write(self.current_file, book.to_json())
        logger.info("Project %s saved (%s)", book.id, book.title or "untitled")
        return book

    def load_project(self, project_id: str) -> Book:
        projects = self._projects()
        if project_id not in projects:
            raise ProjectNotFound(f"No saved project {project_id!r}")
        book = Book.model_validate(projects[project_id])
        self._write(self.current_file, book.to_json())
        return book

    def delete_project(self, project_id: str) -> Book:
        projects = self._projects()
        if project_id not in projects:
            raise ProjectNotFound(f"No saved project {project_id!r}")
        removed = Book.model_validate(projects.pop(project_id))
        self._write(self.projects_file, projects)
        logger.info("Project %s deleted", project_id)
        return removed

    def clear_projects(self) -> int:
        count = len(self._projects())
        self._write(self.projects_file, {})
        logger.info("Deleted all %d saved projects", count)
        return count

    def export_bundle(self) -> Dict[str, Any]:
        projects = self._projects()
        return {
            "exportDate": _utc_iso(),
            "projectCount": len(projects),
            "projects": projects,
            "version": config.VERSION,
        }

    def import_bundle(self, data: Any) -> int:
        """Add the bundle's projects under fresh ids; stops at the cap."""
        incoming = validate_bundle(data)["projects"]
        projects = self._projects()
        stamp = _millis()
        imported = 0
        for project in incoming.values():
            if len(projects) >= self.max_projects:
                break
            new_id = f"imported_{stamp}_{imported}"
            book = Book.model_validate({**project, "id": new_id})
            book.touch()
            projects[new_id] = book.to_json()
            imported += 1
        self._write(self.projects_file, projects)
        logger.info("Imported %d of %d projects", imported, len(incoming))
        return imported

    # ─── settings ────────────────────────────────────────────────────
    def load_settings(self) -> Settings:
        data = self._read(self.settings_file, None)
        settings = Settings.model_validate(data) if data else Settings()
        return config.apply_env_keys(settings)

    def save_settings(self, settings: Settings) -> None:
        self._write(self.settings_file, settings.to_json())

    def export_settings(self, settings: Settings) -> Dict[str, Any]:
        prompts = {
            name.value: settings.prompt_for(name) or body
            for name, body in DEFAULT_PROMPTS.items()
        }
        return {
            "aiSettings": settings.to_json(),
            "prompts": prompts,
            "version": config.VERSION,
            "exportDate": _utc_iso(),
        }

    def import_settings(self, data: Any, settings: Settings) -> Settings:
        data = validate_settings(data)
        merged = settings.to_json()
        merged.update(data.get("aiSettings", {}))
        updated = Settings.model_validate(merged)
        prompts = dict(updated.custom_prompts)
        for name, body in data.get("prompts", {}).items():
            # a prompt equal to the built-in is not an override
            if DEFAULT_PROMPTS.get(name) == body:
                prompts.pop(name, None)
            else:
                prompts[name] = body
        updated.custom_prompts = prompts
        self.save_settings(updated)
        return updated
