"""
Canvas State Manager
====================

Manages carousel editing sessions with JSON persistence.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional, Dict, Any, List
from datetime import datetime
import uuid

from ..errors import TemplateNotFound
from ..models.canvas_models import CanvasTemplate
from ..templates.registry import get_registry
from .editor import CanvasEditor

logger = logging.getLogger(__name__)

SESSIONS_DIR = os.getenv("CAROUSEL_SESSIONS_DIR", "sessions")


class StateManager:
    """Manages carousel editor sessions."""

    def __init__(self, sessions_dir: Optional[Path] = None):
        self.sessions_dir = Path(sessions_dir or SESSIONS_DIR)
        self.sessions_dir.mkdir(parents=True, exist_ok=True)
        self._cache: Dict[str, CanvasEditor] = {}
        self._meta: Dict[str, Dict[str, Any]] = {}
        logger.info(f"[STATE-MANAGER] Initialized with sessions_dir={self.sessions_dir}")

    def _session_path(self, session_id: str) -> Path:
        return self.sessions_dir / f"{session_id}.json"

    def create_session(
        self,
        session_id: Optional[str] = None,
        template: Optional[CanvasTemplate] = None
    ) -> str:
        """Create a new session with optional ID, optionally starting from a template."""
        if session_id is None:
            session_id = str(uuid.uuid4())

        if self.get_editor(session_id) is None:
            editor = CanvasEditor()
            if template is not None:
                editor.apply_template(template)
            self._cache[session_id] = editor
            self._meta[session_id] = {"created_at": datetime.now().isoformat()}
            self._save_session(session_id)
            logger.info(f"[STATE-MANAGER] Created session {session_id}")
        return session_id

    def get_editor(self, session_id: str) -> Optional[CanvasEditor]:
        """Get the editor of a session, loading it from disk on a cache miss."""
        if session_id in self._cache:
            return self._cache[session_id]

        session_path = self._session_path(session_id)
        if not session_path.exists():
            return None

        with open(session_path) as f:
            data = json.load(f)

        template = None
        template_id = data.get("template_id")
        if template_id:
            try:
                template = get_registry().get_template(template_id)
            except TemplateNotFound:
                logger.warning(f"[STATE-MANAGER] Session {session_id} refers to unknown template {template_id}")

        self._cache[session_id] = CanvasEditor.from_document(data, template=template)
        self._meta[session_id] = {"created_at": data.get("created_at"), "updated_at": data.get("updated_at")}
        return self._cache[session_id]

    def get_session(self, session_id: str) -> Optional[Dict[str, Any]]:
        """Get session state as a JSON-ready document."""
        editor = self.get_editor(session_id)
        if editor is None:
            return None
        return {
            "id": session_id,
            **self._meta.get(session_id, {}),
            **editor.to_document(),
            "can_undo": editor.can_undo,
            "can_redo": editor.can_redo,
            "can_add_slide": editor.can_add_slide,
            "is_generating": editor.is_generating,
            "is_exporting": editor.is_exporting,
        }

    def save_session(self, session_id: str) -> bool:
        """Explicitly save session to disk."""
        if session_id in self._cache:
            self._meta.setdefault(session_id, {})["updated_at"] = datetime.now().isoformat()
            self._save_session(session_id)
            return True
        return False

    def delete_session(self, session_id: str) -> bool:
        """Remove a session from cache and disk."""
        found = self._cache.pop(session_id, None) is not None
        self._meta.pop(session_id, None)
        session_path = self._session_path(session_id)
        if session_path.exists():
            session_path.unlink()
            found = True
        if found:
            logger.info(f"[STATE-MANAGER] Deleted session {session_id}")
        return found

    def list_sessions(self) -> List[str]:
        on_disk = {p.stem for p in self.sessions_dir.glob("*.json")}
        return sorted(on_disk | set(self._cache))

    def _save_session(self, session_id: str):
        """Save session to disk."""
        editor = self._cache.get(session_id)
        if editor is None:
            return
        document = {"id": session_id, **self._meta.get(session_id, {}), **editor.to_document()}
        with open(self._session_path(session_id), "w") as f:
            json.dump(document, f, indent=2)
