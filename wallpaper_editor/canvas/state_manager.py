"""
Editor State Manager
====================

Keeps editor sessions in memory. Layouts are never persisted; leaving the
editor or evicting a session discards it.
"""

import asyncio
import logging
import os
import uuid
from collections import OrderedDict
from datetime import datetime
from typing import Dict, List, Optional

from PIL import Image

from ..models.editor_models import SetImageSizeAction
from ..render.scene import SceneView
from .drag import DragController
from .properties import PropertyPanel
from .store import EditorStore
from .viewport import ViewportController

logger = logging.getLogger(__name__)

MAX_SESSIONS = int(os.getenv("EDITOR_MAX_SESSIONS", "100"))


class EditorSession:
    """One open editor: background, item store and its controllers."""

    def __init__(
        self,
        session_id: str,
        background: Image.Image,
        image_url: Optional[str] = None,
        name: Optional[str] = None
    ):
        self.session_id = session_id
        self.background = background
        self.image_url = image_url
        self.name = name
        self.created_at = datetime.now()
        self.updated_at: Optional[datetime] = None

        self.store = EditorStore()
        self.store.dispatch(SetImageSizeAction(width=background.width, height=background.height))
        self.viewport = ViewportController(self.store)
        self.drag = DragController(self.store)
        self.panel = PropertyPanel(self.store)
        self.scene_view = SceneView(self.store, background.size)
        self.export_lock = asyncio.Lock()
        self.store.subscribe(self._touch)

    def _touch(self, _state) -> None:
        self.updated_at = datetime.now()

    def close(self) -> None:
        # The background is left to garbage collection; an export running in a
        # worker thread may still be painting it
        self.scene_view.close()

    def summary(self) -> Dict[str, object]:
        return {
            "session_id": self.session_id,
            "image_url": self.image_url,
            "name": self.name,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class StateManager:
    """Manages editor sessions."""

    def __init__(self, max_sessions: int = MAX_SESSIONS):
        self.max_sessions = max(1, max_sessions)
        self._sessions: "OrderedDict[str, EditorSession]" = OrderedDict()
        logger.info(f"[STATE-MANAGER] Initialized with max_sessions={self.max_sessions}")

    def create_session(
        self,
        background: Image.Image,
        image_url: Optional[str] = None,
        name: Optional[str] = None,
        session_id: Optional[str] = None
    ) -> EditorSession:
        """Open a new editor over a decoded background image."""
        if session_id is None:
            session_id = str(uuid.uuid4())

        while len(self._sessions) >= self.max_sessions:
            evicted_id, evicted = self._sessions.popitem(last=False)
            evicted.close()
            logger.warning(f"[STATE-MANAGER] Evicted session {evicted_id} (limit {self.max_sessions})")

        session = EditorSession(session_id, background, image_url=image_url, name=name)
        self._sessions[session_id] = session
        logger.info(
            f"[STATE-MANAGER] Created session {session_id} "
            f"({background.width}x{background.height}, name={name!r})"
        )
        return session

    def get_session(self, session_id: str) -> Optional[EditorSession]:
        """Get a session and mark it recently used."""
        session = self._sessions.get(session_id)
        if session is not None:
            self._sessions.move_to_end(session_id)
        return session

    def remove_session(self, session_id: str) -> bool:
        """Discard a session."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.close()
        logger.info(f"[STATE-MANAGER] Removed session {session_id}")
        return True

    def list_sessions(self) -> List[Dict[str, object]]:
        return [s.summary() for s in self._sessions.values()]

    def clear(self) -> None:
        for session_id in list(self._sessions):
            self.remove_session(session_id)

    def __len__(self) -> int:
        return len(self._sessions)
