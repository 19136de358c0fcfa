# Browsing sessions: per-user state: selected disk, backend, current path and cached token.
# Created: 2026-10-16

from __future__ import annotations

import asyncio
import logging
import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pocketdrive.config import Settings
    from pocketdrive.integrations.oauth import OAuthToken
    from pocketdrive.storage.base import StorageBackend

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Session:
    """One user's browsing context."""

    id: str
    disk: str
    backend: StorageBackend | None = None
    current_path: str = ""
    token: OAuthToken | None = None
    token_lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)
    path_listeners: list[Callable[[str], None]] = field(default_factory=list, repr=False)
    last_seen: float = 0.0


class SessionManager:
    """In-process registry of sessions keyed by session id.

    Sessions with no request for ``settings.session_idle_timeout`` seconds are
    dropped the next time a caller resolves a session.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._settings = settings
        self._clock = clock
        self._sessions: dict[str, Session] = {}

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            from pocketdrive.config import get_settings

            self._settings = get_settings()
        return self._settings

    def _is_idle(self, session: Session, now: float) -> bool:
        return now - session.last_seen > self.settings.session_idle_timeout

    def get(self, session_id: str | None) -> Session | None:
        if not session_id:
            return None
        session = self._sessions.get(session_id)
        if session is not None and self._is_idle(session, self._clock()):
            self.drop(session_id)
            return None
        return session

    def create(self, disk: str | None = None) -> Session:
        """Create a session on *disk* (default disk when omitted)."""
        from pocketdrive.storage import build_backend

        name = disk or self.settings.default_disk
        config = self.settings.get_disk(name)
        session = Session(id=secrets.token_urlsafe(16), disk=name, last_seen=self._clock())
        session.backend = build_backend(name, config, session, self.settings)
        self._sessions[session.id] = session
        logger.debug("Created session %s on disk %s", session.id, name)
        return session

    def get_or_create(self, session_id: str | None, disk: str | None = None) -> Session:
        """Return the existing session, or a new one when missing, idle or on another disk."""
        self.prune()
        session = self.get(session_id)
        if session is not None and (disk is None or disk == session.disk):
            session.last_seen = self._clock()
            return session
        if session is not None:
            self.drop(session.id)
        return self.create(disk)

    def prune(self) -> int:
        """Drop idle sessions and return how many were removed."""
        now = self._clock()
        idle = [sid for sid, s in self._sessions.items() if self._is_idle(s, now)]
        for sid in idle:
            del self._sessions[sid]
        if idle:
            logger.debug("Dropped %d idle session(s)", len(idle))
        return len(idle)

    def drop(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)


_manager: SessionManager | None = None


def get_session_manager() -> SessionManager:
    global _manager
    if _manager is None:
        _manager = SessionManager()
    return _manager
