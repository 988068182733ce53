"""In-memory store for content sessions.

Sessions are lost on server restart; a generation result is only useful
while the user works on it.

Features:
- TTL cleanup (1-hour default, SESSION_TTL_SECONDS) via periodic task
- Concurrency-safe operations via asyncio locks
- Simple create/get/delete operations
"""

from __future__ import annotations

import asyncio
import logging
import os
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from teeshot.content import clean_content, detect_format
from teeshot.models import ContentRequest, ContentSession, GeneratedContent

logger = logging.getLogger(__name__)

# Default TTL for idle sessions (1 hour)
DEFAULT_SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", "3600"))

# How often to run cleanup (5 minutes)
CLEANUP_INTERVAL_SECONDS = 300


class SessionStore:
    """In-memory session store with TTL cleanup.

    Usage:
        store = SessionStore()
        session = await store.create_session(generated, request)
        session = await store.get_session(session.session_id)
    """

    def __init__(self, ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS):
        """Initialize session store.

        Args:
            ttl_seconds: Idle time after which a session is removed.
        """
        self._sessions: dict[str, ContentSession] = {}
        self._lock = asyncio.Lock()
        self._ttl_seconds = ttl_seconds
        self._cleanup_task: Optional[asyncio.Task] = None

    async def start_cleanup_task(self) -> None:
        """Start the background cleanup task."""
        if self._cleanup_task is None or self._cleanup_task.done():
            self._cleanup_task = asyncio.create_task(self._cleanup_loop())
            logger.info("Session store cleanup task started")

    async def stop_cleanup_task(self) -> None:
        """Stop the background cleanup task."""
        if self._cleanup_task and not self._cleanup_task.done():
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
            logger.info("Session store cleanup task stopped")

    async def _cleanup_loop(self) -> None:
        """Periodically clean up expired sessions."""
        while True:
            try:
                await asyncio.sleep(CLEANUP_INTERVAL_SECONDS)
                await self.cleanup_expired_sessions()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in cleanup loop: {e}")

    async def cleanup_expired_sessions(self) -> int:
        """Remove sessions not touched for longer than the TTL.

        Returns:
            Number of sessions removed.
        """
        async with self._lock:
            now = datetime.now(timezone.utc)
            expired_ids = [
                session_id
                for session_id, session in self._sessions.items()
                if (now - session.updated_at).total_seconds() > self._ttl_seconds
            ]

            for session_id in expired_ids:
                del self._sessions[session_id]

            if expired_ids:
                logger.info(f"Cleaned up {len(expired_ids)} expired sessions")

            return len(expired_ids)

    async def create_session(
        self,
        generated: GeneratedContent,
        request: Optional[ContentRequest] = None,
    ) -> ContentSession:
        """Create a session for a new generation result.

        The content format is detected once here, using the request's format
        as the hint.
        """
        session = ContentSession(
            session_id=str(uuid4()),
            request=request,
            generated=generated,
            format=detect_format(clean_content(generated.content), request.format if request else None),
        )

        async with self._lock:
            self._sessions[session.session_id] = session

        logger.debug(
            f"Created session {session.session_id}",
            extra={"session_id": session.session_id, "content_format": session.format.value},
        )
        return session

    async def get_session(self, session_id: str) -> Optional[ContentSession]:
        """Get a session by ID, or None if unknown or expired."""
        async with self._lock:
            return self._sessions.get(session_id)

    async def delete_session(self, session_id: str) -> bool:
        """Delete a session.

        Returns:
            True if deleted, False if not found.
        """
        async with self._lock:
            if session_id in self._sessions:
                del self._sessions[session_id]
                logger.debug(f"Deleted session {session_id}", extra={"session_id": session_id})
                return True
            return False

    def __len__(self) -> int:
        """Return total number of sessions in store."""
        return len(self._sessions)


# Module-level singleton instance
_default_store: Optional[SessionStore] = None


def get_session_store() -> SessionStore:
    """Get the default session store singleton.

    Creates the store on first access.
    """
    global _default_store
    if _default_store is None:
        _default_store = SessionStore()
    return _default_store


async def create_session(
    generated: GeneratedContent,
    request: Optional[ContentRequest] = None,
) -> ContentSession:
    """Create a session using the default store."""
    return await get_session_store().create_session(generated, request)


async def get_session(session_id: str) -> Optional[ContentSession]:
    """Get a session by ID using the default store."""
    return await get_session_store().get_session(session_id)


async def delete_session(session_id: str) -> bool:
    """Delete a session using the default store."""
    return await get_session_store().delete_session(session_id)
