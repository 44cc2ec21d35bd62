"""
Session management for coordinator windows
Tracks one expiring session per window together with its access log
"""
import logging
from datetime import datetime, timedelta
from typing import Dict, Optional

from .models import AccessEntry, Session

logger = logging.getLogger(__name__)

DATA_ACCESS_ACTION = "data-access"


class SessionManager:
    """Creates, looks up and expires per-window sessions"""

    def __init__(self, max_age_seconds: float = 30 * 60):
        self.sessions: Dict[str, Session] = {}
        self.max_age = timedelta(seconds=max_age_seconds)

    def _is_expired(self, session: Session, now: datetime) -> bool:
        """Shared expiry check for lazy lookup and the periodic sweep"""
        return now - session.created_at > self.max_age

    def create_session(self, session_id: str) -> Session:
        """Create a new session, replacing any existing one with the same id"""
        now = datetime.now()
        session = Session(
            session_id=session_id,
            created_at=now,
            last_activity=now
        )
        self.sessions[session_id] = session
        logger.info(f"Session created: {session_id}")
        return session

    def get_session(self, session_id: str) -> Optional[Session]:
        """Get a live session, removing it if it has expired"""
        if not (session := self.sessions.get(session_id)):
            logger.warning(f"Session not found: {session_id}")
            return None

        now = datetime.now()
        if self._is_expired(session, now):
            logger.warning(f"Session expired: {session_id}")
            del self.sessions[session_id]
            return None

        session.last_activity = now
        return session

    def log_access(self, session_id: str, action: str, details: str) -> None:
        """Append an access entry to a live session"""
        if not (session := self.get_session(session_id)):
            return

        session.access_log.append(AccessEntry(
            timestamp=datetime.now(),
            action=action,
            details=details
        ))

        if action == DATA_ACCESS_ACTION:
            session.data_access_count += 1

    def destroy_session(self, session_id: str) -> None:
        """Remove a session; unknown ids are ignored"""
        if self.sessions.pop(session_id, None) is not None:
            logger.info(f"Session destroyed: {session_id}")

    def cleanup_expired_sessions(self) -> int:
        """Remove every expired session and return how many were removed"""
        now = datetime.now()
        expired = [
            session_id
            for session_id, session in self.sessions.items()
            if self._is_expired(session, now)
        ]

        for session_id in expired:
            self.destroy_session(session_id)

        if expired:
            logger.info(f"Removed {len(expired)} expired sessions")
        return len(expired)
