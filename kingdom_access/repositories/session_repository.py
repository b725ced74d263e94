"""Server-side session storage keyed by the session cookie."""

import logging
import secrets
import threading
from datetime import timedelta
from typing import Any, Callable

from sqlalchemy.orm import Session

from kingdom_access.core.exceptions import NotFoundException, SessionConflictError
from kingdom_access.models.base import utcnow
from kingdom_access.models.session_record import SessionRecord

logger = logging.getLogger(__name__)

# Striped locks serialize read-modify-write of the same session within this
# process; the version column catches writers in other processes.
_LOCK_STRIPES = 64
_session_locks = [threading.Lock() for _ in range(_LOCK_STRIPES)]


def _lock_for(session_id: str) -> threading.Lock:
    return _session_locks[hash(session_id) % _LOCK_STRIPES]


class SessionStore:
    """
    Key-value session state persisted in the sessions table.

    Reads return None for missing or expired sessions. Writes are applied
    atomically per session: under a per-session lock, and only if the row
    version is unchanged since it was read.
    """

    def __init__(self, db: Session, ttl_seconds: int):
        self.db = db
        self.ttl_seconds = ttl_seconds

    def load(self, session_id: str) -> SessionRecord | None:
        """Get a live session row, or None if missing or expired."""
        record = self.db.query(SessionRecord).filter(SessionRecord.id == session_id).first()
        if record is None or record.expires_at <= utcnow():
            return None
        return record

    def create(self, user_id: str) -> SessionRecord:
        """
        Start a new, empty session bound to user_id.

        Expired rows are purged first, so the table only holds live sessions
        plus those that lapsed since the last session was started.
        """
        self.purge_expired()
        record = SessionRecord(
            id=secrets.token_urlsafe(32),
            user_id=user_id,
            data={},
            version=1,
            expires_at=utcnow() + timedelta(seconds=self.ttl_seconds),
        )
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        logger.debug("Created session for user %s", user_id)
        return record

    def get(self, session_id: str, key: str, default: Any = None) -> Any:
        record = self.load(session_id)
        if record is None:
            return default
        return record.data.get(key, default)

    def set(self, session_id: str, key: str, value: Any) -> None:
        def apply(data: dict) -> None:
            data[key] = value

        self._mutate(session_id, apply)

    def delete(self, session_id: str, key: str) -> bool:
        """Remove key from the session. Returns whether it was present."""
        return self._mutate(session_id, lambda data: data.pop(key, None) is not None)

    def purge_expired(self) -> int:
        """Delete expired sessions. Returns the number removed."""
        removed = (
            self.db.query(SessionRecord)
            .filter(SessionRecord.expires_at <= utcnow())
            .delete(synchronize_session=False)
        )
        self.db.commit()
        if removed:
            logger.debug("Purged %d expired sessions", removed)
        return removed

    def _mutate(self, session_id: str, apply: Callable[[dict], Any]) -> Any:
        """
        Read-modify-write the session data as one atomic step.

        Raises:
            NotFoundException: If the session is missing or expired
            SessionConflictError: If another writer updated the row first
        """
        with _lock_for(session_id):
            record = self.load(session_id)
            if record is None:
                raise NotFoundException("Session not found or expired")

            data = dict(record.data or {})
            result = apply(data)

            updated = (
                self.db.query(SessionRecord)
                .filter(
                    SessionRecord.id == session_id,
                    SessionRecord.version == record.version,
                )
                .update(
                    {
                        SessionRecord.data: data,
                        SessionRecord.version: record.version + 1,
                        SessionRecord.updated_at: utcnow(),
                    },
                    synchronize_session=False,
                )
            )
            if updated != 1:
                self.db.rollback()
                raise SessionConflictError("Session was modified by a concurrent request")

            self.db.commit()
            return result
