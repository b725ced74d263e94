"""Server-side session rows backing the session cookie."""

from datetime import datetime
from sqlalchemy import String, Integer, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from kingdom_access.models.base import Base, TimestampMixin


class SessionRecord(Base, TimestampMixin):
    """
    Key-value session state keyed by the opaque id carried in the cookie.

    version is bumped on every write; writers compare it to detect a
    concurrent update of the same session.
    """

    __tablename__ = "sessions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<SessionRecord(user_id='{self.user_id}', version={self.version})>"
