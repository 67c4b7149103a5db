"""
Append-only project audit trail.

Rows are never updated or deleted; retrieval orders by timestamp with the
auto-incrementing id as tie-break so the order matches commit order.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from projectstore.kernel.models.base import Base, utcnow
from projectstore.kernel.models.project import USER_MAX_LENGTH


class EventType(str, Enum):
    """All event types for the project audit log."""
    CREATED = "created"
    DELETED = "deleted"
    USER_PERMISSION = "user_permission"
    GROUP_PERMISSION = "group_permission"
    DESCRIPTION = "description"
    UPLOADED = "uploaded"
    VERSION_CHANGED = "version_changed"
    SETTINGS = "settings"


class ProjectEvent(Base):
    """Immutable audit event."""

    __tablename__ = "project_events"

    # Doubles as the commit-order sequence
    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    project_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    event_type: Mapped[EventType] = mapped_column(
        String(50),
        nullable=False,
    )
    username: Mapped[str] = mapped_column(
        String(USER_MAX_LENGTH),
        nullable=False,
    )
    message: Mapped[str] = mapped_column(
        Text,
        default="",
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    __table_args__ = (
        Index("ix_project_events_project_time", "project_id", "created_at", "id"),
    )

    def __repr__(self) -> str:
        return f"<ProjectEvent {self.project_id} {self.event_type}>"
