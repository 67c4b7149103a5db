"""
Audit event schema.
"""

from datetime import datetime

from pydantic import BaseModel

from projectstore.kernel.models.event_log import EventType


class ProjectLogEvent(BaseModel):
    """Project audit event as returned by get_project_events."""

    project_id: int
    type: EventType
    user: str
    message: str
    timestamp: datetime

    @classmethod
    def from_row(cls, row) -> "ProjectLogEvent":
        return cls(
            project_id=row.project_id,
            type=EventType(row.event_type),
            user=row.username,
            message=row.message,
            timestamp=row.created_at,
        )
