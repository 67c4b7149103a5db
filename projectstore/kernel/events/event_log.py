"""
Append-only project audit log.

post_event is deliberately soft-failing: audit logging accompanies primary
actions (create, upload, permission change) and must never abort them.
"""

from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from projectstore.config import get_settings
from projectstore.database import async_session_maker, session_scope
from projectstore.kernel.models.event_log import EventType, ProjectEvent
from projectstore.logging_config import get_logger
from projectstore.schemas.event import ProjectLogEvent
from projectstore.schemas.project import Project

logger = get_logger(__name__)


def new_event(project_id: int, event_type: EventType, user: str, message: str) -> ProjectEvent:
    """Build an event row for callers that commit it in their own transaction."""
    return ProjectEvent(
        project_id=project_id,
        event_type=event_type.value,
        username=user,
        message=message or "",
    )


class EventLog:
    """
    Service for the per-project audit trail.

    Usage:
        events = EventLog(session_maker)
        await events.post_event(project, EventType.UPLOADED, "alice", "Uploaded v3")
        recent = await events.get_project_events(project, limit=20)
    """

    def __init__(self, session_maker: Optional[async_sessionmaker[AsyncSession]] = None):
        self.session_maker = session_maker or async_session_maker

    async def post_event(
        self,
        project: Project,
        event_type: EventType,
        user: str,
        message: str,
    ) -> bool:
        """
        Append an event in its own transaction.

        Returns:
            True if the event was stored, False if the backend rejected it.
            Never raises.
        """
        try:
            async with session_scope(self.session_maker) as session:
                session.add(new_event(project.id, event_type, user, message))
        except Exception:
            logger.exception(
                "Failed to post %s event for project %s",
                getattr(event_type, "value", event_type),
                project.id,
                extra={"project_id": project.id, "user": user},
            )
            return False
        return True

    async def get_project_events(
        self,
        project: Project,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[ProjectLogEvent]:
        """
        Get a page of events for a project, newest first.

        Args:
            project: The project
            limit: Maximum number of events (default: settings.event_page_size)
            offset: Number of events to skip

        Raises:
            StorageError: If the backend fails
        """
        if limit is None:
            limit = get_settings().event_page_size
        query = (
            select(ProjectEvent)
            .where(ProjectEvent.project_id == project.id)
            .order_by(desc(ProjectEvent.created_at), desc(ProjectEvent.id))
            .offset(offset)
            .limit(limit)
        )
        async with session_scope(self.session_maker) as session:
            result = await session.execute(query)
            return [ProjectLogEvent.from_row(row) for row in result.scalars().all()]
