"""
Project lifecycle and the project aggregate.

ProjectStore owns the project rows and composes the per-project components
(events, permissions, versions, properties, flows) so callers hold a single
entry point.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from projectstore.database import async_session_maker, session_scope
from projectstore.errors import (
    ConstraintViolationError,
    DuplicateNameError,
    NotFoundError,
)
from projectstore.kernel.events.event_log import EventLog, new_event
from projectstore.kernel.flows.flow_store import FlowStore
from projectstore.kernel.lookups import require_locked_project
from projectstore.kernel.models import (
    DESCRIPTION_MAX_LENGTH,
    NAME_MAX_LENGTH,
    USER_MAX_LENGTH,
    EventType,
    Permission,
    Project as ProjectRow,
    permission_names,
)
from projectstore.kernel.permissions.permission_registry import (
    PermissionRegistry,
    upsert_permission,
)
from projectstore.kernel.properties.property_store import PropertyStore
from projectstore.kernel.versions.transport import ArtifactTransport
from projectstore.kernel.versions.version_store import VersionStore
from projectstore.logging_config import get_logger
from projectstore.schemas.project import PermissionEntry, Project

logger = get_logger(__name__)


def _check_length(field: str, value: Optional[str], limit: int, *, required: bool = True) -> None:
    if required and not value:
        raise ConstraintViolationError(f"{field} must not be empty")
    if value is not None and len(value) > limit:
        raise ConstraintViolationError(f"{field} exceeds {limit} characters")


class ProjectStore:
    """
    Service for project lifecycle operations.

    Usage:
        store = ProjectStore(session_maker)
        project = await store.create_new_project("etl-pipeline", "Nightly ETL", "alice")
        await store.versions.add_project_version(project.id, 1, archive, "alice", md5, rid)
        await store.update_permission(project, "ops", Permission.READ | Permission.EXECUTE, is_group=True)
    """

    def __init__(
        self,
        session_maker: Optional[async_sessionmaker[AsyncSession]] = None,
        transport: Optional[ArtifactTransport] = None,
    ):
        self.session_maker = session_maker or async_session_maker
        self.events = EventLog(self.session_maker)
        self.permissions = PermissionRegistry(self.session_maker)
        self.versions = VersionStore(self.session_maker, transport=transport)
        self.properties = PropertyStore(self.session_maker)
        self.flows = FlowStore(self.session_maker)

    # Fetching

    async def fetch_all_active_projects(self) -> List[Project]:
        """Active projects with their permissions, ordered by id."""
        async with session_scope(self.session_maker) as session:
            result = await session.execute(
                select(ProjectRow)
                .where(ProjectRow.active == True)  # noqa: E712
                .order_by(ProjectRow.id)
            )
            return [Project.from_row(row) for row in result.scalars().all()]

    async def fetch_project_by_id(self, project_id: int) -> Project:
        """
        Raises:
            NotFoundError: If no project has this id
        """
        async with session_scope(self.session_maker) as session:
            row = await session.get(ProjectRow, project_id)
            if row is None:
                raise NotFoundError(f"Project {project_id} not found")
            return Project.from_row(row)

    async def fetch_project_by_name(self, name: str) -> Project:
        """
        Fetch the active project with this name, or the most recently
        created inactive one when the name is not in use.

        Raises:
            NotFoundError: If no project ever had this name
        """
        async with session_scope(self.session_maker) as session:
            result = await session.execute(
                select(ProjectRow)
                .where(ProjectRow.name == name)
                .order_by(ProjectRow.active.desc(), ProjectRow.id.desc())
                .limit(1)
            )
            row = result.scalars().first()
            if row is None:
                raise NotFoundError(f"Project {name!r} not found")
            return Project.from_row(row)

    # Lifecycle

    async def create_new_project(self, name: str, description: str, creator: str) -> Project:
        """
        Create an empty project and grant the creator ADMIN.

        Raises:
            DuplicateNameError: If an active project already uses the name
            ConstraintViolationError: If name, description or creator break size limits
        """
        _check_length("Project name", name, NAME_MAX_LENGTH)
        _check_length("Description", description, DESCRIPTION_MAX_LENGTH, required=False)
        _check_length("Creator", creator, USER_MAX_LENGTH)

        async with session_scope(self.session_maker) as session:
            clash = await session.execute(
                select(ProjectRow.id).where(
                    ProjectRow.name == name,
                    ProjectRow.active == True,  # noqa: E712
                )
            )
            if clash.first() is not None:
                raise DuplicateNameError(name)

            row = ProjectRow(
                name=name,
                description=description or "",
                active=True,
                version=0,
                last_version=0,
                settings={},
                created_by=creator,
                last_modified_by=creator,
            )
            session.add(row)
            try:
                await session.flush()
            except IntegrityError as exc:
                # Lost the race to a concurrent creator; the partial index caught it
                raise DuplicateNameError(name) from exc

            await upsert_permission(session, row.id, creator, Permission.ADMIN, False)
            await session.refresh(row, attribute_names=["created_at", "updated_at"])

            project = Project(
                id=row.id,
                name=row.name,
                description=row.description,
                active=True,
                version=0,
                created_by=creator,
                last_modified_by=creator,
                created_at=row.created_at,
                updated_at=row.updated_at,
                permissions=[PermissionEntry(creator, False, Permission.ADMIN)],
            )

        logger.info("Created project %s (%s) for %s", project.id, name, creator)
        await self.events.post_event(project, EventType.CREATED, creator, f"Created project {name}")
        return project

    async def remove_project(self, project: Project, user: str) -> None:
        """
        Soft-delete: mark the project inactive. Versions, properties, flows,
        permissions and events are left in place. Removing an inactive
        project is a no-op.

        Raises:
            NotFoundError: If the project id does not exist
        """
        async with session_scope(self.session_maker) as session:
            row = await require_locked_project(session, project.id)
            if not row.active:
                logger.debug("Project %s already inactive", project.id)
                project.active = False
                return
            row.active = False
            row.last_modified_by = user

        project.active = False
        project.last_modified_by = user
        logger.info("Removed project %s (%s) by %s", project.id, project.name, user)
        await self.events.post_event(project, EventType.DELETED, user, f"Removed project {project.name}")

    async def update_description(self, project: Project, description: str, user: str) -> None:
        """
        Change the description; the DESCRIPTION event commits with it.

        Raises:
            ConstraintViolationError: If the description is too long
            NotFoundError: If the project does not exist
        """
        _check_length("Description", description, DESCRIPTION_MAX_LENGTH, required=False)

        async with session_scope(self.session_maker) as session:
            row = await require_locked_project(session, project.id)
            row.description = description or ""
            row.last_modified_by = user
            session.add(
                new_event(project.id, EventType.DESCRIPTION, user, f"Description changed to {description!r}")
            )

        project.description = description or ""
        project.last_modified_by = user

    async def update_project_settings(self, project: Project) -> None:
        """Persist ``project.settings`` under the project row lock."""
        async with session_scope(self.session_maker) as session:
            row = await require_locked_project(session, project.id)
            row.settings = dict(project.settings)
            row.last_modified_by = project.last_modified_by

        await self.events.post_event(
            project, EventType.SETTINGS, project.last_modified_by, "Project settings updated"
        )

    # Permissions

    async def update_permission(
        self,
        project: Project,
        principal: str,
        permission: Permission,
        is_group: bool = False,
        user: Optional[str] = None,
    ) -> None:
        """
        Upsert an entry; Permission.NONE removes it.

        ``user`` is recorded on the audit event and defaults to
        ``project.last_modified_by``.
        """
        if not permission:
            await self.remove_permission(project, principal, is_group, user)
            return

        await self.permissions.update_permission(project.id, principal, permission, is_group)
        project.set_permission(principal, permission, is_group)
        await self.events.post_event(
            project,
            EventType.GROUP_PERMISSION if is_group else EventType.USER_PERMISSION,
            user or project.last_modified_by,
            f"Permission for {principal} set to {permission_names(permission)}",
        )

    async def remove_permission(
        self,
        project: Project,
        principal: str,
        is_group: bool = False,
        user: Optional[str] = None,
    ) -> None:
        """Drop an entry; absent entries are ignored."""
        removed = await self.permissions.remove_permission(project.id, principal, is_group)
        project.set_permission(principal, Permission.NONE, is_group)
        if removed:
            await self.events.post_event(
                project,
                EventType.GROUP_PERMISSION if is_group else EventType.USER_PERMISSION,
                user or project.last_modified_by,
                f"Permission for {principal} removed",
            )

    async def get_project_permissions(self, project_id: int) -> List[PermissionEntry]:
        return await self.permissions.get_project_permissions(project_id)
