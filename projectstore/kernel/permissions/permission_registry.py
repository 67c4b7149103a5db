"""
Per-project access-control entries.

Entries are keyed by (project, principal, is_group). Writes take the project
row lock first, so concurrent updates to the same key serialize and the
primary key never sees a duplicate insert.
"""

from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from projectstore.database import async_session_maker, session_scope
from projectstore.errors import ConstraintViolationError, NotFoundError
from projectstore.kernel.lookups import lock_project_row
from projectstore.kernel.models.permission import Permission, ProjectPermission
from projectstore.kernel.models.project import USER_MAX_LENGTH
from projectstore.logging_config import get_logger
from projectstore.schemas.project import PermissionEntry

logger = get_logger(__name__)


def _check_principal(principal: str) -> None:
    if not principal:
        raise ConstraintViolationError("Principal must not be empty")
    if len(principal) > USER_MAX_LENGTH:
        raise ConstraintViolationError(
            f"Principal exceeds {USER_MAX_LENGTH} characters: {principal[:20]}..."
        )


async def upsert_permission(
    session: AsyncSession,
    project_id: int,
    principal: str,
    permission: Permission,
    is_group: bool,
) -> None:
    """Insert or overwrite one entry inside the caller's transaction."""
    row = await session.get(ProjectPermission, (project_id, principal, is_group))
    if row is None:
        session.add(
            ProjectPermission(
                project_id=project_id,
                principal=principal,
                is_group=is_group,
                permissions=int(permission),
            )
        )
    else:
        row.permissions = int(permission)
    await session.flush()


class PermissionRegistry:
    """
    Service for project permission entries.

    Zero rights are stored as "no entry": updating to Permission.NONE is the
    same as removing.
    """

    def __init__(self, session_maker: Optional[async_sessionmaker[AsyncSession]] = None):
        self.session_maker = session_maker or async_session_maker

    async def update_permission(
        self,
        project_id: int,
        principal: str,
        permission: Permission,
        is_group: bool = False,
    ) -> None:
        """
        Add or overwrite the rights of a user or group.

        Raises:
            NotFoundError: If the project does not exist
            ConstraintViolationError: If the principal name is empty or too long
        """
        _check_principal(principal)
        if not permission:
            await self.remove_permission(project_id, principal, is_group)
            return

        async with session_scope(self.session_maker) as session:
            if not await lock_project_row(session, project_id):
                raise NotFoundError(f"Project {project_id} not found")
            await upsert_permission(session, project_id, principal, permission, is_group)

        logger.info(
            "Set %s %s permission on project %s to %s",
            "group" if is_group else "user",
            principal,
            project_id,
            int(permission),
        )

    async def remove_permission(
        self,
        project_id: int,
        principal: str,
        is_group: bool = False,
    ) -> bool:
        """
        Drop an entry. Absent entries are not an error.

        Returns:
            True if an entry was removed
        """
        async with session_scope(self.session_maker) as session:
            if not await lock_project_row(session, project_id):
                raise NotFoundError(f"Project {project_id} not found")
            result = await session.execute(
                delete(ProjectPermission).where(
                    ProjectPermission.project_id == project_id,
                    ProjectPermission.principal == principal,
                    ProjectPermission.is_group == is_group,
                )
            )
            removed = result.rowcount > 0

        if removed:
            logger.info(
                "Removed %s %s permission from project %s",
                "group" if is_group else "user",
                principal,
                project_id,
            )
        return removed

    async def get_project_permissions(self, project_id: int) -> List[PermissionEntry]:
        async with session_scope(self.session_maker) as session:
            result = await session.execute(
                select(ProjectPermission)
                .where(ProjectPermission.project_id == project_id)
                .order_by(ProjectPermission.is_group, ProjectPermission.principal)
            )
            return [
                PermissionEntry(row.principal, row.is_group, Permission(row.permissions))
                for row in result.scalars().all()
            ]
