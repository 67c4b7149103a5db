"""
Row lookups and locks shared by the stores.

All helpers run inside the caller's transaction.
"""

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from projectstore.errors import NotFoundError
from projectstore.kernel.models import Project, ProjectVersion


async def lock_project_row(session: AsyncSession, project_id: int) -> bool:
    """
    Take the write lock on a project row for the rest of the transaction.

    A no-op UPDATE locks the row on PostgreSQL and acquires the database
    write lock on SQLite, so it serializes writers on both. Returns False
    when the project does not exist.
    """
    result = await session.execute(
        update(Project)
        .where(Project.id == project_id)
        .values(version=Project.version)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount > 0


async def require_locked_project(session: AsyncSession, project_id: int) -> Project:
    if not await lock_project_row(session, project_id):
        raise NotFoundError(f"Project {project_id} not found")
    row = await session.get(Project, project_id, populate_existing=True)
    assert row is not None
    return row


async def current_version(session: AsyncSession, project_id: int) -> int:
    """Stored current-version pointer; 0 when nothing has been registered."""
    result = await session.execute(
        select(Project.version).where(Project.id == project_id)
    )
    version = result.scalar_one_or_none()
    if version is None:
        raise NotFoundError(f"Project {project_id} not found")
    return version


async def version_exists(session: AsyncSession, project_id: int, version: int) -> bool:
    result = await session.execute(
        select(ProjectVersion.version).where(
            ProjectVersion.project_id == project_id,
            ProjectVersion.version == version,
        )
    )
    return result.scalar_one_or_none() is not None


async def require_version(session: AsyncSession, project_id: int, version: int) -> None:
    if not await version_exists(session, project_id, version):
        raise NotFoundError(f"Version {version} of project {project_id} not found")
