"""
Per-version property bundles.
"""

from typing import Dict, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from projectstore.database import async_session_maker, session_scope
from projectstore.errors import NotFoundError
from projectstore.kernel.lookups import current_version, require_locked_project, require_version
from projectstore.kernel.models.property import ProjectProperty
from projectstore.logging_config import get_logger
from projectstore.schemas.project import Project
from projectstore.schemas.props import Props

logger = get_logger(__name__)


def _to_props(row: ProjectProperty) -> Props:
    return Props.from_pairs(row.path_name, ((k, v) for k, v in row.entries))


class PropertyStore:
    """
    Service for Props bundles keyed by (project, version, path name).

    Writes target ``project.version``, the version context the caller holds;
    they hold the project row lock so they serialize with cleanup.
    project-only reads resolve the stored current-version pointer.
    """

    def __init__(self, session_maker: Optional[async_sessionmaker[AsyncSession]] = None):
        self.session_maker = session_maker or async_session_maker

    async def _write(self, project: Project, bundles: Iterable[Props]) -> int:
        count = 0
        async with session_scope(self.session_maker) as session:
            await require_locked_project(session, project.id)
            await require_version(session, project.id, project.version)
            for props in bundles:
                await session.merge(
                    ProjectProperty(
                        project_id=project.id,
                        version=project.version,
                        path_name=props.path_name,
                        entries=props.to_pairs(),
                    )
                )
                count += 1
        return count

    async def upload_project_property(self, project: Project, props: Props) -> None:
        """
        Store one bundle for the project's version, replacing any bundle
        with the same path name.

        Raises:
            NotFoundError: If ``project.version`` is not a registered version
        """
        await self._write(project, [props])
        logger.debug(
            "Stored property %s for project %s v%s",
            props.path_name, project.id, project.version,
        )

    async def upload_project_properties(self, project: Project, properties: Iterable[Props]) -> None:
        """Store several bundles in one transaction."""
        count = await self._write(project, list(properties))
        logger.info(
            "Stored %d properties for project %s v%s", count, project.id, project.version
        )

    async def update_project_property(self, project: Project, props: Props) -> None:
        """Overwrite a bundle; same storage effect as upload."""
        await self._write(project, [props])

    async def fetch_project_property(self, project: Project, path_name: str) -> Props:
        """
        Fetch a bundle from the project's current version.

        Raises:
            NotFoundError: If the project or the bundle does not exist
        """
        async with session_scope(self.session_maker) as session:
            version = await current_version(session, project.id)
            row = await session.get(ProjectProperty, (project.id, version, path_name))
            if row is None:
                raise NotFoundError(
                    f"Property {path_name!r} not found for project {project.id} v{version}"
                )
            return _to_props(row)

    async def fetch_project_property_by_version(
        self,
        project_id: int,
        version: int,
        path_name: str,
    ) -> Props:
        async with session_scope(self.session_maker) as session:
            row = await session.get(ProjectProperty, (project_id, version, path_name))
            if row is None:
                raise NotFoundError(
                    f"Property {path_name!r} not found for project {project_id} v{version}"
                )
            return _to_props(row)

    async def fetch_project_properties(self, project_id: int, version: int) -> Dict[str, Props]:
        """All bundles of one version, keyed by path name."""
        async with session_scope(self.session_maker) as session:
            result = await session.execute(
                select(ProjectProperty)
                .where(
                    ProjectProperty.project_id == project_id,
                    ProjectProperty.version == version,
                )
                .order_by(ProjectProperty.path_name)
            )
            return {row.path_name: _to_props(row) for row in result.scalars().all()}
