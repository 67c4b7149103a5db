"""
Per-version flow snapshots.
"""

from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from projectstore.database import async_session_maker, session_scope
from projectstore.errors import NotFoundError
from projectstore.kernel.lookups import current_version, require_locked_project, require_version
from projectstore.kernel.models.flow import ProjectFlow
from projectstore.logging_config import get_logger
from projectstore.schemas.flow import Flow
from projectstore.schemas.project import Project

logger = get_logger(__name__)


def _to_flow(row: ProjectFlow) -> Flow:
    return Flow(id=row.flow_id, graph=row.graph or {})


class FlowStore:
    """Service for flow graphs keyed by (project, version, flow id).

    Writes hold the project row lock so they serialize with cleanup.
    """

    def __init__(self, session_maker: Optional[async_sessionmaker[AsyncSession]] = None):
        self.session_maker = session_maker or async_session_maker

    async def upload_flows(self, project: Project, version: int, flows: Iterable[Flow]) -> None:
        """
        Store the computed flows of a version. Each flow overwrites only the
        snapshot with its own id.

        Raises:
            NotFoundError: If the version is not registered
        """
        flows = list(flows)
        async with session_scope(self.session_maker) as session:
            await require_locked_project(session, project.id)
            await require_version(session, project.id, version)
            for flow in flows:
                await session.merge(
                    ProjectFlow(
                        project_id=project.id,
                        version=version,
                        flow_id=flow.id,
                        graph=flow.graph,
                    )
                )
        logger.info("Stored %d flows for project %s v%s", len(flows), project.id, version)

    async def upload_flow(self, project: Project, version: int, flow: Flow) -> None:
        await self.upload_flows(project, version, [flow])

    async def update_flow(self, project: Project, version: int, flow: Flow) -> None:
        """
        Overwrite an existing snapshot in place.

        Raises:
            NotFoundError: If no snapshot with that id exists for the version
        """
        async with session_scope(self.session_maker) as session:
            await require_locked_project(session, project.id)
            row = await session.get(ProjectFlow, (project.id, version, flow.id))
            if row is None:
                raise NotFoundError(
                    f"Flow {flow.id!r} not found for project {project.id} v{version}"
                )
            row.graph = flow.graph

    async def fetch_flow(self, project: Project, flow_id: str) -> Flow:
        """
        Fetch one flow of the project's current version.

        Raises:
            NotFoundError: If the project or flow does not exist
        """
        async with session_scope(self.session_maker) as session:
            version = await current_version(session, project.id)
            row = await session.get(ProjectFlow, (project.id, version, flow_id))
            if row is None:
                raise NotFoundError(
                    f"Flow {flow_id!r} not found for project {project.id} v{version}"
                )
            return _to_flow(row)

    async def fetch_all_project_flows(self, project: Project) -> List[Flow]:
        """All flows of the project's current version, ordered by id."""
        async with session_scope(self.session_maker) as session:
            version = await current_version(session, project.id)
            return await self._select(session, project.id, version)

    async def fetch_flows(self, project_id: int, version: int) -> List[Flow]:
        async with session_scope(self.session_maker) as session:
            return await self._select(session, project_id, version)

    async def _select(self, session: AsyncSession, project_id: int, version: int) -> List[Flow]:
        result = await session.execute(
            select(ProjectFlow)
            .where(ProjectFlow.project_id == project_id, ProjectFlow.version == version)
            .order_by(ProjectFlow.flow_id)
        )
        return [_to_flow(row) for row in result.scalars().all()]
