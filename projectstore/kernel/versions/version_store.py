"""
Uploaded version lifecycle: registration, current-version pointer and
retention cleanup.

Version numbers only grow. add_project_version bumps ``projects.last_version``
with a conditional UPDATE in the same transaction as the insert, so two
racing uploaders of the same number cannot both succeed and cleaned-up
numbers are never handed out again.
"""

from pathlib import Path
from typing import List, Optional, Union

from sqlalchemy import case, delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from projectstore.config import get_settings
from projectstore.database import async_session_maker, session_scope
from projectstore.errors import (
    ConstraintViolationError,
    DuplicateVersionError,
    NotFoundError,
    StorageError,
    VersionOrderingError,
)
from projectstore.kernel.events.event_log import new_event
from projectstore.kernel.lookups import (
    current_version,
    require_locked_project,
    require_version,
    version_exists,
)
from projectstore.kernel.models import (
    EventType,
    Project as ProjectRow,
    ProjectFlow,
    ProjectProperty,
    ProjectVersion,
    USER_MAX_LENGTH,
    utcnow,
)
from projectstore.kernel.versions.transport import ArtifactTransport, digest_file
from projectstore.logging_config import get_logger
from projectstore.schemas.project import Project
from projectstore.schemas.version import ProjectFileHandler

logger = get_logger(__name__)

PathLike = Union[str, Path]


class VersionStore:
    """
    Service for project versions.

    Usage:
        versions = VersionStore(session_maker, transport=blob_transport)
        await versions.add_project_version(pid, 4, archive, "alice", md5, rid)
        await versions.upload_project_file(pid, 4, archive, "alice")
        await versions.change_project_version(project, 4, "alice")
    """

    def __init__(
        self,
        session_maker: Optional[async_sessionmaker[AsyncSession]] = None,
        transport: Optional[ArtifactTransport] = None,
    ):
        self.session_maker = session_maker or async_session_maker
        self.transport = transport

    async def add_project_version(
        self,
        project_id: int,
        version: int,
        local_file: Optional[PathLike],
        uploader: str,
        md5: Optional[bytes],
        resource_id: Optional[str],
    ) -> ProjectFileHandler:
        """
        Register version metadata.

        The first version registered for a project also becomes its current
        version; later ones are selected with change_project_version.

        Raises:
            NotFoundError: If the project does not exist
            DuplicateVersionError: If (project_id, version) is already registered
            VersionOrderingError: If version is not above every version ever registered
            ConstraintViolationError: If md5 is not a 16-byte digest or uploader is too long
        """
        if md5 is not None and len(md5) != 16:
            raise ConstraintViolationError(f"md5 must be 16 bytes, got {len(md5)}")
        if not uploader or len(uploader) > USER_MAX_LENGTH:
            raise ConstraintViolationError("Uploader must be 1-%d characters" % USER_MAX_LENGTH)
        if version < 1:
            raise VersionOrderingError(project_id, version)

        path = Path(local_file) if local_file is not None else None

        async with session_scope(self.session_maker) as session:
            bumped = await session.execute(
                update(ProjectRow)
                .where(ProjectRow.id == project_id, ProjectRow.last_version < version)
                .values(
                    last_version=version,
                    version=case((ProjectRow.version == 0, version), else_=ProjectRow.version),
                )
                .execution_options(synchronize_session=False)
            )
            if bumped.rowcount == 0:
                if await version_exists(session, project_id, version):
                    raise DuplicateVersionError(project_id, version)
                row = await session.get(ProjectRow, project_id)
                if row is None:
                    raise NotFoundError(f"Project {project_id} not found")
                raise VersionOrderingError(project_id, version, row.last_version)

            record = ProjectVersion(
                project_id=project_id,
                version=version,
                uploader=uploader,
                md5=md5,
                resource_id=resource_id,
                file_type=(path.suffix.lstrip(".") or None) if path else None,
                file_name=path.name if path else None,
                local_file=str(path) if path else None,
            )
            session.add(record)
            try:
                await session.flush()
            except IntegrityError as exc:
                raise DuplicateVersionError(project_id, version) from exc
            handler = ProjectFileHandler.model_validate(record)

        logger.info(
            "Registered version %s of project %s",
            version,
            project_id,
            extra={"project_id": project_id, "version": version, "uploader": uploader},
        )
        return handler

    async def upload_project_file(
        self,
        project_id: int,
        version: int,
        local_file: PathLike,
        user: str,
    ) -> ProjectFileHandler:
        """
        Record that the archive of a registered version has been transferred.

        The file's MD5 must match the digest registered with the version.
        When a transport is configured the file is handed to it first and
        the returned resource id is kept if none was registered.

        Raises:
            NotFoundError: If the version does not exist
            StorageError: If the file cannot be read or its checksum differs
        """
        path = Path(local_file)
        try:
            digest, size = await digest_file(path)
        except OSError as exc:
            raise StorageError(f"Cannot read {path}: {exc}") from exc

        async with session_scope(self.session_maker) as session:
            record = await session.get(ProjectVersion, (project_id, version))
            if record is None:
                raise NotFoundError(f"Version {version} of project {project_id} not found")
            if record.md5 is not None and record.md5 != digest:
                raise StorageError(
                    f"Checksum mismatch for project {project_id} v{version}: "
                    f"expected {record.md5.hex()}, got {digest.hex()}"
                )
            resource_id = record.resource_id

        if self.transport is not None:
            resource_id = await self.transport.upload(path, digest, resource_id)

        async with session_scope(self.session_maker) as session:
            record = await session.get(ProjectVersion, (project_id, version))
            if record is None:
                raise NotFoundError(f"Version {version} of project {project_id} was removed")
            record.md5 = digest
            record.resource_id = resource_id
            record.file_name = path.name
            record.file_type = path.suffix.lstrip(".") or None
            record.file_size = size
            record.local_file = str(path)
            record.uploaded_at = utcnow()
            session.add(
                new_event(project_id, EventType.UPLOADED, user, f"Uploaded version {version} ({path.name})")
            )
            await session.flush()
            handler = ProjectFileHandler.model_validate(record)

        logger.info(
            "Recorded upload of %s for project %s v%s (%d bytes)",
            path.name, project_id, version, size,
        )
        return handler

    async def fetch_project_metadata(self, project_id: int, version: int) -> Optional[ProjectFileHandler]:
        """Version metadata, or None if the version does not exist."""
        async with session_scope(self.session_maker) as session:
            record = await session.get(ProjectVersion, (project_id, version))
            return ProjectFileHandler.model_validate(record) if record is not None else None

    async def get_uploaded_file(self, project_id: int, version: int) -> ProjectFileHandler:
        """
        Metadata plus the references needed to retrieve the archive.

        Raises:
            NotFoundError: If the version is absent or has been cleaned up
        """
        handler = await self.fetch_project_metadata(project_id, version)
        if handler is None:
            raise NotFoundError(f"Version {version} of project {project_id} not found")
        return handler

    async def list_project_versions(self, project_id: int) -> List[ProjectFileHandler]:
        async with session_scope(self.session_maker) as session:
            result = await session.execute(
                select(ProjectVersion)
                .where(ProjectVersion.project_id == project_id)
                .order_by(ProjectVersion.version)
            )
            return [ProjectFileHandler.model_validate(r) for r in result.scalars().all()]

    async def change_project_version(self, project: Project, version: int, user: str) -> None:
        """
        Point the project at another registered version (forward or back).

        The project row is locked before the target is checked, so a
        concurrent cleanup cannot delete the target underneath the pointer.

        Raises:
            NotFoundError: If the project or version does not exist
        """
        async with session_scope(self.session_maker) as session:
            row = await require_locked_project(session, project.id)
            await require_version(session, project.id, version)
            previous = row.version
            row.version = version
            row.last_modified_by = user
            session.add(
                new_event(
                    project.id,
                    EventType.VERSION_CHANGED,
                    user,
                    f"Current version changed from {previous} to {version}",
                )
            )

        project.version = version
        project.last_modified_by = user
        logger.info("Project %s now at version %s (was %s)", project.id, version, previous)

    async def get_latest_project_version(self, project: Project) -> int:
        """The current-version pointer; may be below the highest registered version."""
        async with session_scope(self.session_maker) as session:
            return await current_version(session, project.id)

    async def clean_older_project_version(self, project_id: int, version: int) -> List[int]:
        """
        Delete versions numbered below ``version`` with their properties and
        flows. The current version is always kept.

        Returns:
            The version numbers removed, ascending
        """
        async with session_scope(self.session_maker) as session:
            row = await require_locked_project(session, project_id)
            result = await session.execute(
                select(ProjectVersion.version).where(
                    ProjectVersion.project_id == project_id,
                    ProjectVersion.version < version,
                    ProjectVersion.version != row.version,
                )
            )
            doomed = sorted(result.scalars().all())
            if doomed:
                for model in (ProjectProperty, ProjectFlow, ProjectVersion):
                    await session.execute(
                        delete(model)
                        .where(model.project_id == project_id, model.version.in_(doomed))
                        .execution_options(synchronize_session=False)
                    )

        if doomed:
            logger.info(
                "Cleaned %d versions of project %s older than %s: %s",
                len(doomed), project_id, version, doomed,
            )
        return doomed

    async def apply_retention(self, project_id: int, retention: Optional[int] = None) -> List[int]:
        """
        Keep only the newest ``retention`` registered version numbers (plus
        the current version, wherever it points).
        """
        if retention is None:
            retention = get_settings().project_version_retention
        if retention < 1:
            raise ConstraintViolationError("Retention must keep at least one version")

        async with session_scope(self.session_maker) as session:
            result = await session.execute(
                select(ProjectRow.last_version).where(ProjectRow.id == project_id)
            )
            last_version = result.scalar_one_or_none()
        if last_version is None:
            raise NotFoundError(f"Project {project_id} not found")

        threshold = last_version - retention + 1
        if threshold <= 1:
            return []
        return await self.clean_older_project_version(project_id, threshold)
