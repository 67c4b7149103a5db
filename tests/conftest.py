"""
Pytest fixtures for project store tests.
"""

import hashlib
from pathlib import Path
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from projectstore.database import close_db, create_engine, create_session_maker, init_db
from projectstore.kernel.projects import ProjectStore
from projectstore.schemas import Project


class RecordingTransport:
    """Artifact transport double that remembers what it was handed."""

    def __init__(self):
        self.calls = []

    async def upload(self, local_file: Path, md5: bytes, resource_id: Optional[str] = None) -> str:
        self.calls.append((Path(local_file), md5, resource_id))
        return resource_id or f"blob-{md5.hex()}"


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite so concurrent sessions get separate connections."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    await init_db(engine)
    yield engine
    await close_db(engine)


@pytest.fixture
def session_maker(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_maker(db_engine)


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def store(session_maker, transport) -> ProjectStore:
    return ProjectStore(session_maker, transport=transport)


@pytest_asyncio.fixture
async def project(store: ProjectStore) -> Project:
    """A freshly created project owned by alice."""
    return await store.create_new_project("etl-pipeline", "Nightly ETL", "alice")


@pytest.fixture
def archive(tmp_path: Path) -> Path:
    """A small uploaded archive."""
    path = tmp_path / "etl-pipeline.zip"
    path.write_bytes(b"PK\x03\x04 fake archive contents")
    return path


@pytest.fixture
def archive_md5(archive: Path) -> bytes:
    return hashlib.md5(archive.read_bytes()).digest()


@pytest.fixture
def add_version(store: ProjectStore):
    """Register a version of a project with a throwaway digest."""

    async def _add(project: Project, version: int, uploader: str = "alice"):
        md5 = hashlib.md5(f"{project.id}-{version}".encode()).digest()
        return await store.versions.add_project_version(
            project.id, version, None, uploader, md5, f"res-{project.id}-{version}"
        )

    return _add
