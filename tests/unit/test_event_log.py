"""Unit tests for the project audit log."""

import pytest

from projectstore.database import close_db, create_engine, create_session_maker
from projectstore.errors import StorageError
from projectstore.kernel.events import EventLog
from projectstore.kernel.models import EventType


@pytest.fixture
def event_log(session_maker) -> EventLog:
    return EventLog(session_maker)


class TestPostEvent:
    """Tests for EventLog.post_event."""

    @pytest.mark.asyncio
    async def test_post_returns_true(self, event_log, project):
        assert await event_log.post_event(project, EventType.UPLOADED, "bob", "Uploaded v1") is True

        latest = (await event_log.get_project_events(project, limit=1))[0]
        assert latest.type == EventType.UPLOADED
        assert latest.user == "bob"
        assert latest.message == "Uploaded v1"
        assert latest.project_id == project.id

    @pytest.mark.asyncio
    async def test_backend_failure_returns_false(self, tmp_path, project):
        """A database without the events table must not make post_event raise."""
        engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
        try:
            broken = EventLog(create_session_maker(engine))
            assert await broken.post_event(project, EventType.CREATED, "alice", "x") is False
        finally:
            await close_db(engine)


class TestGetProjectEvents:
    """Tests for EventLog.get_project_events."""

    @pytest.mark.asyncio
    async def test_newest_first(self, event_log, project):
        for i in range(3):
            await event_log.post_event(project, EventType.UPLOADED, "bob", f"upload {i}")

        events = await event_log.get_project_events(project)

        assert [e.message for e in events[:3]] == ["upload 2", "upload 1", "upload 0"]
        assert events[-1].type == EventType.CREATED

    @pytest.mark.asyncio
    async def test_pagination(self, event_log, project):
        for i in range(5):
            await event_log.post_event(project, EventType.UPLOADED, "bob", f"upload {i}")

        first_page = await event_log.get_project_events(project, limit=2, offset=0)
        second_page = await event_log.get_project_events(project, limit=2, offset=2)

        assert [e.message for e in first_page] == ["upload 4", "upload 3"]
        assert [e.message for e in second_page] == ["upload 2", "upload 1"]

    @pytest.mark.asyncio
    async def test_scoped_to_project(self, store, event_log, project):
        other = await store.create_new_project("other", "", "carol")
        await event_log.post_event(other, EventType.UPLOADED, "carol", "elsewhere")

        messages = [e.message for e in await event_log.get_project_events(project)]

        assert "elsewhere" not in messages

    @pytest.mark.asyncio
    async def test_backend_failure_raises(self, tmp_path, project):
        engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
        try:
            broken = EventLog(create_session_maker(engine))
            with pytest.raises(StorageError):
                await broken.get_project_events(project)
        finally:
            await close_db(engine)
