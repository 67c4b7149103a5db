"""Unit tests for version registration, the current-version pointer and cleanup."""

import hashlib

import pytest

from projectstore.errors import (
    ConstraintViolationError,
    DuplicateVersionError,
    NotFoundError,
    StorageError,
    VersionOrderingError,
)
from projectstore.kernel.models import EventType
from projectstore.schemas import Flow, Props


class TestAddProjectVersion:
    """Tests for VersionStore.add_project_version."""

    @pytest.mark.asyncio
    async def test_registers_metadata(self, store, project, archive, archive_md5):
        handler = await store.versions.add_project_version(
            project.id, 1, archive, "alice", archive_md5, "res-1"
        )

        assert handler.version == 1
        assert handler.uploader == "alice"
        assert handler.md5 == archive_md5
        assert handler.md5_hex == archive_md5.hex()
        assert handler.resource_id == "res-1"
        assert handler.file_name == "etl-pipeline.zip"
        assert handler.file_type == "zip"
        assert handler.local_path == archive
        assert handler.upload_completed is False

    @pytest.mark.asyncio
    async def test_first_version_becomes_current(self, store, project, add_version):
        await add_version(project, 1)
        assert await store.versions.get_latest_project_version(project) == 1

        await add_version(project, 2)
        # Later versions wait for change_project_version
        assert await store.versions.get_latest_project_version(project) == 1

    @pytest.mark.asyncio
    async def test_duplicate_version(self, project, add_version):
        await add_version(project, 1)
        with pytest.raises(DuplicateVersionError):
            await add_version(project, 1)

    @pytest.mark.asyncio
    async def test_older_version_rejected(self, project, add_version):
        await add_version(project, 1)
        await add_version(project, 5)

        with pytest.raises(VersionOrderingError) as excinfo:
            await add_version(project, 3)
        assert excinfo.value.last_version == 5

    @pytest.mark.asyncio
    async def test_non_positive_version(self, project, add_version):
        with pytest.raises(VersionOrderingError):
            await add_version(project, 0)

    @pytest.mark.asyncio
    async def test_missing_project(self, store):
        with pytest.raises(NotFoundError):
            await store.versions.add_project_version(999, 1, None, "alice", None, None)

    @pytest.mark.asyncio
    async def test_bad_digest_length(self, store, project):
        with pytest.raises(ConstraintViolationError):
            await store.versions.add_project_version(project.id, 1, None, "alice", b"short", None)

    @pytest.mark.asyncio
    async def test_numbers_not_reused_after_cleanup(self, store, project, add_version):
        for v in (1, 2, 3):
            await add_version(project, v)
        await store.versions.change_project_version(project, 3, "alice")
        await store.versions.clean_older_project_version(project.id, 3)

        with pytest.raises(VersionOrderingError):
            await add_version(project, 2)


class TestMetadataLookups:
    """Tests for fetch_project_metadata / get_uploaded_file / list_project_versions."""

    @pytest.mark.asyncio
    async def test_fetch_metadata_absent_is_none(self, store, project):
        assert await store.versions.fetch_project_metadata(project.id, 7) is None

    @pytest.mark.asyncio
    async def test_get_uploaded_file_absent(self, store, project):
        with pytest.raises(NotFoundError):
            await store.versions.get_uploaded_file(project.id, 7)

    @pytest.mark.asyncio
    async def test_get_uploaded_file(self, store, project, add_version):
        await add_version(project, 1)

        handler = await store.versions.get_uploaded_file(project.id, 1)

        assert handler.resource_id == f"res-{project.id}-1"

    @pytest.mark.asyncio
    async def test_list_versions(self, store, project, add_version):
        for v in (1, 2, 4):
            await add_version(project, v)

        versions = await store.versions.list_project_versions(project.id)

        assert [h.version for h in versions] == [1, 2, 4]


class TestUploadProjectFile:
    """Tests for VersionStore.upload_project_file."""

    @pytest.mark.asyncio
    async def test_records_completion(self, store, project, archive, archive_md5, transport):
        await store.versions.add_project_version(project.id, 1, None, "alice", archive_md5, None)

        handler = await store.versions.upload_project_file(project.id, 1, archive, "alice")

        assert handler.upload_completed is True
        assert handler.file_size == archive.stat().st_size
        assert handler.file_name == "etl-pipeline.zip"
        assert handler.resource_id == f"blob-{archive_md5.hex()}"
        assert transport.calls == [(archive, archive_md5, None)]

        latest = (await store.events.get_project_events(project, limit=1))[0]
        assert latest.type == EventType.UPLOADED

    @pytest.mark.asyncio
    async def test_keeps_registered_resource_id(self, store, project, archive, archive_md5, transport):
        await store.versions.add_project_version(project.id, 1, archive, "alice", archive_md5, "res-a")

        handler = await store.versions.upload_project_file(project.id, 1, archive, "alice")

        assert handler.resource_id == "res-a"
        assert transport.calls[0][2] == "res-a"

    @pytest.mark.asyncio
    async def test_checksum_mismatch(self, store, project, archive, transport):
        wrong = hashlib.md5(b"something else").digest()
        await store.versions.add_project_version(project.id, 1, archive, "alice", wrong, None)

        with pytest.raises(StorageError):
            await store.versions.upload_project_file(project.id, 1, archive, "alice")

        assert transport.calls == []
        handler = await store.versions.fetch_project_metadata(project.id, 1)
        assert handler.upload_completed is False

    @pytest.mark.asyncio
    async def test_unknown_version(self, store, project, archive):
        with pytest.raises(NotFoundError):
            await store.versions.upload_project_file(project.id, 3, archive, "alice")

    @pytest.mark.asyncio
    async def test_unreadable_file(self, store, project, add_version, tmp_path):
        await add_version(project, 1)
        with pytest.raises(StorageError):
            await store.versions.upload_project_file(project.id, 1, tmp_path / "missing.zip", "alice")


class TestChangeProjectVersion:
    """Tests for moving the current-version pointer."""

    @pytest.mark.asyncio
    async def test_forward_and_rollback(self, store, project, add_version):
        for v in (1, 2, 3):
            await add_version(project, v)

        await store.versions.change_project_version(project, 3, "bob")
        assert await store.versions.get_latest_project_version(project) == 3
        assert project.version == 3

        await store.versions.change_project_version(project, 1, "bob")
        assert await store.versions.get_latest_project_version(project) == 1
        assert (await store.fetch_project_by_id(project.id)).version == 1

    @pytest.mark.asyncio
    async def test_unknown_version(self, store, project, add_version):
        await add_version(project, 1)

        with pytest.raises(NotFoundError):
            await store.versions.change_project_version(project, 2, "bob")
        assert await store.versions.get_latest_project_version(project) == 1

    @pytest.mark.asyncio
    async def test_records_event(self, store, project, add_version):
        await add_version(project, 1)
        await add_version(project, 2)

        await store.versions.change_project_version(project, 2, "bob")

        latest = (await store.events.get_project_events(project, limit=1))[0]
        assert latest.type == EventType.VERSION_CHANGED
        assert latest.user == "bob"
        assert "from 1 to 2" in latest.message

    @pytest.mark.asyncio
    async def test_no_versions_yet(self, store, project):
        assert await store.versions.get_latest_project_version(project) == 0


class TestCleanOlderProjectVersion:
    """Tests for retention cleanup."""

    @pytest.mark.asyncio
    async def test_removes_older_versions_and_their_data(self, store, project, add_version):
        for v in (1, 2, 3):
            await add_version(project, v)
            await store.flows.upload_flow(project, v, Flow(id="main"))
            project.version = v
            await store.properties.upload_project_property(project, Props(path_name="a.properties"))
        await store.versions.change_project_version(project, 3, "alice")

        removed = await store.versions.clean_older_project_version(project.id, 3)

        assert removed == [1, 2]
        assert [h.version for h in await store.versions.list_project_versions(project.id)] == [3]
        assert await store.flows.fetch_flows(project.id, 1) == []
        assert await store.properties.fetch_project_properties(project.id, 2) == {}
        assert [f.id for f in await store.flows.fetch_flows(project.id, 3)] == ["main"]

    @pytest.mark.asyncio
    async def test_keeps_current_version(self, store, project, add_version):
        """The pointer target survives even when numerically older."""
        for v in (1, 2, 3, 4):
            await add_version(project, v)
        await store.versions.change_project_version(project, 2, "alice")

        removed = await store.versions.clean_older_project_version(project.id, 4)

        assert removed == [1, 3]
        remaining = [h.version for h in await store.versions.list_project_versions(project.id)]
        assert remaining == [2, 4]
        assert await store.versions.get_latest_project_version(project) == 2

    @pytest.mark.asyncio
    async def test_threshold_is_exclusive(self, store, project, add_version):
        await add_version(project, 1)
        await add_version(project, 2)

        assert await store.versions.clean_older_project_version(project.id, 1) == []

    @pytest.mark.asyncio
    async def test_missing_project(self, store):
        with pytest.raises(NotFoundError):
            await store.versions.clean_older_project_version(999, 2)


class TestApplyRetention:
    """Tests for VersionStore.apply_retention."""

    @pytest.mark.asyncio
    async def test_keeps_newest(self, store, project, add_version):
        for v in range(1, 6):
            await add_version(project, v)
        await store.versions.change_project_version(project, 5, "alice")

        removed = await store.versions.apply_retention(project.id, retention=2)

        assert removed == [1, 2, 3]
        assert [h.version for h in await store.versions.list_project_versions(project.id)] == [4, 5]

    @pytest.mark.asyncio
    async def test_nothing_to_trim(self, store, project, add_version):
        await add_version(project, 1)
        assert await store.versions.apply_retention(project.id, retention=3) == []

    @pytest.mark.asyncio
    async def test_invalid_retention(self, store, project):
        with pytest.raises(ConstraintViolationError):
            await store.versions.apply_retention(project.id, retention=0)
