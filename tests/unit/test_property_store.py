"""Unit tests for per-version property bundles."""

import asyncio

import pytest

from projectstore.errors import NotFoundError
from projectstore.schemas import Props


@pytest.fixture
def job_props() -> Props:
    return Props(
        path_name="jobs/extract.properties",
        entries={"type": "command", "command": "python extract.py", "retries": "3", "alpha": "1"},
    )


class TestUploadAndFetch:
    """Tests for upload_project_property / fetch_project_property."""

    @pytest.mark.asyncio
    async def test_round_trip_preserves_entries_and_order(self, store, project, add_version, job_props):
        await add_version(project, 1)
        project.version = 1

        await store.properties.upload_project_property(project, job_props)
        fetched = await store.properties.fetch_project_property(project, job_props.path_name)

        assert fetched == job_props
        assert list(fetched.entries) == ["type", "command", "retries", "alpha"]
        assert fetched.get("retries") == "3"

    @pytest.mark.asyncio
    async def test_same_path_overwrites(self, store, project, add_version, job_props):
        await add_version(project, 1)
        project.version = 1
        await store.properties.upload_project_property(project, job_props)

        await store.properties.update_project_property(
            project, Props(path_name=job_props.path_name, entries={"type": "noop"})
        )

        fetched = await store.properties.fetch_project_property(project, job_props.path_name)
        assert fetched.entries == {"type": "noop"}
        assert len(await store.properties.fetch_project_properties(project.id, 1)) == 1

    @pytest.mark.asyncio
    async def test_upload_many(self, store, project, add_version):
        await add_version(project, 1)
        project.version = 1
        bundles = [
            Props(path_name="b.properties", entries={"x": "1"}),
            Props(path_name="a.properties", entries={"y": "2"}),
        ]

        await store.properties.upload_project_properties(project, bundles)

        all_props = await store.properties.fetch_project_properties(project.id, 1)
        assert list(all_props) == ["a.properties", "b.properties"]
        assert all_props["b.properties"].entries == {"x": "1"}

    @pytest.mark.asyncio
    async def test_upload_requires_registered_version(self, store, project, job_props):
        # No version registered: project.version is 0
        with pytest.raises(NotFoundError):
            await store.properties.upload_project_property(project, job_props)

    @pytest.mark.asyncio
    async def test_fetch_missing(self, store, project, add_version):
        await add_version(project, 1)
        with pytest.raises(NotFoundError):
            await store.properties.fetch_project_property(project, "nope.properties")

    @pytest.mark.asyncio
    async def test_concurrent_writes_to_same_path_both_succeed(self, store, project, add_version):
        await add_version(project, 1)
        project.version = 1

        results = await asyncio.gather(
            store.properties.upload_project_property(project, Props(path_name="a", entries={"k": "1"})),
            store.properties.upload_project_property(project, Props(path_name="a", entries={"k": "2"})),
            return_exceptions=True,
        )

        assert results == [None, None]
        fetched = await store.properties.fetch_project_property(project, "a")
        assert fetched.entries in ({"k": "1"}, {"k": "2"})
        assert list(await store.properties.fetch_project_properties(project.id, 1)) == ["a"]


class TestVersionScoping:
    """Bundles belong to one version; project-only reads follow the pointer."""

    @pytest.mark.asyncio
    async def test_versions_are_isolated(self, store, project, add_version):
        await add_version(project, 1)
        await add_version(project, 2)
        project.version = 1
        await store.properties.upload_project_property(project, Props(path_name="p", entries={"v": "1"}))
        project.version = 2
        await store.properties.upload_project_property(project, Props(path_name="p", entries={"v": "2"}))

        v1 = await store.properties.fetch_project_property_by_version(project.id, 1, "p")
        v2 = await store.properties.fetch_project_property_by_version(project.id, 2, "p")

        assert v1.entries == {"v": "1"}
        assert v2.entries == {"v": "2"}

    @pytest.mark.asyncio
    async def test_project_fetch_follows_current_pointer(self, store, project, add_version):
        await add_version(project, 1)
        await add_version(project, 2)
        project.version = 1
        await store.properties.upload_project_property(project, Props(path_name="p", entries={"v": "1"}))
        project.version = 2
        await store.properties.upload_project_property(project, Props(path_name="p", entries={"v": "2"}))

        await store.versions.change_project_version(project, 2, "alice")
        assert (await store.properties.fetch_project_property(project, "p")).entries == {"v": "2"}

        # Rollback: the pointer, not the highest number, decides
        await store.versions.change_project_version(project, 1, "alice")
        assert (await store.properties.fetch_project_property(project, "p")).entries == {"v": "1"}

    @pytest.mark.asyncio
    async def test_by_version_missing(self, store, project):
        with pytest.raises(NotFoundError):
            await store.properties.fetch_project_property_by_version(project.id, 9, "p")
