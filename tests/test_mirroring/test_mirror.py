"""
Tests for mirrored writes and deletes.
"""

import logging

import pytest

from blobmirror.core.exceptions import (
    MirrorFailedOnStoreError,
    MirrorFailedOnStoresError,
    NetworkError,
    ResourceNotFoundError,
)
from blobmirror.drivers.disk import DiskDriver
from blobmirror.drivers.inmem import InMemoryDriver
from blobmirror.multi_store import Mirror, MultiStore, Policy
from blobmirror.store import Store


@pytest.fixture
def disk_multi_store(tmp_path) -> MultiStore:
    """A disk primary with three disk secondaries."""
    return MultiStore(Store(DiskDriver(tmp_path / "primary"))).add_stores({
        f"store-{n}": Store(DiskDriver(tmp_path / f"store-{n}"))
        for n in (1, 2, 3)
    })


def all_stores(multi_store: MultiStore) -> list[Store]:
    return [multi_store.primary] + [multi_store.get_store(name) for name in multi_store.store_names]


class TestMirrorFromPrimary:

    @pytest.mark.asyncio
    async def test_write(self, disk_multi_store: MultiStore):
        mirror = disk_multi_store.mirror_stores_from_primary()

        await mirror.write("foo/file.txt", "test")

        for store in all_stores(disk_multi_store):
            assert await store.read_text("foo/file.txt") == "test"

    @pytest.mark.asyncio
    async def test_delete(self, disk_multi_store: MultiStore):
        mirror = disk_multi_store.mirror_stores_from_primary()
        await mirror.write("foo/file.txt", "test")

        await mirror.delete("foo/file.txt")

        for store in all_stores(disk_multi_store):
            assert not await store.file_exists("foo/file.txt")

    @pytest.mark.asyncio
    async def test_delete_directory(self, disk_multi_store: MultiStore):
        mirror = disk_multi_store.mirror_stores_from_primary()
        await mirror.write("foo/1.txt", "test")
        await mirror.write("foo/nested/2.txt", "test")
        await mirror.write("keep.txt", "test")

        await mirror.delete_directory("foo")

        for store in all_stores(disk_multi_store):
            assert not await store.file_exists("foo/1.txt")
            assert not await store.file_exists("foo/nested/2.txt")
            assert await store.file_exists("keep.txt")


class TestMirrorGroup:

    @pytest.mark.asyncio
    async def test_group_write_skips_primary(self, disk_multi_store: MultiStore):
        disk_multi_store.add_mirrors("backup", ["store-1", "store-3"])

        await disk_multi_store.mirror("backup").write("file.txt", b"x")

        assert not await disk_multi_store.primary.file_exists("file.txt")
        assert not await disk_multi_store.get_store("store-2").file_exists("file.txt")
        assert await disk_multi_store.get_store("store-1").file_exists("file.txt")
        assert await disk_multi_store.get_store("store-3").file_exists("file.txt")


class TestPolicies:

    @pytest.mark.asyncio
    async def test_continue_on_failure_reports_missing_stores(self, disk_multi_store: MultiStore):
        """Stores missing the file are reported; the others still get the delete."""
        mirror = disk_multi_store.mirror_stores_from_primary()
        await mirror.write("file.txt", "test")
        await disk_multi_store.get_store("store-2").delete("file.txt")
        await disk_multi_store.get_store("store-3").delete("file.txt")

        with pytest.raises(MirrorFailedOnStoresError) as exc_info:
            await mirror.delete("file.txt")

        assert set(exc_info.value.failures) == {"store-2", "store-3"}
        assert all(
            isinstance(error, ResourceNotFoundError)
            for error in exc_info.value.failures.values()
        )
        assert not await disk_multi_store.primary.file_exists("file.txt")
        assert not await disk_multi_store.get_store("store-1").file_exists("file.txt")

    @pytest.mark.asyncio
    async def test_stop_on_failure_reports_first_store(self, disk_multi_store: MultiStore):
        disk_multi_store.set_mirrors_policy(Policy.STOP_ON_FAILURE)
        mirror = disk_multi_store.mirror_stores_from_primary()
        await mirror.write("file.txt", "test")
        await disk_multi_store.get_store("store-2").delete("file.txt")
        await disk_multi_store.get_store("store-3").delete("file.txt")

        with pytest.raises(MirrorFailedOnStoreError) as exc_info:
            await mirror.delete("file.txt")

        assert exc_info.value.store_name == "store-2"
        assert isinstance(exc_info.value.cause, ResourceNotFoundError)
        assert exc_info.value.__cause__ is exc_info.value.cause

    @pytest.mark.asyncio
    async def test_continue_attempts_remaining_stores(self, failing_store):
        error = NetworkError("unreachable")
        healthy = Store(InMemoryDriver())
        mirror = Mirror(Policy.CONTINUE_ON_FAILURE, {"a": failing_store(error), "b": healthy})

        with pytest.raises(MirrorFailedOnStoresError) as exc_info:
            await mirror.write("file.txt", b"x")

        assert exc_info.value.failures == {"a": error}
        assert await healthy.read("file.txt") == b"x"

    @pytest.mark.asyncio
    async def test_stop_leaves_later_stores_untouched(self, failing_store):
        broken = failing_store(NetworkError())
        healthy = Store(InMemoryDriver())
        mirror = Mirror(Policy.STOP_ON_FAILURE, {"z": healthy, "a": broken})

        with pytest.raises(MirrorFailedOnStoreError) as exc_info:
            await mirror.write("file.txt", b"x")

        assert exc_info.value.store_name == "a"
        assert broken.driver.calls == ["write"]
        assert not await healthy.file_exists("file.txt")

    @pytest.mark.asyncio
    async def test_all_succeed(self):
        mirror = Mirror(Policy.STOP_ON_FAILURE, {"a": Store(InMemoryDriver())})

        await mirror.write("file.txt", b"x")

    @pytest.mark.asyncio
    async def test_empty_mirror_is_noop(self):
        await Mirror(Policy.STOP_ON_FAILURE, {}).delete("file.txt")

    @pytest.mark.asyncio
    async def test_failure_is_logged(self, failing_store, caplog):
        mirror = Mirror(Policy.CONTINUE_ON_FAILURE, {"a": failing_store(NetworkError())})

        with caplog.at_level(logging.WARNING, logger="blobmirror.multi_store"):
            with pytest.raises(MirrorFailedOnStoresError):
                await mirror.delete("file.txt")

        assert "failed on store a" in caplog.text


class TestOrdering:

    @pytest.mark.asyncio
    async def test_stores_visited_by_name(self, recording_store, journal):
        multi_store = MultiStore(recording_store("primary")).add_stores({
            "zeta": recording_store("zeta"),
            "alpha": recording_store("alpha"),
            "mid": recording_store("mid"),
        })

        await multi_store.mirror_stores_from_primary().write("file.txt", b"x")

        assert journal == ["alpha", "mid", "primary", "zeta"]

    @pytest.mark.asyncio
    async def test_group_order_ignores_declaration_order(self, recording_store, journal):
        multi_store = MultiStore(recording_store("primary")).add_stores({
            "b": recording_store("b"),
            "a": recording_store("a"),
        })
        multi_store.add_mirrors("pair", ["b", "a"])

        await multi_store.mirror("pair").write("file.txt", b"x")
        await multi_store.mirror("pair").delete("file.txt")

        assert journal == ["a", "b", "a", "b"]
