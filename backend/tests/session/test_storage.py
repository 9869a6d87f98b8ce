"""Tests for the shared local storage area."""

import asyncio

import pytest

from mimariproje.config import AppConfig
from mimariproje.session import LocalStorage, StorageClosedError, StorageEvent


class TestLocalStorage:
    """Test suite for LocalStorage reads and writes."""

    @pytest.mark.asyncio
    async def test_set_and_get_item(self, storage: LocalStorage) -> None:
        """Test that stored values can be read back."""
        await storage.set_item("theme", "dark")

        assert await storage.get_item("theme") == "dark"
        assert await storage.get_item("missing") is None

    @pytest.mark.asyncio
    async def test_set_item_overwrites(self, storage: LocalStorage) -> None:
        """Test that writing an existing key replaces its value."""
        await storage.set_item("theme", "dark")
        await storage.set_item("theme", "light")

        assert await storage.get_item("theme") == "light"
        assert await storage.keys() == ["theme"]

    @pytest.mark.asyncio
    async def test_remove_and_clear(self, storage: LocalStorage) -> None:
        """Test removing one key and clearing all keys."""
        await storage.set_item("a", "1")
        await storage.set_item("b", "2")

        await storage.remove_item("a")
        assert await storage.keys() == ["b"]

        await storage.clear()
        assert await storage.keys() == []

    @pytest.mark.asyncio
    async def test_closed_storage_raises(self) -> None:
        """Test that a closed storage refuses further access."""
        local_storage = await LocalStorage.create(":memory:")
        await local_storage.close()

        with pytest.raises(StorageClosedError):
            await local_storage.get_item("theme")


class TestStorageEvents:
    """Test suite for change notifications between sessions."""

    @pytest.mark.asyncio
    async def test_writer_is_not_notified(self, storage: LocalStorage) -> None:
        """Test that other sessions see a write but the writer does not."""
        writer_events: list[StorageEvent] = []
        reader_events: list[StorageEvent] = []
        storage.subscribe("tab-1", writer_events.append)
        storage.subscribe("tab-2", reader_events.append)

        await storage.set_item("token", "abc", source="tab-1")
        await storage.drain()

        assert writer_events == []
        assert reader_events == [StorageEvent("token", None, "abc", "tab-1")]

    @pytest.mark.asyncio
    async def test_unchanged_value_raises_no_event(self, storage: LocalStorage) -> None:
        """Test that rewriting the same value is silent."""
        events: list[StorageEvent] = []
        await storage.set_item("token", "abc", source="tab-1")
        storage.subscribe("tab-2", events.append)

        await storage.set_item("token", "abc", source="tab-1")
        await storage.remove_item("never-set", source="tab-1")
        await storage.drain()

        assert events == []

    @pytest.mark.asyncio
    async def test_removal_and_clear_events(self, storage: LocalStorage) -> None:
        """Test the events raised by removal and clearing."""
        events: list[StorageEvent] = []
        await storage.set_item("token", "abc", source="tab-1")
        storage.subscribe("tab-2", events.append)

        await storage.remove_item("token", source="tab-1")
        await storage.clear(source="tab-1")
        await storage.drain()

        assert events == [
            StorageEvent("token", "abc", None, "tab-1"),
            StorageEvent(None, None, None, "tab-1"),
        ]

    @pytest.mark.asyncio
    async def test_async_listener_and_unsubscribe(self, storage: LocalStorage) -> None:
        """Test that async listeners are awaited and can unsubscribe."""
        seen: list[str | None] = []

        async def listener(event: StorageEvent) -> None:
            seen.append(event.new_value)

        unsubscribe = storage.subscribe("tab-2", listener)
        await storage.set_item("token", "first", source="tab-1")
        await storage.drain()
        unsubscribe()
        await storage.set_item("token", "second", source="tab-1")
        await storage.drain()

        assert seen == ["first"]

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_break_write(self, storage: LocalStorage) -> None:
        """Test that a raising listener neither fails the write nor starves others."""
        seen: list[StorageEvent] = []

        def broken(_: StorageEvent) -> None:
            msg = "listener bug"
            raise RuntimeError(msg)

        storage.subscribe("tab-2", broken)
        storage.subscribe("tab-3", seen.append)

        await storage.set_item("token", "abc", source="tab-1")
        await storage.drain()

        assert await storage.get_item("token") == "abc"
        assert len(seen) == 1

    @pytest.mark.asyncio
    async def test_writer_does_not_wait_for_listeners(self, storage: LocalStorage) -> None:
        """Test that a write returns while another session's listener is still busy."""
        release = asyncio.Event()
        handled: list[str | None] = []

        async def slow_listener(event: StorageEvent) -> None:
            await release.wait()
            handled.append(event.new_value)

        storage.subscribe("tab-2", slow_listener)

        await asyncio.wait_for(storage.set_item("token", "abc", source="tab-1"), timeout=1)
        assert handled == []

        release.set()
        await storage.drain()

        assert handled == ["abc"]

    @pytest.mark.asyncio
    async def test_close_cancels_pending_events(self) -> None:
        """Test that closing the storage does not wait for stuck listeners."""
        local_storage = await LocalStorage.create(":memory:")

        async def stuck_listener(_: StorageEvent) -> None:
            await asyncio.Event().wait()

        local_storage.subscribe("tab-2", stuck_listener)
        await local_storage.set_item("token", "abc", source="tab-1")

        await asyncio.wait_for(local_storage.close(), timeout=1)
        await local_storage.drain()


@pytest.mark.asyncio
async def test_from_config(app_config: AppConfig) -> None:
    """Test that the storage area opens at the configured path."""
    local_storage = await LocalStorage.from_config(app_config)

    await local_storage.set_item("theme", "dark")

    assert await local_storage.get_item("theme") == "dark"
    await local_storage.close()
