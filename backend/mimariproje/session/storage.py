"""Persistent key-value storage shared by client sessions.

``LocalStorage`` plays the role of the browser's local storage area: a
string-to-string map that survives restarts and that several sessions
("tabs") may share. Writes that change a value are announced to every
subscribed session except the writer, which is how sessions keep their
authentication state in sync.
"""

from __future__ import annotations

import asyncio
import inspect
import itertools
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import aiosqlite

from .storage_exceptions import StorageClosedError, StorageError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from mimariproje.config import AppConfig

    StorageListener = Callable[["StorageEvent"], Awaitable[None] | None]

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)


@dataclass(frozen=True)
class StorageEvent:
    """A change made to the storage by some session.

    :param key: The key that changed, or None when the storage was cleared
    :param old_value: The value before the change
    :param new_value: The value after the change, None when removed
    :param source: Identifier of the session that made the change
    """

    key: str | None
    old_value: str | None
    new_value: str | None
    source: str | None


class LocalStorage:
    """SQLite-backed key-value area with change notifications."""

    CREATE_STORAGE_TABLE = """
        CREATE TABLE IF NOT EXISTS local_storage (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );
        """

    GET_ITEM = """
        SELECT value FROM local_storage WHERE key = ?;
        """

    SET_ITEM = """
        INSERT INTO local_storage (key, value) VALUES (?, ?)
        ON CONFLICT (key) DO UPDATE SET
            value = excluded.value,
            updated_at = CURRENT_TIMESTAMP;
        """

    DELETE_ITEM = """
        DELETE FROM local_storage WHERE key = ?;
        """

    DELETE_ALL = """DELETE FROM local_storage;"""

    LIST_KEYS = """SELECT key FROM local_storage ORDER BY key;"""

    def __init__(self, connection: aiosqlite.Connection) -> None:
        self.connection: aiosqlite.Connection | None = connection
        self._listeners: dict[int, tuple[str, StorageListener]] = {}
        self._listener_ids = itertools.count(1)
        self._deliveries: set[asyncio.Task[None]] = set()

    @classmethod
    async def create(cls, db_path: str) -> LocalStorage:
        """Open a storage area at the given SQLite path and prepare its table.

        :param db_path: Path to the SQLite database file, or ``:memory:``
        :return: Ready-to-use LocalStorage instance
        :raises StorageError: If the database cannot be opened
        """
        try:
            connection = await aiosqlite.connect(db_path)
        except aiosqlite.Error as e:
            msg = f"Could not open storage at {db_path}"
            raise StorageError(msg) from e

        storage = cls(connection)
        await storage.initialize()
        LOGGER.debug("Local storage opened at %s", db_path)
        return storage

    @classmethod
    async def from_config(cls, config: AppConfig) -> LocalStorage:
        """Open the storage area at the configured ``STORAGE_PATH``."""
        return await cls.create(config.storage_path)

    async def initialize(self) -> None:
        """Create the storage table if it does not exist."""
        db = self._require_connection()
        try:
            await db.execute(LocalStorage.CREATE_STORAGE_TABLE)
            await db.commit()
        except aiosqlite.Error as e:
            msg = "Could not initialize storage table"
            raise StorageError(msg) from e

    async def close(self) -> None:
        """Close the database connection, dropping listeners and pending events."""
        if self.connection is None:
            return
        for task in self._deliveries:
            task.cancel()
        await asyncio.gather(*self._deliveries, return_exceptions=True)
        await self.connection.close()
        self.connection = None
        self._listeners.clear()

    async def __aenter__(self) -> LocalStorage:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()

    def _require_connection(self) -> aiosqlite.Connection:
        if self.connection is None:
            msg = "Local storage is closed"
            raise StorageClosedError(msg)
        return self.connection

    async def get_item(self, key: str) -> str | None:
        """Return the value stored under ``key`` or None.

        :param key: The storage key
        :return: The stored value, or None if absent
        """
        db = self._require_connection()
        try:
            async with db.execute(LocalStorage.GET_ITEM, (key,)) as cursor:
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            msg = f"Could not read storage key {key}"
            raise StorageError(msg) from e
        return row[0] if row else None

    async def set_item(self, key: str, value: str, *, source: str | None = None) -> None:
        """Store ``value`` under ``key`` and notify other sessions.

        No event is raised when the stored value does not change.

        :param key: The storage key
        :param value: The value to store
        :param source: Identifier of the writing session
        """
        old_value = await self.get_item(key)
        db = self._require_connection()
        try:
            await db.execute(LocalStorage.SET_ITEM, (key, value))
            await db.commit()
        except aiosqlite.Error as e:
            await db.rollback()
            msg = f"Could not write storage key {key}"
            raise StorageError(msg) from e

        if old_value != value:
            self._dispatch(StorageEvent(key, old_value, value, source))

    async def remove_item(self, key: str, *, source: str | None = None) -> None:
        """Remove ``key`` from the storage and notify other sessions.

        :param key: The storage key
        :param source: Identifier of the writing session
        """
        old_value = await self.get_item(key)
        if old_value is None:
            return

        db = self._require_connection()
        try:
            await db.execute(LocalStorage.DELETE_ITEM, (key,))
            await db.commit()
        except aiosqlite.Error as e:
            await db.rollback()
            msg = f"Could not remove storage key {key}"
            raise StorageError(msg) from e

        self._dispatch(StorageEvent(key, old_value, None, source))

    async def clear(self, *, source: str | None = None) -> None:
        """Remove every key; other sessions receive an event with key None."""
        db = self._require_connection()
        try:
            await db.execute(LocalStorage.DELETE_ALL)
            await db.commit()
        except aiosqlite.Error as e:
            await db.rollback()
            msg = "Could not clear storage"
            raise StorageError(msg) from e

        self._dispatch(StorageEvent(None, None, None, source))

    async def keys(self) -> list[str]:
        """Return all stored keys in sorted order."""
        db = self._require_connection()
        try:
            async with db.execute(LocalStorage.LIST_KEYS) as cursor:
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            msg = "Could not list storage keys"
            raise StorageError(msg) from e
        return [row[0] for row in rows]

    def subscribe(self, owner: str, listener: StorageListener) -> Callable[[], None]:
        """Register a listener for changes made by sessions other than ``owner``.

        :param owner: Identifier of the subscribing session
        :param listener: Sync or async callable receiving StorageEvent objects
        :return: A callable that removes the listener
        """
        listener_id = next(self._listener_ids)
        self._listeners[listener_id] = (owner, listener)

        def unsubscribe() -> None:
            self._listeners.pop(listener_id, None)

        return unsubscribe

    def _dispatch(self, event: StorageEvent) -> None:
        """Queue an event for listeners owned by other sessions.

        Each delivery runs as its own task; the writer does not wait for it.
        Deliveries to one listener start in the order the writes happened.
        """
        for owner, listener in list(self._listeners.values()):
            if event.source is not None and owner == event.source:
                continue
            task = asyncio.create_task(_deliver(owner, listener, event))
            self._deliveries.add(task)
            task.add_done_callback(self._deliveries.discard)

    async def drain(self) -> None:
        """Wait until every queued event, including ones queued meanwhile, is handled."""
        while self._deliveries:
            await asyncio.gather(*self._deliveries, return_exceptions=True)


async def _deliver(owner: str, listener: StorageListener, event: StorageEvent) -> None:
    """Run one listener; a failure is logged and never reaches the writer."""
    try:
        result = listener(event)
        if inspect.isawaitable(result):
            await result
    except Exception:
        LOGGER.exception("Storage listener of %s failed for key %s", owner, event.key)
