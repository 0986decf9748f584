"""Flat-file board store with a write-through cache.

Each board lives in ``<key>.s83``: the hex signature on the first line,
the raw content after it. Every valid board on disk is cached at open, so
reads are served from memory and only writes touch the disk. Writing a
board clobbers the previous one for that key; there is no history.
"""
import asyncio
import logging
import os
import weakref
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Union

from s83.protocol import BOARD_EXT, Board, MalformedBoardError, MalformedKeyError, Publisher, S83Error, board_from_bytes

logger = logging.getLogger(__name__)


class StoreError(S83Error):
    pass


class BoardNotFoundError(StoreError):
    pass


class InvalidBoardOnDiskError(StoreError):
    pass


class StorageError(StoreError):
    pass


class StoreNotADirectoryError(StorageError):
    pass


class BoardStore:
    """Directory-backed repository of boards keyed by publisher key."""

    def __init__(self, path: Path) -> None:
        self._dir = path
        self._cache: dict[str, Board] = {}
        self._write_lock = asyncio.Lock()
        self._key_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    @classmethod
    def open(cls, path: Union[str, Path]) -> "BoardStore":
        """Open a store directory, validating and caching the boards in it.

        Malformed board files are logged and skipped.
        """
        abs_path = Path(path).resolve()
        if not abs_path.exists():
            raise StoreNotADirectoryError(f"store path ({abs_path}) does not exist")
        if not abs_path.is_dir():
            raise StoreNotADirectoryError(f"store path ({abs_path}) is not a directory")
        store = cls(abs_path)
        store._load()
        return store

    def count(self) -> int:
        """Number of live boards, i.e. boards reachable by get()."""
        return len(self._cache)

    async def get(self, key: str) -> Board:
        key = self._normalize(key)
        board = self._cache.get(key)
        if board is not None:
            return board
        async with self._write_lock:
            board = self._cache.get(key)
            if board is None:
                board = await asyncio.to_thread(self._read, key)
                self._cache[key] = board
            return board

    async def add(self, board: Board) -> None:
        """Write a board to disk, replacing any existing board for the key."""
        async with self._write_lock:
            await asyncio.to_thread(self._write, board)
            self._cache[board.key] = board

    async def remove(self, key: str) -> None:
        key = self._normalize(key)
        async with self._write_lock:
            try:
                await asyncio.to_thread(self._path(key).unlink)
            except FileNotFoundError as e:
                self._cache.pop(key, None)
                raise BoardNotFoundError(f"No board for key {key}") from e
            except OSError as e:
                raise StorageError(f"Error removing board for key {key}: {e}") from e
            self._cache.pop(key, None)

    @asynccontextmanager
    async def key_lock(self, key: str) -> AsyncIterator[None]:
        """Hold the per-key lock for a read-compare-write sequence."""
        key = self._normalize(key)
        lock = self._key_locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._key_locks[key] = lock
        async with lock:
            yield

    def _load(self) -> None:
        for board_path in sorted(self._dir.glob(f"*{BOARD_EXT}")):
            key = board_path.name[:-len(BOARD_EXT)]
            try:
                board = self._read(self._normalize(key))
            except StoreError as e:
                logger.warning("Bad board at %s: %s", board_path.name, e)
                continue
            self._cache[board.key] = board
        logger.info("Loaded %d boards from store %s", len(self._cache), self._dir)

    def _normalize(self, key: str) -> str:
        try:
            return str(Publisher.from_hex(key))
        except MalformedKeyError as e:
            raise BoardNotFoundError(f"No board for malformed key: {e}") from e

    def _path(self, key: str) -> Path:
        return self._dir / f"{key}{BOARD_EXT}"

    def _read(self, key: str) -> Board:
        try:
            data = self._path(key).read_bytes()
        except FileNotFoundError as e:
            raise BoardNotFoundError(f"No board for key {key}") from e
        except OSError as e:
            raise StorageError(f"Error reading board for key {key}: {e}") from e
        try:
            return board_from_bytes(key, data)
        except (MalformedBoardError, MalformedKeyError) as e:
            raise InvalidBoardOnDiskError(f"Invalid board for key {key}: {e}") from e

    def _write(self, board: Board) -> None:
        path = self._path(board.key)
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "wb") as f:
                f.write(board.to_bytes())
            os.replace(tmp_path, path)
        except OSError as e:
            raise StorageError(f"Error saving board for key {board.key}: {e}") from e
