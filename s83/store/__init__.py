"""Board storage module."""
from s83.store.board_store import (
    BoardNotFoundError, BoardStore, InvalidBoardOnDiskError, StorageError, StoreError, StoreNotADirectoryError,
)
__all__ = ["BoardStore", "StoreError", "BoardNotFoundError", "InvalidBoardOnDiskError", "StorageError",
           "StoreNotADirectoryError"]
