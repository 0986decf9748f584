"""Spring '83 protocol library: identities, boards, mining and following."""

from ._constants import (
    BOARD_EXT, HEADER_IF_MODIFIED_SINCE, HEADER_SIGNATURE, HEADER_VERSION, INFERNAL_KEY, KEY_LEN,
    MAX_BOARD_LEN, MAX_NUM_BOARDS, SIG_LEN, SPRING_VERSION, TEST_PRIVATE, TEST_PUBLIC,
)
from .board import Board, board_from_bytes, board_from_http, new_board, parse_timestamp, time_element
from .difficulty import DifficultyGate, difficulty_factor, key_threshold
from .exceptions import (
    BoardTooLargeError, FollowError, FutureTimestampError, InvalidSignatureError, MalformedBoardError,
    MalformedKeyError, MiningCancelledError, NoTimestampError, NotUTF8Error, S83Error, TransportError,
)
from .follow import Follow, FollowReport, fetch_board, parse_springfile_follows, sync_follows
from .identity import Creator, Publisher, Signature
from .miner import MineResult, mine
from .transport import Transport

__all__ = [
    "SPRING_VERSION", "KEY_LEN", "SIG_LEN", "MAX_BOARD_LEN", "MAX_NUM_BOARDS", "BOARD_EXT",
    "HEADER_VERSION", "HEADER_SIGNATURE", "HEADER_IF_MODIFIED_SINCE", "TEST_PUBLIC", "TEST_PRIVATE", "INFERNAL_KEY",
    "Publisher", "Creator", "Signature", "Board",
    "new_board", "board_from_bytes", "board_from_http", "parse_timestamp", "time_element",
    "DifficultyGate", "difficulty_factor", "key_threshold", "MineResult", "mine",
    "Follow", "FollowReport", "fetch_board", "parse_springfile_follows", "sync_follows", "Transport",
    "S83Error", "MalformedKeyError", "MalformedBoardError", "NotUTF8Error", "BoardTooLargeError",
    "InvalidSignatureError", "NoTimestampError", "FutureTimestampError", "MiningCancelledError",
    "TransportError", "FollowError",
]

__version__ = "0.1.0"
