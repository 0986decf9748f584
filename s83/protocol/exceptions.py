"""Exception types for the Spring '83 protocol library."""


class S83Error(Exception):
    """Base exception for all protocol errors."""
    pass


class MalformedKeyError(S83Error):
    """Public or private key could not be parsed."""
    BAD_LENGTH = "bad_length"
    BAD_HEX = "bad_hex"

    def __init__(self, message: str, reason: str) -> None:
        super().__init__(message)
        self.reason = reason


class MalformedBoardError(S83Error):
    """Board failed validation."""
    pass


class NotUTF8Error(MalformedBoardError):
    """Board content is not valid UTF-8."""
    pass


class BoardTooLargeError(MalformedBoardError):
    """Board content exceeds the size limit."""
    pass


class InvalidSignatureError(MalformedBoardError):
    """Signature is missing, malformed, or does not verify."""
    pass


class NoTimestampError(MalformedBoardError):
    """Board content has no parseable <time> element."""
    pass


class FutureTimestampError(MalformedBoardError):
    """Board timestamp is later than the current time."""
    pass


class MiningCancelledError(S83Error):
    """Key mining was cancelled before a valid key was found."""
    def __init__(self, message: str, attempts: int = 0) -> None:
        super().__init__(message)
        self.attempts = attempts


class TransportError(S83Error):
    """Network communication error."""
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class FollowError(S83Error):
    """Every followed board failed to sync."""
    def __init__(self, message: str, failed: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.failed = failed or {}
