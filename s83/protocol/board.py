"""Board codec and validator.

A board is at most 2217 bytes of UTF-8 HTML, signed by its publisher, and
carrying a ``<time datetime="YYYY-MM-DDTHH:MM:SSZ">`` element. On disk and on
the wire the signature travels separately from the content; the stored form
is the hex signature, a newline, then the raw content bytes.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import format_datetime

from bs4 import BeautifulSoup, Tag

from ._constants import MAX_BOARD_LEN, SIG_LEN, TIME_FORMAT
from .exceptions import (
    BoardTooLargeError,
    FutureTimestampError,
    InvalidSignatureError,
    NoTimestampError,
    NotUTF8Error,
)
from .identity import Creator, Publisher, Signature

_TIMESTAMP_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z$")


@dataclass(frozen=True)
class Board:
    publisher: Publisher
    signature: Signature
    content: bytes
    timestamp: datetime

    def __str__(self) -> str:
        return (
            f"verifies  : {self.verify_signature()}\n"
            f"creator   : {self.publisher}\n"
            f"signature : {self.signature}\n"
            f"{self.content.decode('utf-8')}"
        )

    @property
    def key(self) -> str:
        return str(self.publisher)

    @property
    def last_modified(self) -> str:
        """Timestamp as an HTTP date, suitable for If-Modified-Since."""
        return format_datetime(self.timestamp, usegmt=True)

    def verify_signature(self) -> bool:
        return self.signature.verify(self.publisher, self.content)

    def after(self, ts: datetime) -> bool:
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        return self.timestamp > ts

    def after_board(self, other: Board) -> bool:
        return self.timestamp > other.timestamp

    def to_bytes(self) -> bytes:
        return f"{self.signature}\n".encode("ascii") + self.content


def time_element(ts: datetime) -> str:
    return f'<time datetime="{ts.astimezone(timezone.utc).strftime(TIME_FORMAT)}">'


def _drop_duplicate(attrs: dict, key: str, value: str) -> None:
    # a repeated attribute disqualifies the element
    attrs[key] = None


def _self_closing(text: str, line_starts: list[int], tag: Tag) -> bool:
    start = line_starts[tag.sourceline - 1] + tag.sourcepos
    end = text.find(">", start)
    return end > 0 and text[end - 1] == "/"


def parse_timestamp(content: bytes) -> datetime:
    """Return the first well-formed timestamp in document order.

    A ``<time>`` start tag counts only when ``datetime`` is its sole attribute,
    given once, and holds a strict ``YYYY-MM-DDTHH:MM:SSZ`` value. Self-closing
    ``<time .../>`` tags and unparseable elements are skipped in favour of a
    later valid one.
    """
    text = content.decode("utf-8", errors="replace")
    soup = BeautifulSoup(text, "html.parser", on_duplicate_attribute=_drop_duplicate)
    line_starts = [0] + [m.end() for m in re.finditer("\n", text)]
    for tag in soup.find_all("time"):
        if list(tag.attrs) != ["datetime"]:
            continue
        value = tag.attrs["datetime"]
        if not isinstance(value, str) or not _TIMESTAMP_RE.match(value):
            continue
        if _self_closing(text, line_starts, tag):
            continue
        try:
            return datetime.strptime(value, TIME_FORMAT).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    raise NoTimestampError("Unable to find a valid time element")


def new_board(key: str, signature: Signature, content: bytes) -> Board:
    """Validate and build a board. Checks run cheapest first, signature before timestamp."""
    publisher = Publisher.from_hex(key)
    try:
        content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise NotUTF8Error("Invalid board: not UTF-8") from e
    if len(content) > MAX_BOARD_LEN:
        raise BoardTooLargeError(f"Invalid board: {len(content)} bytes exceeds {MAX_BOARD_LEN}")
    if not signature.verify(publisher, content):
        raise InvalidSignatureError("Invalid signature")
    return Board(publisher, signature, bytes(content), parse_timestamp(content))


def board_from_http(key: str, signature_header: str | None, body: bytes) -> Board:
    Publisher.from_hex(key)
    return new_board(key, Signature.from_header(signature_header), body)


def board_from_bytes(key: str, data: bytes) -> Board:
    """Decode the stored form: signature line, then content."""
    sig_end = data.find(b"\n")
    if sig_end != SIG_LEN:
        raise InvalidSignatureError(f"Invalid signature length: {sig_end}")
    try:
        sig_hex = data[:sig_end].decode("ascii")
    except UnicodeDecodeError as e:
        raise InvalidSignatureError("Invalid signature encoding") from e
    return new_board(key, Signature.from_hex(sig_hex), data[sig_end + 1:])


def publish_board(creator: Creator, content: bytes, now: datetime) -> Board:
    try:
        ts = parse_timestamp(content)
    except NoTimestampError:
        content = time_element(now).encode("utf-8") + content
    else:
        if ts > now:
            raise FutureTimestampError("Time element timestamp is in the future")
    return new_board(str(creator.publisher), creator.sign(content), content)
