"""Publisher and creator identities backed by Ed25519 keys.

A publisher key is valid only inside the window encoded by its final seven
hex characters: ``83e`` followed by ``MMYY``. The key becomes valid two years
before that month and expires when the month ends.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey
from cryptography.hazmat.primitives.serialization import Encoding, NoEncryption, PrivateFormat, PublicFormat

from ._constants import KEY_LEN, SIG_LEN, YEAR_BASE
from .exceptions import InvalidSignatureError, MalformedKeyError

if TYPE_CHECKING:
    from .board import Board

_VALID_KEY_RE = re.compile(r"83e(0[1-9]|1[0-2])(\d\d)$")
_SIGNATURE_HEADER_RE = re.compile(r"^[0-9A-Fa-f]{128}$")


def _decode_key_hex(key_hex: str, kind: str) -> bytes:
    if len(key_hex) != KEY_LEN:
        raise MalformedKeyError(f"Invalid {kind} key length: {len(key_hex)}", MalformedKeyError.BAD_LENGTH)
    try:
        return bytes.fromhex(key_hex)
    except ValueError as e:
        raise MalformedKeyError(f"Invalid {kind} key encoding: {e}", MalformedKeyError.BAD_HEX) from e


def _utc(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


@dataclass(frozen=True)
class Publisher:
    """A 32-byte Ed25519 public key, the identity a board is published under."""

    key: bytes

    @classmethod
    def from_hex(cls, key_hex: str) -> Publisher:
        return cls(_decode_key_hex(key_hex, "public"))

    def __str__(self) -> str:
        return self.key.hex()

    @property
    def strength(self) -> int:
        """The key read as a big-endian unsigned integer."""
        return int.from_bytes(self.key, "big")

    def public_key(self) -> Ed25519PublicKey:
        return Ed25519PublicKey.from_public_bytes(self.key)

    def validity_window(self) -> tuple[datetime, datetime] | None:
        """Return ``(start, expiry)`` encoded in the key, or None if the key has no valid suffix."""
        match = _VALID_KEY_RE.search(str(self))
        if match is None:
            return None
        month = int(match.group(1))
        year = YEAR_BASE + int(match.group(2))
        start = datetime(year - 2, month, 1, tzinfo=timezone.utc)
        if month == 12:
            expiry = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
        else:
            expiry = datetime(year, month + 1, 1, tzinfo=timezone.utc)
        return start, expiry

    def is_valid(self, now: datetime | None = None) -> bool:
        window = self.validity_window()
        if window is None:
            return False
        start, expiry = window
        return start <= _utc(now) < expiry


@dataclass(frozen=True)
class Signature:
    """Opaque 64-byte Ed25519 signature. Only verifiable and printable."""

    raw: bytes

    @classmethod
    def from_hex(cls, sig_hex: str) -> Signature:
        if len(sig_hex) != SIG_LEN:
            raise InvalidSignatureError(f"Invalid signature length: {len(sig_hex)}")
        try:
            return cls(bytes.fromhex(sig_hex))
        except ValueError as e:
            raise InvalidSignatureError(f"Invalid signature encoding: {e}") from e

    @classmethod
    def from_header(cls, value: str | None) -> Signature:
        """Parse a ``Spring-Signature: <signature>`` header value."""
        if not value or not _SIGNATURE_HEADER_RE.match(value):
            raise InvalidSignatureError("Invalid format for 'Spring-Signature'")
        return cls(bytes.fromhex(value))

    def __str__(self) -> str:
        return self.raw.hex()

    def verify(self, publisher: Publisher, content: bytes) -> bool:
        try:
            publisher.public_key().verify(self.raw, content)
            return True
        except (InvalidSignature, ValueError):
            return False


@dataclass(frozen=True, eq=False)
class Creator:
    """A publisher together with the private key that signs its boards."""

    private_key: Ed25519PrivateKey
    publisher: Publisher

    @classmethod
    def generate(cls) -> Creator:
        """Generate a random keypair. Not necessarily a valid publisher."""
        private_key = Ed25519PrivateKey.generate()
        public_bytes = private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
        return cls(private_key, Publisher(public_bytes))

    @classmethod
    def from_hex(cls, seed_hex: str) -> Creator:
        """Import a creator from its 32-byte seed (RFC 8032 private key)."""
        seed = _decode_key_hex(seed_hex, "private")
        private_key = Ed25519PrivateKey.from_private_bytes(seed)
        public_bytes = private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
        return cls(private_key, Publisher(public_bytes))

    def __str__(self) -> str:
        return str(self.publisher)

    def export_private_key(self) -> str:
        return self.private_key.private_bytes(Encoding.Raw, PrivateFormat.Raw, NoEncryption()).hex()

    def is_valid(self, now: datetime | None = None) -> bool:
        return self.publisher.is_valid(now)

    def sign(self, content: bytes) -> Signature:
        return Signature(self.private_key.sign(content))

    def publish(self, content: bytes, now: datetime | None = None) -> Board:
        """Stamp (if needed), sign and validate ``content`` as a board.

        Content without a timestamp gets one prepended for ``now``. Content
        whose timestamp is later than ``now`` raises FutureTimestampError.
        """
        from .board import publish_board
        return publish_board(self, content, _utc(now))
