"""Server configuration."""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import os

from s83.protocol import INFERNAL_KEY, MalformedKeyError, Publisher

logger = logging.getLogger(__name__)

_RECOGNISED_BOOL_VALUES = frozenset(
    ("1", "true", "yes", "0", "false", "no")
)

MIN_TTL_DAYS = 7
MAX_TTL_DAYS = 22

ENV_DEFAULTS = {
    "HOST": "",
    "PORT": "8080",
    "STORE": "store",
    "TTL": "22",
    "TITLE": "s83d",
    "ADMIN_BOARD": "",
    "BLOCKLIST": "",
    "DIFFICULTY_ENABLED": "false",
    "DIFFICULTY_BOARD_SEED": "0",
}


@dataclass(frozen=True)
class DifficultyConfig:
    """Admission difficulty for keys publishing their first board.

    Disabled by default. ``board_seed`` is added to the live board count
    when computing the difficulty factor, so a small server can behave as
    if it held a larger population.
    """

    enabled: bool = False
    board_seed: int = 0


@dataclass(frozen=True)
class ServerConfig:
    host: str = ""
    port: int = 8080
    store_path: Path = field(default_factory=lambda: Path("store"))
    ttl_days: int = 22
    title: str = "s83d"
    admin_key: Optional[str] = None
    blocklist: frozenset[str] = frozenset({INFERNAL_KEY})
    difficulty: DifficultyConfig = field(default_factory=DifficultyConfig)

    def __post_init__(self) -> None:
        if not MIN_TTL_DAYS <= self.ttl_days <= MAX_TTL_DAYS:
            raise ValueError(
                f"Invalid TTL ({self.ttl_days}), must not be less than "
                f"{MIN_TTL_DAYS} or more than {MAX_TTL_DAYS} days."
            )


def _parse_bool(value: str, default: bool) -> bool:
    """Parse a boolean environment variable with explicit default.

    Recognises ``true/1/yes`` and ``false/0/no`` (case-insensitive).
    Returns *default* when the value is empty or unset.
    Logs a warning and returns *default* for unrecognised values
    (e.g. typos like ``ture``).
    """
    if not value:
        return default
    normalised = value.lower()
    if normalised not in _RECOGNISED_BOOL_VALUES:
        logger.warning(
            "Unrecognised boolean value %r, using default %s. "
            "Expected one of: true/1/yes or false/0/no.",
            value,
            default,
        )
        return default
    return normalised in ("1", "true", "yes")


def _env(name: str) -> str:
    return os.environ.get(name) or ENV_DEFAULTS[name]


def _env_int(name: str) -> int:
    raw = _env(name)
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"Failed parsing int for {name}: {raw!r}") from e


def _parse_keys(raw: str, name: str) -> set[str]:
    keys = set()
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        try:
            keys.add(str(Publisher.from_hex(item)))
        except MalformedKeyError as e:
            raise ValueError(f"Invalid key in {name}: {item!r}: {e}") from e
    return keys


def load_config_from_env() -> ServerConfig:
    admin_key: Optional[str] = None
    admin_raw = _env("ADMIN_BOARD")
    if admin_raw:
        try:
            admin_key = str(Publisher.from_hex(admin_raw))
            logger.info("Admin board configured for %s", admin_key)
        except MalformedKeyError as e:
            logger.warning("Ignoring invalid ADMIN_BOARD %r: %s", admin_raw, e)
    else:
        logger.info("No admin board configured")

    blocklist = {INFERNAL_KEY} | _parse_keys(_env("BLOCKLIST"), "BLOCKLIST")

    return ServerConfig(
        host=_env("HOST"),
        port=_env_int("PORT"),
        store_path=Path(_env("STORE")),
        ttl_days=_env_int("TTL"),
        title=_env("TITLE"),
        admin_key=admin_key,
        blocklist=frozenset(blocklist),
        difficulty=DifficultyConfig(
            enabled=_parse_bool(os.environ.get("DIFFICULTY_ENABLED", ""), default=False),
            board_seed=_env_int("DIFFICULTY_BOARD_SEED"),
        ),
    )
