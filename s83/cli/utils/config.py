"""Profile configuration management for the CLI.

Each profile lives in its own directory under ``~/.s83``::

    ~/.s83/<profile>/config.yaml   server, follows, optional springfile
    ~/.s83/<profile>/creator.key   hex private key seed, chmod 600
    ~/.s83/<profile>/boards/       local copies of followed boards
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from s83.protocol import Creator, Follow, S83Error, parse_springfile_follows

DEFAULT_PROFILE = "default"


@dataclass
class ProfileConfig:
    """Profile configuration loaded from the profile directory."""

    name: str
    path: Path
    server: Optional[str]
    creator: Optional[Creator]
    follows: list[Follow] = field(default_factory=list)
    springfile: Optional[Path] = None
    boards_dir: Path = Path("boards")


class ConfigError(Exception):
    """Configuration file error."""

    pass


def _parse_follow(entry: Any) -> Follow:
    if isinstance(entry, str):
        return Follow.from_url(entry)
    if isinstance(entry, dict) and "url" in entry:
        return Follow.from_url(str(entry["url"]), str(entry.get("handle") or ""))
    raise ConfigError(f"Invalid follow entry: {entry!r}")


class ConfigManager:
    """Manages a profile in ~/.s83/<profile>/."""

    DEFAULT_DIR = Path.home() / ".s83"
    CONFIG_FILE = "config.yaml"
    KEY_FILE = "creator.key"
    BOARDS_DIR = "boards"

    def __init__(self, profile: str = DEFAULT_PROFILE, base_dir: Optional[Path] = None) -> None:
        self._profile = profile
        self._profile_dir = (base_dir or self.DEFAULT_DIR) / profile
        self._config_path = self._profile_dir / self.CONFIG_FILE
        self._key_path = self._profile_dir / self.KEY_FILE
        self._boards_dir = self._profile_dir / self.BOARDS_DIR

    @property
    def profile(self) -> str:
        return self._profile

    @property
    def profile_dir(self) -> Path:
        return self._profile_dir

    @property
    def config_path(self) -> Path:
        return self._config_path

    @property
    def key_path(self) -> Path:
        return self._key_path

    @property
    def boards_dir(self) -> Path:
        return self._boards_dir

    def exists(self) -> bool:
        """Check if configuration exists."""
        return self._config_path.exists()

    def has_creator(self) -> bool:
        return self._key_path.exists()

    def _read_data(self) -> dict[str, Any]:
        if not self._config_path.exists():
            raise ConfigError(
                f"Config not found at {self._config_path}. Run 's83 init' first."
            )
        with open(self._config_path) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid config: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError("Invalid config: expected a mapping")
        return data

    def _write_data(self, data: dict[str, Any]) -> None:
        self._profile_dir.mkdir(parents=True, exist_ok=True)
        with open(self._config_path, "w") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)

    def load_creator(self) -> Optional[Creator]:
        """Load the creator key, or None when the profile has none."""
        if not self._key_path.exists():
            return None
        try:
            return Creator.from_hex(self._key_path.read_text().strip())
        except S83Error as e:
            raise ConfigError(f"Invalid key file: {e}") from e

    def load(self) -> ProfileConfig:
        """Load configuration from file. Raises ConfigError if not found or invalid."""
        data = self._read_data()

        server = data.get("server") or None
        if server is not None and not str(server).startswith(("http://", "https://")):
            raise ConfigError(f"Invalid server configuration: must include http or https ({server})")

        follows: list[Follow] = []
        for entry in data.get("follows") or []:
            try:
                follows.append(_parse_follow(entry))
            except S83Error as e:
                raise ConfigError(f"Invalid follow {entry!r}: {e}") from e

        springfile: Optional[Path] = None
        if data.get("springfile"):
            springfile = Path(data["springfile"]).expanduser()
            if not springfile.is_absolute():
                springfile = self._profile_dir / springfile
            try:
                follows.extend(parse_springfile_follows(springfile.read_text()))
            except OSError as e:
                raise ConfigError(f"Error reading springfile {springfile}: {e}") from e

        return ProfileConfig(
            name=self._profile,
            path=self._profile_dir,
            server=str(server) if server else None,
            creator=self.load_creator(),
            follows=follows,
            springfile=springfile,
            boards_dir=self._boards_dir,
        )

    def save(self, server: Optional[str] = None) -> None:
        """Write a fresh configuration with no follows."""
        self._write_data({"server": server, "follows": []})
        self._boards_dir.mkdir(parents=True, exist_ok=True)

    def save_creator(self, creator: Creator) -> None:
        """Save the creator's private key seed."""
        self._profile_dir.mkdir(parents=True, exist_ok=True)
        with open(self._key_path, "w") as f:
            f.write(creator.export_private_key() + "\n")
        self._key_path.chmod(0o600)

    def add_follow(self, follow: Follow) -> bool:
        """Append a follow to config.yaml. Returns False if the key is already followed."""
        data = self._read_data()
        entries = list(data.get("follows") or [])
        for entry in entries:
            try:
                if _parse_follow(entry).key == follow.key:
                    return False
            except (S83Error, ConfigError):
                continue
        entries.append({"url": follow.url, "handle": follow.handle} if follow.handle else follow.url)
        data["follows"] = entries
        self._write_data(data)
        return True
