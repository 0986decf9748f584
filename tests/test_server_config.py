"""Tests for server configuration loading."""
from pathlib import Path

import pytest

from s83.protocol import INFERNAL_KEY, TEST_PUBLIC
from s83.server.config import ServerConfig, _parse_bool, load_config_from_env

ENV_VARS = ("HOST", "PORT", "STORE", "TTL", "TITLE", "ADMIN_BOARD", "BLOCKLIST", "DIFFICULTY_ENABLED", "DIFFICULTY_BOARD_SEED")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestLoadConfigFromEnv:
    def test_defaults(self) -> None:
        config = load_config_from_env()
        assert config.host == ""
        assert config.port == 8080
        assert config.store_path == Path("store")
        assert config.ttl_days == 22
        assert config.title == "s83d"
        assert config.admin_key is None
        assert config.blocklist == frozenset({INFERNAL_KEY})
        assert not config.difficulty.enabled

    def test_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOST", "127.0.0.1")
        monkeypatch.setenv("PORT", "9000")
        monkeypatch.setenv("STORE", "/tmp/boards")
        monkeypatch.setenv("TTL", "7")
        monkeypatch.setenv("TITLE", "my boards")
        monkeypatch.setenv("ADMIN_BOARD", TEST_PUBLIC.upper())
        monkeypatch.setenv("DIFFICULTY_ENABLED", "yes")
        monkeypatch.setenv("DIFFICULTY_BOARD_SEED", "1000")
        config = load_config_from_env()
        assert (config.host, config.port) == ("127.0.0.1", 9000)
        assert config.store_path == Path("/tmp/boards")
        assert config.ttl_days == 7
        assert config.title == "my boards"
        assert config.admin_key == TEST_PUBLIC
        assert config.difficulty.enabled
        assert config.difficulty.board_seed == 1000

    def test_blocklist_always_has_infernal_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BLOCKLIST", f" {TEST_PUBLIC.upper()} ,,")
        assert load_config_from_env().blocklist == frozenset({INFERNAL_KEY, TEST_PUBLIC})

    def test_bad_blocklist_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BLOCKLIST", "nope")
        with pytest.raises(ValueError):
            load_config_from_env()

    def test_invalid_admin_board_is_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ADMIN_BOARD", "nope")
        assert load_config_from_env().admin_key is None

    @pytest.mark.parametrize("ttl", ["6", "23"])
    def test_ttl_out_of_range(self, monkeypatch: pytest.MonkeyPatch, ttl: str) -> None:
        monkeypatch.setenv("TTL", ttl)
        with pytest.raises(ValueError, match="Invalid TTL"):
            load_config_from_env()

    def test_non_integer_port(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PORT", "http")
        with pytest.raises(ValueError, match="PORT"):
            load_config_from_env()


class TestServerConfig:
    def test_ttl_validated_on_construction(self) -> None:
        with pytest.raises(ValueError):
            ServerConfig(ttl_days=30)


class TestParseBool:
    @pytest.mark.parametrize("value, expected", [
        ("true", True), ("1", True), ("YES", True),
        ("false", False), ("0", False), ("No", False),
    ])
    def test_recognised_values(self, value: str, expected: bool) -> None:
        assert _parse_bool(value, default=not expected) is expected

    def test_empty_uses_default(self) -> None:
        assert _parse_bool("", default=True) is True

    def test_typo_warns_and_uses_default(self, caplog: pytest.LogCaptureFixture) -> None:
        assert _parse_bool("ture", default=False) is False
        assert "Unrecognised boolean value" in caplog.text
