"""Tests for CLI commands."""

import json
import stat
from datetime import datetime, timedelta
from pathlib import Path

import httpx
import pytest
from typer.testing import CliRunner

from s83.cli.main import app
from s83.cli.utils.config import ConfigManager
from s83.protocol import HEADER_SIGNATURE, TEST_PRIVATE, TEST_PUBLIC, Board, Creator, MineResult, Transport
from tests.conftest import make_board

runner = CliRunner()
SERVER = "https://boards.example.com"


@pytest.fixture
def config_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    home = tmp_path / "s83"
    monkeypatch.setattr(ConfigManager, "DEFAULT_DIR", home)
    return home


@pytest.fixture
def profile(config_home: Path) -> ConfigManager:
    result = runner.invoke(app, ["init", "--server", SERVER])
    assert result.exit_code == 0
    return ConfigManager()


@pytest.fixture
def valid_creator(monkeypatch: pytest.MonkeyPatch) -> Creator:
    monkeypatch.setattr(Creator, "is_valid", lambda self, now=None: True)
    return Creator.from_hex(TEST_PRIVATE)


def _mock_server(monkeypatch: pytest.MonkeyPatch, boards: dict[str, Board]) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        board = boards.get(request.url.path.rsplit("/", 1)[-1])
        if board is None:
            return httpx.Response(404)
        return httpx.Response(200, content=board.content, headers={HEADER_SIGNATURE: str(board.signature)})

    monkeypatch.setattr(
        "s83.cli.commands.get.Transport",
        lambda: Transport(transport=httpx.MockTransport(handler)),
    )


class TestInitCommand:
    def test_init_creates_config(self, config_home: Path) -> None:
        result = runner.invoke(app, ["init", "--server", SERVER])
        assert result.exit_code == 0
        assert "initialized" in result.stdout
        assert (config_home / "default" / "config.yaml").exists()
        assert (config_home / "default" / "boards").is_dir()

    def test_init_json_output(self, config_home: Path) -> None:
        result = runner.invoke(app, ["init", "--server", SERVER, "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["status"] == "initialized"
        assert data["profile"] == "default"
        assert data["server"] == SERVER

    def test_init_fails_without_force(self, config_home: Path) -> None:
        runner.invoke(app, ["init"])
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 1
        assert "already exists" in result.stdout

    def test_init_with_force_overwrites(self, config_home: Path) -> None:
        runner.invoke(app, ["init"])
        result = runner.invoke(app, ["init", "--server", SERVER, "--force"])
        assert result.exit_code == 0
        assert ConfigManager().load().server == SERVER

    def test_init_validates_server(self, config_home: Path) -> None:
        result = runner.invoke(app, ["init", "--server", "ftp://example.com"])
        assert result.exit_code == 2
        assert "http" in result.stdout

    def test_profiles_are_separate(self, config_home: Path) -> None:
        result = runner.invoke(app, ["--profile", "work", "init"])
        assert result.exit_code == 0
        assert (config_home / "work" / "config.yaml").exists()
        assert not (config_home / "default").exists()


class TestWhoCommand:
    def test_who_not_initialized(self, config_home: Path) -> None:
        result = runner.invoke(app, ["who"])
        assert result.exit_code == 1
        assert "s83" in result.stdout

    def test_who_json(self, profile: ConfigManager, creator: Creator) -> None:
        runner.invoke(app, ["follow", f"{SERVER}/{creator}", "--handle", "alice"])
        result = runner.invoke(app, ["who", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["name"] == "default"
        assert data["server"] == SERVER
        assert data["public"] is None
        assert data["follows"] == [{"key": str(creator), "url": f"{SERVER}/{creator}", "handle": "alice"}]

    def test_who_shows_creator(self, profile: ConfigManager) -> None:
        profile.save_creator(Creator.from_hex(TEST_PRIVATE))
        result = runner.invoke(app, ["who"])
        assert result.exit_code == 0
        assert TEST_PUBLIC in result.stdout


class TestFollowCommand:
    def test_follow_adds_entry(self, profile: ConfigManager, creator: Creator) -> None:
        result = runner.invoke(app, ["follow", f"{SERVER}/{creator}"])
        assert result.exit_code == 0
        assert [f.key for f in profile.load().follows] == [str(creator)]

    def test_follow_twice(self, profile: ConfigManager, creator: Creator) -> None:
        runner.invoke(app, ["follow", f"{SERVER}/{creator}"])
        result = runner.invoke(app, ["follow", f"{SERVER}/{creator}", "--json"])
        assert json.loads(result.stdout)["status"] == "already_followed"
        assert len(profile.load().follows) == 1

    def test_follow_invalid_url(self, profile: ConfigManager) -> None:
        result = runner.invoke(app, ["follow", f"{SERVER}/nope"])
        assert result.exit_code == 2

    def test_follow_requires_profile(self, config_home: Path, creator: Creator) -> None:
        result = runner.invoke(app, ["follow", f"{SERVER}/{creator}"])
        assert result.exit_code == 1


class TestNewCommand:
    @pytest.fixture(autouse=True)
    def fake_mine(self, monkeypatch: pytest.MonkeyPatch) -> Creator:
        creator = Creator.from_hex(TEST_PRIVATE)
        monkeypatch.setattr("s83.cli.commands.new.mine", lambda jobs: MineResult(creator, 42))
        return creator

    def test_new_prints_keys(self, config_home: Path, fake_mine: Creator) -> None:
        result = runner.invoke(app, ["new", "-j", "2"])
        assert result.exit_code == 0
        assert str(fake_mine) in result.stdout
        assert TEST_PRIVATE in result.stdout
        assert not (config_home / "default" / "creator.key").exists()

    def test_new_save_writes_key(self, config_home: Path) -> None:
        result = runner.invoke(app, ["new", "--save", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["attempts"] == 42
        assert "secret" not in data
        key_path = config_home / "default" / "creator.key"
        assert key_path.read_text().strip() == TEST_PRIVATE
        assert stat.S_IMODE(key_path.stat().st_mode) == 0o600

    def test_new_save_refuses_to_clobber(self, config_home: Path) -> None:
        runner.invoke(app, ["new", "--save"])
        result = runner.invoke(app, ["new", "--save"])
        assert result.exit_code == 1
        assert "already exists" in result.stdout

    def test_new_validates_jobs(self, config_home: Path) -> None:
        result = runner.invoke(app, ["new", "-j", "0"])
        assert result.exit_code == 2


class TestPubCommand:
    def test_pub_dry_run(self, profile: ConfigManager, valid_creator: Creator, tmp_path: Path) -> None:
        profile.save_creator(valid_creator)
        board_file = tmp_path / "board.html"
        board_file.write_text("<p>hello</p>")
        result = runner.invoke(app, ["pub", str(board_file), "--dry", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["status"] == "valid"
        assert data["key"] == str(valid_creator)

    def test_pub_publishes(self, profile: ConfigManager, valid_creator: Creator, tmp_path: Path,
                           monkeypatch: pytest.MonkeyPatch) -> None:
        profile.save_creator(valid_creator)
        board_file = tmp_path / "board.html"
        board_file.write_text("<p>hello</p>")
        sent = []

        async def fake_publish(server: str, board: Board) -> httpx.Response:
            sent.append((server, board))
            return httpx.Response(204)

        monkeypatch.setattr("s83.cli.commands.pub._publish", fake_publish)
        result = runner.invoke(app, ["pub", str(board_file)])
        assert result.exit_code == 0
        assert sent[0][0] == SERVER
        assert sent[0][1].content.endswith(b"<p>hello</p>")

    def test_pub_rejected_by_server(self, profile: ConfigManager, valid_creator: Creator, tmp_path: Path,
                                    monkeypatch: pytest.MonkeyPatch) -> None:
        profile.save_creator(valid_creator)
        board_file = tmp_path / "board.html"
        board_file.write_text("<p>hello</p>")

        async def fake_publish(server: str, board: Board) -> httpx.Response:
            return httpx.Response(409, text="not newer than existing board")

        monkeypatch.setattr("s83.cli.commands.pub._publish", fake_publish)
        result = runner.invoke(app, ["pub", str(board_file)])
        assert result.exit_code == 3
        assert "409" in result.stdout

    def test_pub_requires_creator(self, profile: ConfigManager, tmp_path: Path) -> None:
        board_file = tmp_path / "board.html"
        board_file.write_text("<p>hello</p>")
        result = runner.invoke(app, ["pub", str(board_file), "--dry"])
        assert result.exit_code == 1
        assert "Invalid creator" in result.stdout

    def test_pub_rejects_expired_creator(self, profile: ConfigManager, tmp_path: Path) -> None:
        profile.save_creator(Creator.from_hex(TEST_PRIVATE))
        board_file = tmp_path / "board.html"
        board_file.write_text("<p>hello</p>")
        result = runner.invoke(app, ["pub", str(board_file), "--dry"])
        assert result.exit_code == 1

    def test_pub_requires_server(self, config_home: Path, valid_creator: Creator, tmp_path: Path) -> None:
        runner.invoke(app, ["init"])
        ConfigManager().save_creator(valid_creator)
        board_file = tmp_path / "board.html"
        board_file.write_text("<p>hello</p>")
        result = runner.invoke(app, ["pub", str(board_file)])
        assert result.exit_code == 1
        assert "server" in result.stdout

    def test_pub_missing_file(self, profile: ConfigManager, valid_creator: Creator, tmp_path: Path) -> None:
        profile.save_creator(valid_creator)
        result = runner.invoke(app, ["pub", str(tmp_path / "missing.html"), "--dry"])
        assert result.exit_code == 2


class TestGetCommand:
    def test_get_builds_digest(self, profile: ConfigManager, creator: Creator, now: datetime,
                               tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        board = make_board(creator, now - timedelta(hours=1), b"<p>news from alice</p>")
        _mock_server(monkeypatch, {board.key: board})
        runner.invoke(app, ["follow", f"{SERVER}/{creator}", "--handle", "alice"])
        out = tmp_path / "daily.html"

        result = runner.invoke(app, ["get", "-o", str(out), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["status"] == "ok"
        assert data["new"] == [board.key]
        html = out.read_text()
        assert "news from alice" in html
        assert "alice" in html
        assert "Content-Security-Policy" in html
        assert (profile.boards_dir / f"{board.key}.s83").exists()

    def test_get_new_only_with_nothing_new(self, profile: ConfigManager, creator: Creator, now: datetime,
                                           tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        board = make_board(creator, now - timedelta(hours=1))
        _mock_server(monkeypatch, {board.key: board})
        runner.invoke(app, ["follow", f"{SERVER}/{creator}"])
        out = tmp_path / "daily.html"
        assert runner.invoke(app, ["get", "-o", str(out)]).exit_code == 0
        out.unlink()

        result = runner.invoke(app, ["get", "-o", str(out), "--new", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["status"] == "no_new_boards"
        assert not out.exists()

    def test_get_partial_failure(self, profile: ConfigManager, creator: Creator, now: datetime,
                                 tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        board = make_board(creator, now - timedelta(hours=1))
        missing = Creator.generate()
        _mock_server(monkeypatch, {board.key: board})
        runner.invoke(app, ["follow", f"{SERVER}/{creator}"])
        runner.invoke(app, ["follow", f"{SERVER}/{missing}"])

        result = runner.invoke(app, ["get", "-o", str(tmp_path / "daily.html"), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["status"] == "partial"
        assert list(data["failed"]) == [str(missing)]

    def test_get_all_failed(self, profile: ConfigManager, creator: Creator,
                            tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _mock_server(monkeypatch, {})
        runner.invoke(app, ["follow", f"{SERVER}/{creator}"])
        result = runner.invoke(app, ["get", "-o", str(tmp_path / "daily.html")])
        assert result.exit_code == 1
        assert "Failed to get any boards" in result.stdout

    def test_get_single_key(self, profile: ConfigManager, creator: Creator, now: datetime,
                            tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        board = make_board(creator, now - timedelta(hours=1), b"<p>just this one</p>")
        _mock_server(monkeypatch, {board.key: board})
        out = tmp_path / "daily.html"
        result = runner.invoke(app, ["get", board.key, "-o", str(out)])
        assert result.exit_code == 0
        assert "just this one" in out.read_text()

    def test_get_single_bad_key(self, profile: ConfigManager) -> None:
        result = runner.invoke(app, ["get", "nope"])
        assert result.exit_code == 2
