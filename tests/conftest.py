"""Pytest fixtures shared across the test suites."""
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from s83.protocol import KEY_LEN, Board, Creator, time_element
from s83.server.app import create_app
from s83.server.config import ServerConfig


def key_for(when: datetime, stub: str = "a") -> str:
    """A syntactically valid key whose expiry month is ``when``'s month."""
    return stub * (KEY_LEN - 7) + f"83e{when.month:02d}{str(when.year)[2:]}"


def make_board(creator: Creator, ts: datetime, body: bytes = b"<p>hello</p>") -> Board:
    """Sign a board stamped at ``ts``."""
    return creator.publish(time_element(ts).encode("utf-8") + body, now=ts)


def put_headers(board: Board) -> dict:
    return {
        "Content-Type": "text/html;charset=utf-8",
        "Spring-Version": "83",
        "Spring-Signature": str(board.signature),
    }


def write_board(store_dir: Path, board: Board) -> None:
    (store_dir / f"{board.key}.s83").write_bytes(board.to_bytes())


@pytest.fixture
def now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


@pytest.fixture
def hour_ago(now: datetime) -> datetime:
    return now - timedelta(hours=1)


@pytest.fixture
def creator() -> Creator:
    return Creator.generate()


@pytest.fixture
def store_dir(tmp_path: Path) -> Path:
    path = tmp_path / "store"
    path.mkdir()
    return path


@pytest.fixture
def server_config(store_dir: Path) -> ServerConfig:
    return ServerConfig(store_path=store_dir, ttl_days=22, title="test-s83d")


@pytest.fixture
def client(server_config: ServerConfig) -> TestClient:
    app = create_app(server_config)
    with TestClient(app) as c:
        yield c
