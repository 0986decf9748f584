"""Tests for the Daily Spring digest renderer."""

from datetime import datetime
from pathlib import Path

from bs4 import BeautifulSoup

from s83.cli.render import DigestEntry, content_security_policy, default_digest_path, render_digest
from s83.protocol import Creator, Follow
from tests.conftest import make_board

SERVER = "https://boards.example.com"


def _entry(creator: Creator, now: datetime, body: bytes, handle: str = "", new: bool = False) -> DigestEntry:
    return DigestEntry(Follow.on_server(SERVER, str(creator), handle), make_board(creator, now, body), new)


class TestRenderDigest:
    """Tests for render_digest."""

    def test_embeds_boards_in_order(self, now: datetime):
        """Each board is embedded in its own shadow root, in follow order."""
        entries = [
            _entry(Creator.generate(), now, b"<p>first</p>", "alice"),
            _entry(Creator.generate(), now, b"<p>second</p>", "bob"),
        ]
        soup = BeautifulSoup(render_digest(entries, "default"), "html.parser")

        templates = soup.select("s83-board > template[shadowrootmode=open]")
        assert [t.p.string for t in templates] == ["first", "second"]
        assert [c.get_text() for c in soup.find_all("figcaption")] == ["alice", "bob"]

    def test_caption_falls_back_to_key(self, creator: Creator, now: datetime):
        """Follows without a handle are captioned with their key."""
        soup = BeautifulSoup(render_digest([_entry(creator, now, b"<p>x</p>")], "default"), "html.parser")
        assert soup.figcaption.get_text() == str(creator)
        assert soup.figcaption["title"] == str(creator)

    def test_new_boards_are_marked(self, now: datetime):
        """New boards get the new class and are counted in the header."""
        entries = [
            _entry(Creator.generate(), now, b"<p>old</p>"),
            _entry(Creator.generate(), now, b"<p>fresh</p>", new=True),
        ]
        soup = BeautifulSoup(render_digest(entries, "work"), "html.parser")

        figures = soup.find_all("figure")
        assert figures[0].get("class") is None
        assert figures[1]["class"] == ["new"]
        assert "1 new" in soup.header.get_text()
        assert "(work)" in soup.header.get_text()

    def test_csp_nonce_matches_script(self, creator: Creator, now: datetime):
        """Only the page's own script carries the CSP nonce."""
        html = render_digest([_entry(creator, now, b"<p>x</p>")], "default", script_nonce="abc123")
        soup = BeautifulSoup(html, "html.parser")

        csp = soup.find("meta", attrs={"http-equiv": "Content-Security-Policy"})
        assert csp["content"] == content_security_policy("abc123")
        assert "script-src 'nonce-abc123';" in csp["content"]
        assert soup.find("script", attrs={"nonce": "abc123"}) is not None

    def test_escapes_handle_and_profile(self, creator: Creator, now: datetime):
        """Handles and profile names are escaped; board content is not."""
        html = render_digest([_entry(creator, now, b"<b>bold</b>", "<i>x</i>")], "<evil>")
        assert "&lt;i&gt;x&lt;/i&gt;" in html
        assert "(&lt;evil&gt;)" in html
        assert "<b>bold</b>" in html

    def test_header_shows_time(self):
        """The header carries the render time."""
        when = datetime(2022, 6, 21, 9, 5)
        html = render_digest([], "default", now=when)
        assert "9:05AM" in html
        assert "Tue, 21 Jun 2022" in html


def test_default_digest_path():
    """Digest files are named by render time inside the profile dir."""
    path = default_digest_path(Path("/tmp/p"), datetime(2022, 6, 21, 9, 5, 7))
    assert path == Path("/tmp/p/daily-spring-2022-06-21T09:05:07.html")
