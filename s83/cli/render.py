"""Render the "Daily Spring": a single HTML page of followed boards.

Each board is embedded in its own declarative shadow root so its styles
stay contained. A restrictive Content-Security-Policy blocks scripts
other than the page's own nonce-tagged shim.
"""

import secrets
from dataclasses import dataclass
from datetime import datetime
from html import escape
from pathlib import Path
from typing import Optional, Sequence

from s83.protocol import Board, Follow

DIGEST_NAME_FORMAT = "daily-spring-%Y-%m-%dT%H:%M:%S.html"

CLIENT_CSS = """
  body { background: #f4f1ea; font-family: system-ui, sans-serif; margin: 0; }
  header { display: flex; justify-content: space-between; padding: 1rem 2rem; font-size: 0.9rem; }
  main { display: grid; grid-template-columns: repeat(auto-fill, minmax(20rem, 1fr)); gap: 2rem; padding: 2rem; }
  s83-board { display: block; aspect-ratio: 1 / 1.618; overflow: auto; background: #fff; box-shadow: 0 0 0.5rem #0002; }
  figure { margin: 0; }
  figure.new s83-board { outline: 3px solid #ffb347; }
  figcaption { font-family: monospace; font-size: 0.7rem; padding-top: 0.25rem; word-break: break-all; }
"""

# Attaches shadow roots in browsers without declarative shadow DOM support.
SHADOW_SHIM = """
document.querySelectorAll("template[shadowrootmode]").forEach((t) => {
  const host = t.parentNode;
  if (host.shadowRoot) return;
  host.attachShadow({ mode: t.getAttribute("shadowrootmode") }).appendChild(t.content);
  t.remove();
});
"""


@dataclass(frozen=True)
class DigestEntry:
    follow: Follow
    board: Board
    new: bool = False


def nonce() -> str:
    return secrets.token_hex(32)


def content_security_policy(script_nonce: str) -> str:
    return (
        "default-src 'none'; "
        "style-src 'self' 'unsafe-inline'; "
        "font-src 'self'; "
        "img-src * data:; "
        "form-action *; "
        "connect-src *; "
        f"script-src 'nonce-{script_nonce}';"
    )


def _board_figure(entry: DigestEntry) -> str:
    label = entry.follow.handle or entry.board.key
    css_class = ' class="new"' if entry.new else ""
    return (
        f"<figure{css_class}>\n"
        "<s83-board><template shadowrootmode=\"open\">\n"
        f"{entry.board.content.decode('utf-8')}\n"
        "</template></s83-board>\n"
        f"<figcaption title=\"{escape(entry.board.key)}\">{escape(label)}</figcaption>\n"
        "</figure>"
    )


def render_digest(entries: Sequence[DigestEntry], profile: str,
                  now: Optional[datetime] = None, script_nonce: Optional[str] = None) -> str:
    """Render the digest page. Board content is embedded byte-for-byte."""
    now = now or datetime.now()
    script_nonce = script_nonce or nonce()
    num_new = sum(1 for e in entries if e.new)
    figures = "\n".join(_board_figure(e) for e in entries)
    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<meta http-equiv="Content-Security-Policy" content="{content_security_policy(script_nonce)}">
<title>Daily Spring</title>
<style>{CLIENT_CSS}</style>
</head>
<body>
<header>
<div>{now.strftime("%I:%M%p").lstrip("0")}<br>{now.strftime("%a, %d %b %Y")}</div>
<div>{num_new} new<br>({escape(profile)})</div>
</header>
<main>
{figures}
</main>
<script nonce="{script_nonce}">{SHADOW_SHIM}</script>
</body>
</html>
"""


def default_digest_path(profile_dir: Path, now: Optional[datetime] = None) -> Path:
    return profile_dir / (now or datetime.now()).strftime(DIGEST_NAME_FORMAT)
