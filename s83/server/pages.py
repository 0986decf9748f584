"""HTML for the server home page."""
from html import escape
from typing import Optional

from s83.protocol import Board

BOARD_CSS = """
  body { font-family: system-ui, sans-serif; max-width: 60rem; margin: 2rem auto; padding: 0 1rem; }
  .boards { display: grid; grid-template-columns: repeat(auto-fill, minmax(20rem, 1fr)); gap: 1.5rem; }
  s83-board { display: block; aspect-ratio: 1 / 1.618; overflow: auto; border: 1px solid #ccc; }
  .key { font-family: monospace; font-size: 0.7rem; word-break: break-all; color: #666; }
"""


def board_element(board: Board, label: str = "") -> str:
    """Embed a board in an isolated shadow root so its styles cannot leak."""
    caption = escape(label or board.key)
    return (
        "<figure>\n"
        "<s83-board><template shadowrootmode=\"open\">\n"
        f"{board.content.decode('utf-8')}\n"
        "</template></s83-board>\n"
        f"<figcaption class=\"key\">{caption}</figcaption>\n"
        "</figure>"
    )


def home_page(title: str, num_boards: int, ttl_days: int,
              admin_board: Optional[Board], test_board: Optional[Board]) -> str:
    boards = []
    if admin_board is not None:
        boards.append(board_element(admin_board, f"admin: {admin_board.key}"))
    if test_board is not None:
        boards.append(board_element(test_board, f"test: {test_board.key}"))
    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{escape(title)}</title>
<style>{BOARD_CSS}</style>
</head>
<body>
<h1>{escape(title)}</h1>
<p>A Spring '83 server holding {num_boards} boards. Boards expire after {ttl_days} days.</p>
<div class="boards">
{chr(10).join(boards)}
</div>
</body>
</html>
"""
