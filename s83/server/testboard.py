"""The ever-changing board served for the well-known test key.

Every request gets a freshly signed board timestamped at the time of the
request, with a random magic 8-ball answer on a random background.
"""
import random
from datetime import datetime, timezone
from email.utils import format_datetime
from html import escape
from typing import Optional

from s83.protocol import TEST_PRIVATE, Board, Creator

MAGIC_8_BALL = (
    "It is certain.",
    "It is decidedly so.",
    "Without a doubt.",
    "Yes definitely.",
    "You may rely on it.",
    "As I see it, yes.",
    "Most likely.",
    "Outlook good.",
    "Yes.",
    "Signs point to yes.",
    "Reply hazy, try again.",
    "Ask again later.",
    "Better not tell you now.",
    "Cannot predict now.",
    "Concentrate and ask again.",
    "Don't count on it.",
    "My reply is no.",
    "My sources say no.",
    "Outlook not so good.",
    "Very doubtful.",
)

COLORS = (
    "#ffd1dc",
    "#fdfd96",
    "#b39eb5",
    "#aec6cf",
    "#77dd77",
    "#ffb347",
    "#cfcfc4",
    "#f49ac2",
)

_TEMPLATE = """
<style>
  div {{
    background-color: {color};
    padding: 2rem;
    text-align: center;
  }}
  h1 {{ font-size: 2rem; }}
</style>
<div>
  <h1>{message}</h1>
  <p>This is a test board, generated at {when}.</p>
</div>
"""


class TestBoardGenerator:
    __test__ = False

    def __init__(self, creator: Optional[Creator] = None, rng: Optional[random.Random] = None) -> None:
        self.creator = creator or Creator.from_hex(TEST_PRIVATE)
        self._rng = rng or random.Random()

    def generate(self, now: Optional[datetime] = None) -> Board:
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        now = now.astimezone(timezone.utc).replace(microsecond=0)
        content = _TEMPLATE.format(
            color=self._rng.choice(COLORS),
            message=escape(self._rng.choice(MAGIC_8_BALL)),
            when=format_datetime(now, usegmt=True),
        )
        return self.creator.publish(content.encode("utf-8"), now)
