"""CLI commands."""

from . import follow, get, init, new, pub, serve, who

__all__ = [
    "follow",
    "get",
    "init",
    "new",
    "pub",
    "serve",
    "who",
]
