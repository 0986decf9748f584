"""Input validation utilities for CLI commands."""

from urllib.parse import urlsplit

from s83.protocol import MalformedKeyError, Publisher


def validate_server_url(url: str) -> str:
    """Validate and return a server URL. Raises ValueError if invalid."""
    if not url or not url.strip():
        raise ValueError("Server URL cannot be empty")
    url = url.strip()
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https"):
        raise ValueError("Server URL must include http or https")
    if not parts.netloc:
        raise ValueError("Server URL must include a host")
    if len(url) > 2048:
        raise ValueError("Server URL cannot exceed 2048 characters")
    return url


def validate_key(key: str) -> str:
    """Validate and return a publisher key as lowercase hex. Raises ValueError if invalid."""
    try:
        return str(Publisher.from_hex(key.strip()))
    except MalformedKeyError as e:
        raise ValueError(str(e)) from e


def validate_jobs(jobs: int) -> int:
    """Validate and return the number of miners. Raises ValueError if invalid."""
    if jobs < 1:
        raise ValueError("Number of miners must be at least 1")
    return jobs
