"""Input normalization shared by the registry, feed and thread services."""

from typing import Any
from urllib.parse import urlparse

ALLOWED_URL_SCHEMES = ("http", "https")


def clean_text(value: Any) -> str | None:
    """Trim a request field; empty or missing values become None."""
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    value = value.strip()
    return value or None


def is_http_url(url: str) -> bool:
    """Validate that url is an absolute http(s) URL with a host."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    if parsed.scheme.lower() not in ALLOWED_URL_SCHEMES:
        return False
    return bool(parsed.netloc)


def parse_id(value: Any) -> int | None:
    """Parse a positive integer identifier from JSON input.

    Accepts ints and decimal strings ("12"); booleans, floats with a
    fractional part and everything else are rejected.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, float):
        return int(value) if value.is_integer() and value > 0 else None
    if isinstance(value, str):
        s = value.strip()
        if s.isascii() and s.isdigit():
            parsed = int(s)
            return parsed if parsed > 0 else None
    return None
