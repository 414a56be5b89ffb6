"""Utility functions for the feed harvester."""

import re
from datetime import UTC, datetime
from pathlib import Path
from urllib.parse import urlparse

_WHITESPACE_RE = re.compile(r'\s+')


def extract_domain(url: str) -> str:
    """Extract domain from URL.

    Args:
        url: URL string

    Returns:
        Domain name (lowercase, port removed)
    """
    return (urlparse(url).hostname or "").lower()


def normalize_hostname(hostname: str) -> str:
    """Lower-case a hostname and strip a leading "www." prefix.

    Args:
        hostname: Raw hostname

    Returns:
        Normalized hostname
    """
    hostname = (hostname or "").strip().lower()
    if hostname.startswith("www."):
        hostname = hostname[4:]
    return hostname


def is_valid_url(url: str) -> bool:
    """Check if URL is an absolute http(s) URL."""
    try:
        result = urlparse(url)
        return result.scheme in ("http", "https") and bool(result.netloc)
    except ValueError:
        return False


def collapse_whitespace(text: str) -> str:
    """Collapse every whitespace run (newlines included) to one space and trim.

    Args:
        text: Raw text

    Returns:
        Cleaned text
    """
    if not text:
        return ""
    return _WHITESPACE_RE.sub(' ', text).strip()


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return format_datetime_iso(datetime.now(UTC))


def format_datetime_iso(dt: datetime) -> str:
    """Format datetime as ISO string.

    Args:
        dt: Datetime to format

    Returns:
        ISO formatted datetime string
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.isoformat()


def ensure_directory(path: str | Path) -> Path:
    """Ensure directory exists, creating intermediate directories.

    Args:
        path: Directory path

    Returns:
        Path object
    """
    path_obj = Path(path)
    path_obj.mkdir(parents=True, exist_ok=True)
    return path_obj
