"""Data formatting and parsing utilities."""

import re
from datetime import datetime, date, timezone
from typing import Any, Optional

# Jira writes offsets without a colon: 2024-09-01T10:00:00.000+0000
_COMPACT_OFFSET = re.compile(r'([+-]\d{2})(\d{2})$')


def format_date(d: Optional[date]) -> str:
    """Format date to YYYY-MM-DD string.

    Args:
        d: Date to format

    Returns:
        Formatted date string or empty string
    """
    if d is None:
        return ""
    return d.strftime("%Y-%m-%d")


def format_datetime(dt: Optional[datetime]) -> str:
    """Format datetime for display (local wall time, minutes precision)."""
    if dt is None:
        return ""
    return dt.strftime("%Y-%m-%d %H:%M")


def format_story_points(points: Optional[float]) -> str:
    """Format story points without a trailing .0 (e.g. "3", "0.5")."""
    if points is None:
        return ""
    return f"{points:.2f}".rstrip('0').rstrip('.')


def parse_date(value: Any) -> Optional[date]:
    """Parse an ISO calendar date (YYYY-MM-DD).

    Returns:
        Date object, or None when the value is empty or invalid
    """
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse a Jira timestamp with or without milliseconds.

    Naive timestamps are taken as UTC so results always compare.

    Returns:
        Timezone-aware datetime, or None when the value is empty or invalid
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    text = _COMPACT_OFFSET.sub(r'\1:\2', text)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
