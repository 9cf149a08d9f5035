"""Input validation utilities."""

from datetime import datetime
from typing import Optional


def validate_date(date_str: str) -> bool:
    """Validate date string in YYYY-MM-DD format.

    Args:
        date_str: Date string to validate

    Returns:
        True if valid, False otherwise
    """
    try:
        datetime.strptime(date_str, "%Y-%m-%d")
        return True
    except (ValueError, TypeError):
        return False


def validate_issue_key(issue_key: Optional[str]) -> bool:
    """Validate Jira issue key format (PROJ-123).

    Args:
        issue_key: Issue key to validate

    Returns:
        True if valid, False otherwise
    """
    if not issue_key or not isinstance(issue_key, str):
        return False

    parts = issue_key.strip().split('-')
    if len(parts) != 2:
        return False

    return bool(parts[0]) and parts[1].isdigit()


def validate_story_points(value: str) -> bool:
    """Validate story points as a non-negative number."""
    try:
        return float(value) >= 0
    except (ValueError, TypeError):
        return False
