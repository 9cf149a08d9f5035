"""Tests for formatting and validation helpers."""

from datetime import date, datetime, timedelta, timezone

import pytest

from jira_tray.utils.formatters import format_datetime, format_story_points, parse_date, parse_datetime
from jira_tray.utils.validators import validate_date, validate_issue_key, validate_story_points


@pytest.mark.parametrize("value,expected", [
    ("2024-01-02T10:00:00.000+0000", datetime(2024, 1, 2, 10, 0, tzinfo=timezone.utc)),
    ("2024-01-02T10:00:00.000Z", datetime(2024, 1, 2, 10, 0, tzinfo=timezone.utc)),
    ("2024-01-02T12:00:00+0200", datetime(2024, 1, 2, 12, 0, tzinfo=timezone(timedelta(hours=2)))),
    ("2024-01-02T10:00:00", datetime(2024, 1, 2, 10, 0, tzinfo=timezone.utc)),
    ("yesterday", None),
    (None, None),
])
def test_parse_datetime(value, expected):
    assert parse_datetime(value) == expected


def test_parse_date():
    assert parse_date("2024-12-31") == date(2024, 12, 31)
    assert parse_date("2024-12-31T00:00:00") == date(2024, 12, 31)
    assert parse_date("31/12/2024") is None
    assert parse_date(None) is None


def test_format_datetime():
    assert format_datetime(datetime(2024, 1, 2, 10, 5)) == "2024-01-02 10:05"
    assert format_datetime(None) == ""


@pytest.mark.parametrize("value,expected", [(5.0, "5"), (2.5, "2.5"), (None, "")])
def test_format_story_points(value, expected):
    assert format_story_points(value) == expected


def test_validators():
    assert validate_issue_key("PROJ-123")
    assert not validate_issue_key("PROJ")
    assert not validate_issue_key("PROJ-abc")
    assert validate_date("2024-02-29")
    assert not validate_date("2023-02-29")
    assert validate_story_points("0")
    assert not validate_story_points("-1")
    assert not validate_story_points("many")
