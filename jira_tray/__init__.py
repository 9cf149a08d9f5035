"""Jira Cloud desktop client core: REST orchestration for the tray UI."""

__version__ = "0.1.0"
