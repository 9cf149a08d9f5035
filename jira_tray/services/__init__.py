"""Jira services."""

from .events import EventChannel
from .jira_service import JiraService

__all__ = ['EventChannel', 'JiraService']
