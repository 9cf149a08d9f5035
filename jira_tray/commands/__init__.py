"""CLI commands for the Jira tray client."""

from .issue import issue
from .sprint import sprint
from .tickets import tickets
from .update import assign, comment, describe, due, move_sprint, points, transition

__all__ = [
    'assign',
    'comment',
    'describe',
    'due',
    'issue',
    'move_sprint',
    'points',
    'sprint',
    'tickets',
    'transition',
]
