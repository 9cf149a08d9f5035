"""Domain models returned by the Jira client."""

from .agile import Board, Sprint
from .comment import Comment, HistoryEntry
from .issue import NO_SPRINT, IssueFieldSnapshot, Ticket, Transition

__all__ = [
    'Board',
    'Comment',
    'HistoryEntry',
    'IssueFieldSnapshot',
    'NO_SPRINT',
    'Sprint',
    'Ticket',
    'Transition',
]
