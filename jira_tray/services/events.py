"""Events published by the Jira client.

Results arrive out of order when several operations overlap, so every
per-issue or per-sprint event carries the identifier that triggered it.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from ..exceptions import JiraAuthenticationError, JiraError
from ..models import Comment, HistoryEntry, IssueFieldSnapshot, Sprint, Ticket, Transition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MyTicketsReady:
    tickets: List[Ticket] = field(default_factory=list)


@dataclass(frozen=True)
class IssueFieldSnapshotReady:
    issue_key: str
    snapshot: IssueFieldSnapshot


@dataclass(frozen=True)
class IssueCommentsReady:
    issue_key: str
    comments: List[Comment] = field(default_factory=list)


@dataclass(frozen=True)
class IssueHistoryReady:
    issue_key: str
    entries: List[HistoryEntry] = field(default_factory=list)


@dataclass(frozen=True)
class TransitionsReady:
    issue_key: str
    transitions: List[Transition] = field(default_factory=list)


@dataclass(frozen=True)
class MostRecentActiveSprintReady:
    sprint: Optional[Sprint] = None


@dataclass(frozen=True)
class SprintIssuesReady:
    sprint_id: int
    tickets: List[Ticket] = field(default_factory=list)


@dataclass(frozen=True)
class OperationSucceeded:
    message: str


@dataclass(frozen=True)
class OperationFailed:
    context: str
    error: str


@dataclass(frozen=True)
class AuthenticationRequired:
    message: str


Handler = Callable[[object], None]


class EventChannel:
    """Fan events out to subscribed callbacks and listener queues."""

    def __init__(self):
        self._handlers: List[Handler] = []
        self._queues: List[asyncio.Queue] = []

    def subscribe(self, handler: Handler) -> Callable[[], None]:
        """Register a callback; returns a function that unregisters it."""
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def listen(self) -> asyncio.Queue:
        """Queue that receives every event emitted from now on."""
        queue: asyncio.Queue = asyncio.Queue()
        self._queues.append(queue)
        return queue

    def emit(self, event: object) -> None:
        for handler in list(self._handlers):
            handler(event)
        for queue in self._queues:
            queue.put_nowait(event)

    def report(self, context: str, error: JiraError, action: str) -> None:
        """Publish a failure as exactly one event.

        Args:
            context: Operation name, e.g. "GetIssueComments"
            error: The failure raised by the transport
            action: Gerund phrase for the auth prompt, e.g. "loading comments"
        """
        if isinstance(error, JiraAuthenticationError):
            logger.warning("%s: authentication failed (%s)", context, error)
            self.emit(AuthenticationRequired(
                f"Jira authentication failed while {action}. Please configure your API token."
            ))
            return
        logger.warning("%s failed: %s", context, error)
        self.emit(OperationFailed(context, str(error)))
