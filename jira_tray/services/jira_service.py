"""Jira client facade: every use case the tray UI needs, as async operations.

Each operation returns its result and also publishes it on the event
channel, together with at most one failure event. Writes publish a single
OperationSucceeded on success and never re-read anything themselves.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

import httpx

from ..config.auth import AGILE_API, JiraAuth, encode_segment, read_json
from ..config.settings import Settings
from ..exceptions import JiraAuthenticationError, JiraError
from ..models import (
    NO_SPRINT,
    Comment,
    HistoryEntry,
    IssueFieldSnapshot,
    Sprint,
    Ticket,
    Transition,
)
from ..utils.adf import adf_to_text, text_to_adf
from ..utils.formatters import format_date, parse_date, parse_datetime
from .events import (
    EventChannel,
    IssueCommentsReady,
    IssueFieldSnapshotReady,
    IssueHistoryReady,
    MostRecentActiveSprintReady,
    MyTicketsReady,
    OperationSucceeded,
    SprintIssuesReady,
    TransitionsReady,
)
from .field_service import FieldMetadataCache
from .pagination import Page, paginate_cursor, paginate_offset
from .sprint_service import SprintService

logger = logging.getLogger(__name__)

MY_TICKETS_JQL = "assignee = currentUser() and status NOT IN (Closed, Done) ORDER BY updated DESC"
SEARCH_PAGE_SIZE = 1000
COMMENT_PAGE_SIZE = 50
SPRINT_ISSUE_PAGE_SIZE = 50

DEFAULT_SPRINT_NAME = "Sprint"
CURRENT_SPRINT_NAME = "This Sprint"


def parse_legacy_sprint_name(raw: str) -> str:
    """Name from a legacy sprint string (``...[id=1,name=Sprint 5,...]``)."""
    if not raw.strip():
        return DEFAULT_SPRINT_NAME
    index = raw.lower().find("name=")
    if index < 0:
        return DEFAULT_SPRINT_NAME
    after = raw[index + 5:]
    end = after.find(',')
    return (after[:end] if end > 0 else after).strip()


def ticket_sprint_name(value: Any) -> str:
    """Sprint label for a ticket list row from the raw sprint field value."""
    if isinstance(value, list):
        if not value:
            return NO_SPRINT
        value = value[0]
    if isinstance(value, dict):
        return str(value.get('name') or DEFAULT_SPRINT_NAME)
    if isinstance(value, str):
        return parse_legacy_sprint_name(value)
    return NO_SPRINT


def extract_sprint(value: Any) -> Tuple[Optional[int], str]:
    """(sprint_id, sprint_name) from the raw sprint field of one issue."""
    if isinstance(value, list):
        if not value:
            return None, ""
        value = value[0]
    if isinstance(value, dict):
        sprint_id = value.get('id')
        if not isinstance(sprint_id, int) or isinstance(sprint_id, bool):
            sprint_id = None
        return sprint_id, str(value.get('name') or '')
    if isinstance(value, str):
        return None, parse_legacy_sprint_name(value)
    return None, ""


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _object(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _array(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


class JiraService:
    """Facade over the platform and agile Jira Cloud APIs."""

    def __init__(self, settings: Optional[Settings] = None,
                 events: Optional[EventChannel] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """Initialize Jira service.

        Args:
            settings: Connection settings (defaults to loading from env)
            events: Channel results and failures are published on
            transport: Optional httpx transport, used by tests to fake Jira
        """
        self.events = events or EventChannel()
        self._transport = transport
        self.auth = JiraAuth(settings, transport=transport)
        self.fields = FieldMetadataCache(self.auth, self.events)
        self.sprints = SprintService(self.auth, self.events)

    @property
    def settings(self) -> Settings:
        return self.auth.settings

    async def configure(self, settings: Settings) -> None:
        """Switch to a new instance or new credentials.

        Field metadata is discarded with the old configuration. Requests still
        in flight for the old configuration are not cancelled.
        """
        old_auth = self.auth
        self.auth = JiraAuth(settings, transport=self._transport)
        self.fields = FieldMetadataCache(self.auth, self.events)
        self.sprints = SprintService(self.auth, self.events)
        await old_auth.aclose()

    async def aclose(self) -> None:
        await self.auth.aclose()

    # ------------------------------------------------------------------ reads

    async def get_my_tickets(self) -> List[Ticket]:
        """Open tickets assigned to the current user, most recently updated first."""
        fields = self.fields
        if not await fields.ensure_loaded():
            return []
        sprint_field_id = fields.sprint_field_id

        requested_fields = ['key', 'summary', 'status', 'updated']
        if sprint_field_id:
            requested_fields.append(sprint_field_id)

        async def fetch(token: Optional[str]) -> Page[Ticket]:
            body: Dict[str, Any] = {
                'jql': MY_TICKETS_JQL,
                'maxResults': SEARCH_PAGE_SIZE,
                'fields': requested_fields
            }
            if token:
                body['nextPageToken'] = token
            response = await self.auth.request('POST', '/search/jql', json=body)
            data = read_json(response, dict)
            tickets = [self._search_ticket(issue, sprint_field_id) for issue in _array(data.get('issues'))]
            token = data.get('nextPageToken')
            return Page(items=tickets, next_page_token=token if isinstance(token, str) else None)

        result = await paginate_cursor(fetch)
        if result.error is not None:
            self.events.report("GetMyTickets", result.error, "loading tickets")
        self.events.emit(MyTicketsReady(result.items))
        return result.items

    @staticmethod
    def _search_ticket(issue: Any, sprint_field_id: str) -> Ticket:
        issue = _object(issue)
        fields = _object(issue.get('fields'))
        sprint = NO_SPRINT
        if sprint_field_id and sprint_field_id in fields:
            sprint = ticket_sprint_name(fields[sprint_field_id])
        return Ticket(
            key=_text(issue.get('key')),
            summary=_text(fields.get('summary')),
            status=_text(_object(fields.get('status')).get('name')),
            sprint=sprint
        )

    async def get_issue_field_snapshot(self, issue_key: str) -> IssueFieldSnapshot:
        """Description, story points, assignee, sprint and due date of one issue."""
        if not issue_key.strip():
            snapshot = IssueFieldSnapshot()
            self.events.emit(IssueFieldSnapshotReady(issue_key, snapshot))
            return snapshot

        fields = self.fields
        if not await fields.ensure_loaded():
            return IssueFieldSnapshot()

        requested = ['description', 'assignee', 'duedate']
        if fields.story_points_field_id:
            requested.append(fields.story_points_field_id)
        if fields.sprint_field_id:
            requested.append(fields.sprint_field_id)

        try:
            response = await self.auth.request(
                'GET', f'/issue/{encode_segment(issue_key)}', params={'fields': ','.join(requested)}
            )
            data = read_json(response, dict)
        except JiraError as e:
            self.events.report("GetIssueFieldSnapshot", e, "loading issue details")
            snapshot = IssueFieldSnapshot()
        else:
            snapshot = self._snapshot(_object(data.get('fields')), fields)

        self.events.emit(IssueFieldSnapshotReady(issue_key, snapshot))
        return snapshot

    @staticmethod
    def _snapshot(raw: Dict[str, Any], fields: FieldMetadataCache) -> IssueFieldSnapshot:
        values: Dict[str, Any] = {}

        description = raw.get('description')
        if description is not None:
            values['description'] = adf_to_text(description)

        if fields.story_points_field_id:
            points = raw.get(fields.story_points_field_id)
            if isinstance(points, (int, float)) and not isinstance(points, bool):
                values['story_points'] = float(points)

        assignee = raw.get('assignee')
        if isinstance(assignee, dict):
            values['assignee_display_name'] = _text(assignee.get('displayName'))
            values['assignee_account_id'] = _text(assignee.get('accountId'))

        values['due_date'] = parse_date(raw.get('duedate'))

        if fields.sprint_field_id:
            sprint_id, sprint_name = extract_sprint(raw.get(fields.sprint_field_id))
            values['sprint_id'] = sprint_id
            values['sprint_name'] = sprint_name

        return IssueFieldSnapshot(**values)

    async def get_issue_comments(self, issue_key: str) -> List[Comment]:
        """All comments of an issue, oldest first, bodies as plain text."""
        if not issue_key.strip():
            self.events.emit(IssueCommentsReady(issue_key, []))
            return []

        path = f'/issue/{encode_segment(issue_key)}/comment'

        async def fetch(start_at: int) -> Page[Comment]:
            response = await self.auth.request(
                'GET', path, params={'startAt': start_at, 'maxResults': COMMENT_PAGE_SIZE}
            )
            data = read_json(response, dict)
            comments = [self._comment(c) for c in _array(data.get('comments'))]
            return Page(items=comments, total=_int(data.get('total')))

        result = await paginate_offset(fetch)
        if result.error is not None:
            self.events.report("GetIssueComments", result.error, "loading comments")
        self.events.emit(IssueCommentsReady(issue_key, result.items))
        return result.items

    @staticmethod
    def _comment(raw: Any) -> Comment:
        raw = _object(raw)
        body = raw.get('body')
        return Comment(
            id=str(raw.get('id') or ''),
            author=_text(_object(raw.get('author')).get('displayName')),
            created=parse_datetime(raw.get('created')),
            body=body if isinstance(body, str) else adf_to_text(body)
        )

    async def get_issue_history(self, issue_key: str) -> List[HistoryEntry]:
        """Changelog of an issue, newest change first."""
        if not issue_key.strip():
            self.events.emit(IssueHistoryReady(issue_key, []))
            return []

        try:
            response = await self.auth.request(
                'GET', f'/issue/{encode_segment(issue_key)}',
                params={'expand': 'changelog', 'fields': 'summary'}
            )
            data = read_json(response, dict)
        except JiraError as e:
            self.events.report("GetIssueHistory", e, "loading history")
            self.events.emit(IssueHistoryReady(issue_key, []))
            return []

        entries: List[HistoryEntry] = []
        for history in _array(_object(data.get('changelog')).get('histories')):
            history = _object(history)
            when = parse_datetime(history.get('created'))
            author = _text(_object(history.get('author')).get('displayName'))
            for item in _array(history.get('items')):
                item = _object(item)
                entries.append(HistoryEntry(
                    author=author,
                    when=when,
                    field=_text(item.get('field')),
                    from_value=_text(item.get('fromString')),
                    to_value=_text(item.get('toString'))
                ))

        entries.sort(
            key=lambda e: (e.when is not None, e.when.timestamp() if e.when else 0.0, e.author.lower()),
            reverse=True
        )
        self.events.emit(IssueHistoryReady(issue_key, entries))
        return entries

    async def get_transitions(self, issue_key: str) -> List[Transition]:
        """Workflow transitions available for the issue right now."""
        if not issue_key.strip():
            self.events.emit(TransitionsReady(issue_key, []))
            return []

        try:
            response = await self.auth.request('GET', f'/issue/{encode_segment(issue_key)}/transitions')
            data = read_json(response, dict)
        except JiraError as e:
            self.events.report("GetTransitions", e, "loading transitions")
            self.events.emit(TransitionsReady(issue_key, []))
            return []

        transitions = []
        for raw in _array(data.get('transitions')):
            raw = _object(raw)
            transition_id = str(raw.get('id') or '')
            if not transition_id:
                continue
            transitions.append(Transition(id=transition_id, name=_text(raw.get('name'))))

        self.events.emit(TransitionsReady(issue_key, transitions))
        return transitions

    async def get_most_recent_active_sprint(self) -> Optional[Sprint]:
        """Active sprint with the latest start date over all scrum boards."""
        sprint = await self.sprints.most_recent_active_sprint()
        self.events.emit(MostRecentActiveSprintReady(sprint))
        return sprint

    async def get_issues_for_sprint(self, sprint_id: int) -> List[Ticket]:
        """Every issue in a sprint."""
        if sprint_id <= 0:
            self.events.emit(SprintIssuesReady(sprint_id, []))
            return []

        path = f'/sprint/{encode_segment(sprint_id)}/issue'

        async def fetch(start_at: int) -> Page[Ticket]:
            response = await self.auth.request(
                'GET', path, api=AGILE_API,
                params={'startAt': start_at, 'maxResults': SPRINT_ISSUE_PAGE_SIZE}
            )
            data = read_json(response, dict)
            tickets = [self._sprint_ticket(issue) for issue in _array(data.get('issues'))]
            return Page(items=tickets, total=_int(data.get('total')), page_size=_int(data.get('maxResults')))

        result = await paginate_offset(fetch)
        if result.error is not None:
            self.events.report("GetIssuesForSprint", result.error, "loading sprint issues")
        self.events.emit(SprintIssuesReady(sprint_id, result.items))
        return result.items

    @staticmethod
    def _sprint_ticket(issue: Any) -> Ticket:
        issue = _object(issue)
        fields = _object(issue.get('fields'))
        sprint = fields.get('sprint')
        sprint_name = CURRENT_SPRINT_NAME
        if isinstance(sprint, dict) and isinstance(sprint.get('name'), str):
            sprint_name = sprint['name']
        return Ticket(
            key=_text(issue.get('key')),
            summary=_text(fields.get('summary')),
            status=_text(_object(fields.get('status')).get('name')),
            sprint=sprint_name
        )

    # ----------------------------------------------------------------- writes

    async def _write(self, context: str, action: str, success_message: str,
                     method: str, path: str, payload: Dict[str, Any]) -> bool:
        try:
            await self.auth.request(method, path, json=payload)
        except JiraError as e:
            self.events.report(context, e, action)
            return False
        self.events.emit(OperationSucceeded(success_message))
        return True

    async def update_issue_description(self, issue_key: str, plain_text: str) -> bool:
        if not issue_key.strip():
            return False
        return await self._write(
            "UpdateIssueDescription", "updating the description", "Description updated",
            'PUT', f'/issue/{encode_segment(issue_key)}',
            {'fields': {'description': text_to_adf(plain_text)}}
        )

    async def add_comment(self, issue_key: str, plain_text: str) -> bool:
        if not issue_key.strip() or not plain_text.strip():
            return False
        return await self._write(
            "AddComment", "adding a comment", "Comment posted",
            'POST', f'/issue/{encode_segment(issue_key)}/comment',
            {'body': text_to_adf(plain_text)}
        )

    async def update_comment(self, issue_key: str, comment_id: str, plain_text: str) -> bool:
        if not issue_key.strip() or not comment_id.strip():
            return False
        return await self._write(
            "UpdateComment", "updating a comment", "Comment updated",
            'PUT', f'/issue/{encode_segment(issue_key)}/comment/{encode_segment(comment_id)}',
            {'body': text_to_adf(plain_text)}
        )

    async def update_story_points(self, issue_key: str, story_points: Optional[float]) -> bool:
        """Set story points, or clear them with None.

        A no-op when the instance has no Story Points field.
        """
        if not issue_key.strip():
            return False
        fields = self.fields
        if not await fields.ensure_loaded():
            return False
        field_id = fields.story_points_field_id
        if not field_id:
            logger.warning("Story points not updated for %s: field id unresolved", issue_key)
            return False
        return await self._write(
            "UpdateStoryPoints", "updating story points", "Story points updated",
            'PUT', f'/issue/{encode_segment(issue_key)}',
            {'fields': {field_id: story_points}}
        )

    async def update_assignee(self, issue_key: str, assignee_input: str) -> bool:
        """Assign to a user given by name, email or account id; blank unassigns."""
        if not issue_key.strip():
            return False

        query = (assignee_input or "").strip()
        account_id: Optional[str] = None
        if query:
            try:
                account_id = await self.resolve_user_account_id(query) or query
            except JiraAuthenticationError as e:
                self.events.report("ResolveUserAccountId", e, "resolving an account id")
                return False

        return await self._write(
            "UpdateAssignee", "updating the assignee", "Assignee updated",
            'PUT', f'/issue/{encode_segment(issue_key)}/assignee',
            {'accountId': account_id}
        )

    async def resolve_user_account_id(self, query: str) -> str:
        """Best-effort lookup of one account id; empty string when nothing matched.

        Raises:
            JiraAuthenticationError: the lookup was rejected
        """
        if not query.strip():
            return ""
        try:
            response = await self.auth.request(
                'POST', '/user/search/query', json={'query': query, 'maxResults': 1}
            )
            users = read_json(response, list)
        except JiraAuthenticationError:
            raise
        except JiraError as e:
            logger.warning("Account lookup for %r failed, using it as an account id: %s", query, e)
            return ""
        if not users:
            return ""
        return _text(_object(users[0]).get('accountId'))

    async def update_due_date(self, issue_key: str, due_date: Optional[date]) -> bool:
        if not issue_key.strip():
            return False
        return await self._write(
            "UpdateDueDate", "updating the due date", "Due date updated",
            'PUT', f'/issue/{encode_segment(issue_key)}',
            {'fields': {'duedate': format_date(due_date) if due_date else None}}
        )

    async def update_sprint(self, issue_key: str, sprint_id: Optional[int]) -> bool:
        """Move the issue into a sprint, or out of all sprints with None."""
        if not issue_key.strip():
            return False
        fields = self.fields
        if not await fields.ensure_loaded():
            return False
        field_id = fields.sprint_field_id
        if not field_id:
            logger.warning("Sprint not updated for %s: field id unresolved", issue_key)
            return False
        return await self._write(
            "UpdateSprint", "updating the sprint", "Sprint updated",
            'PUT', f'/issue/{encode_segment(issue_key)}',
            {'fields': {field_id: [sprint_id] if sprint_id is not None else None}}
        )

    async def transition_issue(self, issue_key: str, transition_id: str) -> bool:
        if not issue_key.strip() or not transition_id.strip():
            return False
        return await self._write(
            "TransitionIssue", "transitioning the issue", "Transition applied",
            'POST', f'/issue/{encode_segment(issue_key)}/transitions',
            {'transition': {'id': transition_id}}
        )
