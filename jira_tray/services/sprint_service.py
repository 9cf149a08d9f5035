"""Board and sprint lookups on the Jira Software (agile) API."""

import asyncio
import logging
from typing import Any, List, Optional

from ..config.auth import AGILE_API, JiraAuth, encode_segment, read_json
from ..models import Board, Sprint
from ..utils.formatters import parse_datetime
from .events import EventChannel
from .pagination import Page, paginate_offset

logger = logging.getLogger(__name__)

AGILE_PAGE_SIZE = 50


def parse_board(raw: Any) -> Optional[Board]:
    if not isinstance(raw, dict) or not isinstance(raw.get('id'), int):
        return None
    return Board(id=raw['id'], name=str(raw.get('name') or ''), type=str(raw.get('type') or ''))


def parse_sprint(raw: Any) -> Optional[Sprint]:
    if not isinstance(raw, dict) or not isinstance(raw.get('id'), int):
        return None
    return Sprint(
        id=raw['id'],
        name=str(raw.get('name') or ''),
        state=str(raw.get('state') or ''),
        start_date=parse_datetime(raw.get('startDate'))
    )


def _values_page(data: dict) -> List[Any]:
    values = data.get('values')
    return values if isinstance(values, list) else []


class MostRecentSprintReducer:
    """Keeps the sprint with the latest start date seen so far.

    The first sprint offered is kept until a later one with a valid start
    date arrives. Sprints without a start date never replace the current
    pick, and equal start dates keep whichever arrived first.
    """

    def __init__(self):
        self.best: Optional[Sprint] = None

    def offer(self, sprint: Sprint) -> None:
        if self.best is None:
            self.best = sprint
            return
        if sprint.start_date is None:
            return
        if self.best.start_date is None or sprint.start_date > self.best.start_date:
            self.best = sprint


class SprintService:
    """Agile API operations used by the tray view."""

    def __init__(self, auth: JiraAuth, events: EventChannel):
        self.auth = auth
        self.events = events

    async def get_all_boards(self, board_type: str = "scrum") -> List[Board]:
        """Get every board of the given type.

        Failures are reported on the event channel; the boards read before a
        generic failure are still returned.
        """
        async def fetch(start_at: int) -> Page[Board]:
            params = {'startAt': start_at, 'maxResults': AGILE_PAGE_SIZE}
            if board_type:
                params['type'] = board_type
            response = await self.auth.request('GET', '/board', api=AGILE_API, params=params)
            data = read_json(response, dict)
            values = _values_page(data)
            boards = [b for b in (parse_board(v) for v in values) if b is not None]
            # Advance by the raw count so skipped malformed entries keep offsets aligned
            return Page(items=boards, page_size=len(values), is_last=bool(data.get('isLast', False)) or not values)

        result = await paginate_offset(fetch)
        if result.error is not None:
            self.events.report("GetAllBoards", result.error, "loading boards")
        return result.items

    async def get_board_sprints(self, board_id: int, state: str = "active") -> List[Sprint]:
        """Get the sprints of one board, optionally filtered by state."""
        async def fetch(start_at: int) -> Page[Sprint]:
            params = {'startAt': start_at, 'maxResults': AGILE_PAGE_SIZE}
            if state:
                params['state'] = state
            response = await self.auth.request(
                'GET', f'/board/{encode_segment(board_id)}/sprint', api=AGILE_API, params=params
            )
            data = read_json(response, dict)
            values = _values_page(data)
            sprints = [s for s in (parse_sprint(v) for v in values) if s is not None]
            return Page(items=sprints, page_size=len(values), is_last=bool(data.get('isLast', False)) or not values)

        result = await paginate_offset(fetch)
        if result.error is not None:
            self.events.report("GetBoardSprints", result.error, "loading sprints")
        return result.items

    async def most_recent_active_sprint(self) -> Optional[Sprint]:
        """Find the active sprint with the latest start date across scrum boards.

        All boards' sprint lookups run concurrently and feed one reducer as
        they complete; the result is available once every lookup finished.
        """
        boards = await self.get_all_boards("scrum")
        if not boards:
            return None

        reducer = MostRecentSprintReducer()

        async def collect(board: Board) -> None:
            sprints = await self.get_board_sprints(board.id, "active")
            for sprint in sprints:
                reducer.offer(sprint)

        await asyncio.gather(*(collect(board) for board in boards))

        if reducer.best is not None:
            logger.debug("Most recent active sprint: %s (%s)", reducer.best.name, reducer.best.id)
        return reducer.best
