"""Pagination drivers for Jira list endpoints.

Two continuation styles exist in the Jira Cloud APIs:

* cursor: ``POST /search/jql`` hands back an opaque ``nextPageToken``
* offset: everything else pages with ``startAt`` / ``maxResults`` and reports
  either a ``total`` or an ``isLast`` flag

Both drivers request one page at a time: page N+1 is only requested after page
N has been processed. Accumulation state lives in the call, so concurrent
operations never share it.
"""

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Generic, List, Optional, TypeVar

from ..exceptions import JiraAuthenticationError, JiraError

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass
class Page(Generic[T]):
    """One parsed page of results."""

    items: List[T]
    next_page_token: Optional[str] = None
    total: Optional[int] = None
    page_size: Optional[int] = None
    is_last: Optional[bool] = None


@dataclass
class PagedResult(Generic[T]):
    """Accumulated items plus the failure that stopped pagination, if any.

    On an authentication failure ``items`` is always empty; on any other
    failure it holds what was accumulated before the failing page.
    """

    items: List[T] = field(default_factory=list)
    error: Optional[JiraError] = None
    requests: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


CursorFetch = Callable[[Optional[str]], Awaitable[Page[T]]]
OffsetFetch = Callable[[int], Awaitable[Page[T]]]


async def paginate_cursor(fetch_page: CursorFetch) -> PagedResult[T]:
    """Follow ``nextPageToken`` until the server stops returning one.

    Args:
        fetch_page: Coroutine taking the previous token (None for the first
            page) and returning the parsed page

    Returns:
        PagedResult with every item in response order
    """
    result: PagedResult[T] = PagedResult()
    token: Optional[str] = None

    while True:
        result.requests += 1
        try:
            page = await fetch_page(token)
        except JiraAuthenticationError as e:
            return PagedResult(items=[], error=e, requests=result.requests)
        except JiraError as e:
            result.error = e
            return result

        result.items.extend(page.items)
        token = page.next_page_token
        if not token:
            return result
        logger.debug("Following nextPageToken after %d item(s)", len(result.items))


def next_offset(offset: int, page: Page) -> Optional[int]:
    """Offset of the page after ``page``, or None when pagination is done."""
    returned = len(page.items)
    if returned == 0:
        return None

    step = page.page_size if page.page_size and page.page_size > 0 else returned
    following = offset + step

    if page.is_last is not None:
        return None if page.is_last else following

    total = page.total if page.total is not None else offset + returned
    return following if following < total else None


async def paginate_offset(fetch_page: OffsetFetch) -> PagedResult[T]:
    """Walk ``startAt`` offsets from 0 until the server runs out of items.

    Args:
        fetch_page: Coroutine taking ``startAt`` and returning the parsed page

    Returns:
        PagedResult with every item in response order
    """
    result: PagedResult[T] = PagedResult()
    offset: Optional[int] = 0

    while offset is not None:
        result.requests += 1
        try:
            page = await fetch_page(offset)
        except JiraAuthenticationError as e:
            return PagedResult(items=[], error=e, requests=result.requests)
        except JiraError as e:
            result.error = e
            return result

        result.items.extend(page.items)
        offset = next_offset(offset, page)

    return result
