"""Tests for the cursor and offset pagination drivers."""

import asyncio

import pytest

from jira_tray.exceptions import JiraAuthenticationError, JiraRequestError
from jira_tray.services.pagination import Page, next_offset, paginate_cursor, paginate_offset


class OffsetServer:
    """Serves fixed pages by offset and records every requested offset."""

    def __init__(self, pages):
        self.pages = dict(pages)
        self.offsets = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch(self, start_at):
        self.offsets.append(start_at)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            page = self.pages[start_at]
            if isinstance(page, Exception):
                raise page
            return page
        finally:
            self.in_flight -= 1


@pytest.mark.asyncio
async def test_offset_pages_advance_by_page_size_until_total():
    server = OffsetServer({
        0: Page(items=list(range(50)), total=107),
        50: Page(items=list(range(50, 100)), total=107),
        100: Page(items=list(range(100, 107)), total=107),
    })

    result = await paginate_offset(server.fetch)

    assert server.offsets == [0, 50, 100]
    assert result.items == list(range(107))
    assert result.ok
    assert result.requests == 3


@pytest.mark.asyncio
async def test_offset_requests_are_strictly_sequential():
    server = OffsetServer({0: Page(items=[1, 2], total=6), 2: Page(items=[3, 4], total=6), 4: Page(items=[5, 6], total=6)})

    await paginate_offset(server.fetch)

    assert server.max_in_flight == 1


@pytest.mark.asyncio
async def test_offset_without_total_stops_after_one_page():
    server = OffsetServer({0: Page(items=["a", "b", "c"])})

    result = await paginate_offset(server.fetch)

    assert server.offsets == [0]
    assert result.items == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_offset_empty_page_stops_even_when_total_claims_more():
    server = OffsetServer({0: Page(items=[1], total=10), 1: Page(items=[], total=10)})

    result = await paginate_offset(server.fetch)

    assert server.offsets == [0, 1]
    assert result.items == [1]


@pytest.mark.asyncio
async def test_offset_is_last_flag_decides_continuation():
    server = OffsetServer({
        0: Page(items=[1, 2], is_last=False),
        2: Page(items=[3], is_last=True),
    })

    result = await paginate_offset(server.fetch)

    assert server.offsets == [0, 2]
    assert result.items == [1, 2, 3]


@pytest.mark.asyncio
async def test_offset_generic_failure_keeps_earlier_pages():
    error = JiraRequestError("500 Internal Server Error")
    server = OffsetServer({0: Page(items=[1, 2], total=4), 2: error})

    result = await paginate_offset(server.fetch)

    assert result.items == [1, 2]
    assert result.error is error
    assert not result.ok


@pytest.mark.asyncio
async def test_offset_auth_failure_discards_everything():
    server = OffsetServer({0: Page(items=[1, 2], total=4), 2: JiraAuthenticationError("401 Unauthorized")})

    result = await paginate_offset(server.fetch)

    assert result.items == []
    assert isinstance(result.error, JiraAuthenticationError)
    assert result.requests == 2


@pytest.mark.parametrize("offset,page,expected", [
    (0, Page(items=[1] * 10, page_size=50, total=100), 50),
    (50, Page(items=[1] * 50, page_size=50, total=100), None),
    (0, Page(items=[1] * 3, page_size=0, total=10), 3),
    (0, Page(items=[1] * 3, total=3), None),
    (0, Page(items=[1] * 3, total=100, is_last=True), None),
    (0, Page(items=[], total=100), None),
])
def test_next_offset(offset, page, expected):
    assert next_offset(offset, page) == expected


class CursorServer:
    def __init__(self, pages):
        self.pages = list(pages)
        self.tokens = []

    async def fetch(self, token):
        self.tokens.append(token)
        page = self.pages.pop(0)
        if isinstance(page, Exception):
            raise page
        return page


@pytest.mark.asyncio
async def test_cursor_follows_tokens_until_absent():
    server = CursorServer([
        Page(items=["A-1"], next_page_token="t1"),
        Page(items=["A-2"], next_page_token="t2"),
        Page(items=["A-3"]),
    ])

    result = await paginate_cursor(server.fetch)

    assert server.tokens == [None, "t1", "t2"]
    assert result.items == ["A-1", "A-2", "A-3"]
    assert result.requests == 3


@pytest.mark.asyncio
async def test_cursor_empty_token_ends_pagination():
    server = CursorServer([Page(items=["A-1"], next_page_token="")])

    result = await paginate_cursor(server.fetch)

    assert server.tokens == [None]
    assert result.items == ["A-1"]


@pytest.mark.asyncio
async def test_cursor_generic_failure_returns_partial_results():
    server = CursorServer([Page(items=["A-1"], next_page_token="t1"), JiraRequestError("502 Bad Gateway")])

    result = await paginate_cursor(server.fetch)

    assert result.items == ["A-1"]
    assert isinstance(result.error, JiraRequestError)


@pytest.mark.asyncio
async def test_cursor_auth_failure_returns_nothing():
    server = CursorServer([Page(items=["A-1"], next_page_token="t1"), JiraAuthenticationError("403 Forbidden")])

    result = await paginate_cursor(server.fetch)

    assert result.items == []
    assert isinstance(result.error, JiraAuthenticationError)


@pytest.mark.asyncio
async def test_concurrent_paginations_do_not_share_state():
    first = OffsetServer({0: Page(items=[1, 2], total=3), 2: Page(items=[3], total=3)})
    second = OffsetServer({0: Page(items=["x"], total=2), 1: Page(items=["y"], total=2)})

    a, b = await asyncio.gather(paginate_offset(first.fetch), paginate_offset(second.fetch))

    assert a.items == [1, 2, 3]
    assert b.items == ["x", "y"]
