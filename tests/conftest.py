"""Test configuration and a fake Jira server built on httpx.MockTransport.

If users invoke `pytest` outside the project's virtualenv, we still add the
project root to sys.path so `import jira_tray` works.
"""

from __future__ import annotations

import inspect
import json
import sys
from pathlib import Path

import httpx
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from jira_tray.config.settings import Settings  # noqa: E402
from jira_tray.services.jira_service import JiraService  # noqa: E402

BASE_URL = "https://example.atlassian.net"
PLATFORM = "/rest/api/3"
AGILE = "/rest/agile/1.0"

SPRINT_FIELD = "customfield_10020"
STORY_POINTS_FIELD = "customfield_10016"

FIELD_CATALOG = [
    {"id": "summary", "name": "Summary"},
    {"id": SPRINT_FIELD, "name": "Sprint"},
    {"id": STORY_POINTS_FIELD, "name": "Story Points"},
]


def respond(status: int = 200, json_body=None, headers=None, content: bytes | None = None):
    """Route entry producing a fresh response for every request."""
    def factory(request: httpx.Request) -> httpx.Response:
        if content is not None:
            return httpx.Response(status, content=content, headers=headers)
        if json_body is None:
            return httpx.Response(status, headers=headers)
        return httpx.Response(status, json=json_body, headers=headers)
    return factory


class FakeJira:
    """Routes requests by (method, path) and records everything it receives.

    Each route holds a list of entries consumed in order; the last entry keeps
    answering once the others are used up. An entry is a callable taking the
    request and returning a response (or an awaitable of one).
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], list] = {}
        self.requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self.handle)

    def route(self, method: str, path: str, *entries) -> None:
        self.routes.setdefault((method, path), []).extend(entries)

    def field_catalog(self, catalog=None) -> None:
        self.route("GET", f"{PLATFORM}/field", respond(json_body=FIELD_CATALOG if catalog is None else catalog))

    def requests_to(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        entries = self.routes.get((request.method, request.url.path))
        if not entries:
            return httpx.Response(404, json={"errorMessages": [f"No route for {request.method} {request.url.path}"]})
        entry = entries.pop(0) if len(entries) > 1 else entries[0]
        result = entry(request)
        if inspect.isawaitable(result):
            result = await result
        return result


def body(request: httpx.Request):
    return json.loads(request.content) if request.content else None


@pytest.fixture
def settings() -> Settings:
    return Settings(instance_url=BASE_URL + "/", username="me@example.com", api_token="secret-token")


@pytest.fixture
def fake_jira() -> FakeJira:
    return FakeJira()


@pytest.fixture
def service(settings, fake_jira) -> JiraService:
    return JiraService(settings, transport=fake_jira.transport)


@pytest.fixture
def events(service) -> list:
    received: list = []
    service.events.subscribe(received.append)
    return received
