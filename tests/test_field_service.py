"""Tests for the field metadata cache."""

import asyncio

import pytest

from conftest import FIELD_CATALOG, PLATFORM, SPRINT_FIELD, STORY_POINTS_FIELD, respond
from jira_tray.services.events import AuthenticationRequired, OperationFailed
from jira_tray.services.field_service import resolve_field_ids


def test_resolve_matches_names_case_insensitively():
    metadata = resolve_field_ids([
        {"id": "customfield_1", "name": "SPRINT"},
        {"id": "customfield_2", "name": "story points"},
    ])

    assert metadata.sprint_field_id == "customfield_1"
    assert metadata.story_points_field_id == "customfield_2"


def test_resolve_first_duplicate_wins():
    metadata = resolve_field_ids([
        {"id": "customfield_1", "name": "Sprint"},
        {"id": "customfield_9", "name": "Sprint"},
        "garbage",
        {"id": "customfield_2", "name": "Story Points"},
        {"id": "customfield_8", "name": "Story Points"},
    ])

    assert metadata.sprint_field_id == "customfield_1"
    assert metadata.story_points_field_id == "customfield_2"


def test_resolve_missing_fields_stay_empty():
    metadata = resolve_field_ids([{"id": "summary", "name": "Summary"}])

    assert metadata.sprint_field_id == ""
    assert metadata.story_points_field_id == ""


@pytest.mark.asyncio
async def test_catalog_is_fetched_once(service, fake_jira):
    fake_jira.field_catalog()

    assert await service.fields.ensure_loaded()
    assert await service.fields.ensure_loaded()

    assert len(fake_jira.requests_to("GET", f"{PLATFORM}/field")) == 1
    assert service.fields.loaded
    assert service.fields.sprint_field_id == SPRINT_FIELD
    assert service.fields.story_points_field_id == STORY_POINTS_FIELD


@pytest.mark.asyncio
async def test_concurrent_loads_share_one_request(service, fake_jira):
    async def slow_catalog(request):
        await asyncio.sleep(0.01)
        return respond(json_body=FIELD_CATALOG)(request)

    fake_jira.route("GET", f"{PLATFORM}/field", slow_catalog)

    results = await asyncio.gather(*(service.fields.ensure_loaded() for _ in range(3)))

    assert results == [True, True, True]
    assert len(fake_jira.requests_to("GET", f"{PLATFORM}/field")) == 1


@pytest.mark.asyncio
async def test_catalog_without_known_fields_still_counts_as_loaded(service, fake_jira):
    fake_jira.field_catalog([{"id": "summary", "name": "Summary"}])

    assert await service.fields.ensure_loaded()
    assert await service.fields.ensure_loaded()

    assert service.fields.loaded
    assert service.fields.sprint_field_id == ""
    assert len(fake_jira.requests_to("GET", f"{PLATFORM}/field")) == 1


@pytest.mark.asyncio
async def test_auth_failure_abandons_with_one_auth_event(service, fake_jira, events):
    fake_jira.route("GET", f"{PLATFORM}/field", respond(401, {"errorMessages": ["Unauthorized"]}))

    assert await service.fields.ensure_loaded() is False

    assert not service.fields.loaded
    assert len(events) == 1
    assert isinstance(events[0], AuthenticationRequired)
    assert "loading field metadata" in events[0].message


@pytest.mark.asyncio
async def test_generic_failure_proceeds_and_retries_next_time(service, fake_jira, events):
    fake_jira.route(
        "GET", f"{PLATFORM}/field",
        respond(500, {"errorMessages": ["Internal error"]}),
        respond(json_body=FIELD_CATALOG),
    )

    assert await service.fields.ensure_loaded() is True
    assert not service.fields.loaded
    assert events == [OperationFailed("Load field metadata", "500 Internal Server Error: Internal error")]

    assert await service.fields.ensure_loaded() is True
    assert service.fields.loaded
    assert len(fake_jira.requests_to("GET", f"{PLATFORM}/field")) == 2


@pytest.mark.asyncio
async def test_non_array_catalog_is_a_generic_failure(service, fake_jira, events):
    fake_jira.field_catalog({"not": "a list"})

    assert await service.fields.ensure_loaded() is True

    assert not service.fields.loaded
    assert len(events) == 1
    assert isinstance(events[0], OperationFailed)
    assert "expected array" in events[0].error


@pytest.mark.asyncio
async def test_reconfigure_discards_metadata(service, fake_jira, settings):
    fake_jira.field_catalog()
    await service.fields.ensure_loaded()

    await service.configure(settings.model_copy(update={"username": "other@example.com"}))

    assert not service.fields.loaded
    assert await service.fields.ensure_loaded()
    assert len(fake_jira.requests_to("GET", f"{PLATFORM}/field")) == 2
