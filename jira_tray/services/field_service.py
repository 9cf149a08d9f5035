"""Lazy discovery of the Sprint and Story Points custom field ids."""

import asyncio
import logging
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from ..config.auth import JiraAuth, read_json
from ..exceptions import JiraAuthenticationError, JiraError
from .events import EventChannel

logger = logging.getLogger(__name__)

SPRINT_FIELD_NAME = "sprint"
STORY_POINTS_FIELD_NAME = "story points"

LOAD_CONTEXT = "Load field metadata"


class FieldMetadata(BaseModel):
    """Service-assigned ids of the custom fields the client edits."""

    sprint_field_id: str = Field(default="", description="e.g. customfield_10020, empty if absent")
    story_points_field_id: str = Field(default="", description="e.g. customfield_10016, empty if absent")


def resolve_field_ids(catalog: List[Any]) -> FieldMetadata:
    """Pick the well-known field ids out of the ``GET /field`` catalog.

    Names match case-insensitively; the first occurrence wins when Jira
    returns duplicates.
    """
    sprint_id = ""
    story_points_id = ""
    for entry in catalog:
        if not isinstance(entry, dict):
            continue
        name = str(entry.get('name') or '').lower()
        field_id = str(entry.get('id') or '')
        if name == SPRINT_FIELD_NAME and not sprint_id:
            sprint_id = field_id
        elif name == STORY_POINTS_FIELD_NAME and not story_points_id:
            story_points_id = field_id
    return FieldMetadata(sprint_field_id=sprint_id, story_points_field_id=story_points_id)


class FieldMetadataCache:
    """Field metadata for one Jira configuration, loaded at most once.

    A fresh instance is created whenever the client is reconfigured. Once
    loaded it is never refreshed, even if one of the ids stayed unresolved.
    """

    def __init__(self, auth: JiraAuth, events: EventChannel):
        self.auth = auth
        self.events = events
        self._loaded = False
        self._metadata = FieldMetadata()
        self._pending: Optional[asyncio.Task] = None

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def sprint_field_id(self) -> str:
        return self._metadata.sprint_field_id

    @property
    def story_points_field_id(self) -> str:
        return self._metadata.story_points_field_id

    async def ensure_loaded(self) -> bool:
        """Load the catalog unless already loaded.

        Returns:
            True when the dependent operation should proceed (loaded, or a
            generic failure that was already reported), False after an
            authentication failure, in which case the operation is abandoned.
        """
        if self._loaded:
            return True
        if self._pending is None or self._pending.done():
            self._pending = asyncio.ensure_future(self._load())
        return await asyncio.shield(self._pending)

    async def _load(self) -> bool:
        try:
            response = await self.auth.request('GET', '/field')
            catalog = read_json(response, list)
        except JiraAuthenticationError as e:
            self.events.report(LOAD_CONTEXT, e, "loading field metadata")
            return False
        except JiraError as e:
            self.events.report(LOAD_CONTEXT, e, "loading field metadata")
            return True

        self._metadata = resolve_field_ids(catalog)
        self._loaded = True
        if not self._metadata.sprint_field_id:
            logger.warning("No 'Sprint' field in the Jira field catalog")
        if not self._metadata.story_points_field_id:
            logger.warning("No 'Story Points' field in the Jira field catalog")
        return True
