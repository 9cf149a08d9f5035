"""Jira issue data models."""

from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import date

NO_SPRINT = "No Sprint"


class Ticket(BaseModel):
    """One row of a ticket list."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Issue key (e.g., PROJ-123)")
    summary: str = Field(default="", description="Issue summary")
    status: str = Field(default="", description="Status name")
    sprint: str = Field(default=NO_SPRINT, description="Sprint name the ticket is grouped under")


class IssueFieldSnapshot(BaseModel):
    """Editable fields of one issue."""

    model_config = ConfigDict(frozen=True)

    description: str = Field(default="", description="Plain text derived from the ADF description")
    story_points: Optional[float] = Field(None, description="Story points custom field")
    assignee_display_name: str = Field(default="", description="Assignee display name")
    assignee_account_id: str = Field(default="", description="Assignee account id")
    sprint_id: Optional[int] = Field(None, description="Sprint id")
    sprint_name: str = Field(default="", description="Sprint name")
    due_date: Optional[date] = Field(None, description="Due date (no time component)")


class Transition(BaseModel):
    """Workflow transition currently available for an issue."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
