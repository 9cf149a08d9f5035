"""Jira Software board and sprint models."""

from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime


class Board(BaseModel):
    """Agile board."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str = ""
    type: str = Field(default="", description="scrum or kanban")


class Sprint(BaseModel):
    """Sprint of a board."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str = ""
    state: str = Field(default="", description="future, active or closed")
    start_date: Optional[datetime] = Field(None, description="Parsed startDate, None when absent or invalid")
