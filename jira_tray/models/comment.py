"""Comment and change history models."""

from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime


class Comment(BaseModel):
    """Issue comment with its body converted to plain text."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Jira comment ID")
    author: str = Field(default="", description="Author display name")
    created: Optional[datetime] = Field(None, description="Creation timestamp")
    body: str = Field(default="", description="Editable plain text body (one paragraph per line)")


class HistoryEntry(BaseModel):
    """One changed field from an issue changelog."""

    model_config = ConfigDict(frozen=True)

    author: str = ""
    when: Optional[datetime] = None
    field: str = ""
    from_value: str = Field(default="", description="Previous value, empty when there was none")
    to_value: str = Field(default="", description="New value, empty when cleared")
