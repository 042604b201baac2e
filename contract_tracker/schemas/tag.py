"""
Contract Tracker — Tag schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from contract_tracker.models.tag import DEFAULT_TAG_COLOR

HEX_COLOR = r"^#(?:[0-9a-fA-F]{3}){1,2}$"


class TagCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    color: str = Field(DEFAULT_TAG_COLOR, pattern=HEX_COLOR)


class TagUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    color: Optional[str] = Field(None, pattern=HEX_COLOR)


class TagResponse(BaseModel):
    id: int
    name: str
    color: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
