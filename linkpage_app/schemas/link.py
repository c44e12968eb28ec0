from pydantic import Field, HttpUrl
from typing import List, Optional
from datetime import datetime

from linkpage_app.schemas.base import CamelModel


class LinkCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=100, description="Link title")
    url: HttpUrl = Field(..., description="Target URL (http or https)")
    description: Optional[str] = Field(None, max_length=200)
    icon: Optional[str] = Field(None, max_length=100, description="Icon name or URL")
    position: Optional[int] = Field(None, ge=0, description="Position in the list (0-based)")
    is_active: Optional[bool] = None


# Nullable columns; an explicit null in an update clears them
CLEARABLE_FIELDS = ("description", "icon")


class LinkUpdate(CamelModel):
    """
    Partial update; only fields present in the request body are applied.

    A null for any field outside CLEARABLE_FIELDS leaves it unchanged.
    """
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    url: Optional[HttpUrl] = None
    description: Optional[str] = Field(None, max_length=200)
    icon: Optional[str] = Field(None, max_length=100)
    position: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None

    def changes(self) -> dict:
        """Fields to write: everything sent, minus nulls for required columns."""
        return {
            name: value
            for name, value in self.model_dump(exclude_unset=True).items()
            if value is not None or name in CLEARABLE_FIELDS
        }


class ReorderLinks(CamelModel):
    link_ids: List[str] = Field(..., description="Link IDs in the new order")


class LinkResponse(CamelModel):
    """Serializes a Link row (from_attributes reads the SQLAlchemy model)."""
    id: str
    profile_id: str
    title: str
    url: str
    description: Optional[str] = None
    icon: Optional[str] = None
    position: int
    is_active: bool
    click_count: int
    created_at: datetime
    updated_at: Optional[datetime] = None
