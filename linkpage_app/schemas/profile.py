from pydantic import Field
from typing import Dict, List, Optional
from datetime import datetime

from linkpage_app.models import Plan, Profile
from linkpage_app.schemas.base import CamelModel
from linkpage_app.schemas.link import LinkResponse

USERNAME_PATTERN = r"^[a-zA-Z0-9_]+$"

# Fields only PRO users may set
PRO_ONLY_FIELDS = ("custom_css", "og_image", "custom_domain")

# Nullable columns; an explicit null in an update clears them
CLEARABLE_FIELDS = (
    "display_name", "bio", "avatar", "meta_title", "meta_description",
) + PRO_ONLY_FIELDS


class ProfileCreate(CamelModel):
    username: str = Field(
        ...,
        min_length=1,
        max_length=30,
        pattern=USERNAME_PATTERN,
        description="Unique username (letters, numbers and underscores)",
    )
    display_name: Optional[str] = Field(None, max_length=100)
    bio: Optional[str] = Field(None, max_length=500)
    avatar: Optional[str] = None
    theme: Optional[str] = Field(None, max_length=50)


class ProfileUpdate(CamelModel):
    username: Optional[str] = Field(None, min_length=1, max_length=30, pattern=USERNAME_PATTERN)
    display_name: Optional[str] = Field(None, max_length=100)
    bio: Optional[str] = Field(None, max_length=500)
    avatar: Optional[str] = None
    theme: Optional[str] = Field(None, max_length=50)
    custom_css: Optional[str] = Field(None, max_length=5000)
    meta_title: Optional[str] = Field(None, max_length=60)
    meta_description: Optional[str] = Field(None, max_length=160)
    og_image: Optional[str] = None
    custom_domain: Optional[str] = Field(None, max_length=255)
    is_active: Optional[bool] = None

    def changes(self) -> dict:
        """Fields to write: everything sent, minus nulls for required columns."""
        return {
            name: value
            for name, value in self.model_dump(exclude_unset=True).items()
            if value is not None or name in CLEARABLE_FIELDS
        }


class ProfileOwner(CamelModel):
    """Public subset of the owning user."""
    id: str
    name: Optional[str] = None
    plan: Plan
    features: Dict[str, bool]


class ProfileResponse(CamelModel):
    id: str
    user_id: str
    username: str
    display_name: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None
    theme: str
    custom_css: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    og_image: Optional[str] = None
    custom_domain: Optional[str] = None
    view_count: int
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
    user: Optional[ProfileOwner] = None
    links: List[LinkResponse] = []

    @classmethod
    def from_profile(
        cls, profile: Profile, active_links_only: bool = True, include_owner: bool = False
    ) -> "ProfileResponse":
        """
        Build the response from a Profile row.

        Public views only ever show active links; the owner's own view
        (dashboard) shows every link, including deactivated ones.
        """
        links = profile.active_links if active_links_only else profile.links
        response = cls.model_validate(profile)
        return response.model_copy(update={
            "links": [LinkResponse.model_validate(link) for link in links],
            "user": ProfileOwner.model_validate(profile.user) if include_owner else None,
        })
