from pydantic import Field
from typing import Dict, Optional
from datetime import datetime

from linkpage_app.models import Plan
from linkpage_app.schemas.base import CamelModel
from linkpage_app.schemas.profile import USERNAME_PATTERN, ProfileResponse

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class RegisterRequest(CamelModel):
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(..., min_length=8, description="At least 8 characters")
    name: Optional[str] = Field(None, max_length=100)
    username: Optional[str] = Field(
        None,
        min_length=1,
        max_length=30,
        pattern=USERNAME_PATTERN,
        description="Creates the public profile right away when given",
    )


class LoginRequest(CamelModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserResponse(CamelModel):
    id: str
    email: str
    name: Optional[str] = None
    plan: Plan
    features: Dict[str, bool]
    last_login: Optional[datetime] = None
    profile: Optional[ProfileResponse] = None


class AuthResponse(CamelModel):
    user: UserResponse
    message: str
