"""
Database models for the link page service.

Transactional data (users, profiles, links) and the click log share one
relational database; analytics are aggregate queries over click_events.
"""

from .user import User, Plan, default_features
from .profile import Profile
from .link import Link
from .click_event import ClickEvent
from .refresh_token import RefreshToken

__all__ = ["User", "Plan", "default_features", "Profile", "Link", "ClickEvent", "RefreshToken"]
