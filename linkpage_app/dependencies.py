"""
FastAPI dependencies for dependency injection.

This module provides the rate limiter singleton, per-request services, and
the authentication guards routes declare with Depends().

Pattern: Dependency Injection
- Loose coupling between components
- Easy to test (override get_db with a test session)
- Flexible (swap the limiter backend via config)
"""

import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from linkpage_app.config import settings
from linkpage_app.database.connection import get_db
from linkpage_app.exceptions import ForbiddenError, RateLimitedError
from linkpage_app.models import Plan, User
from linkpage_app.services.analytics_service import AnalyticsService
from linkpage_app.services.auth_service import AuthService
from linkpage_app.services.link_service import LinkService
from linkpage_app.services.profile_service import ProfileService
from linkpage_app.throttle.factory import ThrottleBackend, ThrottleFactory
from linkpage_app.throttle.strategies import ThrottleStrategy

logger = logging.getLogger(__name__)

ACCESS_COOKIE = "access_token"
REFRESH_COOKIE = "refresh_token"

bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache()
def get_throttle() -> ThrottleStrategy:
    """
    Get rate limiter instance (singleton).

    Factory gets config from settings internally.
    @lru_cache ensures this is called only once.
    """
    backend = ThrottleBackend(settings.rate_limit_backend)
    return ThrottleFactory.create(backend)


async def rate_limit(request: Request, throttle: ThrottleStrategy = Depends(get_throttle)):
    """
    Global per-IP request throttle, attached to the whole app.

    Every request from one client IP counts against the same fixed window.
    """
    client_ip = request.client.host if request.client else "unknown"
    count = await throttle.hit(client_ip, settings.rate_limit_window_seconds)
    if count > settings.rate_limit_per_minute:
        logger.info("Rate limit exceeded for %s", client_ip)
        raise RateLimitedError()


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(db)


def get_profile_service(db: Session = Depends(get_db)) -> ProfileService:
    return ProfileService(db)


def get_link_service(db: Session = Depends(get_db)) -> LinkService:
    return LinkService(db)


def get_analytics_service(db: Session = Depends(get_db)) -> AnalyticsService:
    return AnalyticsService(db)


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> User:
    """
    Resolve the caller from the access token.

    The token is read from the access_token cookie, or from an
    `Authorization: Bearer` header for non-browser clients.
    """
    token = request.cookies.get(ACCESS_COOKIE)
    if not token and credentials:
        token = credentials.credentials
    return auth_service.get_user_from_access_token(token)


def require_plan(plan: Plan):
    """
    Build a dependency that only lets users on `plan` through.

    PRO users pass every check; FREE users only pass FREE checks.

    No route is PRO-only yet, so nothing declares this today. It is kept for
    future whole-route gates, e.g. `Depends(require_plan(Plan.PRO))`. The PRO
    features that exist now are gated per field or per response shape inside
    ProfileService.update and AnalyticsService.
    """

    def checker(user: User = Depends(get_current_user)) -> User:
        if plan == Plan.PRO and user.plan != Plan.PRO:
            raise ForbiddenError("This feature requires a PRO plan")
        return user

    return checker
