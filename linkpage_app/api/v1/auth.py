from fastapi import APIRouter, Depends, Request, Response, status

from linkpage_app.config import settings
from linkpage_app.dependencies import (
    ACCESS_COOKIE,
    REFRESH_COOKIE,
    get_auth_service,
    get_current_user,
)
from linkpage_app.models import User
from linkpage_app.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserResponse
from linkpage_app.schemas.base import MessageResponse
from linkpage_app.services.auth_service import AuthService, TokenPair
from linkpage_app.utils import parse_duration

router = APIRouter(prefix="/auth", tags=["auth"])


def set_auth_cookies(response: Response, tokens: TokenPair) -> None:
    """
    Store both tokens as HTTP-only cookies.

    Production runs the frontend on another site, hence SameSite=None
    (which browsers only accept together with Secure).
    """
    secure = settings.cookie_secure or settings.is_production
    samesite = "none" if settings.is_production else "lax"
    for name, value, lifetime in (
        (ACCESS_COOKIE, tokens.access_token, settings.access_token_expiration),
        (REFRESH_COOKIE, tokens.refresh_token, settings.refresh_token_expiration),
    ):
        response.set_cookie(
            key=name,
            value=value,
            max_age=int(parse_duration(lifetime).total_seconds()),
            httponly=True,
            secure=secure,
            samesite=samesite,
            domain=settings.cookie_domain,
            path="/",
        )


def clear_auth_cookies(response: Response) -> None:
    for name in (ACCESS_COOKIE, REFRESH_COOKIE):
        response.delete_cookie(key=name, domain=settings.cookie_domain, path="/")


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    data: RegisterRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Create an account (optionally with its profile) and sign in"""
    user, tokens = auth_service.register(
        email=data.email,
        password=data.password,
        name=data.name,
        username=data.username,
    )
    set_auth_cookies(response, tokens)
    return AuthResponse(user=UserResponse.model_validate(user), message="Registration successful")


@router.post("/login", response_model=AuthResponse)
def login(
    data: LoginRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Sign in with email and password"""
    user, tokens = auth_service.login(data.email, data.password)
    set_auth_cookies(response, tokens)
    return AuthResponse(user=UserResponse.model_validate(user), message="Login successful")


@router.post("/refresh", response_model=MessageResponse)
def refresh(
    request: Request,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Trade the refresh_token cookie for a new token pair"""
    tokens = auth_service.refresh(request.cookies.get(REFRESH_COOKIE))
    set_auth_cookies(response, tokens)
    return MessageResponse(message="Token refreshed successfully")


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: Request,
    response: Response,
    user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
):
    auth_service.logout(user, request.cookies.get(REFRESH_COOKIE))
    clear_auth_cookies(response)
    return MessageResponse(message="Logout successful")


@router.get("/me", response_model=UserResponse)
def me(user: User = Depends(get_current_user)):
    return user
