import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from linkpage_app.exceptions import ConflictError, UnauthorizedError
from linkpage_app.models import Plan, Profile, RefreshToken, User, default_features
from linkpage_app.services import security
from linkpage_app.utils import as_utc, utcnow

logger = logging.getLogger(__name__)


@dataclass
class TokenPair:
    access_token: str
    refresh_token: str


class AuthService:
    """
    Registration, login and refresh token rotation.

    Refresh tokens are stored server side; each one is single use. A refresh
    deletes the presented row and stores the newly issued token.
    """

    def __init__(self, db: Session):
        self.db = db

    def register(
        self,
        email: str,
        password: str,
        name: Optional[str] = None,
        username: Optional[str] = None,
    ) -> tuple:
        """
        Create a FREE user (and its profile when a username is given).

        Returns:
            (user, TokenPair)

        Raises:
            ConflictError: email or username already in use
        """
        if self.db.query(User).filter(User.email == email).first():
            raise ConflictError("Email already exists")

        if username and self.db.query(Profile).filter(Profile.username == username).first():
            raise ConflictError("Username already taken")

        user = User(
            email=email,
            password=security.hash_password(password),
            name=name,
            plan=Plan.FREE,
            features=default_features(),
        )
        self.db.add(user)
        if username:
            user.profile = Profile(
                username=username,
                display_name=name or username,
                theme="default",
            )

        try:
            # The unique constraints settle races the lookups above can't see
            self.db.flush()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Email or username already taken")

        tokens = self._issue_tokens(user)
        self.db.commit()
        self.db.refresh(user)

        logger.info("User %s registered", user.id)
        return user, tokens

    def login(self, email: str, password: str) -> tuple:
        """
        Check credentials and issue a fresh token pair.

        Raises:
            UnauthorizedError: unknown email or wrong password (same message
                for both)
        """
        user = self.db.query(User).filter(User.email == email).first()
        if not user or not security.verify_password(password, user.password):
            raise UnauthorizedError("Invalid credentials")

        user.last_login = utcnow()
        tokens = self._issue_tokens(user)
        self.db.commit()
        self.db.refresh(user)

        logger.info("User %s logged in", user.id)
        return user, tokens

    def refresh(self, refresh_token: Optional[str]) -> TokenPair:
        """
        Rotate a refresh token.

        Flow:
        1. Verify the JWT signature and type (expiry is checked on the row)
        2. Look the token up; it must belong to the user named in the JWT
        3. Expired row -> delete it and reject
        4. Delete the row, issue and store a new pair
        """
        if not refresh_token:
            raise UnauthorizedError("Refresh token missing")

        payload = security.decode_token(refresh_token, security.REFRESH_TOKEN, verify_exp=False)

        stored = self.db.query(RefreshToken).filter(RefreshToken.token == refresh_token).first()
        if not stored or stored.user_id != payload["sub"]:
            logger.warning("Rejected unknown refresh token for user %s", payload["sub"])
            raise UnauthorizedError("Invalid refresh token")

        if as_utc(stored.expires_at) < utcnow():
            self.db.delete(stored)
            self.db.commit()
            logger.warning("Rejected expired refresh token for user %s", stored.user_id)
            raise UnauthorizedError("Refresh token expired")

        user = stored.user
        self.db.delete(stored)
        tokens = self._issue_tokens(user)
        self.db.commit()
        return tokens

    def logout(self, user: User, refresh_token: Optional[str]) -> None:
        """Forget the presented refresh token. Missing or unknown tokens are ignored."""
        if not refresh_token:
            return
        self.db.query(RefreshToken).filter(
            RefreshToken.user_id == user.id,
            RefreshToken.token == refresh_token,
        ).delete(synchronize_session=False)
        self.db.commit()
        logger.info("User %s logged out", user.id)

    def get_user_from_access_token(self, access_token: Optional[str]) -> User:
        if not access_token:
            raise UnauthorizedError("Not authenticated")

        payload = security.decode_token(access_token, security.ACCESS_TOKEN)
        user = self.db.get(User, payload["sub"])
        if not user:
            raise UnauthorizedError("User not found")
        return user

    def _issue_tokens(self, user: User) -> TokenPair:
        """Sign a new pair and store the refresh half (caller commits)."""
        if user.id is None:
            self.db.flush()

        tokens = TokenPair(
            access_token=security.create_token(user.id, user.email, security.ACCESS_TOKEN),
            refresh_token=security.create_token(user.id, user.email, security.REFRESH_TOKEN),
        )
        self.db.add(RefreshToken(
            token=tokens.refresh_token,
            user_id=user.id,
            expires_at=security.token_expiry(security.REFRESH_TOKEN),
        ))
        return tokens
