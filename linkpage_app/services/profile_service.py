import logging
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from linkpage_app.exceptions import ConflictError, ForbiddenError, NotFoundError
from linkpage_app.models import Plan, Profile, User
from linkpage_app.schemas.profile import PRO_ONLY_FIELDS, ProfileCreate, ProfileUpdate

logger = logging.getLogger(__name__)

UNIQUE_COLUMNS = ("username", "user_id")


def clashing_column(error: IntegrityError) -> Optional[str]:
    """
    Name the unique profile column an IntegrityError is about, if any.

    Drivers only report this in the message text, e.g. SQLite's
    "UNIQUE constraint failed: profiles.username" or PostgreSQL's
    "duplicate key value violates unique constraint \"ix_profiles_username\"".
    """
    message = str(error.orig).lower()
    if "unique" not in message and "duplicate" not in message:
        return None
    for column in UNIQUE_COLUMNS:
        if column in message:
            return column
    return None


class ProfileService:
    """
    Profile CRUD scoped to the owning user, plus public lookup.

    Public lookups by username also count a view.
    """

    def __init__(self, db: Session):
        self.db = db

    def create(self, user: User, data: ProfileCreate) -> Profile:
        if self.db.query(Profile).filter(Profile.user_id == user.id).first():
            raise ConflictError("User already has a profile")

        fields = data.model_dump(exclude_unset=True)
        if not fields.get("theme"):
            fields["theme"] = "default"
        profile = Profile(user_id=user.id, **fields)
        self.db.add(profile)
        self._commit()
        self.db.refresh(profile)

        logger.info("Profile %s (%s) created for user %s", profile.id, profile.username, user.id)
        return profile

    def list_active(self) -> List[Profile]:
        return self.db.query(Profile).filter(Profile.is_active == True).all()

    def get(self, profile_id: str) -> Profile:
        profile = self.db.get(Profile, profile_id)
        if not profile:
            raise NotFoundError("Profile not found")
        return profile

    def get_by_username(self, username: str) -> Profile:
        """
        Fetch a public profile and count the view.

        The view counter is bumped with a single UPDATE ... SET view_count =
        view_count + 1 so concurrent visitors don't lose increments. There is
        no deduplication here.
        """
        profile = self.db.query(Profile).filter(Profile.username == username).first()
        if not profile:
            raise NotFoundError("Profile not found")

        self.db.execute(
            update(Profile)
            .where(Profile.id == profile.id)
            .values(view_count=Profile.view_count + 1)
        )
        self.db.commit()
        self.db.refresh(profile)
        return profile

    def get_for_user(self, user: User) -> Profile:
        profile = self.db.query(Profile).filter(Profile.user_id == user.id).first()
        if not profile:
            raise NotFoundError("Profile not found")
        return profile

    def update(self, profile_id: str, user: User, data: ProfileUpdate) -> Profile:
        profile = self._get_owned(profile_id, user)

        fields = data.changes()
        if user.plan != Plan.PRO:
            gated = [name for name in PRO_ONLY_FIELDS if fields.get(name)]
            if gated:
                raise ForbiddenError("This feature requires a PRO plan")

        new_username = fields.get("username")
        if new_username and new_username != profile.username:
            taken = self.db.query(Profile).filter(Profile.username == new_username).first()
            if taken:
                raise ConflictError("Username already taken")

        for name, value in fields.items():
            setattr(profile, name, value)
        self._commit()
        self.db.refresh(profile)
        return profile

    def remove(self, profile_id: str, user: User) -> None:
        """Soft delete: the row stays, the page stops being listed."""
        profile = self._get_owned(profile_id, user)
        profile.is_active = False
        self.db.commit()
        logger.info("Profile %s deactivated", profile.id)

    def _get_owned(self, profile_id: str, user: User) -> Profile:
        profile = self.db.query(Profile).filter(
            Profile.id == profile_id,
            Profile.user_id == user.id,
        ).first()
        if not profile:
            raise NotFoundError("Profile not found or unauthorized")
        return profile

    def _commit(self) -> None:
        """Commit, reporting unique constraint clashes as Conflict."""
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            column = clashing_column(e)
            if column == "username":
                raise ConflictError("Username already taken")
            if column == "user_id":
                raise ConflictError("User already has a profile")
            raise
