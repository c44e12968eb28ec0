import logging
from typing import List, Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from linkpage_app.exceptions import ForbiddenError, NotFoundError
from linkpage_app.models import ClickEvent, Link, Profile, User
from linkpage_app.schemas.link import LinkCreate, LinkUpdate

logger = logging.getLogger(__name__)


class LinkService:
    """
    Link CRUD for the owner of a profile, ordering, and click tracking.

    Every owner-facing operation resolves the link first (NotFound) and then
    checks that it sits on the caller's profile (Forbidden).
    """

    def __init__(self, db: Session):
        self.db = db

    def create(self, user: User, data: LinkCreate) -> Link:
        """
        Append a link to the caller's profile.

        Without an explicit position the link goes after the current last one
        (max position + 1, or 0 for the first link).
        """
        profile = self._get_profile(user, "Profile not found. Create a profile first.")

        fields = data.model_dump(exclude_unset=True, exclude_none=True)
        fields["url"] = str(data.url)
        if "position" not in fields:
            max_position = self.db.query(func.max(Link.position)).filter(
                Link.profile_id == profile.id
            ).scalar()
            fields["position"] = 0 if max_position is None else max_position + 1

        link = Link(profile_id=profile.id, **fields)
        self.db.add(link)
        self.db.commit()
        self.db.refresh(link)
        return link

    def list_for_user(self, user: User) -> List[Link]:
        profile = self._get_profile(user)
        return self._ordered_links(profile.id)

    def get(self, link_id: str, user: User) -> Link:
        link = self.db.get(Link, link_id)
        if not link:
            raise NotFoundError("Link not found")
        if link.profile.user_id != user.id:
            raise ForbiddenError("Unauthorized")
        return link

    def update(self, link_id: str, user: User, data: LinkUpdate) -> Link:
        link = self.get(link_id, user)
        fields = data.changes()
        if "url" in fields:
            fields["url"] = str(data.url)
        for name, value in fields.items():
            setattr(link, name, value)
        self.db.commit()
        self.db.refresh(link)
        return link

    def reorder(self, user: User, link_ids: List[str]) -> List[Link]:
        """
        Rewrite every link position to its index in `link_ids`.

        The submitted ids must be exactly the set of links on the caller's
        profile: no foreign ids, no duplicates, none left out. Anything else
        is Forbidden and nothing is written. The position updates are applied
        in one transaction.
        """
        profile = self._get_profile(user)

        owned_ids = {
            link_id
            for (link_id,) in self.db.query(Link.id).filter(Link.profile_id == profile.id)
        }
        if len(set(link_ids)) != len(link_ids) or set(link_ids) != owned_ids:
            raise ForbiddenError("Some links do not belong to your profile")

        try:
            for index, link_id in enumerate(link_ids):
                self.db.execute(
                    update(Link).where(Link.id == link_id).values(position=index)
                )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info("Reordered %d links on profile %s", len(link_ids), profile.id)
        self.db.expire_all()
        return self._ordered_links(profile.id)

    def remove(self, link_id: str, user: User) -> Link:
        """Soft delete: hidden from the public page, still counted in totals."""
        link = self.get(link_id, user)
        link.is_active = False
        self.db.commit()
        logger.info("Link %s deactivated", link.id)
        return link

    def hard_delete(self, link_id: str, user: User) -> None:
        """Delete the row; its click events go with it."""
        link = self.get(link_id, user)
        self.db.delete(link)
        self.db.commit()
        logger.info("Link %s deleted", link_id)

    def track_click(
        self,
        link_id: str,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
        referer: Optional[str] = None,
    ) -> Link:
        """
        Count a visitor click and log it.

        Flow:
        1. Look up the active link (NotFound otherwise)
        2. UPDATE click_count = click_count + 1 (atomic single-row write)
        3. INSERT the ClickEvent

        Steps 2 and 3 are committed separately, not in one transaction. A crash
        between them leaves the counter one ahead of the log, and nothing
        reconciles the two afterwards.
        """
        link = self.db.query(Link).filter(
            Link.id == link_id,
            Link.is_active == True
        ).first()
        if not link:
            raise NotFoundError("Link not found")

        self.db.execute(
            update(Link)
            .where(Link.id == link_id)
            .values(click_count=Link.click_count + 1)
        )
        self.db.commit()

        self.db.add(ClickEvent(
            link_id=link_id,
            ip=ip or None,
            user_agent=user_agent or None,
            referer=referer or None,
        ))
        self.db.commit()

        logger.debug("Tracked click on link %s", link_id)
        self.db.refresh(link)
        return link

    def _get_profile(self, user: User, detail: str = "Profile not found") -> Profile:
        profile = self.db.query(Profile).filter(Profile.user_id == user.id).first()
        if not profile:
            raise NotFoundError(detail)
        return profile

    def _ordered_links(self, profile_id: str) -> List[Link]:
        return self.db.query(Link).filter(
            Link.profile_id == profile_id
        ).order_by(Link.position.asc()).all()
