"""
Analytics aggregation over links and the click log.

Everything here is a read: counts, sums and GROUP BY queries evaluated per
request against wall-clock time, so "last 7/30 days" figures drift from one
day to the next. Nothing is cached.

Gating: the advanced figures are only computed for PRO users whose stored
feature flags include advancedAnalytics. The flags are read from the user row
on every call.
"""

import logging
from datetime import timedelta
from typing import Iterable, List, Optional, Union

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from linkpage_app.exceptions import ForbiddenError, NotFoundError
from linkpage_app.models import ClickEvent, Link, Profile, User
from linkpage_app.schemas.analytics import (
    AdvancedLinkAnalytics,
    AdvancedOverview,
    DailyClicks,
    DeviceBreakdown,
    LinkAnalytics,
    Overview,
    RefererCount,
    TopLink,
)
from linkpage_app.utils import utcnow

logger = logging.getLogger(__name__)

TOP_LINKS_LIMIT = 10
TOP_REFERRERS_LIMIT = 10
DEVICE_SAMPLE_SIZE = 100
RECENT_DAYS = 7
HISTORY_DAYS = 30

# Checked in this order; the first group with a keyword in the agent wins
MOBILE_KEYWORDS = ("mobile", "android", "iphone")
TABLET_KEYWORDS = ("tablet", "ipad")
DESKTOP_KEYWORDS = ("mozilla", "chrome", "safari")


def classify_device(user_agent: Optional[str]) -> str:
    """
    Bucket a user agent into mobile / tablet / desktop / unknown.

    Plain case-insensitive substring matching, not a parser. Mobile keywords
    are checked before desktop ones, so "Android ... Safari" is mobile.
    """
    agent = (user_agent or "").lower()
    if any(keyword in agent for keyword in MOBILE_KEYWORDS):
        return "mobile"
    if any(keyword in agent for keyword in TABLET_KEYWORDS):
        return "tablet"
    if any(keyword in agent for keyword in DESKTOP_KEYWORDS):
        return "desktop"
    return "unknown"


def count_devices(user_agents: Iterable[Optional[str]]) -> DeviceBreakdown:
    counts = {"mobile": 0, "desktop": 0, "tablet": 0, "unknown": 0}
    for agent in user_agents:
        counts[classify_device(agent)] += 1
    return DeviceBreakdown(**counts)


class AnalyticsService:

    def __init__(self, db: Session):
        self.db = db

    def get_overview(self, user_id: str) -> Union[Overview, AdvancedOverview]:
        """
        Summary for the dashboard.

        totalLinks and totalClicks cover every link, active or not; topLinks
        only lists active links. Ties in topLinks come back in whatever order
        the database returns them.
        """
        user = self.db.get(User, user_id)
        if not user:
            raise NotFoundError("User not found")

        owned = select(Link.id).join(Profile).where(Profile.user_id == user.id)

        total_links = self.db.query(func.count(Link.id)).select_from(Link).join(Profile).filter(
            Profile.user_id == user.id
        ).scalar()
        total_clicks = self.db.query(func.sum(Link.click_count)).select_from(Link).join(Profile).filter(
            Profile.user_id == user.id
        ).scalar()

        top_links = self.db.query(Link).join(Profile).filter(
            Profile.user_id == user.id,
            Link.is_active == True
        ).order_by(Link.click_count.desc()).limit(TOP_LINKS_LIMIT).all()

        overview = Overview(
            total_links=total_links or 0,
            total_clicks=total_clicks or 0,
            top_links=[TopLink.model_validate(link) for link in top_links],
        )

        if not user.has_advanced_analytics:
            return overview

        now = utcnow()
        clicks_last_7_days = self.db.query(func.count(ClickEvent.id)).filter(
            ClickEvent.link_id.in_(owned),
            ClickEvent.clicked_at >= now - timedelta(days=RECENT_DAYS),
        ).scalar()

        history_filter = (
            ClickEvent.link_id.in_(owned),
            ClickEvent.clicked_at >= now - timedelta(days=HISTORY_DAYS),
        )

        return AdvancedOverview(
            **overview.model_dump(),
            profile_views=user.profile.view_count if user.profile else 0,
            clicks_last_7_days=clicks_last_7_days or 0,
            clicks_by_day=self._clicks_by_day(history_filter),
            top_referrers=self._top_referrers(history_filter),
        )

    def get_link_analytics(
        self, link_id: str, user_id: str
    ) -> Union[LinkAnalytics, AdvancedLinkAnalytics]:
        link = self.db.get(Link, link_id)
        if not link:
            raise NotFoundError("Link not found")
        if link.profile.user_id != user_id:
            raise ForbiddenError("Not authorized")

        basic = LinkAnalytics(
            link_id=link.id,
            title=link.title,
            url=link.url,
            total_clicks=link.click_count,
        )

        # Owner's stored plan and flags, as of this request
        owner = link.profile.user
        if not owner.has_advanced_analytics:
            return basic

        history_filter = (
            ClickEvent.link_id == link.id,
            ClickEvent.clicked_at >= utcnow() - timedelta(days=HISTORY_DAYS),
        )

        user_agents = self.db.query(ClickEvent.user_agent).filter(
            *history_filter
        ).limit(DEVICE_SAMPLE_SIZE).all()

        return AdvancedLinkAnalytics(
            **basic.model_dump(),
            clicks_by_day=self._clicks_by_day(history_filter),
            top_referrers=self._top_referrers(history_filter),
            devices=count_devices(agent for (agent,) in user_agents),
        )

    def _clicks_by_day(self, filters: tuple) -> List[DailyClicks]:
        """Click counts per calendar date (UTC), newest first."""
        day = func.date(ClickEvent.clicked_at)
        rows = self.db.query(day.label("date"), func.count(ClickEvent.id).label("count")).filter(
            *filters
        ).group_by(day).order_by(day.desc()).all()
        return [DailyClicks(date=row.date, count=row.count) for row in rows]

    def _top_referrers(self, filters: tuple) -> List[RefererCount]:
        """Most frequent non-null referers. Direct traffic (NULL) is left out."""
        hits = func.count(ClickEvent.id)
        rows = self.db.query(ClickEvent.referer, hits.label("count")).filter(
            *filters,
            ClickEvent.referer.isnot(None),
        ).group_by(ClickEvent.referer).order_by(hits.desc()).limit(TOP_REFERRERS_LIMIT).all()
        return [RefererCount(referer=row.referer, count=row.count) for row in rows]
