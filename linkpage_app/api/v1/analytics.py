from typing import Union

from fastapi import APIRouter, Depends

from linkpage_app.dependencies import get_analytics_service, get_current_user
from linkpage_app.models import User
from linkpage_app.schemas.analytics import (
    AdvancedLinkAnalytics,
    AdvancedOverview,
    LinkAnalytics,
    Overview,
)
from linkpage_app.services.analytics_service import AnalyticsService

router = APIRouter(prefix="/analytics", tags=["analytics"])

# The advanced shape is listed first: a basic payload fails its validation and
# falls through to the basic shape, which never carries the extra keys.


@router.get("/overview", response_model=Union[AdvancedOverview, Overview])
def get_overview(
    user: User = Depends(get_current_user),
    analytics_service: AnalyticsService = Depends(get_analytics_service),
):
    """Totals and top links; PRO adds views, recent clicks, daily series and referrers"""
    return analytics_service.get_overview(user.id)


@router.get("/link/{link_id}", response_model=Union[AdvancedLinkAnalytics, LinkAnalytics])
def get_link_analytics(
    link_id: str,
    user: User = Depends(get_current_user),
    analytics_service: AnalyticsService = Depends(get_analytics_service),
):
    """Stats for one of the caller's links; PRO adds series, referrers and devices"""
    return analytics_service.get_link_analytics(link_id, user.id)
