"""
Analytics response schemas.

Each endpoint has a basic shape (every plan) and an advanced shape that
extends it (PRO with the advancedAnalytics flag). The basic shapes carry no
optional fields so a FREE response never grows extra keys.
"""

from pydantic import Field
from typing import List
from datetime import date

from linkpage_app.schemas.base import CamelModel


class TopLink(CamelModel):
    id: str
    title: str
    url: str
    click_count: int


class DailyClicks(CamelModel):
    date: date
    count: int


class RefererCount(CamelModel):
    referer: str
    count: int


class DeviceBreakdown(CamelModel):
    mobile: int = 0
    desktop: int = 0
    tablet: int = 0
    unknown: int = 0


class Overview(CamelModel):
    total_links: int
    total_clicks: int
    top_links: List[TopLink]


class AdvancedOverview(Overview):
    profile_views: int
    clicks_last_7_days: int = Field(..., alias="clicksLast7Days")
    clicks_by_day: List[DailyClicks]
    top_referrers: List[RefererCount]


class LinkAnalytics(CamelModel):
    link_id: str
    title: str
    url: str
    total_clicks: int


class AdvancedLinkAnalytics(LinkAnalytics):
    clicks_by_day: List[DailyClicks]
    top_referrers: List[RefererCount]
    devices: DeviceBreakdown
