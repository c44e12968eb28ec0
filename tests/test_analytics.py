from datetime import timedelta

from fastapi.testclient import TestClient

from conftest import add_links, register, upgrade_to_pro
from linkpage_app.models import ClickEvent, Link
from linkpage_app.services.analytics_service import AnalyticsService
from linkpage_app.utils import utcnow

BASIC_OVERVIEW_KEYS = {"totalLinks", "totalClicks", "topLinks"}
ADVANCED_OVERVIEW_KEYS = BASIC_OVERVIEW_KEYS | {
    "profileViews", "clicksLast7Days", "clicksByDay", "topReferrers",
}
BASIC_LINK_KEYS = {"linkId", "title", "url", "totalClicks"}


def log_clicks(db_session, link_id: str, days_ago: float, count: int = 1, referer: str = None,
               user_agent: str = None):
    """Insert click events in the past, bumping the counter like a real click would."""
    clicked_at = utcnow() - timedelta(days=days_ago)
    for _ in range(count):
        db_session.add(ClickEvent(
            link_id=link_id, clicked_at=clicked_at, referer=referer, user_agent=user_agent,
        ))
    link = db_session.get(Link, link_id)
    link.click_count += count
    db_session.commit()


class TestOverview:

    def test_free_overview_has_basic_keys_only(self, owner_client: TestClient):
        add_links(owner_client, "A")

        data = owner_client.get("/analytics/overview").json()
        assert set(data) == BASIC_OVERVIEW_KEYS
        assert data["totalLinks"] == 1
        assert data["totalClicks"] == 0

    def test_totals_include_inactive_links_top_links_do_not(self, owner_client: TestClient, client: TestClient):
        active, inactive = add_links(owner_client, "Active", "Inactive")
        for _ in range(2):
            client.get(f"/links/{active['id']}/click", follow_redirects=False)
        for _ in range(3):
            client.get(f"/links/{inactive['id']}/click", follow_redirects=False)
        owner_client.delete(f"/links/{inactive['id']}")

        data = owner_client.get("/analytics/overview").json()
        assert data["totalLinks"] == 2
        assert data["totalClicks"] == 5
        assert data["topLinks"] == [{
            "id": active["id"],
            "title": "Active",
            "url": active["url"],
            "clickCount": 2,
        }]

    def test_top_links_sorted_and_capped(self, owner_client: TestClient, db_session):
        links = add_links(owner_client, *[f"L{i}" for i in range(12)])
        for index, link in enumerate(links):
            log_clicks(db_session, link["id"], days_ago=1, count=index)

        top = owner_client.get("/analytics/overview").json()["topLinks"]
        assert len(top) == 10
        assert [item["title"] for item in top[:3]] == ["L11", "L10", "L9"]

    def test_user_without_profile(self, client: TestClient):
        register(client, "empty@example.com")

        data = client.get("/analytics/overview").json()
        assert data == {"totalLinks": 0, "totalClicks": 0, "topLinks": []}

    def test_pro_with_no_events(self, owner_client: TestClient, db_session):
        add_links(owner_client, "A")
        upgrade_to_pro(db_session, owner_client.user["id"])

        data = owner_client.get("/analytics/overview").json()
        assert set(data) == ADVANCED_OVERVIEW_KEYS
        assert data["clicksLast7Days"] == 0
        assert data["clicksByDay"] == []
        assert data["topReferrers"] == []
        assert data["profileViews"] == 0

    def test_pro_without_flag_gets_basic(self, owner_client: TestClient, db_session):
        upgrade_to_pro(db_session, owner_client.user["id"], advanced_analytics=False)

        assert set(owner_client.get("/analytics/overview").json()) == BASIC_OVERVIEW_KEYS

    def test_pro_time_windows(self, owner_client: TestClient, client: TestClient, db_session):
        link = add_links(owner_client, "A")[0]
        upgrade_to_pro(db_session, owner_client.user["id"])
        client.get("/profiles/username/alice")

        log_clicks(db_session, link["id"], days_ago=1, count=2, referer="https://t.co/")
        log_clicks(db_session, link["id"], days_ago=10, count=3, referer="https://news.example/")
        log_clicks(db_session, link["id"], days_ago=10, count=1)
        log_clicks(db_session, link["id"], days_ago=45, count=4, referer="https://t.co/")

        data = owner_client.get("/analytics/overview").json()
        assert data["profileViews"] == 1
        assert data["totalClicks"] == 10
        assert data["clicksLast7Days"] == 2
        assert [day["count"] for day in data["clicksByDay"]] == [2, 4]
        assert data["clicksByDay"][0]["date"] > data["clicksByDay"][1]["date"]
        assert data["topReferrers"] == [
            {"referer": "https://news.example/", "count": 3},
            {"referer": "https://t.co/", "count": 2},
        ]

    def test_other_users_clicks_not_counted(self, owner_client: TestClient, other_client: TestClient, db_session):
        add_links(owner_client, "Mine")
        theirs = add_links(other_client, "Theirs")[0]
        upgrade_to_pro(db_session, owner_client.user["id"])
        log_clicks(db_session, theirs["id"], days_ago=1, count=3)

        data = owner_client.get("/analytics/overview").json()
        assert data["totalClicks"] == 0
        assert data["clicksLast7Days"] == 0


class TestLinkAnalytics:

    def test_free_link_analytics_has_exactly_basic_keys(self, owner_client: TestClient, client: TestClient):
        link = add_links(owner_client, "A")[0]
        client.get(f"/links/{link['id']}/click", headers={"Referer": "https://t.co/"}, follow_redirects=False)

        data = owner_client.get(f"/analytics/link/{link['id']}").json()
        assert set(data) == BASIC_LINK_KEYS
        assert data == {
            "linkId": link["id"],
            "title": "A",
            "url": link["url"],
            "totalClicks": 1,
        }

    def test_pro_link_analytics(self, owner_client: TestClient, db_session):
        link = add_links(owner_client, "A")[0]
        upgrade_to_pro(db_session, owner_client.user["id"])

        log_clicks(db_session, link["id"], days_ago=2, referer="https://t.co/",
                   user_agent="Mozilla/5.0 (Linux; Android 14) Safari/537.36")
        log_clicks(db_session, link["id"], days_ago=2, user_agent="Mozilla/5.0 (iPad; CPU OS 17_0)")
        log_clicks(db_session, link["id"], days_ago=3, user_agent="Mozilla/5.0 (Windows NT 10.0) Chrome/120")
        log_clicks(db_session, link["id"], days_ago=3, user_agent="curl/8.0")
        log_clicks(db_session, link["id"], days_ago=3)
        log_clicks(db_session, link["id"], days_ago=40, user_agent="Mozilla/5.0 (iPhone)")

        data = owner_client.get(f"/analytics/link/{link['id']}").json()
        assert data["totalClicks"] == 6
        assert data["devices"] == {"mobile": 1, "tablet": 1, "desktop": 1, "unknown": 2}
        assert [day["count"] for day in data["clicksByDay"]] == [2, 3]
        assert data["topReferrers"] == [{"referer": "https://t.co/", "count": 1}]

    def test_unknown_link(self, owner_client: TestClient):
        assert owner_client.get("/analytics/link/missing").status_code == 404

    def test_other_users_link(self, owner_client: TestClient, other_client: TestClient):
        link = add_links(owner_client, "A")[0]

        response = other_client.get(f"/analytics/link/{link['id']}")
        assert response.status_code == 403
        assert response.json()["detail"] == "Not authorized"

    def test_requires_authentication(self, client: TestClient):
        assert client.get("/analytics/overview").status_code == 401


class TestAnalyticsService:

    def test_device_sample_is_capped(self, owner_client: TestClient, db_session):
        link = add_links(owner_client, "A")[0]
        upgrade_to_pro(db_session, owner_client.user["id"])
        log_clicks(db_session, link["id"], days_ago=1, count=120, user_agent="Mozilla/5.0 Chrome")

        result = AnalyticsService(db_session).get_link_analytics(link["id"], owner_client.user["id"])
        assert result.devices.desktop == 100
        assert result.total_clicks == 120
