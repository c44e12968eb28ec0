"""
Tests for the keyword-based device classifier.
"""
import pytest

from linkpage_app.services.analytics_service import classify_device, count_devices


class TestClassifyDevice:

    @pytest.mark.parametrize("user_agent, expected", [
        ("Mozilla/5.0 (iPhone; CPU iPhone OS 17_0) Mobile/15E148", "mobile"),
        ("Mozilla/5.0 (Linux; Android 14; Pixel 8) Chrome/120 Safari/537.36", "mobile"),
        ("Mozilla/5.0 (iPad; CPU OS 17_0 like Mac OS X) Safari/604.1", "tablet"),
        ("Some Tablet Browser", "tablet"),
        ("Mozilla/5.0 (Windows NT 10.0; Win64; x64) Chrome/120.0", "desktop"),
        ("Mozilla/5.0 (Macintosh) Version/17.0 Safari/605.1.15", "desktop"),
        ("curl/8.4.0", "unknown"),
        ("", "unknown"),
        (None, "unknown"),
    ])
    def test_classification(self, user_agent, expected):
        assert classify_device(user_agent) == expected

    def test_mobile_beats_desktop_keywords(self):
        """Android agents also mention Safari; mobile keywords are checked first."""
        assert classify_device("android safari") == "mobile"

    def test_mobile_beats_tablet_keywords(self):
        # Android tablets report "Android" without "Mobile", still bucketed as mobile
        assert classify_device("Mozilla/5.0 (Linux; Android 13; SM-X700) Tablet") == "mobile"

    def test_case_insensitive(self):
        assert classify_device("IPHONE") == "mobile"
        assert classify_device("CHROME") == "desktop"


def test_count_devices():
    counts = count_devices(["iphone", "ipad", "chrome", None, "bot"])
    assert counts.model_dump() == {"mobile": 1, "desktop": 1, "tablet": 1, "unknown": 2}
