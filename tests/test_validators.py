"""
Test validation utilities.
"""
from datetime import time

import pytest

from creatorpulse_client.utils.validators import (
    normalize_twitter_handle,
    parse_delivery_time,
    validate_password,
    validate_rss_feed,
    validate_style_post_content,
    validate_timezone,
    validate_twitter_handle,
    validate_user_email,
)


class TestValidators:
    """Test field validators used by the simulated backend."""

    def test_email(self):
        assert validate_user_email("writer@creatorpulse.com")
        assert not validate_user_email("not-an-email")

    def test_password(self):
        assert validate_password("password123") == []
        assert validate_password("short") == ["Password must be at least 8 characters long"]

    def test_timezone(self):
        assert validate_timezone("America/New_York")
        assert not validate_timezone("Mars/Olympus_Mons")

    @pytest.mark.parametrize("value,expected", [
        ("08:00", time(8, 0)),
        ("9:30", time(9, 30)),
        ("23:59:59", time(23, 59, 59)),
        ("24:00", None),
        ("8am", None),
    ])
    def test_delivery_time(self, value, expected):
        assert parse_delivery_time(value) == expected

    def test_rss_feed(self):
        assert validate_rss_feed("https://techcrunch.com/feed/")["valid"]
        assert validate_rss_feed("ftp://example.com/feed") == {"valid": False, "error": "Invalid URL format"}
        assert validate_rss_feed("https://example.com/invalid-feed.xml") == {
            "valid": False,
            "error": "RSS feed is not accessible",
        }

    def test_twitter_handle(self):
        assert validate_twitter_handle("@paulg")["valid"]
        assert validate_twitter_handle("paul_graham")["valid"]
        assert not validate_twitter_handle("way_too_long_handle_name")["valid"]
        assert not validate_twitter_handle("bad handle")["valid"]
        assert normalize_twitter_handle(" paulg ") == "@paulg"
        assert normalize_twitter_handle("@@paulg") == "@paulg"

    def test_style_post_content(self):
        assert validate_style_post_content("x" * 50)["valid"]
        assert not validate_style_post_content("x" * 49)["valid"]
        assert not validate_style_post_content("x" * 3001)["valid"]
        assert validate_style_post_content("")["errors"] == ["Content is required"]
        # surrounding whitespace does not count towards the minimum
        assert not validate_style_post_content("   " + "x" * 48 + "   ")["valid"]
