"""
Timezone utility functions for the NFL Playoff Picks application
"""

from datetime import datetime, timezone

import pytz
from flask import current_app


def get_app_timezone():
    """Get the application's configured timezone"""
    try:
        timezone_name = current_app.config.get("TIMEZONE", "UTC")
        return pytz.timezone(timezone_name)
    except pytz.UnknownTimeZoneError:
        # Fallback to UTC if timezone is invalid
        return pytz.UTC


def get_utc_time():
    """Get current time in UTC"""
    return datetime.now(timezone.utc)


def ensure_utc(dt):
    """Attach UTC to naive values read back from the database"""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def convert_to_app_timezone(dt):
    """Convert a datetime to the application's timezone"""
    if dt is None:
        return None

    return ensure_utc(dt).astimezone(get_app_timezone())


def convert_to_utc(dt):
    """Convert a datetime to UTC"""
    if dt is None:
        return None

    # If datetime is naive, assume it's in the application timezone
    if dt.tzinfo is None:
        app_tz = get_app_timezone()
        dt = app_tz.localize(dt)

    return dt.astimezone(timezone.utc)


def parse_lock_time(value):
    """
    Parse an admin-entered lock time into an aware UTC datetime.

    Accepts ISO 8601 strings such as "2026-01-10T16:30" (read in the app
    timezone) or "2026-01-10T21:30:00Z". Blank input returns None.

    Raises:
        ValueError: if the value is not a valid timestamp
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return convert_to_utc(value)

    text = str(value).strip()
    if not text:
        return None
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    return convert_to_utc(datetime.fromisoformat(text))


def format_lock_time(dt):
    """Short lock label in the app timezone, e.g. "1/6 7:00 PM" """
    if dt is None:
        return "Not set"

    local = convert_to_app_timezone(dt)
    hour = local.hour % 12 or 12
    suffix = "AM" if local.hour < 12 else "PM"
    return f"{local.month}/{local.day} {hour}:{local.minute:02d} {suffix}"


def isoformat_utc(dt):
    """ISO 8601 string in UTC with a trailing Z"""
    if dt is None:
        return None
    return ensure_utc(dt).strftime("%Y-%m-%dT%H:%M:%SZ")
