import math
import re
from datetime import datetime, timezone

DEFAULT_TIME = "00:00"

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def normalize_time(time_str):
    """
    Normalize time strings to consistent HH:MM 24-hour format.
    Handles: "8:00", "8:30pm", "20:00:00", "19:00", "8:00pm", "08:00 PM"
    """
    if not time_str:
        return None

    time_str = time_str.strip().lower()

    if time_str.count(":") == 2:
        time_str = ":".join(time_str.split(":")[:2])

    is_pm = "pm" in time_str
    is_am = "am" in time_str
    time_str = time_str.replace("pm", "").replace("am", "").strip()

    parts = time_str.split(":")
    if len(parts) != 2:
        return None

    try:
        hours = int(parts[0])
        minutes = int(parts[1])
    except ValueError:
        return None

    if is_pm and hours < 12:
        hours += 12
    elif is_am and hours == 12:
        hours = 0

    if not (0 <= hours < 24 and 0 <= minutes < 60):
        return None

    return f"{hours:02d}:{minutes:02d}"


def parse_datetime(value):
    """
    Parse a provider date-time string into a datetime.
    Accepts ISO 8601 with "T" or space separators, a trailing "Z", or a bare date.
    Returns None when the value cannot be parsed.
    """
    if not value or not isinstance(value, str):
        return None

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def split_datetime(value):
    """
    Split a provider date-time string into (YYYY-MM-DD, HH:MM).
    The wall-clock time in the string is kept as-is (no timezone conversion).
    A bare date gets the default "00:00". Returns (None, None) if unparsable.
    """
    parsed = parse_datetime(value)
    if parsed is None:
        return None, None

    date = parsed.strftime("%Y-%m-%d")
    if _DATE_RE.match(value.strip()):
        return date, DEFAULT_TIME
    return date, parsed.strftime("%H:%M")


def hour_of(time_str):
    """Return the hour of an HH:MM string, or None."""
    normalized = normalize_time(time_str)
    if not normalized:
        return None
    return int(normalized.split(":")[0])


def _timestamp(parsed):
    # wall-clock time, same as the date/time shown on the event
    return parsed.replace(tzinfo=timezone.utc).timestamp()


def sort_timestamp(event):
    """
    Sortable timestamp for an event.
    Uses rawDate when it parses, else date + time. Offsets in rawDate are
    ignored so the order matches each event's local date and time.
    Unparsable events get math.inf so they sort after everything else.
    """
    try:
        parsed = parse_datetime(event.get("rawDate"))
        if parsed is not None:
            return _timestamp(parsed)

        date = event.get("date")
        if not date or not _DATE_RE.match(str(date)):
            return math.inf

        time = normalize_time(event.get("time")) or DEFAULT_TIME
        parsed = parse_datetime(f"{date}T{time}")
        if parsed is None:
            return math.inf
        return _timestamp(parsed)
    except (TypeError, ValueError, OverflowError):
        return math.inf
