import re
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional

# "MM:SS.hh" (1-3 fractional digits, single-digit minutes tolerated)
TIME_FORMAT_REGEX = re.compile(r"^([0-5]?[0-9]):([0-5][0-9])\.([0-9]{1,3})$")


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def is_valid_time(value) -> bool:
    if not isinstance(value, str):
        return False
    return bool(TIME_FORMAT_REGEX.match(value.strip()))


def time_to_seconds(value: str) -> float:
    """
    Convert a swim time to total seconds: minutes * 60 + seconds.fraction.

    Decimal arithmetic keeps the result identical to the literal, e.g.
    "01:23.45" -> 83.45 (not 83.45000000000002).
    """
    if not isinstance(value, str) or ":" not in value:
        raise ValueError(f"Invalid swim time: {value!r}")

    minutes_raw, seconds_raw = value.strip().split(":", 1)
    try:
        total = int(minutes_raw) * 60 + Decimal(seconds_raw)
    except (ValueError, InvalidOperation):
        raise ValueError(f"Invalid swim time: {value!r}") from None

    return float(total)


def parse_date(value) -> Optional[date]:
    """
    Accept a date, a datetime, or an ISO string ("2024-02-10" or a full
    timestamp) and return the calendar date. None/empty stays None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip()[:10])
    raise ValueError(f"Invalid date: {value!r}")
