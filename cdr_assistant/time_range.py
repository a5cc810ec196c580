"""Resolution of relative time ranges ("today", "3h") for problem-call searches."""

import re
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Callable, Optional, Tuple
from zoneinfo import ZoneInfo

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

_HOURS_RE = re.compile(r"^\s*(\d+)\s*h\s*$", re.IGNORECASE)


def get_timezone(name: str) -> tzinfo:
    if not name or name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def resolve_time_range(
    time_range: str,
    tz: Optional[tzinfo] = None,
    now: Optional[Callable[[tzinfo], datetime]] = None,
) -> Tuple[str, str]:
    """
    Turn a time range expression into (startTime, endTime) strings.

    - "today": midnight of the current date through now
    - "<N>h": now minus N hours through now
    - anything else: used verbatim as startTime, endTime is now

    Args:
        time_range: Range expression from the caller
        tz: Timezone for "now" and "today" (default UTC)
        now: Clock override, called with the timezone

    Returns:
        Tuple of (start_time, end_time)
    """
    tz = tz or get_timezone("UTC")
    current = (now or datetime.now)(tz).replace(microsecond=0)
    end_time = current.strftime(TIME_FORMAT)

    expression = (time_range or "").strip()
    if expression.lower() == "today":
        midnight = current.replace(hour=0, minute=0, second=0)
        return midnight.strftime(TIME_FORMAT), end_time

    match = _HOURS_RE.match(expression)
    if match:
        start = current - timedelta(hours=int(match.group(1)))
        return start.strftime(TIME_FORMAT), end_time

    return time_range, end_time
