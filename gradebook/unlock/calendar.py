"""Business-day arithmetic for the evaluation grace window."""

from __future__ import annotations

import datetime
import zoneinfo

# Monday=0 .. Sunday=6
Weekend = frozenset({5, 6})


def _day(instant: datetime.datetime | datetime.date, tz: zoneinfo.ZoneInfo | None) -> datetime.date:
    if isinstance(instant, datetime.datetime):
        if tz is not None and instant.tzinfo is not None:
            instant = instant.astimezone(tz)
        return instant.date()
    return instant


def business_days_elapsed(
    start: datetime.datetime | datetime.date,
    now: datetime.datetime | datetime.date,
    tz: zoneinfo.ZoneInfo | None = None,
) -> int:
    """Count the Monday-Friday days passed since `start`.

    Both instants are truncated to their calendar day (in `tz` when given and the
    instant is timezone-aware). Every weekday from the start day through the current
    day inclusive is counted, minus one so the start day itself does not count.
    Never negative.
    """
    first = _day(start, tz)
    last = _day(now, tz)
    if last < first:
        return 0

    span = (last - first).days + 1
    full_weeks, remainder = divmod(span, 7)
    count = full_weeks * 5
    weekday = first.weekday()
    for offset in range(remainder):
        if (weekday + offset) % 7 not in Weekend:
            count += 1

    return max(count - 1, 0)
