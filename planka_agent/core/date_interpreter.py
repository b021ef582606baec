"""Due date parsing for task proposals.

Turns short date expressions ("tomorrow", "in 3 days", "next friday",
"2025-10-30", "30.10.2025") into datetimes. Numeric dates are read day-first
or month-first depending on the locale tag.

Parsed dates keep the time of day they were computed with; callers that want
an end-of-day due date apply end_of_day() themselves.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from email.utils import parsedate_to_datetime
from typing import Optional

from planka_agent.config.defaults import DAY_FIRST_LOCALE_PREFIXES, DEFAULT_LOCALE


# Sunday first, matching day_of_week().
WEEKDAY_NAMES = [
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
]

_NUMERIC_SEPARATOR_RE = re.compile(r"[./\-]")
_LEADING_INT_RE = re.compile(r"^[+-]?\d+")


def day_of_week(value: datetime) -> int:
    """Return the weekday with Sunday = 0 ... Saturday = 6."""

    return (value.weekday() + 1) % 7


def end_of_day(value: datetime) -> datetime:
    return value.replace(hour=23, minute=59, second=59, microsecond=999000)


def end_of_next_week(now: Optional[datetime] = None) -> datetime:
    """Return Sunday of the following week at 23:59:59.999.

    The result is always 7 to 13 days after ``now`` and keeps its timezone.
    """

    now = now or datetime.now()
    days_to_add = ((7 - day_of_week(now)) % 7) + 7
    return end_of_day(now + timedelta(days=days_to_add))


def is_day_first_locale(locale: Optional[str]) -> bool:
    return (locale or "").lower().startswith(DAY_FIRST_LOCALE_PREFIXES)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a standard timestamp string (ISO 8601 or RFC 2822)."""

    text = (value or "").strip()
    if not text:
        return None

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass

    try:
        return parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError, OverflowError):
        return None


def _leading_int(value: str) -> Optional[int]:
    match = _LEADING_INT_RE.match(value.strip())
    if not match:
        return None
    try:
        return int(match.group(0))
    except ValueError:
        # more digits than int() accepts
        return None


def _add_days(value: datetime, days: int) -> Optional[datetime]:
    try:
        return value + timedelta(days=days)
    except OverflowError:
        return None


def _parse_numeric_date(text: str, locale: str, now: datetime) -> Optional[datetime]:
    sep = _NUMERIC_SEPARATOR_RE.search(text)
    if not sep:
        return None

    parts = [p.strip() for p in text.split(sep.group(0))]
    if len(parts) not in (2, 3):
        return None

    first = _leading_int(parts[0])
    second = _leading_int(parts[1])
    if is_day_first_locale(locale):
        day, month = first, second
    else:
        month, day = first, second

    year: Optional[int] = now.year
    if len(parts) == 3 and parts[2]:
        year = _leading_int(parts[2])

    if day is None or month is None or year is None:
        return None
    if year < 100:
        year += 2000

    try:
        return datetime(year, month, day, tzinfo=now.tzinfo)
    except (ValueError, OverflowError):
        return None


def parse_date(
    text: Optional[str],
    locale: str = DEFAULT_LOCALE,
    now: Optional[datetime] = None,
) -> Optional[datetime]:
    """Interpret a date expression; returns None when nothing matches.

    Rules, first match wins:
      1. "today"
      2. "tomorrow"
      3. "in <N> day(s)" with N > 0
      4. "next <weekday>" (never today; a full week ahead instead)
      5. ISO 8601 / RFC 2822 timestamp
      6. numeric date with ".", "/" or "-" separators, ordered by locale
    """

    if text is None:
        return None
    raw = str(text).strip()
    if not raw:
        return None

    expr = raw.lower()
    now = now or datetime.now()

    if expr == "today":
        return now

    if expr == "tomorrow":
        return _add_days(now, 1)

    if expr.startswith("in ") and "day" in expr:
        match = re.search(r"\d+", expr)
        days = (_leading_int(match.group(0)) or 0) if match else 0
        if days > 0:
            return _add_days(now, days)

    if expr.startswith("next "):
        prefix = expr[len("next "):].strip()[:3]
        idx = next((i for i, name in enumerate(WEEKDAY_NAMES) if name.startswith(prefix)), -1)
        if idx != -1:
            add = (idx - day_of_week(now) + 7) % 7 or 7
            return _add_days(now, add)

    parsed = parse_timestamp(raw)
    if parsed is not None:
        return parsed

    return _parse_numeric_date(raw, locale, now)
