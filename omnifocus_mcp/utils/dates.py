"""Natural and relative date expressions.

``resolve_date`` turns user input such as ``"tomorrow"`` or ``"+3d"`` into a
concrete timestamp computed from *now*; relative forms land at 17:00 local.
``adjust_date`` nudges an existing timestamp by ``[+-]N[dwm]`` and keeps its
time of day.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime, time, timedelta, tzinfo

DEFAULT_HOUR = 17

_RELATIVE_FROM_NOW = re.compile(r"^\+(\d+)([dw])$")
_ADJUSTMENT = re.compile(r"^([+-]?\d+)([dwm])$")

# Literal formats tried after ISO-8601
_LITERAL_FORMATS = (
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M",
    "%b %d %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%B %d, %Y",
    "%d %b %Y",
    "%d %B %Y",
)


def as_aware(value: datetime) -> datetime:
    """Attach the local timezone to a naive datetime."""
    if value.tzinfo is None:
        return value.astimezone()
    return value


def _at_default_hour(day: date, zone: tzinfo | None) -> datetime:
    # Naive input means local time; astimezone picks the offset in effect that day
    return as_aware(datetime.combine(day, time(DEFAULT_HOUR), tzinfo=zone))


def _parse_literal(text: str) -> datetime | None:
    try:
        return as_aware(datetime.fromisoformat(text))
    except ValueError:
        pass
    for fmt in _LITERAL_FORMATS:
        try:
            return as_aware(datetime.strptime(text, fmt))
        except ValueError:
            continue
    return None


def resolve_date(expression: str | None, now: datetime | None = None) -> datetime | None:
    """
    Resolve a date expression relative to *now*.

    Args:
        expression: "today", "tomorrow", "next week", "+Nd", "+Nw", or an
            absolute date/time literal
        now: Reference time (defaults to the current local time)

    Returns:
        Timezone-aware datetime, or None when the expression is empty or
        cannot be parsed. Callers treat None as "leave this field/filter out".
    """
    if not expression or not expression.strip():
        return None

    tz = now.tzinfo if now is not None else None
    now = as_aware(now or datetime.now())
    text = expression.strip()
    lowered = text.lower()

    try:
        if lowered == "today":
            return _at_default_hour(now.date(), tz)
        if lowered == "tomorrow":
            return _at_default_hour(now.date() + timedelta(days=1), tz)
        if lowered == "next week":
            return _at_default_hour(now.date() + timedelta(days=7), tz)

        match = _RELATIVE_FROM_NOW.match(lowered)
        if match:
            amount = int(match.group(1))
            days = amount * 7 if match.group(2) == "w" else amount
            return _at_default_hour(now.date() + timedelta(days=days), tz)
    except (OverflowError, ValueError):
        return None

    return _parse_literal(text)


def add_months(value: datetime, months: int) -> datetime:
    """Shift by calendar months, clamping the day to the target month's length."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def adjust_date(
    existing: datetime | None,
    offset: str | None,
    now: datetime | None = None,
) -> datetime | None:
    """
    Apply a relative offset such as "+3d", "-1w" or "+2m" to an existing date.

    The time of day is preserved. When *existing* is None the offset is
    applied to *now*. Returns None when the offset does not match the grammar
    or the result is out of range.
    """
    if not offset:
        return None
    match = _ADJUSTMENT.match(offset.strip().lower())
    if not match:
        return None

    base = as_aware(existing or now or datetime.now())
    unit = match.group(2)

    try:
        amount = int(match.group(1))
        if unit == "d":
            return base + timedelta(days=amount)
        if unit == "w":
            return base + timedelta(days=amount * 7)
        return add_months(base, amount)
    except (OverflowError, ValueError):
        return None


def format_iso(value: datetime | None) -> str | None:
    """ISO-8601 text for passing a timestamp through the bridge."""
    if value is None:
        return None
    return as_aware(value).isoformat(timespec="seconds")
