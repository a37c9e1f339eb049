"""Calendar-date helpers shared by the models and the conflict engine."""

from __future__ import annotations

from datetime import date, datetime, time

import dateparser
from dateutil.parser import isoparse

DateLike = date | datetime | str

# Trainers type dates the German way ("15.06.2025"); ISO strings come from the API.
_DATEPARSER_LANGUAGES = ["de", "en"]
_DATEPARSER_SETTINGS = {
    "DATE_ORDER": "DMY",
    "PREFER_DAY_OF_MONTH": "first",
    "RETURN_AS_TIMEZONE_AWARE": False,
}


class InvalidDateError(ValueError):
    """Raised when a value cannot be interpreted as a calendar date."""


def _parse_text(raw: str) -> datetime:
    text = raw.strip()
    if not text:
        raise InvalidDateError("empty date value")
    try:
        return isoparse(text)
    except (ValueError, OverflowError):
        pass
    result = dateparser.parse(
        text, languages=_DATEPARSER_LANGUAGES, settings=_DATEPARSER_SETTINGS
    )
    if result is None:
        raise InvalidDateError(f"unparseable date: {raw!r}")
    return result


def parse_datetime(value: DateLike) -> datetime:
    """Coerce *value* into a ``datetime``; plain dates become midnight."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    if isinstance(value, str):
        return _parse_text(value)
    raise InvalidDateError(f"unsupported date value: {value!r}")


def parse_date(value: DateLike) -> date:
    """Coerce *value* into a calendar ``date``, dropping any time of day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_datetime(value).date()


def overlaps(
    start_a: DateLike, end_a: DateLike, start_b: DateLike, end_b: DateLike
) -> bool:
    """Return True if the inclusive ranges [start_a, end_a] and [start_b, end_b] share a day.

    Only the calendar date is compared, so two ranges that touch on the same
    day (one ends on the day the other starts) DO overlap.
    """
    return parse_date(start_a) <= parse_date(end_b) and parse_date(end_a) >= parse_date(
        start_b
    )


def days_between(start: DateLike, end: DateLike) -> int:
    """Number of calendar days in the inclusive range, regardless of order."""
    return abs((parse_date(end) - parse_date(start)).days) + 1
