"""Publish date normalization for the site's display format.

Dates on the detail pages look like ``05/03/2024 às 14h30``. They are
converted to Unix epoch seconds in an explicit time zone so results do not
depend on the host's locale settings.
"""

from __future__ import annotations

from datetime import datetime, tzinfo
import math
import re
from zoneinfo import ZoneInfo


_DISPLAY_DATE_RE = re.compile(r"(\d{2})/(\d{2})/(\d{4})\s+às\s+(\d{1,2})h(\d{2})")


class DateFormatError(ValueError):
    """Raised when a display date cannot be normalized."""


def resolve_timezone(tz: tzinfo | str) -> tzinfo:
    """Return a tzinfo for an IANA name, or the tzinfo itself.

    Raises:
        ValueError: If the zone name is unknown
    """
    if isinstance(tz, tzinfo):
        return tz
    try:
        return ZoneInfo(tz)
    except (KeyError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {tz}") from exc


def parse_display_date(value: str, tz: tzinfo | str) -> int:
    """Convert a ``DD/MM/YYYY às HhMM`` string to epoch seconds.

    The pattern is searched anywhere in the string, so surrounding text such
    as a "Publicado em" prefix is tolerated. Seconds are always zero.

    Args:
        value: Display date text scraped from the page
        tz: Time zone the display date is written in

    Returns:
        Unix epoch seconds

    Raises:
        DateFormatError: If the text does not match the display format,
            a captured field is empty, or the date is not a real calendar date

    Examples:
        >>> parse_display_date("01/01/2024 às 10h00", "UTC")
        1704103200
    """
    zone = resolve_timezone(tz)
    match = _DISPLAY_DATE_RE.search(value or "")
    if not match:
        raise DateFormatError(f"Invalid date format: {value!r}")

    day, month, year, hour, minute = match.groups()
    if not day or not month or not year or not hour or not minute:
        raise DateFormatError("Date fields are empty")

    try:
        moment = datetime(
            int(year),
            int(month),
            int(day),
            int(hour),
            int(minute),
            tzinfo=zone,
        )
    except ValueError as exc:
        raise DateFormatError(f"Invalid calendar date: {value!r}") from exc

    return math.floor(moment.timestamp())
