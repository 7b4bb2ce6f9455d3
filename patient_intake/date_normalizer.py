"""Date normalization for patient records.

Upstream exports mix human-entered date strings with spreadsheet day-serials
(e.g. ``36526`` for 2000-01-01). :func:`normalize` accepts either form without
the caller knowing which one a field uses:

1. The value is parsed as a conventional calendar string. If the parser
   resolves a month, that result is returned immediately. Plain numbers
   other than a compact ``YYYYMMDD`` date never resolve here.
2. Otherwise the value is read as a spreadsheet serial (days since
   1899-12-30), converted to a UTC instant, rendered in RFC 2822 form and
   parsed again through step 1.
3. If no month is resolved after step 2, ``DateParseError`` is raised.

The serial arithmetic is kept in small pure functions so it can be tested
independently of the string parser. It never applies a local timezone, so day
boundaries are the same on every platform.
"""

from __future__ import annotations

import logging
import math
import numbers
import re
from datetime import date, datetime, timedelta, timezone
from email.utils import format_datetime
from typing import Any, Optional

from dateutil import parser as date_parser

from .data_models import CalendarDate
from .errors import DateParseError

LOG = logging.getLogger(__name__)

# Serial 25569 is 1970-01-01 in the 1899-12-30 spreadsheet epoch.
UNIX_EPOCH_SERIAL = 25569
SECONDS_PER_DAY = 86400
# 9999-12-31, the last day a spreadsheet serial can represent.
MAX_SERIAL = 2958465

# Plain numbers are serials unless they are a compact YYYYMMDD date.
NUMERIC_PATTERN = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
COMPACT_DATE_PATTERN = re.compile(r"\d{8}")

UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _month_probe_defaults(today: Optional[date] = None) -> tuple[datetime, datetime]:
    """Two parse defaults that differ only in month.

    The year comes from ``today`` (host clock when omitted). Both months have
    31 days so an explicit day never overflows the default.
    """
    year = (today or date.today()).year
    return datetime(year, 1, 1), datetime(year, 12, 1)


def parse_calendar_string(
    text: str, today: Optional[date] = None
) -> Optional[CalendarDate]:
    """Parse a conventional date string, returning None if no month is resolved.

    The string is parsed twice against defaults that differ only in month.
    When both parses agree the month came from the text itself; when they
    disagree the month was filled in from the default and is unresolved.

    Parameters
    ----------
    text : str
        Date text such as ``"2000-06-15"``, ``"06/15/2000 08:30"`` or
        ``"Thu, 15 Jun 2000 08:30:00 +0000"``. Ambiguous numeric dates are
        read month-first.
    today : date, optional
        Reference date supplying the year when the text has none.

    Returns
    -------
    CalendarDate | None
        The resolved date, or None when the text is empty, unparseable or
        carries no month.
    """
    if not text or not text.strip():
        return None

    stripped = text.strip()
    if NUMERIC_PATTERN.fullmatch(stripped) and not COMPACT_DATE_PATTERN.fullmatch(
        stripped
    ):
        return None

    january, december = _month_probe_defaults(today)
    try:
        first = date_parser.parse(text, default=january)
        second = date_parser.parse(text, default=december)
    except (ValueError, OverflowError):
        return None

    if first.month != second.month:
        return None
    return CalendarDate.from_datetime(first)


def coerce_serial(value: Any) -> float:
    """Read ``value`` as a spreadsheet day-serial.

    Raises
    ------
    DateParseError
        If the value is not numeric, not finite, or outside
        ``[0, MAX_SERIAL]``.
    """
    if isinstance(value, bool) or value is None:
        raise DateParseError(f"Not a spreadsheet serial: {value!r}")

    if isinstance(value, numbers.Real):
        serial = float(value)
    elif isinstance(value, str):
        try:
            serial = float(value.strip())
        except ValueError as exc:
            raise DateParseError(f"Not a spreadsheet serial: {value!r}") from exc
    else:
        raise DateParseError(f"Not a spreadsheet serial: {value!r}")

    if not math.isfinite(serial) or not 0 <= serial <= MAX_SERIAL:
        raise DateParseError(f"Spreadsheet serial out of range: {value!r}")
    return serial


def serial_to_unix_seconds(serial: float) -> float:
    """Convert a spreadsheet day-serial to seconds since the Unix epoch.

    >>> serial_to_unix_seconds(25569)
    0
    >>> serial_to_unix_seconds(25570.5)
    129600.0
    """
    return (serial - UNIX_EPOCH_SERIAL) * SECONDS_PER_DAY


def serial_to_utc_datetime(serial: float) -> datetime:
    """Convert a spreadsheet day-serial to an aware UTC datetime.

    Fractional seconds are floored so an instant just before midnight stays on
    its own day.
    """
    seconds = math.floor(serial_to_unix_seconds(serial))
    return UNIX_EPOCH + timedelta(seconds=seconds)


def format_serial(serial: float) -> str:
    """RFC 2822 rendering of a serial's UTC instant, e.g. ``Sat, 01 Jan 2000 00:00:00 +0000``."""
    return format_datetime(serial_to_utc_datetime(serial))


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, numbers.Real) and not isinstance(value, bool):
        return str(value)
    return ""


def normalize(
    value: str | int | float, today: Optional[date] = None
) -> CalendarDate:
    """Normalize a date string or spreadsheet serial into a CalendarDate.

    Parameters
    ----------
    value : str | int | float
        Raw date value from the input record.
    today : date, optional
        Reference date supplying the year for strings that omit it.

    Returns
    -------
    CalendarDate
        Resolved date; missing day or time components default to day 1 and
        00:00:00.

    Raises
    ------
    DateParseError
        If neither the calendar-string parse nor the serial parse resolves a
        month.

    Examples
    --------
    >>> normalize("2000-06-15")
    CalendarDate(year=2000, month=6, day=15, hour=0, minute=0, second=0)

    >>> normalize(36526)
    CalendarDate(year=2000, month=1, day=1, hour=0, minute=0, second=0)
    """
    parsed = parse_calendar_string(_as_text(value), today)
    if parsed is not None:
        return parsed

    serial = coerce_serial(value)
    formatted = format_serial(serial)
    parsed = parse_calendar_string(formatted, today)
    if parsed is None:
        raise DateParseError(f"Unable to resolve date from serial {value!r}")

    LOG.debug("Read %r as spreadsheet serial: %s", value, formatted)
    return parsed
