"""Signal date normalization.

Turns the date spellings seen in analyst exports (years, year-months,
quarters, month names, year ranges, full dates) into a calendar date.
Anything unparseable becomes the ingestion date; this function never raises.
"""

from __future__ import annotations

import re
from datetime import date, datetime

import structlog
from dateutil import parser as date_parser

logger = structlog.get_logger()

QUARTER_START_MONTH = {1: 1, 2: 4, 3: 7, 4: 10}

MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

_FULL_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_YEAR_MONTH = re.compile(r"^(\d{4})-(\d{1,2})$")
_YEAR = re.compile(r"^(\d{4})$")
_QUARTER_FIRST = re.compile(r"^q([1-4])\s*[-/]?\s*(\d{4})$", re.IGNORECASE)
_YEAR_FIRST_QUARTER = re.compile(r"^(\d{4})\s*[-/]?\s*q([1-4])$", re.IGNORECASE)
_MONTH_YEAR = re.compile(r"^([a-z]{3})[a-z]*\.?,?\s*(\d{4})$", re.IGNORECASE)
_YEAR_RANGE = re.compile(r"^(\d{4})\s*[-–/]\s*(\d{4})$")


def _safe_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _match_known_form(value: str) -> date | None:
    m = _FULL_DATE.match(value)
    if m:
        return _safe_date(int(m.group(1)), int(m.group(2)), int(m.group(3)))

    m = _YEAR_MONTH.match(value)
    if m:
        return _safe_date(int(m.group(1)), int(m.group(2)), 1)

    m = _YEAR.match(value)
    if m:
        return _safe_date(int(m.group(1)), 1, 1)

    m = _QUARTER_FIRST.match(value)
    if m:
        return _safe_date(int(m.group(2)), QUARTER_START_MONTH[int(m.group(1))], 1)

    m = _YEAR_FIRST_QUARTER.match(value)
    if m:
        return _safe_date(int(m.group(1)), QUARTER_START_MONTH[int(m.group(2))], 1)

    m = _MONTH_YEAR.match(value)
    if m and m.group(1).lower() in MONTHS:
        return _safe_date(int(m.group(2)), MONTHS[m.group(1).lower()], 1)

    m = _YEAR_RANGE.match(value)
    if m:
        return _safe_date(int(m.group(1)), 1, 1)

    return None


def try_parse_date(raw: str | None) -> date | None:
    """Parse ``raw`` into a date, or return None when no reading is possible."""
    if raw is None:
        return None
    value = " ".join(str(raw).split())
    if not value:
        return None

    known = _match_known_form(value)
    if known is not None:
        return known

    try:
        parsed = date_parser.parse(value, default=datetime(date.today().year, 1, 1))
    except (ValueError, OverflowError):
        return None
    return parsed.date()


def parse_signal_date(raw: str | None, today: date | None = None) -> date:
    """Normalize a signal date, falling back to ``today`` when unparseable.

    Accepted forms: ``YYYY-MM-DD``, ``YYYY-MM`` (day 01), ``YYYY`` (Jan 1),
    ``Qn YYYY`` / ``YYYY-Qn`` (first day of the quarter), ``Mon YYYY``
    (day 01), ``YYYY-YYYY`` (Jan 1 of the first year), then anything the
    general date parser understands.
    """
    parsed = try_parse_date(raw)
    if parsed is not None:
        return parsed
    fallback = today or date.today()
    if raw:
        logger.warning("signal_date_unparseable", raw=raw, fallback=fallback.isoformat())
    return fallback
