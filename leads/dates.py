"""
Date Normalizer - turns ambiguous spreadsheet dates into ISO dates.

Turkish exports write dates day-first ("15.03.2024"), but some sheets were
saved from US-locale Excel. Dotted and slashed dates share one decision table:

    first <= 12, second <= 12  -> day-first (ambiguous, Turkish default)
    first  > 12, second <= 12  -> day-first (first part is definitely a day)
    first <= 12, second  > 12  -> month-first (day-first would be month > 12)
    first  > 12, second  > 12  -> no valid reading

A trailing time of day ("05.03.2024 10:30") is ignored.

The output is always "" or a YYYY-MM-DD string; normalize() never raises.
"""

import logging
import re
import warnings
from datetime import date, datetime
from typing import Any, Optional, Tuple

import pandas as pd

logger = logging.getLogger(__name__)

SUPPORTED_DATE_FORMATS = ["DD.MM.YYYY", "DD/MM/YYYY", "MM.DD.YYYY", "YYYY-MM-DD"]

DAY_MONTH_RE = re.compile(r"^(\d{1,2})([./])(\d{1,2})\2(\d{4})(?:[ T]+\d{1,2}:\d{2}(?::\d{2}(?:\.\d+)?)?)?$")
ISO_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
CANONICAL_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _iso(year: int, month: int, day: int) -> str:
    """Format a calendar date, or "" when it does not exist."""
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return ""


def resolve_day_month(first: int, second: int) -> Optional[Tuple[int, int]]:
    """Apply the decision table; returns (day, month) or None."""
    if second <= 12:
        return first, second
    if first <= 12:
        return second, first
    return None


class DateNormalizer:
    """
    Converts raw date cells to canonical ISO dates.

    Usage:
        DateNormalizer().normalize("15.03.2024")  # "2024-03-15"
    """

    def normalize(self, raw: Any) -> str:
        if raw is None or raw is pd.NaT:
            return ""
        if isinstance(raw, pd.Timestamp):
            return "" if pd.isna(raw) else raw.date().isoformat()
        if isinstance(raw, datetime):
            return raw.date().isoformat()
        if isinstance(raw, date):
            return raw.isoformat()

        text = str(raw).strip()
        if not text:
            return ""

        match = DAY_MONTH_RE.match(text)
        if match:
            first, second, year = int(match.group(1)), int(match.group(3)), int(match.group(4))
            resolved = resolve_day_month(first, second)
            if resolved is None:
                return ""
            day, month = resolved
            return _iso(year, month, day)

        match = ISO_RE.match(text)
        if match:
            year, month, day = (int(part) for part in match.groups())
            return _iso(year, month, day)

        return self._parse_fallback(text)

    def _parse_fallback(self, text: str) -> str:
        """General parse for anything else (timestamps, month names, ...)."""
        try:
            with warnings.catch_warnings():
                warnings.simplefilter("ignore")
                parsed = pd.to_datetime(text, errors="coerce")
        except (ValueError, TypeError, OverflowError) as e:
            logger.debug("Unparseable date %r: %s", text, e)
            return ""

        if parsed is None or pd.isna(parsed):
            return ""

        result = parsed.date().isoformat()
        return result if CANONICAL_RE.match(result) else ""


_default = DateNormalizer()


def normalize_date(raw: Any) -> str:
    """Module-level shortcut for DateNormalizer().normalize()."""
    return _default.normalize(raw)
