"""
Date and time normalization.

Publications mix several encodings for the same information:
- dates as spreadsheet serial numbers ('45611') or typed text ('15.11.2024')
- times as 'HH:MM', as decimal hours where the first fractional digit means
  tens of minutes ('14.3' = 14:30), or as bare hours ('14')

Everything here is pure string handling: no exceptions escape to callers.
"""

from __future__ import annotations

import math
import re
from datetime import date, timedelta
from typing import Optional


# Spreadsheet epoch (accounts for the historical 1900 leap-year error)
SERIAL_EPOCH = date(1899, 12, 30)

DEFAULT_TIME = "00:00"
TIME_RANGE_SEPARATOR = "–"
MINUTES_PER_DAY = 24 * 60

_DATE_SPLIT_RE = re.compile(r"[/.\-]")
_DECIMAL_TIME_RE = re.compile(r"^(\d{1,2})\.(\d)\d*$")
_COLON_TIME_RE = re.compile(r"^(\d{1,2}):(\d{1,2})(?::\d{1,2})?$")
_HOUR_RE = re.compile(r"^\d{1,2}$")


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


def _serial_number(raw: str) -> Optional[float]:
    try:
        value = float(raw)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def parse_date(raw: str) -> Optional[date]:
    """
    Convert a raw cell string into a calendar date.

    - plain number -> serial day count from 1899-12-30 (time-of-day ignored)
    - 'a/b/c', 'a.b.c' or 'a-b-c' -> day/month disambiguated by magnitude,
      two-digit years promoted to 20xx

    Returns None if the value cannot be turned into a real date.
    """
    text = (raw or "").strip()
    if not text:
        return None

    serial = _serial_number(text)
    if serial is not None:
        try:
            return SERIAL_EPOCH + timedelta(days=int(serial))
        except OverflowError:
            return None

    parts = [p.strip() for p in _DATE_SPLIT_RE.split(text)]
    if len(parts) < 3:
        return None

    try:
        first, second, year = int(parts[0]), int(parts[1]), int(parts[2])
    except ValueError:
        return None

    if first > 12:
        day, month = first, second
    elif second > 12:
        month, day = first, second
    else:
        # ambiguous: month-then-day
        month, day = first, second

    if year < 100:
        year += 2000

    try:
        return date(year, month, day)
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Times
# ---------------------------------------------------------------------------


def _hour_minute(raw: str) -> Optional[tuple[int, int]]:
    """
    Split a time string into (hour, minute) using the three known encodings.
    """
    text = raw.strip()

    m = _COLON_TIME_RE.match(text)
    if m:
        return int(m.group(1)), int(m.group(2))

    # '14.3' means 14:30, not 14 + 0.3 hours
    m = _DECIMAL_TIME_RE.match(text)
    if m:
        return int(m.group(1)), int(m.group(2)) * 10

    if _HOUR_RE.match(text):
        return int(text), 0

    return None


def parse_time(raw: str) -> str:
    """
    Normalize a raw time cell to 'HH:MM'.

    Empty input gives '00:00'; input that matches no known encoding is
    returned trimmed and unchanged.
    """
    text = (raw or "").strip()
    if not text:
        return DEFAULT_TIME

    hm = _hour_minute(text)
    if hm is None:
        return text

    hour, minute = hm
    return f"{hour:02d}:{minute:02d}"


def format_time_range(start: str, end: str) -> str:
    return f"{parse_time(start)}{TIME_RANGE_SEPARATOR}{parse_time(end)}"


def format_exam_label(arrival: str, start: str, end: str) -> str:
    """
    Time label for exam sessions; mentions the arrival time when there is one.
    """
    label = format_time_range(start, end)
    if arrival and arrival.strip():
        return f"{label} (arrivée {parse_time(arrival)})"
    return label


# ---------------------------------------------------------------------------
# Durations
# ---------------------------------------------------------------------------


def _minutes_since_midnight(raw: str) -> Optional[int]:
    hm = _hour_minute(raw)
    if hm is None:
        return None
    hour, minute = hm
    return hour * 60 + minute


def compute_duration(start: str, end: str) -> str:
    """
    Human-readable elapsed time between two raw time strings.

    Negative spans are read as crossing midnight. Returns '' for empty or
    unparseable input and for implausible results.
    """
    if not (start or "").strip() or not (end or "").strip():
        return ""

    start_min = _minutes_since_midnight(start)
    end_min = _minutes_since_midnight(end)
    if start_min is None or end_min is None:
        return ""

    total = end_min - start_min
    if total < 0:
        total += MINUTES_PER_DAY

    if not 0 <= total <= MINUTES_PER_DAY:
        return ""

    hours, minutes = divmod(total, 60)
    if hours and minutes:
        return f"{hours}h{minutes}min"
    if hours:
        return f"{hours}h"
    if minutes:
        return f"{minutes}min"
    return ""
