"""
Date helpers for the day-trade tax engine.

Month strings ('YYYY-MM'), month arithmetic and coercion of the many date
shapes a trade export can carry (ISO strings, date, datetime, pandas
Timestamp) into plain calendar dates in the B3 market timezone.
"""

import calendar
import logging
import re
from datetime import date, datetime
from typing import Any, Optional, Tuple

import pandas as pd
import pytz

# Configure logging
logger = logging.getLogger(__name__)

MARKET_TIMEZONE = pytz.timezone('America/Sao_Paulo')

_MONTH_PATTERN = re.compile(r'^(\d{4})-(\d{2})$')


def parse_month(month: str) -> Tuple[int, int]:
    """
    Split a 'YYYY-MM' month string into (year, month).

    Raises:
        ValueError: If the string is not a valid month
    """
    if not isinstance(month, str):
        raise ValueError(f"Month must be a 'YYYY-MM' string, got {month!r}")

    match = _MONTH_PATTERN.match(month.strip())
    if not match:
        raise ValueError(f"Month must be in 'YYYY-MM' format, got {month!r}")

    year, month_number = int(match.group(1)), int(match.group(2))
    if not 1 <= month_number <= 12:
        raise ValueError(f"Month number out of range in {month!r}")

    return year, month_number


def format_month(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def next_month(year: int, month: int) -> Tuple[int, int]:
    """Following calendar month; December rolls over to January."""
    if month == 12:
        return year + 1, 1
    return year, month + 1


def last_day_of_month(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def to_market_date(value: Any) -> Optional[date]:
    """
    Coerce a trade date into a calendar date.

    Timezone-aware datetimes are converted to America/Sao_Paulo before the
    date is taken, so an execution late at night UTC lands on the session it
    belongs to. Missing or unparseable values return None.

    Args:
        value: ISO string, date, datetime, pandas Timestamp or None

    Returns:
        The calendar date, or None
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        if pd.isna(value):
            return None
        if value.tzinfo is not None:
            value = value.astimezone(MARKET_TIMEZONE)
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        parsed = pd.to_datetime(text, errors='coerce')
        if pd.isna(parsed):
            logger.debug(f"Unparseable trade date ignored: {value!r}")
            return None
        return to_market_date(parsed)

    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass

    logger.debug(f"Unsupported trade date type ignored: {type(value).__name__}")
    return None


def month_of(value: Any) -> Optional[str]:
    """'YYYY-MM' of a trade date, or None when the date is missing."""
    coerced = to_market_date(value)
    if coerced is None:
        return None
    return format_month(coerced.year, coerced.month)
