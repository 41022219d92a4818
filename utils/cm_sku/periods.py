# utils/cm_sku/periods.py
"""
Period helpers for the 3PM portal
Normalizes period identifiers and resolves the current reporting period
"""

import calendar
import re
import pandas as pd
from datetime import date, datetime
from typing import Any, Iterable, List, Optional, Tuple
import logging

from .models import Period

logger = logging.getLogger(__name__)

_MONTHS = {}
for _idx in range(1, 13):
    _MONTHS[calendar.month_name[_idx].lower()] = _idx
    _MONTHS[calendar.month_abbr[_idx].lower()] = _idx
_MONTHS['sept'] = 9

_RANGE_PATTERN = re.compile(
    r'^\s*([A-Za-z]+)\.?\s+(\d{4})\s+to\s+([A-Za-z]+)\.?\s+(\d{4})\s*$',
    re.IGNORECASE
)


# === NORMALIZATION ===

def normalize_periods(raw_periods: Optional[Iterable[Any]]) -> List[Period]:
    """
    Normalize master-data period items

    Args:
        raw_periods: Items that are either numeric strings or dicts with
            'id' and 'period' keys

    Returns:
        List of Period, unusable items dropped
    """
    if not raw_periods:
        return []

    periods = []
    for item in raw_periods:
        try:
            if isinstance(item, dict):
                if item.get('id') in (None, '') or not item.get('period'):
                    logger.debug(f"Skipping period without id/label: {item}")
                    continue
                periods.append(Period(
                    id=int(item['id']),
                    label=str(item['period']).strip(),
                    is_active=bool(item.get('is_active', False))
                ))
            elif isinstance(item, (str, int)):
                text = str(item).strip()
                periods.append(Period(id=int(text), label=text))
            else:
                logger.debug(f"Skipping unsupported period item: {item!r}")
        except (TypeError, ValueError) as e:
            logger.debug(f"Skipping malformed period {item!r}: {e}")

    return periods


def period_label(periods: Iterable[Period], period_id: Any) -> str:
    """Display label for a period id (the id itself when unknown)"""
    if period_id is None or (not isinstance(period_id, str) and pd.isna(period_id)):
        return ''
    if isinstance(period_id, float) and period_id.is_integer():
        period_id = int(period_id)
    key = str(period_id).strip()
    for period in periods:
        if period.id_str == key:
            return period.label
    return key


# === PARSING ===

def _month_number(name: str) -> Optional[int]:
    return _MONTHS.get(name.lower().rstrip('.'))


def parse_period_range(label: Any) -> Optional[Tuple[date, date]]:
    """
    Parse "<Month> <Year> to <Month> <Year>" into a date interval

    Args:
        label: Period display string (e.g., "July 2025 to June 2026")

    Returns:
        (first day of start month, last day of end month) or None if the
        label does not follow the pattern
    """
    if label is None or not isinstance(label, str):
        return None

    match = _RANGE_PATTERN.match(label)
    if not match:
        return None

    start_month = _month_number(match.group(1))
    end_month = _month_number(match.group(3))
    if start_month is None or end_month is None:
        logger.debug(f"Unknown month name in period '{label}'")
        return None

    try:
        start_year = int(match.group(2))
        end_year = int(match.group(4))
        start = date(start_year, start_month, 1)
        last_day = calendar.monthrange(end_year, end_month)[1]
        end = date(end_year, end_month, last_day)
    except ValueError as e:
        logger.debug(f"Invalid dates in period '{label}': {e}")
        return None

    if end < start:
        logger.debug(f"Period '{label}' ends before it starts")
        return None

    return start, end


def _as_date(value: Optional[Any]) -> date:
    if value is None:
        return datetime.now().date()
    if isinstance(value, datetime):
        return value.date()
    return value


# === CURRENT PERIOD ===

def resolve_current_period(periods: Iterable[Period], today: Optional[Any] = None) -> Optional[Period]:
    """
    Determine the current reporting period

    Order of resolution:
        1. Period whose parsed date range contains today
        2. Period whose label contains the current year
        3. Period with the highest id

    Ties at each step are broken by the highest id.

    Args:
        periods: Candidate periods
        today: Reference date (default: today)

    Returns:
        The current Period, or None when no periods are given
    """
    periods = list(periods or [])
    if not periods:
        return None

    reference = _as_date(today)

    containing = []
    for period in periods:
        interval = parse_period_range(period.label)
        if interval is None:
            continue
        start, end = interval
        if start <= reference <= end:
            containing.append(period)

    if containing:
        current = max(containing, key=lambda p: p.id)
        logger.info(f"Current period by date range: {current.id} ({current.label})")
        return current

    year_text = str(reference.year)
    same_year = [p for p in periods if year_text in (p.label or '')]
    if same_year:
        current = max(same_year, key=lambda p: p.id)
        logger.info(f"Current period by year match: {current.id} ({current.label})")
        return current

    current = max(periods, key=lambda p: p.id)
    logger.warning(f"No period matched {reference}, using highest id {current.id}")
    return current


def sort_periods_desc(periods: Iterable[Period]) -> List[Period]:
    """Periods ordered most recent (highest id) first"""
    return sorted(periods, key=lambda p: p.id, reverse=True)
