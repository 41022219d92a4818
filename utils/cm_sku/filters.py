# utils/cm_sku/filters.py

"""
Filter evaluation for 3PM and SKU listings
- Multi-select per dimension: OR within a dimension, AND across dimensions
- Delimited multi-value fields (periods "2,3") are split before matching
- Bulk code Quick Add parsing and validation
"""

import re
import numpy as np
import pandas as pd
from dataclasses import dataclass
from typing import Dict, Any, Iterable, List, Optional, Set, Tuple
import logging

from .models import FilterCriteria

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterDimension:
    """Binding of a criteria dimension to a record column"""
    name: str
    column: str
    multi_value: bool = False


CM_LISTING_DIMENSIONS: Tuple[FilterDimension, ...] = (
    FilterDimension('cm_codes', 'cm_code'),
    FilterDimension('signoff_statuses', 'signoff_status'),
    FilterDimension('periods', 'periods', multi_value=True),
    FilterDimension('regions', 'region_name'),
    FilterDimension('srm_leads', 'srm_lead'),
)

SKU_LISTING_DIMENSIONS: Tuple[FilterDimension, ...] = (
    FilterDimension('periods', 'period', multi_value=True),
    FilterDimension('sku_descriptions', 'sku_description'),
    FilterDimension('component_codes', 'component_codes', multi_value=True),
)


# =============================================================================
# VALUE HELPERS
# =============================================================================

def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, tuple, set)):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _normalize(value: Any) -> str:
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        value = int(value)
    return str(value).strip()


def split_multi_value(value: Any) -> List[str]:
    """
    Split a delimited multi-value field into trimmed tokens

    "2, 3" -> ['2', '3']; lists are normalized item by item
    """
    if _is_missing(value):
        return []
    if isinstance(value, (list, tuple, set)):
        items = value
    elif isinstance(value, str):
        items = value.split(',')
    else:
        # Numeric ids (float once pandas sees a null) are a single token
        items = [value]
    tokens = []
    for item in items:
        if _is_missing(item):
            continue
        token = _normalize(item)
        if token:
            tokens.append(token)
    return tokens


def _selection_set(values: Iterable[Any]) -> Set[str]:
    return {_normalize(v) for v in values if not _is_missing(v)}


def _row_matches(value: Any, selected: Set[str], multi_value: bool) -> bool:
    if _is_missing(value):
        return False
    if multi_value:
        return any(token in selected for token in split_multi_value(value))
    return _normalize(value) in selected


# =============================================================================
# FILTER EVALUATION
# =============================================================================

def matches_criteria(
    record: Dict[str, Any],
    criteria: FilterCriteria,
    dimensions: Iterable[FilterDimension] = CM_LISTING_DIMENSIONS
) -> bool:
    """Check a single record against all active dimensions"""
    for dimension in dimensions:
        selection = criteria.get(dimension.name)
        if not selection:
            continue
        selected = _selection_set(selection)
        if not _row_matches(record.get(dimension.column), selected, dimension.multi_value):
            return False
    return True


def apply_filters(
    records: pd.DataFrame,
    criteria: FilterCriteria,
    dimensions: Iterable[FilterDimension] = CM_LISTING_DIMENSIONS
) -> pd.DataFrame:
    """
    Apply filter criteria to a record frame

    Args:
        records: Listing rows
        criteria: Selected values per dimension
        dimensions: Dimension-to-column bindings for this listing

    Returns:
        Rows passing every active dimension, in input order (not sorted)
    """
    if records is None or records.empty:
        return records if records is not None else pd.DataFrame()

    mask = pd.Series(True, index=records.index)

    for dimension in dimensions:
        selection = criteria.get(dimension.name)
        if not selection:
            continue

        selected = _selection_set(selection)

        if dimension.column not in records.columns:
            logger.warning(f"Filter column '{dimension.column}' missing, no rows match {dimension.name}")
            mask &= False
            continue

        dim_mask = records[dimension.column].apply(
            lambda v: _row_matches(v, selected, dimension.multi_value)
        ).astype(bool)
        mask &= dim_mask
        logger.debug(f"Filtered by {dimension.name}: {sorted(selected)}. Remaining: {int(mask.sum())}")

    filtered = records[mask]
    logger.info(f"Filters applied: {len(filtered)}/{len(records)} records")
    return filtered


def count_active_filters(criteria: FilterCriteria) -> int:
    """Number of dimensions with a non-empty selection"""
    return sum(1 for name in criteria.dimension_names() if criteria.get(name))


def filter_options(
    records: pd.DataFrame,
    column: str,
    fallback: Optional[List[str]] = None,
    multi_value: bool = False
) -> List[str]:
    """
    Unique non-empty values of a column for a multiselect

    Falls back to the given list when the column has no values
    """
    values: List[str] = []
    if records is not None and not records.empty and column in records.columns:
        seen = set()
        for value in records[column]:
            tokens = split_multi_value(value) if multi_value else (
                [] if _is_missing(value) or _normalize(value) == '' else [_normalize(value)]
            )
            for token in tokens:
                if token not in seen:
                    seen.add(token)
                    values.append(token)

    if not values and fallback is not None:
        logger.info(f"No '{column}' values in data, using fallback options")
        return list(fallback)

    return sorted(values, key=lambda v: v.lower())


# =============================================================================
# QUICK ADD (bulk code input)
# =============================================================================

def parse_code_list(input_text: str) -> List[str]:
    """
    Parse codes from text with multiple delimiter support
    Supports: comma, semicolon, space, newline, tab, pipe
    """
    if not input_text or not input_text.strip():
        return []

    normalized = input_text.strip()
    for delimiter in [';', '\n', '\r', '\t', '|']:
        normalized = normalized.replace(delimiter, ',')

    codes = re.split(r'[,\s]+', normalized)

    unique_codes = []
    seen: Set[str] = set()
    for code in codes:
        code = re.sub(r'["\']', '', code.strip())
        if code and code.upper() not in seen:
            seen.add(code.upper())
            unique_codes.append(code)

    return unique_codes


def match_codes(codes: List[str], records: pd.DataFrame, column: str) -> Dict[str, Any]:
    """
    Validate parsed codes against available records (case-insensitive)

    Returns dict with matched codes (as spelled in the data), unmatched codes
    and match rate
    """
    available = {}
    if records is not None and not records.empty and column in records.columns:
        for value in records[column]:
            if _is_missing(value):
                continue
            available.setdefault(_normalize(value).upper(), _normalize(value))

    matched_codes = []
    unmatched_codes = []
    for code in codes:
        original = available.get(code.strip().upper())
        if original is not None:
            matched_codes.append(original)
        else:
            unmatched_codes.append(code)

    match_rate = (len(matched_codes) / len(codes) * 100) if codes else 0

    return {
        'matched_codes': matched_codes,
        'unmatched_codes': unmatched_codes,
        'match_rate': match_rate
    }
