# utils/cm_sku/view.py

"""
Derived view layer - stable sorting, pagination and listing summaries
"""

import math
import re
import numpy as np
import pandas as pd
from dataclasses import dataclass
from typing import Any, Dict, List, MutableMapping, Optional, Tuple
import logging

from .constants import SIGNOFF_STATUS_CONFIG, UI_CONFIG

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r'(\d+)')


def natural_key(value: Any) -> Tuple:
    """
    Case-insensitive natural sort key ("CM2" < "CM10")

    Text and number chunks are tagged so keys always compare
    """
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ((2, 0, ''),)
    parts = []
    for chunk in _DIGITS.split(str(value).strip()):
        if not chunk:
            continue
        if chunk.isdigit():
            parts.append((0, int(chunk), chunk))
        else:
            parts.append((1, 0, chunk.lower()))
    return tuple(parts)


def _numeric_id(value: Any) -> float:
    if value is None:
        return np.inf
    number = pd.to_numeric(value, errors='coerce')
    if pd.isna(number):
        return np.inf
    return float(number)


def sort_records(records: pd.DataFrame, code_column: str = 'cm_code',
                 id_column: str = 'id') -> pd.DataFrame:
    """
    Sort by natural code order, then numeric id ascending

    Gives a total, stable order even when codes collide
    """
    if records is None or records.empty:
        return records if records is not None else pd.DataFrame()

    codes = records[code_column] if code_column in records.columns else pd.Series(None, index=records.index)
    ids = records[id_column] if id_column in records.columns else pd.Series(None, index=records.index)

    keys = [
        (natural_key(code), _numeric_id(rid), position)
        for position, (code, rid) in enumerate(zip(codes, ids))
    ]
    order = [k[2] for k in sorted(keys)]
    return records.iloc[order]


@dataclass
class PageResult:
    """One page of a sorted listing"""
    rows: pd.DataFrame
    page: int
    page_size: int
    total_pages: int
    total_records: int

    @property
    def is_empty(self) -> bool:
        """True when the listing has no records at all ("no data" state)"""
        return self.total_records == 0

    @property
    def start_index(self) -> int:
        return (self.page - 1) * self.page_size

    def range_label(self) -> str:
        if self.is_empty or self.rows.empty:
            return "0 records"
        start = self.start_index + 1
        end = self.start_index + len(self.rows)
        return f"{start}-{end} of {self.total_records}"


def total_pages_for(total_records: int, page_size: int) -> int:
    if page_size <= 0:
        raise ValueError(f"Page size must be positive, got {page_size}")
    return math.ceil(total_records / page_size) if total_records > 0 else 0


def paginate(records: pd.DataFrame, page: int, page_size: int,
             code_column: str = 'cm_code', id_column: str = 'id') -> PageResult:
    """
    Sort then slice a listing into a 1-indexed page

    Pages beyond the last return an empty slice
    """
    if records is None:
        records = pd.DataFrame()

    total_records = len(records)
    total_pages = total_pages_for(total_records, page_size)

    ordered = sort_records(records, code_column, id_column)

    if page < 1 or page > total_pages:
        rows = ordered.iloc[0:0]
    else:
        start = (page - 1) * page_size
        rows = ordered.iloc[start:start + page_size]

    return PageResult(
        rows=rows,
        page=page,
        page_size=page_size,
        total_pages=total_pages,
        total_records=total_records
    )


class PaginationState:
    """Current page and page size for one listing, kept in a caller-owned mapping"""

    def __init__(self, store: Optional[MutableMapping[str, Any]] = None, key_prefix: str = 'listing',
                 default_page_size: int = UI_CONFIG['default_items_per_page']):
        self._store = store if store is not None else {}
        self._page_key = f'{key_prefix}_page'
        self._size_key = f'{key_prefix}_page_size'
        if self._page_key not in self._store:
            self._store[self._page_key] = 1
        if self._size_key not in self._store:
            self._store[self._size_key] = default_page_size

    @property
    def page(self) -> int:
        return self._store.get(self._page_key, 1)

    @property
    def page_size(self) -> int:
        return self._store.get(self._size_key, UI_CONFIG['default_items_per_page'])

    def set_page(self, page: int, total_pages: int):
        """Set page with validation"""
        self._store[self._page_key] = max(1, min(page, max(total_pages, 1)))

    def set_page_size(self, page_size: int):
        """Change page size; the previous page no longer applies"""
        if page_size <= 0:
            raise ValueError(f"Page size must be positive, got {page_size}")
        if page_size != self.page_size:
            logger.info(f"Page size changed {self.page_size} -> {page_size}, back to page 1")
        self._store[self._size_key] = page_size
        self._store[self._page_key] = 1

    def reset(self):
        self._store[self._page_key] = 1


def summarize_signoff(records: pd.DataFrame) -> Dict[str, Dict[str, Any]]:
    """
    Count records per signoff status

    Missing/unknown statuses are counted as 'absent'
    """
    counts = {status: 0 for status in SIGNOFF_STATUS_CONFIG}
    if records is not None and not records.empty and 'signoff_status' in records.columns:
        for value in records['signoff_status']:
            status = str(value).strip().lower() if isinstance(value, str) else None
            if status in counts and status != 'absent':
                counts[status] += 1
            else:
                counts['absent'] += 1

    total = sum(counts.values())
    return {
        status: {
            'count': count,
            'pct': (count / total * 100) if total else 0.0,
            'label': SIGNOFF_STATUS_CONFIG[status]['label'],
            'icon': SIGNOFF_STATUS_CONFIG[status]['icon']
        }
        for status, count in counts.items()
    }
