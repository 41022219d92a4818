# utils/cm_sku/state.py

"""
Session State Management for the 3PM portal

All keyed state (filters, pagination, per-SKU material tabs, reference
selections) lives in one caller-owned mapping: st.session_state in the
app, a plain dict in tests.
"""

import pandas as pd
import streamlit as st
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, MutableMapping, Optional, Tuple
import logging

from utils.config import config
from .classifier import MaterialTypeSelection
from .composer import ReferenceRequestTracker
from .models import FilterCriteria, Period
from .periods import resolve_current_period
from .view import PaginationState

logger = logging.getLogger(__name__)

LISTINGS = ('cm', 'sku')


def get_state() -> 'CmSkuState':
    """Get or create state manager"""
    if 'cm_sku_state' not in st.session_state:
        st.session_state.cm_sku_state = CmSkuState(st.session_state)
    return st.session_state.cm_sku_state


class CmSkuState:
    """Manages keyed state for the 3PM and SKU pages"""

    STATE_KEY = 'cm_sku_data'

    def __init__(self, store: Optional[MutableMapping[str, Any]] = None):
        self._store = store if store is not None else {}
        self._ensure_state()

    def _ensure_state(self):
        """Ensure state exists in store"""
        if self.STATE_KEY not in self._store:
            self._store[self.STATE_KEY] = {
                'filters': {listing: FilterCriteria() for listing in LISTINGS},
                'period_seeded': False,
                'material_tabs': {},
                'references': {},
                'pages': {},
                'last_loaded': None
            }

    @property
    def _data(self) -> Dict[str, Any]:
        return self._store[self.STATE_KEY]

    # =========================================================================
    # FILTER MANAGEMENT
    # =========================================================================

    def get_filters(self, listing: str = 'cm') -> FilterCriteria:
        """Get applied filter criteria for a listing"""
        return self._data['filters'].get(listing) or FilterCriteria()

    def set_filters(self, criteria: FilterCriteria, listing: str = 'cm'):
        """Apply new criteria; the listing goes back to page 1"""
        self._data['filters'][listing] = criteria
        self.pagination(listing).reset()
        active = {k: v for k, v in criteria.to_dict().items() if v}
        logger.info(f"Filters applied to {listing} listing: {active}")

    def reset_filters(self, listing: str = 'cm'):
        """Reset filters to default"""
        self.set_filters(FilterCriteria(), listing)

    def seed_default_period(self, periods, today: Optional[Any] = None) -> Optional[Period]:
        """
        Pre-select the current period on first load

        Only runs once per session and never overrides a period the user
        already chose.
        """
        if self._data['period_seeded']:
            return None

        current = resolve_current_period(periods, today)
        self._data['period_seeded'] = True
        if current is None:
            return None

        for listing in LISTINGS:
            criteria = self.get_filters(listing)
            if not criteria.periods:
                criteria.periods = [current.id_str]
        logger.info(f"Default period filter set to {current.label} (id {current.id})")
        return current

    # =========================================================================
    # PAGINATION MANAGEMENT
    # =========================================================================

    def pagination(self, listing: str = 'cm') -> PaginationState:
        return PaginationState(self._data['pages'], key_prefix=listing,
                               default_page_size=config.page_size)

    # =========================================================================
    # COMPONENT VIEW STATE
    # =========================================================================

    @property
    def material_tabs(self) -> MaterialTypeSelection:
        """Per-SKU material bucket selection"""
        return MaterialTypeSelection(self._data['material_tabs'])

    @property
    def references(self) -> ReferenceRequestTracker:
        """In-flight reference lookups and candidate selections per form"""
        return ReferenceRequestTracker(self._data['references'])

    # =========================================================================
    # DATA TIMESTAMP
    # =========================================================================

    def mark_loaded(self):
        self._data['last_loaded'] = datetime.now()

    def get_last_loaded(self) -> Optional[datetime]:
        return self._data.get('last_loaded')


# =============================================================================
# OPTIMISTIC TOGGLES
# =============================================================================

@dataclass
class ToggleOutcome:
    """Result of reconciling an optimistic active toggle"""
    status: str  # 'confirmed' | 'rolled_back'
    records: pd.DataFrame
    record_id: Any
    message: str = ''

    @property
    def confirmed(self) -> bool:
        return self.status == 'confirmed'


def _id_mask(records: pd.DataFrame, record_id: Any, id_column: str) -> pd.Series:
    return records[id_column].astype(str) == str(record_id)


def apply_optimistic_toggle(records: pd.DataFrame, record_id: Any,
                            id_column: str = 'id') -> Tuple[pd.DataFrame, bool]:
    """
    Flip is_active of one record in a copy of the listing

    Returns:
        (updated copy, previous is_active value)

    Raises:
        KeyError: record_id not in the listing
    """
    mask = _id_mask(records, record_id, id_column)
    if not mask.any():
        raise KeyError(f"Record {record_id} not found")

    previous = bool(records.loc[mask, 'is_active'].iloc[0])
    updated = records.copy()
    updated.loc[mask, 'is_active'] = not previous
    return updated, previous


def reconcile_toggle(records: pd.DataFrame, record_id: Any, previous: bool,
                     response: Optional[Dict[str, Any]] = None,
                     error: Optional[Exception] = None,
                     id_column: str = 'id') -> ToggleOutcome:
    """
    Confirm or roll back an optimistic toggle from the PATCH outcome

    A response with success true confirms; anything else restores the
    previous value.
    """
    if error is None and isinstance(response, dict) and response.get('success'):
        return ToggleOutcome('confirmed', records, record_id,
                             response.get('message') or 'Status updated')

    message = str(error) if error is not None else (
        (response or {}).get('message') or 'Failed to update status'
    )
    restored = records.copy()
    restored.loc[_id_mask(restored, record_id, id_column), 'is_active'] = previous
    logger.warning(f"Toggle of record {record_id} rolled back: {message}")
    return ToggleOutcome('rolled_back', restored, record_id, message)
