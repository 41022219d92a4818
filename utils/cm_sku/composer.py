# utils/cm_sku/composer.py

"""
Reference SKU resolution and component composition

Two phases:
    1. resolve  - fetch a reference SKU's components (network, may fail)
    2. materialize - bind the selected candidates to the target SKU (pure)

Lookup strategies are an ordered list tried until one returns components.
"""

import copy
import itertools
import pandas as pd
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, MutableMapping, Optional, Set, Union
import logging

from .constants import COMPONENT_FIELDS
from .models import (
    ApiError,
    ComponentCandidate,
    CompositionTarget,
    ReferenceLookupError,
    ReferenceResolution
)

logger = logging.getLogger(__name__)


# =============================================================================
# LOOKUP STRATEGIES
# =============================================================================

@dataclass(frozen=True)
class LookupStrategy:
    """One way of fetching a reference SKU's components"""
    name: str
    fetch: Callable[..., List[Dict[str, Any]]]
    needs_period: bool = False


def _fetch_all_periods(loader, cm_code: str, sku_code: str, period: Any = None) -> List[Dict[str, Any]]:
    return loader.fetch_reference_components(cm_code, sku_code)


def _fetch_single_period(loader, cm_code: str, sku_code: str, period: Any = None) -> List[Dict[str, Any]]:
    rows = loader.fetch_period_components(cm_code, period)
    wanted = sku_code.strip().upper()
    return [
        row for row in rows
        if str(row.get('sku_code') or '').strip().upper() == wanted
        and str(row.get('component_code') or '').strip() not in ('', '-')
    ]


DEFAULT_STRATEGIES: List[LookupStrategy] = [
    LookupStrategy('sku_component_details', _fetch_all_periods),
    LookupStrategy('period_component_details', _fetch_single_period, needs_period=True),
]


# =============================================================================
# CANDIDATES
# =============================================================================

def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ''
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def build_candidates(rows: Iterable[Dict[str, Any]], cm_code: str = '', sku_code: str = '') -> List[ComponentCandidate]:
    """
    Wrap component rows as selectable candidates

    Key is the component id; rows without one use "<component_code>#<index>".
    A repeated id gets the row index appended so keys stay unique.
    """
    candidates = []
    seen: Set[str] = set()

    for index, row in enumerate(rows):
        fields = {name: None for name in COMPONENT_FIELDS}
        fields.update(copy.deepcopy(dict(row)))

        component_id = fields.get('component_id')
        if _is_blank(component_id):
            key = f"{fields.get('component_code') or 'component'}#{index}"
        else:
            key = str(component_id).strip()
            if key in seen:
                key = f"{key}#{index}"
        seen.add(key)

        candidates.append(ComponentCandidate(
            key=key,
            fields=fields,
            source_cm_code=cm_code,
            source_sku_code=sku_code
        ))

    return candidates


def reference_period(skus: Any, sku_code: Any) -> Optional[str]:
    """
    Period of a reference SKU in a SKU listing

    The period-scoped fallback lookup must search the reference's own
    period, not the period of the SKU being created.
    """
    if _is_blank(sku_code) or skus is None:
        return None
    rows = skus.to_dict('records') if isinstance(skus, pd.DataFrame) else list(skus)
    wanted = str(sku_code).strip().lower()
    for row in rows:
        if str(row.get('sku_code') or '').strip().lower() != wanted:
            continue
        period = row.get('period')
        if _is_blank(period):
            return None
        if isinstance(period, float) and period.is_integer():
            period = int(period)
        return str(period).strip()
    return None


class ReferenceResolver:
    """Resolves a reference SKU into component candidates"""

    def __init__(self, loader, strategies: Optional[List[LookupStrategy]] = None):
        self.loader = loader
        self.strategies = list(strategies) if strategies is not None else list(DEFAULT_STRATEGIES)

    def resolve(self, cm_code: str, sku_code: str, period: Any = None) -> ReferenceResolution:
        """
        Fetch the components of (cm_code, sku_code)

        Returns:
            ReferenceResolution; is_empty when the reference has no components

        Raises:
            ReferenceLookupError: every strategy failed
        """
        cm_code = (cm_code or '').strip()
        sku_code = (sku_code or '').strip()
        reasons: Dict[str, str] = {}
        empty_strategy = None

        for strategy in self.strategies:
            if strategy.needs_period and _is_blank(period):
                reasons[strategy.name] = 'skipped (no period)'
                continue
            try:
                rows = strategy.fetch(self.loader, cm_code, sku_code, period)
            except ApiError as e:
                logger.warning(f"Reference lookup '{strategy.name}' failed for {sku_code}: {e}")
                reasons[strategy.name] = str(e)
                continue

            if not isinstance(rows, list):
                reasons[strategy.name] = 'malformed result'
                continue

            if rows:
                logger.info(f"Reference {sku_code} ({cm_code}) resolved via '{strategy.name}': "
                            f"{len(rows)} components")
                return ReferenceResolution(
                    cm_code=cm_code,
                    sku_code=sku_code,
                    candidates=build_candidates(rows, cm_code, sku_code),
                    strategy=strategy.name
                )

            if empty_strategy is None:
                empty_strategy = strategy.name
            reasons[strategy.name] = 'no components'

        if empty_strategy is not None:
            logger.info(f"Reference {sku_code} ({cm_code}) has no components")
            return ReferenceResolution(cm_code=cm_code, sku_code=sku_code, strategy=empty_strategy)

        raise ReferenceLookupError(cm_code, sku_code, reasons)


# =============================================================================
# SELECTION
# =============================================================================

def default_selection(candidates: Iterable[ComponentCandidate]) -> Set[str]:
    """Every candidate starts selected; users uncheck what they do not want"""
    return {candidate.key for candidate in candidates}


def toggle_selection(selected: Iterable[str], key: str) -> Set[str]:
    """New selection with key flipped"""
    updated = set(selected)
    if key in updated:
        updated.discard(key)
    else:
        updated.add(key)
    return updated


def remove_candidate(candidates: Iterable[ComponentCandidate], key: str) -> List[ComponentCandidate]:
    """Drop a candidate row before save (client-local only)"""
    return [candidate for candidate in candidates if candidate.key != key]


# =============================================================================
# MATERIALIZATION
# =============================================================================

def materialize(
    candidates: Iterable[ComponentCandidate],
    selected_ids: Iterable[str],
    overrides: Union[CompositionTarget, Mapping[str, Any], None] = None
) -> List[Dict[str, Any]]:
    """
    Build component records for submission

    Args:
        candidates: Resolved reference candidates
        selected_ids: Keys of the candidates to keep
        overrides: Target SKU (or field mapping) written over each record

    Returns:
        New records for the selected candidates, in candidate order. Fields
        not overridden are copied verbatim.
    """
    if isinstance(overrides, CompositionTarget):
        override_fields = overrides.as_overrides()
    else:
        override_fields = dict(overrides or {})

    selected = set(selected_ids)
    records = []
    for candidate in candidates:
        if candidate.key not in selected:
            continue
        record = candidate.to_record()
        record.update(copy.deepcopy(override_fields))
        records.append(record)

    return records


def is_self_reference(reference_sku: Any, sku_code: Any) -> bool:
    """True when a SKU names itself as reference (case-insensitive)"""
    if _is_blank(reference_sku) or _is_blank(sku_code):
        return False
    return str(reference_sku).strip().lower() == str(sku_code).strip().lower()


def build_submission(sku_data: Dict[str, Any], components: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Payload for the SKU create/update endpoint"""
    return {
        'sku_data': dict(sku_data),
        'components': [dict(component) for component in components]
    }


# =============================================================================
# IN-FLIGHT REQUESTS
# =============================================================================

class ReferenceRequestTracker:
    """
    Last-write-wins bookkeeping for reference lookups per form

    Each lookup gets a token; only the result of the latest token is kept.
    """

    _counter = itertools.count(1)

    def __init__(self, store: Optional[MutableMapping[str, Any]] = None):
        self._store = store if store is not None else {}

    def begin(self, form_key: str) -> int:
        token = next(self._counter)
        self._store[f'{form_key}_token'] = token
        return token

    def token(self, form_key: str) -> Optional[int]:
        """Token of the latest lookup for a form"""
        return self._store.get(f'{form_key}_token')

    def widget_key(self, form_key: str, candidate_key: str) -> str:
        """Checkbox key scoped to the latest lookup so a new reference starts fresh"""
        return f"{form_key}_cand_{self.token(form_key)}_{candidate_key}"

    def is_current(self, form_key: str, token: int) -> bool:
        return self._store.get(f'{form_key}_token') == token

    def accept(self, form_key: str, token: int, resolution: ReferenceResolution) -> bool:
        """Store resolution if token is still the latest; stale results are dropped"""
        if not self.is_current(form_key, token):
            logger.info(f"Discarding stale reference result for {form_key} "
                        f"({resolution.sku_code}, token {token})")
            return False
        self._store[f'{form_key}_resolution'] = resolution
        self._store[f'{form_key}_selection'] = default_selection(resolution.candidates)
        return True

    def resolution(self, form_key: str) -> Optional[ReferenceResolution]:
        return self._store.get(f'{form_key}_resolution')

    def selection(self, form_key: str) -> Set[str]:
        return set(self._store.get(f'{form_key}_selection', set()))

    def set_selection(self, form_key: str, selected: Iterable[str]):
        self._store[f'{form_key}_selection'] = set(selected)

    def clear(self, form_key: str):
        for suffix in ('token', 'resolution', 'selection'):
            self._store.pop(f'{form_key}_{suffix}', None)
