# utils/cm_sku/classifier.py

"""
Material-type classification of SKU components
Packaging (1) / Raw Material (2) buckets with a per-SKU tab selection
"""

import numpy as np
import pandas as pd
from typing import Dict, MutableMapping, Optional
import logging

from .constants import MATERIAL_TYPES, DEFAULT_MATERIAL_BUCKET

logger = logging.getLogger(__name__)

BUCKETS = tuple(MATERIAL_TYPES.keys())


def material_type_codes(components: pd.DataFrame) -> pd.Series:
    """Numeric material_type_id per row (NaN when absent or non-numeric)"""
    if 'material_type_id' not in components.columns:
        return pd.Series(np.nan, index=components.index)
    return pd.to_numeric(components['material_type_id'], errors='coerce')


def classify(components: pd.DataFrame, bucket: str) -> pd.DataFrame:
    """
    Select the components belonging to a material-type bucket

    Args:
        components: Component rows of one SKU
        bucket: 'packaging', 'raw_material' or 'all'

    Returns:
        Matching rows in input order; 'all' returns every row
    """
    if bucket not in MATERIAL_TYPES:
        raise ValueError(f"Unknown material bucket: {bucket!r} (expected one of {', '.join(BUCKETS)})")

    if components is None or components.empty:
        return components if components is not None else pd.DataFrame()

    if bucket == 'all':
        return components

    type_id = MATERIAL_TYPES[bucket]['type_id']
    return components[material_type_codes(components) == type_id]


def bucket_counts(components: pd.DataFrame) -> Dict[str, int]:
    """Row count per bucket, for tab labels"""
    if components is None or components.empty:
        return {bucket: 0 for bucket in BUCKETS}
    return {bucket: len(classify(components, bucket)) for bucket in BUCKETS}


class MaterialTypeSelection:
    """
    Active material bucket per SKU code

    Backed by a caller-owned mapping so several expanded SKU panels keep
    independent tabs.
    """

    def __init__(self, store: Optional[MutableMapping[str, str]] = None,
                 default: str = DEFAULT_MATERIAL_BUCKET):
        if default not in MATERIAL_TYPES:
            raise ValueError(f"Unknown material bucket: {default!r}")
        self._store = store if store is not None else {}
        self.default = default

    def get(self, sku_code: str) -> str:
        return self._store.get(sku_code, self.default)

    def set(self, sku_code: str, bucket: str):
        if bucket not in MATERIAL_TYPES:
            raise ValueError(f"Unknown material bucket: {bucket!r}")
        self._store[sku_code] = bucket
        logger.debug(f"Material bucket for {sku_code} set to {bucket}")

    def clear(self, sku_code: Optional[str] = None):
        if sku_code is None:
            self._store.clear()
        else:
            self._store.pop(sku_code, None)

    def visible_components(self, sku_code: str, components: pd.DataFrame) -> pd.DataFrame:
        """Components of a SKU filtered by its selected bucket"""
        return classify(components, self.get(sku_code))
