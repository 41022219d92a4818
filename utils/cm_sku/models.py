# utils/cm_sku/models.py

"""
Data containers for the 3PM SKU/Component portal
Periods, filter criteria, reference candidates and lookup results
"""

import copy
import pandas as pd
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional


# =============================================================================
# EXCEPTIONS
# =============================================================================

class CmPortalError(Exception):
    """Base exception for portal errors"""
    pass


class ApiError(CmPortalError):
    """Exception for transport failures or unsuccessful API responses"""

    def __init__(self, message: str, status_code: Optional[int] = None, endpoint: str = ''):
        super().__init__(message)
        self.status_code = status_code
        self.endpoint = endpoint


class ReferenceLookupError(CmPortalError):
    """Raised when every reference lookup strategy failed"""

    def __init__(self, cm_code: str, sku_code: str, reasons: Dict[str, str]):
        self.cm_code = cm_code
        self.sku_code = sku_code
        self.reasons = reasons
        detail = '; '.join(f"{name}: {reason}" for name, reason in reasons.items())
        super().__init__(f"Could not resolve reference SKU {sku_code} ({cm_code}): {detail}")


# =============================================================================
# PERIODS
# =============================================================================

@dataclass(frozen=True)
class Period:
    """Reporting period, e.g. id=2, label='July 2025 to June 2026'"""
    id: int
    label: str
    is_active: bool = False

    @property
    def id_str(self) -> str:
        return str(self.id)


# =============================================================================
# FILTER CRITERIA
# =============================================================================

@dataclass
class FilterCriteria:
    """
    Selected values per filter dimension.
    An empty list means "no constraint" for that dimension.
    """
    cm_codes: List[str] = field(default_factory=list)
    signoff_statuses: List[str] = field(default_factory=list)
    periods: List[str] = field(default_factory=list)
    regions: List[str] = field(default_factory=list)
    srm_leads: List[str] = field(default_factory=list)
    sku_descriptions: List[str] = field(default_factory=list)
    component_codes: List[str] = field(default_factory=list)

    def __post_init__(self):
        # A single selected value (e.g. period="2") is treated as a one-item selection
        for name in self.dimension_names():
            value = getattr(self, name)
            if value is None:
                setattr(self, name, [])
            elif isinstance(value, (str, int)):
                setattr(self, name, [value])
            else:
                setattr(self, name, list(value))

    @classmethod
    def dimension_names(cls) -> List[str]:
        return [
            'cm_codes', 'signoff_statuses', 'periods', 'regions',
            'srm_leads', 'sku_descriptions', 'component_codes'
        ]

    def get(self, dimension: str) -> List[Any]:
        return getattr(self, dimension, [])

    def is_empty(self) -> bool:
        return all(len(self.get(name)) == 0 for name in self.dimension_names())

    def to_dict(self) -> Dict[str, List[Any]]:
        return {name: list(self.get(name)) for name in self.dimension_names()}


# =============================================================================
# REFERENCE COMPOSITION
# =============================================================================

@dataclass(frozen=True)
class ComponentCandidate:
    """A component of a reference SKU offered for cloning"""
    key: str
    fields: Dict[str, Any]
    source_cm_code: str = ''
    source_sku_code: str = ''

    @property
    def component_code(self) -> str:
        return str(self.fields.get('component_code') or '')

    @property
    def material_type_id(self) -> Any:
        return self.fields.get('material_type_id')

    def to_record(self) -> Dict[str, Any]:
        """Independent copy of the candidate's fields"""
        return copy.deepcopy(dict(self.fields))


@dataclass(frozen=True)
class CompositionTarget:
    """SKU the materialized components are bound to"""
    cm_code: str
    sku_code: str
    periods: Optional[str] = None

    def as_overrides(self) -> Dict[str, Any]:
        overrides = {'cm_code': self.cm_code, 'sku_code': self.sku_code}
        if self.periods is not None:
            overrides['periods'] = str(self.periods)
        return overrides


@dataclass
class ReferenceResolution:
    """Outcome of resolving a reference SKU into candidates"""
    cm_code: str
    sku_code: str
    candidates: List[ComponentCandidate] = field(default_factory=list)
    strategy: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return len(self.candidates) == 0

    @property
    def keys(self) -> List[str]:
        return [candidate.key for candidate in self.candidates]


# =============================================================================
# MASTER DATA & AUDIT LOG
# =============================================================================

@dataclass
class MasterData:
    """Reference lists from /get-masterdata (with fallbacks applied)"""
    periods: List[Period] = field(default_factory=list)
    regions: List[str] = field(default_factory=list)
    srm_leads: List[str] = field(default_factory=list)
    signoff_statuses: List[str] = field(default_factory=list)
    material_types: List[Dict[str, Any]] = field(default_factory=list)
    component_uoms: List[Dict[str, Any]] = field(default_factory=list)
    fallbacks_used: List[str] = field(default_factory=list)


@dataclass
class AuditLogPage:
    """One server-side page of audit log entries"""
    entries: pd.DataFrame
    total_items: int = 0
    total_pages: int = 0
    page: int = 1
