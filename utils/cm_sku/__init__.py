# utils/cm_sku/__init__.py

"""
3PM SKU/Component Module
Filter, classify and compose SKU components across reporting periods

Version: 1.0.0

Features:
- Current period resolution from "July YYYY to June YYYY" labels
- Multi-criteria filtering (OR within, AND across dimensions)
- Packaging / Raw Material component tabs per SKU
- Copy components from a reference SKU with selective opt-out
- Stable natural-order pagination
- Add 3PM and Edit Component dialogs
"""

from .constants import (
    VERSION,
    MATERIAL_TYPES,
    SIGNOFF_STATUS_CONFIG,
    COMPONENT_FIELDS,
    UI_CONFIG,
    FIELD_TOOLTIPS,
    CACHE_TTL
)

from .models import (
    CmPortalError,
    ApiError,
    ReferenceLookupError,
    Period,
    FilterCriteria,
    ComponentCandidate,
    CompositionTarget,
    ReferenceResolution,
    MasterData,
    AuditLogPage
)

from .periods import (
    normalize_periods,
    period_label,
    parse_period_range,
    resolve_current_period,
    sort_periods_desc
)

from .filters import (
    CM_LISTING_DIMENSIONS,
    SKU_LISTING_DIMENSIONS,
    apply_filters,
    matches_criteria,
    count_active_filters,
    filter_options,
    parse_code_list,
    match_codes
)

from .classifier import (
    classify,
    bucket_counts,
    MaterialTypeSelection
)

from .composer import (
    ReferenceResolver,
    ReferenceRequestTracker,
    default_selection,
    toggle_selection,
    remove_candidate,
    materialize,
    is_self_reference,
    build_submission,
    reference_period
)

from .view import (
    sort_records,
    paginate,
    PageResult,
    PaginationState,
    summarize_signoff
)

from .validation import (
    ValidationResult,
    validate_sku_form,
    validate_new_cm,
    validate_component_validity
)

from .data_loader import (
    CmPortalDataLoader,
    get_data_loader
)

from .state import (
    CmSkuState,
    ToggleOutcome,
    apply_optimistic_toggle,
    reconcile_toggle,
    get_state
)

from .formatters import (
    CmSkuFormatter,
    get_formatter
)

from .components import (
    render_kpi_cards,
    render_cm_filters,
    render_sku_filters,
    show_quick_add_dialog,
    render_cm_table,
    render_pagination,
    render_component_tabs,
    render_candidate_selector,
    render_validation_messages
)

from .dialogs import (
    CM_ADDED_KEY,
    COMPONENT_UPDATED_KEY,
    show_add_cm_dialog,
    show_edit_component_dialog
)

from .charts import (
    CmSkuCharts,
    get_charts
)

__version__ = VERSION

__all__ = [
    # Version
    '__version__', 'VERSION',
    # Constants
    'MATERIAL_TYPES', 'SIGNOFF_STATUS_CONFIG', 'COMPONENT_FIELDS', 'UI_CONFIG', 'FIELD_TOOLTIPS',
    'CACHE_TTL',
    # Models
    'CmPortalError', 'ApiError', 'ReferenceLookupError', 'Period', 'FilterCriteria',
    'ComponentCandidate', 'CompositionTarget', 'ReferenceResolution', 'MasterData', 'AuditLogPage',
    # Periods
    'normalize_periods', 'period_label', 'parse_period_range', 'resolve_current_period',
    'sort_periods_desc',
    # Filters
    'CM_LISTING_DIMENSIONS', 'SKU_LISTING_DIMENSIONS', 'apply_filters', 'matches_criteria',
    'count_active_filters', 'filter_options', 'parse_code_list', 'match_codes',
    # Classifier
    'classify', 'bucket_counts', 'MaterialTypeSelection',
    # Composer
    'ReferenceResolver', 'ReferenceRequestTracker', 'default_selection', 'toggle_selection',
    'remove_candidate', 'materialize', 'is_self_reference', 'build_submission',
    'reference_period',
    # View
    'sort_records', 'paginate', 'PageResult', 'PaginationState', 'summarize_signoff',
    # Validation
    'ValidationResult', 'validate_sku_form', 'validate_new_cm', 'validate_component_validity',
    # Data
    'CmPortalDataLoader', 'get_data_loader',
    # State
    'CmSkuState', 'ToggleOutcome', 'apply_optimistic_toggle', 'reconcile_toggle', 'get_state',
    # Components
    'render_kpi_cards', 'render_cm_filters', 'render_sku_filters', 'show_quick_add_dialog',
    'render_cm_table', 'render_pagination', 'render_component_tabs', 'render_candidate_selector',
    'render_validation_messages',
    # Dialogs
    'CM_ADDED_KEY', 'COMPONENT_UPDATED_KEY', 'show_add_cm_dialog', 'show_edit_component_dialog',
    # UI
    'CmSkuFormatter', 'get_formatter', 'CmSkuCharts', 'get_charts'
]
