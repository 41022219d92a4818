# utils/cm_sku/constants.py

"""
Constants for the 3PM SKU/Component portal
Fallback master data, material types, component fields and UI configuration
"""

VERSION = "1.0.0"

# =============================================================================
# MATERIAL TYPES
# =============================================================================
MATERIAL_TYPES = {
    'packaging': {
        'type_id': 1,
        'label': 'Packaging',
        'icon': '📦'
    },
    'raw_material': {
        'type_id': 2,
        'label': 'Raw Material',
        'icon': '🧪'
    },
    'all': {
        'type_id': None,
        'label': 'All',
        'icon': '📋'
    }
}

DEFAULT_MATERIAL_BUCKET = 'packaging'

# =============================================================================
# SIGNOFF STATUSES
# =============================================================================
SIGNOFF_STATUS_CONFIG = {
    'signed': {
        'label': 'Signed',
        'icon': '✅',
        'color': '#10B981'
    },
    'pending': {
        'label': 'Pending',
        'icon': '⏳',
        'color': '#EAB308'
    },
    'rejected': {
        'label': 'Rejected',
        'icon': '❌',
        'color': '#DC2626'
    },
    'absent': {
        'label': 'No Signoff',
        'icon': '⚪',
        'color': '#9CA3AF'
    }
}

# =============================================================================
# FALLBACK MASTER DATA (used when /get-masterdata omits a sub-list)
# =============================================================================
FALLBACK_PERIODS = [
    {'id': 3, 'period': 'July 2026 to June 2027'},
    {'id': 2, 'period': 'July 2025 to June 2026'},
    {'id': 1, 'period': 'July 2024 to June 2025'}
]

FALLBACK_REGIONS = [
    'ANZ', 'CHINA', 'EU', 'ISC', 'Latam', 'MEA', 'NA', 'North Asia', 'SEAT'
]

FALLBACK_SRM_LEADS = []

FALLBACK_SIGNOFF_STATUSES = ['signed', 'pending', 'rejected']

FALLBACK_MATERIAL_TYPES = [
    {'id': 1, 'item_name': 'Packaging'},
    {'id': 2, 'item_name': 'Raw Material'}
]

FALLBACK_COMPONENT_UOMS = [
    {'id': 1, 'item_name': 'PCS'},
    {'id': 2, 'item_name': 'KG'},
    {'id': 3, 'item_name': 'G'},
    {'id': 4, 'item_name': 'L'},
    {'id': 5, 'item_name': 'ML'}
]

# =============================================================================
# COMPONENT FIELDS
# =============================================================================
# Fields carried on every component candidate and copied verbatim on composition
COMPONENT_FIELDS = [
    'component_id',
    'component_code',
    'component_description',
    'material_type_id',
    'component_material_group',
    'component_quantity',
    'component_uom_id',
    'component_base_quantity',
    'component_base_uom_id',
    'percent_w_w',
    'component_packaging_type_id',
    'component_packaging_material',
    'component_unit_weight',
    'weight_unit_measure_id',
    'percent_mechanical_pcr_content',
    'percent_mechanical_pir_content',
    'percent_chemical_recycled_content',
    'percent_bio_sourced_content',
    'material_structure_multimaterials',
    'component_packaging_color_opacity',
    'component_packaging_level_id',
    'component_dimensions',
    'component_valid_from',
    'component_valid_to',
    'ch_pack',
    'kpis_evidence_mapping',
    'evidence_file_path',
    'is_active'
]

# Form field names of the component update endpoint
COMPONENT_FORM_FIELDS = {
    'material_type_id': 'componentType',
    'component_code': 'componentCode',
    'component_description': 'componentDescription',
    'component_material_group': 'componentCategory',
    'component_quantity': 'componentQuantity',
    'component_uom_id': 'componentUnitOfMeasure',
    'component_base_quantity': 'componentBaseQuantity',
    'component_base_uom_id': 'componentBaseUnitOfMeasure',
    'percent_w_w': 'wW',
    'component_packaging_type_id': 'componentPackagingType',
    'component_packaging_material': 'componentPackagingMaterial',
    'component_unit_weight': 'componentUnitWeight',
    'weight_unit_measure_id': 'componentWeightUnitOfMeasure',
    'percent_mechanical_pcr_content': 'percentPostConsumer',
    'percent_mechanical_pir_content': 'percentPostIndustrial',
    'percent_chemical_recycled_content': 'percentChemical',
    'percent_bio_sourced_content': 'percentBioSourced',
    'material_structure_multimaterials': 'materialStructure',
    'component_packaging_color_opacity': 'packagingColour',
    'component_packaging_level_id': 'packagingLevel',
    'component_dimensions': 'componentDimensions',
    'component_valid_from': 'validityFrom',
    'component_valid_to': 'validityTo',
    'ch_pack': 'chPack',
    'kpis_evidence_mapping': 'kpisEvidenceMapping'
}

COMPONENT_ACTIONS = ['UPDATE', 'REPLACE']

# =============================================================================
# FIELD TOOLTIPS
# =============================================================================
FIELD_TOOLTIPS = {
    'cm_code': '3PM (third-party manufacturer) code',
    'periods': 'Reporting periods the 3PM is active in',
    'signoff_status': 'Approval state of the 3PM for the period',
    'sku_reference': 'Existing SKU whose components seed this SKU',
    'material_type_id': '1 = Packaging, 2 = Raw Material',
    'percent_mechanical_pcr_content': 'Mechanical post-consumer recycled content %',
    'percent_mechanical_pir_content': 'Mechanical post-industrial recycled content %',
    'percent_chemical_recycled_content': 'Chemically recycled content %',
    'percent_bio_sourced_content': 'Bio-sourced content %'
}

# =============================================================================
# UI CONFIGURATION
# =============================================================================
UI_CONFIG = {
    'items_per_page_options': [10, 25, 50, 100],
    'default_items_per_page': 10,
    'chart_height': 300,
    'max_quick_add_preview': 30,
    'max_spocs': 5
}

# Cache TTL in seconds
CACHE_TTL = {
    'reference': 3600,  # master data
    'data': 300         # listings
}
