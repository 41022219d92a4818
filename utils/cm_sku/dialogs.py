# utils/cm_sku/dialogs.py

"""
Admin dialogs for the 3PM portal - Add 3PM and Edit Component
"""

import streamlit as st
from typing import Any, Dict, Iterable, List
import logging

from .constants import COMPONENT_ACTIONS, FIELD_TOOLTIPS, UI_CONFIG
from .data_loader import get_data_loader
from .models import ApiError, MasterData
from .periods import sort_periods_desc
from .validation import parse_date, validate_component_validity, validate_new_cm

logger = logging.getLogger(__name__)

# Session keys read by the pages after a dialog saved successfully
CM_ADDED_KEY = 'cm_added'
COMPONENT_UPDATED_KEY = 'component_updated'


def _show_result(response: Dict[str, Any], fallback: str) -> bool:
    if response.get('success'):
        return True
    st.error(f"❌ {response.get('message') or fallback}")
    return False


# =============================================================================
# ADD 3PM
# =============================================================================

@st.dialog("➕ Add 3PM", width="large")
def show_add_cm_dialog(master: MasterData, existing_cm_codes: Iterable[Any]):
    """New 3PM with SRM contact and up to N SPOCs (at most one signatory)"""
    period_options = {p.id_str: p.label for p in sort_periods_desc(master.periods)}

    col1, col2 = st.columns(2)
    with col1:
        cm_code = st.text_input("3PM Code", key="add_cm_code", help=FIELD_TOOLTIPS.get('cm_code'))
        cm_description = st.text_input("3PM Description", key="add_cm_description")
        period = st.selectbox("Period", options=list(period_options.keys()),
                              format_func=lambda pid: period_options.get(pid, pid), key="add_cm_period")
    with col2:
        region = st.selectbox("Region", options=[''] + list(master.regions), key="add_cm_region")
        srm_name = st.text_input("SRM Name", key="add_cm_srm_name")
        srm_email = st.text_input("SRM Email", key="add_cm_srm_email")

    st.markdown("**SPOCs**")
    spoc_count = st.number_input("Number of SPOCs", min_value=1, max_value=UI_CONFIG['max_spocs'],
                                 value=1, step=1, key="add_cm_spoc_count")
    spocs: List[Dict[str, Any]] = []
    for index in range(int(spoc_count)):
        cols = st.columns([3, 3, 1])
        with cols[0]:
            name = st.text_input("Name", key=f"add_cm_spoc_{index}_name")
        with cols[1]:
            email = st.text_input("Email", key=f"add_cm_spoc_{index}_email")
        with cols[2]:
            is_signatory = st.checkbox("Signatory", key=f"add_cm_spoc_{index}_signatory")
        spocs.append({'name': name, 'email': email, 'is_signatory': is_signatory})

    if not st.button("💾 Save 3PM", type="primary", use_container_width=True):
        return

    form = {
        'cm_code': cm_code,
        'cm_description': cm_description,
        'period': period,
        'region': region,
        'srm_name': srm_name,
        'srm_email': srm_email,
        'spocs': spocs
    }
    validation = validate_new_cm(form, existing_cm_codes)
    if validation.is_blocking:
        for message in validation.errors.values():
            st.error(f"❌ {message}")
        return

    try:
        response = get_data_loader().add_cm(form)
    except ApiError as e:
        logger.error(f"Add 3PM failed: {e}", exc_info=True)
        st.error(f"❌ {e}")
        return

    if _show_result(response, 'Failed to add 3PM code'):
        st.session_state[CM_ADDED_KEY] = cm_code.strip()
        st.rerun()


# =============================================================================
# EDIT COMPONENT
# =============================================================================

@st.dialog("✏️ Edit Component", width="large")
def show_edit_component_dialog(component: Dict[str, Any]):
    """Edit description, quantity and validity window of one SKU component"""
    mapping_id = component.get('mapping_id') or component.get('id')
    key = f"edit_component_{mapping_id}"

    st.caption(f"{component.get('component_code') or '-'} (mapping {mapping_id})")

    action = st.radio("Action", options=COMPONENT_ACTIONS, horizontal=True, key=f"{key}_action")
    description = st.text_input("Description", value=str(component.get('component_description') or ''),
                                key=f"{key}_description")
    quantity = st.text_input("Quantity", value=str(component.get('component_quantity') or ''),
                             key=f"{key}_quantity")

    col1, col2 = st.columns(2)
    with col1:
        valid_from = st.date_input("Valid From", value=parse_date(component.get('component_valid_from')),
                                   key=f"{key}_valid_from")
    with col2:
        valid_to = st.date_input("Valid To", value=parse_date(component.get('component_valid_to')),
                                 key=f"{key}_valid_to")

    if not st.button("💾 Save Component", type="primary", use_container_width=True):
        return

    fields = dict(component)
    fields.update({
        'component_description': description.strip(),
        'component_quantity': quantity.strip(),
        'component_valid_from': valid_from.isoformat() if valid_from else None,
        'component_valid_to': valid_to.isoformat() if valid_to else None
    })

    validation = validate_component_validity(fields)
    if validation.is_blocking:
        for message in validation.errors.values():
            st.error(f"❌ {message}")
        return

    try:
        response = get_data_loader().update_component(mapping_id, fields, action=action)
    except ApiError as e:
        logger.error(f"Component update failed for {mapping_id}: {e}", exc_info=True)
        st.error(f"❌ {e}")
        return

    if _show_result(response, 'Failed to update component'):
        st.session_state[COMPONENT_UPDATED_KEY] = component.get('component_code') or mapping_id
        st.rerun()
