# utils/cm_sku/components.py

"""
UI Components for the 3PM portal
KPI cards, filter panels, tables, material tabs and reference selection
"""

import streamlit as st
import pandas as pd
from typing import Any, Dict, List, Optional
import logging

from .classifier import MaterialTypeSelection, bucket_counts
from .composer import ReferenceRequestTracker, toggle_selection
from .constants import MATERIAL_TYPES, SIGNOFF_STATUS_CONFIG, UI_CONFIG, FIELD_TOOLTIPS
from .filters import filter_options, match_codes, parse_code_list
from .formatters import get_formatter
from .models import FilterCriteria, MasterData
from .periods import sort_periods_desc
from .view import PageResult, PaginationState, summarize_signoff

logger = logging.getLogger(__name__)


# =============================================================================
# KPI CARDS
# =============================================================================

def render_kpi_cards(records: pd.DataFrame):
    """Total 3PMs plus one card per signoff status"""
    summary = summarize_signoff(records)
    total = 0 if records is None else len(records)

    cols = st.columns(len(summary) + 1)
    with cols[0]:
        _kpi_card("Total 3PMs", total, icon="🏭", color="#6B7280")

    for col, (status, item) in zip(cols[1:], summary.items()):
        with col:
            _kpi_card(
                f"{item['label']} ({item['pct']:.0f}%)",
                item['count'],
                icon=item['icon'],
                color=SIGNOFF_STATUS_CONFIG[status]['color']
            )


def _kpi_card(label: str, value: Any, icon: str = "📊", color: str = "#3B82F6"):
    """Render single KPI card"""
    st.markdown(f"""
    <div style="
        background: white;
        border-radius: 8px;
        padding: 12px 16px;
        border-left: 4px solid {color};
        box-shadow: 0 1px 3px rgba(0,0,0,0.1);
    ">
        <div style="font-size: 20px; margin-bottom: 4px;">{icon}</div>
        <div style="font-size: 24px; font-weight: 700; color: #1F2937;">{value}</div>
        <div style="font-size: 12px; color: #6B7280;">{label}</div>
    </div>
    """, unsafe_allow_html=True)


# =============================================================================
# FILTER PANELS
# =============================================================================

def _defaults(selected: List[Any], options: List[Any]) -> List[Any]:
    # multiselect rejects defaults that are not options
    allowed = set(options)
    return [value for value in selected if value in allowed]


def render_cm_filters(records: pd.DataFrame, master: MasterData, current: FilterCriteria,
                      key_prefix: str = "cm") -> Optional[FilterCriteria]:
    """
    3PM listing filter form

    Returns:
        New criteria when the user clicks Apply, otherwise None
    """
    period_options = {p.id_str: p.label for p in sort_periods_desc(master.periods)}

    with st.form(f"{key_prefix}_filter_form"):
        col1, col2, col3 = st.columns(3)
        with col1:
            code_options = filter_options(records, 'cm_code')
            cm_codes = st.multiselect(
                "3PM Code",
                options=code_options,
                default=_defaults(current.cm_codes, code_options),
                help=FIELD_TOOLTIPS.get('cm_code')
            )
            region_options = filter_options(records, 'region_name', fallback=master.regions)
            regions = st.multiselect(
                "Region",
                options=region_options,
                default=_defaults(current.regions, region_options)
            )
        with col2:
            periods = st.multiselect(
                "Period",
                options=list(period_options.keys()),
                default=[p for p in current.periods if p in period_options],
                format_func=lambda pid: period_options.get(pid, pid),
                help=FIELD_TOOLTIPS.get('periods')
            )
            srm_options = filter_options(records, 'srm_lead', fallback=master.srm_leads)
            srm_leads = st.multiselect(
                "SRM Lead",
                options=srm_options,
                default=_defaults(current.srm_leads, srm_options)
            )
        with col3:
            statuses = st.multiselect(
                "Signoff Status",
                options=master.signoff_statuses,
                default=[s for s in current.signoff_statuses if s in master.signoff_statuses],
                format_func=get_formatter().format_signoff,
                help=FIELD_TOOLTIPS.get('signoff_status')
            )

        col_apply, col_reset, _ = st.columns([1, 1, 4])
        with col_apply:
            applied = st.form_submit_button("🔍 Apply", type="primary", use_container_width=True)
        with col_reset:
            reset = st.form_submit_button("🔄 Reset", use_container_width=True)

    if reset:
        return FilterCriteria()
    if applied:
        return FilterCriteria(
            cm_codes=cm_codes,
            signoff_statuses=statuses,
            periods=periods,
            regions=regions,
            srm_leads=srm_leads
        )
    return None


def render_sku_filters(skus: pd.DataFrame, master: MasterData, current: FilterCriteria,
                       key_prefix: str = "sku") -> Optional[FilterCriteria]:
    """SKU listing filter form (period, description, component code)"""
    period_options = {p.id_str: p.label for p in sort_periods_desc(master.periods)}

    with st.form(f"{key_prefix}_filter_form"):
        col1, col2, col3 = st.columns(3)
        with col1:
            periods = st.multiselect(
                "Period",
                options=list(period_options.keys()),
                default=[p for p in current.periods if p in period_options],
                format_func=lambda pid: period_options.get(pid, pid)
            )
        with col2:
            description_options = filter_options(skus, 'sku_description')
            descriptions = st.multiselect(
                "SKU Description",
                options=description_options,
                default=_defaults(current.sku_descriptions, description_options)
            )
        with col3:
            component_options = filter_options(skus, 'component_codes', multi_value=True)
            component_codes = st.multiselect(
                "Component Code",
                options=component_options,
                default=_defaults(current.component_codes, component_options)
            )
        applied = st.form_submit_button("🔍 Apply", type="primary")

    if applied:
        return FilterCriteria(periods=periods, sku_descriptions=descriptions,
                              component_codes=component_codes)
    return None


# =============================================================================
# QUICK ADD
# =============================================================================

@st.dialog("📋 Quick Add 3PM Codes", width="large")
def show_quick_add_dialog(records: pd.DataFrame, state_key: str = "cm_quick_add"):
    """Bulk paste of 3PM codes into the code filter"""
    st.caption("Paste codes separated by commas, semicolons, spaces, or on new lines")

    input_text = st.text_area("3PM Codes", height=150, key=f"{state_key}_text")

    if st.button("🔍 Parse & Validate", type="primary"):
        codes = parse_code_list(input_text)
        if not codes:
            st.warning("⚠️ No valid codes found in input")
        else:
            st.session_state[f"{state_key}_results"] = match_codes(codes, records, 'cm_code')

    results = st.session_state.get(f"{state_key}_results")
    if not results:
        return

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("✅ Matched", len(results['matched_codes']))
    with col2:
        st.metric("⚠️ Not Found", len(results['unmatched_codes']))
    with col3:
        st.metric("📊 Match Rate", f"{results['match_rate']:.0f}%")

    preview = UI_CONFIG['max_quick_add_preview']
    if results['unmatched_codes']:
        unmatched_text = ", ".join(results['unmatched_codes'][:preview])
        if len(results['unmatched_codes']) > preview:
            unmatched_text += f" ... and {len(results['unmatched_codes']) - preview} more"
        st.code(unmatched_text)

    if st.button("✅ Add to Selection", disabled=not results['matched_codes']):
        st.session_state[f"{state_key}_confirmed"] = results['matched_codes']
        st.session_state.pop(f"{state_key}_results", None)
        st.rerun()


# =============================================================================
# TABLES & PAGINATION
# =============================================================================

def render_cm_table(page: PageResult, master: MasterData, on_toggle=None, key_prefix: str = "cm"):
    """Current page of the 3PM listing with an active toggle per row"""
    if page.is_empty:
        st.info("No data to display")
        return
    if page.rows.empty:
        st.info("No records on this page")
        return

    formatter = get_formatter()
    display_df = formatter.format_cm_listing(page.rows, master.periods)
    columns = ['cm_code', 'cm_description', 'region_name', 'srm_lead', 'signoff_status', 'periods']
    labels = ['3PM Code', 'Description', 'Region', 'SRM Lead', 'Signoff', 'Periods']

    header = st.columns([2, 3, 1, 2, 1, 2, 1])
    for col, label in zip(header, labels + ['Active']):
        col.markdown(f"**{label}**")

    for (_, raw), (_, shown) in zip(page.rows.iterrows(), display_df.iterrows()):
        cols = st.columns([2, 3, 1, 2, 1, 2, 1])
        for col, column in zip(cols, columns):
            value = shown.get(column)
            col.write('-' if value is None or (not isinstance(value, str) and pd.isna(value)) else value)
        with cols[-1]:
            is_active = bool(raw.get('is_active'))
            # Key includes the flag so a rolled-back row gets a fresh widget
            st.toggle(" ", value=is_active, key=f"{key_prefix}_active_{raw.get('id')}_{is_active}",
                      label_visibility="collapsed", disabled=on_toggle is None,
                      on_change=on_toggle, args=(raw.get('id'),))

    st.caption(f"Showing {page.range_label()}")


def render_pagination(pagination: PaginationState, total_pages: int, key_prefix: str = "main"):
    """Render page size selector and pagination controls"""
    options = sorted(set(UI_CONFIG['items_per_page_options']) | {pagination.page_size})
    cols = st.columns([2, 1, 1, 2, 1, 1])

    with cols[0]:
        size = st.selectbox(
            "Rows per page",
            options=options,
            index=options.index(pagination.page_size) if pagination.page_size in options else 0,
            key=f"{key_prefix}_page_size_select"
        )
        if size != pagination.page_size:
            pagination.set_page_size(size)
            st.rerun()

    if total_pages <= 1:
        return

    current_page = pagination.page
    target = current_page

    with cols[1]:
        if st.button("⏮️", key=f"{key_prefix}_first", disabled=current_page <= 1):
            target = 1
    with cols[2]:
        if st.button("◀️", key=f"{key_prefix}_prev", disabled=current_page <= 1):
            target = current_page - 1
    with cols[3]:
        st.markdown(f"<div style='text-align: center; padding: 8px;'>Page {current_page} of {total_pages}</div>",
                    unsafe_allow_html=True)
    with cols[4]:
        if st.button("▶️", key=f"{key_prefix}_next", disabled=current_page >= total_pages):
            target = current_page + 1
    with cols[5]:
        if st.button("⏭️", key=f"{key_prefix}_last", disabled=current_page >= total_pages):
            target = total_pages

    if target != current_page:
        pagination.set_page(target, total_pages)
        st.rerun()


# =============================================================================
# COMPONENTS OF A SKU
# =============================================================================

def render_component_tabs(sku_code: str, components: pd.DataFrame, selection: MaterialTypeSelection):
    """Material-type tab buttons and the visible component table for one SKU"""
    counts = bucket_counts(components)
    active = selection.get(sku_code)

    cols = st.columns(len(MATERIAL_TYPES))
    for col, (bucket, config) in zip(cols, MATERIAL_TYPES.items()):
        with col:
            if st.button(
                f"{config['icon']} {config['label']} ({counts[bucket]})",
                key=f"tab_{sku_code}_{bucket}",
                use_container_width=True,
                type="primary" if bucket == active else "secondary"
            ):
                selection.set(sku_code, bucket)
                st.rerun()

    visible = selection.visible_components(sku_code, components)
    if visible.empty:
        st.info(f"No {MATERIAL_TYPES[active]['label'].lower()} components")
        return

    display_cols = [c for c in ['component_code', 'component_description', 'material_type_id',
                                'component_quantity', 'component_valid_from', 'component_valid_to',
                                'is_active'] if c in visible.columns]
    st.dataframe(get_formatter().format_components(visible[display_cols]),
                 use_container_width=True, hide_index=True)


# =============================================================================
# REFERENCE CANDIDATES
# =============================================================================

def render_candidate_selector(tracker: ReferenceRequestTracker, form_key: str) -> List[str]:
    """
    Checkbox list of reference candidates

    Returns:
        Keys currently selected
    """
    resolution = tracker.resolution(form_key)
    if resolution is None:
        return []
    if resolution.is_empty:
        st.info(f"Reference SKU {resolution.sku_code} has no components")
        return []

    selected = tracker.selection(form_key)
    st.caption(f"{len(selected)} of {len(resolution.candidates)} components selected "
               f"(source: {resolution.sku_code})")

    for candidate in resolution.candidates:
        label = f"{candidate.component_code} - {candidate.fields.get('component_description') or ''}"
        checked = st.checkbox(label, value=candidate.key in selected,
                              key=tracker.widget_key(form_key, candidate.key))
        if checked != (candidate.key in selected):
            selected = toggle_selection(selected, candidate.key)
            tracker.set_selection(form_key, selected)

    return [key for key in resolution.keys if key in selected]


def render_validation_messages(errors: Dict[str, str], warnings: Dict[str, str]):
    for message in errors.values():
        st.error(f"❌ {message}")
    for message in warnings.values():
        st.warning(f"⚠️ {message}")
