# utils/cm_sku/validation.py

"""
Form validation for SKU, 3PM and component edits

Results are field-keyed error/warning dicts; nothing here raises.
"""

import re
import pandas as pd
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional
import logging

from .composer import is_self_reference

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


@dataclass
class ValidationResult:
    """Field-keyed validation messages"""
    errors: Dict[str, str] = field(default_factory=dict)
    warnings: Dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def is_blocking(self) -> bool:
        return bool(self.errors)

    def add_error(self, name: str, message: str):
        # First message per field wins
        self.errors.setdefault(name, message)

    def add_warning(self, name: str, message: str):
        self.warnings.setdefault(name, message)


def _text(value: Any) -> str:
    if value is None:
        return ''
    if not isinstance(value, str):
        try:
            if pd.isna(value):
                return ''
        except (TypeError, ValueError):
            pass
    if isinstance(value, float) and value.is_integer():
        # period ids arrive as floats when the column has nulls
        value = int(value)
    return str(value).strip()


def is_valid_email(value: Any) -> bool:
    return bool(EMAIL_PATTERN.match(_text(value)))


def _existing_rows(existing: Any) -> List[Dict[str, Any]]:
    if existing is None:
        return []
    if isinstance(existing, pd.DataFrame):
        return existing.to_dict('records')
    return [dict(row) for row in existing]


# =============================================================================
# SKU FORM
# =============================================================================

def validate_sku_form(form: Dict[str, Any], existing_skus: Any = None) -> ValidationResult:
    """
    Validate an add/edit SKU form

    Args:
        form: sku_code, sku_description, period, cm_code, sku_reference, optional id
        existing_skus: Loaded SKU listing (DataFrame or list of dicts)

    Returns:
        ValidationResult; self-reference is reported as a warning only
    """
    result = ValidationResult()

    sku_code = _text(form.get('sku_code'))
    description = _text(form.get('sku_description'))
    period = _text(form.get('period'))
    cm_code = _text(form.get('cm_code'))
    own_id = _text(form.get('id'))

    if not sku_code:
        result.add_error('sku_code', 'SKU code is required')
    if not description:
        result.add_error('sku_description', 'SKU description is required')
    if not period:
        result.add_error('period', 'Period is required')

    for row in _existing_rows(existing_skus):
        if own_id and _text(row.get('id')) == own_id:
            continue

        if sku_code and _text(row.get('sku_code')).lower() == sku_code.lower():
            result.add_error('sku_code', f"SKU code '{sku_code}' already exists")

        if (description and period
                and _text(row.get('cm_code')).lower() == cm_code.lower()
                and _text(row.get('period')) == period
                and _text(row.get('sku_description')).lower() == description.lower()):
            result.add_error('sku_description',
                             'SKU description already exists for this 3PM and period')

    if is_self_reference(form.get('sku_reference'), sku_code):
        result.add_warning('sku_reference', 'SKU references itself')

    if result.errors:
        logger.info(f"SKU form invalid: {', '.join(result.errors)}")
    return result


# =============================================================================
# NEW 3PM FORM
# =============================================================================

def validate_new_cm(form: Dict[str, Any], existing_cm_codes: Optional[Iterable[Any]] = None) -> ValidationResult:
    """Validate the Add 3PM form including SPOC and signatory entries"""
    result = ValidationResult()

    required = {
        'cm_code': '3PM code is required',
        'cm_description': '3PM description is required',
        'period': 'Period is required',
        'region': 'Region is required',
        'srm_name': 'SRM name is required',
        'srm_email': 'SRM email is required'
    }
    for name, message in required.items():
        if not _text(form.get(name)):
            result.add_error(name, message)

    if _text(form.get('srm_email')) and not is_valid_email(form.get('srm_email')):
        result.add_error('srm_email', 'Please enter a valid email address')

    spocs = form.get('spocs') or []
    if not spocs:
        result.add_error('spocs', 'At least one SPOC is required')
    for index, spoc in enumerate(spocs):
        if not _text(spoc.get('name')):
            result.add_error(f'spoc_{index}_name', 'SPOC name is required')
        if not _text(spoc.get('email')):
            result.add_error(f'spoc_{index}_email', 'SPOC email is required')
        elif not is_valid_email(spoc.get('email')):
            result.add_error(f'spoc_{index}_email', 'Please enter a valid email address')

    signatories = [spoc for spoc in spocs if spoc.get('is_signatory')]
    if len(signatories) > 1:
        result.add_error('signatory', 'Only one SPOC can be the signatory')

    cm_code = _text(form.get('cm_code')).lower()
    if cm_code and any(_text(code).lower() == cm_code for code in (existing_cm_codes or [])):
        result.add_error('cm_code', f"3PM code '{_text(form.get('cm_code'))}' already exists")

    return result


# =============================================================================
# COMPONENT VALIDITY
# =============================================================================

def parse_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = _text(value)
    if not text:
        return None
    try:
        return pd.to_datetime(text).date()
    except (ValueError, TypeError):
        return None


def validate_component_validity(form: Dict[str, Any]) -> ValidationResult:
    """Component validity window: both dates required, from not after to"""
    result = ValidationResult()

    valid_from = parse_date(form.get('component_valid_from'))
    valid_to = parse_date(form.get('component_valid_to'))

    if valid_from is None:
        result.add_error('component_valid_from', 'Valid from date is required')
    if valid_to is None:
        result.add_error('component_valid_to', 'Valid to date is required')
    if valid_from and valid_to and valid_from > valid_to:
        result.add_error('component_valid_to', 'Valid to date must be on or after valid from date')

    return result
