# utils/cm_sku/formatters.py

"""
Formatters for 3PM and SKU listings
"""

import pandas as pd
from typing import Any, Iterable, List, Optional

from .constants import SIGNOFF_STATUS_CONFIG, MATERIAL_TYPES
from .filters import split_multi_value
from .models import Period
from .periods import period_label


class CmSkuFormatter:
    """Formatter for 3PM portal data"""

    @staticmethod
    def format_number(value: Any, decimals: int = 0) -> str:
        """Format number with thousand separator"""
        if value is None or pd.isna(value):
            return '-'
        try:
            if decimals == 0:
                return f"{int(value):,}"
            return f"{float(value):,.{decimals}f}"
        except (ValueError, TypeError):
            return str(value)

    @staticmethod
    def format_percentage(value: Any, decimals: int = 1) -> str:
        """Format a 0-100 percentage"""
        if value is None or pd.isna(value):
            return '-'
        try:
            return f"{float(value):.{decimals}f}%"
        except (ValueError, TypeError):
            return str(value)

    @staticmethod
    def format_signoff(status: Any) -> str:
        """Signoff status with icon; missing status shows as 'No Signoff'"""
        key = str(status).strip().lower() if isinstance(status, str) and status.strip() else 'absent'
        config = SIGNOFF_STATUS_CONFIG.get(key)
        if config is None:
            return str(status)
        return f"{config['icon']} {config['label']}"

    @staticmethod
    def format_active(value: Any) -> str:
        return '🟢 Active' if bool(value) and not pd.isna(value) else '⚫ Inactive'

    @staticmethod
    def format_material_type(value: Any) -> str:
        code = pd.to_numeric(value, errors='coerce')
        for config in MATERIAL_TYPES.values():
            if config['type_id'] is not None and code == config['type_id']:
                return f"{config['icon']} {config['label']}"
        return '-' if pd.isna(code) else str(value)

    @staticmethod
    def format_periods(value: Any, periods: Optional[Iterable[Period]] = None) -> str:
        """Comma-delimited period ids as labels"""
        tokens = split_multi_value(value)
        if not tokens:
            return '-'
        if periods is None:
            return ', '.join(tokens)
        periods = list(periods)
        return ', '.join(period_label(periods, token) for token in tokens)

    @staticmethod
    def truncate_text(text: Any, max_length: int = 40) -> str:
        """Truncate text with ellipsis"""
        if text is None or pd.isna(text):
            return ''
        text = str(text)
        if len(text) <= max_length:
            return text
        return text[:max_length - 3] + '...'

    def format_cm_listing(self, df: pd.DataFrame, periods: Optional[List[Period]] = None) -> pd.DataFrame:
        """3PM listing columns for display"""
        result = df.copy()
        if 'signoff_status' in result.columns:
            result['signoff_status'] = result['signoff_status'].apply(self.format_signoff)
        if 'periods' in result.columns:
            result['periods'] = result['periods'].apply(lambda v: self.format_periods(v, periods))
        if 'is_active' in result.columns:
            result['is_active'] = result['is_active'].apply(self.format_active)
        if 'cm_description' in result.columns:
            result['cm_description'] = result['cm_description'].apply(self.truncate_text)
        return result

    def format_components(self, df: pd.DataFrame) -> pd.DataFrame:
        """Component table columns for display"""
        result = df.copy()
        if 'material_type_id' in result.columns:
            result['material_type_id'] = result['material_type_id'].apply(self.format_material_type)
        if 'is_active' in result.columns:
            result['is_active'] = result['is_active'].apply(self.format_active)
        return result


_formatter = None


def get_formatter() -> CmSkuFormatter:
    """Get or create formatter instance"""
    global _formatter
    if _formatter is None:
        _formatter = CmSkuFormatter()
    return _formatter
