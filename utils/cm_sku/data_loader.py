# utils/cm_sku/data_loader.py

"""
Data Loader for the 3PM portal - REST backend collaborator
- CM listing, master data, SKU details and component lookups
- Master data falls back to built-in lists when a sub-list is missing
- Submission and active-flag toggles (interpretation left to callers)
"""

import pandas as pd
import requests
from typing import Optional, List, Dict, Any
import logging

from utils.config import config
from .constants import (
    FALLBACK_PERIODS,
    FALLBACK_REGIONS,
    FALLBACK_SRM_LEADS,
    FALLBACK_SIGNOFF_STATUSES,
    FALLBACK_MATERIAL_TYPES,
    FALLBACK_COMPONENT_UOMS,
    COMPONENT_FORM_FIELDS,
    COMPONENT_ACTIONS
)
from .models import ApiError, MasterData, AuditLogPage
from .periods import normalize_periods

logger = logging.getLogger(__name__)

CM_COLUMNS = [
    'id', 'cm_code', 'cm_description', 'region_name', 'srm_lead',
    'signoff_status', 'periods', 'is_active'
]

SKU_COLUMNS = [
    'id', 'sku_code', 'sku_description', 'cm_code', 'period',
    'sku_type', 'sku_reference', 'is_approved', 'is_active', 'component_codes'
]


class CmPortalDataLoader:
    """HTTP client for the portal backend"""

    def __init__(self, session: Optional[requests.Session] = None,
                 api_config: Optional[Dict[str, Any]] = None):
        self.api_config = api_config or config.api_config
        self._session = session or requests.Session()
        token = self.api_config.get('token')
        if token:
            self._session.headers.setdefault('Authorization', f"Bearer {token}")

    @property
    def base_url(self) -> str:
        return self.api_config.get('base_url', '').rstrip('/')

    # ==================== TRANSPORT ====================

    def _request(self, method: str, endpoint: str, params: Optional[Dict[str, Any]] = None,
                 json: Optional[Dict[str, Any]] = None, data: Optional[Dict[str, Any]] = None,
                 require_success: bool = True) -> Dict[str, Any]:
        """Send a request and decode the JSON envelope"""
        url = f"{self.base_url}{endpoint}"
        try:
            response = self._session.request(
                method, url, params=params, json=json, data=data,
                timeout=self.api_config.get('timeout')
            )
        except requests.RequestException as e:
            logger.error(f"{method} {endpoint} failed: {e}")
            raise ApiError(f"Backend unreachable: {e}", endpoint=endpoint) from e

        if not response.ok:
            message = f"HTTP error! status: {response.status_code}"
            try:
                body = response.json()
                if isinstance(body, dict) and body.get('message'):
                    message = f"{message} - {body['message']}"
            except ValueError:
                message = f"{message} - {response.reason}"
            logger.error(f"{method} {endpoint}: {message}")
            raise ApiError(message, status_code=response.status_code, endpoint=endpoint)

        try:
            payload = response.json()
        except ValueError as e:
            raise ApiError(f"Invalid JSON from {endpoint}", status_code=response.status_code,
                           endpoint=endpoint) from e

        if not isinstance(payload, dict):
            raise ApiError(f"Unexpected response shape from {endpoint}", endpoint=endpoint)

        if require_success and not payload.get('success'):
            raise ApiError(payload.get('message') or 'API returned unsuccessful response',
                           status_code=response.status_code, endpoint=endpoint)

        return payload

    # ==================== CM CODES ====================

    def load_cm_codes(self) -> pd.DataFrame:
        """
        Load the 3PM listing

        Records without is_active are treated as active; a missing
        signoff_status stays None.
        """
        payload = self._request('GET', '/cm-codes')
        rows = payload.get('data') or []

        records = []
        for item in rows:
            if not isinstance(item, dict):
                continue
            record = dict(item)
            if 'is_active' not in record:
                record['is_active'] = True
            record.setdefault('signoff_status', None)
            records.append(record)

        df = pd.DataFrame(records)
        for column in CM_COLUMNS:
            if column not in df.columns:
                df[column] = None

        logger.info(f"Loaded {len(df)} CM codes (server count: {payload.get('count', 'n/a')})")
        return df

    def toggle_cm_active(self, record_id: int, is_active: bool) -> Dict[str, Any]:
        """PATCH the active flag of a 3PM record"""
        return self._request('PATCH', f"/cm-codes/{record_id}/toggle-active",
                             json={'is_active': is_active}, require_success=False)

    def add_cm(self, form: Dict[str, Any]) -> Dict[str, Any]:
        """POST a new 3PM with its SRM and SPOC contacts"""
        payload = {
            'period': form.get('period'),
            'srm_name': form.get('srm_name'),
            'srm_email': form.get('srm_email'),
            'cm_code': str(form.get('cm_code') or '').strip(),
            'cm_description': str(form.get('cm_description') or '').strip(),
            'region': form.get('region'),
            'spokes': [dict(spoc) for spoc in form.get('spocs') or []]
        }
        logger.info(f"Adding 3PM {payload['cm_code']} with {len(payload['spokes'])} SPOCs")
        return self._request('POST', '/addpm', json=payload, require_success=False)

    # ==================== MASTER DATA ====================

    def load_master_data(self) -> MasterData:
        """
        Load periods, regions, SRM leads, statuses, material types and UOMs

        Missing sub-lists fall back to built-in defaults. A failed request
        yields the complete fallback set.
        """
        try:
            payload = self._request('GET', '/get-masterdata')
            data = payload.get('data') or {}
        except ApiError as e:
            logger.warning(f"Master data unavailable, using fallback data: {e}")
            data = {}

        fallbacks_used = []

        def pick(name: str, fallback: List[Any]) -> List[Any]:
            value = data.get(name) if isinstance(data, dict) else None
            if isinstance(value, list):
                return value
            fallbacks_used.append(name)
            return list(fallback)

        raw_periods = pick('periods', FALLBACK_PERIODS)
        raw_regions = pick('regions', FALLBACK_REGIONS)

        regions = []
        for region in raw_regions:
            if isinstance(region, dict):
                name = region.get('name')
                if name:
                    regions.append(str(name))
            elif region:
                regions.append(str(region))

        master = MasterData(
            periods=normalize_periods(raw_periods),
            regions=regions,
            srm_leads=[str(s) for s in pick('srm_leads', FALLBACK_SRM_LEADS) if s],
            signoff_statuses=[str(s) for s in pick('signoff_statuses', FALLBACK_SIGNOFF_STATUSES) if s],
            material_types=pick('material_types', FALLBACK_MATERIAL_TYPES),
            component_uoms=pick('component_uoms', FALLBACK_COMPONENT_UOMS),
            fallbacks_used=fallbacks_used
        )

        if fallbacks_used:
            logger.info(f"Master data fallbacks used for: {', '.join(fallbacks_used)}")
        return master

    # ==================== SKU DETAILS ====================

    def load_sku_details(self, cm_code: str) -> pd.DataFrame:
        """Load SKUs of a 3PM code across all periods"""
        payload = self._request('GET', f"/sku-details/{cm_code}")
        rows = payload.get('data') or []

        records = []
        for item in rows:
            if not isinstance(item, dict):
                continue
            record = dict(item)
            if 'is_active' not in record:
                record['is_active'] = True
            if 'component_codes' not in record and isinstance(record.get('components'), list):
                record['component_codes'] = [
                    c.get('component_code') for c in record['components']
                    if isinstance(c, dict) and c.get('component_code')
                ]
            records.append(record)

        df = pd.DataFrame(records)
        for column in SKU_COLUMNS:
            if column not in df.columns:
                df[column] = None

        logger.info(f"Loaded {len(df)} SKUs for {cm_code}")
        return df

    def submit_sku(self, payload: Dict[str, Any], sku_id: Optional[int] = None) -> Dict[str, Any]:
        """Create (POST) or update (PUT) a SKU with its components"""
        if sku_id is None:
            return self._request('POST', '/sku-details/add', json=payload, require_success=False)
        return self._request('PUT', f"/sku-details/update/{sku_id}", json=payload, require_success=False)

    def toggle_sku_active(self, sku_id: int, is_active: bool) -> Dict[str, Any]:
        """PATCH the active flag of a SKU"""
        return self._request('PATCH', f"/sku-details/{sku_id}/is-active",
                             json={'is_active': is_active}, require_success=False)

    # ==================== COMPONENTS ====================

    def fetch_reference_components(self, cm_code: str, sku_code: str) -> List[Dict[str, Any]]:
        """
        Components of a SKU across all periods

        Returns an empty list when the SKU has no components; raises ApiError
        on transport failure.
        """
        payload = self._request('POST', '/sku-component-details',
                                json={'cm_code': cm_code, 'sku_code': sku_code})
        data = payload.get('data')
        if isinstance(data, dict):
            details = data.get('component_details')
        else:
            details = data

        if details is None:
            return []
        if not isinstance(details, list):
            raise ApiError("component_details is not a list", endpoint='/sku-component-details')
        return [dict(row) for row in details if isinstance(row, dict)]

    def fetch_period_components(self, cm_code: str, period: Any) -> List[Dict[str, Any]]:
        """
        Component rows of every SKU of a 3PM code in one period

        Accepts both the grouped (skus_with_components) and flat row formats.
        """
        payload = self._request('GET', '/component-details',
                                params={'period': period, 'cm_code': cm_code})
        return flatten_component_rows(payload.get('data'))

    def update_component(self, mapping_id: Any, fields: Dict[str, Any],
                         action: str = 'UPDATE') -> Dict[str, Any]:
        """
        Update (or replace) one component of a SKU

        The endpoint takes form fields; None values are sent as empty strings.
        """
        if action not in COMPONENT_ACTIONS:
            raise ValueError(f"Unknown component action: {action!r}")

        form = {'action': action}
        for name, form_name in COMPONENT_FORM_FIELDS.items():
            if name in fields:
                value = fields[name]
                form[form_name] = '' if value is None else str(value)

        return self._request('POST', f"/update-component-detail/{mapping_id}",
                             data=form, require_success=False)

    # ==================== AUDIT LOG ====================

    def load_audit_logs(self, filters: Optional[Dict[str, Any]] = None,
                        page: int = 1, limit: int = 10) -> AuditLogPage:
        """Server-paged audit log entries"""
        params = {'page': page, 'limit': limit}
        for key, value in (filters or {}).items():
            if value not in (None, '', []):
                params[key] = value

        payload = self._request('GET', '/audit-logs', params=params)
        entries = pd.DataFrame(payload.get('data') or [])
        return AuditLogPage(
            entries=entries,
            total_items=int(payload.get('count') or 0),
            total_pages=int(payload.get('total_pages') or 0),
            page=page
        )


def flatten_component_rows(data: Any) -> List[Dict[str, Any]]:
    """Normalize grouped or flat component payloads into flat rows"""
    if data is None:
        return []

    if isinstance(data, dict) and isinstance(data.get('skus_with_components'), list):
        rows = []
        for group in data['skus_with_components']:
            if not isinstance(group, dict):
                continue
            sku_info = group.get('sku_info') or {}
            for component in group.get('active_components') or []:
                if not isinstance(component, dict):
                    continue
                row = dict(component)
                for key in ('sku_code', 'sku_description', 'cm_code', 'period'):
                    row[key] = sku_info.get(key)
                rows.append(row)
        return rows

    if isinstance(data, list):
        return [dict(row) for row in data if isinstance(row, dict)]

    raise ApiError("Unrecognized component payload", endpoint='/component-details')


_loader = None


def get_data_loader() -> CmPortalDataLoader:
    """Get or create the shared data loader"""
    global _loader
    if _loader is None:
        _loader = CmPortalDataLoader()
    return _loader
