# =============================================================================
# 3PM PORTAL - PYTEST CONFIGURATION
# =============================================================================
# Shared fixtures and fakes for all tests.
# =============================================================================

import json as jsonlib
import pytest
import sys
import os

import pandas as pd

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from utils.cm_sku.models import Period


# =============================================================================
# HTTP FAKES
# =============================================================================

class FakeResponse:
    """Minimal stand-in for requests.Response"""

    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self._text = text
        self.reason = 'OK' if status_code < 400 else 'Error'

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._text is not None:
            return jsonlib.loads(self._text)
        return self._payload


class FakeSession:
    """Routes (method, path) to canned responses and records calls"""

    def __init__(self, routes=None):
        self.routes = routes or {}
        self.headers = {}
        self.calls = []

    def request(self, method, url, params=None, json=None, data=None, timeout=None):
        path = url.split('://', 1)[-1]
        path = path[path.index('/'):] if '/' in path else '/'
        self.calls.append({'method': method, 'path': path, 'params': params, 'json': json, 'data': data})
        route = self.routes.get((method, path))
        if route is None:
            return FakeResponse(404, {'success': False, 'message': 'Not found'})
        if isinstance(route, Exception):
            raise route
        return route


@pytest.fixture
def api_config():
    return {'base_url': 'http://portal.test', 'token': 'secret', 'timeout': 5}


# =============================================================================
# RECORD FIXTURES
# =============================================================================

@pytest.fixture
def periods():
    """Three fiscal-year periods, most recent first"""
    return [
        Period(id=3, label='July 2026 to June 2027'),
        Period(id=2, label='July 2025 to June 2026'),
        Period(id=1, label='July 2024 to June 2025'),
    ]


@pytest.fixture
def cm_records():
    """Small 3PM listing with mixed signoff states and periods"""
    return pd.DataFrame([
        {'id': 1, 'cm_code': 'CM1', 'cm_description': 'Alpha Manufacturing', 'region_name': 'EU',
         'srm_lead': 'Lead A', 'signoff_status': 'signed', 'periods': '1,2', 'is_active': True},
        {'id': 2, 'cm_code': 'CM2', 'cm_description': 'Beta Packaging', 'region_name': 'NA',
         'srm_lead': 'Lead B', 'signoff_status': 'pending', 'periods': '2', 'is_active': True},
        {'id': 3, 'cm_code': 'CM10', 'cm_description': 'Gamma Labs', 'region_name': 'EU',
         'srm_lead': 'Lead A', 'signoff_status': None, 'periods': '3', 'is_active': False},
        {'id': 4, 'cm_code': 'CM3', 'cm_description': 'Delta Foods', 'region_name': None,
         'srm_lead': 'Lead C', 'signoff_status': 'rejected', 'periods': None, 'is_active': True},
    ])


@pytest.fixture
def sku_components():
    """Components of SKU-A: two packaging, one raw material"""
    return [
        {'component_id': 101, 'component_code': 'PKG-BOTTLE', 'component_description': 'Bottle',
         'material_type_id': 1, 'component_quantity': 1, 'cm_code': 'CM1', 'sku_code': 'SKU-A',
         'periods': '2', 'component_valid_from': '2025-07-01', 'component_valid_to': '2026-06-30'},
        {'component_id': 102, 'component_code': 'PKG-CAP', 'component_description': 'Cap',
         'material_type_id': '1', 'component_quantity': 1, 'cm_code': 'CM1', 'sku_code': 'SKU-A',
         'periods': '2', 'component_valid_from': '2025-07-01', 'component_valid_to': '2026-06-30'},
        {'component_id': 103, 'component_code': 'RM-RESIN', 'component_description': 'Resin',
         'material_type_id': 2, 'component_quantity': 0.25, 'cm_code': 'CM1', 'sku_code': 'SKU-A',
         'periods': '2', 'component_valid_from': '2025-07-01', 'component_valid_to': '2026-06-30'},
    ]


@pytest.fixture
def sku_records():
    """SKU listing of CM1"""
    return pd.DataFrame([
        {'id': 11, 'sku_code': 'SKU-A', 'sku_description': 'Shampoo 250ml', 'cm_code': 'CM1',
         'period': '2', 'component_codes': ['PKG-BOTTLE', 'PKG-CAP', 'RM-RESIN'], 'is_active': True},
        {'id': 12, 'sku_code': 'SKU-B', 'sku_description': 'Shampoo 500ml', 'cm_code': 'CM1',
         'period': '2', 'component_codes': 'PKG-BOTTLE, RM-RESIN', 'is_active': True},
        {'id': 13, 'sku_code': 'SKU-C', 'sku_description': 'Conditioner 250ml', 'cm_code': 'CM1',
         'period': '1', 'component_codes': None, 'is_active': False},
    ])
