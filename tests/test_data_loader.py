# =============================================================================
# 3PM PORTAL - API COLLABORATOR TESTS
# =============================================================================

import pytest
import requests

from conftest import FakeResponse, FakeSession
from utils.config import Config
from utils.cm_sku.constants import FALLBACK_REGIONS, FALLBACK_SIGNOFF_STATUSES
from utils.cm_sku.data_loader import CmPortalDataLoader, flatten_component_rows
from utils.cm_sku.models import ApiError


def make_loader(routes, api_config):
    session = FakeSession(routes)
    return CmPortalDataLoader(session=session, api_config=api_config), session


class TestTransport:
    """Tests for request handling and errors."""

    def test_bearer_token(self, api_config):
        """The configured token is sent as a bearer header."""
        _, session = make_loader({}, api_config)
        assert session.headers['Authorization'] == 'Bearer secret'

    def test_http_error(self, api_config):
        """Non-2xx responses raise ApiError with the status."""
        loader, _ = make_loader({('GET', '/cm-codes'): FakeResponse(500, {'message': 'Server down'})}, api_config)
        with pytest.raises(ApiError) as excinfo:
            loader.load_cm_codes()
        assert excinfo.value.status_code == 500
        assert 'status: 500' in str(excinfo.value)

    def test_network_error(self, api_config):
        """Connection failures become ApiError."""
        routes = {('GET', '/cm-codes'): requests.ConnectionError('refused')}
        loader, _ = make_loader(routes, api_config)
        with pytest.raises(ApiError):
            loader.load_cm_codes()

    def test_unsuccessful_envelope(self, api_config):
        """success false raises with the server message."""
        routes = {('GET', '/cm-codes'): FakeResponse(200, {'success': False, 'message': 'No access'})}
        loader, _ = make_loader(routes, api_config)
        with pytest.raises(ApiError, match='No access'):
            loader.load_cm_codes()

    def test_invalid_json(self, api_config):
        """Unparseable bodies raise ApiError."""
        routes = {('GET', '/cm-codes'): FakeResponse(200, text='<html>')}
        loader, _ = make_loader(routes, api_config)
        with pytest.raises(ApiError):
            loader.load_cm_codes()


class TestCmCodes:
    """Tests for the 3PM listing."""

    def test_defaults(self, api_config):
        """Absent is_active becomes True; explicit values and absent signoff are kept."""
        payload = {'success': True, 'count': 3, 'data': [
            {'id': 1, 'cm_code': 'CM1'},
            {'id': 2, 'cm_code': 'CM2', 'is_active': False, 'signoff_status': 'signed'},
            {'id': 3, 'cm_code': 'CM3', 'is_active': None},
        ]}
        loader, _ = make_loader({('GET', '/cm-codes'): FakeResponse(200, payload)}, api_config)
        df = loader.load_cm_codes()

        assert list(df['is_active'][:2]) == [True, False]
        assert df['is_active'].iloc[2] is None or df['is_active'].isna().iloc[2]
        assert df['signoff_status'].isna().iloc[0]
        assert {'region_name', 'srm_lead', 'periods'} <= set(df.columns)

    def test_toggle(self, api_config):
        """Toggling PATCHes the record and returns the raw envelope."""
        routes = {('PATCH', '/cm-codes/7/toggle-active'): FakeResponse(200, {'success': False, 'message': 'Denied'})}
        loader, session = make_loader(routes, api_config)
        response = loader.toggle_cm_active(7, False)
        assert response['success'] is False
        assert session.calls[0]['json'] == {'is_active': False}


class TestMasterData:
    """Tests for master data with fallbacks."""

    def test_partial_fallback(self, api_config):
        """Missing sub-lists fall back, present ones are used."""
        payload = {'success': True, 'data': {
            'periods': [{'id': 2, 'period': 'July 2025 to June 2026'}, '3'],
            'regions': [{'id': 1, 'name': 'EU'}, 'NA'],
        }}
        loader, _ = make_loader({('GET', '/get-masterdata'): FakeResponse(200, payload)}, api_config)
        master = loader.load_master_data()

        assert [p.id for p in master.periods] == [2, 3]
        assert master.regions == ['EU', 'NA']
        assert master.signoff_statuses == FALLBACK_SIGNOFF_STATUSES
        assert 'signoff_statuses' in master.fallbacks_used
        assert 'regions' not in master.fallbacks_used

    def test_full_fallback_on_failure(self, api_config):
        """A failed request yields the complete fallback set."""
        loader, _ = make_loader({('GET', '/get-masterdata'): FakeResponse(503, {})}, api_config)
        master = loader.load_master_data()
        assert [p.id for p in master.periods] == [3, 2, 1]
        assert master.regions == FALLBACK_REGIONS
        assert set(master.fallbacks_used) >= {'periods', 'regions', 'signoff_statuses'}


class TestComponents:
    """Tests for SKU and component lookups."""

    def test_sku_details_component_codes(self, api_config):
        """Component codes are derived from nested components."""
        payload = {'success': True, 'data': [
            {'id': 11, 'sku_code': 'SKU-A', 'components': [{'component_code': 'P1'}, {'component_code': 'R1'}]}
        ]}
        loader, _ = make_loader({('GET', '/sku-details/CM1'): FakeResponse(200, payload)}, api_config)
        df = loader.load_sku_details('CM1')
        assert df['component_codes'].iloc[0] == ['P1', 'R1']
        assert bool(df['is_active'].iloc[0]) is True

    def test_reference_components(self, api_config, sku_components):
        """The all-period lookup posts cm_code and sku_code."""
        payload = {'success': True, 'data': {'component_details': sku_components}}
        loader, session = make_loader({('POST', '/sku-component-details'): FakeResponse(200, payload)}, api_config)
        rows = loader.fetch_reference_components('CM1', 'SKU-A')
        assert len(rows) == 3
        assert session.calls[0]['json'] == {'cm_code': 'CM1', 'sku_code': 'SKU-A'}

    def test_reference_components_none(self, api_config):
        """No component details means an empty list."""
        payload = {'success': True, 'data': {'component_details': None}}
        loader, _ = make_loader({('POST', '/sku-component-details'): FakeResponse(200, payload)}, api_config)
        assert loader.fetch_reference_components('CM1', 'SKU-A') == []

    def test_reference_components_malformed(self, api_config):
        """A non-list payload is an error, not an empty result."""
        payload = {'success': True, 'data': {'component_details': 'oops'}}
        loader, _ = make_loader({('POST', '/sku-component-details'): FakeResponse(200, payload)}, api_config)
        with pytest.raises(ApiError):
            loader.fetch_reference_components('CM1', 'SKU-A')

    def test_period_components_grouped(self, api_config):
        """Grouped payloads are flattened with SKU info on each row."""
        payload = {'success': True, 'data': {'skus_with_components': [
            {'sku_info': {'sku_code': 'SKU-A', 'cm_code': 'CM1', 'period': '2'},
             'active_components': [{'component_id': 1, 'component_code': 'P1'}]}
        ]}}
        loader, session = make_loader({('GET', '/component-details'): FakeResponse(200, payload)}, api_config)
        rows = loader.fetch_period_components('CM1', '2')
        assert rows == [{'component_id': 1, 'component_code': 'P1', 'sku_code': 'SKU-A',
                         'sku_description': None, 'cm_code': 'CM1', 'period': '2'}]
        assert session.calls[0]['params'] == {'period': '2', 'cm_code': 'CM1'}

    def test_flatten_flat_rows(self):
        """Flat lists pass through; other shapes are errors."""
        assert flatten_component_rows([{'a': 1}, 'junk']) == [{'a': 1}]
        assert flatten_component_rows(None) == []
        with pytest.raises(ApiError):
            flatten_component_rows('junk')

    def test_submit_create_and_update(self, api_config):
        """Create POSTs, update PUTs to the record id."""
        routes = {
            ('POST', '/sku-details/add'): FakeResponse(200, {'success': True}),
            ('PUT', '/sku-details/update/11'): FakeResponse(200, {'success': True}),
        }
        loader, session = make_loader(routes, api_config)
        loader.submit_sku({'sku_data': {}, 'components': []})
        loader.submit_sku({'sku_data': {}, 'components': []}, sku_id=11)
        assert [c['method'] for c in session.calls] == ['POST', 'PUT']


class TestAdminWrites:
    """Tests for adding a 3PM and editing components."""

    def test_add_cm_payload(self, api_config):
        """SPOCs are sent as the spokes list; codes are trimmed."""
        routes = {('POST', '/addpm'): FakeResponse(200, {'success': True, 'message': 'Added'})}
        loader, session = make_loader(routes, api_config)
        response = loader.add_cm({
            'cm_code': ' CM50 ', 'cm_description': 'Epsilon', 'period': '2', 'region': 'EU',
            'srm_name': 'Sam', 'srm_email': 'sam@example.com',
            'spocs': [{'name': 'Pat', 'email': 'pat@example.com', 'is_signatory': True}]
        })
        assert response['success'] is True
        sent = session.calls[0]['json']
        assert sent['cm_code'] == 'CM50'
        assert sent['spokes'] == [{'name': 'Pat', 'email': 'pat@example.com', 'is_signatory': True}]

    def test_update_component_form_fields(self, api_config):
        """Component edits post form fields under the endpoint's names."""
        routes = {('POST', '/update-component-detail/55'): FakeResponse(200, {'success': True})}
        loader, session = make_loader(routes, api_config)
        loader.update_component(55, {
            'component_description': 'Cap 28mm',
            'component_valid_from': '2025-07-01',
            'component_valid_to': None,
            'unrelated': 'x'
        })
        form = session.calls[0]['data']
        assert form == {
            'action': 'UPDATE',
            'componentDescription': 'Cap 28mm',
            'validityFrom': '2025-07-01',
            'validityTo': ''
        }
        assert session.calls[0]['json'] is None

    def test_update_component_unknown_action(self, api_config):
        """Only UPDATE and REPLACE are accepted."""
        loader, session = make_loader({}, api_config)
        with pytest.raises(ValueError):
            loader.update_component(55, {}, action='DELETE')
        assert session.calls == []


class TestAuditLogs:
    """Tests for server-paged audit logs."""

    def test_page(self, api_config):
        """Paging params are sent and totals read back; blank filters dropped."""
        payload = {'success': True, 'data': [{'id': 1, 'action': 'UPDATE'}], 'count': 21, 'total_pages': 3}
        loader, session = make_loader({('GET', '/audit-logs'): FakeResponse(200, payload)}, api_config)
        page = loader.load_audit_logs({'date_from': '2025-01-01', 'user': ''}, page=2, limit=10)
        assert page.total_items == 21
        assert page.total_pages == 3
        assert len(page.entries) == 1
        assert session.calls[0]['params'] == {'page': 2, 'limit': 10, 'date_from': '2025-01-01'}


class TestConfig:
    """Tests for environment configuration."""

    def test_defaults(self):
        """Unset variables use defaults."""
        config = Config({})
        assert config.api_config == {'base_url': 'http://localhost:3000', 'token': '', 'timeout': 30}
        assert config.page_size == 10

    def test_overrides(self):
        """Environment values override defaults; bad integers fall back."""
        config = Config({
            'CM_PORTAL_API_BASE_URL': 'https://api.example.com/',
            'CM_PORTAL_API_TIMEOUT': 'ten',
            'CM_PORTAL_PAGE_SIZE': '25'
        })
        assert config.api_config['base_url'] == 'https://api.example.com'
        assert config.api_config['timeout'] == 30
        assert config.page_size == 25
