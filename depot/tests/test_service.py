"""
Tests for the Depot facade, configuration and management command.
"""

from io import StringIO

import pytest
from django.core.exceptions import ImproperlyConfigured
from django.core.management import call_command

from depot.adapters.catalog import StoreCatalog
from depot.adapters.json_file import JsonFileRecordStore
from depot.adapters.memory import MemoryRecordStore
from depot.conf import DepotSettings, depot_settings, get_depot_settings
from depot.exceptions import (
    DepotError,
    InsufficientStockError,
    InvalidStateError,
    NotFound,
    StorageError,
    ValidationError,
)
from depot.models.enums import AlertStatus
from depot.service import Depot, get_depot, reset_depot
from depot.tests.conftest import PRODUCTS, WAREHOUSES


class TestSettings:
    """Tests for depot.conf."""

    def test_defaults(self, settings):
        settings.DEPOT = {}
        conf = get_depot_settings()

        assert conf == DepotSettings()
        assert conf.RECORD_STORE == 'depot.adapters.json_file.JsonFileRecordStore'
        assert conf.MAX_PAGE_SIZE == 100

    def test_overrides_and_unknown_keys(self, settings):
        settings.DEPOT = {'DEFAULT_PAGE_SIZE': 10, 'NOT_A_SETTING': True}

        assert depot_settings.DEFAULT_PAGE_SIZE == 10
        assert not hasattr(get_depot_settings(), 'NOT_A_SETTING')

    def test_page_size_from_settings(self, stocked, settings):
        settings.DEPOT = {'DEFAULT_PAGE_SIZE': 1}
        stocked.execute_transfer(1, 2, product_id=1, quantity=1)
        stocked.execute_transfer(1, 2, product_id=1, quantity=1)

        page = stocked.query_transfers()
        assert page.limit == 1
        assert page.total == 2


class TestGetDepot:
    """Tests for get_depot() / reset_depot()."""

    def test_builds_from_settings(self, default_depot):
        instance = get_depot()

        assert isinstance(instance, Depot)
        assert isinstance(instance.store, MemoryRecordStore)
        assert isinstance(instance.catalog, StoreCatalog)
        assert get_depot() is instance

    def test_reset(self, default_depot):
        first = get_depot()
        reset_depot()
        assert get_depot() is not first

    def test_lazy_package_attribute(self, default_depot):
        import depot as package

        assert package.depot is get_depot()
        assert package.DepotError is DepotError

    def test_json_store_data_dir(self, settings, tmp_path):
        settings.DEPOT = {
            'RECORD_STORE': 'depot.adapters.json_file.JsonFileRecordStore',
            'DATA_DIR': tmp_path,
        }
        reset_depot()
        try:
            instance = get_depot()
            assert isinstance(instance.store, JsonFileRecordStore)
            assert instance.store.data_dir == tmp_path
        finally:
            reset_depot()

    def test_bad_path(self, settings):
        settings.DEPOT = {'RECORD_STORE': 'depot.adapters.nowhere.Store'}
        reset_depot()
        try:
            with pytest.raises(ImproperlyConfigured):
                get_depot()
        finally:
            reset_depot()


class TestErrors:
    """Tests for the error taxonomy."""

    def test_http_status(self):
        assert ValidationError('INVALID_QUANTITY').http_status == 400
        assert NotFound('ORDER_NOT_FOUND').http_status == 404
        assert InsufficientStockError(available=1, requested=2).http_status == 422
        assert InvalidStateError('ORDER_ALREADY_RECEIVED').http_status == 409
        assert StorageError().http_status == 500

    def test_as_dict(self):
        error = InsufficientStockError(available=5, requested=100, warehouse_id=1)

        assert error.as_dict() == {
            'code': 'INSUFFICIENT_STOCK',
            'message': 'Insufficient stock. Available: 5, Requested: 100',
            'data': {'available': 5, 'requested': 100, 'warehouse_id': 1},
        }

    def test_default_message(self):
        assert ValidationError('SAME_WAREHOUSE').message == 'Cannot transfer to the same warehouse'

    def test_storage_error_hides_detail(self):
        error = StorageError('disk full at /var/lib/depot', path='/var/lib/depot')

        assert error.as_dict() == {'code': 'INTERNAL_ERROR', 'message': 'Internal server error', 'data': {}}
        assert 'disk full' in str(error)


class TestAdjustStock:
    """Tests for depot.adjust_stock()."""

    def test_reports_applied_delta(self, stocked):
        result = stocked.adjust_stock(1, 2, -1000, reason='write-off')

        assert result.as_dict()['appliedDelta'] == -5
        assert result.as_dict()['requestedDelta'] == -1000
        assert result.clamped

    def test_validates_catalog(self, depot):
        with pytest.raises(ValidationError) as exc:
            depot.adjust_stock(1, 99, 5)
        assert exc.value.code == 'WAREHOUSE_NOT_FOUND'


class TestDepotAlertsCommand:
    """Tests for the depot_alerts management command."""

    @pytest.fixture
    def seeded(self, default_depot):
        instance = get_depot()
        instance.store.save_many({'products': PRODUCTS, 'warehouses': WAREHOUSES})
        instance.adjust_stock(1, 1, 5, reason='initial-count')
        instance.adjust_stock(3, 2, 11, reason='initial-count')
        return instance

    def test_lists_active_alerts(self, seeded):
        out = StringIO()
        call_command('depot_alerts', stdout=out)
        output = out.getvalue()

        assert '[critical] WID-001 @ MAIN: 5/20' in output
        assert '[warning] BOL-003 @ EAST: 11/10' in output
        assert '2 alert(s)' in output

    def test_filters(self, seeded):
        seeded.update_alert_status(1, 1, AlertStatus.ACKNOWLEDGED)

        out = StringIO()
        call_command('depot_alerts', severity='critical', stdout=out)
        assert '0 alert(s)' in out.getvalue()

        out = StringIO()
        call_command('depot_alerts', '--all', '--warehouse', '1', stdout=out)
        assert 'acknowledged' in out.getvalue()
        assert '1 alert(s)' in out.getvalue()
