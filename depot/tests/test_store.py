"""
Tests for record store adapters.
"""

import json
import os
import threading
from pathlib import Path

import pytest
from django.db import connection

from depot.adapters.catalog import StoreCatalog
from depot.adapters.database import LOCK_ROW, DatabaseRecordStore
from depot.adapters.json_file import JsonFileRecordStore
from depot.adapters.memory import MemoryRecordStore
from depot.exceptions import InsufficientStockError, StorageError
from depot.models.enums import Collection
from depot.protocols.store import RecordStore
from depot.service import Depot
from depot.tests.conftest import PRODUCTS, WAREHOUSES


class TestMemoryStore:
    """Tests for MemoryRecordStore."""

    def test_missing_collection_is_empty(self):
        assert MemoryRecordStore().load_all('stock') == []

    def test_loaded_records_are_copies(self):
        """Mutating a loaded list never leaks into the store."""
        store = MemoryRecordStore()
        store.save_all('stock', [{'id': 1, 'quantity': 5}])

        loaded = store.load_all('stock')
        loaded[0]['quantity'] = 999
        loaded.append({'id': 2})

        assert store.load_all('stock') == [{'id': 1, 'quantity': 5}]

    def test_unserializable_records_raise_storage_error(self):
        store = MemoryRecordStore()
        store.save_all('stock', [{'id': 1}])

        with pytest.raises(StorageError):
            store.save_many({'stock': [], 'transfers': [{'id': 1, 'bad': object()}]})

        assert store.load_all('stock') == [{'id': 1}]

    def test_next_id(self):
        store = MemoryRecordStore()
        assert store.next_id([]) == 1
        assert store.next_id([{'id': 3}, {'id': 7}, {'id': 5}]) == 8

    def test_implements_protocol(self):
        assert isinstance(MemoryRecordStore(), RecordStore)


class TestJsonFileStore:
    """Tests for JsonFileRecordStore."""

    def test_roundtrip(self, tmp_path):
        store = JsonFileRecordStore(tmp_path)
        store.save_all('stock', [{'id': 1, 'productId': 1, 'warehouseId': 1, 'quantity': 5}])

        assert (tmp_path / 'stock.json').exists()
        assert store.load_all('stock')[0]['quantity'] == 5

    def test_missing_file_is_empty(self, tmp_path):
        assert JsonFileRecordStore(tmp_path / 'nowhere').load_all('stock') == []

    def test_no_temp_files_left(self, tmp_path):
        store = JsonFileRecordStore(tmp_path)
        store.save_many({'stock': [{'id': 1}], 'transfers': [{'id': 1}]})

        assert sorted(p.name for p in tmp_path.iterdir()) == ['stock.json', 'transfers.json']

    def test_corrupt_file_raises_storage_error(self, tmp_path):
        (tmp_path / 'stock.json').write_text('{not json', encoding='utf-8')

        with pytest.raises(StorageError):
            JsonFileRecordStore(tmp_path).load_all('stock')

    def test_non_array_raises_storage_error(self, tmp_path):
        (tmp_path / 'stock.json').write_text('{"id": 1}', encoding='utf-8')

        with pytest.raises(StorageError):
            JsonFileRecordStore(tmp_path).load_all('stock')

    def test_invalid_collection_name(self, tmp_path):
        with pytest.raises(StorageError):
            JsonFileRecordStore(tmp_path).load_all('../etc/passwd')

    def test_failed_commit_restores_previous_files(self, tmp_path, monkeypatch):
        """A failing swap puts every already-replaced collection back."""
        store = JsonFileRecordStore(tmp_path)
        store.save_many({'stock': [{'id': 1, 'quantity': 10}], 'transfers': []})

        real_replace = os.replace

        def failing_replace(src, dst):
            if Path(dst).name == 'transfers.json':
                raise OSError('disk full')
            return real_replace(src, dst)

        monkeypatch.setattr(os, 'replace', failing_replace)

        with pytest.raises(StorageError):
            store.save_many({
                'stock': [{'id': 1, 'quantity': 0}],
                'transfers': [{'id': 1}],
            })

        monkeypatch.undo()
        assert store.load_all('stock') == [{'id': 1, 'quantity': 10}]
        assert store.load_all('transfers') == []
        assert not list(tmp_path.glob('*.tmp'))

    def test_failed_transfer_commit_leaves_stock_unchanged(self, tmp_path, monkeypatch, clock):
        """A transfer whose commit fails changes nothing on disk."""
        store = JsonFileRecordStore(tmp_path)
        store.save_many({'products': PRODUCTS, 'warehouses': WAREHOUSES})
        depot = Depot(store=store, catalog=StoreCatalog(store=store), clock=clock)
        depot.adjust_stock(1, 1, 50, reason='initial-count')

        real_replace = os.replace

        def failing_replace(src, dst):
            if Path(dst).name == 'transfers.json':
                raise OSError('disk full')
            return real_replace(src, dst)

        monkeypatch.setattr(os, 'replace', failing_replace)

        with pytest.raises(StorageError):
            depot.execute_transfer(1, 2, product_id=1, quantity=10)

        monkeypatch.undo()
        assert depot.get_stock(1, 1).quantity == 50
        assert depot.get_stock(1, 2) is None
        assert depot.query_transfers().total == 0
        assert len(depot.query_audit_log()) == 1

    def test_records_written_as_json_array(self, tmp_path):
        JsonFileRecordStore(tmp_path).save_all('alerts', [{'id': 1, 'status': 'active'}])

        data = json.loads((tmp_path / 'alerts.json').read_text(encoding='utf-8'))
        assert data == [{'id': 1, 'status': 'active'}]

    def test_lock_excludes_other_instances(self, tmp_path):
        """A second store on the same directory waits for the lock holder."""
        holder = JsonFileRecordStore(tmp_path)
        waiter = JsonFileRecordStore(tmp_path)
        entered = threading.Event()

        def take_lock():
            with waiter.locked():
                entered.set()

        with holder.locked():
            thread = threading.Thread(target=take_lock)
            thread.start()
            assert not entered.wait(0.3)

        assert entered.wait(5)
        thread.join()
        assert (tmp_path / '.depot.lock').exists()

    def test_lock_is_reentrant(self, tmp_path):
        store = JsonFileRecordStore(tmp_path)

        with store.locked():
            with store.locked():
                store.save_all('stock', [{'id': 1}])
            store.save_all('transfers', [])

        assert store.load_all('stock') == [{'id': 1}]


@pytest.mark.django_db
class TestDatabaseStore:
    """Tests for DatabaseRecordStore."""

    def test_roundtrip(self):
        store = DatabaseRecordStore()
        store.save_all(Collection.STOCK, [{'id': 1, 'quantity': 5}])

        assert store.load_all(Collection.STOCK) == [{'id': 1, 'quantity': 5}]
        assert store.load_all(Collection.TRANSFERS) == []

    def test_save_replaces_collection(self):
        store = DatabaseRecordStore()
        store.save_all(Collection.STOCK, [{'id': 1}])
        store.save_all(Collection.STOCK, [{'id': 2}])

        assert store.load_all(Collection.STOCK) == [{'id': 2}]

    def test_save_many_is_all_or_nothing(self):
        store = DatabaseRecordStore()
        store.save_all(Collection.STOCK, [{'id': 1, 'quantity': 10}])

        with pytest.raises(StorageError):
            store.save_many({
                Collection.STOCK: [{'id': 1, 'quantity': 0}],
                Collection.TRANSFERS: [{'id': 1, 'bad': object()}],
            })

        assert store.load_all(Collection.STOCK) == [{'id': 1, 'quantity': 10}]

    def test_engine_on_database(self, clock):
        store = DatabaseRecordStore()
        store.save_many({Collection.PRODUCTS: PRODUCTS, Collection.WAREHOUSES: WAREHOUSES})
        depot = Depot(store=store, catalog=StoreCatalog(store=store), clock=clock)
        depot.adjust_stock(1, 1, 50, reason='initial-count')

        depot.execute_transfer(1, 2, product_id=1, quantity=10)
        with pytest.raises(InsufficientStockError):
            depot.execute_transfer(1, 2, product_id=1, quantity=100)

        assert depot.get_stock(1, 1).quantity == 40
        assert depot.get_stock(1, 2).quantity == 10
        assert depot.query_transfers().total == 1

    def test_lock_holds_a_transaction(self):
        store = DatabaseRecordStore()

        with store.locked():
            assert connection.in_atomic_block
            store.save_all(Collection.STOCK, [{'id': 1}])

        assert store._queryset().filter(name=LOCK_ROW).exists()
        assert store.load_all(Collection.STOCK) == [{'id': 1}]

    def test_failed_block_rolls_back(self, clock):
        store = DatabaseRecordStore()
        store.save_many({Collection.PRODUCTS: PRODUCTS, Collection.WAREHOUSES: WAREHOUSES})
        depot = Depot(store=store, catalog=StoreCatalog(store=store), clock=clock)

        with pytest.raises(RuntimeError):
            with depot.ledger.atomic():
                depot.adjust_stock(1, 1, 50, reason='initial-count')
                raise RuntimeError('abort')

        assert store.load_all(Collection.STOCK) == []
        assert store.load_all(Collection.AUDIT_LOG) == []
