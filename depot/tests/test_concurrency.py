"""
Concurrency tests: serialized adjustments and conserved transfers.
"""

import random
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from depot.adapters.catalog import StoreCatalog
from depot.adapters.json_file import JsonFileRecordStore
from depot.exceptions import InsufficientStockError
from depot.models.enums import AuditEventType, Collection
from depot.service import Depot
from depot.tests.conftest import PRODUCTS, WAREHOUSES


def run_concurrently(*calls):
    """Start every call at the same time; re-raise the first error."""
    barrier = threading.Barrier(len(calls))

    def wrapped(call):
        barrier.wait()
        return call()

    with ThreadPoolExecutor(max_workers=len(calls)) as pool:
        futures = [pool.submit(wrapped, call) for call in calls]
        return [f.result() for f in futures]


class TestSerializedAdjust:
    """Concurrent adjustments on one key never lose an update."""

    def test_two_adjustments(self, depot):
        """From 5, +10 and -3 always end at 12."""
        depot.adjust_stock(1, 1, 5, reason='initial-count')

        run_concurrently(
            lambda: depot.adjust_stock(1, 1, 10, reason='found'),
            lambda: depot.adjust_stock(1, 1, -3, reason='damaged'),
        )

        assert depot.get_stock(1, 1).quantity == 12

    def test_many_adjustments(self, depot):
        rng = random.Random(7)
        deltas = [rng.randint(1, 9) for _ in range(40)]
        depot.adjust_stock(1, 1, 100, reason='initial-count')

        run_concurrently(*[
            (lambda d=d: depot.adjust_stock(1, 1, d, reason='found'))
            for d in deltas
        ])

        assert depot.get_stock(1, 1).quantity == 100 + sum(deltas)
        assert len(depot.query_audit_log(product_id=1, warehouse_id=1)) == len(deltas) + 1

    def test_distinct_keys(self, depot):
        run_concurrently(*[
            (lambda w=w: depot.adjust_stock(1, w, 10, reason='initial-count'))
            for w in (1, 2, 3)
        ] * 5)

        assert [depot.get_stock(1, w).quantity for w in (1, 2, 3)] == [50, 50, 50]


class TestConcurrentTransfers:
    """Concurrent transfers conserve stock and never overdraw."""

    def test_conservation(self, depot):
        depot.adjust_stock(1, 1, 100, reason='initial-count')
        depot.adjust_stock(1, 2, 100, reason='initial-count')

        def transfer(from_id, to_id):
            def call():
                try:
                    return depot.execute_transfer(from_id, to_id, product_id=1, quantity=7)
                except InsufficientStockError:
                    return None
            return call

        results = run_concurrently(*([transfer(1, 2), transfer(2, 1)] * 10))

        assert sum(depot.get_stock(1, w).quantity for w in (1, 2)) == 200
        assert depot.query_transfers().total == sum(r is not None for r in results)

    def test_no_overdraw(self, depot):
        """Only as many transfers succeed as the source can cover."""
        depot.adjust_stock(1, 1, 30, reason='initial-count')

        def call():
            try:
                depot.execute_transfer(1, 2, product_id=1, quantity=10)
                return True
            except InsufficientStockError:
                return False

        results = run_concurrently(*[call] * 8)

        assert results.count(True) == 3
        assert depot.get_stock(1, 1).quantity == 0
        assert depot.get_stock(1, 2).quantity == 30

        references = {t.reference_number for t in depot.query_transfers()}
        assert len(references) == 3

        outs = depot.query_audit_log(event_type=AuditEventType.TRANSFER_OUT)
        assert all(e.quantity_after >= 0 for e in outs)


@pytest.mark.parametrize('seed', [1, 2, 3])
def test_random_operations_stay_non_negative(depot, seed):
    rng = random.Random(seed)
    depot.adjust_stock(1, 1, 20, reason='initial-count')
    depot.adjust_stock(1, 2, 20, reason='initial-count')

    def random_call():
        from_id, to_id = rng.sample([1, 2, 3], 2)
        delta = rng.randint(-15, 15) or 1
        quantity = rng.randint(1, 15)

        def call():
            if delta % 2:
                depot.adjust_stock(1, from_id, delta, reason='recount')
            else:
                try:
                    depot.execute_transfer(from_id, to_id, product_id=1, quantity=quantity)
                except InsufficientStockError:
                    pass
        return call

    run_concurrently(*[random_call() for _ in range(20)])

    assert all(r.quantity >= 0 for r in depot.list_stock())
    for entry in depot.query_audit_log():
        assert entry.quantity_before + entry.quantity_change == entry.quantity_after


class TestSharedStore:
    """Engines that share storage serialize through the store lock."""

    def test_two_engines_on_one_memory_store(self, depot, store, catalog, clock):
        other = Depot(store=store, catalog=catalog, clock=clock)
        depot.adjust_stock(1, 1, 100, reason='initial-count')

        run_concurrently(*[
            (lambda engine=engine: engine.adjust_stock(1, 1, 1, reason='found'))
            for engine in (depot, other) * 50
        ])

        assert depot.get_stock(1, 1).quantity == 200
        assert other.get_stock(1, 1).quantity == 200

    def test_two_engines_on_one_data_dir(self, tmp_path, clock):
        """Separate store instances on one directory never lose an update."""
        def engine():
            store = JsonFileRecordStore(tmp_path)
            return Depot(store=store, catalog=StoreCatalog(store=store), clock=clock)

        first, second = engine(), engine()
        first.store.save_many({Collection.PRODUCTS: PRODUCTS, Collection.WAREHOUSES: WAREHOUSES})
        first.adjust_stock(1, 1, 100, reason='initial-count')
        first.adjust_stock(1, 2, 100, reason='initial-count')

        run_concurrently(*[
            (lambda e=e: e.adjust_stock(1, 1, 1, reason='found'))
            for e in (first, second) * 25
        ])
        assert second.get_stock(1, 1).quantity == 150

        def transfer(e, from_id, to_id):
            def call():
                try:
                    return e.execute_transfer(from_id, to_id, product_id=1, quantity=9)
                except InsufficientStockError:
                    return None
            return call

        results = run_concurrently(*([transfer(first, 1, 2), transfer(second, 2, 1)] * 10))

        assert sum(first.get_stock(1, w).quantity for w in (1, 2)) == 250
        assert second.query_transfers().total == sum(r is not None for r in results)
        assert len(first.query_audit_log()) == 52 + 2 * second.query_transfers().total
