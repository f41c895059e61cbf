"""Application tests for optimistic-lock retries."""

import threading
from unittest.mock import MagicMock, patch

import pytest
from protean import current_domain
from protean.exceptions import ExpectedVersionError, ValidationError
from warehouse.concurrency import process_with_retry
from warehouse.config import max_conflict_retries, reservation_ttl
from warehouse.errors import ConcurrencyConflict
from warehouse.ledger.inventory import InventoryRecord
from warehouse.ledger.provisioning import CreateInventory
from warehouse.reservation.reservation import StockReservation
from warehouse.reservation.reserving import ReserveInventory


class TestConfig:
    def test_defaults_from_domain_config(self):
        assert max_conflict_retries() == 3
        assert reservation_ttl().total_seconds() == 24 * 3600


class TestProcessWithRetry:
    def test_returns_first_success(self):
        with patch("warehouse.concurrency.current_domain") as mock_domain:
            mock_domain.process = MagicMock(return_value="ok")
            assert process_with_retry(MagicMock(), max_attempts=3) == "ok"
            mock_domain.process.assert_called_once()

    def test_retries_after_version_conflict(self):
        with patch("warehouse.concurrency.current_domain") as mock_domain:
            mock_domain.process = MagicMock(side_effect=[ExpectedVersionError("stale"), "ok"])
            assert process_with_retry(MagicMock(), max_attempts=3) == "ok"
            assert mock_domain.process.call_count == 2

    def test_gives_up_with_concurrency_conflict(self):
        command = MagicMock()
        with patch("warehouse.concurrency.current_domain") as mock_domain:
            mock_domain.process = MagicMock(side_effect=ExpectedVersionError("stale"))
            with pytest.raises(ConcurrencyConflict) as exc_info:
                process_with_retry(command, max_attempts=3)
            assert mock_domain.process.call_count == 3
        assert exc_info.value.attempts == 3

    def test_other_errors_are_not_retried(self):
        with patch("warehouse.concurrency.current_domain") as mock_domain:
            mock_domain.process = MagicMock(side_effect=ValidationError({"quantity": ["bad"]}))
            with pytest.raises(ValidationError):
                process_with_retry(MagicMock(), max_attempts=3)
            mock_domain.process.assert_called_once()

    def test_nested_conflict_is_not_retried_again(self):
        with patch("warehouse.concurrency.current_domain") as mock_domain:
            mock_domain.process = MagicMock(side_effect=ConcurrencyConflict("ExpireReservation", 3))
            with pytest.raises(ConcurrencyConflict):
                process_with_retry(MagicMock(), max_attempts=3)
            mock_domain.process.assert_called_once()


class TestStaleWrite:
    def test_saving_a_stale_copy_is_rejected(self):
        inventory_id = current_domain.process(
            CreateInventory(product_id="prod-001", sku="KAOS", quantity=10),
            asynchronous=False,
        )
        repo = current_domain.repository_for(InventoryRecord)
        first = repo.get(inventory_id)
        second = repo.get(inventory_id)

        first.adjust(-1, "Stock count")
        repo.add(first)

        second.adjust(-2, "Stock count")
        with pytest.raises(ExpectedVersionError):
            repo.add(second)

        assert repo.get(inventory_id).quantity == 9


class TestConcurrentReservations:
    WORKERS = 30

    def _race(self, product_id):
        from warehouse.domain import warehouse

        barrier = threading.Barrier(self.WORKERS)
        outcomes, errors = [], []
        lock = threading.Lock()

        def reserve_one(index):
            with warehouse.domain_context():
                barrier.wait()
                try:
                    # Only successful reservations commit, so no worker loses more than WORKERS races
                    result = process_with_retry(
                        ReserveInventory(product_id=product_id, quantity=1, order_id=f"ord-{index:03d}"),
                        max_attempts=self.WORKERS,
                    )
                except Exception as exc:
                    with lock:
                        errors.append(exc)
                    return
                with lock:
                    outcomes.append(result)

        threads = [threading.Thread(target=reserve_one, args=(i,)) for i in range(self.WORKERS)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)
        return outcomes, errors

    def test_only_available_quantity_is_reserved(self):
        inventory_id = current_domain.process(
            CreateInventory(product_id="prod-race", sku="KAOS-RACE", quantity=10),
            asynchronous=False,
        )

        outcomes, errors = self._race("prod-race")

        assert errors == []
        assert len(outcomes) == self.WORKERS
        reserved = [o for o in outcomes if o["success"]]
        short = [o for o in outcomes if not o["success"]]
        assert len(reserved) == 10
        assert len(short) == self.WORKERS - 10
        assert all(o["shortage"] == 1 for o in short)

        record = current_domain.repository_for(InventoryRecord).get(inventory_id)
        assert record.quantity == 10
        assert record.reserved_quantity == 10
        assert record.available_quantity == 0

        rows = current_domain.repository_for(StockReservation)._dao.query.filter(inventory_id=inventory_id).all().items
        assert len(rows) == 10
        assert len({row.order_id for row in rows}) == 10
