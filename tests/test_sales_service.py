import asyncio
from decimal import Decimal

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import (
    Forbidden, InsufficientStock, InvalidArgument, ItemNotFound, NotFound,
    ReservationPersistenceMismatch, StorageUnavailable
)
from app.modules.sales.schemas import (
    PaymentMethod, SaleCreateRequest, SaleLineItem, SaleStatus, SaleUpdateRequest, StatsPeriod
)
from app.modules.sales.service import SalesService, compute_sale_total
from app.shared.database.models import Sale
from app.shared.services.inventory_ledger import InventoryLedger


def sale_request(*lines, **kwargs) -> SaleCreateRequest:
    return SaleCreateRequest(
        customer=kwargs.get("customer", "ACME"),
        items=[{"item_id": item_id, "quantity": qty, "price": price} for item_id, qty, price in lines],
        payment_method=kwargs.get("payment_method", PaymentMethod.CASH),
        status=kwargs.get("status", SaleStatus.PENDING),
    )


class FlakyLedger(InventoryLedger):
    """Ledger que falla con StorageUnavailable en llamadas concretas"""

    def __init__(self, db, fail_release_on=(), fail_reserve_on=()):
        super().__init__(db)
        self.fail_release_on = set(fail_release_on)
        self.fail_reserve_on = set(fail_reserve_on)
        self.release_calls = 0
        self.reserve_calls = 0

    def reserve(self, item_id, amount, **kwargs):
        self.reserve_calls += 1
        if self.reserve_calls in self.fail_reserve_on:
            raise StorageUnavailable("Base de datos no disponible")
        return super().reserve(item_id, amount, **kwargs)

    def release(self, item_id, amount, **kwargs):
        self.release_calls += 1
        if self.release_calls in self.fail_release_on:
            raise StorageUnavailable("Base de datos no disponible")
        return super().release(item_id, amount, **kwargs)


class TestCreateSale:

    def test_single_line_sale(self, db_session, make_item, seller, stock):
        item = make_item(quantity=10)
        service = SalesService(db_session)

        sale = asyncio.run(service.create_sale(sale_request((item.id, 4, "5")), seller.id))

        assert stock(item.id) == 6
        assert sale.total == Decimal("20")
        assert sale.user_id == seller.id
        assert sale.status == "Pending"
        assert [(line.item_id, line.quantity) for line in sale.items] == [(item.id, 4)]
        assert sale.items[0].item_name == item.name

    def test_insufficient_stock_leaves_inventory_untouched(self, db_session, make_item, seller, stock):
        item = make_item(quantity=3)

        with pytest.raises(InsufficientStock):
            asyncio.run(SalesService(db_session).create_sale(sale_request((item.id, 5, "5")), seller.id))

        assert stock(item.id) == 3
        assert db_session.query(Sale).count() == 0

    def test_failure_on_later_line_rolls_back_earlier_reservations(self, db_session, make_item, seller, stock):
        x = make_item(name="X", quantity=10)
        y = make_item(name="Y", quantity=0)

        with pytest.raises(InsufficientStock) as exc_info:
            asyncio.run(SalesService(db_session).create_sale(
                sale_request((x.id, 2, "1"), (y.id, 1, "1")), seller.id
            ))

        assert exc_info.value.item_id == y.id
        assert stock(x.id) == 10
        assert stock(y.id) == 0
        assert db_session.query(Sale).count() == 0

    def test_missing_item_rolls_back(self, db_session, make_item, seller, stock):
        x = make_item(name="X", quantity=10)
        z = make_item(name="Z", quantity=5)

        with pytest.raises(ItemNotFound):
            asyncio.run(SalesService(db_session).create_sale(
                sale_request((x.id, 2, "1"), (z.id, 1, "1"), (999, 1, "1")), seller.id
            ))

        assert stock(x.id) == 10
        assert stock(z.id) == 5

    def test_same_item_on_two_lines(self, db_session, make_item, seller, stock):
        item = make_item(quantity=5)

        with pytest.raises(InsufficientStock):
            asyncio.run(SalesService(db_session).create_sale(
                sale_request((item.id, 3, "1"), (item.id, 3, "1")), seller.id
            ))

        assert stock(item.id) == 5

    def test_empty_items_rejected(self, db_session, seller):
        with pytest.raises(InvalidArgument):
            asyncio.run(SalesService(db_session).create_sale(sale_request(), seller.id))

    def test_total_is_recomputed(self, db_session, make_item, seller):
        x = make_item(name="X", quantity=10)
        y = make_item(name="Y", quantity=10)

        sale = asyncio.run(SalesService(db_session).create_sale(
            sale_request((x.id, 3, "2.50"), (y.id, 2, "10.25")), seller.id
        ))

        assert sale.total == Decimal("28.00")
        assert sum(line.subtotal for line in sale.items) == sale.total

    def test_total_matches_stored_lines(self, db_session, make_item, seller):
        item = make_item(quantity=10)

        sale = asyncio.run(SalesService(db_session).create_sale(
            sale_request((item.id, 3, "0.33")), seller.id
        ))

        db_session.expire_all()
        assert sale.total == sum(line.quantity * line.price for line in sale.items)

    def test_price_with_more_than_two_decimals_rejected(self):
        with pytest.raises(ValidationError):
            SaleLineItem(item_id=1, quantity=3, price=Decimal("0.333"))

    def test_total_above_column_range_rejected(self, db_session, make_item, seller, stock):
        item = make_item(quantity=500)

        with pytest.raises(InvalidArgument):
            asyncio.run(SalesService(db_session).create_sale(
                sale_request((item.id, 200, "99999999.99")), seller.id
            ))

        assert stock(item.id) == 500
        assert db_session.query(Sale).count() == 0

    def test_line_order_preserved(self, db_session, make_item, seller):
        items = [make_item(name=f"I{n}", quantity=5) for n in range(3)]

        sale = asyncio.run(SalesService(db_session).create_sale(
            sale_request(*[(item.id, 1, "1") for item in reversed(items)]), seller.id
        ))

        assert [line.item_id for line in sale.items] == [item.id for item in reversed(items)]

    def test_persistence_failure_reports_mismatch(self, db_session, make_item, seller, stock, monkeypatch):
        item = make_item(quantity=10)
        service = SalesService(db_session)

        def broken_create_sale(**kwargs):
            raise SQLAlchemyError("disk full")

        monkeypatch.setattr(service.repository, "create_sale", broken_create_sale)

        with pytest.raises(ReservationPersistenceMismatch) as exc_info:
            asyncio.run(service.create_sale(sale_request((item.id, 4, "5")), seller.id))

        assert exc_info.value.reservations == [(item.id, 4)]
        assert exc_info.value.status_code == 500
        # Las reservas quedan aplicadas para conciliación manual
        assert stock(item.id) == 6

    def test_failed_compensation_reports_mismatch(self, db_session, make_item, seller, stock):
        x = make_item(name="X", quantity=10)
        y = make_item(name="Y", quantity=0)
        ledger = FlakyLedger(db_session, fail_release_on={1})

        with pytest.raises(ReservationPersistenceMismatch) as exc_info:
            asyncio.run(SalesService(db_session, ledger=ledger).create_sale(
                sale_request((x.id, 2, "1"), (y.id, 1, "1")), seller.id
            ))

        assert exc_info.value.reservations == [(x.id, 2)]
        assert stock(x.id) == 8

    def test_storage_failure_mid_sale_compensates(self, db_session, make_item, seller, stock):
        x = make_item(name="X", quantity=10)
        y = make_item(name="Y", quantity=10)
        ledger = FlakyLedger(db_session, fail_reserve_on={2})

        with pytest.raises(StorageUnavailable):
            asyncio.run(SalesService(db_session, ledger=ledger).create_sale(
                sale_request((x.id, 2, "1"), (y.id, 1, "1")), seller.id
            ))

        assert stock(x.id) == 10
        assert stock(y.id) == 10


class TestDeleteSale:

    def _create(self, db_session, owner, *lines):
        return asyncio.run(SalesService(db_session).create_sale(sale_request(*lines), owner.id))

    def test_delete_releases_inventory(self, db_session, make_item, seller, stock):
        item = make_item(quantity=10)
        sale = self._create(db_session, seller, (item.id, 4, "5"))
        assert stock(item.id) == 6

        asyncio.run(SalesService(db_session).delete_sale(sale.id, seller.id, seller.role))

        assert stock(item.id) == 10
        with pytest.raises(NotFound):
            asyncio.run(SalesService(db_session).get_sale(sale.id))

    def test_delete_with_deleted_item(self, db_session, make_item, seller, stock):
        kept = make_item(name="Kept", quantity=10)
        gone = make_item(name="Gone", quantity=10)
        gone_id = gone.id
        sale = self._create(db_session, seller, (kept.id, 2, "1"), (gone_id, 3, "1"))

        db_session.delete(gone)
        db_session.commit()

        asyncio.run(SalesService(db_session).delete_sale(sale.id, seller.id, seller.role))

        assert stock(kept.id) == 10
        assert stock(gone_id) is None
        assert db_session.query(Sale).count() == 0

    def test_deleted_item_id_is_not_reused(self, db_session, make_item, seller, stock):
        old = make_item(name="Old", quantity=10)
        old_id = old.id
        sale = self._create(db_session, seller, (old_id, 4, "1"))

        db_session.delete(old)
        db_session.commit()
        new = make_item(name="New", quantity=1)

        assert new.id != old_id

        asyncio.run(SalesService(db_session).delete_sale(sale.id, seller.id, seller.role))

        assert stock(new.id) == 1
        assert stock(old_id) is None

    def test_delete_not_found(self, db_session, seller):
        with pytest.raises(NotFound):
            asyncio.run(SalesService(db_session).delete_sale(404, seller.id, seller.role))

    def test_delete_by_other_user_forbidden(self, db_session, make_item, make_user, seller, stock):
        item = make_item(quantity=10)
        sale = self._create(db_session, seller, (item.id, 4, "5"))
        other = make_user("user")

        with pytest.raises(Forbidden):
            asyncio.run(SalesService(db_session).delete_sale(sale.id, other.id, other.role))

        assert stock(item.id) == 6

    def test_manager_cannot_delete_others_sale(self, db_session, make_item, seller, manager):
        item = make_item(quantity=10)
        sale = self._create(db_session, seller, (item.id, 1, "5"))

        with pytest.raises(Forbidden):
            asyncio.run(SalesService(db_session).delete_sale(sale.id, manager.id, manager.role))

    def test_admin_can_delete_any_sale(self, db_session, make_item, seller, admin, stock):
        item = make_item(quantity=10)
        sale = self._create(db_session, seller, (item.id, 4, "5"))

        asyncio.run(SalesService(db_session).delete_sale(sale.id, admin.id, admin.role))

        assert stock(item.id) == 10

    def test_storage_failure_restores_released_lines(self, db_session, make_item, seller, stock):
        x = make_item(name="X", quantity=10)
        y = make_item(name="Y", quantity=10)
        sale = self._create(db_session, seller, (x.id, 2, "1"), (y.id, 3, "1"))
        ledger = FlakyLedger(db_session, fail_release_on={2})

        with pytest.raises(StorageUnavailable):
            asyncio.run(SalesService(db_session, ledger=ledger).delete_sale(sale.id, seller.id, seller.role))

        assert stock(x.id) == 8
        assert stock(y.id) == 7
        assert db_session.query(Sale).count() == 1

    def test_create_then_delete_restores_all_quantities(self, db_session, make_item, seller, stock):
        items = [make_item(name=f"I{n}", quantity=10 + n) for n in range(4)]
        before = {item.id: stock(item.id) for item in items}

        sale = self._create(db_session, seller, *[(item.id, n + 1, "2") for n, item in enumerate(items)])
        asyncio.run(SalesService(db_session).delete_sale(sale.id, seller.id, seller.role))

        assert {item.id: stock(item.id) for item in items} == before


class TestUpdateSale:

    @pytest.fixture
    def sale(self, db_session, make_item, seller):
        item = make_item(quantity=10)
        return asyncio.run(SalesService(db_session).create_sale(sale_request((item.id, 2, "5")), seller.id))

    def test_update_notes_and_customer(self, db_session, sale, seller):
        patch = SaleUpdateRequest(customer="Globex", notes="entregar el lunes")

        updated = asyncio.run(SalesService(db_session).update_sale(sale.id, patch, seller.id, seller.role))

        assert updated.customer == "Globex"
        assert updated.notes == "entregar el lunes"
        assert updated.total == Decimal("10")

    def test_pending_to_completed(self, db_session, sale, seller):
        patch = SaleUpdateRequest(status=SaleStatus.COMPLETED)

        updated = asyncio.run(SalesService(db_session).update_sale(sale.id, patch, seller.id, seller.role))

        assert updated.status == "Completed"

    def test_completed_is_terminal(self, db_session, sale, seller):
        service = SalesService(db_session)
        asyncio.run(service.update_sale(sale.id, SaleUpdateRequest(status=SaleStatus.COMPLETED), seller.id, seller.role))

        with pytest.raises(InvalidArgument):
            asyncio.run(service.update_sale(sale.id, SaleUpdateRequest(status=SaleStatus.PENDING), seller.id, seller.role))

    def test_items_cannot_be_updated(self, db_session, sale, seller, stock):
        item_id = sale.items[0].item_id
        patch = SaleUpdateRequest(items=[SaleLineItem(item_id=item_id, quantity=5, price=Decimal("5"))])

        with pytest.raises(InvalidArgument):
            asyncio.run(SalesService(db_session).update_sale(sale.id, patch, seller.id, seller.role))

        assert stock(item_id) == 8

    def test_manager_can_update(self, db_session, sale, manager):
        patch = SaleUpdateRequest(status=SaleStatus.CANCELLED)

        updated = asyncio.run(SalesService(db_session).update_sale(sale.id, patch, manager.id, manager.role))

        assert updated.status == "Cancelled"

    def test_other_user_forbidden(self, db_session, sale, make_user):
        other = make_user("user")

        with pytest.raises(Forbidden):
            asyncio.run(SalesService(db_session).update_sale(
                sale.id, SaleUpdateRequest(notes="x"), other.id, other.role
            ))


def test_compute_sale_total():
    lines = [
        SaleLineItem(item_id=1, quantity=3, price=Decimal("1.10")),
        SaleLineItem(item_id=2, quantity=1, price=Decimal("0")),
        SaleLineItem(item_id=3, quantity=2, price=Decimal("4.45")),
    ]

    assert compute_sale_total(lines) == Decimal("12.20")
    assert compute_sale_total([]) == Decimal("0")


def test_sales_stats_only_count_completed(db_session, make_item, seller):
    item = make_item(quantity=10)
    service = SalesService(db_session)
    asyncio.run(service.create_sale(sale_request((item.id, 1, "5"), status=SaleStatus.COMPLETED), seller.id))
    asyncio.run(service.create_sale(sale_request((item.id, 1, "7"), status=SaleStatus.COMPLETED), seller.id))
    asyncio.run(service.create_sale(sale_request((item.id, 1, "100")), seller.id))

    stats = asyncio.run(service.get_stats(StatsPeriod.DAILY))

    assert len(stats) == 1
    assert stats[0]["count"] == 2
    assert stats[0]["total"] == 12.0
    assert set(stats[0]) == {"year", "month", "day", "count", "total"}
