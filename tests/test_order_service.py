"""Tests for order placement, order queries and status changes."""

from decimal import Decimal

import pytest
from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import OperationalError

from storefront.data.models import CartItemModel, OrderModel, ProductModel
from storefront.domain.errors import (
    ConflictError,
    EmptyCartError,
    InsufficientStockError,
    InvalidStatusError,
    NotFoundError,
)
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.order_service import OrderService


def order_count(db):
    return db.execute(select(func.count()).select_from(OrderModel)).scalar_one()


def cart_of(db, user):
    rows = db.execute(
        select(CartItemModel.product_id, CartItemModel.quantity).where(CartItemModel.user_id == user.id)
    ).all()
    return {pid: qty for pid, qty in rows}


def stock_of(db, product):
    return db.execute(
        select(ProductModel.stock_quantity).where(ProductModel.id == product.id)
    ).scalar_one()


@pytest.fixture
def service(db, notifications):
    return OrderService(db, notification_service=notifications)


class TestPlaceOrder:
    def test_two_line_order(self, db, service, make_user, make_product, put_in_cart, notifications):
        user = make_user()
        a = make_product("Product A", price="10.00", stock=5)
        b = make_product("Product B", price="5.00", stock=5)
        put_in_cart(user, a, 2)
        put_in_cart(user, b, 1)

        order = service.place_order(user.id, "1 Main St")

        assert order.total_amount == Decimal("25.00")
        assert order.status == "pending"
        assert order.shipping_address == "1 Main St"
        assert stock_of(db, a) == 3
        assert stock_of(db, b) == 4
        assert cart_of(db, user) == {}
        assert notifications.orders == [(user.id, order.id)]

    def test_lines_snapshot_price_and_name(self, db, service, make_user, make_product, put_in_cart):
        user = make_user()
        a = make_product("Lamp", price="34.99", stock=10)
        put_in_cart(user, a, 3)

        order = service.place_order(user.id, "addr")
        order_id = order.id

        db.execute(update(ProductModel).where(ProductModel.id == a.id).values(price=Decimal("99.00"), name="Renamed"))
        db.commit()

        reloaded = db.get(OrderModel, order_id)
        [line] = reloaded.items
        assert line.product_id == a.id
        assert line.product_name == "Lamp"
        assert line.quantity == 3
        assert line.price_at_purchase == Decimal("34.99")
        assert reloaded.total_amount == Decimal("104.97")

    def test_total_equals_sum_of_lines(self, db, service, make_user, make_product, put_in_cart):
        user = make_user()
        products = [
            make_product("P1", price="19.99", stock=10),
            make_product("P2", price="0.10", stock=10),
            make_product("P3", price="7.33", stock=10),
        ]
        for qty, p in zip((3, 7, 2), products):
            put_in_cart(user, p, qty)

        order = service.place_order(user.id, "addr")

        line_sum = sum((i.price_at_purchase * i.quantity for i in order.items), Decimal("0"))
        assert order.total_amount == line_sum
        assert order.total_amount == Decimal("75.33")
        assert len(order.items) == 3

    def test_empty_cart(self, db, service, make_user, notifications):
        user = make_user()

        with pytest.raises(EmptyCartError):
            service.place_order(user.id, "addr")

        assert order_count(db) == 0
        assert notifications.orders == []

    def test_insufficient_stock_changes_nothing(self, db, service, make_user, make_product, put_in_cart):
        user = make_user()
        a = make_product("Product A", price="10.00", stock=5)
        put_in_cart(user, a, 10)

        with pytest.raises(InsufficientStockError) as exc:
            service.place_order(user.id, "addr")

        assert exc.value.product_id == a.id
        assert "Product A" in str(exc.value)
        assert exc.value.requested == 10
        assert exc.value.available == 5
        assert stock_of(db, a) == 5
        assert cart_of(db, user) == {a.id: 10}
        assert order_count(db) == 0

    def test_one_bad_line_blocks_whole_order(self, db, service, make_user, make_product, put_in_cart):
        user = make_user()
        ok = make_product("Plenty", stock=50)
        short = make_product("Scarce", stock=1)
        put_in_cart(user, ok, 2)
        put_in_cart(user, short, 2)

        with pytest.raises(InsufficientStockError) as exc:
            service.place_order(user.id, "addr")

        assert exc.value.product_id == short.id
        assert stock_of(db, ok) == 50
        assert stock_of(db, short) == 1
        assert cart_of(db, user) == {ok.id: 2, short.id: 2}
        assert order_count(db) == 0

    def test_exact_stock_is_enough(self, db, service, make_user, make_product, put_in_cart):
        user = make_user()
        a = make_product(stock=4)
        put_in_cart(user, a, 4)

        service.place_order(user.id, "addr")

        assert stock_of(db, a) == 0

    @pytest.mark.parametrize("address", ["", "   ", None])
    def test_shipping_address_required(self, db, service, make_user, make_product, put_in_cart, address):
        user = make_user()
        a = make_product(stock=5)
        put_in_cart(user, a, 1)

        with pytest.raises(ValueError):
            service.place_order(user.id, address)

        assert stock_of(db, a) == 5
        assert order_count(db) == 0

    def test_only_own_cart_is_consumed(self, db, service, make_user, make_product, put_in_cart):
        alice = make_user()
        bob = make_user()
        a = make_product(stock=10)
        put_in_cart(alice, a, 2)
        put_in_cart(bob, a, 3)

        service.place_order(alice.id, "addr")

        assert cart_of(db, alice) == {}
        assert cart_of(db, bob) == {a.id: 3}
        assert stock_of(db, a) == 8

    def test_stale_stock_read_is_a_conflict(self, db, service, make_user, make_product, put_in_cart, monkeypatch):
        user = make_user()
        a = make_product(stock=5)
        put_in_cart(user, a, 3)

        original = CartRepo.get_lines_for_checkout

        def read_then_stock_moves(self, user_id):
            lines = original(self, user_id)
            # what another checkout would have done right after our read
            self.db.execute(
                update(ProductModel)
                .where(ProductModel.id == a.id)
                .values(stock_quantity=1)
                .execution_options(synchronize_session=False)
            )
            return lines

        monkeypatch.setattr(CartRepo, "get_lines_for_checkout", read_then_stock_moves)

        with pytest.raises(ConflictError):
            service.place_order(user.id, "addr")

        db.expire_all()
        assert order_count(db) == 0
        assert cart_of(db, user) == {a.id: 3}
        assert stock_of(db, a) == 5

    def test_cart_consumed_by_another_checkout_is_a_conflict(
        self, db, service, make_user, make_product, put_in_cart, monkeypatch
    ):
        user = make_user()
        a = make_product(stock=5)
        put_in_cart(user, a, 2)

        original = CartRepo.get_lines_for_checkout

        def read_then_cart_is_emptied(self, user_id):
            lines = original(self, user_id)
            # a second submit of the same cart committed right after our read
            self.db.execute(
                delete(CartItemModel)
                .where(CartItemModel.user_id == user_id)
                .execution_options(synchronize_session=False)
            )
            return lines

        monkeypatch.setattr(CartRepo, "get_lines_for_checkout", read_then_cart_is_emptied)

        with pytest.raises(ConflictError):
            service.place_order(user.id, "addr")

        db.expire_all()
        assert order_count(db) == 0
        assert stock_of(db, a) == 5
        assert cart_of(db, user) == {a.id: 2}

    def test_line_added_during_checkout_is_a_conflict(
        self, db, service, make_user, make_product, put_in_cart, monkeypatch
    ):
        user = make_user()
        a = make_product(name="A", stock=5)
        b = make_product(name="B", stock=5)
        put_in_cart(user, a, 1)

        original = CartRepo.get_lines_for_checkout

        def read_then_line_added(self, user_id):
            lines = original(self, user_id)
            self.db.execute(insert(CartItemModel).values(user_id=user_id, product_id=b.id, quantity=1))
            return lines

        monkeypatch.setattr(CartRepo, "get_lines_for_checkout", read_then_line_added)

        with pytest.raises(ConflictError):
            service.place_order(user.id, "addr")

        db.expire_all()
        assert order_count(db) == 0
        assert stock_of(db, a) == 5
        assert cart_of(db, user) == {a.id: 1}

    def test_resubmitted_cart_is_empty(self, db, service, make_user, make_product, put_in_cart):
        user = make_user()
        a = make_product(stock=5)
        put_in_cart(user, a, 2)

        service.place_order(user.id, "addr")
        with pytest.raises(EmptyCartError):
            service.place_order(user.id, "addr")

        assert order_count(db) == 1
        assert stock_of(db, a) == 3

    def test_locked_database_is_a_conflict(self, db, service, make_user, make_product, put_in_cart, monkeypatch):
        user = make_user()
        a = make_product(stock=5)
        put_in_cart(user, a, 1)

        def locked(self, product_id, quantity):
            raise OperationalError("UPDATE products", {}, Exception("database is locked"))

        monkeypatch.setattr(ProductRepo, "decrement_stock", locked)

        with pytest.raises(ConflictError):
            service.place_order(user.id, "addr")

        assert order_count(db) == 0
        assert cart_of(db, user) == {a.id: 1}

    def test_other_database_errors_propagate(self, db, service, make_user, make_product, put_in_cart, monkeypatch):
        user = make_user()
        a = make_product(stock=5)
        put_in_cart(user, a, 1)

        def broken(self, user_id):
            raise OperationalError("DELETE FROM cart_items", {}, Exception("disk I/O error"))

        monkeypatch.setattr(CartRepo, "clear", broken)

        with pytest.raises(OperationalError):
            service.place_order(user.id, "addr")

        assert order_count(db) == 0
        assert stock_of(db, a) == 5

    def test_notification_failure_keeps_order(self, db, make_user, make_product, put_in_cart):
        class FailingNotifications:
            def send_order_notification(self, user_id, order_id):
                return False

        user = make_user()
        a = make_product(stock=5)
        put_in_cart(user, a, 1)

        order = OrderService(db, notification_service=FailingNotifications()).place_order(user.id, "addr")

        assert order.id is not None
        assert order_count(db) == 1


class TestOrderQueries:
    def test_get_order_scoped_to_owner(self, db, service, make_user, make_product, put_in_cart):
        owner = make_user()
        other = make_user()
        a = make_product(stock=5)
        put_in_cart(owner, a, 1)
        order = service.place_order(owner.id, "addr")

        assert service.get_order(order.id, owner.id).id == order.id
        with pytest.raises(NotFoundError):
            service.get_order(order.id, other.id)
        with pytest.raises(NotFoundError):
            service.get_order(9999, owner.id)

    def test_list_orders_newest_first(self, db, service, make_user, make_product, put_in_cart):
        user = make_user()
        a = make_product(stock=10)
        put_in_cart(user, a, 1)
        first = service.place_order(user.id, "addr")
        put_in_cart(user, a, 2)
        second = service.place_order(user.id, "addr")

        orders = service.list_orders(user.id)["orders"]

        assert [o.id for o in orders] == [second.id, first.id]

    def test_list_all_orders_paginates_and_filters(self, db, service, make_user, make_product, put_in_cart):
        a = make_product(stock=100)
        ids = []
        for _ in range(5):
            user = make_user()
            put_in_cart(user, a, 1)
            ids.append(service.place_order(user.id, "addr").id)
        service.update_status(ids[0], "shipped")

        page = service.list_all_orders(page=2, limit=2)
        assert page["pagination"] == {"total": 5, "page": 2, "limit": 2, "pages": 3}
        assert len(page["orders"]) == 2

        shipped = service.list_all_orders(status="shipped")
        assert [o.id for o in shipped["orders"]] == [ids[0]]
        assert shipped["pagination"]["total"] == 1

        with pytest.raises(InvalidStatusError):
            service.list_all_orders(status="lost")


class TestUpdateStatus:
    @pytest.fixture
    def order(self, service, make_user, make_product, put_in_cart):
        user = make_user()
        put_in_cart(user, make_product(stock=5), 1)
        return service.place_order(user.id, "addr")

    def test_any_status_reachable_from_any_other(self, service, order):
        for status in ("processing", "shipped", "delivered", "pending", "cancelled", "processing"):
            assert service.update_status(order.id, status).status == status

    def test_status_change_leaves_amounts_alone(self, service, order):
        total = order.total_amount
        lines = [(i.product_id, i.quantity, i.price_at_purchase) for i in order.items]

        updated = service.update_status(order.id, "delivered")

        assert updated.total_amount == total
        assert [(i.product_id, i.quantity, i.price_at_purchase) for i in updated.items] == lines

    def test_unknown_status(self, service, order):
        with pytest.raises(InvalidStatusError):
            service.update_status(order.id, "lost")
        assert service.get_order(order.id, order.user_id).status == "pending"

    def test_missing_order(self, service):
        with pytest.raises(NotFoundError):
            service.update_status(12345, "shipped")

    def test_notifies_only_on_change(self, service, order, notifications):
        service.update_status(order.id, "pending")
        service.update_status(order.id, "shipped")

        assert notifications.statuses == [(order.user_id, order.id, "shipped")]
