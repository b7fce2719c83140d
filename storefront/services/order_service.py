# storefront/services/order_service.py
from decimal import Decimal

from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderItemModel, OrderModel
from storefront.domain.errors import (
    ConflictError,
    EmptyCartError,
    InsufficientStockError,
    InvalidStatusError,
    NotFoundError,
)
from storefront.domain.schemas import OrderStatus
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.notification_service import NotificationService
from storefront.utils.logging import get_logger
from storefront.utils.pagination import clamp, pagination
from storefront.utils.retry import is_retryable_db_error

logger = get_logger(__name__)

CENT = Decimal("0.01")
STATUSES = {s.value for s in OrderStatus}


class OrderService:
    """
    Orders: placement from the cart, queries, and administrative status changes.

    Placement is the only operation that touches stock. It runs entirely on
    the session passed in and either commits everything or nothing.
    """

    def __init__(self, db: Session, notification_service: NotificationService | None = None):
        self.db = db
        self.repo = OrderRepo(db)
        self.carts = CartRepo(db)
        self.products = ProductRepo(db)
        self.notification_service = notification_service or NotificationService()

    def place_order(self, user_id: int, shipping_address: str) -> OrderModel:
        """
        Turns the user's cart into an order.

        1. reads cart lines joined with product rows (locked)
        2. checks every line against current stock
        3. computes the total from the prices just read
        4. writes the order and its lines (price snapshot)
        5. decrements stock, conditionally
        6. empties the cart
        7. commits

        Raises EmptyCartError, InsufficientStockError or ConflictError. On any
        failure the transaction is rolled back and nothing is visible.
        """
        if not shipping_address or not shipping_address.strip():
            raise ValueError("Shipping address is required")

        try:
            lines = self.carts.get_lines_for_checkout(user_id)
            if not lines:
                raise EmptyCartError()

            for item, product in lines:
                if item.quantity > product.stock_quantity:
                    raise InsufficientStockError(
                        product.id, product.name, item.quantity, product.stock_quantity
                    )

            total = sum(
                (product.price * item.quantity for item, product in lines),
                Decimal("0.00"),
            ).quantize(CENT)

            order = OrderModel(
                user_id=user_id,
                total_amount=total,
                shipping_address=shipping_address.strip(),
                status=OrderStatus.PENDING.value,
                items=[
                    OrderItemModel(
                        product_id=product.id,
                        product_name=product.name,
                        quantity=item.quantity,
                        price_at_purchase=product.price,
                    )
                    for item, product in lines
                ],
            )
            self.repo.add(order)

            for item, product in lines:
                if not self.products.decrement_stock(product.id, item.quantity):
                    # stock moved after our read; the caller may retry from scratch
                    raise ConflictError(f"Stock for product {product.id} changed during checkout")

            # the cart we priced must be exactly the cart we consume
            cleared = self.carts.clear(user_id)
            if cleared != len(lines):
                raise ConflictError(
                    f"Cart of user {user_id} changed during checkout "
                    f"({len(lines)} lines read, {cleared} cleared)"
                )

            self.db.commit()

        except DBAPIError as e:
            self.db.rollback()
            if is_retryable_db_error(e):
                logger.warning(f"Order placement for user {user_id} hit a write conflict: {e.orig}")
                raise ConflictError() from e
            raise
        except Exception as e:
            self.db.rollback()
            logger.warning(f"Order placement for user {user_id} rolled back: {e}")
            raise

        logger.info(f"Order {order.id} placed by user {user_id}, total {total}, {len(lines)} lines")

        self.notification_service.send_order_notification(user_id, order.id)

        return order

    def get_order(self, order_id: int, user_id: int) -> OrderModel:
        order = self.repo.get_order(order_id)

        # someone else's order is reported exactly like a missing one
        if not order or order.user_id != user_id:
            raise NotFoundError("Order not found")

        return order

    def list_orders(self, user_id: int) -> dict:
        return {"orders": self.repo.list_for_user(user_id)}

    def list_all_orders(self, page: int = 1, limit: int | None = None, status: str | None = None) -> dict:
        if status is not None and status not in STATUSES:
            raise InvalidStatusError(f"Unknown order status: {status}")

        page, limit, offset = clamp(page, limit)
        orders, total = self.repo.list_all(offset, limit, status=status)
        return {"orders": orders, "pagination": pagination(total, page, limit)}

    def update_status(self, order_id: int, status: str) -> OrderModel:
        """
        Administrative status change. Any known status may follow any other;
        only the value itself is validated.
        """
        status = getattr(status, "value", status)
        if status not in STATUSES:
            raise InvalidStatusError(f"Unknown order status: {status}")

        order = self.repo.get_order(order_id)
        if not order:
            raise NotFoundError("Order not found")

        previous = order.status
        order = self.repo.update_order_status(order_id, status)

        logger.info(f"Order {order_id} status {previous} -> {status}")

        if previous != status:
            self.notification_service.send_status_notification(order.user_id, order.id, status)

        return order
