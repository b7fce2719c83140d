from decimal import Decimal
from typing import Any, Dict

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.cart_item import CartItemModel
from storefront.domain.errors import ConflictError, InsufficientStockError, NotFoundError
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

CENT = Decimal("0.01")


class CartService:
    """
    Per-user cart. Commands (add, update, remove, clear) change state,
    the query (get_cart) only reads.

    The cart is advisory: it never reserves stock. The stock checks below
    only spare the user a failed checkout. Placement re-checks everything.
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)

    #query
    def get_cart(self, user_id: int) -> Dict[str, Any]:
        items = self.repo.get_items(user_id)

        lines = []
        total = Decimal("0.00")
        for i in items:
            line_total = (i.product.price * i.quantity).quantize(CENT)
            total += line_total
            lines.append(
                {
                    "product_id": i.product_id,
                    "quantity": i.quantity,
                    "line_total": line_total,
                    "product": i.product,
                }
            )

        return {
            "user_id": user_id,
            "items": lines,
            "total": total.quantize(CENT),
            "count": len(lines),
        }

    #commands
    def add_item(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        if quantity <= 0:
            raise ValueError("Quantity must be at least 1")

        product = self.products.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")

        existing = self.repo.get_item(user_id, product_id)
        new_quantity = quantity + (existing.quantity if existing else 0)

        if product.stock_quantity < new_quantity:
            raise InsufficientStockError(product.id, product.name, new_quantity, product.stock_quantity)

        if existing:
            logger.info(
                f"Product {product_id} already in cart of user {user_id}, "
                f"quantity {existing.quantity} -> {new_quantity}"
            )
            self.repo.increment_item(user_id, product_id, quantity)
        else:
            logger.info(f"Adding product {product_id} x{quantity} to cart of user {user_id}")
            self.repo.add_item(
                CartItemModel(user_id=user_id, product_id=product_id, quantity=quantity)
            )

        self._commit()
        return self.get_cart(user_id)

    def update_item(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        item = self.repo.get_item(user_id, product_id)
        if not item:
            raise NotFoundError("Cart item not found")

        # a line never holds less than one unit
        if quantity <= 0:
            return self.remove_item(user_id, product_id)

        product = self.products.get_product(product_id)
        if product.stock_quantity < quantity:
            raise InsufficientStockError(product.id, product.name, quantity, product.stock_quantity)

        logger.info(f"Setting product {product_id} in cart of user {user_id} to {quantity}")
        item.quantity = quantity
        self._commit()
        return self.get_cart(user_id)

    def remove_item(self, user_id: int, product_id: int) -> Dict[str, Any]:
        item = self.repo.get_item(user_id, product_id)
        if not item:
            raise NotFoundError("Cart item not found")

        logger.info(f"Removing product {product_id} from cart of user {user_id}")
        self.repo.delete_item(item)
        self._commit()
        return self.get_cart(user_id)

    def clear(self, user_id: int) -> Dict[str, Any]:
        removed = self.repo.clear(user_id)
        self._commit()
        logger.info(f"Cleared cart of user {user_id} ({removed} lines)")
        return self.get_cart(user_id)

    def _commit(self):
        try:
            self.repo.commit()
        except IntegrityError as e:
            #two requests created the same (user, product) line at once
            self.repo.rollback()
            logger.warning(f"Cart write conflict: {e.orig}")
            raise ConflictError("Cart was modified concurrently, please retry") from e
