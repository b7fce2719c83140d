# storefront/repos/cart_repo.py
from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session, joinedload

from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.product import ProductModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_items(self, user_id: int) -> list[CartItemModel]:
        return list(
            self.db.execute(
                select(CartItemModel)
                .options(joinedload(CartItemModel.product))
                .where(CartItemModel.user_id == user_id)
                .order_by(CartItemModel.created_at.desc(), CartItemModel.id.desc())
            ).scalars().all()
        )

    def get_item(self, user_id: int, product_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.user_id == user_id,
                CartItemModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def get_lines_for_checkout(self, user_id: int) -> list[tuple[CartItemModel, ProductModel]]:
        """
        Cart lines joined with their products in one read.

        Both the cart lines and the product rows are locked (FOR UPDATE OF
        cart_items, products) in product id order, so two checkouts touching
        the same rows queue up instead of deadlocking. Backends without row
        locks ignore the clause; there the checkout relies on the rowcounts
        of the stock decrement and the cart clear.
        """
        rows = self.db.execute(
            select(CartItemModel, ProductModel)
            .join(ProductModel, ProductModel.id == CartItemModel.product_id)
            .where(CartItemModel.user_id == user_id)
            .order_by(ProductModel.id)
            .with_for_update(of=[CartItemModel, ProductModel])
        ).all()
        return [(item, product) for item, product in rows]

    def add_item(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        return item

    def increment_item(self, user_id: int, product_id: int, quantity: int) -> int:
        """Adds to an existing line in SQL, so concurrent adds both count."""
        result = self.db.execute(
            update(CartItemModel)
            .where(
                CartItemModel.user_id == user_id,
                CartItemModel.product_id == product_id,
            )
            .values(quantity=CartItemModel.quantity + quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def delete_item(self, item: CartItemModel) -> None:
        self.db.delete(item)

    def clear(self, user_id: int) -> int:
        result = self.db.execute(
            delete(CartItemModel)
            .where(CartItemModel.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
