# storefront/repos/product_repo.py
from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.orm import Session

from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def list_products(
        self,
        offset: int,
        limit: int,
        category: str | None = None,
        search: str | None = None,
    ) -> tuple[list[ProductModel], int]:
        filters = []
        if category:
            filters.append(ProductModel.category == category)
        if search:
            pattern = f"%{search}%"
            filters.append(
                or_(ProductModel.name.ilike(pattern), ProductModel.description.ilike(pattern))
            )

        total = self.db.execute(
            select(func.count()).select_from(ProductModel).where(*filters)
        ).scalar_one()

        rows = self.db.execute(
            select(ProductModel)
            .where(*filters)
            .order_by(ProductModel.created_at.desc(), ProductModel.id.desc())
            .offset(offset)
            .limit(limit)
        ).scalars().all()

        return list(rows), total

    def list_categories(self) -> list[str]:
        rows = self.db.execute(
            select(ProductModel.category)
            .where(ProductModel.category.is_not(None))
            .group_by(ProductModel.category)
            .order_by(ProductModel.category)
        ).scalars().all()
        return [c for c in rows if c]

    def add(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product

    def save(self, product: ProductModel) -> ProductModel:
        self.db.commit()
        self.db.refresh(product)
        return product

    def delete(self, product: ProductModel) -> None:
        #cart lines are advisory, drop them together with the product
        self.db.execute(delete(CartItemModel).where(CartItemModel.product_id == product.id))
        self.db.delete(product)
        self.db.commit()

    def decrement_stock(self, product_id: int, quantity: int) -> bool:
        """
        Conditional decrement: applies only if enough stock is left.

        Runs inside the caller's transaction and never commits. Returns False
        when the row no longer has ``quantity`` units, i.e. the value read
        earlier in the transaction is stale.
        """
        result = self.db.execute(
            update(ProductModel)
            .where(
                ProductModel.id == product_id,
                ProductModel.stock_quantity >= quantity,
            )
            .values(stock_quantity=ProductModel.stock_quantity - quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
