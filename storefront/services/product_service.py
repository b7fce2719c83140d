# storefront/services/product_service.py
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.domain.errors import NotFoundError
from storefront.domain.schemas import ProductCreate, ProductUpdate
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger
from storefront.utils.pagination import clamp, pagination

logger = get_logger(__name__)


class ProductService:
    """Catalog queries plus the administrative CRUD commands."""

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    #queries
    def list_products(
        self,
        page: int = 1,
        limit: int | None = None,
        category: str | None = None,
        search: str | None = None,
    ) -> dict:
        page, limit, offset = clamp(page, limit)
        search = search.strip() if search else None
        products, total = self.repo.list_products(offset, limit, category=category, search=search)
        return {"products": products, "pagination": pagination(total, page, limit)}

    def list_by_category(self, category: str, page: int = 1, limit: int | None = None) -> dict:
        return self.list_products(page=page, limit=limit, category=category)

    def list_categories(self) -> dict:
        return {"categories": self.repo.list_categories()}

    def get_product(self, product_id: int) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")
        return product

    #commands
    def create_product(self, payload: ProductCreate) -> ProductModel:
        product = self.repo.add(ProductModel(**payload.model_dump()))
        logger.info(f"Created product {product.id} ({product.name})")
        return product

    def update_product(self, product_id: int, payload: ProductUpdate) -> ProductModel:
        product = self.get_product(product_id)
        changes = payload.model_dump(exclude_unset=True)
        for field in ("name", "price", "stock_quantity"):
            if field in changes and changes[field] is None:
                raise ValueError(f"{field} cannot be null")

        for field, value in changes.items():
            setattr(product, field, value)
        product = self.repo.save(product)
        logger.info(f"Updated product {product_id}: {sorted(changes)}")
        return product

    def delete_product(self, product_id: int) -> None:
        product = self.get_product(product_id)
        self.repo.delete(product)
        logger.info(f"Deleted product {product_id}")
