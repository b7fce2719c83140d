# storefront/api/routers/products.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.api.deps import admin_user, http_error
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import (
    CategoryList,
    ProductCreate,
    ProductOut,
    ProductPage,
    ProductUpdate,
)
from storefront.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=ProductPage)
def list_products(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    category: Optional[str] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return ProductService(db).list_products(page=page, limit=limit, category=category, search=search)


@router.get("/categories", response_model=CategoryList)
def list_categories(db: Session = Depends(get_db)):
    return ProductService(db).list_categories()


@router.get("/category/{category}", response_model=ProductPage)
def list_by_category(
    category: str,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
):
    return ProductService(db).list_by_category(category, page=page, limit=limit)


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    try:
        return ProductService(db).get_product(product_id)
    except StorefrontError as e:
        raise http_error(e)


@router.post("", response_model=ProductOut, status_code=201, dependencies=[Depends(admin_user)])
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    return ProductService(db).create_product(payload)


@router.put("/{product_id}", response_model=ProductOut, dependencies=[Depends(admin_user)])
def update_product(product_id: int, payload: ProductUpdate, db: Session = Depends(get_db)):
    try:
        return ProductService(db).update_product(product_id, payload)
    except StorefrontError as e:
        raise http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{product_id}", dependencies=[Depends(admin_user)])
def delete_product(product_id: int, db: Session = Depends(get_db)):
    try:
        ProductService(db).delete_product(product_id)
    except StorefrontError as e:
        raise http_error(e)
    return {"message": "Product deleted successfully"}
