# storefront/api/routers/carts.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront.api.deps import current_user, http_error
from storefront.data.database import get_db
from storefront.data.models.user import UserModel
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import CartItemIn, CartItemUpdate, CartOut
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=CartOut)
def get_cart(user: UserModel = Depends(current_user), db: Session = Depends(get_db)):
    return CartService(db).get_cart(user.id)


@router.post("/items", response_model=CartOut, status_code=201)
def add_item(
    payload: CartItemIn,
    user: UserModel = Depends(current_user),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    try:
        return svc.add_item(user.id, payload.product_id, payload.quantity)
    except StorefrontError as e:
        raise http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.put("/items/{product_id}", response_model=CartOut)
def update_item(
    product_id: int,
    payload: CartItemUpdate,
    user: UserModel = Depends(current_user),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    try:
        return svc.update_item(user.id, product_id, payload.quantity)
    except StorefrontError as e:
        raise http_error(e)


@router.delete("/items/{product_id}", response_model=CartOut)
def remove_item(
    product_id: int,
    user: UserModel = Depends(current_user),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    try:
        return svc.remove_item(user.id, product_id)
    except StorefrontError as e:
        raise http_error(e)


@router.delete("", response_model=CartOut)
def clear_cart(user: UserModel = Depends(current_user), db: Session = Depends(get_db)):
    return CartService(db).clear(user.id)
