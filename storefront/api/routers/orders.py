# storefront/api/routers/orders.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.api.deps import admin_user, current_user, http_error
from storefront.data.database import get_db
from storefront.data.models.user import UserModel
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import (
    OrderCreate,
    OrderList,
    OrderOut,
    OrderPage,
    OrderStatus,
    OrderStatusUpdate,
)
from storefront.services.order_service import OrderService
from storefront.utils.retry import conflict_retry

router = APIRouter(prefix="/orders", tags=["orders"])


@conflict_retry()
def _place_with_retry(svc: OrderService, user_id: int, shipping_address: str):
    return svc.place_order(user_id, shipping_address)


@router.post("", response_model=OrderOut, status_code=201)
def create_order(
    payload: OrderCreate,
    user: UserModel = Depends(current_user),
    db: Session = Depends(get_db),
):
    """
    Places an order from the caller's cart.
    Write conflicts are retried from scratch; a 409 means they kept happening.
    """
    svc = OrderService(db)
    try:
        return _place_with_retry(svc, user.id, payload.shipping_address)
    except StorefrontError as e:
        raise http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("", response_model=OrderList)
def list_orders(user: UserModel = Depends(current_user), db: Session = Depends(get_db)):
    return OrderService(db).list_orders(user.id)


# declared before /{order_id} so "all" is not parsed as an id
@router.get("/all", response_model=OrderPage, dependencies=[Depends(admin_user)])
def list_all_orders(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    status: Optional[OrderStatus] = None,
    db: Session = Depends(get_db),
):
    svc = OrderService(db)
    return svc.list_all_orders(page=page, limit=limit, status=status.value if status else None)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    user: UserModel = Depends(current_user),
    db: Session = Depends(get_db),
):
    svc = OrderService(db)
    try:
        return svc.get_order(order_id, user.id)
    except StorefrontError as e:
        raise http_error(e)


@router.put("/{order_id}/status", response_model=OrderOut, dependencies=[Depends(admin_user)])
def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    db: Session = Depends(get_db),
):
    svc = OrderService(db)
    try:
        return svc.update_status(order_id, payload.status.value)
    except StorefrontError as e:
        raise http_error(e)
