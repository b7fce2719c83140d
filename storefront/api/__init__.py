# storefront/api/__init__.py
from fastapi import APIRouter

from storefront.api.routers import carts, orders, products, users

api_router = APIRouter(prefix="/api")
api_router.include_router(users.router)
api_router.include_router(products.router)
api_router.include_router(carts.router)
api_router.include_router(orders.router)
