# storefront/domain/errors.py
"""
Domain errors raised by the services.

Every error carries the HTTP status it maps to and a ``detail`` payload, so
routers can translate them without knowing each subclass.
"""


class StorefrontError(Exception):
    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def detail(self):
        return str(self)


class NotFoundError(StorefrontError):
    status_code = 404
    default_message = "Not found"


class EmptyCartError(StorefrontError):
    default_message = "Cart is empty"


class InsufficientStockError(StorefrontError):
    def __init__(self, product_id: int, product_name: str, requested: int, available: int):
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available
        super().__init__(f"Insufficient stock for {product_name}")

    @property
    def detail(self):
        return {
            "message": str(self),
            "product_id": self.product_id,
            "product_name": self.product_name,
            "requested": self.requested,
            "available": self.available,
        }


class ConflictError(StorefrontError):
    """Concurrent modification detected; the whole operation is safe to retry."""

    status_code = 409
    default_message = "Concurrent modification, please retry"


class InvalidStatusError(StorefrontError):
    default_message = "Invalid order status"


class EmailTakenError(StorefrontError):
    default_message = "Email already registered"
