# storefront/data/seed.py
"""Seeds an empty database with two users and a small catalog.

    python -m storefront.data.seed
"""
from decimal import Decimal

from storefront.data.database import Base, SessionLocal, engine
from storefront.data.models import ProductModel, UserModel
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

USERS = [
    {"email": "admin@example.com", "first_name": "Admin", "last_name": "User", "is_admin": True},
    {"email": "user@example.com", "first_name": "John", "last_name": "Doe", "is_admin": False},
]

PRODUCTS = [
    ("Wireless Headphones", "High-quality wireless headphones with noise cancellation", "99.99", 50, "Electronics"),
    ("Smart Watch", "Feature-rich smartwatch with fitness tracking", "199.99", 30, "Electronics"),
    ("Laptop Backpack", "Durable backpack with laptop compartment", "49.99", 100, "Accessories"),
    ("USB-C Hub", "Multi-port USB-C hub with HDMI and USB 3.0", "39.99", 75, "Electronics"),
    ("Mechanical Keyboard", "RGB mechanical keyboard with blue switches", "129.99", 40, "Electronics"),
    ("Wireless Mouse", "Ergonomic wireless mouse with precision tracking", "29.99", 80, "Electronics"),
    ("Phone Stand", "Adjustable phone stand for desk", "19.99", 150, "Accessories"),
    ("Webcam HD", "1080p HD webcam with built-in microphone", "79.99", 45, "Electronics"),
    ("Desk Lamp", "LED desk lamp with adjustable brightness", "34.99", 60, "Accessories"),
    ("Cable Organizer", "Cable management system for desk", "14.99", 200, "Accessories"),
]


def seed(session_factory=SessionLocal) -> bool:
    db = session_factory()
    try:
        # only seed if empty
        if db.query(ProductModel).first():
            logger.info("Catalog not empty, skipping seed")
            return False

        db.add_all(UserModel(**u) for u in USERS)
        db.add_all(
            ProductModel(
                name=name,
                description=description,
                price=Decimal(price),
                stock_quantity=stock,
                category=category,
            )
            for name, description, price, stock, category in PRODUCTS
        )
        db.commit()
        logger.info(f"Seeded {len(USERS)} users and {len(PRODUCTS)} products")
        return True
    finally:
        db.close()


if __name__ == "__main__":
    Base.metadata.create_all(bind=engine)
    seed()
