"""Pytest fixtures for storefront tests."""

import os

# must be set before storefront modules read their settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "1"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.data.database import Base, get_db, make_engine
from storefront.data.models import CartItemModel, ProductModel, UserModel
from storefront.main import create_app


class RecordingNotifications:
    """Stands in for NotificationService and remembers what was sent."""

    def __init__(self):
        self.orders = []
        self.statuses = []

    def send_order_notification(self, user_id, order_id):
        self.orders.append((user_id, order_id))
        return True

    def send_status_notification(self, user_id, order_id, status):
        self.statuses.append((user_id, order_id, status))
        return True


@pytest.fixture
def engine():
    """In-memory database shared by every connection of one test."""
    eng = make_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def notifications():
    return RecordingNotifications()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(is_admin=False, email=None):
        counter["n"] += 1
        user = UserModel(
            email=email or f"user{counter['n']}@example.com",
            first_name="Test",
            last_name="User",
            is_admin=is_admin,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_product(db):
    def _make(name="Widget", price="10.00", stock=5, category="Gadgets", description=None):
        product = ProductModel(
            name=name,
            description=description or f"{name} description",
            price=Decimal(price),
            stock_quantity=stock,
            category=category,
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


@pytest.fixture
def put_in_cart(db):
    """Writes a cart line directly, bypassing the stock courtesy check."""

    def _put(user, product, quantity):
        db.add(CartItemModel(user_id=user.id, product_id=product.id, quantity=quantity))
        db.commit()

    return _put


@pytest.fixture
def client(session_factory):
    app = create_app(lifespan_handler=None)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)
