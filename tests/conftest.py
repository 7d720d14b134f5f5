# tests/conftest.py
import os

#settings are read at import time, so the environment is set before any supergains import
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_STORAGE_URI"] = "memory://"
os.environ["RATE_LIMIT_AUTH_MAX"] = "5"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "1"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["WEBHOOK_URLS"] = ""

from decimal import Decimal

import fakeredis
import pytest
from fastapi.testclient import TestClient

from supergains.api.deps import get_lock_service
from supergains.data.database import Base, SessionLocal, engine
from supergains.data.models import InventoryModel, ProductModel, UserModel
from supergains.main import app
from supergains.services.lock_service import LockService
from supergains.utils.rate_limit import get_limiter
from supergains.utils.security import create_access_token, hash_password

SHIPPING = {
    "street": "Calle 10 # 5-20",
    "city": "Bogota",
    "state": "Cundinamarca",
    "zip_code": "110111",
    "country": "CO",
}


@pytest.fixture(autouse=True)
def clean_state():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    get_limiter().reset()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def fake_redis():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def lock_service(fake_redis):
    return LockService(client=fake_redis)


@pytest.fixture
def client(lock_service):
    app.dependency_overrides[get_lock_service] = lambda: lock_service
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def make_user(email="user@supergains.com", role="user", password="secret123", active=True) -> UserModel:
    with SessionLocal() as session:
        user = UserModel(
            name=email.split("@")[0].title(),
            email=email,
            password_hash=hash_password(password),
            role=role,
            is_active=active,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        session.expunge(user)
        return user


def make_product(
    name="Whey Protein 2lb",
    price="50.00",
    stock=10,
    min_stock=5,
    max_stock=100,
    status=None,
    brand="Optimum",
    categories=None,
) -> int:
    with SessionLocal() as session:
        product = ProductModel(
            name=name,
            brand=brand,
            price=Decimal(price),
            stock=stock,
            categories=categories or ["protein"],
            is_active=True,
        )
        session.add(product)
        session.flush()
        session.add(
            InventoryModel(
                product_id=product.id,
                current_stock=stock,
                min_stock=min_stock,
                max_stock=max_stock,
                reserved_stock=0,
                total_sold=0,
                status=status or ("active" if stock > 0 else "out_of_stock"),
            )
        )
        session.commit()
        return product.id


def auth_headers(user: UserModel) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.email, user.role)}"}


def inventory_for(product_id: int) -> InventoryModel:
    with SessionLocal() as session:
        inventory = session.query(InventoryModel).filter_by(product_id=product_id).one()
        session.expunge(inventory)
        return inventory


@pytest.fixture
def user():
    return make_user()


@pytest.fixture
def admin():
    return make_user(email="admin@supergains.com", role="admin")


@pytest.fixture
def moderator():
    return make_user(email="mod@supergains.com", role="moderator")


@pytest.fixture
def user_headers(user):
    return auth_headers(user)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)
