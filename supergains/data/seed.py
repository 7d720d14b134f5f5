# supergains/data/seed.py
import os
from decimal import Decimal

from supergains.data.database import SessionLocal, init_db
from supergains.data.models import ProductModel, UserModel
from supergains.domain.schemas import ProductCreate, UserRegister
from supergains.services.product_service import ProductService
from supergains.services.user_service import UserService
from supergains.utils.logging import get_logger

logger = get_logger(__name__)

SAMPLE_PRODUCTS = [
    {
        "name": "Whey Protein Gold 2lb",
        "brand": "Optimum Nutrition",
        "price": Decimal("8900"),
        "categories": ["protein"],
        "stock": 40,
    },
    {
        "name": "Creatine Monohydrate 300g",
        "brand": "MuscleTech",
        "price": Decimal("6500"),
        "categories": ["creatine"],
        "stock": 25,
    },
    {
        "name": "Pre-Workout C4 Original",
        "brand": "Cellucor",
        "price": Decimal("9900"),
        "categories": ["pre-workout"],
        "stock": 10,
        "min_stock": 10,
    },
    {
        "name": "BCAA 2:1:1 Powder",
        "brand": "Scivation",
        "price": Decimal("7500"),
        "categories": ["amino-acids"],
        "stock": 3,
    },
    {
        "name": "Multivitamin Daily",
        "brand": "Universal",
        "price": Decimal("4500"),
        "categories": ["vitamins", "health"],
        "stock": 0,
    },
]


def create_admin(email: str, password: str, name: str = "Admin") -> UserModel:
    db = SessionLocal()
    try:
        service = UserService(db)
        existing = service.repo.get_by_email(email)
        if existing:
            return existing
        return service.create_user(UserRegister(name=name, email=email, password=password), role="admin")
    finally:
        db.close()


def seed():
    db = SessionLocal()
    try:
        #not forcing: only seed if empty
        if db.query(ProductModel).first():
            return

        service = ProductService(db)
        for data in SAMPLE_PRODUCTS:
            service.create_product(ProductCreate(**data))
        logger.info(f"Seeded {len(SAMPLE_PRODUCTS)} products")
    finally:
        db.close()


if __name__ == "__main__":
    init_db()
    seed()
    admin_email = os.getenv("ADMIN_EMAIL")
    admin_password = os.getenv("ADMIN_PASSWORD")
    if admin_email and admin_password:
        create_admin(admin_email, admin_password)
