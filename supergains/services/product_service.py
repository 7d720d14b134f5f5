# supergains/services/product_service.py
from decimal import Decimal

from sqlalchemy.orm import Session

from supergains.data.models.inventory import InventoryModel
from supergains.data.models.product import ProductModel
from supergains.domain.errors import NotFoundError
from supergains.domain.schemas import ProductCreate
from supergains.repos.inventory_repo import InventoryRepo
from supergains.repos.product_repo import ProductRepo
from supergains.utils.logging import get_logger

logger = get_logger(__name__)


class ProductService:
    def __init__(self, db: Session):
        self.repo = ProductRepo(db)
        self.inventory_repo = InventoryRepo(db)

    def list_products(
        self,
        q: str | None = None,
        category: str | None = None,
        brand: str | None = None,
        min_price: Decimal | None = None,
        max_price: Decimal | None = None,
        page: int = 1,
        limit: int = 50,
    ) -> list[ProductModel]:
        limit = min(100, max(1, limit))
        page = max(1, page)

        products = self.repo.search(q=q, brand=brand, min_price=min_price, max_price=max_price)
        if category:
            wanted = category.lower()
            products = [p for p in products if wanted in (c.lower() for c in p.categories or [])]

        start = (page - 1) * limit
        return products[start:start + limit]

    def get_product(self, product_id: int) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product or not product.is_active:
            raise NotFoundError("Product not found")
        return product

    def create_product(self, payload: ProductCreate) -> ProductModel:
        """
        Use Case: create a product and its 1:1 inventory record in one commit.
        """
        if payload.max_stock < payload.min_stock:
            raise ValueError("max_stock must be greater than or equal to min_stock")

        product = self.repo.add(
            ProductModel(
                name=payload.name.strip(),
                brand=payload.brand,
                price=payload.price,
                stock=payload.stock,
                description=payload.description,
                image_url=payload.image_url,
                categories=payload.categories,
                is_active=True,
            )
        )
        inventory = InventoryModel(
            product_id=product.id,
            current_stock=payload.stock,
            min_stock=payload.min_stock,
            max_stock=payload.max_stock,
            reserved_stock=0,
            total_sold=0,
            status="active" if payload.stock > 0 else "out_of_stock",
        )
        self.inventory_repo.add(inventory)
        self.repo.commit()

        logger.info(f"Created product {product.id} with {payload.stock} units in stock")
        return self.get_product(product.id)

    def update_product(self, product_id: int, data: dict) -> ProductModel:
        product = self.get_product(product_id)
        for field, value in data.items():
            setattr(product, field, value)
        self.repo.commit()
        logger.info(f"Updated product {product_id}: {sorted(data)}")
        return self.get_product(product_id)

    def delete_product(self, product_id: int) -> None:
        """Soft delete: product hidden, inventory discontinued."""
        product = self.get_product(product_id)
        product.is_active = False

        inventory = self.inventory_repo.get_by_product(product_id)
        if inventory:
            inventory.status = "discontinued"

        self.repo.commit()
        logger.info(f"Product {product_id} discontinued")
