# supergains/api/__init__.py
from fastapi import APIRouter

from supergains.api.routers import carts, dashboard, health, inventory, orders, products, users

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(users.router)
api_router.include_router(products.router)
api_router.include_router(inventory.router)
api_router.include_router(carts.router)
api_router.include_router(orders.router)
api_router.include_router(dashboard.router)
