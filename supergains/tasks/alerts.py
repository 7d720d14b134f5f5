# supergains/tasks/alerts.py
from supergains.celery_worker import celery_app
from supergains.data.database import SessionLocal
from supergains.repos.inventory_repo import InventoryRepo
from supergains.services.notification_service import NotificationService
from supergains.utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(name="supergains.tasks.alerts.check_low_stock_task")
def check_low_stock_task():
    logger.info("Low stock check started")

    db = SessionLocal()
    try:
        records = InventoryRepo(db).list_low_stock()
        logger.info(f"Found {len(records)} products at or below minimum stock")

        alerts = []
        for inventory in records:
            alert = {
                "product_id": inventory.product_id,
                "product_name": inventory.product.name if inventory.product else None,
                "current_stock": inventory.current_stock,
                "min_stock": inventory.min_stock,
                "status": inventory.status,
            }
            logger.warning(
                f"Low stock: product {inventory.product_id} has {inventory.current_stock} "
                f"(min {inventory.min_stock})"
            )
            NotificationService.publish_event("inventory.low_stock", alert)
            alerts.append(alert)

        return {"alerts": len(alerts), "products": [a["product_id"] for a in alerts]}
    finally:
        db.close()
