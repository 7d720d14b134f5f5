# supergains/services/notification_service.py
from supergains.celery_worker import celery_app
from supergains.services.webhook_client import WebhookClient
from supergains.utils.logging import get_logger
from supergains.utils.settings import WEBHOOK_URLS

logger = get_logger(__name__)


class NotificationService:
    """
    Hands notifications and webhook events to Celery.
    Runs after the database commit, so a broker outage is logged
    and never undoes a committed order or stock change.
    """

    @staticmethod
    def send_order_notification(user_id: int, order_id: int, order_number: str):
        try:
            send_order_notification_task.delay(user_id, order_id, order_number)
        except Exception as e:
            logger.warning(f"Could not queue notification for order {order_number}: {e}")

    @staticmethod
    def publish_event(event: str, data: dict):
        if not WEBHOOK_URLS:
            return
        try:
            dispatch_event_task.delay(event, data)
        except Exception as e:
            logger.warning(f"Could not queue webhook event {event}: {e}")


@celery_app.task(name="supergains.services.notification_service.send_order_notification_task")
def send_order_notification_task(user_id: int, order_id: int, order_number: str):
    """
    Order confirmation. E-mail delivery is out of scope, the task only logs.
    """
    logger.info(f"[NOTIFICATION] User {user_id}: order {order_number} (id {order_id}) received")
    return {"user_id": user_id, "order_id": order_id, "status": "sent"}


@celery_app.task(name="supergains.services.notification_service.dispatch_event_task")
def dispatch_event_task(event: str, data: dict):
    results = WebhookClient().send_event(event, data)
    delivered = sum(1 for ok in results.values() if ok)
    logger.info(f"Webhook event {event} delivered to {delivered}/{len(results)} endpoints")
    return results
