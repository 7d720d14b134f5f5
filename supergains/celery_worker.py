# supergains/celery_worker.py
from celery import Celery

from supergains.utils.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    CELERY_TASK_ALWAYS_EAGER,
    LOW_STOCK_CHECK_SECONDS,
)

celery_app = Celery(
    "supergains",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

#tasks have to be imported explicitly so the worker registers them
celery_app.conf.imports = (
    "supergains.tasks.alerts",
    "supergains.services.notification_service",
)

celery_app.conf.beat_schedule = {
    "check-low-stock": {
        "task": "supergains.tasks.alerts.check_low_stock_task",
        "schedule": LOW_STOCK_CHECK_SECONDS,
    },
}
celery_app.conf.timezone = "UTC"
celery_app.conf.task_always_eager = CELERY_TASK_ALWAYS_EAGER
