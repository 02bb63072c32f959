"""
Celery Worker Configuration
Sets up Celery with Redis as message broker and result backend.

Run with:
    celery -A restopos.celery_worker.celery_app worker --loglevel=info
"""

from celery import Celery

from restopos.core.config import get_settings

settings = get_settings()

# Create Celery app
celery_app = Celery(
    'restopos_worker',
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=['restopos.tasks']  # Module containing our tasks
)

# Celery configuration
celery_app.conf.update(
    # Task settings
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone=settings.report_timezone,
    enable_utc=True,

    # Ledger writes are serialized by the file lock anyway
    worker_prefetch_multiplier=1,
    worker_concurrency=2,

    # Result settings
    result_expires=3600,  # Results expire after 1 hour

    # Task execution settings
    task_acks_late=True,  # Acknowledge task after completion
    task_reject_on_worker_lost=True,  # Requeue task if worker dies

    broker_connection_retry_on_startup=True,
)


if __name__ == '__main__':
    celery_app.start()
