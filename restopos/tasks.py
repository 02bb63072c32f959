"""
Celery Tasks
Background tasks for writing recorded orders to the Excel ledger.
"""

import logging
import time

from restopos.celery_worker import celery_app
from restopos.services.excel_manager import ExcelManager

logger = logging.getLogger(__name__)


@celery_app.task(
    bind=True,
    max_retries=3,
    default_retry_delay=5,
    autoretry_for=(Exception,),
    retry_backoff=True
)
def export_order_to_excel(self, order_data: dict) -> dict:
    """
    Append an order to the Excel ledger.
    This task runs asynchronously via Celery worker.

    Args:
        order_data: Dictionary containing order information

    Returns:
        dict: Result of the export operation
    """
    task_id = self.request.id
    order_number = order_data.get('order_number', 'unknown')

    logger.info(f"Task {task_id}: exporting order #{order_number}")
    start_time = time.time()

    result = ExcelManager.export_order(order_data)

    elapsed = round(time.time() - start_time, 3)
    result['task_id'] = task_id
    result['processing_time_seconds'] = elapsed

    if result['success']:
        logger.info(f"Task {task_id}: order #{order_number} exported in {elapsed}s")
    else:
        logger.warning(f"Task {task_id}: order #{order_number} not exported - {result['message']}")

    return result

