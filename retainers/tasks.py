"""
Celery tasks for retainer contracts.
"""

import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(name="retainers.tasks.process_monthly_retainer_payments")
def process_monthly_retainer_payments():
    """Runs on the 1st of each month; see ``CELERY beat_schedule``."""
    from retainers.services import RetainerService

    results = RetainerService.process_monthly_payments()
    if results["failed"]:
        logger.error(f"Monthly retainer payments had {results['failed']} failures: {results['errors']}")
    return results
