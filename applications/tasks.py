"""
Celery tasks for applications.
"""

import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(name="applications.tasks.auto_approve_applications", ignore_result=False)
def auto_approve_applications():
    """Approve pending applications whose auto-approval time has passed."""
    from applications.services import ApplicationService

    approved = ApplicationService.auto_approve_due()
    logger.debug(f"Auto-approval sweep approved {approved} applications")
    return approved
