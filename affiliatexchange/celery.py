"""
Celery Configuration for AffiliateXchange

Periodic jobs:
    - pending offer applications past their auto-approval time are approved
      every minute
    - retainer contracts get their monthly payment on the 1st of each month
"""

import os
from celery import Celery
from celery.schedules import crontab

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'affiliatexchange.settings')

app = Celery('affiliatexchange')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()

app.conf.beat_schedule = {
    'auto-approve-applications': {
        'task': 'applications.tasks.auto_approve_applications',
        'schedule': 60.0,
    },
    'process-monthly-retainer-payments': {
        'task': 'retainers.tasks.process_monthly_retainer_payments',
        'schedule': crontab(minute=5, hour=0, day_of_month=1),
    },
}
