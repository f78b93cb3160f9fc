"""
Celery application for background wallet work.

Redis is the broker and result backend. Periodic sweeps are stored in
the database by django-celery-beat (see wallets/migrations/0002), so the
beat process must run with the DatabaseScheduler:

    celery -A config worker -l info
    celery -A config beat -l info --scheduler django_celery_beat.schedulers:DatabaseScheduler

Tasks are discovered from each installed app's tasks.py.
"""

import logging
import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

logger = logging.getLogger(__name__)

app = Celery("config")

# All Celery settings are prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


@app.task(bind=True, ignore_result=True)
def debug_task(self):
    """Log the request to check worker connectivity."""
    logger.info("Celery debug task", extra={"request_id": self.request.id})
