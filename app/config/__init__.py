# =============================================================================
# Django Project Configuration Package
# =============================================================================
# Settings, URLs, WSGI and Celery configuration for the wallet service.
#
# The Celery app is imported here so shared_task functions bind to it
# as soon as Django starts.
# =============================================================================

from config.celery import app as celery_app

__all__ = ("celery_app",)
