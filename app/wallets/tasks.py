"""
Celery tasks for the wallets app.

The scheduled sweeps live in wallets.workers and are re-exported here so
Celery's autodiscover_tasks() registers them.
"""

from wallets.workers import sweep_deliveries, sweep_releases  # noqa: F401
