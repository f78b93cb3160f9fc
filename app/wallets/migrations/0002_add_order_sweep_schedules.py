"""
Add celery-beat schedules for the order delivery and release sweeps.

Both sweeps run every 15 minutes. Each one is idempotent, so a late or
duplicated run only re-reads orders that already moved on.
"""

from django.db import migrations

SWEEPS = [
    (
        "Sweep Order Deliveries",
        "wallets.workers.delivery_scheduler.sweep_deliveries",
        "Moves shipped orders past the delivery window to awaiting release.",
    ),
    (
        "Sweep Order Releases",
        "wallets.workers.delivery_scheduler.sweep_releases",
        "Releases escrow to sellers for orders past the release window.",
    ),
]


def create_periodic_tasks(apps, schema_editor):
    IntervalSchedule = apps.get_model("django_celery_beat", "IntervalSchedule")
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    schedule, _ = IntervalSchedule.objects.get_or_create(
        every=15,
        period="minutes",
    )

    for name, task, description in SWEEPS:
        PeriodicTask.objects.get_or_create(
            name=name,
            defaults={
                "task": task,
                "interval": schedule,
                "enabled": True,
                "description": description,
            },
        )


def remove_periodic_tasks(apps, schema_editor):
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    PeriodicTask.objects.filter(name__in=[name for name, _, _ in SWEEPS]).delete()


class Migration(migrations.Migration):
    dependencies = [
        ("wallets", "0001_initial"),
        ("django_celery_beat", "0019_alter_periodictasks_options"),
    ]

    operations = [
        migrations.RunPython(create_periodic_tasks, remove_periodic_tasks),
    ]
