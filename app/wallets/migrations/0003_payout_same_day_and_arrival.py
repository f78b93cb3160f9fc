"""
Replace the instant payout speed with same-day ACH and record arrival.

Payouts now offer STANDARD (two days) and SAME_DAY (flat fee). Each
payout stores its estimated arrival at submission time.
"""

from django.db import migrations, models


def instant_to_same_day(apps, schema_editor):
    Transaction = apps.get_model("wallets", "Transaction")
    Transaction.objects.filter(payout_speed="instant").update(payout_speed="same_day")


class Migration(migrations.Migration):
    dependencies = [
        ("wallets", "0002_add_order_sweep_schedules"),
    ]

    operations = [
        migrations.AlterField(
            model_name="transaction",
            name="payout_speed",
            field=models.CharField(
                blank=True,
                choices=[("standard", "Standard"), ("same_day", "Same-Day ACH")],
                help_text="Delivery speed for payouts",
                max_length=20,
                null=True,
            ),
        ),
        migrations.AddField(
            model_name="transaction",
            name="estimated_arrival",
            field=models.DateTimeField(
                blank=True,
                help_text="When payout funds are expected at the bank",
                null=True,
            ),
        ),
        migrations.RunPython(instant_to_same_day, migrations.RunPython.noop),
    ]
