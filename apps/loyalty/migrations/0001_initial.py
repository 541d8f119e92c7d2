from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="LoyaltyCard",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("user_id", models.CharField(max_length=64, unique=True)),
                ("balance", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("total_spent", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("total_earned", models.DecimalField(decimal_places=2, default=Decimal("0.00"), help_text="Lifetime cashback, net of clawbacks.", max_digits=12)),
                ("membership_level", models.CharField(choices=[("Bronze", "Bronze"), ("Silver", "Silver"), ("Gold", "Gold"), ("Platinum", "Platinum")], default="Bronze", max_length=16)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Loyalty card",
                "verbose_name_plural": "Loyalty cards",
                "ordering": ["user_id"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(balance__gte=0), name="loyalty_card_balance_non_negative"),
                    models.CheckConstraint(condition=models.Q(total_earned__gte=0), name="loyalty_card_earned_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="LedgerEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("kind", models.CharField(choices=[("debit", "Debit"), ("credit", "Credit"), ("cashback", "Cashback"), ("cashback_clawback", "Cashback clawback")], max_length=20)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("reason", models.CharField(blank=True, max_length=255)),
                ("balance_before", models.DecimalField(decimal_places=2, max_digits=12)),
                ("balance_after", models.DecimalField(decimal_places=2, max_digits=12)),
                ("booking_id", models.UUIDField(blank=True, db_index=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("card", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="entries", to="loyalty.loyaltycard")),
            ],
            options={
                "verbose_name": "Ledger entry",
                "verbose_name_plural": "Ledger entries",
                "ordering": ["-created_at", "-id"],
            },
        ),
    ]
