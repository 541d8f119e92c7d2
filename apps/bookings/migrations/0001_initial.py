import uuid
from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("properties", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("user_id", models.CharField(db_index=True, max_length=64)),
                ("check_in", models.DateField()),
                ("check_out", models.DateField()),
                ("guests_count", models.PositiveSmallIntegerField(default=1)),
                ("sauna_hours", models.PositiveSmallIntegerField(default=0)),
                ("kitchenware", models.BooleanField(default=False)),
                ("tier", models.CharField(choices=[("Bronze", "Bronze"), ("Silver", "Silver"), ("Gold", "Gold"), ("Platinum", "Platinum")], default="Bronze", max_length=16)),
                ("status", models.CharField(choices=[("pending", "Pending payment"), ("confirmed", "Confirmed"), ("completed", "Completed"), ("cancelled", "Cancelled")], default="pending", max_length=16)),
                ("nights", models.PositiveSmallIntegerField(default=1)),
                ("nightly_rate", models.DecimalField(decimal_places=2, default=Decimal("0.00"), help_text="Nightly rate at booking time.", max_digits=10)),
                ("base_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("extra_guests", models.PositiveSmallIntegerField(default=0)),
                ("extra_guest_fee", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("sauna_fee", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("kitchenware_fee", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("total_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("cashback_earned", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("refund_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("cashback_deducted", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("notes", models.TextField(blank=True)),
                ("cancellation_reason", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField()),
                ("updated_at", models.DateTimeField()),
                ("confirmed_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("property", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="bookings", to="properties.property")),
            ],
            options={
                "verbose_name": "Booking",
                "verbose_name_plural": "Bookings",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["property", "check_in", "check_out"], name="booking_property_dates_idx"),
                    models.Index(fields=["status"], name="booking_status_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(check_out__gt=models.F("check_in")), name="booking_valid_dates"),
                    models.CheckConstraint(condition=models.Q(guests_count__gte=1), name="booking_guests_positive"),
                ],
            },
        ),
    ]
