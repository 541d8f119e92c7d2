from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Property",
            fields=[
                ("code", models.CharField(help_text="Short property code, e.g. '1'.", max_length=32, primary_key=True, serialize=False)),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("nightly_rate", models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal("0.00"))])),
                ("max_guests", models.PositiveSmallIntegerField(default=1, help_text="Guests included in the nightly rate.", validators=[django.core.validators.MinValueValidator(1)])),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Property",
                "verbose_name_plural": "Properties",
                "ordering": ["code"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(max_guests__gte=1), name="property_max_guests_positive"),
                    models.CheckConstraint(condition=models.Q(nightly_rate__gte=0), name="property_nightly_rate_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PropertyLink",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("from_property", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="links_from", to="properties.property")),
                ("to_property", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="links_to", to="properties.property")),
            ],
            options={
                "verbose_name": "Property link",
                "verbose_name_plural": "Property links",
                "constraints": [
                    models.UniqueConstraint(fields=("from_property", "to_property"), name="property_link_unique_pair"),
                    models.CheckConstraint(condition=models.Q(("from_property", models.F("to_property")), _negated=True), name="property_link_not_self"),
                ],
            },
        ),
    ]
