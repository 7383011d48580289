import django.db.models.deletion
import tables.models
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("restaurants", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Table",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("number", models.CharField(help_text="Table number shown to staff and customers.", max_length=20)),
                ("name", models.CharField(blank=True, max_length=100)),
                ("capacity", models.PositiveSmallIntegerField(default=4)),
                ("is_active", models.BooleanField(default=True)),
                (
                    "qr_code",
                    models.CharField(
                        default=tables.models.generate_qr_code,
                        editable=False,
                        help_text="Token printed on the table's QR code for the storefront.",
                        max_length=64,
                        unique=True,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "restaurant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="tables",
                        to="restaurants.restaurant",
                    ),
                ),
            ],
            options={
                "ordering": ["number"],
            },
        ),
        migrations.AddConstraint(
            model_name="table",
            constraint=models.UniqueConstraint(
                fields=("restaurant", "number"), name="unique_table_number_per_restaurant"
            ),
        ),
    ]
