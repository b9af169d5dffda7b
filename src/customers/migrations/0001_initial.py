import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("partners", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Customer",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                ("name", models.CharField(max_length=200)),
                ("phone", models.CharField(db_index=True, max_length=20)),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("address", models.TextField(blank=True, default="")),
                ("district", models.CharField(blank=True, default="", max_length=100)),
                ("state", models.CharField(blank=True, default="", max_length=100)),
                ("panel_type", models.CharField(choices=[("dcr", "DCR"), ("non_dcr", "Non-DCR")], default="dcr", max_length=10)),
                ("proposed_capacity", models.DecimalField(blank=True, decimal_places=2, max_digits=7, null=True, verbose_name="proposed capacity (kW)")),
                ("status", models.CharField(choices=[("pending", "Pending"), ("verified", "Verified"), ("approved", "Approved"), ("installation_scheduled", "Installation scheduled"), ("completed", "Completed")], db_index=True, default="pending", max_length=30)),
                ("source", models.CharField(choices=[("partner", "Partner"), ("website_direct", "Website (direct)")], default="partner", max_length=20)),
                ("ddp", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="customers", to="partners.partner", verbose_name="owning DDP")),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
