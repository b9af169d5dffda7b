import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Vendor",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                ("name", models.CharField(max_length=200)),
                ("phone", models.CharField(blank=True, default="", max_length=20)),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("vendor_type", models.CharField(choices=[("discom_net_metering", "Discom Net Metering"), ("bank_loan_liaison", "Bank Loan Liaison"), ("logistic", "Logistic"), ("electrical", "Electrical"), ("solar_installation", "Solar Installation"), ("solar_panel_supplier", "Solar Panel Supplier"), ("inverter_supplier", "Inverter Supplier")], db_index=True, max_length=40)),
                ("state", models.CharField(blank=True, default="", max_length=100)),
                ("district", models.CharField(blank=True, default="", max_length=100)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")], db_index=True, default="pending", max_length=10)),
            ],
            options={
                "ordering": ["created_at", "name"],
            },
        ),
    ]
