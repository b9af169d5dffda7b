import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("customers", "0001_initial"),
        ("vendors", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="MilestoneRecord",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                ("milestone_key", models.CharField(max_length=50)),
                ("ordinal_index", models.PositiveSmallIntegerField()),
                ("status", models.CharField(choices=[("pending", "Pending"), ("completed", "Completed")], db_index=True, default="pending", max_length=10)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, default="")),
                ("updated_by_role", models.CharField(blank=True, default="", max_length=20)),
                ("updated_by_id", models.CharField(blank=True, default="", max_length=64)),
                ("customer", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="milestones", to="customers.customer")),
            ],
            options={
                "ordering": ["customer", "ordinal_index"],
                "indexes": [models.Index(fields=["customer", "ordinal_index"], name="milestone_customer_ord_idx")],
                "constraints": [models.UniqueConstraint(fields=("customer", "milestone_key"), name="uniq_milestone_per_customer")],
            },
        ),
        migrations.CreateModel(
            name="VendorAssignment",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                ("job_role", models.CharField(max_length=40)),
                ("journey_stage", models.CharField(max_length=30)),
                ("notes", models.TextField(blank=True, default="")),
                ("is_active", models.BooleanField(default=True)),
                ("superseded_at", models.DateTimeField(blank=True, null=True)),
                ("assigned_by_role", models.CharField(blank=True, default="", max_length=20)),
                ("assigned_by_id", models.CharField(blank=True, default="", max_length=64)),
                ("customer", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="vendor_assignments", to="customers.customer")),
                ("vendor", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="assignments", to="vendors.vendor")),
            ],
            options={
                "ordering": ["-created_at"],
                "constraints": [models.UniqueConstraint(condition=models.Q(("is_active", True)), fields=("customer", "job_role"), name="uniq_active_assignment_per_role")],
            },
        ),
    ]
