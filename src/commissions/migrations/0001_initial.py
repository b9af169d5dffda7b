import uuid
from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("customers", "0001_initial"),
        ("partners", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="IncentiveTarget",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                ("partner_type", models.CharField(choices=[("bdp", "BDP"), ("ddp", "DDP")], max_length=3)),
                ("month", models.PositiveSmallIntegerField()),
                ("year", models.PositiveSmallIntegerField()),
                ("target_installations", models.PositiveIntegerField()),
                ("target_capacity_kw", models.DecimalField(decimal_places=2, max_digits=9)),
                ("achieved_installations", models.PositiveIntegerField(default=0)),
                ("achieved_capacity_kw", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=9)),
                ("bonus_amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("status", models.CharField(choices=[("active", "Active"), ("achieved", "Achieved"), ("expired", "Expired")], db_index=True, default="active", max_length=10)),
                ("achieved_at", models.DateTimeField(blank=True, null=True)),
                ("partner", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="incentive_targets", to="partners.partner")),
            ],
            options={
                "ordering": ["-year", "-month"],
                "constraints": [models.UniqueConstraint(fields=("partner", "partner_type", "month", "year"), name="uniq_incentive_target_period")],
            },
        ),
        migrations.CreateModel(
            name="Commission",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                ("partner_type", models.CharField(choices=[("bdp", "BDP"), ("ddp", "DDP")], max_length=3)),
                ("source", models.CharField(choices=[("installation", "Installation"), ("inverter", "Inverter sale"), ("bonus", "Incentive bonus")], db_index=True, max_length=15)),
                ("panel_type", models.CharField(blank=True, default="", max_length=10)),
                ("capacity_kw", models.DecimalField(blank=True, decimal_places=2, max_digits=7, null=True)),
                ("units", models.PositiveIntegerField(default=0)),
                ("commission_amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("approved", "Approved"), ("paid", "Paid")], db_index=True, default="pending", max_length=10)),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, default="")),
                ("reference", models.CharField(blank=True, default="", max_length=100)),
                ("rate_version", models.CharField(blank=True, default="", max_length=20)),
                ("customer", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="commissions", to="customers.customer")),
                ("incentive_target", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="bonuses", to="commissions.incentivetarget")),
                ("partner", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="commissions", to="partners.partner")),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["partner", "status"], name="commission_partner_status_idx")],
                "constraints": [
                    models.UniqueConstraint(condition=models.Q(("source", "installation")), fields=("partner", "customer"), name="uniq_installation_commission"),
                    models.UniqueConstraint(condition=models.Q(("source", "bonus")), fields=("incentive_target",), name="uniq_bonus_per_target"),
                ],
            },
        ),
    ]
