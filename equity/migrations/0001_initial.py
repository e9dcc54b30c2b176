from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import equity.models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Company",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=120)),
                (
                    "external_id",
                    models.CharField(default=equity.models.generate_external_id, max_length=32, unique=True),
                ),
                ("equity_enabled", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["name"],
                "verbose_name_plural": "Companies",
            },
        ),
        migrations.CreateModel(
            name="CompanyAdministrator",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "company",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="administrators",
                        to="equity.company",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="company_administrators",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "unique_together": {("company", "user")},
            },
        ),
        migrations.CreateModel(
            name="CompanyInvestor",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("legal_name", models.CharField(max_length=200)),
                (
                    "external_id",
                    models.CharField(default=equity.models.generate_external_id, max_length=32, unique=True),
                ),
                ("investment_amount_in_cents", models.BigIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "company",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="company_investors",
                        to="equity.company",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["legal_name"],
            },
        ),
        migrations.CreateModel(
            name="ShareClass",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=120)),
                (
                    "original_issue_price_in_dollars",
                    models.DecimalField(blank=True, decimal_places=10, max_digits=20, null=True),
                ),
                ("hurdle_rate", models.DecimalField(blank=True, decimal_places=3, max_digits=6, null=True)),
                ("preferred", models.BooleanField(default=False)),
                (
                    "company",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="share_classes",
                        to="equity.company",
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
                "verbose_name_plural": "Share classes",
                "unique_together": {("company", "name")},
            },
        ),
        migrations.CreateModel(
            name="ShareHolding",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("number_of_shares", models.BigIntegerField()),
                ("share_price_usd", models.DecimalField(decimal_places=10, default=Decimal("0"), max_digits=20)),
                ("total_amount_in_cents", models.BigIntegerField(default=0)),
                ("issued_at", models.DateField(default=django.utils.timezone.localdate)),
                (
                    "company_investor",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="share_holdings",
                        to="equity.companyinvestor",
                    ),
                ),
                (
                    "share_class",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="share_holdings",
                        to="equity.shareclass",
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="ConvertibleInvestment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("entity_name", models.CharField(max_length=200)),
                ("amount_in_cents", models.BigIntegerField()),
                ("implied_shares", models.BigIntegerField(default=0)),
                ("issued_at", models.DateField(default=django.utils.timezone.localdate)),
                (
                    "company",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="convertible_investments",
                        to="equity.company",
                    ),
                ),
            ],
            options={
                "unique_together": {("company", "entity_name")},
            },
        ),
        migrations.CreateModel(
            name="ConvertibleSecurity",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("principal_value_in_cents", models.BigIntegerField()),
                (
                    "company_investor",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="convertible_securities",
                        to="equity.companyinvestor",
                    ),
                ),
                (
                    "convertible_investment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="convertible_securities",
                        to="equity.convertibleinvestment",
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
                "verbose_name_plural": "Convertible securities",
            },
        ),
        migrations.CreateModel(
            name="DividendComputation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "external_id",
                    models.CharField(default=equity.models.generate_external_id, max_length=32, unique=True),
                ),
                ("total_amount_in_usd", models.DecimalField(decimal_places=2, max_digits=20)),
                ("dividends_issuance_date", models.DateField()),
                ("return_of_capital", models.BooleanField(default=False)),
                ("finalized_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "company",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="dividend_computations",
                        to="equity.company",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
            },
        ),
        migrations.CreateModel(
            name="DividendComputationOutput",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("investor_name", models.CharField(blank=True, max_length=200)),
                ("share_class", models.CharField(max_length=120)),
                ("number_of_shares", models.BigIntegerField()),
                ("hurdle_rate", models.DecimalField(blank=True, decimal_places=3, max_digits=6, null=True)),
                (
                    "original_issue_price_in_usd",
                    models.DecimalField(blank=True, decimal_places=10, max_digits=20, null=True),
                ),
                (
                    "dividend_amount_in_usd",
                    models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=20),
                ),
                (
                    "preferred_dividend_amount_in_usd",
                    models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=20),
                ),
                (
                    "qualified_dividend_amount_usd",
                    models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=20),
                ),
                ("total_amount_in_usd", models.DecimalField(decimal_places=2, max_digits=20)),
                ("investment_amount_cents", models.BigIntegerField(default=0)),
                (
                    "company_investor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        to="equity.companyinvestor",
                    ),
                ),
                (
                    "dividend_computation",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="dividend_computation_outputs",
                        to="equity.dividendcomputation",
                    ),
                ),
            ],
            options={
                "constraints": [
                    models.CheckConstraint(
                        condition=(
                            models.Q(company_investor__isnull=False, investor_name="")
                            | (models.Q(company_investor__isnull=True) & ~models.Q(investor_name=""))
                        ),
                        name="output_investor_xor_name",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="DividendRound",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "external_id",
                    models.CharField(default=equity.models.generate_external_id, max_length=32, unique=True),
                ),
                ("issued_at", models.DateField()),
                ("number_of_shares", models.BigIntegerField(default=0)),
                ("number_of_shareholders", models.IntegerField(default=0)),
                ("total_amount_in_cents", models.BigIntegerField()),
                ("status", models.CharField(default="Issued", max_length=20)),
                ("return_of_capital", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "company",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="dividend_rounds",
                        to="equity.company",
                    ),
                ),
                (
                    "dividend_computation",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="dividend_round",
                        to="equity.dividendcomputation",
                    ),
                ),
            ],
            options={
                "ordering": ["-issued_at", "-id"],
            },
        ),
        migrations.CreateModel(
            name="Dividend",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "external_id",
                    models.CharField(default=equity.models.generate_external_id, max_length=32, unique=True),
                ),
                ("total_amount_in_cents", models.BigIntegerField()),
                ("qualified_amount_cents", models.BigIntegerField(default=0)),
                ("number_of_shares", models.BigIntegerField(blank=True, null=True)),
                ("investment_amount_cents", models.BigIntegerField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("Issued", "Issued"),
                            ("Pending signup", "Pending signup"),
                            ("Processing", "Processing"),
                            ("Paid", "Paid"),
                            ("Retained", "Retained"),
                        ],
                        default="Issued",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "company",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="dividends",
                        to="equity.company",
                    ),
                ),
                (
                    "company_investor",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="dividends",
                        to="equity.companyinvestor",
                    ),
                ),
                (
                    "dividend_round",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="dividends",
                        to="equity.dividendround",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
            },
        ),
    ]
