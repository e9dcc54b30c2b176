from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Dict, List, Tuple

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from allocation import calc, exports
from allocation.models import (
    AllocationResult,
    ComputationOutput,
    ConvertibleInvestment as ConvertibleInvestmentData,
    ConvertibleSecurity as ConvertibleSecurityData,
    DistributionRequest,
    DividendTotals,
    InvestorRef,
    SafeHolderRef,
)


def generate_external_id() -> str:
    return uuid.uuid4().hex[:16]


class Company(models.Model):
    """Tenant company."""

    name = models.CharField(max_length=120)
    external_id = models.CharField(max_length=32, unique=True, default=generate_external_id)
    equity_enabled = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "Companies"

    def __str__(self) -> str:
        return self.name


class CompanyAdministrator(models.Model):
    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="administrators")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="company_administrators"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ("company", "user")

    def __str__(self) -> str:
        return f"{self.user} @ {self.company}"


class CompanyInvestor(models.Model):
    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="company_investors")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL
    )
    legal_name = models.CharField(max_length=200)
    external_id = models.CharField(max_length=32, unique=True, default=generate_external_id)
    investment_amount_in_cents = models.BigIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["legal_name"]

    def __str__(self) -> str:
        return self.legal_name


class ShareClass(models.Model):
    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="share_classes")
    name = models.CharField(max_length=120)
    original_issue_price_in_dollars = models.DecimalField(
        max_digits=20, decimal_places=10, null=True, blank=True
    )
    hurdle_rate = models.DecimalField(max_digits=6, decimal_places=3, null=True, blank=True)
    preferred = models.BooleanField(default=False)

    class Meta:
        ordering = ["name"]
        unique_together = ("company", "name")
        verbose_name_plural = "Share classes"

    def __str__(self) -> str:
        return self.name


class ShareHolding(models.Model):
    company_investor = models.ForeignKey(
        CompanyInvestor, on_delete=models.CASCADE, related_name="share_holdings"
    )
    share_class = models.ForeignKey(ShareClass, on_delete=models.PROTECT, related_name="share_holdings")
    number_of_shares = models.BigIntegerField()
    share_price_usd = models.DecimalField(max_digits=20, decimal_places=10, default=Decimal("0"))
    total_amount_in_cents = models.BigIntegerField(default=0)
    issued_at = models.DateField(default=timezone.localdate)

    def __str__(self) -> str:
        return f"{self.company_investor} {self.number_of_shares} {self.share_class}"


class ConvertibleInvestment(models.Model):
    """SAFE-style investment, recorded by entity name rather than as a shareholder."""

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="convertible_investments")
    entity_name = models.CharField(max_length=200)
    amount_in_cents = models.BigIntegerField()
    implied_shares = models.BigIntegerField(default=0)
    issued_at = models.DateField(default=timezone.localdate)

    class Meta:
        unique_together = ("company", "entity_name")

    def __str__(self) -> str:
        return self.entity_name

    def as_allocation_data(self) -> ConvertibleInvestmentData:
        return ConvertibleInvestmentData(
            entity_name=self.entity_name,
            amount_in_cents=self.amount_in_cents,
            securities=[
                ConvertibleSecurityData(
                    company_investor_id=s.company_investor_id,
                    principal_value_in_cents=s.principal_value_in_cents,
                )
                for s in self.convertible_securities.all()
            ],
        )


class ConvertibleSecurity(models.Model):
    convertible_investment = models.ForeignKey(
        ConvertibleInvestment, on_delete=models.CASCADE, related_name="convertible_securities"
    )
    company_investor = models.ForeignKey(
        CompanyInvestor, on_delete=models.CASCADE, related_name="convertible_securities"
    )
    principal_value_in_cents = models.BigIntegerField()

    class Meta:
        ordering = ["id"]
        verbose_name_plural = "Convertible securities"

    def __str__(self) -> str:
        return f"{self.convertible_investment} / {self.company_investor}"


class DividendComputation(models.Model):
    """Draft distribution, turned into a DividendRound once finalized."""

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="dividend_computations")
    external_id = models.CharField(max_length=32, unique=True, default=generate_external_id)
    total_amount_in_usd = models.DecimalField(max_digits=20, decimal_places=2)
    dividends_issuance_date = models.DateField()
    return_of_capital = models.BooleanField(default=False)
    finalized_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:
        return f"{self.company} {self.total_amount_in_usd} ({self.dividends_issuance_date})"

    def clean(self):
        super().clean()
        if self.total_amount_in_usd is None or self.total_amount_in_usd <= 0:
            raise ValidationError({"total_amount_in_usd": "Amount must be greater than 0."})
        if self.dividends_issuance_date is None:
            raise ValidationError({"dividends_issuance_date": "Issuance date is required."})

    @property
    def finalized(self) -> bool:
        return self.finalized_at is not None

    def mark_as_finalized(self) -> None:
        self.finalized_at = timezone.now()
        self.save(update_fields=["finalized_at"])

    # -------------------------------
    # Allocation
    # -------------------------------

    def computation_outputs(self) -> List[ComputationOutput]:
        return [o.as_allocation_output() for o in self.dividend_computation_outputs.order_by("id")]

    def dividends_info(self) -> Tuple[Dict[int, DividendTotals], Dict[str, DividendTotals]]:
        return calc.aggregate(self.computation_outputs())

    def convertibles_by_entity_name(self) -> Dict[str, ConvertibleInvestmentData]:
        investments = self.company.convertible_investments.prefetch_related("convertible_securities")
        return {inv.entity_name: inv.as_allocation_data() for inv in investments}

    def data_for_dividend_creation(self) -> List[AllocationResult]:
        share_dividends, safe_dividends = self.dividends_info()
        return calc.build_payouts(share_dividends, safe_dividends, self.convertibles_by_entity_name())

    def number_of_shareholders(self) -> int:
        return calc.number_of_shareholders(self.data_for_dividend_creation())

    def investor_names(self) -> Dict[int, str]:
        return dict(self.company.company_investors.values_list("id", "legal_name"))

    def broken_down_by_investor(self) -> List[dict]:
        share_dividends, safe_dividends = self.dividends_info()
        investors = self.company.company_investors.in_bulk(list(share_dividends.keys()))
        rows = []
        for payee, info in calc.broken_down_by_investor(share_dividends, safe_dividends):
            if isinstance(payee, InvestorRef):
                investor = investors[payee.company_investor_id]
                rows.append(
                    {
                        "investor_name": investor.legal_name,
                        "company_investor_id": investor.id,
                        "investor_external_id": investor.external_id,
                        "total_amount": info.total_amount,
                        "number_of_shares": info.number_of_shares,
                    }
                )
            else:
                # SAFEs are identified by their entity name
                rows.append(
                    {
                        "investor_name": payee.name,
                        "company_investor_id": None,
                        "investor_external_id": None,
                        "total_amount": info.total_amount,
                        "number_of_shares": info.number_of_shares,
                    }
                )
        return rows

    # -------------------------------
    # Exports
    # -------------------------------

    def to_csv(self) -> str:
        return exports.per_share_class_csv(self.computation_outputs(), self.investor_names())

    def to_per_investor_csv(self) -> str:
        share_dividends, safe_dividends = self.dividends_info()
        return exports.per_investor_csv(
            calc.broken_down_by_investor(share_dividends, safe_dividends), self.investor_names()
        )

    def to_final_csv(self) -> str:
        return exports.final_csv(self.data_for_dividend_creation(), self.investor_names())

    # -------------------------------
    # Round creation
    # -------------------------------

    def generate_dividends(self) -> "DividendRound":
        request = DistributionRequest(
            total_amount_in_usd=self.total_amount_in_usd,
            issuance_date=self.dividends_issuance_date,
            return_of_capital=self.return_of_capital,
        )
        plan, payments = calc.generate_distribution(request, self.data_for_dividend_creation())

        dividend_round = DividendRound.objects.create(
            company=self.company,
            dividend_computation=self,
            issued_at=plan.issued_at,
            number_of_shares=plan.number_of_shares,
            number_of_shareholders=plan.number_of_shareholders,
            total_amount_in_cents=plan.total_amount_in_cents,
            return_of_capital=plan.return_of_capital,
            status=Dividend.Status.ISSUED,
        )
        investors = self.company.company_investors.in_bulk([p.company_investor_id for p in payments])
        for payment in payments:
            investor = investors.get(payment.company_investor_id)
            if investor is None:
                raise CompanyInvestor.DoesNotExist(
                    f"Company investor {payment.company_investor_id} not found"
                )
            Dividend.objects.create(
                company=self.company,
                company_investor=investor,
                dividend_round=dividend_round,
                total_amount_in_cents=payment.total_amount_in_cents,
                qualified_amount_cents=payment.qualified_amount_cents,
                number_of_shares=payment.number_of_shares,
                investment_amount_cents=payment.investment_amount_cents,
                status=Dividend.Status.ISSUED,
            )
        return dividend_round

    def finalize_and_create_dividend_round(self) -> "DividendRound":
        dividend_round = self.generate_dividends()
        self.mark_as_finalized()
        return dividend_round


class DividendComputationOutput(models.Model):
    """One computed row per investor and share class."""

    dividend_computation = models.ForeignKey(
        DividendComputation, on_delete=models.CASCADE, related_name="dividend_computation_outputs"
    )
    company_investor = models.ForeignKey(CompanyInvestor, null=True, blank=True, on_delete=models.CASCADE)
    investor_name = models.CharField(max_length=200, blank=True)
    share_class = models.CharField(max_length=120)
    number_of_shares = models.BigIntegerField()
    hurdle_rate = models.DecimalField(max_digits=6, decimal_places=3, null=True, blank=True)
    original_issue_price_in_usd = models.DecimalField(max_digits=20, decimal_places=10, null=True, blank=True)
    dividend_amount_in_usd = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal("0"))
    preferred_dividend_amount_in_usd = models.DecimalField(
        max_digits=20, decimal_places=2, default=Decimal("0")
    )
    qualified_dividend_amount_usd = models.DecimalField(max_digits=20, decimal_places=2, default=Decimal("0"))
    total_amount_in_usd = models.DecimalField(max_digits=20, decimal_places=2)
    investment_amount_cents = models.BigIntegerField(default=0)

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(company_investor__isnull=False, investor_name="")
                    | (models.Q(company_investor__isnull=True) & ~models.Q(investor_name=""))
                ),
                name="output_investor_xor_name",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.investor_name or self.company_investor} {self.share_class}"

    def as_allocation_output(self) -> ComputationOutput:
        if self.investor_name:
            payee = SafeHolderRef(self.investor_name)
        else:
            payee = InvestorRef(self.company_investor_id)
        return ComputationOutput(
            payee=payee,
            share_class=self.share_class,
            number_of_shares=self.number_of_shares,
            total_amount_in_usd=self.total_amount_in_usd,
            qualified_dividend_amount_usd=self.qualified_dividend_amount_usd,
            investment_amount_cents=self.investment_amount_cents,
            hurdle_rate=self.hurdle_rate,
            original_issue_price_in_usd=self.original_issue_price_in_usd,
            dividend_amount_in_usd=self.dividend_amount_in_usd,
            preferred_dividend_amount_in_usd=self.preferred_dividend_amount_in_usd,
            investor_name=self.investor_name,
        )


class DividendRound(models.Model):
    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="dividend_rounds")
    dividend_computation = models.OneToOneField(
        DividendComputation, null=True, blank=True, on_delete=models.SET_NULL, related_name="dividend_round"
    )
    external_id = models.CharField(max_length=32, unique=True, default=generate_external_id)
    issued_at = models.DateField()
    number_of_shares = models.BigIntegerField(default=0)
    number_of_shareholders = models.IntegerField(default=0)
    total_amount_in_cents = models.BigIntegerField()
    status = models.CharField(max_length=20, default="Issued")
    return_of_capital = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-issued_at", "-id"]

    def __str__(self) -> str:
        return f"{self.company} {self.issued_at} ({self.total_amount_in_cents} cents)"


class Dividend(models.Model):
    class Status(models.TextChoices):
        ISSUED = "Issued", "Issued"
        PENDING_SIGNUP = "Pending signup", "Pending signup"
        PROCESSING = "Processing", "Processing"
        PAID = "Paid", "Paid"
        RETAINED = "Retained", "Retained"

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="dividends")
    company_investor = models.ForeignKey(CompanyInvestor, on_delete=models.CASCADE, related_name="dividends")
    dividend_round = models.ForeignKey(DividendRound, on_delete=models.CASCADE, related_name="dividends")
    external_id = models.CharField(max_length=32, unique=True, default=generate_external_id)
    total_amount_in_cents = models.BigIntegerField()
    qualified_amount_cents = models.BigIntegerField(default=0)
    number_of_shares = models.BigIntegerField(null=True, blank=True)
    investment_amount_cents = models.BigIntegerField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ISSUED)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:
        return f"{self.company_investor} {self.total_amount_in_cents} cents"
