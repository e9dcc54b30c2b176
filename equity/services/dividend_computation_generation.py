"""
Builds a draft dividend computation from a company's cap table.

Preferred share classes with a hurdle rate are paid first
(shares * original issue price * hurdle rate). Whatever is left is split pro rata
across every share holding and every convertible investment's implied shares.
Rows are paid in whole cents that add up to the distributed amount.
SAFE holders are booked by entity name; they are re-attributed to the underlying
investors only when the computation is finalized.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional, Tuple, Union

from django.conf import settings
from django.db import transaction

from allocation.calc import HUNDRED, TWOPLACES, split_in_cents

from ..models import (
    Company,
    ConvertibleInvestment,
    DividendComputation,
    DividendComputationOutput,
    ShareHolding,
)

logger = logging.getLogger(__name__)

CONVERTIBLE_SHARE_CLASS = "Convertible"


def _quantize(val: Decimal) -> Decimal:
    return val.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


@dataclass
class _Row:
    share_class: str
    hurdle_rate: Optional[Decimal] = None
    original_issue_price_in_usd: Optional[Decimal] = None
    number_of_shares: int = 0
    preferred: Decimal = Decimal("0")
    common: Decimal = Decimal("0")
    qualified: Decimal = Decimal("0")
    investment_amount_cents: int = 0


class DividendComputationGeneration:
    def __init__(
        self,
        company: Company,
        *,
        dividends_issuance_date: date,
        amount_in_usd,
        return_of_capital: bool = False,
    ):
        self.company = company
        self.dividends_issuance_date = dividends_issuance_date
        self.amount_in_usd = Decimal(str(amount_in_usd))
        self.return_of_capital = bool(return_of_capital)

    def _is_qualified(self, issued_at: date) -> bool:
        if self.return_of_capital:
            return False
        cutoff = self.dividends_issuance_date - timedelta(days=settings.QUALIFIED_HOLDING_DAYS)
        return issued_at <= cutoff

    def _preferred_amount(self, holding: ShareHolding) -> Decimal:
        share_class = holding.share_class
        if not (share_class.preferred and share_class.hurdle_rate and share_class.original_issue_price_in_dollars):
            return Decimal("0")
        return (
            Decimal(holding.number_of_shares)
            * share_class.original_issue_price_in_dollars
            * share_class.hurdle_rate
            / Decimal("100")
        )

    def process(self) -> DividendComputation:
        holdings = list(
            ShareHolding.objects.filter(company_investor__company=self.company).select_related(
                "share_class", "company_investor"
            )
        )
        convertibles = list(self.company.convertible_investments.filter(implied_shares__gt=0))

        preferred = {h.id: self._preferred_amount(h) for h in holdings}
        total_preferred = sum(preferred.values(), Decimal("0"))
        if total_preferred > self.amount_in_usd:
            scale = self.amount_in_usd / total_preferred
            preferred = {k: v * scale for k, v in preferred.items()}
            remaining = Decimal("0")
        else:
            remaining = self.amount_in_usd - total_preferred

        total_units = sum(h.number_of_shares for h in holdings) + sum(c.implied_shares for c in convertibles)
        per_share = remaining / Decimal(total_units) if total_units else Decimal("0")

        rows: Dict[Union[Tuple[int, int], str], _Row] = {}
        for h in holdings:
            key = (h.company_investor_id, h.share_class_id)
            row = rows.get(key)
            if row is None:
                row = rows[key] = _Row(
                    share_class=h.share_class.name,
                    hurdle_rate=h.share_class.hurdle_rate,
                    original_issue_price_in_usd=h.share_class.original_issue_price_in_dollars,
                )
            common = Decimal(h.number_of_shares) * per_share
            row.number_of_shares += h.number_of_shares
            row.preferred += preferred[h.id]
            row.common += common
            row.investment_amount_cents += h.total_amount_in_cents
            if self._is_qualified(h.issued_at):
                row.qualified += preferred[h.id] + common

        with transaction.atomic():
            computation = DividendComputation(
                company=self.company,
                total_amount_in_usd=self.amount_in_usd,
                dividends_issuance_date=self.dividends_issuance_date,
                return_of_capital=self.return_of_capital,
            )
            computation.full_clean()
            computation.save()

            for investment in convertibles:
                rows[investment.entity_name] = self._convertible_row(investment, per_share)

            outputs = []
            cents = split_in_cents([row.preferred + row.common for row in rows.values()])
            for (key, row), total_cents in zip(rows.items(), cents):
                outputs.append(self._output(computation, key, row, total_cents))
            DividendComputationOutput.objects.bulk_create(outputs)

        logger.info(
            "Created dividend computation %s for company %s: %s USD across %d rows",
            computation.id,
            self.company.external_id,
            self.amount_in_usd,
            len(outputs),
        )
        return computation

    def _convertible_row(self, investment: ConvertibleInvestment, per_share: Decimal) -> _Row:
        common = Decimal(investment.implied_shares) * per_share
        return _Row(
            share_class=CONVERTIBLE_SHARE_CLASS,
            number_of_shares=investment.implied_shares,
            common=common,
            qualified=common if self._is_qualified(investment.issued_at) else Decimal("0"),
        )

    def _output(
        self, computation: DividendComputation, key: Union[Tuple[int, int], str], row: _Row, total_cents: int
    ) -> DividendComputationOutput:
        total = Decimal(total_cents) / HUNDRED
        exact = row.preferred + row.common
        preferred = min(_quantize(row.preferred), total)
        qualified = _quantize(total * row.qualified / exact) if exact else Decimal("0")
        output = DividendComputationOutput(
            dividend_computation=computation,
            share_class=row.share_class,
            number_of_shares=row.number_of_shares,
            hurdle_rate=row.hurdle_rate,
            original_issue_price_in_usd=row.original_issue_price_in_usd,
            dividend_amount_in_usd=total - preferred,
            preferred_dividend_amount_in_usd=preferred,
            qualified_dividend_amount_usd=qualified,
            total_amount_in_usd=total,
        )
        if isinstance(key, str):
            output.investor_name = key
        else:
            output.company_investor_id = key[0]
            output.investment_amount_cents = row.investment_amount_cents
        return output
