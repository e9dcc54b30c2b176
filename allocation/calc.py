from __future__ import annotations

import logging
from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_UP
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple, TypeVar

from .models import (
    AllocationResult,
    ComputationOutput,
    ConvertibleInvestment,
    DistributionRequest,
    DistributionRound,
    DividendPayment,
    DividendTotals,
    InvestorRef,
    PayeeRef,
    SafeHolderRef,
)

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
HUNDRED = Decimal("100")

K = TypeVar("K")


class AllocationError(Exception):
    pass


class MissingConvertibleInvestment(AllocationError):
    def __init__(self, entity_name: str):
        super().__init__(f"No convertible investment found for SAFE holder {entity_name!r}")
        self.entity_name = entity_name


def _quantize(val: Decimal) -> Decimal:
    return val.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def to_cents(amount: Decimal) -> int:
    return int((amount * HUNDRED).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def split_in_cents(amounts: Sequence[Decimal]) -> List[int]:
    """
    Converts exact amounts to whole cents without losing or inventing any.

    Every amount is rounded down, then the cents still missing from the rounded
    total go one each to the amounts with the largest fractional parts (earlier
    amounts win ties).
    """
    exact = [amount * HUNDRED for amount in amounts]
    cents = [int(x.to_integral_value(rounding=ROUND_FLOOR)) for x in exact]
    leftover = to_cents(sum(amounts, Decimal("0"))) - sum(cents)
    by_fraction = sorted(range(len(exact)), key=lambda i: exact[i] - cents[i], reverse=True)
    for i in by_fraction[:leftover]:
        cents[i] += 1
    return cents


def _totals_for(bucket: Dict[K, DividendTotals], key: K) -> DividendTotals:
    totals = bucket.get(key)
    if totals is None:
        totals = bucket[key] = DividendTotals()
    return totals


def aggregate(
    outputs: Iterable[ComputationOutput],
) -> Tuple[Dict[int, DividendTotals], Dict[str, DividendTotals]]:
    """
    Groups computation outputs into direct shareholder totals (keyed by company
    investor id) and SAFE holder totals (keyed by entity name).
    Investment cents are only tracked for direct shareholders.
    """
    share_dividends: Dict[int, DividendTotals] = {}
    safe_dividends: Dict[str, DividendTotals] = {}

    for output in outputs:
        payee = output.payee
        if isinstance(payee, SafeHolderRef):
            totals = _totals_for(safe_dividends, payee.name)
        else:
            totals = _totals_for(share_dividends, payee.company_investor_id)
            totals.investment_amount_cents += output.investment_amount_cents or 0
        totals.number_of_shares += output.number_of_shares
        totals.total_amount += output.total_amount_in_usd
        totals.qualified_dividends_amount += output.qualified_dividend_amount_usd

    return share_dividends, safe_dividends


def build_payouts(
    share_dividends: Mapping[int, DividendTotals],
    safe_dividends: Mapping[str, DividendTotals],
    convertibles: Mapping[str, ConvertibleInvestment],
) -> List[AllocationResult]:
    """
    Flattens aggregated totals into one payout per recipient.

    SAFE holder totals are re-attributed to the investors holding the underlying
    convertible securities, prorated by principal over the investment amount and
    rounded to cents per security.
    """
    payouts: List[AllocationResult] = []

    for company_investor_id, info in share_dividends.items():
        payouts.append(
            AllocationResult(
                company_investor_id=company_investor_id,
                number_of_shares=info.number_of_shares,
                total_amount=info.total_amount,
                qualified_dividends_amount=info.qualified_dividends_amount,
                investment_amount_cents=info.investment_amount_cents,
            )
        )

    for investor_name, info in safe_dividends.items():
        investment = convertibles.get(investor_name)
        if investment is None:
            raise MissingConvertibleInvestment(investor_name)
        if not investment.amount_in_cents:
            raise AllocationError(f"Convertible investment {investor_name!r} has no amount")

        investment_in_usd = Decimal(investment.amount_in_cents) / HUNDRED
        for security in investment.securities:
            security_in_usd = Decimal(security.principal_value_in_cents) / HUNDRED
            proration = security_in_usd / investment_in_usd
            payouts.append(
                AllocationResult(
                    company_investor_id=security.company_investor_id,
                    number_of_shares=None,
                    total_amount=_quantize(info.total_amount * proration),
                    qualified_dividends_amount=_quantize(info.qualified_dividends_amount * proration),
                    investment_amount_cents=security.principal_value_in_cents,
                )
            )
        logger.debug(
            "Prorated SAFE holder %s across %d securities", investor_name, len(investment.securities)
        )

    return payouts


def broken_down_by_investor(
    share_dividends: Mapping[int, DividendTotals],
    safe_dividends: Mapping[str, DividendTotals],
) -> List[Tuple[PayeeRef, DividendTotals]]:
    rows: List[Tuple[PayeeRef, DividendTotals]] = []
    for company_investor_id, info in share_dividends.items():
        rows.append((InvestorRef(company_investor_id), info))
    for investor_name, info in safe_dividends.items():
        rows.append((SafeHolderRef(investor_name), info))
    return rows


def number_of_shareholders(payouts: Iterable[AllocationResult]) -> int:
    return len({p.company_investor_id for p in payouts})


def generate_distribution(
    request: DistributionRequest,
    payouts: List[AllocationResult],
) -> Tuple[DistributionRound, List[DividendPayment]]:
    """Builds the round and per investor payments for a persistence layer to store."""
    dividend_round = DistributionRound(
        issued_at=request.issuance_date,
        number_of_shares=sum(p.number_of_shares or 0 for p in payouts),
        number_of_shareholders=number_of_shareholders(payouts),
        total_amount_in_cents=to_cents(request.total_amount_in_usd),
        return_of_capital=request.return_of_capital,
    )
    payments = [
        DividendPayment(
            company_investor_id=p.company_investor_id,
            total_amount_in_cents=to_cents(p.total_amount),
            qualified_amount_cents=to_cents(p.qualified_dividends_amount),
            number_of_shares=p.number_of_shares,
            investment_amount_cents=p.investment_amount_cents,
        )
        for p in payouts
    ]
    return dividend_round, payments
