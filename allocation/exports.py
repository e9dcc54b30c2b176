"""CSV projections of a dividend computation."""
from __future__ import annotations

import csv
import io
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from .calc import TWOPLACES
from .models import AllocationResult, ComputationOutput, DividendTotals, InvestorRef, PayeeRef

PER_SHARE_CLASS_HEADERS = [
    "Investor",
    "Share class",
    "Number of shares",
    "Hurdle rate",
    "Original issue price (USD)",
    "Common dividend amount (USD)",
    "Preferred dividend amount (USD)",
    "Total amount (USD)",
]
PER_INVESTOR_HEADERS = ["Investor", "Investor ID", "Number of shares", "Amount (USD)"]


def _amount(val: Optional[Decimal]) -> str:
    if val is None:
        return ""
    return str(val.quantize(TWOPLACES, rounding=ROUND_HALF_UP))


def _optional(val) -> str:
    return "" if val is None else str(val)


def _write(headers: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(rows)
    return buf.getvalue()


def _payee_label(payee: PayeeRef, names: Mapping[int, str]) -> Tuple[str, str]:
    if isinstance(payee, InvestorRef):
        return names.get(payee.company_investor_id, ""), str(payee.company_investor_id)
    return payee.name, ""


def per_share_class_csv(outputs: Iterable[ComputationOutput], names: Mapping[int, str]) -> str:
    rows: List[List[str]] = []
    for output in outputs:
        investor_name = output.investor_name or _payee_label(output.payee, names)[0]
        rows.append(
            [
                investor_name,
                output.share_class,
                str(output.number_of_shares),
                _optional(output.hurdle_rate),
                _optional(output.original_issue_price_in_usd),
                _amount(output.dividend_amount_in_usd),
                _amount(output.preferred_dividend_amount_in_usd),
                _amount(output.total_amount_in_usd),
            ]
        )
    return _write(PER_SHARE_CLASS_HEADERS, rows)


def per_investor_csv(
    breakdown: Iterable[Tuple[PayeeRef, DividendTotals]], names: Mapping[int, str]
) -> str:
    rows = []
    for payee, info in breakdown:
        investor_name, investor_id = _payee_label(payee, names)
        rows.append([investor_name, investor_id, str(info.number_of_shares), _amount(info.total_amount)])
    return _write(PER_INVESTOR_HEADERS, rows)


def final_csv(payouts: Iterable[AllocationResult], names: Mapping[int, str]) -> str:
    rows = []
    for payout in payouts:
        rows.append(
            [
                names.get(payout.company_investor_id, ""),
                str(payout.company_investor_id),
                _optional(payout.number_of_shares),
                _amount(payout.total_amount),
            ]
        )
    return _write(PER_INVESTOR_HEADERS, rows)
