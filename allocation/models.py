from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional, Union


@dataclass(frozen=True)
class InvestorRef:
    company_investor_id: int


@dataclass(frozen=True)
class SafeHolderRef:
    name: str  # convertible investment entity name


PayeeRef = Union[InvestorRef, SafeHolderRef]


@dataclass
class ComputationOutput:
    payee: PayeeRef
    share_class: str
    number_of_shares: int
    total_amount_in_usd: Decimal
    qualified_dividend_amount_usd: Decimal
    investment_amount_cents: Optional[int] = None
    hurdle_rate: Optional[Decimal] = None
    original_issue_price_in_usd: Optional[Decimal] = None
    dividend_amount_in_usd: Decimal = Decimal("0")
    preferred_dividend_amount_in_usd: Decimal = Decimal("0")
    investor_name: str = ""  # display only


@dataclass
class DividendTotals:
    number_of_shares: int = 0
    total_amount: Decimal = Decimal("0")
    qualified_dividends_amount: Decimal = Decimal("0")
    investment_amount_cents: int = 0


@dataclass
class ConvertibleSecurity:
    company_investor_id: int
    principal_value_in_cents: int


@dataclass
class ConvertibleInvestment:
    entity_name: str
    amount_in_cents: int
    securities: List[ConvertibleSecurity] = field(default_factory=list)


@dataclass
class AllocationResult:
    company_investor_id: int
    number_of_shares: Optional[int]  # None for SAFE-derived rows
    total_amount: Decimal
    qualified_dividends_amount: Decimal
    investment_amount_cents: Optional[int]


@dataclass
class DistributionRequest:
    total_amount_in_usd: Decimal
    issuance_date: date
    return_of_capital: bool = False


@dataclass
class DividendPayment:
    company_investor_id: int
    total_amount_in_cents: int
    qualified_amount_cents: int
    number_of_shares: Optional[int]
    investment_amount_cents: Optional[int]


@dataclass
class DistributionRound:
    issued_at: date
    number_of_shares: int
    number_of_shareholders: int
    total_amount_in_cents: int
    return_of_capital: bool
