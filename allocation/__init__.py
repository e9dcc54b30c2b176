from .calc import (
    AllocationError,
    MissingConvertibleInvestment,
    aggregate,
    broken_down_by_investor,
    build_payouts,
    generate_distribution,
    number_of_shareholders,
    split_in_cents,
)

__all__ = [
    "AllocationError",
    "MissingConvertibleInvestment",
    "aggregate",
    "broken_down_by_investor",
    "build_payouts",
    "generate_distribution",
    "number_of_shareholders",
    "split_in_cents",
]
