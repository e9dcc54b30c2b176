from __future__ import annotations

import argparse
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from pathlib import Path
from typing import Dict, List

from allocation.calc import AllocationError, aggregate, build_payouts, generate_distribution
from allocation.exports import final_csv
from allocation.io_store import (
    CONVERTIBLES_FILE,
    INVESTORS_FILE,
    OUTPUTS_FILE,
    load_convertibles,
    load_investor_names,
    load_outputs,
    save_convertibles,
    save_investor_names,
    save_outputs,
)
from allocation.models import (
    AllocationResult,
    ComputationOutput,
    ConvertibleInvestment,
    ConvertibleSecurity,
    DistributionRequest,
    InvestorRef,
    SafeHolderRef,
)


def fmt_money(val: Decimal) -> str:
    return f"{val.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP):,.2f}"


def print_table(payouts: List[AllocationResult], names: Dict[int, str], total: Decimal) -> None:
    headers = ["Investor", "Investor ID", "Shares", "Amount (USD)", "Qualified (USD)"]
    rows = []
    for p in payouts:
        rows.append(
            [
                names.get(p.company_investor_id, ""),
                str(p.company_investor_id),
                "" if p.number_of_shares is None else str(p.number_of_shares),
                fmt_money(p.total_amount),
                fmt_money(p.qualified_dividends_amount),
            ]
        )
    widths = [max(len(str(x)) for x in col) for col in zip(headers, *rows)]
    line = " | ".join(h.ljust(w) for h, w in zip(headers, widths))
    print(line)
    print("-" * len(line))
    for row in rows:
        print(" | ".join(str(x).ljust(w) for x, w in zip(row, widths)))
    print("-" * len(line))
    allocated = sum((p.total_amount for p in payouts), Decimal("0"))
    print(f"Distribution total: {fmt_money(total)} | Allocated: {fmt_money(allocated)}")


def cmd_allocate(
    amount: Decimal,
    issuance_date: date,
    return_of_capital: bool = False,
    outputs_path: Path = OUTPUTS_FILE,
    convertibles_path: Path = CONVERTIBLES_FILE,
    investors_path: Path = INVESTORS_FILE,
    csv_path: Path = Path("final.csv"),
) -> bool:
    outputs = load_outputs(outputs_path)
    names = load_investor_names(investors_path)
    share_dividends, safe_dividends = aggregate(outputs)
    try:
        payouts = build_payouts(share_dividends, safe_dividends, load_convertibles(convertibles_path))
    except AllocationError as exc:
        print(f"Error: {exc}")
        return False

    print_table(payouts, names, amount)
    dividend_round, _ = generate_distribution(
        DistributionRequest(amount, issuance_date, return_of_capital), payouts
    )
    print(
        f"Shareholders: {dividend_round.number_of_shareholders} | Shares: {dividend_round.number_of_shares}"
    )
    csv_path.write_text(final_csv(payouts, names), encoding="utf-8")
    print(f"Final list written -> {csv_path}")
    return True


def cmd_init_example() -> None:
    names = {1: "Alice Investor", 2: "Bob Investor", 3: "Carol Angel"}
    outputs: List[ComputationOutput] = [
        ComputationOutput(
            payee=InvestorRef(1),
            share_class="Common",
            number_of_shares=1000,
            total_amount_in_usd=Decimal("20000"),
            qualified_dividend_amount_usd=Decimal("20000"),
            investment_amount_cents=100000,
        ),
        ComputationOutput(
            payee=InvestorRef(2),
            share_class="Common",
            number_of_shares=2000,
            total_amount_in_usd=Decimal("40000"),
            qualified_dividend_amount_usd=Decimal("40000"),
            investment_amount_cents=200000,
        ),
        ComputationOutput(
            payee=SafeHolderRef("Angel SAFE LLC"),
            share_class="Convertible",
            number_of_shares=500,
            total_amount_in_usd=Decimal("10000"),
            qualified_dividend_amount_usd=Decimal("0"),
        ),
    ]
    investments = [
        ConvertibleInvestment(
            entity_name="Angel SAFE LLC",
            amount_in_cents=10000,
            securities=[
                ConvertibleSecurity(company_investor_id=3, principal_value_in_cents=6000),
                ConvertibleSecurity(company_investor_id=1, principal_value_in_cents=4000),
            ],
        )
    ]
    save_outputs(outputs)
    save_convertibles(investments)
    save_investor_names(names)
    print(f"Example files written: {OUTPUTS_FILE}, {CONVERTIBLES_FILE}, {INVESTORS_FILE}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Dividend allocation tool")
    sub = parser.add_subparsers(dest="cmd")

    sub.add_parser("init-example", help="Write example input files")
    alloc_p = sub.add_parser("allocate", help="Allocate a distribution across investors")
    alloc_p.add_argument("outputs", nargs="?", type=Path, default=OUTPUTS_FILE, help="Computation outputs JSON")
    alloc_p.add_argument("--amount", required=True, type=Decimal, help="Total amount in USD")
    alloc_p.add_argument("--date", required=True, type=date.fromisoformat, help="YYYY-MM-DD")
    alloc_p.add_argument("--return-of-capital", action="store_true")
    alloc_p.add_argument("--convertibles", type=Path, default=CONVERTIBLES_FILE)
    alloc_p.add_argument("--investors", type=Path, default=INVESTORS_FILE)
    alloc_p.add_argument("--csv", type=Path, default=Path("final.csv"))

    args = parser.parse_args()
    if args.cmd == "init-example":
        cmd_init_example()
    elif args.cmd == "allocate":
        ok = cmd_allocate(
            args.amount,
            args.date,
            args.return_of_capital,
            outputs_path=args.outputs,
            convertibles_path=args.convertibles,
            investors_path=args.investors,
            csv_path=args.csv,
        )
        if not ok:
            raise SystemExit(1)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
