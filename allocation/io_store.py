from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path
from typing import Dict, List

from .models import (
    ComputationOutput,
    ConvertibleInvestment,
    ConvertibleSecurity,
    InvestorRef,
    PayeeRef,
    SafeHolderRef,
)

ROOT = Path(".")
OUTPUTS_FILE = ROOT / "outputs.json"
CONVERTIBLES_FILE = ROOT / "convertibles.json"
INVESTORS_FILE = ROOT / "investors.json"


def _payee_from_row(item: dict) -> PayeeRef:
    investor_id = item.get("investor_id")
    investor_name = item.get("investor_name")
    if (investor_id is None) == (not investor_name):
        raise ValueError(f"Exactly one of investor_id/investor_name is required: {item}")
    if investor_id is not None:
        return InvestorRef(int(investor_id))
    return SafeHolderRef(investor_name)


def _payee_to_row(payee: PayeeRef) -> dict:
    if isinstance(payee, InvestorRef):
        return {"investor_id": payee.company_investor_id, "investor_name": None}
    return {"investor_id": None, "investor_name": payee.name}


def load_outputs(path: Path = OUTPUTS_FILE) -> List[ComputationOutput]:
    if not path.exists():
        raise FileNotFoundError(f"{path} not found.")
    data = json.loads(path.read_text(encoding="utf-8"))
    outputs = []
    for item in data:
        cents = item.get("investment_amount_cents")
        outputs.append(
            ComputationOutput(
                payee=_payee_from_row(item),
                share_class=item.get("share_class", ""),
                number_of_shares=int(item["number_of_shares"]),
                total_amount_in_usd=Decimal(str(item["total_amount_in_usd"])),
                qualified_dividend_amount_usd=Decimal(str(item.get("qualified_dividend_amount_usd", 0))),
                investment_amount_cents=int(cents) if cents is not None else None,
            )
        )
    return outputs


def save_outputs(outputs: List[ComputationOutput], path: Path = OUTPUTS_FILE) -> None:
    payload = []
    for o in outputs:
        row = _payee_to_row(o.payee)
        row.update(
            {
                "share_class": o.share_class,
                "number_of_shares": o.number_of_shares,
                "total_amount_in_usd": str(o.total_amount_in_usd),
                "qualified_dividend_amount_usd": str(o.qualified_dividend_amount_usd),
                "investment_amount_cents": o.investment_amount_cents,
            }
        )
        payload.append(row)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def load_convertibles(path: Path = CONVERTIBLES_FILE) -> Dict[str, ConvertibleInvestment]:
    if not path.exists():
        return {}
    data = json.loads(path.read_text(encoding="utf-8"))
    investments = {}
    for item in data:
        securities = [
            ConvertibleSecurity(
                company_investor_id=int(s["company_investor_id"]),
                principal_value_in_cents=int(s["principal_value_in_cents"]),
            )
            for s in item.get("securities", [])
        ]
        investments[item["entity_name"]] = ConvertibleInvestment(
            entity_name=item["entity_name"],
            amount_in_cents=int(item["amount_in_cents"]),
            securities=securities,
        )
    return investments


def save_convertibles(investments: List[ConvertibleInvestment], path: Path = CONVERTIBLES_FILE) -> None:
    payload = [
        {
            "entity_name": inv.entity_name,
            "amount_in_cents": inv.amount_in_cents,
            "securities": [
                {
                    "company_investor_id": s.company_investor_id,
                    "principal_value_in_cents": s.principal_value_in_cents,
                }
                for s in inv.securities
            ],
        }
        for inv in investments
    ]
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def load_investor_names(path: Path = INVESTORS_FILE) -> Dict[int, str]:
    if not path.exists():
        return {}
    data = json.loads(path.read_text(encoding="utf-8"))
    return {int(k): v for k, v in data.items()}


def save_investor_names(names: Dict[int, str], path: Path = INVESTORS_FILE) -> None:
    path.write_text(json.dumps({str(k): v for k, v in names.items()}, indent=2), encoding="utf-8")
