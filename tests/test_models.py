from datetime import date
from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from allocation.calc import MissingConvertibleInvestment
from equity.models import Dividend, DividendComputation, DividendComputationOutput


pytestmark = pytest.mark.django_db


def _safe_output(computation, name="Angel SAFE LLC", total="1000.00", qualified="0"):
    return DividendComputationOutput.objects.create(
        dividend_computation=computation,
        investor_name=name,
        share_class="Convertible",
        number_of_shares=1000,
        dividend_amount_in_usd=Decimal(total),
        qualified_dividend_amount_usd=Decimal(qualified),
        total_amount_in_usd=Decimal(total),
    )


def test_clean_rejects_non_positive_amount(company):
    computation = DividendComputation(
        company=company, total_amount_in_usd=Decimal("0"), dividends_issuance_date=date(2030, 1, 1)
    )
    with pytest.raises(ValidationError) as excinfo:
        computation.full_clean()
    assert "total_amount_in_usd" in excinfo.value.message_dict


def test_output_requires_investor_or_name(dividend_computation):
    with pytest.raises(IntegrityError), transaction.atomic():
        DividendComputationOutput.objects.create(
            dividend_computation=dividend_computation,
            share_class="Common",
            number_of_shares=1,
            total_amount_in_usd=Decimal("1"),
        )


def test_number_of_shareholders(dividend_computation, computation_output):
    assert dividend_computation.number_of_shareholders() == 1


def test_broken_down_by_investor(dividend_computation, computation_output, safe_investment, investors):
    _safe_output(dividend_computation)

    rows = dividend_computation.broken_down_by_investor()

    assert rows == [
        {
            "investor_name": "Matthew Smith",
            "company_investor_id": investors[0].id,
            "investor_external_id": investors[0].external_id,
            "total_amount": Decimal("1000.00"),
            "number_of_shares": 100,
        },
        {
            "investor_name": "Angel SAFE LLC",
            "company_investor_id": None,
            "investor_external_id": None,
            "total_amount": Decimal("1000.00"),
            "number_of_shares": 1000,
        },
    ]


def test_data_for_dividend_creation_prorates_safe(dividend_computation, safe_investment, investors):
    _safe_output(dividend_computation, total="1000.00", qualified="500.00")

    payouts = dividend_computation.data_for_dividend_creation()

    assert [(p.company_investor_id, p.total_amount, p.qualified_dividends_amount) for p in payouts] == [
        (investors[0].id, Decimal("600.00"), Decimal("300.00")),
        (investors[1].id, Decimal("400.00"), Decimal("200.00")),
    ]


def test_data_for_dividend_creation_without_matching_investment(dividend_computation):
    _safe_output(dividend_computation, name="Unknown Fund")

    with pytest.raises(MissingConvertibleInvestment):
        dividend_computation.data_for_dividend_creation()


def test_generate_dividends(dividend_computation, computation_output, safe_investment, investors):
    _safe_output(dividend_computation, total="500.00")

    dividend_round = dividend_computation.generate_dividends()

    assert dividend_round.dividend_computation == dividend_computation
    assert dividend_round.issued_at == dividend_computation.dividends_issuance_date
    assert dividend_round.number_of_shares == 100
    assert dividend_round.number_of_shareholders == 2
    assert dividend_round.total_amount_in_cents == 100000000
    assert dividend_round.status == Dividend.Status.ISSUED

    dividends = list(dividend_round.dividends.order_by("id"))
    assert [(d.company_investor_id, d.total_amount_in_cents, d.number_of_shares) for d in dividends] == [
        (investors[0].id, 100000, 100),
        (investors[0].id, 30000, None),
        (investors[1].id, 20000, None),
    ]
    assert [d.investment_amount_cents for d in dividends] == [5000, 6000, 4000]


def test_csv_exports(dividend_computation, computation_output, safe_investment):
    _safe_output(dividend_computation, total="100.00")

    assert dividend_computation.to_csv().splitlines()[1:] == [
        "Matthew Smith,Common,100,,,1000.00,0.00,1000.00",
        "Angel SAFE LLC,Convertible,1000,,,100.00,0.00,100.00",
    ]
    assert dividend_computation.to_per_investor_csv().splitlines()[2] == "Angel SAFE LLC,,1000,100.00"
    final_lines = dividend_computation.to_final_csv().splitlines()
    assert final_lines[2].startswith("Matthew Smith,")
    assert final_lines[2].endswith(",,60.00")
    assert final_lines[3].startswith("Jane Doe,")
    assert final_lines[3].endswith(",,40.00")
