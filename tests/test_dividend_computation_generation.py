from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError

from equity.models import CompanyInvestor, Dividend, DividendComputation, ShareClass, ShareHolding
from equity.services.dividend_computation_generation import DividendComputationGeneration

pytestmark = pytest.mark.django_db

ISSUANCE_DATE = date(2030, 6, 1)


def _generate(company, amount, return_of_capital=False, issuance_date=ISSUANCE_DATE):
    return DividendComputationGeneration(
        company,
        dividends_issuance_date=issuance_date,
        amount_in_usd=amount,
        return_of_capital=return_of_capital,
    ).process()


def _totals_by_name(computation):
    result = {}
    for output in computation.dividend_computation_outputs.select_related("company_investor"):
        name = output.investor_name or output.company_investor.legal_name
        result[(name, output.share_class)] = output
    return result


def test_common_shares_split_pro_rata(company, investors, common_holdings):
    computation = _generate(company, "60000")

    assert computation.total_amount_in_usd == Decimal("60000")
    assert computation.dividends_issuance_date == ISSUANCE_DATE
    assert computation.return_of_capital is False

    outputs = _totals_by_name(computation)
    first = outputs[("Matthew Smith", "Common")]
    second = outputs[("Jane Doe", "Common")]
    assert first.total_amount_in_usd == Decimal("20000.00")
    assert second.total_amount_in_usd == Decimal("40000.00")
    assert first.number_of_shares == 1000
    assert first.investment_amount_cents == 10000
    assert first.original_issue_price_in_usd == Decimal("10.00")
    assert first.qualified_dividend_amount_usd == Decimal("20000.00")

    payouts = computation.data_for_dividend_creation()
    assert sorted(p.total_amount for p in payouts) == [Decimal("20000.00"), Decimal("40000.00")]


def test_safe_holders_are_booked_by_entity_name(company, investors, common_holdings, safe_investment):
    computation = _generate(company, "60000")

    outputs = _totals_by_name(computation)
    safe = outputs[("Angel SAFE LLC", "Convertible")]
    assert safe.company_investor_id is None
    assert safe.number_of_shares == 1000
    assert safe.total_amount_in_usd == Decimal("15000.00")
    assert outputs[("Matthew Smith", "Common")].total_amount_in_usd == Decimal("15000.00")
    assert outputs[("Jane Doe", "Common")].total_amount_in_usd == Decimal("30000.00")

    payouts = computation.data_for_dividend_creation()
    assert sum(p.total_amount for p in payouts) == Decimal("60000.00")
    safe_payouts = [p for p in payouts if p.number_of_shares is None]
    assert [(p.company_investor_id, p.total_amount) for p in safe_payouts] == [
        (investors[0].id, Decimal("9000.00")),
        (investors[1].id, Decimal("6000.00")),
    ]


def test_preferred_hurdle_is_paid_first(company, investors, common_holdings):
    series_a = ShareClass.objects.create(
        company=company,
        name="Series A",
        original_issue_price_in_dollars=Decimal("10"),
        hurdle_rate=Decimal("8"),
        preferred=True,
    )
    ShareHolding.objects.create(
        company_investor=investors[0], share_class=series_a, number_of_shares=500, issued_at=date(2020, 1, 1)
    )

    computation = _generate(company, "1000")

    outputs = _totals_by_name(computation)
    preferred_row = outputs[("Matthew Smith", "Series A")]
    assert preferred_row.preferred_dividend_amount_in_usd == Decimal("400.00")
    assert preferred_row.dividend_amount_in_usd == Decimal("85.71")
    assert preferred_row.total_amount_in_usd == Decimal("485.71")
    assert outputs[("Matthew Smith", "Common")].total_amount_in_usd == Decimal("171.43")
    assert outputs[("Jane Doe", "Common")].total_amount_in_usd == Decimal("342.86")
    assert sum(o.total_amount_in_usd for o in outputs.values()) == Decimal("1000.00")


def test_preferred_scaled_down_when_amount_is_short(company, investors, common_holdings):
    series_a = ShareClass.objects.create(
        company=company,
        name="Series A",
        original_issue_price_in_dollars=Decimal("10"),
        hurdle_rate=Decimal("8"),
        preferred=True,
    )
    ShareHolding.objects.create(company_investor=investors[1], share_class=series_a, number_of_shares=500)

    computation = _generate(company, "100")

    outputs = _totals_by_name(computation)
    assert outputs[("Jane Doe", "Series A")].total_amount_in_usd == Decimal("100.00")
    assert outputs[("Matthew Smith", "Common")].total_amount_in_usd == Decimal("0.00")


def test_return_of_capital_is_never_qualified(company, investors, common_holdings):
    computation = _generate(company, "60000", return_of_capital=True)

    assert computation.return_of_capital is True
    assert all(o.qualified_dividend_amount_usd == 0 for o in computation.dividend_computation_outputs.all())


def test_recent_holdings_are_not_qualified(company, investors, common_holdings):
    ShareHolding.objects.filter(company_investor=investors[1]).update(issued_at=ISSUANCE_DATE - timedelta(days=10))

    computation = _generate(company, "60000")

    outputs = _totals_by_name(computation)
    assert outputs[("Matthew Smith", "Common")].qualified_dividend_amount_usd == Decimal("20000.00")
    assert outputs[("Jane Doe", "Common")].qualified_dividend_amount_usd == Decimal("0.00")


def test_company_without_holdings_gets_empty_computation(company):
    computation = _generate(company, "500")

    assert computation.dividend_computation_outputs.count() == 0
    assert computation.number_of_shareholders() == 0


def test_invalid_amount_creates_nothing(company, investors, common_holdings):
    with pytest.raises(ValidationError):
        _generate(company, "0")

    assert DividendComputation.objects.count() == 0


def test_uneven_split_adds_up_to_the_amount(company):
    common = ShareClass.objects.create(company=company, name="Common")
    for name in ("Ann", "Ben", "Cy"):
        investor = CompanyInvestor.objects.create(company=company, legal_name=name)
        ShareHolding.objects.create(
            company_investor=investor, share_class=common, number_of_shares=1, issued_at=date(2020, 1, 1)
        )

    computation = _generate(company, "200.00")

    outputs = list(computation.dividend_computation_outputs.all())
    assert sorted(o.total_amount_in_usd for o in outputs) == [
        Decimal("66.66"),
        Decimal("66.67"),
        Decimal("66.67"),
    ]
    assert sum(o.total_amount_in_usd for o in outputs) == Decimal("200.00")
    assert all(o.qualified_dividend_amount_usd == o.total_amount_in_usd for o in outputs)

    dividend_round = computation.generate_dividends()
    paid = sum(d.total_amount_in_cents for d in Dividend.objects.filter(dividend_round=dividend_round))
    assert paid == dividend_round.total_amount_in_cents == 20000


def test_uneven_split_with_safe_adds_up_to_the_amount(company, investors, common_holdings, safe_investment):
    computation = _generate(company, "1000.01")

    outputs = _totals_by_name(computation)
    assert outputs[("Jane Doe", "Common")].total_amount_in_usd == Decimal("500.01")
    assert outputs[("Angel SAFE LLC", "Convertible")].total_amount_in_usd == Decimal("250.00")
    assert sum(o.total_amount_in_usd for o in outputs.values()) == Decimal("1000.01")
