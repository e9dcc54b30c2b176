from datetime import date, timedelta
from decimal import Decimal

import pytest

from equity.models import (
    Company,
    CompanyAdministrator,
    CompanyInvestor,
    ConvertibleInvestment,
    ConvertibleSecurity,
    DividendComputation,
    DividendComputationOutput,
    ShareClass,
    ShareHolding,
)


@pytest.fixture
def company(db):
    return Company.objects.create(name="Gumroad", equity_enabled=True)


@pytest.fixture
def admin_user(django_user_model, company):
    user = django_user_model.objects.create_user(username="admin", password="secret-pass")
    CompanyAdministrator.objects.create(company=company, user=user)
    return user


@pytest.fixture
def admin_client(client, admin_user):
    client.force_login(admin_user)
    return client


@pytest.fixture
def investors(company):
    first = CompanyInvestor.objects.create(
        company=company, legal_name="Matthew Smith", investment_amount_in_cents=100000
    )
    second = CompanyInvestor.objects.create(
        company=company, legal_name="Jane Doe", investment_amount_in_cents=200000
    )
    return first, second


@pytest.fixture
def common_holdings(company, investors):
    """1000 and 2000 common shares, issued long before any test payment date."""
    share_class = ShareClass.objects.create(
        company=company, name="Common", original_issue_price_in_dollars=Decimal("10.00")
    )
    issued_at = date(2020, 1, 1)
    first, second = investors
    ShareHolding.objects.create(
        company_investor=first,
        share_class=share_class,
        number_of_shares=1000,
        share_price_usd=Decimal("10.00"),
        total_amount_in_cents=10000,
        issued_at=issued_at,
    )
    ShareHolding.objects.create(
        company_investor=second,
        share_class=share_class,
        number_of_shares=2000,
        share_price_usd=Decimal("10.00"),
        total_amount_in_cents=20000,
        issued_at=issued_at,
    )
    return share_class


@pytest.fixture
def safe_investment(company, investors):
    first, second = investors
    investment = ConvertibleInvestment.objects.create(
        company=company,
        entity_name="Angel SAFE LLC",
        amount_in_cents=10000,
        implied_shares=1000,
        issued_at=date(2020, 1, 1),
    )
    ConvertibleSecurity.objects.create(
        convertible_investment=investment, company_investor=first, principal_value_in_cents=6000
    )
    ConvertibleSecurity.objects.create(
        convertible_investment=investment, company_investor=second, principal_value_in_cents=4000
    )
    return investment


@pytest.fixture
def dividend_computation(company):
    return DividendComputation.objects.create(
        company=company,
        total_amount_in_usd=Decimal("1000000"),
        dividends_issuance_date=date.today() + timedelta(days=15),
    )


@pytest.fixture
def computation_output(dividend_computation, investors):
    return DividendComputationOutput.objects.create(
        dividend_computation=dividend_computation,
        company_investor=investors[0],
        share_class="Common",
        number_of_shares=100,
        preferred_dividend_amount_in_usd=Decimal("0"),
        dividend_amount_in_usd=Decimal("1000"),
        qualified_dividend_amount_usd=Decimal("0"),
        total_amount_in_usd=Decimal("1000"),
        investment_amount_cents=5000,
    )
