from decimal import Decimal

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from equity.services.notifications import send_dividend_computation_report
from equity.templatetags.money import money

pytestmark = pytest.mark.django_db


def test_report_attaches_three_csvs(mailoutbox, dividend_computation, computation_output):
    sent = send_dividend_computation_report(dividend_computation, ["ops@example.com"])

    assert sent == 1
    message = mailoutbox[0]
    assert message.to == ["ops@example.com"]
    assert message.subject.startswith("Gumroad distribution of")
    assert [name for name, _, _ in message.attachments] == [
        "per_investor_and_share_class.csv",
        "per_investor.csv",
        "final.csv",
    ]
    assert all(mime == "text/csv" for _, _, mime in message.attachments)
    assert "Matthew Smith: $1,000.00" in message.body


def test_report_requires_recipients(dividend_computation):
    with pytest.raises(ValueError):
        send_dividend_computation_report(dividend_computation, [])


def test_management_command(mailoutbox, dividend_computation, computation_output):
    call_command("send_dividend_report", str(dividend_computation.id), "--to", "a@example.com", "b@example.com")

    assert len(mailoutbox) == 1
    assert mailoutbox[0].to == ["a@example.com", "b@example.com"]


def test_management_command_unknown_computation(db):
    with pytest.raises(CommandError):
        call_command("send_dividend_report", "999999", "--to", "a@example.com")


@pytest.mark.parametrize(
    "value, expected",
    [
        (12345.6, "12,345.60"),
        ("0", "0.00"),
        (None, None),
        ("abc", "abc"),
        (Decimal("10.005"), "10.01"),
        (Decimal("12345678901234567.89"), "12,345,678,901,234,567.89"),
    ],
)
def test_money_filter(value, expected):
    assert money(value) == expected
