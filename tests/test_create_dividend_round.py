from decimal import Decimal

import pytest

from equity.models import Dividend, DividendComputationOutput, DividendRound
from equity.services.create_dividend_round import CreateDividendRound

pytestmark = pytest.mark.django_db


def test_generates_dividends_and_marks_finalized(dividend_computation, computation_output):
    result = CreateDividendRound(dividend_computation).process()
    dividend_computation.refresh_from_db()

    assert result["success"] is True
    assert result["dividend_round"].dividend_computation_id == dividend_computation.id
    assert dividend_computation.finalized_at is not None
    assert Dividend.objects.filter(dividend_round=result["dividend_round"]).count() == 1


def test_already_finalized_is_rejected(dividend_computation, computation_output):
    dividend_computation.mark_as_finalized()

    result = CreateDividendRound(dividend_computation).process()

    assert result["success"] is False
    assert "already finalized" in result["error"]
    assert DividendRound.objects.count() == 0


def test_second_call_does_not_duplicate(dividend_computation, computation_output):
    first = CreateDividendRound(dividend_computation).process()
    second = CreateDividendRound(dividend_computation).process()

    assert first["success"] is True
    assert second["success"] is False
    assert DividendRound.objects.count() == 1
    assert Dividend.objects.count() == 1


def test_rolls_back_when_finalizing_fails(dividend_computation, computation_output, monkeypatch):
    def boom():
        raise RuntimeError("Database connection failed")

    monkeypatch.setattr(dividend_computation, "mark_as_finalized", boom)

    result = CreateDividendRound(dividend_computation).process()
    dividend_computation.refresh_from_db()

    assert result["success"] is False
    assert "Database connection failed" in result["error"]
    assert dividend_computation.finalized_at is None
    assert DividendRound.objects.count() == 0
    assert Dividend.objects.count() == 0


def test_unknown_safe_holder_is_reported(dividend_computation):
    DividendComputationOutput.objects.create(
        dividend_computation=dividend_computation,
        investor_name="Unknown Fund",
        share_class="Convertible",
        number_of_shares=10,
        total_amount_in_usd=Decimal("10"),
    )

    result = CreateDividendRound(dividend_computation).process()

    assert result["success"] is False
    assert "Unknown Fund" in result["error"]
    assert DividendRound.objects.count() == 0
