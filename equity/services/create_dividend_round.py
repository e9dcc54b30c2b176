from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from ..models import DividendComputation

logger = logging.getLogger(__name__)


class CreateDividendRound:
    """Finalizes a dividend computation into a dividend round, at most once."""

    def __init__(self, dividend_computation: DividendComputation):
        self.dividend_computation = dividend_computation

    def process(self) -> dict:
        if self.dividend_computation.finalized:
            return {"success": False, "error": "Dividend computation is already finalized"}

        try:
            with transaction.atomic():
                dividend_round = self.dividend_computation.finalize_and_create_dividend_round()
        except ValidationError as exc:
            self.dividend_computation.finalized_at = None
            return {"success": False, "error": "; ".join(exc.messages)}
        except Exception as exc:  # noqa: BLE001
            logger.exception("Finalizing dividend computation %s failed", self.dividend_computation.id)
            self.dividend_computation.finalized_at = None
            return {"success": False, "error": str(exc)}

        logger.info(
            "Dividend computation %s finalized into round %s",
            self.dividend_computation.id,
            dividend_round.external_id,
        )
        return {"success": True, "dividend_round": dividend_round}
