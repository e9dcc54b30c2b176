from __future__ import annotations

import logging
from typing import Sequence

from django.conf import settings
from django.core.mail import EmailMessage
from django.template.loader import render_to_string

from ..models import DividendComputation

logger = logging.getLogger(__name__)

CSV_MIME_TYPE = "text/csv"


def send_dividend_computation_report(computation: DividendComputation, recipients: Sequence[str]) -> int:
    """
    Emails the three CSV exports of a computation to the given recipients.
    Returns the number of messages sent.
    """
    if not recipients:
        raise ValueError("At least one recipient is required.")

    attachments = {
        "per_investor_and_share_class.csv": computation.to_csv(),
        "per_investor.csv": computation.to_per_investor_csv(),
        "final.csv": computation.to_final_csv(),
    }
    body = render_to_string(
        "equity/emails/dividend_computation_report.txt",
        {
            "computation": computation,
            "company": computation.company,
            "investor_rows": computation.broken_down_by_investor(),
        },
    )
    message = EmailMessage(
        subject=f"{computation.company.name} distribution of {computation.total_amount_in_usd} USD",
        body=body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=list(recipients),
    )
    for filename, content in attachments.items():
        message.attach(filename, content, CSV_MIME_TYPE)
    sent = message.send()
    logger.info("Sent dividend computation %s report to %s", computation.id, ", ".join(recipients))
    return sent
