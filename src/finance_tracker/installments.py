"""Installment series expansion.

Expands a single entry into N monthly members sharing a group id. The
rounding remainder of a ``total`` split is not redistributed: 100.00 over
3 installments yields three members of 33.33.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from finance_tracker.models import AmountMode, InstallmentInfo, Transaction, generate_id
from finance_tracker.money import add_months, quantize_amount

logger = logging.getLogger(__name__)


def generate_installments(
    transaction: Transaction,
    total_installments: int,
    amount_mode: AmountMode | str = AmountMode.INSTALLMENT,
) -> list[Transaction]:
    """Expand *transaction* into *total_installments* monthly members.

    Args:
        transaction: The originating entry. Its id is discarded when it is
            expanded.
        total_installments: Number of members. Values of 1 or less
            (including zero and negatives) are clamped to 1.
        amount_mode: ``"installment"`` repeats the amount on every member;
            ``"total"`` divides it evenly, rounding each member to cents.

    Returns:
        ``[transaction]`` unchanged when there is a single installment,
        otherwise a new list of members dated at consecutive month offsets
        0..N-1 from the originating date.
    """
    if total_installments <= 1:
        return [transaction]

    mode = AmountMode(amount_mode)
    if mode is AmountMode.TOTAL:
        amount = quantize_amount(transaction.amount / total_installments)
    else:
        amount = transaction.amount

    group_id = generate_id()
    members = [
        replace(
            transaction,
            transaction_id=generate_id(),
            date=add_months(transaction.date, i),
            amount=amount,
            installments=InstallmentInfo(
                current=i + 1,
                total=total_installments,
                group_id=group_id,
            ),
        )
        for i in range(total_installments)
    ]
    logger.debug(
        "Expanded %r into %d installments (group %s)",
        transaction.description,
        total_installments,
        group_id,
    )
    return members
