"""Invoice cycle classification.

Decides which statement month a transaction is reported under. Card
expenses follow their card's billing cycle; everything else follows the
calendar.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date

from finance_tracker.models import CreditCard, Transaction, TransactionType
from finance_tracker.money import invoice_month, same_month

Cards = Iterable[CreditCard] | Mapping[str, CreditCard]


def find_card(cards: Cards, card_id: str | None) -> CreditCard | None:
    """Look up a card by id in a sequence or an id-keyed mapping.

    Returns ``None`` for a missing id or an unknown card.
    """
    if not card_id:
        return None
    if isinstance(cards, Mapping):
        return cards.get(card_id)
    for card in cards:
        if card.card_id == card_id:
            return card
    return None


def belongs_to_statement_month(
    transaction: Transaction,
    cards: Cards,
    target_month: date,
) -> bool:
    """Return True if *transaction* is reported in *target_month*.

    Only the month and year of *target_month* matter.

    A card expense whose card cannot be found (an orphaned reference) is
    classified by its calendar date, like a plain expense.
    """
    if transaction.type is TransactionType.CARD_EXPENSE:
        card = find_card(cards, transaction.card_id)
        if card is not None:
            return same_month(invoice_month(transaction.date, card.closing_day), target_month)
    return same_month(transaction.date, target_month)
