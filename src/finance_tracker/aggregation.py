"""Monthly totals, history, category breakdown and drill-down queries.

Every function here is a pure read over already-fetched collections: the
inputs are never mutated, the input order does not change any total, and
a filter with no matches yields an empty result rather than raising.

Statement-month views (totals, pending, categories, card statements) use
:func:`~finance_tracker.classifier.belongs_to_statement_month`. The
trailing history uses plain calendar dates instead.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date
from decimal import Decimal

from finance_tracker.classifier import Cards, belongs_to_statement_month
from finance_tracker.models import (
    CardInvoice,
    CategoryTotal,
    CreditCard,
    HistoryPoint,
    MonthlySummary,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from finance_tracker.money import add_months, month_start, quantize_amount, same_month

ZERO = Decimal("0")


def _index_cards(cards: Cards) -> dict[str, CreditCard]:
    if isinstance(cards, Mapping):
        return dict(cards)
    return {card.card_id: card for card in cards}


def _sum(transactions: Iterable[Transaction]) -> Decimal:
    return sum((t.amount for t in transactions), ZERO)


def _is_income(txn: Transaction) -> bool:
    return txn.type is TransactionType.INCOME


# ---------------------------------------------------------------------------
# Statement-month views
# ---------------------------------------------------------------------------


def transactions_in_month(
    transactions: Iterable[Transaction],
    cards: Cards,
    target_month: date,
) -> list[Transaction]:
    """Return the transactions reported in *target_month*, in input order."""
    index = _index_cards(cards)
    return [t for t in transactions if belongs_to_statement_month(t, index, target_month)]


def pending_breakdown(
    transactions: Iterable[Transaction],
    cards: Cards,
    target_month: date,
) -> tuple[Decimal, Decimal]:
    """Sum PENDING entries reported in *target_month*.

    Returns:
        ``(income_pending, expense_pending)``. The expense side covers
        every non-income type, card expenses included.
    """
    pending = [
        t
        for t in transactions_in_month(transactions, cards, target_month)
        if t.status is TransactionStatus.PENDING
    ]
    income_pending = _sum(t for t in pending if _is_income(t))
    expense_pending = _sum(t for t in pending if not _is_income(t))
    return income_pending, expense_pending


def monthly_totals(
    transactions: Iterable[Transaction],
    cards: Cards,
    target_month: date,
) -> MonthlySummary:
    """Compute income, expense, balance and pending sums for *target_month*.

    Expense combines EXPENSE and CARD_EXPENSE; balance is income minus
    expense.
    """
    in_month = transactions_in_month(transactions, cards, target_month)
    income_pending, expense_pending = pending_breakdown(in_month, cards, target_month)
    return MonthlySummary(
        month=month_start(target_month),
        income=_sum(t for t in in_month if _is_income(t)),
        expense=_sum(t for t in in_month if not _is_income(t)),
        income_pending=income_pending,
        expense_pending=expense_pending,
    )


def category_breakdown(
    transactions: Iterable[Transaction],
    cards: Cards,
    target_month: date,
    limit: int = 5,
) -> list[CategoryTotal]:
    """Rank spending categories for *target_month*.

    Non-income transactions are grouped by category label and sorted by
    descending sum. Equal sums keep the order in which their category was
    first encountered. At most *limit* groups are returned.
    """
    totals: dict[str, Decimal] = {}
    for txn in transactions_in_month(transactions, cards, target_month):
        if _is_income(txn):
            continue
        totals[txn.category] = totals.get(txn.category, ZERO) + txn.amount

    # sorted() is stable, and dicts keep first-insertion order
    ranked = sorted(totals.items(), key=lambda pair: pair[1], reverse=True)
    return [CategoryTotal(category=cat, total=total) for cat, total in ranked[:limit]]


# ---------------------------------------------------------------------------
# Calendar-month views
# ---------------------------------------------------------------------------


def trailing_history(
    transactions: Iterable[Transaction],
    today: date | None = None,
    months: int = 6,
) -> list[HistoryPoint]:
    """Income and expense sums for the *months* months ending at *today*.

    The current month is included and points are ordered oldest first.
    Matching is by calendar date only, card closing days are ignored.
    """
    today = today or date.today()
    txns = list(transactions)
    current = month_start(today)
    history: list[HistoryPoint] = []
    for offset in range(months - 1, -1, -1):
        month = add_months(current, -offset)
        month_txns = [t for t in txns if same_month(t.date, month)]
        history.append(
            HistoryPoint(
                month=month,
                income=_sum(t for t in month_txns if _is_income(t)),
                expense=_sum(t for t in month_txns if not _is_income(t)),
            )
        )
    return history


def list_transactions(
    transactions: Iterable[Transaction],
    target_month: date,
    sort_by: str = "date",
    descending: bool = True,
) -> list[Transaction]:
    """List the transactions dated in *target_month*'s calendar month.

    Args:
        transactions: The full transaction set.
        target_month: Any date within the month to list.
        sort_by: ``"date"`` or ``"amount"``.
        descending: Newest/largest first when True.

    Raises:
        ValueError: If *sort_by* is not a supported key.
    """
    if sort_by == "date":
        key = lambda t: t.date  # noqa: E731
    elif sort_by == "amount":
        key = lambda t: t.amount  # noqa: E731
    else:
        raise ValueError(f"Unsupported sort key: {sort_by!r}. Use 'date' or 'amount'.")

    in_month = [t for t in transactions if same_month(t.date, target_month)]
    return sorted(in_month, key=key, reverse=descending)


# ---------------------------------------------------------------------------
# Drill-down queries
# ---------------------------------------------------------------------------


def completed_by_type(
    transactions: Iterable[Transaction],
    cards: Cards,
    target_month: date,
    txn_type: TransactionType,
) -> list[Transaction]:
    """COMPLETED transactions of one side of the ledger in *target_month*.

    ``INCOME`` selects income entries. ``EXPENSE`` and ``CARD_EXPENSE``
    both select the whole expense side (plain and card expenses).
    """
    want_income = txn_type is TransactionType.INCOME
    return [
        t
        for t in transactions_in_month(transactions, cards, target_month)
        if t.status is TransactionStatus.COMPLETED and _is_income(t) == want_income
    ]


def card_statement(
    transactions: Iterable[Transaction],
    card: CreditCard,
    target_month: date,
) -> list[Transaction]:
    """The card expenses charged to *card*'s statement for *target_month*."""
    index = {card.card_id: card}
    return [
        t
        for t in transactions
        if t.type is TransactionType.CARD_EXPENSE
        and t.card_id == card.card_id
        and belongs_to_statement_month(t, index, target_month)
    ]


def card_invoices(
    transactions: Iterable[Transaction],
    cards: Iterable[CreditCard],
    target_month: date,
) -> list[CardInvoice]:
    """Build the statement of every card for *target_month*, in card order."""
    txns = list(transactions)
    invoices: list[CardInvoice] = []
    for card in cards:
        statement = card_statement(txns, card, target_month)
        total = _sum(statement)
        if card.limit > 0:
            usage = min(total / card.limit * 100, Decimal("100"))
        else:
            usage = ZERO
        invoices.append(
            CardInvoice(
                card=card,
                total=total,
                usage_percent=quantize_amount(usage),
                available=card.limit - total,
                transactions=statement,
            )
        )
    return invoices
