"""Plain-text report printers.

- :func:`print_dashboard` prints the monthly summary, pending amounts,
  top spending categories and the trailing six-month history.
- :func:`print_transactions` prints one month's transaction list.
- :func:`print_cards` prints every card's statement for a month.
- :func:`print_import_result` prints the outcome of a legacy import,
  including every warning.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from finance_tracker.models import (
    AppConfig,
    CardInvoice,
    CategoryTotal,
    HistoryPoint,
    ImportResult,
    MonthlySummary,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from finance_tracker.money import format_currency

_TYPE_LABELS = {
    TransactionType.INCOME: "income",
    TransactionType.EXPENSE: "expense",
    TransactionType.CARD_EXPENSE: "card",
}


def _money(amount: Decimal, config: AppConfig) -> str:
    return format_currency(
        amount,
        symbol=config.currency_symbol,
        decimal_sep=config.decimal_separator,
        thousands_sep=config.thousands_separator,
    )


def print_dashboard(
    summary: MonthlySummary,
    categories: list[CategoryTotal],
    history: list[HistoryPoint],
    config: AppConfig,
) -> None:
    """Print the dashboard for ``summary.month``."""
    print()
    print(f"== Summary: {summary.month:%Y-%m} ==")
    print(
        f"Income:   {_money(summary.income, config):>16}"
        f"  (pending {_money(summary.income_pending, config)})"
    )
    print(
        f"Expenses: {_money(summary.expense, config):>16}"
        f"  (pending {_money(summary.expense_pending, config)})"
    )
    print(f"Balance:  {_money(summary.balance, config):>16}")

    if categories:
        print()
        print("Top categories:")
        for i, item in enumerate(categories, start=1):
            print(f"  {i}. {item.category + ':':<20} {_money(item.total, config)}")

    if history:
        print()
        print("Last months:")
        for point in history:
            print(
                f"  {point.month:%Y-%m}  in {_money(point.income, config):>14}"
                f"  out {_money(point.expense, config):>14}"
            )
    print()


def _describe(txn: Transaction) -> str:
    text = txn.description
    if txn.installments is not None:
        text += f" ({txn.installments.current}/{txn.installments.total})"
    return text


def print_transactions(transactions: list[Transaction], month: date, config: AppConfig) -> None:
    """Print one line per transaction, in the given order."""
    print()
    print(f"== Transactions: {month:%Y-%m} ==")
    if not transactions:
        print("(no transactions)")
        print()
        return
    for txn in transactions:
        mark = "x" if txn.status is TransactionStatus.COMPLETED else " "
        sign = "+" if txn.type is TransactionType.INCOME else "-"
        print(
            f"[{mark}] {txn.date.isoformat()}  {_describe(txn):<36.36} "
            f"{txn.category:<15.15} {_TYPE_LABELS[txn.type]:<8}"
            f"{sign}{_money(txn.amount, config):>15}  {txn.transaction_id}"
        )
    print()


def print_cards(invoices: list[CardInvoice], month: date, config: AppConfig) -> None:
    """Print each card's statement total, usage and available credit."""
    print()
    print(f"== Card statements: {month:%Y-%m} ==")
    if not invoices:
        print("(no cards)")
        print()
        return
    for inv in invoices:
        card = inv.card
        print(
            f"{card.name}  (closes day {card.closing_day}, due day {card.due_day})"
            f"  {card.card_id}"
        )
        print(f"  Statement: {_money(inv.total, config)}")
        print(f"  Used:      {inv.usage_percent:.0f}% of {_money(card.limit, config)}")
        print(f"  Available: {_money(inv.available, config)}")
        for txn in inv.transactions:
            print(
                f"    {txn.date.isoformat()}  {_describe(txn):<36.36}"
                f" {_money(txn.amount, config)}"
            )
    print()


def print_import_result(result: ImportResult) -> None:
    """Print import counts followed by every warning and error."""
    print()
    print("== Legacy Import ==")
    print(f"  Transactions imported: {result.transactions_imported}")
    print(f"  Cards imported:        {result.cards_imported}")

    if result.warnings:
        print()
        print(f"Warnings: {len(result.warnings)}")
        for w in result.warnings:
            print(f"  - {w}")

    if result.errors:
        print()
        print(f"Errors: {len(result.errors)}")
        for e in result.errors:
            print(f"  - {e}")

    print()
