"""Core data models for Finance Tracker.

This module defines the dataclasses, enums and (de)serialization helpers
used by every other module. It has zero internal imports -- everything
depends on it, but it depends on nothing within the package.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum


class TransactionType(str, Enum):
    """Kind of ledger entry."""

    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    CARD_EXPENSE = "CARD_EXPENSE"


class TransactionStatus(str, Enum):
    """Whether an entry has been paid/received yet."""

    COMPLETED = "COMPLETED"
    PENDING = "PENDING"


class AmountMode(str, Enum):
    """How an installment series interprets the originating amount.

    ``INSTALLMENT`` repeats the amount on every member; ``TOTAL`` divides
    it evenly across the members.
    """

    INSTALLMENT = "installment"
    TOTAL = "total"


DEFAULT_CATEGORY = "Other"

INCOME_CATEGORIES = [
    "Salary",
    "Freelance",
    "Investments",
    "Refunds",
    DEFAULT_CATEGORY,
]

EXPENSE_CATEGORIES = [
    "Housing",
    "Groceries",
    "Restaurants",
    "Transportation",
    "Health",
    "Education",
    "Leisure",
    "Subscriptions",
    "Shopping",
    "Travel",
    DEFAULT_CATEGORY,
]


def generate_id() -> str:
    """Return a fresh opaque identifier (32 lowercase hex characters)."""
    return uuid.uuid4().hex


@dataclass
class InstallmentInfo:
    """Position of a transaction within an installment group.

    Attributes:
        current: 1-based index of this member within the group.
        total: Number of members in the group (>= 1).
        group_id: Identifier shared by every member generated from the
            same originating entry.
    """

    current: int
    total: int
    group_id: str


@dataclass
class Transaction:
    """A single ledger entry.

    Attributes:
        transaction_id: Opaque unique identifier.
        description: Free text shown to the user.
        amount: Non-negative amount with 2 fractional digits. The sign is
            carried by ``type``, never by the amount.
        date: Calendar date of the entry (time of day is irrelevant).
        type: INCOME, EXPENSE or CARD_EXPENSE.
        category: Free-form label, usually one of the suggested categories.
        status: COMPLETED or PENDING.
        card_id: Referenced credit card. Set iff ``type`` is CARD_EXPENSE.
        installments: Installment descriptor, or ``None`` for a one-off.
    """

    transaction_id: str
    description: str
    amount: Decimal
    date: date
    type: TransactionType
    category: str = DEFAULT_CATEGORY
    status: TransactionStatus = TransactionStatus.COMPLETED
    card_id: str | None = None
    installments: InstallmentInfo | None = None


@dataclass
class CreditCard:
    """A credit card whose statement closes on a fixed day of the month.

    Attributes:
        card_id: Opaque unique identifier.
        name: Display name, e.g. "Nubank".
        limit: Credit limit.
        closing_day: Day of month the statement closes (1-31). May exceed
            the length of short months.
        due_day: Day of month the statement is due (1-31).
        color: Display color token.
    """

    card_id: str
    name: str
    limit: Decimal
    closing_day: int
    due_day: int
    color: str = "bg-slate-800"


@dataclass
class StageResult:
    """Transactions produced by a batch step plus what went wrong.

    Attributes:
        transactions: Successfully produced transactions.
        warnings: Non-fatal issues, e.g. a date that fell back to today.
        errors: Items that could not be processed at all and were skipped.
    """

    transactions: list[Transaction] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


@dataclass
class MonthlySummary:
    """Totals for one statement month."""

    month: date
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")
    income_pending: Decimal = Decimal("0")
    expense_pending: Decimal = Decimal("0")

    @property
    def balance(self) -> Decimal:
        return self.income - self.expense


@dataclass
class HistoryPoint:
    """Income and expense sums for one calendar month."""

    month: date
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")


@dataclass
class CategoryTotal:
    """Spending total for one category label."""

    category: str
    total: Decimal


@dataclass
class CardInvoice:
    """A card's statement for one month.

    Attributes:
        card: The card the statement belongs to.
        total: Sum of the card expenses attributed to the month.
        usage_percent: ``total / limit`` as a percentage, capped at 100.
        available: ``limit - total``; negative when over the limit.
        transactions: The card expenses making up ``total``.
    """

    card: CreditCard
    total: Decimal
    usage_percent: Decimal
    available: Decimal
    transactions: list[Transaction] = field(default_factory=list)


@dataclass
class ImportResult:
    """Outcome of a one-time legacy import.

    Attributes:
        transactions_imported: Number of transactions written to the store.
        cards_imported: Number of cards written to the store.
        warnings: Records imported with a degraded value (e.g. a date that
            fell back to today, a minted installment group id).
        errors: Records that were skipped entirely.
    """

    transactions_imported: int = 0
    cards_imported: int = 0
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


@dataclass
class AppConfig:
    """Top-level application configuration loaded from config.toml.

    Attributes:
        data_file: JSON document holding transactions and cards, relative
            to the project root.
        currency_symbol: Symbol prefixed to formatted amounts.
        decimal_separator: Separator between units and cents.
        thousands_separator: Digit-group separator.
        income_categories: Suggested income labels.
        expense_categories: Suggested expense labels.
        llm_provider: "anthropic" or "none".
        llm_model: Model identifier used for statement parsing.
        llm_api_key_env: Name of the environment variable with the API key.
    """

    data_file: str = "ledger.json"
    currency_symbol: str = "R$"
    decimal_separator: str = ","
    thousands_separator: str = "."
    income_categories: list[str] = field(default_factory=lambda: list(INCOME_CATEGORIES))
    expense_categories: list[str] = field(default_factory=lambda: list(EXPENSE_CATEGORIES))
    llm_provider: str = "anthropic"
    llm_model: str = "claude-sonnet-4-20250514"
    llm_api_key_env: str = "ANTHROPIC_API_KEY"


# ---------------------------------------------------------------------------
# Document (de)serialization
# ---------------------------------------------------------------------------


def transaction_to_dict(txn: Transaction) -> dict:
    """Convert *txn* to a JSON-compatible document."""
    doc = {
        "id": txn.transaction_id,
        "description": txn.description,
        "amount": str(txn.amount),
        "date": txn.date.isoformat(),
        "type": txn.type.value,
        "category": txn.category,
        "status": txn.status.value,
        "cardId": txn.card_id,
        "installments": None,
    }
    if txn.installments is not None:
        doc["installments"] = {
            "current": txn.installments.current,
            "total": txn.installments.total,
            "groupId": txn.installments.group_id,
        }
    return doc


def transaction_from_dict(doc: dict) -> Transaction:
    """Build a :class:`Transaction` from a document written by
    :func:`transaction_to_dict`.

    Raises:
        KeyError: If a required key is missing.
        ValueError: If a value cannot be converted.
    """
    inst = doc.get("installments")
    return Transaction(
        transaction_id=doc["id"],
        description=doc["description"],
        amount=Decimal(doc["amount"]),
        date=date.fromisoformat(doc["date"]),
        type=TransactionType(doc["type"]),
        category=doc.get("category", DEFAULT_CATEGORY),
        status=TransactionStatus(doc.get("status", TransactionStatus.COMPLETED.value)),
        card_id=doc.get("cardId"),
        installments=(
            InstallmentInfo(
                current=int(inst["current"]),
                total=int(inst["total"]),
                group_id=inst["groupId"],
            )
            if inst
            else None
        ),
    )


def card_to_dict(card: CreditCard) -> dict:
    """Convert *card* to a JSON-compatible document."""
    return {
        "id": card.card_id,
        "name": card.name,
        "limit": str(card.limit),
        "closingDay": card.closing_day,
        "dueDay": card.due_day,
        "color": card.color,
    }


def card_from_dict(doc: dict) -> CreditCard:
    """Build a :class:`CreditCard` from a document written by :func:`card_to_dict`."""
    return CreditCard(
        card_id=doc["id"],
        name=doc["name"],
        limit=Decimal(doc["limit"]),
        closing_day=int(doc["closingDay"]),
        due_day=int(doc["dueDay"]),
        color=doc.get("color", "bg-slate-800"),
    )
