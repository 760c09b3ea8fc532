"""Shared pytest fixtures for Finance Tracker tests.

Provides reusable fixtures for:
- sample_cards: two cards with early and late closing days.
- sample_transactions: a realistic March 2026 ledger mixing income, plain
  expenses, card expenses on both cards, a pending entry and an orphaned
  card expense.
- memory_store: a MemoryStore pre-loaded with the samples.
- tmp_project_dir: an initialized project directory for CLI tests.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from finance_tracker.config import initialize
from finance_tracker.models import (
    CreditCard,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from finance_tracker.store import MemoryStore


def make_txn(
    transaction_id: str = "t1",
    description: str = "Groceries",
    amount: str = "100.00",
    txn_date: date = date(2026, 3, 10),
    txn_type: TransactionType = TransactionType.EXPENSE,
    category: str = "Groceries",
    status: TransactionStatus = TransactionStatus.COMPLETED,
    card_id: str | None = None,
) -> Transaction:
    """Build a Transaction with sensible defaults."""
    return Transaction(
        transaction_id=transaction_id,
        description=description,
        amount=Decimal(amount),
        date=txn_date,
        type=txn_type,
        category=category,
        status=status,
        card_id=card_id,
    )


def make_card(
    card_id: str = "c1",
    name: str = "Nubank",
    limit: str = "8000.00",
    closing_day: int = 5,
    due_day: int = 12,
) -> CreditCard:
    """Build a CreditCard with sensible defaults."""
    return CreditCard(
        card_id=card_id,
        name=name,
        limit=Decimal(limit),
        closing_day=closing_day,
        due_day=due_day,
        color="bg-purple-600",
    )


@pytest.fixture
def sample_cards() -> list[CreditCard]:
    """Nubank closes on the 5th, XP on the 20th."""
    return [
        make_card("c1", "Nubank", "8000.00", closing_day=5, due_day=12),
        make_card("c2", "XP Infinite", "25000.00", closing_day=20, due_day=27),
    ]


@pytest.fixture
def sample_transactions() -> list[Transaction]:
    """A March 2026 ledger.

    Statement-month placement with the sample cards:
    - t1 salary, t2 rent (pending), t3 market: March by calendar.
    - t4 Nubank 2026-03-04: on/before closing day 5 -> March statement.
    - t5 Nubank 2026-03-10: after closing day 5 -> April statement.
    - t6 XP 2026-03-15: before closing day 20 -> March statement.
    - t7 Nubank 2026-02-20: after closing day 5 -> March statement.
    - t8 orphaned card id 2026-03-25: calendar fallback -> March.
    - t9 freelance (pending) 2026-03-28 -> March.
    - t10 February salary -> February only.
    """
    return [
        make_txn("t1", "Salary", "8500.00", date(2026, 3, 5), TransactionType.INCOME, "Salary"),
        make_txn(
            "t2", "Rent", "2200.00", date(2026, 3, 1), TransactionType.EXPENSE, "Housing",
            status=TransactionStatus.PENDING,
        ),
        make_txn("t3", "Market", "350.40", date(2026, 3, 12), TransactionType.EXPENSE, "Groceries"),
        make_txn(
            "t4", "Netflix", "55.90", date(2026, 3, 4), TransactionType.CARD_EXPENSE,
            "Subscriptions", card_id="c1",
        ),
        make_txn(
            "t5", "Shoes", "300.00", date(2026, 3, 10), TransactionType.CARD_EXPENSE,
            "Shopping", card_id="c1",
        ),
        make_txn(
            "t6", "Restaurant", "120.00", date(2026, 3, 15), TransactionType.CARD_EXPENSE,
            "Restaurants", card_id="c2",
        ),
        make_txn(
            "t7", "Pharmacy", "80.00", date(2026, 2, 20), TransactionType.CARD_EXPENSE,
            "Health", card_id="c1",
        ),
        make_txn(
            "t8", "Old card purchase", "40.00", date(2026, 3, 25), TransactionType.CARD_EXPENSE,
            "Shopping", card_id="deleted-card",
        ),
        make_txn(
            "t9", "Freelance job", "1000.00", date(2026, 3, 28), TransactionType.INCOME,
            "Freelance", status=TransactionStatus.PENDING,
        ),
        make_txn("t10", "Salary", "8500.00", date(2026, 2, 5), TransactionType.INCOME, "Salary"),
    ]


@pytest.fixture
def memory_store(sample_transactions, sample_cards) -> MemoryStore:
    """A MemoryStore pre-loaded with the sample ledger."""
    return MemoryStore(transactions=sample_transactions, cards=sample_cards)


@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """An initialized project directory with a default config.toml."""
    project = tmp_path / "finance-project"
    initialize(project)
    return project
