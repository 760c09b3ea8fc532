"""Tests for finance_tracker.models -- dataclass defaults, ids and document (de)serialization."""

from datetime import date
from decimal import Decimal

import pytest

from finance_tracker.models import (
    DEFAULT_CATEGORY,
    AppConfig,
    InstallmentInfo,
    MonthlySummary,
    StageResult,
    Transaction,
    TransactionStatus,
    TransactionType,
    card_from_dict,
    card_to_dict,
    generate_id,
    transaction_from_dict,
    transaction_to_dict,
)

from conftest import make_card, make_txn

# ---------------------------------------------------------------------------
# generate_id
# ---------------------------------------------------------------------------


class TestGenerateId:
    def test_is_32_hex_chars(self):
        value = generate_id()
        assert len(value) == 32
        assert all(c in "0123456789abcdef" for c in value)

    def test_unique(self):
        assert len({generate_id() for _ in range(200)}) == 200


# ---------------------------------------------------------------------------
# Dataclass defaults
# ---------------------------------------------------------------------------


class TestDefaults:
    def test_transaction_defaults(self):
        txn = Transaction(
            transaction_id="a",
            description="x",
            amount=Decimal("1.00"),
            date=date(2026, 3, 1),
            type=TransactionType.EXPENSE,
        )
        assert txn.category == DEFAULT_CATEGORY
        assert txn.status is TransactionStatus.COMPLETED
        assert txn.card_id is None
        assert txn.installments is None

    def test_stage_result_lists_not_shared(self):
        a, b = StageResult(), StageResult()
        a.warnings.append("w")
        assert b.warnings == []

    def test_app_config_categories_not_shared(self):
        a, b = AppConfig(), AppConfig()
        a.expense_categories.append("Pets")
        assert "Pets" not in b.expense_categories

    def test_balance(self):
        summary = MonthlySummary(
            month=date(2026, 3, 1), income=Decimal("100.00"), expense=Decimal("250.50")
        )
        assert summary.balance == Decimal("-150.50")

    def test_enum_values_are_strings(self):
        assert TransactionType("CARD_EXPENSE") is TransactionType.CARD_EXPENSE
        assert TransactionStatus.PENDING == "PENDING"


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


class TestTransactionDocuments:
    def test_to_dict_shape(self):
        txn = make_txn("a", card_id=None)
        doc = transaction_to_dict(txn)
        assert doc == {
            "id": "a",
            "description": "Groceries",
            "amount": "100.00",
            "date": "2026-03-10",
            "type": "EXPENSE",
            "category": "Groceries",
            "status": "COMPLETED",
            "cardId": None,
            "installments": None,
        }

    def test_installments_round_trip(self):
        txn = make_txn("a", txn_type=TransactionType.CARD_EXPENSE, card_id="c1")
        txn.installments = InstallmentInfo(current=3, total=12, group_id="g")
        doc = transaction_to_dict(txn)
        assert doc["installments"] == {"current": 3, "total": 12, "groupId": "g"}
        assert transaction_from_dict(doc) == txn

    def test_from_dict_optional_keys(self):
        txn = transaction_from_dict(
            {
                "id": "a",
                "description": "x",
                "amount": "5",
                "date": "2026-03-01",
                "type": "INCOME",
            }
        )
        assert txn.category == DEFAULT_CATEGORY
        assert txn.status is TransactionStatus.COMPLETED
        assert txn.installments is None

    def test_from_dict_missing_required_key(self):
        with pytest.raises(KeyError):
            transaction_from_dict({"id": "a"})

    def test_from_dict_unknown_type(self):
        with pytest.raises(ValueError):
            transaction_from_dict(
                {"id": "a", "description": "x", "amount": "1", "date": "2026-03-01",
                 "type": "TRANSFER"}
            )


class TestCardDocuments:
    def test_round_trip(self):
        card = make_card("c1")
        doc = card_to_dict(card)
        assert doc["closingDay"] == 5
        assert doc["limit"] == "8000.00"
        assert card_from_dict(doc) == card

    def test_color_default(self):
        card = card_from_dict(
            {"id": "c", "name": "Visa", "limit": "1", "closingDay": 1, "dueDay": 2}
        )
        assert card.color == "bg-slate-800"
