"""Tests for finance_tracker.classifier -- statement-month classification."""

from datetime import date

from finance_tracker.classifier import belongs_to_statement_month, find_card
from finance_tracker.models import TransactionType

from conftest import make_card, make_txn

MARCH = date(2026, 3, 1)
APRIL = date(2026, 4, 1)


class TestFindCard:
    def test_sequence_lookup(self, sample_cards):
        assert find_card(sample_cards, "c2").name == "XP Infinite"

    def test_mapping_lookup(self, sample_cards):
        index = {c.card_id: c for c in sample_cards}
        assert find_card(index, "c1").name == "Nubank"

    def test_unknown_and_missing_ids(self, sample_cards):
        assert find_card(sample_cards, "nope") is None
        assert find_card(sample_cards, None) is None
        assert find_card(sample_cards, "") is None


class TestPlainTransactions:
    """Income and plain expenses use their calendar month."""

    def test_income_in_month(self, sample_cards):
        txn = make_txn(txn_date=date(2026, 3, 31), txn_type=TransactionType.INCOME)
        assert belongs_to_statement_month(txn, sample_cards, MARCH)
        assert not belongs_to_statement_month(txn, sample_cards, APRIL)

    def test_expense_ignores_card_cycle(self, sample_cards):
        """A plain expense late in the month never moves to the next one."""
        txn = make_txn(txn_date=date(2026, 3, 28), txn_type=TransactionType.EXPENSE)
        assert belongs_to_statement_month(txn, sample_cards, MARCH)

    def test_same_month_other_year(self, sample_cards):
        txn = make_txn(txn_date=date(2025, 3, 10))
        assert not belongs_to_statement_month(txn, sample_cards, MARCH)

    def test_target_day_is_irrelevant(self, sample_cards):
        txn = make_txn(txn_date=date(2026, 3, 2))
        assert belongs_to_statement_month(txn, sample_cards, date(2026, 3, 27))


class TestCardExpenses:
    """Card expenses follow the card's closing day."""

    def test_before_closing_day(self, sample_cards):
        txn = make_txn(
            txn_date=date(2026, 3, 4), txn_type=TransactionType.CARD_EXPENSE, card_id="c1"
        )
        assert belongs_to_statement_month(txn, sample_cards, MARCH)
        assert not belongs_to_statement_month(txn, sample_cards, APRIL)

    def test_after_closing_day(self, sample_cards):
        txn = make_txn(
            txn_date=date(2026, 3, 10), txn_type=TransactionType.CARD_EXPENSE, card_id="c1"
        )
        assert not belongs_to_statement_month(txn, sample_cards, MARCH)
        assert belongs_to_statement_month(txn, sample_cards, APRIL)

    def test_same_date_different_cards(self, sample_cards):
        """10 March is after Nubank's close (5) but before XP's (20)."""
        nubank = make_txn(
            txn_date=date(2026, 3, 10), txn_type=TransactionType.CARD_EXPENSE, card_id="c1"
        )
        xp = make_txn(
            txn_date=date(2026, 3, 10), txn_type=TransactionType.CARD_EXPENSE, card_id="c2"
        )
        assert belongs_to_statement_month(nubank, sample_cards, APRIL)
        assert belongs_to_statement_month(xp, sample_cards, MARCH)

    def test_closing_day_31_in_short_month(self):
        cards = [make_card("c9", closing_day=31)]
        txn = make_txn(
            txn_date=date(2026, 2, 28), txn_type=TransactionType.CARD_EXPENSE, card_id="c9"
        )
        assert belongs_to_statement_month(txn, cards, date(2026, 2, 1))

    def test_december_purchase_lands_in_january(self, sample_cards):
        txn = make_txn(
            txn_date=date(2026, 12, 15), txn_type=TransactionType.CARD_EXPENSE, card_id="c1"
        )
        assert belongs_to_statement_month(txn, sample_cards, date(2027, 1, 1))


class TestOrphanedCardFallback:
    """An unknown card id degrades to calendar-date classification."""

    def test_orphan_uses_calendar_month(self, sample_cards):
        # Day 10 would move to April on a card closing on the 5th
        txn = make_txn(
            txn_date=date(2026, 3, 10),
            txn_type=TransactionType.CARD_EXPENSE,
            card_id="deleted-card",
        )
        assert belongs_to_statement_month(txn, sample_cards, MARCH)
        assert not belongs_to_statement_month(txn, sample_cards, APRIL)

    def test_no_cards_at_all(self):
        txn = make_txn(
            txn_date=date(2026, 3, 30), txn_type=TransactionType.CARD_EXPENSE, card_id="c1"
        )
        assert belongs_to_statement_month(txn, [], MARCH)

    def test_card_expense_without_card_id(self, sample_cards):
        txn = make_txn(txn_date=date(2026, 3, 30), txn_type=TransactionType.CARD_EXPENSE)
        assert belongs_to_statement_month(txn, sample_cards, MARCH)

    def test_deleting_card_changes_classification(self, sample_cards):
        txn = make_txn(
            txn_date=date(2026, 3, 10), txn_type=TransactionType.CARD_EXPENSE, card_id="c1"
        )
        assert belongs_to_statement_month(txn, sample_cards, APRIL)
        remaining = [c for c in sample_cards if c.card_id != "c1"]
        assert belongs_to_statement_month(txn, remaining, MARCH)
