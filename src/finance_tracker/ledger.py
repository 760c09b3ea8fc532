"""Ledger write operations over an injected store.

Every function takes the store it reads from and writes to as an argument.
Batch writes are not atomic: :func:`record_transaction` inserts installment
members one at a time and, if an insert fails midway, reports which
members were already persisted instead of rolling them back.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal

from finance_tracker.installments import generate_installments
from finance_tracker.legacy import (
    DEFAULT_DESCRIPTION,
    RawDate,
    coerce_amount,
    normalize_card,
    normalize_records,
    resolve_date,
)
from finance_tracker.models import (
    DEFAULT_CATEGORY,
    AmountMode,
    CreditCard,
    ImportResult,
    Transaction,
    TransactionStatus,
    TransactionType,
    generate_id,
)
from finance_tracker.store import (
    CardStore,
    LegacySource,
    PartialWriteError,
    RecordNotFoundError,
    TransactionStore,
)

logger = logging.getLogger(__name__)


def _entry_rules(
    txn_type: TransactionType,
    status: TransactionStatus,
    card_id: str | None,
) -> tuple[TransactionStatus, str | None]:
    if txn_type is TransactionType.CARD_EXPENSE:
        if not card_id:
            raise ValueError("A card expense requires a card id")
        return TransactionStatus.COMPLETED, card_id
    return status, None


def build_transaction(
    description: str,
    amount: Decimal,
    txn_date: date,
    txn_type: TransactionType,
    category: str = DEFAULT_CATEGORY,
    status: TransactionStatus = TransactionStatus.COMPLETED,
    card_id: str | None = None,
) -> Transaction:
    """Build a new transaction the way the entry form does.

    Card expenses are always COMPLETED (they are spent once on the card)
    and keep *card_id*; other types never carry a card reference.

    Raises:
        ValueError: If a card expense has no *card_id*.
    """
    status, card_id = _entry_rules(txn_type, status, card_id)
    return Transaction(
        transaction_id=generate_id(),
        description=description,
        amount=amount,
        date=txn_date,
        type=txn_type,
        category=category or DEFAULT_CATEGORY,
        status=status,
        card_id=card_id,
    )


def record_transaction(
    store: TransactionStore,
    transaction: Transaction,
    installments: int = 1,
    amount_mode: AmountMode | str = AmountMode.INSTALLMENT,
) -> list[Transaction]:
    """Expand *transaction* into installments and insert every member.

    Returns:
        The inserted transactions, in installment order.

    Raises:
        PartialWriteError: If an insert fails after at least one member
            was written. Members already written stay in the store.
    """
    members = generate_installments(transaction, installments, amount_mode)
    written: list[str] = []
    for member in members:
        try:
            store.insert(member)
        except Exception as exc:
            if not written:
                raise
            raise PartialWriteError(
                f"Stored {len(written)} of {len(members)} installments before failure: {exc}",
                written_ids=written,
            ) from exc
        written.append(member.transaction_id)
    logger.info("Recorded %d transaction(s) for %r", len(members), transaction.description)
    return members


def edit_transaction(store: TransactionStore, transaction: Transaction) -> None:
    """Replace the stored transaction that has *transaction*'s id."""
    store.update(transaction)


def change_type(
    transaction: Transaction,
    txn_type: TransactionType,
    card_id: str | None = None,
) -> Transaction:
    """Return a copy of *transaction* with its type (and card) changed.

    The entry-form rules of :func:`build_transaction` are applied again:
    a card expense becomes COMPLETED on *card_id*, any other type drops
    its card reference.

    Raises:
        ValueError: If the new type is a card expense and *card_id* is empty.
    """
    status, card_id = _entry_rules(txn_type, transaction.status, card_id)
    return replace(transaction, type=txn_type, status=status, card_id=card_id)


def delete_transaction(store: TransactionStore, transaction_id: str) -> None:
    """Delete one transaction. Other members of its installment group stay."""
    store.delete(transaction_id)


def find_transaction(store: TransactionStore, transaction_id: str) -> Transaction:
    """Fetch a single transaction by id.

    Raises:
        RecordNotFoundError: If the id is unknown.
    """
    for txn in store.fetch_all():
        if txn.transaction_id == transaction_id:
            return txn
    raise RecordNotFoundError(f"No transaction with id {transaction_id!r}")


def toggle_status(store: TransactionStore, transaction_id: str) -> Transaction:
    """Flip a transaction between COMPLETED and PENDING and persist it.

    Returns:
        The updated transaction.
    """
    txn = find_transaction(store, transaction_id)
    if txn.status is TransactionStatus.COMPLETED:
        new_status = TransactionStatus.PENDING
    else:
        new_status = TransactionStatus.COMPLETED
    updated = replace(txn, status=new_status)
    store.update(updated)
    return updated


def add_card(store: CardStore, card: CreditCard) -> CreditCard:
    store.insert_card(card)
    return card


def delete_card(store: CardStore, card_id: str) -> None:
    """Delete a card. Its card expenses are kept and become orphaned."""
    store.delete_card(card_id)


def draft_to_transaction(draft: dict, card_id: str | None = None) -> Transaction:
    """Convert a statement-parser draft into a transaction.

    Drafts are ``{description, amount, date, category, type}`` mappings of
    unvalidated values. With *card_id* the draft becomes a card expense on
    that card; otherwise the draft's ``type`` is used when it names a
    known type, falling back to EXPENSE. Unparseable dates fall back to
    today.
    """
    txn_date = resolve_date(RawDate(draft.get("date") or "")) or date.today()
    if card_id:
        txn_type = TransactionType.CARD_EXPENSE
    else:
        try:
            txn_type = TransactionType(str(draft.get("type", "")).upper())
        except ValueError:
            txn_type = TransactionType.EXPENSE
        if txn_type is TransactionType.CARD_EXPENSE:
            txn_type = TransactionType.EXPENSE
    return build_transaction(
        description=str(draft.get("description") or "").strip() or DEFAULT_DESCRIPTION,
        amount=coerce_amount(draft.get("amount")),
        txn_date=txn_date,
        txn_type=txn_type,
        category=str(draft.get("category") or DEFAULT_CATEGORY),
        card_id=card_id,
    )


def import_legacy(
    source: LegacySource,
    txn_store: TransactionStore,
    card_store: CardStore,
    today: date | None = None,
) -> ImportResult:
    """Normalize every legacy record and insert it into the stores.

    Re-running the import over the same source inserts every record again;
    guarding against a second run is the caller's responsibility.

    Degraded values (dates that fell back to *today*, minted installment
    group ids) are reported in ``warnings``; records that could not be
    normalized at all are reported in ``errors``.
    """
    result = ImportResult()

    stage = normalize_records(source.fetch_legacy_transactions(), today=today)
    result.warnings.extend(stage.warnings)
    result.errors.extend(stage.errors)
    for txn in stage.transactions:
        txn_store.insert(txn)
        result.transactions_imported += 1

    for position, raw in enumerate(source.fetch_legacy_cards()):
        if not isinstance(raw, dict):
            result.errors.append(f"card {position}: expected an object, got {type(raw).__name__}")
            continue
        card_store.insert_card(normalize_card(raw))
        result.cards_imported += 1

    logger.info(
        "Legacy import: %d transactions, %d cards, %d warnings",
        result.transactions_imported,
        result.cards_imported,
        len(result.warnings),
    )
    return result


def seed_demo_data(
    txn_store: TransactionStore,
    card_store: CardStore,
    today: date | None = None,
) -> None:
    """Insert two demo cards and three demo transactions dated *today*."""
    today = today or date.today()
    nubank = CreditCard(
        card_id=generate_id(),
        name="Nubank",
        limit=Decimal("8000.00"),
        closing_day=5,
        due_day=12,
        color="bg-purple-600",
    )
    xp = CreditCard(
        card_id=generate_id(),
        name="XP Infinite",
        limit=Decimal("25000.00"),
        closing_day=20,
        due_day=27,
        color="bg-slate-800",
    )
    for card in (nubank, xp):
        card_store.insert_card(card)

    demo = [
        build_transaction(
            "Monthly salary", Decimal("8500.00"), today, TransactionType.INCOME, "Salary"
        ),
        build_transaction(
            "Rent",
            Decimal("2200.00"),
            today,
            TransactionType.EXPENSE,
            "Housing",
            status=TransactionStatus.PENDING,
        ),
        build_transaction(
            "Netflix",
            Decimal("55.90"),
            today,
            TransactionType.CARD_EXPENSE,
            "Subscriptions",
            card_id=nubank.card_id,
        ),
    ]
    for txn in demo:
        txn_store.insert(txn)
