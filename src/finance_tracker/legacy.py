"""Legacy record normalization.

Records from the previous storage layout have no fixed shape: dates may be
epoch timestamps (``{"seconds": ...}``), free-form strings or absent;
amounts may be strings; the transaction type has to be inferred from a
handful of flags.

Normalization is split in two steps so every inference rule can be tested
in isolation:

1. :func:`parse_legacy_record` classifies each field's presence into an
   explicit :class:`LegacyRecord` (with :class:`LegacyDate` variants).
2. :func:`normalize` maps a :class:`LegacyRecord` onto the canonical
   :class:`~finance_tracker.models.Transaction`.

The normalizer never deduplicates: feeding it the same source twice yields
two sets of transactions with distinct ids.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation

from dateutil import parser as date_parser

from finance_tracker.models import (
    DEFAULT_CATEGORY,
    CreditCard,
    InstallmentInfo,
    StageResult,
    Transaction,
    TransactionStatus,
    TransactionType,
    generate_id,
)
from finance_tracker.money import quantize_amount

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "No description"
DEFAULT_CARD_NAME = "Unnamed card"
DEFAULT_CARD_COLOR = "bg-slate-800"
DEFAULT_CLOSING_DAY = 1
DEFAULT_DUE_DAY = 10


# ---------------------------------------------------------------------------
# Input variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EpochDate:
    """A structured timestamp: seconds since the Unix epoch."""

    seconds: float


@dataclass(frozen=True)
class RawDate:
    """Any other non-empty date-like value (string, number, ``datetime``)."""

    value: object


@dataclass(frozen=True)
class MissingDate:
    """The record has no usable date field."""


LegacyDate = EpochDate | RawDate | MissingDate


@dataclass(frozen=True)
class LegacyInstallments:
    """Installment fields as found in the legacy record (uncoerced)."""

    current: object
    total: object
    group_id: str | None


@dataclass(frozen=True)
class LegacyRecord:
    """A legacy transaction with every field's presence made explicit.

    Attributes:
        legacy_id: The source document id, when known. Only used in
            warning messages.
        legacy_type: The raw ``type`` value (``"income"``, ``"expense"``, ...).
        status: The raw ``status`` value.
        description: Raw description, ``None`` when absent or empty.
        amount: Raw amount, ``None`` when absent.
        date: Classified date variant.
        category: Raw category, ``None`` when absent or empty.
        card_id: Card reference, ``None`` when absent or empty.
        is_invoice_payment: True when the record pays a card statement.
        installments: Installment fields, ``None`` when absent.
    """

    legacy_id: str | None = None
    legacy_type: str | None = None
    status: str | None = None
    description: str | None = None
    amount: object = None
    date: LegacyDate = MissingDate()
    category: str | None = None
    card_id: str | None = None
    is_invoice_payment: bool = False
    installments: LegacyInstallments | None = None


def _parse_date_field(value: object) -> LegacyDate:
    if isinstance(value, dict):
        seconds = value.get("seconds")
        if not seconds:
            return MissingDate()
        try:
            return EpochDate(seconds=float(seconds))
        except (TypeError, ValueError):
            return RawDate(value=value)
    if value is None or value == "":
        return MissingDate()
    return RawDate(value=value)


def _text_or_none(value: object) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def parse_legacy_record(raw: dict, legacy_id: str | None = None) -> LegacyRecord:
    """Classify the fields of a raw legacy document.

    Args:
        raw: The document as read from the legacy source.
        legacy_id: Optional source id; defaults to ``raw["id"]``.
    """
    inst = raw.get("installments")
    installments = None
    if isinstance(inst, dict):
        installments = LegacyInstallments(
            current=inst.get("current"),
            total=inst.get("total"),
            group_id=_text_or_none(inst.get("groupId")),
        )

    return LegacyRecord(
        legacy_id=legacy_id if legacy_id is not None else _text_or_none(raw.get("id")),
        legacy_type=_text_or_none(raw.get("type")),
        status=_text_or_none(raw.get("status")),
        description=_text_or_none(raw.get("description")),
        amount=raw.get("amount"),
        date=_parse_date_field(raw.get("date")),
        category=_text_or_none(raw.get("category")),
        card_id=_text_or_none(raw.get("cardId")),
        is_invoice_payment=bool(raw.get("isInvoicePayment")),
        installments=installments,
    )


# ---------------------------------------------------------------------------
# Inference rules
# ---------------------------------------------------------------------------


def infer_type(record: LegacyRecord) -> TransactionType:
    """Income first; then a card reference that is not a statement payment
    makes a card expense; anything else is a plain expense."""
    if record.legacy_type == "income":
        return TransactionType.INCOME
    if record.card_id and not record.is_invoice_payment:
        return TransactionType.CARD_EXPENSE
    return TransactionType.EXPENSE


def infer_status(record: LegacyRecord) -> TransactionStatus:
    """Only an explicit ``"completed"`` is COMPLETED."""
    if record.status == "completed":
        return TransactionStatus.COMPLETED
    return TransactionStatus.PENDING


def coerce_amount(value: object) -> Decimal:
    """Convert a loosely-typed amount to a non-negative :class:`Decimal`.

    Missing, unparseable, non-finite and negative values become 0.
    """
    if value is None or isinstance(value, bool):
        return Decimal("0")
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        return Decimal("0")
    if not amount.is_finite() or amount < 0:
        return Decimal("0")
    return quantize_amount(amount)


def coerce_int(value: object, default: int) -> int:
    """Convert *value* to a positive int, returning *default* for unusable
    input (missing, non-numeric, zero or negative)."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = int(float(str(value).strip()))
    except (TypeError, ValueError, OverflowError):
        return default
    return number if number >= 1 else default


def resolve_date(legacy_date: LegacyDate) -> date | None:
    """Turn a :class:`LegacyDate` into a calendar date.

    Epoch timestamps are interpreted in UTC. Raw values are tried as ISO
    dates first and then with ``dateutil``'s generic parser.

    Returns:
        The date, or ``None`` when the value is missing or unparseable.
    """
    if isinstance(legacy_date, EpochDate):
        try:
            return datetime.fromtimestamp(legacy_date.seconds, tz=timezone.utc).date()
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(legacy_date, RawDate):
        value = legacy_date.value
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            # Bare numbers are epoch milliseconds, as JavaScript stored them
            try:
                return datetime.fromtimestamp(value / 1000, tz=timezone.utc).date()
            except (OverflowError, OSError, ValueError):
                return None
        text = str(value).strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            pass
        try:
            return date_parser.parse(text).date()
        except (ValueError, OverflowError):
            return None
    return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def normalize(
    record: LegacyRecord,
    *,
    today: date | None = None,
    warnings: list[str] | None = None,
) -> Transaction:
    """Map a :class:`LegacyRecord` onto the canonical transaction schema.

    Args:
        record: The classified legacy record.
        today: Fallback date for a missing or unparseable date. Defaults
            to ``date.today()``.
        warnings: Optional list that receives a message for every value
            that had to be degraded (date fallback, minted group id).

    Returns:
        A new :class:`Transaction` with a freshly generated id.
    """
    label = record.legacy_id or record.description or "<unnamed>"

    def warn(message: str) -> None:
        logger.warning("Legacy record %s: %s", label, message)
        if warnings is not None:
            warnings.append(f"{label}: {message}")

    txn_type = infer_type(record)

    txn_date = resolve_date(record.date)
    if txn_date is None:
        txn_date = today or date.today()
        if isinstance(record.date, MissingDate):
            warn(f"missing date, using {txn_date.isoformat()}")
        else:
            warn(f"unparseable date {_describe(record.date)}, using {txn_date.isoformat()}")

    installments = None
    if record.installments is not None:
        group_id = record.installments.group_id
        if group_id is None:
            group_id = generate_id()
            warn("installment group id missing, minted a new one")
        total = coerce_int(record.installments.total, 1)
        installments = InstallmentInfo(
            current=min(coerce_int(record.installments.current, 1), total),
            total=total,
            group_id=group_id,
        )

    return Transaction(
        transaction_id=generate_id(),
        description=record.description or DEFAULT_DESCRIPTION,
        amount=coerce_amount(record.amount),
        date=txn_date,
        type=txn_type,
        category=record.category or DEFAULT_CATEGORY,
        status=infer_status(record),
        card_id=record.card_id if txn_type is TransactionType.CARD_EXPENSE else None,
        installments=installments,
    )


def normalize_records(raws: list, today: date | None = None) -> StageResult:
    """Normalize a batch of raw legacy documents.

    Documents that are not mappings are reported in ``errors`` and skipped;
    everything else is normalized best-effort, with degraded values
    reported in ``warnings``.
    """
    result = StageResult()
    for position, raw in enumerate(raws):
        if not isinstance(raw, dict):
            result.errors.append(
                f"record {position}: expected an object, got {type(raw).__name__}"
            )
            continue
        record = parse_legacy_record(raw)
        result.transactions.append(normalize(record, today=today, warnings=result.warnings))
    return result


def normalize_card(raw: dict) -> CreditCard:
    """Map a legacy card document onto :class:`CreditCard`, with defaults
    for every missing or non-numeric field."""
    return CreditCard(
        card_id=_text_or_none(raw.get("id")) or generate_id(),
        name=_text_or_none(raw.get("name")) or DEFAULT_CARD_NAME,
        limit=coerce_amount(raw.get("limit")),
        closing_day=coerce_int(raw.get("closingDay"), DEFAULT_CLOSING_DAY),
        due_day=coerce_int(raw.get("dueDay"), DEFAULT_DUE_DAY),
        color=_text_or_none(raw.get("color")) or DEFAULT_CARD_COLOR,
    )


def _describe(legacy_date: LegacyDate) -> str:
    if isinstance(legacy_date, RawDate):
        return repr(legacy_date.value)
    return repr(legacy_date)
