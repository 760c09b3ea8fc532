"""Persistence contracts and the two built-in stores.

The engine never holds a process-wide store handle. Callers construct a
store and pass it to every :mod:`finance_tracker.ledger` operation.

- :class:`MemoryStore` keeps everything in lists; used by tests and for
  throwaway sessions.
- :class:`JsonFileStore` keeps one JSON document on disk, read whole on
  every fetch and written whole on every mutation.
- :class:`JsonLegacySource` reads the previous layout's export once.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from finance_tracker.models import (
    CreditCard,
    Transaction,
    card_from_dict,
    card_to_dict,
    transaction_from_dict,
    transaction_to_dict,
)

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Base exception for store operations."""


class RecordNotFoundError(StoreError):
    """An update or delete referenced an id the store does not hold."""


class PartialWriteError(StoreError):
    """A multi-record write failed after some records were persisted.

    Attributes:
        written_ids: Ids of the records that were persisted before the
            failure. They are not rolled back.
    """

    def __init__(self, message: str, written_ids: list[str]) -> None:
        super().__init__(message)
        self.written_ids = written_ids


@runtime_checkable
class TransactionStore(Protocol):
    """CRUD over canonical transactions."""

    def fetch_all(self) -> list[Transaction]: ...

    def insert(self, transaction: Transaction) -> None: ...

    def update(self, transaction: Transaction) -> None:
        """Replace the stored transaction with the same id.

        Raises:
            RecordNotFoundError: If no transaction has that id.
        """
        ...

    def delete(self, transaction_id: str) -> None:
        """Remove a transaction by id.

        Raises:
            RecordNotFoundError: If no transaction has that id.
        """
        ...


@runtime_checkable
class CardStore(Protocol):
    """CRUD over credit cards."""

    def fetch_all_cards(self) -> list[CreditCard]: ...

    def insert_card(self, card: CreditCard) -> None: ...

    def update_card(self, card: CreditCard) -> None: ...

    def delete_card(self, card_id: str) -> None: ...


@runtime_checkable
class LegacySource(Protocol):
    """Read-only access to records from the previous storage layout."""

    def fetch_legacy_transactions(self) -> list[dict]: ...

    def fetch_legacy_cards(self) -> list[dict]: ...


# ---------------------------------------------------------------------------
# In-memory store
# ---------------------------------------------------------------------------


class MemoryStore:
    """Transaction store, card store and legacy source backed by lists.

    Args:
        transactions: Initial transactions.
        cards: Initial cards.
        legacy_transactions: Raw legacy transaction documents.
        legacy_cards: Raw legacy card documents.
    """

    def __init__(
        self,
        transactions: list[Transaction] | None = None,
        cards: list[CreditCard] | None = None,
        legacy_transactions: list[dict] | None = None,
        legacy_cards: list[dict] | None = None,
    ) -> None:
        self.transactions = list(transactions or [])
        self.cards = list(cards or [])
        self.legacy_transactions = list(legacy_transactions or [])
        self.legacy_cards = list(legacy_cards or [])

    def fetch_all(self) -> list[Transaction]:
        return list(self.transactions)

    def insert(self, transaction: Transaction) -> None:
        self.transactions.append(transaction)

    def update(self, transaction: Transaction) -> None:
        idx = _index_of(self.transactions, "transaction_id", transaction.transaction_id)
        self.transactions[idx] = transaction

    def delete(self, transaction_id: str) -> None:
        idx = _index_of(self.transactions, "transaction_id", transaction_id)
        del self.transactions[idx]

    def fetch_all_cards(self) -> list[CreditCard]:
        return list(self.cards)

    def insert_card(self, card: CreditCard) -> None:
        self.cards.append(card)

    def update_card(self, card: CreditCard) -> None:
        idx = _index_of(self.cards, "card_id", card.card_id)
        self.cards[idx] = card

    def delete_card(self, card_id: str) -> None:
        idx = _index_of(self.cards, "card_id", card_id)
        del self.cards[idx]

    def fetch_legacy_transactions(self) -> list[dict]:
        return list(self.legacy_transactions)

    def fetch_legacy_cards(self) -> list[dict]:
        return list(self.legacy_cards)


def _index_of(items: list, attr: str, value: str) -> int:
    for idx, item in enumerate(items):
        if getattr(item, attr) == value:
            return idx
    raise RecordNotFoundError(f"No record with id {value!r}")


# ---------------------------------------------------------------------------
# JSON document store
# ---------------------------------------------------------------------------


class JsonFileStore:
    """Transaction and card store persisted as a single JSON document.

    The document has the shape ``{"transactions": [...], "cards": [...]}``.
    A missing file reads as an empty ledger and is created on the first
    write.

    Args:
        path: Location of the JSON document.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    # -- document I/O --------------------------------------------------------

    def _read(self) -> dict:
        if not self.path.is_file():
            return {"transactions": [], "cards": []}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise StoreError(f"Corrupt ledger file {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StoreError(f"Corrupt ledger file {self.path}: expected a JSON object")
        data.setdefault("transactions", [])
        data.setdefault("cards", [])
        return data

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(data, indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        logger.debug(
            "Wrote ledger %s (%d transactions, %d cards)",
            self.path,
            len(data["transactions"]),
            len(data["cards"]),
        )

    def _replace(self, key: str, doc: dict) -> None:
        data = self._read()
        docs = data[key]
        for idx, existing in enumerate(docs):
            if existing.get("id") == doc["id"]:
                docs[idx] = doc
                self._write(data)
                return
        raise RecordNotFoundError(f"No record with id {doc['id']!r}")

    def _remove(self, key: str, record_id: str) -> None:
        data = self._read()
        remaining = [d for d in data[key] if d.get("id") != record_id]
        if len(remaining) == len(data[key]):
            raise RecordNotFoundError(f"No record with id {record_id!r}")
        data[key] = remaining
        self._write(data)

    # -- transactions --------------------------------------------------------

    def fetch_all(self) -> list[Transaction]:
        return [transaction_from_dict(d) for d in self._read()["transactions"]]

    def insert(self, transaction: Transaction) -> None:
        data = self._read()
        data["transactions"].append(transaction_to_dict(transaction))
        self._write(data)

    def update(self, transaction: Transaction) -> None:
        self._replace("transactions", transaction_to_dict(transaction))

    def delete(self, transaction_id: str) -> None:
        self._remove("transactions", transaction_id)

    # -- cards ---------------------------------------------------------------

    def fetch_all_cards(self) -> list[CreditCard]:
        return [card_from_dict(d) for d in self._read()["cards"]]

    def insert_card(self, card: CreditCard) -> None:
        data = self._read()
        data["cards"].append(card_to_dict(card))
        self._write(data)

    def update_card(self, card: CreditCard) -> None:
        self._replace("cards", card_to_dict(card))

    def delete_card(self, card_id: str) -> None:
        self._remove("cards", card_id)


class JsonLegacySource:
    """Legacy records exported as ``{"transactions": [...], "cards": [...]}``.

    Args:
        path: Location of the export file.

    Raises:
        FileNotFoundError: On first fetch, if *path* does not exist.
        StoreError: If the file is not valid JSON.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read(self) -> dict:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise StoreError(f"Legacy export {self.path} is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise StoreError(f"Legacy export {self.path} must contain a JSON object")
        return data

    def fetch_legacy_transactions(self) -> list[dict]:
        return list(self._read().get("transactions", []))

    def fetch_legacy_cards(self) -> list[dict]:
        return list(self._read().get("cards", []))
