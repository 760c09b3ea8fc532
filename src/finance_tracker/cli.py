"""Click CLI entry point for the finance command.

Handles argument parsing, config/store loading, and error display. All
business logic is delegated to ``ledger``, ``aggregation``, ``legacy`` and
``llm``; all output formatting to ``report``.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import replace
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path

import click

from finance_tracker import __version__
from finance_tracker.models import AmountMode, TransactionStatus, TransactionType
from finance_tracker.money import parse_month, quantize_amount

_TYPE_CHOICES = {
    "income": TransactionType.INCOME,
    "expense": TransactionType.EXPENSE,
    "card": TransactionType.CARD_EXPENSE,
}

_STATUS_CHOICES = {
    "completed": TransactionStatus.COMPLETED,
    "pending": TransactionStatus.PENDING,
}


def _validate_month(month: str | None) -> date:
    """Validate *month* (``YYYY-MM``) and return its first day.

    ``None`` means the current month. Raises ``click.BadParameter``.
    """
    if month is None:
        return date.today().replace(day=1)
    try:
        return parse_month(month)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc


def _parse_amount(ctx: click.Context, param: click.Parameter, value: str | None) -> Decimal | None:
    if value is None:
        return None
    try:
        amount = Decimal(value.replace(",", "."))
    except InvalidOperation:
        raise click.BadParameter(f"Invalid amount: {value!r}")
    if not amount.is_finite() or amount < 0:
        raise click.BadParameter(f"Amount must be a non-negative number: {value!r}")
    return quantize_amount(amount)


def _parse_date(ctx: click.Context, param: click.Parameter, value: str | None) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"Invalid date: {value!r}. Expected YYYY-MM-DD.")


def _configure_logging(verbose: bool, debug: bool) -> None:
    """Set up logging based on verbosity flags."""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        force=True,
    )


def _load_project():
    """Load config and open the ledger store for the current directory.

    Exits with status 1 when the project has not been initialized.
    """
    from finance_tracker.config import data_path, load_config
    from finance_tracker.store import JsonFileStore

    root = Path.cwd()
    try:
        config = load_config(root)
    except FileNotFoundError as exc:
        click.echo(
            f"Error: {exc}. Run 'finance init' to create the project structure.",
            err=True,
        )
        sys.exit(1)
    except Exception as exc:
        click.echo(f"Error loading configuration: {exc}", err=True)
        sys.exit(1)
    return config, JsonFileStore(data_path(root, config))


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="finance-tracker")
@click.option("--verbose", is_flag=True, default=False, help="Detailed progress output.")
@click.option("--debug", is_flag=True, default=False, help="Developer-level diagnostics.")
def cli(verbose: bool, debug: bool) -> None:
    """Personal finance ledger with card statement cycles and installments."""
    _configure_logging(verbose, debug)


@cli.command()
@click.option(
    "--dir", "target_dir", default=".", type=click.Path(), help="Directory to initialize."
)
def init(target_dir: str) -> None:
    """Initialize a new ledger directory with a default config.toml."""
    from finance_tracker.config import initialize

    target = Path(target_dir).resolve()
    try:
        initialize(target)
    except Exception as exc:
        _fail(f"initializing project: {exc}")

    click.echo(f"Initialized finance tracker project in {target}")


@cli.command()
def seed() -> None:
    """Add demo cards and transactions dated today."""
    from finance_tracker.ledger import seed_demo_data

    _, store = _load_project()
    try:
        seed_demo_data(store, store)
    except Exception as exc:
        _fail(str(exc))
    click.echo("Added 2 demo cards and 3 demo transactions.")


@cli.command()
@click.option("--description", "-d", required=True, help="What the entry is.")
@click.option("--amount", "-a", required=True, callback=_parse_amount, help="Amount, e.g. 120.50.")
@click.option("--date", "txn_date", callback=_parse_date, help="YYYY-MM-DD (default: today).")
@click.option(
    "--type", "txn_type", type=click.Choice(list(_TYPE_CHOICES)), default="expense",
    show_default=True, help="Entry type.",
)
@click.option("--category", "-c", default="Other", show_default=True, help="Category label.")
@click.option(
    "--status", type=click.Choice(list(_STATUS_CHOICES)), default="completed",
    show_default=True, help="Ignored for card expenses, which are always completed.",
)
@click.option("--card", "card_id", help="Card id (required for --type card).")
@click.option("--installments", "-n", type=int, default=1, show_default=True,
              help="Number of monthly installments.")
@click.option(
    "--amount-mode", type=click.Choice([m.value for m in AmountMode]),
    default=AmountMode.INSTALLMENT.value, show_default=True,
    help="'installment': amount per installment; 'total': amount split across all.",
)
def add(
    description: str,
    amount: Decimal,
    txn_date: date | None,
    txn_type: str,
    category: str,
    status: str,
    card_id: str | None,
    installments: int,
    amount_mode: str,
) -> None:
    """Add a transaction, optionally as a monthly installment series."""
    from finance_tracker.classifier import find_card
    from finance_tracker.ledger import build_transaction, record_transaction

    _, store = _load_project()
    kind = _TYPE_CHOICES[txn_type]

    if kind is TransactionType.CARD_EXPENSE:
        if not card_id:
            _fail("--card is required for card expenses.")
        if find_card(store.fetch_all_cards(), card_id) is None:
            _fail(f"Unknown card id {card_id!r}. See 'finance cards'.")

    txn = build_transaction(
        description=description,
        amount=amount,
        txn_date=txn_date or date.today(),
        txn_type=kind,
        category=category,
        status=_STATUS_CHOICES[status],
        card_id=card_id,
    )
    try:
        created = record_transaction(store, txn, installments, amount_mode)
    except Exception as exc:
        _fail(str(exc))

    if len(created) == 1:
        click.echo(f"Added transaction {created[0].transaction_id}")
    else:
        click.echo(
            f"Added {len(created)} installments (group {created[0].installments.group_id})"
        )


@cli.command()
@click.argument("transaction_id")
@click.option("--description", "-d", help="New description.")
@click.option("--amount", "-a", callback=_parse_amount, help="New amount.")
@click.option("--date", "txn_date", callback=_parse_date, help="New date (YYYY-MM-DD).")
@click.option("--category", "-c", help="New category.")
@click.option("--status", type=click.Choice(list(_STATUS_CHOICES)), help="New status.")
@click.option("--type", "txn_type", type=click.Choice(list(_TYPE_CHOICES)), help="New type.")
@click.option("--card", "card_id", help="Move a card expense to this card id.")
def edit(
    transaction_id: str,
    description: str | None,
    amount: Decimal | None,
    txn_date: date | None,
    category: str | None,
    status: str | None,
    txn_type: str | None,
    card_id: str | None,
) -> None:
    """Edit fields of a single transaction."""
    from finance_tracker.classifier import find_card
    from finance_tracker.ledger import change_type, edit_transaction, find_transaction
    from finance_tracker.store import StoreError

    _, store = _load_project()
    try:
        txn = find_transaction(store, transaction_id)
        kind = _TYPE_CHOICES[txn_type] if txn_type else txn.type
        if kind is TransactionType.CARD_EXPENSE:
            if not (card_id or txn.card_id):
                _fail("--card is required for card expenses.")
            if card_id and find_card(store.fetch_all_cards(), card_id) is None:
                _fail(f"Unknown card id {card_id!r}. See 'finance cards'.")
        elif card_id:
            _fail("--card only applies to card expenses.")

        changes: dict = {}
        if description is not None:
            changes["description"] = description
        if amount is not None:
            changes["amount"] = amount
        if txn_date is not None:
            changes["date"] = txn_date
        if category is not None:
            changes["category"] = category
        if status is not None:
            changes["status"] = _STATUS_CHOICES[status]
        updated = change_type(replace(txn, **changes), kind, card_id or txn.card_id)
        edit_transaction(store, updated)
    except StoreError as exc:
        _fail(str(exc))
    click.echo(f"Updated transaction {transaction_id}")


@cli.command()
@click.argument("transaction_id")
def delete(transaction_id: str) -> None:
    """Delete a single transaction."""
    from finance_tracker.ledger import delete_transaction
    from finance_tracker.store import StoreError

    _, store = _load_project()
    try:
        delete_transaction(store, transaction_id)
    except StoreError as exc:
        _fail(str(exc))
    click.echo(f"Deleted transaction {transaction_id}")


@cli.command()
@click.argument("transaction_id")
def toggle(transaction_id: str) -> None:
    """Flip a transaction between completed and pending."""
    from finance_tracker.ledger import toggle_status
    from finance_tracker.store import StoreError

    _, store = _load_project()
    try:
        updated = toggle_status(store, transaction_id)
    except StoreError as exc:
        _fail(str(exc))
    click.echo(f"Transaction {transaction_id} is now {updated.status.value.lower()}")


@cli.command(name="list")
@click.option("--month", help="Target month in YYYY-MM format (default: current month).")
@click.option("--sort-by", type=click.Choice(["date", "amount"]), default="date", show_default=True)
@click.option("--asc", is_flag=True, default=False, help="Oldest/smallest first.")
def list_cmd(month: str | None, sort_by: str, asc: bool) -> None:
    """List the transactions dated in a month."""
    from finance_tracker.aggregation import list_transactions
    from finance_tracker.report import print_transactions

    try:
        target = _validate_month(month)
    except click.BadParameter as exc:
        _fail(exc.format_message())

    config, store = _load_project()
    txns = list_transactions(store.fetch_all(), target, sort_by=sort_by, descending=not asc)
    print_transactions(txns, target, config)


@cli.command()
@click.option("--month", help="Target month in YYYY-MM format (default: current month).")
def summary(month: str | None) -> None:
    """Show monthly totals, top categories and the last six months."""
    from finance_tracker.aggregation import category_breakdown, monthly_totals, trailing_history
    from finance_tracker.report import print_dashboard

    try:
        target = _validate_month(month)
    except click.BadParameter as exc:
        _fail(exc.format_message())

    config, store = _load_project()
    txns = store.fetch_all()
    cards = store.fetch_all_cards()
    print_dashboard(
        monthly_totals(txns, cards, target),
        category_breakdown(txns, cards, target),
        trailing_history(txns),
        config,
    )


@cli.command()
@click.option("--month", help="Statement month in YYYY-MM format (default: current month).")
def cards(month: str | None) -> None:
    """Show each card's statement for a month."""
    from finance_tracker.aggregation import card_invoices
    from finance_tracker.report import print_cards

    try:
        target = _validate_month(month)
    except click.BadParameter as exc:
        _fail(exc.format_message())

    config, store = _load_project()
    print_cards(card_invoices(store.fetch_all(), store.fetch_all_cards(), target), target, config)


@cli.command(name="add-card")
@click.option("--name", required=True, help="Display name.")
@click.option("--limit", "limit", required=True, callback=_parse_amount, help="Credit limit.")
@click.option("--closing-day", type=click.IntRange(1, 31), required=True,
              help="Day of month the statement closes.")
@click.option("--due-day", type=click.IntRange(1, 31), required=True,
              help="Day of month the statement is due.")
@click.option("--color", default="bg-slate-800", show_default=True, help="Display color.")
def add_card_cmd(name: str, limit: Decimal, closing_day: int, due_day: int, color: str) -> None:
    """Register a credit card."""
    from finance_tracker.ledger import add_card
    from finance_tracker.models import CreditCard, generate_id

    _, store = _load_project()
    card = add_card(
        store,
        CreditCard(
            card_id=generate_id(),
            name=name,
            limit=limit,
            closing_day=closing_day,
            due_day=due_day,
            color=color,
        ),
    )
    click.echo(f"Added card {card.card_id}")


@cli.command(name="delete-card")
@click.argument("card_id")
def delete_card_cmd(card_id: str) -> None:
    """Delete a card. Its transactions are kept."""
    from finance_tracker.ledger import delete_card
    from finance_tracker.store import StoreError

    _, store = _load_project()
    try:
        delete_card(store, card_id)
    except StoreError as exc:
        _fail(str(exc))
    click.echo(f"Deleted card {card_id}")


@cli.command(name="import-legacy")
@click.option("--source", required=True, type=click.Path(exists=True, dir_okay=False),
              help="JSON export of the legacy transactions and cards.")
@click.option("--yes", is_flag=True, default=False, help="Skip the confirmation prompt.")
def import_legacy_cmd(source: str, yes: bool) -> None:
    """Convert and import legacy records (run it only once)."""
    from finance_tracker.ledger import import_legacy
    from finance_tracker.report import print_import_result
    from finance_tracker.store import JsonLegacySource, StoreError

    if not yes:
        click.confirm(
            "This imports every legacy record. Running it twice creates duplicates. Continue?",
            abort=True,
        )

    _, store = _load_project()
    try:
        result = import_legacy(JsonLegacySource(Path(source)), store, store)
    except StoreError as exc:
        _fail(str(exc))
    print_import_result(result)


@cli.command(name="parse-statement")
@click.option("--file", "statement_file", required=True, type=click.File("r", encoding="utf-8"),
              help="Statement text file ('-' for stdin).")
@click.option("--card", "card_id", help="Record the entries as expenses on this card.")
@click.option("--year", type=int, help="Year to assume for dates without one (default: this year).")
@click.option("--dry-run", is_flag=True, default=False, help="Show the entries without saving.")
def parse_statement_cmd(statement_file, card_id: str | None, year: int | None, dry_run: bool) -> None:
    """Extract transactions from statement text with the configured LLM."""
    from finance_tracker.classifier import find_card
    from finance_tracker.ledger import draft_to_transaction, record_transaction
    from finance_tracker.llm import AnthropicAdapter, NullAdapter
    from finance_tracker.report import print_transactions

    config, store = _load_project()
    if card_id and find_card(store.fetch_all_cards(), card_id) is None:
        _fail(f"Unknown card id {card_id!r}. See 'finance cards'.")

    if config.llm_provider == "none":
        parser = NullAdapter()
    else:
        parser = AnthropicAdapter(model=config.llm_model, api_key_env=config.llm_api_key_env)

    drafts = parser.parse_statement(
        statement_file.read(),
        config.expense_categories,
        year or date.today().year,
    )
    if not drafts:
        _fail("No transactions could be extracted from the statement.")

    txns = [draft_to_transaction(d, card_id=card_id) for d in drafts]
    if not dry_run:
        try:
            for txn in txns:
                record_transaction(store, txn)
        except Exception as exc:
            _fail(f"saving extracted transactions: {exc}")
    print_transactions(txns, txns[0].date, config)
    click.echo(f"{'Found' if dry_run else 'Added'} {len(txns)} transaction(s).")
