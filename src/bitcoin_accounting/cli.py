"""Command-line interface for Bitcoin Accounting."""

import argparse
import json
import sys
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

from bitcoin_accounting.config import get_settings
from bitcoin_accounting.container import Container
from bitcoin_accounting.domain.exchange_rates import ExchangeRate, ExchangeRateSource
from bitcoin_accounting.domain.transactions import Transaction
from bitcoin_accounting.domain.value_objects import LotSelection, sats_to_btc
from bitcoin_accounting.exceptions import BitcoinAccountingError
from bitcoin_accounting.logging_config import configure_logging

CLI_ERRORS = (BitcoinAccountingError, ValueError, KeyError, InvalidOperation, OSError)


def get_default_db_path() -> Path:
    """Get the default database path in user's home directory."""
    return Path.home() / ".bitcoin_accounting" / "ledger.db"


def create_container(db_path: Path | None = None) -> Container:
    """Create a container whose database lives at ``db_path``."""
    if db_path is None:
        db_path = get_default_db_path()
    settings = get_settings().model_copy(update={"sqlite_path": db_path})
    return Container(settings=settings)


def _db_path(args: argparse.Namespace) -> Path:
    return Path(args.database) if args.database else get_default_db_path()


def _open_container(args: argparse.Namespace) -> Container | None:
    db_path = _db_path(args)
    if not db_path.exists():
        print(f"No database found at {db_path}")
        print("Run 'btca init' to create a new database")
        return None
    return create_container(db_path)


def _load_transactions(path: str) -> list[Transaction]:
    data: Any = json.loads(Path(path).read_text())
    items = data if isinstance(data, list) else [data]
    return [Transaction.from_dict(item) for item in items]


def _parse_date(value: str) -> date:
    return date.fromisoformat(value)


def cmd_init(args: argparse.Namespace) -> int:
    """Initialize a new database."""
    db_path = _db_path(args)

    if db_path.exists() and not args.force:
        print(f"Database already exists at {db_path}")
        print("Use --force to reinitialize (WARNING: will delete existing data)")
        return 1

    if db_path.exists() and args.force:
        db_path.unlink()

    container = create_container(db_path)
    container.save_state(label="init")
    container.close()

    print(f"Initialized database at {db_path}")
    return 0


def cmd_version(args: argparse.Namespace) -> int:
    """Show version information."""
    print("Bitcoin Accounting v0.1.0")
    return 0


def cmd_rates_add(args: argparse.Namespace) -> int:
    """Add or replace the BTC price for a date."""
    container = _open_container(args)
    if container is None:
        return 1

    try:
        rate = ExchangeRate(
            price=Decimal(args.price),
            effective_date=_parse_date(args.date),
            currency=container.settings.fiat_currency.value,
            source=ExchangeRateSource(args.source),
        )
        container.rate_provider.add_rate(rate)
        print(f"Added rate: {rate.pair} = {rate.price} (effective {args.date})")
        return 0
    except CLI_ERRORS as e:
        print(f"Error: {e}")
        return 1
    finally:
        container.close()


def cmd_rates_list(args: argparse.Namespace) -> int:
    """List stored BTC prices."""
    container = _open_container(args)
    if container is None:
        return 1

    try:
        start = _parse_date(args.start_date) if args.start_date else None
        end = _parse_date(args.end_date) if args.end_date else None
        currency = container.settings.fiat_currency.value
        rates = list(
            container.exchange_rate_repository.list_by_currency(
                currency, start_date=start, end_date=end
            )
        )
        if not rates:
            print(f"No BTC/{currency} rates found")
            return 0

        print(f"{'Date':<12} {'Price':>16} {'Source':<10}")
        print("-" * 40)
        for rate in rates:
            print(
                f"{rate.effective_date.isoformat():<12} {rate.price:>16} {rate.source.value:<10}"
            )
        return 0
    except CLI_ERRORS as e:
        print(f"Error: {e}")
        return 1
    finally:
        container.close()


def cmd_acquire(args: argparse.Namespace) -> int:
    """Record BTC acquired from outside the ledger."""
    container = _open_container(args)
    if container is None:
        return 1

    try:
        unit_price = Decimal(args.price) if args.price else None
        for txn in _load_transactions(args.file):
            entries = container.processor.acquire(txn, unit_price=unit_price)
            acquired = sum(entry.amount for entry in entries)
            print(f"Acquired {sats_to_btc(acquired)} BTC in {txn.txid}")
            container.save_state(label=txn.txid)
        return 0
    except CLI_ERRORS as e:
        print(f"Error: {e}")
        return 1
    finally:
        container.close()


def cmd_apply(args: argparse.Namespace) -> int:
    """Apply transactions spending ledger outpoints."""
    container = _open_container(args)
    if container is None:
        return 1

    try:
        for txn in _load_transactions(args.file):
            entries = container.processor.apply(txn)
            gain = sum(
                (entry.realized_gain_loss or Decimal("0") for entry in entries),
                Decimal("0"),
            )
            print(
                f"Applied {txn.txid}: {len(entries)} entries, "
                f"realized gain/loss {gain} {container.settings.fiat_currency.value}"
            )
            container.save_state(label=txn.txid)
        return 0
    except CLI_ERRORS as e:
        print(f"Error: {e}")
        return 1
    finally:
        container.close()


def cmd_balance(args: argparse.Namespace) -> int:
    """Show unspent outputs and their remaining cost basis."""
    container = _open_container(args)
    if container is None:
        return 1

    try:
        state = container.ledger_state
        with state.lock:
            utxos = state.ledger.unspent()
            balance = state.ledger.unspent_balance()
            cost_basis = state.book.total_cost_basis()

        currency = container.settings.fiat_currency.value
        print(f"Unspent outputs: {len(utxos)}")
        for utxo in utxos:
            print(
                f"  {utxo.outpoint}  {sats_to_btc(utxo.amount)} BTC "
                f"@ {utxo.acquisition_price} ({utxo.acquisition_date.isoformat()})"
            )
        print(f"Balance: {sats_to_btc(balance)} BTC ({balance} sats)")
        print(f"Cost basis: {cost_basis} {currency}")
        return 0
    finally:
        container.close()


def cmd_select(args: argparse.Namespace) -> int:
    """Show which outpoints would cover an amount under a lot policy."""
    container = _open_container(args)
    if container is None:
        return 1

    try:
        policy = LotSelection(args.policy) if args.policy else container.settings.lot_selection
        state = container.ledger_state
        with state.lock:
            outpoints = state.book.select_outpoints(args.amount, policy)
        for outpoint in outpoints:
            print(str(outpoint))
        return 0
    except CLI_ERRORS as e:
        print(f"Error: {e}")
        return 1
    finally:
        container.close()


def cmd_gains(args: argparse.Namespace) -> int:
    """Show realized gain/loss for a date range."""
    container = _open_container(args)
    if container is None:
        return 1

    try:
        breakdown = container.gain_loss_calculator.breakdown(
            _parse_date(args.start_date), _parse_date(args.end_date)
        )
        currency = container.settings.fiat_currency.value
        print(f"Disposals: {breakdown.disposals}")
        print(f"Short-term: {breakdown.short_term.amount} {currency}")
        print(f"Long-term: {breakdown.long_term.amount} {currency}")
        print(f"Net realized gain/loss: {breakdown.total.amount} {currency}")
        return 0
    except CLI_ERRORS as e:
        print(f"Error: {e}")
        return 1
    finally:
        container.close()


def cmd_report(args: argparse.Namespace) -> int:
    """Generate the period report."""
    container = _open_container(args)
    if container is None:
        return 1

    try:
        generator = container.report_generator
        report = generator.generate(
            _parse_date(args.start_date), _parse_date(args.end_date)
        )
        if args.output:
            path = generator.export_report(report, args.format, args.output)
            print(f"Report written to {path}")
        else:
            print(generator.render_json(report))
        return 0
    except CLI_ERRORS as e:
        print(f"Error: {e}")
        return 1
    finally:
        container.close()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="btca",
        description="Bitcoin Accounting - UTXO cost basis and realized gain/loss reporting",
    )
    parser.add_argument(
        "--database",
        "-d",
        help="Path to SQLite database file",
        default=None,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # init command
    init_parser = subparsers.add_parser("init", help="Initialize a new database")
    init_parser.add_argument(
        "--force",
        "-f",
        action="store_true",
        help="Force reinitialization (deletes existing data)",
    )
    init_parser.set_defaults(func=cmd_init)

    # version command
    version_parser = subparsers.add_parser("version", help="Show version")
    version_parser.set_defaults(func=cmd_version)

    # rates commands
    rates_parser = subparsers.add_parser("rates", help="Manage BTC prices")
    rates_subparsers = rates_parser.add_subparsers(
        dest="rates_command", help="Rate commands"
    )

    rates_add_parser = rates_subparsers.add_parser("add", help="Add a BTC price")
    rates_add_parser.add_argument("date", help="Effective date (YYYY-MM-DD)")
    rates_add_parser.add_argument("price", help="Fiat price of one BTC")
    rates_add_parser.add_argument(
        "--source",
        choices=[source.value for source in ExchangeRateSource],
        default=ExchangeRateSource.MANUAL.value,
        help="Where the price comes from",
    )
    rates_add_parser.set_defaults(func=cmd_rates_add)

    rates_list_parser = rates_subparsers.add_parser("list", help="List BTC prices")
    rates_list_parser.add_argument("--start-date", default=None)
    rates_list_parser.add_argument("--end-date", default=None)
    rates_list_parser.set_defaults(func=cmd_rates_list)

    # acquire command
    acquire_parser = subparsers.add_parser(
        "acquire", help="Record BTC acquired from outside the ledger"
    )
    acquire_parser.add_argument("file", help="JSON file with one transaction or a list")
    acquire_parser.add_argument(
        "--price", default=None, help="Acquisition price per BTC (default: stored rate)"
    )
    acquire_parser.set_defaults(func=cmd_acquire)

    # apply command
    apply_parser = subparsers.add_parser(
        "apply", help="Apply transactions spending ledger outpoints"
    )
    apply_parser.add_argument("file", help="JSON file with one transaction or a list")
    apply_parser.set_defaults(func=cmd_apply)

    # balance command
    balance_parser = subparsers.add_parser("balance", help="Show unspent outputs")
    balance_parser.set_defaults(func=cmd_balance)

    # select command
    select_parser = subparsers.add_parser(
        "select", help="Select outpoints covering an amount"
    )
    select_parser.add_argument("amount", type=int, help="Amount in satoshis")
    select_parser.add_argument(
        "--policy",
        choices=[policy.value for policy in LotSelection],
        default=None,
        help="Lot selection policy (default: configured policy)",
    )
    select_parser.set_defaults(func=cmd_select)

    # gains command
    gains_parser = subparsers.add_parser("gains", help="Realized gain/loss for a range")
    gains_parser.add_argument("--start-date", required=True)
    gains_parser.add_argument("--end-date", required=True)
    gains_parser.set_defaults(func=cmd_gains)

    # report command
    report_parser = subparsers.add_parser("report", help="Generate the period report")
    report_parser.add_argument("--start-date", required=True)
    report_parser.add_argument("--end-date", required=True)
    report_parser.add_argument("--format", choices=["json", "csv"], default="json")
    report_parser.add_argument("--output", "-o", default=None)
    report_parser.set_defaults(func=cmd_report)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "rates" and args.rates_command is None:
        rates_parser.print_help()
        return 0

    configure_logging()
    result: int = args.func(args)
    return result


if __name__ == "__main__":
    sys.exit(main())
