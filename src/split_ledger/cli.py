"""CLI for Split Ledger using Typer."""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager

import typer
from rich.markup import escape

from .config import load_settings
from .exceptions import SplitLedgerError
from .service import LedgerService
from .storage import LedgerStore
from .strategies import available_strategies
from .ui import (
    ConsoleNotifier,
    console,
    display_balances,
    display_expenses,
    display_groups,
    display_settlement,
    display_users,
)

app = typer.Typer(
    name="split-ledger",
    help="Track shared expenses and settle up with as few transfers as possible",
)


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def _create_service() -> LedgerService:
    settings = load_settings()
    return LedgerService(settings, LedgerStore(settings.ledger_path), ConsoleNotifier())


@contextmanager
def _handle_errors(verbose: bool) -> Iterator[None]:
    """Report ledger errors with their kind and exit non-zero."""
    try:
        yield
    except SplitLedgerError as e:
        console.print(f"\n[bold red]{type(e).__name__}:[/bold red] {escape(str(e))}")
        if verbose:
            raise
        sys.exit(1)


@app.command("add-user")
def add_user(
    name: str = typer.Argument(..., help="Display name of the user"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Add a user to the ledger."""
    setup_logging(verbose)

    with _handle_errors(verbose):
        user_id = _create_service().add_user(name)
        console.print(f"[green]Created user with id: {user_id}[/green]")


@app.command()
def users(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """List users."""
    setup_logging(verbose)

    with _handle_errors(verbose):
        display_users(_create_service().list_users())


@app.command("add-group")
def add_group(
    name: str = typer.Argument(..., help="Group name"),
    members: list[str] = typer.Argument(..., help="Member user ids"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Create a group of existing users."""
    setup_logging(verbose)

    with _handle_errors(verbose):
        group_id = _create_service().add_group(name, members)
        console.print(f"[green]Created group with id: {group_id}[/green]")


@app.command()
def groups(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """List groups and their members."""
    setup_logging(verbose)

    with _handle_errors(verbose):
        ledger = _create_service().load_ledger()
        display_groups(list(ledger.groups().values()), ledger.users())


@app.command("add-expense")
def add_expense(
    group_id: str = typer.Argument(..., help="Group id"),
    payer_id: str = typer.Argument(..., help="User id of the payer"),
    amount: float = typer.Argument(..., help="Total amount paid"),
    strategy: str = typer.Option(
        "equal",
        "--strategy",
        "-t",
        help=f"Split strategy ({'/'.join(available_strategies())})",
    ),
    participants: list[str] | None = typer.Option(
        None,
        "--participant",
        "-p",
        help="Participant user id (repeatable, defaults to the whole group)",
    ),
    shares: list[float] | None = typer.Option(
        None,
        "--share",
        "-s",
        help="Exact amount or percentage per participant, in participant order",
    ),
    description: str = typer.Option("", "--description", "-d", help="Description"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Record an expense.

    For exact and percent splits pass one --share per participant, in the
    same order as the --participant options.
    """
    setup_logging(verbose)

    with _handle_errors(verbose):
        expense_id = _create_service().add_expense(
            group_id=group_id,
            description=description,
            payer_id=payer_id,
            amount=amount,
            strategy=strategy,
            participant_ids=participants,
            shares=shares,
        )
        console.print(f"[green]Expense recorded with id: {expense_id}[/green]")


@app.command()
def expenses(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """List recorded expenses."""
    setup_logging(verbose)

    with _handle_errors(verbose):
        ledger = _create_service().load_ledger()
        display_expenses(ledger.expenses(), ledger.users())


@app.command()
def balances(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Show the net balance of every user."""
    setup_logging(verbose)

    with _handle_errors(verbose):
        ledger = _create_service().load_ledger()
        display_balances(ledger.balances(), ledger.users())


@app.command()
def settle(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Propose transfers that settle all balances.

    Uses a greedy largest-first matching; the result is small but not
    guaranteed to be the minimum number of transfers.
    """
    setup_logging(verbose)

    with _handle_errors(verbose):
        ledger = _create_service().load_ledger()
        display_settlement(ledger.settle_up(), ledger.users())


@app.command()
def recompute(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Rebuild balances from the recorded expense history."""
    setup_logging(verbose)

    with _handle_errors(verbose):
        service = _create_service()
        recomputed = service.recompute()
        users = {user.id: user for user in service.list_users()}
        display_balances(recomputed, users)


if __name__ == "__main__":
    app()
