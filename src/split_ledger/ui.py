"""Rich rendering helpers for the Split Ledger CLI."""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .models import Expense, Group, SettlementTransaction, User

console = Console()


class ConsoleNotifier:
    """Notifier that prints large-expense alerts to the console."""

    def notify_large_expense(self, expense: Expense, threshold: float) -> None:
        console.print(
            f"[bold yellow]\\[Alert][/bold yellow] "
            f"Expense '{escape(expense.description)}' "
            f"exceeded threshold {threshold:,.2f}"
        )


def format_money(amount: float, use_color: bool = True) -> str:
    """
    Format money in accounting style with alignment.

    Negative amounts use parentheses: (85.02)
    Positive amounts have spaces:      85.02
    """
    abs_amount = abs(amount)
    if amount < 0:
        if use_color:
            return f"([red]{abs_amount:,.2f}[/red])"
        return f"({abs_amount:,.2f})"
    if use_color:
        return f" [green]{abs_amount:,.2f}[/green] "
    return f" {abs_amount:,.2f} "


def _user_label(user_id: str, users: dict[str, User]) -> str:
    user = users.get(user_id)
    label = f"{user.name} ({user_id})" if user else user_id
    return escape(label)


def display_users(users: list[User]):
    """Display registered users."""
    if not users:
        console.print("[yellow]No users have been created yet.[/yellow]")
        return

    table = Table(title="Users", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    for user in users:
        table.add_row(escape(user.id), escape(user.name))
    console.print(table)


def display_groups(groups: list[Group], users: dict[str, User]):
    """Display groups with their members."""
    if not groups:
        console.print("[yellow]No groups have been created yet.[/yellow]")
        return

    table = Table(title="Groups", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Members", no_wrap=False)
    for group in groups:
        members = ", ".join(_user_label(m, users) for m in group.member_ids)
        table.add_row(
            escape(group.id), escape(group.name), members or "[dim]<none>[/dim]"
        )
    console.print(table)


def display_expenses(expenses: list[Expense], users: dict[str, User]):
    """Display recorded expenses."""
    if not expenses:
        console.print("[yellow]No expenses have been recorded yet.[/yellow]")
        return

    table = Table(title="Expenses", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", width=8)
    table.add_column("Group", style="dim", width=8)
    table.add_column("Description", style="cyan", width=30)
    table.add_column("Paid by")
    table.add_column("Amount", justify="right", width=12)
    table.add_column("Split", style="yellow")

    for expense in expenses:
        desc = expense.description
        desc = desc[:30] + "..." if len(desc) > 30 else desc
        table.add_row(
            escape(expense.id),
            escape(expense.group_id),
            escape(desc),
            _user_label(expense.input.payer_id, users),
            format_money(expense.input.amount),
            expense.strategy.name,
        )
    console.print(table)


def display_balances(balances: dict[str, float], users: dict[str, User]):
    """Display net balances per user."""
    if not balances:
        console.print("[yellow]No balances yet.[/yellow]")
        return

    table = Table(title="Balances", show_header=True, header_style="bold magenta")
    table.add_column("User", style="cyan")
    table.add_column("Balance", justify="right", width=14)
    for user_id, balance in balances.items():
        table.add_row(_user_label(user_id, users), format_money(balance))
    console.print(table)


def display_settlement(
    transactions: list[SettlementTransaction], users: dict[str, User]
):
    """Display proposed settlement transfers."""
    if not transactions:
        console.print("[green]Nothing to settle.[/green]")
        return

    table = Table(title="Settle Up", show_header=True, header_style="bold magenta")
    table.add_column("From", style="red")
    table.add_column("To", style="green")
    table.add_column("Amount", justify="right", width=12)
    for tx in transactions:
        table.add_row(
            _user_label(tx.from_user_id, users),
            _user_label(tx.to_user_id, users),
            f"{tx.amount:,.2f}",
        )
    console.print(table)
    console.print(f"  Total transfers: {len(transactions)}")
