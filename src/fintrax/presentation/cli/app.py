"""Fintrax CLI application using Typer.

Every command opens the engine on the configured database, performs one
read or write, and prints the result with Rich.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, Optional, TypeVar
from uuid import UUID

import typer
from rich.console import Console
from rich.table import Table

from fintrax.application.engine import FinanceEngine
from fintrax.domain.calendar import Bucket, Granularity
from fintrax.domain.ledger import Money, TransactionCategory, TransactionType
from fintrax.domain.shared.exceptions import DomainException
from fintrax.domain.shared.time import to_utc
from fintrax.infrastructure.persistence.sqlalchemy.init_db import create_tables
from fintrax.logging_config import configure_logging
from fintrax.presentation.cli.runtime import open_engine
from fintrax_config import get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

app = typer.Typer(
    name="fintrax",
    help="Fintrax - personal finance aggregation CLI",
    no_args_is_help=True,
)
console = Console()

# Create expenses subcommand group
expenses_app = typer.Typer(
    name="expenses",
    help="Recurring monthly expenses",
    no_args_is_help=True,
)
app.add_typer(expenses_app)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(action: Callable[[FinanceEngine], Awaitable[T]]) -> T:
    """Run ``action`` against a started engine, mapping domain errors to exit 1."""
    settings = get_settings()
    configure_logging(settings.log_level)

    async def _main() -> T:
        async with open_engine(settings) as engine:
            return await action(engine)

    try:
        return asyncio.run(_main())
    except DomainException as e:
        if settings.debug:
            logger.exception("Command failed")
        console.print(f"[red]Error ({e.code.value}):[/red] {e.message}")
        raise typer.Exit(code=1) from e


def _money(value: Money) -> str:
    text = f"{value.format()} {get_settings().currency_code}"
    return f"[red]{text}[/red]" if value.is_negative() else text


def _parse_enum(enum_cls, value: str, label: str):
    try:
        return enum_cls(value.strip().upper())
    except ValueError as e:
        valid = ", ".join(item.value for item in enum_cls)
        console.print(f"[red]Unknown {label} '{value}'.[/red] Valid: {valid}")
        raise typer.Exit(code=2) from e


def _parse_date(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return to_utc(datetime.fromisoformat(value))
    except ValueError as e:
        console.print(f"[red]Invalid date '{value}'.[/red] Use ISO format.")
        raise typer.Exit(code=2) from e


def _resolve_bucket(
    engine: FinanceEngine,
    period: Optional[str],
    granularity: str,
) -> Bucket:
    parsed = Granularity.parse(granularity)
    if period is None:
        return engine.calendar.bucket_for(datetime.now().astimezone(), parsed)
    return engine.calendar.bucket_from_key(period, parsed)


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as e:
        console.print(f"[red]Invalid id '{value}'.[/red]")
        raise typer.Exit(code=2) from e


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@app.command("init-db")
def init_db() -> None:
    """Create the database tables (idempotent)."""
    settings = get_settings()
    configure_logging(settings.log_level)
    asyncio.run(create_tables(settings.database_url))
    console.print("[green]Database initialized.[/green]")


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


@app.command("add")
def add_transaction(
    amount: str = typer.Argument(..., help="Positive amount, e.g. 12.50"),
    description: str = typer.Argument(..., help="What the money was for"),
    type_: str = typer.Option("expense", "--type", "-t", help="income or expense"),
    category: str = typer.Option("other", "--category", "-c", help="Category name"),
    date: Optional[str] = typer.Option(None, "--date", "-d", help="ISO date/time"),
) -> None:
    """Record an income or expense."""
    transaction_type = _parse_enum(TransactionType, type_, "type")
    transaction_category = _parse_enum(TransactionCategory, category, "category")
    occurred_at = _parse_date(date)

    async def action(engine: FinanceEngine):
        return await engine.add_transaction(
            amount=amount,
            description=description,
            category=transaction_category,
            type=transaction_type,
            occurred_at=occurred_at,
        )

    transaction = _run(action)
    console.print(f"[green]Added[/green] {transaction}")
    console.print(f"[dim]id: {transaction.id}[/dim]")


@app.command("delete")
def delete_transaction(
    transaction_id: str = typer.Argument(..., help="Transaction id"),
) -> None:
    """Delete a transaction."""
    parsed = _parse_uuid(transaction_id)

    async def action(engine: FinanceEngine):
        await engine.delete_transaction(parsed)

    _run(action)
    console.print(f"[green]Deleted[/green] {parsed}")


@app.command("list")
def list_transactions(
    period: Optional[str] = typer.Option(None, "--period", "-p", help="Bucket key"),
    granularity: str = typer.Option("monthly", "--granularity", "-g"),
) -> None:
    """List the transactions of one period."""

    async def action(engine: FinanceEngine):
        bucket = _resolve_bucket(engine, period, granularity)
        return bucket, await engine.ledger.query_range(bucket.start, bucket.end)

    bucket, transactions = _run(action)
    table = Table(title=f"Transactions - {bucket.label}")
    table.add_column("Date")
    table.add_column("Type")
    table.add_column("Category")
    table.add_column("Description")
    table.add_column("Amount", justify="right")
    table.add_column("Id", style="dim")
    for txn in transactions:
        table.add_row(
            txn.occurred_at.strftime("%Y-%m-%d %H:%M"),
            txn.type.value,
            txn.category.value,
            txn.description,
            _money(txn.signed_amount),
            str(txn.id),
        )
    console.print(table)


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------


@app.command("balance")
def balance(
    history: int = typer.Option(0, "--history", "-n", help="Show N monthly snapshots"),
) -> None:
    """Show the current balance."""

    async def action(engine: FinanceEngine):
        current = await engine.balance.current_balance()
        snapshots = []
        if history > 0:
            observable = await engine.balance.history(Granularity.MONTHLY)
            snapshots = observable.value[:history]
        return current, snapshots

    current, snapshots = _run(action)
    console.print(f"Income:   {_money(current.total_income)}")
    console.print(f"Expenses: {_money(current.total_expenses)}")
    console.print(f"[bold]Net:      {_money(current.net_balance)}[/bold]")
    console.print(f"[dim]as of {current.computed_at:%Y-%m-%d %H:%M:%S} UTC[/dim]")

    if snapshots:
        table = Table(title="Monthly balance history (newest first)")
        table.add_column("Month")
        table.add_column("Income", justify="right")
        table.add_column("Expenses", justify="right")
        table.add_column("Net", justify="right")
        table.add_column("Computed at", style="dim")
        for snapshot in snapshots:
            table.add_row(
                snapshot.bucket_key,
                _money(snapshot.total_income),
                _money(snapshot.total_expenses),
                _money(snapshot.net_balance),
                f"{snapshot.computed_at:%Y-%m-%d %H:%M:%S}",
            )
        console.print(table)


@app.command("summary")
def summary(
    period: Optional[str] = typer.Option(None, "--period", "-p", help="Bucket key"),
    granularity: str = typer.Option("monthly", "--granularity", "-g"),
) -> None:
    """Show income, expenses and net for one period."""

    async def action(engine: FinanceEngine):
        bucket = _resolve_bucket(engine, period, granularity)
        return await engine.summaries.summary(bucket)

    result = _run(action)
    console.print(f"[bold]{result.bucket.label}[/bold]")
    console.print(f"Income:          {_money(result.total_income)}")
    console.print(f"Expenses:        {_money(result.total_expenses)}")
    console.print(f"Net:             {_money(result.net_balance)}")
    console.print(f"Monthly average: {_money(result.monthly_average)}")
    if result.biggest_income:
        console.print(f"Biggest income:  {result.biggest_income}")
    if result.biggest_expense:
        console.print(f"Biggest expense: {result.biggest_expense}")


@app.command("categories")
def categories(
    period: Optional[str] = typer.Option(None, "--period", "-p", help="Bucket key"),
    granularity: str = typer.Option("monthly", "--granularity", "-g"),
    flow: str = typer.Option("expense", "--flow", "-f", help="income or expense"),
    top: int = typer.Option(0, "--top", help="Only the N largest (0 = all)"),
) -> None:
    """Show the category breakdown of one period."""
    transaction_type = _parse_enum(TransactionType, flow, "flow")

    async def action(engine: FinanceEngine):
        bucket = _resolve_bucket(engine, period, granularity)
        if top:
            items = await engine.categories.top_categories(
                top,
                bucket,
                transaction_type,
            )
        else:
            items = await engine.categories.category_breakdown(bucket, transaction_type)
        return bucket, items

    bucket, items = _run(action)
    flow_label = transaction_type.value.title()
    table = Table(title=f"{flow_label} by category - {bucket.label}")
    table.add_column("Category")
    table.add_column("Transactions", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Share", justify="right")
    for item in items:
        table.add_row(
            item.category.value,
            str(item.transaction_count),
            _money(item.total_amount),
            f"{item.percentage}%",
        )
    console.print(table)


@app.command("trend")
def trend(
    months: Optional[int] = typer.Option(None, "--months", "-m", help="Months to show"),
) -> None:
    """Show income, expenses and net for the last N months."""
    count = months if months is not None else get_settings().default_trend_months

    async def action(engine: FinanceEngine):
        series = await engine.trends.monthly_trend(count)
        average = await engine.trends.trailing_monthly_average(count)
        return series, average

    series, average = _run(action)
    table = Table(title=f"Monthly trend ({count} months)")
    table.add_column("Month")
    table.add_column("Income", justify="right")
    table.add_column("Expenses", justify="right")
    table.add_column("Net", justify="right")
    for entry in series:
        table.add_row(
            entry.period_label,
            _money(entry.income),
            _money(entry.expenses),
            _money(entry.net),
        )
    console.print(table)
    console.print(f"Average monthly net: {_money(average)}")


@app.command("yoy")
def year_over_year() -> None:
    """Compare this year's net so far with the same span last year."""

    async def action(engine: FinanceEngine):
        return await engine.trends.year_over_year_comparison()

    result = _run(action)
    console.print(f"{result.current_label}:  {_money(result.current_net)}")
    console.print(f"{result.previous_label}: {_money(result.previous_net)}")
    if result.is_defined:
        console.print(f"Change: [bold]{result.change_percentage}%[/bold]")
    else:
        console.print("Change: [yellow]undefined (previous net is zero)[/yellow]")


# ---------------------------------------------------------------------------
# Monthly expenses
# ---------------------------------------------------------------------------


@expenses_app.command("add")
def add_expense(
    amount: str = typer.Argument(..., help="Positive amount"),
    description: str = typer.Argument(..., help="What the expense is for"),
    due_day: int = typer.Option(1, "--due-day", help="Day of month (1-31)"),
    category: str = typer.Option("other", "--category", "-c", help="Category name"),
) -> None:
    """Register a recurring monthly expense."""
    expense_category = _parse_enum(TransactionCategory, category, "category")

    async def action(engine: FinanceEngine):
        return await engine.add_monthly_expense(
            amount,
            description,
            expense_category,
            due_day,
        )

    expense = _run(action)
    console.print(
        f"[green]Added[/green] {expense.description} "
        f"({_money(expense.amount)}, due day {expense.due_day})",
    )
    console.print(f"[dim]id: {expense.id}[/dim]")


@expenses_app.command("list")
def list_expenses(
    show_all: bool = typer.Option(False, "--all", help="Include inactive expenses"),
) -> None:
    """List monthly expenses, ordered by due day."""

    async def action(engine: FinanceEngine):
        if show_all:
            return await engine.expenses.list_all()
        return list(engine.expenses.active.value)

    expenses = _run(action)
    table = Table(title="Monthly expenses")
    table.add_column("Due", justify="right")
    table.add_column("Description")
    table.add_column("Category")
    table.add_column("Amount", justify="right")
    table.add_column("Active")
    table.add_column("Last paid")
    table.add_column("Id", style="dim")
    for expense in expenses:
        table.add_row(
            str(expense.due_day),
            expense.description,
            expense.category.value,
            _money(expense.amount),
            "yes" if expense.is_active else "no",
            f"{expense.last_paid_at:%Y-%m-%d}" if expense.last_paid_at else "-",
            str(expense.id),
        )
    console.print(table)


@expenses_app.command("pay")
def pay_expense(
    expense_id: str = typer.Argument(..., help="Monthly expense id"),
) -> None:
    """Mark a monthly expense as paid now."""
    parsed = _parse_uuid(expense_id)

    async def action(engine: FinanceEngine):
        return await engine.mark_monthly_expense_paid(parsed)

    expense = _run(action)
    console.print(f"[green]Paid[/green] {expense.description}")


@expenses_app.command("deactivate")
def deactivate_expense(
    expense_id: str = typer.Argument(..., help="Monthly expense id"),
) -> None:
    """Stop a monthly expense from recurring (the record is kept)."""
    parsed = _parse_uuid(expense_id)

    async def action(engine: FinanceEngine):
        return await engine.deactivate_monthly_expense(parsed)

    expense = _run(action)
    console.print(f"[green]Deactivated[/green] {expense.description}")


def cli() -> None:
    """Entry point for the CLI application."""
    app()


if __name__ == "__main__":
    cli()
