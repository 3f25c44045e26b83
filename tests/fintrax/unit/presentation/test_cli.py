"""Tests for the Typer CLI against a temporary SQLite database."""

import re

import pytest
from rich.console import Console
from typer.testing import CliRunner

from fintrax.presentation.cli import app as cli_app
from fintrax_config import clear_settings_cache

runner = CliRunner()

ID_PATTERN = re.compile(r"id: ([0-9a-f-]{36})")


@pytest.fixture(autouse=True)
def cli_environment(tmp_path, monkeypatch):
    """Point the CLI at a fresh database and keep logging untouched."""
    monkeypatch.setenv(
        "FINTRAX_DATABASE_URL",
        f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}",
    )
    monkeypatch.setenv("FINTRAX_CURRENCY_CODE", "EUR")
    monkeypatch.setattr(cli_app, "configure_logging", lambda level: None)
    monkeypatch.setattr(cli_app, "console", Console(width=200))
    clear_settings_cache()
    yield
    clear_settings_cache()


def invoke(*args):
    return runner.invoke(cli_app.app, list(args))


def created_id(output: str) -> str:
    match = ID_PATTERN.search(output)
    assert match, output
    return match.group(1)


def test_init_db_creates_schema():
    result = invoke("init-db")

    assert result.exit_code == 0, result.output
    assert "Database initialized" in result.output


class TestTransactions:
    def test_add_then_summary(self):
        income = invoke(
            "add",
            "1000.00",
            "Salary",
            "--type",
            "income",
            "--category",
            "income",
            "--date",
            "2024-01-05",
        )
        expense = invoke("add", "400.00", "Rent", "-c", "housing", "-d", "2024-01-06")

        result = invoke("summary", "-p", "2024-01")

        assert income.exit_code == 0, income.output
        assert expense.exit_code == 0, expense.output
        assert result.exit_code == 0, result.output
        assert "January 2024" in result.output
        assert "1000.00 EUR" in result.output
        assert "600.00 EUR" in result.output

    def test_balance_reflects_previous_commands(self):
        invoke("add", "80.00", "Groceries", "-c", "food", "-d", "2024-01-10")

        result = invoke("balance")

        assert result.exit_code == 0, result.output
        assert "-80.00 EUR" in result.output

    def test_list_and_delete(self):
        added = invoke("add", "4.50", "Coffee", "-c", "food", "-d", "2024-02-03")
        transaction_id = created_id(added.output)

        listed = invoke("list", "-p", "2024-02")
        deleted = invoke("delete", transaction_id)
        relisted = invoke("list", "-p", "2024-02")

        assert "Coffee" in listed.output
        assert deleted.exit_code == 0, deleted.output
        assert "Coffee" not in relisted.output

    def test_validation_errors_exit_with_code(self):
        result = invoke("add", "abc", "Broken")

        assert result.exit_code == 1
        assert "INVALID_AMOUNT" in result.output

    def test_unknown_category_is_a_usage_error(self):
        result = invoke("add", "1.00", "Thing", "-c", "gadgets")

        assert result.exit_code == 2
        assert "Unknown category" in result.output

    def test_deleting_unknown_transaction_fails(self):
        result = invoke("delete", "00000000-0000-0000-0000-000000000000")

        assert result.exit_code == 1
        assert "TRANSACTION_NOT_FOUND" in result.output


class TestAnalytics:
    def test_categories_for_period(self):
        invoke("add", "30.00", "Bus pass", "-c", "transportation", "-d", "2024-03-02")
        invoke("add", "10.00", "Cinema", "-c", "entertainment", "-d", "2024-03-04")

        result = invoke("categories", "-p", "2024-03")

        assert result.exit_code == 0, result.output
        assert "TRANSPORTATION" in result.output
        assert "75.00%" in result.output

    def test_invalid_period_key(self):
        result = invoke("summary", "-p", "2024-13")

        assert result.exit_code == 1
        assert "INVALID_PERIOD" in result.output

    def test_trend_rejects_negative_months(self):
        result = invoke("trend", "-m", "-1")

        assert result.exit_code == 1
        assert "INVALID_PERIOD" in result.output

    def test_year_over_year_with_empty_ledger(self):
        result = invoke("yoy")

        assert result.exit_code == 0, result.output
        assert "undefined" in result.output


class TestMonthlyExpenses:
    def test_expense_lifecycle(self):
        added = invoke("expenses", "add", "899.00", "Rent", "--due-day", "1")
        expense_id = created_id(added.output)

        listed = invoke("expenses", "list")
        paid = invoke("expenses", "pay", expense_id)
        deactivated = invoke("expenses", "deactivate", expense_id)
        active = invoke("expenses", "list")
        everything = invoke("expenses", "list", "--all")

        assert "Rent" in listed.output
        assert paid.exit_code == 0, paid.output
        assert deactivated.exit_code == 0, deactivated.output
        assert "Rent" not in active.output
        assert "Rent" in everything.output

    def test_invalid_due_day(self):
        result = invoke("expenses", "add", "10.00", "Phone", "--due-day", "32")

        assert result.exit_code == 1
        assert "INVALID_DUE_DAY" in result.output
