"""Tests for CLI date filter helper."""

from datetime import date

import click
import pytest

from bankrecon.cli.date_filters import resolve_cli_date_range
from bankrecon.utils.date_parser import get_date_range


def _ctx() -> click.Context:
    return click.Context(click.Command("test"))


def test_rejects_multiple_periods(capsys):
    with pytest.raises(click.exceptions.Exit) as excinfo:
        resolve_cli_date_range(
            _ctx(),
            start_date=None,
            end_date=None,
            period_flags={"this-month": True, "last-year": True},
        )

    assert excinfo.value.exit_code == 1
    assert "Only one period option" in capsys.readouterr().err


def test_rejects_period_with_explicit_dates(capsys):
    with pytest.raises(click.exceptions.Exit) as excinfo:
        resolve_cli_date_range(
            _ctx(),
            start_date=None,
            end_date="2025-11-30",
            period_flags={"last-month": True},
        )

    assert excinfo.value.exit_code == 1
    assert "cannot be combined" in capsys.readouterr().err


def test_returns_period_range():
    start, end = resolve_cli_date_range(
        _ctx(),
        start_date=None,
        end_date=None,
        period_flags={"this-year": True, "this-month": False},
    )

    assert (start, end) == get_date_range("this-year")


def test_parses_statement_style_dates():
    start, end = resolve_cli_date_range(
        _ctx(),
        start_date="01/11/2025",
        end_date="2025-11-30",
        period_flags={},
    )

    assert start == date(2025, 11, 1)
    assert end == date(2025, 11, 30)


def test_open_range():
    assert resolve_cli_date_range(_ctx(), start_date=None, end_date=None, period_flags={}) == (None, None)


def test_invalid_end_date(capsys):
    with pytest.raises(click.exceptions.Exit) as excinfo:
        resolve_cli_date_range(
            _ctx(),
            start_date=None,
            end_date="someday",
            period_flags={},
        )

    assert excinfo.value.exit_code == 1
    assert "Invalid end date" in capsys.readouterr().err
