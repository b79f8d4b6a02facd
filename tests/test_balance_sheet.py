"""Tests for the balance sheet."""

import pytest

from split_ledger.balance_sheet import BalanceSheet


def test_apply_delta_accumulates():
    sheet = BalanceSheet()

    sheet.apply_delta({"A": 80.0, "B": -40.0, "C": -40.0})
    sheet.apply_delta({"B": 42.0, "A": -18.0, "C": -24.0})

    assert sheet.balances() == pytest.approx({"A": 62.0, "B": 2.0, "C": -64.0})
    assert sheet.total() == pytest.approx(0.0, abs=1e-9)


def test_near_zero_balance_snaps_to_zero_and_stays():
    """Floating-point residue below 1e-9 becomes exactly 0.0."""
    sheet = BalanceSheet()

    sheet.apply_delta({"A": 0.1 + 0.2, "B": -(0.1 + 0.2)})
    sheet.apply_delta({"A": -0.3, "B": 0.3})

    assert sheet.balances()["A"] == 0.0
    assert sheet.balances()["B"] == 0.0
    assert len(sheet) == 2


def test_residue_above_tolerance_is_kept():
    sheet = BalanceSheet()

    sheet.apply_delta({"A": 1e-8})

    assert sheet.balances()["A"] == 1e-8


def test_clear():
    sheet = BalanceSheet()
    sheet.apply_delta({"A": 10.0, "B": -10.0})

    sheet.clear()

    assert dict(sheet.balances()) == {}


def test_balances_view_is_read_only():
    sheet = BalanceSheet()
    sheet.apply_delta({"A": 1.0, "B": -1.0})

    with pytest.raises(TypeError):
        sheet.balances()["A"] = 5.0  # type: ignore[index]
