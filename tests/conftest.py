"""Shared fixtures for Split Ledger tests."""

import pytest

from split_ledger.ledger import Ledger
from split_ledger.models import SplitInput


@pytest.fixture
def ledger():
    """A ledger with users A, B, C (USR1-3) in group GRP1 and D (USR4) outside it."""
    ledger = Ledger()
    for name in ("A", "B", "C", "D"):
        ledger.add_user(name)
    ledger.add_group("Trip", ["USR1", "USR2", "USR3"])
    return ledger


@pytest.fixture
def three_expenses():
    """Equal 120 paid by A, percent 60 paid by B, exact 45 paid by C."""
    return [
        (
            SplitInput(
                payer_id="USR1", amount=120.0, participant_ids=("USR1", "USR2", "USR3")
            ),
            "equal",
        ),
        (
            SplitInput(
                payer_id="USR2",
                amount=60.0,
                participant_ids=("USR1", "USR2", "USR3"),
                percent_shares=(30.0, 30.0, 40.0),
            ),
            "percent",
        ),
        (
            SplitInput(
                payer_id="USR3",
                amount=45.0,
                participant_ids=("USR2", "USR3"),
                exact_shares=(20.0, 25.0),
            ),
            "exact",
        ),
    ]
