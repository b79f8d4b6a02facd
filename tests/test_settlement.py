"""Tests for greedy settlement."""

import random
from collections import defaultdict

import pytest

from split_ledger.settlement import SETTLEMENT_EPSILON, settle


def assert_fully_settles(balances, transactions):
    """Every debtor pays its debt and every creditor receives its credit."""
    paid = defaultdict(float)
    received = defaultdict(float)
    for tx in transactions:
        assert tx.amount > 0
        paid[tx.from_user_id] += tx.amount
        received[tx.to_user_id] += tx.amount

    for user_id, balance in balances.items():
        if balance > SETTLEMENT_EPSILON:
            assert received[user_id] == pytest.approx(balance, abs=1e-6)
            assert paid[user_id] == 0
        elif balance < -SETTLEMENT_EPSILON:
            assert paid[user_id] == pytest.approx(-balance, abs=1e-6)
            assert received[user_id] == 0
        else:
            assert paid[user_id] == 0
            assert received[user_id] == 0


class TestSettleScenarios:
    """Hand-checked settlement scenarios."""

    def test_one_creditor_two_debtors(self):
        """{A: +62, B: -18, C: -44}: largest debtor pays first."""
        balances = {"A": 62.0, "B": -18.0, "C": -44.0}

        transactions = settle(balances)

        assert [(t.from_user_id, t.to_user_id, t.amount) for t in transactions] == [
            ("C", "A", pytest.approx(44.0)),
            ("B", "A", pytest.approx(18.0)),
        ]
        assert_fully_settles(balances, transactions)

    def test_two_creditors_one_debtor(self):
        balances = {"A": 30.0, "B": 70.0, "C": -100.0}

        transactions = settle(balances)

        assert [(t.from_user_id, t.to_user_id) for t in transactions] == [
            ("C", "B"),
            ("C", "A"),
        ]
        assert_fully_settles(balances, transactions)

    def test_exact_pair_match(self):
        transactions = settle({"A": 25.0, "B": -25.0})

        assert len(transactions) == 1
        assert transactions[0].from_user_id == "B"
        assert transactions[0].to_user_id == "A"
        assert transactions[0].amount == 25.0

    def test_ties_broken_by_input_order(self):
        """Equal magnitudes are matched in the order users appear."""
        balances = {"B": 10.0, "A": 10.0, "D": -10.0, "C": -10.0}

        transactions = settle(balances)

        assert [(t.from_user_id, t.to_user_id) for t in transactions] == [
            ("D", "B"),
            ("C", "A"),
        ]

    def test_deterministic(self):
        balances = {"A": 5.0, "B": 5.0, "C": 5.0, "D": -7.5, "E": -7.5}

        assert settle(balances) == settle(dict(balances))


class TestSettleEdgeCases:
    """Degenerate inputs."""

    def test_empty(self):
        assert settle({}) == []

    def test_all_zero(self):
        assert settle({"A": 0.0, "B": 0.0}) == []

    def test_balances_within_epsilon_are_ignored(self):
        balances = {"A": 5e-7, "B": -5e-7, "C": 10.0, "D": -10.0}

        transactions = settle(balances)

        assert len(transactions) == 1
        assert {transactions[0].from_user_id, transactions[0].to_user_id} == {
            "C",
            "D",
        }

    def test_input_not_modified(self):
        balances = {"A": 62.0, "B": -18.0, "C": -44.0}

        settle(balances)

        assert balances == {"A": 62.0, "B": -18.0, "C": -44.0}


def test_random_balances_fully_settle():
    """Any zero-sum balance map is fully discharged."""
    rng = random.Random(1234)
    for _ in range(50):
        users = [f"U{i}" for i in range(rng.randint(2, 12))]
        balances = {user: round(rng.uniform(-500, 500), 2) for user in users[:-1]}
        balances[users[-1]] = -sum(balances.values())

        transactions = settle(balances)

        assert_fully_settles(balances, transactions)
        assert len(transactions) <= len(users) - 1
