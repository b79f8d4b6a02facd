"""Ledger orchestrator that owns users, groups, expenses and balances.

All state lives behind a single lock, so recording an expense (validate,
compute delta, apply delta) is observed as one step by other callers.
Persistence is not done here: callers take a ``LedgerDocument`` snapshot
and hand it to a store outside the lock.
"""

import logging
import math
import threading
from collections.abc import Iterable
from typing import Protocol

from .balance_sheet import BalanceSheet
from .exceptions import ValidationError
from .models import (
    Expense,
    Group,
    LedgerDocument,
    SettlementTransaction,
    SplitInput,
    User,
)
from .settlement import settle
from .strategies import SplitStrategy, create_strategy

logger = logging.getLogger(__name__)

USER_PREFIX = "USR"
GROUP_PREFIX = "GRP"
EXPENSE_PREFIX = "EXP"


class Notifier(Protocol):
    """Receives a callback when an expense exceeds the notification threshold.

    The callback runs while the ledger lock is held, after the expense has
    been applied. It must not call back into the ledger (the lock is not
    reentrant) and any exception it raises is logged and discarded.
    """

    def notify_large_expense(self, expense: Expense, threshold: float) -> None: ...


class LoggingNotifier:
    """Notifier that reports large expenses through the log."""

    def notify_large_expense(self, expense: Expense, threshold: float) -> None:
        logger.warning(
            f"Expense '{expense.description}' ({expense.id}) of "
            f"{expense.input.amount:.2f} exceeded threshold {threshold:.2f}"
        )


def id_sequence(entity_id: str, prefix: str) -> int | None:
    """Return the numeric part of a generated id, or None if it has none."""
    suffix = entity_id[len(prefix) :]
    if entity_id.startswith(prefix) and suffix.isdigit():
        return int(suffix)
    return None


def _history_key(expense: Expense) -> tuple[float, str]:
    # EXP2 sorts before EXP10; ids without a sequence go last.
    sequence = id_sequence(expense.id, EXPENSE_PREFIX)
    return (math.inf if sequence is None else sequence, expense.id)


def replay(expenses: Iterable[Expense]) -> BalanceSheet:
    """Build a balance sheet by applying expenses in id sequence order."""
    sheet = BalanceSheet()
    for expense in sorted(expenses, key=_history_key):
        sheet.apply_delta(expense.strategy.compute_splits(expense.input))
    return sheet


def check_split_references(
    group: Group, split_input: SplitInput, context: str = "Expense"
) -> None:
    """
    Check that an expense's payer and participants fit its group.

    Raises:
        ValidationError: If participants are empty, the payer is not a member
                         or not a participant, or a participant is not a member
    """
    if not split_input.participant_ids:
        raise ValidationError(f"{context} must include at least one participant")
    if not group.has_member(split_input.payer_id):
        raise ValidationError(
            f"{context}: payer {split_input.payer_id} is not part of group {group.id}"
        )
    if split_input.payer_id not in split_input.participant_ids:
        raise ValidationError(f"{context}: participants must include the payer")
    for participant in split_input.participant_ids:
        if not group.has_member(participant):
            raise ValidationError(
                f"{context}: participant {participant} is not in group {group.id}"
            )


class Ledger:
    """Shared-expense ledger for users and groups."""

    def __init__(
        self,
        notifier: Notifier | None = None,
        notification_threshold: float = math.inf,
    ):
        """Initialize an empty ledger."""
        self._lock = threading.Lock()
        self._users: dict[str, User] = {}
        self._groups: dict[str, Group] = {}
        self._expenses: dict[str, Expense] = {}
        self._sheet = BalanceSheet()
        self._counters: dict[str, int] = {}
        self._notifier = notifier
        self._notification_threshold = notification_threshold

    @classmethod
    def from_document(
        cls,
        document: LedgerDocument,
        notifier: Notifier | None = None,
        notification_threshold: float = math.inf,
    ) -> "Ledger":
        """Create a ledger from a persisted document."""
        ledger = cls(notifier, notification_threshold)
        ledger.restore(document)
        return ledger

    # ========================================================================
    # Registry operations
    # ========================================================================

    def add_user(self, name: str) -> str:
        """Register a user and return the new user id."""
        name = name.strip()
        if not name:
            raise ValidationError("User name cannot be empty")

        with self._lock:
            user_id = self._next_id(USER_PREFIX)
            self._users[user_id] = User(id=user_id, name=name)

        logger.info(f"Added user {user_id} ({name})")
        return user_id

    def add_group(self, name: str, member_ids: list[str]) -> str:
        """Register a group of existing users and return the new group id."""
        if not member_ids:
            raise ValidationError("Group must have at least one member")

        with self._lock:
            for member_id in member_ids:
                if member_id not in self._users:
                    raise ValidationError(f"Unknown user id: {member_id}")
            group_id = self._next_id(GROUP_PREFIX)
            self._groups[group_id] = Group(
                id=group_id, name=name, member_ids=list(member_ids)
            )

        logger.info(f"Added group {group_id} ({name}) with {len(member_ids)} members")
        return group_id

    def users(self) -> dict[str, User]:
        """Snapshot of registered users by id."""
        with self._lock:
            return dict(self._users)

    def groups(self) -> dict[str, Group]:
        """Snapshot of registered groups by id."""
        with self._lock:
            return dict(self._groups)

    def expenses(self) -> list[Expense]:
        """Snapshot of recorded expenses in recording order."""
        with self._lock:
            return sorted(self._expenses.values(), key=_history_key)

    # ========================================================================
    # Expense operations
    # ========================================================================

    def record_expense(
        self,
        group_id: str,
        description: str,
        split_input: SplitInput,
        strategy: SplitStrategy | str,
    ) -> str:
        """
        Record an expense and apply its delta to the balances.

        Args:
            group_id: Group the expense belongs to
            description: Free-form description
            split_input: Payer, amount, participants and optional shares
            strategy: Strategy instance or tag ("equal", "exact", "percent")

        Returns:
            The new expense id

        Raises:
            ValidationError: If the group, payer or participants are invalid,
                             or the strategy rejects the input
            UnknownStrategyError: If a strategy tag cannot be resolved
        """
        if isinstance(strategy, str):
            strategy = create_strategy(strategy)

        with self._lock:
            group = self._groups.get(group_id)
            if group is None:
                raise ValidationError(f"Unknown group id: {group_id}")
            check_split_references(group, split_input)

            delta = strategy.compute_splits(split_input)

            expense_id = self._next_id(EXPENSE_PREFIX)
            expense = Expense(
                id=expense_id,
                group_id=group_id,
                description=description,
                input=split_input,
                strategy=strategy,
            )
            self._expenses[expense_id] = expense
            self._sheet.apply_delta(delta)
            logger.debug(f"Balance total after {expense_id}: {self._sheet.total()}")

            logger.info(
                f"Recorded {strategy.name} expense {expense_id} of "
                f"{split_input.amount:.2f} in group {group_id}"
            )

            if (
                self._notifier is not None
                and split_input.amount > self._notification_threshold
            ):
                self._notify(expense)

        return expense_id

    def recompute_from_history(self, expenses: Iterable[Expense] | None = None) -> None:
        """
        Rebuild balances by replaying expense history.

        Expenses are replayed in ascending id sequence. If ``expenses`` is
        given it replaces the stored history; otherwise the stored history is
        replayed. A strategy failure leaves the ledger unchanged.
        """
        with self._lock:
            history = (
                list(self._expenses.values()) if expenses is None else list(expenses)
            )
            sheet = replay(history)

            if expenses is not None:
                self._expenses = {expense.id: expense for expense in history}
                self._counters[EXPENSE_PREFIX] = max(
                    self._counters.get(EXPENSE_PREFIX, 0),
                    self._max_sequence(self._expenses, EXPENSE_PREFIX),
                )
            self._sheet = sheet

        logger.info(f"Recomputed balances from {len(history)} expenses")

    def clear(self) -> None:
        """Forget all expenses and balances; users and groups are kept."""
        with self._lock:
            self._expenses.clear()
            self._sheet.clear()
            self._counters.pop(EXPENSE_PREFIX, None)

    # ========================================================================
    # Balance and settlement operations
    # ========================================================================

    def balances(self) -> dict[str, float]:
        """Snapshot of the net balance per user."""
        with self._lock:
            return dict(self._sheet.balances())

    def settle_up(self) -> list[SettlementTransaction]:
        """Propose transfers that settle the current balances."""
        return settle(self.balances())

    # ========================================================================
    # Notification settings
    # ========================================================================

    def set_notifier(self, notifier: Notifier | None) -> None:
        """Configure the large-expense notifier (None disables it)."""
        with self._lock:
            self._notifier = notifier

    def set_notification_threshold(self, threshold: float) -> None:
        """Update the amount above which the notifier is called."""
        with self._lock:
            self._notification_threshold = threshold

    # ========================================================================
    # Snapshot operations
    # ========================================================================

    def to_document(self) -> LedgerDocument:
        """Snapshot the ledger for persistence."""
        with self._lock:
            return LedgerDocument(
                users=list(self._users.values()),
                groups=list(self._groups.values()),
                expenses=sorted(self._expenses.values(), key=_history_key),
                balances=dict(self._sheet.balances()),
            )

    def restore(self, document: LedgerDocument) -> None:
        """
        Replace the ledger state with a persisted document.

        References are checked the same way live input is, balances are
        recomputed from the expense history and id counters resume after the
        highest stored id.

        Raises:
            ValidationError: If the document references unknown users or
                             groups, or an expense fails its strategy
        """
        users = {user.id: user for user in document.users}

        groups = {}
        for group in document.groups:
            for member_id in group.member_ids:
                if member_id not in users:
                    raise ValidationError(
                        f"Group '{group.id}' references unknown user '{member_id}'"
                    )
            groups[group.id] = group

        expenses = {}
        for expense in document.expenses:
            group = groups.get(expense.group_id)
            if group is None:
                raise ValidationError(
                    f"Expense '{expense.id}' references unknown group "
                    f"'{expense.group_id}'"
                )
            check_split_references(
                group, expense.input, context=f"Expense '{expense.id}'"
            )
            expenses[expense.id] = expense

        sheet = replay(expenses.values())

        with self._lock:
            self._users = users
            self._groups = groups
            self._expenses = expenses
            self._sheet = sheet
            self._counters = {
                USER_PREFIX: self._max_sequence(users, USER_PREFIX),
                GROUP_PREFIX: self._max_sequence(groups, GROUP_PREFIX),
                EXPENSE_PREFIX: self._max_sequence(expenses, EXPENSE_PREFIX),
            }

        logger.info(
            f"Restored {len(users)} users, {len(groups)} groups "
            f"and {len(expenses)} expenses"
        )

    # ========================================================================
    # Internal helpers (lock must be held)
    # ========================================================================

    def _next_id(self, prefix: str) -> str:
        count = self._counters.get(prefix, 0) + 1
        self._counters[prefix] = count
        return f"{prefix}{count}"

    @staticmethod
    def _max_sequence(entities: dict, prefix: str) -> int:
        sequences = (id_sequence(entity_id, prefix) for entity_id in entities)
        return max((s for s in sequences if s is not None), default=0)

    def _notify(self, expense: Expense) -> None:
        # The expense is already applied; a failing notifier must not undo it.
        try:
            self._notifier.notify_large_expense(expense, self._notification_threshold)
        except Exception:
            logger.exception(f"Large expense notifier failed for {expense.id}")
