"""Service layer that composes the ledger with its file store.

Each operation loads the ledger, runs a single ledger call and, if the call
changed anything, saves the result. File I/O never happens while the
ledger's lock is held.
"""

import logging
import math

from .config import Settings
from .exceptions import ValidationError
from .ledger import Ledger, Notifier
from .models import Expense, Group, SettlementTransaction, SplitInput, User
from .storage import LedgerStore
from .strategies import create_strategy

logger = logging.getLogger(__name__)


class LedgerService:
    """Service for running ledger operations against a stored ledger."""

    def __init__(
        self,
        settings: Settings,
        store: LedgerStore,
        notifier: Notifier | None = None,
    ):
        """Initialize the ledger service."""
        self.settings = settings
        self.store = store
        self.notifier = notifier

    @property
    def notification_threshold(self) -> float:
        threshold = self.settings.large_expense_threshold
        return math.inf if threshold is None else threshold

    def load_ledger(self) -> Ledger:
        """Load the stored ledger, or start an empty one on first use."""
        if not self.store.exists():
            logger.info(f"No ledger at {self.store.path}, starting a new one")
            return Ledger(self.notifier, self.notification_threshold)
        return Ledger.from_document(
            self.store.load(), self.notifier, self.notification_threshold
        )

    def save_ledger(self, ledger: Ledger) -> None:
        """Persist the ledger."""
        self.store.save(ledger.to_document())

    # ========================================================================
    # Mutating operations
    # ========================================================================

    def add_user(self, name: str) -> str:
        """Add a user and save the ledger."""
        ledger = self.load_ledger()
        user_id = ledger.add_user(name)
        self.save_ledger(ledger)
        return user_id

    def add_group(self, name: str, member_ids: list[str]) -> str:
        """Add a group and save the ledger."""
        ledger = self.load_ledger()
        group_id = ledger.add_group(name, member_ids)
        self.save_ledger(ledger)
        return group_id

    def add_expense(
        self,
        group_id: str,
        description: str,
        payer_id: str,
        amount: float,
        strategy: str,
        participant_ids: list[str] | None = None,
        shares: list[float] | None = None,
    ) -> str:
        """
        Record an expense and save the ledger.

        Args:
            group_id: Group the expense belongs to
            description: Free-form description
            payer_id: User who paid
            amount: Total amount paid
            strategy: Strategy tag ("equal", "exact" or "percent")
            participant_ids: Participants; defaults to every group member
            shares: Exact amounts or percentages parallel to participants;
                    rejected for equal splits

        Returns:
            The new expense id
        """
        ledger = self.load_ledger()

        if not participant_ids:
            group = ledger.groups().get(group_id)
            participant_ids = list(group.member_ids) if group else []

        resolved = create_strategy(strategy)
        tag = resolved.name
        shares = tuple(shares or ())
        if shares and tag not in ("exact", "percent"):
            raise ValidationError(
                f"Shares are only used by exact and percent splits, not {tag}"
            )

        split_input = SplitInput(
            payer_id=payer_id,
            amount=amount,
            participant_ids=tuple(participant_ids),
            exact_shares=shares if tag == "exact" else (),
            percent_shares=shares if tag == "percent" else (),
        )

        expense_id = ledger.record_expense(group_id, description, split_input, resolved)
        self.save_ledger(ledger)
        return expense_id

    def recompute(self) -> dict[str, float]:
        """Recompute balances from the stored history and save them."""
        ledger = self.load_ledger()
        ledger.recompute_from_history()
        self.save_ledger(ledger)
        return ledger.balances()

    # ========================================================================
    # Read-only operations
    # ========================================================================

    def list_users(self) -> list[User]:
        """Get all users."""
        return list(self.load_ledger().users().values())

    def list_groups(self) -> list[Group]:
        """Get all groups."""
        return list(self.load_ledger().groups().values())

    def list_expenses(self) -> list[Expense]:
        """Get all expenses in recording order."""
        return self.load_ledger().expenses()

    def get_balances(self) -> dict[str, float]:
        """Get the net balance per user."""
        return self.load_ledger().balances()

    def settle_up(self) -> list[SettlementTransaction]:
        """Propose transfers that settle all balances."""
        return self.load_ledger().settle_up()
