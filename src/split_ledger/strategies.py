"""Split strategies that turn one expense into a balance delta.

Every strategy credits the payer with the full amount and debits each
participant their share, so a delta always sums to zero. Strategies are
stateless and are handed out as shared singletons by ``create_strategy``.
"""

import logging
import math
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

from .exceptions import UnknownStrategyError, ValidationError

if TYPE_CHECKING:
    from .models import SplitInput

logger = logging.getLogger(__name__)

SHARE_TOLERANCE = 1e-6  # allowed drift between shares and their expected total


class SplitStrategy(ABC):
    """Base class for split strategies."""

    name: ClassVar[str]

    @abstractmethod
    def compute_splits(self, split_input: "SplitInput") -> dict[str, float]:
        """
        Compute the balance delta for an expense.

        Args:
            split_input: Financial facts of the expense

        Returns:
            Mapping of user id to signed balance change (sums to zero)

        Raises:
            ValidationError: If the input is inconsistent with this strategy
        """

    def __eq__(self, other: object) -> bool:
        return isinstance(other, SplitStrategy) and other.name == self.name

    def __hash__(self) -> int:
        return hash(self.name)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def _debit(delta: dict[str, float], user_id: str, share: float) -> None:
    delta[user_id] = delta.get(user_id, 0.0) - share


def _check_amount(split_input: "SplitInput") -> None:
    if not math.isfinite(split_input.amount):
        raise ValidationError(
            f"Expense amount must be a finite number (got {split_input.amount})"
        )
    if split_input.amount < 0:
        raise ValidationError("Expense amount cannot be negative")


def _check_shares(shares: tuple[float, ...], kind: str) -> None:
    # NaN slips past any tolerance comparison.
    if not all(math.isfinite(share) for share in shares):
        raise ValidationError(f"{kind} split shares must be finite numbers")


class EqualSplitStrategy(SplitStrategy):
    """Evenly splits the expense across participants."""

    name = "equal"

    def compute_splits(self, split_input: "SplitInput") -> dict[str, float]:
        participants = split_input.participant_ids
        if not participants:
            raise ValidationError("Equal split requires at least one participant")
        _check_amount(split_input)

        share = split_input.amount / len(participants)
        delta = {split_input.payer_id: split_input.amount}
        for participant in participants:
            _debit(delta, participant, share)

        logger.debug(f"Equal split of {split_input.amount} into {len(participants)}")
        return delta


class ExactSplitStrategy(SplitStrategy):
    """Splits the expense using an exact amount per participant."""

    name = "exact"

    def compute_splits(self, split_input: "SplitInput") -> dict[str, float]:
        participants = split_input.participant_ids
        shares = split_input.exact_shares
        if len(shares) != len(participants):
            raise ValidationError(
                f"Exact split requires values for each participant "
                f"({len(shares)} shares for {len(participants)} participants)"
            )
        _check_amount(split_input)
        _check_shares(shares, "Exact")
        total = sum(shares)
        if abs(total - split_input.amount) > SHARE_TOLERANCE:
            raise ValidationError(
                f"Exact split shares must sum to the total amount "
                f"(shares sum to {total}, amount is {split_input.amount})"
            )

        delta = {split_input.payer_id: split_input.amount}
        for participant, share in zip(participants, shares):
            _debit(delta, participant, share)
        return delta


class PercentSplitStrategy(SplitStrategy):
    """Splits the expense using a percentage per participant."""

    name = "percent"

    def compute_splits(self, split_input: "SplitInput") -> dict[str, float]:
        participants = split_input.participant_ids
        percents = split_input.percent_shares
        if len(percents) != len(participants):
            raise ValidationError(
                f"Percent split requires percentages for each participant "
                f"({len(percents)} percentages for {len(participants)} participants)"
            )
        _check_amount(split_input)
        _check_shares(percents, "Percent")
        total_percent = sum(percents)
        if abs(total_percent - 100.0) > SHARE_TOLERANCE:
            raise ValidationError(
                f"Percent split shares must sum to 100 (got {total_percent})"
            )

        delta = {split_input.payer_id: split_input.amount}
        for participant, percent in zip(participants, percents):
            _debit(delta, participant, split_input.amount * (percent / 100.0))
        return delta


_STRATEGIES: dict[str, SplitStrategy] = {
    strategy.name: strategy
    for strategy in (
        EqualSplitStrategy(),
        ExactSplitStrategy(),
        PercentSplitStrategy(),
    )
}


def available_strategies() -> list[str]:
    """Return the tags accepted by ``create_strategy``."""
    return list(_STRATEGIES)


def create_strategy(tag: str) -> SplitStrategy:
    """
    Resolve a strategy tag to its strategy.

    Matching is case-insensitive. The same instance is returned for every
    call with the same tag.

    Args:
        tag: Strategy tag such as "equal", "Exact" or "PERCENT"

    Returns:
        The shared strategy instance

    Raises:
        UnknownStrategyError: If the tag is not recognized
    """
    try:
        return _STRATEGIES[tag.strip().lower()]
    except KeyError:
        raise UnknownStrategyError(tag) from None
