"""Running per-user balances."""

from collections.abc import Mapping
from types import MappingProxyType

ZERO_SNAP_TOLERANCE = 1e-9


class BalanceSheet:
    """
    Accumulates balance deltas into a net balance per user.

    Positive balances are owed to the user, negative balances are owed by
    the user. A balance that lands within ``ZERO_SNAP_TOLERANCE`` of zero is
    snapped to exactly 0.0 but stays in the sheet.
    """

    def __init__(self):
        self._balances: dict[str, float] = {}

    def apply_delta(self, delta: Mapping[str, float]) -> None:
        """Add every change in the delta to the matching user's balance."""
        for user_id, change in delta.items():
            balance = self._balances.get(user_id, 0.0) + change
            if abs(balance) < ZERO_SNAP_TOLERANCE:
                balance = 0.0
            self._balances[user_id] = balance

    def clear(self) -> None:
        """Remove all balances."""
        self._balances.clear()

    def balances(self) -> Mapping[str, float]:
        """Read-only view of the current balances."""
        return MappingProxyType(self._balances)

    def total(self) -> float:
        """Sum of all balances; zero (within noise) for a consistent sheet."""
        return sum(self._balances.values())

    def __len__(self) -> int:
        return len(self._balances)
