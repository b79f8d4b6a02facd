"""Greedy settlement of a balance snapshot into pairwise transfers."""

import heapq
import logging
from collections.abc import Mapping

from .models import SettlementTransaction

logger = logging.getLogger(__name__)

SETTLEMENT_EPSILON = 1e-6  # balances this close to zero are considered settled


def settle(
    balances: Mapping[str, float], epsilon: float = SETTLEMENT_EPSILON
) -> list[SettlementTransaction]:
    """
    Compute transfers that discharge every balance beyond epsilon.

    Steps:
    1. Split users into creditors (balance > epsilon) and debtors
       (balance < -epsilon); everyone else is ignored
    2. Repeatedly match the largest creditor with the largest debtor
    3. Transfer the smaller of the two magnitudes from debtor to creditor
    4. Push back any party whose remaining magnitude exceeds epsilon

    Ties on magnitude are broken by each user's position in ``balances``,
    so a given input always yields the same transfers. This is a greedy
    heuristic: it does not guarantee the minimum number of transfers.

    Args:
        balances: Net balance per user (positive = owed money)
        epsilon: Magnitude below which a balance counts as settled

    Returns:
        Ordered list of settlement transactions (the input is not modified)
    """
    # Heap entries are (-magnitude, position, user_id) so heapq acts as a max-heap.
    creditors: list[tuple[float, int, str]] = []
    debtors: list[tuple[float, int, str]] = []
    for position, (user_id, balance) in enumerate(balances.items()):
        if balance > epsilon:
            creditors.append((-balance, position, user_id))
        elif balance < -epsilon:
            debtors.append((balance, position, user_id))
    heapq.heapify(creditors)
    heapq.heapify(debtors)

    transactions = []
    while creditors and debtors:
        neg_credit, creditor_pos, creditor_id = heapq.heappop(creditors)
        neg_debt, debtor_pos, debtor_id = heapq.heappop(debtors)
        credit = -neg_credit
        debt = -neg_debt

        amount = min(credit, debt)
        transactions.append(
            SettlementTransaction(
                from_user_id=debtor_id, to_user_id=creditor_id, amount=amount
            )
        )

        credit -= amount
        debt -= amount
        if credit > epsilon:
            heapq.heappush(creditors, (-credit, creditor_pos, creditor_id))
        if debt > epsilon:
            heapq.heappush(debtors, (-debt, debtor_pos, debtor_id))

    logger.debug(f"Settled {len(balances)} balances with {len(transactions)} transfers")
    return transactions
