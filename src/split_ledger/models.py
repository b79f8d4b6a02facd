"""Pydantic domain models for Split Ledger."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from .strategies import SplitStrategy, create_strategy

# ============================================================================
# Registry Models
# ============================================================================


class User(BaseModel):
    """A person who can pay for or share in expenses."""

    id: str
    name: str


class Group(BaseModel):
    """A set of users that share expenses."""

    id: str
    name: str
    member_ids: list[str] = Field(default_factory=list)

    def has_member(self, user_id: str) -> bool:
        """Check whether a user belongs to this group."""
        return user_id in self.member_ids


# ============================================================================
# Expense Models
# ============================================================================


class SplitInput(BaseModel):
    """Raw financial facts of a single expense.

    The model deliberately carries no cross-field validation: share counts,
    share totals and membership are checked by the strategy and the ledger
    that consume it.
    """

    model_config = ConfigDict(frozen=True)

    payer_id: str
    amount: float
    participant_ids: tuple[str, ...] = ()
    exact_shares: tuple[float, ...] = ()  # parallel to participant_ids
    percent_shares: tuple[float, ...] = ()  # parallel to participant_ids


class Expense(BaseModel):
    """A recorded expense.

    The strategy is stored as an instance but persisted as its tag, so a
    saved expense re-resolves to the same strategy on load. An unrecognized
    tag raises UnknownStrategyError, exactly as it would for live input.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id: str
    group_id: str
    description: str = ""
    input: SplitInput
    strategy: SplitStrategy

    @field_validator("strategy", mode="before")
    @classmethod
    def _resolve_strategy(cls, value: Any) -> Any:
        if isinstance(value, str):
            return create_strategy(value)
        return value

    @field_serializer("strategy")
    def _serialize_strategy(self, strategy: SplitStrategy) -> str:
        return strategy.name


# ============================================================================
# Settlement Models
# ============================================================================


class SettlementTransaction(BaseModel):
    """A proposed payment from a debtor to a creditor."""

    model_config = ConfigDict(frozen=True)

    from_user_id: str
    to_user_id: str
    amount: float = Field(gt=0)


# ============================================================================
# Persistence Models
# ============================================================================


class LedgerDocument(BaseModel):
    """The persisted state of a ledger.

    Balances are stored for completeness but are informational: a restored
    ledger recomputes them from the expense history.
    """

    users: list[User]
    groups: list[Group]
    expenses: list[Expense]
    balances: dict[str, float] = Field(default_factory=dict)
