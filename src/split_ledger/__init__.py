"""Split Ledger - Shared-expense balances and greedy settle-up."""

__version__ = "0.1.0"

from .balance_sheet import BalanceSheet
from .config import Settings, load_settings
from .exceptions import (
    PersistenceError,
    SplitLedgerError,
    UnknownStrategyError,
    ValidationError,
)
from .ledger import Ledger, LoggingNotifier, Notifier
from .models import (
    Expense,
    Group,
    LedgerDocument,
    SettlementTransaction,
    SplitInput,
    User,
)
from .service import LedgerService
from .settlement import settle
from .storage import LedgerStore
from .strategies import (
    EqualSplitStrategy,
    ExactSplitStrategy,
    PercentSplitStrategy,
    SplitStrategy,
    available_strategies,
    create_strategy,
)

__all__ = [
    "BalanceSheet",
    "Settings",
    "load_settings",
    "PersistenceError",
    "SplitLedgerError",
    "UnknownStrategyError",
    "ValidationError",
    "Ledger",
    "LoggingNotifier",
    "Notifier",
    "Expense",
    "Group",
    "LedgerDocument",
    "SettlementTransaction",
    "SplitInput",
    "User",
    "LedgerService",
    "settle",
    "LedgerStore",
    "EqualSplitStrategy",
    "ExactSplitStrategy",
    "PercentSplitStrategy",
    "SplitStrategy",
    "available_strategies",
    "create_strategy",
]
