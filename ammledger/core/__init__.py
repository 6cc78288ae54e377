"""
Core AMM algorithms and executors
"""

from .cpmm import (
    FEE_BPS,
    MIN_LIQUIDITY,
    compute_fee,
    quote_swap,
    initial_share,
    proportional_share,
    redemption,
)
from .events import Action, Event, EventLog
from .ledger import AmmLedger
from .liquidity import LiquidityExecutor
from .swap import Direction, SwapExecutor
from .transaction import PoolLocks, RollbackError, Transaction

__all__ = [
    "FEE_BPS",
    "MIN_LIQUIDITY",
    "compute_fee",
    "quote_swap",
    "initial_share",
    "proportional_share",
    "redemption",
    "Action",
    "Event",
    "EventLog",
    "AmmLedger",
    "LiquidityExecutor",
    "Direction",
    "SwapExecutor",
    "PoolLocks",
    "RollbackError",
    "Transaction",
]
