"""
State management for the AMM ledger
"""

from .balances import InsufficientBalance, TokenLedger, TokenLedgerError
from .context import CallContext
from .pools import Pool, PoolRegistry
from .positions import Position, PositionLedger
from .stats import GlobalStats

__all__ = [
    "TokenLedger",
    "TokenLedgerError",
    "InsufficientBalance",
    "CallContext",
    "Pool",
    "PoolRegistry",
    "Position",
    "PositionLedger",
    "GlobalStats",
]
