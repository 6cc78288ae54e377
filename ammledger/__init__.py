"""
ammledger: constant-product AMM ledger with LP share accounting.
"""

from .config import LedgerConfig, load_config
from .core import AmmLedger, Direction
from .errors import (
    AmmError,
    InsufficientLiquidity,
    InvalidAmount,
    InvariantViolation,
    NotAuthorized,
    PoolAlreadyExists,
    PoolNotFound,
    SlippageTooHigh,
    ZeroLiquidity,
)
from .state import CallContext

__version__ = "0.1.0"

__all__ = [
    "AmmLedger",
    "CallContext",
    "Direction",
    "LedgerConfig",
    "load_config",
    "AmmError",
    "NotAuthorized",
    "PoolNotFound",
    "InsufficientLiquidity",
    "InvalidAmount",
    "SlippageTooHigh",
    "PoolAlreadyExists",
    "ZeroLiquidity",
    "InvariantViolation",
]
