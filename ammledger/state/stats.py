"""
Process-wide ledger counters.

One `GlobalStats` instance is owned by the ledger facade and passed to the
registry and executors. Every writer goes through the methods below, which
serialize on the instance lock.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Dict

from .balances import Amount


@dataclass
class GlobalStats:
    """
    Attributes:
        pool_count: Number of pools created (the next pool id is pool_count + 1)
        total_volume: Sum of all swap input amounts (not netted across directions)
        total_fees: Sum of all swap fee portions
        platform_active: Gate checked by every state-mutating operation
    """
    pool_count: int = 0
    total_volume: Amount = 0
    total_fees: Amount = 0
    platform_active: bool = True
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    def next_pool_id(self) -> int:
        """Advance the pool counter and return the newly allocated id."""
        with self._lock:
            self.pool_count += 1
            return self.pool_count

    def record_swap(self, amount_in: Amount, fee: Amount) -> None:
        with self._lock:
            self.total_volume += amount_in
            self.total_fees += fee

    def revert_swap(self, amount_in: Amount, fee: Amount) -> None:
        with self._lock:
            self.total_volume -= amount_in
            self.total_fees -= fee

    def set_platform_active(self, active: bool) -> bool:
        """Set the platform gate and return the previous value."""
        if not isinstance(active, bool):
            raise TypeError("active must be a bool")
        with self._lock:
            previous = self.platform_active
            self.platform_active = active
            return previous

    def to_dict(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "pool_count": self.pool_count,
                "total_volume": self.total_volume,
                "total_fees": self.total_fees,
                "platform_active": self.platform_active,
            }
