"""
LP position tracking per (pool_id, holder).

Positions are scoped per pool and are tracked separately from token balances.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from .balances import AccountId, Amount


@dataclass(frozen=True)
class Position:
    """
    One holder's stake in one pool.

    `token_a_deposited` / `token_b_deposited` are running deposit counters:
    they only grow, including across withdrawals.
    """
    pool_id: int
    holder: AccountId
    lp_tokens: Amount = 0
    token_a_deposited: Amount = 0
    token_b_deposited: Amount = 0
    last_activity: int = 0

    def to_dict(self) -> Dict[str, object]:
        return {
            "pool_id": self.pool_id,
            "holder": self.holder,
            "lp_tokens": self.lp_tokens,
            "token_a_deposited": self.token_a_deposited,
            "token_b_deposited": self.token_b_deposited,
            "last_activity": self.last_activity,
        }


class PositionLedger:
    """
    Position table mapping (pool_id, holder) -> Position.

    Notes:
    - Records are never deleted, even when lp_tokens reaches zero.
    - Records are immutable; `upsert` swaps in a merged copy.
    """

    def __init__(self) -> None:
        self._positions: Dict[Tuple[int, AccountId], Position] = {}
        self._lock = threading.RLock()

    def get(self, pool_id: int, holder: AccountId) -> Optional[Position]:
        """Get the position for (pool_id, holder). Returns None if not found."""
        with self._lock:
            return self._positions.get((pool_id, holder))

    def upsert(
        self,
        pool_id: int,
        holder: AccountId,
        *,
        lp_delta: int,
        token_a_delta: Amount = 0,
        token_b_delta: Amount = 0,
        block_height: int,
    ) -> Position:
        """
        Merge a change into the holder's position, creating it if absent.

        Args:
            pool_id: Pool identifier
            holder: Position holder
            lp_delta: Change in LP tokens (negative on withdrawal)
            token_a_delta: Amount of asset A deposited (non-negative)
            token_b_delta: Amount of asset B deposited (non-negative)
            block_height: Recorded as last_activity

        Returns:
            The merged Position

        Raises:
            ValueError: If deposit deltas are negative or LP would go below zero
        """
        if token_a_delta < 0 or token_b_delta < 0:
            raise ValueError(f"Deposit deltas must be non-negative: ({token_a_delta}, {token_b_delta})")
        with self._lock:
            current = self._positions.get((pool_id, holder)) or Position(pool_id=pool_id, holder=holder)
            lp_tokens = current.lp_tokens + lp_delta
            if lp_tokens < 0:
                raise ValueError(
                    f"Insufficient LP position: {current.lp_tokens} + {lp_delta} = {lp_tokens} < 0"
                )
            merged = replace(
                current,
                lp_tokens=lp_tokens,
                token_a_deposited=current.token_a_deposited + token_a_delta,
                token_b_deposited=current.token_b_deposited + token_b_delta,
                last_activity=block_height,
            )
            self._positions[(pool_id, holder)] = merged
            return merged

    def restore(self, pool_id: int, holder: AccountId, previous: Optional[Position]) -> None:
        """Put back a prior record (or remove a freshly created one)."""
        with self._lock:
            if previous is None:
                self._positions.pop((pool_id, holder), None)
            else:
                self._positions[(pool_id, holder)] = previous

    def holders(self, pool_id: int) -> List[Position]:
        with self._lock:
            return sorted(
                (p for (pid, _h), p in self._positions.items() if pid == pool_id),
                key=lambda p: p.holder,
            )

    def total_lp(self, pool_id: int) -> Amount:
        """Sum of lp_tokens over all holders of a pool."""
        return sum(p.lp_tokens for p in self.holders(pool_id))

    def all_positions(self) -> List[Position]:
        with self._lock:
            return [self._positions[k] for k in sorted(self._positions)]

    def __repr__(self) -> str:
        return f"PositionLedger({len(self._positions)} entries)"
