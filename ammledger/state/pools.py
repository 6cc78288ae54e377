"""
Pool state management for the AMM ledger.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..errors import NotAuthorized, PoolNotFound
from .balances import AccountId, Amount
from .context import CallContext
from .stats import GlobalStats


DEFAULT_MAX_POOL_NAME_LEN = 64


def validate_pool_name(name: object, *, max_len: int = DEFAULT_MAX_POOL_NAME_LEN) -> str:
    """Pool names are bounded metadata, never keys."""
    if not isinstance(name, str):
        raise TypeError("pool name must be a string")
    if not name:
        raise ValueError("pool name must be non-empty")
    if len(name) > max_len:
        raise ValueError(f"pool name exceeds {max_len} characters: {len(name)}")
    return name


@dataclass
class Pool:
    """
    State of a liquidity pool.

    Attributes:
        pool_id: Sequential pool identifier (starting at 1, never reused)
        name: Pool name (metadata only)
        reserve_a: Reserve amount for asset A
        reserve_b: Reserve amount for asset B
        total_lp_supply: Total LP token supply
        active: Set at creation; no operation clears it
        created_at: Block height when the pool was created
    """
    pool_id: int
    name: str
    reserve_a: Amount = 0
    reserve_b: Amount = 0
    total_lp_supply: Amount = 0
    active: bool = True
    created_at: int = 0

    def __post_init__(self):
        """Validate pool state invariants."""
        if not isinstance(self.pool_id, int) or isinstance(self.pool_id, bool) or self.pool_id <= 0:
            raise ValueError(f"pool_id must be a positive int: {self.pool_id!r}")

        if self.reserve_a < 0 or self.reserve_b < 0:
            raise ValueError(
                f"Reserves must be non-negative: ({self.reserve_a}, {self.reserve_b})"
            )

        if self.total_lp_supply < 0:
            raise ValueError(f"LP supply must be non-negative: {self.total_lp_supply}")

    def reserves(self, a_to_b: bool = True) -> tuple[Amount, Amount]:
        """Return (reserve_in, reserve_out) for the given trade direction."""
        if a_to_b:
            return self.reserve_a, self.reserve_b
        return self.reserve_b, self.reserve_a

    def get_constant_product(self) -> int:
        """
        Compute k = reserve_a * reserve_b.

        Returns:
            Constant product k
        """
        return self.reserve_a * self.reserve_b

    def is_empty(self) -> bool:
        return self.total_lp_supply == 0

    def verify_invariant(self) -> List[str]:
        """
        Check the empty-or-funded invariant:
            reserve_a == 0 <=> reserve_b == 0 <=> total_lp_supply == 0

        Returns:
            List of violation descriptions (empty if the invariant holds)
        """
        violations: List[str] = []
        if (self.reserve_a == 0) != (self.reserve_b == 0):
            violations.append(
                f"pool {self.pool_id}: one-sided reserves ({self.reserve_a}, {self.reserve_b})"
            )
        if (self.total_lp_supply == 0) != (self.reserve_a == 0 and self.reserve_b == 0):
            violations.append(
                f"pool {self.pool_id}: lp_supply={self.total_lp_supply} with reserves "
                f"({self.reserve_a}, {self.reserve_b})"
            )
        return violations

    def to_dict(self) -> Dict[str, object]:
        return {
            "pool_id": self.pool_id,
            "name": self.name,
            "reserve_a": self.reserve_a,
            "reserve_b": self.reserve_b,
            "total_lp_supply": self.total_lp_supply,
            "active": self.active,
            "created_at": self.created_at,
        }

    def __repr__(self) -> str:
        return (
            f"Pool(pool_id={self.pool_id}, name={self.name!r}, "
            f"reserves=({self.reserve_a}, {self.reserve_b}), "
            f"lp_supply={self.total_lp_supply}, active={self.active})"
        )


class PoolRegistry:
    """
    Authoritative pool records keyed by sequential pool id.

    Pool ids come from the shared `GlobalStats` counter. Records are never
    removed except to undo a creation that rolled back.
    """

    def __init__(self) -> None:
        self._pools: Dict[int, Pool] = {}
        self._lock = threading.RLock()

    def get(self, pool_id: int) -> Optional[Pool]:
        """Get pool by id. Returns None if not found."""
        with self._lock:
            return self._pools.get(pool_id)

    def require(self, pool_id: int) -> Pool:
        """
        Get an active pool by id.

        Raises:
            PoolNotFound: If the pool is absent or inactive
        """
        pool = self.get(pool_id)
        if pool is None:
            raise PoolNotFound(f"pool {pool_id} not found")
        if not pool.active:
            raise PoolNotFound(f"pool {pool_id} is not active")
        return pool

    def create_pool(
        self,
        ctx: CallContext,
        name: str,
        *,
        owner: AccountId,
        stats: GlobalStats,
        max_name_len: int = DEFAULT_MAX_POOL_NAME_LEN,
    ) -> Pool:
        """
        Create an empty, active pool.

        Args:
            ctx: Call context (sender must be the privileged owner)
            name: Pool name (no uniqueness check)
            owner: Privileged owner identity
            stats: Shared counters (pool id source, platform gate)
            max_name_len: Upper bound on the name length

        Returns:
            The inserted Pool

        Raises:
            NotAuthorized: If the caller is not the owner or the platform is inactive
        """
        if ctx.sender != owner:
            raise NotAuthorized(f"{ctx.sender} may not create pools")
        if not stats.platform_active:
            raise NotAuthorized("platform is inactive")
        name = validate_pool_name(name, max_len=max_name_len)

        with self._lock:
            pool = Pool(
                pool_id=stats.next_pool_id(),
                name=name,
                active=True,
                created_at=ctx.block_height,
            )
            self.insert(pool)
        return pool

    def insert(self, pool: Pool) -> None:
        with self._lock:
            if pool.pool_id in self._pools:
                raise ValueError(f"pool id already allocated: {pool.pool_id}")
            self._pools[pool.pool_id] = pool

    def discard(self, pool_id: int) -> None:
        with self._lock:
            self._pools.pop(pool_id, None)

    def pool_ids(self) -> List[int]:
        with self._lock:
            return sorted(self._pools)

    def all_pools(self) -> List[Pool]:
        with self._lock:
            return [self._pools[pid] for pid in sorted(self._pools)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._pools)

    def __repr__(self) -> str:
        return f"PoolRegistry({len(self)} pools)"
