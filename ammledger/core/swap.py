"""
Directional swaps against a single pool.

Both directions run the same algorithm with the reserves swapped. The full
input joins reserve_in, so the fee accrues to LPs and the reserve product
never decreases.
"""

from __future__ import annotations

from enum import Enum, unique
from typing import List, Optional

from ..config import LedgerConfig
from ..errors import InsufficientLiquidity, InvalidAmount, NotAuthorized, PoolNotFound, SlippageTooHigh
from ..state.balances import MAX_AMOUNT, Amount, TokenLedger, require_amount
from ..state.context import CallContext
from ..state.pools import Pool, PoolRegistry
from ..state.stats import GlobalStats
from .cpmm import compute_fee, constant_product, quote_swap
from .events import Action, Event, EventLog
from .transaction import PoolLocks, Transaction


@unique
class Direction(Enum):
    A_TO_B = "a-to-b"
    B_TO_A = "b-to-a"

    @property
    def action(self) -> Action:
        return Action.SWAP_A_FOR_B if self is Direction.A_TO_B else Action.SWAP_B_FOR_A


class SwapExecutor:
    def __init__(
        self,
        *,
        config: LedgerConfig,
        tokens: TokenLedger,
        pools: PoolRegistry,
        stats: GlobalStats,
        locks: PoolLocks,
        events: EventLog,
    ) -> None:
        self.config = config
        self.tokens = tokens
        self.pools = pools
        self.stats = stats
        self.locks = locks
        self.events = events

    def _assets(self, direction: Direction) -> tuple[str, str]:
        if direction is Direction.A_TO_B:
            return self.config.asset_a, self.config.asset_b
        return self.config.asset_b, self.config.asset_a

    def swap(
        self,
        ctx: CallContext,
        pool_id: int,
        direction: Direction,
        amount_in: Amount,
        min_amount_out: Amount,
    ) -> Amount:
        """
        Execute an exact-in swap.

        Args:
            ctx: Call context (sender pays amount_in and receives amount_out)
            pool_id: Target pool
            direction: Which reserve is the input side
            amount_in: Exact input amount
            min_amount_out: Smallest acceptable output

        Returns:
            amount_out

        Raises:
            PoolNotFound: If the pool is absent or inactive
            NotAuthorized: If the platform is inactive or the caller is the custody account
            InvalidAmount: If amount_in is not positive
            InsufficientLiquidity: If the quoted output is zero
            SlippageTooHigh: If the quoted output is below min_amount_out
            TokenLedgerError: If a transfer fails (state is rolled back)
        """
        if not isinstance(direction, Direction):
            raise TypeError(f"direction must be a Direction, got {direction!r}")

        with self.locks.hold(pool_id):
            pool = self.pools.get(pool_id)
            if pool is None:
                raise PoolNotFound(f"pool {pool_id} not found")
            if not self.stats.platform_active:
                raise NotAuthorized("platform is inactive")
            if ctx.sender == self.config.custody_account:
                raise NotAuthorized("custody account may not act as a liquidity provider or trader")
            if not pool.active:
                raise PoolNotFound(f"pool {pool_id} is not active")

            amount_in = require_amount(amount_in, name="amount_in")
            if amount_in == 0:
                raise InvalidAmount("amount_in must be positive")
            min_amount_out = require_amount(min_amount_out, name="min_amount_out")

            a_to_b = direction is Direction.A_TO_B
            reserve_in, reserve_out = pool.reserves(a_to_b)
            amount_out = quote_swap(amount_in, reserve_in, reserve_out)
            if amount_out == 0:
                raise InsufficientLiquidity(
                    f"swap of {amount_in} yields no output from reserves ({reserve_in}, {reserve_out})"
                )
            if amount_out < min_amount_out:
                raise SlippageTooHigh(f"amount_out ({amount_out}) < min_amount_out ({min_amount_out})")
            if reserve_in + amount_in > MAX_AMOUNT:
                raise InvalidAmount("swap would overflow reserve_in")

            fee = compute_fee(amount_in)
            asset_in, asset_out = self._assets(direction)
            sender = ctx.sender
            custody = self.config.custody_account
            k_before = pool.get_constant_product()

            with Transaction(
                direction.action.value,
                events=self.events,
                post_check=lambda: self._check_pool(pool, k_before),
            ) as tx:
                self.tokens.transfer(asset_in, amount_in, sender, custody)
                tx.record(lambda: self.tokens.transfer(asset_in, amount_in, custody, sender))
                self.tokens.transfer(asset_out, amount_out, custody, sender)
                tx.record(lambda: self.tokens.transfer(asset_out, amount_out, sender, custody))

                before = (pool.reserve_a, pool.reserve_b)
                if a_to_b:
                    pool.reserve_a += amount_in
                    pool.reserve_b -= amount_out
                else:
                    pool.reserve_b += amount_in
                    pool.reserve_a -= amount_out

                def _undo_reserves() -> None:
                    pool.reserve_a, pool.reserve_b = before

                tx.record(_undo_reserves)

                self.stats.record_swap(amount_in, fee)
                tx.record(lambda: self.stats.revert_swap(amount_in, fee))

                tx.emit(Event(
                    action=direction.action,
                    sender=sender,
                    block_height=ctx.block_height,
                    pool_id=pool_id,
                    amounts={"amount_in": amount_in, "min_amount_out": min_amount_out, "fee": fee},
                    result=amount_out,
                ))

        return amount_out

    def swap_a_for_b(self, ctx: CallContext, pool_id: int, amount_in: Amount, min_amount_out: Amount) -> Amount:
        return self.swap(ctx, pool_id, Direction.A_TO_B, amount_in, min_amount_out)

    def swap_b_for_a(self, ctx: CallContext, pool_id: int, amount_in: Amount, min_amount_out: Amount) -> Amount:
        return self.swap(ctx, pool_id, Direction.B_TO_A, amount_in, min_amount_out)

    def quote(self, pool_id: int, direction: Direction, amount_in: Amount) -> Optional[Amount]:
        """Output a swap would produce right now; None if the pool is missing."""
        pool = self.pools.get(pool_id)
        if pool is None:
            return None
        reserve_in, reserve_out = pool.reserves(direction is Direction.A_TO_B)
        return quote_swap(amount_in, reserve_in, reserve_out)

    @staticmethod
    def _check_pool(pool: Pool, k_before: int) -> List[str]:
        violations = pool.verify_invariant()
        k_after = constant_product(pool.reserve_a, pool.reserve_b)
        if k_after < k_before:
            violations.append(f"pool {pool.pool_id}: k decreased {k_before} -> {k_after}")
        return violations
