"""
Liquidity management operations: add/remove liquidity.

Each operation evaluates every check against the current pool and position
before touching state, then commits all mutations inside one `Transaction`
while holding the pool's lock.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from ..config import LedgerConfig
from ..errors import InsufficientLiquidity, InvalidAmount, NotAuthorized, ZeroLiquidity
from ..state.balances import MAX_AMOUNT, AccountId, Amount, TokenLedger, require_amount
from ..state.context import CallContext
from ..state.pools import Pool, PoolRegistry
from ..state.positions import PositionLedger
from ..state.stats import GlobalStats
from .cpmm import MIN_LIQUIDITY, lp_mint_amount, redemption
from .events import Action, Event, EventLog
from .transaction import PoolLocks, Transaction


class LiquidityExecutor:
    def __init__(
        self,
        *,
        config: LedgerConfig,
        tokens: TokenLedger,
        pools: PoolRegistry,
        positions: PositionLedger,
        stats: GlobalStats,
        locks: PoolLocks,
        events: EventLog,
    ) -> None:
        self.config = config
        self.tokens = tokens
        self.pools = pools
        self.positions = positions
        self.stats = stats
        self.locks = locks
        self.events = events

    def add_liquidity(self, ctx: CallContext, pool_id: int, amount_a: Amount, amount_b: Amount) -> Amount:
        """
        Deposit both assets and mint LP tokens to the caller.

        LP minted:
            empty pool:  floor(amount_a / 2) + floor(amount_b / 2)
            funded pool: min(floor(amount_a * supply / reserve_a),
                             floor(amount_b * supply / reserve_b))

        Args:
            ctx: Call context (sender deposits and receives LP)
            pool_id: Target pool
            amount_a: Amount of asset A to deposit
            amount_b: Amount of asset B to deposit

        Returns:
            LP tokens minted

        Raises:
            PoolNotFound: If the pool is absent or inactive
            NotAuthorized: If the platform is inactive or the caller is the custody account
            InvalidAmount: If either amount is not positive
            ZeroLiquidity: If the mint amount is below MIN_LIQUIDITY
            TokenLedgerError: If a transfer fails (state is rolled back)
        """
        with self.locks.hold(pool_id):
            pool = self.pools.require(pool_id)
            if not self.stats.platform_active:
                raise NotAuthorized("platform is inactive")
            if ctx.sender == self.config.custody_account:
                raise NotAuthorized("custody account may not act as a liquidity provider or trader")

            amount_a = require_amount(amount_a, name="amount_a")
            amount_b = require_amount(amount_b, name="amount_b")
            if amount_a == 0 or amount_b == 0:
                raise InvalidAmount(f"Deposit amounts must be positive: ({amount_a}, {amount_b})")

            lp_minted = lp_mint_amount(
                amount_a,
                amount_b,
                pool.reserve_a,
                pool.reserve_b,
                pool.total_lp_supply,
            )
            if lp_minted <= 0 or lp_minted < MIN_LIQUIDITY:
                raise ZeroLiquidity(f"LP mint {lp_minted} is below the {MIN_LIQUIDITY} floor")

            if (
                pool.reserve_a + amount_a > MAX_AMOUNT
                or pool.reserve_b + amount_b > MAX_AMOUNT
                or pool.total_lp_supply + lp_minted > MAX_AMOUNT
            ):
                raise InvalidAmount("deposit would overflow pool reserves")

            sender = ctx.sender
            lp_asset = self.config.lp_asset_id(pool_id)
            with Transaction(
                Action.ADD_LIQUIDITY.value,
                events=self.events,
                post_check=lambda: self._check_pool(pool),
            ) as tx:
                self._move(tx, self.config.asset_a, amount_a, sender, self.config.custody_account)
                self._move(tx, self.config.asset_b, amount_b, sender, self.config.custody_account)

                self._update_pool(tx, pool, amount_a, amount_b, lp_minted)

                self.tokens.mint(lp_asset, lp_minted, sender)
                tx.record(lambda: self.tokens.burn(lp_asset, lp_minted, sender))

                previous = self.positions.get(pool_id, sender)
                self.positions.upsert(
                    pool_id,
                    sender,
                    lp_delta=lp_minted,
                    token_a_delta=amount_a,
                    token_b_delta=amount_b,
                    block_height=ctx.block_height,
                )
                tx.record(lambda: self.positions.restore(pool_id, sender, previous))

                tx.emit(Event(
                    action=Action.ADD_LIQUIDITY,
                    sender=sender,
                    block_height=ctx.block_height,
                    pool_id=pool_id,
                    amounts={"amount_a": amount_a, "amount_b": amount_b},
                    result=lp_minted,
                ))

        return lp_minted

    def remove_liquidity(self, ctx: CallContext, pool_id: int, lp_tokens: Amount) -> Tuple[Amount, Amount]:
        """
        Burn LP tokens and return the proportional share of both reserves.

        Outputs (against the pre-burn supply):
            amount_a = floor(lp_tokens * reserve_a / supply)
            amount_b = floor(lp_tokens * reserve_b / supply)

        Deposit counters on the position are left untouched.

        Returns:
            Tuple of (amount_a, amount_b)

        Raises:
            PoolNotFound: If the pool is absent or inactive
            NotAuthorized: If the platform is inactive, the caller is the custody
                account, or the caller has no position
            InvalidAmount: If lp_tokens is not positive
            InsufficientLiquidity: If the caller holds fewer LP tokens, or supply is zero
        """
        with self.locks.hold(pool_id):
            pool = self.pools.require(pool_id)
            if not self.stats.platform_active:
                raise NotAuthorized("platform is inactive")
            if ctx.sender == self.config.custody_account:
                raise NotAuthorized("custody account may not act as a liquidity provider or trader")

            sender = ctx.sender
            position = self.positions.get(pool_id, sender)
            if position is None:
                raise NotAuthorized(f"{sender} has no position in pool {pool_id}")

            lp_tokens = require_amount(lp_tokens, name="lp_tokens")
            if lp_tokens == 0:
                raise InvalidAmount("lp_tokens must be positive")
            if lp_tokens > position.lp_tokens:
                raise InsufficientLiquidity(
                    f"Cannot burn {lp_tokens} LP; position holds {position.lp_tokens}"
                )
            if pool.total_lp_supply == 0:
                raise InsufficientLiquidity(f"pool {pool_id} has no LP supply")

            amount_a = redemption(lp_tokens, pool.reserve_a, pool.total_lp_supply)
            amount_b = redemption(lp_tokens, pool.reserve_b, pool.total_lp_supply)

            lp_asset = self.config.lp_asset_id(pool_id)
            with Transaction(
                Action.REMOVE_LIQUIDITY.value,
                events=self.events,
                post_check=lambda: self._check_pool(pool),
            ) as tx:
                self.tokens.burn(lp_asset, lp_tokens, sender)
                tx.record(lambda: self.tokens.mint(lp_asset, lp_tokens, sender))

                self._update_pool(tx, pool, -amount_a, -amount_b, -lp_tokens)

                previous = position
                self.positions.upsert(pool_id, sender, lp_delta=-lp_tokens, block_height=ctx.block_height)
                tx.record(lambda: self.positions.restore(pool_id, sender, previous))

                # The ledger rejects zero transfers; a dust withdrawal may round one leg to 0.
                if amount_a:
                    self._move(tx, self.config.asset_a, amount_a, self.config.custody_account, sender)
                if amount_b:
                    self._move(tx, self.config.asset_b, amount_b, self.config.custody_account, sender)

                tx.emit(Event(
                    action=Action.REMOVE_LIQUIDITY,
                    sender=sender,
                    block_height=ctx.block_height,
                    pool_id=pool_id,
                    amounts={"lp_tokens": lp_tokens},
                    result=(amount_a, amount_b),
                ))

        return amount_a, amount_b

    def quote_add_liquidity(self, pool_id: int, amount_a: Amount, amount_b: Amount) -> Optional[Amount]:
        """LP tokens a deposit would mint right now; None if the pool is missing."""
        pool = self.pools.get(pool_id)
        if pool is None:
            return None
        return lp_mint_amount(amount_a, amount_b, pool.reserve_a, pool.reserve_b, pool.total_lp_supply)

    def quote_remove_liquidity(self, pool_id: int, lp_tokens: Amount) -> Optional[Tuple[Amount, Amount]]:
        """Amounts a withdrawal would return right now; None if the pool is missing."""
        pool = self.pools.get(pool_id)
        if pool is None:
            return None
        return (
            redemption(lp_tokens, pool.reserve_a, pool.total_lp_supply),
            redemption(lp_tokens, pool.reserve_b, pool.total_lp_supply),
        )

    def _move(self, tx: Transaction, asset: str, amount: Amount, sender: AccountId, recipient: AccountId) -> None:
        self.tokens.transfer(asset, amount, sender, recipient)
        tx.record(lambda: self.tokens.transfer(asset, amount, recipient, sender))

    @staticmethod
    def _update_pool(tx: Transaction, pool: Pool, delta_a: int, delta_b: int, delta_lp: int) -> None:
        before = (pool.reserve_a, pool.reserve_b, pool.total_lp_supply)
        pool.reserve_a += delta_a
        pool.reserve_b += delta_b
        pool.total_lp_supply += delta_lp

        def _undo() -> None:
            pool.reserve_a, pool.reserve_b, pool.total_lp_supply = before

        tx.record(_undo)

    def _check_pool(self, pool: Pool) -> List[str]:
        violations = pool.verify_invariant()
        held = self.positions.total_lp(pool.pool_id)
        if held != pool.total_lp_supply:
            violations.append(
                f"pool {pool.pool_id}: positions hold {held} LP, supply is {pool.total_lp_supply}"
            )
        return violations
