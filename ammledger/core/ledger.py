"""
Ledger orchestration (imperative shell).

`AmmLedger` owns one instance of every state table plus the shared counters,
and exposes the public operation surface:
- pool creation, liquidity, swaps (delegated to the executors),
- administrative minting and the platform gate,
- pure quotes and read accessors.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from ..config import LedgerConfig
from ..errors import InvalidAmount, NotAuthorized
from ..state.balances import AccountId, Amount, AssetId, TokenLedger, require_amount
from ..state.context import CallContext
from ..state.pools import Pool, PoolRegistry
from ..state.positions import Position, PositionLedger
from ..state.state_root import compute_state_root
from ..state.stats import GlobalStats
from .events import Action, Event, EventLog
from .liquidity import LiquidityExecutor
from .swap import Direction, SwapExecutor
from .transaction import PoolLocks, Transaction

logger = logging.getLogger(__name__)


class AmmLedger:
    def __init__(self, config: Optional[LedgerConfig] = None, *, tokens: Optional[TokenLedger] = None) -> None:
        self.config = config or LedgerConfig()
        self.tokens = tokens if tokens is not None else TokenLedger()
        self.pools = PoolRegistry()
        self.positions = PositionLedger()
        self.stats = GlobalStats(platform_active=self.config.platform_active)
        self.events = EventLog()
        self.locks = PoolLocks()

        self.liquidity = LiquidityExecutor(
            config=self.config,
            tokens=self.tokens,
            pools=self.pools,
            positions=self.positions,
            stats=self.stats,
            locks=self.locks,
            events=self.events,
        )
        self.swaps = SwapExecutor(
            config=self.config,
            tokens=self.tokens,
            pools=self.pools,
            stats=self.stats,
            locks=self.locks,
            events=self.events,
        )

    # ------------------------------------------------------------------
    # Pools
    # ------------------------------------------------------------------

    def create_pool(self, ctx: CallContext, name: str) -> int:
        """
        Create an empty pool (owner only).

        Returns:
            The new pool id

        Raises:
            NotAuthorized: If the caller is not the owner or the platform is inactive
        """
        with Transaction(Action.CREATE_POOL.value, events=self.events) as tx:
            pool = self.pools.create_pool(
                ctx,
                name,
                owner=self.config.owner,
                stats=self.stats,
                max_name_len=self.config.max_pool_name_len,
            )
            tx.record(lambda: self.pools.discard(pool.pool_id))
            tx.emit(Event(
                action=Action.CREATE_POOL,
                sender=ctx.sender,
                block_height=ctx.block_height,
                pool_id=pool.pool_id,
                amounts={},
                result=pool.name,
            ))
        return pool.pool_id

    # ------------------------------------------------------------------
    # Liquidity / swaps
    # ------------------------------------------------------------------

    def add_liquidity(self, ctx: CallContext, pool_id: int, amount_a: Amount, amount_b: Amount) -> Amount:
        return self.liquidity.add_liquidity(ctx, pool_id, amount_a, amount_b)

    def remove_liquidity(self, ctx: CallContext, pool_id: int, lp_tokens: Amount) -> Tuple[Amount, Amount]:
        return self.liquidity.remove_liquidity(ctx, pool_id, lp_tokens)

    def swap_a_for_b(self, ctx: CallContext, pool_id: int, amount_in: Amount, min_amount_out: Amount) -> Amount:
        return self.swaps.swap(ctx, pool_id, Direction.A_TO_B, amount_in, min_amount_out)

    def swap_b_for_a(self, ctx: CallContext, pool_id: int, amount_in: Amount, min_amount_out: Amount) -> Amount:
        return self.swaps.swap(ctx, pool_id, Direction.B_TO_A, amount_in, min_amount_out)

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def mint_tokens(self, ctx: CallContext, asset: AssetId, amount: Amount, recipient: AccountId) -> Amount:
        """
        Mint asset A or B to `recipient` (owner only).

        LP assets are minted exclusively by add_liquidity.
        """
        if ctx.sender != self.config.owner:
            raise NotAuthorized(f"{ctx.sender} may not mint tokens")
        if asset not in (self.config.asset_a, self.config.asset_b):
            raise InvalidAmount(f"cannot mint unknown asset {asset!r}")
        amount = require_amount(amount, name="amount")
        if amount == 0:
            raise InvalidAmount("mint amount must be positive")
        if not isinstance(recipient, str) or not recipient:
            raise ValueError("recipient must be a non-empty string")

        with Transaction(Action.MINT_TOKENS.value, events=self.events) as tx:
            self.tokens.mint(asset, amount, recipient)
            tx.record(lambda: self.tokens.burn(asset, amount, recipient))
            tx.emit(Event(
                action=Action.MINT_TOKENS,
                sender=ctx.sender,
                block_height=ctx.block_height,
                amounts={"amount": amount},
                result={"asset": asset, "recipient": recipient},
            ))
        return amount

    def set_platform_active(self, ctx: CallContext, active: bool) -> bool:
        """Toggle the platform gate (owner only). Returns the new value."""
        if ctx.sender != self.config.owner:
            raise NotAuthorized(f"{ctx.sender} may not toggle the platform")
        with Transaction(Action.SET_PLATFORM_ACTIVE.value, events=self.events) as tx:
            previous = self.stats.set_platform_active(active)
            tx.record(lambda: self.stats.set_platform_active(previous))
            tx.emit(Event(
                action=Action.SET_PLATFORM_ACTIVE,
                sender=ctx.sender,
                block_height=ctx.block_height,
                result=active,
            ))
        if previous != active:
            logger.info("platform_active %s -> %s", previous, active)
        return active

    # ------------------------------------------------------------------
    # Quotes (pure; None when the pool is missing)
    # ------------------------------------------------------------------

    def quote_swap_a_for_b(self, pool_id: int, amount_in: Amount) -> Optional[Amount]:
        return self.swaps.quote(pool_id, Direction.A_TO_B, amount_in)

    def quote_swap_b_for_a(self, pool_id: int, amount_in: Amount) -> Optional[Amount]:
        return self.swaps.quote(pool_id, Direction.B_TO_A, amount_in)

    def quote_add_liquidity(self, pool_id: int, amount_a: Amount, amount_b: Amount) -> Optional[Amount]:
        return self.liquidity.quote_add_liquidity(pool_id, amount_a, amount_b)

    def quote_remove_liquidity(self, pool_id: int, lp_tokens: Amount) -> Optional[Tuple[Amount, Amount]]:
        return self.liquidity.quote_remove_liquidity(pool_id, lp_tokens)

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    def get_pool(self, pool_id: int) -> Optional[Pool]:
        return self.pools.get(pool_id)

    def get_position(self, pool_id: int, holder: AccountId) -> Optional[Position]:
        return self.positions.get(pool_id, holder)

    def get_stats(self) -> Dict[str, Any]:
        return self.stats.to_dict()

    def balance_of(self, account: AccountId, asset: AssetId) -> Amount:
        return self.tokens.get(account, asset)

    def lp_balance_of(self, account: AccountId, pool_id: int) -> Amount:
        return self.tokens.get(account, self.config.lp_asset_id(pool_id))

    def state_root(self) -> str:
        return compute_state_root(
            tokens=self.tokens,
            pools=self.pools.all_pools(),
            positions=self.positions.all_positions(),
            stats=self.stats,
        )

    def check_invariants(self) -> List[str]:
        """
        Check every pool's empty-or-funded invariant and LP conservation
        (positions, LP token balances and pool supply all agree).
        """
        violations: List[str] = []
        for pool in self.pools.all_pools():
            violations.extend(pool.verify_invariant())
            held = self.positions.total_lp(pool.pool_id)
            issued = self.tokens.total_supply(self.config.lp_asset_id(pool.pool_id))
            if held != pool.total_lp_supply:
                violations.append(f"pool {pool.pool_id}: positions hold {held}, supply {pool.total_lp_supply}")
            if issued != pool.total_lp_supply:
                violations.append(f"pool {pool.pool_id}: LP asset supply {issued}, pool supply {pool.total_lp_supply}")
        for asset, reserve_attr in ((self.config.asset_a, "reserve_a"), (self.config.asset_b, "reserve_b")):
            reserves = sum(getattr(p, reserve_attr) for p in self.pools.all_pools())
            custody = self.tokens.get(self.config.custody_account, asset)
            if custody < reserves:
                violations.append(f"custody holds {custody} {asset}, reserves total {reserves}")
        return violations

    def snapshot(self) -> Dict[str, Any]:
        return {
            "pools": [p.to_dict() for p in self.pools.all_pools()],
            "positions": [p.to_dict() for p in self.positions.all_positions()],
            "stats": self.get_stats(),
            "state_root": self.state_root(),
        }
