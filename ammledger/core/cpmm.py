"""
Constant Product Market Maker (CPMM) pricing and LP share math.

Pure functions over unsigned integers. Every division truncates (floor);
nothing rounds up.

Algorithm Design:
- Type: Fixed-Point Integer Arithmetic / Deterministic Rounding
- Time Complexity: O(1) per call
- Space Complexity: O(1) auxiliary
- Invariant: After each swap, x' * y' >= x * y (the fee stays in reserve_in)
"""

from __future__ import annotations

from ..state.balances import Amount

# Swap fee: 30 bps = 0.3% of the input, retained by the pool.
FEE_BPS = 30
BPS_DENOM = 10_000

# Per-call floor on minted LP tokens (applies to every deposit, not only the first).
MIN_LIQUIDITY = 1000


def compute_fee(amount_in: Amount) -> Amount:
    """
    Fee portion of a swap input (floor rounding).

        fee = floor(amount_in * FEE_BPS / BPS_DENOM)
    """
    if amount_in < 0:
        raise ValueError(f"amount_in must be non-negative: {amount_in}")
    return (amount_in * FEE_BPS) // BPS_DENOM


def quote_swap(amount_in: Amount, reserve_in: Amount, reserve_out: Amount) -> Amount:
    """
    Compute output amount for an exact-in swap.

    This implements the CPMM formula:
        fee_adjusted_in = amount_in - floor(amount_in * 30 / 10_000)
        amount_out = floor(fee_adjusted_in * reserve_out / (reserve_in + fee_adjusted_in))

    Post-swap reserves (applied by the caller):
        new_reserve_in = reserve_in + amount_in  (full input; fee stays in pool)
        new_reserve_out = reserve_out - amount_out

    Args:
        amount_in: Exact input amount
        reserve_in: Current reserve of input asset
        reserve_out: Current reserve of output asset

    Returns:
        Amount of output asset (0 if either reserve is empty)
    """
    if amount_in < 0 or reserve_in < 0 or reserve_out < 0:
        raise ValueError(f"Inputs must be non-negative: ({amount_in}, {reserve_in}, {reserve_out})")
    if reserve_in == 0 or reserve_out == 0:
        return 0
    fee_adjusted_in = amount_in - compute_fee(amount_in)
    denominator = reserve_in + fee_adjusted_in
    if denominator == 0:
        return 0
    return (fee_adjusted_in * reserve_out) // denominator


def initial_share(amount_a: Amount, amount_b: Amount) -> Amount:
    """
    LP tokens for the first deposit into an empty pool.

        lp = floor(amount_a / 2) + floor(amount_b / 2)

    This is the arithmetic mean of the two amounts, not a geometric mean, and
    it is not scale-invariant in the deposit ratio. It is kept exactly as is
    for compatibility with existing pools.
    """
    if amount_a <= 0 or amount_b <= 0:
        return 0
    return amount_a // 2 + amount_b // 2


def proportional_share(
    amount_a: Amount,
    amount_b: Amount,
    reserve_a: Amount,
    reserve_b: Amount,
    total_supply: Amount,
) -> Amount:
    """
    LP tokens for a deposit into a funded pool.

        lp = min(floor(amount_a * supply / reserve_a), floor(amount_b * supply / reserve_b))

    Taking the minimum means an out-of-ratio deposit mints against its limiting
    side; the excess of the other asset stays in the pool.
    """
    if reserve_a <= 0 or reserve_b <= 0 or total_supply <= 0:
        return 0
    lp_a = (amount_a * total_supply) // reserve_a
    lp_b = (amount_b * total_supply) // reserve_b
    return min(lp_a, lp_b)


def lp_mint_amount(
    amount_a: Amount,
    amount_b: Amount,
    reserve_a: Amount,
    reserve_b: Amount,
    total_supply: Amount,
) -> Amount:
    """Select the initial or proportional formula from the current supply."""
    if total_supply == 0:
        return initial_share(amount_a, amount_b)
    return proportional_share(amount_a, amount_b, reserve_a, reserve_b, total_supply)


def redemption(lp_tokens: Amount, reserve: Amount, total_supply: Amount) -> Amount:
    """
    Amount of one reserve returned for burning `lp_tokens`.

        amount = floor(lp_tokens * reserve / total_supply)

    Returns 0 when total_supply is 0.
    """
    if total_supply == 0:
        return 0
    return (lp_tokens * reserve) // total_supply


def constant_product(reserve_a: Amount, reserve_b: Amount) -> int:
    return reserve_a * reserve_b
