# [TESTER] v1

from __future__ import annotations

import pytest

from ammledger.core.cpmm import (
    FEE_BPS,
    MIN_LIQUIDITY,
    compute_fee,
    constant_product,
    initial_share,
    lp_mint_amount,
    proportional_share,
    quote_swap,
    redemption,
)


def test_constants_match_fixed_fee_and_floor() -> None:
    assert FEE_BPS == 30
    assert MIN_LIQUIDITY == 1000


def test_compute_fee_floors() -> None:
    assert compute_fee(1_000_000) == 3000
    assert compute_fee(333) == 0
    assert compute_fee(334) == 1
    assert compute_fee(0) == 0


def test_quote_swap_reference_trade() -> None:
    # fee_adjusted = 997_000; floor(997_000 * 2_000_000 / 1_997_000) = 998_497
    assert quote_swap(1_000_000, 1_000_000, 2_000_000) == 998_497


def test_quote_swap_reverse_direction() -> None:
    # floor(997_000 * 1_000_000 / 2_997_000) = 332_665
    assert quote_swap(1_000_000, 2_000_000, 1_000_000) == 332_665


def test_quote_swap_empty_reserves_return_zero() -> None:
    assert quote_swap(1000, 0, 1000) == 0
    assert quote_swap(1000, 1000, 0) == 0
    assert quote_swap(1000, 0, 0) == 0


def test_quote_swap_fee_only_input_yields_zero() -> None:
    assert quote_swap(0, 1000, 1000) == 0


def test_quote_swap_never_drains_reserve_out() -> None:
    for amount_in in (1, 10, 10**6, 10**18, 10**30):
        assert quote_swap(amount_in, 1000, 5000) < 5000


def test_quote_swap_rejects_negative_inputs() -> None:
    with pytest.raises(ValueError):
        quote_swap(-1, 10, 10)


def test_initial_share_is_arithmetic_mean_of_halves() -> None:
    assert initial_share(1_000_000, 2_000_000) == 1_500_000
    assert initial_share(3, 3) == 2  # floor(1.5) + floor(1.5)
    assert initial_share(2000, 1) == 1000


def test_initial_share_requires_both_sides() -> None:
    assert initial_share(0, 5000) == 0
    assert initial_share(5000, 0) == 0


def test_initial_share_is_not_scale_invariant_in_ratio() -> None:
    # Same product, different ratio, different mint.
    assert initial_share(1000, 4000) != initial_share(2000, 2000)


def test_proportional_share_takes_limiting_side() -> None:
    assert proportional_share(1000, 2000, 1_000_000, 2_000_000, 1_500_000) == 1500
    # Excess asset A is forfeited into the pool.
    assert proportional_share(10_000, 2000, 1_000_000, 2_000_000, 1_500_000) == 1500


def test_proportional_share_zero_on_empty_state() -> None:
    assert proportional_share(10, 10, 0, 10, 10) == 0
    assert proportional_share(10, 10, 10, 0, 10) == 0
    assert proportional_share(10, 10, 10, 10, 0) == 0


def test_lp_mint_amount_selects_formula_by_supply() -> None:
    assert lp_mint_amount(1_000_000, 2_000_000, 0, 0, 0) == 1_500_000
    assert lp_mint_amount(1000, 2000, 1_000_000, 2_000_000, 1_500_000) == 1500


def test_redemption_floors_against_supply() -> None:
    assert redemption(1_500_000, 1_000_000, 1_500_000) == 1_000_000
    assert redemption(500_000, 1_000_000, 1_500_000) == 333_333
    assert redemption(500_000, 2_000_000, 1_500_000) == 666_666
    assert redemption(10, 10, 0) == 0


def test_constant_product() -> None:
    assert constant_product(2_000_000, 1_001_503) == 2_003_006_000_000
