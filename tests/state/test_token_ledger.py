# [TESTER] v1

from __future__ import annotations

import pytest

from ammledger import InvalidAmount
from ammledger.state.balances import MAX_AMOUNT, InsufficientBalance, TokenLedger, require_amount


def test_mint_transfer_burn_track_balances_and_supply() -> None:
    tokens = TokenLedger()
    tokens.mint("token-a", 100, "alice")
    tokens.transfer("token-a", 40, "alice", "bob")
    tokens.burn("token-a", 10, "bob")

    assert tokens.get("alice", "token-a") == 60
    assert tokens.get("bob", "token-a") == 30
    assert tokens.total_supply("token-a") == 90
    assert tokens.verify_supply()


def test_zero_balances_are_dropped() -> None:
    tokens = TokenLedger()
    tokens.mint("token-a", 5, "alice")
    tokens.transfer("token-a", 5, "alice", "bob")
    assert ("alice", "token-a") not in tokens.get_all_balances()
    tokens.burn("token-a", 5, "bob")
    assert tokens.get_all_balances() == {}
    assert tokens.total_supply("token-a") == 0


def test_failed_transfer_changes_nothing() -> None:
    tokens = TokenLedger()
    tokens.mint("token-a", 5, "alice")
    with pytest.raises(InsufficientBalance) as excinfo:
        tokens.transfer("token-a", 6, "alice", "bob")
    assert excinfo.value.balance == 5
    assert excinfo.value.requested == 6
    assert tokens.get_all_balances() == {("alice", "token-a"): 5}


def test_failed_burn_changes_nothing() -> None:
    tokens = TokenLedger()
    tokens.mint("token-b", 5, "alice")
    with pytest.raises(InsufficientBalance):
        tokens.burn("token-b", 6, "alice")
    assert tokens.get("alice", "token-b") == 5
    assert tokens.total_supply("token-b") == 5


@pytest.mark.parametrize("op", ["mint", "burn", "transfer"])
def test_zero_amounts_rejected(op: str) -> None:
    tokens = TokenLedger()
    tokens.mint("token-a", 5, "alice")
    with pytest.raises(InvalidAmount):
        if op == "mint":
            tokens.mint("token-a", 0, "alice")
        elif op == "burn":
            tokens.burn("token-a", 0, "alice")
        else:
            tokens.transfer("token-a", 0, "alice", "bob")


def test_mint_cannot_exceed_u128_supply() -> None:
    tokens = TokenLedger()
    tokens.mint("token-a", MAX_AMOUNT, "alice")
    with pytest.raises(InvalidAmount):
        tokens.mint("token-a", 1, "bob")
    assert tokens.get("bob", "token-a") == 0


def test_self_transfer_requires_balance_but_is_noop() -> None:
    tokens = TokenLedger()
    tokens.mint("token-a", 5, "alice")
    tokens.transfer("token-a", 5, "alice", "alice")
    assert tokens.get("alice", "token-a") == 5
    with pytest.raises(InsufficientBalance):
        tokens.transfer("token-a", 6, "alice", "alice")


def test_balances_for_asset() -> None:
    tokens = TokenLedger()
    tokens.mint("token-a", 5, "alice")
    tokens.mint("token-b", 7, "alice")
    tokens.mint("token-a", 9, "bob")
    assert tokens.get_balances_for_asset("token-a") == {"alice": 5, "bob": 9}


class TestRequireAmount:
    def test_accepts_range_bounds(self) -> None:
        assert require_amount(0, name="x") == 0
        assert require_amount(MAX_AMOUNT, name="x") == MAX_AMOUNT

    @pytest.mark.parametrize("value", [-1, MAX_AMOUNT + 1])
    def test_out_of_range(self, value: int) -> None:
        with pytest.raises(InvalidAmount):
            require_amount(value, name="x")

    @pytest.mark.parametrize("value", [True, 1.0, "1", None])
    def test_wrong_type(self, value: object) -> None:
        with pytest.raises(TypeError):
            require_amount(value, name="x")
