from __future__ import annotations

import pytest

from ammledger import AmmLedger
from ammledger.integration.operations import OP_NAMES, apply_operation, apply_operations, parse_operation


def _setup_ops() -> list[dict[str, object]]:
    return [
        {"op": "create-pool", "sender": "deployer", "block_height": 1, "name": "A/B"},
        {"op": "mint-tokens", "sender": "deployer", "asset": "token-a", "amount": 5_000_000, "recipient": "alice"},
        {"op": "mint-tokens", "sender": "deployer", "asset": "token-b", "amount": 5_000_000, "recipient": "alice"},
        {"op": "add-liquidity", "sender": "alice", "block_height": 2, "pool_id": 1, "amount_a": 1_000_000, "amount_b": 2_000_000},
    ]


def test_parse_operation_builds_context() -> None:
    op = parse_operation(
        {"op": "swap-a-for-b", "sender": "bob", "block_height": 7, "pool_id": 1, "amount_in": 10, "min_amount_out": 0}
    )
    assert op.context.sender == "bob"
    assert op.context.block_height == 7
    assert op.args == {"pool_id": 1, "amount_in": 10, "min_amount_out": 0}


def test_parse_operation_defaults_block_height() -> None:
    op = parse_operation({"op": "create-pool", "sender": "deployer", "name": "x"})
    assert op.block_height == 0


@pytest.mark.parametrize(
    "raw, match",
    [
        ([], "must be an object"),
        ({"op": "burn-everything", "sender": "x"}, "unknown op"),
        ({"op": "create-pool", "name": "x"}, "sender"),
        ({"op": "create-pool", "sender": "deployer"}, "missing field 'name'"),
        ({"op": "create-pool", "sender": "deployer", "name": "x", "fee": 1}, "unexpected fields: fee"),
        ({"op": "remove-liquidity", "sender": "a", "pool_id": 1, "lp_tokens": "10"}, "lp_tokens must be an int"),
        ({"op": "remove-liquidity", "sender": "a", "pool_id": True, "lp_tokens": 10}, "pool_id must be an int"),
        ({"op": "set-platform-active", "sender": "deployer", "active": 1}, "active must be a bool"),
        ({"op": "create-pool", "sender": "deployer", "block_height": -1, "name": "x"}, "block_height"),
    ],
)
def test_parse_operation_rejects(raw: object, match: str) -> None:
    with pytest.raises(ValueError, match=match):
        parse_operation(raw)


def test_every_ledger_operation_is_dispatchable() -> None:
    assert OP_NAMES == {
        "create-pool",
        "add-liquidity",
        "remove-liquidity",
        "swap-a-for-b",
        "swap-b-for-a",
        "mint-tokens",
        "set-platform-active",
    }


def test_apply_operations_runs_a_session() -> None:
    ledger = AmmLedger()
    ops = _setup_ops() + [
        {"op": "swap-a-for-b", "sender": "alice", "block_height": 3, "pool_id": 1, "amount_in": 10_000, "min_amount_out": 0},
        {"op": "remove-liquidity", "sender": "alice", "block_height": 4, "pool_id": 1, "lp_tokens": 500_000},
    ]
    results = apply_operations(ledger, ops)
    assert all(r.ok for r in results), [r.to_dict() for r in results]
    assert results[0].value == 1
    assert results[3].value == 1_500_000
    assert results[4].value == 19_743
    assert isinstance(results[5].value, tuple)
    assert results[5].to_dict()["value"] == list(results[5].value)
    assert ledger.check_invariants() == []


def test_failures_are_isolated_and_coded() -> None:
    ledger = AmmLedger()
    apply_operations(ledger, _setup_ops())
    root = ledger.state_root()

    results = apply_operations(
        ledger,
        [
            {"op": "create-pool", "sender": "mallory", "name": "x"},
            {"op": "swap-a-for-b", "sender": "alice", "pool_id": 9, "amount_in": 10, "min_amount_out": 0},
            {"op": "swap-a-for-b", "sender": "alice", "pool_id": 1, "amount_in": 10_000, "min_amount_out": 10**9},
            {"op": "swap-a-for-b", "sender": "alice", "pool_id": 1, "amount_in": 0, "min_amount_out": 0},
            {"op": "remove-liquidity", "sender": "bob", "pool_id": 1, "lp_tokens": 1},
            {"op": "swap-b-for-a", "sender": "bob", "pool_id": 1, "amount_in": 10_000, "min_amount_out": 0},
            {"op": "mint-tokens", "sender": "deployer", "asset": "lp-token:1", "amount": 10, "recipient": "bob"},
            {"op": "nonsense", "sender": "bob"},
            "not-a-mapping",
        ],
    )
    assert [r.code for r in results] == [
        "NOT_AUTHORIZED",
        "POOL_NOT_FOUND",
        "SLIPPAGE_TOO_HIGH",
        "INVALID_AMOUNT",
        "NOT_AUTHORIZED",
        "TOKEN_TRANSFER_FAILED",
        "INVALID_AMOUNT",
        "MALFORMED",
        "MALFORMED",
    ]
    assert [r.op for r in results][-2:] == ["nonsense", "#8"]
    assert all(not r.ok for r in results)
    assert ledger.state_root() == root


def test_apply_operation_maps_value_errors_to_malformed() -> None:
    ledger = AmmLedger()
    op = parse_operation({"op": "create-pool", "sender": "deployer", "name": "x" * 65})
    result = apply_operation(ledger, op)
    assert result.ok is False
    assert result.code == "MALFORMED"
    assert result.to_dict() == {"ok": False, "op": "create-pool", "error": result.error, "code": "MALFORMED"}


def test_apply_operations_requires_a_list() -> None:
    with pytest.raises(ValueError):
        apply_operations(AmmLedger(), "create-pool")


def test_replayed_custody_sender_is_rejected() -> None:
    ledger = AmmLedger()
    apply_operations(ledger, _setup_ops())
    (result,) = apply_operations(
        ledger,
        [{"op": "swap-a-for-b", "sender": "amm-custody", "pool_id": 1, "amount_in": 500_000, "min_amount_out": 0}],
    )
    assert result.code == "NOT_AUTHORIZED"
    assert ledger.check_invariants() == []
