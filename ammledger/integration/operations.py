"""
Operation parsing and dispatch.

An operation is a plain mapping, e.g.

    {"op": "swap-a-for-b", "sender": "alice", "block_height": 7,
     "pool_id": 1, "amount_in": 1000, "min_amount_out": 900}

`apply_operation` runs one operation against an `AmmLedger` and turns the
outcome into an `OpResult`; it never raises for ledger-level failures.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..core.ledger import AmmLedger
from ..errors import AmmError
from ..state.balances import TokenLedgerError
from ..state.context import CallContext

logger = logging.getLogger(__name__)


def _require_str(value: Any, *, name: str, non_empty: bool = True, max_len: int = 4096) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string")
    if non_empty and not value:
        raise ValueError(f"{name} must be non-empty")
    if max_len > 0 and len(value) > max_len:
        raise ValueError(f"{name} too large")
    return value


def _require_int(value: Any, *, name: str, non_negative: bool = False) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{name} must be an int")
    if non_negative and value < 0:
        raise ValueError(f"{name} must be non-negative")
    return int(value)


def _require_bool(value: Any, *, name: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{name} must be a bool")
    return value


# op name -> {arg name: validator}
_ARG_SPECS: Dict[str, Dict[str, Callable[..., Any]]] = {
    "create-pool": {"name": _require_str},
    "add-liquidity": {"pool_id": _require_int, "amount_a": _require_int, "amount_b": _require_int},
    "remove-liquidity": {"pool_id": _require_int, "lp_tokens": _require_int},
    "swap-a-for-b": {"pool_id": _require_int, "amount_in": _require_int, "min_amount_out": _require_int},
    "swap-b-for-a": {"pool_id": _require_int, "amount_in": _require_int, "min_amount_out": _require_int},
    "mint-tokens": {"asset": _require_str, "amount": _require_int, "recipient": _require_str},
    "set-platform-active": {"active": _require_bool},
}

OP_NAMES = frozenset(_ARG_SPECS)


@dataclass(frozen=True)
class Operation:
    op: str
    sender: str
    block_height: int = 0
    args: Dict[str, Any] = field(default_factory=dict)

    @property
    def context(self) -> CallContext:
        return CallContext(sender=self.sender, block_height=self.block_height)


@dataclass(frozen=True)
class OpResult:
    ok: bool
    op: str
    value: Any = None
    error: Optional[str] = None
    code: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"ok": self.ok, "op": self.op}
        if self.ok:
            d["value"] = list(self.value) if isinstance(self.value, tuple) else self.value
        else:
            d["error"] = self.error
            d["code"] = self.code
        return d


def parse_operation(raw: Any) -> Operation:
    """
    Parse and validate one operation mapping.

    Raises:
        ValueError: If the structure is invalid
    """
    if not isinstance(raw, Mapping):
        raise ValueError("operation must be an object")
    op = _require_str(raw.get("op"), name="op", max_len=64)
    spec = _ARG_SPECS.get(op)
    if spec is None:
        raise ValueError(f"unknown op: {op!r}")
    sender = _require_str(raw.get("sender"), name="sender", max_len=256)
    block_height = _require_int(raw.get("block_height", 0), name="block_height", non_negative=True)

    allowed = set(spec) | {"op", "sender", "block_height"}
    extra = sorted(str(k) for k in raw.keys() if k not in allowed)
    if extra:
        raise ValueError(f"{op}: unexpected fields: {', '.join(extra)}")

    args: Dict[str, Any] = {}
    for arg_name, validator in spec.items():
        if arg_name not in raw:
            raise ValueError(f"{op}: missing field {arg_name!r}")
        args[arg_name] = validator(raw[arg_name], name=arg_name)
    return Operation(op=op, sender=sender, block_height=block_height, args=args)


def _dispatch(ledger: AmmLedger, op: Operation) -> Any:
    ctx = op.context
    a = op.args
    if op.op == "create-pool":
        return ledger.create_pool(ctx, a["name"])
    if op.op == "add-liquidity":
        return ledger.add_liquidity(ctx, a["pool_id"], a["amount_a"], a["amount_b"])
    if op.op == "remove-liquidity":
        return ledger.remove_liquidity(ctx, a["pool_id"], a["lp_tokens"])
    if op.op == "swap-a-for-b":
        return ledger.swap_a_for_b(ctx, a["pool_id"], a["amount_in"], a["min_amount_out"])
    if op.op == "swap-b-for-a":
        return ledger.swap_b_for_a(ctx, a["pool_id"], a["amount_in"], a["min_amount_out"])
    if op.op == "mint-tokens":
        return ledger.mint_tokens(ctx, a["asset"], a["amount"], a["recipient"])
    if op.op == "set-platform-active":
        return ledger.set_platform_active(ctx, a["active"])
    raise ValueError(f"unknown op: {op.op!r}")


def apply_operation(ledger: AmmLedger, op: Operation) -> OpResult:
    """Run one operation; ledger and token failures become a failed OpResult."""
    try:
        value = _dispatch(ledger, op)
    except AmmError as exc:
        logger.debug("%s rejected: %s", op.op, exc)
        return OpResult(ok=False, op=op.op, error=exc.message, code=exc.code)
    except TokenLedgerError as exc:
        logger.debug("%s token failure: %s", op.op, exc)
        return OpResult(ok=False, op=op.op, error=str(exc), code="TOKEN_TRANSFER_FAILED")
    except (TypeError, ValueError) as exc:
        return OpResult(ok=False, op=op.op, error=str(exc), code="MALFORMED")
    return OpResult(ok=True, op=op.op, value=value)


def apply_operations(ledger: AmmLedger, raw_ops: Sequence[Any]) -> List[OpResult]:
    """
    Parse and apply operations in order. Each operation is independent: a
    failure is recorded and the next operation still runs.
    """
    if not isinstance(raw_ops, Sequence) or isinstance(raw_ops, (str, bytes)):
        raise ValueError("operations must be a list")
    results: List[OpResult] = []
    for i, raw in enumerate(raw_ops):
        try:
            op = parse_operation(raw)
        except ValueError as exc:
            name = raw.get("op") if isinstance(raw, Mapping) and isinstance(raw.get("op"), str) else f"#{i}"
            results.append(OpResult(ok=False, op=name, error=str(exc), code="MALFORMED"))
            continue
        results.append(apply_operation(ledger, op))
    return results
