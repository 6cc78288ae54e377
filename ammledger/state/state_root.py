"""
Deterministic state root hashing (v1).

This is intended for:
- debugging / audit (stable hashes for the same logical state),
- checking that a failed operation left the ledger untouched.
"""

from __future__ import annotations

from typing import Iterable

from .balances import TokenLedger
from .canonical import domain_sep_bytes, encode_bytes, encode_str, encode_uvarint, sha256_hex
from .pools import Pool
from .positions import Position
from .stats import GlobalStats


STATE_ROOT_VERSION = 1


def _encode_balances_section(tokens: TokenLedger) -> bytes:
    out = bytearray()
    entries = sorted(tokens.get_all_balances().items())
    out += encode_uvarint(len(entries))
    for (account, asset), amount in entries:
        if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
            raise ValueError(f"invalid balance amount: {amount!r}")
        out += encode_str(account)
        out += encode_str(asset)
        out += encode_uvarint(amount)
    return bytes(out)


def _encode_pools_section(pools: Iterable[Pool]) -> bytes:
    out = bytearray()
    entries = sorted(pools, key=lambda p: p.pool_id)
    out += encode_uvarint(len(entries))
    for pool in entries:
        for name, v in (
            ("reserve_a", pool.reserve_a),
            ("reserve_b", pool.reserve_b),
            ("total_lp_supply", pool.total_lp_supply),
            ("created_at", pool.created_at),
        ):
            if not isinstance(v, int) or isinstance(v, bool) or v < 0:
                raise ValueError(f"invalid pool {name}: {v!r}")

        out += encode_uvarint(pool.pool_id)
        out += encode_str(pool.name)
        out += encode_uvarint(pool.reserve_a)
        out += encode_uvarint(pool.reserve_b)
        out += encode_uvarint(pool.total_lp_supply)
        out += encode_uvarint(1 if pool.active else 0)
        out += encode_uvarint(pool.created_at)

    return bytes(out)


def _encode_positions_section(positions: Iterable[Position]) -> bytes:
    out = bytearray()
    entries = sorted(positions, key=lambda p: (p.pool_id, p.holder))
    out += encode_uvarint(len(entries))
    for pos in entries:
        out += encode_uvarint(pos.pool_id)
        out += encode_str(pos.holder)
        out += encode_uvarint(pos.lp_tokens)
        out += encode_uvarint(pos.token_a_deposited)
        out += encode_uvarint(pos.token_b_deposited)
        out += encode_uvarint(pos.last_activity)
    return bytes(out)


def _encode_stats_section(stats: GlobalStats) -> bytes:
    snap = stats.to_dict()
    return (
        encode_uvarint(snap["pool_count"])
        + encode_uvarint(snap["total_volume"])
        + encode_uvarint(snap["total_fees"])
        + encode_uvarint(1 if snap["platform_active"] else 0)
    )


def compute_state_root(
    *,
    tokens: TokenLedger,
    pools: Iterable[Pool],
    positions: Iterable[Position],
    stats: GlobalStats,
) -> str:
    """
    Compute a deterministic state root hash for the ledger state.

    Returns a 0x-prefixed sha256 digest.
    """
    if not isinstance(tokens, TokenLedger):
        raise TypeError("tokens must be a TokenLedger")
    if not isinstance(stats, GlobalStats):
        raise TypeError("stats must be a GlobalStats")

    payload = (
        domain_sep_bytes("state_root", version=STATE_ROOT_VERSION)
        + b"BAL"
        + encode_bytes(_encode_balances_section(tokens))
        + b"POL"
        + encode_bytes(_encode_pools_section(pools))
        + b"POS"
        + encode_bytes(_encode_positions_section(positions))
        + b"STA"
        + encode_bytes(_encode_stats_section(stats))
    )
    return sha256_hex(payload)
