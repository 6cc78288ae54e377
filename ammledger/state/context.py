"""
Per-call execution context (caller identity + block height).
"""

from __future__ import annotations

from dataclasses import dataclass

from .balances import AccountId


@dataclass(frozen=True)
class CallContext:
    """
    Host-supplied context for one operation.

    Attributes:
        sender: Identity of the caller (tx-sender)
        block_height: Current block height, recorded as created_at / last_activity
    """
    sender: AccountId
    block_height: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.sender, str) or not self.sender:
            raise ValueError("sender must be a non-empty string")
        if not isinstance(self.block_height, int) or isinstance(self.block_height, bool) or self.block_height < 0:
            raise ValueError(f"block_height must be a non-negative int: {self.block_height!r}")
