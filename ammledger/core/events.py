"""
Structured event records for off-chain observers.

Each state-mutating operation publishes exactly one `Event` when it commits.
Events are never read back for control flow.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum, unique
from typing import Any, Dict, List, Mapping, Optional

logger = logging.getLogger("ammledger.events")


@unique
class Action(Enum):
    CREATE_POOL = "create-pool"
    ADD_LIQUIDITY = "add-liquidity"
    REMOVE_LIQUIDITY = "remove-liquidity"
    SWAP_A_FOR_B = "swap-a-for-b"
    SWAP_B_FOR_A = "swap-b-for-a"
    MINT_TOKENS = "mint-tokens"
    SET_PLATFORM_ACTIVE = "set-platform-active"


@dataclass(frozen=True)
class Event:
    action: Action
    sender: str
    block_height: int
    pool_id: Optional[int] = None
    amounts: Mapping[str, int] = field(default_factory=dict)
    result: Any = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "action": self.action.value,
            "sender": self.sender,
            "block_height": self.block_height,
            "amounts": dict(self.amounts),
            "result": list(self.result) if isinstance(self.result, tuple) else self.result,
        }
        if self.pool_id is not None:
            d["pool_id"] = self.pool_id
        return d


class EventLog:
    """Append-only list of committed events."""

    def __init__(self) -> None:
        self._events: List[Event] = []
        self._lock = threading.Lock()

    def publish(self, event: Event) -> None:
        with self._lock:
            self._events.append(event)
        logger.info("%s %s", event.action.value, event.to_dict(), extra={"event": event.to_dict()})

    def events(self) -> List[Event]:
        with self._lock:
            return list(self._events)

    def for_pool(self, pool_id: int) -> List[Event]:
        return [e for e in self.events() if e.pool_id == pool_id]

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
