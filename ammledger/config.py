"""
Ledger configuration.

`LedgerConfig` is a frozen dataclass; `load_config` reads the same fields
from a YAML mapping.

Example YAML:

    owner: deployer
    custody_account: amm-custody
    asset_a: token-a
    asset_b: token-b
    lp_asset_prefix: lp-token
    max_pool_name_len: 64
    platform_active: true
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Union

import yaml

from .state.pools import DEFAULT_MAX_POOL_NAME_LEN


@dataclass(frozen=True)
class LedgerConfig:
    # Privileged identity: creates pools, mints A/B tokens, toggles the platform.
    owner: str = "deployer"
    # Account holding every pool's reserves.
    custody_account: str = "amm-custody"

    # The two assets traded by every pool.
    asset_a: str = "token-a"
    asset_b: str = "token-b"
    # LP asset ids are "<prefix>:<pool_id>".
    lp_asset_prefix: str = "lp-token"

    max_pool_name_len: int = DEFAULT_MAX_POOL_NAME_LEN
    # Initial value of the platform gate.
    platform_active: bool = True

    def __post_init__(self) -> None:
        for name in ("owner", "custody_account", "asset_a", "asset_b", "lp_asset_prefix"):
            v = getattr(self, name)
            if not isinstance(v, str) or not v.strip():
                raise ValueError(f"{name} must be a non-empty string")
        if self.asset_a == self.asset_b:
            raise ValueError("asset_a and asset_b must differ")
        if self.custody_account == self.owner:
            raise ValueError("custody_account must differ from owner")
        if ":" in self.lp_asset_prefix:
            raise ValueError("lp_asset_prefix must not contain ':'")
        if not isinstance(self.max_pool_name_len, int) or isinstance(self.max_pool_name_len, bool) or self.max_pool_name_len <= 0:
            raise ValueError("max_pool_name_len must be a positive int")
        if not isinstance(self.platform_active, bool):
            raise ValueError("platform_active must be a bool")

    def lp_asset_id(self, pool_id: int) -> str:
        return f"{self.lp_asset_prefix}:{pool_id}"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "LedgerConfig":
        if not isinstance(data, Mapping):
            raise TypeError("config must be a mapping")
        known = {f.name for f in fields(cls)}
        unknown = sorted(str(k) for k in data.keys() if k not in known)
        if unknown:
            raise ValueError(f"unknown config keys: {', '.join(unknown)}")
        return cls(**dict(data))

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def load_config(path: Union[str, Path]) -> LedgerConfig:
    """
    Load a `LedgerConfig` from a YAML file.

    An empty file yields the defaults.
    """
    obj = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    if obj is None:
        return LedgerConfig()
    if not isinstance(obj, Mapping):
        raise TypeError("config YAML must be a mapping")
    return LedgerConfig.from_mapping(obj)
