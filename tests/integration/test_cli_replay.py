from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from ammledger import LedgerConfig, load_config
from ammledger.cli import main


_SCRIPT = """
operations:
  - {op: create-pool, sender: deployer, block_height: 1, name: A/B}
  - {op: mint-tokens, sender: deployer, asset: token-a, amount: 2000000, recipient: alice}
  - {op: mint-tokens, sender: deployer, asset: token-b, amount: 2000000, recipient: alice}
  - {op: add-liquidity, sender: alice, block_height: 2, pool_id: 1, amount_a: 1000000, amount_b: 1000000}
  - {op: swap-a-for-b, sender: alice, block_height: 3, pool_id: 1, amount_in: 1000, min_amount_out: 0}
"""


def _write(tmp_path: Path, name: str, text: str) -> Path:
    p = tmp_path / name
    p.write_text(text, encoding="utf-8")
    return p


def test_replay_prints_results_and_snapshot(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    script = _write(tmp_path, "ops.yaml", _SCRIPT)
    assert main(["replay", str(script)]) == 0

    out = json.loads(capsys.readouterr().out)
    assert [r["ok"] for r in out["results"]] == [True] * 5
    assert out["results"][3]["value"] == 1_000_000
    assert out["stats"]["pool_count"] == 1
    assert out["stats"]["total_volume"] == 1000
    assert out["stats"]["total_fees"] == 3
    assert out["state_root"].startswith("0x")


def test_replay_accepts_json_lists(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    ops = yaml.safe_load(_SCRIPT)["operations"]
    script = _write(tmp_path, "ops.json", json.dumps(ops[:1]))
    assert main(["replay", str(script)]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["results"] == [{"ok": True, "op": "create-pool", "value": 1}]


def test_strict_replay_fails_on_rejected_ops(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    script = _write(tmp_path, "ops.yaml", "- {op: create-pool, sender: mallory, name: x}\n")
    assert main(["replay", str(script)]) == 0
    capsys.readouterr()
    assert main(["replay", "--strict", str(script)]) == 1
    out = json.loads(capsys.readouterr().out)
    assert out["results"][0]["code"] == "NOT_AUTHORIZED"


def test_replay_uses_config_owner(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cfg = _write(tmp_path, "ledger.yaml", "owner: admin\n")
    script = _write(tmp_path, "ops.yaml", "- {op: create-pool, sender: admin, name: x}\n")
    assert main(["replay", "--strict", "--config", str(cfg), str(script)]) == 0
    capsys.readouterr()


def test_replay_rejects_non_list_scripts(tmp_path: Path) -> None:
    script = _write(tmp_path, "ops.yaml", "op: create-pool\n")
    with pytest.raises(ValueError, match="expected a list"):
        main(["replay", str(script)])


def test_unknown_log_level(tmp_path: Path) -> None:
    script = _write(tmp_path, "ops.yaml", "[]\n")
    with pytest.raises(SystemExit):
        main(["--log-level", "LOUD", "replay", str(script)])


class TestLoadConfig:
    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        assert load_config(_write(tmp_path, "c.yaml", "")) == LedgerConfig()

    def test_reads_fields(self, tmp_path: Path) -> None:
        cfg = load_config(_write(tmp_path, "c.yaml", "asset_a: usd\nasset_b: eur\nplatform_active: false\n"))
        assert (cfg.asset_a, cfg.asset_b, cfg.platform_active) == ("usd", "eur", False)
        assert cfg.lp_asset_id(3) == "lp-token:3"
        assert cfg.to_dict()["owner"] == "deployer"

    def test_unknown_keys_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="unknown config keys: fee_bps"):
            load_config(_write(tmp_path, "c.yaml", "fee_bps: 25\n"))

    def test_non_mapping_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(TypeError):
            load_config(_write(tmp_path, "c.yaml", "- a\n- b\n"))

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"asset_a": "x", "asset_b": "x"},
            {"owner": ""},
            {"custody_account": "deployer"},
            {"lp_asset_prefix": "lp:x"},
            {"max_pool_name_len": 0},
            {"platform_active": "yes"},
        ],
    )
    def test_invalid_values(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            LedgerConfig(**kwargs)
