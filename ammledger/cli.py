"""
Command-line entry point.

    ammledger replay ops.yaml [--config ledger.yaml] [--log-level INFO]

Replays a YAML or JSON list of operations against a fresh ledger and prints a
JSON summary (per-op results, final pools/positions/stats, state root).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional, Sequence

import yaml

from .config import LedgerConfig, load_config
from .core.ledger import AmmLedger
from .integration.operations import apply_operations

logger = logging.getLogger("ammledger.cli")


def _load_ops(path: Path) -> List[Any]:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        obj = json.loads(text)
    else:
        obj = yaml.safe_load(text)
    if isinstance(obj, dict) and "operations" in obj:
        obj = obj["operations"]
    if not isinstance(obj, list):
        raise ValueError(f"{path}: expected a list of operations")
    return obj


def _cmd_replay(args: argparse.Namespace) -> int:
    config = load_config(args.config) if args.config else LedgerConfig()
    ledger = AmmLedger(config)
    ops = _load_ops(Path(args.script))
    results = apply_operations(ledger, ops)

    failed = sum(1 for r in results if not r.ok)
    logger.info("replayed %d operations (%d failed)", len(results), failed)

    out = {"results": [r.to_dict() for r in results], **ledger.snapshot()}
    json.dump(out, sys.stdout, indent=2, sort_keys=True)
    sys.stdout.write("\n")

    violations = ledger.check_invariants()
    if violations:
        for v in violations:
            logger.error("invariant violation: %s", v)
        return 2
    if args.strict and failed:
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="ammledger", description="Constant-product AMM ledger")
    ap.add_argument("--log-level", type=str, default="WARNING")
    sub = ap.add_subparsers(dest="command", required=True)

    replay = sub.add_parser("replay", help="apply an operation script to a fresh ledger")
    replay.add_argument("script", type=str)
    replay.add_argument("--config", type=str, default="")
    replay.add_argument("--strict", action="store_true", help="exit 1 if any operation failed")
    replay.set_defaults(func=_cmd_replay)
    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    level = getattr(logging, str(args.log_level).upper(), None)
    if not isinstance(level, int):
        raise SystemExit(f"unknown log level: {args.log_level}")
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s", stream=sys.stderr)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
