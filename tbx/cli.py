# tbx/cli.py

"""
Command line entry point.

    tbx classify --prev TB_Previous.csv --curr TB_Current.csv --out NewAccounts.csv --client ACME
    tbx compare  --prev TB_Previous.csv --curr TB_Current.csv --out NewAccounts.csv
    tbx remember --client ACME --name "Petty Cash" --category Cash
"""

from __future__ import annotations

import argparse
import logging
import sys
import time

from tbx.config import get_settings
from tbx.core import (
    ClassificationEngine,
    DEFAULT_RENUMBER_THRESHOLD,
    MemoryStore,
    RenumberDetector,
    TrialBalanceError,
    load_classification_config,
    read_trial_balance,
    write_classification_results,
    write_new_accounts,
)

logger = logging.getLogger("tbx.cli")


def _build_parser() -> argparse.ArgumentParser:
    settings = get_settings()

    ap = argparse.ArgumentParser(prog="tbx", description="Trial Balance Classifier")
    ap.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = ap.add_subparsers(dest="cmd", required=True)

    c = sub.add_parser("classify", help="Classify new and renumbered accounts")
    c.add_argument("--prev", required=True, help="Previous trial balance CSV")
    c.add_argument("--curr", required=True, help="Current trial balance CSV")
    c.add_argument("--out", required=True, help="Output CSV")
    c.add_argument("--client", default=settings.default_client_id, help="Client ID for memory")
    c.add_argument("--config", default=settings.classification_config_path, help="Classification config YAML")
    c.add_argument("--memory-dir", default=settings.memory_dir, help="Memory directory")

    p = sub.add_parser("compare", help="Flag new and renumbered accounts only")
    p.add_argument("--prev", required=True, help="Previous trial balance CSV")
    p.add_argument("--curr", required=True, help="Current trial balance CSV")
    p.add_argument("--out", required=True, help="Output CSV")
    p.add_argument("--threshold", type=float, default=DEFAULT_RENUMBER_THRESHOLD,
                   help="Name similarity needed to call an account renumbered")

    r = sub.add_parser("remember", help="Record a confirmed category in memory")
    r.add_argument("--client", default=settings.default_client_id, help="Client ID for memory")
    r.add_argument("--name", required=True, help="Account name")
    r.add_argument("--category", required=True, help="Confirmed category")
    r.add_argument("--parent", default=None, help="Parent account name")
    r.add_argument("--memory-dir", default=settings.memory_dir, help="Memory directory")

    return ap


def _classify(args: argparse.Namespace) -> None:
    previous = read_trial_balance(args.prev)
    current = read_trial_balance(args.curr)
    print(f"Loaded {len(previous)} previous and {len(current)} current accounts")

    engine = ClassificationEngine(
        MemoryStore(args.memory_dir),
        load_classification_config(args.config),
    )
    results = engine.classify(previous, current, args.client)

    write_classification_results(args.out, results)

    new_count = len([r for r in results if r.status == "new"])
    renumbered_count = len([r for r in results if r.status == "likely_renumbered"])
    review_count = len([r for r in results if r.needs_review])
    print(f"Found {new_count} new account(s), {renumbered_count} likely renumbered")
    print(f"{review_count} account(s) need review")
    print(f"Wrote {len(results)} record(s) to {args.out}")


def _compare(args: argparse.Namespace) -> None:
    previous = read_trial_balance(args.prev)
    current = read_trial_balance(args.curr)

    results = RenumberDetector(args.threshold).detect(previous, current)
    write_new_accounts(args.out, results)

    renumbered_count = len([r for r in results if r.status == "likely_renumbered"])
    print(f"Found {len(results) - renumbered_count} new account(s), {renumbered_count} likely renumbered")
    print(f"Wrote {len(results)} record(s) to {args.out}")


def _remember(args: argparse.Namespace) -> None:
    mapping = MemoryStore(args.memory_dir).remember(
        args.client, args.name, args.category, parent_name=args.parent, source="cli"
    )
    print(f"Remembered {mapping.name_norm!r} -> {mapping.category!r} for client {args.client}")


_COMMANDS = {
    "classify": _classify,
    "compare": _compare,
    "remember": _remember,
}


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    start = time.perf_counter()
    try:
        _COMMANDS[args.cmd](args)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except TrialBalanceError as e:
        print(f"Data validation error:\n{e}", file=sys.stderr)
        return 1

    logger.info("%s completed in %dms", args.cmd, (time.perf_counter() - start) * 1000)
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
