from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path


def _ensure_backend_on_path() -> None:
    backend_dir = Path(__file__).resolve().parents[1]
    if str(backend_dir) not in sys.path:
        sys.path.insert(0, str(backend_dir))


def _dump(report) -> str:
    return json.dumps(report.model_dump(mode="json", by_alias=True, exclude_none=True), indent=2)


def _build_runner(rules_path: Path, accounts_path: Path | None):
    from common.reconciliation_rules.config import get_engine_config
    from common.reconciliation_rules.loader import load_accounts_file, load_rules_file
    from common.reconciliation_rules.runner import RulesRunner

    return RulesRunner(
        load_rules_file(rules_path),
        accounts=load_accounts_file(accounts_path),
        config=get_engine_config(),
    )


def run_apply(*, rules_path: Path, transactions_path: Path, accounts_path: Path | None = None):
    from common.reconciliation_rules.loader import load_transactions_file

    runner = _build_runner(rules_path, accounts_path)
    return runner.apply(load_transactions_file(transactions_path))


def run_preview(
    *,
    rules_path: Path,
    rule_id: str,
    transactions_path: Path,
    accounts_path: Path | None = None,
):
    from common.reconciliation_rules.loader import load_transactions_file

    runner = _build_runner(rules_path, accounts_path)
    return runner.preview_by_id(load_transactions_file(transactions_path), rule_id)


def main(argv: list[str] | None = None) -> int:
    _ensure_backend_on_path()
    parser = argparse.ArgumentParser(description="Apply or preview reconciliation rules on JSON data.")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING).")
    sub = parser.add_subparsers(dest="command", required=True)

    apply_p = sub.add_parser("apply", help="Apply every rule, in order, to newly imported transactions.")
    apply_p.add_argument("--rules", type=Path, required=True)
    apply_p.add_argument("--transactions", type=Path, required=True)
    apply_p.add_argument("--accounts", type=Path, default=None)

    preview_p = sub.add_parser("preview", help="Show what one rule would change on saved transactions.")
    preview_p.add_argument("--rules", type=Path, required=True)
    preview_p.add_argument("--rule-id", required=True)
    preview_p.add_argument("--transactions", type=Path, required=True)
    preview_p.add_argument("--accounts", type=Path, default=None)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        if args.command == "apply":
            report = run_apply(
                rules_path=args.rules,
                transactions_path=args.transactions,
                accounts_path=args.accounts,
            )
        else:
            report = run_preview(
                rules_path=args.rules,
                rule_id=args.rule_id,
                transactions_path=args.transactions,
                accounts_path=args.accounts,
            )
    except KeyError as exc:
        sys.stderr.write(f"error: unknown rule id {exc}\n")
        return 2
    except (OSError, ValueError) as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    sys.stdout.write(_dump(report) + "\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
