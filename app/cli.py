"""
CLI for the budget-pace engine.

Usage examples:

    # Analyze a JSON request (same shape as POST /analyze)
    python -m app.cli analyze request.json

    # Analyze a ledger CSV against a work-item CSV
    python -m app.cli analyze-csv entries.csv items.csv --now 2024-03-10T12:00:00

    # Show the active thresholds
    python -m app.cli show-config
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

# --- Make src/ importable ----------------------------------------------------

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from budget_pace.config import get_config, get_logger
from budget_pace.data_io import load_entries_from_csv, load_items_from_csv, load_request_json
from budget_pace.engine import (
    RequestValidationError,
    analyze,
    analyze_payload,
    parse_date,
    parse_datetime,
)
from budget_pace.schema import AnalysisRequest


# --- Commands ----------------------------------------------------------------


def _print_result(result: dict, tag: str) -> None:
    print(f"[{tag}] Trajectory: {result['trajectory']}")
    for rec in result["recommendations"]:
        print(f"[{tag}]   ({rec['severity']}) {rec['title']}: {rec['description']}")
    print()
    print(json.dumps(result, indent=2))


def cmd_analyze(args: argparse.Namespace) -> None:
    """
    Analyze one request described in a JSON file.
    """
    request_path = Path(args.request_path).resolve()
    if not request_path.exists():
        raise SystemExit(f"[analyze] Request JSON file not found: {request_path}")

    payload = load_request_json(request_path)
    try:
        result = analyze_payload(payload)
    except RequestValidationError as e:
        raise SystemExit(f"[analyze] Invalid request: {e}")

    _print_result(result, "analyze")


def cmd_analyze_csv(args: argparse.Namespace) -> None:
    """
    Analyze a ledger CSV against a work-item budget CSV.
    """
    entries_path = Path(args.entries_csv).resolve()
    items_path = Path(args.items_csv).resolve()
    for path in (entries_path, items_path):
        if not path.exists():
            raise SystemExit(f"[analyze-csv] CSV file not found: {path}")

    print(f"[analyze-csv] Loading ledger from {entries_path} ...")
    entries = load_entries_from_csv(str(entries_path))
    items = load_items_from_csv(str(items_path))
    print(f"[analyze-csv] Loaded {len(entries)} entries, {len(items)} work items.")

    try:
        request = AnalysisRequest(
            project_id=args.project_id,
            now=parse_datetime(args.now, "--now"),
            estimated_work_days=args.estimated_work_days,
            time_entries=entries,
            work_items=items,
            deadline=parse_date(args.deadline, "--deadline") if args.deadline else None,
        )
        result = analyze(request).to_dict()
    except RequestValidationError as e:
        raise SystemExit(f"[analyze-csv] Invalid input: {e}")

    _print_result(result, "analyze-csv")


def cmd_show_config(args: argparse.Namespace) -> None:
    """
    Print the thresholds resolved from the environment.
    """
    config = asdict(get_config())
    config.pop("azure_blob_connection_string", None)
    print(json.dumps(config, indent=2))


# --- Main --------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Budget Pace CLI – consumption, pace and projection of a time budget."
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logs from the engine.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # analyze
    an_p = subparsers.add_parser(
        "analyze",
        help="Analyze a request JSON file (same shape as POST /analyze).",
    )
    an_p.add_argument("request_path", help="Path to the request JSON file.")
    an_p.set_defaults(func=cmd_analyze)

    # analyze-csv
    csv_p = subparsers.add_parser(
        "analyze-csv",
        help="Analyze a time-entry CSV against a work-item CSV.",
    )
    csv_p.add_argument(
        "entries_csv",
        help="CSV with columns id, work_item_id, start_time, duration_seconds, end_time.",
    )
    csv_p.add_argument(
        "items_csv",
        help="CSV with columns id, label, estimated_work_days.",
    )
    csv_p.add_argument(
        "--now",
        required=True,
        help="Reference timestamp (ISO-8601). Required so results are reproducible.",
    )
    csv_p.add_argument(
        "--estimated-work-days",
        type=float,
        default=0.0,
        help="Project-level budget used when the item CSV is empty (default: 0).",
    )
    csv_p.add_argument("--deadline", default=None, help="Project deadline (YYYY-MM-DD).")
    csv_p.add_argument("--project-id", default=None, help="Project identifier to echo back.")
    csv_p.set_defaults(func=cmd_analyze_csv)

    # show-config
    cfg_p = subparsers.add_parser(
        "show-config",
        help="Print the active thresholds.",
    )
    cfg_p.set_defaults(func=cmd_show_config)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        get_logger().setLevel(logging.DEBUG)
    args.func(args)


if __name__ == "__main__":
    main()
