"""
backend/main.py

Command-line entry point.

    ruleguardx analyze rules.csv [--policy ports.json] [--export out.json] [--warnings]
    ruleguardx serve [--host 0.0.0.0] [--port 8000]
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import NoReturn, Sequence

import uvicorn

from .api.main import create_app, set_repository
from .config import settings
from .engine import PolicyAnalyzer
from .engine.models import AnalysisResult, Finding
from .export import export_findings_json
from .ingest import IngestError, load_rules_from_csv
from .policy import DEFAULT_INSECURE_PORTS, PolicyError, load_policy_file
from .storage import Database, PolicyRepository

logger = logging.getLogger("ruleguard.main")

_ANSI = {
    "CRITICAL":      "\033[91m",
    "HIGH":          "\033[93m",
    "MEDIUM":        "\033[96m",
    "LOW":           "\033[97m",
    "INFORMATIONAL": "\033[90m",
    "RESET":         "\033[0m",
}


def _colour(severity: str, text: str) -> str:
    return f"{_ANSI.get(severity, '')}{text}{_ANSI['RESET']}"


def _print_finding(f: Finding) -> None:
    sev = f.severity.value
    header = _colour(sev, f"[{sev} {f.score:>3}]")
    print(
        f"{header} rule={f.rule_id!r} ({f.rule_name}) — {f.category.value}\n"
        f"  {f.explanation}\n"
        f"  → {f.recommendation}",
        flush=True,
    )


def _print_result(result: AnalysisResult, show_warnings: bool) -> None:
    s = result.summary
    print(
        f"\nRules: {s.total_rules} ({s.enabled_rules} enabled)  "
        f"{_colour('CRITICAL', f'critical={s.critical_findings}')}  "
        f"{_colour('HIGH', f'high={s.high_findings}')}  "
        f"{_colour('MEDIUM', f'medium={s.medium_findings}')}  "
        f"{_colour('LOW', f'low={s.low_findings}')}  "
        f"avg_risk={s.average_risk_score}\n"
    )
    for f in sorted(result.findings, key=lambda f: f.score, reverse=True):
        _print_finding(f)
    if result.hygiene:
        print("\nPolicy hygiene:")
        for f in result.hygiene:
            _print_finding(f)
    if show_warnings and result.warnings:
        print("\nParse warnings:")
        for w in result.warnings:
            print(f"  rule={w.rule_id!r} {w.field}={w.value!r}: {w.message}")


# ---------------------------------------------------------------------------
# Sub-commands
# ---------------------------------------------------------------------------

def cmd_analyze(args: argparse.Namespace) -> int:
    try:
        text = Path(args.rules).read_text(encoding="utf-8")
        rules = load_rules_from_csv(text)
        policy = load_policy_file(args.policy) if args.policy else list(DEFAULT_INSECURE_PORTS)
    except (OSError, IngestError, PolicyError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    result = PolicyAnalyzer().analyze(rules, policy, collect_warnings=args.warnings)
    _print_result(result, show_warnings=args.warnings)

    if args.export:
        try:
            Path(args.export).write_text(export_findings_json(result.findings), encoding="utf-8")
        except OSError as exc:
            print(f"ERROR: cannot write export: {exc}", file=sys.stderr)
            return 1
        logger.info("Findings exported to %s", args.export)
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    db = Database(settings.DB_PATH)
    db.init_schema()
    set_repository(PolicyRepository(db))

    app = create_app()
    logger.info("RuleGuardX API — http://%s:%d  db=%s", args.host, args.port, settings.DB_PATH)
    uvicorn.run(app, host=args.host, port=args.port, log_level="warning")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ruleguardx",
        description="Firewall rule risk analyzer",
    )
    parser.add_argument(
        "--log-level", default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="Analyze a CSV rule export")
    analyze.add_argument("rules", help="CSV file, first row is the header")
    analyze.add_argument("--policy", help="JSON port policy (default: built-in catalog)")
    analyze.add_argument("--export", help="Write findings JSON to this file")
    analyze.add_argument("--warnings", action="store_true", help="Report defaulted fields")
    analyze.set_defaults(func=cmd_analyze)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=settings.API_HOST)
    serve.add_argument("--port", type=int, default=settings.API_PORT)
    serve.set_defaults(func=cmd_serve)
    return parser


def run_cli(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    return args.func(args)


def main() -> NoReturn:
    sys.exit(run_cli())


if __name__ == "__main__":
    main()
