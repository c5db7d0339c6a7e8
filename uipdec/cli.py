import argparse
import json
import logging
import sys
from collections.abc import Sequence
from dataclasses import replace

from uipdec.config import EngineConfig, configure_logging
from uipdec.errors import RuleError, StructuralMismatch
from uipdec.load import load_obligation_from_file
from uipdec.obligation import Obligation
from uipdec.report import format_report, report_json
from uipdec.result import Err, Ok

logger = logging.getLogger(__name__)


def _load(path: str) -> Obligation | None:
    match load_obligation_from_file(path):
        case Obligation() as obligation:
            return obligation
        case str(err):
            print(f"{path}: {err}", file=sys.stderr)
            return None


def handle_prove(paths: Sequence[str], config: EngineConfig, *, as_json: bool) -> int:
    """Run the engine on each obligation file and print a report.

    Exit status: 0 when every obligation closed, 1 when any branch stayed
    open, 2 when a file could not be loaded or did not have the right shape.
    """
    status = 0
    reports: list[dict[str, object]] = []
    for path in paths:
        obligation = _load(path)
        if obligation is None:
            status = 2
            continue
        try:
            result = obligation.solve(config)
        except StructuralMismatch as e:
            print(f"{obligation.name}: structural mismatch: {e}", file=sys.stderr)
            status = 2
            continue

        if as_json:
            reports.append(report_json(obligation.name, result))
        else:
            print(format_report(obligation.name, result))
        if not result.closed:
            status = max(status, 1)

    if as_json:
        print(json.dumps(reports, indent=2))
    return status


def handle_check(paths: Sequence[str], config: EngineConfig) -> int:
    """Run the engine and replay its certificate from the original goal."""
    status = 0
    for path in paths:
        obligation = _load(path)
        if obligation is None:
            status = 2
            continue
        try:
            result = obligation.solve(config)
            remaining = obligation.check(result)
        except StructuralMismatch as e:
            print(f"{obligation.name}: structural mismatch: {e}", file=sys.stderr)
            status = 2
            continue
        except RuleError as e:
            print(f"{obligation.name}: certificate rejected: {e}", file=sys.stderr)
            status = 2
            continue

        if remaining != result.open_goals:
            print(f"{obligation.name}: replay left different open goals", file=sys.stderr)
            status = 2
            continue
        print(f"{obligation.name}: certificate ok, {len(remaining)} open goal(s)")
        if remaining:
            status = max(status, 1)
    return status


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="uipdec",
        description="Prove equalities between evidence of indexed predicates",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Command: prove
    prove_parser = subparsers.add_parser(
        "prove",
        help="Load obligation .py file(s), run the engine and print a report.",
    )
    prove_parser.add_argument(
        "files",
        nargs="+",
        metavar="FILE",
        help="Obligation file(s) exposing a *_obligation() factory.",
    )
    prove_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Print the reports as JSON, including the proof certificate.",
    )
    prove_parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Log every engine phase and kernel step.",
    )

    # Command: check
    check_parser = subparsers.add_parser(
        "check",
        help="Run the engine and replay its certificate against the original goal.",
    )
    check_parser.add_argument("files", nargs="+", metavar="FILE")

    args = parser.parse_args(argv)

    match EngineConfig.from_env():
        case Ok(config):
            pass
        case Err(e):
            print(f"Invalid configuration: {e}", file=sys.stderr)
            return 2
    if getattr(args, "verbose", False):
        config = replace(config, log_level="DEBUG")
    configure_logging(config)
    logger.debug("Using %s", config)

    match args.command:
        case "prove":
            return handle_prove(args.files, config, as_json=args.json)
        case "check":
            return handle_check(args.files, config)
        case None:
            parser.print_help()
            return 1
        case _:
            print(f"Unknown command: {args.command}", file=sys.stderr)
            parser.print_help()
            return 1


if __name__ == "__main__":
    sys.exit(main())
