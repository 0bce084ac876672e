"""
cli.py - Command line entry point

    payledger transactions.csv > accounts.csv

Reads the whole instruction file, then writes the account snapshot to
stdout. Rejected instructions are reported on stderr and do not stop the
run; a missing or malformed input file stops it before anything is written.

Exit status: 0 on success, 1 on an I/O or format error, 2 on bad arguments.
"""

from __future__ import annotations
import argparse
import logging
import sys
from typing import List, Optional, Union

from .core import InstructionFormatError, InvariantViolation
from .csv_input import open_instructions
from .csv_output import write_snapshot
from .logging_config import configure_logging, get_logger
from .router import LedgerRouter, ShardedRouter

logger = get_logger("cli")

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="payledger",
        description="Replay deposits, withdrawals and disputes and print the final account balances.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "examples:\n"
            "  payledger transactions.csv > accounts.csv\n"
            "  payledger transactions.csv --sorted --log-level INFO\n"
            "  payledger transactions.csv --workers 4 --log-json\n"
        ),
    )
    parser.add_argument(
        "input",
        help="CSV file with a type,client,tx,amount header",
    )
    parser.add_argument(
        "--sorted", action="store_true",
        help="Print accounts ordered by client id (default: first-seen order)",
    )
    parser.add_argument(
        "--workers", type=int, default=1,
        help="Shard clients across this many workers (default: 1, sequential)",
    )
    parser.add_argument(
        "--check-invariants", action="store_true",
        help="Verify total == available + held after every applied instruction",
    )
    parser.add_argument(
        "--log-level", choices=_LOG_LEVELS, default="WARNING",
        help="Logging level for stderr (default: WARNING, which reports rejected instructions)",
    )
    parser.add_argument(
        "--log-json", action="store_true",
        help="Emit log records as JSON lines",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.workers < 1:
        parser.error(f"--workers must be at least 1, got {args.workers}")

    configure_logging(level=getattr(logging, args.log_level), json_format=args.log_json)

    router: Union[LedgerRouter, ShardedRouter]
    if args.workers > 1:
        router = ShardedRouter(args.workers, check_invariants=args.check_invariants)
    else:
        router = LedgerRouter(check_invariants=args.check_invariants)

    try:
        with open_instructions(args.input) as instructions:
            summary = router.process(instructions)
    except OSError as exc:
        logger.error("cannot read %s: %s", args.input, exc)
        return 1
    except InstructionFormatError as exc:
        logger.error("malformed input in %s: %s", args.input, exc)
        return 1
    except InvariantViolation as exc:
        logger.critical("ledger invariant violated: %s", exc)
        return 1

    logger.info(
        "processed %s instructions: %s applied, %s rejected %s",
        summary.processed, summary.applied, summary.rejected, summary.rejections,
    )
    write_snapshot(router.snapshot(sort=args.sorted), sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
