"""Main entry point for the SMO leave report."""
import argparse
import logging
import sys
from typing import List, Optional

from smo_leave.utilities import config
from smo_leave.utilities.models import ExtractionConfig
from smo_leave.pipelines import pipeline

logger = logging.getLogger(__name__)


def positive_int(value: str) -> int:
    """Parse a strictly positive integer argument."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid integer: {value}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"Value must be at least 1: {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Extract upcoming leave for consultant radiologists (SMOs)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Next 6 months, approved and pending requests (default)
  python main.py

  # Approved leave only, 3 months ahead, custom output file
  python main.py --exclude-pending --months-ahead 3 --output reports/smo_leave.json

  # Require at least 10 SMO-marked shifts to qualify
  python main.py --min-shifts 10

  # Qualify by staff category and count half a day per leave shift
  python main.py --qualification profile --leave-day-policy flat
        """,
    )

    parser.add_argument(
        "--output",
        default=config.DEFAULT_OUTPUT_PATH,
        help=f"JSON report path (default: {config.DEFAULT_OUTPUT_PATH})",
    )

    parser.add_argument(
        "--months-ahead",
        type=positive_int,
        default=config.DEFAULT_MONTHS_AHEAD,
        help=f"Window length in months from today (default: {config.DEFAULT_MONTHS_AHEAD})",
    )

    pending = parser.add_mutually_exclusive_group()
    pending.add_argument(
        "--include-pending",
        dest="include_pending",
        action="store_true",
        default=True,
        help="Include pending requests (default)",
    )
    pending.add_argument(
        "--exclude-pending",
        dest="include_pending",
        action="store_false",
        help="Report approved requests only",
    )

    parser.add_argument(
        "--min-shifts",
        type=positive_int,
        default=None,
        help=f"Minimum SMO-marked shifts to qualify (default: {config.DEFAULT_MIN_SMO_SHIFTS})",
    )

    parser.add_argument(
        "--qualification",
        choices=config.QUALIFICATION_RULES,
        default=config.QUALIFICATION_SHIFT_COUNT,
        help="How SMOs are identified (default: shift_count)",
    )

    parser.add_argument(
        "--leave-day-policy",
        choices=config.LEAVE_DAY_POLICIES,
        default=config.POLICY_BUCKETED,
        help="How leave days are totalled (default: bucketed)",
    )

    parser.add_argument(
        "--sort-by-name",
        action="store_true",
        help="Order leave records by surname instead of employee id",
    )

    parser.add_argument(
        "--top",
        type=positive_int,
        default=config.DEFAULT_TOP_N,
        help=f"Employees listed in the console top list (default: {config.DEFAULT_TOP_N})",
    )

    parser.add_argument(
        "--db-url",
        default=None,
        help="SQLAlchemy database URL (default: $SMO_LEAVE_DB_URL or built-in)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Set logging level (default: INFO)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point with CLI argument parsing."""
    args = build_parser().parse_args(argv)

    log_format = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format=log_format,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )

    if args.min_shifts is not None and args.qualification == config.QUALIFICATION_PROFILE:
        logger.warning(
            "--min-shifts is ignored with --qualification %s", config.QUALIFICATION_PROFILE
        )

    try:
        cfg = ExtractionConfig.from_defaults(
            db_url=args.db_url,
            output_path=args.output,
            months_ahead=args.months_ahead,
            include_pending=args.include_pending,
            qualification=args.qualification,
            min_smo_shifts=args.min_shifts,
            leave_day_policy=args.leave_day_policy,
            sort_by_name=args.sort_by_name,
            top_n=args.top,
        ).validate()
        pipeline.run_extraction(cfg)
        return 0
    except KeyboardInterrupt:
        logger.warning("Extraction interrupted by user")
        print("ERROR: interrupted", file=sys.stderr)
        return 1
    except Exception as exc:
        logger.error("=" * 70)
        logger.error("SMO LEAVE EXTRACTION FAILED")
        logger.error("=" * 70)
        logger.exception("Fatal error: %s", exc)
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
