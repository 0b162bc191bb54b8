#!/usr/bin/env python3
"""
Classboard Day Report Script.

Builds every teacher queue of a day from a snapshot file, optionally
packs or shifts them, and writes a JSON report plus a CSV ledger.

Usage:
    python run_classboard.py --snapshot FILE [--optimise] [--shift MINUTES] [--opt-out TEACHER]

Examples:
    # Report on a day as stored
    python run_classboard.py --snapshot data/2025-06-01.json

    # Pack every queue, then move the whole day 30 minutes later
    python run_classboard.py --snapshot data/2025-06-01.json --optimise --shift 30

    # Shift everyone except one teacher
    python run_classboard.py --snapshot data/2025-06-01.json --shift -15 --opt-out t2

    # Only settle completed and uncompleted events in the figures
    python run_classboard.py --snapshot data/2025-06-01.json --settled-only
"""

import sys
import argparse
import logging
from pathlib import Path
from datetime import datetime
from typing import Any, Dict, List

from classboard.adjustment.global_adjustment import GlobalAdjustment, GlobalShiftResult
from classboard.queue.builder import BuildResult
from classboard.service import ClassboardService
from classboard.stats.aggregator import ClassboardStats, financials_frame
from classboard.utils.config import config
from classboard.utils.logger import setup_logger
from classboard.utils.file_utils import generate_filename, load_json, save_json, save_csv


def parse_arguments(argv=None):
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="Build classboard queues for a day and report on them",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        "--snapshot",
        required=True,
        help="Path to the day snapshot JSON file"
    )

    parser.add_argument(
        "--optimise",
        action="store_true",
        help="Pack every queue from its first event before reporting"
    )

    parser.add_argument(
        "--shift",
        type=int,
        default=0,
        help="Move every participating queue by this many minutes"
    )

    parser.add_argument(
        "--opt-out",
        action="append",
        default=[],
        metavar="TEACHER_ID",
        help="Leave a teacher out of --optimise and --shift (repeatable)"
    )

    parser.add_argument(
        "--settled-only",
        action="store_true",
        help="Count only completed and uncompleted events in the figures"
    )

    parser.add_argument(
        "--output-dir",
        help="Output directory (overrides OUTPUT_DIR env var)"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: LOG_LEVEL env var)"
    )

    return parser.parse_args(argv)


def display_summary(build: BuildResult, stats: ClassboardStats):
    """
    Display the day's queues and figures.

    Args:
        build: Build result of the day
        stats: Statistics of the day
    """
    print("\n" + "=" * 60)
    print(f"CLASSBOARD {build.date}")
    print("=" * 60)

    for teacher in stats.per_teacher:
        state = "complete" if teacher.is_complete else f"{teacher.completion_percentage}%"
        earnings = teacher.earnings.rounded()
        print(
            f"{teacher.username or teacher.teacher_id:15s} | "
            f"{teacher.event_count:2d}/{teacher.lesson_count:2d} events ({state:>8s}) | "
            f"{teacher.total_hours:4.1f}h | teacher {earnings['teacher']} | school {earnings['school']}"
        )

    total = stats.global_stats
    print("-" * 60)
    print(f"Teachers with events:     {total.teacher_count}")
    print(f"Students:                 {total.student_count}")
    print(f"Events / lessons:         {total.event_count}/{total.lesson_count}")
    print(f"Instruction hours:        {total.total_hours}")
    print(f"Earnings:                 {total.earnings.to_dict()}")
    print("=" * 60)

    if build.failures:
        print("\nRefused queues:")
        for teacher_id, message in build.failures.items():
            print(f"  ✗ {teacher_id}: {message}")


def save_execution_report(
    output_dir: Path,
    build: BuildResult,
    stats: ClassboardStats,
    ledger: List[Dict[str, Any]],
    session: GlobalAdjustment,
    shift: GlobalShiftResult
):
    """
    Save JSON report and CSV ledger.

    Args:
        output_dir: Base output directory
        build: Build result of the day
        stats: Statistics after adjustments
        ledger: Per-event financial rows
        session: Adjustment session (for pending changes)
        shift: Outcome of the global shift (empty when none was asked)
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    day = build.date.replace("-", "")

    report = {
        "timestamp": timestamp,
        "date": build.date,
        "settings": config.to_dict(),
        "build": {
            "queues": len(build.queues),
            "failures": build.failures,
            "warnings": build.warnings,
        },
        "queues": [queue.to_dict() for queue in session.queues],
        "stats": stats.to_dict(),
        "shift": shift.to_dict(),
        "changes": {
            teacher_id: {"updates": changes.updates, "deletions": changes.deletions}
            for teacher_id, changes in session.collect_changes().items()
        },
    }

    json_path = output_dir / "reports" / generate_filename(f"classboard_report_{day}", "json")
    save_json(report, json_path)
    print(f"\nReport saved to: {json_path}")

    if ledger:
        csv_path = output_dir / "ledgers" / generate_filename(f"classboard_ledger_{day}", "csv")
        save_csv(financials_frame(ledger), csv_path)
        print(f"Ledger saved to: {csv_path}")


def main(argv=None):
    """Main execution function."""
    args = parse_arguments(argv)

    level_name = args.log_level or config.log_level
    output_dir = Path(args.output_dir) if args.output_dir else config.output_dir

    logger = setup_logger(
        "classboard",
        level=getattr(logging, level_name, logging.INFO),
        log_file=str(output_dir / "logs" / "classboard.log")
    )

    try:
        logger.info("Validating configuration")
        config.validate()
        if not args.output_dir:
            config.create_output_directories()

        service = ClassboardService(config.controller_settings(), currency=config.currency)

        # Step 1: Load snapshot
        print(f"\n[1/4] Loading snapshot {args.snapshot}...")
        snapshot = load_json(Path(args.snapshot))
        if snapshot is None:
            print(f"ERROR: Could not read snapshot {args.snapshot}")
            return 1

        # Step 2: Build queues
        print("\n[2/4] Building teacher queues...")
        build = service.rebuild(snapshot)
        print(f"✓ Built {len(build.queues)} queues ({len(build.warnings)} rows skipped)")

        # Step 3: Adjustments
        session = service.start_adjustment(build.date)
        for teacher_id in args.opt_out:
            session.opt_out(teacher_id)

        shift = GlobalShiftResult()
        if args.optimise or args.shift:
            print("\n[3/4] Adjusting queues...")
            if args.optimise:
                for teacher_id, result in session.optimise_all().items():
                    mark = "✓" if result.is_applied else "✗"
                    print(f"  {mark} {teacher_id}: {result.label}")
            if args.shift:
                shift = session.apply_global_shift(args.shift)
                print(f"  ✓ Shifted {len(shift.shifted)} queues by {args.shift:+d}min")
                for teacher_id, message in shift.failures.items():
                    print(f"  ✗ {teacher_id}: {message}")
            commit = service.commit_adjustment(session)
            for teacher_id in commit.conflicts:
                print(f"  ✗ {teacher_id}: queue changed during adjustment, not stored")
        else:
            print("\n[3/4] No adjustments requested")

        # Step 4: Report
        print("\n[4/4] Computing statistics...")
        count_all = not args.settled_only
        stats = service.stats(build.date, count_all_events=count_all)
        ledger = service.ledger(build.date, count_all_events=count_all)

        display_summary(build, stats)
        save_execution_report(output_dir, build, stats, ledger, session, shift)

        print("\n" + "=" * 60)
        print("EXECUTION COMPLETE")
        print("=" * 60)

        return 0 if not build.failures and shift.is_complete else 1

    except ValueError as e:
        logger.error(f"Invalid input: {e}")
        print(f"ERROR: {e}")
        return 1

    except KeyError as e:
        logger.error(f"Missing or unknown key: {e}")
        print(f"ERROR: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
