"""Command line entry point."""
import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from envocab.app import ReviewApp
from envocab.config import ensure_directories, settings
from envocab.logging_config import setup_logging
from envocab.monitoring import start_monitoring
from envocab.services.catalog_service import words_by_date
from envocab.services.scheduler_service import format_date
from envocab.services.transfer import FileTransfer

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(prog="envocab", description="Spaced repetition word reviewer")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("stats", help="Show learning statistics")
    commands.add_parser("due", help="List words due today, most urgent first")
    commands.add_parser("words", help="List all words grouped by day")

    export_parser = commands.add_parser("export", help="Export progress to a transfer file")
    export_parser.add_argument("--file", default=settings.storage.transfer_file)

    import_parser = commands.add_parser("import", help="Import progress from a transfer file")
    import_parser.add_argument("--file", default=settings.storage.transfer_file)

    reset_parser = commands.add_parser("reset", help="Erase all progress")
    reset_parser.add_argument("--yes", action="store_true", help="Confirm the reset")
    return parser


async def run(args: argparse.Namespace) -> int:
    """Run one command and return the exit code."""
    app = ReviewApp()
    entries = await app.start()

    if args.command == "stats":
        stats = app.session.calculate_stats(entries)
        print(f"Words: {stats.total_words} (new {stats.new_words}, "
              f"learning {stats.learning_words}, mastered {stats.mastered_words})")
        print(f"Streak: {stats.streak_days} days, last study {stats.last_study_date or 'never'}")
        for day in stats.weekly_data:
            print(f"  {day.date}: {day.reviewed_count}")
        return 0

    if args.command == "due":
        due = app.scheduler.sort_by_urgency(app.scheduler.get_today_review_words(entries))
        for entry in due:
            urgency = app.scheduler.classify_urgency(entry)
            print(f"{urgency.name:<9} {format_date(entry.next_review_at, app.scheduler.tz)} "
                  f"stage {entry.stage}  {entry.word} - {entry.meaning}")
        print(f"{len(due)} words due")
        return 0

    if args.command == "words":
        for day, day_entries in words_by_date(entries):
            print(day)
            for entry in day_entries:
                print(f"  [{entry.memory_status.value}] {entry.word} - {entry.meaning}")
        return 0

    if args.command == "export":
        result = await app.progress_service.copy_to_transfer(FileTransfer(args.file))
        print(result.message)
        return 0 if result.success else 1

    if args.command == "import":
        result = await app.import_from_transfer(FileTransfer(args.file))
        print(result.message)
        return 0 if result.success else 1

    if args.command == "reset":
        if not args.yes:
            print("Refusing to reset without --yes")
            return 1
        return 0 if app.reset_progress() else 1

    return 2


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, configure logging and run the command."""
    args = build_parser().parse_args(argv)
    ensure_directories()
    setup_logging(level=args.log_level)

    if settings.monitoring.enabled:
        start_monitoring(settings.monitoring.port)
        logger.info(f"Metrics available on port {settings.monitoring.port}")

    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
