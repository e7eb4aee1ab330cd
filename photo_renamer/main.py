import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Optional

from .config import OrganizerSettings
from .core import PhotoRenamerApp
from .exceptions import DirectoryReadError
from .models import RunSummary
from .reporting import log_summary, write_csv_report

MENU = """
Choose an option:
  1) Organize (rename photos and videos by date)
  2) Delete duplicates
  3) Exit
"""


def setup_logging(verbose: bool, log_file: Optional[Path] = None):
    """Logs to the console, and also to log_file when one is given."""
    log_level = logging.DEBUG if verbose else logging.INFO

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=handlers,
        force=True,
    )

    # Silence chatty libraries
    logging.getLogger("exifread").setLevel(logging.ERROR)


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        description="Photo Renamer: rename photos/videos to 'YYYY-MM-DD HH.MM.SS' and delete duplicates"
    )

    p.add_argument("command", nargs="?", choices=["organize", "dedupe"],
                   help="Run one action and exit (default: interactive menu)")
    p.add_argument("--root", type=Path, default=None,
                   help="Directory to process (default: current working directory)")
    p.add_argument("--dry-run", action="store_true", help="Log planned actions without modifying disk")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    p.add_argument("--log-file", type=Path, default=None, help="Also write the log to this file")
    p.add_argument("--report-csv", type=Path, default=None,
                   help="Write a per-file CSV report of each run to this path")

    return p.parse_args(argv)


def run_command(app: PhotoRenamerApp, command: str, root: Path,
                report_csv: Optional[Path] = None) -> RunSummary:
    if command == "organize":
        summary = app.organize(root)
        title = "Organize"
    else:
        summary = app.delete_duplicates(root)
        title = "Delete duplicates"

    log_summary(summary, title)
    if report_csv:
        write_csv_report(summary, report_csv)
    return summary


def menu_loop(app: PhotoRenamerApp, root: Path, report_csv: Optional[Path] = None,
              prompt: Callable[[str], str] = input):
    """Interactive loop; returns when the user exits or input ends."""
    while True:
        print(MENU)
        try:
            choice = prompt("> ").strip()
        except EOFError:
            return

        if choice == "1":
            run_command(app, "organize", root, report_csv)
        elif choice == "2":
            run_command(app, "dedupe", root, report_csv)
        elif choice == "3":
            return
        else:
            print(f"Unknown option: {choice!r}")


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose, args.log_file)

    root = (args.root or Path.cwd()).resolve()
    settings = OrganizerSettings(dry_run=args.dry_run)
    app = PhotoRenamerApp(settings)

    logging.info("=== Photo Renamer Started ===")
    logging.info(f"Root: {root}")

    try:
        if args.command:
            run_command(app, args.command, root, args.report_csv)
        else:
            menu_loop(app, root, args.report_csv)
    except DirectoryReadError:
        logging.exception("Cannot read the root directory.")
        return 1
    except KeyboardInterrupt:
        logging.warning("Operation cancelled by user.")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
