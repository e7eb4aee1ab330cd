import csv
import logging
from pathlib import Path

from .models import RunSummary

HEADERS = [
    "Path",
    "Status",
    "New Path",
    "Date Source",
    "Resolved Date",
    "Notes",
]


def log_summary(summary: RunSummary, title: str):
    """Logs one line per status, then every failure."""
    logging.info(f"=== {title} summary: {len(summary.outcomes)} entries ===")
    for status, count in sorted(summary.counts().items(), key=lambda kv: kv[0].value):
        logging.info(f"  {status.value:<24}{count}")

    for outcome in summary.failures():
        logging.error(f"  FAILED {outcome.status.value}: {outcome.path} {outcome.message}")


def write_csv_report(summary: RunSummary, output_csv: Path):
    """Writes one row per processed file."""
    with open(output_csv, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(HEADERS)
        for o in summary.outcomes:
            writer.writerow([
                str(o.path),
                o.status.value,
                str(o.new_path) if o.new_path else "",
                o.source.value if o.source else "",
                str(o.date) if o.date else "",
                o.message,
            ])

    logging.info(f"Report written: {output_csv}")
