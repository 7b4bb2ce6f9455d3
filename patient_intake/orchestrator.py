"""Patient Intake Orchestrator.

This script runs the end-to-end patient intake flow: load configuration,
fetch raw records, validate and summarize them, and write the JSON summary.

**Error Handling Philosophy:**

- **Infrastructure Errors** (missing config, unreachable source, payload that
  is not a JSON array) fail fast:
  - Printed to stderr; pipeline exits with code 1
  - No summary is written

- **Record Errors** (unparseable date, malformed identifier) are per-item:
  - The record is skipped and logged as a warning
  - Remaining records continue processing
  - The exit code is unaffected

**Exit Codes:**
- 0: Pipeline completed successfully
- 1: Pipeline failed (infrastructure error)
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, TextIO

import yaml

from . import batch_processor, fetch_records, write_summary
from .config_loader import DEFAULT_TIMEOUT_SECONDS, load_config, settings_from_config

SCRIPT_DIR = Path(__file__).resolve().parent
ROOT_DIR = SCRIPT_DIR.parent
DEFAULT_OUTPUT_DIR = ROOT_DIR / "output"
DEFAULT_CONFIG_PATH = ROOT_DIR / "config" / "parameters.yaml"


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Validate patient records and emit a JSON summary",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s input/patients.json
  %(prog)s https://example.org/patients --stdout
  %(prog)s input/patients.json --timezone America/Toronto
        """,
    )

    parser.add_argument(
        "source",
        nargs="?",
        default=None,
        help="URL or JSON file with patient records (default: source.url from config)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=DEFAULT_OUTPUT_DIR,
        dest="output_dir",
        help=f"Output directory (default: {DEFAULT_OUTPUT_DIR})",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        dest="config_path",
        help=f"Configuration file (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--timezone",
        type=str,
        default=None,
        help="IANA timezone overriding runtime.timezone from config",
    )
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print the JSON summary to stdout instead of writing a file",
    )

    return parser.parse_args(argv)


def resolve_source(args: argparse.Namespace, config: dict) -> str:
    """Pick the CLI source, falling back to source.url from config."""
    source = args.source or (config.get("source") or {}).get("url")
    if not source:
        raise ValueError(
            "No patient source given. Pass a URL or JSON file, "
            "or set source.url in config/parameters.yaml."
        )
    return source


def configure_logging(log_dir: Path, run_id: str) -> Path:
    """Configure file logging for a pipeline run.

    Parameters
    ----------
    log_dir : Path
        Directory for log files; created if missing.
    run_id : str
        Unique run identifier used in log filename.

    Returns
    -------
    Path
        Path to the created log file.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / f"intake_{run_id}.log"

    handler = logging.FileHandler(log_path, encoding="utf-8")
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(message)s")
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(logging.INFO)
    root_logger.addHandler(handler)

    return log_path


def print_step(step_num: int, description: str, stream: TextIO) -> None:
    """Print a step header."""
    print(file=stream)
    print(f"{'=' * 60}", file=stream)
    print(f"Step {step_num}: {description}", file=stream)
    print(f"{'=' * 60}", file=stream)


def print_step_complete(
    step_num: int, description: str, duration: float, stream: TextIO
) -> None:
    """Print step completion message."""
    print(
        f"✅ Step {step_num}: {description} complete in {duration:.1f} seconds.",
        file=stream,
    )


def print_summary(
    step_times: list[tuple[str, float]],
    total_duration: float,
    total_records: int,
    total_patients: int,
    stream: TextIO,
) -> None:
    """Print the pipeline summary."""
    print(file=stream)
    print(f"{'=' * 60}", file=stream)
    print("🎉 Pipeline completed successfully!", file=stream)
    print(f"{'=' * 60}", file=stream)
    print(file=stream)
    print("🕒 Time Summary:", file=stream)
    for step_name, duration in step_times:
        print(f"  - {step_name:<25} {duration:.1f}s", file=stream)
    print(f"  - {'─' * 25} {'─' * 6}", file=stream)
    print(f"  - {'Total Time':<25} {total_duration:.1f}s", file=stream)
    print(file=stream)
    print(f"📥 Records received:       {total_records}", file=stream)
    print(f"👥 Patients summarized:    {total_patients}", file=stream)


def main(argv: Optional[list[str]] = None) -> int:
    """Run the patient intake pipeline."""
    args = parse_args(argv)

    # Progress goes to stderr when stdout carries the JSON summary
    stream = sys.stderr if args.stdout else sys.stdout
    output_dir = args.output_dir.resolve()
    run_id = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")

    try:
        config = load_config(args.config_path)
        settings = settings_from_config(config, timezone_override=args.timezone)
        source = resolve_source(args, config)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    log_path = configure_logging(output_dir / "logs", run_id)
    timeout = (config.get("source") or {}).get(
        "timeout_seconds", DEFAULT_TIMEOUT_SECONDS
    )
    indent = (config.get("output") or {}).get("indent", 2)

    print(file=stream)
    print("🚀 Starting Patient Intake", file=stream)
    print(f"🗂️  Source: {source}", file=stream)
    print(f"🕰️  Timezone: {settings.timezone}", file=stream)

    total_start = time.time()
    step_times = []

    try:
        # Step 1: Loading records
        step_start = time.time()
        print_step(1, "Loading patient records", stream)
        raw_records = fetch_records.load_records(source, timeout=timeout)
        print(f"📥 Raw records loaded: {len(raw_records)}", file=stream)
        step_duration = time.time() - step_start
        step_times.append(("Loading", step_duration))
        print_step_complete(1, "Loading", step_duration, stream)

        # Step 2: Validating and summarizing
        step_start = time.time()
        print_step(2, "Validating and summarizing records", stream)
        summary = batch_processor.process(raw_records, settings)
        if summary.rejected:
            print(
                f"⚠️  Skipped {len(summary.rejected)} invalid record(s); see {log_path}",
                file=stream,
            )
        step_duration = time.time() - step_start
        step_times.append(("Validation", step_duration))
        print_step_complete(2, "Validation", step_duration, stream)

        # Step 3: Writing summary
        step_start = time.time()
        print_step(3, "Writing summary", stream)
        if args.stdout:
            print(write_summary.dumps_summary(summary, indent=indent))
        else:
            summary_path = write_summary.write_summary(
                summary, output_dir / f"patients_{run_id}.json", indent=indent
            )
            print(f"📄 Summary: {summary_path}", file=stream)
        step_duration = time.time() - step_start
        step_times.append(("Writing", step_duration))
        print_step_complete(3, "Writing", step_duration, stream)

        print_summary(
            step_times,
            time.time() - total_start,
            len(raw_records),
            summary.total_patients,
            stream,
        )
        return 0

    except Exception as exc:
        print(f"\n❌ Pipeline failed: {exc}", file=sys.stderr)
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
