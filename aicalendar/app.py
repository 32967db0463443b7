"""
Main entry point for the AI calendar generator.
Loads group configs, runs the pipeline and reports the outcome.
"""

import argparse
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from aicalendar.config_loader import load_groups
from aicalendar.errors import ConfigLoadError, FileWriteError
from aicalendar.logging_helper import Log
from aicalendar.pipeline import default_client_factory, run_pipeline
from aicalendar.settings_manager import load_settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate iCalendar files and an HTML page from AI-generated event lists"
    )
    parser.add_argument("--config-dir", help="Directory of group config JSON files (default: configs)")
    parser.add_argument("--output-dir", help="Output directory (default: docs)")
    parser.add_argument("--year", type=int, default=datetime.now().year,
                        help="Year to request events for (default: current year)")
    parser.add_argument("--workers", type=int, help="Number of concurrent AI queries")
    parser.add_argument("--settings", type=Path, help="Optional JSON settings file")
    parser.add_argument("--stub", action="store_true", help="Use the offline stub client")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Returns the process exit status."""
    args = build_parser().parse_args(argv)

    Log.section("AI Calendar")
    Log.info(f"Log file: {Log.get_log_path()}")

    settings = load_settings(args.settings)
    if args.config_dir:
        settings["config_dir"] = args.config_dir
    if args.output_dir:
        settings["output_dir"] = args.output_dir
    if args.workers:
        settings["max_workers"] = max(1, args.workers)
    if args.stub:
        settings["use_stub"] = True

    try:
        groups = load_groups(settings["config_dir"])
    except ConfigLoadError as e:
        Log.error(f"Error loading group configs: {e}")
        return 1
    Log.info(f"Loaded {len(groups)} group configs")

    try:
        result = run_pipeline(
            groups,
            year=args.year,
            output_dir=Path(settings["output_dir"]),
            client_factory=default_client_factory(settings),
            max_workers=settings["max_workers"],
            disable_ai=settings["disable_ai"],
        )
    except (ConfigLoadError, FileWriteError) as e:
        Log.error(f"Error generating calendar files: {e}")
        return 1

    if result.warnings:
        Log.section("Warnings")
        for warning in result.warnings:
            Log.warn(f"{warning.group} / {warning.subject or '-'} [{warning.kind}]: {warning.message}")

    Log.info(f"Calendar files have been created successfully in {settings['output_dir']}")
    Log.kv({
        "stage": "done",
        "events": len(result.events),
        "calendar_files": len(result.calendar_files),
        "warnings": len(result.warnings),
    })
    return 0


if __name__ == "__main__":
    sys.exit(main())
