#!/usr/bin/env python3
"""Replay a recorded lifecycle event log into ReportPortal."""

import argparse
import sys
from pathlib import Path

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from gherkin_portal.backend.memory_backend import InMemoryReportingBackend
from gherkin_portal.logging.config import configure_logging
from gherkin_portal.replay import replay_file
from gherkin_portal.reporter import GherkinReporter


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("event_log", type=Path, help="JSON-lines event log")
    parser.add_argument("--config-dir", type=Path, default=None,
                        help="Directory holding reportportal.yaml")
    parser.add_argument("--flavor", choices=["scenario", "step"], default=None)
    parser.add_argument("--launch", default=None, help="Launch name")
    parser.add_argument("--dry-run", action="store_true",
                        help="Report into memory and print a summary")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--json-logs", action="store_true")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    configure_logging(level=args.log_level, format_json=args.json_logs)

    if not args.event_log.exists():
        print(f"Event log not found: {args.event_log}", file=sys.stderr)
        return 2

    overrides = {"logging": {"level": args.log_level, "format_json": args.json_logs}}
    if args.flavor:
        overrides.setdefault("reporter", {})["flavor"] = args.flavor
    if args.launch:
        overrides.setdefault("launch", {})["name"] = args.launch

    backend = InMemoryReportingBackend() if args.dry_run else None
    reporter = GherkinReporter.create(
        config_dir=args.config_dir,
        overrides=overrides,
        backend=backend,
    )

    stats = replay_file(args.event_log, reporter)
    print(f"Replayed {stats.dispatched} events, skipped {stats.skipped}")

    if backend is not None:
        for key, value in backend.summary().items():
            print(f"  {key}: {value}")

    return 0 if reporter.context.service.failure_count == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
