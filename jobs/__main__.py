"""Command-line entrypoint for batch jobs."""

from __future__ import annotations

import argparse
import os

from jobs.config import TRACKED_SERIES, SeriesConfig
from jobs.fetch_weekly import main as run_fetch_weekly


def _format_series(series: SeriesConfig) -> str:
    return f"{series.series_id}: name='{series.name}' freq={series.freq_label}"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="FRED weekly dashboard job runner")
    subparsers = parser.add_subparsers(dest="command", required=True)

    fetch_parser = subparsers.add_parser(
        "fetch-weekly", help="Fetch all tracked series and publish changed snapshots"
    )
    fetch_parser.add_argument(
        "--log-level",
        help="Override LOG_LEVEL for this invocation (e.g. DEBUG, INFO)",
    )

    subparsers.add_parser("list-series", help="Show the tracked series catalog")

    args = parser.parse_args(argv)

    if args.command == "list-series":
        for series in TRACKED_SERIES:
            print(_format_series(series))
        return 0

    if args.command == "fetch-weekly":
        if args.log_level:
            os.environ["LOG_LEVEL"] = args.log_level
        return run_fetch_weekly()

    parser.error("Unknown command")
    return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
