"""Command-line entrypoint for generating a Slack digest.

Configuration is driven by environment variables (see
:meth:`slackdigest.config.DigestConfig.from_env`), and flags override them:

- ``--dry-run``: Use sample data and the rule-based classifier.
- ``--hours``: Window length in hours.
- ``--channels``: Comma-separated channel names.
- ``--notion``: Also export the digest to Notion.
- ``--output-dir``: Directory receiving the Markdown digest.
- ``--sample-file``: JSON sample replacing the built-in dry-run data.

Run it with ``python -m slackdigest.cli`` or the ``slackdigest`` script.
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

import msgspec

from slackdigest.classify import ClassifierConfigError
from slackdigest.config import DigestConfig, DigestConfigError, parse_channel_list
from slackdigest.export import NotionConfigError
from slackdigest.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_exception,
    log_info,
    log_warning,
)
from slackdigest.runner import DigestOptions, run_digest
from slackdigest.slack import SlackConfigError, SlackError

logger = get_logger(__name__)


def _positive_float(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError as exc:
        msg = f"expected a number, got {raw!r}"
        raise argparse.ArgumentTypeError(msg) from exc
    if value <= 0:
        msg = f"expected a positive number, got {raw!r}"
        raise argparse.ArgumentTypeError(msg)
    return value


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the digest command."""
    parser = argparse.ArgumentParser(
        prog="slackdigest",
        description="Summarise recent Slack activity into a Markdown digest.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Use sample data and rule-based classification without network calls",
    )
    parser.add_argument(
        "--hours",
        type=_positive_float,
        default=None,
        help="Hours of history to include (default 24)",
    )
    parser.add_argument(
        "--channels",
        default=None,
        help="Comma-separated channel names to include",
    )
    parser.add_argument(
        "--notion",
        action="store_true",
        help="Also export the digest to a Notion database",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory for summary-{date}.md and latest.md",
    )
    parser.add_argument(
        "--sample-file",
        type=Path,
        default=None,
        help="JSON sample replacing the built-in dry-run data",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (default INFO)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Generate one digest and report where it was written.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code: 0 on success, 1 when configuration or the run fails.

    """
    args = build_parser().parse_args(argv)

    try:
        config = DigestConfig.from_env()
    except DigestConfigError as exc:
        configure_logging("INFO")
        log_error(logger, "Invalid configuration: %s", exc)
        return 1

    log_level_str = args.log_level or config.log_level or "INFO"
    normalized_level, invalid_level = configure_logging(log_level_str)
    if invalid_level:
        log_warning(
            logger,
            "Invalid log level %r, falling back to %s",
            log_level_str,
            normalized_level,
        )

    options = DigestOptions.from_config(
        config,
        hours_back=args.hours,
        channels=parse_channel_list(args.channels),
        output_dir=args.output_dir,
        dry_run=args.dry_run,
        notion=args.notion,
        sample_file=args.sample_file,
    )
    log_info(
        logger,
        "Generating digest for the last %s hours (dry_run=%s)",
        options.hours_back,
        options.dry_run,
    )

    try:
        outcome = asyncio.run(run_digest(options))
    except (SlackConfigError, ClassifierConfigError, NotionConfigError) as exc:
        # Use error() not exception() - configuration failures need no traceback
        log_error(logger, "Configuration error: %s", exc)
        return 1
    except SlackError as exc:
        log_exception(logger, f"Slack ingestion failed: {exc}", exc)
        return 1
    except msgspec.DecodeError as exc:
        log_error(logger, "Invalid sample file %s: %s", options.sample_file, exc)
        return 1
    except OSError as exc:
        log_exception(logger, f"Digest run failed: {exc}", exc)
        return 1

    print(f"Digest written to {outcome.output_path}")
    if outcome.export_url:
        print(f"Notion page: {outcome.export_url}")
    if outcome.result.is_empty:
        print("No notable items found in this period.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
