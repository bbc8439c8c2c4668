from __future__ import annotations

import argparse
import logging
import sys
from datetime import UTC, datetime
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from leasesync.app import sync_tenant_lifecycle
from leasesync.config import configure_logging
from leasesync.domain.runner import LimitMode

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="leasesync",
        description="Reconcile HubSpot tenant associations with Buildium lease statuses",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute every change but skip association writes",
    )
    parser.add_argument(
        "--since",
        type=str,
        help="ISO-8601 timestamp (UTC); fetch leases updated at or after it",
    )
    parser.add_argument(
        "--lookback-days",
        type=int,
        help="Fetch leases updated in the last N days when --since is absent (defaults to config)",
    )
    parser.add_argument(
        "--unit-id",
        dest="unit_ids",
        action="append",
        default=[],
        help="Restrict the run to a unit (repeatable)",
    )
    parser.add_argument(
        "--property-id",
        dest="property_ids",
        action="append",
        default=[],
        help="Restrict the run to a property (repeatable)",
    )
    parser.add_argument(
        "--max-records",
        type=int,
        help="Maximum number of leases to fetch before stopping",
    )
    parser.add_argument(
        "--limit",
        type=int,
        help="Stop after N leases (see --limit-mode)",
    )
    parser.add_argument(
        "--limit-mode",
        choices=[mode.value for mode in LimitMode],
        default=None,
        help="Count examined leases or changed leases against --limit (default: examined)",
    )
    parser.add_argument(
        "--no-prefetch",
        dest="prefetch",
        action="store_false",
        help="Skip the batched listing lookup before processing",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(list(argv))


def _parse_iso_datetime(value: str) -> datetime:
    try:
        normalized = value.strip()
        if normalized.endswith("Z"):
            normalized = normalized[:-1] + "+00:00"
        dt = datetime.fromisoformat(normalized)
    except ValueError as exc:
        raise ValueError(f"Invalid ISO timestamp: {value}") from exc
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def _validate_args(args: argparse.Namespace) -> None:
    if args.lookback_days is not None and args.lookback_days <= 0:
        raise ValueError("Lookback days must be positive")
    if args.max_records is not None and args.max_records <= 0:
        raise ValueError("Max records must be positive")
    if args.limit is not None and args.limit < 0:
        raise ValueError("Limit must be non-negative")
    if args.limit_mode is not None and args.limit is None:
        raise ValueError("--limit-mode requires --limit")
    if args.since is not None and args.lookback_days is not None:
        raise ValueError("Use either --since or --lookback-days, not both")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        _validate_args(parsed_args)
        since = _parse_iso_datetime(parsed_args.since) if parsed_args.since else None
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    if parsed_args.verbose:
        configure_logging(level=logging.DEBUG, force=True)

    try:
        result = sync_tenant_lifecycle(
            dry_run=parsed_args.dry_run,
            since=since,
            lookback_days=parsed_args.lookback_days,
            unit_ids=parsed_args.unit_ids,
            property_ids=parsed_args.property_ids,
            max_records=parsed_args.max_records,
            limit=parsed_args.limit,
            limit_mode=LimitMode(parsed_args.limit_mode or LimitMode.EXAMINED),
            prefetch_listings=parsed_args.prefetch,
        )
    except Exception:
        log.exception("Fatal error during sync")
        sys.exit(1)

    if result.stats.errors:
        log.error("Sync finished with %s failed leases", result.stats.errors)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def entrypoint() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    entrypoint()
