"""
CLI script for running one broadcast cycle outside the API server.

Usage:
    # Send the current digest to every active subscriber
    uv run python -m notifications.run_broadcast

    # Dry run (fetch and format, but don't actually send emails)
    uv run python -m notifications.run_broadcast --dry-run
"""

import argparse

from api.services import build_services
from config.settings import load_settings
from models import BroadcastSummary
from shared.errors import BroadcastInProgressError, StoreError
from shared.logging import configure_logging, get_logger

logger = get_logger(__name__)


class DryRunDispatcher:
    """Logs instead of sending."""

    def __init__(self) -> None:
        self.previewed = False

    def send_digest(self, recipient: str, digest_text: str) -> str:
        if not self.previewed:
            logger.info("Digest preview:\n%s", digest_text)
            self.previewed = True
        logger.info("  [DRY RUN] Would send digest to %s", recipient)
        return "dry-run"


def run_broadcast(dry_run: bool = False) -> BroadcastSummary:
    """
    Run one broadcast cycle.

    Args:
        dry_run: If True, don't actually send emails

    Returns:
        BroadcastSummary for the cycle
    """
    settings = load_settings()
    configure_logging(settings.log_level)

    dispatcher = DryRunDispatcher() if dry_run else None
    services = build_services(settings, dispatcher=dispatcher)

    if dry_run:
        logger.info("Dry run: digest will be formatted but not sent")

    return services.runner.run_cycle()


def main() -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Send the GitHub updates digest to all active subscribers"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Dry run mode (don't actually send emails)",
    )

    args = parser.parse_args()

    try:
        summary = run_broadcast(dry_run=args.dry_run)
    except (StoreError, BroadcastInProgressError) as e:
        logger.error("✗ Broadcast failed: %s", e)
        return 1

    logger.info("Sent: %d, Failed: %d, Total: %d", summary.sent, summary.failed, summary.total)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
