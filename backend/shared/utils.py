import logging
from datetime import datetime, timezone

from shared.errors import InvalidEmailError


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """Current UTC time in ISO 8601 format."""
    return utc_now().isoformat()


def normalize_email(email: str | None) -> str:
    """
    Normalize an email address for use as the subscriber key.

    Raises:
        InvalidEmailError: If the address is empty or has no '@'
    """
    if not email or not isinstance(email, str):
        raise InvalidEmailError()

    normalized = email.strip().lower()
    if "@" not in normalized:
        raise InvalidEmailError()

    return normalized


def log_summary(
    logger: logging.Logger, label: str, sent: int, failed: int, total: int
) -> None:
    """Log a broadcast cycle summary."""
    logger.info("=" * 60)
    logger.info("%s complete", label)
    logger.info("✓ Sent:   %d", sent)
    logger.info("✗ Failed: %d", failed)
    logger.info("  Total:  %d", total)
    logger.info("=" * 60)
