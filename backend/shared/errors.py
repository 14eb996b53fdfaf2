"""Error taxonomy for the newsletter backend.

Each error maps to one handling policy:
- InvalidEmailError, DuplicateSubscriberError -> 400 for the caller
- StoreError -> 500, detail logged, generic message returned
- UpstreamFetchError -> never surfaced, the next event source is tried
- DeliveryError -> counted as a failed recipient, never aborts a cycle
- BroadcastInProgressError -> 409 for manual triggers, skipped by the scheduler
"""


class NewsletterBackendError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(NewsletterBackendError):
    """Required configuration is missing or invalid."""


class InvalidEmailError(NewsletterBackendError):
    """Email address is missing or malformed."""

    def __init__(self, message: str = "Valid email is required"):
        super().__init__(message)
        self.message = message


class StoreError(NewsletterBackendError):
    """Subscriber store read or write failed."""

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code


class DuplicateSubscriberError(StoreError):
    """Email is already subscribed."""

    def __init__(self, email: str):
        super().__init__("Email already subscribed", code="23505")
        self.email = email


class UpstreamFetchError(NewsletterBackendError):
    """An event source endpoint could not be used."""

    def __init__(self, url: str, reason: str, status_code: int | None = None):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason
        self.status_code = status_code


class DeliveryError(NewsletterBackendError):
    """Email transport rejected or failed to send one message."""

    def __init__(self, recipient: str, reason: str):
        super().__init__(f"Failed to send email to {recipient}: {reason}")
        self.recipient = recipient
        self.reason = reason


class BroadcastInProgressError(NewsletterBackendError):
    """A broadcast cycle is already running."""

    def __init__(self) -> None:
        super().__init__("A broadcast is already in progress")
