"""
Signup and unsubscribe rules on top of the subscriber directory.

The normalized email is the only identity key: any existing record, active
or not, makes a second signup for that address a duplicate.
"""

from models import Subscriber
from models.types import EmailAddress
from shared.errors import DuplicateSubscriberError
from shared.logging import get_logger
from shared.utils import normalize_email
from subscribers.directory import SubscriberDirectory

logger = get_logger(__name__)


def subscribe(directory: SubscriberDirectory, raw_email: str | None) -> Subscriber:
    """
    Subscribe an email address.

    Args:
        directory: Subscriber store
        raw_email: Address as submitted by the caller

    Returns:
        The newly inserted subscriber

    Raises:
        InvalidEmailError: If the address is missing or malformed
        DuplicateSubscriberError: If a record for the address already exists
        StoreError: If the store fails
    """
    email = EmailAddress(normalize_email(raw_email))
    logger.info("Attempting to subscribe email: %s", email)

    if directory.exists(email):
        raise DuplicateSubscriberError(email)

    subscriber = directory.insert(email)
    logger.info("Successfully subscribed: %s", email)
    return subscriber


def unsubscribe(directory: SubscriberDirectory, raw_email: str | None) -> EmailAddress:
    """
    Deactivate a subscriber. Unknown addresses are a silent no-op.

    Raises:
        InvalidEmailError: If the address is missing or malformed
        StoreError: If the store fails
    """
    email = EmailAddress(normalize_email(raw_email))
    directory.set_active(email, False)
    logger.info("Unsubscribed: %s", email)
    return email
