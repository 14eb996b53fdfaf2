"""
Token generation and validation for one-click unsubscribe links.

Uses cryptographically signed tokens with expiry for unsubscribe links.
Tokens are stateless (no database storage needed) and carry only the
subscriber's normalized email address.
"""

import hashlib
from typing import Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

UNSUBSCRIBE_SALT = "unsubscribe"
DEFAULT_MAX_AGE_DAYS = 90


def _get_serializer(secret_key: str | None) -> URLSafeTimedSerializer:
    """
    Get configured serializer for token generation and validation.

    Raises:
        ValueError: If no secret key is configured
    """
    if not secret_key:
        raise ValueError("UNSUBSCRIBE_SECRET_KEY must be set.")

    return URLSafeTimedSerializer(
        secret_key,
        salt=UNSUBSCRIBE_SALT,
        signer_kwargs={"digest_method": hashlib.sha256},
    )


def generate_unsubscribe_token(email: str, secret_key: str | None) -> str:
    """
    Generate a signed unsubscribe token for a subscriber.

    Args:
        email: Normalized subscriber email
        secret_key: UNSUBSCRIBE_SECRET_KEY

    Returns:
        URL-safe token string (format: payload.timestamp.signature)

    Raises:
        ValueError: If no secret key is configured
    """
    serializer = _get_serializer(secret_key)
    return serializer.dumps(email)


def validate_unsubscribe_token(
    token: str, secret_key: str | None, max_age_days: int = DEFAULT_MAX_AGE_DAYS
) -> Optional[str]:
    """
    Validate an unsubscribe token and extract the email.

    Never raises - returns None for any invalid, expired or unverifiable token.

    Examples:
        >>> token = generate_unsubscribe_token("a@b.com", "secret")
        >>> validate_unsubscribe_token(token, "secret")
        'a@b.com'
        >>> validate_unsubscribe_token("invalid-token", "secret") is None
        True
    """
    try:
        serializer = _get_serializer(secret_key)
        max_age_seconds = max_age_days * 24 * 60 * 60
        email = serializer.loads(token, max_age=max_age_seconds, salt=UNSUBSCRIBE_SALT)
    except (BadSignature, SignatureExpired, ValueError, TypeError):
        return None

    if not isinstance(email, str):
        return None
    return email
