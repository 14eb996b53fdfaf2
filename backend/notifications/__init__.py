"""
Notification system for the GitHub updates newsletter.

This module handles:
- Formatting recent GitHub activity into a digest
- Sending digest emails via Resend
- Broadcasting one digest to every active subscriber
- Triggering the broadcast once per day
"""

from .digest_formatter import format_digest
from .email_sender import EmailDispatcher
from .broadcast import BroadcastRunner
from .scheduler import DailyBroadcastScheduler

__all__ = [
    'format_digest',
    'EmailDispatcher',
    'BroadcastRunner',
    'DailyBroadcastScheduler',
]
