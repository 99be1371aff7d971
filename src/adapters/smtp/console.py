"""
Console notifier adapter - Implements Notifier protocol.

This module provides a console-based implementation of the domain's
notifier port, logging outgoing messages for demo purposes.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleNotifier:
    """
    Implements Notifier protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - prints messages instead of mailing them.
    """

    def __init__(self, sender: str = "no-reply@example.com") -> None:
        self.sender = sender

    def send(self, to: str, subject: str, body: str) -> bool:
        """
        Log the message to console (simulates email delivery).

        In production, this would be replaced with an SMTP adapter.
        The message is logged at INFO level to be visible in docker-compose logs.

        Args:
            to: Recipient email address (normalized by domain layer)
            subject: Message subject line
            body: Plain text body

        Returns:
            True, console delivery cannot fail
        """
        logger.info("[EMAIL] From: %s To: %s Subject: %s Body: %s", self.sender, to, subject, body)
        return True
