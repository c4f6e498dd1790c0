"""
Console email sender adapter - Implements EmailSender protocol.

This module provides a console-based implementation of the domain's
email sender port, logging outgoing mail for development purposes.
"""

import logging
import re

from anonfeedback.domain.ports import EmailResult

logger = logging.getLogger(__name__)

_TAG = re.compile(r"<[^>]+>")


class ConsoleEmailSender:
    """
    Implements EmailSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - logs the rendered email as text.
    """

    async def send(self, to: str, subject: str, body: str) -> EmailResult:
        """
        Log the email to console (simulates email delivery).

        The message is logged at INFO level so verification codes are
        visible in development logs.

        Args:
            to: Recipient email address (normalized by domain layer)
            subject: Subject line
            body: Rendered HTML body
        """
        text = " ".join(_TAG.sub(" ", body).split())
        logger.info("[EMAIL] To: %s Subject: %s Body: %s", to, subject, text)
        return EmailResult(success=True, message="Verification email sent successfully")
