"""Email sender adapters."""

from .console import ConsoleEmailSender
from .resend import ResendEmailSender

__all__ = ["ConsoleEmailSender", "ResendEmailSender"]
