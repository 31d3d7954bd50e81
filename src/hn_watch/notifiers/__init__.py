"""Notifier implementations."""

from .base import Notifier, NotifyError
from .dispatcher import NotificationDispatcher
from .smtp_email import SmtpEmailNotifier, build_email_message, render_body, render_subject

__all__ = [
    "NotificationDispatcher",
    "Notifier",
    "NotifyError",
    "SmtpEmailNotifier",
    "build_email_message",
    "render_body",
    "render_subject",
]
