from __future__ import annotations

import logging
import os
import re
import smtplib
from email.message import EmailMessage

from hn_watch.config import MailSettings
from hn_watch.models import Link

from .base import Notifier, NotifyError

logger = logging.getLogger(__name__)

_LINE_BREAKS = re.compile(r"[\r\n]+")

SUBJECT_PREFIX = "HN: "

_BODY_TEMPLATE = """\
A new item has appeared on Hacker News.

Title: {title}
URL: {url}
Discussion: {item_url}
"""


class SmtpEmailNotifier(Notifier):
    def __init__(self, settings: MailSettings) -> None:
        self.settings = settings

    def notify(self, link: Link) -> None:
        message = build_email_message(
            link,
            sender=self.settings.sender,
            recipient=self.settings.recipient,
        )
        username = os.getenv(self.settings.username_env_var, "").strip()
        password = os.getenv(self.settings.password_env_var, "")

        try:
            with smtplib.SMTP(
                self.settings.smtp_host,
                self.settings.smtp_port,
                timeout=self.settings.timeout_seconds,
            ) as server:
                if self.settings.use_tls:
                    server.starttls()
                if username:
                    server.login(username, password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotifyError(f"sending email for {link.item_url} failed: {exc}") from exc

        logger.info("Sent notification for %s to %s", link.item_url, self.settings.recipient)


def render_subject(link: Link) -> str:
    # Header values must stay on one line.
    return SUBJECT_PREFIX + _LINE_BREAKS.sub(" ", link.title)


def render_body(link: Link) -> str:
    return _BODY_TEMPLATE.format(title=link.title, url=link.url, item_url=link.item_url)


def build_email_message(link: Link, *, sender: str, recipient: str) -> EmailMessage:
    try:
        message = EmailMessage()
        message["From"] = sender
        message["To"] = recipient
        message["Subject"] = render_subject(link)
        message.set_content(render_body(link))
    except (ValueError, TypeError) as exc:
        raise NotifyError(f"rendering email for {link.item_url} failed: {exc}") from exc
    return message
