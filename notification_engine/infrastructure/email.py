"""Mail collaborator: hands rendered notification emails to SendGrid."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from notification_engine.config import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailMessage:
    to: str
    subject: str
    html: str


class MailSender(Protocol):
    """Anything that accepts an :class:`EmailMessage` and reports success."""

    def __call__(self, message: EmailMessage) -> bool: ...


def describe_sendgrid_error(body: Any) -> str | None:
    """Return a readable description of a SendGrid error payload."""

    if body in (None, "", b""):
        return None
    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None
    if isinstance(body, str):
        body = body.strip()
        try:
            body = json.loads(body)
        except json.JSONDecodeError:
            return body or None

    if isinstance(body, dict):
        errors = body.get("errors")
        if isinstance(errors, list):
            messages = []
            for item in errors:
                if not isinstance(item, dict) or not item.get("message"):
                    continue
                if item.get("field"):
                    messages.append(f"{item['field']}: {item['message']}")
                else:
                    messages.append(str(item["message"]))
            if messages:
                return "; ".join(messages)
        return json.dumps(body, default=str)

    if isinstance(body, list):
        return "; ".join(str(item) for item in body)
    return None


def _log_failure(recipient: str, status_code: Any, body: Any) -> None:
    details = describe_sendgrid_error(body)
    if status_code and details:
        logger.error(
            "SendGrid rejected email to %s with status %s: %s", recipient, status_code, details
        )
    elif status_code:
        logger.error("SendGrid rejected email to %s with status %s", recipient, status_code)
    elif details:
        logger.error("SendGrid request for %s failed: %s", recipient, details)
    else:
        logger.error("SendGrid request for %s failed without details", recipient)


def send_email(message: EmailMessage) -> bool:
    """Send ``message`` with the configured SendGrid credentials.

    Returns ``False`` (never raises) when email is not configured, the
    provider times out or answers with a non-2xx status.
    """

    settings = get_settings()
    if not (settings.sendgrid_api_key and settings.sendgrid_sender):
        logger.info("SendGrid configuration incomplete; skipping email to %s", message.to)
        return False

    mail = Mail(
        from_email=settings.sendgrid_sender,
        to_emails=message.to,
        subject=message.subject,
        html_content=message.html,
    )

    try:
        client = SendGridAPIClient(settings.sendgrid_api_key)
        client.client.timeout = settings.email_timeout_seconds
        response = client.send(mail)
    except Exception as exc:  # SendGrid raises HTTPError subclasses and socket timeouts
        _log_failure(message.to, getattr(exc, "status_code", None), getattr(exc, "body", None))
        logger.debug("SendGrid exception for %s", message.to, exc_info=exc)
        return False

    status_code = getattr(response, "status_code", None)
    if not isinstance(status_code, int) or not 200 <= status_code < 300:
        _log_failure(message.to, status_code, getattr(response, "body", None))
        return False
    return True


__all__ = ["EmailMessage", "MailSender", "describe_sendgrid_error", "send_email"]
