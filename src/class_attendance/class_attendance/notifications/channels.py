"""Delivery sinks for alert messages.

Sinks are injected into NotificationService; none of them retries.
"""

from __future__ import annotations

import logging
import smtplib
import uuid
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Optional, Protocol

from twilio.base.exceptions import TwilioRestException
from twilio.rest import Client

from ..core.constants import DEFAULT_COUNTRY_CODE
from .messages import format_phone
from .model import AlertMessage, SendResult

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    def send(self, message: AlertMessage) -> SendResult:
        raise NotImplementedError


class ConsoleSink:
    """Development sink: logs instead of delivering."""

    def send(self, message: AlertMessage) -> SendResult:
        message_id = f"console-{uuid.uuid4().hex[:12]}"
        logger.info("[%s] to=%s id=%s\n%s", message.channel.value, message.target, message_id, message.body)
        return SendResult(success=True, message_id=message_id)


class TwilioSmsSink:
    def __init__(self, client: Client, from_number: str, *, country_code: str = DEFAULT_COUNTRY_CODE):
        self._client = client
        self._from = from_number
        self._country_code = country_code

    def send(self, message: AlertMessage) -> SendResult:
        to = format_phone(message.target, self._country_code)
        try:
            sms = self._client.messages.create(body=message.body, from_=self._from, to=to)
        except TwilioRestException as e:
            logger.error("SMS to %s failed: %s", to, e.msg)
            return SendResult(success=False, error=str(e.msg))
        logger.info("SMS sent to %s: %s", to, sms.sid)
        return SendResult(success=True, message_id=sms.sid)


class TwilioWhatsAppSink:
    def __init__(self, client: Client, from_number: str, *, country_code: str = DEFAULT_COUNTRY_CODE):
        self._client = client
        self._from = from_number if from_number.startswith("whatsapp:") else f"whatsapp:{from_number}"
        self._country_code = country_code

    def send(self, message: AlertMessage) -> SendResult:
        to = f"whatsapp:{format_phone(message.target, self._country_code)}"
        try:
            msg = self._client.messages.create(body=message.body, from_=self._from, to=to)
        except TwilioRestException as e:
            logger.error("WhatsApp to %s failed: %s", to, e.msg)
            return SendResult(success=False, error=str(e.msg))
        logger.info("WhatsApp sent to %s: %s", to, msg.sid)
        return SendResult(success=True, message_id=msg.sid)


@dataclass(frozen=True)
class SmtpConfig:
    host: str
    port: int = 587
    username: Optional[str] = None
    password: Optional[str] = None
    sender: Optional[str] = None
    use_tls: bool = True
    timeout: int = 30


class SmtpEmailSink:
    """One SMTP connection per message, so concurrent sends never share a socket."""

    def __init__(self, config: SmtpConfig):
        self._config = config

    def send(self, message: AlertMessage) -> SendResult:
        cfg = self._config
        email = EmailMessage()
        email["Subject"] = message.subject or "Attendance notification"
        email["From"] = cfg.sender or cfg.username or ""
        email["To"] = message.target
        email["Message-ID"] = f"<{uuid.uuid4().hex}@class-attendance>"
        email.set_content(message.body)

        try:
            with smtplib.SMTP(cfg.host, cfg.port, timeout=cfg.timeout) as smtp:
                if cfg.use_tls:
                    smtp.starttls()
                if cfg.username:
                    smtp.login(cfg.username, cfg.password or "")
                smtp.send_message(email)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("email to %s failed: %s", message.target, e)
            return SendResult(success=False, error=str(e))

        logger.info("email sent to %s: %s", message.target, email["Message-ID"])
        return SendResult(success=True, message_id=email["Message-ID"])
