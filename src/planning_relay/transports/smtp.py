"""SMTP transport built on aiosmtplib.

A new connection is opened for every call, so a single transport instance
can be shared by concurrent sends and across requests.
"""

import logging
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Any, Callable, Dict, Optional, Tuple

import aiosmtplib

from ..config import Settings, SMTPConfig
from ..exceptions import ConnectivityError, SendError, TransportError
from ..models import OutgoingMessage, SendReceipt
from .base import BaseTransport

logger = logging.getLogger(__name__)

# Checked in order, most specific first
_ERROR_CLASSES: Tuple[Tuple[type, str, Optional[str]], ...] = (
    (aiosmtplib.SMTPAuthenticationError, "EAUTH", "AUTH"),
    (aiosmtplib.SMTPTimeoutError, "ETIMEDOUT", "CONN"),
    (aiosmtplib.SMTPConnectError, "ECONNECTION", "CONN"),
    (aiosmtplib.SMTPServerDisconnected, "ECONNECTION", "CONN"),
    (aiosmtplib.SMTPRecipientsRefused, "EENVELOPE", "RCPT TO"),
    (aiosmtplib.SMTPRecipientRefused, "EENVELOPE", "RCPT TO"),
    (aiosmtplib.SMTPSenderRefused, "EENVELOPE", "MAIL FROM"),
    (aiosmtplib.SMTPDataError, "EMESSAGE", "DATA"),
    (aiosmtplib.SMTPNotSupported, "ESMTP", "EHLO"),
    (aiosmtplib.SMTPException, "ESMTP", None),
    (OSError, "ECONNECTION", "CONN"),
)


def classify_error(error: BaseException) -> Tuple[Optional[str], Optional[str], Optional[int]]:
    """Map an aiosmtplib/network exception to (code, command, response_code)."""
    response_code = getattr(error, "code", None)
    if not isinstance(response_code, int):
        response_code = None

    for error_type, code, command in _ERROR_CLASSES:
        if isinstance(error, error_type):
            return code, command, response_code
    return None, None, response_code


def _wrap(error: Exception, error_cls: type, prefix: str) -> TransportError:
    code, command, response_code = classify_error(error)
    detail = getattr(error, "message", None) or str(error) or type(error).__name__
    return error_cls(
        f"{prefix}: {detail}",
        code=code,
        command=command,
        response_code=response_code,
        cause=error,
    )


def to_mime(message: OutgoingMessage) -> EmailMessage:
    """Build the MIME message for an outgoing message.

    A Message-ID is generated so it can be reported back to the caller.
    """
    mime = EmailMessage()
    mime["From"] = message.sender
    mime["To"] = message.recipient
    mime["Subject"] = message.subject

    domain = None
    if "@" in message.sender:
        domain = message.sender.rpartition("@")[2].strip(" >") or None
    mime["Message-ID"] = make_msgid(domain=domain)

    mime.set_content(message.text_body)
    for attachment in message.attachments:
        maintype, _, subtype = attachment.mimetype.partition("/")
        mime.add_attachment(
            attachment.content,
            maintype=maintype,
            subtype=subtype or "octet-stream",
            filename=attachment.filename,
        )
    return mime


class SMTPTransport(BaseTransport):
    """Mail transport talking to an SMTP server."""

    def __init__(
        self,
        config: SMTPConfig,
        validate_certs: bool = True,
        smtp_factory: Optional[Callable[..., Any]] = None,
    ):
        """Initialize the SMTP transport.

        Args:
            config: SMTP settings
            validate_certs: Whether to verify the server TLS certificate
            smtp_factory: Factory for aiosmtplib.SMTP instances (for mocking)
        """
        super().__init__(config.sender)
        self.config = config
        self.validate_certs = validate_certs
        self.smtp_factory = smtp_factory or aiosmtplib.SMTP

    @classmethod
    def from_settings(cls, settings: Settings) -> "SMTPTransport":
        return cls(settings.smtp, validate_certs=settings.validate_certs)

    def _client(self):
        kwargs: Dict[str, Any] = {
            "hostname": self.config.host,
            "port": self.config.port,
            "use_tls": self.config.secure,
            "validate_certs": self.validate_certs,
            "timeout": self.config.timeout,
        }
        # aiosmtplib logs in on connect when credentials are given
        if self.config.user and self.config.password:
            kwargs["username"] = self.config.user
            kwargs["password"] = self.config.password
        else:
            logger.debug("No SMTP credentials configured, proceeding without auth")
        return self.smtp_factory(**kwargs)

    async def verify(self) -> None:
        logger.debug(
            f"Verifying SMTP connection to {self.config.host}:{self.config.port}"
        )
        try:
            async with self._client():
                pass
        except (aiosmtplib.SMTPException, OSError) as e:
            error = _wrap(e, ConnectivityError, "SMTP verification failed")
            logger.error(f"{error.message} (code={error.code}, command={error.command})")
            raise error from e
        logger.info(f"SMTP server {self.config.host}:{self.config.port} is ready")

    async def send(self, message: OutgoingMessage) -> SendReceipt:
        mime = to_mime(message)
        try:
            async with self._client() as smtp:
                _, response = await smtp.send_message(mime)
        except (aiosmtplib.SMTPException, OSError) as e:
            error = _wrap(e, SendError, "SMTP error during message delivery")
            logger.error(f"{error.message} (to={message.recipient}, code={error.code})")
            raise error from e

        logger.debug(f"Message sent successfully to {message.recipient}")
        return SendReceipt(message_id=mime["Message-ID"], response=response)

    def describe(self) -> Dict[str, Any]:
        return {
            **super().describe(),
            **self.config.public_dict(),
            "validate_certs": self.validate_certs,
        }
