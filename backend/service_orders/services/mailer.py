"""SMTP mail transport for report delivery."""
from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr

from ..domain_errors import DomainError

logger = logging.getLogger(__name__)


class Mailer:
    """Sends one message with a single attachment. Port 465 uses implicit TLS."""

    def __init__(
        self,
        *,
        host: str | None,
        port: int,
        user: str | None,
        password: str | None,
        sender_name: str = "Serviços",
        timeout: float = 30,
    ) -> None:
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender_name = sender_name
        self.timeout = timeout

    def build_message(
        self,
        *,
        to: str,
        subject: str,
        body: str,
        attachment: bytes,
        filename: str,
    ) -> EmailMessage:
        message = EmailMessage()
        message["From"] = formataddr((self.sender_name, self.user or ""))
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)
        message.add_attachment(attachment, maintype="application", subtype="pdf", filename=filename)
        return message

    def _connect(self) -> smtplib.SMTP:
        if self.port == 465:
            return smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)
        smtp = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        smtp.ehlo()
        if smtp.has_extn("starttls"):
            smtp.starttls()
            smtp.ehlo()
        return smtp

    def send(self, *, to: str, subject: str, body: str, attachment: bytes, filename: str) -> None:
        if not self.host:
            raise DomainError(
                code="MAIL_NOT_CONFIGURED",
                http_status=500,
                message="Mail transport is not configured (SMTP_HOST)",
            )

        message = self.build_message(to=to, subject=subject, body=body, attachment=attachment, filename=filename)
        try:
            with self._connect() as smtp:
                if self.user and self.password:
                    smtp.login(self.user, self.password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            raise DomainError(
                code="MAIL_SEND_FAILED",
                http_status=500,
                message=f"Failed to send e-mail: {exc}",
            ) from exc

        logger.info("mail.sent file=%s to=%s", filename, to)
