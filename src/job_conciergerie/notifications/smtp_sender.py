from __future__ import annotations

import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr

from ..common.logging import get_logger
from ..core.constants import EMAIL_SENDER_NAME
from ..core.exceptions import EmailDeliveryError
from .model import Email

LOG = get_logger("job_conciergerie.smtp")


class MailNotConfiguredError(EmailDeliveryError):
    """Raised when SMTP settings are absent."""


@dataclass(frozen=True)
class SMTPSettings:
    host: str
    port: int
    user: str = ""
    password: str = ""
    from_email: str = ""
    timeout: int = 30

    @property
    def use_ssl(self) -> bool:
        # Implicit TLS on 465, STARTTLS everywhere else
        return int(self.port) == 465


class SMTPSender:
    def __init__(self, settings: SMTPSettings):
        self._settings = settings

    def _build_message(self, email: Email) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = email.subject
        message["From"] = formataddr((EMAIL_SENDER_NAME, self._settings.from_email))
        message["To"] = email.to
        message.set_content("Ce message nécessite un client email compatible HTML.")
        message.add_alternative(email.html, subtype="html")
        return message

    def send(self, email: Email) -> None:
        s = self._settings
        if not s.host or not s.from_email:
            raise MailNotConfiguredError("SMTP non configuré")

        message = self._build_message(email)
        context = ssl.create_default_context()
        try:
            if s.use_ssl:
                server = smtplib.SMTP_SSL(s.host, s.port, timeout=s.timeout, context=context)
            else:
                server = smtplib.SMTP(s.host, s.port, timeout=s.timeout)
            try:
                if not s.use_ssl:
                    server.ehlo()
                    if server.has_extn("starttls"):
                        server.starttls(context=context)
                        server.ehlo()
                if s.user:
                    server.login(s.user, s.password)
                server.send_message(message)
            finally:
                server.quit()
        except (smtplib.SMTPException, OSError) as exc:
            LOG.warning("SMTP delivery to %s failed: %s", email.to, exc)
            raise EmailDeliveryError(f"Échec de l'envoi de l'email: {exc}") from exc
