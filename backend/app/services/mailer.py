"""Outbound email over SMTP.

Sending is blocking (smtplib), so async callers go through
`Mailer.send_async`, which runs it in the threadpool. There is no retry
and no queue: a failure is reported to the caller and nothing else is
undone.
"""

import logging
import smtplib
from email.message import EmailMessage

from fastapi.concurrency import run_in_threadpool

from app.config import Settings, settings
from app.middleware.exceptions import MailNotConfiguredError, MailTransportError

logger = logging.getLogger("signshop.mail")


class Mailer:
    def __init__(self, config: Settings = settings):
        self.config = config

    @property
    def sender(self) -> str:
        return self.config.smtp_from or self.config.smtp_user or "no-reply@localhost"

    def ensure_configured(self) -> None:
        if not self.config.smtp_configured:
            raise MailNotConfiguredError()

    def new_message(
        self,
        to: str,
        subject: str,
        body: str,
        reply_to: str | None = None,
    ) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        if reply_to:
            msg["Reply-To"] = reply_to
        msg.set_content(body)
        return msg

    def send(self, msg: EmailMessage) -> None:
        self.ensure_configured()
        host, port = self.config.smtp_host, self.config.smtp_port
        try:
            if port == 465:
                with smtplib.SMTP_SSL(host, port) as server:
                    server.login(self.config.smtp_user, self.config.smtp_pass)
                    server.send_message(msg)
            else:
                with smtplib.SMTP(host, port) as server:
                    server.starttls()
                    server.login(self.config.smtp_user, self.config.smtp_pass)
                    server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email to %s: %s", msg["To"], e)
            raise MailTransportError(f"Failed to send email: {e}") from e
        logger.info("Email sent to %s (%s)", msg["To"], msg["Subject"])

    async def send_async(self, msg: EmailMessage) -> None:
        await run_in_threadpool(self.send, msg)


def get_mailer() -> Mailer:
    return Mailer(settings)
