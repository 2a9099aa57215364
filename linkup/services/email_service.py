# linkup/services/email_service.py
"""
Mail dispatcher for one-time codes.

Best effort: with SMTP unconfigured the code is written to the log instead,
which keeps local development usable without a mail server.
"""
import logging
import smtplib
from email.message import EmailMessage

from starlette.concurrency import run_in_threadpool

from linkup.core.config import settings

logger = logging.getLogger(__name__)


class EmailDispatcher:
    def _send_sync(self, message: EmailMessage) -> None:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=10) as smtp:
            smtp.starttls()
            smtp.login(settings.SMTP_USER, settings.SMTP_PASS)
            smtp.send_message(message)

    async def send_otp(self, email: str, code: str, purpose: str) -> None:
        if not settings.smtp_configured:
            logger.info("OTP for %s (%s): %s", email, purpose, code)
            return

        message = EmailMessage()
        message["From"] = settings.EMAIL_FROM
        message["To"] = email
        message["Subject"] = f"Your {settings.PROJECT_NAME} {purpose} code"
        message.set_content(
            f"Your verification code is {code}. "
            f"It expires in {settings.OTP_EXP_MINUTES} minutes."
        )
        await run_in_threadpool(self._send_sync, message)


def get_email_dispatcher() -> EmailDispatcher:
    return EmailDispatcher()
