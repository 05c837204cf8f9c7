import logging
import smtplib
from email.mime.text import MIMEText
from typing import Iterable

from ..config import settings


logger = logging.getLogger(__name__)


def mail_configured() -> bool:
    return bool(settings.EMAIL_HOST and settings.EMAIL_HOST_USER and settings.EMAIL_HOST_PASSWORD)


def send_mail(subject: str, body: str, recipients: Iterable[str]) -> bool:
    to = [r for r in recipients if r]
    if not to or not mail_configured():
        return False
    msg = MIMEText(body, "plain", "utf-8")
    msg["Subject"] = subject
    msg["From"] = settings.EMAIL_FROM
    msg["To"] = ", ".join(to)
    try:
        with smtplib.SMTP(settings.EMAIL_HOST, settings.EMAIL_PORT, timeout=10) as smtp:
            smtp.starttls()
            smtp.login(settings.EMAIL_HOST_USER, settings.EMAIL_HOST_PASSWORD)
            smtp.sendmail(settings.EMAIL_FROM, to, msg.as_string())
    except (smtplib.SMTPException, OSError) as exc:
        logger.warning("mail send failed subject=%s: %s", subject, exc)
        return False
    return True
