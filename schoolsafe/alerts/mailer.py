import html
import logging
import smtplib
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from schoolsafe.config import settings

logger = logging.getLogger(__name__)

LEVEL_COLORS = {"high": "#ff4d4d", "medium": "#ffa64d", "low": "#4d94ff"}

def alert_subject(message: str, level: str) -> str:
    return f"SchoolSafe Alert: {level.upper()} - {message[:30]}..."

def alert_html(message: str, level: str) -> str:
    color = LEVEL_COLORS.get(level, LEVEL_COLORS["medium"])
    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
      <h2 style="color: {color};">SchoolSafe Emergency Alert</h2>
      <p><strong>Level:</strong> {level.upper()}</p>
      <p><strong>Message:</strong> {html.escape(message)}</p>
      <p><strong>Time:</strong> {datetime.utcnow():%Y-%m-%d %H:%M} UTC</p>
      <hr>
      <p style="font-size: 12px; color: #888;">
        This is an automated message from the SchoolSafe preparedness system.
      </p>
    </div>
    """

def send_email(to_email: str, subject: str, text: str, html: str | None = None) -> bool:
    if not settings.smtp_host:
        logger.warning("email simulation: to=%s subject=%s", to_email, subject)
        return True

    msg = MIMEMultipart("alternative")
    msg["From"] = settings.mail_from
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.attach(MIMEText(text, "plain"))
    if html:
        msg.attach(MIMEText(html, "html"))

    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=15) as server:
            server.starttls()
            if settings.smtp_user:
                server.login(settings.smtp_user, settings.smtp_password or "")
            server.send_message(msg)
        logger.info("email sent to %s", to_email)
        return True
    except (smtplib.SMTPException, OSError) as e:
        logger.error("failed to send email to %s: %s", to_email, e)
        return False

def send_alert_email(recipients: list[str], message: str, level: str = "medium") -> list[dict]:
    """Mail one alert to every recipient; failures are reported, never raised."""
    subject = alert_subject(message, level)
    html = alert_html(message, level)
    return [
        {"recipient": email, "success": send_email(email, subject, message, html)}
        for email in recipients
    ]
