import html
import logging
import smtplib
from email.mime.text import MIMEText
from email.utils import formataddr

from app.config import settings

logger = logging.getLogger(__name__)

SENDER_NAME = "MMMUT NSS Blood Donation Camp"

EMAIL_TEMPLATE = """
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <div style="background: #b71c1c; padding: 20px; text-align: center;">
    <h1 style="color: white; margin: 0;">{sender}</h1>
  </div>
  <div style="padding: 20px; background: #f9f9f9;">
    <h2 style="color: #333;">{heading}</h2>
    <p>Hello {name},</p>
    {body}
    <hr style="border: none; border-top: 1px solid #eee; margin: 20px 0;">
    <p style="color: #666; font-size: 12px;">This is an automated message from {sender}.</p>
  </div>
</div>
"""


def _render(heading: str, name: str, body: str) -> str:
    return EMAIL_TEMPLATE.format(sender=SENDER_NAME, heading=heading, name=html.escape(name or "there"), body=body)


def send_email(to_email: str, subject: str, html_body: str) -> bool:
    """Deliver an HTML email; returns False instead of raising on failure."""
    if not settings.SMTP_HOST:
        logger.warning("SMTP_HOST not configured; cannot send '%s' to %s", subject, to_email)
        return False

    msg = MIMEText(html_body, "html")
    msg["Subject"] = f"{subject} - {SENDER_NAME}"
    msg["From"] = formataddr((SENDER_NAME, settings.FROM_EMAIL or ""))
    msg["To"] = to_email

    try:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=15) as server:
            server.starttls()
            if settings.SMTP_USER:
                server.login(settings.SMTP_USER, settings.SMTP_PASS or "")
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as exc:
        logger.warning("Email to %s failed: %s", to_email, exc)
        return False

    logger.info("Email '%s' sent to %s", subject, to_email)
    return True


def send_email_otp(to_email: str, otp: str, name: str = "") -> bool:
    body = (
        "<p>Your verification code is:</p>"
        f'<div style="background: white; padding: 20px; text-align: center; margin: 20px 0;">'
        f'<h1 style="color: #b71c1c; font-size: 32px; margin: 0; letter-spacing: 5px;">{otp}</h1></div>'
        f"<p>This code will expire in {settings.OTP_EXPIRE_MINUTES} minutes.</p>"
        "<p>If you didn't request this, please ignore this email.</p>"
    )
    return send_email(to_email, "Email Verification", _render("Email Verification", name, body))


def send_admin_decision_email(to_email: str, name: str | None, approved: bool, reason: str | None = None) -> bool:
    if approved:
        subject = "Admin Access Approved"
        body = (
            "<p>Congratulations! Your admin access request has been approved. "
            "You can now login with admin privileges using the email and password "
            "you provided during the request process.</p>"
            f'<p>You can now login at: <a href="{settings.FRONTEND_URL}/login">Login Here</a></p>'
        )
    else:
        subject = "Admin Access Request Rejected"
        body = "<p>We regret to inform you that your admin access request has been rejected.</p>"
        if reason:
            body += f"<p>Reason: {html.escape(reason)}</p>"
    return send_email(to_email, subject, _render(subject, name or "", body))
