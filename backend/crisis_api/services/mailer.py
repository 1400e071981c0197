"""
Crisis Reporting API - OTP Email Delivery

Sends verification and password-reset codes over SMTP with aiosmtplib.
When SMTP credentials are not configured the send is skipped with a warning
so signup and reset flows keep working in development.
"""
import logging
import os
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import aiosmtplib

from ..auth import OTP_EXPIRE_MINUTES

logger = logging.getLogger(__name__)

SMTP_HOST = os.getenv("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER", "")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
EMAIL_FROM = os.getenv("EMAIL_FROM", SMTP_USER)

OTP_PURPOSES = {
    "verify": {
        "subject": "Verify Your Email Address",
        "title": "Email Verification",
        "line": "Please use the verification code below to verify your email address.",
        "color": "#22c55e",
    },
    "reset": {
        "subject": "Password Reset Verification",
        "title": "Password Reset",
        "line": "Please use the verification code below to reset your password.",
        "color": "#004aad",
    },
}


def is_configured() -> bool:
    return bool(SMTP_USER and SMTP_PASSWORD)


def render_otp_email(otp: str, purpose: str) -> tuple:
    """Return (subject, html, text) for an OTP email."""
    if purpose not in OTP_PURPOSES:
        raise ValueError(f"Unknown OTP email purpose: {purpose}")
    copy = OTP_PURPOSES[purpose]

    html = f"""
<div style="font-family: 'Segoe UI', Arial, sans-serif; background-color: #f4f6f8; padding: 40px;">
  <div style="max-width: 520px; margin: auto; background: #ffffff; border-radius: 10px;">
    <div style="background: {copy['color']}; padding: 20px 0; text-align: center;">
      <h2 style="color: white; margin: 0; font-size: 20px;">{copy['title']}</h2>
    </div>
    <div style="padding: 30px; color: #333333;">
      <p style="font-size: 15px; color: #555;">{copy['line']}</p>
      <div style="text-align: center; margin: 30px 0;">
        <div style="display: inline-block; background: {copy['color']}; color: white; font-size: 28px;
                    font-weight: bold; letter-spacing: 6px; padding: 14px 40px; border-radius: 8px;">
          {otp}
        </div>
      </div>
      <p style="font-size: 14px; color: #555; text-align: center;">
        This code will expire in <strong>{OTP_EXPIRE_MINUTES} minutes</strong>.
      </p>
      <p style="font-size: 14px; color: #555;">If you did not request this, please ignore this email.</p>
    </div>
  </div>
</div>
"""
    text = (
        f"{copy['title']}\n\n{copy['line']}\n\n"
        f"Code: {otp}\n\nThis code will expire in {OTP_EXPIRE_MINUTES} minutes."
    )
    return copy["subject"], html, text


async def send_otp_email(to_email: str, otp: str, purpose: str) -> bool:
    """
    Email an OTP code. Returns True when the message was handed to the SMTP
    server, False when delivery was skipped.

    SMTP failures propagate so the caller can report them.
    """
    subject, html, text = render_otp_email(otp, purpose)

    if not is_configured():
        logger.warning(f"SMTP not configured, skipping {purpose} email to {to_email}")
        return False

    message = MIMEMultipart("alternative")
    message["From"] = EMAIL_FROM
    message["To"] = to_email
    message["Subject"] = subject
    message.attach(MIMEText(text, "plain"))
    message.attach(MIMEText(html, "html"))

    await aiosmtplib.send(
        message,
        hostname=SMTP_HOST,
        port=SMTP_PORT,
        username=SMTP_USER,
        password=SMTP_PASSWORD,
        start_tls=True,
    )
    logger.info(f"Sent {purpose} email to {to_email}")
    return True
