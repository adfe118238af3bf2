import html
import aiosmtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from awv.config import settings
from awv.core.logging import logger
from typing import List, Optional


async def send_email(
    to: List[str],
    subject: str,
    body: str,
    html_body: Optional[str] = None
) -> bool:
    """
    Send an email over SMTP.

    Args:
        to: List of recipient email addresses
        subject: Email subject
        body: Plain text email body
        html_body: Optional HTML email body

    Returns:
        bool: True if email sent successfully
    """
    if not settings.email_enabled:
        logger.info(f"SMTP not configured, skipping email to {', '.join(to)}")
        return False

    logger.info(f"Sending email to {', '.join(to)}")
    logger.debug(f"SMTP: {settings.SMTP_HOST}:{settings.SMTP_PORT}, User: {settings.SMTP_USER}")

    message = MIMEMultipart("alternative")
    message["From"] = settings.EMAIL_FROM
    message["To"] = ", ".join(to)
    message["Subject"] = subject

    message.attach(MIMEText(body, "plain"))
    if html_body:
        message.attach(MIMEText(html_body, "html"))

    try:
        await aiosmtplib.send(
            message,
            hostname=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USER,
            password=settings.SMTP_PASSWORD,
            start_tls=True,
        )
        logger.info(f"Email sent successfully to {', '.join(to)}")
        return True
    except aiosmtplib.SMTPAuthenticationError as e:
        logger.error(f"SMTP Authentication failed: {str(e)}")
        logger.error(f"   SMTP User: {settings.SMTP_USER}")
        logger.error(f"   SMTP Host: {settings.SMTP_HOST}:{settings.SMTP_PORT}")
        return False
    except (aiosmtplib.SMTPException, OSError) as e:
        logger.error(f"SMTP error sending email to {to}: {type(e).__name__}: {str(e)}")
        return False


async def send_invitation_email(email: str, name: str, role: str, token: str, invited_by: Optional[str] = None) -> bool:
    """
    Send a user invitation email with the account set-up link.

    Args:
        email: Invitee email address
        name: Invitee name
        role: Role the invitee will have
        token: Invitation token
        invited_by: Name of the inviting administrator

    Returns:
        bool: True if email sent successfully
    """
    invite_link = f"{settings.FRONTEND_URL.rstrip('/')}/register/{token}"
    inviter = invited_by or "An administrator"
    safe_name, safe_inviter = html.escape(name), html.escape(inviter)

    subject = f"You're invited to join {settings.APP_NAME}"

    body = f"""
    Hello {name},

    {inviter} has invited you to join {settings.APP_NAME} as a {role}.

    To set your password and activate your account, open the link below:
    {invite_link}

    This invitation expires in {settings.INVITATION_EXPIRE_HOURS} hours.

    If you were not expecting this invitation, you can ignore this email.

    Best regards,
    The {settings.APP_NAME} Team
    """

    html_body = f"""
    <!DOCTYPE html>
    <html>
    <head>
        <style>
            body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
            .button {{
                display: inline-block;
                padding: 12px 24px;
                background-color: #2563EB;
                color: white;
                text-decoration: none;
                border-radius: 5px;
                margin: 20px 0;
            }}
            .footer {{ margin-top: 30px; font-size: 12px; color: #666; }}
        </style>
    </head>
    <body>
        <div class="container">
            <h2>You're invited to {settings.APP_NAME}</h2>
            <p>Hello {safe_name},</p>
            <p>{safe_inviter} has invited you to join as a <strong>{role}</strong>.</p>
            <a href="{invite_link}" class="button">Accept Invitation</a>
            <p>Or copy and paste this link in your browser:</p>
            <p style="word-break: break-all;">{invite_link}</p>
            <p>This invitation expires in {settings.INVITATION_EXPIRE_HOURS} hours.</p>
            <div class="footer">
                <p>If you were not expecting this invitation, you can ignore this email.</p>
            </div>
        </div>
    </body>
    </html>
    """

    return await send_email([email], subject, body, html_body)
