# ===== app/services/email/email_service.py =====
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from html import escape
from typing import Optional
import logging

from app.config.settings import settings

logger = logging.getLogger(__name__)

VISIT_INVITE_SUBJECT = "Your visit has been scheduled"


class EmailService:
    """Sends transactional email to consumers over SMTP"""

    @staticmethod
    def _get_smtp_connection() -> smtplib.SMTP:
        """Open an authenticated SMTP connection"""
        try:
            if settings.EMAIL_USE_TLS:
                server = smtplib.SMTP(settings.EMAIL_HOST, settings.EMAIL_PORT, timeout=30)
                server.starttls()
            else:
                server = smtplib.SMTP_SSL(settings.EMAIL_HOST, settings.EMAIL_PORT, timeout=30)

            if settings.EMAIL_USERNAME and settings.EMAIL_PASSWORD:
                server.login(settings.EMAIL_USERNAME, settings.EMAIL_PASSWORD)

            return server
        except Exception as e:
            logger.error(f"Failed to connect to SMTP server {settings.EMAIL_HOST}:{settings.EMAIL_PORT}: {e}")
            raise

    @staticmethod
    def send_email(to_email: str, subject: str, html_content: str, plain_text: Optional[str] = None) -> bool:
        """
        Send a single email.

        Args:
            to_email: Recipient address
            subject: Subject line
            html_content: HTML body
            plain_text: Optional plain-text alternative

        Returns:
            bool: True once the SMTP server accepted the message
        """
        msg = MIMEMultipart('alternative')
        msg['Subject'] = subject
        msg['From'] = f"{settings.EMAIL_FROM_NAME} <{settings.EMAIL_FROM_ADDRESS}>"
        msg['To'] = to_email

        # HTML part must be attached last
        if plain_text:
            msg.attach(MIMEText(plain_text, 'plain'))
        msg.attach(MIMEText(html_content, 'html'))

        server = EmailService._get_smtp_connection()
        try:
            server.sendmail(settings.EMAIL_FROM_ADDRESS, [to_email], msg.as_string())
        finally:
            server.quit()

        logger.info(f"Email '{subject}' sent to {to_email}")
        return True

    @staticmethod
    def send_visit_invite_email(email: str, consumer_name: str, when: str, address: str) -> bool:
        """Tell a consumer when an agent will come by for the inspection visit"""
        display_name = escape(consumer_name or "there")
        safe_when = escape(when)
        safe_address = escape(address)

        html_content = f"""
        <!DOCTYPE html>
        <html>
        <head>
            <meta charset="UTF-8">
            <meta name="viewport" content="width=device-width, initial-scale=1.0">
        </head>
        <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
            <div style="background-color: #1f6feb; padding: 30px; text-align: center; border-radius: 10px 10px 0 0;">
                <h1 style="color: white; margin: 0; font-size: 26px;">Visit scheduled</h1>
            </div>

            <div style="background-color: #ffffff; padding: 30px; border: 1px solid #e0e0e0; border-top: none; border-radius: 0 0 10px 10px;">
                <h2 style="color: #333; margin-top: 0;">Hi {display_name},</h2>

                <p style="font-size: 16px; color: #555;">
                    We have scheduled a visit to take a look at your request.
                </p>

                <table style="font-size: 16px; color: #333; margin: 20px 0;">
                    <tr>
                        <td style="padding: 4px 16px 4px 0; color: #777;">When</td>
                        <td style="padding: 4px 0;"><strong>{safe_when}</strong></td>
                    </tr>
                    <tr>
                        <td style="padding: 4px 16px 4px 0; color: #777;">Where</td>
                        <td style="padding: 4px 0;"><strong>{safe_address}</strong></td>
                    </tr>
                </table>

                <p style="font-size: 14px; color: #777;">
                    Can't make it? Reply to this email and we will find another moment.
                </p>
            </div>
        </body>
        </html>
        """

        plain_text = f"""
        Hi {consumer_name or "there"},

        We have scheduled a visit to take a look at your request.

        When:  {when}
        Where: {address}

        Can't make it? Reply to this email and we will find another moment.
        """

        return EmailService.send_email(
            to_email=email,
            subject=VISIT_INVITE_SUBJECT,
            html_content=html_content,
            plain_text=plain_text
        )
