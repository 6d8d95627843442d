"""
Email Service
Transactional emails (password reset flow)
"""

import logging
import aiosmtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from fastapi import HTTPException, status
from app.config import settings

logger = logging.getLogger(__name__)


class EmailService:
    """Service for sending emails"""

    @staticmethod
    def _smtp_configured() -> bool:
        return bool(settings.SMTP_HOST and settings.SMTP_USER and settings.SMTP_PASSWORD)

    @staticmethod
    async def send_email(to: str, subject: str, body: str) -> bool:
        """
        Send a plain text email

        Args:
            to: Recipient email
            subject: Subject line
            body: Plain text body

        Returns:
            True once the message is handed to the SMTP server (or logged in development)

        Raises:
            HTTPException: 500 when the SMTP server rejects the message
        """
        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = settings.EMAIL_FROM
        message["To"] = to
        message.attach(MIMEText(body, "plain"))

        if not EmailService._smtp_configured():
            # Development mode - no SMTP configured
            logger.info("EMAIL (development mode) to=%s subject=%s\n%s", to, subject, body)
            return True

        try:
            async with aiosmtplib.SMTP(hostname=settings.SMTP_HOST, port=settings.SMTP_PORT) as smtp:
                await smtp.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
                await smtp.sendmail(settings.EMAIL_FROM, to, message.as_string())
        except aiosmtplib.SMTPException as e:
            logger.error("Email to %s failed: %s", to, e)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Email could not be sent"
            )

        logger.info("Email sent to %s: %s", to, subject)
        return True

    @staticmethod
    async def send_password_reset_email(to: str, reset_url: str) -> bool:
        body = (
            "Click the link to reset your password:\n\n"
            f"{reset_url}\n\n"
            f"This link is valid for {settings.PASSWORD_RESET_TOKEN_MINUTES} minutes."
        )
        return await EmailService.send_email(to, "Password Reset Request", body)

    @staticmethod
    async def send_password_reset_success_email(to: str) -> bool:
        body = (
            "Your password has been successfully reset. If you did not perform this action, "
            "please contact support immediately."
        )
        return await EmailService.send_email(to, "Password Reset Successful", body)


# Create singleton instance
email_service = EmailService()
