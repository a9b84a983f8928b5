"""
Email Service for FAST Finder
=============================
Sends the one-time codes that drive account verification and password
reset. Delivery goes through SMTP (STARTTLS) with the EMAIL_USER/EMAIL_PASS
credential pair.

Sends never raise: callers get ``True`` when the message was handed to the
SMTP server and ``False`` otherwise, and decide for themselves whether a
failed send is fatal.
"""

import aiosmtplib
from html import escape
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional

from fastfinder.core.config import Settings, settings as default_settings
from fastfinder.core.logging_config import logger


class EmailService:
    """Async email service using SMTP"""

    def __init__(self, config: Optional[Settings] = None):
        config = config or default_settings
        self.smtp_host = config.SMTP_HOST
        self.smtp_port = config.SMTP_PORT
        self.smtp_user = config.EMAIL_USER
        self.smtp_password = config.EMAIL_PASS
        self.from_name = config.EMAIL_FROM_NAME
        self.app_url = config.APP_URL.rstrip("/")
        self.verification_minutes = config.VERIFICATION_CODE_EXPIRE_MINUTES
        self.reset_code_minutes = config.RESET_CODE_EXPIRE_MINUTES
        self.reset_token_minutes = config.RESET_TOKEN_EXPIRE_MINUTES
        self.log_codes = not config.is_production

    @property
    def is_configured(self) -> bool:
        """Check if email service is properly configured"""
        return bool(self.smtp_user and self.smtp_password)

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> bool:
        """
        Send an email asynchronously.

        Returns True if successful, False otherwise.
        """
        if not self.is_configured:
            logger.warning("[Email] Email service not configured, skipping email send")
            return False

        try:
            message = MIMEMultipart("alternative")
            message["From"] = f'"{self.from_name}" <{self.smtp_user}>'
            message["To"] = to_email
            message["Subject"] = subject

            # Plain text first so clients prefer the HTML part
            if text_content:
                message.attach(MIMEText(text_content, "plain"))
            message.attach(MIMEText(html_content, "html"))

            await aiosmtplib.send(
                message,
                hostname=self.smtp_host,
                port=self.smtp_port,
                username=self.smtp_user,
                password=self.smtp_password,
                start_tls=True
            )

            logger.info(f"[Email/SMTP] Successfully sent email to {to_email}: {subject}")
            return True

        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(f"[Email/SMTP] Failed to send email to {to_email}: {e}")
            return False

    async def send_verification_email(self, to_email: str, name: str, code: str) -> bool:
        if self.log_codes:
            logger.debug(f"[Email] Verification code for {to_email}: {code}")

        subject = f"Verify Your Email - {self.from_name}"
        html_content = f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
            <h2 style="color: #4f46e5;">Welcome to {self.from_name}!</h2>
            <p>Hello {escape(name)},</p>
            <p>Thank you for registering. To complete your registration, please use the verification code below:</p>
            <div style="background-color: #f3f4f6; padding: 15px; border-radius: 5px; text-align: center; margin: 20px 0;">
                <h3 style="font-size: 24px; margin: 0; letter-spacing: 5px;">{code}</h3>
            </div>
            <p>This code will expire in {self.verification_minutes} minutes.</p>
            <p>If you did not request this verification, please ignore this email.</p>
            <p>Best regards,<br>The {self.from_name} Team</p>
        </div>
        """
        text_content = (
            f"Hello {name},\n\n"
            f"Your verification code is {code}. "
            f"It expires in {self.verification_minutes} minutes.\n"
        )
        return await self.send_email(to_email, subject, html_content, text_content)

    async def send_password_reset_email(
        self,
        to_email: str,
        name: str,
        code: str,
        token: Optional[str] = None
    ) -> bool:
        if self.log_codes:
            logger.debug(f"[Email] Password reset code for {to_email}: {code}")

        subject = f"Reset Your Password - {self.from_name}"
        link_block = ""
        link_text = ""
        if token:
            reset_url = f"{self.app_url}/reset-password?token={token}"
            link_block = f"""
            <p>Or open the link below (valid for {self.reset_token_minutes} minutes):</p>
            <div style="text-align: center; margin: 30px 0;">
                <a href="{reset_url}" style="background-color: #4f46e5; color: white; padding: 12px 24px; text-decoration: none; border-radius: 5px; font-weight: bold;">Reset Password</a>
            </div>
            """
            link_text = f"Or open {reset_url}\n"

        html_content = f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
            <h2 style="color: #4f46e5;">Password Reset Request</h2>
            <p>Hello {escape(name)},</p>
            <p>We received a request to reset your password. Use the code below:</p>
            <div style="background-color: #f3f4f6; padding: 15px; border-radius: 5px; text-align: center; margin: 20px 0;">
                <h3 style="font-size: 24px; margin: 0; letter-spacing: 5px;">{code}</h3>
            </div>
            <p>This code will expire in {self.reset_code_minutes} minutes.</p>
            {link_block}
            <p>If you did not request a password reset, please ignore this email.</p>
            <p>Best regards,<br>The {self.from_name} Team</p>
        </div>
        """
        text_content = (
            f"Hello {name},\n\n"
            f"Your password reset code is {code}. "
            f"It expires in {self.reset_code_minutes} minutes.\n"
            f"{link_text}"
        )
        return await self.send_email(to_email, subject, html_content, text_content)


email_service = EmailService()
