"""
Email service untuk SocialAuth.
Implementasi Notifier di atas SMTP dengan template Jinja2.
"""

from datetime import datetime
import logging
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional, Tuple, Dict, Any
import asyncio
from functools import partial
import jinja2
from markupsafe import escape
from pathlib import Path

from socialauth.core.config import settings

logger = logging.getLogger(__name__)


class EmailService:
    """
    Service class untuk email operations.
    Menangani template rendering dan email sending.
    Kegagalan SMTP di-log dan tidak di-raise ke caller.
    """

    def __init__(self, template_dir: Optional[Path] = None):
        """Initialize email service dengan template engine."""
        template_dir = template_dir or Path(__file__).parent.parent / "templates" / "emails"
        self.template_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            autoescape=jinja2.select_autoescape(["html"])
        )

        # Base context untuk semua email
        self.base_context = {
            "app_name": settings.APP_NAME,
            "support_email": settings.EMAIL_FROM_ADDRESS,
            "year": datetime.now().year
        }

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: Optional[str] = None
    ) -> bool:
        """
        Send email menggunakan SMTP.

        Args:
            to_email: Recipient email
            subject: Email subject
            html_body: HTML content
            text_body: Plain text content (optional)

        Returns:
            True jika email berhasil dikirim
        """
        # Run in thread pool karena smtplib blocking
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None,
            partial(
                self._send_email_sync,
                to_email=to_email,
                subject=subject,
                html_body=html_body,
                text_body=text_body
            )
        )

    def _send_email_sync(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: Optional[str] = None
    ) -> bool:
        try:
            msg = MIMEMultipart("alternative")
            msg["Subject"] = subject
            msg["From"] = f"{settings.EMAIL_FROM_NAME} <{settings.EMAIL_FROM_ADDRESS}>"
            msg["To"] = to_email

            if text_body:
                msg.attach(MIMEText(text_body, "plain", "utf-8"))
            msg.attach(MIMEText(html_body, "html", "utf-8"))

            if settings.SMTP_SSL:
                server = smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT)
            else:
                server = smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT)
                if settings.SMTP_TLS:
                    server.starttls()

            try:
                if settings.SMTP_USER and settings.SMTP_PASSWORD:
                    server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
                server.send_message(msg)
            finally:
                server.quit()

            logger.info(f"Email '{subject}' sent to {to_email}")
            return True

        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email '{subject}' to {to_email}: {e}")
            return False

    def render(
        self,
        template_name: str,
        context: Dict[str, Any],
        fallback_html: str,
        fallback_text: str
    ) -> Tuple[str, str]:
        """
        Render template HTML dan text.

        Args:
            template_name: Nama template tanpa ekstensi
            context: Template context
            fallback_html: Dipakai jika template tidak ditemukan
            fallback_text: Dipakai jika template tidak ditemukan

        Returns:
            Tuple (html_body, text_body)
        """
        context = {**self.base_context, **context}
        try:
            html_body = self.template_env.get_template(f"{template_name}.html").render(**context)
            text_body = self.template_env.get_template(f"{template_name}.txt").render(**context)
        except jinja2.TemplateNotFound:
            logger.warning(f"Email template '{template_name}' not found, using fallback")
            html_body, text_body = fallback_html, fallback_text
        return html_body, text_body

    async def send_verification(self, email: str, name: str, token: str) -> None:
        """
        Send email verification email.

        Args:
            email: Alamat tujuan
            name: Display name akun
            token: Verification token
        """
        verification_url = f"{settings.FRONTEND_URL}/verify-email?token={token}"
        expires_hours = settings.EMAIL_VERIFICATION_TOKEN_EXPIRE_HOURS

        html_body, text_body = self.render(
            "verification",
            {
                "name": name,
                "verification_url": verification_url,
                "expires_hours": expires_hours
            },
            fallback_html=(
                f"<h2>Welcome to {settings.APP_NAME}, {escape(name)}!</h2>"
                f"<p>Please verify your email address: <a href=\"{verification_url}\">Verify Email</a></p>"
                f"<p>This link will expire in {expires_hours} hours.</p>"
            ),
            fallback_text=(
                f"Welcome to {settings.APP_NAME}, {name}!\n\n"
                f"Please verify your email address by visiting:\n{verification_url}\n\n"
                f"This link will expire in {expires_hours} hours.\n"
            )
        )

        await self.send_email(
            to_email=email,
            subject=f"Verify your {settings.APP_NAME} account",
            html_body=html_body,
            text_body=text_body
        )

    async def send_password_reset(self, email: str, name: str, token: str) -> None:
        """
        Send password reset email.

        Args:
            email: Alamat tujuan
            name: Display name akun
            token: Password reset token
        """
        reset_url = f"{settings.FRONTEND_URL}/reset-password?token={token}"
        expires_hours = settings.PASSWORD_RESET_TOKEN_EXPIRE_HOURS

        html_body, text_body = self.render(
            "password_reset",
            {
                "name": name,
                "reset_url": reset_url,
                "expires_hours": expires_hours
            },
            fallback_html=(
                f"<h2>Password reset for {escape(name)}</h2>"
                f"<p><a href=\"{reset_url}\">Reset Password</a></p>"
                f"<p>This link will expire in {expires_hours} hour(s).</p>"
            ),
            fallback_text=(
                f"Password reset for {name}\n\n"
                f"Reset your password by visiting:\n{reset_url}\n\n"
                f"This link will expire in {expires_hours} hour(s).\n"
            )
        )

        await self.send_email(
            to_email=email,
            subject=f"Reset your {settings.APP_NAME} password",
            html_body=html_body,
            text_body=text_body
        )

    async def send_welcome(self, email: str, name: str) -> None:
        """Send welcome email setelah verifikasi berhasil."""
        html_body, text_body = self.render(
            "welcome",
            {"name": name, "login_url": f"{settings.FRONTEND_URL}/login"},
            fallback_html=f"<h2>Welcome to {settings.APP_NAME}, {escape(name)}!</h2>",
            fallback_text=f"Welcome to {settings.APP_NAME}, {name}!\n"
        )

        await self.send_email(
            to_email=email,
            subject=f"Welcome to {settings.APP_NAME}!",
            html_body=html_body,
            text_body=text_body
        )
