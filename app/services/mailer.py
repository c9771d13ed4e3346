import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any, Dict, Optional

from loguru import logger

from app.core.config import settings
from app.templates.email import render


class SmtpMailer:
    """Send templated notification mails over SMTP.

    ``send`` reports the outcome as a bool. Transport errors are logged and
    returned as failure so callers never see an SMTP exception.
    """

    def __init__(
        self,
        host: str = None,
        port: int = None,
        user: str = None,
        password: str = None,
        use_tls: bool = None,
        from_email: str = None,
    ):
        self.host = host or settings.SMTP_HOST
        self.port = port or settings.SMTP_PORT
        self.user = user if user is not None else settings.SMTP_USER
        self.password = password if password is not None else settings.SMTP_PASSWORD
        self.use_tls = settings.SMTP_USE_TLS if use_tls is None else use_tls
        self.from_email = from_email or settings.MAIL_FROM or self.user
        self.smtp_configured = bool(self.host and self.from_email)

    def build_message(self, address: str, template_name: str, template_data: Dict[str, Any]) -> MIMEMultipart:
        subject, html_content = render(template_name, template_data)
        msg = MIMEMultipart("alternative")
        msg["From"] = self.from_email
        msg["To"] = address
        msg["Subject"] = subject
        msg.attach(MIMEText(html_content, "html"))
        return msg

    def send(
        self,
        address: str,
        template_name: str,
        template_data: Dict[str, Any],
        timeout: Optional[float] = None,
    ) -> bool:
        if not self.smtp_configured:
            logger.warning(f"SMTP not configured, skipping {template_name} mail to {address}")
            return False

        timeout = timeout or settings.MAIL_TIMEOUT_SECONDS
        try:
            msg = self.build_message(address, template_name, template_data)
            with smtplib.SMTP(self.host, self.port, timeout=timeout) as server:
                if self.use_tls:
                    server.starttls()
                if self.user and self.password:
                    server.login(self.user, self.password)
                server.send_message(msg)
            logger.info(f"Sent {template_name} mail to {address}")
            return True
        except (smtplib.SMTPException, OSError, ValueError) as e:
            logger.error(f"Failed to send {template_name} mail to {address}: {str(e)}")
            return False
