import logging
import smtplib
from email.message import EmailMessage

from app.notifications.providers.base import DeliveryError
from app.notifications.types import MailMessage

logger = logging.getLogger("notifications")


class SmtpMailProvider:
    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        sender: str = "alerts@localhost",
        timeout_s: float = 5.0,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.sender = sender
        self.timeout_s = timeout_s

    def build(self, destination: str, message: MailMessage) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = message.subject
        msg["From"] = self.sender
        msg["To"] = destination
        msg.set_content(message.text_body())
        return msg

    def send(self, destination: str | None, message: MailMessage) -> None:
        if not destination:
            raise DeliveryError("mail: no recipient address")
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout_s) as smtp:
                if self.use_tls:
                    smtp.starttls()
                if self.username and self.password:
                    smtp.login(self.username, self.password)
                smtp.send_message(self.build(destination, message))
        except (smtplib.SMTPException, OSError) as exc:
            raise DeliveryError(f"mail: {exc}") from exc
        logger.info("mail sent to %s subject=%s", destination, message.subject)
