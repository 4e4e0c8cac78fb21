# cardstudio/infrastructure/email/sendgrid_sender.py
import asyncio
import logging
from concurrent.futures import Executor
from typing import Optional

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from cardstudio.domain.errors import ConfigurationError, ProviderError
from cardstudio.domain.notifications import EmailMessage

logger = logging.getLogger(__name__)


class SendGridEmailSender:
    """Sends `EmailMessage`s through SendGrid on a worker thread.

    When `redirect_to` is set every message is delivered there instead and the
    intended recipient is only logged.
    """

    def __init__(
        self,
        api_key: Optional[str],
        sender: Optional[str],
        executor: Optional[Executor] = None,
        redirect_to: Optional[str] = None,
        client: Optional[SendGridAPIClient] = None,
    ):
        self.sender = sender
        self.executor = executor
        self.redirect_to = redirect_to
        self.client = client or (SendGridAPIClient(api_key) if api_key else None)

    @property
    def configured(self) -> bool:
        return self.client is not None and bool(self.sender)

    def _send_sync(self, message: EmailMessage) -> int:
        recipient = self.redirect_to or message.to
        mail = Mail(
            from_email=self.sender,
            to_emails=recipient,
            subject=message.subject,
            html_content=message.html,
        )
        response = self.client.send(mail)
        status = getattr(response, "status_code", None)
        if status is None or not 200 <= int(status) < 300:
            raise ProviderError(f"SendGrid rejected email to {recipient} (status {status})")
        if self.redirect_to and self.redirect_to != message.to:
            logger.info(f"Email for {message.to} delivered to {self.redirect_to} (redirect mode)")
        return int(status)

    async def send(self, message: EmailMessage) -> int:
        if not self.configured:
            raise ConfigurationError("SENDGRID_API_KEY and EMAIL_SENDER must be set to send email")
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(self.executor, self._send_sync, message)
        except ProviderError:
            raise
        except Exception as e:
            logger.error(f"SendGrid send failed for {message.to}: {e}")
            raise ProviderError(f"Email sending failed: {e}") from e
