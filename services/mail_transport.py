# services/mail_transport.py
"""
SMTP mail transport

Wraps aiosmtplib behind a synchronous ``send`` so request handlers can await
each delivery in turn. Connection, TLS and authentication failures surface as
TransportFault; nothing is retried here.
"""

import asyncio
import uuid
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from email.mime.text import MIMEText
from email.policy import SMTP as SMTP_POLICY
from email.utils import formatdate

import aiosmtplib

from core.errors import TransportFault
from core.messages import OutboundMessage

logger = logging.getLogger(__name__)


@dataclass
class DeliveryReceipt:
    """Result of a successful send"""
    recipient: str
    message_id: str
    response: str


def build_mime_message(message: OutboundMessage, domain: str = 'localhost') -> MIMEText:
    """Create a UTF-8 plain-text MIME message with proper headers"""
    msg = MIMEText(message.body, 'plain', 'utf-8', policy=SMTP_POLICY)
    msg['Subject'] = message.subject
    msg['From'] = message.sender
    msg['To'] = message.recipient
    msg['Date'] = formatdate(localtime=True)
    msg['Message-ID'] = f"<{uuid.uuid4()}@{domain}>"

    if message.reply_to:
        msg['Reply-To'] = message.reply_to

    return msg


class SMTPMailTransport:
    """
    Deliver OutboundMessages through an SMTP relay

    Port 465 uses implicit TLS, port 587 upgrades with STARTTLS.
    """

    def __init__(self,
                 host: str,
                 port: int = 465,
                 username: Optional[str] = None,
                 password: Optional[str] = None,
                 timeout: float = 30,
                 validate_certs: bool = True):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.timeout = timeout
        self.validate_certs = validate_certs

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'SMTPMailTransport':
        return cls(
            host=config['SMTP_HOST'],
            port=config['SMTP_PORT'],
            username=config.get('EMAIL_USER'),
            password=config.get('EMAIL_PASS'),
            timeout=config.get('SMTP_TIMEOUT', 30),
        )

    @property
    def domain(self) -> str:
        if self.username and '@' in self.username:
            return self.username.rsplit('@', 1)[1]
        return self.host

    def send(self, message: OutboundMessage) -> DeliveryReceipt:
        """
        Send one message and wait for the relay to accept it

        Raises:
            TransportFault: on any SMTP, TLS or network failure
        """
        try:
            msg = build_mime_message(message, self.domain)
        except (ValueError, TypeError) as e:
            raise TransportFault(detail=f"Could not build message for {message.recipient}: {e}") from e

        try:
            response = asyncio.run(self._async_send(msg))
        except (aiosmtplib.SMTPException, OSError, asyncio.TimeoutError) as e:
            raise TransportFault(detail=f"SMTP delivery to {message.recipient} failed: {e}") from e

        logger.debug(f"SMTP accepted message {msg['Message-ID']} for {message.recipient}")
        return DeliveryReceipt(
            recipient=message.recipient,
            message_id=str(msg['Message-ID']),
            response=response,
        )

    async def _async_send(self, msg: MIMEText) -> str:
        smtp = aiosmtplib.SMTP(
            hostname=self.host,
            port=self.port,
            timeout=self.timeout,
            use_tls=self.port == 465,  # Implicit TLS for port 465
            start_tls=False,
            validate_certs=self.validate_certs,
        )

        await smtp.connect()
        try:
            # STARTTLS if needed (port 587)
            if self.port == 587:
                await smtp.starttls()

            if self.username and self.password:
                await smtp.login(self.username, self.password)

            _, response = await smtp.send_message(msg)
        finally:
            if smtp.is_connected:
                smtp.close()

        return response
