# services/dispatcher.py
"""
Two-step dispatch of contact notifications

The admin notification is sent first; the acknowledgment is only attempted
once the admin send has been accepted. The first failure stops the pipeline
and no partial-success state is reported.
"""

import logging
from typing import List

from core.errors import TransportFault
from core.messages import OutboundMessage, build_admin_notification, build_acknowledgment
from core.validator import Submission
from services.mail_transport import DeliveryReceipt

logger = logging.getLogger(__name__)


class ContactDispatcher:
    """Build and send the admin notification and the submitter acknowledgment"""

    def __init__(self, transport, sender: str, admin_recipient: str, signature: str):
        self.transport = transport
        self.sender = sender
        self.admin_recipient = admin_recipient
        self.signature = signature

    def build_messages(self, submission: Submission) -> List[OutboundMessage]:
        return [
            build_admin_notification(submission, self.sender, self.admin_recipient),
            build_acknowledgment(submission, self.sender, self.signature),
        ]

    def dispatch(self, submission: Submission) -> List[DeliveryReceipt]:
        """
        Send both messages in order

        Args:
            submission: Validated submission

        Returns:
            One DeliveryReceipt per message, admin first

        Raises:
            TransportFault: when either send fails
        """
        receipts = []
        for step, message in zip(('admin', 'acknowledgment'), self.build_messages(submission)):
            try:
                receipts.append(self.transport.send(message))
            except TransportFault as e:
                logger.error(f"Dispatch failed at {step} step: {e}", exc_info=True)
                raise
            except Exception as e:
                logger.error(f"Dispatch failed at {step} step: {e}", exc_info=True)
                raise TransportFault(detail=f"{step} send failed: {e}") from e

        logger.info(f"Contact notifications sent for {submission.email}")
        return receipts
