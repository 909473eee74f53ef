# core/messages.py
"""
Outbound message construction for an accepted submission
"""

from dataclasses import dataclass
from typing import Optional

from core.validator import Submission

ACKNOWLEDGMENT_SUBJECT = 'Thank you for contacting us!'


@dataclass(frozen=True)
class OutboundMessage:
    """A plain-text message ready to be handed to the mail transport"""
    sender: str
    recipient: str
    subject: str
    body: str
    reply_to: Optional[str] = None


def single_line(value: str) -> str:
    """Collapse every whitespace run, line breaks included, to one space"""
    return ' '.join(value.split())


def build_admin_notification(submission: Submission, sender: str, admin_recipient: str) -> OutboundMessage:
    """Notification to the administrator mailbox, replies go to the submitter"""
    return OutboundMessage(
        sender=sender,
        recipient=admin_recipient,
        subject=f"New Contact Message from {single_line(submission.name)}",
        body=(
            f"Name: {submission.name}\n"
            f"Email: {submission.email}\n"
            f"\n"
            f"Message:\n"
            f"{submission.message}"
        ),
        reply_to=submission.email,
    )


def build_acknowledgment(submission: Submission, sender: str, signature: str) -> OutboundMessage:
    """Confirmation sent back to the submitter's own address"""
    return OutboundMessage(
        sender=sender,
        recipient=submission.email,
        subject=ACKNOWLEDGMENT_SUBJECT,
        body=(
            f"Hi {submission.name},\n"
            f"\n"
            f"We have received your message and will get back to you soon!\n"
            f"\n"
            f"Your Message:\n"
            f"\"{submission.message}\"\n"
            f"\n"
            f"Best Regards,\n"
            f"{signature}"
        ),
    )
