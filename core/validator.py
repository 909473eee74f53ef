# core/validator.py
"""
Submission validation and sanitization

Tag stripping and the character blacklist are heuristic filters, not an HTML
parser. They reject or clean the obvious cases before anything reaches a
mail body.
"""

import re
import logging
from dataclasses import dataclass
from typing import Any, Dict

from email_validator import validate_email, EmailNotValidError

from core.errors import MissingField, InvalidEmailFormat, SuspiciousInput

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('name', 'email', 'message')

TAG_PATTERN = re.compile(r'<[^>]*>')
SUSPICIOUS_CHARACTERS = frozenset('$\'";')


@dataclass(frozen=True)
class Submission:
    """One sanitized contact-form payload"""
    name: str
    email: str
    message: str


def strip_tags(value: str) -> str:
    """Remove every ``<...>`` substring; applying it twice changes nothing"""
    return TAG_PATTERN.sub('', value)


def contains_suspicious_characters(value: str) -> bool:
    return any(char in SUSPICIOUS_CHARACTERS for char in value)


def is_valid_email(address: str) -> bool:
    """Syntax-only address check, no DNS lookups"""
    try:
        validate_email(address, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def validate_submission(data: Dict[str, Any]) -> Submission:
    """
    Validate and sanitize a raw submission

    Args:
        data: Request body fields

    Returns:
        Sanitized Submission

    Raises:
        MissingField: a field is absent, not text, or blank
        InvalidEmailFormat: the email does not parse
        SuspiciousInput: name or message contains $ ' " or ;
    """
    fields = {}
    for field_name in REQUIRED_FIELDS:
        value = data.get(field_name) if data else None
        if not isinstance(value, str) or not value.strip():
            raise MissingField(detail=f'missing field: {field_name}')
        fields[field_name] = value.strip()

    name = strip_tags(fields['name']).strip()
    message = strip_tags(fields['message']).strip()
    email = fields['email']

    if not name or not message:
        raise MissingField(detail='field empty after tag stripping')

    if not is_valid_email(email):
        raise InvalidEmailFormat(detail=f'rejected address: {email[:100]}')

    # Only free-text fields are checked against the blacklist
    for field_name, value in (('name', name), ('message', message)):
        if contains_suspicious_characters(value):
            raise SuspiciousInput(detail=f'blacklisted character in {field_name}')

    return Submission(name=name, email=email, message=message)
