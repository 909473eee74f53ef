# core/errors.py
"""
Exception hierarchy for the contact relay

Every error carries the HTTP status it maps to and the message that is safe
to return to the caller.
"""


class ContactRelayError(Exception):
    """Base exception for contact relay operations"""
    status_code = 500
    message = 'An unexpected error occurred'

    def __init__(self, message: str = None, detail: str = None):
        if message is not None:
            self.message = message
        self.detail = detail
        super().__init__(detail or self.message)


class MissingField(ContactRelayError):
    """A required submission field is absent or blank"""
    status_code = 400
    message = 'All fields are required.'


class InvalidEmailFormat(ContactRelayError):
    """The submitter address does not parse as an email address"""
    status_code = 400
    message = 'Invalid email format.'


class SuspiciousInput(ContactRelayError):
    """Free text contains blacklisted characters"""
    status_code = 400
    message = 'Invalid input detected.'


class RateLimitExceeded(ContactRelayError):
    """A client exceeded one of the rate-limit windows"""
    status_code = 429
    message = 'Too many requests, please try again later.'

    def __init__(self, message: str = None, limit: int = 0, reset_in: int = 0):
        super().__init__(message)
        self.limit = limit
        self.reset_in = reset_in


class TransportFault(ContactRelayError):
    """Mail service communication or authentication failure"""
    status_code = 500
    message = 'Error sending email'
