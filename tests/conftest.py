"""
Shared fixtures for the contact relay test suite.
"""

import pytest

from app import create_app
from core.errors import TransportFault
from core.rate_limiter import MemoryCounterStore
from services.mail_transport import DeliveryReceipt


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class RecordingTransport:
    """Transport double that records every message it is asked to send."""

    def __init__(self, fail_on=None):
        self.sent = []
        self.attempts = []
        self.fail_on = fail_on

    def send(self, message):
        self.attempts.append(message)
        if self.fail_on is not None and len(self.attempts) == self.fail_on:
            raise TransportFault(detail='535 Authentication credentials invalid')
        self.sent.append(message)
        return DeliveryReceipt(
            recipient=message.recipient,
            message_id=f'<{len(self.sent)}@test>',
            response='250 OK',
        )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def counter_store(clock):
    return MemoryCounterStore(clock=clock)


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def app(transport, counter_store):
    return create_app('testing', transport=transport, counter_store=counter_store)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def valid_payload():
    return {'name': 'Ada', 'email': 'ada@example.com', 'message': 'Hello'}
