"""
Tests for message construction and the two-step dispatch pipeline.
"""

import pytest

from core.errors import TransportFault
from core.messages import build_admin_notification, build_acknowledgment, ACKNOWLEDGMENT_SUBJECT
from core.validator import Submission
from services.dispatcher import ContactDispatcher

from conftest import RecordingTransport


@pytest.fixture
def submission():
    return Submission(name='Ada', email='ada@example.com', message='Hello')


def make_dispatcher(transport):
    return ContactDispatcher(
        transport=transport,
        sender='relay@example.com',
        admin_recipient='admin@example.com',
        signature='Example Corp',
    )


class TestMessageConstruction:

    def test_admin_notification(self, submission):
        message = build_admin_notification(submission, 'relay@example.com', 'admin@example.com')
        assert message.sender == 'relay@example.com'
        assert message.recipient == 'admin@example.com'
        assert message.reply_to == 'ada@example.com'
        assert message.subject == 'New Contact Message from Ada'
        assert message.body == 'Name: Ada\nEmail: ada@example.com\n\nMessage:\nHello'

    def test_admin_subject_is_a_single_line(self):
        submission = Submission(name='Ada\r\nLovelace\t III', email='ada@example.com', message='Hello')
        message = build_admin_notification(submission, 'relay@example.com', 'admin@example.com')
        assert message.subject == 'New Contact Message from Ada Lovelace III'
        assert 'Name: Ada\r\nLovelace' in message.body

    def test_acknowledgment(self, submission):
        message = build_acknowledgment(submission, 'relay@example.com', 'Example Corp')
        assert message.recipient == 'ada@example.com'
        assert message.subject == ACKNOWLEDGMENT_SUBJECT
        assert message.body.startswith('Hi Ada,')
        assert '"Hello"' in message.body
        assert message.body.endswith('Best Regards,\nExample Corp')
        assert message.reply_to is None


class TestContactDispatcher:

    def test_sends_admin_then_acknowledgment(self, submission):
        transport = RecordingTransport()
        receipts = make_dispatcher(transport).dispatch(submission)

        assert [m.recipient for m in transport.sent] == ['admin@example.com', 'ada@example.com']
        assert [r.recipient for r in receipts] == ['admin@example.com', 'ada@example.com']

    def test_admin_failure_stops_pipeline(self, submission):
        transport = RecordingTransport(fail_on=1)
        with pytest.raises(TransportFault):
            make_dispatcher(transport).dispatch(submission)

        assert len(transport.attempts) == 1
        assert transport.attempts[0].recipient == 'admin@example.com'
        assert transport.sent == []

    def test_acknowledgment_failure_fails_whole_dispatch(self, submission):
        transport = RecordingTransport(fail_on=2)
        with pytest.raises(TransportFault):
            make_dispatcher(transport).dispatch(submission)
        assert len(transport.attempts) == 2

    def test_unexpected_transport_error_becomes_transport_fault(self, submission):
        class BrokenTransport:
            def send(self, message):
                raise ConnectionResetError('connection reset by peer')

        with pytest.raises(TransportFault) as excinfo:
            make_dispatcher(BrokenTransport()).dispatch(submission)

        assert excinfo.value.message == 'Error sending email'
        assert 'connection reset' in str(excinfo.value)
        assert isinstance(excinfo.value.__cause__, ConnectionResetError)
