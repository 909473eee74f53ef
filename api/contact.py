# api/contact.py
"""
Contact form submission API
"""

from flask import Blueprint, request, jsonify, current_app, g
import logging

from core.errors import ContactRelayError, TransportFault
from core.validator import validate_submission
from middleware.security import rate_limit

contact_bp = Blueprint('contact', __name__)
logger = logging.getLogger(__name__)


@contact_bp.route('/send-email', methods=['POST'])
@rate_limit('email_limiter')
def send_email():
    """
    Relay a contact form submission

    Expects: { name, email, message }
    Returns: { success, message }
    """
    try:
        submission = validate_submission(g.payload)
    except ContactRelayError as e:
        logger.warning(f"Rejected submission from {request.remote_addr}: {e}")
        return jsonify({'success': False, 'message': e.message}), e.status_code

    dispatcher = current_app.extensions['contact_relay']['dispatcher']
    try:
        dispatcher.dispatch(submission)
    except TransportFault as e:
        logger.error(f"Error sending email for {request.remote_addr}: {e}")
        return jsonify({'success': False, 'message': e.message}), e.status_code

    return jsonify({'success': True, 'message': 'Emails sent successfully!'}), 200
