# app.py
"""
Flask Application Factory for the Contact Relay

The application exposes a single submission endpoint and wires together:
- Security headers, CORS allow-list and request body sanitization
- Global and per-route rate limiting on an injectable counter store
- Validation of the submitted fields
- Sequential dispatch of the admin notification and acknowledgment
- JSON error handling and logging
"""

import os
import logging
import logging.handlers

from dotenv import load_dotenv

# Environment must be loaded before config classes read it
load_dotenv()

from flask import Flask, request, jsonify
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix
from werkzeug.exceptions import HTTPException

from api.contact import contact_bp
from config.settings import CONFIGS
from core.errors import ContactRelayError, RateLimitExceeded
from core.rate_limiter import RateLimiter, create_counter_store
from middleware.security import init_security_middleware
from services.dispatcher import ContactDispatcher
from services.mail_transport import SMTPMailTransport


def setup_logging(app: Flask) -> None:
    """
    Configure application logging

    This setup provides:
    - A stream handler with a journald-friendly format
    - An optional rotating file handler when LOG_FILE is set
    - Quieter third-party logs outside debug mode
    """
    # Remove default Flask handlers to avoid duplicate logs
    app.logger.handlers.clear()

    journal_formatter = logging.Formatter(
        fmt='%(name)s[%(process)d]: %(levelname)s %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    detailed_formatter = logging.Formatter(
        fmt='%(asctime)s %(name)-20s %(levelname)-8s %(funcName)-15s:%(lineno)-4d %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    log_level = getattr(logging, app.config.get('LOG_LEVEL', 'INFO').upper(), logging.INFO)
    app.logger.setLevel(log_level)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(journal_formatter)
    stream_handler.setLevel(log_level)
    app.logger.addHandler(stream_handler)

    # Module loggers (api.*, core.*, services.*) share the same handler
    for name in ('api', 'core', 'middleware', 'services'):
        module_logger = logging.getLogger(name)
        module_logger.setLevel(log_level)
        module_logger.handlers = [stream_handler]

    if app.config.get('LOG_FILE'):
        file_handler = logging.handlers.RotatingFileHandler(
            app.config['LOG_FILE'],
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5
        )
        file_handler.setFormatter(detailed_formatter)
        file_handler.setLevel(logging.DEBUG)
        app.logger.addHandler(file_handler)

    # Suppress verbose third-party logs in production
    if not app.debug:
        logging.getLogger('werkzeug').setLevel(logging.WARNING)
        logging.getLogger('aiosmtplib').setLevel(logging.WARNING)


def configure_security(app: Flask, counter_store=None) -> None:
    """
    Configure CORS, rate limiters and the middleware chain

    Both limiters share one counter store with independent key namespaces.
    """
    store = counter_store or create_counter_store(app.config.get('RATELIMIT_STORAGE_URL'))

    app.extensions['contact_relay'].update({
        'counter_store': store,
        'global_limiter': RateLimiter(
            name='global',
            limit=app.config['GLOBAL_RATE_LIMIT'],
            window_seconds=app.config['GLOBAL_RATE_WINDOW'],
            message=app.config['GLOBAL_RATE_MESSAGE'],
            store=store,
        ),
        'email_limiter': RateLimiter(
            name='send_email',
            limit=app.config['EMAIL_RATE_LIMIT'],
            window_seconds=app.config['EMAIL_RATE_WINDOW'],
            message=app.config['EMAIL_RATE_MESSAGE'],
            store=store,
        ),
    })

    init_security_middleware(app)

    CORS(app,
         origins=[app.config['ALLOWED_ORIGIN']],
         methods=app.config['CORS_METHODS'],
         allow_headers=app.config['CORS_HEADERS'])

    app.logger.info(f"Security features configured (CORS origin: {app.config['ALLOWED_ORIGIN']})")


def configure_dispatcher(app: Flask, transport=None) -> None:
    if not app.config.get('EMAIL_USER'):
        app.logger.warning("EMAIL_USER is not set, outgoing mail will have no sender")

    transport = transport or SMTPMailTransport.from_config(app.config)
    app.extensions['contact_relay']['dispatcher'] = ContactDispatcher(
        transport=transport,
        sender=app.config.get('EMAIL_USER'),
        admin_recipient=app.config.get('RECEIVER_EMAIL'),
        signature=app.config.get('MAIL_SIGNATURE'),
    )


def register_blueprints(app: Flask) -> None:
    """
    Register all application blueprints
    """
    app.register_blueprint(contact_bp)

    app.logger.info("Application blueprints registered")


def error_response(message: str, status_code: int):
    return jsonify({'success': False, 'message': message}), status_code


def configure_error_handlers(app: Flask) -> None:
    """
    Configure JSON error handling
    """
    @app.errorhandler(ContactRelayError)
    def relay_error(error):
        if error.status_code >= 500:
            app.logger.error(f"Relay error: {error}", exc_info=True)
        else:
            app.logger.warning(f"Rejected request from {request.remote_addr}: {error}")
        return error_response(error.message, error.status_code)

    @app.errorhandler(RateLimitExceeded)
    def rate_limit_exceeded(error):
        response, status_code = error_response(error.message, error.status_code)
        response.status_code = status_code
        response.headers['Retry-After'] = str(error.reset_in)
        response.headers['X-RateLimit-Limit'] = str(error.limit)
        response.headers['X-RateLimit-Remaining'] = '0'
        return response

    @app.errorhandler(400)
    def bad_request(error):
        app.logger.warning(f"Bad request from {request.remote_addr}: {error}")
        return error_response('Invalid request format or parameters', 400)

    @app.errorhandler(404)
    def not_found(error):
        return error_response('The requested resource was not found', 404)

    @app.errorhandler(405)
    def method_not_allowed(error):
        return error_response('Method not allowed', 405)

    @app.errorhandler(413)
    def payload_too_large(error):
        app.logger.warning(f"Oversized request body from {request.remote_addr}")
        return error_response('Request body too large', 413)

    @app.errorhandler(500)
    def internal_error(error):
        app.logger.error(f"Internal server error: {error}", exc_info=True)
        return error_response('An unexpected error occurred', 500)

    @app.errorhandler(Exception)
    def handle_exception(e):
        """Handle unexpected exceptions"""
        if isinstance(e, HTTPException):
            return error_response(e.description, e.code)

        app.logger.error(f"Unhandled exception: {e}", exc_info=True)
        return error_response('An unexpected error occurred', 500)


def create_app(config_name: str = None, transport=None, counter_store=None) -> Flask:
    """
    Flask application factory

    Args:
        config_name: Configuration environment ('development', 'testing', 'production')
        transport: Mail transport with a ``send(OutboundMessage)`` method;
            defaults to SMTP built from configuration
        counter_store: Rate limit counter store; defaults to memory or Redis
            depending on REDIS_URL

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)

    config_name = config_name or os.environ.get('FLASK_ENV', 'production')
    app.config.from_object(CONFIGS.get(config_name, CONFIGS['production']))

    # Configure proxy handling for deployment behind nginx
    if app.config.get('TRUST_PROXY'):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    setup_logging(app)
    app.logger.info(f"Starting contact relay in {config_name} mode")

    app.extensions['contact_relay'] = {}

    configure_security(app, counter_store)
    configure_dispatcher(app, transport)
    register_blueprints(app)
    configure_error_handlers(app)

    app.logger.info("Flask application factory completed successfully")
    return app


if __name__ == '__main__':
    # Development server
    app = create_app('development')
    port = app.config['PORT']
    app.logger.info(f"Server running on port {port}")
    app.run(host='0.0.0.0', port=port, debug=True, use_reloader=False)
