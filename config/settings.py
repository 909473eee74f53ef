# config/settings.py
"""
Environment-based application configuration
"""

import os

from config.security import SecurityConfig


class RelayConfig(SecurityConfig):
    """Production configuration, values read from the environment"""

    # Mail account used to send both notifications
    EMAIL_USER = os.environ.get('EMAIL_USER')
    EMAIL_PASS = os.environ.get('EMAIL_PASS')
    RECEIVER_EMAIL = os.environ.get('RECEIVER_EMAIL') or os.environ.get('EMAIL_USER')
    MAIL_SIGNATURE = os.environ.get('MAIL_SIGNATURE', 'The Team')

    # SMTP transport
    SMTP_HOST = os.environ.get('SMTP_HOST', 'smtp.gmail.com')
    SMTP_PORT = int(os.environ.get('SMTP_PORT', 465))
    SMTP_TIMEOUT = float(os.environ.get('SMTP_TIMEOUT', 30))

    # Server
    PORT = int(os.environ.get('PORT', 5000))

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FILE = os.environ.get('LOG_FILE')

    DEBUG = False
    TESTING = False


class DevelopmentConfig(RelayConfig):
    """Local development configuration"""

    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')
    TRUST_PROXY = False


class TestingConfig(RelayConfig):
    """Configuration used by the test suite"""

    TESTING = True
    EMAIL_USER = 'relay@example.com'
    EMAIL_PASS = 'secret'
    RECEIVER_EMAIL = 'admin@example.com'
    MAIL_SIGNATURE = 'Example Corp'
    ALLOWED_ORIGIN = 'https://www.example.com'
    RATELIMIT_STORAGE_URL = None
    GLOBAL_RATE_LIMIT = 100
    EMAIL_RATE_LIMIT = 5
    TRUST_PROXY = False
    LOG_LEVEL = 'INFO'
    LOG_FILE = None


CONFIGS = {
    'production': RelayConfig,
    'development': DevelopmentConfig,
    'testing': TestingConfig,
}
