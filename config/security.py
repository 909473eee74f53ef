# config/security.py
"""
Security Configuration for the Contact Relay
"""

import os


class SecurityConfig:
    """Security configuration settings"""

    # CORS: a single allowed origin
    ALLOWED_ORIGIN = os.environ.get('ALLOWED_ORIGIN', 'http://localhost:3000')
    CORS_METHODS = ['GET', 'POST']
    CORS_HEADERS = ['Content-Type']

    # Rate limiting
    RATELIMIT_STORAGE_URL = os.environ.get('REDIS_URL')
    GLOBAL_RATE_LIMIT = int(os.environ.get('GLOBAL_RATE_LIMIT', 100))
    GLOBAL_RATE_WINDOW = 15 * 60  # 15 minutes
    GLOBAL_RATE_MESSAGE = 'Too many requests from this IP, please try again later.'
    EMAIL_RATE_LIMIT = int(os.environ.get('EMAIL_RATE_LIMIT', 5))
    EMAIL_RATE_WINDOW = 10 * 60  # 10 minutes
    EMAIL_RATE_MESSAGE = 'Too many emails sent from this IP, please try again after 10 minutes.'

    # Content Security Policy
    CSP_POLICY = {
        'default-src': "'self'",
        'script-src': "'self'",
        'style-src': "'self' https://fonts.googleapis.com",
        'img-src': "'self' data:",
        'connect-src': "'self'",
        'font-src': "'self' https://fonts.gstatic.com",
        'object-src': "'none'",
        'base-uri': "'self'",
        'frame-ancestors': "'none'",
    }

    # Security headers
    SECURITY_HEADERS = {
        'X-Content-Type-Options': 'nosniff',
        'X-Frame-Options': 'DENY',
        'Strict-Transport-Security': 'max-age=31536000; includeSubDomains',
        'Referrer-Policy': 'no-referrer',
        'Permissions-Policy': 'camera=(), microphone=(), geolocation=()',
        'Cross-Origin-Opener-Policy': 'same-origin',
        'Cross-Origin-Resource-Policy': 'same-origin',
    }

    # Request body limit
    MAX_CONTENT_LENGTH = 64 * 1024  # 64KB

    # Proxy handling for deployments behind nginx
    TRUST_PROXY = os.environ.get('TRUST_PROXY', '').lower() in ('1', 'true', 'yes')
