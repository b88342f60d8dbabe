"""
Flask configuration for cookie-backed sessions.

Load with ``app.config.from_object('cookiejar.config')``; every value can be
overridden from the environment.
"""

import os

SECRET_KEY = os.environ.get('SECRET_KEY', None)

COOKIEJAR_COOKIE_NAME = os.environ.get('COOKIEJAR_COOKIE_NAME', '.DTSTR')
"""Name of the cookie that carries the sealed session data."""

COOKIEJAR_ID_COOKIE_NAME = os.environ.get('COOKIEJAR_ID_COOKIE_NAME',
                                          'CookieJar_SessionId')
"""Name of the cookie that carries the host-issued session identifier."""

COOKIEJAR_HTTP_ONLY = os.environ.get('COOKIEJAR_HTTP_ONLY', 'true')
COOKIEJAR_SECURE_ONLY = os.environ.get('COOKIEJAR_SECURE_ONLY', 'false')
COOKIEJAR_SET_EXPIRATION = os.environ.get('COOKIEJAR_SET_EXPIRATION', 'false')

COOKIEJAR_SECRET = os.environ.get('COOKIEJAR_SECRET', None)
"""Sealing secret. Falls back to ``SECRET_KEY`` when unset."""

COOKIEJAR_SECRET_FALLBACKS = [
    s for s in os.environ.get('COOKIEJAR_SECRET_FALLBACKS', '').split(',') if s
]
"""Comma-separated retired secrets that still open existing cookies."""

SESSION_DURATION = os.environ.get('SESSION_DURATION', '1200')
"""Session timeout in seconds."""
