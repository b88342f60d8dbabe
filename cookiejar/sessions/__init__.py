"""
Flask integration for cookie-backed sessions.

Intended for use in a Flask application factory, for example:

.. code-block:: python

   from flask import Flask
   from cookiejar.sessions import CookieJar


   def create_web_app() -> Flask:
       app = Flask('someapp')
       app.config.from_object('cookiejar.config')
       CookieJar(app)    # flask.session is now kept in a sealed cookie.
       return app

"""

from typing import Optional
import logging

from flask import Flask, current_app

from ..settings import CookieJarSettings
from ..store import CookieSessionStore
from .interface import CookieJarSession, CookieJarSessionInterface, \
    new_session_id
from .transport import WerkzeugTransport

logger = logging.getLogger(__name__)

EXTENSION = 'cookiejar'


class CookieJar(object):
    """Replaces the Flask session interface with a cookie session store."""

    def __init__(self, app: Optional[Flask] = None) -> None:
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        """
        Configure ``app`` to keep sessions in a sealed cookie.

        Raises
        ------
        :class:`.ConfigError`
            Raised if the application configuration is invalid.

        """
        app.config.setdefault('COOKIEJAR_COOKIE_NAME', '.DTSTR')
        app.config.setdefault('COOKIEJAR_ID_COOKIE_NAME',
                              'CookieJar_SessionId')
        app.config.setdefault('COOKIEJAR_HTTP_ONLY', True)
        app.config.setdefault('COOKIEJAR_SECURE_ONLY', False)
        app.config.setdefault('COOKIEJAR_SET_EXPIRATION', False)
        app.config.setdefault('COOKIEJAR_SECRET_FALLBACKS', [])
        app.config.setdefault('SESSION_DURATION', '1200')

        settings = CookieJarSettings.from_config(app.config)
        store = CookieSessionStore(settings)
        app.extensions[EXTENSION] = store
        app.session_interface = CookieJarSessionInterface(store)
        logger.debug('Session cookie %s enabled', settings.cookie_name)


def current_store() -> CookieSessionStore:
    """Get the :class:`.CookieSessionStore` of the current application."""
    store: CookieSessionStore = current_app.extensions[EXTENSION]
    return store
