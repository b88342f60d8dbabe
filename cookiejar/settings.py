"""Immutable settings for the cookie session store."""

from typing import Any, Mapping, NamedTuple, Optional, Tuple
import logging

from . import binder
from .exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_COOKIE_NAME = '.DTSTR'
DEFAULT_ID_COOKIE_NAME = 'CookieJar_SessionId'
DEFAULT_TIMEOUT = 1200

_TRUE = {'true', '1', 'yes', 'on'}
_FALSE = {'false', '0', 'no', 'off'}


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def read_value(config: Mapping[str, Any], key: str, default: Any) -> Any:
    """Get ``key`` from ``config``, using ``default`` for blank values."""
    value = config.get(key)
    return default if _is_blank(value) else value


def read_bool(config: Mapping[str, Any], key: str, default: bool) -> bool:
    """
    Get a boolean setting.

    Accepts ``bool`` values, or strings such as ``'true'``/``'false'``,
    ``'1'``/``'0'``, ``'yes'``/``'no'`` and ``'on'``/``'off'``.

    Raises
    ------
    :class:`ConfigError`
        Raised if the value cannot be interpreted as a boolean.

    """
    value = read_value(config, key, default)
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in _TRUE:
        return True
    if normalized in _FALSE:
        return False
    logger.error('Invalid boolean for %s: %r', key, value)
    raise ConfigError(f'{key} must be a boolean, got {value!r}')


def read_int(config: Mapping[str, Any], key: str, default: int) -> int:
    """Get a positive integer setting."""
    value = read_value(config, key, default)
    if isinstance(value, float) and not value.is_integer():
        logger.error('Invalid integer for %s: %r', key, value)
        raise ConfigError(f'{key} must be an integer, got {value!r}')
    try:
        number = int(value)
    except (TypeError, ValueError) as e:
        logger.error('Invalid integer for %s: %r', key, value)
        raise ConfigError(f'{key} must be an integer, got {value!r}') from e
    if isinstance(value, bool) or number <= 0:
        raise ConfigError(f'{key} must be a positive integer, got {value!r}')
    return number


class CookieJarSettings(NamedTuple):
    """
    Settings for a :class:`.CookieSessionStore`.

    Built once at startup and passed to the store; never mutated.
    """

    secret: str
    """Sealing secret."""

    cookie_name: str = DEFAULT_COOKIE_NAME
    id_cookie_name: str = DEFAULT_ID_COOKIE_NAME
    http_only: bool = True
    secure_only: bool = False
    set_expiration: bool = False
    timeout: int = DEFAULT_TIMEOUT
    """Session timeout in seconds; also the cookie lifetime when expiring."""

    fallback_secrets: Tuple[str, ...] = ()

    @property
    def marker_key(self) -> str:
        """Collection key that carries the bound session identifier."""
        return binder.marker_key(self.id_cookie_name)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> 'CookieJarSettings':
        """
        Build settings from a Flask-style configuration mapping.

        See :mod:`cookiejar.config` for the recognized keys.

        Raises
        ------
        :class:`ConfigError`
            Raised if a value is invalid, or no secret is configured.

        """
        secret: Optional[str] = read_value(
            config, 'COOKIEJAR_SECRET', config.get('SECRET_KEY')
        )
        if _is_blank(secret):
            logger.error('No secret configured for session cookies')
            raise ConfigError('COOKIEJAR_SECRET or SECRET_KEY must be set')

        cookie_name = str(read_value(config, 'COOKIEJAR_COOKIE_NAME',
                                     DEFAULT_COOKIE_NAME)).strip()
        id_cookie_name = str(read_value(config, 'COOKIEJAR_ID_COOKIE_NAME',
                                        DEFAULT_ID_COOKIE_NAME)).strip()
        if cookie_name == id_cookie_name:
            raise ConfigError('Data and identifier cookies must differ')

        fallbacks = read_value(config, 'COOKIEJAR_SECRET_FALLBACKS', ())
        if isinstance(fallbacks, str):
            fallbacks = fallbacks.split(',')

        return cls(
            secret=secret,
            cookie_name=cookie_name,
            id_cookie_name=id_cookie_name,
            http_only=read_bool(config, 'COOKIEJAR_HTTP_ONLY', True),
            secure_only=read_bool(config, 'COOKIEJAR_SECURE_ONLY', False),
            set_expiration=read_bool(config, 'COOKIEJAR_SET_EXPIRATION',
                                     False),
            timeout=read_int(config, 'SESSION_DURATION', DEFAULT_TIMEOUT),
            fallback_secrets=tuple(s for s in fallbacks if s),
        )
