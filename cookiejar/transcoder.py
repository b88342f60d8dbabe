"""
Cookie text encoding and the cookie attribute policy.

Sealed payloads travel as standard, padded base64 text. Every written cookie
gets the same static ``HttpOnly`` and ``Secure`` attributes; when
``secure_only`` is set, nothing is written over an unencrypted connection.
"""

from typing import Optional
from abc import ABC, abstractmethod
from base64 import b64encode, b64decode
from datetime import datetime, timedelta
import binascii

from pytz import UTC

from .domain import CookieRecord
from .exceptions import FormatError
from .settings import CookieJarSettings


def to_cookie_text(data: bytes) -> str:
    """Encode sealed bytes as a cookie value."""
    return b64encode(data).decode('ascii')


def from_cookie_text(text: str) -> bytes:
    """
    Decode a cookie value produced by :func:`to_cookie_text`.

    Raises
    ------
    :class:`FormatError`
        Raised if ``text`` is not valid base64.

    """
    try:
        return b64decode(text.encode('ascii'), validate=True)
    except (UnicodeEncodeError, binascii.Error) as e:
        raise FormatError('Cookie value is not valid base64') from e


def should_emit(settings: CookieJarSettings, is_secure: bool) -> bool:
    """Whether a session cookie may be written on this connection."""
    return is_secure or not settings.secure_only


def build_cookie(settings: CookieJarSettings, value: str,
                 now: Optional[datetime] = None) -> CookieRecord:
    """
    Create the outbound session cookie.

    Parameters
    ----------
    settings : :class:`.CookieJarSettings`
    value : str
        Cookie text, see :func:`to_cookie_text`.
    now : datetime
        Current time, used to compute the expiry. Defaults to the current UTC
        time.

    Returns
    -------
    :class:`.CookieRecord`

    """
    expires = None
    if settings.set_expiration:
        if now is None:
            now = datetime.now(tz=UTC)
        expires = now + timedelta(seconds=settings.timeout)
    return CookieRecord(name=settings.cookie_name, value=value,
                        http_only=settings.http_only,
                        secure=settings.secure_only, expires=expires)


class CookieTransport(ABC):
    """Reads inbound cookies and writes outbound cookies for one request."""

    @property
    @abstractmethod
    def is_secure(self) -> bool:
        """Whether the current connection is encrypted."""

    @abstractmethod
    def read(self, name: str) -> Optional[str]:
        """Get the value of an inbound cookie."""

    @abstractmethod
    def write(self, record: CookieRecord) -> None:
        """Add an outbound cookie."""

    @abstractmethod
    def discard(self, name: str) -> None:
        """Drop any outbound cookie called ``name`` not yet sent."""

    @abstractmethod
    def expire(self, name: str) -> None:
        """Tell the client to delete its cookie called ``name``."""
