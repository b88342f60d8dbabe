"""
Session state kept entirely in a sealed, client-held cookie.

See :mod:`cookiejar.store` for the store itself and :mod:`cookiejar.sessions`
for the Flask integration.
"""

from .domain import (SessionCollection, CookieRecord, LoadResult,
                     SessionStoreData, LockedItem)
from .exceptions import (CookieJarError, ConfigError, EncodeError,
                         InvalidCookie, FormatError, SealError, DecodeError)
from .sealing import Sealer
from .settings import CookieJarSettings
from .store import CookieSessionStore
