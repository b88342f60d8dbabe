"""
Session store that keeps all session data in a client-held cookie.

On load, the inbound cookie is decoded from base64, opened, deserialized and
checked against the host-issued session identifier. Any failure along the way
(bad base64, failed authentication, corrupt payload, identifier mismatch)
yields an empty, unmatched collection: a tampered, truncated, or foreign
cookie looks exactly like "no session yet". :meth:`CookieSessionStore.load`
is the only place where those failures are collapsed.

On save, the collection is bound to the session identifier, serialized,
sealed, and written as a fresh cookie that replaces the previous one. Errors
on the save path propagate to the host.

Concurrency
-----------
Each request works on its own copy of the data, rebuilt from its own cookie,
so the store holds no shared mutable state and takes no locks. The flip side
is that concurrent requests for the same session do not see each other's
changes: whichever response the client stores last replaces the cookie in its
entirety. Lost updates in that situation are expected behavior.
"""

from typing import Any, Mapping, Optional
from datetime import datetime
import logging

from . import binder, codec, transcoder
from .contract import ExpireCallback, SessionStateStore
from .domain import (CookieRecord, LoadResult, LockedItem, SessionCollection,
                     SessionStoreData)
from .exceptions import DecodeError, FormatError, SealError
from .sealing import Sealer
from .settings import CookieJarSettings
from .transcoder import CookieTransport

logger = logging.getLogger(__name__)

PURPOSE = 'Session Data'
"""Purpose that session payloads are sealed for; see :mod:`.sealing`."""


class CookieSessionStore(SessionStateStore):
    """
    Stores session data in a sealed cookie.

    The locking and expiry members of the store contract are implemented as
    no-ops. They are supported for interface compatibility only: there is no
    server-side record to lock or expire.
    """

    def __init__(self, settings: CookieJarSettings,
                 sealer: Optional[Sealer] = None) -> None:
        """
        Configure the store.

        Parameters
        ----------
        settings : :class:`.CookieJarSettings`
        sealer : :class:`.Sealer`
            Defaults to a sealer built from the secrets in ``settings``.

        """
        self.settings = settings
        if sealer is None:
            sealer = Sealer(settings.secret, settings.fallback_secrets)
        self.sealer = sealer

    def load(self, cookie_text: Optional[str], session_id: str) -> LoadResult:
        """
        Recover session data from a cookie value.

        Never raises for a bad cookie; see :class:`.LoadResult` for the
        possible outcomes.

        Parameters
        ----------
        cookie_text : str or None
            Value of the inbound session cookie, if any.
        session_id : str
            Identifier the host issued for the current request.

        Returns
        -------
        :class:`.LoadResult`

        """
        if not cookie_text:
            return LoadResult(SessionCollection(), False, 'absent')
        try:
            sealed = transcoder.from_cookie_text(cookie_text)
            plaintext = self.sealer.open(sealed, PURPOSE)
            decoded = codec.decode(plaintext)
        except FormatError as e:
            return self._discard('format', e)
        except SealError as e:
            return self._discard('seal', e)
        except DecodeError as e:
            return self._discard('decode', e)

        items, matched = binder.verify(decoded, session_id,
                                       self.settings.marker_key)
        if not matched:
            logger.debug('Session cookie is bound to another session')
            return LoadResult(items, False, 'mismatch')
        return LoadResult(items, True)

    def _discard(self, failure: str, error: Exception) -> LoadResult:
        logger.debug('Discarding session cookie (%s): %s', failure, error)
        return LoadResult(SessionCollection(), False, failure)

    def dump(self, items: Mapping[str, Any], session_id: str) -> str:
        """
        Produce the cookie value for ``items`` bound to ``session_id``.

        Raises
        ------
        :class:`.EncodeError`
            Raised if ``items`` contains a value that cannot be serialized.
        :class:`.SealError`
            Raised if no sealing key is available.

        """
        bound = binder.bind(items, session_id, self.settings.marker_key)
        sealed = self.sealer.seal(codec.encode(bound), PURPOSE)
        return transcoder.to_cookie_text(sealed)

    def create_new_store_data(self, timeout: Optional[int] = None) \
            -> SessionStoreData:
        """Create empty data for a new session."""
        if timeout is None:
            timeout = self.settings.timeout
        return SessionStoreData(SessionCollection(), timeout)

    def get_item(self, transport: CookieTransport,
                 session_id: str) -> SessionStoreData:
        """Load the current session's data from the inbound cookie."""
        result = self.load(transport.read(self.settings.cookie_name),
                           session_id)
        return SessionStoreData(result.items, self.settings.timeout,
                                result.matched)

    def get_item_exclusive(self, transport: CookieTransport,
                           session_id: str) -> LockedItem:
        """Same as :meth:`get_item`; the data is never locked."""
        return LockedItem(self.get_item(transport, session_id))

    def save(self, transport: CookieTransport, session_id: str,
             items: Mapping[str, Any], new_item: bool = False,
             now: Optional[datetime] = None) -> Optional[CookieRecord]:
        """
        Write the session cookie.

        Any cookie of the same name already queued on the response is dropped
        first. The new cookie is withheld when ``secure_only`` is set and the
        connection is not encrypted.

        Parameters
        ----------
        transport : :class:`.CookieTransport`
        session_id : str
        items : Mapping
        new_item : bool
            Whether this is the first write for the session. The cookie is
            replaced wholesale either way.
        now : datetime
            Reference time for the cookie expiry.

        Returns
        -------
        :class:`.CookieRecord` or None
            The cookie that was written, if any.

        """
        value = self.dump(items, session_id)
        transport.discard(self.settings.cookie_name)
        if not transcoder.should_emit(self.settings, transport.is_secure):
            logger.debug('Withholding secure-only session cookie over an '
                         'insecure connection')
            return None
        record = transcoder.build_cookie(self.settings, value, now=now)
        transport.write(record)
        logger.debug('Wrote session cookie (new: %s)', new_item)
        return record

    def set_and_release_item_exclusive(self, transport: CookieTransport,
                                       session_id: str,
                                       items: SessionCollection,
                                       lock_id: Any = None,
                                       new_item: bool = False) \
            -> Optional[CookieRecord]:
        """Write the session cookie; see :meth:`save`."""
        return self.save(transport, session_id, items, new_item=new_item)

    def remove_item(self, transport: CookieTransport,
                    session_id: Optional[str] = None,
                    lock_id: Any = None) -> None:
        """
        Delete the session cookie.

        Drops any session cookie queued on the response and, if the request
        carried one, tells the client to delete it.
        """
        name = self.settings.cookie_name
        transport.discard(name)
        if transport.read(name) is not None:
            transport.expire(name)

    def create_uninitialized_item(self, transport: CookieTransport,
                                  session_id: str,
                                  timeout: Optional[int] = None) -> None:
        """Do nothing; cookieless sessions are not supported."""

    def release_item_exclusive(self, transport: CookieTransport,
                               session_id: str, lock_id: Any) -> None:
        """Do nothing; there is no lock to release."""

    def reset_item_timeout(self, transport: CookieTransport,
                           session_id: str) -> None:
        """Do nothing; there is no server-side record to keep alive."""

    def set_item_expire_callback(self, callback: ExpireCallback) -> bool:
        """Expiry callbacks are not supported."""
        return False

    def initialize_request(self, transport: CookieTransport) -> None:
        """Do nothing."""

    def end_request(self, transport: CookieTransport) -> None:
        """Do nothing."""

    def dispose(self) -> None:
        """Do nothing."""
