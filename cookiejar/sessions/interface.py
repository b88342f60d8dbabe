"""Flask session interface backed by :class:`.CookieSessionStore`."""

from typing import Any, Mapping, Optional
import logging
import uuid

from flask import Flask, request
from flask.sessions import SessionInterface, SessionMixin
from werkzeug.wrappers import Request, Response

from .. import transcoder
from ..domain import SessionCollection
from ..store import CookieSessionStore
from .transport import WerkzeugTransport

logger = logging.getLogger(__name__)


def new_session_id() -> str:
    """Issue a new session identifier."""
    return str(uuid.uuid4())


class CookieJarSession(SessionCollection, SessionMixin):
    """
    Session data for one request, exposed as :data:`flask.session`.

    Attributes
    ----------
    session_id : str
        The identifier the data is bound to.
    matched : bool
        Whether the inbound cookie was bound to ``session_id``.
    new : bool
        Whether ``session_id`` was issued during this request.
    failure : str or None
        Why the inbound cookie was discarded, see :class:`.LoadResult`.

    """

    def __init__(self, initial: Optional[Mapping[str, Any]] = None,
                 session_id: Optional[str] = None, matched: bool = False,
                 new: bool = False, failure: Optional[str] = None) -> None:
        super().__init__(initial)
        self.session_id = session_id or new_session_id()
        self.matched = matched
        self.new = new
        self.failure = failure
        self.id_changed = False

    @property
    def modified(self) -> bool:   # type: ignore
        return self.dirty

    @modified.setter
    def modified(self, value: bool) -> None:
        self.dirty = value

    def regenerate(self) -> str:
        """
        Issue a new identifier for this session, e.g. on login.

        The current data is rebound to the new identifier when the response
        is saved; cookies bound to the old identifier stop matching.
        """
        self.session_id = new_session_id()
        self.id_changed = True
        self.dirty = True
        logger.debug('Regenerated session identifier')
        return self.session_id


class CookieJarSessionInterface(SessionInterface):
    """
    Loads and saves :data:`flask.session` through a cookie session store.

    The session identifier is carried in its own cookie, issued the first
    time the session is written and whenever it is regenerated. When cookies
    expire, it is rewritten with every data cookie so both expire together.
    Data is written only when the session changed. A data cookie that could
    not be loaded is deleted, unless the session is being rewritten anyway.
    """

    session_class = CookieJarSession

    def __init__(self, store: CookieSessionStore) -> None:
        self.store = store

    def _transport(self, app: Flask, request: Request,
                   response: Optional[Response] = None) -> WerkzeugTransport:
        return WerkzeugTransport(request, response,
                                 path=self.get_cookie_path(app),
                                 domain=self.get_cookie_domain(app),
                                 samesite=self.get_cookie_samesite(app))

    def open_session(self, app: Flask, request: Request) -> CookieJarSession:
        settings = self.store.settings
        session_id = request.cookies.get(settings.id_cookie_name)
        new = not session_id
        if new:
            session_id = new_session_id()
        result = self.store.load(request.cookies.get(settings.cookie_name),
                                 session_id)
        return self.session_class(result.items, session_id=session_id,
                                  matched=result.matched, new=new,
                                  failure=result.failure)

    def save_session(self, app: Flask,   # type: ignore
                     session: CookieJarSession, response: Response) -> None:
        transport = self._transport(app, request, response)
        if session.dirty:
            # A persistent identifier cookie must expire with the data cookie.
            if session.new or session.id_changed \
                    or self.store.settings.set_expiration:
                self._issue_id(transport, session.session_id)
            self.store.save(transport, session.session_id, session,
                            new_item=session.new)
        elif session.failure not in (None, 'absent'):
            self.store.remove_item(transport, session.session_id)

    def _issue_id(self, transport: WerkzeugTransport, session_id: str) -> None:
        settings = self.store.settings
        if not transcoder.should_emit(settings, transport.is_secure):
            return
        record = transcoder.build_cookie(settings, session_id)
        transport.discard(settings.id_cookie_name)
        transport.write(record._replace(name=settings.id_cookie_name))
