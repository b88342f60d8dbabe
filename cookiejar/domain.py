"""Core data structures for cookie-backed session state."""

from typing import Any, Optional, NamedTuple, Mapping, Iterable, Tuple, Union
from datetime import datetime, timedelta

from werkzeug.datastructures import CallbackDict

RESERVED_NAMESPACE = '__cookiejar__'
"""Key prefix reserved for values the store embeds in the collection."""


def is_reserved(key: str) -> bool:
    """Determine whether ``key`` belongs to the reserved namespace."""
    return key.startswith(RESERVED_NAMESPACE)


def _check_key(key: Any) -> None:
    if not isinstance(key, str):
        raise TypeError(f'Session keys must be str, not {type(key).__name__}')
    if is_reserved(key):
        raise ValueError(f'Session key {key!r} uses a reserved prefix')


class SessionCollection(CallbackDict):
    """
    The key/value data of one session.

    Behaves like a :class:`dict` (insertion order is preserved), and tracks
    whether anything has been added, changed, or removed since it was
    constructed via the :attr:`dirty` flag.

    Items passed to the constructor are taken as-is, which is how decoded data
    (possibly still carrying the binder marker) is represented. Writes made
    afterwards are checked: keys must be ``str`` and must not fall in
    :data:`RESERVED_NAMESPACE`.
    """

    def __init__(self, initial: Optional[Union[Mapping[str, Any],
                                               Iterable[Tuple[str, Any]]]]
                 = None) -> None:
        def on_update(self: 'SessionCollection') -> None:
            self.dirty = True

        super().__init__(initial, on_update)
        self.dirty = False

    def __setitem__(self, key: str, value: Any) -> None:
        _check_key(key)
        super().__setitem__(key, value)

    def setdefault(self, key: str, default: Any = None) -> Any:
        _check_key(key)
        return super().setdefault(key, default)

    def update(self, *args: Any, **kwargs: Any) -> None:
        incoming = dict(*args, **kwargs)
        for key in incoming:
            _check_key(key)
        super().update(incoming)

    def __repr__(self) -> str:
        return f'<{type(self).__name__} {dict.__repr__(self)}>'


class CookieRecord(NamedTuple):
    """An outbound session cookie."""

    name: str
    value: str
    """Base64 text of the sealed collection."""

    http_only: bool = True
    secure: bool = False
    expires: Optional[datetime] = None
    """When unset, the cookie lasts for the browser session."""


class LoadResult(NamedTuple):
    """
    Outcome of loading session data from a cookie.

    ``failure`` is ``None`` when the cookie was read and bound to the current
    session. Otherwise it names the reason the data was discarded: one of
    ``'absent'``, ``'format'``, ``'seal'``, ``'decode'``, or ``'mismatch'``.
    """

    items: SessionCollection
    matched: bool
    failure: Optional[str] = None

    @property
    def ok(self) -> bool:
        """Whether the cookie yielded session data for this session."""
        return self.failure is None


class SessionStoreData(NamedTuple):
    """Session data handed to the host framework."""

    items: SessionCollection
    timeout: int
    """Nominal session timeout, in seconds."""

    matched: bool = False


class LockedItem(NamedTuple):
    """Result of an exclusive get; this store never holds locks."""

    data: SessionStoreData
    locked: bool = False
    lock_age: timedelta = timedelta(0)
    lock_id: Optional[Any] = None
