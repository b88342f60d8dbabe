"""
The session-state store contract a host framework drives.

A host calls :meth:`SessionStateStore.get_item` (or its exclusive variant)
when a request starts, and :meth:`SessionStateStore.set_and_release_item_exclusive`
when the response is complete. The locking and expiry members exist for
stores that keep shared server-side records; :class:`LockingCapability`
groups them so that stores without such records can implement them trivially.
"""

from typing import Any, Callable, Optional
from abc import ABC, abstractmethod

from .domain import (CookieRecord, LockedItem, SessionCollection,
                     SessionStoreData)
from .transcoder import CookieTransport

ExpireCallback = Callable[[str, SessionStoreData], None]


class LockingCapability(ABC):
    """Exclusive access and server-side expiry of session records."""

    @abstractmethod
    def get_item_exclusive(self, transport: CookieTransport,
                           session_id: str) -> LockedItem:
        """Load session data and lock it against concurrent requests."""

    @abstractmethod
    def release_item_exclusive(self, transport: CookieTransport,
                               session_id: str, lock_id: Any) -> None:
        """Release a lock taken by :meth:`get_item_exclusive`."""

    @abstractmethod
    def reset_item_timeout(self, transport: CookieTransport,
                           session_id: str) -> None:
        """Extend the lifetime of a session that was read but not changed."""

    @abstractmethod
    def set_item_expire_callback(self, callback: ExpireCallback) -> bool:
        """Register a callback for expired sessions; ``False`` if unsupported."""


class SessionStateStore(LockingCapability):
    """A provider of session data for a host framework."""

    @abstractmethod
    def initialize_request(self, transport: CookieTransport) -> None:
        """Called when a request starts."""

    @abstractmethod
    def end_request(self, transport: CookieTransport) -> None:
        """Called when a request ends."""

    @abstractmethod
    def create_new_store_data(self, timeout: Optional[int] = None) \
            -> SessionStoreData:
        """Create empty data for a new session."""

    @abstractmethod
    def create_uninitialized_item(self, transport: CookieTransport,
                                  session_id: str,
                                  timeout: Optional[int] = None) -> None:
        """Record a new, empty session for cookieless session support."""

    @abstractmethod
    def get_item(self, transport: CookieTransport,
                 session_id: str) -> SessionStoreData:
        """Load the data of the current session."""

    @abstractmethod
    def set_and_release_item_exclusive(self, transport: CookieTransport,
                                       session_id: str,
                                       items: SessionCollection,
                                       lock_id: Any = None,
                                       new_item: bool = False) \
            -> Optional[CookieRecord]:
        """Persist the data of the current session and release its lock."""

    @abstractmethod
    def remove_item(self, transport: CookieTransport, session_id: str,
                    lock_id: Any = None) -> None:
        """Delete the data of the current session."""

    @abstractmethod
    def dispose(self) -> None:
        """Release resources held by the store."""
