"""
Binds session data to the session identifier issued by the host.

Before a collection is sealed, :func:`bind` stores the current session
identifier in it under a reserved marker key. After a cookie is opened,
:func:`verify` compares that marker with the identifier the host issued for
the current request. A cookie whose marker is missing or different belongs to
some other (or an earlier) session, and none of its data is exposed: the
caller receives an empty collection.

No distinction is made between a cookie from an unrelated session and one
that predates an identifier regeneration for the same visitor; both are
discarded.
"""

from typing import Any, Dict, Mapping, Tuple
import hmac

from .domain import RESERVED_NAMESPACE, SessionCollection


def marker_key(scope: str) -> str:
    """Get the reserved marker key for identifiers issued under ``scope``."""
    return f'{RESERVED_NAMESPACE}.{scope}'


def bind(collection: Mapping[str, Any], session_id: str,
         key: str) -> Dict[str, Any]:
    """
    Get a copy of ``collection`` that carries ``session_id``.

    Parameters
    ----------
    collection : Mapping
        The application's session data. Not modified.
    session_id : str
        Identifier issued by the host for the current session.
    key : str
        Marker key, see :func:`marker_key`.

    Returns
    -------
    dict

    """
    bound = dict(collection)
    bound.pop(key, None)
    bound[key] = session_id
    return bound


def verify(collection: Mapping[str, Any], session_id: str,
           key: str) -> Tuple[SessionCollection, bool]:
    """
    Check that ``collection`` was bound to ``session_id``.

    Parameters
    ----------
    collection : Mapping
        Decoded session data, still carrying the marker.
    session_id : str
        Identifier issued by the host for the current request.
    key : str
        Marker key, see :func:`marker_key`.

    Returns
    -------
    :class:`.SessionCollection`
        The data without the marker if it matched, otherwise empty.
    bool
        Whether the marker matched ``session_id``.

    """
    bound_id = collection.get(key)
    if not isinstance(bound_id, str) or not isinstance(session_id, str) \
            or not hmac.compare_digest(bound_id.encode('utf-8'),
                                       session_id.encode('utf-8')):
        return SessionCollection(), False
    return SessionCollection(
        (k, v) for k, v in collection.items() if k != key
    ), True
