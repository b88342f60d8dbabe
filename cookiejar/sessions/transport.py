"""Cookie transport over a werkzeug request/response pair."""

from typing import Optional

from werkzeug.wrappers import Request, Response

from ..domain import CookieRecord
from ..transcoder import CookieTransport


class WerkzeugTransport(CookieTransport):
    """
    Reads cookies from a request and writes them to the matching response.

    ``path``, ``domain`` and ``samesite`` are applied to every cookie written
    or expired, so that deletions target the same cookie that was set.
    """

    def __init__(self, request: Request, response: Optional[Response] = None,
                 path: str = '/', domain: Optional[str] = None,
                 samesite: Optional[str] = None) -> None:
        self.request = request
        self.response = response
        self.path = path
        self.domain = domain
        self.samesite = samesite

    @property
    def is_secure(self) -> bool:
        return bool(self.request.is_secure)

    def read(self, name: str) -> Optional[str]:
        return self.request.cookies.get(name)

    def _require_response(self) -> Response:
        if self.response is None:
            raise RuntimeError('No response to write cookies to')
        return self.response

    def write(self, record: CookieRecord) -> None:
        self._require_response().set_cookie(
            record.name,
            record.value,
            expires=record.expires,
            path=self.path,
            domain=self.domain,
            secure=record.secure,
            httponly=record.http_only,
            samesite=self.samesite
        )

    def discard(self, name: str) -> None:
        headers = self._require_response().headers
        prefix = f'{name}='
        kept = [value for value in headers.getlist('Set-Cookie')
                if not value.startswith(prefix)]
        headers.remove('Set-Cookie')
        for value in kept:
            headers.add('Set-Cookie', value)

    def expire(self, name: str) -> None:
        self._require_response().delete_cookie(
            name,
            path=self.path,
            domain=self.domain,
            samesite=self.samesite
        )
