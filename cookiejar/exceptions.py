"""Exceptions."""


class CookieJarError(RuntimeError):
    """Base class for all errors raised by this package."""


class ConfigError(CookieJarError):
    """A required setting is missing or cannot be interpreted."""


class EncodeError(CookieJarError, TypeError):
    """A session collection contains something that cannot be serialized."""


class InvalidCookie(CookieJarError):
    """
    A session cookie could not be turned back into session data.

    Subclasses identify the layer that rejected the cookie. The store facade
    treats all of them as "no session data".
    """


class FormatError(InvalidCookie):
    """The cookie value is not valid base64 text."""


class SealError(InvalidCookie):
    """The sealed payload failed authentication, or no key is available."""


class DecodeError(InvalidCookie):
    """The decrypted payload is not a valid serialized collection."""
