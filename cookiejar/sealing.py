"""
Authenticated encryption for session payloads.

A payload is sealed with AES-256-GCM. The key is never the configured secret
itself: a separate key is derived for each purpose string with HKDF-SHA256,
and the purpose is also bound to the ciphertext as associated data. A sealed
payload therefore opens only under the same secret *and* the same purpose, so
ciphertexts produced for one feature are useless to any other feature that
shares the secret.

Sealed layout::

    version (1 byte) | nonce (12 bytes) | ciphertext | tag (16 bytes)

Secrets can be rotated by moving the old secret into ``fallbacks``: new
payloads are sealed with the primary secret, and payloads sealed with a
fallback continue to open until the fallback is dropped.
"""

from typing import Dict, Optional, Sequence, Tuple, Union
import logging
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from .exceptions import SealError

logger = logging.getLogger(__name__)

VERSION = 1
NONCE_SIZE = 12
TAG_SIZE = 16
KEY_SIZE = 32
_HEADER = VERSION.to_bytes(1, 'big')
_KDF_LABEL = b'cookiejar.seal.v1:'

Secret = Union[str, bytes]


def _as_bytes(secret: Secret) -> bytes:
    if isinstance(secret, str):
        return secret.encode('utf-8')
    return bytes(secret)


def derive_key(secret: Secret, purpose: str) -> bytes:
    """Derive the AES key used to seal payloads for ``purpose``."""
    hkdf = HKDF(algorithm=hashes.SHA256(), length=KEY_SIZE, salt=None,
                info=_KDF_LABEL + purpose.encode('utf-8'))
    return hkdf.derive(_as_bytes(secret))


class Sealer(object):
    """
    Seals and opens payloads under a primary secret and optional fallbacks.

    Instances hold no per-request state and may be shared across threads.
    """

    def __init__(self, secret: Optional[Secret],
                 fallbacks: Sequence[Secret] = ()) -> None:
        """
        Configure the secrets used for sealing.

        Parameters
        ----------
        secret : str or bytes
            Used to seal, and tried first when opening. If ``None`` or empty,
            no key is available and every operation raises
            :class:`SealError`.
        fallbacks : sequence
            Retired secrets that are still accepted when opening.

        """
        candidates = [secret] + list(fallbacks) if secret else []
        self._secrets: Tuple[bytes, ...] = tuple(
            _as_bytes(s) for s in candidates if s
        )
        self._keys: Dict[Tuple[bytes, str], AESGCM] = {}

    @property
    def available(self) -> bool:
        """Whether a sealing key is configured."""
        return bool(self._secrets)

    def _cipher(self, secret: bytes, purpose: str) -> AESGCM:
        cache_key = (secret, purpose)
        cipher = self._keys.get(cache_key)
        if cipher is None:
            cipher = AESGCM(derive_key(secret, purpose))
            self._keys[cache_key] = cipher
        return cipher

    def seal(self, plaintext: bytes, purpose: str) -> bytes:
        """
        Encrypt and authenticate ``plaintext`` for ``purpose``.

        Raises
        ------
        :class:`SealError`
            Raised if no secret is configured.

        """
        if not self._secrets:
            raise SealError('No sealing key is available')
        nonce = os.urandom(NONCE_SIZE)
        cipher = self._cipher(self._secrets[0], purpose)
        sealed = cipher.encrypt(nonce, plaintext, purpose.encode('utf-8'))
        return _HEADER + nonce + sealed

    def open(self, sealed: bytes, purpose: str) -> bytes:
        """
        Verify and decrypt a payload produced by :meth:`seal`.

        Raises
        ------
        :class:`SealError`
            Raised if the payload is malformed, was altered, was sealed for a
            different purpose, or was sealed with a secret that is no longer
            configured.

        """
        if not self._secrets:
            raise SealError('No sealing key is available')
        if len(sealed) < len(_HEADER) + NONCE_SIZE + TAG_SIZE:
            raise SealError('Sealed payload is too short')
        if sealed[:len(_HEADER)] != _HEADER:
            raise SealError('Unknown sealed payload version')
        nonce = sealed[len(_HEADER):len(_HEADER) + NONCE_SIZE]
        body = sealed[len(_HEADER) + NONCE_SIZE:]
        aad = purpose.encode('utf-8')
        for index, secret in enumerate(self._secrets):
            try:
                plaintext: bytes = self._cipher(secret, purpose) \
                    .decrypt(nonce, body, aad)
            except InvalidTag:
                continue
            if index:
                logger.debug('Opened payload with fallback secret %i', index)
            return plaintext
        raise SealError('Payload failed authentication')


def seal(plaintext: bytes, purpose: str, secret: Secret) -> bytes:
    """Seal ``plaintext`` with a one-off :class:`Sealer`."""
    return Sealer(secret).seal(plaintext, purpose)


def unseal(sealed: bytes, purpose: str, secret: Secret,
           fallbacks: Sequence[Secret] = ()) -> bytes:
    """Open ``sealed`` with a one-off :class:`Sealer`."""
    return Sealer(secret, fallbacks).open(sealed, purpose)
