"""Streaming digest used to fingerprint the canonical byte stream.

The construction is fixed: unkeyed BLAKE2b (RFC 7693) with a 16-byte digest
size. It is used as an equivalence fingerprint, not as a security primitive.
Changing it changes every digest ever produced.
"""

from __future__ import annotations

import hashlib

from dbhash.core.errors import DigestStateError

DIGEST_SIZE = 16


class DigestAccumulator:
    """Incremental digest with a single `finalize()`."""

    def __init__(self) -> None:
        self._hash = hashlib.blake2b(digest_size=DIGEST_SIZE)
        self._finalized = False
        self.bytes_fed = 0

    @property
    def finalized(self) -> bool:
        return self._finalized

    def update(self, data: bytes) -> None:
        """Feed bytes into the digest."""
        if self._finalized:
            raise DigestStateError("Cannot update a finalized digest.")
        self._hash.update(data)
        self.bytes_fed += len(data)

    def finalize(self) -> bytes:
        """Return the 16-byte digest. Can only be called once."""
        if self._finalized:
            raise DigestStateError("Digest was already finalized.")
        self._finalized = True
        return self._hash.digest()
