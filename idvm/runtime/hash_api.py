"""
idvm.runtime.hash_api — deterministic hashing wrappers.

- keccak256(data) -> bytes   (Keccak-256 as used for key ids, claim ids and
                               CREATE addresses; provided by pycryptodome)
- sha3_256(data)  -> bytes   (FIPS-202 SHA3-256; code hashes)
- keccak256_concat(*chunks) -> bytes

Strictly bytes-in, bytes-out.
"""

from __future__ import annotations

import hashlib

from Crypto.Hash import keccak as _keccak

from idvm.errors import VmError


def _ensure_bytes(buf: object, name: str) -> bytes:
    if isinstance(buf, (bytes, bytearray, memoryview)):
        return bytes(buf)
    raise VmError(f"{name} must be bytes-like (got {type(buf).__name__})", code="hash_invalid")


def keccak256(data: bytes) -> bytes:
    h = _keccak.new(digest_bits=256)
    h.update(_ensure_bytes(data, "data"))
    return h.digest()


def keccak256_concat(*chunks: bytes) -> bytes:
    h = _keccak.new(digest_bits=256)
    for i, c in enumerate(chunks):
        h.update(_ensure_bytes(c, f"chunk[{i}]"))
    return h.digest()


def sha3_256(data: bytes) -> bytes:
    return hashlib.sha3_256(_ensure_bytes(data, "data")).digest()


__all__ = ["keccak256", "keccak256_concat", "sha3_256"]
