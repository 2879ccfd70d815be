"""
Deterministic hash helpers exposed to contracts.

Surface:
    keccak256(data: bytes) -> bytes
    keccak256_concat(*chunks: bytes) -> bytes
    sha3_256(data: bytes)  -> bytes

Inputs must be *bytes*.
"""

from __future__ import annotations

from idvm.runtime.hash_api import keccak256, keccak256_concat, sha3_256

__all__ = ["keccak256", "keccak256_concat", "sha3_256"]
