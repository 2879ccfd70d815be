# -*- coding: utf-8 -*-
"""
contracts.stdlib.access.keys
============================

Key purposes and key types for identity key rings.

A purpose is a single capability bit (1, 2, 4, 8, …). A key holds a set of
purposes, stored as a bitmask. Membership queries take exactly one purpose;
anything that is not a nonzero power of two is a usage error (InvalidPurpose),
never a plain `False`.

    from contracts.stdlib.access.keys import Purpose, PurposeSet

    held = PurposeSet(Purpose.MANAGEMENT | Purpose.ACTION)
    Purpose.ACTION in held          # True
    held.has(4)                     # False
    held.has(3)                     # reverts: InvalidPurpose

Key ids are the Keccak-256 of the credential (here: the holder's address).
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, IntFlag
from typing import Tuple

from contracts.stdlib import errors

U256_MAX = (1 << 256) - 1

ZERO_KEY = b"\x00" * 32


class Purpose(IntFlag):
    MANAGEMENT = 1
    ACTION = 2
    CLAIM = 4
    ENCRYPTION = 8


class KeyType(IntEnum):
    ECDSA = 1
    RSA = 2


def _std_abi():
    from stdlib import abi  # type: ignore

    return abi


def is_single_purpose(value: int) -> bool:
    """True iff `value` is a nonzero power of two within u256."""
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and 0 < value <= U256_MAX
        and value & (value - 1) == 0
    )


def require_single_purpose(value: int) -> int:
    """Return `value` as an int, reverting with InvalidPurpose unless it is a single purpose bit."""
    _std_abi().require(
        is_single_purpose(value),
        "Purpose must be power of two",
        code=errors.INVALID_PURPOSE,
        context={"purpose": value if isinstance(value, int) else repr(value)},
    )
    return int(value)


@dataclass(frozen=True)
class PurposeSet:
    """The set of purposes a key holds. An empty set means the key is absent."""

    mask: int = 0

    def __post_init__(self) -> None:
        _std_abi().require(
            isinstance(self.mask, int)
            and not isinstance(self.mask, bool)
            and 0 <= self.mask <= U256_MAX,
            "Purposes must be a u256 bitmask",
            code=errors.INVALID_PURPOSE,
        )
        object.__setattr__(self, "mask", int(self.mask))

    @classmethod
    def of(cls, *purposes: int) -> "PurposeSet":
        mask = 0
        for p in purposes:
            mask |= require_single_purpose(p)
        return cls(mask)

    def has(self, purpose: int) -> bool:
        return bool(self.mask & require_single_purpose(purpose))

    def __contains__(self, purpose: int) -> bool:
        return self.has(purpose)

    def __bool__(self) -> bool:
        return self.mask != 0

    def __iter__(self):
        bit = 1
        while bit <= self.mask:
            if self.mask & bit:
                yield bit
            bit <<= 1

    def members(self) -> Tuple[int, ...]:
        return tuple(self)

    def add(self, purpose: int) -> "PurposeSet":
        return PurposeSet(self.mask | require_single_purpose(purpose))

    def discard(self, purpose: int) -> "PurposeSet":
        return PurposeSet(self.mask & ~require_single_purpose(purpose))


def key_id(address: bytes) -> bytes:
    """Key id of an address-held credential: keccak256(address)."""
    from stdlib import hash  # type: ignore

    return hash.keccak256(address)


__all__ = [
    "Purpose",
    "KeyType",
    "PurposeSet",
    "ZERO_KEY",
    "is_single_purpose",
    "require_single_purpose",
    "key_id",
]
