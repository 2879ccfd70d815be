# -*- coding: utf-8 -*-
"""
contracts.stdlib.access.ownable
================================

Single-owner helper for identity contracts.

- read the current owner (`get_owner`)
- initialize the owner once (`init_owner`)
- check that a caller is the owner (`require_owner`)
- hand the owner role to another account (`set_owner`)

The owner is kept at one storage key. Contracts that do not care where it lives
use the default `OWNER_KEY`; contracts whose owner is part of a wider data store
(the proxy account keeps it at the zero data key) pass their own `key=`.

Typical usage
-------------
    from contracts.stdlib.access.ownable import init_owner, require_owner

    def init(owner: bytes) -> None:
        init_owner(owner)

    def admin_only() -> None:
        require_owner(abi.msg_sender())
        # ... privileged logic ...

Failures revert with code `Unauthorized` unless the caller supplies another.
"""
from __future__ import annotations

from typing import Optional

from contracts.stdlib import errors

OWNER_KEY: bytes = b"access:owner"

NOT_OWNER = "msg.sender should be the owner"

__all__ = [
    "OWNER_KEY",
    "NOT_OWNER",
    "get_owner",
    "init_owner",
    "require_owner",
    "set_owner",
]


def _std_storage():
    from stdlib import storage  # type: ignore

    return storage


def _std_abi():
    from stdlib import abi  # type: ignore

    return abi


def get_owner(*, key: bytes = OWNER_KEY) -> Optional[bytes]:
    """Return the current owner address, or None if not set."""
    v = _std_storage().get(key)
    return v if len(v) > 0 else None


def init_owner(owner: bytes, *, key: bytes = OWNER_KEY) -> None:
    """Initialize the owner. Does not overwrite an owner that is already set."""
    s = _std_storage()
    if len(s.get(key)) == 0:
        s.set(key, owner)


def require_owner(
    caller: bytes,
    *,
    key: bytes = OWNER_KEY,
    message: str = NOT_OWNER,
    code: str = errors.UNAUTHORIZED,
) -> None:
    owner = get_owner(key=key)
    _std_abi().require(owner is not None and owner == caller, message, code=code)


def set_owner(new_owner: bytes, *, key: bytes = OWNER_KEY) -> bytes:
    """
    Overwrite the owner without an authorization check and return the previous
    owner (empty bytes if none). Callers gate this with `require_owner`.
    An empty `new_owner` clears the slot.
    """
    previous = get_owner(key=key) or b""
    _std_storage().set(key, new_owner)
    return previous
