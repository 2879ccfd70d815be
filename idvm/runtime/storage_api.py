"""
idvm.runtime.storage_api — contract-scoped key/value storage.

Public API (re-exported by stdlib.storage)
------------------------------------------
- get(key: bytes, default: bytes = b"") -> bytes
- set(key: bytes, value: bytes) -> None        # empty value deletes
- delete(key: bytes) -> None
- exists(key: bytes) -> bool
- get_int(key: bytes) -> int                   # big-endian, unsigned; 0 if unset
- set_int(key: bytes, value: int) -> None

Reads and writes go through the host journal at the executing contract's
address, so they participate in the frame's checkpoint.
"""

from __future__ import annotations

from idvm.errors import VmError

from .context import current

MAX_STORAGE_KEY_BYTES = 256


def _check_key(key: bytes) -> bytes:
    if not isinstance(key, (bytes, bytearray)):
        raise VmError("storage key must be bytes", code="storage_invalid")
    if len(key) == 0 or len(key) > MAX_STORAGE_KEY_BYTES:
        raise VmError(
            "storage key length out of range",
            code="storage_invalid",
            context={"len": len(key)},
        )
    return bytes(key)


def _check_value(value: bytes) -> bytes:
    if not isinstance(value, (bytes, bytearray)):
        raise VmError("storage value must be bytes", code="storage_invalid")
    limit = current().host.config.max_storage_value_bytes
    if len(value) > limit:
        raise VmError(
            "storage value too large",
            code="storage_invalid",
            context={"len": len(value), "limit": limit},
        )
    return bytes(value)


def get(key: bytes, default: bytes = b"") -> bytes:
    active = current()
    return active.host.journal.storage_get(active.frame.address, _check_key(key), default=default)


def set(key: bytes, value: bytes) -> None:  # noqa: A001 - mirrors stdlib surface
    active = current()
    active.host.journal.storage_set(active.frame.address, _check_key(key), _check_value(value))


def delete(key: bytes) -> None:
    active = current()
    active.host.journal.storage_delete(active.frame.address, _check_key(key))


def exists(key: bytes) -> bool:
    return len(get(key)) > 0


def get_int(key: bytes) -> int:
    raw = get(key)
    return int.from_bytes(raw, "big") if raw else 0


def set_int(key: bytes, value: int) -> None:
    if not isinstance(value, int) or value < 0:
        raise VmError("storage int must be a non-negative int", code="storage_invalid")
    if value == 0:
        delete(key)
        return
    set(key, value.to_bytes((value.bit_length() + 7) // 8, "big"))


__all__ = ["get", "set", "delete", "exists", "get_int", "set_int"]
