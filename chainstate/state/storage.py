"""
chainstate.state.storage — per-account storage (key/value)

A deterministic key/value view keyed by account address (`bytes`) and storage
key (`bytes`) with `bytes` values. Contract storage keys are prefix-scoped
byte strings of arbitrary length, so no fixed key length is enforced.

- Bytes-in / bytes-out; inputs are copied to immutable `bytes`.
- "Empty means absent": storing an empty value deletes the key.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, MutableMapping, Optional, Tuple


def _as_bytes(x: bytes | bytearray | memoryview, *, name: str) -> bytes:
    if not isinstance(x, (bytes, bytearray, memoryview)):
        raise TypeError(f"{name} must be bytes-like")
    return bytes(x)


@dataclass
class StorageView:
    """
    A per-account key/value store.

    Parameters
    ----------
    backend :
        Optional external mapping shaped {address: {key: value}}. If not
        provided, an internal dict is used.
    """
    backend: Optional[MutableMapping[bytes, Dict[bytes, bytes]]] = None

    _store: MutableMapping[bytes, Dict[bytes, bytes]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._store = self.backend if self.backend is not None else {}

    def get(self, address: bytes | bytearray | memoryview,
            key: bytes | bytearray | memoryview,
            default: bytes = b"") -> bytes:
        addr_b = _as_bytes(address, name="address")
        key_b = _as_bytes(key, name="key")
        return self._store.get(addr_b, {}).get(key_b, default)

    def has(self, address: bytes | bytearray | memoryview,
            key: bytes | bytearray | memoryview) -> bool:
        addr_b = _as_bytes(address, name="address")
        key_b = _as_bytes(key, name="key")
        return key_b in self._store.get(addr_b, {})

    def set(self, address: bytes | bytearray | memoryview,
            key: bytes | bytearray | memoryview,
            value: bytes | bytearray | memoryview) -> None:
        """Set value for (address, key). An empty value deletes the key."""
        addr_b = _as_bytes(address, name="address")
        key_b = _as_bytes(key, name="key")
        val_b = _as_bytes(value, name="value")
        if len(val_b) == 0:
            self.delete(addr_b, key_b)
            return
        self._store.setdefault(addr_b, {})[key_b] = val_b

    def delete(self, address: bytes | bytearray | memoryview,
               key: bytes | bytearray | memoryview) -> bool:
        """Delete (address, key). Returns True if a key existed and was removed."""
        addr_b = _as_bytes(address, name="address")
        key_b = _as_bytes(key, name="key")
        acc = self._store.get(addr_b)
        if acc is None:
            return False
        removed = acc.pop(key_b, None) is not None
        if not acc:
            # Drop empty buckets
            self._store.pop(addr_b, None)
        return removed

    def items(self, address: bytes | bytearray | memoryview) -> Iterator[Tuple[bytes, bytes]]:
        """Iterate (key, value) pairs for an address, sorted by key."""
        addr_b = _as_bytes(address, name="address")
        acc = self._store.get(addr_b, {})
        for k in sorted(acc.keys()):
            yield k, acc[k]


__all__ = ["StorageView"]
