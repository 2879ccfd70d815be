"""Contract storage, scoped to the executing contract's address. Keys and values are bytes."""

from __future__ import annotations

from idvm.runtime.storage_api import delete, exists, get, get_int, set, set_int

__all__ = ["get", "set", "delete", "exists", "get_int", "set_int"]
