"""
Top-level 'stdlib' shim for identity contracts.

Contracts and tests use:

    from stdlib import abi, events, hash, storage
"""

from idvm.stdlib import abi, events, hash, storage

__all__ = ["abi", "events", "hash", "storage"]
