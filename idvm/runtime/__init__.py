"""
idvm.runtime — host and contract-facing runtime APIs.

- host       : Host (deploy / transact / view, nested CALL/CREATE)
- context    : active call frame (address, sender, value, depth)
- loader     : contract source → module, cached by code hash
- codec      : canonical CBOR for calldata and storage records
- storage_api, events_api, hash_api, abi : surfaces re-exported by `stdlib`
"""

from .context import Frame, current, current_frame
from .host import Host

__all__ = ["Host", "Frame", "current", "current_frame"]
