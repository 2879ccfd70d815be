"""
chainstate — journaled account/storage/log state for the identity VM host.

Subpackages
-----------
- chainstate.state : Account records, per-address StorageView, nested Journal
- chainstate.types : LogEvent and Receipt records
- chainstate.errors: typed state-layer exceptions
"""

from .errors import InsufficientBalance, StateConflict, StateError
from .state import Account, Journal, StorageView
from .types import LogEvent, Receipt

__all__ = [
    "Account",
    "Journal",
    "StorageView",
    "LogEvent",
    "Receipt",
    "StateError",
    "StateConflict",
    "InsufficientBalance",
]
