"""
chainstate.errors — state-layer exceptions.

Hierarchy
---------
StateError (base)
 ├─ StateConflict       : account already exists / nonce overflow / bad journal use
 └─ InsufficientBalance : debit larger than the account balance

These are raised by accounts and the journal. The VM host converts them into
failed message calls when they happen inside a nested frame and lets them
propagate from top-level transactions after rolling the journal back.

The classes import nothing from other packages so they can be used from the
lowest modules without cycles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(eq=False)
class StateError(Exception):
    """
    Base state error.

    Attributes:
        message: Human-readable explanation.
        code:    Stable machine code string.
        data:    Optional structured details (kept JSON-serializable).
    """
    message: str = "state error"
    code: str = "STATE_ERROR"
    data: Optional[Dict[str, Any]] = field(default=None)

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.data:
            return f"{self.code}: {self.message} ({self.data})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        return out


class StateConflict(StateError):
    """An account write that contradicts existing state (e.g. create over an existing address)."""

    def __init__(self, message: str = "state conflict", *, address: Optional[bytes] = None):
        data = {"address": address.hex()} if address is not None else None
        super().__init__(message=message, code="STATE_CONFLICT", data=data)


class InsufficientBalance(StateError):
    """Debit or value transfer larger than the available balance."""

    def __init__(self, *, balance: int, amount: int, address: Optional[bytes] = None):
        data: Dict[str, Any] = {"balance": balance, "amount": amount}
        if address is not None:
            data["address"] = address.hex()
        super().__init__(message="insufficient balance", code="INSUFFICIENT_BALANCE", data=data)


__all__ = ["StateError", "StateConflict", "InsufficientBalance"]
