"""
chainstate.types.receipt — outcome of a successful top-level transaction.

Failed transactions never produce a receipt: the host rolls the journal back
and re-raises the contract's Revert to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from .events import LogEvent


@dataclass(frozen=True)
class Receipt:
    sender: bytes
    to: Optional[bytes]
    function: str
    return_value: Any
    logs: Tuple[LogEvent, ...] = ()

    def events(self, name: Optional[str] = None) -> List[LogEvent]:
        """Logs in emission order, optionally filtered by event name."""
        if name is None:
            return list(self.logs)
        return [ev for ev in self.logs if ev.name == name]

    def event_names(self) -> List[str]:
        return [ev.name for ev in self.logs]


__all__ = ["Receipt"]
