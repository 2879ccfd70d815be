"""
chainstate.types.events — event/log record type.

`LogEvent` records a contract-emitted event: the emitting contract's address,
the event name, and its named arguments. Argument values are restricted by the
VM events API to bytes, str, int, bool and lists/tuples of those.

* `to_dict()` renders a JSON-friendly form (bytes → 0x-hex).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping


def _json_value(v: Any) -> Any:
    if isinstance(v, (bytes, bytearray)):
        return "0x" + bytes(v).hex()
    if isinstance(v, (list, tuple)):
        return [_json_value(x) for x in v]
    return v


@dataclass(frozen=True)
class LogEvent:
    """
    A single event emitted during execution.

    Attributes:
        address: bytes — emitter address
        name:    str — event name (e.g. "KeyAdded")
        args:    mapping of argument name → value
    """

    address: bytes
    name: str
    args: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.address, (bytes, bytearray)) or len(self.address) == 0:
            raise ValueError("address must be non-empty bytes")
        if not isinstance(self.name, str) or not self.name:
            raise ValueError("name must be a non-empty str")
        object.__setattr__(self, "address", bytes(self.address))
        object.__setattr__(self, "args", dict(self.args))

    def __getitem__(self, key: str) -> Any:
        return self.args[key]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": "0x" + self.address.hex(),
            "name": self.name,
            "args": {k: _json_value(v) for k, v in self.args.items()},
        }

    def __repr__(self) -> str:  # pragma: no cover - cosmetic
        return f"LogEvent({self.name}@0x{self.address.hex()[:8]}…, {sorted(self.args)})"


__all__ = ["LogEvent"]
