"""
idvm.runtime.context — the active call frame.

Contracts never receive the caller or their own address as arguments; the
host pushes a `Frame` for every message call and the contract-facing APIs
(`abi.msg_sender()`, `storage.get()`, `events.emit()`, …) read it from here.

Frames are tracked with a ContextVar so nested calls restore their parent frame
when they return, including on failure.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, Optional

from idvm.errors import ContextError

if TYPE_CHECKING:  # pragma: no cover
    from .host import Host


def to_hex(b: bytes) -> str:
    return "0x" + bytes(b).hex()


@dataclass(frozen=True)
class Frame:
    """
    One message call.

    Fields
    ------
    address: the executing contract
    sender:  the immediate caller (EOA or contract)
    value:   amount transferred with the call
    depth:   0 for the top-level transaction, +1 per nested call/create
    """
    address: bytes
    sender: bytes
    value: int = 0
    depth: int = 0

    def child(self, address: bytes, value: int) -> "Frame":
        return Frame(address=address, sender=self.address, value=value, depth=self.depth + 1)


@dataclass(frozen=True)
class ActiveCall:
    frame: Frame
    host: "Host"


_ACTIVE: ContextVar[Optional[ActiveCall]] = ContextVar("_IDVM_ACTIVE_CALL", default=None)


@contextmanager
def enter(frame: Frame, host: "Host") -> Iterator[ActiveCall]:
    token = _ACTIVE.set(ActiveCall(frame, host))
    try:
        yield _ACTIVE.get()  # type: ignore[misc]
    finally:
        _ACTIVE.reset(token)


def current() -> ActiveCall:
    active = _ACTIVE.get()
    if active is None:
        raise ContextError()
    return active


def current_frame() -> Frame:
    return current().frame


__all__ = ["Frame", "ActiveCall", "enter", "current", "current_frame", "to_hex"]
