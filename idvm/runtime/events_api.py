"""
idvm.runtime.events_api — contract event emission.

    events.emit(b"KeyAdded", {"key": key_id, "purposes": 3, "keyType": 1})

Names are non-empty ASCII bytes (or str); argument keys are identifier-like
strings; values are bytes, str, int, bool or lists/tuples of those. Each
emitted event is appended to the host journal as a LogEvent at the executing
contract's address, so it is discarded if the frame reverts.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Mapping

from chainstate.types.events import LogEvent
from idvm.errors import VmError

from .context import current

MAX_EVENT_NAME_BYTES = 64
MAX_KEY_LEN = 64
MAX_BYTES_LEN = 64 * 1024
MAX_INT_BITS = 256

_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _invalid(message: str, **context: Any) -> VmError:
    return VmError(message, code="event_invalid", context=context)


def _check_name(name: Any) -> str:
    if isinstance(name, str):
        name = name.encode("ascii", errors="replace")
    if not isinstance(name, (bytes, bytearray)):
        raise _invalid("event name must be bytes", where="name_type")
    if len(name) == 0:
        raise _invalid("event name must be non-empty", where="name_empty")
    if len(name) > MAX_EVENT_NAME_BYTES:
        raise _invalid("event name too long", where="name_length", len=len(name))
    try:
        return bytes(name).decode("ascii")
    except UnicodeDecodeError as e:
        raise _invalid("event name must be ASCII", where="name_ascii") from e


def _check_key(key: Any) -> str:
    if not isinstance(key, str) or not key:
        raise _invalid("event key must be a non-empty str", where="key_type")
    if len(key) > MAX_KEY_LEN:
        raise _invalid("event key too long", where="key_length", len=len(key))
    if not _KEY_RE.match(key):
        raise _invalid("event key has invalid characters", where="key_grammar", key=key)
    return key


def _check_value(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        if len(value) > MAX_BYTES_LEN:
            raise _invalid("event bytes arg too long", where="value_bytes_length", len=len(value))
        return bytes(value)
    if isinstance(value, bool):
        # bool is a subclass of int, so check it first.
        return value
    if isinstance(value, int):
        if value.bit_length() > MAX_INT_BITS:
            raise _invalid("event int arg out of range", where="value_int_bits")
        return int(value)
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return tuple(_check_value(v) for v in value)
    raise _invalid("unsupported event arg type", where="value_type", py_type=type(value).__name__)


def emit(name: bytes, args: Mapping[str, Any]) -> None:
    ev_name = _check_name(name)
    if not isinstance(args, Mapping):
        raise _invalid("event args must be a mapping", where="args_type")
    checked: Dict[str, Any] = {_check_key(k): _check_value(v) for k, v in args.items()}
    active = current()
    active.host.journal.log(LogEvent(active.frame.address, ev_name, checked))


__all__ = ["emit"]
