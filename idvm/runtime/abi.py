"""
idvm.runtime.abi — contract-facing call, caller and failure helpers.

Failure
    require(cond, message, *, code=..., context=None)
    revert(message, *, code=..., context=None)

Message context
    msg_sender(), msg_value(), self_address(), balance(address)

Raw dispatch (never raise for callee failure)
    call(to, value, data)   -> (success, output)
    create(value, code)     -> (success, address | reason)

Encoding
    encode(obj), decode(blob), encode_call(fn, *args)
"""

from __future__ import annotations

from typing import Any, Mapping, NoReturn, Optional, Tuple

from idvm.errors import Revert, VmError

from . import codec
from .context import current

encode = codec.encode
decode = codec.decode
encode_call = codec.encode_call


def require(
    condition: bool,
    message: Any = "abi.require failed",
    *,
    code: str = "abi.require_failed",
    context: Optional[Mapping[str, Any]] = None,
) -> None:
    """
    Assertion helper for contracts:

        abi.require(len(topic) == 32, "Topic must be 32 bytes", code="InvalidTopic")
    """
    if condition:
        return
    raise Revert(message, code=code, context=context)


def revert(
    message: Any = "reverted",
    *,
    code: str = "revert",
    context: Optional[Mapping[str, Any]] = None,
) -> NoReturn:
    raise Revert(message, code=code, context=context)


def msg_sender() -> bytes:
    return current().frame.sender


def msg_value() -> int:
    return current().frame.value


def self_address() -> bytes:
    return current().frame.address


def balance(address: bytes) -> int:
    return current().host.balance_of(address)


def _check_address(to: Any) -> bytes:
    if not isinstance(to, (bytes, bytearray)) or len(to) == 0:
        raise VmError("address must be non-empty bytes", code="abi_invalid")
    return bytes(to)


def _check_value(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise VmError("value must be a non-negative int", code="abi_invalid")
    return value


def call(to: bytes, value: int, data: bytes) -> Tuple[bool, bytes]:
    """
    Raw message call. Returns (True, encoded return value) on success and
    (False, reason bytes) when the callee fails; the callee's state changes
    are rolled back in the failure case.
    """
    if not isinstance(data, (bytes, bytearray)):
        raise VmError("calldata must be bytes", code="abi_invalid")
    return current().host.message_call(_check_address(to), _check_value(value), bytes(data))


def create(value: int, code: bytes) -> Tuple[bool, bytes]:
    """Deploy contract source `code`. Returns (True, new address) or (False, reason bytes)."""
    if not isinstance(code, (bytes, bytearray)):
        raise VmError("code must be bytes", code="abi_invalid")
    return current().host.message_create(_check_value(value), bytes(code))


__all__ = [
    "require",
    "revert",
    "msg_sender",
    "msg_value",
    "self_address",
    "balance",
    "call",
    "create",
    "encode",
    "decode",
    "encode_call",
]
