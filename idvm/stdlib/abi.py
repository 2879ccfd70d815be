"""
Failure, message-context, dispatch and encoding helpers for contracts.

    abi.require(cond, "message", code="Unauthorized")
    sender = abi.msg_sender()
    ok, out = abi.call(to, value, abi.encode_call("fn", arg))
"""

from __future__ import annotations

from idvm.runtime.abi import (
    balance,
    call,
    create,
    decode,
    encode,
    encode_call,
    msg_sender,
    msg_value,
    require,
    revert,
    self_address,
)

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
