"""
idvm.runtime.codec — canonical CBOR encoding for calldata and records.

Calldata is a CBOR array `[function_name, [arg0, arg1, ...]]`. Records that
contracts keep in storage (key entries, pending actions, claims) use the same
canonical encoding so the bytes are deterministic for equal values.

Supported value types: bytes, str, int, bool, None, list/tuple, dict with str
keys. Tuples decode as lists.
"""

from __future__ import annotations

from typing import Any, Tuple

import cbor2

from idvm.errors import VmError


def encode(obj: Any) -> bytes:
    try:
        return cbor2.dumps(obj, canonical=True)
    except (cbor2.CBOREncodeError, TypeError, ValueError) as e:
        raise VmError(f"cannot encode value: {e}", code="abi_encode") from e


def decode(blob: bytes) -> Any:
    if not isinstance(blob, (bytes, bytearray, memoryview)):
        raise VmError("encoded value must be bytes", code="abi_decode")
    try:
        return cbor2.loads(bytes(blob))
    except (cbor2.CBORDecodeError, ValueError, EOFError) as e:
        raise VmError(f"malformed encoding: {e}", code="abi_decode") from e


def encode_call(fn: str, *args: Any) -> bytes:
    """Build calldata invoking `fn(*args)`."""
    if not isinstance(fn, str) or not fn:
        raise VmError("function name must be a non-empty str", code="abi_encode")
    return encode([fn, list(args)])


def decode_call(data: bytes) -> Tuple[str, Tuple[Any, ...]]:
    """Parse calldata into (function_name, args). Raises VmError on bad shape."""
    obj = decode(data)
    if (
        not isinstance(obj, list)
        or len(obj) != 2
        or not isinstance(obj[0], str)
        or not isinstance(obj[1], list)
    ):
        raise VmError("calldata must be [name, [args...]]", code="abi_decode")
    return obj[0], tuple(obj[1])


__all__ = ["encode", "decode", "encode_call", "decode_call"]
