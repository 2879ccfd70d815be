"""
Counter (deterministic)

A tiny dispatch target for identity flows: a Key Manager or Proxy Account calls
it and the effect is visible in its stored integer.

Public ABI:
- integer() -> int
- change_integer(value: int) -> None
- inc(by: int = 1) -> int
- fail_with(a: int, b: int) -> None       # always reverts
"""

from stdlib import abi, events, storage

# --- Storage keys (bytes for determinism) ---
KEY_INTEGER = b"counter:value"

U128_MAX = (1 << 128) - 1
MAX_INC = 1_000_000


def _load_u128(key: bytes) -> int:
    raw = storage.get(key)
    if len(raw) == 0:
        return 0
    if len(raw) > 16:
        abi.revert("BAD_STORED_LENGTH")
    return int.from_bytes(raw, "big")


def _store_u128(key: bytes, value: int) -> None:
    abi.require(0 <= value <= U128_MAX, "U128_OVERFLOW")
    storage.set(key, value.to_bytes(16, "big"))


def integer() -> int:
    """
    @notice Return the stored integer.
    """
    return _load_u128(KEY_INTEGER)


def change_integer(value: int) -> None:
    """
    @notice Overwrite the stored integer.
    @param value New u128 value.
    """
    abi.require(isinstance(value, int), "INTEGER_EXPECTED")
    _store_u128(KEY_INTEGER, value)
    events.emit(b"IntegerChanged", {"value": value, "sender": abi.msg_sender()})


def inc(by: int = 1) -> int:
    """
    @notice Increase the stored integer by `by` and return the new value.
    @param by Amount to add (1..MAX_INC).
    """
    abi.require(by > 0, "INC_MUST_BE_POSITIVE")
    abi.require(by <= MAX_INC, "INC_TOO_LARGE")
    new_value = _load_u128(KEY_INTEGER) + by
    _store_u128(KEY_INTEGER, new_value)
    events.emit(b"Inc", {"by": by, "value": new_value})
    return new_value


def fail_with(a: int, b: int) -> None:
    # Writes first so callers can check that the write is rolled back.
    _store_u128(KEY_INTEGER, a + b)
    abi.revert("COUNTER_FAILURE", context={"a": a, "b": b})
