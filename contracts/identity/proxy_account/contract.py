# Proxy Account (owner-gated CALL/CREATE dispatch + key/value data store)
#
# The owner is held in the data store itself, at the reserved zero key, and can
# only be replaced through change_owner. In the standard identity layout the
# owner is a Key Manager, so every dispatch here has already passed its quorum.
#
#   execute(CALL, to, value, data)    -> callee's encoded return value
#   execute(CREATE, _, value, code)   -> address of the new contract

from stdlib import abi, events, storage

from contracts.stdlib import errors
from contracts.stdlib.access.keys import ZERO_KEY
from contracts.stdlib.access.ownable import get_owner, init_owner, require_owner, set_owner

CALL = 0
CREATE = 1

MAX_DATA_KEY_BYTES = 128

# Storage key prefixes (never change once deployed)
P_DATA = b"px:data."  # + key -> value
OWNER_SLOT = P_DATA + ZERO_KEY

ONLY_OWNER = "only-owner-allowed"


def _only_owner() -> None:
    require_owner(abi.msg_sender(), key=OWNER_SLOT, message=ONLY_OWNER, code=errors.UNAUTHORIZED)


def _check_data_key(key: bytes) -> None:
    abi.require(
        isinstance(key, bytes) and 0 < len(key) <= MAX_DATA_KEY_BYTES,
        "Invalid data key",
        code=errors.INVALID_KEY,
    )


def init(owner: bytes) -> None:
    abi.require(isinstance(owner, bytes) and len(owner) > 0, "Owner must be an address")
    init_owner(owner, key=OWNER_SLOT)


def owner() -> bytes:
    return get_owner(key=OWNER_SLOT) or b""


def change_owner(new_owner: bytes) -> None:
    _only_owner()
    abi.require(isinstance(new_owner, bytes) and len(new_owner) > 0, "Owner must be an address")
    set_owner(new_owner, key=OWNER_SLOT)
    events.emit(b"OwnerChanged", {"ownerAddress": new_owner})


def get_data(key: bytes) -> bytes:
    _check_data_key(key)
    return storage.get(P_DATA + key)


def set_data(key: bytes, value: bytes) -> None:
    _only_owner()
    _check_data_key(key)
    abi.require(key != ZERO_KEY, "Owner is changed through change_owner", code=errors.RESERVED_KEY)
    abi.require(isinstance(value, bytes), "Invalid data value")
    storage.set(P_DATA + key, value)
    events.emit(b"DataChanged", {"key": key, "value": value})


def _call(to: bytes, value: int, data: bytes) -> bytes:
    abi.require(
        isinstance(to, bytes) and len(to) > 0 and to != b"\x00" * len(to),
        "Invalid destination",
        code=errors.INVALID_DESTINATION,
    )
    ok, out = abi.call(to, value, data)
    abi.require(
        ok,
        "Call failed: " + out.decode("utf-8", "replace"),
        code=errors.CALL_FAILED,
        context={"reason": out.decode("utf-8", "replace")},
    )
    events.emit(b"ExecutedCall", {"value": value, "to": to, "data": data})
    return out


def _create(value: int, code: bytes) -> bytes:
    abi.require(len(code) > 0, "Empty contract code", code=errors.DEPLOYMENT_FAILED)
    ok, out = abi.create(value, code)
    abi.require(
        ok,
        "Deployment failed",
        code=errors.DEPLOYMENT_FAILED,
        context={"reason": out.decode("utf-8", "replace")},
    )
    events.emit(b"ContractCreated", {"contractAddress": out})
    return out


def execute(kind: int, to: bytes, value: int, data: bytes) -> bytes:
    _only_owner()
    abi.require(isinstance(value, int) and value >= 0, "Invalid value")
    abi.require(isinstance(data, bytes), "Invalid data")
    if kind == CALL:
        return _call(to, value, data)
    if kind == CREATE:
        return _create(value, data)
    abi.revert("Wrong Operation Type", code=errors.UNKNOWN_EXECUTION_KIND, context={"kind": kind})


# ─── ABI (docstring signatures for tooling) ──────────────────────────────────
#
# @view def owner() -> "address"
# def change_owner(new_owner: "address") -> {}
# @view def get_data(key: "bytes") -> "bytes"
# def set_data(key: "bytes", value: "bytes") -> {}
# def execute(kind: "u8", to: "address", value: "u256", data: "bytes") -> "bytes"
