# Key Manager (key ring + per-purpose thresholds + multi-sig execution)
#
# A key is identified by keccak256 of the credential it stands for (for account
# holders: keccak256(address)). Each key carries a purpose bitmask and a key type.
# Callers are authenticated by the host; this contract only decides whether the
# caller's key may perform or approve an action.
#
#  - execute(to, value, data) records a pending action plus the caller's own
#    confirmation and dispatches it once confirmations >= keys required.
#  - approve(id, approved) adds or withdraws a confirmation; the confirmation
#    that reaches the threshold dispatches.
#  - A failed dispatch reverts the whole triggering call, confirmation included.
#
# Actions targeting this contract need MANAGEMENT; all others need ACTION.

from stdlib import abi, events, storage

from contracts.stdlib import errors
from contracts.stdlib.access.keys import (
    ZERO_KEY,
    KeyType,
    Purpose,
    PurposeSet,
    key_id,
    require_single_purpose,
)

MANAGEMENT = int(Purpose.MANAGEMENT)
ACTION = int(Purpose.ACTION)

# Storage key prefixes (never change once deployed)
K_KEY_COUNT = b"km:keys.count"  # u64, length of the enumerable key list
P_KEY_AT = b"km:keys.at."  # + index(8) -> key id
P_KEY = b"km:key."  # + key id -> cbor [purposes, key_type]
P_LISTED = b"km:listed."  # + key id -> b"\x01" once appended to the list
P_REQUIRED = b"km:required."  # + purpose(32) -> u64
K_TX_COUNT = b"km:tx.count"  # u64, next action id
P_TX = b"km:tx."  # + id(8) -> cbor [to, value, data, purpose, executed]
P_CONFIRMED = b"km:tx.confirmed."  # + id(8) -> cbor [key id, ...]

ONLY_MANAGEMENT = "Only owner or management keys can call this function"


def _u64(x: int) -> bytes:
    abi.require(0 <= x < (1 << 64), "U64")
    return x.to_bytes(8, "big")


def _u256(x: int) -> bytes:
    return x.to_bytes(32, "big")


# ─── Key ring ────────────────────────────────────────────────────────────────


def _load_key(kid: bytes) -> tuple:
    raw = storage.get(P_KEY + kid)
    if not raw:
        return (0, 0)
    rec = abi.decode(raw)
    return (rec[0], rec[1])


def _purposes(kid: bytes) -> PurposeSet:
    return PurposeSet(_load_key(kid)[0])


def _sender_key() -> bytes:
    return key_id(abi.msg_sender())


def _check_key_id(key: bytes) -> None:
    abi.require(
        isinstance(key, bytes) and len(key) == 32 and key != ZERO_KEY,
        "Invalid Key",
        code=errors.INVALID_KEY,
    )


def _require_management() -> None:
    authorized = abi.msg_sender() == abi.self_address() or _purposes(_sender_key()).has(MANAGEMENT)
    abi.require(authorized, ONLY_MANAGEMENT, code=errors.UNAUTHORIZED)


def _store_key(kid: bytes, purposes: int, key_type: int) -> None:
    storage.set(P_KEY + kid, abi.encode([purposes, key_type]))
    if not storage.exists(P_LISTED + kid):
        count = storage.get_int(K_KEY_COUNT)
        storage.set(P_KEY_AT + _u64(count), kid)
        storage.set_int(K_KEY_COUNT, count + 1)
        storage.set(P_LISTED + kid, b"\x01")
    events.emit(b"KeyAdded", {"key": kid, "purposes": purposes, "keyType": key_type})


def init() -> None:
    """The deployer becomes the first MANAGEMENT|ACTION key."""
    _store_key(_sender_key(), MANAGEMENT | ACTION, int(KeyType.ECDSA))


def add_key(key: bytes, purposes: int, key_type: int) -> bool:
    _require_management()
    _check_key_id(key)
    mask = PurposeSet(purposes).mask
    abi.require(mask != 0, "Purposes can not be empty", code=errors.INVALID_PURPOSE)
    abi.require(isinstance(key_type, int) and key_type >= 0, "Invalid key type", code=errors.INVALID_KEY)
    _store_key(key, mask, int(key_type))
    return True


def remove_key(key: bytes) -> bool:
    _require_management()
    _check_key_id(key)
    purposes, key_type = _load_key(key)
    # Removing a key that is not on the ring is rejected rather than a no-op,
    # so KeyRemoved always carries the purposes the key actually had.
    abi.require(purposes != 0, "Key does not exist", code=errors.INVALID_KEY)
    storage.delete(P_KEY + key)
    events.emit(b"KeyRemoved", {"key": key, "purposes": purposes, "keyType": key_type})
    return True


def get_key(key: bytes) -> tuple:
    """Return (purposes, key_type, key); all zero for an absent key."""
    purposes, key_type = _load_key(key)
    if purposes == 0:
        return (0, 0, ZERO_KEY)
    return (purposes, key_type, key)


def key_has_purpose(key: bytes, purpose: int) -> bool:
    return _purposes(key).has(purpose)


def get_key_count() -> int:
    return storage.get_int(K_KEY_COUNT)


def keys_ids(index: int) -> bytes:
    abi.require(
        isinstance(index, int) and 0 <= index < storage.get_int(K_KEY_COUNT),
        "Key index out of range",
        code=errors.INVALID_KEY,
    )
    return storage.get(P_KEY_AT + _u64(index))


# ─── Thresholds ──────────────────────────────────────────────────────────────


def change_keys_required(purpose: int, number: int) -> None:
    _require_management()
    p = require_single_purpose(purpose)
    abi.require(isinstance(number, int) and 0 <= number < (1 << 64), "Invalid number of keys")
    storage.set_int(P_REQUIRED + _u256(p), number)
    events.emit(b"KeysRequiredChanged", {"purpose": p, "number": number})


def get_keys_required(purpose: int) -> int:
    return storage.get_int(P_REQUIRED + _u256(require_single_purpose(purpose)))


# ─── Pending actions ─────────────────────────────────────────────────────────


def _load_tx(action_id: int) -> list:
    return abi.decode(storage.get(P_TX + _u64(action_id)))


def _store_tx(action_id: int, tx: list) -> None:
    storage.set(P_TX + _u64(action_id), abi.encode(tx))


def _load_confirmations(action_id: int) -> list:
    raw = storage.get(P_CONFIRMED + _u64(action_id))
    return abi.decode(raw) if raw else []


def _store_confirmations(action_id: int, confirmed: list) -> None:
    storage.set(P_CONFIRMED + _u64(action_id), abi.encode(confirmed) if confirmed else b"")


def _require_purpose(kid: bytes, purpose: int) -> None:
    abi.require(
        _purposes(kid).has(purpose),
        "Purpose can not be approved with this key",
        code=errors.UNAUTHORIZED_PURPOSE,
    )


def _dispatch(action_id: int) -> None:
    to, value, data, purpose, executed = _load_tx(action_id)
    # Marked before the call so a re-entrant approve sees it as spent.
    _store_tx(action_id, [to, value, data, purpose, True])
    ok, out = abi.call(to, value, data)
    abi.require(
        ok,
        "External call has failed",
        code=errors.EXTERNAL_CALL_FAILED,
        context={"executionId": action_id, "reason": out.decode("utf-8", "replace")},
    )
    events.emit(b"Executed", {"executionId": action_id, "value": value, "to": to, "data": data})


def _maybe_dispatch(action_id: int, purpose: int, confirmed: list) -> None:
    required = storage.get_int(P_REQUIRED + _u256(purpose))
    if len(confirmed) >= required:
        _dispatch(action_id)


def execute(to: bytes, value: int, data: bytes) -> int:
    abi.require(
        isinstance(to, bytes) and len(to) > 0 and to != b"\x00" * len(to),
        "_to should not be address 0x0",
        code=errors.INVALID_DESTINATION,
    )
    abi.require(isinstance(value, int) and value >= 0, "Invalid value")
    abi.require(isinstance(data, bytes), "Invalid data")

    purpose = MANAGEMENT if to == abi.self_address() else ACTION
    kid = _sender_key()
    _require_purpose(kid, purpose)

    action_id = storage.get_int(K_TX_COUNT)
    storage.set_int(K_TX_COUNT, action_id + 1)
    _store_tx(action_id, [to, value, data, purpose, False])
    confirmed = [kid]
    _store_confirmations(action_id, confirmed)

    events.emit(b"ExecutionRequested", {"executionId": action_id, "value": value, "to": to, "data": data})
    events.emit(b"Approved", {"executionId": action_id, "approved": True})
    _maybe_dispatch(action_id, purpose, confirmed)
    return action_id


def approve(action_id: int, approved: bool) -> bool:
    abi.require(
        isinstance(action_id, int) and 0 <= action_id < storage.get_int(K_TX_COUNT),
        "Unknown action",
        code=errors.UNKNOWN_ACTION,
    )
    to, value, data, purpose, executed = _load_tx(action_id)
    kid = _sender_key()
    _require_purpose(kid, purpose)
    abi.require(not executed, "Action already executed", code=errors.UNKNOWN_ACTION)

    confirmed = _load_confirmations(action_id)
    added = bool(approved) and kid not in confirmed
    if added:
        confirmed.append(kid)
    elif not approved:
        confirmed = [k for k in confirmed if k != kid]
    _store_confirmations(action_id, confirmed)

    events.emit(b"Approved", {"executionId": action_id, "approved": bool(approved)})
    # Only a newly added confirmation can cross the threshold.
    if added:
        _maybe_dispatch(action_id, purpose, confirmed)
    return True


def get_confirmations(action_id: int) -> list:
    if not isinstance(action_id, int) or action_id < 0 or action_id >= (1 << 64):
        return []
    return _load_confirmations(action_id)


def get_transaction(action_id: int) -> dict:
    """Stored pending action; zero-valued fields for an unknown id."""
    if not isinstance(action_id, int) or not 0 <= action_id < storage.get_int(K_TX_COUNT):
        return {"to": b"", "value": 0, "data": b"", "purpose": 0, "executed": False}
    to, value, data, purpose, executed = _load_tx(action_id)
    return {"to": to, "value": value, "data": data, "purpose": purpose, "executed": executed}


def transaction_count() -> int:
    return storage.get_int(K_TX_COUNT)


# ─── ABI (docstring signatures for tooling) ──────────────────────────────────
#
# def add_key(key: "bytes32", purposes: "u256", key_type: "u256") -> "bool"
# def remove_key(key: "bytes32") -> "bool"
# @view def get_key(key: "bytes32") -> ("u256", "u256", "bytes32")
# @view def key_has_purpose(key: "bytes32", purpose: "u256") -> "bool"
# @view def get_key_count() -> "u64"
# @view def keys_ids(index: "u64") -> "bytes32"
# def change_keys_required(purpose: "u256", number: "u64") -> {}
# @view def get_keys_required(purpose: "u256") -> "u64"
# def execute(to: "address", value: "u256", data: "bytes") -> "u64"
# def approve(action_id: "u64", approved: "bool") -> "bool"
# @view def get_confirmations(action_id: "u64") -> "bytes32[]"
# @view def get_transaction(action_id: "u64") -> {"to","value","data","purpose","executed"}
# @view def transaction_count() -> "u64"
