# Claim Holder (issuer-scoped attestations about one identity)
#
# A claim is filed by its issuer (the caller) about the subject identity this
# contract was deployed for. Its id is keccak256(issuer || subject || topic), so
# an issuer holds at most one claim per topic; re-filing overwrites the payload.
#
#  - change_claim / remove_claim: the stored issuer only.
#  - toggle_review_claim: the subject's owner only.
#  - Removal is a tombstone (isValid = False). Claims stay in the topic index
#    and a removed claim is never made valid again.

from stdlib import abi, events, hash, storage

from contracts.stdlib import errors
from contracts.stdlib.access.ownable import get_owner, init_owner, require_owner

# Storage key prefixes (never change once deployed)
P_CLAIM = b"ch:claim."  # + claim id -> cbor [topic, scheme, issuer, data, uri, is_valid, review]
K_TOPIC_COUNT = b"ch:topics.count"  # u64
P_TOPIC_AT = b"ch:topics.at."  # + index(8) -> topic
P_TOPIC_SEEN = b"ch:topics.seen."  # + topic -> b"\x01"
P_BY_TOPIC_COUNT = b"ch:by_topic.count."  # + topic -> u64
P_BY_TOPIC_AT = b"ch:by_topic.at."  # + topic + index(8) -> claim id

NOT_ISSUER = "msg.sender should be the claim issuer"


def _u64(x: int) -> bytes:
    abi.require(0 <= x < (1 << 64), "U64")
    return x.to_bytes(8, "big")


def _load_claim(claim_id: bytes) -> list:
    raw = storage.get(P_CLAIM + claim_id)
    return abi.decode(raw) if raw else []


def _store_claim(claim_id: bytes, claim: list) -> None:
    storage.set(P_CLAIM + claim_id, abi.encode(claim))


def _snapshot(claim_id: bytes, claim: list) -> dict:
    topic, scheme, issuer, data, uri, is_valid, review = claim
    return {
        "claimId": claim_id,
        "topic": topic,
        "scheme": scheme,
        "issuer": issuer,
        "data": data,
        "uri": uri,
    }


def _check_claim_id(claim_id: bytes) -> None:
    abi.require(isinstance(claim_id, bytes) and len(claim_id) == 32, "Invalid claim id", code=errors.UNKNOWN_CLAIM)


def _require_issuer(claim_id: bytes) -> list:
    _check_claim_id(claim_id)
    claim = _load_claim(claim_id)
    abi.require(len(claim) > 0 and claim[2] == abi.msg_sender(), NOT_ISSUER, code=errors.UNAUTHORIZED)
    return claim


def _check_payload(scheme: int, data: bytes, uri: str) -> None:
    abi.require(isinstance(scheme, int) and scheme >= 0, "Invalid scheme")
    abi.require(isinstance(data, bytes), "Invalid data")
    abi.require(isinstance(uri, str), "Invalid uri")


def _append_to_topic(topic: bytes, claim_id: bytes) -> None:
    if not storage.exists(P_TOPIC_SEEN + topic):
        count = storage.get_int(K_TOPIC_COUNT)
        storage.set(P_TOPIC_AT + _u64(count), topic)
        storage.set_int(K_TOPIC_COUNT, count + 1)
        storage.set(P_TOPIC_SEEN + topic, b"\x01")
    n = storage.get_int(P_BY_TOPIC_COUNT + topic)
    storage.set(P_BY_TOPIC_AT + topic + _u64(n), claim_id)
    storage.set_int(P_BY_TOPIC_COUNT + topic, n + 1)


def init(owner: bytes) -> None:
    abi.require(isinstance(owner, bytes) and len(owner) > 0, "Owner must be an address")
    init_owner(owner)


def owner() -> bytes:
    return get_owner() or b""


def claim_id_of(issuer: bytes, topic: bytes) -> bytes:
    return hash.keccak256(issuer + owner() + topic)


def add_claim(topic: bytes, scheme: int, data: bytes, uri: str) -> bytes:
    abi.require(isinstance(topic, bytes) and len(topic) == 32, "Topic must be 32 bytes", code=errors.INVALID_TOPIC)
    _check_payload(scheme, data, uri)
    issuer = abi.msg_sender()
    claim_id = claim_id_of(issuer, topic)

    prior = _load_claim(claim_id)
    if prior:
        claim = [topic, scheme, issuer, data, uri, prior[5], prior[6]]
    else:
        claim = [topic, scheme, issuer, data, uri, True, False]
        _append_to_topic(topic, claim_id)
    _store_claim(claim_id, claim)
    events.emit(b"ClaimAdded", _snapshot(claim_id, claim))
    return claim_id


def change_claim(claim_id: bytes, scheme: int, data: bytes, uri: str) -> bool:
    claim = _require_issuer(claim_id)
    _check_payload(scheme, data, uri)
    claim[1] = scheme
    claim[3] = data
    claim[4] = uri
    _store_claim(claim_id, claim)
    events.emit(b"ClaimChanged", _snapshot(claim_id, claim))
    return True


def remove_claim(claim_id: bytes) -> bool:
    claim = _require_issuer(claim_id)
    events.emit(b"ClaimRemoved", _snapshot(claim_id, claim))
    claim[5] = False
    _store_claim(claim_id, claim)
    return True


def toggle_review_claim(claim_id: bytes) -> bool:
    require_owner(abi.msg_sender())
    _check_claim_id(claim_id)
    claim = _load_claim(claim_id)
    abi.require(len(claim) > 0, "Unknown claim", code=errors.UNKNOWN_CLAIM)
    claim[6] = not claim[6]
    _store_claim(claim_id, claim)
    snapshot = _snapshot(claim_id, claim)
    snapshot["isValid"] = claim[5]
    snapshot["recipientReview"] = claim[6]
    events.emit(b"ClaimApprovalToggled", snapshot)
    return claim[6]


def get_claim(claim_id: bytes) -> dict:
    """Stored claim; zero-valued fields for an id that was never filed."""
    claim = _load_claim(claim_id) if isinstance(claim_id, bytes) and len(claim_id) == 32 else []
    if not claim:
        claim = [b"", 0, b"", b"", "", False, False]
    topic, scheme, issuer, data, uri, is_valid, review = claim
    return {
        "topic": topic,
        "scheme": scheme,
        "issuer": issuer,
        "data": data,
        "uri": uri,
        "isValid": is_valid,
        "recipientReview": review,
    }


def get_topics() -> list:
    return [storage.get(P_TOPIC_AT + _u64(i)) for i in range(storage.get_int(K_TOPIC_COUNT))]


def existing_topic(topic: bytes) -> bool:
    if not isinstance(topic, bytes) or len(topic) != 32:
        return False
    return storage.exists(P_TOPIC_SEEN + topic)


def claims_by_topic(topic: bytes, index: int) -> bytes:
    abi.require(isinstance(topic, bytes) and len(topic) == 32, "Topic must be 32 bytes", code=errors.INVALID_TOPIC)
    abi.require(
        isinstance(index, int) and 0 <= index < storage.get_int(P_BY_TOPIC_COUNT + topic),
        "Claim index out of range",
        code=errors.UNKNOWN_CLAIM,
    )
    return storage.get(P_BY_TOPIC_AT + topic + _u64(index))


def get_claim_ids_by_topic(topic: bytes) -> list:
    if not existing_topic(topic):
        return []
    n = storage.get_int(P_BY_TOPIC_COUNT + topic)
    return [storage.get(P_BY_TOPIC_AT + topic + _u64(i)) for i in range(n)]


# ─── ABI (docstring signatures for tooling) ──────────────────────────────────
#
# @view def owner() -> "address"
# @view def claim_id_of(issuer: "address", topic: "bytes32") -> "bytes32"
# def add_claim(topic: "bytes32", scheme: "u256", data: "bytes", uri: "string") -> "bytes32"
# def change_claim(claim_id: "bytes32", scheme: "u256", data: "bytes", uri: "string") -> "bool"
# def remove_claim(claim_id: "bytes32") -> "bool"
# def toggle_review_claim(claim_id: "bytes32") -> "bool"
# @view def get_claim(claim_id: "bytes32") -> {"topic","scheme","issuer","data","uri","isValid","recipientReview"}
# @view def get_topics() -> "bytes32[]"
# @view def existing_topic(topic: "bytes32") -> "bool"
# @view def claims_by_topic(topic: "bytes32", index: "u64") -> "bytes32"
# @view def get_claim_ids_by_topic(topic: "bytes32") -> "bytes32[]"
