"""
Host semantics: deploy/transact/view, nested CALL/CREATE and frame rollback.
"""

from __future__ import annotations

import pytest

from idvm.config import VmConfig
from idvm.errors import Revert, ValidationError, VmError
from idvm.runtime import Host
from idvm.runtime.host import create_address

from .conftest import addr

STORE_SRC = """
from stdlib import abi, events, storage


def init(start: int) -> None:
    storage.set_int(b"n", start)


def get() -> int:
    return storage.get_int(b"n")


def bump(by: int) -> int:
    n = storage.get_int(b"n") + by
    storage.set_int(b"n", n)
    events.emit(b"Bumped", {"n": n})
    return n


def bump_then_fail(by: int) -> None:
    bump(by)
    abi.revert("nope", code="Custom", context={"by": by})


def whoami() -> bytes:
    return abi.msg_sender()


def _helper() -> int:
    return 1
"""

CALLER_SRC = """
from stdlib import abi, events, storage


def call_and_record(to: bytes, fn: str, arg: int) -> bool:
    events.emit(b"Before", {"to": to})
    ok, out = abi.call(to, 0, abi.encode_call(fn, arg))
    storage.set(b"last", b"\\x01" if ok else b"\\x00")
    return ok


def spawn(code: bytes) -> list:
    ok, out = abi.create(0, code)
    return [ok, out]


def recurse(n: int) -> int:
    if n == 0:
        return 0
    ok, out = abi.call(abi.self_address(), 0, abi.encode_call("recurse", n - 1))
    abi.require(ok, "inner failed", code="Depth")
    return abi.decode(out) + 1


def pay(to: bytes, amount: int) -> bool:
    ok, out = abi.call(to, amount, b"")
    return ok
"""

PLAIN_SRC = """
from stdlib import storage


def get() -> int:
    return storage.get_int(b"n")
"""


@pytest.fixture()
def store(host, alice):
    return host.deploy(alice, STORE_SRC, 7)


@pytest.fixture()
def caller(host, alice):
    return host.deploy(alice, CALLER_SRC)


def test_deploy_runs_init_and_derives_address(host, alice):
    address = host.deploy(alice, STORE_SRC, 3)
    assert address == create_address(alice, 0)
    assert host.nonce_of(alice) == 1
    assert host.view(address, "get") == 3
    assert host.code_at(address) == STORE_SRC.encode()


def test_init_arguments_without_init_rejected(host, alice):
    with pytest.raises(VmError) as ei:
        host.deploy(alice, PLAIN_SRC, 1)
    assert ei.value.code == "create_no_init"
    assert host.nonce_of(alice) == 0


def test_invalid_source_is_not_deployed(host, alice):
    with pytest.raises(ValidationError):
        host.deploy(alice, "import os\n")
    assert host.nonce_of(alice) == 0
    assert host.code_at(create_address(alice, 0)) is None


def test_transact_returns_receipt_with_logs(host, alice, store):
    r = host.transact(alice, store, "bump", 5)
    assert r.return_value == 12
    assert r.event_names() == ["Bumped"]
    assert r.logs[0].address == store
    assert r.logs[0]["n"] == 12
    assert host.view(store, "get") == 12


def test_failed_transaction_leaves_no_trace(host, alice, store):
    before = len(host.logs)
    with pytest.raises(Revert) as ei:
        host.transact(alice, store, "bump_then_fail", 5)
    assert ei.value.code == "Custom"
    assert ei.value.context == {"by": 5}
    assert host.view(store, "get") == 7
    assert len(host.logs) == before


def test_view_discards_writes(host, store):
    assert host.view(store, "bump", 1) == 8
    assert host.view(store, "get") == 7


def test_msg_sender_is_transaction_sender(host, bob, store):
    assert host.transact(bob, store, "whoami").return_value == bob


@pytest.mark.parametrize("fn", ["missing", "_helper", "storage"])
def test_unknown_or_private_function_reverts(host, alice, store, fn):
    with pytest.raises(Revert) as ei:
        host.transact(alice, store, fn)
    assert ei.value.code == "call.unknown_function"


def test_arity_mismatch_reverts(host, alice, store):
    with pytest.raises(Revert) as ei:
        host.transact(alice, store, "bump", 1, 2)
    assert ei.value.code == "call.bad_arguments"


def test_call_to_address_without_code(host, alice):
    with pytest.raises(VmError) as ei:
        host.transact(alice, addr("nobody"), "get")
    assert ei.value.code == "call_no_code"


def test_nested_success_commits_callee_state_and_logs(host, alice, caller, store):
    r = host.transact(alice, caller, "call_and_record", store, "bump", 5)
    assert r.return_value is True
    assert r.event_names() == ["Before", "Bumped"]
    assert r.events("Bumped")[0].address == store
    assert host.view(store, "get") == 12
    assert host.storage_at(caller, b"last") == b"\x01"


def test_nested_failure_rolls_back_callee_only(host, alice, caller, store):
    r = host.transact(alice, caller, "call_and_record", store, "bump_then_fail", 5)
    assert r.return_value is False
    # The callee's write and event are gone; the caller's survive.
    assert r.event_names() == ["Before"]
    assert host.view(store, "get") == 7
    assert host.storage_at(caller, b"last") == b"\x00"


def test_nested_call_to_unknown_function_fails(host, alice, caller, store):
    ok = host.transact(alice, caller, "call_and_record", store, "no_such_fn", 1).return_value
    assert ok is False


def test_create_from_contract(host, alice, caller):
    ok, address = host.transact(alice, caller, "spawn", PLAIN_SRC.encode()).return_value
    assert ok is True
    assert address == create_address(caller, 0)
    assert host.code_at(address) == PLAIN_SRC.encode()
    assert host.nonce_of(caller) == 1


@pytest.mark.parametrize("code", [b"", b"import os\n", b"\xff\xfe", b"def broken(:\n"])
def test_failed_create_is_rolled_back(host, alice, caller, code):
    ok, reason = host.transact(alice, caller, "spawn", code).return_value
    assert ok is False
    assert isinstance(reason, bytes) and reason
    assert host.nonce_of(caller) == 0


def test_call_depth_is_bounded(alice):
    host = Host(config=VmConfig(max_call_depth=3))
    caller = host.deploy(alice, CALLER_SRC)
    assert host.transact(alice, caller, "recurse", 3).return_value == 3
    with pytest.raises(Revert) as ei:
        host.transact(alice, caller, "recurse", 4)
    assert ei.value.code == "Depth"


def test_value_transfer_and_refund_on_failure(host, alice, bob, store, caller):
    host.fund(alice, 100)
    host.transact(alice, caller, "pay", bob, 0, value=40)
    assert host.balance_of(alice) == 60
    assert host.balance_of(caller) == 40

    assert host.transact(alice, caller, "pay", bob, 15).return_value is True
    assert host.balance_of(bob) == 15
    assert host.balance_of(caller) == 25

    # Paying more than the contract holds fails the nested frame only.
    assert host.transact(alice, caller, "pay", bob, 1000).return_value is False
    assert host.balance_of(caller) == 25

    with pytest.raises(Revert):
        host.transact(alice, store, "bump_then_fail", 1, value=10)
    assert host.balance_of(alice) == 60


GLOBALS_SRC = """
from stdlib import abi

SEEN = []


def bump() -> int:
    SEEN.append(1)
    return len(SEEN)


def bump_then_fail() -> None:
    SEEN.append(1)
    abi.require(False, "undo", code="Custom")


def count() -> int:
    return len(SEEN)
"""


def test_module_globals_do_not_outlive_a_frame(host, alice):
    address = host.deploy(alice, GLOBALS_SRC)
    with pytest.raises(Revert):
        host.transact(alice, address, "bump_then_fail")
    assert host.view(address, "count") == 0
    assert host.transact(alice, address, "bump").return_value == 1
    assert host.transact(alice, address, "bump").return_value == 1


def test_created_instances_share_no_globals(host, alice, caller):
    ok, first = host.transact(alice, caller, "spawn", GLOBALS_SRC.encode()).return_value
    assert ok is True
    host.transact(alice, first, "bump")
    with pytest.raises(Revert):
        host.transact(alice, first, "bump_then_fail")

    ok, second = host.transact(alice, caller, "spawn", GLOBALS_SRC.encode()).return_value
    assert ok is True
    assert second != first
    assert host.view(second, "count") == 0
    assert host.view(first, "count") == 0
