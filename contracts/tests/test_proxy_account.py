# -*- coding: utf-8 -*-
"""
Proxy Account: owner at the zero data key, data store, CALL/CREATE dispatch.
"""
from __future__ import annotations

import pytest

from idvm.errors import Revert
from idvm.runtime.codec import decode
from idvm.runtime.host import create_address

from .conftest import COUNTER_PATH, ZERO_KEY, calldata, topic

CALL = 0
CREATE = 1

DATA_KEY = topic("ProxyAccount")


def _revert(fn, *args, **kwargs) -> Revert:
    with pytest.raises(Revert) as ei:
        fn(*args, **kwargs)
    return ei.value


def test_owner_lives_at_zero_key(host, owner, proxy_account):
    assert host.view(proxy_account, "get_data", ZERO_KEY) == owner
    assert host.view(proxy_account, "owner") == owner


# ─── Owner ────────────────────────────────────────────────────────────────────


def test_only_owner_can_change_owner(host, random, proxy_account):
    err = _revert(host.transact, random, proxy_account, "change_owner", random)
    assert err.code == "Unauthorized"
    assert err.message == "only-owner-allowed"


def test_change_owner(host, owner, random, proxy_account):
    r = host.transact(owner, proxy_account, "change_owner", random)
    assert host.view(proxy_account, "get_data", ZERO_KEY) == random
    assert r.event_names() == ["OwnerChanged"]
    assert r.logs[0].args == {"ownerAddress": random}
    # The previous owner is locked out.
    assert _revert(host.transact, owner, proxy_account, "change_owner", owner).code == "Unauthorized"


# ─── Data store ───────────────────────────────────────────────────────────────


def test_only_owner_can_set_data(host, random, proxy_account):
    err = _revert(host.transact, random, proxy_account, "set_data", DATA_KEY, proxy_account)
    assert err.message == "only-owner-allowed"


def test_set_and_get_data(host, owner, random, proxy_account):
    r = host.transact(owner, proxy_account, "set_data", DATA_KEY, proxy_account)
    assert host.view(proxy_account, "get_data", DATA_KEY) == proxy_account
    # Reads are open to anyone.
    assert host.view(proxy_account, "get_data", DATA_KEY, sender=random) == proxy_account
    assert r.event_names() == ["DataChanged"]
    assert r.logs[0].args == {"key": DATA_KEY, "value": proxy_account}


def test_unset_data_is_empty(host, proxy_account):
    assert host.view(proxy_account, "get_data", DATA_KEY) == b""


def test_reserved_key_is_not_writable(host, owner, random, proxy_account):
    err = _revert(host.transact, owner, proxy_account, "set_data", ZERO_KEY, random)
    assert err.code == "ReservedKey"
    assert host.view(proxy_account, "owner") == owner


# ─── execute: CALL ────────────────────────────────────────────────────────────


def test_only_owner_can_execute(host, random, proxy_account, counter):
    err = _revert(host.transact, random, proxy_account, "execute", CALL, counter, 0, calldata("change_integer", 5))
    assert err.message == "only-owner-allowed"


@pytest.mark.parametrize("kind", [2, 4, -1])
def test_unknown_execution_kind(host, owner, proxy_account, counter, kind):
    err = _revert(host.transact, owner, proxy_account, "execute", kind, counter, 0, calldata("change_integer", 5))
    assert err.code == "UnknownExecutionKind"


def test_failing_call_reverts(host, owner, proxy_account, counter):
    err = _revert(host.transact, owner, proxy_account, "execute", CALL, counter, 0, calldata("fail_with", 2, 2))
    assert err.code == "CallFailed"
    assert "COUNTER_FAILURE" in err.context["reason"]
    assert host.view(counter, "integer") == 0


def test_call_works(host, owner, proxy_account, counter):
    data = calldata("change_integer", 5)
    r = host.transact(owner, proxy_account, "execute", CALL, counter, 0, data)
    assert host.view(counter, "integer") == 5
    assert r.events("ExecutedCall")[0].args == {"value": 0, "to": counter, "data": data}
    # The counter saw the proxy as its caller.
    assert r.events("IntegerChanged")[0].args["sender"] == proxy_account


def test_call_returns_encoded_result(host, owner, proxy_account, counter):
    r = host.transact(owner, proxy_account, "execute", CALL, counter, 0, calldata("inc", 3))
    assert decode(r.return_value) == 3


def test_call_forwards_value(host, owner, other, proxy_account):
    before = host.balance_of(other)
    host.transact(owner, proxy_account, "execute", CALL, other, 30, b"", value=30)
    assert host.balance_of(other) == before + 30
    assert host.balance_of(proxy_account) == 0


# ─── execute: CREATE ──────────────────────────────────────────────────────────


def test_only_owner_can_create(host, random, proxy_account, counter):
    err = _revert(host.transact, random, proxy_account, "execute", CREATE, counter, 0, COUNTER_PATH.read_bytes())
    assert err.message == "only-owner-allowed"


@pytest.mark.parametrize("code", [b"", b"\x55\x66", b"import socket\n"])
def test_bad_code_fails_deployment(host, owner, proxy_account, counter, code):
    err = _revert(host.transact, owner, proxy_account, "execute", CREATE, counter, 0, code)
    assert err.code == "DeploymentFailed"
    assert host.nonce_of(proxy_account) == 0


def test_create_works(host, owner, random, proxy_account, counter):
    r = host.transact(owner, proxy_account, "execute", CREATE, counter, 0, COUNTER_PATH.read_bytes())
    assert r.event_names() == ["ContractCreated"]
    created = r.logs[0].args["contractAddress"]
    assert created == r.return_value == create_address(proxy_account, 0)

    host.transact(random, created, "change_integer", 5)
    assert host.view(created, "integer") == 5
