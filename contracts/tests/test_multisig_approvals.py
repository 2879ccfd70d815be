# -*- coding: utf-8 -*-
"""
Quorum behaviour of the Key Manager: approve/withdraw, threshold crossing and
atomic rollback of a failed dispatch.
"""
from __future__ import annotations

import pytest

from idvm.errors import Revert

from .conftest import ACTION, ECDSA, MANAGEMENT, calldata, key_of


@pytest.fixture()
def two_of_n(host, owner, random, key_manager):
    """Owner (3) + random (ACTION) with two ACTION confirmations required."""
    host.transact(owner, key_manager, "add_key", key_of(random), ACTION, ECDSA)
    host.transact(owner, key_manager, "change_keys_required", ACTION, 2)
    return key_manager


def test_second_key_reaches_quorum(host, owner, random, two_of_n, counter):
    data = calldata("change_integer", 5)
    r = host.transact(owner, two_of_n, "execute", counter, 0, data)
    assert r.return_value == 0
    assert r.events("Executed") == []
    assert host.view(counter, "integer") == 0
    assert host.view(two_of_n, "get_confirmations", 0) == [key_of(owner)]

    r = host.transact(random, two_of_n, "approve", 0, True)
    assert r.event_names() == ["Approved", "IntegerChanged", "Executed"]
    assert r.events("Executed")[0].args == {"executionId": 0, "value": 0, "to": counter, "data": data}
    assert host.view(counter, "integer") == 5
    assert host.view(two_of_n, "get_transaction", 0)["executed"] is True
    assert host.view(two_of_n, "get_confirmations", 0) == [key_of(owner), key_of(random)]


def test_repeat_approval_is_counted_once(host, owner, two_of_n, counter):
    host.transact(owner, two_of_n, "execute", counter, 0, calldata("change_integer", 5))
    r = host.transact(owner, two_of_n, "approve", 0, True)
    assert r.event_names() == ["Approved"]
    assert host.view(two_of_n, "get_confirmations", 0) == [key_of(owner)]
    assert host.view(counter, "integer") == 0


def test_withdrawn_confirmation_delays_execution(host, owner, random, other, two_of_n, counter):
    host.transact(owner, two_of_n, "add_key", key_of(other), ACTION, ECDSA)
    host.transact(owner, two_of_n, "execute", counter, 0, calldata("change_integer", 9))

    r = host.transact(owner, two_of_n, "approve", 0, False)
    assert r.logs[0].args == {"executionId": 0, "approved": False}
    assert host.view(two_of_n, "get_confirmations", 0) == []

    host.transact(random, two_of_n, "approve", 0, True)
    assert host.view(counter, "integer") == 0
    host.transact(other, two_of_n, "approve", 0, True)
    assert host.view(counter, "integer") == 9


def test_approve_unknown_action(host, owner, key_manager):
    with pytest.raises(Revert) as ei:
        host.transact(owner, key_manager, "approve", 0, True)
    assert ei.value.code == "UnknownAction"


def test_approve_executed_action(host, owner, key_manager, counter):
    host.transact(owner, key_manager, "execute", counter, 0, calldata("change_integer", 1))
    with pytest.raises(Revert) as ei:
        host.transact(owner, key_manager, "approve", 0, True)
    assert ei.value.code == "UnknownAction"


def test_approve_needs_the_action_purpose(host, owner, random, two_of_n):
    # Self-targeted actions need MANAGEMENT, which `random` lacks.
    host.transact(owner, two_of_n, "change_keys_required", MANAGEMENT, 2)
    host.transact(owner, two_of_n, "execute", two_of_n, 0, calldata("change_keys_required", ACTION, 1))
    with pytest.raises(Revert) as ei:
        host.transact(random, two_of_n, "approve", 0, True)
    assert ei.value.code == "UnauthorizedPurpose"


def test_failed_dispatch_discards_the_confirmation(host, owner, random, two_of_n, counter):
    host.transact(owner, two_of_n, "execute", counter, 0, calldata("fail_with", 2, 2))
    logs_before = len(host.logs)

    with pytest.raises(Revert) as ei:
        host.transact(random, two_of_n, "approve", 0, True)
    assert ei.value.code == "ExternalCallFailed"

    assert host.view(two_of_n, "get_confirmations", 0) == [key_of(owner)]
    assert host.view(two_of_n, "get_transaction", 0)["executed"] is False
    assert host.view(counter, "integer") == 0
    assert len(host.logs) == logs_before


def test_repeat_approval_does_not_dispatch_after_threshold_drops(host, owner, two_of_n, counter):
    host.transact(owner, two_of_n, "execute", counter, 0, calldata("change_integer", 4))
    host.transact(owner, two_of_n, "change_keys_required", ACTION, 1)

    r = host.transact(owner, two_of_n, "approve", 0, True)
    assert r.event_names() == ["Approved"]
    assert host.view(two_of_n, "get_confirmations", 0) == [key_of(owner)]
    assert host.view(two_of_n, "get_transaction", 0)["executed"] is False
    assert host.view(counter, "integer") == 0


def test_stalled_action_completes_on_a_new_confirmation(host, owner, random, two_of_n, counter):
    host.transact(owner, two_of_n, "execute", counter, 0, calldata("change_integer", 4))
    host.transact(owner, two_of_n, "change_keys_required", ACTION, 1)

    r = host.transact(random, two_of_n, "approve", 0, True)
    assert r.event_names() == ["Approved", "IntegerChanged", "Executed"]
    assert host.view(counter, "integer") == 4


def test_management_quorum_through_self_execute(host, owner, random, key_manager):
    host.transact(owner, key_manager, "add_key", key_of(random), MANAGEMENT, ECDSA)
    host.transact(owner, key_manager, "change_keys_required", MANAGEMENT, 2)

    data = calldata("remove_key", key_of(owner))
    host.transact(random, key_manager, "execute", key_manager, 0, data)
    assert host.view(key_manager, "key_has_purpose", key_of(owner), MANAGEMENT) is True

    r = host.transact(owner, key_manager, "approve", 0, True)
    assert r.event_names() == ["Approved", "KeyRemoved", "Executed"]
    assert host.view(key_manager, "get_key", key_of(owner))[0] == 0
