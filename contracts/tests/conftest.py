# -*- coding: utf-8 -*-
"""
contracts.tests.conftest
========================

Pytest fixtures for the identity contracts.

- a fresh in-process `Host` per test (default limits, no env dependence)
- stable, funded accounts derived from labels via SHA3
- deployed Key Manager / Claim Holder / Proxy Account / counter target
- the full bootstrapped identity (Key Manager → Proxy → Claim Holder)

Usage (inside a test file):
    def test_execute(host, owner, key_manager, counter):
        host.transact(owner, key_manager, "execute", counter, 0, calldata("change_integer", 5))
        assert host.view(counter, "integer") == 5
"""
from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Dict

import pytest

from contracts.identity import CLAIM_HOLDER, KEY_MANAGER, PROXY_ACCOUNT, load_source
from contracts.tools.deploy import IdentityDeployment, deploy_identity
from idvm.config import VmConfig
from idvm.runtime import Host
from idvm.runtime.codec import encode_call
from idvm.runtime.hash_api import keccak256

COUNTER_PATH = Path(__file__).resolve().parents[1] / "templates" / "counter" / "contract.py"

STARTING_BALANCE = 10**18

ZERO_KEY = b"\x00" * 32
ZERO_ADDRESS = b"\x00" * 20

MANAGEMENT = 1
ACTION = 2
ECDSA = 1


def account(label: str) -> bytes:
    """Stable 20-byte address for a label."""
    return hashlib.sha3_256(b"identity-tests|" + label.encode("utf-8")).digest()[:20]


def key_of(address: bytes) -> bytes:
    """Key id of an account holder, as the Key Manager derives it."""
    return keccak256(address)


def topic(label: str) -> bytes:
    return keccak256(label.encode("utf-8"))


calldata = encode_call


@pytest.fixture()
def host() -> Host:
    return Host(config=VmConfig())


@pytest.fixture()
def accounts(host) -> Dict[str, bytes]:
    out = {name: account(name) for name in ("owner", "random", "issuer", "other")}
    for address in out.values():
        host.fund(address, STARTING_BALANCE)
    return out


@pytest.fixture()
def owner(accounts) -> bytes:
    return accounts["owner"]


@pytest.fixture()
def random(accounts) -> bytes:
    return accounts["random"]


@pytest.fixture()
def issuer(accounts) -> bytes:
    return accounts["issuer"]


@pytest.fixture()
def other(accounts) -> bytes:
    return accounts["other"]


@pytest.fixture()
def key_manager(host, owner) -> bytes:
    return host.deploy(owner, load_source(KEY_MANAGER))


@pytest.fixture()
def proxy_account(host, owner) -> bytes:
    return host.deploy(owner, load_source(PROXY_ACCOUNT), owner)


@pytest.fixture()
def claim_holder(host, owner) -> bytes:
    return host.deploy(owner, load_source(CLAIM_HOLDER), owner)


@pytest.fixture()
def counter(host, owner) -> bytes:
    return host.deploy(owner, load_source(COUNTER_PATH))


@pytest.fixture()
def identity(host, owner) -> IdentityDeployment:
    return deploy_identity(host, owner)
