from __future__ import annotations

import hashlib

import pytest

from idvm.config import VmConfig
from idvm.runtime import Host


def addr(tag: str) -> bytes:
    """Stable 20-byte test address derived from a label."""
    return hashlib.sha3_256(b"idvm-test|" + tag.encode()).digest()[:20]


@pytest.fixture()
def host() -> Host:
    return Host(config=VmConfig())


@pytest.fixture()
def alice() -> bytes:
    return addr("alice")


@pytest.fixture()
def bob() -> bytes:
    return addr("bob")
