# -*- coding: utf-8 -*-
"""
contracts.identity
==================

The three identity contracts, shipped as source files the host deploys:

    key_manager/contract.py    key ring, thresholds, multi-sig execute/approve
    proxy_account/contract.py  owner-gated CALL/CREATE and a key/value data store
    claim_holder/contract.py   issuer-scoped claims about the identity

    from contracts.identity import KEY_MANAGER, load_source
    km = host.deploy(deployer, load_source(KEY_MANAGER))
"""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Union

IDENTITY_DIR = Path(__file__).resolve().parent

KEY_MANAGER = "key_manager"
PROXY_ACCOUNT = "proxy_account"
CLAIM_HOLDER = "claim_holder"

CONTRACTS = (KEY_MANAGER, PROXY_ACCOUNT, CLAIM_HOLDER)

_CACHE: Dict[str, bytes] = {}


def source_path(name: str) -> Path:
    if name not in CONTRACTS:
        raise KeyError(f"unknown identity contract: {name!r}")
    return IDENTITY_DIR / name / "contract.py"


def load_source(name_or_path: Union[str, Path]) -> bytes:
    """Source bytes of an identity contract by name, or of any contract file by path."""
    key = str(name_or_path)
    cached = _CACHE.get(key)
    if cached is not None:
        return cached
    path = source_path(key) if key in CONTRACTS else Path(name_or_path)
    data = path.read_bytes()
    _CACHE[key] = data
    return data


__all__ = [
    "IDENTITY_DIR",
    "KEY_MANAGER",
    "PROXY_ACCOUNT",
    "CLAIM_HOLDER",
    "CONTRACTS",
    "source_path",
    "load_source",
]
