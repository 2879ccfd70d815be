# -*- coding: utf-8 -*-
"""
deploy.py
=========

Bootstrap an identity on a local `idvm` Host.

What this does
--------------
Deploys the three identity contracts in their governing order:

  1. Key Manager    (deployer's key becomes MANAGEMENT|ACTION)
  2. Proxy Account  (owned by the Key Manager)
  3. Claim Holder   (owned by the Proxy Account)

Each step is its own transaction; a failure in a later step leaves the earlier
contracts deployed.

    from idvm import Host
    from contracts.tools.deploy import deploy_identity

    host = Host()
    ident = deploy_identity(host, alice)
    host.transact(alice, ident.key_manager, "execute", ident.proxy_account, 0, payload)
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from contracts.identity import CLAIM_HOLDER, KEY_MANAGER, PROXY_ACCOUNT, load_source
from idvm import logging as vlog
from idvm.runtime import Host

log = vlog.get_logger(__name__)


@dataclass(frozen=True)
class IdentityDeployment:
    key_manager: bytes
    proxy_account: bytes
    claim_holder: bytes

    def to_dict(self) -> Dict[str, str]:
        return {
            "keyManager": "0x" + self.key_manager.hex(),
            "proxyAccount": "0x" + self.proxy_account.hex(),
            "claimHolder": "0x" + self.claim_holder.hex(),
        }


def deploy_identity(host: Host, deployer: bytes) -> IdentityDeployment:
    """Deploy Key Manager → Proxy Account → Claim Holder from `deployer`."""
    with vlog.bound(component="deploy"):
        km = host.deploy(deployer, load_source(KEY_MANAGER))
        proxy = host.deploy(deployer, load_source(PROXY_ACCOUNT), km)
        claims = host.deploy(deployer, load_source(CLAIM_HOLDER), proxy)
        out = IdentityDeployment(key_manager=km, proxy_account=proxy, claim_holder=claims)
        log.info("identity deployed", extra=out.to_dict())
    return out


__all__ = ["IdentityDeployment", "deploy_identity"]
