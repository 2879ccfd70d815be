"""
idvm — deterministic Python contract host for the on-chain identity contracts.

- idvm.runtime.Host : deploy / transact / view, nested CALL and CREATE
- idvm.stdlib       : contract-facing surface (`from stdlib import abi, events, hash, storage`)
- idvm.validate     : static validation of contract source
- idvm.config       : env-driven limits
- idvm.logging      : structured logging setup
"""

from __future__ import annotations

__version__ = "0.3.0"

from .errors import Revert, ValidationError, VmError
from .runtime.host import Host

__all__ = ["Host", "Revert", "ValidationError", "VmError", "__version__"]
