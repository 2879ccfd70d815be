"""
idvm.stdlib
===========

Contract-facing standard library surface.

Contracts do:

    from stdlib import abi, events, hash, storage

Exports
-------
- storage : get/set/delete/exists/get_int/set_int scoped to the executing contract
- events  : emit(name: bytes, args: dict)
- hash    : keccak256(b), sha3_256(b), keccak256_concat(*chunks)
- abi     : require/revert, msg_sender/msg_value/self_address/balance,
            call/create, encode/decode/encode_call
"""

from __future__ import annotations

from . import abi, events, hash, storage

__all__ = ("abi", "events", "hash", "storage")
