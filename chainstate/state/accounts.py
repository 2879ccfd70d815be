"""
chainstate.state.accounts — Account records.

An Account holds three fields:

- nonce:      u256 creation counter (drives CREATE address derivation)
- balance:    u256 currency amount
- code_hash:  32-byte SHA3-256 of the contract source (all-zero for EOAs)

All arithmetic is u256-bounded and deterministic.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

from chainstate.errors import InsufficientBalance, StateConflict

U256_MAX: int = (1 << 256) - 1

EMPTY_CODE_HASH: bytes = b"\x00" * 32


def _ensure_u256(name: str, value: int) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative")
    if value > U256_MAX:
        raise OverflowError(f"{name} exceeds u256")
    return value


def compute_code_hash(code: bytes | bytearray | memoryview) -> bytes:
    """
    Compute the canonical code hash (SHA3-256) for contract source bytes.

    Empty code maps to `EMPTY_CODE_HASH`.
    """
    if not isinstance(code, (bytes, bytearray, memoryview)):
        raise TypeError("code must be bytes-like")
    if not code:
        return EMPTY_CODE_HASH
    return hashlib.sha3_256(bytes(code)).digest()


@dataclass(slots=True)
class Account:
    """
    A minimal, deterministic account record.

    Invariants:
    - nonce and balance are u256
    - code_hash is exactly 32 bytes
    """
    nonce: int = 0
    balance: int = 0
    code_hash: bytes = EMPTY_CODE_HASH

    def __post_init__(self) -> None:
        self.nonce = _ensure_u256("nonce", self.nonce)
        self.balance = _ensure_u256("balance", self.balance)
        if not isinstance(self.code_hash, (bytes, bytearray, memoryview)):
            raise TypeError("code_hash must be bytes-like")
        ch = bytes(self.code_hash)
        if len(ch) != 32:
            raise ValueError("code_hash must be 32 bytes")
        self.code_hash = ch

    @property
    def has_code(self) -> bool:
        return self.code_hash != EMPTY_CODE_HASH

    def copy(self) -> "Account":
        return Account(nonce=self.nonce, balance=self.balance, code_hash=self.code_hash)

    def increment_nonce(self) -> int:
        """Increase the nonce by 1 and return the value it had before."""
        if self.nonce == U256_MAX:
            raise StateConflict("nonce overflow (u256 max)")
        prev = self.nonce
        self.nonce += 1
        return prev

    def credit(self, amount: int) -> None:
        amt = _ensure_u256("amount", amount)
        if self.balance + amt > U256_MAX:
            raise OverflowError("balance exceeds u256")
        self.balance += amt

    def debit(self, amount: int) -> None:
        """Decrease balance by `amount`; raises InsufficientBalance if short."""
        amt = _ensure_u256("amount", amount)
        if self.balance < amt:
            raise InsufficientBalance(balance=self.balance, amount=amt)
        self.balance -= amt

    def to_dict(self) -> dict:
        return {
            "nonce": self.nonce,
            "balance": self.balance,
            "code_hash": self.code_hash.hex(),
        }


__all__ = ["Account", "EMPTY_CODE_HASH", "U256_MAX", "compute_code_hash"]
