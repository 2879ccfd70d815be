"""
idvm.runtime.host — deterministic in-process contract host.

The Host owns the journaled state (accounts, storage, logs), the content-
addressed code store and the module loader. It is the environment the identity
contracts run in: it authenticates nothing (callers are given), charges no
gas, and serializes every operation.

Top-level API (Python callers, tests, tools)
--------------------------------------------
    host = Host()
    host.fund(alice, 10**18)
    km = host.deploy(alice, source_bytes)                 # runs init()
    r = host.transact(alice, km, "add_key", key, 2, 1)    # -> Receipt
    host.view(km, "get_key", key)                         # always rolled back

Nested API (reached through stdlib.abi from inside a contract)
--------------------------------------------------------------
    message_call(to, value, data)  -> (success, output)
    message_create(value, code)    -> (success, address | reason)

Atomicity: every frame runs inside its own journal checkpoint. A failing
nested frame is rolled back and reported to the caller as `(False, reason)`;
a failing top-level transaction is rolled back and its error re-raised.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from chainstate.errors import InsufficientBalance, StateError
from chainstate.state import Account, Journal, StorageView, compute_code_hash
from chainstate.types import LogEvent, Receipt
from idvm import logging as vlog
from idvm.config import VmConfig, get_config
from idvm.errors import CallDepthExceeded, VmError

from . import codec, context
from .context import Frame, to_hex
from .hash_api import keccak256
from .loader import ContractLoader, bind_arguments, entrypoint

log = vlog.get_logger(__name__)

ADDRESS_LEN = 20
ZERO_ADDRESS = b"\x00" * ADDRESS_LEN


def _addr(value: Any, *, name: str = "address") -> bytes:
    if not isinstance(value, (bytes, bytearray)) or len(value) == 0:
        raise VmError(f"{name} must be non-empty bytes", code="host_invalid")
    return bytes(value)


def _as_code(source: Any) -> bytes:
    if isinstance(source, str):
        return source.encode("utf-8")
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    raise VmError("contract source must be str or bytes", code="host_invalid")


def _reason(exc: BaseException) -> bytes:
    if isinstance(exc, (VmError, StateError)):
        return exc.message.encode("utf-8")
    return f"{type(exc).__name__}: {exc}".encode("utf-8")


def create_address(creator: bytes, nonce: int) -> bytes:
    """Address of the contract created by `creator` at `nonce`."""
    return keccak256(codec.encode([bytes(creator), int(nonce)]))[-ADDRESS_LEN:]


class Host:
    def __init__(self, config: Optional[VmConfig] = None) -> None:
        self.config = config or get_config()
        self._accounts: Dict[bytes, Account] = {}
        self._storage = StorageView()
        self.journal = Journal(self._accounts, self._storage)
        self._code: Dict[bytes, bytes] = {}
        self.loader = ContractLoader(
            validate=self.config.validate_code,
            max_code_bytes=self.config.max_code_bytes,
        )

    # ------------------------------------------------------------------ #
    # Read helpers
    # ------------------------------------------------------------------ #

    def balance_of(self, address: bytes) -> int:
        acc = self.journal.get_account(_addr(address))
        return 0 if acc is None else acc.balance

    def nonce_of(self, address: bytes) -> int:
        acc = self.journal.get_account(_addr(address))
        return 0 if acc is None else acc.nonce

    def code_at(self, address: bytes) -> Optional[bytes]:
        acc = self.journal.get_account(_addr(address))
        if acc is None or not acc.has_code:
            return None
        return self._code.get(acc.code_hash)

    def storage_at(self, address: bytes, key: bytes) -> bytes:
        return self.journal.storage_get(_addr(address), key)

    @property
    def logs(self) -> Tuple[LogEvent, ...]:
        return self.journal.logs

    # ------------------------------------------------------------------ #
    # Top-level operations
    # ------------------------------------------------------------------ #

    def fund(self, address: bytes, amount: int) -> int:
        """Credit `amount` to `address` (genesis/test faucet). Returns the new balance."""
        self.journal.begin()
        try:
            acc = self.journal.ensure_account_for_write(_addr(address))
            acc.credit(amount)
        except Exception:
            self.journal.revert()
            raise
        self.journal.commit()
        return acc.balance

    def deploy(self, sender: bytes, source: Any, *init_args: Any, value: int = 0) -> bytes:
        """Deploy contract `source` from `sender`, running `init(*init_args)`. Returns the address."""
        sender = _addr(sender, name="sender")
        code = _as_code(source)
        with vlog.bound(component="host", fn="deploy"):
            self.journal.begin()
            try:
                address = self._create(sender, value, code, init_args, depth=0)
            except Exception as e:
                self.journal.revert()
                log.info("deploy failed", extra={"sender": sender, "error": str(e)})
                raise
            self.journal.commit()
            log.info("deployed contract", extra={"sender": sender, "address": address})
        return address

    def transact(self, sender: bytes, to: bytes, fn: str, *args: Any, value: int = 0) -> Receipt:
        """Run `to.fn(*args)` as a transaction from `sender`; commits on success."""
        sender = _addr(sender, name="sender")
        to = _addr(to, name="to")
        start = len(self.journal.logs)
        with vlog.bound(component="host", contract=to_hex(to), fn=fn):
            self.journal.begin()
            try:
                self._transfer(sender, to, value)
                ret = self._invoke(Frame(to, sender, value, 0), fn, args)
            except Exception as e:
                self.journal.revert()
                log.info(
                    "transaction reverted",
                    extra={"error": getattr(e, "code", type(e).__name__), "reason": str(e)},
                )
                raise
            self.journal.commit()
        logs = self.journal.logs[start:]
        log.debug("transaction committed", extra={"events": [ev.name for ev in logs]})
        return Receipt(sender=sender, to=to, function=fn, return_value=ret, logs=logs)

    def view(self, to: bytes, fn: str, *args: Any, sender: bytes = ZERO_ADDRESS) -> Any:
        """Call `to.fn(*args)` and discard every state change."""
        to = _addr(to, name="to")
        self.journal.begin()
        try:
            return self._invoke(Frame(to, _addr(sender, name="sender"), 0, 0), fn, args)
        finally:
            self.journal.revert()

    # ------------------------------------------------------------------ #
    # Nested operations (called through stdlib.abi)
    # ------------------------------------------------------------------ #

    def message_call(self, to: bytes, value: int, data: bytes) -> Tuple[bool, bytes]:
        parent = context.current_frame()
        frame = parent.child(to, value)
        self.journal.begin()
        try:
            self._transfer(parent.address, to, value)
            if self.code_at(to) is None:
                # Plain value transfer to an account without code.
                ret: Any = None
                out = b""
            else:
                fn, args = codec.decode_call(data)
                ret = self._invoke(frame, fn, args)
                out = codec.encode(ret)
        except Exception as e:
            # Any failure inside the callee is a failed message call.
            self.journal.revert()
            log.debug(
                "nested call failed",
                extra={"to": to, "depth": frame.depth, "error": getattr(e, "code", type(e).__name__)},
            )
            return False, _reason(e)
        self.journal.commit()
        return True, out

    def message_create(self, value: int, code: bytes) -> Tuple[bool, bytes]:
        parent = context.current_frame()
        self.journal.begin()
        try:
            address = self._create(parent.address, value, code, (), depth=parent.depth + 1)
        except Exception as e:
            self.journal.revert()
            log.debug("nested create failed", extra={"creator": parent.address, "reason": _reason(e)})
            return False, _reason(e)
        self.journal.commit()
        return True, address

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _check_depth(self, frame: Frame) -> None:
        if frame.depth > self.config.max_call_depth:
            raise CallDepthExceeded(frame.depth, self.config.max_call_depth)

    def _transfer(self, src: bytes, dst: bytes, amount: int) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            raise VmError("value must be a non-negative int", code="host_invalid")
        if amount == 0:
            return
        src_acc = self.journal.get_account_for_write(src)
        if src_acc is None:
            raise InsufficientBalance(balance=0, amount=amount, address=src)
        src_acc.debit(amount)
        self.journal.ensure_account_for_write(dst).credit(amount)

    def _create(
        self, creator: bytes, value: int, code: bytes, init_args: Tuple[Any, ...], *, depth: int
    ) -> bytes:
        """
        Create a contract on behalf of `creator`. The caller holds the
        checkpoint; any exception leaves it to be reverted.
        """
        if not code:
            raise VmError("empty contract code", code="create_empty_code")
        if len(code) > self.config.max_code_bytes:
            raise VmError(
                "contract code too large",
                code="create_code_size",
                context={"size": len(code), "limit": self.config.max_code_bytes},
            )
        self.loader.check(code)

        nonce = self.journal.ensure_account_for_write(creator).increment_nonce()
        address = create_address(creator, nonce)
        code_hash = compute_code_hash(code)
        self._code[code_hash] = code
        self.journal.create_account(address, code_hash=code_hash)
        self._transfer(creator, address, value)

        module = self.loader.load(code_hash, code)
        if callable(getattr(module, "init", None)):
            frame = Frame(address=address, sender=creator, value=value, depth=depth)
            self._invoke(frame, "init", tuple(init_args))
        elif init_args:
            raise VmError("contract has no init() for constructor arguments", code="create_no_init")
        return address

    def _invoke(self, frame: Frame, fn_name: str, args: Tuple[Any, ...]) -> Any:
        self._check_depth(frame)
        acc = self.journal.get_account(frame.address)
        if acc is None or not acc.has_code:
            raise VmError(
                "no contract at address",
                code="call_no_code",
                context={"address": to_hex(frame.address)},
            )
        module = self.loader.load(acc.code_hash, self._code[acc.code_hash])
        fn = entrypoint(module, fn_name)
        bind_arguments(fn, tuple(args))
        with context.enter(frame, self):
            return fn(*args)


__all__ = ["Host", "ADDRESS_LEN", "ZERO_ADDRESS", "create_address"]
