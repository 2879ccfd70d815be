"""
chainstate.state.journal — journaling writes, checkpoints, revert/commit.

An in-memory write journal layered over an accounts mapping, a StorageView and
an append-only log list. Nested checkpoints are a stack of overlays: writes go
to the top overlay, reads consult overlays from top → base. `commit()` merges
the top overlay into the one below it, or into the base state when it is the
last open overlay. `revert()` discards the top overlay.

Every message frame the VM host runs (top-level transaction, nested CALL,
CREATE) opens its own checkpoint, so a failing frame leaves storage, balances,
nonces, created accounts and emitted logs exactly as they were.

    j = Journal(accounts, storage)
    j.begin()
    j.ensure_account_for_write(addr).credit(10)
    j.storage_set(addr, b"k", b"v")
    j.log(LogEvent(addr, "Touched", {}))
    j.commit()                      # applied to base (no parent overlay)

Writes outside any checkpoint are rejected; the base only changes through
`commit()`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, MutableMapping, Optional, Set, Tuple

from chainstate.errors import StateConflict
from chainstate.types.events import LogEvent

from .accounts import EMPTY_CODE_HASH, Account
from .storage import StorageView


def _b(x: bytes | bytearray | memoryview, *, name: str) -> bytes:
    if not isinstance(x, (bytes, bytearray, memoryview)):
        raise TypeError(f"{name} must be bytes-like")
    return bytes(x)


# =============================================================================
# Overlay model
# =============================================================================


@dataclass
class _Overlay:
    """
    A single journal layer.

    - `accounts`: copies of Account objects modified/created in this layer.
    - `created`: addresses created in this layer (for conflict checks).
    - `storage`: staged storage changes. `None` means deletion for that key.
    - `logs`: events emitted while this layer was on top.
    """

    accounts: Dict[bytes, Account] = field(default_factory=dict)
    created: Set[bytes] = field(default_factory=set)
    storage: Dict[bytes, Dict[bytes, Optional[bytes]]] = field(default_factory=dict)
    logs: List[LogEvent] = field(default_factory=list)

    def storage_lookup(self, addr: bytes, key: bytes) -> Tuple[bool, Optional[bytes]]:
        m = self.storage.get(addr)
        if m is None or key not in m:
            return False, None
        return True, m[key]

    def storage_put(self, addr: bytes, key: bytes, value: Optional[bytes]) -> None:
        self.storage.setdefault(addr, {})[key] = value


# =============================================================================
# Journal
# =============================================================================


class Journal:
    """
    A copy-on-write write journal with nested checkpoints.

    Parameters
    ----------
    accounts : MutableMapping[bytes, Account]
        The base (persisted) account mapping.
    storage : StorageView
        The base storage view.
    """

    def __init__(
        self,
        accounts: Optional[MutableMapping[bytes, Account]] = None,
        storage: Optional[StorageView] = None,
    ) -> None:
        self._base_accounts: MutableMapping[bytes, Account] = {} if accounts is None else accounts
        self._base_storage = StorageView() if storage is None else storage
        self._base_logs: List[LogEvent] = []
        self._layers: List[_Overlay] = []

    # --------------------------------------------------------------------- #
    # Checkpointing
    # --------------------------------------------------------------------- #

    def depth(self) -> int:
        """Number of open checkpoints."""
        return len(self._layers)

    def begin(self) -> int:
        """Open a new checkpoint. Returns the new depth."""
        self._layers.append(_Overlay())
        return len(self._layers)

    def commit(self) -> None:
        """Merge the top overlay into its parent, or into the base if it is the last one."""
        top = self._pop()
        if self._layers:
            self._merge_layers(self._layers[-1], top)
        else:
            self._apply_to_base(top)

    def revert(self) -> None:
        """Discard the top overlay."""
        self._pop()

    def _pop(self) -> _Overlay:
        if not self._layers:
            raise StateConflict("no open checkpoint")
        return self._layers.pop()

    def _top(self) -> _Overlay:
        if not self._layers:
            raise StateConflict("write outside of a checkpoint")
        return self._layers[-1]

    # --------------------------------------------------------------------- #
    # Account API
    # --------------------------------------------------------------------- #

    def _lookup_account_any(self, addr: bytes) -> Optional[Account]:
        for layer in reversed(self._layers):
            acc = layer.accounts.get(addr)
            if acc is not None:
                return acc
        return self._base_accounts.get(addr)

    def get_account(self, address: bytes | bytearray | memoryview) -> Optional[Account]:
        """Readonly lookup. Do not mutate the returned object."""
        return self._lookup_account_any(_b(address, name="address"))

    def get_account_for_write(self, address: bytes | bytearray | memoryview) -> Optional[Account]:
        """
        Fetch an Account suitable for mutation in the top layer. A copy of the
        visible account is promoted to the top. Returns None if absent.
        """
        addr = _b(address, name="address")
        top = self._top()
        if addr in top.accounts:
            return top.accounts[addr]
        acc = self._lookup_account_any(addr)
        if acc is None:
            return None
        copy = acc.copy()
        top.accounts[addr] = copy
        return copy

    def ensure_account_for_write(self, address: bytes | bytearray | memoryview) -> Account:
        """Like `get_account_for_write` but creates a zeroed account when absent."""
        addr = _b(address, name="address")
        acc = self.get_account_for_write(addr)
        if acc is not None:
            return acc
        acc = Account()
        self._top().accounts[addr] = acc
        return acc

    def create_account(
        self,
        address: bytes | bytearray | memoryview,
        *,
        initial_balance: int = 0,
        code_hash: Optional[bytes] = None,
    ) -> Account:
        """
        Create a new account in the top overlay.

        An existing account without code and with a zero nonce (e.g. one that
        only received value) is taken over and keeps its balance. Anything else
        raises StateConflict.
        """
        addr = _b(address, name="address")
        top = self._top()
        existing = self._lookup_account_any(addr)
        if existing is not None and (existing.has_code or existing.nonce > 0):
            raise StateConflict("account already exists", address=addr)
        balance = int(initial_balance) + (existing.balance if existing is not None else 0)
        acc = Account(
            nonce=0,
            balance=balance,
            code_hash=EMPTY_CODE_HASH if code_hash is None else bytes(code_hash),
        )
        top.accounts[addr] = acc
        top.created.add(addr)
        return acc

    # --------------------------------------------------------------------- #
    # Storage API
    # --------------------------------------------------------------------- #

    def storage_get(
        self,
        address: bytes | bytearray | memoryview,
        key: bytes | bytearray | memoryview,
        default: bytes = b"",
    ) -> bytes:
        """Read storage with overlay precedence. Returns `default` if absent."""
        addr = _b(address, name="address")
        key_b = _b(key, name="key")
        for layer in reversed(self._layers):
            found, value = layer.storage_lookup(addr, key_b)
            if found:
                return default if value is None else value
        return self._base_storage.get(addr, key_b, default=default)

    def storage_set(
        self,
        address: bytes | bytearray | memoryview,
        key: bytes | bytearray | memoryview,
        value: bytes | bytearray | memoryview,
    ) -> None:
        """Stage a storage write in the top overlay. Empty value is a deletion."""
        addr = _b(address, name="address")
        key_b = _b(key, name="key")
        val_b = _b(value, name="value")
        self._top().storage_put(addr, key_b, val_b if val_b else None)

    def storage_delete(
        self,
        address: bytes | bytearray | memoryview,
        key: bytes | bytearray | memoryview,
    ) -> None:
        self._top().storage_put(_b(address, name="address"), _b(key, name="key"), None)

    def storage_items(self, address: bytes | bytearray | memoryview) -> Iterator[Tuple[bytes, bytes]]:
        """Iterate visible (key, value) for an address. Stable order by key."""
        addr = _b(address, name="address")
        visible: Dict[bytes, bytes] = dict(self._base_storage.items(addr))
        for layer in self._layers:
            for k, v in layer.storage.get(addr, {}).items():
                if v is None:
                    visible.pop(k, None)
                else:
                    visible[k] = v
        for k in sorted(visible):
            yield k, visible[k]

    # --------------------------------------------------------------------- #
    # Logs
    # --------------------------------------------------------------------- #

    def log(self, event: LogEvent) -> None:
        """Record an event in the top overlay; it survives only if every enclosing checkpoint commits."""
        if not isinstance(event, LogEvent):
            raise TypeError("event must be a LogEvent")
        self._top().logs.append(event)

    @property
    def logs(self) -> Tuple[LogEvent, ...]:
        """Committed logs, in emission order."""
        return tuple(self._base_logs)

    # --------------------------------------------------------------------- #
    # Internal merge/apply
    # --------------------------------------------------------------------- #

    @staticmethod
    def _merge_layers(dst: _Overlay, src: _Overlay) -> None:
        for addr, acc in src.accounts.items():
            dst.accounts[addr] = acc
        dst.created.update(src.created)
        for addr, writes in src.storage.items():
            dst.storage.setdefault(addr, {}).update(writes)
        dst.logs.extend(src.logs)

    def _apply_to_base(self, layer: _Overlay) -> None:
        for addr, acc in layer.accounts.items():
            self._base_accounts[addr] = acc.copy()
        for addr, writes in layer.storage.items():
            for k, v in writes.items():
                if v is None:
                    self._base_storage.delete(addr, k)
                else:
                    self._base_storage.set(addr, k, v)
        self._base_logs.extend(layer.logs)


__all__ = ["Journal"]
