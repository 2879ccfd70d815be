"""
idvm.runtime.loader — contract source → executable module.

A contract is plain Python source importing its surface from `stdlib`. The
loader validates and compiles it once per code hash, then executes the cached
code object into a fresh module named `contract_<code hash prefix>` for every
frame. Module globals therefore never outlive a frame: anything a contract
keeps between calls must go through host storage, where the journal can roll
it back.

Entrypoints are the public functions defined by the contract module itself.
Underscore-prefixed helpers and names imported from helper libraries are not
callable from outside.
"""

from __future__ import annotations

import inspect
import types
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple

from idvm import logging as vlog
from idvm.errors import Revert, ValidationError
from idvm.validate import validate_source

log = vlog.get_logger(__name__)


def decode_source(code: bytes) -> str:
    try:
        return bytes(code).decode("utf-8")
    except UnicodeDecodeError as e:
        raise ValidationError("contract source must be UTF-8", reason="source_encoding") from e


@dataclass
class ContractLoader:
    """Validates and compiles contract sources, caching code objects by code hash."""

    validate: bool = True
    max_code_bytes: Optional[int] = None
    _compiled: Dict[bytes, types.CodeType] = field(default_factory=dict, repr=False)

    def check(self, code: bytes, *, filename: str = "<contract>") -> str:
        """Decode and (optionally) validate source without compiling it."""
        text = decode_source(code)
        if self.validate:
            validate_source(text, filename=filename, max_bytes=self.max_code_bytes)
        return text

    def compiled(self, code_hash: bytes, code: bytes) -> types.CodeType:
        cached = self._compiled.get(code_hash)
        if cached is not None:
            return cached
        filename = f"<{_module_name(code_hash)}>"
        text = self.check(code, filename=filename)
        obj = compile(text, filename, "exec")
        self._compiled[code_hash] = obj
        log.debug("compiled contract", extra={"contract_module": filename, "size": len(code)})
        return obj

    def load(self, code_hash: bytes, code: bytes) -> types.ModuleType:
        """Execute the contract into a new module namespace."""
        obj = self.compiled(code_hash, code)
        module = types.ModuleType(_module_name(code_hash))
        module.__file__ = obj.co_filename
        exec(obj, module.__dict__)
        return module


def _module_name(code_hash: bytes) -> str:
    return f"contract_{code_hash.hex()[:16]}"


def entrypoint(module: types.ModuleType, fn_name: str) -> Callable[..., Any]:
    """Resolve a public function defined by `module`, or revert."""
    fn = getattr(module, fn_name, None) if isinstance(fn_name, str) else None
    if (
        fn is None
        or fn_name.startswith("_")
        or not inspect.isfunction(fn)
        or fn.__module__ != module.__name__
    ):
        raise Revert(
            f"unknown function: {fn_name!r}",
            code="call.unknown_function",
            context={"function": str(fn_name)},
        )
    return fn


def bind_arguments(fn: Callable[..., Any], args: Tuple[Any, ...]) -> None:
    """Check that `args` fit `fn`'s signature, reverting on mismatch."""
    try:
        inspect.signature(fn).bind(*args)
    except TypeError as e:
        raise Revert(
            f"bad arguments for {fn.__name__}: {e}",
            code="call.bad_arguments",
            context={"function": fn.__name__, "argc": len(args)},
        ) from e


__all__ = ["ContractLoader", "entrypoint", "bind_arguments", "decode_source"]
