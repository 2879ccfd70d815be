"""
idvm.errors — structured errors raised by the identity VM.

Hierarchy
---------
VmError (base; code/message/context)
 ├─ Revert            : contract-triggered failure (abi.require / abi.revert).
 │                      `code` carries the contract's error kind, e.g. "Unauthorized".
 ├─ ValidationError   : contract source rejected by static validation
 │   └─ ForbiddenImport
 ├─ CallDepthExceeded : nested message calls beyond the configured depth
 └─ ContextError      : contract API used outside an active frame
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional


@dataclass(eq=False)
class VmError(Exception):
    """
    Structured error used inside the VM runtime.

        VmError("simple message")
        VmError("message", code="some_code", context={...})

    Attributes:
        code: short machine-readable code string
        message: human-readable message
        context: optional extra fields for debugging
    """

    code: str
    message: str
    context: Dict[str, Any]

    def __init__(
        self,
        message: Any = "",
        *,
        code: str = "vm_error",
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        if isinstance(message, (bytes, bytearray)):
            message = bytes(message).decode("utf-8", errors="replace")
        message = str(message)
        super().__init__(message)
        object.__setattr__(self, "code", str(code))
        object.__setattr__(self, "message", message)
        object.__setattr__(self, "context", dict(context or {}))

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": dict(self.context),
        }


class Revert(VmError):
    """Contract-triggered failure; the enclosing frame's state changes are discarded."""

    def __init__(
        self,
        message: Any = "reverted",
        *,
        code: str = "revert",
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, context=context)


class ValidationError(VmError):
    """Static validation failure of contract source."""

    def __init__(
        self,
        message: Any = "invalid contract source",
        *,
        reason: str = "invalid",
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        ctx = dict(context or {})
        ctx.setdefault("reason", reason)
        super().__init__(message, code="validation_error", context=ctx)

    @property
    def reason(self) -> str:
        return str(self.context.get("reason", ""))


class ForbiddenImport(ValidationError):
    def __init__(self, module: str, *, symbol: Optional[str] = None) -> None:
        target = f"{module}.{symbol}" if symbol else module
        super().__init__(
            f"forbidden import: {target}",
            reason="forbidden_import",
            context={"module": module, "symbol": symbol},
        )


class CallDepthExceeded(VmError):
    def __init__(self, depth: int, limit: int) -> None:
        super().__init__(
            "call depth exceeded",
            code="call_depth_exceeded",
            context={"depth": depth, "limit": limit},
        )


class ContextError(VmError):
    def __init__(self, message: str = "no active contract frame") -> None:
        super().__init__(message, code="context_inactive")


__all__ = [
    "VmError",
    "Revert",
    "ValidationError",
    "ForbiddenImport",
    "CallDepthExceeded",
    "ContextError",
]
