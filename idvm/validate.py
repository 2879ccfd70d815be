"""
idvm.validate — static validator for contract source.

Goals
-----
* Keep contracts deterministic and sandbox-friendly: no I/O, no reflection,
  no dynamic code, no exception plumbing (contracts fail via abi.require /
  abi.revert only).
* Imports come from the contract surface only:
    from stdlib import abi, events, hash, storage
    from contracts.stdlib.<...> import <helpers>
  plus `__future__` and `typing`.

Public API
----------
validate_source(source: str, *, filename: str = "<contract>", max_bytes: int | None = None) -> ast.Module
    Parses and validates `source`. Returns the AST on success or raises
    idvm.errors.ValidationError / ForbiddenImport with structured context.

This module does not execute code.
"""

from __future__ import annotations

import ast
from typing import FrozenSet, Optional, Tuple

from .errors import ForbiddenImport, ValidationError

ALLOWED_STDLIB_NAMES: FrozenSet[str] = frozenset({"abi", "events", "hash", "storage"})

ALLOWED_IMPORT_MODULES: FrozenSet[str] = frozenset({"stdlib", "__future__", "typing"})

# Helper libraries contracts may import from (package prefix match).
ALLOWED_IMPORT_PREFIXES: Tuple[str, ...] = ("contracts.stdlib",)

FORBIDDEN_NAMES: FrozenSet[str] = frozenset(
    {
        "open",
        "exec",
        "eval",
        "compile",
        "__import__",
        "globals",
        "locals",
        "vars",
        "getattr",
        "setattr",
        "delattr",
        "input",
        "print",
        "breakpoint",
        "help",
        "exit",
        "quit",
        "memoryview",
        "object",
        "type",
        "super",
        "__builtins__",
    }
)

_DISALLOWED_NODE_TYPES: Tuple[type, ...] = tuple(
    t
    for t in (
        ast.ClassDef,
        ast.AsyncFunctionDef,
        ast.AsyncFor,
        ast.AsyncWith,
        ast.Await,
        ast.With,
        ast.Try,
        getattr(ast, "TryStar", None),
        ast.Raise,
        ast.Yield,
        ast.YieldFrom,
        ast.Global,
        ast.Nonlocal,
        ast.Lambda,
        getattr(ast, "Match", None),
    )
    if t is not None
)

DEFAULT_MAX_SOURCE_BYTES = 64 * 1024


class _Validator(ast.NodeVisitor):
    def __init__(self, *, filename: str) -> None:
        self.filename = filename

    def generic_visit(self, node: ast.AST) -> None:
        if isinstance(node, _DISALLOWED_NODE_TYPES):
            raise ValidationError(
                f"Disallowed syntax: {type(node).__name__}",
                reason="node_disallowed",
                context=self._where(node),
            )
        super().generic_visit(node)

    def _where(self, node: ast.AST, **extra: object) -> dict:
        ctx = {"filename": self.filename, "line": getattr(node, "lineno", None)}
        ctx.update(extra)
        return ctx

    # --- Import policy --------------------------------------------------------

    def visit_ImportFrom(self, node: ast.ImportFrom) -> None:
        if node.level:
            raise ForbiddenImport(f"{'.' * node.level}{node.module or ''}")
        module = node.module or ""
        allowed = module in ALLOWED_IMPORT_MODULES or any(
            module == p or module.startswith(p + ".") for p in ALLOWED_IMPORT_PREFIXES
        )
        if not allowed:
            raise ForbiddenImport(module)
        for alias in node.names:
            if alias.name == "*":
                raise ValidationError(
                    "Wildcard imports are not allowed",
                    reason="import_wildcard",
                    context=self._where(node, module=module),
                )
            if module == "stdlib" and alias.name not in ALLOWED_STDLIB_NAMES:
                raise ForbiddenImport(module, symbol=alias.name)
            if alias.name.startswith("_"):
                raise ForbiddenImport(module, symbol=alias.name)

    def visit_Import(self, node: ast.Import) -> None:
        for alias in node.names:
            raise ForbiddenImport(alias.name)

    # --- Names & attributes ---------------------------------------------------

    def visit_Name(self, node: ast.Name) -> None:
        if node.id in FORBIDDEN_NAMES:
            raise ValidationError(
                f"Use of forbidden name: {node.id}",
                reason="forbidden_name",
                context=self._where(node, name=node.id),
            )
        if node.id.startswith("__") and node.id != "__name__":
            raise ValidationError(
                "Dunder names are not allowed",
                reason="dunder_name",
                context=self._where(node, name=node.id),
            )

    def visit_Attribute(self, node: ast.Attribute) -> None:
        if node.attr.startswith("__"):
            raise ValidationError(
                "Dunder attribute access is not allowed",
                reason="dunder_attribute",
                context=self._where(node, attr=node.attr),
            )
        # Imported helper modules are shared by every contract instance.
        if isinstance(node.ctx, (ast.Store, ast.Del)):
            raise ValidationError(
                "Attribute assignment is not allowed",
                reason="attribute_store",
                context=self._where(node, attr=node.attr),
            )
        self.generic_visit(node)

    # --- Functions ------------------------------------------------------------

    def visit_FunctionDef(self, node: ast.FunctionDef) -> None:
        if node.decorator_list:
            raise ValidationError(
                "Decorators are not allowed",
                reason="decorator_forbidden",
                context=self._where(node, function=node.name),
            )
        a = node.args
        if a.vararg or a.kwarg:
            raise ValidationError(
                "*args/**kwargs are not allowed",
                reason="varargs_forbidden",
                context=self._where(node, function=node.name),
            )
        self.generic_visit(node)


def validate_source(
    source: str,
    *,
    filename: str = "<contract>",
    max_bytes: Optional[int] = None,
) -> ast.Module:
    """Parse and validate contract source; returns the parsed module AST."""
    if not isinstance(source, str):
        raise ValidationError("source must be str", reason="source_type")
    limit = DEFAULT_MAX_SOURCE_BYTES if max_bytes is None else max_bytes
    size = len(source.encode("utf-8"))
    if size == 0 or not source.strip():
        raise ValidationError("source is empty", reason="empty_source")
    if size > limit:
        raise ValidationError(
            "source too large",
            reason="source_size",
            context={"size": size, "limit": limit},
        )
    try:
        tree = ast.parse(source, filename=filename, mode="exec")
    except SyntaxError as e:
        raise ValidationError(
            f"syntax error: {e.msg}",
            reason="syntax",
            context={"filename": filename, "line": e.lineno},
        ) from e
    _Validator(filename=filename).visit(tree)
    return tree


__all__ = [
    "validate_source",
    "ALLOWED_STDLIB_NAMES",
    "ALLOWED_IMPORT_MODULES",
    "ALLOWED_IMPORT_PREFIXES",
    "FORBIDDEN_NAMES",
]
