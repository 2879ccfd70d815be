"""
idvm.config — runtime configuration for the identity VM host.

Knobs:
  • Limits (call depth, contract source size, storage value size)
  • Static validation of contract source on deploy/CREATE
  • Logging level/format used by `idvm.logging.configure_from_env`

Configuration is read from environment variables with safe defaults so a local
run works out of the box.

Environment variables (all optional):
  IDVM_MAX_CALL_DEPTH            -> integer (default: 64)
  IDVM_MAX_CODE_BYTES            -> e.g. "64KiB", "65536" (default: 64KiB)
  IDVM_MAX_STORAGE_VALUE_BYTES   -> e.g. "64KiB" (default: 64KiB)
  IDVM_VALIDATE_CODE             -> 0/1/true/false (default: 1)
  IDVM_LOG_LEVEL                 -> DEBUG/INFO/... (default: INFO)
  IDVM_LOG_FORMAT                -> json|text (default: auto)

Programmatic usage:
    from idvm.config import get_config
    cfg = get_config()
    if depth > cfg.max_call_depth:
        ...
"""

from __future__ import annotations

import os
import re
from dataclasses import asdict, dataclass, replace
from functools import lru_cache
from typing import Dict, Mapping, Optional, Union

# ----------------------------- helpers -------------------------------------


_BOOL_TRUE = {"1", "true", "t", "yes", "y", "on"}
_BOOL_FALSE = {"0", "false", "f", "no", "n", "off"}


def _bool_env(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    v = value.strip().lower()
    if v in _BOOL_TRUE:
        return True
    if v in _BOOL_FALSE:
        return False
    return bool(v) if v != "" else default


_SIZE_RE = re.compile(r"^\s*(\d+)\s*([kKmMgG]i?[bB]|[bB])?\s*$")

_SIZE_UNITS = {
    "b": 1,
    "kb": 1000,
    "kib": 1024,
    "mb": 1000**2,
    "mib": 1024**2,
    "gb": 1000**3,
    "gib": 1024**3,
}


def _parse_size_bytes(s: Union[str, int, float]) -> int:
    """
    Parse human-friendly byte sizes:
      "256KiB", "64KB", "1MiB", "131072", 131072 -> bytes (int)
    """
    if isinstance(s, (int, float)):
        n = int(s)
        if n < 0:
            raise ValueError("size must be non-negative")
        return n

    m = _SIZE_RE.match(str(s))
    if not m:
        raise ValueError(f"invalid size: {s!r}")
    unit = (m.group(2) or "B").lower()
    return int(m.group(1)) * _SIZE_UNITS[unit]


# ------------------------------ dataclass -----------------------------------


@dataclass(frozen=True)
class VmConfig:
    max_call_depth: int = 64
    max_code_bytes: int = 64 * 1024  # 64 KiB
    max_storage_value_bytes: int = 64 * 1024  # 64 KiB
    validate_code: bool = True
    log_level: str = "INFO"
    log_format: Optional[str] = None  # None → auto (json when not a TTY)

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)

    def with_overrides(self, **fields: object) -> "VmConfig":
        return _validate(replace(self, **fields))


def _validate(cfg: VmConfig) -> VmConfig:
    if cfg.max_call_depth <= 0:
        raise ValueError("max_call_depth must be > 0")
    if cfg.max_code_bytes <= 0:
        raise ValueError("max_code_bytes must be > 0")
    if cfg.max_storage_value_bytes <= 0:
        raise ValueError("max_storage_value_bytes must be > 0")
    if cfg.log_format not in (None, "json", "text"):
        raise ValueError("log_format must be 'json' or 'text'")
    return cfg


# ------------------------------ loader --------------------------------------


def load_config(
    env: Optional[Mapping[str, str]] = None,
    *,
    overrides: Optional[Mapping[str, Union[str, int, bool]]] = None,
) -> VmConfig:
    """
    Build a VmConfig from environment and optional overrides.

    Args:
        env: mapping to read variables from (default: os.environ)
        overrides: explicit field overrides keyed by VmConfig field name
    """
    env = os.environ if env is None else env
    overrides = dict(overrides or {})

    fmt = overrides.get("log_format", env.get("IDVM_LOG_FORMAT"))
    fmt = fmt.strip().lower() if isinstance(fmt, str) and fmt.strip() else None

    cfg = VmConfig(
        max_call_depth=int(
            overrides.get("max_call_depth", env.get("IDVM_MAX_CALL_DEPTH", 64))
        ),
        max_code_bytes=_parse_size_bytes(
            overrides.get("max_code_bytes", env.get("IDVM_MAX_CODE_BYTES", 64 * 1024))
        ),
        max_storage_value_bytes=_parse_size_bytes(
            overrides.get(
                "max_storage_value_bytes",
                env.get("IDVM_MAX_STORAGE_VALUE_BYTES", 64 * 1024),
            )
        ),
        validate_code=(
            bool(overrides["validate_code"])
            if "validate_code" in overrides
            else _bool_env(env.get("IDVM_VALIDATE_CODE"), True)
        ),
        log_level=str(overrides.get("log_level", env.get("IDVM_LOG_LEVEL", "INFO"))).upper(),
        log_format=fmt,
    )
    return _validate(cfg)


@lru_cache(maxsize=1)
def get_config() -> VmConfig:
    """Cached global config."""
    return load_config()


__all__ = ["VmConfig", "load_config", "get_config"]
