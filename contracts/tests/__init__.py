# -*- coding: utf-8 -*-
"""
contracts.tests
================

Tests for the identity contracts. Importing the package sets a couple of
environment defaults so ad-hoc local runs behave like CI; real env values win.
"""
from __future__ import annotations

import os


def _set_if_absent(key: str, value: str) -> None:
    """Set environment variable only if it's not already present."""
    if key not in os.environ or os.environ.get(key) in ("", None):
        os.environ[key] = value


# Python hash determinism (affects dict/set iteration order in some cases).
_set_if_absent("PYTHONHASHSEED", "0")
_set_if_absent("TZ", "UTC")
# Validate contract sources on deploy unless the shell opts out.
_set_if_absent("IDVM_VALIDATE_CODE", "1")
