# -*- coding: utf-8 -*-
"""
contracts.stdlib.access
=======================

Access-control helpers for identity contracts.

- `keys`    : key purposes as a validated capability set, key types, key ids
- `ownable` : a single owner reference kept at a contract-chosen storage key

Both modules use only the sanctioned `stdlib` surface and are imported directly
by contract source:

    from contracts.stdlib.access.keys import Purpose, PurposeSet, key_id
    from contracts.stdlib.access.ownable import init_owner, require_owner
"""
