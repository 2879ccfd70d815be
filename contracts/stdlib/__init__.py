# -*- coding: utf-8 -*-
"""
contracts.stdlib
================

Helpers contract sources may import next to the `stdlib` surface:

    from contracts.stdlib import errors
    from contracts.stdlib.access.keys import Purpose, PurposeSet, require_single_purpose
    from contracts.stdlib.access.ownable import get_owner, init_owner, require_owner

Helpers only use the sanctioned `stdlib` modules (storage, events, abi, hash)
and never keep state of their own.
"""
