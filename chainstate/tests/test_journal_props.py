"""
Property tests for the journal's revert/commit laws.

- checkpoint → writes → revert  ⇒ state equals baseline
- checkpoint → writes → commit  ⇒ state equals baseline ∪ writes (last-wins)
- nested checkpoints behave as a stack (inner revert keeps outer writes)
"""
from __future__ import annotations

from typing import Dict

from hypothesis import given, settings, strategies as st

from chainstate.state import Journal, StorageView

ADDR = b"\x01" * 20

HKEY = st.binary(min_size=1, max_size=32)
HVAL = st.binary(min_size=1, max_size=64)
MAP_SMALL = st.dictionaries(keys=HKEY, values=HVAL, min_size=0, max_size=16)


def _merge_last_wins(base: Dict[bytes, bytes], upd: Dict[bytes, bytes]) -> Dict[bytes, bytes]:
    out = dict(base)
    out.update(upd)
    return out


def _seeded(base: Dict[bytes, bytes]) -> Journal:
    j = Journal({}, StorageView())
    j.begin()
    for k, v in base.items():
        j.storage_set(ADDR, k, v)
    j.commit()
    return j


def _view(j: Journal) -> Dict[bytes, bytes]:
    return dict(j.storage_items(ADDR))


@settings(max_examples=75, deadline=None)
@given(base=MAP_SMALL, writes=MAP_SMALL)
def test_revert_restores_baseline(base, writes):
    j = _seeded(base)
    j.begin()
    for k, v in writes.items():
        j.storage_set(ADDR, k, v)
    j.revert()
    assert _view(j) == base


@settings(max_examples=75, deadline=None)
@given(base=MAP_SMALL, writes=MAP_SMALL)
def test_commit_is_last_wins_merge(base, writes):
    j = _seeded(base)
    j.begin()
    for k, v in writes.items():
        j.storage_set(ADDR, k, v)
    j.commit()
    assert _view(j) == _merge_last_wins(base, writes)


@settings(max_examples=50, deadline=None)
@given(base=MAP_SMALL, outer=MAP_SMALL, inner=MAP_SMALL)
def test_inner_revert_keeps_outer(base, outer, inner):
    j = _seeded(base)
    j.begin()
    for k, v in outer.items():
        j.storage_set(ADDR, k, v)
    j.begin()
    for k, v in inner.items():
        j.storage_set(ADDR, k, v)
    j.revert()
    j.commit()
    assert _view(j) == _merge_last_wins(base, outer)
