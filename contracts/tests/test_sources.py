# -*- coding: utf-8 -*-
from __future__ import annotations

import pytest

from contracts.identity import CONTRACTS, load_source, source_path
from idvm.validate import validate_source

from .conftest import COUNTER_PATH


@pytest.mark.parametrize("name", CONTRACTS)
def test_identity_sources_validate(name):
    validate_source(load_source(name).decode("utf-8"), filename=str(source_path(name)))


def test_counter_template_validates():
    validate_source(COUNTER_PATH.read_text(encoding="utf-8"))


def test_unknown_contract_name():
    with pytest.raises(KeyError):
        source_path("wallet")


def test_sources_are_cached():
    assert load_source(CONTRACTS[0]) is load_source(CONTRACTS[0])
