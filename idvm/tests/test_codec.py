from __future__ import annotations

import pytest

from idvm.errors import VmError
from idvm.runtime import codec


def test_encoding_is_canonical_for_dicts():
    a = codec.encode({"b": 1, "a": [b"\x00", "x", True]})
    b = codec.encode({"a": [b"\x00", "x", True], "b": 1})
    assert a == b


def test_tuples_decode_as_lists():
    assert codec.decode(codec.encode((1, b"k", None))) == [1, b"k", None]


def test_call_shape():
    data = codec.encode_call("add_key", b"\x11" * 32, 2, 1)
    assert codec.decode(data) == ["add_key", [b"\x11" * 32, 2, 1]]
    assert codec.decode_call(data) == ("add_key", (b"\x11" * 32, 2, 1))


def test_large_ints_survive():
    big = (1 << 255) + 7
    assert codec.decode(codec.encode(big)) == big


@pytest.mark.parametrize(
    "blob",
    [
        codec.encode("just-a-string"),
        codec.encode(["fn"]),
        codec.encode([1, []]),
        codec.encode(["fn", "not-a-list"]),
    ],
)
def test_decode_call_rejects_bad_shapes(blob):
    with pytest.raises(VmError) as ei:
        codec.decode_call(blob)
    assert ei.value.code == "abi_decode"


@pytest.mark.parametrize("blob", [b"", b"\x5f", b"\x82\x01"])
def test_decode_rejects_malformed_bytes(blob):
    with pytest.raises(VmError) as ei:
        codec.decode(blob)
    assert ei.value.code == "abi_decode"


def test_encode_rejects_unsupported_values():
    with pytest.raises(VmError) as ei:
        codec.encode({"x": object()})
    assert ei.value.code == "abi_encode"


def test_encode_call_requires_name():
    with pytest.raises(VmError):
        codec.encode_call("")
