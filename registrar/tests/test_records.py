from __future__ import annotations

import pytest

from registrar.address import ZERO_ADDRESS
from registrar.errors import CorruptState
from registrar.state.records import NameRecordHeader, ReverseLookup, decode_reverse, encode_reverse

PARENT = b"\x0a" * 32
OWNER = b"\x0b" * 32
CLASS = b"\x0c" * 32


def test_header_layout():
    header = NameRecordHeader(PARENT, OWNER, CLASS)
    packed = header.pack()
    assert len(packed) == NameRecordHeader.LEN == 96
    assert packed == PARENT + OWNER + CLASS
    assert NameRecordHeader.unpack(packed + b"payload") == header


def test_header_flags():
    assert not NameRecordHeader(ZERO_ADDRESS, OWNER).has_parent
    assert not NameRecordHeader(ZERO_ADDRESS, OWNER).has_class
    assert NameRecordHeader(PARENT, OWNER, CLASS).has_class


def test_short_header_is_corrupt():
    with pytest.raises(CorruptState):
        NameRecordHeader.unpack(b"\x00" * 95)


def test_reverse_payload():
    rec = decode_reverse(encode_reverse(ReverseLookup("abc")))
    assert rec.name == "abc"
    assert rec.metadata_url is None
    rec = decode_reverse(encode_reverse(ReverseLookup("abc", "https://example.org/abc.json")))
    assert rec.metadata_url == "https://example.org/abc.json"


@pytest.mark.parametrize("payload", [b"", b"\xc1", b"\x92\x01\x02", b"\x90"])
def test_undecodable_reverse_payload(payload):
    with pytest.raises(CorruptState):
        decode_reverse(payload)
