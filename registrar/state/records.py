"""
registrar.state.records — on-ledger record layouts.

NameRecordHeader
    Fixed 96-byte prefix of every name-service resource:
    ``parent_name (32) ‖ owner (32) ‖ name_class (32)``. The payload follows.

ReverseLookup
    Payload of a reverse-lookup resource: the registered name and an optional
    metadata URL, encoded with MessagePack (msgspec) as a positional array.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import msgspec

from ..address import ZERO_ADDRESS, ensure_address
from ..constants import NAME_HEADER_LEN
from ..errors import CorruptState


@dataclass(frozen=True)
class NameRecordHeader:
    parent_name: bytes
    owner: bytes
    name_class: bytes = ZERO_ADDRESS

    LEN = NAME_HEADER_LEN

    def pack(self) -> bytes:
        return (
            ensure_address(self.parent_name, name="parent_name")
            + ensure_address(self.owner, name="owner")
            + ensure_address(self.name_class, name="name_class")
        )

    @classmethod
    def unpack(cls, data: bytes) -> "NameRecordHeader":
        if len(data) < cls.LEN:
            raise CorruptState(
                "name record shorter than its header", data={"len": len(data)}
            )
        return cls(bytes(data[0:32]), bytes(data[32:64]), bytes(data[64:96]))

    @property
    def has_parent(self) -> bool:
        return self.parent_name != ZERO_ADDRESS

    @property
    def has_class(self) -> bool:
        return self.name_class != ZERO_ADDRESS


class ReverseLookup(msgspec.Struct, array_like=True, frozen=True):
    name: str
    metadata_url: Optional[str] = None


_encoder = msgspec.msgpack.Encoder()
_decoder = msgspec.msgpack.Decoder(ReverseLookup)


def encode_reverse(record: ReverseLookup) -> bytes:
    return _encoder.encode(record)


def decode_reverse(data: bytes) -> ReverseLookup:
    payload = bytes(data)
    if not payload:
        raise CorruptState("reverse lookup resource is empty")
    try:
        return _decoder.decode(payload)
    except (msgspec.DecodeError, msgspec.ValidationError) as e:
        raise CorruptState(f"reverse lookup payload is undecodable: {e}") from e


__all__ = ["NameRecordHeader", "ReverseLookup", "encode_reverse", "decode_reverse"]
