"""AV1 OBU headers, LEB128 and low-overhead bitstream format."""

from __future__ import annotations

from dataclasses import dataclass

MAX_TEMPORAL_UNIT_SIZE = 3 * 1024 * 1024
MAX_OBUS_PER_TEMPORAL_UNIT = 10

OBU_TYPE_SEQUENCE_HEADER = 1


@dataclass
class OBUHeader:
    """An OBU header."""

    obu_type: int = 0
    has_size: bool = False

    @classmethod
    def unmarshal(cls, buf: bytes) -> "OBUHeader":
        """Decode the header at the start of an OBU."""
        if len(buf) < 1:
            raise ValueError("not enough bytes")
        first = buf[0]
        if first >> 7:
            raise ValueError("forbidden bit is set")
        if (first >> 2) & 0b1:
            raise ValueError("extension flag is not supported yet")
        return cls(obu_type=first >> 3, has_size=bool((first >> 1) & 0b1))


def leb128_unmarshal(buf: bytes) -> tuple[int, int]:
    """Decode a LEB128 value; return (value, bytes consumed)."""
    value = 0
    n = 0
    for i in range(8):
        if i >= len(buf):
            raise ValueError("not enough bytes")
        b = buf[i]
        value |= (b & 0b01111111) << (i * 7)
        n += 1
        if not b & 0b10000000:
            break
    return value, n


def leb128_marshal_size(v: int) -> int:
    """Return the number of bytes needed to encode v as LEB128."""
    n = 1
    v >>= 7
    while v > 0:
        v >>= 7
        n += 1
    return n


def leb128_marshal(v: int) -> bytes:
    """Encode v as LEB128."""
    out = bytearray()
    while True:
        byte = v & 0b01111111
        v >>= 7
        if v <= 0:
            out.append(byte)
            return bytes(out)
        out.append(byte | 0b10000000)


def bitstream_unmarshal(bs: bytes, remove_size_field: bool = False) -> list[bytes]:
    """Split a low-overhead bitstream into OBUs, optionally dropping size fields."""
    ret: list[bytes] = []
    bs = bytes(bs)
    while True:
        header = OBUHeader.unmarshal(bs)
        if not header.has_size:
            raise ValueError("OBU size not present")

        size, size_n = leb128_unmarshal(bs[1:])
        obu_len = 1 + size_n + size
        if len(bs) < obu_len:
            raise ValueError("not enough bytes")

        obu = bs[:obu_len]
        if remove_size_field:
            obu = bytes([(header.obu_type << 3) & 0xFF]) + obu[1 + size_n:]

        ret.append(obu)
        bs = bs[obu_len:]
        if not bs:
            return ret


def bitstream_marshal(tu: list[bytes]) -> bytes:
    """Join OBUs into a low-overhead bitstream, adding size fields where missing."""
    headers = [OBUHeader.unmarshal(obu) for obu in tu]
    out = bytearray()
    for obu, header in zip(tu, headers):
        if header.has_size:
            out += obu
        else:
            out.append(obu[0] | 0b00000010)
            out += leb128_marshal(len(obu) - 1)
            out += obu[1:]
    return bytes(out)


def contains_key_frame(tu: list[bytes]) -> bool:
    """Tell whether a temporal unit starts with a sequence header."""
    if not tu:
        raise ValueError("temporal unit is empty")
    return OBUHeader.unmarshal(tu[0]).obu_type == OBU_TYPE_SEQUENCE_HEADER