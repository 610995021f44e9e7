"""H264 access unit framing in the Annex-B and AVCC stream formats."""

from __future__ import annotations

from mediacodecs.h264_nalu import MAX_ACCESS_UNIT_SIZE, MAX_NALUS_PER_ACCESS_UNIT

_START_CODE = b"\x00\x00\x00\x01"


class AVCCNoNALUsError(ValueError):
    """Raised when an AVCC unit holds no NALU."""

    def __init__(self, message: str = "AVCC unit doesn't contain any NALU") -> None:
        super().__init__(message)


def _too_big(size: int) -> ValueError:
    return ValueError(
        f"access unit size ({size}) is too big, maximum is {MAX_ACCESS_UNIT_SIZE}"
    )


def _too_many(count: int) -> ValueError:
    return ValueError(
        f"NALU count ({count}) exceeds maximum allowed ({MAX_NALUS_PER_ACCESS_UNIT})"
    )


def _skip_initial_delimiter(byts: bytes) -> int:
    """Return the offset of the first NALU after the leading start code."""
    for index, b in enumerate(byts[:4]):
        if index < 2:
            if b != 0:
                break
        elif b == 1:
            return index + 1
        elif b != 0:
            break
    raise ValueError("initial delimiter not found")


def annexb_unmarshal(byts: bytes) -> list[bytes]:
    """Split an Annex-B stream into the NALUs of an access unit."""
    byts = bytes(byts)
    start = _skip_initial_delimiter(byts)

    # (offset where the delimiter begins, offset of the next NALU)
    delimiters: list[tuple[int, int]] = []
    zero_count = 0
    delim_start = 0
    for i, b in enumerate(byts[start:], start):
        if b == 0:
            if zero_count == 0:
                delim_start = i
            zero_count += 1
            continue
        if b == 1 and zero_count in (2, 3):
            delimiters.append((delim_start, i + 1))
        zero_count = 0

    if len(delimiters) + 1 > MAX_NALUS_PER_ACCESS_UNIT:
        raise _too_many(len(delimiters) + 1)

    nalus: list[bytes] = []
    au_size = 0
    nalu_start = start
    for end, next_start in [*delimiters, (len(byts), len(byts))]:
        length = end - nalu_start
        if length == 0:
            raise ValueError("invalid NALU")
        if au_size + length > MAX_ACCESS_UNIT_SIZE:
            raise _too_big(au_size + length)
        nalus.append(byts[nalu_start:end])
        au_size += length
        nalu_start = next_start

    return nalus


def annexb_marshal(au: list[bytes]) -> bytes:
    """Join NALUs into an Annex-B stream with 4-byte start codes."""
    return b"".join(_START_CODE + bytes(nalu) for nalu in au)


def avcc_unmarshal(buf: bytes) -> list[bytes]:
    """Split an AVCC unit (4-byte length prefixes) into NALUs."""
    buf = bytes(buf)
    total = len(buf)
    pos = 0
    nalus: list[bytes] = []
    au_size = 0

    while True:
        if total - pos < 4:
            raise ValueError("invalid length")

        length = int.from_bytes(buf[pos:pos + 4], "big")
        pos += 4

        if length != 0:
            if au_size + length > MAX_ACCESS_UNIT_SIZE:
                raise _too_big(au_size + length)
            if len(nalus) + 1 > MAX_NALUS_PER_ACCESS_UNIT:
                raise _too_many(len(nalus) + 1)
            if total - pos < length:
                raise ValueError("invalid length")

            nalus.append(buf[pos:pos + length])
            au_size += length
            pos += length

        if pos == total:
            break

    if not nalus:
        raise AVCCNoNALUsError()
    return nalus


def avcc_marshal(au: list[bytes]) -> bytes:
    """Join NALUs into an AVCC unit with 4-byte big-endian length prefixes."""
    return b"".join(
        (len(nalu) & 0xFFFFFFFF).to_bytes(4, "big") + bytes(nalu) for nalu in au
    )