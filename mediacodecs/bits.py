"""Bit-level reading and writing over byte buffers."""

from __future__ import annotations

_UINT32_MASK = 0xFFFFFFFF


class BitsError(ValueError):
    """Raised when a bit buffer cannot satisfy a read."""


def _to_int32(value: int) -> int:
    return ((value + 0x80000000) & _UINT32_MASK) - 0x80000000


def _half_toward_zero(value: int) -> int:
    return -((-value) // 2) if value < 0 else value // 2


class BitReader:
    """Reads big-endian bit fields from a byte buffer, tracking a bit position."""

    def __init__(self, buf: bytes, pos: int = 0) -> None:
        self.buf = bytes(buf)
        self.pos = pos

    def _remaining(self) -> int:
        return len(self.buf) * 8 - self.pos

    def has_space(self, n: int) -> None:
        """Raise BitsError unless at least n bits are left."""
        if n > self._remaining():
            raise BitsError("not enough bits")

    def skip(self, n: int) -> None:
        """Advance the position by n bits."""
        self.has_space(n)
        self.pos += n

    def read_bits(self, n: int) -> int:
        """Read n bits as an unsigned integer."""
        self.has_space(n)
        return self.read_bits_unchecked(n)

    def read_bits_unchecked(self, n: int) -> int:
        """Read n bits, assuming the caller already checked for space."""
        if n == 0:
            return 0
        start = self.pos >> 3
        end = (self.pos + n + 7) >> 3
        chunk = int.from_bytes(self.buf[start:end], "big")
        shift = (end - start) * 8 - (self.pos & 0x07) - n
        self.pos += n
        return (chunk >> shift) & ((1 << n) - 1)

    def read_flag(self) -> bool:
        """Read a single bit as a boolean."""
        self.has_space(1)
        return self.read_flag_unchecked()

    def read_flag_unchecked(self) -> bool:
        """Read a single bit, assuming the caller already checked for space."""
        bit = (self.buf[self.pos >> 3] >> (7 - (self.pos & 0x07))) & 0x01
        self.pos += 1
        return bit == 1

    def read_golomb_unsigned(self) -> int:
        """Read an unsigned Exp-Golomb value."""
        leading_zero_bits = 0
        while True:
            if self._remaining() == 0:
                raise BitsError("not enough bits")
            if self.read_flag_unchecked():
                break
            leading_zero_bits += 1
            if leading_zero_bits > 32:
                raise BitsError("invalid value")

        if self._remaining() < leading_zero_bits:
            raise BitsError("not enough bits")

        code = self.read_bits_unchecked(leading_zero_bits)
        return ((1 << leading_zero_bits) - 1 + code) & _UINT32_MASK

    def read_golomb_signed(self) -> int:
        """Read a signed Exp-Golomb value."""
        vi = _to_int32(self.read_golomb_unsigned())
        if vi & 0x01:
            return _to_int32(_half_toward_zero(_to_int32(vi + 1)))
        return _to_int32(_half_toward_zero(_to_int32(-vi)))


class BitWriter:
    """Writes big-endian bit fields into a fixed-size zeroed buffer."""

    def __init__(self, size: int) -> None:
        self.buf = bytearray(size)
        self.pos = 0

    def write_bits(self, bits: int, n: int) -> None:
        """Write the low n bits of bits at the current position."""
        buf = self.buf
        res = 8 - (self.pos & 0x07)
        if n < res:
            buf[self.pos >> 3] |= (bits << (res - n)) & 0xFF
            self.pos += n
            return

        buf[self.pos >> 3] |= (bits >> (n - res)) & 0xFF
        self.pos += res
        n -= res

        while n >= 8:
            buf[self.pos >> 3] = (bits >> (n - 8)) & 0xFF
            self.pos += 8
            n -= 8

        if n > 0:
            buf[self.pos >> 3] = ((bits & ((1 << n) - 1)) << (8 - n)) & 0xFF
            self.pos += n