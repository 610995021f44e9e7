"""AC-3 sync information and bit stream information parsing."""

from __future__ import annotations

from dataclasses import dataclass

from mediacodecs.bits import BitReader, BitsError

SAMPLES_PER_FRAME = 1536

# ATSC, AC-3, Table 5.18
_FRAME_SIZES = (
    (64, 69, 96),
    (64, 70, 96),
    (80, 87, 120),
    (80, 88, 120),
    (96, 104, 144),
    (96, 105, 144),
    (112, 121, 168),
    (112, 122, 168),
    (128, 139, 192),
    (128, 140, 192),
    (160, 174, 240),
    (160, 175, 240),
    (192, 208, 288),
    (192, 209, 288),
    (224, 243, 336),
    (224, 244, 336),
    (256, 278, 384),
    (256, 279, 384),
    (320, 348, 480),
    (320, 349, 480),
    (384, 417, 576),
    (384, 418, 576),
    (448, 487, 672),
    (448, 488, 672),
    (512, 557, 768),
    (512, 558, 768),
    (640, 696, 960),
    (640, 697, 960),
    (768, 835, 1152),
    (768, 836, 1152),
    (896, 975, 1344),
    (896, 976, 1344),
    (1024, 1114, 1536),
    (1024, 1115, 1536),
    (1152, 1253, 1728),
    (1152, 1254, 1728),
    (1280, 1393, 1920),
    (1280, 1394, 1920),
)


@dataclass
class BSI:
    """Bit Stream Information (ATSC AC-3, Table 5.2)."""

    bsid: int = 0
    bsmod: int = 0
    acmod: int = 0
    lfe_on: bool = False

    @classmethod
    def unmarshal(cls, buf: bytes) -> "BSI":
        """Decode a BSI from the bytes that follow the sync info."""
        if len(buf) < 2:
            raise BitsError("not enough bits")

        bsid = buf[0] >> 3
        if bsid != 0x08:
            raise ValueError("invalid bsid")
        bsmod = buf[0] & 0b111

        reader = BitReader(buf[1:])
        acmod = reader.read_bits_unchecked(3)

        if acmod & 0x1 and acmod != 0x1:
            reader.skip(2)  # cmixlev
        if acmod & 0x4:
            reader.skip(2)  # surmixlev
        if acmod == 0x2:
            reader.skip(2)  # dsurmod

        lfe_on = reader.read_flag_unchecked()
        return cls(bsid=bsid, bsmod=bsmod, acmod=acmod, lfe_on=lfe_on)

    def channel_count(self) -> int:
        """Return the number of channels, including LFE."""
        if self.acmod == 0b001:
            n = 1
        elif self.acmod in (0b010, 0b000):
            n = 2
        elif self.acmod in (0b011, 0b100):
            n = 3
        elif self.acmod in (0b101, 0b110):
            n = 4
        else:
            n = 5
        return n + 1 if self.lfe_on else n


@dataclass
class SyncInfo:
    """Synchronization information (ATSC AC-3, Table 5.1)."""

    fscod: int = 0
    frmsizecod: int = 0

    @classmethod
    def unmarshal(cls, frame: bytes) -> "SyncInfo":
        """Decode the sync info at the start of a frame."""
        if len(frame) < 5:
            raise BitsError("not enough bits")
        if frame[0] != 0x0B or frame[1] != 0x77:
            raise ValueError("invalid sync word")

        fscod = frame[4] >> 6
        if fscod >= 3:
            raise ValueError("invalid fscod")

        frmsizecod = frame[4] & 0x3F
        if frmsizecod >= 38:
            raise ValueError("invalid frmsizecod")

        return cls(fscod=fscod, frmsizecod=frmsizecod)

    def frame_size(self) -> int:
        """Return the frame size in bytes."""
        return _FRAME_SIZES[self.frmsizecod][self.fscod] * 2

    def sample_rate(self) -> int:
        """Return the sample rate in Hz."""
        if self.fscod == 0:
            return 48000
        if self.fscod == 1:
            return 44100
        return 32000