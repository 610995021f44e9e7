"""H265 picture parameter set parsing."""

from __future__ import annotations

from dataclasses import dataclass

from mediacodecs.bits import BitReader, BitsError
from mediacodecs.h264_nalu import emulation_prevention_remove
from mediacodecs.h265_nalu import NALUType, nalu_type_of


@dataclass
class PPS:
    """An H265 picture parameter set (ITU-T Rec. H.265, 7.3.2.3.1)."""

    id: int = 0
    sps_id: int = 0
    dependent_slice_segments_enabled_flag: bool = False
    output_flag_present_flag: bool = False
    num_extra_slice_header_bits: int = 0

    @classmethod
    def unmarshal(cls, buf: bytes) -> "PPS":
        """Decode a PPS NALU."""
        if len(buf) < 2:
            raise BitsError("not enough bits")
        if nalu_type_of(buf) != NALUType.PPS_NUT:
            raise ValueError("not a PPS")

        r = BitReader(emulation_prevention_remove(bytes(buf[1:])), 8)

        p = cls()
        p.id = r.read_golomb_unsigned()
        p.sps_id = r.read_golomb_unsigned()

        r.has_space(5)
        p.dependent_slice_segments_enabled_flag = r.read_flag_unchecked()
        p.output_flag_present_flag = r.read_flag_unchecked()
        p.num_extra_slice_header_bits = r.read_bits_unchecked(3)
        return p