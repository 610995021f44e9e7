"""H264 SPS sub-structures: VUI, HRD, timing info, restrictions and cropping."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from mediacodecs.bits import BitReader

EXTENDED_SAR = 255


@dataclass
class HRD:
    """Hypothetical reference decoder parameters."""

    cpb_cnt_minus1: int = 0
    bit_rate_scale: int = 0
    cpb_size_scale: int = 0
    bit_rate_value_minus1: list[int] = field(default_factory=list)
    cpb_size_value_minus1: list[int] = field(default_factory=list)
    cbr_flag: list[bool] = field(default_factory=list)
    initial_cpb_removal_delay_length_minus1: int = 0
    cpb_removal_delay_length_minus1: int = 0
    dpb_output_delay_length_minus1: int = 0
    time_offset_length: int = 0

    @classmethod
    def read(cls, reader: BitReader) -> "HRD":
        """Read HRD parameters."""
        h = cls()
        h.cpb_cnt_minus1 = reader.read_golomb_unsigned()

        reader.has_space(8)
        h.bit_rate_scale = reader.read_bits_unchecked(4)
        h.cpb_size_scale = reader.read_bits_unchecked(4)

        for _ in range(h.cpb_cnt_minus1 + 1):
            h.bit_rate_value_minus1.append(reader.read_golomb_unsigned())
            h.cpb_size_value_minus1.append(reader.read_golomb_unsigned())
            h.cbr_flag.append(reader.read_flag())

        reader.has_space(5 + 5 + 5 + 5)
        h.initial_cpb_removal_delay_length_minus1 = reader.read_bits_unchecked(5)
        h.cpb_removal_delay_length_minus1 = reader.read_bits_unchecked(5)
        h.dpb_output_delay_length_minus1 = reader.read_bits_unchecked(5)
        h.time_offset_length = reader.read_bits_unchecked(5)
        return h


@dataclass
class TimingInfo:
    """Timing information."""

    num_units_in_tick: int = 0
    time_scale: int = 0
    fixed_frame_rate_flag: bool = False

    @classmethod
    def read(cls, reader: BitReader) -> "TimingInfo":
        """Read timing information."""
        reader.has_space(32 + 32 + 1)
        return cls(
            num_units_in_tick=reader.read_bits_unchecked(32),
            time_scale=reader.read_bits_unchecked(32),
            fixed_frame_rate_flag=reader.read_flag_unchecked(),
        )


@dataclass
class BitstreamRestriction:
    """Bitstream restriction information."""

    motion_vectors_over_pic_boundaries_flag: bool = False
    max_bytes_per_pic_denom: int = 0
    max_bits_per_mb_denom: int = 0
    log2_max_mv_length_horizontal: int = 0
    log2_max_mv_length_vertical: int = 0
    max_num_reorder_frames: int = 0
    max_dec_frame_buffering: int = 0

    @classmethod
    def read(cls, reader: BitReader) -> "BitstreamRestriction":
        """Read bitstream restriction information."""
        r = cls()
        r.motion_vectors_over_pic_boundaries_flag = reader.read_flag()
        r.max_bytes_per_pic_denom = reader.read_golomb_unsigned()
        r.max_bits_per_mb_denom = reader.read_golomb_unsigned()
        r.log2_max_mv_length_horizontal = reader.read_golomb_unsigned()
        r.log2_max_mv_length_vertical = reader.read_golomb_unsigned()
        r.max_num_reorder_frames = reader.read_golomb_unsigned()
        r.max_dec_frame_buffering = reader.read_golomb_unsigned()
        return r


@dataclass
class VUI:
    """Video usability information."""

    aspect_ratio_info_present_flag: bool = False
    aspect_ratio_idc: int = 0
    sar_width: int = 0
    sar_height: int = 0

    overscan_info_present_flag: bool = False
    overscan_appropriate_flag: bool = False

    video_signal_type_present_flag: bool = False
    video_format: int = 0
    video_full_range_flag: bool = False
    colour_description_present_flag: bool = False
    colour_primaries: int = 0
    transfer_characteristics: int = 0
    matrix_coefficients: int = 0

    chroma_loc_info_present_flag: bool = False
    chroma_sample_loc_type_top_field: int = 0
    chroma_sample_loc_type_bottom_field: int = 0

    timing_info: Optional[TimingInfo] = None
    nal_hrd: Optional[HRD] = None
    vcl_hrd: Optional[HRD] = None

    low_delay_hrd_flag: bool = False
    pic_struct_present_flag: bool = False
    bitstream_restriction: Optional[BitstreamRestriction] = None

    @classmethod
    def read(cls, reader: BitReader) -> "VUI":
        """Read video usability information."""
        v = cls()

        v.aspect_ratio_info_present_flag = reader.read_flag()
        if v.aspect_ratio_info_present_flag:
            v.aspect_ratio_idc = reader.read_bits(8)
            if v.aspect_ratio_idc == EXTENDED_SAR:
                reader.has_space(32)
                v.sar_width = reader.read_bits_unchecked(16)
                v.sar_height = reader.read_bits_unchecked(16)

        v.overscan_info_present_flag = reader.read_flag()
        if v.overscan_info_present_flag:
            v.overscan_appropriate_flag = reader.read_flag()

        v.video_signal_type_present_flag = reader.read_flag()
        if v.video_signal_type_present_flag:
            reader.has_space(5)
            v.video_format = reader.read_bits_unchecked(3)
            v.video_full_range_flag = reader.read_flag_unchecked()
            v.colour_description_present_flag = reader.read_flag_unchecked()
            if v.colour_description_present_flag:
                reader.has_space(24)
                v.colour_primaries = reader.read_bits_unchecked(8)
                v.transfer_characteristics = reader.read_bits_unchecked(8)
                v.matrix_coefficients = reader.read_bits_unchecked(8)

        v.chroma_loc_info_present_flag = reader.read_flag()
        if v.chroma_loc_info_present_flag:
            v.chroma_sample_loc_type_top_field = reader.read_golomb_unsigned()
            v.chroma_sample_loc_type_bottom_field = reader.read_golomb_unsigned()

        if reader.read_flag():
            v.timing_info = TimingInfo.read(reader)

        nal_hrd_present = reader.read_flag()
        if nal_hrd_present:
            v.nal_hrd = HRD.read(reader)

        vcl_hrd_present = reader.read_flag()
        if vcl_hrd_present:
            v.vcl_hrd = HRD.read(reader)

        if nal_hrd_present or vcl_hrd_present:
            v.low_delay_hrd_flag = reader.read_flag()

        v.pic_struct_present_flag = reader.read_flag()

        if reader.read_flag():
            v.bitstream_restriction = BitstreamRestriction.read(reader)

        return v


@dataclass
class FrameCropping:
    """Frame cropping offsets of a SPS."""

    left_offset: int = 0
    right_offset: int = 0
    top_offset: int = 0
    bottom_offset: int = 0

    @classmethod
    def read(cls, reader: BitReader) -> "FrameCropping":
        """Read frame cropping offsets."""
        return cls(
            left_offset=reader.read_golomb_unsigned(),
            right_offset=reader.read_golomb_unsigned(),
            top_offset=reader.read_golomb_unsigned(),
            bottom_offset=reader.read_golomb_unsigned(),
        )