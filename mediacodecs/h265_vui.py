"""H265 SPS sub-structures: VUI, profile/tier/level, windows and RPS."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from mediacodecs.bits import BitReader

MAX_NEGATIVE_PICS = 255
MAX_POSITIVE_PICS = 255
EXTENDED_SAR = 255

_UINT32_MASK = 0xFFFFFFFF


def _read_offsets(reader: BitReader) -> tuple[int, int, int, int]:
    return (
        reader.read_golomb_unsigned(),
        reader.read_golomb_unsigned(),
        reader.read_golomb_unsigned(),
        reader.read_golomb_unsigned(),
    )


@dataclass
class DefaultDisplayWindow:
    """Default display window offsets."""

    left_offset: int = 0
    right_offset: int = 0
    top_offset: int = 0
    bottom_offset: int = 0

    @classmethod
    def read(cls, reader: BitReader) -> "DefaultDisplayWindow":
        """Read default display window offsets."""
        return cls(*_read_offsets(reader))


@dataclass
class TimingInfo:
    """Timing information."""

    num_units_in_tick: int = 0
    time_scale: int = 0
    poc_proportional_to_timing_flag: bool = False
    num_ticks_poc_diff_one_minus1: int = 0

    @classmethod
    def read(cls, reader: BitReader) -> "TimingInfo":
        """Read timing information."""
        reader.has_space(32 + 32 + 1)
        t = cls(
            num_units_in_tick=reader.read_bits_unchecked(32),
            time_scale=reader.read_bits_unchecked(32),
            poc_proportional_to_timing_flag=reader.read_flag_unchecked(),
        )
        if t.poc_proportional_to_timing_flag:
            t.num_ticks_poc_diff_one_minus1 = reader.read_golomb_unsigned()
        return t


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

    neutral_chroma_indication_flag: bool = False
    field_seq_flag: bool = False
    frame_field_info_present_flag: bool = False
    default_display_window: Optional[DefaultDisplayWindow] = None
    timing_info: Optional[TimingInfo] = None

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

        v.neutral_chroma_indication_flag = reader.read_flag()
        v.field_seq_flag = reader.read_flag()
        v.frame_field_info_present_flag = reader.read_flag()

        if reader.read_flag():
            v.default_display_window = DefaultDisplayWindow.read(reader)

        if reader.read_flag():
            v.timing_info = TimingInfo.read(reader)

        return v


@dataclass
class ProfileTierLevel:
    """Profile, tier and level of a SPS."""

    general_profile_space: int = 0
    general_tier_flag: int = 0
    general_profile_idc: int = 0
    general_profile_compatibility_flag: list[bool] = field(
        default_factory=lambda: [False] * 32
    )
    general_progressive_source_flag: bool = False
    general_interlaced_source_flag: bool = False
    general_non_packed_constraint_flag: bool = False
    general_frame_only_constraint_flag: bool = False
    general_max_12bit_constraint_flag: bool = False
    general_max_10bit_constraint_flag: bool = False
    general_max_8bit_constraint_flag: bool = False
    general_max_422_chroma_constraint_flag: bool = False
    general_max_420_chroma_constraint_flag: bool = False
    general_max_monochrome_constraint_flag: bool = False
    general_intra_constraint_flag: bool = False
    general_one_picture_only_constraint_flag: bool = False
    general_lower_bit_rate_constraint_flag: bool = False
    general_max_14bit_constraint_flag: bool = False
    general_level_idc: int = 0
    sub_layer_profile_present_flag: list[bool] = field(default_factory=list)
    sub_layer_level_present_flag: list[bool] = field(default_factory=list)

    @classmethod
    def read(cls, reader: BitReader, max_sub_layers_minus1: int) -> "ProfileTierLevel":
        """Read the profile, tier and level section."""
        reader.has_space(8 + 32 + 12 + 34 + 8)

        p = cls()
        p.general_profile_space = reader.read_bits_unchecked(2)
        p.general_tier_flag = reader.read_bits_unchecked(1)
        p.general_profile_idc = reader.read_bits_unchecked(5)
        p.general_profile_compatibility_flag = [
            reader.read_flag_unchecked() for _ in range(32)
        ]

        p.general_progressive_source_flag = reader.read_flag_unchecked()
        p.general_interlaced_source_flag = reader.read_flag_unchecked()
        p.general_non_packed_constraint_flag = reader.read_flag_unchecked()
        p.general_frame_only_constraint_flag = reader.read_flag_unchecked()
        p.general_max_12bit_constraint_flag = reader.read_flag_unchecked()
        p.general_max_10bit_constraint_flag = reader.read_flag_unchecked()
        p.general_max_8bit_constraint_flag = reader.read_flag_unchecked()
        p.general_max_422_chroma_constraint_flag = reader.read_flag_unchecked()
        p.general_max_420_chroma_constraint_flag = reader.read_flag_unchecked()
        p.general_max_monochrome_constraint_flag = reader.read_flag_unchecked()
        p.general_intra_constraint_flag = reader.read_flag_unchecked()
        p.general_one_picture_only_constraint_flag = reader.read_flag_unchecked()
        p.general_lower_bit_rate_constraint_flag = reader.read_flag_unchecked()

        compat = p.general_profile_compatibility_flag
        if p.general_profile_idc in (5, 9, 10, 11) or any(
            compat[i] for i in (5, 9, 10, 11)
        ):
            p.general_max_14bit_constraint_flag = reader.read_flag()
            reader.skip(34)
        else:
            reader.skip(35)

        p.general_level_idc = reader.read_bits(8)

        if max_sub_layers_minus1 > 0:
            reader.has_space(2 * max_sub_layers_minus1)
            for _ in range(max_sub_layers_minus1):
                p.sub_layer_profile_present_flag.append(reader.read_flag_unchecked())
                p.sub_layer_level_present_flag.append(reader.read_flag_unchecked())

            reader.skip((8 - max_sub_layers_minus1) * 2)

        for profile_present, level_present in zip(
            p.sub_layer_profile_present_flag, p.sub_layer_level_present_flag
        ):
            if profile_present:
                raise ValueError("SubLayerProfilePresentFlag not supported yet")
            if level_present:
                raise ValueError("SubLayerLevelPresentFlag not supported yet")

        return p


@dataclass
class ConformanceWindow:
    """Conformance window offsets of a SPS."""

    left_offset: int = 0
    right_offset: int = 0
    top_offset: int = 0
    bottom_offset: int = 0

    @classmethod
    def read(cls, reader: BitReader) -> "ConformanceWindow":
        """Read conformance window offsets."""
        return cls(*_read_offsets(reader))


@dataclass
class ShortTermRefPicSet:
    """A short-term reference picture set."""

    inter_ref_pic_set_prediction_flag: bool = False
    delta_idx_minus1: int = 0
    delta_rps_sign: bool = False
    abs_delta_rps_minus1: int = 0
    num_negative_pics: int = 0
    num_positive_pics: int = 0
    delta_poc_s0_minus1: list[int] = field(default_factory=list)
    used_by_curr_pic_s0_flag: list[bool] = field(default_factory=list)
    delta_poc_s1_minus1: list[int] = field(default_factory=list)
    used_by_curr_pic_s1_flag: list[bool] = field(default_factory=list)

    @classmethod
    def read(
        cls,
        reader: BitReader,
        st_rps_idx: int,
        num_short_term_ref_pic_sets: int,
        short_term_ref_pic_sets: Optional[Sequence[Optional["ShortTermRefPicSet"]]],
    ) -> "ShortTermRefPicSet":
        """Read a short-term reference picture set at index st_rps_idx."""
        r = cls()

        if st_rps_idx != 0:
            r.inter_ref_pic_set_prediction_flag = reader.read_flag()

        if r.inter_ref_pic_set_prediction_flag:
            if st_rps_idx == num_short_term_ref_pic_sets:
                r.delta_idx_minus1 = reader.read_golomb_unsigned()

            r.delta_rps_sign = reader.read_flag()
            r.abs_delta_rps_minus1 = reader.read_golomb_unsigned()

            ref_rps_idx = st_rps_idx - (r.delta_idx_minus1 + 1)
            sets = short_term_ref_pic_sets or []
            if not 0 <= ref_rps_idx < len(sets) or sets[ref_rps_idx] is None:
                raise ValueError("invalid delta_idx_minus1")
            ref = sets[ref_rps_idx]
            num_delta_pocs = (ref.num_negative_pics + ref.num_positive_pics) & _UINT32_MASK

            for _ in range(num_delta_pocs + 1):
                if reader.read_flag():  # used_by_curr_pic_flag
                    reader.read_golomb_unsigned()  # use_delta_flag
            return r

        r.num_negative_pics = reader.read_golomb_unsigned()
        r.num_positive_pics = reader.read_golomb_unsigned()

        if r.num_negative_pics > 0:
            if r.num_negative_pics > MAX_NEGATIVE_PICS:
                raise ValueError(f"num_negative_pics exceeds {MAX_NEGATIVE_PICS}")
            for _ in range(r.num_negative_pics):
                r.delta_poc_s0_minus1.append(reader.read_golomb_unsigned())
                r.used_by_curr_pic_s0_flag.append(reader.read_flag())

        if r.num_positive_pics > 0:
            if r.num_positive_pics > MAX_POSITIVE_PICS:
                raise ValueError(f"num_positive_pics exceeds {MAX_POSITIVE_PICS}")
            for _ in range(r.num_positive_pics):
                r.delta_poc_s1_minus1.append(reader.read_golomb_unsigned())
                r.used_by_curr_pic_s1_flag.append(reader.read_flag())

        return r