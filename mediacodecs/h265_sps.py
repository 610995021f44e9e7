"""H265 sequence parameter set parsing."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

from mediacodecs.bits import BitReader, BitsError
from mediacodecs.h264_nalu import emulation_prevention_remove
from mediacodecs.h265_nalu import NALUType, nalu_type_of
from mediacodecs.h265_vui import (
    VUI,
    ConformanceWindow,
    ProfileTierLevel,
    ShortTermRefPicSet,
)

MAX_SHORT_TERM_REF_PICS = 64

_UINT32_MASK = 0xFFFFFFFF

_SUB_WIDTH_C = (1, 2, 2, 1)
_SUB_HEIGHT_C = (1, 2, 1, 1)


@dataclass
class SPS:
    """An H265 sequence parameter set (ITU-T Rec. H.265, 7.3.2.2.1)."""

    vps_id: int = 0
    max_sub_layers_minus1: int = 0
    temporal_id_nesting_flag: bool = False
    profile_tier_level: ProfileTierLevel = field(default_factory=ProfileTierLevel)
    id: int = 0
    chroma_format_idc: int = 0
    separate_colour_plane_flag: bool = False
    pic_width_in_luma_samples: int = 0
    pic_height_in_luma_samples: int = 0
    conformance_window: Optional[ConformanceWindow] = None
    bit_depth_luma_minus8: int = 0
    bit_depth_chroma_minus8: int = 0
    log2_max_pic_order_cnt_lsb_minus4: int = 0
    sub_layer_ordering_info_present_flag: bool = False
    max_dec_pic_buffering_minus1: list[int] = field(default_factory=list)
    max_num_reorder_pics: list[int] = field(default_factory=list)
    max_latency_increase_plus1: list[int] = field(default_factory=list)
    log2_min_luma_coding_block_size_minus3: int = 0
    log2_diff_max_min_luma_coding_block_size: int = 0
    log2_min_luma_transform_block_size_minus2: int = 0
    log2_diff_max_min_luma_transform_block_size: int = 0
    max_transform_hierarchy_depth_inter: int = 0
    max_transform_hierarchy_depth_intra: int = 0
    scaling_list_enabled_flag: bool = False
    scaling_list_data_present_flag: bool = False
    amp_enabled_flag: bool = False
    sample_adaptive_offset_enabled_flag: bool = False
    pcm_enabled_flag: bool = False

    pcm_sample_bit_depth_luma_minus1: int = 0
    pcm_sample_bit_depth_chroma_minus1: int = 0
    log2_min_pcm_luma_coding_block_size_minus3: int = 0
    log2_diff_max_min_pcm_luma_coding_block_size: int = 0
    pcm_loop_filter_disabled_flag: bool = False

    short_term_ref_pic_sets: list[ShortTermRefPicSet] = field(default_factory=list)
    long_term_ref_pics_present_flag: bool = False
    temporal_mvp_enabled_flag: bool = False
    strong_intra_smoothing_enabled_flag: bool = False
    vui: Optional[VUI] = None

    @classmethod
    def unmarshal(cls, buf: bytes) -> "SPS":
        """Decode a SPS NALU."""
        if len(buf) < 2:
            raise BitsError("not enough bits")
        if nalu_type_of(buf) != NALUType.SPS_NUT:
            raise ValueError("not a SPS")

        r = BitReader(emulation_prevention_remove(bytes(buf[1:])), 8)
        s = cls()

        r.has_space(8)
        s.vps_id = r.read_bits_unchecked(4)
        s.max_sub_layers_minus1 = r.read_bits_unchecked(3)
        s.temporal_id_nesting_flag = r.read_flag_unchecked()

        s.profile_tier_level = ProfileTierLevel.read(r, s.max_sub_layers_minus1)

        s.id = r.read_golomb_unsigned() & 0xFF
        s.chroma_format_idc = r.read_golomb_unsigned()
        if s.chroma_format_idc == 3:
            s.separate_colour_plane_flag = r.read_flag()

        s.pic_width_in_luma_samples = r.read_golomb_unsigned()
        s.pic_height_in_luma_samples = r.read_golomb_unsigned()

        if r.read_flag():  # conformance_window_flag
            s.conformance_window = ConformanceWindow.read(r)

        s.bit_depth_luma_minus8 = r.read_golomb_unsigned()
        s.bit_depth_chroma_minus8 = r.read_golomb_unsigned()
        s.log2_max_pic_order_cnt_lsb_minus4 = r.read_golomb_unsigned()

        s.sub_layer_ordering_info_present_flag = r.read_flag()
        start = 0 if s.sub_layer_ordering_info_present_flag else s.max_sub_layers_minus1
        count = s.max_sub_layers_minus1 + 1
        s.max_dec_pic_buffering_minus1 = [0] * count
        s.max_num_reorder_pics = [0] * count
        s.max_latency_increase_plus1 = [0] * count
        for i in range(start, count):
            s.max_dec_pic_buffering_minus1[i] = r.read_golomb_unsigned()
            s.max_num_reorder_pics[i] = r.read_golomb_unsigned()
            s.max_latency_increase_plus1[i] = r.read_golomb_unsigned()

        s.log2_min_luma_coding_block_size_minus3 = r.read_golomb_unsigned()
        s.log2_diff_max_min_luma_coding_block_size = r.read_golomb_unsigned()
        s.log2_min_luma_transform_block_size_minus2 = r.read_golomb_unsigned()
        s.log2_diff_max_min_luma_transform_block_size = r.read_golomb_unsigned()
        s.max_transform_hierarchy_depth_inter = r.read_golomb_unsigned()
        s.max_transform_hierarchy_depth_intra = r.read_golomb_unsigned()

        s.scaling_list_enabled_flag = r.read_flag()
        if s.scaling_list_enabled_flag:
            s.scaling_list_data_present_flag = r.read_flag()
            if s.scaling_list_data_present_flag:
                raise ValueError("ScalingListDataPresentFlag not supported yet")

        s.amp_enabled_flag = r.read_flag()
        s.sample_adaptive_offset_enabled_flag = r.read_flag()
        s.pcm_enabled_flag = r.read_flag()

        if s.pcm_enabled_flag:
            r.has_space(8)
            s.pcm_sample_bit_depth_luma_minus1 = r.read_bits_unchecked(4)
            s.pcm_sample_bit_depth_chroma_minus1 = r.read_bits_unchecked(4)
            s.log2_min_pcm_luma_coding_block_size_minus3 = r.read_golomb_unsigned()
            s.log2_diff_max_min_pcm_luma_coding_block_size = r.read_golomb_unsigned()
            s.pcm_loop_filter_disabled_flag = r.read_flag()

        num_sets = r.read_golomb_unsigned()
        if num_sets > 0:
            if num_sets > MAX_SHORT_TERM_REF_PICS:
                raise ValueError(
                    f"num_short_term_ref_pic_sets exceeds {MAX_SHORT_TERM_REF_PICS}"
                )
            sets: list[Optional[ShortTermRefPicSet]] = [None] * num_sets
            for i in range(num_sets):
                sets[i] = ShortTermRefPicSet.read(r, i, num_sets, sets)
            s.short_term_ref_pic_sets = [rps for rps in sets if rps is not None]

        s.long_term_ref_pics_present_flag = r.read_flag()
        if s.long_term_ref_pics_present_flag:
            if r.read_golomb_unsigned() > 0:
                raise ValueError(
                    "long term ref pics inside SPS are not supported yet"
                )

        s.temporal_mvp_enabled_flag = r.read_flag()
        s.strong_intra_smoothing_enabled_flag = r.read_flag()

        if r.read_flag():  # vui_parameters_present_flag
            s.vui = VUI.read(r)

        return s

    def _crop_unit(self, table: tuple[int, ...]) -> int:
        if not 0 <= self.chroma_format_idc < len(table):
            raise ValueError(f"invalid chroma_format_idc: {self.chroma_format_idc}")
        return table[self.chroma_format_idc]

    def width(self) -> int:
        """Return the video width."""
        width = self.pic_width_in_luma_samples
        if self.conformance_window is not None:
            window = self.conformance_window
            crop = window.left_offset + window.right_offset
            width -= crop * self._crop_unit(_SUB_WIDTH_C)
        return width & _UINT32_MASK

    def height(self) -> int:
        """Return the video height."""
        height = self.pic_height_in_luma_samples
        if self.conformance_window is not None:
            window = self.conformance_window
            crop = window.top_offset + window.bottom_offset
            height -= crop * self._crop_unit(_SUB_HEIGHT_C)
        return height & _UINT32_MASK

    def fps(self) -> float:
        """Return the frames per second, or 0 if timing info is missing."""
        if self.vui is None or self.vui.timing_info is None:
            return 0.0
        timing = self.vui.timing_info
        if timing.num_units_in_tick == 0:
            return math.inf if timing.time_scale > 0 else math.nan
        return float(timing.time_scale) / float(timing.num_units_in_tick)