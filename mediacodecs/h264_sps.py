"""H264 sequence parameter set parsing."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

from mediacodecs.bits import BitReader, BitsError
from mediacodecs.h264_nalu import NALUType, emulation_prevention_remove
from mediacodecs.h264_vui import VUI, FrameCropping

MAX_REF_FRAMES = 255

_UINT32_MASK = 0xFFFFFFFF

_HIGH_PROFILES = frozenset(
    {100, 110, 122, 244, 44, 83, 86, 118, 128, 138, 139, 134, 135}
)


def _to_int32(value: int) -> int:
    return ((value + 0x80000000) & _UINT32_MASK) - 0x80000000


def _rem_trunc(a: int, b: int) -> int:
    r = abs(a) % b
    return -r if a < 0 else r


def _read_scaling_list(reader: BitReader, size: int) -> tuple[list[int], bool]:
    last_scale = 8
    next_scale = 8
    scaling_list: list[int] = []
    use_default = False

    for j in range(size):
        if next_scale != 0:
            delta_scale = reader.read_golomb_signed()
            next_scale = _rem_trunc(_to_int32(last_scale + delta_scale + 256), 256)
            use_default = j == 0 and next_scale == 0

        entry = last_scale if next_scale == 0 else next_scale
        scaling_list.append(entry)
        last_scale = entry

    return scaling_list, use_default


@dataclass
class SPS:
    """An H264 sequence parameter set (ITU-T Rec. H.264, 7.3.2.1.1)."""

    profile_idc: int = 0
    constraint_set0_flag: bool = False
    constraint_set1_flag: bool = False
    constraint_set2_flag: bool = False
    constraint_set3_flag: bool = False
    constraint_set4_flag: bool = False
    constraint_set5_flag: bool = False
    level_idc: int = 0
    id: int = 0

    chroma_format_idc: int = 0
    separate_colour_plane_flag: bool = False
    bit_depth_luma_minus8: int = 0
    bit_depth_chroma_minus8: int = 0
    qpprime_y_zero_transform_bypass_flag: bool = False

    scaling_list_4x4: list[list[int]] = field(default_factory=list)
    use_default_scaling_matrix_4x4_flag: list[bool] = field(default_factory=list)
    scaling_list_8x8: list[list[int]] = field(default_factory=list)
    use_default_scaling_matrix_8x8_flag: list[bool] = field(default_factory=list)

    log2_max_frame_num_minus4: int = 0
    pic_order_cnt_type: int = 0

    log2_max_pic_order_cnt_lsb_minus4: int = 0

    delta_pic_order_always_zero_flag: bool = False
    offset_for_non_ref_pic: int = 0
    offset_for_top_to_bottom_field: int = 0
    offset_for_ref_frames: Optional[list[int]] = None

    max_num_ref_frames: int = 0
    gaps_in_frame_num_value_allowed_flag: bool = False
    pic_width_in_mbs_minus1: int = 0
    pic_height_in_map_units_minus1: int = 0
    frame_mbs_only_flag: bool = False

    mb_adaptive_frame_field_flag: bool = False

    direct_8x8_inference_flag: bool = False
    frame_cropping: Optional[FrameCropping] = None
    vui: Optional[VUI] = None

    @classmethod
    def unmarshal(cls, buf: bytes) -> "SPS":
        """Decode a SPS NALU."""
        if len(buf) < 1:
            raise BitsError("not enough bits")
        if (buf[0] & 0x1F) != NALUType.SPS:
            raise ValueError("not a SPS")

        body = emulation_prevention_remove(bytes(buf[1:]))
        if len(body) < 3:
            raise BitsError("not enough bits")

        s = cls()
        s.profile_idc = body[0]
        flags = body[1]
        s.constraint_set0_flag = (flags >> 7) == 1
        s.constraint_set1_flag = ((flags >> 6) & 0x01) == 1
        s.constraint_set2_flag = ((flags >> 5) & 0x01) == 1
        s.constraint_set3_flag = ((flags >> 4) & 0x01) == 1
        s.constraint_set4_flag = ((flags >> 3) & 0x01) == 1
        s.constraint_set5_flag = ((flags >> 2) & 0x01) == 1
        s.level_idc = body[2]

        r = BitReader(body[3:])
        s.id = r.read_golomb_unsigned()

        if s.profile_idc in _HIGH_PROFILES:
            s._read_high_profile_fields(r)

        s.log2_max_frame_num_minus4 = r.read_golomb_unsigned()
        s.pic_order_cnt_type = r.read_golomb_unsigned()

        if s.pic_order_cnt_type == 0:
            s.log2_max_pic_order_cnt_lsb_minus4 = r.read_golomb_unsigned()
        elif s.pic_order_cnt_type == 1:
            s.delta_pic_order_always_zero_flag = r.read_flag()
            s.offset_for_non_ref_pic = r.read_golomb_signed()
            s.offset_for_top_to_bottom_field = r.read_golomb_signed()
            count = r.read_golomb_unsigned()
            if count > MAX_REF_FRAMES:
                raise ValueError(
                    f"num_ref_frames_in_pic_order_cnt_cycle exceeds {MAX_REF_FRAMES}"
                )
            s.offset_for_ref_frames = [r.read_golomb_signed() for _ in range(count)]
        elif s.pic_order_cnt_type != 2:
            raise ValueError(f"invalid pic_order_cnt_type: {s.pic_order_cnt_type}")

        s.max_num_ref_frames = r.read_golomb_unsigned()
        s.gaps_in_frame_num_value_allowed_flag = r.read_flag()
        s.pic_width_in_mbs_minus1 = r.read_golomb_unsigned()
        s.pic_height_in_map_units_minus1 = r.read_golomb_unsigned()
        s.frame_mbs_only_flag = r.read_flag()

        if not s.frame_mbs_only_flag:
            s.mb_adaptive_frame_field_flag = r.read_flag()

        s.direct_8x8_inference_flag = r.read_flag()

        if r.read_flag():
            s.frame_cropping = FrameCropping.read(r)

        if r.read_flag():
            s.vui = VUI.read(r)

        return s

    def _read_high_profile_fields(self, r: BitReader) -> None:
        self.chroma_format_idc = r.read_golomb_unsigned()
        if self.chroma_format_idc == 3:
            self.separate_colour_plane_flag = r.read_flag()

        self.bit_depth_luma_minus8 = r.read_golomb_unsigned()
        self.bit_depth_chroma_minus8 = r.read_golomb_unsigned()
        self.qpprime_y_zero_transform_bypass_flag = r.read_flag()

        if not r.read_flag():  # seq_scaling_matrix_present_flag
            return

        lim = 8 if self.chroma_format_idc != 3 else 12
        for i in range(lim):
            if not r.read_flag():  # seq_scaling_list_present_flag
                continue
            if i < 6:
                scaling_list, use_default = _read_scaling_list(r, 16)
                self.scaling_list_4x4.append(scaling_list)
                self.use_default_scaling_matrix_4x4_flag.append(use_default)
            else:
                scaling_list, use_default = _read_scaling_list(r, 64)
                self.scaling_list_8x8.append(scaling_list)
                self.use_default_scaling_matrix_8x8_flag.append(use_default)

    def _chroma_array_type(self) -> int:
        return 0 if self.separate_colour_plane_flag else self.chroma_format_idc

    def width(self) -> int:
        """Return the video width."""
        sub_width_c = 0
        if not self.separate_colour_plane_flag:
            if self.chroma_format_idc in (1, 2):
                sub_width_c = 2
            elif self.chroma_format_idc == 3:
                sub_width_c = 1

        crop_unit_x = 0 if self._chroma_array_type() == 0 else sub_width_c
        pic_width = (self.pic_width_in_mbs_minus1 + 1) * 16

        if self.frame_cropping is not None:
            crop = self.frame_cropping.left_offset + self.frame_cropping.right_offset
            return (pic_width - crop_unit_x * crop) & _UINT32_MASK
        return pic_width & _UINT32_MASK

    def height(self) -> int:
        """Return the video height."""
        sub_height_c = 0
        if not self.separate_colour_plane_flag:
            if self.chroma_format_idc == 1:
                sub_height_c = 2
            elif self.chroma_format_idc in (2, 3):
                sub_height_c = 1

        field_factor = 2 - (1 if self.frame_mbs_only_flag else 0)

        if self._chroma_array_type() == 0:
            crop_unit_y = field_factor
        else:
            crop_unit_y = sub_height_c * field_factor

        frame_height_in_mbs = field_factor * (self.pic_height_in_map_units_minus1 + 1)

        if self.frame_cropping is not None:
            crop = self.frame_cropping.top_offset + self.frame_cropping.bottom_offset
            return (16 * frame_height_in_mbs - crop_unit_y * crop) & _UINT32_MASK
        return (frame_height_in_mbs * 16) & _UINT32_MASK

    def fps(self) -> float:
        """Return the frames per second, or 0 if timing info is missing."""
        if self.vui is None or self.vui.timing_info is None:
            return 0.0
        timing = self.vui.timing_info
        denominator = 2 * float(timing.num_units_in_tick)
        if denominator == 0:
            return math.inf if timing.time_scale > 0 else math.nan
        return float(timing.time_scale) / denominator