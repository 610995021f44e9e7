"""Decoding timestamp extraction for H265 access units."""

from __future__ import annotations

import math
from typing import Optional

from mediacodecs.bits import BitReader
from mediacodecs.h264_nalu import emulation_prevention_remove
from mediacodecs.h265_nalu import NALUType, nalu_type_of
from mediacodecs.h265_pps import PPS
from mediacodecs.h265_sps import SPS
from mediacodecs.h265_vui import ShortTermRefPicSet

MAX_BYTES_TO_GET_POC = 12

_SECOND = 1_000_000_000
_UINT32_MASK = 0xFFFFFFFF

_IDR_TYPES = frozenset({NALUType.IDR_W_RADL, NALUType.IDR_N_LP})
_NON_IDR_TYPES = frozenset(
    {
        NALUType.TRAIL_N,
        NALUType.TRAIL_R,
        NALUType.CRA_NUT,
        NALUType.RASL_N,
        NALUType.RASL_R,
    }
)


def _to_int64(value: int) -> int:
    return ((value + (1 << 63)) & ((1 << 64) - 1)) - (1 << 63)


def _div_trunc(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


def _pts_dts_diff(nalu: bytes, sps: SPS, pps: PPS) -> int:
    typ = nalu_type_of(nalu)
    body = emulation_prevention_remove(bytes(nalu[1:1 + MAX_BYTES_TO_GET_POC]))
    r = BitReader(body, 8)

    if not r.read_flag():  # first_slice_segment_in_pic_flag
        raise ValueError("first_slice_segment_in_pic_flag = 0 is not supported")

    if NALUType.BLA_W_LP <= typ <= NALUType.RSV_IRAP_VCL23:
        r.read_flag()  # no_output_of_prior_pics_flag

    r.read_golomb_unsigned()  # slice_pic_parameter_set_id

    if pps.num_extra_slice_header_bits > 0:
        r.skip(pps.num_extra_slice_header_bits)

    slice_type = r.read_golomb_unsigned()

    if pps.output_flag_present_flag:
        r.read_flag()  # pic_output_flag

    if sps.separate_colour_plane_flag:
        r.read_bits(2)  # colour_plane_id

    r.read_bits(sps.log2_max_pic_order_cnt_lsb_minus4 + 4)  # pic_order_cnt_lsb

    sets = sps.short_term_ref_pic_sets
    rps: ShortTermRefPicSet
    if not r.read_flag():  # short_term_ref_pic_set_sps_flag
        rps = ShortTermRefPicSet.read(r, len(sets), len(sets), sets)
    else:
        if not sets:
            raise ValueError("invalid short_term_ref_pic_set_idx")
        idx = r.read_bits(math.ceil(math.log2(len(sets))))
        if idx >= len(sets):
            raise ValueError("invalid short_term_ref_pic_set_idx")
        rps = sets[idx]

    reorder = sps.max_num_reorder_pics[0]

    if slice_type == 0:  # B-frame
        if typ in (NALUType.TRAIL_N, NALUType.RASL_N):
            return (reorder - len(rps.delta_poc_s1_minus1)) & _UINT32_MASK
        if typ in (NALUType.TRAIL_R, NALUType.RASL_R):
            if not rps.delta_poc_s0_minus1:
                raise ValueError("invalid delta_poc_s0_minus1")
            return (rps.delta_poc_s0_minus1[0] + reorder - 1) & _UINT32_MASK
        return 0

    # I or P-frame
    if not rps.delta_poc_s0_minus1:
        raise ValueError("invalid delta_poc_s0_minus1")
    return (rps.delta_poc_s0_minus1[0] + reorder) & _UINT32_MASK


class DTSExtractor:
    """Derives decoding timestamps (in nanoseconds) from presentation timestamps."""

    def __init__(self) -> None:
        self._spsp: Optional[SPS] = None
        self._ppsp: Optional[PPS] = None
        self._prev_dts_filled = False
        self._prev_dts = 0

    def _extract_inner(self, au: list[bytes], pts: int) -> int:
        idr: Optional[bytes] = None
        non_idr: Optional[bytes] = None

        for nalu in au:
            typ = nalu_type_of(nalu)
            if typ == NALUType.SPS_NUT:
                try:
                    self._spsp = SPS.unmarshal(nalu)
                except ValueError as err:
                    raise ValueError(f"invalid SPS: {err}") from err
            elif typ == NALUType.PPS_NUT:
                try:
                    self._ppsp = PPS.unmarshal(nalu)
                except ValueError as err:
                    raise ValueError(f"invalid PPS: {err}") from err
            elif typ in _IDR_TYPES:
                idr = nalu
            elif typ in _NON_IDR_TYPES:
                non_idr = nalu

        sps = self._spsp
        if sps is None:
            raise ValueError("SPS not received yet")
        pps = self._ppsp
        if pps is None:
            raise ValueError("PPS not received yet")

        if len(sps.max_num_reorder_pics) != 1 or sps.max_num_reorder_pics[0] == 0:
            return pts

        if sps.vui is None or sps.vui.timing_info is None:
            return pts

        if idr is not None:
            samples_diff = sps.max_num_reorder_pics[0]
        elif non_idr is not None:
            samples_diff = _pts_dts_diff(non_idr, sps, pps)
        else:
            raise ValueError("access unit doesn't contain an IDR or non-IDR NALU")

        timing = sps.vui.timing_info
        if timing.time_scale == 0:
            raise ValueError("invalid time_scale: 0")

        product = _to_int64(_to_int64(samples_diff * _SECOND) * timing.num_units_in_tick)
        time_diff = _div_trunc(product, timing.time_scale)
        return _to_int64(pts - time_diff)

    def extract(self, au: list[bytes], pts: int) -> int:
        """Return the DTS of an access unit, given its PTS, both in nanoseconds."""
        dts = self._extract_inner(au, pts)

        if dts > pts:
            raise ValueError("DTS is greater than PTS")

        if self._prev_dts_filled and dts <= self._prev_dts:
            raise ValueError(
                f"DTS is not monotonically increasing, was {self._prev_dts}ns, "
                f"now is {dts}ns"
            )

        self._prev_dts_filled = True
        self._prev_dts = dts
        return dts