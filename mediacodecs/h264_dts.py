"""Decoding timestamp extraction for H264 access units."""

from __future__ import annotations

from typing import Optional

from mediacodecs.bits import BitReader
from mediacodecs.h264_nalu import NALUType, emulation_prevention_remove
from mediacodecs.h264_sps import SPS

MAX_REORDERED_FRAMES = 10

# (3 * max_size(golomb) + 2 + 2) * 4 / 3
MAX_BYTES_TO_GET_POC = 22

_MILLISECOND = 1_000_000
_UINT32_MASK = 0xFFFFFFFF


def _to_int32(value: int) -> int:
    return ((value + 0x80000000) & _UINT32_MASK) - 0x80000000


def _div_trunc(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


def _poc_shift(sps: SPS) -> int:
    return sps.log2_max_pic_order_cnt_lsb_minus4 + 4


def _poc_mask(sps: SPS) -> int:
    shift = _poc_shift(sps)
    return (1 << shift) - 1 if shift < 32 else _UINT32_MASK


def _picture_order_count(nalu: bytes, sps: SPS) -> int:
    body = emulation_prevention_remove(bytes(nalu[1:1 + MAX_BYTES_TO_GET_POC]))
    r = BitReader(body)
    r.read_golomb_unsigned()  # first_mb_in_slice
    r.read_golomb_unsigned()  # slice_type
    r.read_golomb_unsigned()  # pic_parameter_set_id
    r.read_bits(sps.log2_max_frame_num_minus4 + 4)  # frame_num
    return r.read_bits(sps.log2_max_pic_order_cnt_lsb_minus4 + 4)


def _picture_order_count_diff(a: int, b: int, sps: SPS) -> int:
    d = (a - b) & _poc_mask(sps)
    shift = _poc_shift(sps)
    if shift >= 32:
        return _to_int32(d)
    max_poc = 1 << shift
    if d > max_poc // 2:
        return _to_int32(d) - max_poc
    return _to_int32(d)


class DTSExtractor:
    """Derives decoding timestamps (in nanoseconds) from presentation timestamps."""

    def __init__(self) -> None:
        self._sps: Optional[bytes] = None
        self._spsp: Optional[SPS] = None
        self._prev_dts_filled = False
        self._prev_dts = 0
        self._expected_poc = 0
        self._reordered_frames = 0
        self._pause_dts = 0
        self._poc_increment = 2

    def _extract_inner(self, au: list[bytes], pts: int) -> tuple[int, bool]:
        idr: Optional[bytes] = None
        non_idr: Optional[bytes] = None

        for nalu in au:
            typ = nalu[0] & 0x1F
            if typ == NALUType.SPS:
                nalu = bytes(nalu)
                if self._sps != nalu:
                    try:
                        spsp = SPS.unmarshal(nalu)
                    except ValueError as err:
                        raise ValueError(f"invalid SPS: {err}") from err
                    self._sps = nalu
                    self._spsp = spsp
                    self._reordered_frames = 0
                    self._poc_increment = 2
            elif typ == NALUType.IDR:
                idr = nalu
            elif typ == NALUType.NON_IDR:
                non_idr = nalu

        sps = self._spsp
        if sps is None:
            raise ValueError("SPS not received yet")

        if sps.pic_order_cnt_type == 2 or not sps.frame_mbs_only_flag:
            return pts, False

        if sps.pic_order_cnt_type == 1:
            raise ValueError("pic_order_cnt_type = 1 is not supported yet")

        if idr is not None:
            self._expected_poc = 0
            self._pause_dts = 0
            if not self._prev_dts_filled or self._reordered_frames == 0:
                return pts, False
            return (
                self._prev_dts
                + _div_trunc(pts - self._prev_dts, self._reordered_frames + 1),
                False,
            )

        if non_idr is None:
            raise ValueError("access unit doesn't contain an IDR or non-IDR NALU")

        self._expected_poc = (
            (self._expected_poc + self._poc_increment) & _UINT32_MASK & _poc_mask(sps)
        )

        if self._pause_dts > 0:
            self._pause_dts -= 1
            return self._prev_dts + _MILLISECOND, True

        poc = _picture_order_count(non_idr, sps)

        if self._poc_increment == 2 and poc % 2 != 0:
            self._poc_increment = 1
            self._expected_poc //= 2

        poc_diff = _div_trunc(
            _picture_order_count_diff(poc, self._expected_poc, sps), self._poc_increment
        )
        limit = -(self._reordered_frames + 1)

        # B-frames immediately following an IDR frame
        if poc_diff < limit:
            increase = limit - poc_diff
            if self._reordered_frames + increase > MAX_REORDERED_FRAMES:
                raise ValueError(
                    f"too many reordered frames ({self._reordered_frames + increase})"
                )
            self._reordered_frames += increase
            self._pause_dts = increase
            return self._prev_dts + _MILLISECOND, True

        if poc_diff == limit:
            return pts, False

        if poc_diff > self._reordered_frames:
            increase = poc_diff - self._reordered_frames
            if self._reordered_frames + increase > MAX_REORDERED_FRAMES:
                raise ValueError(
                    f"too many reordered frames ({self._reordered_frames + increase})"
                )
            self._reordered_frames += increase
            self._pause_dts = increase - 1
            return self._prev_dts + _MILLISECOND, False

        return (
            self._prev_dts
            + _div_trunc(pts - self._prev_dts, poc_diff + self._reordered_frames + 1),
            False,
        )

    def extract(self, au: list[bytes], pts: int) -> int:
        """Return the DTS of an access unit, given its PTS, both in nanoseconds."""
        dts, skip_checks = self._extract_inner(au, pts)

        if not skip_checks and dts > pts:
            raise ValueError("DTS is greater than PTS")

        if self._prev_dts_filled and dts <= self._prev_dts:
            raise ValueError(
                f"DTS is not monotonically increasing, was {self._prev_dts}ns, "
                f"now is {dts}ns"
            )

        self._prev_dts = dts
        self._prev_dts_filled = True
        return dts