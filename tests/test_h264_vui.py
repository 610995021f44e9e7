import pytest

from mediacodecs.bits import BitReader, BitsError
from mediacodecs.h264_vui import (
    HRD,
    VUI,
    BitstreamRestriction,
    FrameCropping,
    TimingInfo,
)


def _u(value, n):
    return format(value, f"0{n}b") if n else ""


def _ue(value):
    code = value + 1
    return "0" * (code.bit_length() - 1) + format(code, "b")


def _reader(*fields):
    bits = "".join(fields)
    padded = bits + "0" * (-len(bits) % 8)
    data = int(padded, 2).to_bytes(len(padded) // 8, "big") if padded else b""
    return BitReader(data), len(bits)


def test_timing_info_read():
    reader, nbits = _reader(_u(1, 32), _u(30, 32), "1")
    info = TimingInfo.read(reader)
    assert info == TimingInfo(num_units_in_tick=1, time_scale=30, fixed_frame_rate_flag=True)
    assert reader.pos == nbits


def test_timing_info_not_enough_bits():
    reader, _ = _reader(_u(1, 32), _u(30, 24))
    with pytest.raises(BitsError, match="not enough bits"):
        TimingInfo.read(reader)


def test_frame_cropping_read():
    reader, nbits = _reader(_ue(0), _ue(0), _ue(0), _ue(4))
    assert FrameCropping.read(reader) == FrameCropping(bottom_offset=4)
    assert reader.pos == nbits


def test_frame_cropping_truncated():
    reader = BitReader(b"\x00")
    with pytest.raises(BitsError):
        FrameCropping.read(reader)


def test_hrd_read():
    reader, nbits = _reader(
        _ue(0), _u(4, 4), _u(3, 4),
        _ue(11948), _ue(95585), "0",
        _u(23, 5), _u(15, 5), _u(5, 5), _u(24, 5),
    )
    hrd = HRD.read(reader)
    assert hrd == HRD(
        bit_rate_scale=4,
        cpb_size_scale=3,
        bit_rate_value_minus1=[11948],
        cpb_size_value_minus1=[95585],
        cbr_flag=[False],
        initial_cpb_removal_delay_length_minus1=23,
        cpb_removal_delay_length_minus1=15,
        dpb_output_delay_length_minus1=5,
        time_offset_length=24,
    )
    assert reader.pos == nbits


def test_hrd_multiple_cpbs():
    reader, _ = _reader(
        _ue(1), _u(0, 4), _u(0, 4),
        _ue(7), _ue(8), "1",
        _ue(9), _ue(10), "0",
        _u(0, 5), _u(0, 5), _u(0, 5), _u(0, 5),
    )
    hrd = HRD.read(reader)
    assert hrd.cpb_cnt_minus1 == 1
    assert hrd.bit_rate_value_minus1 == [7, 9]
    assert hrd.cpb_size_value_minus1 == [8, 10]
    assert hrd.cbr_flag == [True, False]


def test_hrd_truncated_tail():
    reader, _ = _reader(_ue(0), _u(0, 8), _ue(1), _ue(1), "0", _u(0, 10))
    with pytest.raises(BitsError, match="not enough bits"):
        HRD.read(reader)


def test_bitstream_restriction_read():
    reader, nbits = _reader("1", _ue(0), _ue(0), _ue(11), _ue(11), _ue(2), _ue(4))
    assert BitstreamRestriction.read(reader) == BitstreamRestriction(
        motion_vectors_over_pic_boundaries_flag=True,
        log2_max_mv_length_horizontal=11,
        log2_max_mv_length_vertical=11,
        max_num_reorder_frames=2,
        max_dec_frame_buffering=4,
    )
    assert reader.pos == nbits


def test_vui_all_absent():
    reader, nbits = _reader("0" * 9)
    assert VUI.read(reader) == VUI()
    assert reader.pos == nbits


def test_vui_full():
    reader, nbits = _reader(
        "1", _u(255, 8), _u(4, 16), _u(3, 16),       # aspect ratio, extended SAR
        "1", "1",                                     # overscan
        "1", _u(5, 3), "1", "1", _u(1, 8), _u(1, 8), _u(1, 8),  # video signal
        "1", _ue(2), _ue(3),                          # chroma loc
        "1", _u(1, 32), _u(50, 32), "1",              # timing info
        "1", _ue(0), _u(4, 4), _u(10, 4), _ue(3416), _ue(213), "0",
        _u(20, 5), _u(5, 5), _u(1, 5), _u(0, 5),      # nal hrd
        "0",                                          # vcl hrd
        "1",                                          # low delay
        "1",                                          # pic struct
        "1", "1", _ue(2), _ue(0), _ue(10), _ue(9), _ue(1), _ue(4),
    )
    vui = VUI.read(reader)
    assert reader.pos == nbits
    assert vui.aspect_ratio_idc == 255
    assert (vui.sar_width, vui.sar_height) == (4, 3)
    assert vui.overscan_appropriate_flag is True
    assert vui.video_format == 5
    assert vui.video_full_range_flag is True
    assert (vui.colour_primaries, vui.transfer_characteristics, vui.matrix_coefficients) == (1, 1, 1)
    assert (vui.chroma_sample_loc_type_top_field, vui.chroma_sample_loc_type_bottom_field) == (2, 3)
    assert vui.timing_info == TimingInfo(num_units_in_tick=1, time_scale=50, fixed_frame_rate_flag=True)
    assert vui.nal_hrd.bit_rate_value_minus1 == [3416]
    assert vui.nal_hrd.cpb_size_value_minus1 == [213]
    assert vui.vcl_hrd is None
    assert vui.low_delay_hrd_flag is True
    assert vui.pic_struct_present_flag is True
    assert vui.bitstream_restriction.max_bytes_per_pic_denom == 2
    assert vui.bitstream_restriction.max_dec_frame_buffering == 4


def test_vui_sar_only_for_extended():
    reader, nbits = _reader("1", _u(1, 8), "0" * 8)
    vui = VUI.read(reader)
    assert vui.aspect_ratio_idc == 1
    assert (vui.sar_width, vui.sar_height) == (0, 0)
    assert reader.pos == nbits


def test_vui_truncated():
    reader, _ = _reader("1", _u(255, 8), _u(1, 16))
    with pytest.raises(BitsError, match="not enough bits"):
        VUI.read(reader)


def test_vui_empty_buffer():
    with pytest.raises(BitsError):
        VUI.read(BitReader(b""))