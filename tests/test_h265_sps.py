import pytest

from mediacodecs.bits import BitsError
from mediacodecs.h265_sps import SPS
from mediacodecs.h265_vui import (
    VUI,
    ConformanceWindow,
    ProfileTierLevel,
    ShortTermRefPicSet,
    TimingInfo,
)


def _compat(*indices):
    return [i in indices for i in range(32)]


def _rps():
    return ShortTermRefPicSet(
        num_negative_pics=1,
        delta_poc_s0_minus1=[0],
        used_by_curr_pic_s0_flag=[True],
    )


SPS_1920X1080 = bytes.fromhex(
    "420101016000000300900000030000030078a003c08010e5"
    "96666924cae01000000300100000030 1e080".replace(" ", "")
)

CASES = [
    (
        "1920x1080",
        SPS_1920X1080,
        SPS(
            temporal_id_nesting_flag=True,
            profile_tier_level=ProfileTierLevel(
                general_profile_idc=1,
                general_profile_compatibility_flag=_compat(1, 2),
                general_progressive_source_flag=True,
                general_frame_only_constraint_flag=True,
                general_level_idc=120,
            ),
            chroma_format_idc=1,
            pic_width_in_luma_samples=1920,
            pic_height_in_luma_samples=1080,
            log2_max_pic_order_cnt_lsb_minus4=4,
            sub_layer_ordering_info_present_flag=True,
            max_dec_pic_buffering_minus1=[5],
            max_num_reorder_pics=[2],
            max_latency_increase_plus1=[5],
            log2_diff_max_min_luma_coding_block_size=3,
            log2_diff_max_min_luma_transform_block_size=3,
            sample_adaptive_offset_enabled_flag=True,
            temporal_mvp_enabled_flag=True,
            strong_intra_smoothing_enabled_flag=True,
            vui=VUI(timing_info=TimingInfo(num_units_in_tick=1, time_scale=30)),
        ),
        1920,
        1080,
        30,
    ),
    (
        "1920x800",
        bytes.fromhex(
            "420101016000000300900000030000030078a003c0803216"
            "5959a4932bc05a8080808200 0007d20000bb8010".replace(" ", "")
        ),
        SPS(
            temporal_id_nesting_flag=True,
            profile_tier_level=ProfileTierLevel(
                general_profile_idc=1,
                general_profile_compatibility_flag=_compat(1, 2),
                general_progressive_source_flag=True,
                general_frame_only_constraint_flag=True,
                general_level_idc=120,
            ),
            chroma_format_idc=1,
            pic_width_in_luma_samples=1920,
            pic_height_in_luma_samples=800,
            log2_max_pic_order_cnt_lsb_minus4=4,
            sub_layer_ordering_info_present_flag=True,
            max_dec_pic_buffering_minus1=[4],
            max_num_reorder_pics=[2],
            max_latency_increase_plus1=[5],
            log2_diff_max_min_luma_coding_block_size=3,
            log2_diff_max_min_luma_transform_block_size=3,
            sample_adaptive_offset_enabled_flag=True,
            temporal_mvp_enabled_flag=True,
            strong_intra_smoothing_enabled_flag=True,
            vui=VUI(
                aspect_ratio_info_present_flag=True,
                aspect_ratio_idc=1,
                video_signal_type_present_flag=True,
                video_format=5,
                colour_description_present_flag=True,
                colour_primaries=1,
                transfer_characteristics=1,
                matrix_coefficients=1,
                timing_info=TimingInfo(num_units_in_tick=1001, time_scale=24000),
            ),
        ),
        1920,
        800,
        23.976023976023978,
    ),
    (
        "1280x720",
        bytes.fromhex(
            "42010104080000030098080000030000 5d900050 1005a229"
            "4b7494985ffe00020002d404040410000003001000000301e080".replace(" ", "")
        ),
        SPS(
            temporal_id_nesting_flag=True,
            profile_tier_level=ProfileTierLevel(
                general_profile_idc=4,
                general_profile_compatibility_flag=_compat(4),
                general_progressive_source_flag=True,
                general_frame_only_constraint_flag=True,
                general_max_12bit_constraint_flag=True,
                general_lower_bit_rate_constraint_flag=True,
                general_level_idc=93,
            ),
            chroma_format_idc=3,
            pic_width_in_luma_samples=1280,
            pic_height_in_luma_samples=720,
            bit_depth_luma_minus8=4,
            bit_depth_chroma_minus8=4,
            log2_max_pic_order_cnt_lsb_minus4=4,
            sub_layer_ordering_info_present_flag=True,
            max_dec_pic_buffering_minus1=[2],
            max_num_reorder_pics=[0],
            max_latency_increase_plus1=[1],
            log2_min_luma_coding_block_size_minus3=1,
            log2_diff_max_min_luma_coding_block_size=1,
            log2_diff_max_min_luma_transform_block_size=3,
            temporal_mvp_enabled_flag=True,
            strong_intra_smoothing_enabled_flag=True,
            vui=VUI(
                aspect_ratio_info_present_flag=True,
                aspect_ratio_idc=255,
                sar_width=1,
                sar_height=1,
                video_signal_type_present_flag=True,
                video_format=5,
                colour_description_present_flag=True,
                colour_primaries=1,
                transfer_characteristics=1,
                matrix_coefficients=1,
                timing_info=TimingInfo(num_units_in_tick=1, time_scale=30),
            ),
        ),
        1280,
        720,
        30,
    ),
    (
        "10 bit",
        bytes.fromhex(
            "420101222000000300900000030000030078a003c08010e4"
            "d966669 24caf010100000300640000 0bb508".replace(" ", "")
        ),
        SPS(
            temporal_id_nesting_flag=True,
            profile_tier_level=ProfileTierLevel(
                general_tier_flag=1,
                general_profile_idc=2,
                general_profile_compatibility_flag=_compat(2),
                general_progressive_source_flag=True,
                general_frame_only_constraint_flag=True,
                general_level_idc=120,
            ),
            chroma_format_idc=1,
            pic_width_in_luma_samples=1920,
            pic_height_in_luma_samples=1080,
            bit_depth_luma_minus8=2,
            bit_depth_chroma_minus8=2,
            log2_max_pic_order_cnt_lsb_minus4=4,
            sub_layer_ordering_info_present_flag=True,
            max_dec_pic_buffering_minus1=[5],
            max_num_reorder_pics=[2],
            max_latency_increase_plus1=[5],
            log2_diff_max_min_luma_coding_block_size=3,
            log2_diff_max_min_luma_transform_block_size=3,
            sample_adaptive_offset_enabled_flag=True,
            temporal_mvp_enabled_flag=True,
            strong_intra_smoothing_enabled_flag=True,
            vui=VUI(
                aspect_ratio_info_present_flag=True,
                aspect_ratio_idc=1,
                timing_info=TimingInfo(num_units_in_tick=100, time_scale=2997),
            ),
        ),
        1920,
        1080,
        29.97,
    ),
    (
        "nvenc",
        bytes.fromhex(
            "4201010140000003000003000003000003007ba003c08011"
            "07cb96b4a42592e3016a02020208000003000800000301e3"
            "002ef2880007270c00009896 82".replace(" ", "")
        ),
        SPS(
            temporal_id_nesting_flag=True,
            profile_tier_level=ProfileTierLevel(
                general_profile_idc=1,
                general_profile_compatibility_flag=_compat(1),
                general_level_idc=123,
            ),
            chroma_format_idc=1,
            pic_width_in_luma_samples=1920,
            pic_height_in_luma_samples=1088,
            conformance_window=ConformanceWindow(bottom_offset=4),
            log2_max_pic_order_cnt_lsb_minus4=4,
            sub_layer_ordering_info_present_flag=True,
            max_dec_pic_buffering_minus1=[1],
            max_num_reorder_pics=[0],
            max_latency_increase_plus1=[0],
            log2_min_luma_coding_block_size_minus3=1,
            log2_diff_max_min_luma_coding_block_size=1,
            log2_diff_max_min_luma_transform_block_size=3,
            max_transform_hierarchy_depth_inter=3,
            amp_enabled_flag=True,
            sample_adaptive_offset_enabled_flag=True,
            short_term_ref_pic_sets=[_rps()],
            vui=VUI(
                aspect_ratio_info_present_flag=True,
                aspect_ratio_idc=1,
                video_signal_type_present_flag=True,
                video_format=5,
                colour_description_present_flag=True,
                colour_primaries=1,
                transfer_characteristics=1,
                matrix_coefficients=1,
                timing_info=TimingInfo(num_units_in_tick=1, time_scale=60),
            ),
        ),
        1920,
        1080,
        60,
    ),
    (
        "avigilon",
        bytes.fromhex(
            "420101016000000300800000030000030096a001802006c1"
            "fe36bbb5377725d602dc04040410 00003e8000042687 21de"
            "e510016e200066ff000b71000337f880".replace(" ", "")
        ),
        SPS(
            temporal_id_nesting_flag=True,
            profile_tier_level=ProfileTierLevel(
                general_profile_idc=1,
                general_profile_compatibility_flag=_compat(1, 2),
                general_progressive_source_flag=True,
                general_level_idc=150,
            ),
            chroma_format_idc=1,
            pic_width_in_luma_samples=3072,
            pic_height_in_luma_samples=1728,
            conformance_window=ConformanceWindow(),
            log2_max_pic_order_cnt_lsb_minus4=12,
            sub_layer_ordering_info_present_flag=True,
            max_dec_pic_buffering_minus1=[1],
            max_num_reorder_pics=[0],
            max_latency_increase_plus1=[0],
            log2_diff_max_min_luma_coding_block_size=2,
            sample_adaptive_offset_enabled_flag=True,
            pcm_enabled_flag=True,
            pcm_sample_bit_depth_luma_minus1=7,
            pcm_sample_bit_depth_chroma_minus1=7,
            log2_diff_max_min_luma_transform_block_size=2,
            max_transform_hierarchy_depth_inter=1,
            log2_min_pcm_luma_coding_block_size_minus3=2,
            short_term_ref_pic_sets=[_rps()],
            temporal_mvp_enabled_flag=True,
            vui=VUI(
                aspect_ratio_info_present_flag=True,
                aspect_ratio_idc=1,
                video_signal_type_present_flag=True,
                video_format=5,
                video_full_range_flag=True,
                colour_description_present_flag=True,
                colour_primaries=1,
                transfer_characteristics=1,
                matrix_coefficients=1,
                timing_info=TimingInfo(num_units_in_tick=1000, time_scale=17000),
            ),
        ),
        3072,
        1728,
        17,
    ),
    (
        "long_term_ref_pics_present_flag",
        bytes.fromhex(
            "4201010160000003 00b0000003000003005da0028080 2d16"
            "36b924cbf008000003000800000301 9508".replace(" ", "")
        ),
        SPS(
            temporal_id_nesting_flag=True,
            profile_tier_level=ProfileTierLevel(
                general_profile_idc=1,
                general_profile_compatibility_flag=_compat(1, 2),
                general_progressive_source_flag=True,
                general_non_packed_constraint_flag=True,
                general_frame_only_constraint_flag=True,
                general_level_idc=93,
            ),
            chroma_format_idc=1,
            pic_width_in_luma_samples=1280,
            pic_height_in_luma_samples=720,
            log2_max_pic_order_cnt_lsb_minus4=12,
            sub_layer_ordering_info_present_flag=True,
            max_dec_pic_buffering_minus1=[1],
            max_num_reorder_pics=[0],
            max_latency_increase_plus1=[0],
            log2_diff_max_min_luma_coding_block_size=3,
            log2_diff_max_min_luma_transform_block_size=3,
            sample_adaptive_offset_enabled_flag=True,
            long_term_ref_pics_present_flag=True,
            temporal_mvp_enabled_flag=True,
            strong_intra_smoothing_enabled_flag=True,
            vui=VUI(
                timing_info=TimingInfo(
                    num_units_in_tick=1,
                    time_scale=50,
                    poc_proportional_to_timing_flag=True,
                    num_ticks_poc_diff_one_minus1=1,
                ),
            ),
        ),
        1280,
        720,
        50,
    ),
]


@pytest.mark.parametrize(
    "byts,expected,width,height,fps",
    [case[1:] for case in CASES],
    ids=[case[0] for case in CASES],
)
def test_sps_unmarshal(byts, expected, width, height, fps):
    sps = SPS.unmarshal(byts)
    assert sps == expected
    assert sps.width() == width
    assert sps.height() == height
    assert sps.fps() == fps


def test_sps_empty_buffer():
    with pytest.raises(BitsError, match="not enough bits"):
        SPS.unmarshal(b"")


def test_sps_wrong_nalu_type():
    with pytest.raises(ValueError, match="not a SPS"):
        SPS.unmarshal(bytes([0x44, 0x01, 0xC1, 0x72]))


def test_sps_truncated():
    with pytest.raises(BitsError):
        SPS.unmarshal(SPS_1920X1080[:12])


def test_sps_fps_without_vui():
    assert SPS().fps() == 0.0


def test_sps_width_height_without_window():
    sps = SPS(pic_width_in_luma_samples=640, pic_height_in_luma_samples=480)
    assert (sps.width(), sps.height()) == (640, 480)