"""AV1 sequence header OBU parsing."""

from __future__ import annotations

from dataclasses import dataclass, field

from mediacodecs.av1_obu import OBUHeader, leb128_unmarshal
from mediacodecs.bits import BitReader

COLOR_PRIMARIES_CP_BT_709 = 1
COLOR_PRIMARIES_CP_UNSPECIFIED = 2

TRANSFER_CHARACTERISTICS_TC_UNSPECIFIED = 2
TRANSFER_CHARACTERISTICS_TC_SRGB = 13

MATRIX_COEFFICIENTS_MC_IDENTITY = 0
MATRIX_COEFFICIENTS_MC_UNSPECIFIED = 2

CHROMA_SAMPLE_POSITION_CSP_UNKNOWN = 0

SELECT_SCREEN_CONTENT_TOOLS = 2
SELECT_INTEGER_MV = 2


@dataclass
class ColorConfig:
    """Color configuration of a sequence header."""

    high_bit_depth: bool = False
    twelve_bit: bool = False
    bit_depth: int = 0
    mono_chrome: bool = False
    color_description_present_flag: bool = False
    color_primaries: int = 0
    transfer_characteristics: int = 0
    matrix_coefficients: int = 0
    color_range: bool = False
    subsampling_x: bool = False
    subsampling_y: bool = False
    chroma_sample_position: int = 0

    @classmethod
    def read(cls, seq_profile: int, reader: BitReader) -> "ColorConfig":
        """Read a color configuration for the given profile."""
        c = cls()
        c.high_bit_depth = reader.read_flag()

        if seq_profile == 2 and c.high_bit_depth:
            c.twelve_bit = reader.read_flag()
            c.bit_depth = 12 if c.twelve_bit else 10
        elif seq_profile <= 2:
            c.bit_depth = 10 if c.high_bit_depth else 8

        c.mono_chrome = False if seq_profile == 1 else reader.read_flag()

        c.color_description_present_flag = reader.read_flag()
        if c.color_description_present_flag:
            reader.has_space(24)
            c.color_primaries = reader.read_bits_unchecked(8)
            c.transfer_characteristics = reader.read_bits_unchecked(8)
            c.matrix_coefficients = reader.read_bits_unchecked(8)
        else:
            c.color_primaries = COLOR_PRIMARIES_CP_UNSPECIFIED
            c.transfer_characteristics = TRANSFER_CHARACTERISTICS_TC_UNSPECIFIED
            c.matrix_coefficients = MATRIX_COEFFICIENTS_MC_UNSPECIFIED

        if c.mono_chrome:
            c.color_range = reader.read_flag()
            c.subsampling_x = True
            c.subsampling_y = True
            c.chroma_sample_position = CHROMA_SAMPLE_POSITION_CSP_UNKNOWN
        elif (
            c.color_primaries == COLOR_PRIMARIES_CP_BT_709
            and c.transfer_characteristics == TRANSFER_CHARACTERISTICS_TC_SRGB
            and c.matrix_coefficients == MATRIX_COEFFICIENTS_MC_IDENTITY
        ):
            c.color_range = True
            c.subsampling_x = False
            c.subsampling_y = False
        else:
            c.color_range = reader.read_flag()
            if seq_profile == 0:
                c.subsampling_x = True
                c.subsampling_y = True
            elif seq_profile == 1:
                c.subsampling_x = False
                c.subsampling_y = False
            elif c.bit_depth == 12:
                c.subsampling_x = reader.read_flag()
                c.subsampling_y = reader.read_flag() if c.subsampling_x else False
            else:
                c.subsampling_x = True
                c.subsampling_y = False

            if c.subsampling_x and c.subsampling_y:
                c.chroma_sample_position = reader.read_bits(2)

        return c


@dataclass
class SequenceHeader:
    """An AV1 sequence header OBU."""

    seq_profile: int = 0
    still_picture: bool = False
    reduced_still_picture_header: bool = False
    timing_info_present_flag: bool = False
    decoder_model_info_present_flag: bool = False
    initial_display_delay_present_flag: bool = False
    operating_points_cnt_minus1: int = 0
    operating_point_idc: list[int] = field(default_factory=list)
    seq_level_idx: list[int] = field(default_factory=list)
    seq_tier: list[bool] = field(default_factory=list)
    decoder_model_present_for_this_op: list[bool] = field(default_factory=list)
    initial_display_present_for_this_op: list[bool] = field(default_factory=list)
    initial_display_delay_minus1: list[int] = field(default_factory=list)
    max_frame_width_minus1: int = 0
    max_frame_height_minus1: int = 0
    frame_id_numbers_present_flag: bool = False
    use_128x128_superblock: bool = False
    enable_filter_intra: bool = False
    enable_intra_edge_filter: bool = False
    enable_interintra_compound: bool = False
    enable_masked_compound: bool = False
    enable_warped_motion: bool = False
    enable_dual_filter: bool = False
    enable_order_hint: bool = False
    enable_jnt_comp: bool = False
    enable_ref_frame_mvs: bool = False
    seq_choose_screen_content_tools: bool = False
    seq_force_screen_content_tools: int = 0
    seq_choose_integer_mv: bool = False
    seq_force_integer_mv: int = 0
    order_hint_bits_minus1: int = 0
    enable_superres: bool = False
    enable_cdef: bool = False
    enable_restoration: bool = False
    color_config: ColorConfig = field(default_factory=ColorConfig)

    @classmethod
    def unmarshal(cls, buf: bytes) -> "SequenceHeader":
        """Decode a sequence header OBU."""
        obu_header = OBUHeader.unmarshal(buf)
        buf = bytes(buf[1:])

        if obu_header.has_size:
            size, size_n = leb128_unmarshal(buf)
            buf = buf[size_n:]
            if len(buf) != size:
                raise ValueError(
                    f"wrong buffer size: expected {size}, got {len(buf)}"
                )

        h = cls()
        r = BitReader(buf)

        r.has_space(5)
        h.seq_profile = r.read_bits_unchecked(3)
        h.still_picture = r.read_flag_unchecked()
        h.reduced_still_picture_header = r.read_flag_unchecked()

        if h.reduced_still_picture_header:
            h.operating_points_cnt_minus1 = 0
            h.operating_point_idc = [0]
            r.has_space(5)
            h.seq_level_idx = [r.read_bits_unchecked(5)]
            h.seq_tier = [False]
            h.decoder_model_present_for_this_op = [False]
            h.initial_display_present_for_this_op = [False]
        else:
            h._read_operating_points(r)

        r.has_space(8)
        width_bits = r.read_bits_unchecked(4) + 1
        height_bits = r.read_bits_unchecked(4) + 1
        r.has_space(width_bits + height_bits)
        h.max_frame_width_minus1 = r.read_bits_unchecked(width_bits)
        h.max_frame_height_minus1 = r.read_bits_unchecked(height_bits)

        if not h.reduced_still_picture_header:
            h.frame_id_numbers_present_flag = r.read_flag()
            if h.frame_id_numbers_present_flag:
                raise ValueError(
                    "frame_id_numbers_present_flag is not supported yet"
                )

        r.has_space(3)
        h.use_128x128_superblock = r.read_flag_unchecked()
        h.enable_filter_intra = r.read_flag_unchecked()
        h.enable_intra_edge_filter = r.read_flag_unchecked()

        if h.reduced_still_picture_header:
            h.seq_force_screen_content_tools = SELECT_SCREEN_CONTENT_TOOLS
            h.seq_force_integer_mv = SELECT_INTEGER_MV
        else:
            h._read_inter_tools(r)

        r.has_space(3)
        h.enable_superres = r.read_flag_unchecked()
        h.enable_cdef = r.read_flag_unchecked()
        h.enable_restoration = r.read_flag_unchecked()

        h.color_config = ColorConfig.read(h.seq_profile, r)
        return h

    def _read_operating_points(self, r: BitReader) -> None:
        self.timing_info_present_flag = r.read_flag()
        if self.timing_info_present_flag:
            raise ValueError("timing_info_present_flag is not supported yet")
        self.decoder_model_info_present_flag = False

        r.has_space(6)
        self.initial_display_delay_present_flag = r.read_flag_unchecked()
        self.operating_points_cnt_minus1 = r.read_bits_unchecked(5)

        count = self.operating_points_cnt_minus1 + 1
        self.operating_point_idc = [0] * count
        self.seq_level_idx = [0] * count
        self.seq_tier = [False] * count
        self.decoder_model_present_for_this_op = [False] * count
        self.initial_display_present_for_this_op = [False] * count
        self.initial_display_delay_minus1 = [0] * count

        for i in range(count):
            r.has_space(17)
            self.operating_point_idc[i] = r.read_bits_unchecked(12)
            self.seq_level_idx[i] = r.read_bits_unchecked(5)

            if self.seq_level_idx[i] > 7:
                self.seq_tier[i] = r.read_flag()

            if self.decoder_model_info_present_flag:
                raise ValueError(
                    "decoder_model_info_present_flag is not supported yet"
                )

            if self.initial_display_delay_present_flag:
                self.initial_display_present_for_this_op[i] = r.read_flag()
                if self.initial_display_present_for_this_op[i]:
                    self.initial_display_delay_minus1[i] = r.read_bits(4)
                raise ValueError(
                    "initial_display_delay_present_flag is not supported yet"
                )

    def _read_inter_tools(self, r: BitReader) -> None:
        r.has_space(5)
        self.enable_interintra_compound = r.read_flag_unchecked()
        self.enable_masked_compound = r.read_flag_unchecked()
        self.enable_warped_motion = r.read_flag_unchecked()
        self.enable_dual_filter = r.read_flag_unchecked()
        self.enable_order_hint = r.read_flag_unchecked()

        if self.enable_order_hint:
            r.has_space(2)
            self.enable_jnt_comp = r.read_flag_unchecked()
            self.enable_ref_frame_mvs = r.read_flag_unchecked()

        self.seq_choose_screen_content_tools = r.read_flag()
        if self.seq_choose_screen_content_tools:
            self.seq_force_screen_content_tools = SELECT_SCREEN_CONTENT_TOOLS
        else:
            self.seq_force_screen_content_tools = r.read_bits(1)

        if self.seq_force_screen_content_tools > 0:
            self.seq_choose_integer_mv = r.read_flag()
            if self.seq_choose_integer_mv:
                self.seq_force_integer_mv = SELECT_INTEGER_MV
            else:
                self.seq_force_integer_mv = r.read_bits(1)
        else:
            self.seq_force_integer_mv = SELECT_INTEGER_MV

        if self.enable_order_hint:
            self.order_hint_bits_minus1 = r.read_bits(3)

    def width(self) -> int:
        """Return the video width."""
        return self.max_frame_width_minus1 + 1

    def height(self) -> int:
        """Return the video height."""
        return self.max_frame_height_minus1 + 1