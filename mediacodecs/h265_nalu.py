"""H265 NALU types and helpers."""

from __future__ import annotations

from enum import IntEnum

# With a 50 Mbps 2160p60 H265 video, the maximum size does not seem to exceed 8 MiB.
MAX_ACCESS_UNIT_SIZE = 8 * 1024 * 1024
MAX_NALUS_PER_ACCESS_UNIT = 21


class NALUType(IntEnum):
    """H265 NALU type (ITU-T Rec. H.265, Table 7-1), plus RTP types."""

    TRAIL_N = 0
    TRAIL_R = 1
    TSA_N = 2
    TSA_R = 3
    STSA_N = 4
    STSA_R = 5
    RADL_N = 6
    RADL_R = 7
    RASL_N = 8
    RASL_R = 9
    RSV_VCL_N10 = 10
    RSV_VCL_R11 = 11
    RSV_VCL_N12 = 12
    RSV_VCL_R13 = 13
    RSV_VCL_N14 = 14
    RSV_VCL_R15 = 15
    BLA_W_LP = 16
    BLA_W_RADL = 17
    BLA_N_LP = 18
    IDR_W_RADL = 19
    IDR_N_LP = 20
    CRA_NUT = 21
    RSV_IRAP_VCL22 = 22
    RSV_IRAP_VCL23 = 23
    VPS_NUT = 32
    SPS_NUT = 33
    PPS_NUT = 34
    AUD_NUT = 35
    EOS_NUT = 36
    EOB_NUT = 37
    FD_NUT = 38
    PREFIX_SEI_NUT = 39
    SUFFIX_SEI_NUT = 40
    AGGREGATION_UNIT = 48
    FRAGMENTATION_UNIT = 49
    PACI = 50

    def __str__(self) -> str:
        return _LABELS[self]


_LABELS = {
    NALUType.TRAIL_N: "TRAIL_N",
    NALUType.TRAIL_R: "TRAIL_R",
    NALUType.TSA_N: "TSA_N",
    NALUType.TSA_R: "TSA_R",
    NALUType.STSA_N: "STSA_N",
    NALUType.STSA_R: "STSA_R:",
    NALUType.RADL_N: "RADL_N",
    NALUType.RADL_R: "RADL_R",
    NALUType.RASL_N: "RASL_N",
    NALUType.RASL_R: "RASL_R",
    NALUType.RSV_VCL_N10: "RSV_VCL_N10",
    NALUType.RSV_VCL_N12: "RSV_VCL_N12",
    NALUType.RSV_VCL_N14: "RSV_VCL_N14",
    NALUType.RSV_VCL_R11: "RSV_VCL_R11",
    NALUType.RSV_VCL_R13: "RSV_VCL_R13",
    NALUType.RSV_VCL_R15: "RSV_VCL_R15",
    NALUType.BLA_W_LP: "BLA_W_LP",
    NALUType.BLA_W_RADL: "BLA_W_RADL",
    NALUType.BLA_N_LP: "BLA_N_LP",
    NALUType.IDR_W_RADL: "IDR_W_RADL",
    NALUType.IDR_N_LP: "IDR_N_LP",
    NALUType.CRA_NUT: "CRA_NUT",
    NALUType.RSV_IRAP_VCL22: "RSV_IRAP_VCL22",
    NALUType.RSV_IRAP_VCL23: "RSV_IRAP_VCL23",
    NALUType.VPS_NUT: "VPS_NUT",
    NALUType.SPS_NUT: "SPS_NUT",
    NALUType.PPS_NUT: "PPS_NUT",
    NALUType.AUD_NUT: "AUD_NUT",
    NALUType.EOS_NUT: "EOS_NUT",
    NALUType.EOB_NUT: "EOB_NUT",
    NALUType.FD_NUT: "FD_NUT",
    NALUType.PREFIX_SEI_NUT: "PrefixSEINUT",
    NALUType.SUFFIX_SEI_NUT: "SuffixSEINUT",
    NALUType.AGGREGATION_UNIT: "AggregationUnit",
    NALUType.FRAGMENTATION_UNIT: "FragmentationUnit",
    NALUType.PACI: "PACI",
}

_RANDOM_ACCESS_TYPES = frozenset(
    {NALUType.IDR_W_RADL, NALUType.IDR_N_LP, NALUType.CRA_NUT}
)


def nalu_type_of(nalu: bytes) -> int:
    """Return the NALU type encoded in the first header byte."""
    return (nalu[0] >> 1) & 0b111111


def nalu_type_label(value: int) -> str:
    """Return the label of a NALU type value, or "unknown (N)"."""
    try:
        return _LABELS[NALUType(value)]
    except ValueError:
        return f"unknown ({value})"


def is_random_access(au: list[bytes]) -> bool:
    """Tell whether an access unit is a random access point."""
    return any(nalu_type_of(nalu) in _RANDOM_ACCESS_TYPES for nalu in au)