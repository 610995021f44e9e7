"""H264 NALU types and helpers."""

from __future__ import annotations

from enum import IntEnum

# With a 50 Mbps 2160p60 H264 video, the maximum size does not seem to exceed 8 MiB.
MAX_ACCESS_UNIT_SIZE = 8 * 1024 * 1024
MAX_NALUS_PER_ACCESS_UNIT = 21


class NALUType(IntEnum):
    """H264 NALU type (ITU-T Rec. H.264, Table 7-1), plus RTP types."""

    NON_IDR = 1
    DATA_PARTITION_A = 2
    DATA_PARTITION_B = 3
    DATA_PARTITION_C = 4
    IDR = 5
    SEI = 6
    SPS = 7
    PPS = 8
    ACCESS_UNIT_DELIMITER = 9
    END_OF_SEQUENCE = 10
    END_OF_STREAM = 11
    FILLER_DATA = 12
    SPS_EXTENSION = 13
    PREFIX = 14
    SUBSET_SPS = 15
    RESERVED16 = 16
    RESERVED17 = 17
    RESERVED18 = 18
    SLICE_LAYER_WITHOUT_PARTITIONING = 19
    SLICE_EXTENSION = 20
    SLICE_EXTENSION_DEPTH = 21
    RESERVED22 = 22
    RESERVED23 = 23
    STAP_A = 24
    STAP_B = 25
    MTAP16 = 26
    MTAP24 = 27
    FU_A = 28
    FU_B = 29

    def __str__(self) -> str:
        return _LABELS[self]


_LABELS = {
    NALUType.NON_IDR: "NonIDR",
    NALUType.DATA_PARTITION_A: "DataPartitionA",
    NALUType.DATA_PARTITION_B: "DataPartitionB",
    NALUType.DATA_PARTITION_C: "DataPartitionC",
    NALUType.IDR: "IDR",
    NALUType.SEI: "SEI",
    NALUType.SPS: "SPS",
    NALUType.PPS: "PPS",
    NALUType.ACCESS_UNIT_DELIMITER: "AccessUnitDelimiter",
    NALUType.END_OF_SEQUENCE: "EndOfSequence",
    NALUType.END_OF_STREAM: "EndOfStream",
    NALUType.FILLER_DATA: "FillerData",
    NALUType.SPS_EXTENSION: "SPSExtension",
    NALUType.PREFIX: "Prefix",
    NALUType.SUBSET_SPS: "SubsetSPS",
    NALUType.RESERVED16: "Reserved16",
    NALUType.RESERVED17: "Reserved17",
    NALUType.RESERVED18: "Reserved18",
    NALUType.SLICE_LAYER_WITHOUT_PARTITIONING: "SliceLayerWithoutPartitioning",
    NALUType.SLICE_EXTENSION: "SliceExtension",
    NALUType.SLICE_EXTENSION_DEPTH: "SliceExtensionDepth",
    NALUType.RESERVED22: "Reserved22",
    NALUType.RESERVED23: "Reserved23",
    NALUType.STAP_A: "STAP-A",
    NALUType.STAP_B: "STAP-B",
    NALUType.MTAP16: "MTAP-16",
    NALUType.MTAP24: "MTAP-24",
    NALUType.FU_A: "FU-A",
    NALUType.FU_B: "FU-B",
}


def nalu_type_label(value: int) -> str:
    """Return the label of a NALU type value, or "unknown (N)"."""
    try:
        return _LABELS[NALUType(value)]
    except ValueError:
        return f"unknown ({value})"


def emulation_prevention_remove(nalu: bytes) -> bytes:
    """Remove emulation prevention bytes (0x00 0x00 0x03 -> 0x00 0x00)."""
    return bytes(
        b
        for i, b in enumerate(nalu)
        if not (i >= 2 and b == 3 and nalu[i - 1] == 0 and nalu[i - 2] == 0)
    )


def idr_present(au: list[bytes]) -> bool:
    """Tell whether an access unit contains an IDR NALU."""
    return any((nalu[0] & 0x1F) == NALUType.IDR for nalu in au)