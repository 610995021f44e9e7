# mediacodecs

Pure-Python parsers and helpers for AC-3, AV1, H.264 and H.265 bitstreams.
No runtime dependencies beyond the standard library.

## Modules

- `mediacodecs.bits`: `BitReader` (big-endian bit fields, flags and Exp-Golomb
  codes, with a `pos` bit position) and `BitWriter` (writes bit fields into a
  zeroed `bytearray` of fixed size). Short reads raise `BitsError`, a subclass
  of `ValueError`.
- `mediacodecs.ac3`: `SyncInfo` (`frame_size()`, `sample_rate()`) and `BSI`
  (`channel_count()`), plus `SAMPLES_PER_FRAME`.
- `mediacodecs.av1_obu`: `OBUHeader`, `leb128_unmarshal`, `leb128_marshal`,
  `leb128_marshal_size`, `bitstream_unmarshal`, `bitstream_marshal` and
  `contains_key_frame`.
- `mediacodecs.av1_sequence_header`: `SequenceHeader` (`width()`, `height()`)
  and its `ColorConfig`.
- `mediacodecs.h264_nalu`: the `NALUType` enum, `nalu_type_label`,
  `emulation_prevention_remove` and `idr_present`.
- `mediacodecs.h264_stream`: Annex-B and AVCC framing (`annexb_unmarshal`,
  `annexb_marshal`, `avcc_unmarshal`, `avcc_marshal`). An AVCC unit holding no
  NALU raises `AVCCNoNALUsError`.
- `mediacodecs.h264_vui`, `mediacodecs.h264_sps`: `SPS` (`width()`, `height()`,
  `fps()`) with its `VUI`, `HRD`, `TimingInfo`, `BitstreamRestriction` and
  `FrameCropping`.
- `mediacodecs.h264_dts`: `DTSExtractor` for H.264.
- `mediacodecs.h265_nalu`: the `NALUType` enum, `nalu_type_of`,
  `nalu_type_label` and `is_random_access`.
- `mediacodecs.h265_pps`: `PPS`.
- `mediacodecs.h265_vui`, `mediacodecs.h265_sps`: `SPS` (`width()`, `height()`,
  `fps()`) with its `VUI`, `ProfileTierLevel`, `ConformanceWindow`,
  `DefaultDisplayWindow`, `TimingInfo` and `ShortTermRefPicSet`.
- `mediacodecs.h265_dts`: `DTSExtractor` for H.265.

Parsing errors are raised as `ValueError` (or its subclasses).

## Installation

```
pip install .
```

## Examples

Split an Annex-B access unit and reframe it as AVCC:

```python
from mediacodecs.h264_stream import annexb_unmarshal, avcc_marshal

au = annexb_unmarshal(b"\x00\x00\x01\xaa\xbb\x00\x00\x01\xcc\xdd")
# [b"\xaa\xbb", b"\xcc\xdd"]
avcc = avcc_marshal(au)
# b"\x00\x00\x00\x02\xaa\xbb\x00\x00\x00\x02\xcc\xdd"
```

Read bits and Exp-Golomb codes:

```python
from mediacodecs.bits import BitReader

reader = BitReader(b"\x38")
reader.read_golomb_unsigned()  # 6
```

Read the picture size from an H.264 SPS NALU:

```python
from mediacodecs.h264_sps import SPS

sps = SPS.unmarshal(sps_bytes)
print(sps.width(), sps.height(), sps.fps())
```

Derive decoding timestamps from presentation timestamps. Both are integers in
nanoseconds; the extractor keeps state between access units and raises
`ValueError` if the DTS would exceed the PTS or stop increasing:

```python
from mediacodecs.h264_dts import DTSExtractor

extractor = DTSExtractor()
for au, pts in access_units:
    dts = extractor.extract(au, pts)
```

Decode an AV1 temporal unit in the low-overhead bitstream format, dropping the
OBU size fields:

```python
from mediacodecs.av1_obu import bitstream_unmarshal, contains_key_frame

tu = bitstream_unmarshal(data, True)
if contains_key_frame(tu):
    ...
```

## What it does not do

This is a library only: it has no command-line tool. It parses headers and
frames access units; it does not decode pictures or audio, and it does not read
or write container formats such as MP4 or MPEG-TS. Some syntax is rejected with
a "not supported yet" error: AV1 sequence headers with timing info, initial
display delay or frame ID numbers; H.264 DTS extraction with
`pic_order_cnt_type = 1`; H.265 SPSs with scaling list data, long-term
reference pictures or sub-layer profile/level info; and H.265 slices whose
`first_slice_segment_in_pic_flag` is 0.

## Running the tests

```
pip install .[test]
pytest
```