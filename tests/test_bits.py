import pytest

from mediacodecs.bits import BitReader, BitsError, BitWriter


def test_read_bits():
    r = BitReader(bytes([0xA8, 0xC7, 0xD6, 0xAA, 0xBB, 0x10]), 0)
    assert r.read_bits(6) == 0x2A
    assert r.read_bits(6) == 0x0C
    assert r.read_bits(6) == 0x1F
    assert r.read_bits(8) == 0x5A
    assert r.read_bits(20) == 0xAAEC4
    assert r.pos == 46


def test_read_bits_error():
    r = BitReader(bytes([0xA8]), 0)
    assert r.read_bits(6) == 0x2A
    with pytest.raises(BitsError, match="not enough bits"):
        r.read_bits(6)


def test_read_golomb_unsigned():
    assert BitReader(bytes([0x38]), 0).read_golomb_unsigned() == 6


@pytest.mark.parametrize(
    "buf, message",
    [
        (bytes([0x00]), "not enough bits"),
        (bytes([0x00, 0x01]), "not enough bits"),
        (bytes([0x00, 0x00, 0x00, 0x00, 0x01]), "invalid value"),
    ],
)
def test_read_golomb_unsigned_errors(buf, message):
    with pytest.raises(BitsError, match=message):
        BitReader(buf, 0).read_golomb_unsigned()


def test_read_golomb_signed():
    assert BitReader(bytes([0x38]), 0).read_golomb_signed() == -3
    assert BitReader(bytes([0b00100100]), 0).read_golomb_signed() == 2


def test_read_golomb_signed_errors():
    with pytest.raises(BitsError, match="not enough bits"):
        BitReader(bytes([0x00]), 0).read_golomb_signed()


def test_read_flag():
    assert BitReader(bytes([0xFF]), 0).read_flag() is True
    assert BitReader(bytes([0x7F]), 0).read_flag() is False


def test_read_flag_error():
    with pytest.raises(BitsError, match="not enough bits"):
        BitReader(b"", 0).read_flag()


def test_skip_and_has_space():
    r = BitReader(bytes([0x0F]), 0)
    r.skip(4)
    assert r.read_bits(4) == 0x0F
    with pytest.raises(BitsError):
        r.has_space(1)
    with pytest.raises(BitsError):
        r.skip(1)


def test_write_bits():
    w = BitWriter(6)
    w.write_bits(0x2A, 6)
    w.write_bits(0x0C, 6)
    w.write_bits(0x1F, 6)
    w.write_bits(0x5A, 8)
    w.write_bits(0xAAEC4, 20)
    assert bytes(w.buf) == bytes([0xA8, 0xC7, 0xD6, 0xAA, 0xBB, 0x10])


def test_write_then_read_round_trip():
    fields = [(1, 1), (5, 3), (0x3FF, 10), (0, 2), (0x12345, 17)]
    w = BitWriter(5)
    for value, n in fields:
        w.write_bits(value, n)
    r = BitReader(bytes(w.buf))
    assert [r.read_bits(n) for _, n in fields] == [v for v, _ in fields]