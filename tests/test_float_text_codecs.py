import math
import struct

import pytest

from bitbuf.binary.buffer import BitBuf
from bitbuf.binary.codecs.floats import bits_to_f64, f32_to_bits, f64_to_bits
from bitbuf.binary.errors import InvalidEncodingError, OutOfBoundsError, ValueRangeError


# ---------------------------------------------------------------------------
# floats
# ---------------------------------------------------------------------------

def test_f64_bit_identical():
    buf = BitBuf(1400)
    buf.write_f64(3.0395831239485302)
    buf.reset()
    out = buf.read_f64()
    assert out == 3.0395831239485302
    assert f64_to_bits(out) == f64_to_bits(3.0395831239485302)


def test_f32_roundtrip_matches_single_precision():
    expected = struct.unpack("<f", struct.pack("<f", 3.0393124))[0]
    buf = BitBuf(8)
    buf.write_f32(3.0393124)
    buf.reset()
    assert buf.read_f32() == expected


def test_f32_wire_image():
    buf = BitBuf(4)
    buf.write_f32(1.0)
    assert buf.peek_bytes() == b"\x00\x00\x80\x3f"


def test_floats_at_unaligned_offset():
    buf = BitBuf(16)
    buf.write_u8_part(0b11, 2)
    buf.write_f64(-1234.5678)
    buf.write_f32(0.5)
    assert buf.bit_pos == 2 + 64 + 32
    buf.reset()
    assert buf.read_u8_part(2) == 0b11
    assert buf.read_f64() == -1234.5678
    assert buf.read_f32() == 0.5


def test_special_float_values_preserved():
    nan_bits = 0x7FF8000000000001
    buf = BitBuf(32)
    buf.write_f64(-0.0)
    buf.write_f64(math.inf)
    buf.write_f64(bits_to_f64(nan_bits))
    buf.write_f32(-math.inf)
    buf.reset()
    neg_zero = buf.read_f64()
    assert neg_zero == 0.0 and math.copysign(1.0, neg_zero) == -1.0
    assert buf.read_f64() == math.inf
    assert f64_to_bits(buf.read_f64()) == nan_bits
    assert buf.read_f32() == -math.inf


def test_f32_overflow_rejected():
    buf = BitBuf(4)
    with pytest.raises(ValueRangeError):
        buf.write_f32(1e39)
    assert buf.bit_pos == 0
    assert f32_to_bits(0.0) == 0


def test_float_past_capacity():
    buf = BitBuf(7)
    with pytest.raises(OutOfBoundsError):
        buf.write_f64(1.0)
    assert buf.peek_bytes() == b"\x00" * 7


# ---------------------------------------------------------------------------
# byte sequences and strings
# ---------------------------------------------------------------------------

def test_byte_sequence_roundtrip_unaligned():
    buf = BitBuf(8)
    buf.write_bool(True)
    buf.write_byte_sequence(b"\x00\x7f\x80\xff")
    buf.seek(1)
    assert buf.read_byte_sequence(4) == b"\x00\x7f\x80\xff"
    assert buf.read_byte_sequence(0) == b""


def test_byte_sequence_bounds():
    buf = BitBuf(2)
    with pytest.raises(OutOfBoundsError):
        buf.write_byte_sequence(b"abc")
    assert buf.bit_pos == 0
    with pytest.raises(OutOfBoundsError):
        buf.read_byte_sequence(3)
    with pytest.raises(ValueRangeError):
        buf.read_byte_sequence(-1)


def test_byte_sequence_rejects_non_bytes():
    buf = BitBuf(4)
    with pytest.raises(TypeError):
        buf.write_byte_sequence(2)
    assert buf.peek_bytes() == b"\x00" * 4


@pytest.mark.parametrize(
    "text",
    [
        "This is a test string. Nothing to see here. No, really!",
        "",
        "héllo wörld ✓ 日本語 🎉",
    ],
)
def test_string_roundtrip(text):
    buf = BitBuf(1400)
    buf.write_u8_part(5, 3)
    buf.write_string(text)
    end = buf.bit_pos
    buf.seek(3)
    assert buf.read_string() == text
    assert buf.bit_pos == end


def test_string_wire_format():
    buf = BitBuf(7)
    buf.write_string("abc")
    assert buf.peek_bytes() == b"\x03\x00\x00\x00abc"


def test_string_length_counts_utf8_bytes():
    buf = BitBuf(16)
    buf.write_string("é")
    buf.reset()
    assert buf.read_u32() == 2


def test_invalid_utf8_is_recoverable():
    buf = BitBuf(8)
    buf.write_u32(2)
    buf.write_byte_sequence(b"\xff\xfe")
    buf.reset()
    with pytest.raises(InvalidEncodingError):
        buf.read_string()
    assert buf.bit_pos == 0
    assert buf.read_u32() == 2
    assert buf.read_byte_sequence(2) == b"\xff\xfe"


def test_string_length_past_capacity_restores_cursor():
    buf = BitBuf(8)
    buf.write_u32(100)
    buf.reset()
    with pytest.raises(OutOfBoundsError):
        buf.read_string()
    assert buf.bit_pos == 0


def test_string_too_big_for_buffer_writes_nothing():
    buf = BitBuf(5)
    with pytest.raises(OutOfBoundsError):
        buf.write_string("hello")
    assert buf.bit_pos == 0
    assert buf.peek_bytes() == b"\x00" * 5
