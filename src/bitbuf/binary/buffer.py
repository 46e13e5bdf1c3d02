from __future__ import annotations

from .codecs.bitcursor import BitCursor
from .codecs import floats, ints, text


class BitBuf(BitCursor):
    """
    Bit-packed serialization buffer with a fixed capacity.

    Every ``write_*`` has a matching ``read_*``; a reader must replay the exact
    sequence of typed calls (and bit widths) the writer used. ``*_part``
    variants move only the low ``bits`` bits of the value.

        buf = BitBuf(64)
        buf.write_u16_part(448, 13)
        buf.write_bool(True)
        buf.reset()
        assert buf.read_u16_part(13) == 448
    """
    __slots__ = ()

    def write_bool(self, value: bool) -> None: ints.write_bool(self, value)
    def read_bool(self) -> bool: return ints.read_bool(self)

    # unsigned
    def write_u8(self, value: int) -> None: ints.write_unsigned(self, value, 8, 8)
    def read_u8(self) -> int: return ints.read_unsigned(self, 8, 8)
    def write_u8_part(self, value: int, bits: int) -> None: ints.write_unsigned(self, value, bits, 8)
    def read_u8_part(self, bits: int) -> int: return ints.read_unsigned(self, bits, 8)

    def write_u16(self, value: int) -> None: ints.write_unsigned(self, value, 16, 16)
    def read_u16(self) -> int: return ints.read_unsigned(self, 16, 16)
    def write_u16_part(self, value: int, bits: int) -> None: ints.write_unsigned(self, value, bits, 16)
    def read_u16_part(self, bits: int) -> int: return ints.read_unsigned(self, bits, 16)

    def write_u32(self, value: int) -> None: ints.write_unsigned(self, value, 32, 32)
    def read_u32(self) -> int: return ints.read_unsigned(self, 32, 32)
    def write_u32_part(self, value: int, bits: int) -> None: ints.write_unsigned(self, value, bits, 32)
    def read_u32_part(self, bits: int) -> int: return ints.read_unsigned(self, bits, 32)

    def write_u64(self, value: int) -> None: ints.write_unsigned(self, value, 64, 64)
    def read_u64(self) -> int: return ints.read_unsigned(self, 64, 64)
    def write_u64_part(self, value: int, bits: int) -> None: ints.write_unsigned(self, value, bits, 64)
    def read_u64_part(self, bits: int) -> int: return ints.read_unsigned(self, bits, 64)

    # signed (part reads sign-extend from the top written bit)
    def write_i8(self, value: int) -> None: ints.write_signed(self, value, 8, 8)
    def read_i8(self) -> int: return ints.read_signed(self, 8, 8)
    def write_i8_part(self, value: int, bits: int) -> None: ints.write_signed(self, value, bits, 8)
    def read_i8_part(self, bits: int) -> int: return ints.read_signed(self, bits, 8)

    def write_i16(self, value: int) -> None: ints.write_signed(self, value, 16, 16)
    def read_i16(self) -> int: return ints.read_signed(self, 16, 16)
    def write_i16_part(self, value: int, bits: int) -> None: ints.write_signed(self, value, bits, 16)
    def read_i16_part(self, bits: int) -> int: return ints.read_signed(self, bits, 16)

    def write_i32(self, value: int) -> None: ints.write_signed(self, value, 32, 32)
    def read_i32(self) -> int: return ints.read_signed(self, 32, 32)
    def write_i32_part(self, value: int, bits: int) -> None: ints.write_signed(self, value, bits, 32)
    def read_i32_part(self, bits: int) -> int: return ints.read_signed(self, bits, 32)

    def write_i64(self, value: int) -> None: ints.write_signed(self, value, 64, 64)
    def read_i64(self) -> int: return ints.read_signed(self, 64, 64)
    def write_i64_part(self, value: int, bits: int) -> None: ints.write_signed(self, value, bits, 64)
    def read_i64_part(self, bits: int) -> int: return ints.read_signed(self, bits, 64)

    # floats, full width only
    def write_f32(self, value: float) -> None: floats.write_f32(self, value)
    def read_f32(self) -> float: return floats.read_f32(self)
    def write_f64(self, value: float) -> None: floats.write_f64(self, value)
    def read_f64(self) -> float: return floats.read_f64(self)

    # raw bytes / text
    def write_byte_sequence(self, data: bytes) -> None: text.write_byte_sequence(self, data)
    def read_byte_sequence(self, length: int) -> bytes: return text.read_byte_sequence(self, length)
    def write_string(self, value: str) -> None: text.write_string(self, value)
    def read_string(self) -> str: return text.read_string(self)

    def __repr__(self) -> str:
        state = "consumed" if self.consumed else f"bit {self.bit_pos}/{self.bit_size}"
        return f"BitBuf({self.byte_size} bytes, {state})"
