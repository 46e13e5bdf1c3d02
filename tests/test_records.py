from __future__ import annotations

from typing import Annotated

import pytest
from pydantic import Field, ValidationError

from bitbuf.binary.buffer import BitBuf
from bitbuf.binary.errors import OutOfBoundsError, RecordError, ValueRangeError
from bitbuf.models.record import BitRecord, BitSerializable, Wire


class Person(BitRecord):
    first_name: Annotated[str, Wire("string")]
    last_name: Annotated[str, Wire("string")]
    age: Annotated[int, Wire("i8")]
    alive: Annotated[bool, Wire("bool")]
    weight: Annotated[int, Wire("i16")]


class Position(BitRecord):
    x: Annotated[int, Wire("i32", bits=20)]
    y: Annotated[int, Wire("i32", bits=20)]


class Track(BitRecord):
    track_id: Annotated[int, Wire("u16", bits=13)]
    pos: Position
    heading: Annotated[float, Wire("f32")]


class Level(BitRecord):
    level: Annotated[int, Wire("u8", bits=4), Field(le=10)]


class Tagged(BitRecord):
    name: Annotated[str, Wire("string")]
    age: Annotated[int, Wire("u8", bits=7)]


class Flags:
    """Hand-written implementation of the capability pair."""

    def __init__(self, a: bool, b: int):
        self.a, self.b = a, b

    def write_to_bitbuf(self, buf: BitBuf) -> None:
        buf.write_bool(self.a)
        buf.write_u8_part(self.b, 5)

    @classmethod
    def from_bitbuf(cls, buf: BitBuf) -> "Flags":
        return cls(buf.read_bool(), buf.read_u8_part(5))


JOHN = dict(first_name="John", last_name="Johnson", age=47, alive=True, weight=203)


def test_person_bit_length_and_roundtrip():
    p = Person(**JOHN)
    # 2 prefixes + 11 chars + i8 + bool + i16
    assert p.bit_length() == 64 + 88 + 8 + 1 + 16
    data = p.to_bits()
    assert len(data) == 23
    assert Person.from_bits(data) == p


def test_many_records_in_one_fixed_buffer():
    p = Person(**JOHN)
    buf = BitBuf(1400)
    for _ in range(63):
        p.write_to_bitbuf(buf)
    assert not buf.can_write_bits(p.bit_length())
    buf.reset()
    assert all(Person.from_bitbuf(buf) == p for _ in range(63))


def test_record_too_big_for_buffer_leaves_it_untouched():
    buf = BitBuf(4)
    with pytest.raises(OutOfBoundsError):
        Person(**JOHN).write_to_bitbuf(buf)
    assert buf.bit_pos == 0
    assert buf.peek_bytes() == b"\x00" * 4


def test_out_of_range_value_rolls_back_record():
    t = Tagged(name="John", age=300)
    buf = BitBuf.from_bytes(b"\x5a" * 16)
    buf.seek(2)
    with pytest.raises(ValueRangeError):
        t.write_to_bitbuf(buf)
    assert buf.bit_pos == 2
    assert buf.peek_bytes() == b"\x5a" * 16


def test_nested_record_roundtrip():
    t = Track(track_id=4567, pos=Position(x=-300000, y=524287), heading=90.0)
    assert t.bit_length() == 13 + 40 + 32
    data = t.to_bits()
    assert len(data) == 11
    assert Track.from_bits(data) == t


def test_nested_layout_is_flattened():
    layout = Track.layout()
    assert layout.name == "Track"
    assert [(f.name, off) for f, off in layout.offsets()] == [
        ("track_id", 0),
        ("pos.x", 13),
        ("pos.y", 33),
        ("heading", 53),
    ]
    assert layout.fixed_bits() == 85


def test_decode_runs_pydantic_validation():
    buf = BitBuf(1)
    buf.write_u8_part(15, 4)
    buf.reset()
    with pytest.raises(ValidationError):
        Level.from_bitbuf(buf)


def test_field_without_wire_annotation():
    class Bare(BitRecord):
        x: int

    with pytest.raises(RecordError):
        Bare.layout()
    with pytest.raises(RecordError):
        Bare(x=1).to_bits()


def test_capability_protocol():
    assert isinstance(Person(**JOHN), BitSerializable)
    assert isinstance(Flags(True, 3), BitSerializable)
    assert not isinstance(object(), BitSerializable)

    buf = BitBuf(1)
    Flags(True, 19).write_to_bitbuf(buf)
    assert buf.bit_pos == 6
    buf.reset()
    f = Flags.from_bitbuf(buf)
    assert (f.a, f.b) == (True, 19)


def test_wire_spec_validation():
    with pytest.raises(ValidationError):
        Wire("u8", bits=9).spec("x")
    with pytest.raises(ValueError):
        Wire("u7").spec("x")
