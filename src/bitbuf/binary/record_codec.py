from __future__ import annotations
import logging
from typing import Any, Dict, Mapping

from .buffer import BitBuf
from .codecs import floats, ints, text
from .errors import BitBufError, RecordError
from ..models.layout import FieldKind, FieldSpec, RecordLayout

log = logging.getLogger(__name__)


def write_field(buf: BitBuf, spec: FieldSpec, value: Any) -> None:
    kind = spec.kind
    if kind is FieldKind.BOOL:
        ints.write_bool(buf, bool(value))
    elif kind.is_int:
        bits = spec.bits or kind.width
        if kind.signed:
            ints.write_signed(buf, value, bits, kind.width)
        else:
            ints.write_unsigned(buf, value, bits, kind.width)
    elif kind is FieldKind.F32:
        floats.write_f32(buf, value)
    elif kind is FieldKind.F64:
        floats.write_f64(buf, value)
    elif kind is FieldKind.BYTES:
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise RecordError(f"{spec.name}: expected bytes, got {type(value).__name__}")
        raw = bytes(value)
        if len(raw) != spec.length:
            raise RecordError(f"{spec.name}: expected {spec.length} bytes, got {len(raw)}")
        text.write_byte_sequence(buf, raw)
    else:
        if not isinstance(value, str):
            raise RecordError(f"{spec.name}: expected str, got {type(value).__name__}")
        text.write_string(buf, value)


def read_field(buf: BitBuf, spec: FieldSpec) -> Any:
    kind = spec.kind
    if kind is FieldKind.BOOL:
        return ints.read_bool(buf)
    if kind.is_int:
        bits = spec.bits or kind.width
        if kind.signed:
            return ints.read_signed(buf, bits, kind.width)
        return ints.read_unsigned(buf, bits, kind.width)
    if kind is FieldKind.F32:
        return floats.read_f32(buf)
    if kind is FieldKind.F64:
        return floats.read_f64(buf)
    if kind is FieldKind.BYTES:
        return text.read_byte_sequence(buf, spec.length)
    return text.read_string(buf)


def _missing(layout: RecordLayout, values: Mapping[str, Any]) -> None:
    absent = [f.name for f in layout.fields if f.name not in values]
    if absent:
        raise RecordError(f"{layout.name}: missing values for {', '.join(absent)}")


def encode_record(buf: BitBuf, layout: RecordLayout, values: Mapping[str, Any]) -> None:
    """
    Write ``values`` field by field in layout order at the current cursor.
    The whole record is size-checked first; a value that fails part-way rolls
    back cursor and storage, so a failed call leaves the buffer untouched.
    """
    _missing(layout, values)
    need = layout.bit_length(values)
    buf.require(need)

    start = buf.bit_pos
    mark = buf.checkpoint(need)
    for spec in layout.fields:
        try:
            write_field(buf, spec, values[spec.name])
        except (BitBufError, TypeError) as e:
            buf.rollback(mark)
            raise RecordError(f"{layout.name}.{spec.name}: {e}") from e
    log.debug("encoded %s: %d bits at bit %d", layout.name, buf.bit_pos - start, start)


def decode_record(buf: BitBuf, layout: RecordLayout) -> Dict[str, Any]:
    start = buf.bit_pos
    out: Dict[str, Any] = {}
    for spec in layout.fields:
        try:
            out[spec.name] = read_field(buf, spec)
        except BitBufError as e:
            raise RecordError(f"{layout.name}.{spec.name} at bit {buf.bit_pos}: {e}") from e
    log.debug("decoded %s: %d bits at bit %d", layout.name, buf.bit_pos - start, start)
    return out


def pack(layout: RecordLayout, values: Mapping[str, Any], *, size: int | None = None) -> bytes:
    """Encode one record into a fresh buffer (exactly sized unless ``size`` is given)."""
    _missing(layout, values)
    if size is None:
        size = (layout.bit_length(values) + 7) // 8
    buf = BitBuf(size)
    encode_record(buf, layout, values)
    return buf.into_bytes()


def unpack(layout: RecordLayout, data: bytes | bytearray | memoryview) -> Dict[str, Any]:
    return decode_record(BitBuf.from_bytes(data), layout)
