from __future__ import annotations
from enum import Enum
from typing import Any, Dict, List, Mapping, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator


class FieldKind(str, Enum):
    BOOL = "bool"
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    F32 = "f32"
    F64 = "f64"
    BYTES = "bytes"
    STRING = "string"

    @property
    def is_int(self) -> bool:
        return self.value[0] in "ui"

    @property
    def signed(self) -> bool:
        return self.value[0] == "i"

    @property
    def width(self) -> int | None:
        """Natural width in bits; None for variable-size kinds."""
        return _WIDTH.get(self)


_WIDTH = {
    FieldKind.BOOL: 1,
    FieldKind.U8: 8, FieldKind.I8: 8,
    FieldKind.U16: 16, FieldKind.I16: 16,
    FieldKind.U32: 32, FieldKind.I32: 32,
    FieldKind.U64: 64, FieldKind.I64: 64,
    FieldKind.F32: 32, FieldKind.F64: 64,
}


class FieldSpec(BaseModel):
    name: str = Field(..., min_length=1)
    kind: FieldKind
    bits: int | None = Field(default=None, ge=1, le=64)
    length: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _check_widths(self) -> "FieldSpec":
        if self.bits is not None:
            if not self.kind.is_int:
                raise ValueError(f"{self.name}: bits only applies to integer kinds, not {self.kind.value}")
            if self.bits > self.kind.width:
                raise ValueError(f"{self.name}: {self.bits} bits exceeds {self.kind.value}")
        if (self.kind is FieldKind.BYTES) != (self.length is not None):
            raise ValueError(f"{self.name}: length is required for bytes fields and only for them")
        return self

    @property
    def wire_bits(self) -> int | None:
        """Bits on the wire, or None when it depends on the value (strings)."""
        if self.kind is FieldKind.BYTES:
            return self.length * 8
        if self.kind is FieldKind.STRING:
            return None
        return self.bits if self.bits is not None else self.kind.width

    def value_bits(self, value: Any) -> int:
        n = self.wire_bits
        if n is not None:
            return n
        return 32 + len(str(value).encode("utf-8")) * 8


class RecordLayout(BaseModel):
    """Ordered field plan for a flat record; the order is the wire order."""
    name: str = "record"
    fields: List[FieldSpec] = Field(default_factory=list)

    @field_validator("fields")
    @classmethod
    def _unique_names(cls, v: List[FieldSpec]) -> List[FieldSpec]:
        seen = set()
        for f in v:
            if f.name in seen:
                raise ValueError(f"duplicate field name {f.name!r}")
            seen.add(f.name)
        return v

    def fixed_bits(self) -> int:
        """Bits of everything except string payloads (prefixes included)."""
        return sum(f.wire_bits if f.wire_bits is not None else 32 for f in self.fields)

    def bit_length(self, values: Mapping[str, Any]) -> int:
        return sum(f.value_bits(values[f.name]) if f.kind is FieldKind.STRING else f.wire_bits
                   for f in self.fields)

    def offsets(self) -> List[Tuple[FieldSpec, int | None]]:
        """
        (field, bit offset) pairs. Offsets after the first string are
        value-dependent and reported as None.
        """
        out: List[Tuple[FieldSpec, int | None]] = []
        pos: int | None = 0
        for f in self.fields:
            out.append((f, pos))
            if pos is not None:
                pos = pos + f.wire_bits if f.wire_bits is not None else None
        return out

    @classmethod
    def from_json(cls, raw: str | bytes) -> "RecordLayout":
        return cls.model_validate_json(raw)

    def describe(self) -> List[Dict[str, Any]]:
        return [
            {"name": f.name, "kind": f.kind.value, "bits": f.wire_bits, "offset": off}
            for f, off in self.offsets()
        ]
