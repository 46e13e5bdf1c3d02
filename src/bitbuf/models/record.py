from __future__ import annotations
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, List, Protocol, Tuple, TypeVar, Union, runtime_checkable

from pydantic import BaseModel

from .layout import FieldKind, FieldSpec, RecordLayout
from ..binary.buffer import BitBuf
from ..binary.errors import BitBufError, RecordError
from ..binary.record_codec import read_field, write_field

R = TypeVar("R", bound="BitRecord")


@runtime_checkable
class BitSerializable(Protocol):
    """Anything that can encode itself into a BitBuf and be decoded back from one."""

    def write_to_bitbuf(self, buf: BitBuf) -> None: ...

    @classmethod
    def from_bitbuf(cls, buf: BitBuf) -> Any: ...


@dataclass(frozen=True)
class Wire:
    """
    Wire codec for a record field, used as ``Annotated`` metadata:

        age: Annotated[int, Wire("u8", bits=7)]
    """
    kind: Union[FieldKind, str]
    bits: int | None = None
    length: int | None = None

    def spec(self, name: str) -> FieldSpec:
        return FieldSpec(name=name, kind=FieldKind(self.kind), bits=self.bits, length=self.length)


def _is_serializable_type(tp: Any) -> bool:
    return isinstance(tp, type) and callable(getattr(tp, "from_bitbuf", None)) \
        and callable(getattr(tp, "write_to_bitbuf", None))


PlanItem = Tuple[str, Union[FieldSpec, type]]


@lru_cache(maxsize=None)
def _field_plan(cls: type) -> Tuple[PlanItem, ...]:
    plan: List[PlanItem] = []
    for name, info in cls.model_fields.items():
        wire = next((m for m in info.metadata if isinstance(m, Wire)), None)
        if wire is not None:
            plan.append((name, wire.spec(name)))
        elif _is_serializable_type(info.annotation):
            plan.append((name, info.annotation))
        else:
            raise RecordError(f"{cls.__name__}.{name}: no Wire annotation and not bit-serializable")
    return tuple(plan)


class BitRecord(BaseModel):
    """
    Pydantic model that serializes its fields, in declaration order, with the
    codecs named by their ``Wire`` annotations. Fields typed as another
    bit-serializable class are written in place.
    """

    @classmethod
    def layout(cls) -> RecordLayout:
        """Flattened layout; nested record fields appear as ``outer.inner``."""
        fields: List[FieldSpec] = []
        for name, item in _field_plan(cls):
            if isinstance(item, FieldSpec):
                fields.append(item)
            elif issubclass(item, BitRecord):
                fields += [f.model_copy(update={"name": f"{name}.{f.name}"}) for f in item.layout().fields]
            else:
                raise RecordError(f"{cls.__name__}.{name}: {item.__name__} has no layout")
        return RecordLayout(name=cls.__name__, fields=fields)

    def bit_length(self) -> int:
        total = 0
        for name, item in _field_plan(type(self)):
            value = getattr(self, name)
            if isinstance(item, FieldSpec):
                total += item.value_bits(value)
            elif callable(getattr(value, "bit_length", None)):
                total += value.bit_length()
            else:
                raise RecordError(f"{type(self).__name__}.{name}: size of {item.__name__} unknown")
        return total

    def write_to_bitbuf(self, buf: BitBuf) -> None:
        need = self.bit_length()
        buf.require(need)
        mark = buf.checkpoint(need)
        try:
            for name, item in _field_plan(type(self)):
                value = getattr(self, name)
                if isinstance(item, FieldSpec):
                    write_field(buf, item, value)
                else:
                    value.write_to_bitbuf(buf)
        except (BitBufError, TypeError):
            # Wire ranges are checked here, not by pydantic
            buf.rollback(mark)
            raise

    @classmethod
    def from_bitbuf(cls: type[R], buf: BitBuf) -> R:
        values: Dict[str, Any] = {}
        for name, item in _field_plan(cls):
            if isinstance(item, FieldSpec):
                values[name] = read_field(buf, item)
            else:
                values[name] = item.from_bitbuf(buf)
        return cls.model_validate(values)

    def to_bits(self) -> bytes:
        buf = BitBuf((self.bit_length() + 7) // 8)
        self.write_to_bitbuf(buf)
        return buf.into_bytes()

    @classmethod
    def from_bits(cls: type[R], data: bytes | bytearray | memoryview) -> R:
        return cls.from_bitbuf(BitBuf.from_bytes(data))
