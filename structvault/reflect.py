"""Runtime field introspection for records (Struct instances and dataclasses)."""

import dataclasses
from typing import Annotated, Any, Iterator, List, NamedTuple, Tuple, get_args, get_origin, get_type_hints

from .core import Struct
from .tags import METADATA_KEY, Tag

SCHEMA_ATTR = "__vault_schema__"


class FieldDescriptor(NamedTuple):
    """One record field: attribute name, declared type, current value and raw tag."""

    name: str
    type: Any
    value: Any
    tag: str


def is_record(value: Any) -> bool:
    """True for Struct instances and dataclass instances (not classes)."""
    if isinstance(value, Struct):
        return True
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def _build_dataclass_schema(cls: type) -> Tuple[Tuple[str, Any, str], ...]:
    hints = {}
    if any(isinstance(f.type, str) for f in dataclasses.fields(cls)):
        # string annotations (from __future__ import annotations)
        hints = get_type_hints(cls, include_extras=True)

    schema: List[Tuple[str, Any, str]] = []
    for f in dataclasses.fields(cls):
        declared = hints.get(f.name, f.type)
        raw = f.metadata.get(METADATA_KEY, "")
        if get_origin(declared) is Annotated:
            args = get_args(declared)
            declared = args[0]
            for item in args[1:]:
                if isinstance(item, Tag):
                    raw = item.raw
        schema.append((f.name, declared, raw))
    return tuple(schema)


def _dataclass_schema(cls: type) -> Tuple[Tuple[str, Any, str], ...]:
    # cached on the class itself (not a subclass) so it dies with the class
    schema = cls.__dict__.get(SCHEMA_ATTR)
    if schema is None:
        schema = _build_dataclass_schema(cls)
        setattr(cls, SCHEMA_ATTR, schema)
    return schema


def _schema(record: Any) -> Tuple[Tuple[str, Any, str], ...]:
    cls = type(record)
    if isinstance(record, Struct):
        return tuple((name, cls._types.get(name), cls._tags.get(name, "")) for name in cls._fields)
    return _dataclass_schema(cls)


def iter_fields(record: Any, tagged_only: bool = True) -> Iterator[FieldDescriptor]:
    """Yield the record's fields in declaration order."""
    for name, declared, raw in _schema(record):
        if tagged_only and not raw:
            continue
        yield FieldDescriptor(name, declared, getattr(record, name), raw)


def set_field(record: Any, name: str, value: Any) -> None:
    """Write a value back onto the record through its normal attribute path."""
    setattr(record, name, value)
