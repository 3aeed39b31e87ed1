import decimal
import enum
import typing
from collections.abc import Mapping
from functools import singledispatch

from bson import Decimal128, ObjectId


class FieldKind(enum.Enum):
    SCALAR = "SCALAR"
    NUMERIC = "NUMERIC"
    DOCUMENT = "DOCUMENT"
    LIST = "LIST"
    IDENTIFIER = "IDENTIFIER"


COMPOSITE_KINDS = frozenset([FieldKind.DOCUMENT, FieldKind.LIST])


@singledispatch
def kind_of(value: typing.Any) -> FieldKind:
    return FieldKind.SCALAR


@kind_of.register(bool)
def _(value: bool) -> FieldKind:
    return FieldKind.SCALAR


@kind_of.register(int)
@kind_of.register(float)
@kind_of.register(decimal.Decimal)
@kind_of.register(Decimal128)
def _(value: typing.Any) -> FieldKind:
    return FieldKind.NUMERIC


@kind_of.register(Mapping)
def _(value: Mapping) -> FieldKind:
    return FieldKind.DOCUMENT


@kind_of.register(list)
@kind_of.register(tuple)
def _(value: typing.Sequence) -> FieldKind:
    return FieldKind.LIST


@kind_of.register(ObjectId)
def _(value: ObjectId) -> FieldKind:
    return FieldKind.IDENTIFIER


def is_composite(value: typing.Any) -> bool:
    return kind_of(value) in COMPOSITE_KINDS


def values_equal(current: typing.Any, original: typing.Any, numeric: bool = False) -> bool:
    """Strict equality used for dirty checking.

    Values of different types are never equal, so ``True`` differs from ``1``.
    With ``numeric`` set, two numbers compare by value regardless of representation.
    """
    if current is original:
        return True
    if numeric and kind_of(current) is FieldKind.NUMERIC and kind_of(original) is FieldKind.NUMERIC:
        return _as_number(current) == _as_number(original)
    return type(current) is type(original) and current == original


def _as_number(value: typing.Any) -> typing.Any:
    if isinstance(value, Decimal128):
        return value.to_decimal()
    return value


@singledispatch
def copy_value(value: typing.Any) -> typing.Any:
    """Copy a value for a snapshot.

    Mappings, sequences, sets and bytearrays are copied. Any other object is shared
    by reference and compares unchanged until it is replaced.
    """
    return value


@copy_value.register(bytearray)
def _(value: bytearray) -> bytearray:
    return bytearray(value)


@copy_value.register(set)
def _(value: set) -> set:
    return {copy_value(item) for item in value}


@copy_value.register(Mapping)
def _(value: Mapping) -> dict:
    return {key: copy_value(item) for key, item in value.items()}


@copy_value.register(list)
@copy_value.register(tuple)
def _(value: typing.Sequence) -> list:
    return [copy_value(item) for item in value]
