import datetime
import decimal
import typing
import uuid
from collections.abc import Mapping
from functools import singledispatch

from bson import Decimal128


@singledispatch
def to_storage(argument: typing.Any) -> typing.Any:
    return argument


@to_storage.register(Mapping)
def _(argument: Mapping) -> dict:
    return {key: to_storage(value) for key, value in argument.items()}


@to_storage.register(list)
@to_storage.register(tuple)
def _(argument: typing.Sequence) -> list:
    return [to_storage(value) for value in argument]


@to_storage.register(decimal.Decimal)
def _(argument: decimal.Decimal) -> Decimal128:
    return Decimal128(argument)


@to_storage.register(uuid.UUID)
def _(argument: uuid.UUID) -> str:
    return str(argument)


@to_storage.register(datetime.date)
def _(argument: datetime.date) -> datetime.datetime:
    return datetime.datetime(argument.year, argument.month, argument.day)


@to_storage.register(datetime.datetime)
def _(argument: datetime.datetime) -> datetime.datetime:
    return argument


@singledispatch
def from_storage(argument: typing.Any) -> typing.Any:
    return argument


@from_storage.register(Mapping)
def _(argument: Mapping) -> dict:
    return {key: from_storage(value) for key, value in argument.items()}


@from_storage.register(list)
def _(argument: list) -> list:
    return [from_storage(value) for value in argument]


@from_storage.register(Decimal128)
def _(argument: Decimal128) -> decimal.Decimal:
    return argument.to_decimal()
