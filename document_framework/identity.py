import typing

from bson import ObjectId
from bson.errors import InvalidId


class InvalidIdentifier(ValueError):
    pass


def normalize_identifier(value: typing.Union[str, ObjectId]) -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str):
        raise InvalidIdentifier(f"Expected a string or ObjectId, got {type(value).__name__}")
    try:
        return ObjectId(value)
    except InvalidId as e:
        raise InvalidIdentifier(f"Not a 24 character hex identifier - {value!r}") from e


def identifier_to_string(identifier: ObjectId) -> str:
    return str(identifier)
