import abc
import logging
import typing
from collections.abc import Mapping, MutableMapping
from functools import singledispatch

import attr
import inflection
from bson import ObjectId

from document_framework.diff import Changeset, Kinds, diff
from document_framework.identity import identifier_to_string, normalize_identifier
from document_framework.snapshot import Snapshot, capture, capture_field
from document_framework.values import FieldKind, copy_value


logger = logging.getLogger(__name__)


class InvalidSchema(TypeError):
    pass


SET_ATTRIBUTE_BEFORE = "set_attribute_before"
SET_ATTRIBUTE_AFTER = "set_attribute_after"


@attr.s(auto_attribs=True, frozen=True)
class AttributeEvent:
    name: str
    source: "AttributeBag" = attr.ib(hash=False)
    key: str
    value: typing.Any = attr.ib(hash=False)


Observer = typing.Callable[[AttributeEvent], None]
FieldSpec = typing.Union[FieldKind, typing.Type["EmbeddedDocument"]]


def _is_field_spec(field_spec: typing.Any) -> bool:
    return isinstance(field_spec, FieldKind) or (
        isinstance(field_spec, type) and issubclass(field_spec, EmbeddedDocument)
    )


class DocumentMeta(abc.ABCMeta):
    def __new__(mcs, name: str, bases: tuple, namespace: dict):
        cls = super().__new__(mcs, name, bases, namespace)
        schema = getattr(cls, "schema", {})
        if not isinstance(schema, Mapping):
            raise InvalidSchema(f"{name}.schema must be a mapping, got {type(schema).__name__}")
        for field_name, field_spec in schema.items():
            if not _is_field_spec(field_spec):
                raise InvalidSchema(f"Unsupported schema entry - {name}.{field_name}: {field_spec!r}")
        # Derived only as a default, an inherited collection name is kept.
        if any(hasattr(base, "collection") for base in bases) and not getattr(cls, "collection", None):
            cls.collection = inflection.pluralize(inflection.underscore(name))
        return cls


class AttributeBag(MutableMapping, metaclass=DocumentMeta):
    """Dynamic field storage shared by documents and embedded documents.

    Assignments go through ``set_attribute``, which coerces identifiers and
    embedded documents declared in ``schema`` and notifies observers before and
    after the value is stored.
    """

    schema: typing.ClassVar[typing.Dict[str, FieldSpec]] = {}

    def __init__(
        self, attributes: typing.Optional[typing.Mapping[str, typing.Any]] = None, observers: typing.Iterable[Observer] = ()
    ) -> None:
        self._attributes: typing.Dict[str, typing.Any] = {}
        self._observers: typing.List[Observer] = list(observers)
        self.fill(attributes or {})

    @classmethod
    def field_kinds(cls) -> Kinds:
        kinds = {}
        for field_name, field_spec in cls.schema.items():
            if isinstance(field_spec, FieldKind):
                kinds[field_name] = field_spec
            else:
                kinds[field_name] = field_spec.field_kinds()
        return kinds

    def observe(self, observer: Observer) -> Observer:
        self._observers.append(observer)
        return observer

    def fill(self, attributes: typing.Mapping[str, typing.Any]) -> "AttributeBag":
        for key, value in attributes.items():
            self.set_attribute(key, value)
        return self

    def set_attribute(self, key: str, value: typing.Any) -> "AttributeBag":
        key = self._resolve_key(key)
        value = self._coerce(key, value)

        self._fire(SET_ATTRIBUTE_BEFORE, key, value)
        self._attributes[key] = value
        self._fire(SET_ATTRIBUTE_AFTER, key, value)

        return self

    def get_attribute(self, key: str) -> typing.Any:
        return self._attributes.get(self._resolve_key(key))

    def drop(self, *keys: str) -> "AttributeBag":
        for key in keys:
            self._attributes.pop(self._resolve_key(key), None)
        return self

    unset = drop

    def has_path(self, path: str) -> bool:
        """Check whether a dotted path (``key.subkey.0``) leads to a non-null value."""
        current: typing.Any = self
        for segment in path.split("."):
            if isinstance(current, Mapping):
                if segment not in current:
                    return False
                current = current[segment]
            elif isinstance(current, (list, tuple)) and segment.isdigit() and int(segment) < len(current):
                current = current[int(segment)]
            else:
                return False
            if current is None:
                return False
        return True

    def to_dict(self) -> typing.Dict[str, typing.Any]:
        return {key: _to_plain(value) for key, value in self._attributes.items()}

    def to_document(self) -> typing.Dict[str, typing.Any]:
        return capture(self)

    def _resolve_key(self, key: str) -> str:
        return key

    def _coerce(self, key: str, value: typing.Any) -> typing.Any:
        field_spec = self.schema.get(key)
        if field_spec is FieldKind.IDENTIFIER and isinstance(value, str):
            return normalize_identifier(value)
        if isinstance(field_spec, type) and isinstance(value, Mapping) and not isinstance(value, field_spec):
            return field_spec(value)
        return value

    def _fire(self, name: str, key: str, value: typing.Any) -> None:
        if not self._observers:
            return
        event = AttributeEvent(name, self, key, value)
        for observer in list(self._observers):
            observer(event)

    def __getitem__(self, key: str) -> typing.Any:
        return self._attributes[self._resolve_key(key)]

    def __setitem__(self, key: str, value: typing.Any) -> None:
        self.set_attribute(key, value)

    def __delitem__(self, key: str) -> None:
        del self._attributes[self._resolve_key(key)]

    def __contains__(self, key: object) -> bool:
        return self._resolve_key(key) in self._attributes

    def __iter__(self) -> typing.Iterator[str]:
        return iter(self._attributes)

    def __len__(self) -> int:
        return len(self._attributes)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._attributes!r})"


class EmbeddedDocument(AttributeBag):
    """A sub-document stored inline in its parent document."""


class Document(AttributeBag):
    primary_key: typing.ClassVar[str] = "_id"
    collection: typing.ClassVar[typing.Optional[str]] = None

    def __init__(
        self, attributes: typing.Optional[typing.Mapping[str, typing.Any]] = None, observers: typing.Iterable[Observer] = ()
    ) -> None:
        self._original: Snapshot = {}
        self.exists = False
        super().__init__(attributes, observers)

    @property
    def identity(self) -> typing.Any:
        return self._attributes.get(self.primary_key)

    @property
    def id(self) -> typing.Optional[str]:
        identity = self.identity
        if identity is None:
            return None
        return identifier_to_string(identity)

    def get_attribute(self, key: str) -> typing.Any:
        if key == "id" and self.primary_key != "id":
            return self.id
        return super().get_attribute(key)

    def set_raw_attributes(self, attributes: typing.Mapping[str, typing.Any], sync: bool = False) -> "Document":
        self.fill(attributes)
        if sync:
            self.sync_original()
        return self

    def sync_original(self) -> "Document":
        self._original = capture(self)
        logger.debug("Synced snapshot of %s %s", self.__class__.__name__, self.id)
        return self

    def sync_original_attribute(self, key: str) -> "Document":
        self._original = capture_field(self._original, self, self._resolve_key(key))
        return self

    def get_original(self, key: typing.Optional[str] = None) -> typing.Any:
        if key is None:
            return capture(self._original)
        return copy_value(self._original.get(self._resolve_key(key)))

    def get_dirty(self) -> Changeset:
        return diff(self, self._original, self.field_kinds())

    def is_dirty(self, *keys: str) -> bool:
        dirty = self.get_dirty()
        if not keys:
            return bool(dirty)
        return any(self._resolve_key(key) in dirty for key in keys)

    def _resolve_key(self, key: str) -> str:
        if key == "id" and self.primary_key != "id":
            return self.primary_key
        return key

    def _coerce(self, key: str, value: typing.Any) -> typing.Any:
        if key == self.primary_key and isinstance(value, str):
            return normalize_identifier(value)
        return super()._coerce(key, value)


@singledispatch
def _to_plain(value: typing.Any) -> typing.Any:
    return value


@_to_plain.register(ObjectId)
def _(value: ObjectId) -> str:
    return identifier_to_string(value)


@_to_plain.register(Mapping)
def _(value: Mapping) -> dict:
    return {key: _to_plain(item) for key, item in value.items()}


@_to_plain.register(list)
@_to_plain.register(tuple)
def _(value: typing.Sequence) -> list:
    return [_to_plain(item) for item in value]
