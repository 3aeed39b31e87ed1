"""Shape-preserving diff of nested documents.

Only keys present in the current document are inspected, so a key removed since
the snapshot is not reported. Update consumers rely on this: a partial ``$set``
never unsets fields.
"""
import typing
from collections.abc import Mapping

from document_framework.values import FieldKind, kind_of, is_composite, values_equal


Kinds = typing.Mapping[str, typing.Union[FieldKind, "Kinds"]]


class Changeset(dict):
    """Changed fields mapped to their new values.

    A nested ``Changeset`` holds the changes inside a sub-document or list, any other
    value replaces the stored one as a whole.
    """


def diff(
    current: typing.Mapping[str, typing.Any],
    baseline: typing.Mapping[str, typing.Any],
    kinds: typing.Optional[Kinds] = None,
) -> Changeset:
    kinds = kinds or {}
    changes = Changeset()

    for key, value in current.items():
        if key not in baseline:
            changes[key] = value
            continue

        original = baseline[key]
        field_kind = kinds.get(key)
        if is_composite(value) and kind_of(value) is kind_of(original):
            nested_kinds = field_kind if isinstance(field_kind, Mapping) else None
            nested = diff(_as_mapping(value), _as_mapping(original), nested_kinds)
            if nested:
                changes[key] = nested
        elif not values_equal(value, original, numeric=field_kind is FieldKind.NUMERIC):
            changes[key] = value

    return changes


def _as_mapping(value: typing.Any) -> typing.Mapping:
    if kind_of(value) is FieldKind.LIST:
        return dict(enumerate(value))
    return value


def flatten(changeset: typing.Mapping[str, typing.Any], prefix: str = "") -> typing.Dict[str, typing.Any]:
    """Turn a changeset into dotted paths suitable for a ``$set`` update."""
    paths = {}
    for key, value in changeset.items():
        path = f"{prefix}{key}"
        if isinstance(value, Changeset):
            paths.update(flatten(value, f"{path}."))
        else:
            paths[path] = value
    return paths
