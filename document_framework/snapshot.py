"""Snapshots of document state used as the baseline for dirty checking.

A snapshot never shares mutable containers with the document it was taken from:
nested mappings and sequences are copied recursively, while identifiers and other
immutable values are kept as they are.
"""
import typing

from document_framework.values import copy_value


Snapshot = typing.Dict[str, typing.Any]


def capture(document: typing.Mapping[str, typing.Any]) -> Snapshot:
    return {key: copy_value(value) for key, value in document.items()}


def capture_field(snapshot: typing.Mapping[str, typing.Any], document: typing.Mapping[str, typing.Any], key: str) -> Snapshot:
    """Return a new snapshot with ``key`` re-captured from ``document``.

    The given snapshot is left untouched. A key missing from ``document`` is removed.
    """
    result = dict(snapshot)
    if key in document:
        result[key] = copy_value(document[key])
    else:
        result.pop(key, None)
    return result
