import pytest
from bson import ObjectId

from document_framework.diff import Changeset, diff, flatten
from document_framework.values import FieldKind


IDENTIFIER = ObjectId("507f1f77bcf86cd799439011")


@pytest.mark.parametrize(
    "document",
    [
        {},
        {"a": 1, "b": "text", "c": None},
        {"_id": IDENTIFIER, "nested": {"deep": {"list": [1, {"x": 2.5}]}}},
        {"flag": True, "amount": 1.0},
    ],
)
def test_document_has_no_changes_against_itself(document):
    assert diff(document, document) == {}


@pytest.mark.parametrize(
    "current, baseline, expected",
    [
        ({"a": 1}, {}, {"a": 1}),
        ({"a": 1}, {"a": 1, "b": 2}, {}),
        ({"a": {"x": 1, "y": 3}}, {"a": {"x": 1, "y": 2}}, {"a": {"y": 3}}),
        ({"a": {"x": 1, "z": 0}}, {"a": {"x": 1}}, {"a": {"z": 0}}),
        ({"a": 2}, {"a": 1}, {"a": 2}),
        ({"a": True}, {"a": 1}, {"a": True}),
        ({"a": "1"}, {"a": 1}, {"a": "1"}),
        ({"a": None}, {"a": 0}, {"a": None}),
        ({"a": {"x": 1}}, {"a": [1]}, {"a": {"x": 1}}),
        ({"a": {"x": 1}}, {"a": "x"}, {"a": {"x": 1}}),
        ({"tags": ["a", "c"]}, {"tags": ["a", "b"]}, {"tags": {1: "c"}}),
        ({"tags": ["a", "b", "c"]}, {"tags": ["a", "b"]}, {"tags": {2: "c"}}),
        ({"tags": ["a"]}, {"tags": ["a", "b"]}, {}),
        ({"_id": ObjectId("507f1f77bcf86cd799439012")}, {"_id": IDENTIFIER}, {"_id": ObjectId("507f1f77bcf86cd799439012")}),
    ],
)
def test_reports_changed_fields(current, baseline, expected):
    assert diff(current, baseline) == expected


def test_nested_changes_are_changesets():
    result = diff({"a": {"b": {"c": 2}}, "d": {"e": 1}}, {"a": {"b": {"c": 1}}})

    assert isinstance(result["a"], Changeset)
    assert isinstance(result["a"]["b"], Changeset)
    assert not isinstance(result["d"], Changeset)


def test_numerically_equivalent_values_are_unchanged_on_numeric_fields():
    assert diff({"n": 1.0}, {"n": 1}, {"n": FieldKind.NUMERIC}) == {}


def test_numerically_equivalent_values_differ_on_undeclared_fields():
    assert diff({"n": 1.0}, {"n": 1}) == {"n": 1.0}


def test_numeric_kinds_apply_to_nested_documents():
    kinds = {"stats": {"level": FieldKind.NUMERIC}}

    assert diff({"stats": {"level": 3.0, "name": "x"}}, {"stats": {"level": 3, "name": "x"}}, kinds) == {}


def test_flattens_nested_changes_to_dotted_paths():
    changes = diff(
        {"a": {"b": {"c": 2}}, "tags": ["x", "z"], "new": {"k": "v"}},
        {"a": {"b": {"c": 1}}, "tags": ["x", "y"]},
    )

    assert flatten(changes) == {"a.b.c": 2, "tags.1": "z", "new": {"k": "v"}}


def test_flattens_empty_changeset():
    assert flatten(Changeset()) == {}
