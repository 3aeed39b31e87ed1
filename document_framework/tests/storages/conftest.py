import typing

import attr
import pytest
from _pytest.fixtures import SubRequest
from bson import ObjectId
from pymongo import MongoClient


@attr.s(auto_attribs=True)
class InsertOneResult:
    inserted_id: ObjectId


@attr.s(auto_attribs=True)
class RecordingCollection:
    """Collection double keeping documents in memory and recording every write."""

    documents: typing.Dict[typing.Any, dict] = attr.Factory(dict)
    writes: typing.List[typing.Tuple[str, tuple]] = attr.Factory(list)

    def find_one(self, query: dict) -> typing.Optional[dict]:
        return next(iter(self.find(query)), None)

    def find(self, query: dict) -> typing.List[dict]:
        return [
            dict(document)
            for document in self.documents.values()
            if all(document.get(key) == value for key, value in query.items())
        ]

    def insert_one(self, document: dict) -> InsertOneResult:
        self.writes.append(("insert_one", (document,)))
        document.setdefault("_id", ObjectId())
        self.documents[document["_id"]] = dict(document)
        return InsertOneResult(document["_id"])

    def update_one(self, query: dict, update: dict) -> None:
        self.writes.append(("update_one", (query, update)))
        for document in self.documents.values():
            if all(document.get(key) == value for key, value in query.items()):
                for path, value in update["$set"].items():
                    _set_path(document, path.split("."), value)
                return

    def delete_one(self, query: dict) -> None:
        self.writes.append(("delete_one", (query,)))
        self.documents.pop(query["_id"], None)


def _set_path(target: typing.Any, segments: typing.List[str], value: typing.Any) -> None:
    head, *rest = segments
    if isinstance(target, list):
        head = int(head)
    if not rest:
        target[head] = value
    else:
        _set_path(target[head], rest, value)


@attr.s(auto_attribs=True)
class RecordingDatabase:
    collections: typing.Dict[str, RecordingCollection] = attr.Factory(dict)

    def __getitem__(self, name: str) -> RecordingCollection:
        return self.collections.setdefault(name, RecordingCollection())


@pytest.fixture()
def database() -> RecordingDatabase:
    return RecordingDatabase()


@pytest.fixture()
def mongo_database(request: SubRequest):
    connection_url = request.config.getoption("--mongo-url")
    if not connection_url:
        pytest.skip("Pass --mongo-url to run tests against a live MongoDB server")

    client = MongoClient(connection_url)
    database = client.get_database("document_framework_tests")
    client.drop_database(database)
    yield database
    client.drop_database(database)
    client.close()
