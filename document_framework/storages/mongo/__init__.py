import logging
import typing

from pymongo.collection import Collection
from pymongo.database import Database

from document_framework.diff import flatten
from document_framework.document import Document
from document_framework.identity import normalize_identifier
from document_framework.repository import DocumentNotFound, DocumentType, IdentityType
from document_framework.storages.mongo.types import from_storage, to_storage


logger = logging.getLogger(__name__)


class IdentityChanged(ValueError):
    pass


class MongoRepo:
    document: typing.Type[Document] = None
    collection_name: typing.Optional[str] = None

    def __init__(self, database: Database) -> None:
        self._collection: Collection = database[self.collection_name]

    @classmethod
    def prepare(cls, document_cls: typing.Type[DocumentType]) -> None:
        if not getattr(cls, "document", None):
            cls.document = document_cls
        if not cls.collection_name:
            cls.collection_name = cls.document.collection

    def hydrate(self, raw: typing.Mapping[str, typing.Any]) -> DocumentType:
        document = self.document().set_raw_attributes(from_storage(raw), sync=True)
        document.exists = True
        return document

    def get(self, identity: IdentityType) -> DocumentType:
        primary_key = self.document.primary_key
        if primary_key == "_id" and isinstance(identity, str):
            identity = normalize_identifier(identity)

        raw = self._collection.find_one({primary_key: identity})
        if raw is None:
            raise DocumentNotFound(f"No {self.document.__name__} with {primary_key}={identity!r} in {self.collection_name}")
        return self.hydrate(raw)

    def raw(self, query: typing.Optional[typing.Mapping[str, typing.Any]] = None) -> typing.List[DocumentType]:
        return [self.hydrate(raw) for raw in self._collection.find(dict(query or {}))]

    def save(self, document: DocumentType) -> None:
        if document.exists:
            self._update(document)
        else:
            self._insert(document)
        document.sync_original()

    def delete(self, document: DocumentType) -> None:
        self._collection.delete_one({document.primary_key: document.identity})
        document.exists = False
        logger.info("Deleted %s %s from %s", document.__class__.__name__, document.id, self.collection_name)

    def _insert(self, document: DocumentType) -> None:
        result = self._collection.insert_one(to_storage(document.to_document()))
        if document.identity is None:
            document.set_attribute(document.primary_key, result.inserted_id)
        document.exists = True
        logger.info("Inserted %s %s into %s", document.__class__.__name__, document.id, self.collection_name)

    def _update(self, document: DocumentType) -> None:
        changes = document.get_dirty()
        if not changes:
            logger.debug("%s %s is clean, skipping update", document.__class__.__name__, document.id)
            return

        identity = document.get_original(document.primary_key)
        if identity is None:
            identity = document.identity
        elif document.primary_key in changes:
            raise IdentityChanged(
                f"{document.__class__.__name__} {identity} can not change {document.primary_key} to {document.identity}"
            )
        self._collection.update_one({document.primary_key: identity}, {"$set": to_storage(flatten(changes))})
        logger.info("Updated %s %s in %s: %s", document.__class__.__name__, document.id, self.collection_name, sorted(changes))
