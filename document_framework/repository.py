import abc
import inspect
import typing

from document_framework.document import Document


DocumentType = typing.TypeVar("DocumentType", bound=Document)
IdentityType = typing.TypeVar("IdentityType")


class DocumentNotFound(LookupError):
    pass


class RepositoryMeta(abc.ABCMeta):
    def __new__(mcs, name: str, bases: typing.Tuple[typing.Type, ...], namespace: dict) -> typing.Type:
        cls = super().__new__(mcs, name, bases, namespace)
        if not inspect.isabstract(cls):
            document_cls = _bound_document(namespace) or getattr(cls, "document", None)
            assert document_cls is not None, f"{name} must be bound to a document class, e.g. Repository[User, ObjectId]"
            assert issubclass(document_cls, Document), f"{document_cls!r} is not a Document subclass"
            cls.prepare(document_cls)

        return cls


def _bound_document(namespace: dict) -> typing.Optional[typing.Type[Document]]:
    for base in namespace.get("__orig_bases__", ()):
        if typing.get_origin(base) in (Repository, ReadOnlyRepository):
            document_cls, _identity_cls = typing.get_args(base)
            if isinstance(document_cls, type):
                return document_cls
    return None


class ReadOnlyRepository(typing.Generic[DocumentType, IdentityType], metaclass=RepositoryMeta):
    @classmethod
    @abc.abstractmethod
    def prepare(cls, document_cls: typing.Type[DocumentType]) -> None:
        pass

    @abc.abstractmethod
    def get(self, identity: IdentityType) -> DocumentType:
        pass


class Repository(typing.Generic[DocumentType, IdentityType], metaclass=RepositoryMeta):
    @classmethod
    @abc.abstractmethod
    def prepare(cls, document_cls: typing.Type[DocumentType]) -> None:
        pass

    @abc.abstractmethod
    def get(self, identity: IdentityType) -> DocumentType:
        pass

    @abc.abstractmethod
    def save(self, document: DocumentType) -> None:
        pass

    @abc.abstractmethod
    def delete(self, document: DocumentType) -> None:
        pass
