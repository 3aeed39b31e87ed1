from document_framework.diff import Changeset, diff, flatten
from document_framework.document import AttributeEvent, Document, EmbeddedDocument, InvalidSchema
from document_framework.identity import InvalidIdentifier, identifier_to_string, normalize_identifier
from document_framework.repository import DocumentNotFound, ReadOnlyRepository, Repository
from document_framework.snapshot import capture, capture_field
from document_framework.values import FieldKind
