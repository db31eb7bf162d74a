from award_interpreter.persistence.sql_store import SqlAlchemyDocumentStore
from award_interpreter.persistence.store import DocumentStore, InMemoryDocumentStore, to_store_fields
from award_interpreter.persistence.writer import PersistenceWriter, content_hash

__all__ = [
    "DocumentStore",
    "InMemoryDocumentStore",
    "PersistenceWriter",
    "SqlAlchemyDocumentStore",
    "content_hash",
    "to_store_fields",
]
