"""
Document store boundary.

The pipeline only needs a handful of operations from its store, grouped
into logical collections (see core.constants.Collection).  Rows are
plain JSON-compatible dicts; the store assigns ids.

Writes are pure creates or whole-row replacements; nothing here does
read-modify-write on behalf of the caller.
"""

from __future__ import annotations

import copy
import uuid
from abc import ABC, abstractmethod
from typing import Any


def to_store_fields(value: Any) -> Any:
    """
    Drop absent (None) values, recursively.

    This is the one serialization boundary every write goes through;
    the store never sees an absent marker.
    """
    if isinstance(value, dict):
        return {k: to_store_fields(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [to_store_fields(v) for v in value if v is not None]
    return value


class DocumentStore(ABC):
    """Minimal async document store used by PersistenceWriter."""

    @abstractmethod
    async def create(self, collection: str, fields: dict[str, Any]) -> str:
        """Insert a row and return its new id."""
        ...

    @abstractmethod
    async def update(self, collection: str, document_id: str, fields: dict[str, Any]) -> None:
        """Replace the fields of an existing row.  Raises LookupError if it doesn't exist."""
        ...

    @abstractmethod
    async def delete(self, collection: str, document_id: str) -> bool:
        """Delete one row; return False if it wasn't there."""
        ...

    @abstractmethod
    async def delete_where(self, collection: str, field: str, value: Any) -> int:
        """Delete every row whose `field` equals `value`; return how many went."""
        ...

    @abstractmethod
    async def get(self, collection: str, document_id: str) -> dict[str, Any] | None:
        """Fetch one row (with its `id`), or None."""
        ...

    @abstractmethod
    async def find(self, collection: str, field: str, value: Any) -> list[dict[str, Any]]:
        """Fetch every row whose `field` equals `value`, oldest first."""
        ...


class InMemoryDocumentStore(DocumentStore):
    """Dict-backed store for tests and dry runs.  Rows are copied in and out."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}

    def _rows(self, collection: str) -> dict[str, dict[str, Any]]:
        return self._collections.setdefault(collection, {})

    async def create(self, collection: str, fields: dict[str, Any]) -> str:
        document_id = uuid.uuid4().hex
        self._rows(collection)[document_id] = copy.deepcopy(fields)
        return document_id

    async def update(self, collection: str, document_id: str, fields: dict[str, Any]) -> None:
        rows = self._rows(collection)
        if document_id not in rows:
            raise LookupError(f"{collection}/{document_id} does not exist")
        rows[document_id] = copy.deepcopy(fields)

    async def delete(self, collection: str, document_id: str) -> bool:
        return self._rows(collection).pop(document_id, None) is not None

    async def delete_where(self, collection: str, field: str, value: Any) -> int:
        rows = self._rows(collection)
        doomed = [doc_id for doc_id, data in rows.items() if data.get(field) == value]
        for doc_id in doomed:
            del rows[doc_id]
        return len(doomed)

    async def get(self, collection: str, document_id: str) -> dict[str, Any] | None:
        data = self._rows(collection).get(document_id)
        if data is None:
            return None
        return {**copy.deepcopy(data), "id": document_id}

    async def find(self, collection: str, field: str, value: Any) -> list[dict[str, Any]]:
        return [
            {**copy.deepcopy(data), "id": doc_id}
            for doc_id, data in self._rows(collection).items()
            if data.get(field) == value
        ]

    def count(self, collection: str) -> int:
        return len(self._rows(collection))
