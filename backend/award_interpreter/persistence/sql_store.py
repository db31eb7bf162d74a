"""
SQLAlchemy-backed document store (Postgres via asyncpg in production).

All collections share the `documents` table; see db.models.document.
One short-lived session per call, committed before returning.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from award_interpreter.core.logging import get_logger
from award_interpreter.db.models.base import generate_uuid, utcnow
from award_interpreter.db.models.document import StoredDocument
from award_interpreter.persistence.store import DocumentStore

logger = get_logger(__name__)


class SqlAlchemyDocumentStore(DocumentStore):
    """DocumentStore over an async SQLAlchemy session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        if session_factory is None:
            from award_interpreter.db.session import async_session

            session_factory = async_session
        self.session_factory = session_factory

    @staticmethod
    def _as_uuid(document_id: str) -> uuid.UUID | None:
        try:
            return uuid.UUID(str(document_id))
        except ValueError:
            return None

    @staticmethod
    def _to_dict(row: StoredDocument) -> dict[str, Any]:
        return {**(row.data or {}), "id": str(row.id)}

    async def create(self, collection: str, fields: dict[str, Any]) -> str:
        document_id = generate_uuid()
        async with self.session_factory() as session:
            session.add(StoredDocument(id=document_id, collection=collection, data=fields))
            await session.commit()

        logger.debug("Document created", collection=collection, document_id=str(document_id))
        return str(document_id)

    async def update(self, collection: str, document_id: str, fields: dict[str, Any]) -> None:
        key = self._as_uuid(document_id)
        async with self.session_factory() as session:
            row = await session.get(StoredDocument, key) if key else None
            if row is None or row.collection != collection:
                raise LookupError(f"{collection}/{document_id} does not exist")
            row.data = fields
            row.updated_at = utcnow()
            await session.commit()

    async def delete(self, collection: str, document_id: str) -> bool:
        key = self._as_uuid(document_id)
        async with self.session_factory() as session:
            row = await session.get(StoredDocument, key) if key else None
            if row is None or row.collection != collection:
                return False
            await session.delete(row)
            await session.commit()
        return True

    async def delete_where(self, collection: str, field: str, value: Any) -> int:
        async with self.session_factory() as session:
            result = await session.execute(
                delete(StoredDocument).where(
                    StoredDocument.collection == collection,
                    StoredDocument.data[field].as_string() == str(value),
                )
            )
            await session.commit()
        return result.rowcount or 0

    async def get(self, collection: str, document_id: str) -> dict[str, Any] | None:
        key = self._as_uuid(document_id)
        if key is None:
            return None
        async with self.session_factory() as session:
            row = await session.get(StoredDocument, key)
        if row is None or row.collection != collection:
            return None
        return self._to_dict(row)

    async def find(self, collection: str, field: str, value: Any) -> list[dict[str, Any]]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(StoredDocument)
                .where(
                    StoredDocument.collection == collection,
                    StoredDocument.data[field].as_string() == str(value),
                )
                .order_by(StoredDocument.created_at)
            )
            rows = result.scalars().all()
        return [self._to_dict(row) for row in rows]
