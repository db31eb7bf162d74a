"""
StoredDocument — generic JSON document row backing the document store.

Every logical collection (standards, score_rules, team_management,
interpretation_logs) shares this table, told apart by `collection`.
"""

from __future__ import annotations

from sqlalchemy import JSON, Column, DateTime, String
from sqlalchemy.dialects.postgresql import JSONB, UUID

from award_interpreter.db.models.base import Base, generate_uuid, utcnow


class StoredDocument(Base):
    """One row per stored document."""

    __tablename__ = "documents"

    id = Column(UUID(as_uuid=True), primary_key=True, default=generate_uuid)
    collection = Column(String(100), nullable=False, index=True)

    # JSONB on Postgres, plain JSON elsewhere
    data = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=dict)

    # ── Audit timestamps ─────────────────────
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<StoredDocument {self.collection}/{self.id}>"
