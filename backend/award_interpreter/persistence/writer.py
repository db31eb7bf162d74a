"""
PersistenceWriter — CanonicalRecord → rows in a DocumentStore.

One record becomes:
    standards            base row (record fields, source text and proposal, audit stamps)
    score_rules          one row per rule, conditions embedded, `order` index
    team_management      one row when the record has a team
    interpretation_logs  one row with the original proposal

Every row goes through `to_store_fields` before it reaches the store.

A save whose child rows fail is undone before the error propagates.
"""

from __future__ import annotations

import hashlib
from datetime import datetime, timezone
from typing import Any

from award_interpreter.core.constants import Collection
from award_interpreter.core.logging import get_logger
from award_interpreter.pipeline.errors import PersistenceError
from award_interpreter.persistence.store import DocumentStore, to_store_fields
from award_interpreter.processing.dates import is_iso_date
from award_interpreter.schemas.record import CanonicalRecord, ScoreRule, TeamManagement

logger = get_logger(__name__)

# Base-row fields written at creation and carried over by update()
CREATION_FIELDS = ("createdBy", "createdAt")

# Base-row provenance kept by update() when the incoming record has no text
SOURCE_FIELDS = ("sourceText", "sourceContentHash")

# Record fields that live in child rows or are serialized separately
_NON_BASE_FIELDS = {"specific", "score_rules", "team_management", "proposal"}

_CHILD_COLLECTIONS = (Collection.SCORE_RULES, Collection.TEAM_MANAGEMENT)


def content_hash(text: str) -> str:
    """SHA-256 hex digest of the extracted text."""
    return hashlib.sha256((text or "").encode("utf-8")).hexdigest()


class PersistenceWriter:
    """Writes canonical records and their children to a document store."""

    def __init__(self, store: DocumentStore, source: str = "openai") -> None:
        self.store = store
        self.source = source

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()

    # ═══════════════════════════════════════════
    #  Public API
    # ═══════════════════════════════════════════

    async def save(self, record: CanonicalRecord, user_id: str = "system") -> str:
        """Persist a record and its children; return the base row id."""
        now = self._now()
        base = self._base_fields(record)
        base.update({"createdBy": user_id, "createdAt": now, "updatedAt": now})

        record_id = await self._write(
            Collection.STANDARDS, self.store.create(Collection.STANDARDS, to_store_fields(base))
        )
        logger.info(
            "Standard created",
            record_id=record_id,
            award_type=str(record.award_type),
            user_id=user_id,
        )

        try:
            await self._write_children(record_id, record)
        except PersistenceError:
            await self._discard_standard(record_id)
            raise

        await self._write_log(record_id, record, user_id, now)
        return record_id

    async def update(self, record_id: str, record: CanonicalRecord, user_id: str = "system") -> str:
        """
        Replace an existing record in place.

        The base row keeps its id, creation stamps and (when the incoming
        record carries no text) its source provenance.  New score-rule and
        team-management rows are written before the old ones are removed,
        so a failed update leaves the stored standard as it was.
        """
        existing = await self._write(
            Collection.STANDARDS, self.store.get(Collection.STANDARDS, record_id)
        )
        if existing is None:
            raise PersistenceError(
                f"Standard {record_id} does not exist",
                collection=Collection.STANDARDS,
                details={"record_id": record_id},
            )

        base = self._base_fields(record)
        carried = CREATION_FIELDS if record.source_text else CREATION_FIELDS + SOURCE_FIELDS
        for name in carried:
            if name in existing:
                base[name] = existing[name]
        if record.proposal is None and "proposal" in existing:
            base["proposal"] = existing["proposal"]
        base.update({"updatedBy": user_id, "updatedAt": self._now()})

        old_children = [
            (collection, row["id"])
            for collection in _CHILD_COLLECTIONS
            for row in await self._write(
                collection, self.store.find(collection, "standardId", record_id)
            )
        ]

        created: list[tuple[str, str]] = []
        try:
            await self._write_children(record_id, record, created)
            await self._write(
                Collection.STANDARDS,
                self.store.update(Collection.STANDARDS, record_id, to_store_fields(base)),
            )
        except PersistenceError:
            await self._discard(created)
            raise

        for collection, child_id in old_children:
            await self._write(collection, self.store.delete(collection, child_id))
        logger.debug("Child rows replaced", record_id=record_id, removed=len(old_children))

        logger.info("Standard updated", record_id=record_id, user_id=user_id)
        return record_id

    async def load(self, record_id: str) -> CanonicalRecord | None:
        """Read a persisted record back, children included."""
        base = await self._write(Collection.STANDARDS, self.store.get(Collection.STANDARDS, record_id))
        if base is None:
            return None

        rule_rows = await self._write(
            Collection.SCORE_RULES,
            self.store.find(Collection.SCORE_RULES, "standardId", record_id),
        )
        team_rows = await self._write(
            Collection.TEAM_MANAGEMENT,
            self.store.find(Collection.TEAM_MANAGEMENT, "standardId", record_id),
        )

        rules = [
            ScoreRule.model_validate(row)
            for row in sorted(rule_rows, key=lambda row: row.get("order", 0))
        ]
        team = (
            TeamManagement.model_validate({"positions": team_rows[0].get("positions", [])})
            if team_rows
            else None
        )

        return CanonicalRecord.model_validate({
            **base,
            "specific": {
                "awardType": base.get("awardType"),
                "no": base.get("no"),
                "guidelines": base.get("guidelines"),
                "objective": base.get("objective"),
                "nationalAllocation": base.get("nationalAllocation"),
                "areaAllocation": base.get("areaAllocation"),
                "status": base.get("status"),
            },
            "scoreRules": rules,
            "teamManagement": team,
        })

    async def interpretation_history(self, user_id: str, limit: int = 10) -> list[dict[str, Any]]:
        """Most recent interpretation log rows written by `user_id`."""
        rows = await self._write(
            Collection.INTERPRETATION_LOGS,
            self.store.find(Collection.INTERPRETATION_LOGS, "createdBy", user_id),
        )
        rows.sort(key=lambda row: row.get("createdAt", ""), reverse=True)
        return rows[:limit]

    # ═══════════════════════════════════════════
    #  Row builders
    # ═══════════════════════════════════════════

    def _base_fields(self, record: CanonicalRecord) -> dict[str, Any]:
        fields = record.model_dump(by_alias=True, exclude=_NON_BASE_FIELDS)
        # award-specific fields are stored flat, next to awardType
        fields.update(record.specific.model_dump(by_alias=True))
        fields["year"] = (
            int(record.deadline[:4]) if is_iso_date(record.deadline) else datetime.now(timezone.utc).year
        )
        fields["interpretationSource"] = self.source
        fields["sourceContentHash"] = content_hash(record.source_text)
        fields["proposal"] = record.proposal.model_dump(by_alias=True, mode="json") if record.proposal else None
        return fields

    @staticmethod
    def _rule_fields(record_id: str, order: int, rule: ScoreRule) -> dict[str, Any]:
        fields = rule.model_dump(by_alias=True, exclude={"id"})
        fields.update({"standardId": record_id, "order": order})
        return fields

    async def _write_children(
        self,
        record_id: str,
        record: CanonicalRecord,
        created: list[tuple[str, str]] | None = None,
    ) -> None:
        """Create child rows, appending each (collection, id) to `created`."""
        created = [] if created is None else created
        for order, rule in enumerate(record.score_rules):
            child_id = await self._write(
                Collection.SCORE_RULES,
                self.store.create(
                    Collection.SCORE_RULES,
                    to_store_fields(self._rule_fields(record_id, order, rule)),
                ),
            )
            created.append((Collection.SCORE_RULES, child_id))

        if record.team_management is not None:
            team = {
                "standardId": record_id,
                "awardType": str(record.award_type),
                "positions": record.team_management.model_dump(by_alias=True)["positions"],
                "members": [],
            }
            child_id = await self._write(
                Collection.TEAM_MANAGEMENT,
                self.store.create(Collection.TEAM_MANAGEMENT, to_store_fields(team)),
            )
            created.append((Collection.TEAM_MANAGEMENT, child_id))

    # ═══════════════════════════════════════════
    #  Undo after a failed write
    # ═══════════════════════════════════════════

    async def _discard_standard(self, record_id: str) -> None:
        """Remove a half-written standard: its child rows, then the base row."""
        for collection in _CHILD_COLLECTIONS:
            try:
                await self.store.delete_where(collection, "standardId", record_id)
            except Exception as exc:
                logger.warning(
                    "Child rows not removed after failed save",
                    record_id=record_id,
                    collection=str(collection),
                    error=str(exc),
                )
        await self._discard([(Collection.STANDARDS, record_id)])

    async def _discard(self, rows: list[tuple[str, str]]) -> None:
        # the caller re-raises the original failure
        for collection, document_id in rows:
            try:
                await self.store.delete(collection, document_id)
            except Exception as exc:
                logger.warning(
                    "Row not removed after failed write",
                    collection=str(collection),
                    document_id=document_id,
                    error=str(exc),
                )

    async def _write_log(self, record_id: str, record: CanonicalRecord, user_id: str, now: str) -> None:
        entry = {
            "standardId": record_id,
            "pdfFilename": record.source_filename,
            "pdfContentHash": content_hash(record.source_text),
            "proposal": record.proposal.model_dump(by_alias=True, mode="json") if record.proposal else None,
            "confidence": record.confidence,
            "extractedKeywords": record.extracted_keywords,
            "notes": record.notes,
            "interpretationSource": self.source,
            "createdBy": user_id,
            "createdAt": now,
        }
        try:
            await self.store.create(Collection.INTERPRETATION_LOGS, to_store_fields(entry))
        except Exception as exc:
            # the standard itself is already stored
            logger.warning(
                "Interpretation log write failed",
                record_id=record_id,
                error=str(exc),
                exc_info=True,
            )

    @staticmethod
    async def _write(collection: str, operation: Any) -> Any:
        """Await a store call, wrapping store failures in PersistenceError."""
        try:
            return await operation
        except PersistenceError:
            raise
        except Exception as exc:
            raise PersistenceError(
                f"Store operation on '{collection}' failed: {exc}",
                collection=str(collection),
                details={"error_type": type(exc).__name__},
            ) from exc
