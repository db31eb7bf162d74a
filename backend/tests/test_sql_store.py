import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest

from award_interpreter.db.models.document import StoredDocument
from award_interpreter.persistence.sql_store import SqlAlchemyDocumentStore


def _session_factory(session):
    """An async_sessionmaker stand-in that always yields `session`."""
    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=session)
    context.__aexit__ = AsyncMock(return_value=False)
    return MagicMock(return_value=context)


@pytest.fixture
def session():
    session = MagicMock()
    session.add = MagicMock()
    session.commit = AsyncMock()
    session.get = AsyncMock(return_value=None)
    session.execute = AsyncMock()
    session.delete = AsyncMock()
    return session


class TestSqlAlchemyDocumentStore:

    @pytest.mark.asyncio
    async def test_create_adds_row_and_commits(self, session):
        store = SqlAlchemyDocumentStore(_session_factory(session))

        doc_id = await store.create("standards", {"title": "T"})

        row = session.add.call_args.args[0]
        assert isinstance(row, StoredDocument)
        assert row.collection == "standards"
        assert row.data == {"title": "T"}
        assert str(row.id) == doc_id
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_get_returns_data_with_id(self, session):
        doc_id = uuid.uuid4()
        session.get.return_value = StoredDocument(id=doc_id, collection="standards", data={"title": "T"})
        store = SqlAlchemyDocumentStore(_session_factory(session))

        assert await store.get("standards", str(doc_id)) == {"title": "T", "id": str(doc_id)}

    @pytest.mark.asyncio
    async def test_get_other_collection_or_bad_id(self, session):
        doc_id = uuid.uuid4()
        session.get.return_value = StoredDocument(id=doc_id, collection="score_rules", data={})
        store = SqlAlchemyDocumentStore(_session_factory(session))

        assert await store.get("standards", str(doc_id)) is None
        assert await store.get("standards", "not-a-uuid") is None

    @pytest.mark.asyncio
    async def test_update_replaces_data(self, session):
        doc_id = uuid.uuid4()
        row = StoredDocument(id=doc_id, collection="standards", data={"title": "Old", "notes": "x"})
        session.get.return_value = row
        store = SqlAlchemyDocumentStore(_session_factory(session))

        await store.update("standards", str(doc_id), {"title": "New"})

        assert row.data == {"title": "New"}
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_missing_row(self, session):
        store = SqlAlchemyDocumentStore(_session_factory(session))

        with pytest.raises(LookupError):
            await store.update("standards", str(uuid.uuid4()), {})
        session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_removes_row(self, session):
        doc_id = uuid.uuid4()
        row = StoredDocument(id=doc_id, collection="standards", data={})
        session.get.return_value = row
        store = SqlAlchemyDocumentStore(_session_factory(session))

        assert await store.delete("standards", str(doc_id)) is True
        session.delete.assert_awaited_once_with(row)
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_missing_or_other_collection(self, session):
        doc_id = uuid.uuid4()
        session.get.return_value = StoredDocument(id=doc_id, collection="score_rules", data={})
        store = SqlAlchemyDocumentStore(_session_factory(session))

        assert await store.delete("standards", str(doc_id)) is False
        assert await store.delete("standards", "not-a-uuid") is False
        session.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_where_reports_rowcount(self, session):
        session.execute.return_value = MagicMock(rowcount=3)
        store = SqlAlchemyDocumentStore(_session_factory(session))

        assert await store.delete_where("score_rules", "standardId", "abc") == 3
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_find_maps_rows(self, session):
        first, second = uuid.uuid4(), uuid.uuid4()
        result = MagicMock()
        result.scalars.return_value.all.return_value = [
            StoredDocument(id=first, collection="score_rules", data={"order": 0}),
            StoredDocument(id=second, collection="score_rules", data={"order": 1}),
        ]
        session.execute.return_value = result
        store = SqlAlchemyDocumentStore(_session_factory(session))

        rows = await store.find("score_rules", "standardId", "abc")

        assert rows == [{"order": 0, "id": str(first)}, {"order": 1, "id": str(second)}]
