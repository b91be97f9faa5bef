"""
Tests for the SQLite document store.

Tests cover:
1. Project CRUD and name lookup
2. Document slots and uniqueness
3. Version snapshots
4. Edges and cascading deletes
5. Transactions (commit, rollback, nesting)
6. Conversation logs
"""

from datetime import UTC, datetime, timedelta

import pytest

from pmgraph.config import Config, StorageConfig
from pmgraph.core.store.factory import DocumentStoreFactory
from pmgraph.core.store.sqlite_store import SQLiteDocumentStore
from pmgraph.models.conversation import ConversationLog, UpdateApplied
from pmgraph.models.document import (
    DocType,
    Document,
    DocumentVersion,
    UpdateMode,
    UpdateTrigger,
)
from pmgraph.models.edge import EdgeType, ProjectEdge
from pmgraph.models.project import ProjectNode, ProjectStatus
from pmgraph.utils.exceptions import ConfigurationError, ConstraintViolationError, StoreError


def make_document(project_id: str, doc_type: DocType = DocType.TODO, content: str = "x") -> Document:
    return Document(
        project_id=project_id,
        doc_type=doc_type,
        file_path=f"p/{doc_type.value}.md",
        update_mode=UpdateMode.APPEND,
        content=content,
    )


@pytest.mark.unit
class TestProjects:
    """Tests for project operations."""

    @pytest.mark.asyncio
    async def test_add_and_get_project(self, store):
        """Test a project round-trips through the store."""
        project = ProjectNode(name="api", path="/srv/api", tech_stack=["go", "redis"], owner="ops")
        await store.add_project(project)

        loaded = await store.get_project(project.id)

        assert loaded is not None
        assert loaded.id == project.id
        assert loaded.tech_stack == ["go", "redis"]
        assert loaded.owner == "ops"
        assert loaded.status == ProjectStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_get_project_by_name(self, store):
        project = ProjectNode(name="web", path="/srv/web")
        await store.add_project(project)

        assert (await store.get_project_by_name("web")).id == project.id
        assert await store.get_project_by_name("missing") is None

    @pytest.mark.asyncio
    async def test_duplicate_name_violates_constraint(self, store):
        """Test names are unique."""
        await store.add_project(ProjectNode(name="api", path="/a"))

        with pytest.raises(ConstraintViolationError):
            await store.add_project(ProjectNode(name="api", path="/b"))

    @pytest.mark.asyncio
    async def test_list_projects_by_recency_and_status(self, store):
        """Test list order and status filter."""
        now = datetime.now(UTC)
        old = ProjectNode(name="old", path="/o", updated_at=now - timedelta(days=1))
        new = ProjectNode(name="new", path="/n", updated_at=now, status=ProjectStatus.PAUSED)
        await store.add_project(old)
        await store.add_project(new)

        assert [p.name for p in await store.list_projects()] == ["new", "old"]
        assert [p.name for p in await store.list_projects(ProjectStatus.PAUSED)] == ["new"]

    @pytest.mark.asyncio
    async def test_update_project(self, store):
        project = ProjectNode(name="api", path="/a")
        await store.add_project(project)

        await store.update_project(
            project.model_copy(update={"display_name": "API", "status": ProjectStatus.ARCHIVED})
        )

        loaded = await store.get_project(project.id)
        assert loaded.display_name == "API"
        assert loaded.status == ProjectStatus.ARCHIVED

    @pytest.mark.asyncio
    async def test_delete_project_cascades(self, store):
        """Test documents, versions and edges go with the project."""
        a = ProjectNode(name="a", path="/a")
        b = ProjectNode(name="b", path="/b")
        await store.add_project(a)
        await store.add_project(b)
        document = make_document(a.id)
        await store.add_document(document)
        await store.add_version(
            DocumentVersion(document_id=document.id, content="x", version_number=1)
        )
        await store.add_edge(ProjectEdge(from_id=a.id, to_id=b.id, type=EdgeType.USES))

        assert await store.delete_project(a.id) is True

        assert await store.get_documents(a.id) == []
        assert await store.get_versions(document.id) == []
        assert await store.get_edges(b.id) == []
        assert await store.delete_project(a.id) is False


@pytest.mark.unit
class TestDocuments:
    """Tests for document and version operations."""

    @pytest.mark.asyncio
    async def test_slot_is_unique(self, store):
        """Test one document per (project, doc_type)."""
        project = ProjectNode(name="api", path="/a")
        await store.add_project(project)
        await store.add_document(make_document(project.id))

        with pytest.raises(ConstraintViolationError):
            await store.add_document(make_document(project.id))

    @pytest.mark.asyncio
    async def test_document_requires_project(self, store):
        """Test foreign keys are enforced."""
        with pytest.raises(ConstraintViolationError):
            await store.add_document(make_document("proj_missing"))

    @pytest.mark.asyncio
    async def test_update_document(self, store):
        project = ProjectNode(name="api", path="/a")
        await store.add_project(project)
        document = make_document(project.id)
        await store.add_document(document)

        await store.update_document(document.model_copy(update={"content": "new", "version": 2}))

        loaded = await store.get_document(project.id, DocType.TODO)
        assert loaded.content == "new"
        assert loaded.version == 2

    @pytest.mark.asyncio
    async def test_versions_newest_first(self, store):
        project = ProjectNode(name="api", path="/a")
        await store.add_project(project)
        document = make_document(project.id)
        await store.add_document(document)
        for n in (1, 2, 3):
            await store.add_version(
                DocumentVersion(
                    document_id=document.id,
                    content=f"v{n}",
                    version_number=n,
                    trigger=UpdateTrigger.AUTO,
                )
            )

        versions = await store.get_versions(document.id)

        assert [v.version_number for v in versions] == [3, 2, 1]
        assert versions[0].trigger == UpdateTrigger.AUTO
        assert (await store.get_version(versions[1].id)).content == "v2"

    @pytest.mark.asyncio
    async def test_duplicate_version_number_rejected(self, store):
        project = ProjectNode(name="api", path="/a")
        await store.add_project(project)
        document = make_document(project.id)
        await store.add_document(document)
        await store.add_version(DocumentVersion(document_id=document.id, content="a", version_number=1))

        with pytest.raises(ConstraintViolationError):
            await store.add_version(
                DocumentVersion(document_id=document.id, content="b", version_number=1)
            )

    @pytest.mark.asyncio
    async def test_query_documents_filters(self, store):
        """Test scoping by project and doc type, with project names attached."""
        a = ProjectNode(name="a", path="/a")
        b = ProjectNode(name="b", path="/b")
        await store.add_project(a)
        await store.add_project(b)
        await store.add_document(make_document(a.id, DocType.TODO))
        await store.add_document(make_document(a.id, DocType.NOTES))
        await store.add_document(make_document(b.id, DocType.TODO))

        everything = await store.query_documents()
        scoped = await store.query_documents(project_id=a.id)
        typed = await store.query_documents(doc_types=[DocType.NOTES])

        assert len(everything) == 3
        assert {name for _, name in scoped} == {"a"}
        assert [(d.doc_type, name) for d, name in typed] == [(DocType.NOTES, "a")]


@pytest.mark.unit
class TestEdges:
    """Tests for edge operations."""

    @pytest.mark.asyncio
    async def test_edges_in_both_directions(self, store):
        a = ProjectNode(name="a", path="/a")
        b = ProjectNode(name="b", path="/b")
        await store.add_project(a)
        await store.add_project(b)
        edge = ProjectEdge(from_id=a.id, to_id=b.id, type=EdgeType.DEPENDS_ON, bidirectional=True)
        await store.add_edge(edge)

        assert [e.id for e in await store.get_edges(a.id)] == [edge.id]
        assert [e.id for e in await store.get_edges(b.id)] == [edge.id]
        assert (await store.get_edge(edge.id)).bidirectional is True

    @pytest.mark.asyncio
    async def test_delete_edge(self, store):
        a = ProjectNode(name="a", path="/a")
        await store.add_project(a)
        edge = ProjectEdge(from_id=a.id, to_id=a.id, type=EdgeType.RELATED)
        await store.add_edge(edge)

        assert await store.delete_edge(edge.id) is True
        assert await store.delete_edge(edge.id) is False

    @pytest.mark.asyncio
    async def test_edge_requires_endpoints(self, store):
        with pytest.raises(ConstraintViolationError):
            await store.add_edge(ProjectEdge(from_id="proj_x", to_id="proj_y", type=EdgeType.USES))


@pytest.mark.unit
class TestTransactions:
    """Tests for transaction handling."""

    @pytest.mark.asyncio
    async def test_commit(self, store):
        project = ProjectNode(name="api", path="/a")

        async with store.transaction():
            await store.add_project(project)
            await store.add_document(make_document(project.id))

        assert len(await store.get_documents(project.id)) == 1

    @pytest.mark.asyncio
    async def test_rollback_on_error(self, store):
        """Test nothing from a failed unit of work is visible."""
        project = ProjectNode(name="api", path="/a")

        with pytest.raises(ConstraintViolationError):
            async with store.transaction():
                await store.add_project(project)
                await store.add_document(make_document(project.id))
                await store.add_document(make_document(project.id))

        assert await store.get_project(project.id) is None

    @pytest.mark.asyncio
    async def test_nested_transaction_rejected(self, store):
        with pytest.raises(StoreError):
            async with store.transaction():
                async with store.transaction():
                    pass


@pytest.mark.unit
class TestConversations:
    """Tests for conversation logs."""

    @pytest.mark.asyncio
    async def test_add_and_list(self, store):
        project = ProjectNode(name="api", path="/a")
        await store.add_project(project)
        log = ConversationLog(
            project_id=project.id,
            summary="We fixed the login bug",
            updates_applied=[
                UpdateApplied(doc_type=DocType.PROGRESS, mode=UpdateMode.UPSERT, snippet="## Current")
            ],
        )
        await store.add_conversation(log)

        logs = await store.get_conversations(project.id)

        assert len(logs) == 1
        assert logs[0].summary == "We fixed the login bug"
        assert logs[0].updates_applied[0].doc_type == DocType.PROGRESS

    @pytest.mark.asyncio
    async def test_log_survives_project_deletion(self, store):
        """Test logs are detached, not deleted, with their project."""
        project = ProjectNode(name="api", path="/a")
        await store.add_project(project)
        log = ConversationLog(project_id=project.id, summary="hello")
        await store.add_conversation(log)

        await store.delete_project(project.id)

        row = await store._fetchone("SELECT project_id FROM conversation_logs WHERE id = ?", (log.id,))
        assert row["project_id"] is None


@pytest.mark.unit
class TestDocumentStoreFactory:
    """Tests for store creation from configuration."""

    def test_creates_sqlite_store(self, tmp_path):
        config = Config(storage=StorageConfig(db_path=str(tmp_path / "db" / "graph.db")))

        store = DocumentStoreFactory.create(config)

        assert isinstance(store, SQLiteDocumentStore)
        assert (tmp_path / "db").is_dir()

    def test_unknown_backend(self):
        config = Config(storage=StorageConfig(backend="postgres"))

        with pytest.raises(ConfigurationError):
            DocumentStoreFactory.create(config)
