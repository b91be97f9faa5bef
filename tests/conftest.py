"""
Shared test fixtures.

Every fixture uses an in-memory SQLite store with function scope, so each
test starts from an empty database.
"""

from collections.abc import AsyncGenerator

import pytest

from pmgraph.config import Config, GraphConfig, SearchConfig
from pmgraph.core.filesystem import FileSync
from pmgraph.core.store.sqlite_store import SQLiteDocumentStore
from pmgraph.models.project import ProjectNode
from pmgraph.services.document_engine import DocumentMergeEngine
from pmgraph.services.graph_engine import GraphContextEngine
from pmgraph.services.project_memory import ProjectMemory
from pmgraph.services.search_engine import SearchEngine


@pytest.fixture
async def store() -> AsyncGenerator[SQLiteDocumentStore, None]:
    """Initialized in-memory store."""
    sqlite_store = SQLiteDocumentStore(db_path=":memory:")
    await sqlite_store.initialize()
    yield sqlite_store
    await sqlite_store.close()


@pytest.fixture
def document_engine(store) -> DocumentMergeEngine:
    return DocumentMergeEngine(store)


@pytest.fixture
def graph_engine(store) -> GraphContextEngine:
    return GraphContextEngine(store, GraphConfig())


@pytest.fixture
def search_engine(store) -> SearchEngine:
    return SearchEngine(store, SearchConfig())


@pytest.fixture
async def memory(store) -> ProjectMemory:
    """Project memory without a file mirror."""
    return ProjectMemory(store=store, config=Config())


@pytest.fixture
def file_sync(tmp_path) -> FileSync:
    return FileSync(tmp_path / "docs")


@pytest.fixture
async def synced_memory(store, file_sync) -> ProjectMemory:
    """Project memory mirroring documents under tmp_path."""
    return ProjectMemory(store=store, config=Config(), file_sync=file_sync)


@pytest.fixture
async def seeded_project(store, document_engine) -> ProjectNode:
    """A project with its eight template documents."""
    project = ProjectNode(name="api", path="/srv/api", tech_stack=["python", "fastapi"])
    async with store.transaction():
        await store.add_project(project)
        await document_engine.seed_documents(project)
    return project
