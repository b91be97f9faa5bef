"""
SQLite document store implementation.

Uses a single aiosqlite connection in autocommit mode; multi-statement
units of work go through ``transaction()``.
"""

import asyncio
import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Any

import aiosqlite

from pmgraph.core.store.base import DocumentStore
from pmgraph.models.conversation import ConversationLog, UpdateApplied
from pmgraph.models.document import (
    DocType,
    Document,
    DocumentVersion,
    UpdateMode,
    UpdateTrigger,
)
from pmgraph.models.edge import EdgeType, ProjectEdge
from pmgraph.models.project import ProjectNode, ProjectStatus, ProjectType
from pmgraph.utils.exceptions import ConstraintViolationError, StoreError
from pmgraph.utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS project_nodes (
        id TEXT PRIMARY KEY,
        name TEXT UNIQUE NOT NULL,
        display_name TEXT NOT NULL,
        path TEXT NOT NULL,
        type TEXT NOT NULL CHECK(type IN ('project', 'module')),
        tech_stack TEXT NOT NULL DEFAULT '[]',
        owner TEXT NOT NULL DEFAULT '',
        status TEXT NOT NULL DEFAULT 'active' CHECK(status IN ('active', 'paused', 'archived')),
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS documents (
        id TEXT PRIMARY KEY,
        project_id TEXT NOT NULL,
        doc_type TEXT NOT NULL CHECK(doc_type IN
            ('todo', 'confirm', 'progress', 'delays', 'prd', 'memory', 'notes', 'qa')),
        file_path TEXT NOT NULL,
        update_mode TEXT NOT NULL CHECK(update_mode IN ('upsert', 'append')),
        content TEXT NOT NULL DEFAULT '',
        version INTEGER NOT NULL DEFAULT 1,
        last_modified TEXT NOT NULL,
        FOREIGN KEY (project_id) REFERENCES project_nodes(id) ON DELETE CASCADE,
        UNIQUE(project_id, doc_type)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS project_edges (
        id TEXT PRIMARY KEY,
        from_id TEXT NOT NULL,
        to_id TEXT NOT NULL,
        type TEXT NOT NULL CHECK(type IN ('depends_on', 'uses', 'related', 'parent_child')),
        description TEXT NOT NULL DEFAULT '',
        strength REAL NOT NULL DEFAULT 0.5 CHECK(strength >= 0.0 AND strength <= 1.0),
        bidirectional INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        FOREIGN KEY (from_id) REFERENCES project_nodes(id) ON DELETE CASCADE,
        FOREIGN KEY (to_id) REFERENCES project_nodes(id) ON DELETE CASCADE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS document_versions (
        id TEXT PRIMARY KEY,
        document_id TEXT NOT NULL,
        content TEXT NOT NULL,
        change_summary TEXT NOT NULL DEFAULT '',
        trigger TEXT NOT NULL CHECK(trigger IN ('auto', 'manual')),
        version_number INTEGER NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY (document_id) REFERENCES documents(id) ON DELETE CASCADE,
        UNIQUE(document_id, version_number)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS conversation_logs (
        id TEXT PRIMARY KEY,
        project_id TEXT,
        summary TEXT NOT NULL DEFAULT '',
        updates_applied TEXT NOT NULL DEFAULT '[]',
        conversation_start TEXT NOT NULL,
        conversation_end TEXT NOT NULL,
        FOREIGN KEY (project_id) REFERENCES project_nodes(id) ON DELETE SET NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_documents_project ON documents(project_id)",
    "CREATE INDEX IF NOT EXISTS idx_documents_type ON documents(doc_type)",
    "CREATE INDEX IF NOT EXISTS idx_edges_from ON project_edges(from_id)",
    "CREATE INDEX IF NOT EXISTS idx_edges_to ON project_edges(to_id)",
    "CREATE INDEX IF NOT EXISTS idx_versions_doc ON document_versions(document_id)",
    "CREATE INDEX IF NOT EXISTS idx_conv_project ON conversation_logs(project_id)",
]


class SQLiteDocumentStore(DocumentStore):
    """
    SQLite-based store for projects, documents, edges and versions.

    Features:
    - Fast local storage (file or ``:memory:``)
    - Foreign keys with cascading deletes
    - Explicit transactions serialized by an asyncio lock
    """

    def __init__(self, db_path: str = "data/pmgraph.db"):
        """
        Initialize SQLite document store.

        Args:
            db_path: Path to SQLite database file, or ":memory:"
        """
        self.db_path = db_path
        self.connection: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()
        self._tx_owner: asyncio.Task | None = None

        if db_path != ":memory:":
            Path(db_path).expanduser().parent.mkdir(parents=True, exist_ok=True)

    async def connect(self) -> None:
        """Establish connection to SQLite."""
        if self.connection is None:
            db_path = self.db_path if self.db_path == ":memory:" else str(Path(self.db_path).expanduser())
            # isolation_level=None: autocommit, transactions are explicit
            self.connection = await aiosqlite.connect(db_path, isolation_level=None)
            self.connection.row_factory = aiosqlite.Row
            await self.connection.execute("PRAGMA foreign_keys = ON")
            await self.connection.execute("PRAGMA journal_mode = WAL")

    async def initialize(self) -> None:
        """Initialize database schema."""
        await self.connect()
        async with self._lock:
            for statement in SCHEMA:
                await self.connection.execute(statement)
        logger.debug(f"SQLite schema ready at {self.db_path}")

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["SQLiteDocumentStore"]:
        """Run the enclosed store calls as one BEGIN IMMEDIATE ... COMMIT unit."""
        if self._owns_transaction():
            raise StoreError("Nested transactions are not supported")

        await self.connect()
        async with self._lock:
            self._tx_owner = asyncio.current_task()
            await self.connection.execute("BEGIN IMMEDIATE")
            try:
                yield self
            except BaseException:
                await self.connection.execute("ROLLBACK")
                raise
            else:
                await self.connection.execute("COMMIT")
            finally:
                self._tx_owner = None

    def _owns_transaction(self) -> bool:
        return self._tx_owner is not None and self._tx_owner is asyncio.current_task()

    @asynccontextmanager
    async def _access(self) -> AsyncIterator[aiosqlite.Connection]:
        """Serialize access unless the caller already owns the open transaction."""
        if self._owns_transaction():
            yield self.connection
            return

        await self.connect()
        async with self._lock:
            yield self.connection

    async def _execute(self, query: str, params: tuple | list = ()) -> int:
        """Run a write statement and return the affected row count."""
        async with self._access() as conn:
            try:
                cursor = await conn.execute(query, params)
            except aiosqlite.IntegrityError as e:
                raise ConstraintViolationError(str(e), context={"query": query.strip()}) from e
            return cursor.rowcount

    async def _fetchone(self, query: str, params: tuple | list = ()) -> aiosqlite.Row | None:
        async with self._access() as conn:
            cursor = await conn.execute(query, params)
            return await cursor.fetchone()

    async def _fetchall(self, query: str, params: tuple | list = ()) -> list[aiosqlite.Row]:
        async with self._access() as conn:
            cursor = await conn.execute(query, params)
            return list(await cursor.fetchall())

    # ═══════════════════════════════════════════════════════════
    # PROJECT OPERATIONS
    # ═══════════════════════════════════════════════════════════

    async def add_project(self, project: ProjectNode) -> None:
        """Insert a project record."""
        await self._execute(
            """
            INSERT INTO project_nodes (
                id, name, display_name, path, type, tech_stack, owner, status,
                created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                project.id,
                project.name,
                project.display_name,
                project.path,
                project.type.value,
                json.dumps(project.tech_stack),
                project.owner,
                project.status.value,
                project.created_at.isoformat(),
                project.updated_at.isoformat(),
            ),
        )

    async def get_project(self, project_id: str) -> ProjectNode | None:
        """Retrieve a project by ID."""
        row = await self._fetchone("SELECT * FROM project_nodes WHERE id = ?", (project_id,))
        return self._row_to_project(row) if row else None

    async def get_project_by_name(self, name: str) -> ProjectNode | None:
        """Retrieve a project by name."""
        row = await self._fetchone("SELECT * FROM project_nodes WHERE name = ?", (name,))
        return self._row_to_project(row) if row else None

    async def list_projects(self, status: ProjectStatus | None = None) -> list[ProjectNode]:
        """List projects, most recently updated first."""
        query = "SELECT * FROM project_nodes"
        params: list[Any] = []

        if status:
            query += " WHERE status = ?"
            params.append(ProjectStatus(status).value)

        query += " ORDER BY updated_at DESC"

        rows = await self._fetchall(query, params)
        return [self._row_to_project(row) for row in rows]

    async def update_project(self, project: ProjectNode) -> None:
        """Persist mutable project fields."""
        await self._execute(
            """
            UPDATE project_nodes
            SET display_name = ?, status = ?, tech_stack = ?, owner = ?, updated_at = ?
            WHERE id = ?
            """,
            (
                project.display_name,
                project.status.value,
                json.dumps(project.tech_stack),
                project.owner,
                project.updated_at.isoformat(),
                project.id,
            ),
        )

    async def delete_project(self, project_id: str) -> bool:
        """Delete a project; documents, edges and versions cascade."""
        deleted = await self._execute("DELETE FROM project_nodes WHERE id = ?", (project_id,))
        return deleted > 0

    # ═══════════════════════════════════════════════════════════
    # DOCUMENT OPERATIONS
    # ═══════════════════════════════════════════════════════════

    async def add_document(self, document: Document) -> None:
        """Insert a document slot."""
        await self._execute(
            """
            INSERT INTO documents (
                id, project_id, doc_type, file_path, update_mode, content, version, last_modified
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                document.id,
                document.project_id,
                document.doc_type.value,
                document.file_path,
                document.update_mode.value,
                document.content,
                document.version,
                document.last_modified.isoformat(),
            ),
        )

    async def get_document(self, project_id: str, doc_type: DocType) -> Document | None:
        """Retrieve the document in a (project, doc_type) slot."""
        row = await self._fetchone(
            "SELECT * FROM documents WHERE project_id = ? AND doc_type = ?",
            (project_id, DocType(doc_type).value),
        )
        return self._row_to_document(row) if row else None

    async def get_documents(self, project_id: str) -> list[Document]:
        """Retrieve all documents of a project ordered by doc_type."""
        rows = await self._fetchall(
            "SELECT * FROM documents WHERE project_id = ? ORDER BY doc_type", (project_id,)
        )
        return [self._row_to_document(row) for row in rows]

    async def update_document(self, document: Document) -> None:
        """Persist content, version and last_modified."""
        await self._execute(
            "UPDATE documents SET content = ?, version = ?, last_modified = ? WHERE id = ?",
            (
                document.content,
                document.version,
                document.last_modified.isoformat(),
                document.id,
            ),
        )

    async def query_documents(
        self,
        project_id: str | None = None,
        doc_types: list[DocType] | None = None,
    ) -> list[tuple[Document, str]]:
        """Fetch search candidates joined with their project name."""
        query = """
            SELECT d.*, p.name AS project_name
            FROM documents d
            JOIN project_nodes p ON d.project_id = p.id
            WHERE 1=1
        """
        params: list[Any] = []

        if project_id:
            query += " AND d.project_id = ?"
            params.append(project_id)

        if doc_types:
            placeholders = ",".join("?" * len(doc_types))
            query += f" AND d.doc_type IN ({placeholders})"
            params.extend(DocType(t).value for t in doc_types)

        query += " ORDER BY d.last_modified DESC, d.rowid DESC"

        rows = await self._fetchall(query, params)
        return [(self._row_to_document(row), row["project_name"]) for row in rows]

    # ═══════════════════════════════════════════════════════════
    # VERSION OPERATIONS
    # ═══════════════════════════════════════════════════════════

    async def add_version(self, version: DocumentVersion) -> None:
        """Append a version snapshot."""
        await self._execute(
            """
            INSERT INTO document_versions (
                id, document_id, content, change_summary, trigger, version_number, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                version.id,
                version.document_id,
                version.content,
                version.change_summary,
                version.trigger.value,
                version.version_number,
                version.created_at.isoformat(),
            ),
        )

    async def get_versions(self, document_id: str) -> list[DocumentVersion]:
        """List snapshots newest first."""
        rows = await self._fetchall(
            """
            SELECT * FROM document_versions
            WHERE document_id = ?
            ORDER BY version_number DESC
            """,
            (document_id,),
        )
        return [self._row_to_version(row) for row in rows]

    async def get_version(self, version_id: str) -> DocumentVersion | None:
        """Retrieve one snapshot."""
        row = await self._fetchone("SELECT * FROM document_versions WHERE id = ?", (version_id,))
        return self._row_to_version(row) if row else None

    # ═══════════════════════════════════════════════════════════
    # EDGE OPERATIONS
    # ═══════════════════════════════════════════════════════════

    async def add_edge(self, edge: ProjectEdge) -> None:
        """Insert an edge."""
        await self._execute(
            """
            INSERT INTO project_edges (
                id, from_id, to_id, type, description, strength, bidirectional, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                edge.id,
                edge.from_id,
                edge.to_id,
                edge.type.value,
                edge.description,
                edge.strength,
                1 if edge.bidirectional else 0,
                edge.created_at.isoformat(),
            ),
        )

    async def get_edge(self, edge_id: str) -> ProjectEdge | None:
        """Get edge by ID."""
        row = await self._fetchone("SELECT * FROM project_edges WHERE id = ?", (edge_id,))
        return self._row_to_edge(row) if row else None

    async def get_edges(self, project_id: str) -> list[ProjectEdge]:
        """Every edge touching a project, in insertion order."""
        rows = await self._fetchall(
            "SELECT * FROM project_edges WHERE from_id = ? OR to_id = ? ORDER BY rowid",
            (project_id, project_id),
        )
        return [self._row_to_edge(row) for row in rows]

    async def delete_edge(self, edge_id: str) -> bool:
        """Delete an edge."""
        deleted = await self._execute("DELETE FROM project_edges WHERE id = ?", (edge_id,))
        return deleted > 0

    # ═══════════════════════════════════════════════════════════
    # CONVERSATION LOGS
    # ═══════════════════════════════════════════════════════════

    async def add_conversation(self, log: ConversationLog) -> None:
        """Store a conversation log."""
        await self._execute(
            """
            INSERT INTO conversation_logs (
                id, project_id, summary, updates_applied, conversation_start, conversation_end
            ) VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                log.id,
                log.project_id,
                log.summary,
                json.dumps([u.model_dump(mode="json") for u in log.updates_applied]),
                log.conversation_start.isoformat(),
                log.conversation_end.isoformat(),
            ),
        )

    async def get_conversations(self, project_id: str) -> list[ConversationLog]:
        """List conversation logs newest first."""
        rows = await self._fetchall(
            """
            SELECT * FROM conversation_logs
            WHERE project_id = ?
            ORDER BY conversation_end DESC, rowid DESC
            """,
            (project_id,),
        )
        return [self._row_to_conversation(row) for row in rows]

    async def close(self) -> None:
        """Close the connection."""
        if self.connection is not None:
            await self.connection.close()
            self.connection = None

    # ═══════════════════════════════════════════════════════════
    # HELPER METHODS
    # ═══════════════════════════════════════════════════════════

    def _row_to_project(self, row: aiosqlite.Row) -> ProjectNode:
        """Convert database row to ProjectNode."""
        return ProjectNode(
            id=row["id"],
            name=row["name"],
            display_name=row["display_name"],
            path=row["path"],
            type=ProjectType(row["type"]),
            tech_stack=json.loads(row["tech_stack"] or "[]"),
            owner=row["owner"],
            status=ProjectStatus(row["status"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def _row_to_document(self, row: aiosqlite.Row) -> Document:
        """Convert database row to Document."""
        return Document(
            id=row["id"],
            project_id=row["project_id"],
            doc_type=DocType(row["doc_type"]),
            file_path=row["file_path"],
            update_mode=UpdateMode(row["update_mode"]),
            content=row["content"],
            version=row["version"],
            last_modified=datetime.fromisoformat(row["last_modified"]),
        )

    def _row_to_version(self, row: aiosqlite.Row) -> DocumentVersion:
        """Convert database row to DocumentVersion."""
        return DocumentVersion(
            id=row["id"],
            document_id=row["document_id"],
            content=row["content"],
            change_summary=row["change_summary"],
            trigger=UpdateTrigger(row["trigger"]),
            version_number=row["version_number"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def _row_to_edge(self, row: aiosqlite.Row) -> ProjectEdge:
        """Convert database row to ProjectEdge."""
        return ProjectEdge(
            id=row["id"],
            from_id=row["from_id"],
            to_id=row["to_id"],
            type=EdgeType(row["type"]),
            description=row["description"],
            strength=row["strength"],
            bidirectional=bool(row["bidirectional"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def _row_to_conversation(self, row: aiosqlite.Row) -> ConversationLog:
        """Convert database row to ConversationLog."""
        return ConversationLog(
            id=row["id"],
            project_id=row["project_id"],
            summary=row["summary"],
            updates_applied=[
                UpdateApplied(**item) for item in json.loads(row["updates_applied"] or "[]")
            ],
            conversation_start=datetime.fromisoformat(row["conversation_start"]),
            conversation_end=datetime.fromisoformat(row["conversation_end"]),
        )
