"""
Base interface for document storage.

The engines only ever talk to this interface. Implementations must provide
referential integrity (deleting a project cascades to its documents, edges
and versions) and the uniqueness constraints on project names,
(project, doc_type) pairs and (document, version_number) pairs.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager

from pmgraph.models.conversation import ConversationLog
from pmgraph.models.document import DocType, Document, DocumentVersion
from pmgraph.models.edge import ProjectEdge
from pmgraph.models.project import ProjectNode, ProjectStatus


class DocumentStore(ABC):
    """Abstract base class for document storage implementations."""

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the store (create tables/schema)."""
        pass

    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager["DocumentStore"]:
        """
        Open an atomic unit of work.

        Every store call made by the owning task inside the block commits or
        rolls back together. Other callers wait until the block exits.
        """
        pass

    # ═══════════════════════════════════════════════════════════
    # PROJECT OPERATIONS
    # ═══════════════════════════════════════════════════════════

    @abstractmethod
    async def add_project(self, project: ProjectNode) -> None:
        """
        Insert a project record.

        Args:
            project: Project to store

        Raises:
            ConstraintViolationError: If the name is already taken
        """
        pass

    @abstractmethod
    async def get_project(self, project_id: str) -> ProjectNode | None:
        """
        Retrieve a project by ID.

        Args:
            project_id: Project identifier

        Returns:
            ProjectNode or None if not found
        """
        pass

    @abstractmethod
    async def get_project_by_name(self, name: str) -> ProjectNode | None:
        """
        Retrieve a project by its unique slug.

        Args:
            name: Project name

        Returns:
            ProjectNode or None if not found
        """
        pass

    @abstractmethod
    async def list_projects(self, status: ProjectStatus | None = None) -> list[ProjectNode]:
        """
        List projects, most recently updated first.

        Args:
            status: Optional status filter

        Returns:
            List of projects
        """
        pass

    @abstractmethod
    async def update_project(self, project: ProjectNode) -> None:
        """
        Persist mutable project fields (display_name, status, tech_stack, owner, updated_at).

        Args:
            project: Updated project
        """
        pass

    @abstractmethod
    async def delete_project(self, project_id: str) -> bool:
        """
        Delete a project and everything that cascades from it.

        Args:
            project_id: Project identifier

        Returns:
            True if a project was deleted
        """
        pass

    # ═══════════════════════════════════════════════════════════
    # DOCUMENT OPERATIONS
    # ═══════════════════════════════════════════════════════════

    @abstractmethod
    async def add_document(self, document: Document) -> None:
        """
        Insert a document slot.

        Args:
            document: Document to store

        Raises:
            ConstraintViolationError: If the (project, doc_type) slot exists
        """
        pass

    @abstractmethod
    async def get_document(self, project_id: str, doc_type: DocType) -> Document | None:
        """
        Retrieve the document in a (project, doc_type) slot.

        Args:
            project_id: Project identifier
            doc_type: Document type

        Returns:
            Document or None
        """
        pass

    @abstractmethod
    async def get_documents(self, project_id: str) -> list[Document]:
        """
        Retrieve all documents of a project ordered by doc_type.

        Args:
            project_id: Project identifier

        Returns:
            List of documents
        """
        pass

    @abstractmethod
    async def update_document(self, document: Document) -> None:
        """
        Persist content, version and last_modified of a document.

        Args:
            document: Updated document
        """
        pass

    @abstractmethod
    async def query_documents(
        self,
        project_id: str | None = None,
        doc_types: list[DocType] | None = None,
    ) -> list[tuple[Document, str]]:
        """
        Fetch search candidates, most recently modified first.

        Args:
            project_id: Optional project filter
            doc_types: Optional doc type filter

        Returns:
            List of (document, project name) tuples
        """
        pass

    # ═══════════════════════════════════════════════════════════
    # VERSION OPERATIONS
    # ═══════════════════════════════════════════════════════════

    @abstractmethod
    async def add_version(self, version: DocumentVersion) -> None:
        """
        Append a version snapshot.

        Args:
            version: Snapshot to store
        """
        pass

    @abstractmethod
    async def get_versions(self, document_id: str) -> list[DocumentVersion]:
        """
        List snapshots of a document, newest first.

        Args:
            document_id: Document identifier

        Returns:
            List of snapshots
        """
        pass

    @abstractmethod
    async def get_version(self, version_id: str) -> DocumentVersion | None:
        """
        Retrieve one snapshot.

        Args:
            version_id: Snapshot identifier

        Returns:
            DocumentVersion or None
        """
        pass

    # ═══════════════════════════════════════════════════════════
    # EDGE OPERATIONS
    # ═══════════════════════════════════════════════════════════

    @abstractmethod
    async def add_edge(self, edge: ProjectEdge) -> None:
        """
        Insert an edge.

        Args:
            edge: Edge to store
        """
        pass

    @abstractmethod
    async def get_edge(self, edge_id: str) -> ProjectEdge | None:
        """
        Retrieve an edge by ID.

        Args:
            edge_id: Edge identifier

        Returns:
            ProjectEdge or None
        """
        pass

    @abstractmethod
    async def get_edges(self, project_id: str) -> list[ProjectEdge]:
        """
        Retrieve every edge touching a project (incoming and outgoing), in insertion order.

        Args:
            project_id: Project identifier

        Returns:
            List of edges
        """
        pass

    @abstractmethod
    async def delete_edge(self, edge_id: str) -> bool:
        """
        Delete an edge.

        Args:
            edge_id: Edge identifier

        Returns:
            True if an edge was deleted
        """
        pass

    # ═══════════════════════════════════════════════════════════
    # CONVERSATION LOGS
    # ═══════════════════════════════════════════════════════════

    @abstractmethod
    async def add_conversation(self, log: ConversationLog) -> None:
        """
        Store a conversation log.

        Args:
            log: Conversation log
        """
        pass

    @abstractmethod
    async def get_conversations(self, project_id: str) -> list[ConversationLog]:
        """
        List conversation logs of a project, newest first.

        Args:
            project_id: Project identifier

        Returns:
            List of conversation logs
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the connection to the store."""
        pass
