"""
Project Memory - unified entry point for every operation.

Brings together:
- Document store (persistence)
- Document Merge Engine (updates + versions)
- Graph Context Engine (context bundles + markdown)
- Search Engine (keyword ranking)
- Conversation classifier (auto-update)
- File sync (optional markdown mirror)

Identifier parameters accept either the generated project ID or the
unique project name; the ID is tried first.
"""

import re
from datetime import UTC, datetime
from typing import Any

from pmgraph.config import Config
from pmgraph.core.filesystem import FileSync
from pmgraph.core.store.base import DocumentStore
from pmgraph.models.context import ProjectContext, SearchResult
from pmgraph.models.conversation import ConversationLog, UpdateApplied
from pmgraph.models.document import (
    DocType,
    Document,
    DocumentVersion,
    UpdateMode,
    UpdateTrigger,
    parse_doc_type,
)
from pmgraph.models.edge import EdgeType, ProjectEdge, parse_edge_type
from pmgraph.models.project import ProjectNode, ProjectStatus, ProjectType
from pmgraph.services.classifier import classify_updates
from pmgraph.services.document_engine import DocumentMergeEngine
from pmgraph.services.graph_engine import GraphContextEngine
from pmgraph.services.search_engine import SearchEngine
from pmgraph.utils.exceptions import (
    AlreadyExistsError,
    ConfigurationError,
    ConstraintViolationError,
    NotFoundError,
    ValidationError,
)
from pmgraph.utils.logger import get_logger

logger = get_logger(__name__)

PARENT_EDGE_DESCRIPTION = "Auto-created parent-child relationship"
PARENT_EDGE_STRENGTH = 0.8
AUTO_CHANGE_SUMMARY = "Auto-update from conversation"

# names double as directory names under the docs root
PROJECT_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class ProjectMemory:
    """
    Unified project memory integrating all components.

    Features:
    - Project registration with eight seeded documents
    - Versioned append/upsert document updates
    - Graph context with bounded-depth related projects
    - Keyword search
    - Conversation auto-classification
    - Optional markdown mirror on disk
    """

    def __init__(
        self,
        store: DocumentStore,
        config: Config | None = None,
        file_sync: FileSync | None = None,
    ):
        """
        Initialize Project Memory.

        Args:
            store: Document store
            config: Configuration object
            file_sync: Optional markdown mirror; documents are written after every change
        """
        self.store = store
        self.config = config or Config()
        self.file_sync = file_sync

        self.documents = DocumentMergeEngine(store)
        self.graph = GraphContextEngine(store, self.config.graph)
        self.search_engine = SearchEngine(store, self.config.search)

    async def initialize(self) -> None:
        """Initialize the store."""
        logger.info("Initializing Project Memory")
        await self.store.initialize()
        logger.info("Project Memory ready")

    async def close(self) -> None:
        """Close the store."""
        await self.store.close()

    # ═══════════════════════════════════════════════════════════
    # RESOLUTION
    # ═══════════════════════════════════════════════════════════

    async def find_project(self, id_or_name: str) -> ProjectNode | None:
        """
        Resolve a project by ID, then by name.

        Args:
            id_or_name: Project ID or unique name

        Returns:
            ProjectNode or None
        """
        if not id_or_name:
            return None
        project = await self.store.get_project(id_or_name)
        if project is None:
            project = await self.store.get_project_by_name(id_or_name)
        return project

    async def resolve_project(self, id_or_name: str) -> ProjectNode:
        """
        Resolve a project or fail.

        Raises:
            NotFoundError: If neither an ID nor a name matches
        """
        project = await self.find_project(id_or_name)
        if project is None:
            raise NotFoundError(
                f'Project "{id_or_name}" not found', context={"project": id_or_name}
            )
        return project

    # ═══════════════════════════════════════════════════════════
    # PROJECTS
    # ═══════════════════════════════════════════════════════════

    async def create_project(
        self,
        name: str,
        path: str,
        tech_stack: list[str] | None = None,
        owner: str | None = None,
        parent_id: str | None = None,
        display_name: str | None = None,
        project_type: ProjectType | str = ProjectType.PROJECT,
    ) -> ProjectNode:
        """
        Register a project and seed its eight documents.

        The project row, its documents, their version-1 snapshots and the
        optional parent edge are written in one transaction.

        Args:
            name: Unique project slug
            path: Filesystem path to the project
            tech_stack: Ordered technology tags
            owner: Owner string
            parent_id: Parent project ID or name; adds a parent_child edge parent → child
            display_name: Human-readable name (defaults to name)
            project_type: project or module

        Returns:
            The created project

        Raises:
            ValidationError: If name is not a slug, path is empty, or project_type is unknown
            AlreadyExistsError: If the name is taken, including by a concurrent create
            NotFoundError: If parent_id does not resolve
        """
        if not name or not name.strip():
            raise ValidationError("Project name cannot be empty")
        if not PROJECT_NAME_PATTERN.match(name):
            raise ValidationError(
                f"Invalid project name: {name!r}",
                context={"name": name, "allowed": PROJECT_NAME_PATTERN.pattern},
            )
        if not path:
            raise ValidationError("Project path cannot be empty", context={"name": name})
        try:
            project_type = ProjectType(project_type)
        except ValueError as e:
            raise ValidationError(
                f"Invalid project type: {project_type}",
                context={"allowed": [t.value for t in ProjectType]},
            ) from e

        if await self.store.get_project_by_name(name):
            raise AlreadyExistsError(f'Project "{name}" already exists', context={"name": name})

        parent = await self.resolve_project(parent_id) if parent_id else None

        now = datetime.now(UTC)
        project = ProjectNode(
            name=name,
            display_name=display_name or name,
            path=path,
            type=project_type,
            tech_stack=list(tech_stack or []),
            owner=owner or "",
            created_at=now,
            updated_at=now,
        )

        try:
            async with self.store.transaction():
                await self.store.add_project(project)
                documents = await self.documents.seed_documents(project, now.date())
                if parent is not None:
                    await self.store.add_edge(
                        ProjectEdge(
                            from_id=parent.id,
                            to_id=project.id,
                            type=EdgeType.PARENT_CHILD,
                            description=PARENT_EDGE_DESCRIPTION,
                            strength=PARENT_EDGE_STRENGTH,
                            created_at=now,
                        )
                    )
        except ConstraintViolationError as e:
            # a concurrent create took the name after the check above
            if "project_nodes.name" in e.message:
                raise AlreadyExistsError(
                    f'Project "{name}" already exists', context={"name": name}
                ) from e
            raise

        logger.info(
            f"Project created: {project.id}",
            extra={"operation": "create_project", "project_id": project.id},
        )

        if self.file_sync:
            self.file_sync.sync_project(project.name, documents)

        return project

    async def get_project(self, id_or_name: str) -> ProjectNode:
        """Resolve and return a project."""
        return await self.resolve_project(id_or_name)

    async def list_projects(self, status: ProjectStatus | str | None = None) -> list[ProjectNode]:
        """
        List projects, most recently updated first.

        Args:
            status: Optional status filter
        """
        if status is not None:
            try:
                status = ProjectStatus(status)
            except ValueError as e:
                raise ValidationError(f"Invalid project status: {status}") from e
        return await self.store.list_projects(status)

    async def update_project(
        self,
        id_or_name: str,
        display_name: str | None = None,
        status: ProjectStatus | str | None = None,
        tech_stack: list[str] | None = None,
        owner: str | None = None,
    ) -> ProjectNode:
        """
        Update mutable project metadata.

        Args:
            id_or_name: Project ID or name
            display_name: New display name
            status: New lifecycle status
            tech_stack: New technology tags
            owner: New owner

        Returns:
            Updated project
        """
        project = await self.resolve_project(id_or_name)

        updates: dict[str, Any] = {"updated_at": datetime.now(UTC)}
        if display_name is not None:
            updates["display_name"] = display_name
        if status is not None:
            try:
                updates["status"] = ProjectStatus(status)
            except ValueError as e:
                raise ValidationError(f"Invalid project status: {status}") from e
        if tech_stack is not None:
            updates["tech_stack"] = list(tech_stack)
        if owner is not None:
            updates["owner"] = owner

        updated = project.model_copy(update=updates)
        await self.store.update_project(updated)

        logger.info(
            f"Project updated: {updated.id}",
            extra={"operation": "update_project", "fields": sorted(updates)},
        )
        return updated

    async def delete_project(self, id_or_name: str) -> bool:
        """
        Delete a project with its documents, edges and versions.

        Returns:
            True if deleted
        """
        project = await self.resolve_project(id_or_name)
        deleted = await self.store.delete_project(project.id)
        logger.info(f"Project deleted: {project.id}", extra={"operation": "delete_project"})
        return deleted

    # ═══════════════════════════════════════════════════════════
    # DOCUMENTS
    # ═══════════════════════════════════════════════════════════

    async def update_document(
        self,
        id_or_name: str,
        doc_type: DocType | str,
        content: str,
        mode: UpdateMode | str | None = None,
        trigger: UpdateTrigger | str = UpdateTrigger.MANUAL,
        change_summary: str | None = None,
    ) -> Document:
        """
        Merge content into one of a project's documents.

        Args:
            id_or_name: Project ID or name
            doc_type: Document type
            content: Incoming content
            mode: append or upsert (defaults per doc type)
            trigger: manual or auto
            change_summary: Optional snapshot description

        Returns:
            Updated document

        Raises:
            NotFoundError: If the project or document slot does not resolve
            InvalidDocTypeError: If doc_type is unknown
        """
        project = await self.resolve_project(id_or_name)
        document = await self.documents.update_document(
            project.id, doc_type, content, mode, trigger, change_summary
        )

        if self.file_sync:
            self.file_sync.sync_document(project.name, document.doc_type, document.content)

        return document

    async def get_document(self, id_or_name: str, doc_type: DocType | str) -> Document:
        """
        Fetch one document of a project.

        Raises:
            NotFoundError: If the project or slot does not resolve
        """
        project = await self.resolve_project(id_or_name)
        doc_type = parse_doc_type(doc_type)
        document = await self.store.get_document(project.id, doc_type)
        if document is None:
            raise NotFoundError(
                f"Document slot '{doc_type.value}' not found for project",
                context={"project_id": project.id, "doc_type": doc_type.value},
            )
        return document

    async def get_document_history(
        self, id_or_name: str, doc_type: DocType | str
    ) -> list[DocumentVersion]:
        """List a document's version snapshots, newest first."""
        document = await self.get_document(id_or_name, doc_type)
        return await self.documents.get_versions(document.id)

    async def get_version(self, version_id: str) -> DocumentVersion:
        """Fetch one version snapshot."""
        return await self.documents.get_version(version_id)

    # ═══════════════════════════════════════════════════════════
    # GRAPH
    # ═══════════════════════════════════════════════════════════

    async def add_edge(
        self,
        from_project: str,
        to_project: str,
        edge_type: EdgeType | str,
        description: str = "",
        strength: float = 0.5,
        bidirectional: bool = False,
    ) -> ProjectEdge:
        """
        Create a directed edge between two projects.

        Raises:
            NotFoundError: If either endpoint does not resolve
            InvalidEdgeTypeError: If edge_type is unknown
            ValidationError: If strength is outside [0, 1]
        """
        edge_type = parse_edge_type(edge_type)
        if not 0.0 <= strength <= 1.0:
            raise ValidationError(
                f"Edge strength must be within [0, 1], got {strength}",
                context={"strength": strength},
            )

        source = await self.find_project(from_project)
        if source is None:
            raise NotFoundError(
                f'Source project "{from_project}" not found', context={"project": from_project}
            )
        target = await self.find_project(to_project)
        if target is None:
            raise NotFoundError(
                f'Target project "{to_project}" not found', context={"project": to_project}
            )

        edge = ProjectEdge(
            from_id=source.id,
            to_id=target.id,
            type=edge_type,
            description=description or "",
            strength=strength,
            bidirectional=bidirectional,
        )
        await self.store.add_edge(edge)

        logger.info(
            f"Edge {edge.id}: {source.id} -> {target.id}",
            extra={"operation": "add_edge", "edge_type": edge_type.value},
        )
        return edge

    async def remove_edge(self, edge_id: str) -> bool:
        """
        Delete an edge.

        Raises:
            NotFoundError: If no edge has this ID
        """
        if not await self.store.delete_edge(edge_id):
            raise NotFoundError(f"Edge not found: {edge_id}", context={"edge_id": edge_id})
        return True

    async def get_context(
        self,
        id_or_name: str,
        include_related: bool = False,
        max_depth: int | None = None,
    ) -> ProjectContext:
        """
        Assemble a project's context bundle.

        Args:
            id_or_name: Project ID or name
            include_related: Walk related projects
            max_depth: Traversal depth (defaults to config.graph.default_depth)

        Raises:
            NotFoundError: If the project does not resolve
        """
        project = await self.resolve_project(id_or_name)
        depth = self.config.graph.default_depth if max_depth is None else max_depth

        context = await self.graph.get_context(project.id, include_related, depth)
        if context is None:
            # deleted between resolution and assembly
            raise NotFoundError(
                f'Project "{id_or_name}" not found', context={"project": id_or_name}
            )
        return context

    async def render_context(
        self,
        id_or_name: str,
        include_related: bool = False,
        max_depth: int | None = None,
    ) -> str:
        """Assemble and render a project's context as markdown."""
        context = await self.get_context(id_or_name, include_related, max_depth)
        return await self.graph.render_markdown(context)

    # ═══════════════════════════════════════════════════════════
    # SEARCH
    # ═══════════════════════════════════════════════════════════

    async def search(
        self,
        query: str,
        project: str | None = None,
        doc_types: list[DocType | str] | None = None,
        limit: int | None = None,
    ) -> list[SearchResult]:
        """
        Keyword search across documents.

        An unresolved ``project`` leaves the search unscoped.

        Args:
            query: Free-text query
            project: Optional project ID or name
            doc_types: Optional doc type filter
            limit: Maximum results
        """
        project_id = None
        if project:
            resolved = await self.find_project(project)
            if resolved is None:
                logger.warning(f"Search scope {project!r} did not resolve; searching all projects")
            else:
                project_id = resolved.id

        return await self.search_engine.search(query, project_id, doc_types, limit)

    # ═══════════════════════════════════════════════════════════
    # AUTO-UPDATE
    # ═══════════════════════════════════════════════════════════

    async def classify_and_apply(self, summary: str, id_or_name: str) -> list[UpdateApplied]:
        """
        Classify a conversation summary and apply the resulting merges.

        Every merge carries trigger ``auto``. A ConversationLog records the
        summary and what was applied.

        Args:
            summary: Conversation summary
            id_or_name: Project ID or name

        Returns:
            Applied updates

        Raises:
            ValidationError: If the summary is empty
            NotFoundError: If the project does not resolve
        """
        if not summary or not summary.strip():
            raise ValidationError("Conversation summary cannot be empty")

        project = await self.resolve_project(id_or_name)
        started = datetime.now(UTC)

        applied: list[UpdateApplied] = []
        for update in classify_updates(summary, started.date()):
            document = await self.documents.update_document(
                project.id,
                update.doc_type,
                update.content,
                update.mode,
                UpdateTrigger.AUTO,
                AUTO_CHANGE_SUMMARY,
            )
            if self.file_sync:
                self.file_sync.sync_document(project.name, document.doc_type, document.content)
            applied.append(
                UpdateApplied(
                    doc_type=update.doc_type, mode=update.mode, snippet=update.content[:100]
                )
            )

        await self.store.add_conversation(
            ConversationLog(
                project_id=project.id,
                summary=summary,
                updates_applied=applied,
                conversation_start=started,
                conversation_end=datetime.now(UTC),
            )
        )

        logger.info(
            f"Auto-update applied {len(applied)} updates to {project.id}",
            extra={"operation": "classify_and_apply", "doc_types": [u.doc_type.value for u in applied]},
        )
        return applied

    async def get_conversations(self, id_or_name: str) -> list[ConversationLog]:
        """List a project's conversation logs, newest first."""
        project = await self.resolve_project(id_or_name)
        return await self.store.get_conversations(project.id)

    # ═══════════════════════════════════════════════════════════
    # FILE SYNC
    # ═══════════════════════════════════════════════════════════

    async def sync(self, id_or_name: str | None = None) -> list[dict[str, Any]]:
        """
        Re-mirror documents to disk.

        Args:
            id_or_name: Project to sync; all projects when omitted

        Returns:
            One entry per project with its directory and file names

        Raises:
            ConfigurationError: If no FileSync is configured
            NotFoundError: If the project does not resolve, or there are no projects
        """
        if self.file_sync is None:
            raise ConfigurationError("File sync is not configured")

        if id_or_name:
            projects = [await self.resolve_project(id_or_name)]
        else:
            projects = await self.store.list_projects()
            if not projects:
                raise NotFoundError("No projects found")

        synced = []
        for project in projects:
            documents = await self.store.get_documents(project.id)
            docs_dir = self.file_sync.sync_project(project.name, documents)
            synced.append(
                {
                    "project": project.name,
                    "docs_directory": str(docs_dir),
                    "files": [f"{d.doc_type.value}.md" for d in documents],
                }
            )
        return synced
