"""
Document Merge Engine - applies content changes and records versions.

Handles:
- Seeding the eight template documents of a new project
- Append / upsert merges against stored documents
- Version snapshots (one per change, version 1 is the template)
- Version history queries
"""

from datetime import UTC, date, datetime

from pmgraph.core.merge import merge_document
from pmgraph.core.store.base import DocumentStore
from pmgraph.models.document import (
    ALL_DOC_TYPES,
    DEFAULT_UPDATE_MODES,
    DocType,
    Document,
    DocumentVersion,
    UpdateMode,
    UpdateTrigger,
    parse_doc_type,
    parse_update_mode,
    render_template,
)
from pmgraph.models.project import ProjectNode
from pmgraph.utils.exceptions import NotFoundError
from pmgraph.utils.logger import get_logger

logger = get_logger(__name__)

INITIAL_CHANGE_SUMMARY = "Initial template"


class DocumentMergeEngine:
    """
    Applies merges to stored documents with versioning.

    Every successful merge bumps the document version by exactly one and
    appends one snapshot carrying the new content, all inside a single
    store transaction.
    """

    def __init__(self, store: DocumentStore):
        """
        Initialize document merge engine.

        Args:
            store: Document store
        """
        self.store = store

    async def seed_documents(
        self, project: ProjectNode, today: date | None = None
    ) -> list[Document]:
        """
        Create the eight template documents of a project.

        Must run inside the transaction that inserts the project.

        Args:
            project: Newly inserted project
            today: Date embedded in dated templates

        Returns:
            Created documents in doc type order
        """
        now = datetime.now(UTC)
        documents = []

        for doc_type in ALL_DOC_TYPES:
            document = Document(
                project_id=project.id,
                doc_type=doc_type,
                file_path=f"{project.name}/{doc_type.value}.md",
                update_mode=DEFAULT_UPDATE_MODES[doc_type],
                content=render_template(doc_type, today),
                version=1,
                last_modified=now,
            )
            await self.store.add_document(document)
            await self.store.add_version(
                DocumentVersion(
                    document_id=document.id,
                    content=document.content,
                    change_summary=INITIAL_CHANGE_SUMMARY,
                    trigger=UpdateTrigger.AUTO,
                    version_number=1,
                    created_at=now,
                )
            )
            documents.append(document)

        return documents

    async def update_document(
        self,
        project_id: str,
        doc_type: DocType | str,
        content: str,
        mode: UpdateMode | str | None = None,
        trigger: UpdateTrigger | str = UpdateTrigger.MANUAL,
        change_summary: str | None = None,
    ) -> Document:
        """
        Merge content into a project's document.

        Args:
            project_id: Resolved project ID
            doc_type: Target document type
            content: Incoming content
            mode: Merge mode (defaults to the doc type's default mode)
            trigger: manual for direct calls, auto for classifier calls
            change_summary: Optional description stored on the snapshot

        Returns:
            The updated document

        Raises:
            InvalidDocTypeError: If doc_type is not one of the eight types
            ValidationError: If mode is unknown
            NotFoundError: If the (project, doc_type) slot does not exist
        """
        doc_type = parse_doc_type(doc_type)
        effective_mode = parse_update_mode(mode) if mode else DEFAULT_UPDATE_MODES[doc_type]
        trigger = UpdateTrigger(trigger)

        async with self.store.transaction():
            current = await self.store.get_document(project_id, doc_type)
            if current is None:
                raise NotFoundError(
                    f"Document slot '{doc_type.value}' not found for project",
                    context={"project_id": project_id, "doc_type": doc_type.value},
                )

            now = datetime.now(UTC)
            updated = current.model_copy(
                update={
                    "content": merge_document(current.content, content, effective_mode),
                    "version": current.version + 1,
                    "last_modified": now,
                }
            )

            await self.store.update_document(updated)
            await self.store.add_version(
                DocumentVersion(
                    document_id=updated.id,
                    content=updated.content,
                    change_summary=change_summary
                    or f"{effective_mode.value} update to {doc_type.value}",
                    trigger=trigger,
                    version_number=updated.version,
                    created_at=now,
                )
            )

        logger.info(
            f"Document {updated.id} now at version {updated.version}",
            extra={
                "operation": "update_document",
                "project_id": project_id,
                "doc_type": doc_type.value,
                "mode": effective_mode.value,
                "trigger": trigger.value,
            },
        )
        return updated

    async def get_versions(self, document_id: str) -> list[DocumentVersion]:
        """
        List snapshots of a document, newest first.

        Args:
            document_id: Document identifier

        Returns:
            Version snapshots
        """
        return await self.store.get_versions(document_id)

    async def get_version(self, version_id: str) -> DocumentVersion:
        """
        Retrieve one snapshot with its content.

        Raises:
            NotFoundError: If no snapshot has this ID
        """
        version = await self.store.get_version(version_id)
        if version is None:
            raise NotFoundError(
                f"Version not found: {version_id}", context={"version_id": version_id}
            )
        return version
