"""Mirror of project documents as markdown files on disk."""

from collections.abc import Iterable
from pathlib import Path

from pmgraph.models.document import DocType, Document
from pmgraph.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_DOCS_ROOT = Path.home() / ".project-memory" / "docs"


class FileSync:
    """
    Writes documents to ``<docs_root>/<project-name>/<doc_type>.md``.

    The database stays the source of truth; files are overwritten on every
    sync and never read back.
    """

    def __init__(self, docs_root: str | Path | None = None):
        """
        Initialize file sync.

        Args:
            docs_root: Root directory for mirrored files
        """
        self.docs_root = Path(docs_root).expanduser() if docs_root else DEFAULT_DOCS_ROOT

    def get_project_dir(self, project_name: str) -> Path:
        """Absolute directory holding a project's files."""
        return self.docs_root / project_name

    def get_doc_path(self, project_name: str, doc_type: DocType | str) -> Path:
        """Absolute path of one document file."""
        return self.get_project_dir(project_name) / f"{DocType(doc_type).value}.md"

    def sync_document(self, project_name: str, doc_type: DocType | str, content: str) -> Path:
        """
        Write a single document file.

        Args:
            project_name: Project slug
            doc_type: Document type
            content: Document content

        Returns:
            Path of the written file
        """
        file_path = self.get_doc_path(project_name, doc_type)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")
        logger.debug(f"Synced {file_path}")
        return file_path

    def sync_project(self, project_name: str, documents: Iterable[Document]) -> Path:
        """
        Write every document of a project.

        Args:
            project_name: Project slug
            documents: Documents to write

        Returns:
            Project directory
        """
        project_dir = self.get_project_dir(project_name)
        project_dir.mkdir(parents=True, exist_ok=True)

        count = 0
        for document in documents:
            self.sync_document(project_name, document.doc_type, document.content)
            count += 1

        logger.info(f"Synced {count} documents to {project_dir}")
        return project_dir
