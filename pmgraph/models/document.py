"""
Document and version models.

Each project holds one document per DocType. Documents change only
through the merge engine, and every change leaves a DocumentVersion
snapshot behind.
"""

from datetime import UTC, date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from pmgraph.utils.exceptions import InvalidDocTypeError, ValidationError
from pmgraph.utils.id_generator import generate_document_id, generate_version_id


class DocType(str, Enum):
    """The eight fixed document categories."""

    TODO = "todo"
    CONFIRM = "confirm"
    PROGRESS = "progress"
    DELAYS = "delays"
    PRD = "prd"
    MEMORY = "memory"
    NOTES = "notes"
    QA = "qa"


class UpdateMode(str, Enum):
    """Merge strategies."""

    APPEND = "append"
    UPSERT = "upsert"


class UpdateTrigger(str, Enum):
    """Who caused a change: a direct call or the classifier."""

    AUTO = "auto"
    MANUAL = "manual"


ALL_DOC_TYPES: list[DocType] = list(DocType)

DEFAULT_UPDATE_MODES: dict[DocType, UpdateMode] = {
    DocType.TODO: UpdateMode.APPEND,
    DocType.CONFIRM: UpdateMode.UPSERT,
    DocType.PROGRESS: UpdateMode.UPSERT,
    DocType.DELAYS: UpdateMode.APPEND,
    DocType.PRD: UpdateMode.UPSERT,
    DocType.MEMORY: UpdateMode.APPEND,
    DocType.NOTES: UpdateMode.APPEND,
    DocType.QA: UpdateMode.UPSERT,
}

_TEMPLATES: dict[DocType, str] = {
    DocType.TODO: "# To-Do List\n\n## {today}\n- [ ] Initial setup\n",
    DocType.CONFIRM: "# Things to Confirm\n\n_No items yet._\n",
    DocType.PROGRESS: "# Current Progress\n\n## Current Sprint\n**Status:** Not started\n",
    DocType.DELAYS: "# Delay Logs\n\n_No delays recorded._\n",
    DocType.PRD: "# Product Requirements Document\n\n## V1.0\n_To be defined._\n",
    DocType.MEMORY: (
        "# Long-term Memories\n\n## Architecture Decisions\n\n"
        "## Technical Learnings\n\n## Key Insights\n"
    ),
    DocType.NOTES: "# Notable Points\n\n_No notes yet._\n",
    DocType.QA: "# Questions & Answers\n\n_No Q&A entries yet._\n",
}


def render_template(doc_type: DocType, today: date | None = None) -> str:
    """
    Get the seed content for a document type.

    Args:
        doc_type: Document type
        today: Date embedded in dated templates (defaults to today)

    Returns:
        Template markdown
    """
    today = today or datetime.now(UTC).date()
    # str.replace keeps literal braces in templates safe
    return _TEMPLATES[doc_type].replace("{today}", today.isoformat())


class Document(BaseModel):
    """One typed markdown document of a project."""

    model_config = ConfigDict(json_encoders={datetime: lambda v: v.isoformat()})

    id: str = Field(default_factory=generate_document_id)
    project_id: str
    doc_type: DocType
    file_path: str = Field(..., description="Relative path: <project-name>/<doc_type>.md")
    update_mode: UpdateMode
    content: str = ""
    version: int = Field(default=1, ge=1)
    last_modified: datetime = Field(default_factory=lambda: datetime.now(UTC))


class DocumentVersion(BaseModel):
    """Immutable snapshot of a document's content at one version."""

    model_config = ConfigDict(json_encoders={datetime: lambda v: v.isoformat()})

    id: str = Field(default_factory=generate_version_id)
    document_id: str
    content: str
    change_summary: str = ""
    trigger: UpdateTrigger = UpdateTrigger.MANUAL
    version_number: int = Field(..., ge=1)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


def parse_doc_type(value: "DocType | str") -> DocType:
    """
    Coerce a raw value to DocType.

    Raises:
        InvalidDocTypeError: If the value is not one of the eight types
    """
    try:
        return DocType(value)
    except ValueError as e:
        raise InvalidDocTypeError(
            f"Invalid doc type: {value}",
            context={"doc_type": str(value), "allowed": [t.value for t in DocType]},
        ) from e


def parse_update_mode(value: "UpdateMode | str") -> UpdateMode:
    """
    Coerce a raw value to UpdateMode.

    Raises:
        ValidationError: If the value is neither append nor upsert
    """
    try:
        return UpdateMode(value)
    except ValueError as e:
        raise ValidationError(
            f"Invalid update mode: {value}",
            context={"mode": str(value), "allowed": [m.value for m in UpdateMode]},
        ) from e
