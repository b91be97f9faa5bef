"""
Data models for pmgraph.

Core models:
- ProjectNode, ProjectType, ProjectStatus: tracked projects
- Document, DocumentVersion, DocType, UpdateMode, UpdateTrigger: typed documents
- ProjectEdge, EdgeType: directed relations between projects
- ConversationLog, UpdateApplied: auto-update bookkeeping
- ProjectContext, RelatedProjectContext, SearchResult: read-side bundles
"""

from pmgraph.models.context import ProjectContext, RelatedProjectContext, SearchResult
from pmgraph.models.conversation import ConversationLog, UpdateApplied
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
from pmgraph.models.edge import EdgeType, ProjectEdge, parse_edge_type
from pmgraph.models.project import ProjectNode, ProjectStatus, ProjectType

__all__ = [
    # Project models
    "ProjectNode",
    "ProjectType",
    "ProjectStatus",
    # Document models
    "Document",
    "DocumentVersion",
    "DocType",
    "UpdateMode",
    "UpdateTrigger",
    "ALL_DOC_TYPES",
    "DEFAULT_UPDATE_MODES",
    "render_template",
    "parse_doc_type",
    "parse_update_mode",
    # Edge models
    "ProjectEdge",
    "EdgeType",
    "parse_edge_type",
    # Conversation models
    "ConversationLog",
    "UpdateApplied",
    # Read-side models
    "ProjectContext",
    "RelatedProjectContext",
    "SearchResult",
]
