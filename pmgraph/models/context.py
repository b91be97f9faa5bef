"""Read-side bundles returned by the graph and search engines."""

from pydantic import BaseModel, Field

from pmgraph.models.document import DocType, Document
from pmgraph.models.edge import ProjectEdge
from pmgraph.models.project import ProjectNode


class RelatedProjectContext(BaseModel):
    """A project reached during traversal, with the edge that led to it."""

    project: ProjectNode
    edge: ProjectEdge
    documents: list[Document] = Field(default_factory=list)

    def get_document(self, doc_type: DocType) -> Document | None:
        return next((d for d in self.documents if d.doc_type == doc_type), None)


class ProjectContext(BaseModel):
    """
    Everything known about one project for prompt injection.

    ``related`` is in traversal (discovery) order and never repeats a project.
    """

    project: ProjectNode
    documents: list[Document] = Field(default_factory=list)
    edges: list[ProjectEdge] = Field(default_factory=list)
    related: list[RelatedProjectContext] = Field(default_factory=list)


class SearchResult(BaseModel):
    """One ranked search hit."""

    project_id: str
    project_name: str
    doc_type: DocType
    snippet: str
    score: int = Field(..., gt=0)
