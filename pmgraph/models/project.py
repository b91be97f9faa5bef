"""Project node models."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from pmgraph.utils.id_generator import generate_project_id


class ProjectType(str, Enum):
    """Kinds of tracked units."""

    PROJECT = "project"
    MODULE = "module"


class ProjectStatus(str, Enum):
    """Project lifecycle status."""

    ACTIVE = "active"
    PAUSED = "paused"
    ARCHIVED = "archived"


class ProjectNode(BaseModel):
    """
    A tracked unit of work or codebase.

    Every project owns exactly eight documents (one per DocType) which are
    created together with the node. Identity is the generated ``id``; the
    ``name`` slug is unique and is accepted anywhere an id is.
    """

    model_config = ConfigDict(json_encoders={datetime: lambda v: v.isoformat()})

    id: str = Field(default_factory=generate_project_id)
    name: str = Field(..., min_length=1, description="Unique project slug")
    display_name: str = Field(default="", description="Human-readable name")
    path: str = Field(..., description="Filesystem path to the project")
    type: ProjectType = ProjectType.PROJECT
    tech_stack: list[str] = Field(default_factory=list)
    owner: str = ""
    status: ProjectStatus = ProjectStatus.ACTIVE

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def model_post_init(self, __context) -> None:
        if not self.display_name:
            self.display_name = self.name

    def is_active(self) -> bool:
        """Check if project is currently active."""
        return self.status == ProjectStatus.ACTIVE
