"""Project edge models."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from pmgraph.utils.exceptions import InvalidEdgeTypeError
from pmgraph.utils.id_generator import generate_edge_id


class EdgeType(str, Enum):
    """Types of relations between projects."""

    DEPENDS_ON = "depends_on"
    USES = "uses"
    RELATED = "related"
    PARENT_CHILD = "parent_child"


class ProjectEdge(BaseModel):
    """
    Directed relation between two projects.

    Several edges may connect the same ordered pair. ``bidirectional`` only
    changes how traversal computes neighbors; storage stays directed.
    """

    model_config = ConfigDict(json_encoders={datetime: lambda v: v.isoformat()})

    id: str = Field(default_factory=generate_edge_id)
    from_id: str
    to_id: str
    type: EdgeType
    description: str = ""
    strength: float = Field(default=0.5, ge=0.0, le=1.0)
    bidirectional: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def touches(self, project_id: str) -> bool:
        """Check whether either endpoint is ``project_id``."""
        return self.from_id == project_id or self.to_id == project_id

    def other_end(self, project_id: str) -> str:
        """Endpoint opposite to ``project_id``."""
        return self.to_id if self.from_id == project_id else self.from_id


def parse_edge_type(value: "EdgeType | str") -> EdgeType:
    """
    Coerce a raw value to EdgeType.

    Raises:
        InvalidEdgeTypeError: If the value is not a known edge type
    """
    try:
        return EdgeType(value)
    except ValueError as e:
        raise InvalidEdgeTypeError(
            f"Invalid edge type: {value}",
            context={"edge_type": str(value), "allowed": [t.value for t in EdgeType]},
        ) from e
