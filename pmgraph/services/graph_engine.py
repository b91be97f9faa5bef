"""
Graph Context Engine - assembles a project's context bundle.

Collects a root project's documents and edges and, on request, walks the
project graph breadth-first up to a bounded depth. Each project is emitted
at most once; cycles terminate because a single visited-set spans the whole
walk. Dangling edges (pointing at deleted projects) are skipped.
"""

from collections import deque

from pmgraph.config import GraphConfig
from pmgraph.core.store.base import DocumentStore
from pmgraph.models.context import ProjectContext, RelatedProjectContext
from pmgraph.models.document import DocType
from pmgraph.models.edge import ProjectEdge
from pmgraph.utils.logger import get_logger

logger = get_logger(__name__)


def neighbor_ids(project_id: str, edges: list[ProjectEdge]) -> list[str]:
    """
    Projects adjacent to ``project_id`` through ``edges``.

    The opposite endpoint of every edge is a neighbor; bidirectional edges
    contribute both endpoints. The project itself is never returned.
    Order follows first discovery.

    Args:
        project_id: Frontier project
        edges: Edges touching the frontier project

    Returns:
        Ordered, de-duplicated neighbor IDs
    """
    found: dict[str, None] = {}
    for edge in edges:
        if edge.from_id == project_id:
            found[edge.to_id] = None
        if edge.to_id == project_id:
            found[edge.from_id] = None
        if edge.bidirectional:
            found[edge.from_id] = None
            found[edge.to_id] = None
    found.pop(project_id, None)
    return list(found)


class GraphContextEngine:
    """
    Builds ProjectContext bundles and renders them as markdown.

    Features:
    - Root documents and incoming/outgoing edges
    - Bounded-depth breadth-first expansion of related projects
    - Deterministic markdown transcript for prompt injection
    """

    def __init__(self, store: DocumentStore, config: GraphConfig | None = None):
        """
        Initialize graph context engine.

        Args:
            store: Document store
            config: Traversal configuration
        """
        self.store = store
        self.config = config or GraphConfig()

    def clamp_depth(self, max_depth: int) -> int:
        """Bound traversal depth to [0, max_depth_limit]."""
        limit = self.config.max_depth_limit
        if max_depth > limit:
            logger.warning(f"Traversal depth {max_depth} clamped to {limit}")
            return limit
        return max(0, max_depth)

    async def get_context(
        self,
        project_id: str,
        include_related: bool = False,
        max_depth: int = 1,
    ) -> ProjectContext | None:
        """
        Assemble the context of a project.

        Args:
            project_id: Root project ID
            include_related: Whether to walk the graph
            max_depth: Number of hops to expand (clamped)

        Returns:
            ProjectContext, or None if the root does not exist
        """
        project = await self.store.get_project(project_id)
        if project is None:
            logger.debug(f"Context root not found: {project_id}")
            return None

        documents = await self.store.get_documents(project_id)
        edges = await self.store.get_edges(project_id)

        related: list[RelatedProjectContext] = []
        depth = self.clamp_depth(max_depth)
        if include_related and depth > 0:
            related = await self._collect_related(project_id, edges, depth)

        logger.debug(
            f"Context for {project_id}: {len(documents)} documents, "
            f"{len(edges)} edges, {len(related)} related"
        )
        return ProjectContext(project=project, documents=documents, edges=edges, related=related)

    async def _collect_related(
        self,
        root_id: str,
        root_edges: list[ProjectEdge],
        max_depth: int,
    ) -> list[RelatedProjectContext]:
        """
        Breadth-first walk from the root.

        Queue items are (project ID, edges of that project, remaining depth).
        """
        visited = {root_id}
        related: list[RelatedProjectContext] = []
        frontier = deque([(root_id, root_edges, max_depth)])

        while frontier:
            current_id, current_edges, depth = frontier.popleft()

            for neighbor_id in neighbor_ids(current_id, current_edges):
                if neighbor_id in visited:
                    continue
                visited.add(neighbor_id)

                neighbor = await self.store.get_project(neighbor_id)
                if neighbor is None:
                    logger.debug(f"Skipping dangling reference {neighbor_id} from {current_id}")
                    continue

                neighbor_docs = await self.store.get_documents(neighbor_id)
                neighbor_edges = await self.store.get_edges(neighbor_id)

                # Prefer an edge the current project already knows about
                connecting = next((e for e in current_edges if e.touches(neighbor_id)), None)
                if connecting is None:
                    connecting = next(
                        (e for e in neighbor_edges if e.touches(current_id)), None
                    )

                if connecting is not None:
                    related.append(
                        RelatedProjectContext(
                            project=neighbor, edge=connecting, documents=neighbor_docs
                        )
                    )

                if depth > 1:
                    frontier.append((neighbor_id, neighbor_edges, depth - 1))

        return related

    async def render_markdown(self, context: ProjectContext) -> str:
        """
        Render a context bundle as a markdown transcript.

        Output is byte-for-byte reproducible for the same context; the only
        store access is resolving the names of edge endpoints.

        Args:
            context: Assembled context

        Returns:
            Markdown text
        """
        project = context.project
        preview = self.config.related_preview_chars
        lines: list[str] = []

        lines.append(f"# Project: {project.display_name}")
        lines.append(f"**Name:** {project.name}")
        lines.append(f"**Path:** {project.path}")
        lines.append(f"**Tech Stack:** {', '.join(project.tech_stack) or 'N/A'}")
        lines.append(f"**Status:** {project.status.value}")
        lines.append("")

        for document in context.documents:
            if document.content.strip():
                lines.append("---")
                lines.append(f"## [{document.doc_type.value.upper()}]")
                lines.append(document.content)
                lines.append("")

        if context.edges:
            lines.append("---")
            lines.append("## Dependencies & Relations")
            for edge in context.edges:
                outgoing = edge.from_id == project.id
                direction = "→" if outgoing else "←"
                other_id = edge.to_id if outgoing else edge.from_id
                other = await self.store.get_project(other_id)
                other_name = other.name if other else other_id
                lines.append(
                    f"- {direction} **{other_name}** ({edge.type.value}): "
                    f"{edge.description or 'N/A'}"
                )
            lines.append("")

        if context.related:
            lines.append("---")
            lines.append("## Related Projects")
            for rel in context.related:
                lines.append(f"### {rel.project.display_name} ({rel.edge.type.value})")
                progress = rel.get_document(DocType.PROGRESS)
                prd = rel.get_document(DocType.PRD)
                if progress:
                    lines.append(f"**Progress:** {progress.content[:preview]}...")
                if prd:
                    lines.append(f"**PRD:** {prd.content[:preview]}...")
                lines.append("")

        return "\n".join(lines)
