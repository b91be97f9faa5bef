"""
Keyword search over project documents.

Scoring is plain substring frequency: for each query token, the number of
non-overlapping occurrences in the lower-cased content. Cost is
O(document length x token count) per candidate, which is fine for a
personal/team knowledge base.
"""

from pmgraph.config import SearchConfig
from pmgraph.core.store.base import DocumentStore
from pmgraph.models.context import SearchResult
from pmgraph.models.document import DocType, parse_doc_type
from pmgraph.utils.exceptions import ValidationError
from pmgraph.utils.logger import get_logger

logger = get_logger(__name__)


def tokenize(query: str) -> list[str]:
    """
    Split a query into lower-cased keywords.

    Tokens of length one or less are dropped.
    """
    return [token for token in query.lower().split() if len(token) > 1]


def keyword_score(text: str, keywords: list[str]) -> int:
    """
    Sum of non-overlapping occurrences of each keyword in ``text``.

    Args:
        text: Lower-cased text
        keywords: Lower-cased tokens

    Returns:
        Match count
    """
    return sum(text.count(keyword) for keyword in keywords)


def extract_snippet(
    content: str,
    keywords: list[str],
    max_length: int = 300,
    step: int = 50,
    lead: int = 20,
) -> str:
    """
    Cut the densest window of ``content`` around the keywords.

    Windows of ``max_length`` characters start every ``step`` characters.
    The first best-scoring window wins. The snippet starts ``lead``
    characters before it and is marked with ``...`` where clipped.

    Args:
        content: Original-case document content
        keywords: Lower-cased tokens
        max_length: Window and snippet size
        step: Distance between window starts
        lead: Context kept before the best window

    Returns:
        Snippet text
    """
    lower = content.lower()
    best_index = 0
    best_score = 0

    for i in range(0, len(lower), step):
        score = keyword_score(lower[i : i + max_length], keywords)
        if score > best_score:
            best_score = score
            best_index = i

    start = max(0, best_index - lead)
    end = min(len(content), start + max_length)
    snippet = content[start:end].strip()

    if start > 0:
        snippet = "..." + snippet
    if end < len(content):
        snippet = snippet + "..."

    return snippet


class SearchEngine:
    """
    Ranks documents against a free-text query.

    Candidates arrive most-recently-modified first; a stable sort by score
    keeps that order among equal scores.
    """

    def __init__(self, store: DocumentStore, config: SearchConfig | None = None):
        """
        Initialize search engine.

        Args:
            store: Document store
            config: Search configuration
        """
        self.store = store
        self.config = config or SearchConfig()

    async def search(
        self,
        query: str,
        project_id: str | None = None,
        doc_types: list[DocType | str] | None = None,
        limit: int | None = None,
    ) -> list[SearchResult]:
        """
        Search documents by keyword frequency.

        Args:
            query: Free-text query
            project_id: Optional resolved project ID to scope the search
            doc_types: Optional doc type filter
            limit: Maximum results (defaults to config.default_limit)

        Returns:
            Results with score > 0, best first

        Raises:
            InvalidDocTypeError: If a doc type filter value is unknown
            ValidationError: If limit is below 1
        """
        limit = self.config.default_limit if limit is None else limit
        if limit < 1:
            raise ValidationError(
                f"Search limit must be at least 1, got {limit}", context={"limit": limit}
            )
        types = [parse_doc_type(t) for t in doc_types] if doc_types else None
        keywords = tokenize(query)

        candidates = await self.store.query_documents(project_id=project_id, doc_types=types)

        scored: list[SearchResult] = []
        for document, project_name in candidates:
            score = keyword_score(document.content.lower(), keywords)
            if score <= 0:
                continue
            scored.append(
                SearchResult(
                    project_id=document.project_id,
                    project_name=project_name,
                    doc_type=document.doc_type,
                    snippet=extract_snippet(
                        document.content,
                        keywords,
                        max_length=self.config.snippet_length,
                        step=self.config.snippet_step,
                        lead=self.config.snippet_lead,
                    ),
                    score=score,
                )
            )

        # list.sort is stable: ties keep last-modified order
        scored.sort(key=lambda result: result.score, reverse=True)

        logger.debug(
            f"Search matched {len(scored)} of {len(candidates)} documents "
            f"for {len(keywords)} keywords"
        )
        return scored[:limit]
