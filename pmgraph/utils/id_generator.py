"""
ID generation utilities for pmgraph.

Provides consistent ID generation for all entity types:
- Projects: proj_xxx
- Documents: doc_xxx
- Edges: edge_xxx
- Document versions: ver_xxx
- Conversation logs: conv_xxx
"""

from uuid import uuid4


def _generate(prefix: str) -> str:
    return f"{prefix}_{uuid4().hex[:12]}"


def generate_project_id() -> str:
    """
    Generate unique Project ID.

    Returns:
        ID in format "proj_xxx" where xxx is 12 hex characters
    """
    return _generate("proj")


def generate_document_id() -> str:
    """
    Generate unique Document ID.

    Returns:
        ID in format "doc_xxx" where xxx is 12 hex characters
    """
    return _generate("doc")


def generate_edge_id() -> str:
    """
    Generate unique Edge ID.

    Returns:
        ID in format "edge_xxx" where xxx is 12 hex characters
    """
    return _generate("edge")


def generate_version_id() -> str:
    """
    Generate unique Document Version ID.

    Returns:
        ID in format "ver_xxx" where xxx is 12 hex characters
    """
    return _generate("ver")


def generate_conversation_id() -> str:
    """
    Generate unique Conversation Log ID.

    Returns:
        ID in format "conv_xxx" where xxx is 12 hex characters
    """
    return _generate("conv")
