"""
Tests for ID generation utilities.

Tests cover:
1. Project, document, edge, version and conversation ID formats
2. Uniqueness guarantees
"""

import pytest

from pmgraph.utils import (
    generate_conversation_id,
    generate_document_id,
    generate_edge_id,
    generate_project_id,
    generate_version_id,
)

GENERATORS = [
    (generate_project_id, "proj_"),
    (generate_document_id, "doc_"),
    (generate_edge_id, "edge_"),
    (generate_version_id, "ver_"),
    (generate_conversation_id, "conv_"),
]


@pytest.mark.unit
class TestIdFormats:
    """Tests for ID prefixes and suffix shape."""

    @pytest.mark.parametrize("generate,prefix", GENERATORS)
    def test_format(self, generate, prefix):
        """Test ID format: <prefix>xxx (12 hex chars)."""
        generated = generate()

        assert generated.startswith(prefix)
        assert len(generated) == len(prefix) + 12
        int(generated[len(prefix) :], 16)

    @pytest.mark.parametrize("generate,prefix", GENERATORS)
    def test_uniqueness(self, generate, prefix):
        """Test that generated IDs are unique."""
        ids = [generate() for _ in range(1000)]
        assert len(ids) == len(set(ids))


@pytest.mark.unit
class TestCrossTypeUniqueness:
    """IDs of different kinds never collide."""

    def test_prefixes_distinguish_types(self):
        ids = [generate() for generate, _ in GENERATORS]
        assert len({i.split("_")[0] for i in ids}) == len(GENERATORS)
