"""
Services for pmgraph.

High-level business logic services:
- ProjectMemory: Unified interface for all project memory operations
- DocumentMergeEngine: Append/upsert merges with version snapshots
- GraphContextEngine: Context bundles and markdown rendering
- SearchEngine: Keyword ranking with snippets
- classify_updates: Conversation summary routing
"""

from pmgraph.services.classifier import ClassifiedUpdate, classify_updates
from pmgraph.services.document_engine import DocumentMergeEngine
from pmgraph.services.graph_engine import GraphContextEngine
from pmgraph.services.project_memory import ProjectMemory
from pmgraph.services.search_engine import SearchEngine

__all__ = [
    "ProjectMemory",
    "DocumentMergeEngine",
    "GraphContextEngine",
    "SearchEngine",
    "ClassifiedUpdate",
    "classify_updates",
]
