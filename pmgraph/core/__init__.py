"""
Core building blocks for pmgraph.

- store: persistence interface and SQLite backend
- merge: append/upsert markdown merge strategies
- filesystem: markdown mirror on disk
"""

from pmgraph.core.filesystem import FileSync
from pmgraph.core.merge import merge_document
from pmgraph.core.store import DocumentStore, DocumentStoreFactory, SQLiteDocumentStore

__all__ = [
    "DocumentStore",
    "DocumentStoreFactory",
    "SQLiteDocumentStore",
    "FileSync",
    "merge_document",
]
