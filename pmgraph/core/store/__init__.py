"""
Document store implementations for pmgraph.

Provides abstract base and concrete implementations for persistence.

Available backends:
- SQLiteDocumentStore: Local single-file store (aiosqlite)
"""

from pmgraph.core.store.base import DocumentStore
from pmgraph.core.store.factory import DocumentStoreFactory
from pmgraph.core.store.sqlite_store import SQLiteDocumentStore

__all__ = [
    "DocumentStore",
    "DocumentStoreFactory",
    "SQLiteDocumentStore",
]
