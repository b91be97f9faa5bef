"""
pmgraph - a graph-backed knowledge base of project documents.

Every registered project owns eight typed markdown documents that are
merged, versioned, linked to other projects and searched.
"""

__version__ = "0.1.0"
