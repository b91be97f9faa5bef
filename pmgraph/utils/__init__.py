"""Utility modules for pmgraph."""

from pmgraph.utils.exceptions import (
    AlreadyExistsError,
    ConfigurationError,
    ConstraintViolationError,
    InvalidDocTypeError,
    InvalidEdgeTypeError,
    NotFoundError,
    ProjectMemoryError,
    StoreError,
    ValidationError,
)
from pmgraph.utils.id_generator import (
    generate_conversation_id,
    generate_document_id,
    generate_edge_id,
    generate_project_id,
    generate_version_id,
)
from pmgraph.utils.logger import get_logger, setup_logging

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    # ID Generators
    "generate_project_id",
    "generate_document_id",
    "generate_edge_id",
    "generate_version_id",
    "generate_conversation_id",
    # Exceptions
    "ProjectMemoryError",
    "StoreError",
    "ConstraintViolationError",
    "ValidationError",
    "InvalidDocTypeError",
    "InvalidEdgeTypeError",
    "NotFoundError",
    "AlreadyExistsError",
    "ConfigurationError",
]
