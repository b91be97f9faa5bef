"""
Custom exception hierarchy for pmgraph.

Provides structured error types for better error handling and debugging.
All exceptions inherit from ProjectMemoryError for easy catching.
"""


class ProjectMemoryError(Exception):
    """
    Base exception for all pmgraph errors.
    All custom exceptions should inherit from this class.
    """

    kind = "error"

    def __init__(self, message: str, context: dict | None = None):
        """
        Initialize pmgraph error.
        Args:
            message: Error message
            context: Optional context dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_payload(self) -> dict:
        """Structured form used by the HTTP layer."""
        return {"error": self.kind, "message": self.message, "context": self.context}


class StoreError(ProjectMemoryError):
    """
    Base exception for store operations.
    Used for errors related to data storage operations.
    """

    kind = "store_error"


class ConstraintViolationError(StoreError):
    """
    Uniqueness or foreign-key failure reported by the store.
    The underlying database message is kept verbatim.
    """

    kind = "constraint_violation"


class ValidationError(ProjectMemoryError):
    """
    Validation errors.
    Raised when input validation fails or data is invalid.
    """

    kind = "validation_error"


class InvalidDocTypeError(ValidationError):
    """Document type outside the eight fixed categories."""

    kind = "invalid_doc_type"


class InvalidEdgeTypeError(ValidationError):
    """Edge type outside depends_on/uses/related/parent_child."""

    kind = "invalid_edge_type"


class NotFoundError(ProjectMemoryError):
    """
    Resource not found errors.
    Raised when a requested resource (project, document, edge) doesn't exist.
    """

    kind = "not_found"


class AlreadyExistsError(ProjectMemoryError):
    """
    Duplicate resource errors.
    Raised when a project name is already taken.
    """

    kind = "already_exists"


class ConfigurationError(ProjectMemoryError):
    """
    Configuration errors.
    Raised when configuration is invalid or missing required values.
    """

    kind = "configuration_error"
