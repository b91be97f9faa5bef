"""
Factory for creating document store backends.
"""

from pmgraph.config import Config
from pmgraph.core.store.base import DocumentStore
from pmgraph.core.store.sqlite_store import SQLiteDocumentStore
from pmgraph.utils.exceptions import ConfigurationError


class DocumentStoreFactory:
    """Factory for creating document store backends from configuration."""

    @staticmethod
    def create(config: Config) -> DocumentStore:
        """
        Create document store from configuration.

        Args:
            config: Main configuration object

        Returns:
            Document store instance

        Raises:
            ConfigurationError: If backend is not supported
        """
        if config.storage.backend == "sqlite":
            return SQLiteDocumentStore(db_path=config.storage.db_path)
        else:
            raise ConfigurationError(
                f"Unsupported storage backend: {config.storage.backend}",
                context={"backend": config.storage.backend},
            )
