"""
Configuration for pmgraph.

Supports loading from:
1. Environment variables (highest priority)
2. YAML config file
3. Default values (fallback)
"""

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_HOME = Path.home() / ".project-memory"


class StorageConfig(BaseModel):
    """Document store configuration."""

    backend: str = "sqlite"
    db_path: str = str(DEFAULT_HOME / "graph.db")


class DocsConfig(BaseModel):
    """Filesystem mirror configuration."""

    docs_root: str = str(DEFAULT_HOME / "docs")
    sync_to_disk: bool = True


class GraphConfig(BaseModel):
    """Context traversal configuration."""

    default_depth: int = Field(default=1, ge=0)
    max_depth_limit: int = Field(default=5, ge=0)
    related_preview_chars: int = Field(default=300, ge=0)


class SearchConfig(BaseModel):
    """Keyword search configuration."""

    default_limit: int = Field(default=10, ge=1)
    snippet_length: int = Field(default=300, ge=1)
    snippet_step: int = Field(default=50, ge=1)
    snippet_lead: int = Field(default=20, ge=0)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    log_to_file: bool = False
    log_dir: str = "logs"
    file_rotation: str = "10 MB"
    file_retention: str = "7 days"
    compression: str = "zip"
    serialize: bool = True


class Config(BaseModel):
    """Main configuration."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    docs: DocsConfig = Field(default_factory=DocsConfig)
    graph: GraphConfig = Field(default_factory=GraphConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "Config":
        """
        Load configuration from environment variables.

        Priority: .env file -> system environment variables -> defaults

        Args:
            env_file: Optional path to .env file (default: .env in working directory)

        Returns:
            Config instance

        Environment variables:
            PM_STORAGE_BACKEND: Store backend (sqlite)
            PM_DB_PATH: SQLite database path
            PM_DOCS_ROOT: Root directory of mirrored markdown files
            PM_SYNC_TO_DISK: Mirror documents to disk after each change
            PM_GRAPH_DEFAULT_DEPTH: Default traversal depth
            PM_GRAPH_MAX_DEPTH: Hard limit on traversal depth
            PM_GRAPH_PREVIEW_CHARS: Related-project preview length
            PM_SEARCH_LIMIT: Default number of search results
            PM_SEARCH_SNIPPET_LENGTH: Snippet window size
            PM_SEARCH_SNIPPET_STEP: Snippet window step
            PM_SEARCH_SNIPPET_LEAD: Characters kept before the best window
            PM_LOG_LEVEL: Log level
        """
        # Load .env file if provided or exists
        if env_file:
            load_dotenv(env_file)
        elif Path(".env").exists():
            load_dotenv()

        def get_env(key: str, default: Any = None) -> Any:
            """Get environment variable with type conversion."""
            value = os.getenv(key)
            if value is None:
                return default
            # If value is empty string, return default
            if value == "":
                return default
            # Convert boolean strings
            if isinstance(default, bool):
                return str(value).lower() in ("true", "1", "yes")
            # Convert numeric strings
            if isinstance(default, int):
                return int(value)
            if isinstance(default, float):
                return float(value)
            return value

        storage_default = StorageConfig()
        docs_default = DocsConfig()

        return cls(
            storage=StorageConfig(
                backend=get_env("PM_STORAGE_BACKEND", "sqlite"),
                db_path=get_env("PM_DB_PATH", storage_default.db_path),
            ),
            docs=DocsConfig(
                docs_root=get_env("PM_DOCS_ROOT", docs_default.docs_root),
                sync_to_disk=get_env("PM_SYNC_TO_DISK", True),
            ),
            graph=GraphConfig(
                default_depth=get_env("PM_GRAPH_DEFAULT_DEPTH", 1),
                max_depth_limit=get_env("PM_GRAPH_MAX_DEPTH", 5),
                related_preview_chars=get_env("PM_GRAPH_PREVIEW_CHARS", 300),
            ),
            search=SearchConfig(
                default_limit=get_env("PM_SEARCH_LIMIT", 10),
                snippet_length=get_env("PM_SEARCH_SNIPPET_LENGTH", 300),
                snippet_step=get_env("PM_SEARCH_SNIPPET_STEP", 50),
                snippet_lead=get_env("PM_SEARCH_SNIPPET_LEAD", 20),
            ),
            logging=LoggingConfig(
                level=get_env("PM_LOG_LEVEL", "INFO"),
                log_to_file=get_env("PM_LOG_TO_FILE", False),
                log_dir=get_env("PM_LOG_DIR", "logs"),
                file_rotation=get_env("PM_LOG_FILE_ROTATION", "10 MB"),
                file_retention=get_env("PM_LOG_FILE_RETENTION", "7 days"),
                compression=get_env("PM_LOG_COMPRESSION", "zip"),
                serialize=get_env("PM_LOG_SERIALIZE", True),
            ),
        )

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> "Config":
        """
        Load configuration from YAML file.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            yaml.YAMLError: If YAML is invalid
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        with open(yaml_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

    @classmethod
    def from_env_or_yaml(
        cls, yaml_path: str | Path | None = None, env_file: str | Path | None = None
    ) -> "Config":
        """
        Load configuration with priority: env vars > YAML > defaults.

        Args:
            yaml_path: Optional path to YAML config
            env_file: Optional path to .env file

        Returns:
            Config instance
        """
        if yaml_path and Path(yaml_path).exists():
            with open(yaml_path) as f:
                config_dict = yaml.safe_load(f) or {}
        else:
            config_dict = {}

        env_config = cls.from_env(env_file=env_file)

        # Merge: env vars override YAML
        final_dict = {**config_dict}

        # Apply env overrides (non-default values)
        default = cls()
        for section in ("storage", "docs", "graph", "search", "logging"):
            if getattr(env_config, section) != getattr(default, section):
                final_dict[section] = getattr(env_config, section).model_dump()

        return cls(**final_dict) if final_dict else env_config
