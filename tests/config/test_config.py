"""
Tests for configuration management.

Tests config loading from:
1. Defaults
2. Environment variables
3. YAML files
4. Combined (env overrides YAML)
"""

import pytest
import yaml

from pmgraph.config import Config, DocsConfig, GraphConfig, SearchConfig, StorageConfig


class TestConfigDefaults:
    """Test default configuration values."""

    def test_default_config_creation(self):
        """Test creating config with defaults."""
        config = Config()

        assert config.storage.backend == "sqlite"
        assert config.storage.db_path.endswith("graph.db")
        assert ".project-memory" in config.storage.db_path
        assert config.docs.docs_root.endswith("docs")
        assert config.docs.sync_to_disk is True

        assert config.graph.default_depth == 1
        assert config.graph.max_depth_limit == 5
        assert config.graph.related_preview_chars == 300

        assert config.search.default_limit == 10
        assert config.search.snippet_length == 300
        assert config.search.snippet_step == 50
        assert config.search.snippet_lead == 20

        assert config.logging.level == "INFO"
        assert config.logging.log_to_file is False

    def test_section_validation(self):
        """Test invalid section values are rejected."""
        with pytest.raises(ValueError):
            GraphConfig(max_depth_limit=-1)
        with pytest.raises(ValueError):
            SearchConfig(default_limit=0)


class TestConfigFromEnv:
    """Test loading configuration from environment variables."""

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("PM_DB_PATH", "/tmp/pm/graph.db")
        monkeypatch.setenv("PM_DOCS_ROOT", "/tmp/pm/docs")
        monkeypatch.setenv("PM_SYNC_TO_DISK", "false")
        monkeypatch.setenv("PM_GRAPH_MAX_DEPTH", "3")
        monkeypatch.setenv("PM_SEARCH_LIMIT", "25")
        monkeypatch.setenv("PM_LOG_LEVEL", "DEBUG")

        config = Config.from_env()

        assert config.storage.db_path == "/tmp/pm/graph.db"
        assert config.docs.docs_root == "/tmp/pm/docs"
        assert config.docs.sync_to_disk is False
        assert config.graph.max_depth_limit == 3
        assert config.search.default_limit == 25
        assert config.logging.level == "DEBUG"

    @pytest.mark.parametrize("raw,expected", [("true", True), ("1", True), ("yes", True), ("no", False)])
    def test_boolean_parsing(self, monkeypatch, raw, expected):
        monkeypatch.setenv("PM_LOG_TO_FILE", raw)

        assert Config.from_env().logging.log_to_file is expected

    def test_empty_value_uses_default(self, monkeypatch):
        monkeypatch.setenv("PM_SEARCH_LIMIT", "")

        assert Config.from_env().search.default_limit == 10

    def test_env_file(self, tmp_path, monkeypatch):
        # recorded so teardown removes the value load_dotenv sets
        monkeypatch.setenv("PM_GRAPH_DEFAULT_DEPTH", "0")
        monkeypatch.delenv("PM_GRAPH_DEFAULT_DEPTH")
        env_file = tmp_path / ".env.test"
        env_file.write_text("PM_GRAPH_DEFAULT_DEPTH=2\n")

        config = Config.from_env(env_file=env_file)

        assert config.graph.default_depth == 2


class TestConfigFromYaml:
    """Test loading configuration from YAML files."""

    def test_from_yaml(self, tmp_path):
        yaml_path = tmp_path / "config.yaml"
        yaml_path.write_text(
            yaml.safe_dump(
                {
                    "storage": {"db_path": "/data/pm.db"},
                    "graph": {"max_depth_limit": 2},
                }
            )
        )

        config = Config.from_yaml(yaml_path)

        assert config.storage.db_path == "/data/pm.db"
        assert config.graph.max_depth_limit == 2
        assert config.search == SearchConfig()

    def test_empty_yaml(self, tmp_path):
        yaml_path = tmp_path / "empty.yaml"
        yaml_path.write_text("")

        assert Config.from_yaml(yaml_path) == Config()

    def test_missing_yaml(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Config.from_yaml(tmp_path / "nope.yaml")


class TestConfigFromEnvOrYaml:
    """Test env-over-YAML precedence."""

    def test_env_section_overrides_yaml(self, tmp_path, monkeypatch):
        yaml_path = tmp_path / "config.yaml"
        yaml_path.write_text(
            yaml.safe_dump({"graph": {"max_depth_limit": 2}, "search": {"default_limit": 5}})
        )
        monkeypatch.setenv("PM_SEARCH_LIMIT", "25")

        config = Config.from_env_or_yaml(yaml_path=yaml_path)

        assert config.graph.max_depth_limit == 2
        assert config.search.default_limit == 25

    def test_without_yaml(self, monkeypatch):
        monkeypatch.setenv("PM_STORAGE_BACKEND", "sqlite")

        config = Config.from_env_or_yaml(yaml_path=None)

        assert config.storage == StorageConfig()
        assert config.docs == DocsConfig()
