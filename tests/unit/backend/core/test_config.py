"""
Unit Tests for Configuration Management.

Black box tests against the public interface of config.py.
Tests run against the real project files (YAML configs).
Failure scenarios use tmp_path to create controlled filesystems.
No mocking: the config loader is the system under test.
"""

from pathlib import Path

import pytest

from adnotes.backend.core.config import (
    AppConfig,
    Settings,
    find_project_root,
    get_app_config,
    get_database_path,
    get_database_url,
    get_settings,
    load_yaml_config,
    validate_project_root,
)
from adnotes.backend.core.config_schema import (
    ApplicationSchema,
    DatabaseSchema,
    LoggingSchema,
)
from adnotes.session.context import SessionTimings
from adnotes.session.keys import DEFAULT_BINDINGS, KeyMap

APPLICATION_YAML = """
name: adnotes
version: "0.1.0"
description: test
environment: test
session:
  page_size: 10
  debounce_ms: 500
  note_saved_ms: 1000
  edit_result_ms: 800
  server_stopped_ms: 1000
companion:
  process_name: server
keys: {}
"""

LOGGING_YAML = """
level: INFO
format: json
handlers:
  console:
    enabled: false
  file:
    enabled: false
    path: logs/system.jsonl
    max_bytes: 1024
    backup_count: 1
"""


@pytest.fixture(autouse=True)
def _clear_config_cache(monkeypatch):
    """Clear lru_cache between tests so each test gets a fresh load."""
    monkeypatch.delenv("ADNOTES_DATABASE_PATH", raising=False)
    get_settings.cache_clear()
    get_app_config.cache_clear()
    yield
    get_settings.cache_clear()
    get_app_config.cache_clear()


@pytest.fixture
def project(tmp_path, monkeypatch) -> Path:
    """A minimal project tree with valid settings, used as the working directory."""
    (tmp_path / ".project_root").touch()
    settings_dir = tmp_path / "config" / "settings"
    settings_dir.mkdir(parents=True)
    (settings_dir / "application.yaml").write_text(APPLICATION_YAML)
    (settings_dir / "database.yaml").write_text("path: data/notes.db\necho: false\n")
    (settings_dir / "logging.yaml").write_text(LOGGING_YAML)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# =============================================================================
# find_project_root
# =============================================================================


class TestFindProjectRoot:
    """Tests for .project_root marker discovery."""

    def test_finds_root_from_project_directory(self):
        root = find_project_root()
        assert root.is_dir()
        assert (root / ".project_root").exists()

    def test_finds_root_from_subdirectory(self, project, monkeypatch):
        nested = project / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        assert find_project_root() == project

    def test_raises_when_no_marker_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(RuntimeError, match="Project root not found"):
            find_project_root()


class TestValidateProjectRoot:
    """Tests for the SystemExit wrapper around find_project_root."""

    def test_returns_path_when_marker_exists(self):
        root = validate_project_root()
        assert (root / ".project_root").exists()

    def test_exits_when_marker_missing(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(SystemExit):
            validate_project_root()


# =============================================================================
# load_yaml_config
# =============================================================================


class TestLoadYamlConfig:
    """Tests for YAML file loading from config/settings/."""

    def test_loads_all_config_files(self):
        """Every shipped YAML file should be loadable."""
        for filename in ("application.yaml", "database.yaml", "logging.yaml"):
            data = load_yaml_config(filename)
            assert isinstance(data, dict), f"{filename} did not return a dict"
            assert len(data) > 0, f"{filename} returned empty dict"

    def test_raises_for_nonexistent_file(self):
        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            load_yaml_config("does_not_exist.yaml")

    def test_returns_empty_dict_for_empty_yaml(self, project):
        """An empty YAML file should return {} rather than None."""
        (project / "config" / "settings" / "empty.yaml").write_text("")

        assert load_yaml_config("empty.yaml") == {}


# =============================================================================
# AppConfig (validated YAML)
# =============================================================================


class TestAppConfig:
    """Tests for validated YAML configuration loading."""

    def test_sections_return_typed_schemas(self):
        config = AppConfig()
        assert isinstance(config.application, ApplicationSchema)
        assert isinstance(config.database, DatabaseSchema)
        assert isinstance(config.logging, LoggingSchema)

    def test_shipped_session_settings(self):
        session = AppConfig().application.session
        assert session.page_size == 10
        assert session.debounce_ms == 500
        assert session.note_saved_ms == 1000
        assert session.edit_result_ms == 800
        assert session.server_stopped_ms == 1000

    def test_shipped_keys_match_defaults(self):
        keymap = KeyMap.from_config(AppConfig().application.keys)
        assert keymap.bindings == DEFAULT_BINDINGS

    def test_timings_convert_milliseconds(self):
        timings = SessionTimings.from_schema(AppConfig().application.session)
        assert timings == SessionTimings()

    def test_rejects_yaml_with_missing_required_fields(self, project):
        (project / "config" / "settings" / "application.yaml").write_text("name: 'Incomplete'")

        with pytest.raises(ValueError, match="Invalid configuration in application.yaml"):
            AppConfig()

    def test_rejects_yaml_with_unknown_fields(self, project):
        """extra='forbid' on schemas should reject unknown YAML keys."""
        path = project / "config" / "settings" / "database.yaml"
        path.write_text("path: data/notes.db\necho: false\nhost: localhost\n")

        with pytest.raises(ValueError, match="Invalid configuration in database.yaml"):
            AppConfig()

    def test_rejects_non_positive_page_size(self, project):
        path = project / "config" / "settings" / "application.yaml"
        path.write_text(APPLICATION_YAML.replace("page_size: 10", "page_size: 0"))

        with pytest.raises(ValueError, match="Invalid configuration"):
            AppConfig()

    def test_get_app_config_is_cached(self):
        assert get_app_config() is get_app_config()


# =============================================================================
# Overrides and database location
# =============================================================================


class TestDatabaseLocation:
    """Tests for database path resolution."""

    def test_relative_yaml_path_resolves_against_root(self, project):
        assert get_database_path() == project / "data" / "notes.db"

    def test_environment_overrides_yaml(self, project, monkeypatch, tmp_path):
        override = tmp_path / "elsewhere" / "mine.db"
        monkeypatch.setenv("ADNOTES_DATABASE_PATH", str(override))

        assert isinstance(get_settings(), Settings)
        assert get_database_path() == override

    def test_env_file_overrides_yaml(self, project):
        (project / "config" / ".env").write_text("ADNOTES_DATABASE_PATH=from_env_file.db\n")

        assert get_database_path() == project / "from_env_file.db"

    def test_database_url_uses_aiosqlite(self, tmp_path):
        url = get_database_url(tmp_path / "notes.db")
        assert url == f"sqlite+aiosqlite:///{tmp_path / 'notes.db'}"
