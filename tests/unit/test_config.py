"""Unit tests for Settings, the YAML loader and backend selection."""

from __future__ import annotations

import pytest

from feedback_tracker.config.loader import _deep_merge, load_config
from feedback_tracker.config.settings import Settings
from feedback_tracker.main import build_feedback_store, build_repository
from feedback_tracker.providers.feedback.json_file_repository import JsonFileFeedbackRepository
from feedback_tracker.providers.feedback.memory_repository import MemoryFeedbackRepository
from feedback_tracker.providers.feedback.sqlite_repository import SQLiteFeedbackRepository
from feedback_tracker.utils.errors import ConfigurationError

_ENV_VARS = (
    "FEEDBACK_BACKEND",
    "FEEDBACK_DATA_FILE",
    "FEEDBACK_DB_PATH",
    "PERSISTENCE_TIMEOUT",
    "SERIALIZE_WRITES",
    "APP_HOST",
    "APP_PORT",
    "APP_ENV",
    "APP_VERSION",
    "LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Isolate Settings from the developer's shell and any local .env."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


# ======================================================================
# Settings
# ======================================================================


class TestSettings:
    def test_defaults(self, clean_env):
        s = Settings()
        assert s.feedback_backend == "json"
        assert s.feedback_data_file == "data/feedback.json"
        assert s.app_port == 3001
        assert s.app_version == "1.0.0"
        assert s.persistence_timeout == 5.0
        assert s.serialize_writes is False
        assert s.is_production() is False

    def test_environment_overrides(self, clean_env):
        clean_env.setenv("FEEDBACK_BACKEND", "sqlite")
        clean_env.setenv("APP_PORT", "8080")
        clean_env.setenv("SERIALIZE_WRITES", "true")
        clean_env.setenv("APP_ENV", "production")

        s = Settings()
        assert s.feedback_backend == "sqlite"
        assert s.app_port == 8080
        assert s.serialize_writes is True
        assert s.is_production() is True

    def test_dotenv_file_is_read(self, clean_env, tmp_path):
        (tmp_path / ".env").write_text("FEEDBACK_DATA_FILE=/srv/feedback.json\n", encoding="utf-8")
        assert Settings().feedback_data_file == "/srv/feedback.json"

    def test_non_positive_timeout_rejected(self, clean_env):
        clean_env.setenv("PERSISTENCE_TIMEOUT", "0")
        with pytest.raises(ValueError):
            Settings()


# ======================================================================
# load_config
# ======================================================================


class TestLoadConfig:
    def test_missing_yaml_uses_default_cors(self, clean_env, tmp_path):
        config = load_config(str(tmp_path / "absent.yaml"), settings=Settings())

        assert config["cors"]["allowed_origins"] == ["*"]
        assert "DELETE" in config["cors"]["allowed_methods"]
        assert config["app"]["port"] == 3001

    def test_yaml_values_merged_under_env(self, clean_env, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "app:\n"
            "  title: Custom Title\n"
            "  port: 9999\n"
            "cors:\n"
            "  allowed_origins: [https://example.com]\n",
            encoding="utf-8",
        )
        clean_env.setenv("APP_PORT", "4000")

        config = load_config(str(path), settings=Settings())

        assert config["app"]["title"] == "Custom Title"
        assert config["app"]["port"] == 4000
        assert config["cors"]["allowed_origins"] == ["https://example.com"]
        assert config["cors"]["allowed_headers"] == ["Content-Type", "Authorization"]

    def test_app_section_reflects_settings(self, clean_env, tmp_path):
        s = Settings(app_version="2.3.4", feedback_backend="memory")
        config = load_config(str(tmp_path / "absent.yaml"), settings=s)

        assert config["app"]["version"] == "2.3.4"
        # Backends are built from Settings directly.
        assert "persistence" not in config

    def test_empty_yaml_file(self, clean_env, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")
        config = load_config(str(path), settings=Settings())
        assert config["logging"]["level"] == "INFO"

    def test_deep_merge_replaces_non_dict_values(self):
        base = {"a": {"b": 1, "c": [1]}, "d": 1}
        _deep_merge(base, {"a": {"c": [2]}, "d": {"e": 2}})
        assert base == {"a": {"b": 1, "c": [2]}, "d": {"e": 2}}


# ======================================================================
# Backend selection
# ======================================================================


class TestBuildRepository:
    def test_json_backend(self, clean_env, tmp_path):
        repo = build_repository(
            Settings(feedback_backend="json", feedback_data_file=str(tmp_path / "f.json"))
        )
        assert isinstance(repo, JsonFileFeedbackRepository)
        assert repo.data_file == tmp_path / "f.json"

    def test_sqlite_backend(self, clean_env):
        assert isinstance(
            build_repository(Settings(feedback_backend="sqlite")), SQLiteFeedbackRepository
        )

    def test_backend_name_is_case_insensitive(self, clean_env):
        assert isinstance(
            build_repository(Settings(feedback_backend=" Memory ")), MemoryFeedbackRepository
        )

    def test_unknown_backend_raises(self, clean_env):
        with pytest.raises(ConfigurationError) as exc_info:
            build_repository(Settings(feedback_backend="postgres"))
        assert "postgres" in exc_info.value.message

    def test_store_uses_selected_backend(self, clean_env):
        store = build_feedback_store(Settings(feedback_backend="memory"))
        assert store.repository.get_provider_name() == "memory"
