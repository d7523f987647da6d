"""
Unit Tests for Configuration Management.

Black box tests against the public interface of config.py.
Tests run against the real project files (YAML configs).
Failure scenarios use tmp_path to create controlled filesystems.
"""

import pytest

from focusdesk.backend.core.config import (
    AppConfig,
    Settings,
    find_project_root,
    get_app_config,
    get_database_url,
    get_redis_url,
    get_server_base_url,
    get_settings,
    load_yaml_config,
    validate_project_root,
)
from focusdesk.backend.core.config_schema import (
    ApplicationSchema,
    AssistantSchema,
    FeaturesSchema,
    NotificationsSchema,
    SecuritySchema,
)

CONFIG_FILES = [
    "application.yaml",
    "database.yaml",
    "logging.yaml",
    "features.yaml",
    "security.yaml",
    "assistant.yaml",
    "notifications.yaml",
    "concurrency.yaml",
    "observability.yaml",
]


@pytest.fixture(autouse=True)
def _clear_config_cache():
    """Clear lru_cache between tests so each test gets a fresh load."""
    get_settings.cache_clear()
    get_app_config.cache_clear()
    yield
    get_settings.cache_clear()
    get_app_config.cache_clear()


class TestFindProjectRoot:
    """Tests for .project_root marker discovery."""

    def test_finds_root_from_project_directory(self):
        root = find_project_root()
        assert (root / ".project_root").exists()
        assert (root / "config" / "settings").is_dir()

    def test_raises_when_no_marker_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(RuntimeError, match="Project root not found"):
            find_project_root()

    def test_validate_exits_when_marker_missing(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(SystemExit):
            validate_project_root()


class TestLoadYamlConfig:
    """Tests for YAML file loading from config/settings/."""

    def test_loads_all_config_files(self):
        """Every expected YAML file should be loadable."""
        for filename in CONFIG_FILES:
            data = load_yaml_config(filename)
            assert isinstance(data, dict), f"{filename} did not return a dict"
            assert len(data) > 0, f"{filename} returned empty dict"

    def test_raises_for_nonexistent_file(self):
        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            load_yaml_config("does_not_exist.yaml")

    def test_returns_empty_dict_for_empty_yaml(self, tmp_path, monkeypatch):
        """An empty YAML file should return {} rather than None."""
        (tmp_path / ".project_root").touch()
        settings_dir = tmp_path / "config" / "settings"
        settings_dir.mkdir(parents=True)
        (settings_dir / "empty.yaml").write_text("")
        monkeypatch.chdir(tmp_path)

        assert load_yaml_config("empty.yaml") == {}


class TestSettings:
    """Tests for secrets."""

    def test_secrets_read_from_environment(self, monkeypatch):
        monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123:abc")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

        settings = get_settings()

        assert isinstance(settings, Settings)
        assert settings.telegram_bot_token == "123:abc"
        assert settings.openai_api_key == "sk-test"

    def test_missing_secrets_default_to_empty(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        assert Settings(_env_file=None).openai_api_key == ""


class TestAppConfig:
    """Tests for typed YAML configuration."""

    def test_sections_are_typed(self):
        config = AppConfig()
        assert isinstance(config.application, ApplicationSchema)
        assert isinstance(config.features, FeaturesSchema)
        assert isinstance(config.security, SecuritySchema)
        assert isinstance(config.assistant, AssistantSchema)
        assert isinstance(config.notifications, NotificationsSchema)

    def test_defaults_used_by_the_app(self):
        config = AppConfig()
        assert config.application.api_prefix == "/api/v1"
        assert config.security.trial.days == 7
        assert config.notifications.invites.max_uses == 10
        assert config.concurrency.semaphores.llm > 0

    def test_caching_returns_same_instance(self):
        assert get_app_config() is get_app_config()

    def test_rejects_yaml_with_missing_required_fields(self, tmp_path, monkeypatch):
        """A YAML file missing required fields should fail validation."""
        (tmp_path / ".project_root").touch()
        settings_dir = tmp_path / "config" / "settings"
        settings_dir.mkdir(parents=True)
        for filename in CONFIG_FILES:
            (settings_dir / filename).write_text("name: 'Incomplete'")
        monkeypatch.chdir(tmp_path)

        with pytest.raises(ValueError, match="Invalid configuration"):
            AppConfig()

    def test_rejects_yaml_with_unknown_fields(self):
        """extra='forbid' on schemas should reject unknown YAML keys."""
        from pydantic import ValidationError as PydanticValidationError

        data = load_yaml_config("application.yaml")
        data["unknown_field"] = "oops"
        with pytest.raises(PydanticValidationError, match="Extra inputs are not permitted"):
            ApplicationSchema(**data)


class TestUrlBuilders:
    def test_database_url_drivers(self):
        assert get_database_url(async_driver=True).startswith("postgresql+asyncpg://")
        assert get_database_url(async_driver=False).startswith("postgresql://")

    def test_redis_url_contains_config_values(self):
        redis = get_app_config().database.redis
        url = get_redis_url()
        assert url.startswith("redis://")
        assert f"{redis.host}:{redis.port}/{redis.db}" in url

    def test_server_base_url(self):
        url, timeout = get_server_base_url()
        server = get_app_config().application.server
        assert url == f"http://{server.host}:{server.port}"
        assert timeout > 0
