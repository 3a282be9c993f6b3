import pytest
import yaml

from signage.core.config import Config, ConfigManager, apply_env_overrides
from signage.core.errors import ConfigurationError


@pytest.fixture(autouse=True)
def reset_singleton():
    ConfigManager.reset_instance()
    yield
    ConfigManager.reset_instance()


def test_defaults():
    config = Config()
    assert config.server.port == 5001
    assert config.database.url == "sqlite:///./signage.db"
    assert config.auth.token_lifetime == 86400
    assert config.weather.refresh_interval == 60
    assert config.display.poll_interval == 60
    assert config.display.error_reload_delay == 30
    assert config.display.fallback_duration == 7


def test_missing_file_writes_defaults(tmp_path):
    path = tmp_path / "config" / "signage.yaml"
    manager = ConfigManager(path)

    assert path.exists()
    data = yaml.safe_load(path.read_text())
    assert data["server"]["port"] == 5001
    # Generated secret is persisted so tokens survive restarts
    assert data["auth"]["jwt_secret"] == manager.get().auth.jwt_secret.get_secret_value()


def test_edited_file_is_read_back(tmp_path):
    path = tmp_path / "signage.yaml"
    ConfigManager(path)

    data = yaml.safe_load(path.read_text())
    data["weather"].update(snowfall_enabled=True, api_key="abc")
    path.write_text(yaml.safe_dump(data))

    reloaded = ConfigManager(path).get()
    assert reloaded.weather.snowfall_enabled is True
    assert reloaded.weather.api_key == "abc"
    assert reloaded.auth.jwt_secret.get_secret_value() == data["auth"]["jwt_secret"]


def test_invalid_file_raises_configuration_error(tmp_path):
    path = tmp_path / "signage.yaml"
    path.write_text("server:\n  port: not-a-port\n")
    with pytest.raises(ConfigurationError):
        ConfigManager(path)


def test_invalid_log_format_rejected():
    with pytest.raises(ValueError):
        Config.model_validate({"logging": {"format": "xml"}})


def test_env_overrides_apply_without_persisting(tmp_path, monkeypatch):
    path = tmp_path / "signage.yaml"
    manager = ConfigManager(path)

    monkeypatch.setenv("ADMIN_PASSWORD", "from-env")
    monkeypatch.setenv("WEATHER_API_KEY", "env-key")
    monkeypatch.setenv("PORT", "8080")

    config = manager.get()
    assert config.auth.admin_password.get_secret_value() == "from-env"
    assert config.weather.api_key == "env-key"
    assert config.server.port == 8080

    data = yaml.safe_load(path.read_text())
    assert data["auth"]["admin_password"] == ""
    assert data["server"]["port"] == 5001


def test_signage_database_url_wins_over_database_url():
    config = apply_env_overrides(
        Config(),
        {"DATABASE_URL": "sqlite:///a.db", "SIGNAGE_DATABASE_URL": "sqlite:///b.db"},
    )
    assert config.database.url == "sqlite:///b.db"


def test_bad_env_override_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        apply_env_overrides(Config(), {"PORT": "eighty"})


def test_get_instance_is_a_singleton(tmp_path):
    first = ConfigManager.get_instance(tmp_path / "signage.yaml")
    assert ConfigManager.get_instance() is first
    assert first.path == tmp_path / "signage.yaml"
