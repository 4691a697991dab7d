import pytest

from tempmon.config import DEFAULT_DATABASE_URL, Settings


ENV_VARS = (
    "DATABASE_URL", "API_HOST", "API_PORT", "CORS_ORIGINS",
    "LOG_LEVEL", "DEFAULT_PAGE_SIZE", "DEFAULT_WINDOW_HOURS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = Settings.from_env(load_env_file=False)

    assert settings.database_url == DEFAULT_DATABASE_URL
    assert settings.api_port == 9247
    assert settings.default_page_size == 100
    assert settings.default_window_hours == 24
    assert settings.cors_origin_list == ["*"]


def test_values_from_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://postgres:postgres@db:5432/TempMon")
    monkeypatch.setenv("API_PORT", "8080")
    monkeypatch.setenv("CORS_ORIGINS", "http://localhost:3000, https://dash.example.org ,")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings.from_env(load_env_file=False)

    assert settings.database_url.endswith("/TempMon")
    assert settings.api_port == 8080
    assert settings.cors_origin_list == ["http://localhost:3000", "https://dash.example.org"]
    assert settings.log_level == "DEBUG"


def test_bad_integer_fails_at_startup(monkeypatch):
    monkeypatch.setenv("API_PORT", "ninety")

    with pytest.raises(ValueError):
        Settings.from_env(load_env_file=False)


def test_settings_are_immutable():
    settings = Settings()

    with pytest.raises(AttributeError):
        settings.api_port = 1
