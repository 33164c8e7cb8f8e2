from __future__ import annotations

import pytest

from learning_curve.client.config import load_client_settings
from learning_curve.core.config import AppEnv, Settings, load_settings

# ---- valid values ----


def test_load_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    settings = load_settings()
    assert settings.app_env == "dev"
    assert settings.log_level == "info"


def test_load_settings_service_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "PORT", "TOKEN_TTL_DAYS", "CORS_ORIGINS", "DATABASE_URL", "REDIS_URL", "ADMIN_EMAILS"
    ):
        monkeypatch.delenv(name, raising=False)
    settings = load_settings()
    assert settings.port == 8000
    assert settings.token_ttl_days == 30
    assert settings.cors_origins == ("http://localhost:5173",)
    assert settings.database_url is None
    assert settings.redis_url is None
    assert settings.admin_emails == frozenset()


def test_load_settings_respects_env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.setenv("LOG_LEVEL", "error")
    settings = load_settings()
    assert settings.app_env == "prod"
    assert settings.log_level == "error"


def test_load_settings_normalizes_case(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "PROD")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    settings = load_settings()
    assert settings.app_env == "prod"
    assert settings.log_level == "debug"


def test_load_settings_strips_whitespace(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "  test  ")
    monkeypatch.setenv("LOG_LEVEL", "  warning  ")
    settings = load_settings()
    assert settings.app_env == "test"
    assert settings.log_level == "warning"


def test_load_settings_parses_admin_emails(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ADMIN_EMAILS", " Root@Example.com, ,ops@example.com ")
    settings = load_settings()
    assert settings.admin_emails == frozenset({"root@example.com", "ops@example.com"})


# ---- invalid APP_ENV ----


def test_load_settings_rejects_invalid_app_env(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("APP_ENV", "staging")
    monkeypatch.setenv("LOG_LEVEL", "info")
    with pytest.raises(ValueError, match="APP_ENV must be dev|test|prod"):
        load_settings()


def test_load_settings_rejects_empty_app_env(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("APP_ENV", "")
    with pytest.raises(ValueError, match="APP_ENV must be dev|test|prod"):
        load_settings()


# ---- invalid LOG_LEVEL ----


def test_load_settings_rejects_invalid_log_level(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.setenv("LOG_LEVEL", "verbose")
    with pytest.raises(ValueError, match="LOG_LEVEL must be debug|info|warning|error"):
        load_settings()


def test_load_settings_rejects_empty_log_level(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("LOG_LEVEL", "")
    with pytest.raises(ValueError, match="LOG_LEVEL must be debug|info|warning|error"):
        load_settings()


# ---- Settings properties ----


def _make_settings(app_env: AppEnv = "dev") -> Settings:
    return Settings(  # type: ignore[arg-type]
        app_env=app_env,
        log_level="info",
        log_json=False,
        port=8000,
        database_url=None,
        redis_url=None,
        token_ttl_days=30,
        cors_origins=("http://localhost:5173",),
        admin_emails=frozenset(),
    )


def test_settings_is_dev() -> None:
    s = _make_settings("dev")
    assert s.is_dev is True
    assert s.is_test is False
    assert s.is_prod is False


def test_settings_is_test() -> None:
    s = _make_settings("test")
    assert s.is_dev is False
    assert s.is_test is True
    assert s.is_prod is False


def test_settings_is_prod() -> None:
    s = _make_settings("prod")
    assert s.is_dev is False
    assert s.is_test is False
    assert s.is_prod is True


def test_settings_is_frozen() -> None:
    s = _make_settings()
    with pytest.raises(AttributeError):
        s.app_env = "prod"  # type: ignore[misc]


# ---- numeric and list settings ----


def test_load_settings_parses_cors_origins(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CORS_ORIGINS", " https://a.example , ,https://b.example ")
    assert load_settings().cors_origins == ("https://a.example", "https://b.example")


def test_load_settings_reads_token_ttl(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TOKEN_TTL_DAYS", "7")
    assert load_settings().token_ttl_days == 7


@pytest.mark.parametrize(("name", "raw"), [("PORT", "http"), ("TOKEN_TTL_DAYS", "a week")])
def test_load_settings_rejects_non_integer(
    monkeypatch: pytest.MonkeyPatch, name: str, raw: str
) -> None:
    monkeypatch.setenv(name, raw)
    with pytest.raises(ValueError, match=f"{name} must be an integer"):
        load_settings()


def test_load_settings_rejects_zero_ttl(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TOKEN_TTL_DAYS", "0")
    with pytest.raises(ValueError, match="TOKEN_TTL_DAYS must be >= 1"):
        load_settings()


# ---- client settings ----


def test_client_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "LEARNING_CURVE_API_URL",
        "LEARNING_CURVE_HTTP_TIMEOUT",
        "LEARNING_CURVE_STORAGE_DIR",
    ):
        monkeypatch.delenv(name, raising=False)
    settings = load_client_settings()
    assert settings.api_url == "http://localhost:8000"
    assert settings.http_timeout == 15.0
    assert settings.storage_dir is None


def test_client_settings_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.setenv("LEARNING_CURVE_API_URL", "https://api.example/")
    monkeypatch.setenv("LEARNING_CURVE_HTTP_TIMEOUT", "2.5")
    monkeypatch.setenv("LEARNING_CURVE_STORAGE_DIR", str(tmp_path))
    settings = load_client_settings()
    assert settings.api_url == "https://api.example"
    assert settings.http_timeout == 2.5
    assert settings.storage_dir == tmp_path


@pytest.mark.parametrize("raw", ["soon", "0", "-3"])
def test_client_settings_rejects_bad_timeout(
    monkeypatch: pytest.MonkeyPatch, raw: str
) -> None:
    monkeypatch.setenv("LEARNING_CURVE_HTTP_TIMEOUT", raw)
    with pytest.raises(ValueError, match="LEARNING_CURVE_HTTP_TIMEOUT"):
        load_client_settings()
