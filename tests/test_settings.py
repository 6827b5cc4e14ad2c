from comicshelf.config import DEFAULT_ENDPOINT, DEFAULT_FUNCTION_ID
from comicshelf.settings import get_settings

ENV_VARS = [
    "STORE_BACKEND",
    "APPWRITE_ENDPOINT",
    "APPWRITE_PROJECT_ID",
    "APPWRITE_API_KEY",
    "APPWRITE_FUNCTION_ID_GENERATE_DESC",
    "EXECUTION_RETRIES",
    "EXECUTION_BACKOFF_MS",
    "RECORD_TIMEOUT_MS",
    "PROBE_BEFORE_EXECUTE",
    "CORS_ALLOW_ORIGINS",
]


def clear_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch):
    clear_env(monkeypatch)
    settings = get_settings()

    assert settings.store_backend == "appwrite"
    assert settings.appwrite_endpoint == DEFAULT_ENDPOINT
    assert settings.function_id == DEFAULT_FUNCTION_ID
    assert settings.appwrite_api_key is None
    assert settings.cors_allow_origins == ["*"]

    config = settings.to_client_config()
    assert config.record_timeout_ms == 15000
    assert config.execution_timeout_ms == 45000
    assert config.probe_timeout_ms == 5000
    assert config.execution_retry.retries == 2
    assert config.execution_retry.base_delay_ms == 700
    assert config.probe_before_execute is True


def test_blank_endpoint_falls_back(monkeypatch):
    clear_env(monkeypatch)
    monkeypatch.setenv("APPWRITE_ENDPOINT", "   ")
    assert get_settings().appwrite_endpoint == DEFAULT_ENDPOINT


def test_overrides(monkeypatch):
    clear_env(monkeypatch)
    monkeypatch.setenv("STORE_BACKEND", "MEMORY")
    monkeypatch.setenv("APPWRITE_ENDPOINT", " https://cloud.appwrite.io/v1 ")
    monkeypatch.setenv("APPWRITE_PROJECT_ID", "proj")
    monkeypatch.setenv("APPWRITE_API_KEY", "key")
    monkeypatch.setenv("EXECUTION_RETRIES", "4")
    monkeypatch.setenv("RECORD_TIMEOUT_MS", "not-a-number")
    monkeypatch.setenv("PROBE_BEFORE_EXECUTE", "off")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test")

    settings = get_settings()
    config = settings.to_client_config()

    assert settings.store_backend == "memory"
    assert config.appwrite.endpoint == "https://cloud.appwrite.io/v1"
    assert config.appwrite.headers() == {"X-Appwrite-Project": "proj", "X-Appwrite-Key": "key"}
    assert config.execution_retry.retries == 4
    assert config.record_timeout_ms == 15000
    assert config.probe_before_execute is False
    assert settings.cors_allow_origins == ["http://a.test", "http://b.test"]


def test_unknown_backend_falls_back(monkeypatch):
    clear_env(monkeypatch)
    monkeypatch.setenv("STORE_BACKEND", "sqlite")
    assert get_settings().store_backend == "appwrite"
