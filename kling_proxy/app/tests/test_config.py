import pytest
from pydantic import ValidationError

from kling_proxy.app.auth.gate import pick_api_key
from kling_proxy.app.config import Settings

ENV_KEYS = [
    "HOST", "PORT", "SERVICE_NAME", "LOG_LEVEL", "APP_TOKEN",
    "ALLOWED_ORIGINS", "FREEPIK_API_KEY", "FREEPIK_BASE_URL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults_with_empty_environment():
    settings = Settings(_env_file=None)

    assert settings.PORT == 8787
    assert settings.APP_TOKEN is None
    assert settings.FREEPIK_API_KEY is None
    assert settings.gate_enabled is False
    assert settings.allowed_origins_list == ["*"]
    assert settings.upstream_base_url == "https://api.freepik.com/v1/ai/image-to-video"


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("PORT", "9000")
    monkeypatch.setenv("APP_TOKEN", "gate-secret")
    monkeypatch.setenv("FREEPIK_API_KEY", "server-key")
    monkeypatch.setenv("ALLOWED_ORIGINS", "http://localhost:5173, https://ui.example.com,")

    settings = Settings(_env_file=None)

    assert settings.PORT == 9000
    assert settings.gate_enabled is True
    assert settings.FREEPIK_API_KEY == "server-key"
    assert settings.allowed_origins_list == ["http://localhost:5173", "https://ui.example.com"]


def test_empty_app_token_disables_gate(monkeypatch):
    monkeypatch.setenv("APP_TOKEN", "")

    assert Settings(_env_file=None).gate_enabled is False


def test_settings_are_immutable():
    settings = Settings(_env_file=None)

    with pytest.raises(ValidationError):
        settings.FREEPIK_API_KEY = "changed"


def test_invalid_values_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, LOG_LEVEL="LOUD")
    with pytest.raises(ValidationError):
        Settings(_env_file=None, FREEPIK_BASE_URL="ftp://example.com")
    with pytest.raises(ValidationError):
        Settings(_env_file=None, PORT=0)


def test_log_level_normalized():
    assert Settings(_env_file=None, LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"


def test_upstream_base_url_strips_trailing_slash():
    settings = Settings(_env_file=None, FREEPIK_BASE_URL="https://upstream.test/v1/")
    assert settings.upstream_base_url == "https://upstream.test/v1"


@pytest.mark.parametrize(
    "server_key, client_key, expected",
    [
        ("server-key", "client-key", "server-key"),
        (None, "client-key", "client-key"),
        ("server-key", None, "server-key"),
        (None, None, None),
        ("", "", None),
    ],
)
def test_pick_api_key(server_key, client_key, expected):
    settings = Settings(_env_file=None, FREEPIK_API_KEY=server_key)
    assert pick_api_key(settings, client_key) == expected
