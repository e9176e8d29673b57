"""Unit tests for application settings configuration."""

from pathlib import Path

import pytest

from albumsync.config import Settings
from albumsync.infrastructure.channel import resolve_channel_endpoint, to_websocket_url


def test_settings_uses_project_env_file_independent_of_cwd():
    """Settings should always include the project-level .env as an env source."""
    env_files = Settings.model_config.get("env_file")
    assert env_files is not None

    normalized = {str(Path(item)) for item in env_files}
    expected_project_env = str(Path(__file__).resolve().parents[2] / ".env")

    assert expected_project_env in normalized
    assert str(Path(".env")) in normalized


def test_reconnect_initial_delay_is_clamped():
    settings = Settings(_env_file=None, channel_reconnect_initial_delay=60.0, channel_reconnect_max_delay=10.0)
    assert settings.channel_reconnect_initial_delay == 10.0


def test_env_variables_override_defaults(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("CHANNEL_RECONNECT", "false")
    settings = Settings(_env_file=None)
    assert settings.app_env == "production"
    assert settings.channel_reconnect is False


# ── Channel endpoint resolution ──


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("http://localhost:3001", "ws://localhost:3001/ws"),
        ("https://abc.ngrok-free.app/", "wss://abc.ngrok-free.app/ws"),
        ("wss://klam.online/ws", "wss://klam.online/ws"),
        ("ws://host/custom?token=1", "ws://host/custom?token=1"),
    ],
)
def test_to_websocket_url(url, expected):
    assert to_websocket_url(url) == expected


@pytest.mark.parametrize("url", ["", "localhost:3001", "ftp://host/ws"])
def test_to_websocket_url_rejects_unusable_urls(url):
    with pytest.raises(ValueError):
        to_websocket_url(url)


@pytest.mark.parametrize(
    ("overrides", "expected"),
    [
        ({}, "ws://localhost:3001/ws"),
        ({"app_env": "production"}, "wss://klam.online/ws"),
        ({"app_env": "tunnel", "channel_tunnel_url": "https://abc.ngrok-free.app"}, "wss://abc.ngrok-free.app/ws"),
        ({"app_env": "tunnel"}, "ws://localhost:3001/ws"),
        ({"app_env": "production", "channel_url": "http://10.0.0.5:3001"}, "ws://10.0.0.5:3001/ws"),
    ],
)
def test_resolve_channel_endpoint(overrides, expected):
    settings = Settings(_env_file=None, **overrides)
    assert resolve_channel_endpoint(settings) == expected
