"""Settings precedence: environment > config.json > defaults."""
import json

import pytest

from teamhub.core.config import _ENV_KEYS, Settings, load_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_KEYS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_file_or_env(tmp_path) -> None:
    settings = load_settings(tmp_path / "missing.json")

    assert settings.api_base_url == "http://127.0.0.1:8000"
    assert settings.current_user == "Current User"
    assert settings.backend == "auto"
    assert not settings.remote_configured
    assert not settings.use_remote


def test_config_file_over_defaults(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"api_base_url": "https://records.example/", "project_id": "p1", "public_key": "k1"}))

    settings = load_settings(path)

    assert settings.api_base_url == "https://records.example"
    assert settings.remote_configured
    assert settings.use_remote


def test_environment_over_config_file(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"project_id": "p1", "public_key": "k1", "current_user": "File User"}))
    monkeypatch.setenv("TEAMHUB_CURRENT_USER", "Env User")
    monkeypatch.setenv("TEAMHUB_BACKEND", "mock")
    monkeypatch.setenv("TEAMHUB_MOCK_LATENCY_MAX", "0")

    settings = load_settings(path)

    assert settings.current_user == "Env User"
    assert settings.mock_latency_max == 0
    assert settings.remote_configured
    assert not settings.use_remote


def test_broken_config_file_is_ignored(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{not json")
    assert load_settings(path) == Settings()


def test_backend_switch() -> None:
    assert Settings(backend="remote").use_remote
    assert not Settings(backend="mock", project_id="p", public_key="k").use_remote
    assert Settings(backend="auto", project_id="p", public_key="k").use_remote
    assert not Settings(project_id="p").remote_configured
