"""Unit tests for runtime settings loading."""

import pytest
from omegaconf.errors import ReadonlyConfigError

from cvforge.utils.settings import ENV_OVERRIDES, load_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for env_var in [*ENV_OVERRIDES, "CVFORGE_SETTINGS_PATH"]:
        monkeypatch.delenv(env_var, raising=False)


@pytest.mark.unit
def test_packaged_defaults():
    """Test the packaged default values."""
    settings = load_settings()

    assert settings.llm.provider == "openai"
    assert settings.llm.timeout_s == 30
    assert settings.pdf.timeout_ms == 30000
    assert settings.photo.max_bytes == 5 * 1024 * 1024
    assert "image/webp" in settings.photo.allowed_media_types


@pytest.mark.unit
def test_env_overrides(monkeypatch):
    """Test environment variables override YAML values."""
    monkeypatch.setenv("LLM_PROVIDER", "anthropic")
    monkeypatch.setenv("ARTIFACTS_PATH", "/srv/artifacts")

    settings = load_settings()

    assert settings.llm.provider == "anthropic"
    assert settings.storage.root == "/srv/artifacts"


@pytest.mark.unit
def test_partial_user_file(tmp_path, monkeypatch):
    """Test that a user file only needs the keys it changes."""
    user_file = tmp_path / "settings.yaml"
    user_file.write_text("llm:\n  timeout_s: 5\n")
    monkeypatch.setenv("CVFORGE_SETTINGS_PATH", str(user_file))

    settings = load_settings()

    assert settings.llm.timeout_s == 5
    assert settings.llm.model == "gpt-4o-mini"
    assert settings.pdf.timeout_ms == 30000


@pytest.mark.unit
def test_settings_are_read_only():
    """Test that loaded settings cannot be mutated."""
    settings = load_settings()

    with pytest.raises(ReadonlyConfigError):
        settings.llm.provider = "other"
