"""Unit tests for config.py"""

import pytest

from mdsite.config import load_config


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Run every test in an empty directory with no MDSITE_ env vars."""
    monkeypatch.chdir(tmp_path)
    for name in ("EXCERPT_LENGTH", "ENABLE_STREAMING", "CHUNK_SIZE", "LOG_LEVEL", "TRUSTED_CONTENT"):
        monkeypatch.delenv(f"MDSITE_{name}", raising=False)


def test_load_config_defaults():
    """Settings defaults are used when no config.yaml, env var, or CLI override exists."""
    settings = load_config()
    assert settings.excerpt_length == 500
    assert settings.metadata_excerpt_length == 200
    assert settings.enable_streaming is True
    assert settings.streaming_threshold == 1_048_576
    assert settings.chunk_size == 65_536
    assert settings.log_level == "WARNING"
    assert settings.limits.max_repeated_chars == 1000


def test_load_config_env_excerpt_length(monkeypatch):
    """MDSITE_EXCERPT_LENGTH env var is coerced to int and applied to settings."""
    monkeypatch.setenv("MDSITE_EXCERPT_LENGTH", "120")
    assert load_config().excerpt_length == 120


def test_load_config_env_enable_streaming(monkeypatch):
    """MDSITE_ENABLE_STREAMING env var is coerced to bool."""
    monkeypatch.setenv("MDSITE_ENABLE_STREAMING", "false")
    assert load_config().enable_streaming is False


def test_load_config_env_overrides_config_yaml(tmp_path, monkeypatch):
    """MDSITE_CHUNK_SIZE takes precedence over config.yaml chunk_size."""
    (tmp_path / "config.yaml").write_text("chunk_size: 1024\n")
    monkeypatch.setenv("MDSITE_CHUNK_SIZE", "2048")
    assert load_config().chunk_size == 2048


def test_load_config_cli_overrides_env(monkeypatch):
    """A non-None CLI override beats the env var."""
    monkeypatch.setenv("MDSITE_EXCERPT_LENGTH", "120")
    settings = load_config(overrides={"excerpt_length": 80, "chunk_size": None})
    assert settings.excerpt_length == 80
    assert settings.chunk_size == 65_536


def test_load_config_limits_from_yaml(tmp_path):
    """Nested limits in config.yaml build a Limits model."""
    (tmp_path / "config.yaml").write_text("limits:\n  max_repeated_chars: 50\n  max_markdown_nesting: 8\n")
    settings = load_config()
    assert settings.limits.max_repeated_chars == 50
    assert settings.limits.max_markdown_nesting == 8
    assert settings.limits.max_front_matter_depth == 10


def test_load_config_invalid_limits(tmp_path):
    """Non-positive limits fail validation as a ValueError."""
    (tmp_path / "config.yaml").write_text("limits:\n  max_repeated_chars: 0\n")
    with pytest.raises(ValueError):
        load_config()


def test_load_config_invalid_yaml(tmp_path):
    """load_config raises ValueError when config.yaml contains invalid YAML."""
    (tmp_path / "config.yaml").write_text("key: [unclosed\n")
    with pytest.raises(ValueError, match="Invalid config.yaml"):
        load_config()


def test_load_config_non_mapping_yaml(tmp_path):
    (tmp_path / "config.yaml").write_text("- a\n- b\n")
    with pytest.raises(ValueError, match="Invalid config.yaml"):
        load_config()


def test_load_config_invalid_log_level(monkeypatch):
    monkeypatch.setenv("MDSITE_LOG_LEVEL", "LOUD")
    with pytest.raises(ValueError):
        load_config()
