"""Unit tests for configuration loading."""

import logging

import pytest
from pydantic import ValidationError

from orgpilot.config import get_config, load_config
from orgpilot.constants import DEFAULT_BASE_URL, VIEW_MODE_POLL_INTERVAL_S


@pytest.mark.unit
def test_missing_file_yields_defaults(tmp_path):
    config = load_config(tmp_path / "absent.yml")
    assert config.api.base_url == DEFAULT_BASE_URL
    assert config.api.fetch_timeout_s == 10.0
    assert config.view_mode.poll_interval_s == VIEW_MODE_POLL_INTERVAL_S
    assert config.storage.persist is True


@pytest.mark.unit
def test_yaml_values_and_env_expansion(tmp_path, monkeypatch):
    monkeypatch.setenv("ORG_BACKEND", "https://org.example.com/")
    path = tmp_path / "orgpilot.yml"
    path.write_text(
        "\n".join(
            [
                "api:",
                "  base_url: ${ORG_BACKEND}",
                "  fetch_timeout_s: null",
                "storage:",
                "  legacy_enabled: false",
                "view_mode:",
                "  poll_interval_s: 0.05",
            ]
        ),
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.api.base_url == "https://org.example.com"
    assert config.api.fetch_timeout_s is None
    assert config.storage.legacy_enabled is False
    assert config.view_mode.poll_interval_s == 0.05


@pytest.mark.unit
def test_unknown_keys_are_warned(tmp_path, caplog):
    path = tmp_path / "orgpilot.yml"
    path.write_text("api:\n  retries: 3\n", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="orgpilot.config.loader"):
        load_config(path)

    assert "retries" in caplog.text


@pytest.mark.unit
def test_invalid_values_fail(tmp_path):
    path = tmp_path / "orgpilot.yml"
    path.write_text("api:\n  base_url: ftp://nope\n", encoding="utf-8")
    with pytest.raises(ValidationError):
        load_config(path)


@pytest.mark.unit
def test_unparseable_yaml_yields_defaults(tmp_path):
    path = tmp_path / "orgpilot.yml"
    path.write_text("api: [unclosed\n", encoding="utf-8")
    assert load_config(path).api.base_url == DEFAULT_BASE_URL


@pytest.mark.unit
def test_get_config_honours_env_override(tmp_path, monkeypatch):
    path = tmp_path / "custom.yml"
    path.write_text("view_mode:\n  poll_interval_s: 1.5\n", encoding="utf-8")
    monkeypatch.setenv("ORGPILOT_ENV_PATH", str(tmp_path / "missing.env"))
    monkeypatch.setenv("ORGPILOT_CONFIG", str(path))

    config = get_config()

    assert config.view_mode.poll_interval_s == 1.5
    assert get_config() is config
