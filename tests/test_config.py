"""Tests for configuration loading."""

from pathlib import Path

import pytest

from environment import config as config_module
from environment.config import Config, load_config


def test_defaults(tmp_path) -> None:
    config = load_config(tmp_path / "missing.toml")

    assert config.gallery.service_url == "https://marketplace.visualstudio.com/_apis/public/gallery"
    assert config.gallery.timeout == 30
    assert config.cli.log_level == "WARNING"
    assert config.extensions.get_extensions_dir() == Path.home() / ".extcli" / "extensions"


def test_file_values(tmp_path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(
        '[gallery]\nservice_url = "https://gallery.internal"\npage_size = 50\n'
        '[extensions]\nextensions_dir = "/opt/ext"\n'
    )

    config = load_config(path)

    assert config.gallery.service_url == "https://gallery.internal"
    assert config.gallery.page_size == 50
    assert config.extensions.get_extensions_dir() == Path("/opt/ext")


def test_config_file_found_in_parent(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "config.toml").write_text('[cli]\nlog_level = "INFO"\n')
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    monkeypatch.chdir(nested)

    assert load_config().cli.log_level == "INFO"


def test_env_overrides_file(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "config.toml"
    path.write_text('[gallery]\nservice_url = "https://from-file"\ntimeout = 5\n')
    monkeypatch.setenv("EXTCLI_GALLERY_URL", "https://from-env")
    monkeypatch.setenv("EXTCLI_GALLERY_TIMEOUT", "12")
    monkeypatch.setenv("EXTCLI_EXTENSIONS_DIR", str(tmp_path / "ext"))
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    config = load_config(path)

    assert config.gallery.service_url == "https://from-env"
    assert config.gallery.timeout == 12
    assert config.extensions.get_extensions_dir() == tmp_path / "ext"
    assert config.cli.log_level == "DEBUG"


def test_bad_int_env_is_ignored(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXTCLI_GALLERY_TIMEOUT", "soon")

    assert load_config(tmp_path / "missing.toml").gallery.timeout == 30


def test_get_config_caches(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config_module, "_config", None)

    first = config_module.get_config()

    assert config_module.get_config() is first
    assert isinstance(config_module.reload_config(), Config)
    assert config_module.get_config() is not first
