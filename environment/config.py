"""Configuration management for extcli.

Loads configuration from:
1. config.toml (defaults)
2. Environment variables (overrides)
"""

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()


@dataclass
class GalleryConfig:
    """Extension gallery configuration."""

    # Empty service_url disables the gallery
    service_url: str = "https://marketplace.visualstudio.com/_apis/public/gallery"
    timeout: int = 30
    page_size: int = 10


@dataclass
class ExtensionsConfig:
    """Local extensions configuration."""

    # Directory for installed extensions (default: ~/.extcli/extensions)
    extensions_dir: str = ""
    download_timeout: int = 60

    def get_extensions_dir(self) -> Path:
        if self.extensions_dir:
            return Path(self.extensions_dir).expanduser()
        return Path.home() / ".extcli" / "extensions"


@dataclass
class CLIConfig:
    """Command-line behaviour."""

    log_level: str = "WARNING"
    locale_file: str = ""  # JSON message bundle (key -> template)


@dataclass
class Config:
    """Main configuration container."""

    gallery: GalleryConfig = field(default_factory=GalleryConfig)
    extensions: ExtensionsConfig = field(default_factory=ExtensionsConfig)
    cli: CLIConfig = field(default_factory=CLIConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Create Config from dictionary."""
        return cls(
            gallery=GalleryConfig(**data.get("gallery", {})),
            extensions=ExtensionsConfig(**data.get("extensions", {})),
            cli=CLIConfig(**data.get("cli", {})),
        )


def find_config_file() -> Path | None:
    """Find config.toml in current or parent directories.

    Returns:
        Path to config.toml or None if not found.
    """
    current = Path.cwd()

    for directory in [current, *current.parents]:
        config_path = directory / "config.toml"
        if config_path.exists():
            return config_path

    return None


def load_config(config_path: Path | str | None = None) -> Config:
    """Load configuration from file and environment.

    Args:
        config_path: Optional explicit path to config.toml

    Returns:
        Config object with merged settings.
    """
    config_data: dict[str, Any] = {}

    if config_path is None:
        config_path = find_config_file()

    if config_path is not None:
        path = Path(config_path)
        if path.exists():
            with open(path, "rb") as f:
                config_data = tomllib.load(f)

    env_overrides = {
        "gallery": {
            "service_url": os.getenv("EXTCLI_GALLERY_URL"),
            "timeout": _int_or_none(os.getenv("EXTCLI_GALLERY_TIMEOUT")),
        },
        "extensions": {
            "extensions_dir": os.getenv("EXTCLI_EXTENSIONS_DIR"),
        },
        "cli": {
            "log_level": os.getenv("LOG_LEVEL"),
            "locale_file": os.getenv("EXTCLI_LOCALE_FILE"),
        },
    }

    # Merge env overrides (only non-None values)
    for section, values in env_overrides.items():
        if section not in config_data:
            config_data[section] = {}
        for key, value in values.items():
            if value is not None:
                config_data[section][key] = value

    return Config.from_dict(config_data)


def _int_or_none(value: str | None) -> int | None:
    """Convert string to int, or return None."""
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


# Global config instance (lazy loaded)
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance.

    Returns:
        Config object (loaded once, cached).
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config(config_path: Path | str | None = None) -> Config:
    """Force reload of configuration.

    Returns:
        Fresh Config object.
    """
    global _config
    _config = load_config(config_path)
    return _config
