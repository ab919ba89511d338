"""Runtime environment for extcli: configuration loading."""

from environment.config import Config, get_config, load_config, reload_config

__all__ = ["Config", "get_config", "load_config", "reload_config"]
