"""Runtime configuration loading."""

from .loader import DEFAULT_CONFIG_PATH, ServiceSettings, load_config, load_settings

__all__ = ["DEFAULT_CONFIG_PATH", "ServiceSettings", "load_config", "load_settings"]
