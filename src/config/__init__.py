"""Configuration management package."""

from .config_loader import Config, ConfigError

__all__ = [
    'Config',
    'ConfigError',
]
