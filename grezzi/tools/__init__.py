"""Configuration tools and utilities."""

from .config_loader import ConfigLoader, RunConfig, get_config

__all__ = [
    "ConfigLoader",
    "RunConfig",
    "get_config",
]
