"""Configuration loading, schema, and defaults."""

from scrydiff.config.loader import ConfigError, load_config
from scrydiff.config.schema import LSPConfig, OutputConfig, PrioritizeConfig, ScryDiffConfig

__all__ = [
    "ConfigError",
    "LSPConfig",
    "OutputConfig",
    "PrioritizeConfig",
    "ScryDiffConfig",
    "load_config",
]
