"""Map generator configuration loading."""

from mapforge.config.settings import (
    GENERATOR_DEFAULT_VERSION,
    ConfigError,
    MapGeneratorConfig,
    load_config,
)

__all__ = [
    "GENERATOR_DEFAULT_VERSION",
    "ConfigError",
    "MapGeneratorConfig",
    "load_config",
]
