"""Configuration management module."""

from tickerlens.core.config.settings import (
    AggregationConfig,
    ConfigManager,
    LoggingConfig,
    QualityPolicy,
    TickerLensConfig,
    get_default_config,
    load_config_from_env,
)

__all__ = [
    "AggregationConfig",
    "ConfigManager",
    "LoggingConfig",
    "QualityPolicy",
    "TickerLensConfig",
    "get_default_config",
    "load_config_from_env",
]
