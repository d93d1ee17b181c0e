from .loader import ConfigError, DatabaseConfig, ImportSettings, ZeroScorePolicy, load_config

__all__ = [
    "ConfigError",
    "DatabaseConfig",
    "ImportSettings",
    "ZeroScorePolicy",
    "load_config",
]
