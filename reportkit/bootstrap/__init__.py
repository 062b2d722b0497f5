"""
bootstrap/ - Bootstrap Layer

Provides configuration loading, logging setup and the CLI/API entry points.
"""

from .config import (
    ReportKitConfig,
    ExportConfig,
    APIConfig,
    StorageConfig,
    LoggingConfig,
    load_config,
)

from .entrypoints import (
    cli_main,
    api_main,
    setup_logging,
)


__all__ = [
    # Config
    "ReportKitConfig",
    "ExportConfig",
    "APIConfig",
    "StorageConfig",
    "LoggingConfig",
    "load_config",
    # Entry Points
    "cli_main",
    "api_main",
    "setup_logging",
]
