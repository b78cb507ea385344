"""
bootstrap/ - Bootstrap Layer

Provides configuration loading, logging setup and the command line.
"""

from .config import (
    ForgeConfig,
    TraceDefaults,
    ShipDefaults,
    ExportConfig,
    LoggingConfig,
    load_config,
)

from .entrypoints import (
    build_parser,
    build_request,
    cli_main,
    main,
    resolve_output_path,
    setup_logging,
)

__all__ = [
    "ForgeConfig",
    "TraceDefaults",
    "ShipDefaults",
    "ExportConfig",
    "LoggingConfig",
    "load_config",
    "build_parser",
    "build_request",
    "cli_main",
    "main",
    "resolve_output_path",
    "setup_logging",
]
