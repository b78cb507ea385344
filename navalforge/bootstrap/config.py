"""
bootstrap/config.py - Application configuration v1.0

Provides configuration loading from files, environment variables, and defaults.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from pathlib import Path
import os
import json
import logging

from navalforge.errors import GeometryParameterError

logger = logging.getLogger("bootstrap.config")


@dataclass
class TraceDefaults:
    """Silhouette tracing defaults."""

    detection_sensitivity: float = 128.0
    smoothing_radius: int = 3
    detect_turrets: bool = False

    @classmethod
    def from_env(cls) -> "TraceDefaults":
        return cls(
            detection_sensitivity=float(os.getenv("NAVALFORGE_TRACE_SENSITIVITY", "128")),
            smoothing_radius=int(os.getenv("NAVALFORGE_TRACE_SMOOTHING", "3")),
            detect_turrets=os.getenv("NAVALFORGE_DETECT_TURRETS", "false").lower() == "true",
        )


@dataclass
class ShipDefaults:
    """Dimensions used when neither the user nor the annotation gives any."""

    length: float = 250.0
    beam: float = 36.0
    draft: float = 15.0

    @classmethod
    def from_env(cls) -> "ShipDefaults":
        return cls(
            length=float(os.getenv("NAVALFORGE_SHIP_LENGTH", "250")),
            beam=float(os.getenv("NAVALFORGE_SHIP_BEAM", "36")),
            draft=float(os.getenv("NAVALFORGE_SHIP_DRAFT", "15")),
        )


@dataclass
class ExportConfig:
    """Export configuration."""

    format: str = "obj"
    output_dir: str = "."

    @classmethod
    def from_env(cls) -> "ExportConfig":
        return cls(
            format=os.getenv("NAVALFORGE_EXPORT_FORMAT", "obj"),
            output_dir=os.getenv("NAVALFORGE_EXPORT_DIR", "."),
        )


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    log_file: Optional[str] = None
    json_logs: bool = False

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        return cls(
            level=os.getenv("NAVALFORGE_LOG_LEVEL", "INFO"),
            log_file=os.getenv("NAVALFORGE_LOG_FILE"),
            json_logs=os.getenv("NAVALFORGE_JSON_LOGS", "false").lower() == "true",
        )


@dataclass
class ForgeConfig:
    """Root configuration for NavalForge."""

    version: str = "1.0.0"

    trace: TraceDefaults = field(default_factory=TraceDefaults)
    ship: ShipDefaults = field(default_factory=ShipDefaults)
    export: ExportConfig = field(default_factory=ExportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls) -> "ForgeConfig":
        """Create configuration from environment variables."""
        return cls(
            trace=TraceDefaults.from_env(),
            ship=ShipDefaults.from_env(),
            export=ExportConfig.from_env(),
            logging=LoggingConfig.from_env(),
        )

    @classmethod
    def from_file(cls, filepath: str) -> "ForgeConfig":
        """Load configuration from JSON file. Environment fills unset keys."""
        path = Path(filepath)
        if not path.exists():
            logger.warning(f"Config file not found: {filepath}, using defaults")
            return cls.from_env()

        with open(path) as f:
            data = json.load(f)

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "ForgeConfig":
        """Create config from dictionary."""
        config = cls.from_env()

        for section in ("trace", "ship", "export", "logging"):
            if section in data:
                target = getattr(config, section)
                for key, value in data[section].items():
                    if hasattr(target, key):
                        setattr(target, key, value)
                    else:
                        logger.warning(f"Unknown config key: {section}.{key}")

        return config

    def validate(self) -> List[str]:
        errors = []
        if not isinstance(self.trace.smoothing_radius, int) or self.trace.smoothing_radius < 0:
            errors.append("trace.smoothing_radius must be a non-negative integer")
        if not 0 <= self.trace.detection_sensitivity <= 255:
            errors.append("trace.detection_sensitivity must be within 0-255")
        for name in ("length", "beam", "draft"):
            if not getattr(self.ship, name) > 0:
                errors.append(f"ship.{name} must be positive")
        return errors

    def check(self) -> None:
        """Raise GeometryParameterError for the first invalid value."""
        if not isinstance(self.trace.smoothing_radius, int) or self.trace.smoothing_radius < 0:
            raise GeometryParameterError(
                param="trace.smoothing_radius",
                value=self.trace.smoothing_radius,
                valid_range=(0, None),
            )
        if not 0 <= self.trace.detection_sensitivity <= 255:
            raise GeometryParameterError(
                param="trace.detection_sensitivity",
                value=self.trace.detection_sensitivity,
                valid_range=(0, 255),
            )
        for name in ("length", "beam", "draft"):
            value = getattr(self.ship, name)
            if not value > 0:
                raise GeometryParameterError(param=f"ship.{name}", value=value, valid_range=(0.0, None))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize config to dictionary."""
        return {
            "version": self.version,
            "trace": {
                "detection_sensitivity": self.trace.detection_sensitivity,
                "smoothing_radius": self.trace.smoothing_radius,
                "detect_turrets": self.trace.detect_turrets,
            },
            "ship": {
                "length": self.ship.length,
                "beam": self.ship.beam,
                "draft": self.ship.draft,
            },
            "export": {
                "format": self.export.format,
                "output_dir": self.export.output_dir,
            },
            "logging": {
                "level": self.logging.level,
                "log_file": self.logging.log_file,
                "json_logs": self.logging.json_logs,
            },
        }


def load_config(filepath: Optional[str] = None) -> ForgeConfig:
    """
    Load configuration from file or environment.

    Args:
        filepath: Optional path to JSON config file

    Returns:
        ForgeConfig instance
    """
    if filepath:
        return ForgeConfig.from_file(filepath)

    default_paths = [
        "./navalforge.json",
        os.path.expanduser("~/.navalforge/config.json"),
    ]
    for path in default_paths:
        if Path(path).exists():
            logger.info(f"Loading config from: {path}")
            return ForgeConfig.from_file(path)

    return ForgeConfig.from_env()
