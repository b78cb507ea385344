"""
bootstrap/entrypoints.py - Application entry points v1.0

Provides the `navalforge` command line: trace blueprint images, build
the ship mesh and write it as OBJ (or JSON / binary).
"""

from __future__ import annotations
from typing import List, Optional
import argparse
import asyncio
import json
import logging
import os
import sys

from navalforge.errors import ForgeError, error_response
from navalforge.hull_gen.enums import ModelStyle
from navalforge.hull_gen.parameters import (
    GeometricMap,
    ShipDimensions,
    ShipParameters,
    SuperstructureSpan,
)
from navalforge.pipeline import BlueprintPipeline, PipelineRequest
from navalforge.webgl.exporter import ExportFormat
from .config import ForgeConfig, load_config

logger = logging.getLogger("bootstrap.entrypoints")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO", log_file: Optional[str] = None, json_format: bool = False) -> None:
    """
    Configure application logging.

    Logs go to stderr so OBJ text written to stdout stays clean.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path
        json_format: Use JSON format for logs
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if json_format:
        class JSONFormatter(logging.Formatter):
            def format(self, record):
                return json.dumps({
                    "timestamp": self.formatTime(record),
                    "level": record.levelname,
                    "logger": record.name,
                    "message": record.getMessage(),
                })

        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(LOG_FORMAT)

    # Console handler
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)

    # Root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.addHandler(console_handler)

    # File handler
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(log_level)
        root_logger.addHandler(file_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("PIL").setLevel(logging.WARNING)


def _positions(text: str) -> List[float]:
    """Parse "0.8,0.7,0.2" into floats."""
    if not text.strip():
        return []
    try:
        return [float(p) for p in text.split(",")]
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected comma-separated numbers, got '{text}'")


def _span(text: str) -> SuperstructureSpan:
    values = _positions(text)
    if len(values) != 2:
        raise argparse.ArgumentTypeError(f"expected START,END, got '{text}'")
    return SuperstructureSpan(start=values[0], end=values[1])


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="NavalForge: 2D ship blueprint to 3D hull mesh",
        prog="navalforge",
    )

    inputs = parser.add_argument_group("inputs")
    inputs.add_argument("--top", help="Plan-view (top) image", default=None)
    inputs.add_argument("--side", help="Profile-view (side) image", default=None)
    inputs.add_argument(
        "--blueprint",
        help="Single sheet with both views; split automatically",
        default=None,
    )

    ship = parser.add_argument_group("ship")
    ship.add_argument("--length", type=float, default=None, help="Length overall (m)")
    ship.add_argument("--beam", type=float, default=None, help="Beam (m)")
    ship.add_argument("--draft", type=float, default=None, help="Draft (m)")
    ship.add_argument("--hull-extrusion", type=float, default=100.0, help="Half-beam scale (%%)")
    ship.add_argument(
        "--superstructure-height", type=float, default=100.0, help="Superstructure height scale (%%)"
    )
    ship.add_argument("--turret-scale", type=float, default=100.0, help="Turret radius scale (%%)")
    ship.add_argument(
        "--style",
        choices=[s.value for s in ModelStyle],
        default=ModelStyle.PHOTOREALISTIC.value,
        help="Render style tag (metadata only)",
    )

    hints = parser.add_argument_group("hints")
    hints.add_argument(
        "--turrets",
        type=_positions,
        default=None,
        help="Normalized turret positions, e.g. 0.8,0.7,0.2 (empty string for none)",
    )
    hints.add_argument(
        "--superstructure",
        type=_span,
        default=None,
        help="Normalized superstructure span START,END",
    )
    hints.add_argument(
        "--detect-turrets",
        action="store_true",
        default=None,
        help="Detect turret positions in the top view",
    )
    hints.add_argument("--smoothing", type=int, default=None, help="Trace smoothing radius")
    hints.add_argument(
        "--sensitivity",
        type=float,
        default=None,
        help="Detection sensitivity 0-255 (recorded with the trace settings)",
    )
    hints.add_argument("--reverse-top", action="store_true", help="Flip the top trace bow/stern")
    hints.add_argument("--reverse-side", action="store_true", help="Flip the side trace bow/stern")

    out = parser.add_argument_group("output")
    out.add_argument("-o", "--output", default=None, help="Output file (stdout when omitted)")
    out.add_argument(
        "--format",
        choices=[f.value for f in ExportFormat],
        default=None,
        help="Export format (default from config, or the output extension)",
    )

    parser.add_argument("-c", "--config", help="Path to configuration file", default=None)
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Log level",
    )
    parser.add_argument("--log-file", help="Log file path", default=None)
    return parser


def build_request(parsed: argparse.Namespace, config: ForgeConfig) -> PipelineRequest:
    """Turn parsed arguments plus config defaults into a pipeline request."""
    dimensions = ShipDimensions(
        length=parsed.length if parsed.length is not None else config.ship.length,
        beam=parsed.beam if parsed.beam is not None else config.ship.beam,
        draft=parsed.draft if parsed.draft is not None else config.ship.draft,
    )
    params = ShipParameters(
        dimensions=dimensions,
        hull_extrusion=parsed.hull_extrusion,
        superstructure_height=parsed.superstructure_height,
        turret_scale=parsed.turret_scale,
        model_style=ModelStyle(parsed.style),
    )

    geometry = None
    if parsed.turrets is not None or parsed.superstructure is not None:
        geometry = GeometricMap(
            turrets=tuple(parsed.turrets) if parsed.turrets is not None else None,
            superstructure=parsed.superstructure,
        )

    smoothing = parsed.smoothing if parsed.smoothing is not None else config.trace.smoothing_radius
    sensitivity = (
        parsed.sensitivity if parsed.sensitivity is not None else config.trace.detection_sensitivity
    )
    detect = parsed.detect_turrets if parsed.detect_turrets is not None else config.trace.detect_turrets

    return PipelineRequest(
        params=params,
        top=parsed.top,
        side=parsed.side,
        blueprint=parsed.blueprint,
        geometry=geometry,
        smoothing_radius=smoothing,
        detection_sensitivity=sensitivity,
        detect_turrets=detect,
        reverse_top=parsed.reverse_top,
        reverse_side=parsed.reverse_side,
    )


def _resolve_format(parsed: argparse.Namespace, config: ForgeConfig) -> ExportFormat:
    if parsed.format:
        return ExportFormat.parse(parsed.format)
    if parsed.output:
        suffix = os.path.splitext(parsed.output)[1].lstrip(".").lower()
        if suffix in [f.value for f in ExportFormat]:
            return ExportFormat.parse(suffix)
    return ExportFormat.parse(config.export.format)


def resolve_output_path(output: str, config: ForgeConfig) -> str:
    """Relative output paths are placed under the configured export directory."""
    if os.path.isabs(output):
        return output
    return os.path.join(config.export.output_dir, output)


def cli_main(args: Optional[list] = None) -> int:
    """
    CLI entry point.

    Args:
        args: Command line arguments (defaults to sys.argv)

    Returns:
        Exit code
    """
    parser = build_parser()
    parsed = parser.parse_args(args)

    config = load_config(parsed.config)
    setup_logging(
        level=parsed.log_level or config.logging.level,
        log_file=parsed.log_file or config.logging.log_file,
        json_format=config.logging.json_logs,
    )

    try:
        config.check()
        request = build_request(parsed, config)
        fmt = _resolve_format(parsed, config)

        result = asyncio.run(BlueprintPipeline().run(request))
        export = result.export(fmt)

        for warning in result.warnings + export.warnings:
            logger.warning(warning)

        if parsed.output:
            path = resolve_output_path(parsed.output, config)
            directory = os.path.dirname(path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(path, "wb") as f:
                f.write(export.data)
            logger.info(f"Wrote {export.metadata.file_size_bytes} bytes to {path}")
        elif fmt == ExportFormat.BINARY:
            sys.stdout.buffer.write(export.data)
        else:
            sys.stdout.write(export.text)
        return 0

    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130
    except ForgeError as e:
        logger.error(str(e))
        if parsed.format == ExportFormat.JSON.value:
            sys.stdout.write(json.dumps(error_response(e), default=str) + "\n")
        return 2
    except OSError as e:
        logger.error(f"I/O error: {e}")
        return 1


def main():
    """Main entry point for the package."""
    sys.exit(cli_main(sys.argv[1:]))


if __name__ == "__main__":
    main()
