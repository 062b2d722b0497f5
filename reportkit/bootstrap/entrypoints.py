"""
bootstrap/entrypoints.py - Application entry points

Provides the `reportkit` CLI and the API server entry point.

Exit codes: 0 success, 1 invalid input or failed validation, 2 unsupported
request or bad configuration.
"""

from __future__ import annotations
from pathlib import Path
from typing import Optional
import argparse
import asyncio
import json
import logging
import sys

from .config import ReportKitConfig, load_config
from ..errors import ConfigurationError, InputShapeError, UnsupportedOperationError

logger = logging.getLogger("bootstrap.entrypoints")

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_UNSUPPORTED = 2


class JSONFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record):
        payload = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def setup_logging(
    level: str = "INFO",
    log_file: str = None,
    json_format: bool = False,
    fmt: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
) -> None:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path
        json_format: Use JSON format for logs
        fmt: Text format when json_format is False
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    formatter = JSONFormatter() if json_format else logging.Formatter(fmt)

    # Console handler (stderr keeps stdout free for command output)
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
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("fontTools").setLevel(logging.WARNING)
    logging.getLogger("weasyprint").setLevel(logging.WARNING)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Export reports to CSV, Excel, PDF, Markdown, JSON or PNG",
        prog="reportkit",
    )
    parser.add_argument(
        "-c", "--config",
        help="Path to configuration file",
        default=None,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Log level",
    )
    parser.add_argument(
        "--log-file",
        help="Log file path",
        default=None,
    )

    commands = parser.add_subparsers(dest="command")

    export = commands.add_parser("export", help="Export a report data file")
    export.add_argument("input", help="Report data JSON (raw or a previous JSON export)")
    export.add_argument("-f", "--format", required=True, help="csv, excel, pdf, markdown or json")
    export.add_argument("-o", "--output-dir", default=None, help="Destination directory")
    export.add_argument("--filename", default=None, help="Override the generated filename")
    export.add_argument("--include-charts", action="store_true", help="Include trend charts (pdf)")
    export.add_argument("--start", default=None, help="Date range start (YYYY-MM-DD)")
    export.add_argument("--end", default=None, help="Date range end (YYYY-MM-DD)")

    validate = commands.add_parser("validate", help="Validate a JSON export")
    validate.add_argument("input", help="JSON export file")

    formats = commands.add_parser("formats", help="List export formats")
    formats.add_argument("--json", action="store_true", help="Output in JSON format")

    return parser


def _load(path: Optional[str]) -> ReportKitConfig:
    return load_config(path) if path else ReportKitConfig.from_env()


def _run_export(parsed, config: ReportKitConfig) -> int:
    from ..reporting.capabilities import probe_capabilities
    from ..reporting.exporters import ReportExporter, parse_json_export
    from ..reporting.schema import DateRange, ExportOptions
    from ..reporting.targets import DirectorySaveTarget

    text = Path(parsed.input).read_text(encoding="utf-8")
    data = parse_json_export(text)

    date_range = None
    if parsed.start or parsed.end:
        if not (parsed.start and parsed.end):
            raise InputShapeError("--start and --end must be given together", source="cli")
        date_range = DateRange(start=parsed.start, end=parsed.end)

    options = ExportOptions(
        format=parsed.format,
        include_charts=parsed.include_charts,
        date_range=date_range,
        filename=parsed.filename,
    )

    exporter = ReportExporter(
        config=config.export,
        capabilities=probe_capabilities(config.export.pdf_engine),
    )
    target = DirectorySaveTarget(parsed.output_dir or config.storage.exports_dir)
    location = asyncio.run(exporter.download(data, options.format, target, options))
    print(location)
    return EXIT_OK


def _run_validate(parsed) -> int:
    from ..reporting.exporters import validate_json_export

    result = validate_json_export(Path(parsed.input).read_text(encoding="utf-8"))
    print(json.dumps(result.to_dict(), indent=2))
    return EXIT_OK if result.valid else EXIT_INVALID


def _run_formats(parsed) -> int:
    from ..reporting.exporters import ReportExporter

    formats = ReportExporter.list_formats()
    if parsed.json:
        print(json.dumps([info.to_dict() for info in formats], indent=2))
    else:
        for info in formats:
            charts = " (charts)" if info.supports_charts else ""
            print(f"{info.format.value:<10} {info.extension:<6} {info.label}{charts}")
    return EXIT_OK


def cli_main(args: list = None) -> int:
    """
    CLI entry point.

    Args:
        args: Command line arguments (defaults to sys.argv)

    Returns:
        Exit code
    """
    parser = _build_parser()
    parsed = parser.parse_args(args)

    if not parsed.command:
        parser.print_help()
        return EXIT_UNSUPPORTED

    try:
        config = _load(parsed.config)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_UNSUPPORTED

    log_level = "DEBUG" if parsed.verbose else (parsed.log_level or config.logging.level)
    setup_logging(
        level=log_level,
        log_file=parsed.log_file or config.logging.log_file,
        json_format=config.logging.json_logs,
        fmt=config.logging.format,
    )

    try:
        if parsed.command == "export":
            return _run_export(parsed, config)
        if parsed.command == "validate":
            return _run_validate(parsed)
        return _run_formats(parsed)

    except (InputShapeError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_INVALID
    except UnsupportedOperationError as e:
        print(f"Unsupported: {e}", file=sys.stderr)
        return EXIT_UNSUPPORTED
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130


def api_main(args: list = None) -> None:
    """
    API server entry point.

    Args:
        args: Command line arguments
    """
    parser = argparse.ArgumentParser(
        description="reportkit API Server",
        prog="reportkit-api",
    )
    parser.add_argument(
        "-c", "--config",
        help="Path to configuration file",
        default=None,
    )
    parser.add_argument(
        "-p", "--port",
        type=int,
        help="API port",
        default=None,
    )
    parser.add_argument(
        "-H", "--host",
        help="API host",
        default=None,
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Log level",
    )

    parsed = parser.parse_args(args)

    setup_logging(level=parsed.log_level)

    try:
        import uvicorn

        from ..deployment.api import create_fastapi_app
        from ..reporting.capabilities import probe_capabilities

        config = _load(parsed.config)

        # Override config with CLI args
        if parsed.port:
            config.api.port = parsed.port
        if parsed.host:
            config.api.host = parsed.host

        app = create_fastapi_app(config, probe_capabilities(config.export.pdf_engine))
        uvicorn.run(app, host=config.api.host, port=config.api.port)

    except KeyboardInterrupt:
        print("\nShutting down...")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)


def main():
    """Main entry point for the package."""
    if len(sys.argv) > 1 and sys.argv[1] == "api":
        api_main(sys.argv[2:])
    else:
        sys.exit(cli_main(sys.argv[1:]))


if __name__ == "__main__":
    main()
