"""
bootstrap/config.py - Application configuration

Provides configuration loading from files, environment variables, and defaults.
Configuration objects are built and passed explicitly; nothing is cached at
module level.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from pathlib import Path
import os
import json
import logging

from ..errors import ConfigurationError, ErrorCode

logger = logging.getLogger("bootstrap.config")

PDF_ENGINES = ("auto", "none")


def _env_number(name: str, default: str, convert=float):
    """Numeric environment variable; malformed values raise ConfigurationError."""
    raw = os.getenv(name, default)
    try:
        return convert(raw)
    except ValueError:
        raise ConfigurationError(
            f"{name} must be {'an integer' if convert is int else 'a number'}, got '{raw}'",
            code=ErrorCode.CFG_INVALID,
            source="bootstrap.config",
        ) from None


@dataclass
class ExportConfig:
    """Export defaults."""

    # PNG capture
    scale: float = 2.0
    background_color: str = "#ffffff"
    capture_gap: int = 20

    # JSON
    json_indent: int = 2

    # PDF: "auto" probes for WeasyPrint, "none" always exports HTML
    pdf_engine: str = "auto"

    # SpreadsheetML document author
    author: str = "reportkit"

    @classmethod
    def from_env(cls) -> "ExportConfig":
        return cls(
            scale=_env_number("REPORTKIT_EXPORT_SCALE", "2"),
            background_color=os.getenv("REPORTKIT_EXPORT_BACKGROUND", "#ffffff"),
            capture_gap=_env_number("REPORTKIT_EXPORT_CAPTURE_GAP", "20", int),
            json_indent=_env_number("REPORTKIT_EXPORT_JSON_INDENT", "2", int),
            pdf_engine=os.getenv("REPORTKIT_PDF_ENGINE", "auto").lower(),
            author=os.getenv("REPORTKIT_EXPORT_AUTHOR", "reportkit"),
        )

    def validate(self) -> None:
        """
        Raises:
            ConfigurationError: Out-of-range or unknown values
        """
        if self.scale <= 0:
            raise ConfigurationError(f"export.scale must be positive, got {self.scale}",
                                     code=ErrorCode.CFG_INVALID, source="bootstrap.config")
        if self.capture_gap < 0:
            raise ConfigurationError(f"export.capture_gap must be >= 0, got {self.capture_gap}",
                                     code=ErrorCode.CFG_INVALID, source="bootstrap.config")
        if self.json_indent < 0:
            raise ConfigurationError(f"export.json_indent must be >= 0, got {self.json_indent}",
                                     code=ErrorCode.CFG_INVALID, source="bootstrap.config")
        if self.pdf_engine not in PDF_ENGINES:
            raise ConfigurationError(
                f"export.pdf_engine must be one of {PDF_ENGINES}, got '{self.pdf_engine}'",
                code=ErrorCode.CFG_INVALID,
                source="bootstrap.config",
            )


@dataclass
class APIConfig:
    """API server configuration."""

    host: str = "0.0.0.0"
    port: int = 8000
    enable_docs: bool = True
    docs_url: str = "/docs"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "APIConfig":
        cors = os.getenv("REPORTKIT_API_CORS_ORIGINS", "*")
        return cls(
            host=os.getenv("REPORTKIT_API_HOST", "0.0.0.0"),
            port=_env_number("REPORTKIT_API_PORT", "8000", int),
            enable_docs=os.getenv("REPORTKIT_API_ENABLE_DOCS", "true").lower() == "true",
            docs_url=os.getenv("REPORTKIT_API_DOCS_URL", "/docs"),
            cors_origins=cors.split(",") if cors else ["*"],
        )


@dataclass
class StorageConfig:
    """Storage paths configuration."""

    exports_dir: str = "./exports"

    @classmethod
    def from_env(cls) -> "StorageConfig":
        return cls(
            exports_dir=os.getenv("REPORTKIT_EXPORTS_DIR", "./exports"),
        )


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_file: Optional[str] = None
    json_logs: bool = False

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        return cls(
            level=os.getenv("REPORTKIT_LOG_LEVEL", "INFO"),
            format=os.getenv("REPORTKIT_LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
            log_file=os.getenv("REPORTKIT_LOG_FILE"),
            json_logs=os.getenv("REPORTKIT_JSON_LOGS", "false").lower() == "true",
        )


@dataclass
class ReportKitConfig:
    """Root configuration."""

    environment: str = "development"
    debug: bool = False
    version: str = "1.0.0"

    export: ExportConfig = field(default_factory=ExportConfig)
    api: APIConfig = field(default_factory=APIConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls) -> "ReportKitConfig":
        """Create configuration from environment variables."""
        return cls(
            environment=os.getenv("REPORTKIT_ENVIRONMENT", "development"),
            debug=os.getenv("REPORTKIT_DEBUG", "false").lower() == "true",
            export=ExportConfig.from_env(),
            api=APIConfig.from_env(),
            storage=StorageConfig.from_env(),
            logging=LoggingConfig.from_env(),
        )

    @classmethod
    def from_file(cls, filepath: str) -> "ReportKitConfig":
        """Load configuration from JSON file."""
        path = Path(filepath)
        if not path.exists():
            logger.warning(f"Config file not found: {filepath}, using environment")
            return cls.from_env()

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid config file {filepath}: {e}",
                                     code=ErrorCode.CFG_INVALID, source="bootstrap.config") from e

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "ReportKitConfig":
        """Create config from dictionary; file values override the environment."""
        config = cls.from_env()

        if "environment" in data:
            config.environment = data["environment"]
        if "debug" in data:
            config.debug = data["debug"]

        for section in ("export", "api", "storage", "logging"):
            if section not in data:
                continue
            target = getattr(config, section)
            for key, value in data[section].items():
                if hasattr(target, key):
                    setattr(target, key, value)
                else:
                    logger.warning(f"Ignoring unknown config key: {section}.{key}")

        config.export.validate()
        return config

    def to_dict(self) -> Dict[str, Any]:
        """Serialize config to dictionary."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "version": self.version,
            "export": {
                "scale": self.export.scale,
                "background_color": self.export.background_color,
                "capture_gap": self.export.capture_gap,
                "json_indent": self.export.json_indent,
                "pdf_engine": self.export.pdf_engine,
                "author": self.export.author,
            },
            "api": {
                "host": self.api.host,
                "port": self.api.port,
                "enable_docs": self.api.enable_docs,
            },
            "storage": {
                "exports_dir": self.storage.exports_dir,
            },
            "logging": {
                "level": self.logging.level,
                "log_file": self.logging.log_file,
                "json_logs": self.logging.json_logs,
            },
        }


def load_config(filepath: str = None) -> ReportKitConfig:
    """
    Load configuration from file or environment.

    Args:
        filepath: Optional path to JSON config file

    Returns:
        ReportKitConfig instance
    """
    if filepath:
        config = ReportKitConfig.from_file(filepath)
    else:
        default_paths = [
            "./reportkit.json",
            "./config/reportkit.json",
            os.path.expanduser("~/.reportkit/config.json"),
        ]

        config = None
        for path in default_paths:
            if Path(path).exists():
                logger.info(f"Loading config from: {path}")
                config = ReportKitConfig.from_file(path)
                break

        if config is None:
            config = ReportKitConfig.from_env()

    config.export.validate()
    logger.info(f"Configuration loaded: environment={config.environment}")
    return config
