"""
Configuration management for Spire Stats.
"""
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..utils.logger import get_logger

CONFIG_DIR_ENV = "STS_STATS_CONFIG_DIR"

LOOPBACK_HOSTS = ("127.0.0.1", "localhost", "::1")

log = get_logger()


def default_runs_paths() -> List[Path]:
    """Well-known Slay the Spire runs directories, in probe order."""
    home = Path.home()
    return [
        home / ".local" / "share" / "Steam" / "steamapps" / "common" / "SlayTheSpire" / "runs",  # Linux
        home / "AppData" / "Local" / "Steam" / "steamapps" / "common" / "SlayTheSpire" / "runs",  # Windows
        Path("C:/Program Files (x86)/Steam/steamapps/common/SlayTheSpire/runs"),
    ]


class DirectoryConfig(BaseModel):
    """Directory configuration settings."""
    config: str = Field(default=".config/sts-stats", description="Configuration directory, relative to home")
    logs: str = Field(default="logs", description="Directory for log files")
    exports: str = Field(default="exports", description="Directory for export snapshots")


class RunsConfig(BaseModel):
    """Run history location settings."""
    custom_path: Optional[str] = Field(None, description="User-selected runs directory")
    auto_detect: bool = Field(True, description="Probe well-known install locations")
    search_paths: List[str] = Field(
        default_factory=list,
        description="Extra runs directories probed after the defaults"
    )

    @field_validator('custom_path')
    @classmethod
    def normalize_custom_path(cls, v):
        """Expand ``~`` and treat blank paths as unset."""
        if v is None or not v.strip():
            return None
        return os.path.expanduser(v.strip())


class ApiConfig(BaseModel):
    """Local HTTP API settings."""
    host: str = Field("127.0.0.1", description="Bind address (loopback only)")
    port: int = Field(3030, ge=1, le=65535, description="Bind port")
    enable_cors: bool = Field(True, description="Allow cross-origin requests from local frontends")

    @field_validator('host')
    @classmethod
    def validate_host(cls, v):
        """The API is unauthenticated, so only loopback addresses are allowed."""
        if v not in LOOPBACK_HOSTS:
            raise ValueError(f"API host must be a loopback address, got: {v}")
        return v


class LoggingConfig(BaseModel):
    """Logging settings."""
    level: str = Field("INFO", description="Log level")
    to_file: bool = Field(False, description="Also write logs to the logs directory")

    @field_validator('level')
    @classmethod
    def validate_level(cls, v):
        level = v.upper()
        if level not in ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level


class Config(BaseModel):
    """Main configuration class."""
    directories: DirectoryConfig = Field(default_factory=DirectoryConfig)
    runs: RunsConfig = Field(default_factory=RunsConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def get_data_dir(self) -> Path:
        """Get the main data directory path."""
        override = os.environ.get(CONFIG_DIR_ENV)
        if override:
            return Path(override)
        return Path.home() / self.directories.config

    def get_logs_dir(self) -> Path:
        return self.get_data_dir() / self.directories.logs

    def get_exports_dir(self) -> Path:
        return self.get_data_dir() / self.directories.exports

    def get_config_file(self) -> Path:
        return self.get_data_dir() / "config.json"


class ConfigManager:
    """Manages loading, saving, and updating configuration."""

    def __init__(self, config_file: Optional[Path] = None):
        self._config: Optional[Config] = None
        self._config_file = config_file

    @property
    def config(self) -> Config:
        """Get the current configuration, loading if needed."""
        if self._config is None:
            self._config = self.load()
        return self._config

    @property
    def config_file(self) -> Path:
        if self._config_file is not None:
            return self._config_file
        return Config().get_config_file()

    def load(self) -> Config:
        """Load configuration from file or create default."""
        config_file = self.config_file

        if not config_file.exists():
            log.debug("No configuration file found, using defaults")
            return Config()

        try:
            with open(config_file, 'r') as f:
                data = json.load(f)
            config = Config(**data)
            log.info(f"Loaded configuration from {config_file}")
            return config
        except (OSError, ValueError, TypeError, ValidationError) as e:
            log.warning(f"Error loading config from {config_file}: {e}, using defaults")
            return Config()

    def save(self, config: Optional[Config] = None) -> None:
        """Save configuration to file."""
        if config is None:
            config = self.config

        config_file = self.config_file
        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, 'w') as f:
            json.dump(config.model_dump(), f, indent=2)
        log.info(f"Configuration saved to {config_file}")

    def update(self, **kwargs: Any) -> None:
        """Update configuration values and save.

        Keys use dot notation for nested sections, e.g.
        ``update(**{"runs.custom_path": "/data/runs"})``.
        """
        config_dict: Dict[str, Any] = self.config.model_dump()

        for key, value in kwargs.items():
            keys = key.split('.')
            current = config_dict

            for k in keys[:-1]:
                if k not in current:
                    current[k] = {}
                current = current[k]

            current[keys[-1]] = value

        self._config = Config(**config_dict)
        self.save()

    def reset_to_defaults(self) -> None:
        """Reset configuration to defaults."""
        self._config = Config()
        self.save()

    def get_runs_search_paths(self) -> List[Path]:
        """Candidate runs directories in probe order (existing or not)."""
        runs = self.config.runs
        paths = default_runs_paths() if runs.auto_detect else []
        paths.extend(Path(os.path.expanduser(p)) for p in runs.search_paths)
        return paths


# Global config manager instance
config_manager = ConfigManager()
