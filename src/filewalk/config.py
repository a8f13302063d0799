"""Configuration management for filewalk."""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigurationError
from .ignore import NEVER_IGNORE, IgnoreRule, PatternRule, coerce_ignore, default_ignore

DEFAULT_CONFIG_NAME = ".filewalk.yaml"

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class WalkConfig:
    """Options for a single walk. Immutable once built."""

    # Directory the pattern is evaluated against
    root: Path = field(default_factory=Path.cwd)

    # Glob pattern, relative to root ("**/*" matches every file recursively)
    pattern: str = "**/*"

    # Maximum number of files processed at the same time
    concurrency: int = 1

    # Regex or predicate; matching files are skipped but still counted in total
    ignore: IgnoreRule = field(default_factory=default_ignore)

    # "module:function" reference used by the CLI to load a processor
    processor: str | None = None

    # Logging
    log_level: str = "INFO"
    log_file: Path | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.root, (str, os.PathLike)):
            raise ConfigurationError(f"root must be a path, got {self.root!r}")
        if not isinstance(self.log_level, str):
            raise ConfigurationError(f"Invalid log_level: {self.log_level!r}")

        object.__setattr__(self, "root", Path(os.path.expanduser(self.root)))
        object.__setattr__(self, "ignore", coerce_ignore(self.ignore))
        if self.log_file is not None:
            object.__setattr__(self, "log_file", Path(os.path.expanduser(self.log_file)))

        if isinstance(self.concurrency, bool) or not isinstance(self.concurrency, int):
            raise ConfigurationError(f"concurrency must be an integer, got {self.concurrency!r}")
        if self.concurrency < 1:
            raise ConfigurationError(f"concurrency must be >= 1, got {self.concurrency}")
        if not self.pattern:
            raise ConfigurationError("pattern must not be empty")
        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ConfigurationError(f"Invalid log_level: {self.log_level}")

    def replace(self, **changes: Any) -> WalkConfig:
        """Return a copy with some fields changed. None values are skipped."""
        changes = {key: value for key, value in changes.items() if value is not None}
        try:
            return dataclasses.replace(self, **changes)
        except TypeError as e:
            raise ConfigurationError(str(e)) from e

    def describe(self) -> dict[str, Any]:
        """Return the fields shared with progress snapshots."""
        return {
            "root": self.root,
            "pattern": self.pattern,
            "concurrency": self.concurrency,
            "ignore": self.ignore,
        }

    @classmethod
    def get_config_path(cls) -> Path:
        """Get the default configuration file path."""
        return Path.cwd() / DEFAULT_CONFIG_NAME

    @classmethod
    def load(cls, config_path: Path | None = None) -> WalkConfig:
        """Load configuration from YAML file.

        Args:
            config_path: Path to config file. Uses default if None.

        Returns:
            Loaded configuration, or defaults when the file does not exist.

        Raises:
            ConfigurationError: If the file is not valid YAML or holds bad values.

        """
        if config_path is None:
            config_path = cls.get_config_path()

        if not config_path.exists():
            return cls()

        try:
            with config_path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Cannot parse {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"{config_path} must contain a mapping")

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> WalkConfig:
        """Create config from dictionary."""
        kwargs: dict[str, Any] = {}

        # A null value keeps the default, except for ignore where it disables ignoring
        if data.get("root") is not None:
            kwargs["root"] = Path(str(data["root"]))
        if data.get("pattern") is not None:
            kwargs["pattern"] = str(data["pattern"])
        if data.get("concurrency") is not None:
            try:
                kwargs["concurrency"] = int(data["concurrency"])
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"concurrency must be an integer: {e}") from e
        if "ignore" in data:
            kwargs["ignore"] = data["ignore"]
        if data.get("processor") is not None:
            kwargs["processor"] = str(data["processor"])

        # Logging
        if "logging" in data:
            logging_cfg = data["logging"] or {}
            if not isinstance(logging_cfg, dict):
                raise ConfigurationError("logging must be a mapping")
            if logging_cfg.get("level") is not None:
                kwargs["log_level"] = str(logging_cfg["level"])
            if logging_cfg.get("file"):
                kwargs["log_file"] = Path(str(logging_cfg["file"]))

        return cls(**kwargs)

    def save(self, config_path: Path | None = None) -> None:
        """Save configuration to YAML file.

        Args:
            config_path: Path to save config. Uses default if None.

        Raises:
            ConfigurationError: If the ignore rule is a callable.

        """
        if self.ignore is NEVER_IGNORE:
            ignore = None
        elif isinstance(self.ignore, PatternRule):
            ignore = self.ignore.regex.pattern
        else:
            raise ConfigurationError("Only regex ignore rules can be saved to a config file")

        if config_path is None:
            config_path = self.get_config_path()

        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "root": str(self.root),
            "pattern": self.pattern,
            "concurrency": self.concurrency,
            "ignore": ignore,
            "processor": self.processor,
            "logging": {
                "level": self.log_level,
                "file": str(self.log_file) if self.log_file else None,
            },
        }

        with config_path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
