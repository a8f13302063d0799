"""Exception hierarchy for filewalk."""

from __future__ import annotations


class WalkError(Exception):
    """Base exception for filewalk errors."""


class ConfigurationError(WalkError):
    """Missing processor, invalid option value or unusable config file."""


class ResolutionError(WalkError):
    """The file set for a run could not be resolved."""


class FileAccessError(WalkError, OSError):
    """Reading or writing a single file failed during processing."""

    def __init__(self, path: object, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
