"""Errors that stop a run before any file is scored."""

from pathlib import Path
from typing import Any, Union

from .base import CyclomapError


class ConfigurationError(CyclomapError):
    """The run cannot start: bad settings, config files or input paths."""


class ConfigFileError(ConfigurationError):
    """A TOML config file is missing or cannot be parsed."""

    def __init__(self, path: Union[str, Path], reason: str):
        super().__init__(f"Cannot load config file {path}", details={"reason": reason})
        self.path = path
        self.reason = reason


class InvalidPathError(ConfigurationError):
    """An input path is missing, or cannot be placed in the treemap."""

    def __init__(self, path: Union[str, Path], reason: str):
        super().__init__(f"Invalid path: {path}", details={"reason": reason})
        self.path = path
        self.reason = reason


class InvalidConfigError(ConfigurationError):
    """A setting has a value outside its allowed range or choices."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(f"Invalid value for {key}: {value!r}", details={"reason": reason})
        self.key = key
        self.value = value
        self.reason = reason
