"""Configuration loading and management for cyclomap.

Configuration sources are merged in priority order:
    1. Defaults (defined in AnalysisConfig)
    2. Global config (~/.cyclomap.toml)
    3. Project config (./cyclomap.toml)
    4. Explicit config file
    5. Environment variables (CYCLOMAP_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(workers=2, colorscale="Viridis")
    >>> config.colorscale
    <Colorscale.VIRIDIS: 'Viridis'>
    >>> config.policy_for(".cpp")
    'keyword'
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigFileError, ConfigurationError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]
SizeMetric = Literal["lines", "code"]

KEYWORD_POLICY = "keyword"
RETURN_POLICY = "return"
POLICY_NAMES = (KEYWORD_POLICY, RETURN_POLICY)

DEFAULT_EXTENSIONS = (".c", ".h", ".cc", ".cpp", ".cxx", ".hh", ".hpp", ".hxx")

DEFAULT_SKIP_DIRS = (
    ".git",
    ".svn",
    ".hg",
    "build",
    "cmake-build-debug",
    "cmake-build-release",
    "third_party",
    "vendor",
    "node_modules",
)


class Colorscale(str, Enum):
    """Palettes understood by the treemap renderer (plotly colorscale names)."""

    BLUES = "Blues"
    GREENS = "Greens"
    REDS = "Reds"
    YLORRD = "YlOrRd"
    RDBU = "RdBu"
    VIRIDIS = "Viridis"
    CIVIDIS = "Cividis"
    HOT = "Hot"

    @classmethod
    def parse(cls, value: Any) -> Colorscale:
        """Resolve a palette from an enum member or a case-insensitive name."""
        if isinstance(value, cls):
            return value
        wanted = str(value).lower()
        for member in cls:
            if member.value.lower() == wanted or member.name.lower() == wanted:
                return member
        raise InvalidConfigError(
            "colorscale", value, f"expected one of {', '.join(m.value for m in cls)}"
        )


@dataclass(frozen=True)
class AnalysisConfig:
    """Configuration for one analysis run.

    Attributes:
        File selection:
            extensions: File suffixes analyzed (lower-case, with leading dot)
            skip_dirs: Directory names never descended into
            allow_hidden_files: Visit dot-files and dot-directories
            follow_symlinks: Follow symlinked files and directories
            max_file_size_mb: Larger files are reported unreadable

        Scoring:
            policies: Extension -> counting policy overrides
                ("keyword" or "return"); unlisted extensions use
                ``default_policy``
            default_policy: Policy for extensions without an override
            size_metric: "lines" (physical lines) or "code" (non-blank,
                non-comment lines)

        Execution and output:
            workers: Thread pool size for per-file work (None = auto)
            colorscale: Treemap palette
            verbosity: quiet / normal / verbose
    """

    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    skip_dirs: tuple[str, ...] = DEFAULT_SKIP_DIRS
    allow_hidden_files: bool = False
    follow_symlinks: bool = False
    max_file_size_mb: float = 10.0

    policies: dict[str, str] = field(default_factory=dict)
    default_policy: str = KEYWORD_POLICY
    size_metric: SizeMetric = "lines"

    workers: Optional[int] = None
    colorscale: Colorscale = Colorscale.BLUES
    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        """Normalize collection fields and validate values."""
        extensions = tuple(_normalize_extension(ext) for ext in self.extensions)
        if not extensions:
            raise InvalidConfigError("extensions", self.extensions, "at least one is required")
        object.__setattr__(self, "extensions", extensions)
        object.__setattr__(self, "skip_dirs", tuple(self.skip_dirs))

        policies = {_normalize_extension(ext): name for ext, name in dict(self.policies).items()}
        for ext, name in policies.items():
            if name not in POLICY_NAMES:
                raise InvalidConfigError(
                    f"policies.{ext}", name, f"expected one of {', '.join(POLICY_NAMES)}"
                )
        object.__setattr__(self, "policies", policies)

        if self.default_policy not in POLICY_NAMES:
            raise InvalidConfigError(
                "default_policy", self.default_policy, f"expected one of {', '.join(POLICY_NAMES)}"
            )
        if self.size_metric not in ("lines", "code"):
            raise InvalidConfigError("size_metric", self.size_metric, "expected lines or code")
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise InvalidConfigError(
                "verbosity", self.verbosity, "expected quiet, normal or verbose"
            )
        object.__setattr__(self, "colorscale", Colorscale.parse(self.colorscale))

        if self.workers is not None and self.workers < 1:
            raise InvalidConfigError("workers", self.workers, "must be at least 1")
        if self.max_file_size_mb <= 0:
            raise InvalidConfigError("max_file_size_mb", self.max_file_size_mb, "must be positive")

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return int(self.max_file_size_mb * 1024 * 1024)

    def is_supported(self, path: str) -> bool:
        """True if *path* has one of the configured extensions."""
        return _suffix(path) in self.extensions

    def policy_for(self, path_or_extension: str) -> str:
        """Return the counting policy name for a path or extension."""
        if path_or_extension.startswith("."):
            ext = path_or_extension.lower()
        else:
            ext = _suffix(path_or_extension)
        return self.policies.get(ext, self.default_policy)


def load_config(config_file: Optional[Path] = None, **overrides) -> AnalysisConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags); ``None``
            values are ignored so unset CLI options keep file values

    Returns:
        Validated AnalysisConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing
    """
    merged: dict = {}

    global_config = Path.home() / ".cyclomap.toml"
    if global_config.exists():
        merged.update(_load_toml_section(global_config))

    project_config = Path.cwd() / "cyclomap.toml"
    if project_config.exists():
        merged.update(_load_toml_section(project_config))

    if config_file is not None:
        if not Path(config_file).exists():
            raise ConfigFileError(config_file, "file not found")
        merged.update(_load_toml_section(Path(config_file)))

    merged.update(_load_env_vars())

    if overrides.pop("verbose", False):
        overrides["verbosity"] = "verbose"
    if overrides.pop("quiet", False):
        overrides["verbosity"] = "quiet"

    extra_policies = overrides.pop("policies", None)
    if extra_policies:
        policies = dict(merged.get("policies", {}))
        policies.update(extra_policies)
        merged["policies"] = policies

    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return AnalysisConfig(**merged)
    except TypeError as e:
        # Unknown field in config
        raise ConfigurationError(f"Invalid configuration: {e}")


def _normalize_extension(ext: str) -> str:
    ext = str(ext).strip().lower()
    return ext if ext.startswith(".") else f".{ext}"


def _suffix(path: str) -> str:
    name = str(path).replace("\\", "/").rsplit("/", 1)[-1]
    if "." not in name:
        return ""
    return "." + name.rsplit(".", 1)[-1].lower()


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from CYCLOMAP_* environment variables.

    Supported environment variables:
        CYCLOMAP_WORKERS: int
        CYCLOMAP_MAX_FILE_SIZE_MB: float
        CYCLOMAP_ALLOW_HIDDEN_FILES: bool (true/false/1/0)
        CYCLOMAP_FOLLOW_SYMLINKS: bool
        CYCLOMAP_DEFAULT_POLICY: keyword/return
        CYCLOMAP_SIZE_METRIC: lines/code
        CYCLOMAP_COLORSCALE: palette name
        CYCLOMAP_VERBOSITY: quiet/normal/verbose

    Returns:
        Dict of field_name -> parsed_value for any CYCLOMAP_* vars found.
    """
    type_hints = get_type_hints(AnalysisConfig)

    result: dict[str, Any] = {}

    for field_name in AnalysisConfig.__dataclass_fields__:
        env_key = f"CYCLOMAP_{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type.

    Returns None for types that cannot be expressed as a single variable
    (tuples, dicts).

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if origin in (tuple, dict) or type_hint in (tuple, dict):
        return None

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or type_hint is Colorscale or origin is Literal:
        return value

    return None


def _load_toml_section(path: Path) -> dict:
    try:
        return _load_toml_file(path)
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigFileError(path, str(e))


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Raises:
        ConfigurationError: If tomllib/tomli not available
        Exception: If TOML parsing fails
    """
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        return tomllib.load(f)
