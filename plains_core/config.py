"""Typed plains configuration and the layered loader that produces it."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import tomllib
import yaml

from .errors import ConfigurationError
from .paths import UserDirs

__all__ = [
    "CONFIG_ENV",
    "PROJECT_CONFIG_NAMES",
    "CleanerConfig",
    "ConfigLoader",
    "PlainsConfig",
    "SassCompilerConfig",
    "WorkersConfig",
    "load_document",
]

PROJECT_CONFIG_NAMES = ("plains.toml", "plains.yml", "plains.yaml")
CONFIG_ENV = "PLAINS_CONFIG"
SASS_OUTPUT_STYLES = ("nested", "expanded", "compact", "compressed")

_DEFAULTS: dict[str, Any] = {
    "src": "./src",
    "dist": "./dist",
    "environment": "production",
    "workers": {},
}
_ENV_KEY_MAP: dict[str, str] = {
    "src": "PLAINS_SRC",
    "dist": "PLAINS_DIST",
    "environment": "PLAINS_ENVIRONMENT",
}

logger = logging.getLogger(__name__)


def _ensure_mapping(label: str, data: Any) -> Mapping[str, Any]:
    if isinstance(data, Mapping):
        return data
    raise ConfigurationError(f"expected a mapping for {label}, got {type(data).__name__}")


def _reject_unknown(label: str, data: Mapping[str, Any], known: tuple[str, ...]) -> None:
    unknown = sorted(str(key) for key in data if key not in known)
    if unknown:
        raise ConfigurationError(f"unknown {label} option(s): {', '.join(unknown)}")


def _string_list(label: str, value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value):
        return tuple(value)
    raise ConfigurationError(f"{label} must be a string or a list of strings")


def _boolean(label: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    raise ConfigurationError(f"{label} must be a boolean")


@dataclass(frozen=True)
class SassCompilerConfig:
    """Options for the Sass compiler worker."""

    entry: tuple[str, ...] = ()
    output_style: str = "expanded"
    include_paths: tuple[str, ...] = ()
    source_comments: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> "SassCompilerConfig":
        raw = _ensure_mapping("workers.sass_compiler", data)
        _reject_unknown(
            "workers.sass_compiler",
            raw,
            ("entry", "output_style", "include_paths", "source_comments"),
        )
        output_style = raw.get("output_style", cls.output_style)
        if output_style not in SASS_OUTPUT_STYLES:
            raise ConfigurationError(
                f"workers.sass_compiler.output_style must be one of {', '.join(SASS_OUTPUT_STYLES)}"
            )
        return cls(
            entry=_string_list("workers.sass_compiler.entry", raw.get("entry")),
            output_style=output_style,
            include_paths=_string_list(
                "workers.sass_compiler.include_paths", raw.get("include_paths")
            ),
            source_comments=_boolean(
                "workers.sass_compiler.source_comments",
                raw.get("source_comments", cls.source_comments),
            ),
        )


@dataclass(frozen=True)
class CleanerConfig:
    """Options for the destination cleaner worker."""

    enabled: bool = True

    @classmethod
    def from_dict(cls, data: Any) -> "CleanerConfig":
        raw = _ensure_mapping("workers.cleaner", data)
        _reject_unknown("workers.cleaner", raw, ("enabled",))
        return cls(enabled=_boolean("workers.cleaner.enabled", raw.get("enabled", cls.enabled)))


@dataclass(frozen=True)
class WorkersConfig:
    sass_compiler: SassCompilerConfig = field(default_factory=SassCompilerConfig)
    cleaner: CleanerConfig = field(default_factory=CleanerConfig)

    @classmethod
    def from_dict(cls, data: Any) -> "WorkersConfig":
        raw = _ensure_mapping("workers", data or {})
        for name in raw:
            if name not in ("sass_compiler", "cleaner"):
                logger.warning("ignoring configuration for unknown worker %s", name)
        sections: dict[str, Any] = {}
        if raw.get("sass_compiler") is not None:
            sections["sass_compiler"] = SassCompilerConfig.from_dict(raw["sass_compiler"])
        if raw.get("cleaner") is not None:
            sections["cleaner"] = CleanerConfig.from_dict(raw["cleaner"])
        return cls(**sections)


@dataclass(frozen=True)
class PlainsConfig:
    """Root application configuration registered in the store as ``plains``."""

    src: Path
    dist: Path
    environment: str = "production"
    workers: WorkersConfig = field(default_factory=WorkersConfig)

    @classmethod
    def from_dict(cls, data: Any, *, base_dir: Path | None = None) -> "PlainsConfig":
        raw = _ensure_mapping("plains configuration", data)
        _reject_unknown("plains", raw, ("src", "dist", "environment", "workers"))
        base = (base_dir or Path.cwd()).resolve()

        paths: dict[str, Path] = {}
        for key in ("src", "dist"):
            value = raw.get(key)
            if not isinstance(value, (str, os.PathLike)) or not os.fspath(value):
                raise ConfigurationError(f"'{key}' must be a non-empty path")
            path = Path(value).expanduser()
            paths[key] = Path(os.path.normpath(path if path.is_absolute() else base / path))

        environment = raw.get("environment", cls.environment)
        if not isinstance(environment, str) or not environment.strip():
            raise ConfigurationError("'environment' must be a non-empty string")

        return cls(
            src=paths["src"],
            dist=paths["dist"],
            environment=environment.strip(),
            workers=WorkersConfig.from_dict(raw.get("workers")),
        )


def load_document(path: Path) -> dict[str, Any]:
    """Read a TOML or YAML configuration document into a mapping."""

    suffix = path.suffix.lower()
    try:
        if suffix == ".toml":
            with path.open("rb") as handle:
                document = tomllib.load(handle)
        elif suffix in (".yml", ".yaml"):
            document = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        else:
            raise ConfigurationError(f"unsupported configuration format: {path}")
    except (OSError, tomllib.TOMLDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"unable to read configuration at {path}: {exc}") from exc
    return dict(_ensure_mapping(str(path), document))


def _merge(base: dict[str, Any], layer: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in layer.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = _merge(dict(current), value)
        else:
            merged[key] = value
    return merged


@dataclass
class ConfigLoader:
    """Resolve the plains configuration from layered sources.

    Later layers win: defaults, user config file, project config file,
    environment variables, then CLI overrides.
    """

    start_dir: Path | None = None
    config_path: Path | None = None
    cli_overrides: Mapping[str, Any] | None = None
    env: Mapping[str, str] | None = None
    user_dirs: UserDirs | None = None

    def __post_init__(self) -> None:
        self.start_dir = (Path(self.start_dir) if self.start_dir else Path.cwd()).resolve()
        self.cli_overrides = {
            key: value for key, value in (self.cli_overrides or {}).items() if value is not None
        }
        self.env = os.environ if self.env is None else self.env
        self.user_dirs = self.user_dirs or UserDirs()

    # ---------- Public API ----------

    def load(self) -> PlainsConfig:
        project_file = self.project_file()
        base_dir = project_file.parent if project_file else self.start_dir

        document = dict(_DEFAULTS)
        user_file = self._user_file()
        if user_file is not None:
            logger.debug("loading user configuration %s", user_file)
            document = _merge(document, load_document(user_file))
        if project_file is not None:
            logger.debug("loading project configuration %s", project_file)
            document = _merge(document, load_document(project_file))
        document = _merge(document, self._env_layer())
        document = _merge(document, self.cli_overrides)

        return PlainsConfig.from_dict(document, base_dir=base_dir)

    def project_file(self) -> Path | None:
        """Return the explicit config file or the first project file found."""
        explicit = self.config_path or self.env.get(CONFIG_ENV)
        if explicit:
            candidate = Path(explicit).expanduser()
            if not candidate.is_absolute():
                candidate = self.start_dir / candidate
            if not candidate.is_file():
                raise ConfigurationError(f"configuration file not found: {candidate}")
            return candidate.resolve()
        for name in PROJECT_CONFIG_NAMES:
            candidate = self.start_dir / name
            if candidate.is_file():
                return candidate
        return None

    # ---------- Internal helpers ----------

    def _user_file(self) -> Path | None:
        config_dir = self.user_dirs.config_dir()
        for name in PROJECT_CONFIG_NAMES:
            candidate = config_dir / name
            if candidate.is_file():
                return candidate
        return None

    def _env_layer(self) -> dict[str, str]:
        layer: dict[str, str] = {}
        for key, variable in _ENV_KEY_MAP.items():
            if value := self.env.get(variable):
                layer[key] = value
        return layer
