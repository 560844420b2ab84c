"""Configuration loading for pomgen (.pomgen.yml plus POMGEN_ environment overrides)."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from . import __version__

CONFIG_FILENAME = ".pomgen.yml"
ENV_PREFIX = "POMGEN_"

_SUFFIX_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass(frozen=True)
class GeneratorOptions:
    """Generation-wide settings applied uniformly to every artifact."""

    file_header: Optional[str] = None
    test_file_suffix: str = "spec"
    tool_version: str = __version__
    output_directory: str = "e2e"
    doc_comments: bool = True
    default_timeout: int = 30000
    base_url: str = "http://localhost:4200"
    debug: bool = False
    generated_at: Optional[datetime] = None
    templates_dir: Optional[Path] = None


@dataclass
class PomGenConfig:
    """Represents the settings defined in .pomgen.yml."""

    root: Path
    generator: GeneratorOptions = field(default_factory=GeneratorOptions)
    exclude_paths: List[str] = field(default_factory=list)


def load_config(
    config_path: Path, *, environ: Optional[Mapping[str, str]] = None
) -> PomGenConfig:
    """Load configuration from disk and apply environment overrides."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()
    env = os.environ if environ is None else environ

    data: Dict[str, Any] = {}
    if config_file.exists():
        data = _read_config(config_file)

    generator_data = _as_dict(data.get("generator"))
    values: Dict[str, Any] = {
        "file_header": _as_str(generator_data.get("file_header")),
        "test_file_suffix": _as_str(generator_data.get("test_file_suffix")),
        "tool_version": _as_str(generator_data.get("tool_version")),
        "output_directory": _as_str(generator_data.get("output_directory")),
        "doc_comments": _as_bool(generator_data.get("doc_comments")),
        "default_timeout": _as_int(generator_data.get("default_timeout")),
        "base_url": _as_str(generator_data.get("base_url")),
        "debug": _as_bool(generator_data.get("debug")),
        "generated_at": _as_datetime(generator_data.get("generated_at")),
    }
    templates_dir = _as_str(generator_data.get("templates_dir"))
    if templates_dir:
        values["templates_dir"] = root / templates_dir

    values.update(_env_overrides(env))
    options = apply_overrides(GeneratorOptions(), **values)

    return PomGenConfig(
        root=root,
        generator=options,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
    )


def apply_overrides(options: GeneratorOptions, **overrides: Any) -> GeneratorOptions:
    """Return a copy of ``options`` with every non-None override applied."""
    changes = {key: value for key, value in overrides.items() if value is not None}
    updated = replace(options, **changes)
    if not _SUFFIX_PATTERN.match(updated.test_file_suffix):
        raise ConfigError(
            f"Invalid test file suffix '{updated.test_file_suffix}': use letters, digits, '-' or '_'"
        )
    if updated.default_timeout <= 0:
        raise ConfigError("default_timeout must be a positive number of milliseconds")
    return updated


def _env_overrides(env: Mapping[str, str]) -> Dict[str, Any]:
    def lookup(name: str) -> Optional[str]:
        value = env.get(f"{ENV_PREFIX}{name}")
        return value if value not in (None, "") else None

    overrides: Dict[str, Any] = {
        "file_header": lookup("FILE_HEADER"),
        "test_file_suffix": lookup("TEST_FILE_SUFFIX"),
        "tool_version": lookup("TOOL_VERSION"),
        "output_directory": lookup("OUTPUT_DIRECTORY"),
        "base_url": lookup("BASE_URL"),
    }
    timeout = lookup("DEFAULT_TIMEOUT")
    if timeout is not None:
        parsed = _as_int(timeout)
        if parsed is None:
            raise ConfigError(f"{ENV_PREFIX}DEFAULT_TIMEOUT must be an integer, got {timeout!r}")
        overrides["default_timeout"] = parsed
    debug = lookup("DEBUG")
    if debug is not None:
        overrides["debug"] = _as_bool(debug)
    return {key: value for key, value in overrides.items() if value is not None}


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")
    return loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return str(value)


def _as_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_bool(value: Any) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "on", "1"}:
            return True
        if lowered in {"false", "no", "off", "0"}:
            return False
    return None


def _as_datetime(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value))
        except ValueError as exc:
            raise ConfigError(f"generated_at must be an ISO timestamp, got {value!r}") from exc
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if item is not None]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "ENV_PREFIX",
    "GeneratorOptions",
    "PomGenConfig",
    "apply_overrides",
    "load_config",
]
