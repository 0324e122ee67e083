"""
Configuration for htmlentry.

A configuration is given either inline (a glob string, a list of globs, or a
mapping) or through a TOML file: `.htmlentry.toml`, `htmlentry.toml`, or
`pyproject.toml [tool.htmlentry]`, searched walking up from the current directory.
"""

from __future__ import annotations

import sys
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, cast

from htmlentry.file_resolver.defaults import DEFAULT_INCLUDES
from htmlentry.logging import get_logger

if sys.version_info >= (3, 11):
    import tomllib  # pyright: ignore[reportUnreachable]
else:
    import tomli as tomllib  # type: ignore[no-redef]  # pyright: ignore[reportUnreachable]

log = get_logger("config")

_KNOWN_KEYS = frozenset({"include", "exclude", "external", "exports", "output"})


class ConfigError(ValueError):
    """A configuration value has the wrong shape."""


class ExportMode(str, Enum):
    """How each dependency appears in the synthesized entry module."""

    REEXPORT = "reexport"
    SIDE_EFFECT = "side-effect"


@dataclass(frozen=True)
class EntryConfig:
    """
    Settings for one analysis pass. Never mutated; reconfiguring builds a new value.
    `output=None` disables both document rewriting and the output writer.
    """

    include: tuple[str, ...] = field(default_factory=lambda: tuple(DEFAULT_INCLUDES))
    exclude: tuple[str, ...] = ()
    external: tuple[str, ...] = ()
    export_mode: ExportMode = ExportMode.REEXPORT
    output: Path | None = None

    @property
    def rewrite(self) -> bool:
        """Whether consumed script tags are stripped from the documents."""
        return self.output is not None


def _pattern_list(value: Any, key: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)):
        items = cast(list[Any], list(value))
        if all(isinstance(item, str) for item in items):
            return tuple(cast(list[str], items))
    raise ConfigError(f"`{key}` must be a glob string or a list of glob strings: {value!r}")


def parse_options(options: Any, base: EntryConfig | None = None) -> EntryConfig:
    """
    Build an `EntryConfig` from inline options.

    An `EntryConfig` is returned as is. A string or list of strings replaces
    only `include` on `base`. A mapping recognizes `include`, `exclude`,
    `external`, `exports` and `output` and builds a fresh config, with `include`
    defaulting to `**/*.html` and `output` kept from `base` when not given.
    Other keys are logged and ignored.
    """
    if isinstance(options, EntryConfig):
        return options

    base = base if base is not None else EntryConfig()

    if isinstance(options, (str, list, tuple)):
        return replace(base, include=_pattern_list(options, "include"))

    if not isinstance(options, Mapping):
        raise ConfigError(f"Unsupported configuration: {options!r}")

    data = cast(Mapping[str, Any], options)
    unknown = set(data) - _KNOWN_KEYS
    if unknown:
        log.warning("Ignoring unknown configuration keys: %s", ", ".join(sorted(unknown)))

    include = data.get("include")
    output = data.get("output")
    if output is not None and not isinstance(output, (str, Path)):
        raise ConfigError(f"`output` must be a path: {output!r}")

    return EntryConfig(
        include=_pattern_list(include, "include") if include is not None else tuple(DEFAULT_INCLUDES),
        exclude=_pattern_list(data.get("exclude"), "exclude"),
        external=_pattern_list(data.get("external"), "external"),
        export_mode=ExportMode.SIDE_EFFECT if data.get("exports") is False else ExportMode.REEXPORT,
        output=Path(output) if output else base.output,
    )


# Config file search order (first match wins within each directory level)
_CONFIG_FILENAMES = [".htmlentry.toml", "htmlentry.toml", "pyproject.toml"]


def find_config_file(start_dir: Path) -> Path | None:
    """
    Walk up from `start_dir` looking for a config file. Returns the first
    found, or `None`. Search order per directory: `.htmlentry.toml` >
    `htmlentry.toml` > `pyproject.toml` (only if it has `[tool.htmlentry]`).
    """
    current = start_dir.resolve()
    while True:
        for filename in _CONFIG_FILENAMES:
            candidate = current / filename
            if candidate.is_file():
                if filename == "pyproject.toml":
                    if _pyproject_has_htmlentry_section(candidate):
                        return candidate
                else:
                    return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


def _pyproject_has_htmlentry_section(path: Path) -> bool:
    try:
        data = tomllib.loads(path.read_text())
        return "htmlentry" in data.get("tool", {})
    except (tomllib.TOMLDecodeError, OSError):
        return False


def load_config(config_path: Path) -> dict[str, Any]:
    """
    Load the mapping form of a config file, ready for `parse_options()`.
    Kebab-case keys are mapped to their plain names and unknown keys are dropped.
    A relative `output` is taken relative to the config file's directory.
    """
    data = tomllib.loads(config_path.read_text())
    if config_path.name == "pyproject.toml":
        data = data.get("tool", {}).get("htmlentry", {})

    mapped: dict[str, Any] = {}
    for key, value in data.items():
        name = key.replace("-", "_")
        if name in _KNOWN_KEYS:
            mapped[name] = value

    output = mapped.get("output")
    if isinstance(output, str) and not Path(output).is_absolute():
        mapped["output"] = str(config_path.parent / output)
    return mapped
