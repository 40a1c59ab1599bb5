"""Runtime configuration model for Partons.

This module owns environment parsing, configuration-file discovery,
and registry validation. Other modules consume a typed config object
instead of raw env reads or TOML payloads.
"""

from __future__ import annotations

import os
import subprocess
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import platformdirs

from core.constants import (
    APP_NAME,
    CONFIG_FILE_NAME,
    DEFAULT_GRID_PATTERN,
    DEFAULT_HTTP_RETRIES,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_INFO_PATTERN,
)
from core.errors import PartonsConfigError
from core.types import DataFormat, SourceConfig, SourcePatterns

_FORMAT_ALIASES = {
    "native": DataFormat.NATIVE,
    "legacy": DataFormat.LEGACY,
    "lhapdf": DataFormat.LEGACY,
}


@dataclass(frozen=True)
class PartonsConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Local root directory holding one cache per registry.
        config_path: Configuration file the sources were loaded from.
        sources: Configured registries, in file order.
        http_timeout: Per-request timeout in seconds.
        http_retries: Retry budget for transient network failures.
    """

    data_root: Path
    config_path: Path | None
    sources: tuple[SourceConfig, ...]
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    http_retries: int = DEFAULT_HTTP_RETRIES

    @classmethod
    def from_env(cls) -> "PartonsConfig":
        """Build config from process environment and the discovered config file.

        Returns:
            A validated config object.

        Raises:
            PartonsConfigError: If environment values or the config file are invalid.
        """
        data_root_value = os.getenv("PARTONS_DATA_ROOT") or platformdirs.user_data_dir(APP_NAME)
        config_path = find_config_file()
        sources = load_sources(config_path) if config_path is not None else ()
        return cls(
            data_root=Path(data_root_value).expanduser().resolve(),
            config_path=config_path,
            sources=sources,
            http_timeout=_parse_timeout(os.getenv("PARTONS_HTTP_TIMEOUT")),
            http_retries=_parse_retries(os.getenv("PARTONS_HTTP_RETRIES")),
        )

    def source(self, name: str | None = None) -> SourceConfig:
        """Return a configured registry by name, or the first one.

        Args:
            name: Registry name; the first configured registry when omitted.

        Returns:
            Matching registry settings.

        Raises:
            PartonsConfigError: If no registry matches.
        """
        if not self.sources:
            raise PartonsConfigError(
                "No sources configured. "
                f"Create a {CONFIG_FILE_NAME} file with at least one [[sources]] table."
            )
        if name is None:
            return self.sources[0]
        for source in self.sources:
            if source.name == name:
                return source
        known = ", ".join(source.name for source in self.sources)
        raise PartonsConfigError(f"Unknown source '{name}'. Configured sources: {known}.")


def find_config_file() -> Path | None:
    """Locate the configuration file.

    The following locations are probed, in order, for ``partons.toml``:
    the path in ``$PARTONS_CONFIG``, the current directory, the git
    top-level directory, and the platform user configuration directory.

    Returns:
        First existing configuration path, or ``None``.

    Raises:
        PartonsConfigError: If ``$PARTONS_CONFIG`` names a missing file.
    """
    explicit = os.getenv("PARTONS_CONFIG")
    if explicit:
        explicit_path = Path(explicit).expanduser()
        if not explicit_path.is_file():
            raise PartonsConfigError(
                f"PARTONS_CONFIG points to {explicit_path}, which does not exist. "
                "Fix the path or unset the variable."
            )
        return explicit_path.resolve()
    candidates = [Path.cwd()]
    git_root = _git_toplevel()
    if git_root is not None:
        candidates.append(git_root)
    candidates.append(Path(platformdirs.user_config_dir(APP_NAME)))
    for directory in candidates:
        path = directory / CONFIG_FILE_NAME
        if path.is_file():
            return path.resolve()
    return None


def load_sources(config_path: Path) -> tuple[SourceConfig, ...]:
    """Load registry settings from a TOML configuration file.

    Args:
        config_path: Path to ``partons.toml``.

    Returns:
        Validated registries in file order.

    Raises:
        PartonsConfigError: If the file is unreadable or invalid.
    """
    try:
        payload = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except OSError as error:
        raise PartonsConfigError(
            f"Failed to read configuration at {config_path}: {error}."
        ) from error
    except tomllib.TOMLDecodeError as error:
        raise PartonsConfigError(
            f"Failed to parse configuration at {config_path}: {error}. Fix the TOML syntax."
        ) from error
    return parse_sources(payload, str(config_path))


def parse_sources(payload: Mapping[str, Any], origin: str) -> tuple[SourceConfig, ...]:
    """Validate the ``sources`` array of a configuration payload.

    Args:
        payload: Parsed configuration mapping.
        origin: Label used in error messages.

    Returns:
        Validated registries.

    Raises:
        PartonsConfigError: If entries are missing fields or duplicated.
    """
    raw_sources = payload.get("sources", [])
    if not isinstance(raw_sources, list):
        raise PartonsConfigError(f"Invalid configuration in {origin}: 'sources' must be an array.")
    sources = tuple(_parse_source(entry, origin) for entry in raw_sources)
    names = [source.name for source in sources]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise PartonsConfigError(
            f"Invalid configuration in {origin}: duplicate source names {duplicates}."
        )
    return sources


def _parse_source(entry: object, origin: str) -> SourceConfig:
    if not isinstance(entry, dict):
        raise PartonsConfigError(f"Invalid configuration in {origin}: sources must be tables.")
    name = _require_string(entry, "name", origin)
    patterns_payload = entry.get("patterns", {})
    if not isinstance(patterns_payload, dict):
        raise PartonsConfigError(
            f"Invalid configuration for source '{name}' in {origin}: 'patterns' must be a table."
        )
    return SourceConfig(
        name=name,
        url=_require_string(entry, "url", origin),
        index=_require_string(entry, "index", origin),
        format=parse_format(str(entry.get("format", DataFormat.NATIVE.value))),
        patterns=SourcePatterns(
            info=str(patterns_payload.get("info", DEFAULT_INFO_PATTERN)),
            grids=str(patterns_payload.get("grids", DEFAULT_GRID_PATTERN)),
        ),
    )


def parse_format(raw_value: str) -> DataFormat:
    """Parse a registry format name.

    Args:
        raw_value: ``native``, ``legacy``, or the ``lhapdf`` alias.

    Returns:
        Parsed data format.

    Raises:
        PartonsConfigError: If the name is unknown.
    """
    try:
        return _FORMAT_ALIASES[raw_value.strip().lower()]
    except KeyError as error:
        raise PartonsConfigError(
            f"Unknown source format '{raw_value}'. Use one of {sorted(_FORMAT_ALIASES)}."
        ) from error


def _require_string(entry: Mapping[str, object], key: str, origin: str) -> str:
    value = entry.get(key)
    if not isinstance(value, str) or not value:
        raise PartonsConfigError(
            f"Invalid configuration in {origin}: every source needs a string '{key}'."
        )
    return value


def _git_toplevel() -> Path | None:
    try:
        completed = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError:
        return None
    if completed.returncode != 0:
        return None
    return Path(completed.stdout.strip())


def _parse_timeout(raw_value: str | None) -> float:
    """Parse the HTTP timeout environment value.

    Raises:
        PartonsConfigError: If value is not a positive number.
    """
    if raw_value is None:
        return DEFAULT_HTTP_TIMEOUT
    try:
        timeout = float(raw_value)
    except ValueError as error:
        raise PartonsConfigError(
            f"Invalid PARTONS_HTTP_TIMEOUT value: expected number, got '{raw_value}'."
        ) from error
    if timeout <= 0:
        raise PartonsConfigError("Invalid PARTONS_HTTP_TIMEOUT value: must be positive.")
    return timeout


def _parse_retries(raw_value: str | None) -> int:
    """Parse the HTTP retry budget environment value.

    Raises:
        PartonsConfigError: If value is not a non-negative integer.
    """
    if raw_value is None:
        return DEFAULT_HTTP_RETRIES
    try:
        retries = int(raw_value)
    except ValueError as error:
        raise PartonsConfigError(
            f"Invalid PARTONS_HTTP_RETRIES value: expected integer, got '{raw_value}'."
        ) from error
    if retries < 0:
        raise PartonsConfigError("Invalid PARTONS_HTTP_RETRIES value: must not be negative.")
    return retries
