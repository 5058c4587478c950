"""ConfigManager and ConverterDefaults: settings backed by TOML files."""

from __future__ import annotations

import logging
import math
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG_DIR = Path.home() / ".config" / "atlas-converter"


class ConfigManager:
    """Hierarchical configuration manager.

    Global defaults can be overridden by per-tool settings.  Settings are
    loaded from TOML files on disk.

    Args:
        config_dir: Root directory for configuration files.
                    Defaults to ``~/.config/atlas-converter/``.
    """

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialise the config manager.

        Args:
            config_dir: Custom configuration directory.  Uses the
                        platform default if ``None``.
        """
        self._config_dir = config_dir or _DEFAULT_CONFIG_DIR
        self._global: dict[str, Any] = {}
        self._per_tool: dict[str, dict[str, Any]] = {}

    @property
    def config_dir(self) -> Path:
        """Return the configuration directory path."""
        return self._config_dir

    def load(self) -> None:
        """Load global and per-tool config from ``config_dir``.

        Missing files are silently skipped.
        """
        global_file = self._config_dir / "config.toml"
        if global_file.is_file():
            self._global = self._read_toml(global_file)
            logger.info("Loaded global config from %s", global_file)

        tools_dir = self._config_dir / "tools"
        if tools_dir.is_dir():
            for toml_file in tools_dir.glob("*.toml"):
                tool_name = toml_file.stem
                self._per_tool[tool_name] = self._read_toml(toml_file)
                logger.info("Loaded config for tool '%s'", tool_name)

    def get(self, key: str, *, tool: str | None = None, default: Any = None) -> Any:
        """Retrieve a config value with optional tool-level override.

        Args:
            key: The configuration key.
            tool: If given, check the tool-specific config first.
            default: Fallback value when the key is not found.

        Returns:
            The configuration value, or *default*.
        """
        if tool and tool in self._per_tool:
            value = self._per_tool[tool].get(key)
            if value is not None:
                return value
        return self._global.get(key, default)

    def set_global(self, key: str, value: Any) -> None:
        """Set a global configuration value (in-memory only).

        Args:
            key: The configuration key.
            value: The value to store.
        """
        self._global[key] = value

    @staticmethod
    def _read_toml(path: Path) -> dict[str, Any]:
        """Read and parse a TOML file.

        Args:
            path: Path to the TOML file.

        Returns:
            Parsed dictionary.
        """
        with path.open("rb") as fh:
            return tomllib.load(fh)


@dataclass(frozen=True)
class ConverterDefaults:
    """Fallback metadata substituted when a plist omits a field.

    Attributes:
        size: Atlas pixel size ``(w, h)``.
        version: Packer version string.
        texture_file_name: Texture base name.
        scale: Atlas scale factor.
    """

    size: tuple[int, int] = (2048, 2048)
    version: str = "1.5.5"
    texture_file_name: str = "atlas"
    scale: float = 1.0

    @classmethod
    def from_config(cls, config: ConfigManager, *, tool: str | None = None) -> ConverterDefaults:
        """Build defaults from ``default_*`` keys, keeping built-ins for anything unset.

        Args:
            config: A loaded config manager.
            tool: Optional tool name whose per-tool file takes precedence.

        Returns:
            The resolved defaults.
        """
        base = cls()
        size = config.get("default_size", tool=tool)
        if size is not None:
            if not _is_positive_pair(size):
                logger.warning("Ignoring invalid default_size %r in config", size)
                size = None
            else:
                size = (int(size[0]), int(size[1]))

        scale = config.get("default_scale", tool=tool)
        if scale is not None and not _is_positive_number(scale):
            logger.warning("Ignoring invalid default_scale %r in config", scale)
            scale = None

        return cls(
            size=size or base.size,
            version=str(config.get("default_version", tool=tool, default=base.version)),
            texture_file_name=str(
                config.get("default_texture_file_name", tool=tool, default=base.texture_file_name)
            ),
            scale=float(scale) if scale is not None else base.scale,
        )


def _is_positive_pair(value: Any) -> bool:
    """Return True when *value* is a two-item sequence of positive integers."""
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        return False
    return all(isinstance(v, int) and not isinstance(v, bool) and v > 0 for v in value)


def _is_positive_number(value: Any) -> bool:
    """Return True when *value* is a finite positive int or float."""
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    return math.isfinite(value) and value > 0
