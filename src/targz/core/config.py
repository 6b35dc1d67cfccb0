"""Configuration resolver with layered priority.

Priority (highest to lowest):
1. Explicit arguments (``cli_args``, named for the embedding application's CLI)
2. Environment variables (TARGZ_*)
3. Config files (user > system)
4. Defaults
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from targz.core.errors import ConfigError

ALLOWED_LOGGING_LEVELS = frozenset({"quiet", "normal", "verbose", "debug"})
DEFAULT_LOGGING_LEVEL = "normal"

ENV_PREFIX = "TARGZ_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class ConfigSource:
    """Represents where a config value came from."""

    value: Any
    source: str  # 'cli' | 'env' | 'user_config' | 'system_config' | 'default'


@dataclass(frozen=True)
class LoggingPolicy:
    """Resolved, immutable logging policy."""

    level_name: str  # quiet | normal | verbose | debug
    emit_info: bool
    emit_verbose: bool
    emit_debug: bool
    source: ConfigSource


class ConfigResolver:
    """Resolve configuration with strict priority.

    Example:
        resolver = ConfigResolver(
            cli_args={'archive': {'ignore': ['.git']}},
            user_config_path=Path('~/.config/targz/config.yaml')
        )

        names, source = resolver.resolve('archive.ignore')
        # names = ['.git'], source = 'cli'
    """

    def __init__(
        self,
        cli_args: dict[str, Any] | None = None,
        user_config_path: Path | None = None,
        system_config_path: Path | None = None,
        defaults: dict[str, Any] | None = None,
    ) -> None:
        """Initialize config resolver.

        Args:
            cli_args: Explicit values (highest priority, dot-notation or nested)
            user_config_path: Path to user config file
            system_config_path: Path to system config file
            defaults: Default values (lowest priority)
        """
        self.cli_args = cli_args or {}
        self.user_config_path = user_config_path or Path.home() / ".config/targz/config.yaml"
        self.system_config_path = system_config_path or Path("/etc/targz/config.yaml")
        self.defaults = defaults if defaults is not None else self._default_config()

        self._user_config: dict[str, Any] | None = None
        self._system_config: dict[str, Any] | None = None

    def resolve(self, key: str) -> tuple[Any, str]:
        """Resolve config value with priority.

        Args:
            key: Config key (supports dot notation: 'logging.level')

        Returns:
            (value, source) tuple

        Raises:
            ConfigError: If key not found in any source
        """
        value = self._from_cli(key)
        if value is not None:
            return value, "cli"

        value = self._from_env(key)
        if value is not None:
            return value, "env"

        value = self._get_nested(self._get_user_config(), key)
        if value is not None:
            return value, "user_config"

        value = self._get_nested(self._get_system_config(), key)
        if value is not None:
            return value, "system_config"

        value = self._get_nested(self.defaults, key)
        if value is not None:
            return value, "default"

        raise ConfigError(f"Config key '{key}' not found in any source")

    def try_resolve(self, key: str) -> tuple[Any, str] | None:
        """Like resolve(), but returns None for a key no source defines."""
        try:
            return self.resolve(key)
        except ConfigError as e:
            if "not found in any source" in str(e):
                return None
            raise

    def resolve_ignore_names(self) -> list[str]:
        """Resolve and validate archive.ignore.

        Environment values are comma-separated (TARGZ_ARCHIVE_IGNORE=.git,node_modules
        is two literal names, not patterns).

        Raises:
            ConfigError: If the value is neither a list of strings nor a string.
        """
        key = "archive.ignore"
        found = self.try_resolve(key)
        if found is None:
            return []
        value, _src = found

        if isinstance(value, str):
            names = [part.strip() for part in value.split(",")]
        elif isinstance(value, list):
            names = []
            for item in value:
                if not isinstance(item, str):
                    raise ConfigError(
                        f"Config key '{key}' must contain strings, got {type(item).__name__}"
                    )
                names.append(item.strip())
        else:
            raise ConfigError(f"Config key '{key}' must be a list, got {type(value).__name__}")

        for name in names:
            if "/" in name or os.sep in name:
                raise ConfigError(
                    f"Invalid '{key}' entry {name!r}: ignore names are bare file names",
                )
        return [n for n in names if n]

    def resolve_logging_level(self) -> str:
        """Resolve and validate logging.level.

        Allowed values (after normalization):
            quiet | normal | verbose | debug

        Raises:
            ConfigError: If the resolved value is invalid.
        """
        level, _src = self._resolve_logging_level_and_source()
        return level

    def resolve_logging_policy(self) -> LoggingPolicy:
        """Resolve canonical logging policy.

        Side-effect free; see targz.core.logging.apply_logging_policy.
        """
        level_name, src = self._resolve_logging_level_and_source()
        return LoggingPolicy(
            level_name=level_name,
            emit_info=level_name != "quiet",
            emit_verbose=level_name in ("verbose", "debug"),
            emit_debug=level_name == "debug",
            source=src,
        )

    def resolve_diagnostics_enabled(self) -> bool:
        """Resolve diagnostics.enabled (default False).

        Environment values arrive as strings and are normalized here; anything
        unrecognized counts as disabled.
        """
        found = self.try_resolve("diagnostics.enabled")
        if found is None:
            return False
        value, _src = found
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return bool(value)
        s = str(value).strip().lower()
        if s in _TRUE_VALUES:
            return True
        if s in _FALSE_VALUES:
            return False
        return False

    def _resolve_logging_level_and_source(self) -> tuple[str, ConfigSource]:
        key = "logging.level"
        found = self.try_resolve(key)
        if found is None:
            return DEFAULT_LOGGING_LEVEL, ConfigSource(
                value=DEFAULT_LOGGING_LEVEL,
                source="default",
            )

        value, source = found
        if not isinstance(value, str):
            raise ConfigError(f"Config key '{key}' must be a string, got {type(value).__name__}")

        norm = value.strip().lower()
        if norm not in ALLOWED_LOGGING_LEVELS:
            allowed = ", ".join(sorted(ALLOWED_LOGGING_LEVELS))
            raise ConfigError(f"Invalid '{key}': {value!r}. Allowed values: {allowed}")

        return norm, ConfigSource(value=norm, source=source)

    def _from_cli(self, key: str) -> Any | None:
        if key in self.cli_args:
            return self.cli_args[key]
        return self._get_nested(self.cli_args, key)

    def _from_env(self, key: str) -> Any | None:
        """Get value from environment variables.

        Environment variable format: TARGZ_KEY_NAME
        Example: TARGZ_ARCHIVE_IGNORE, TARGZ_LOGGING_LEVEL
        """
        env_key = f"{ENV_PREFIX}{key.upper().replace('.', '_')}"
        return os.environ.get(env_key)

    def _get_user_config(self) -> dict[str, Any]:
        if self._user_config is None:
            self._user_config = self._load_yaml(self.user_config_path)
        return self._user_config

    def _get_system_config(self) -> dict[str, Any]:
        if self._system_config is None:
            self._system_config = self._load_yaml(self.system_config_path)
        return self._system_config

    def _load_yaml(self, path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}

        try:
            with open(path) as f:
                data = yaml.safe_load(f)
                return data if isinstance(data, dict) else {}
        except Exception as e:
            raise ConfigError(f"Failed to load config from {path}: {e}") from e

    def _get_nested(self, data: dict[str, Any], key: str) -> Any | None:
        """Get nested value using dot notation.

        Example:
            data = {'logging': {'level': 'debug'}}
            _get_nested(data, 'logging.level') -> 'debug'
        """
        current: Any = data
        for part in key.split("."):
            if not isinstance(current, dict):
                return None
            current = current.get(part)
            if current is None:
                return None
        return current

    @staticmethod
    def _default_config() -> dict[str, Any]:
        """Default configuration."""
        return {
            "archive": {
                "ignore": [],
            },
            "logging": {
                "level": DEFAULT_LOGGING_LEVEL,
            },
            "diagnostics": {
                "enabled": False,
            },
        }
