"""Layered hierarchical configuration.

Keys are ``:``-separated paths (``Twilio:Client:AccountSid``) and lookups
are case-insensitive. Layers are read with pydantic-settings sources and
applied in order, later layers winning:

    appsettings.json  ->  .env  ->  environment variables  ->  in-memory overrides

Environment variables use ``__`` as the level separator
(``Twilio__Client__AccountSid``).
"""

import logging
from collections.abc import Iterator, Mapping
from typing import Any

from pydantic_settings import (
    BaseSettings,
    DotEnvSettingsSource,
    EnvSettingsSource,
    JsonConfigSettingsSource,
    SettingsConfigDict,
)

logger = logging.getLogger(__name__)

KEY_DELIMITER = ":"


class ConfigurationSources(BaseSettings):
    """Root sections read from the environment. JSON files contribute every key."""

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    twilio: dict[str, Any] = {}


class Configuration:
    """Flat, case-insensitive store of hierarchical string values."""

    def __init__(self, values: Mapping[str, Any] | None = None):
        self._values: dict[str, str] = {}
        if values:
            self.add(values)

    def add(self, values: Mapping[str, Any]) -> "Configuration":
        """Merge a (possibly nested) mapping into the store, overriding existing keys."""
        for key, value in _flatten(values):
            self._values[key.lower()] = value
        return self

    def get(self, key: str, default: str | None = None) -> str | None:
        return self._values.get(key.lower(), default)

    def __getitem__(self, key: str) -> str | None:
        # Missing keys read as None rather than raising
        return self.get(key)

    def __contains__(self, key: str) -> bool:
        return key.lower() in self._values

    def get_section(self, path: str) -> "ConfigurationSection":
        return ConfigurationSection(self, path)

    def has_children(self, path: str) -> bool:
        prefix = path.lower() + KEY_DELIMITER
        return any(k.startswith(prefix) for k in self._values)


class ConfigurationSection:
    """View over the keys below ``path``. May refer to a section that does not exist."""

    def __init__(self, root: Configuration, path: str):
        self._root = root
        self.path = path

    @property
    def key(self) -> str:
        return self.path.rsplit(KEY_DELIMITER, 1)[-1]

    @property
    def value(self) -> str | None:
        return self._root.get(self.path)

    def exists(self) -> bool:
        return self.value is not None or self._root.has_children(self.path)

    def get(self, key: str, default: str | None = None) -> str | None:
        return self._root.get(f"{self.path}{KEY_DELIMITER}{key}", default)

    def __getitem__(self, key: str) -> str | None:
        return self.get(key)

    def get_section(self, key: str) -> "ConfigurationSection":
        return ConfigurationSection(self._root, f"{self.path}{KEY_DELIMITER}{key}")

    def __repr__(self) -> str:
        return f"ConfigurationSection({self.path!r})"


def _flatten(values: Mapping[str, Any], prefix: str = "") -> Iterator[tuple[str, str]]:
    for key, value in values.items():
        path = f"{prefix}{KEY_DELIMITER}{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            yield from _flatten(value, path)
        elif isinstance(value, list):
            yield from _flatten({str(i): item for i, item in enumerate(value)}, path)
        elif value is None:
            continue
        elif isinstance(value, bool):
            yield path, "true" if value else "false"
        else:
            yield path, str(value)


def load_configuration(config_path: str, env_file: str | None = ".env") -> Configuration:
    """Build the application configuration: JSON file, then ``.env``, then the environment.

    Missing files are skipped.
    """
    layers = [
        JsonConfigSettingsSource(ConfigurationSources, json_file=config_path),
        DotEnvSettingsSource(ConfigurationSources, env_file=env_file),
        EnvSettingsSource(ConfigurationSources),
    ]
    configuration = Configuration()
    for layer in layers:
        configuration.add(layer())
    logger.debug("Configuration loaded from %s", config_path)
    return configuration
