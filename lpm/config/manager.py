from __future__ import annotations

import copy
import os
import re
import tomllib
from pathlib import Path
from typing import Any

from lpm.config.defaults import DEFAULT_CONFIG
from lpm.errors import ConfigError

_BARE_KEY = re.compile(r"^[A-Za-z0-9_-]+$")


class ConfigManager:
    def __init__(self, config_path: str | None = None) -> None:
        if config_path is not None:
            self._config_path = Path(config_path).expanduser()
        else:
            xdg = os.environ.get("XDG_CONFIG_HOME", "~/.config")
            self._config_path = Path(xdg).expanduser() / "lpm" / "config.toml"
        self._config: dict = {}

    @property
    def path(self) -> Path:
        return self._config_path

    @property
    def config(self) -> dict:
        if not self._config:
            self._config = self.load()
        return self._config

    def load(self) -> dict:
        defaults = copy.deepcopy(DEFAULT_CONFIG)
        if not self._config_path.exists():
            self._config_path.parent.mkdir(parents=True, exist_ok=True)
            self.save(defaults)
            self._config = defaults
            return defaults

        try:
            with open(self._config_path, "rb") as f:
                user_config = tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Cannot parse {self._config_path}: {exc}") from exc

        # A user-defined parser set replaces the bundled examples wholesale.
        user_parsers = user_config.pop("parsers", None)
        merged = self._deep_merge(defaults, user_config)
        if user_parsers is not None:
            merged["parsers"] = user_parsers
        self._config = merged
        return merged

    def _deep_merge(self, base: dict, override: dict) -> dict:
        result = base.copy()
        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    def save(self, config: dict) -> None:
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        toml_str = self._dict_to_toml(config)
        with open(self._config_path, "w") as f:
            f.write(toml_str)

    def get(self, key_path: str, default: object = None) -> object:
        keys = key_path.split(".")
        current: object = self.config
        for key in keys:
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default
        return current

    def parsers(self) -> dict[str, Any]:
        parsers = self.config.get("parsers", {})
        if not isinstance(parsers, dict):
            raise ConfigError("'parsers' must be a table of parser names")
        return parsers

    # ------------------------------------------------------------------
    # Minimal TOML serializer (no tomli_w dependency)
    # ------------------------------------------------------------------

    def _dict_to_toml(self, d: dict, prefix: str = "") -> str:
        scalars: list[str] = []
        sections: list[str] = []

        for key, value in d.items():
            full_key = f"{prefix}.{self._toml_key(key)}" if prefix else self._toml_key(key)
            if isinstance(value, dict):
                sections.append(f"\n[{full_key}]\n" + self._dict_to_toml(value, full_key))
            elif _is_table_array(value):
                # Each matcher definition becomes its own [[parsers.<name>]] block.
                for item in value:
                    sections.append(f"\n[[{full_key}]]\n" + self._dict_to_toml(item, full_key))
            else:
                scalars.append(f"{self._toml_key(key)} = {self._toml_value(value)}")

        body = "\n".join(scalars)
        if body:
            body += "\n"
        return body + "".join(sections)

    @staticmethod
    def _toml_key(key: str) -> str:
        if _BARE_KEY.match(key):
            return key
        return ConfigManager._toml_value(key)

    @staticmethod
    def _toml_value(value: object) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return str(value)
        if isinstance(value, str):
            escaped = value.replace("\\", "\\\\").replace('"', '\\"')
            return f'"{escaped}"'
        if isinstance(value, list):
            items = ", ".join(ConfigManager._toml_value(item) for item in value)
            return f"[{items}]"
        raise ConfigError(f"Cannot write {type(value).__name__} value to TOML")


def _is_table_array(value: object) -> bool:
    return (
        isinstance(value, list)
        and bool(value)
        and all(isinstance(item, dict) for item in value)
    )
