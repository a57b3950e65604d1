"""Runtime settings for the scaffold CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from scaffoldkit import __version__

HOME_ENV = "SCAFFOLDKIT_HOME"
CONFIG_FILENAME = "config.yaml"
DEFAULT_NPM_REGISTRY = "https://registry.npmjs.org"
DEFAULT_INSTALL_COMMAND = ("npm", "install")


@dataclass(frozen=True)
class RuntimeSettings:
    home_dir: Path
    cache_dir: Path
    state_dir: Path
    log_dir: Path
    catalog_url: str | None = None
    npm_registry: str = DEFAULT_NPM_REGISTRY
    install_command: tuple[str, ...] = field(default=DEFAULT_INSTALL_COMMAND)
    request_timeout: float = 5.0
    cli_version: str = __version__

    @property
    def template_cache_dir(self) -> Path:
        return self.cache_dir / "template"

    @property
    def config_file(self) -> Path:
        return self.home_dir / CONFIG_FILENAME



def _default_home_dir() -> Path:
    value = os.environ.get(HOME_ENV)
    if value:
        return Path(value).expanduser()
    return Path.home() / ".scaffoldkit"


def _load_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid {path.name}: top-level value must be a mapping")
    return data


def _apply_overrides(settings: RuntimeSettings, data: dict[str, Any]) -> RuntimeSettings:
    updates: dict[str, Any] = {}
    if data.get("catalog_url"):
        updates["catalog_url"] = str(data["catalog_url"]).strip()
    if data.get("npm_registry"):
        updates["npm_registry"] = str(data["npm_registry"]).rstrip("/")
    command = data.get("install_command")
    if command:
        if isinstance(command, str):
            command = command.split()
        if not isinstance(command, list) or not all(isinstance(arg, str) for arg in command):
            raise ValueError("install_command must be a string or a list of strings")
        updates["install_command"] = tuple(command)
    if data.get("request_timeout") is not None:
        updates["request_timeout"] = float(data["request_timeout"])
    return replace(settings, **updates) if updates else settings


def load_settings(home: Path | None = None) -> RuntimeSettings:
    base = home.expanduser() if home is not None else _default_home_dir()
    settings = RuntimeSettings(
        home_dir=base,
        cache_dir=base,
        state_dir=base / "state",
        log_dir=base / "logs",
    )
    settings = _apply_overrides(settings, _load_config_file(settings.config_file))
    env_overrides = {
        "catalog_url": os.environ.get("SCAFFOLDKIT_CATALOG_URL"),
        "npm_registry": os.environ.get("SCAFFOLDKIT_NPM_REGISTRY"),
    }
    return _apply_overrides(settings, {k: v for k, v in env_overrides.items() if v})


SETTINGS = load_settings()
