"""Domain model for template packages held in the local cache."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from scaffoldkit.domain.errors import TemplateConfigError

PACKAGE_MANIFEST = "package.json"
TEMPLATE_SUBDIR = "template"
DEFAULT_ENTRY = "index.js"


@dataclass(frozen=True)
class CacheEntry:
    package_id: str
    version: str
    root: Path

    @property
    def template_dir(self) -> Path:
        return self.root / TEMPLATE_SUBDIR

    @property
    def manifest_path(self) -> Path:
        return self.root / PACKAGE_MANIFEST

    def load_manifest(self) -> dict[str, Any]:
        try:
            data = json.loads(self.manifest_path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise TemplateConfigError(f"package manifest missing: {self.manifest_path}") from exc
        except json.JSONDecodeError as exc:
            raise TemplateConfigError(f"package manifest invalid JSON: {self.manifest_path}: {exc}") from exc
        if not isinstance(data, dict):
            raise TemplateConfigError(f"package manifest must be a JSON object: {self.manifest_path}")
        return data

    def entry_point(self) -> Path:
        main = str(self.load_manifest().get("main") or DEFAULT_ENTRY)
        root = self.root.resolve()
        entry = (root / main).resolve()
        if root not in entry.parents:
            raise TemplateConfigError(f"[{self.package_id}] entry point {main!r} is outside the package root")
        return entry


def read_installed_version(package_root: Path) -> str | None:
    manifest = package_root / PACKAGE_MANIFEST
    if not manifest.exists():
        return None
    try:
        data = json.loads(manifest.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        return None
    version = data.get("version") if isinstance(data, dict) else None
    return str(version) if version else None


__all__ = ["CacheEntry", "PACKAGE_MANIFEST", "TEMPLATE_SUBDIR", "read_installed_version"]
