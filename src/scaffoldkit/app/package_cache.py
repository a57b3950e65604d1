"""Local cache of template packages with install-or-update semantics."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

from packaging.version import InvalidVersion, Version

from scaffoldkit.domain.cache import PACKAGE_MANIFEST, CacheEntry, read_installed_version
from scaffoldkit.domain.errors import CacheError
from scaffoldkit.ports.package_store import PackageStore, PackageStoreError

PACKAGES_SUBDIR = "node_modules"


def _same_version(installed: str, requested: str) -> bool:
    try:
        return Version(installed) == Version(requested)
    except InvalidVersion:
        return installed == requested


class PackageCache:
    def __init__(self, store: PackageStore, cache_root: Path) -> None:
        self._store = store
        self._root = cache_root
        self.last_action: str | None = None

    @property
    def root(self) -> Path:
        return self._root

    def location(self, package_id: str) -> Path:
        return self._root / PACKAGES_SUBDIR / package_id

    def exists(self, package_id: str) -> bool:
        return (self.location(package_id) / PACKAGE_MANIFEST).exists()

    def acquire(self, package_id: str, version: str) -> CacheEntry:
        location = self.location(package_id)
        installed = read_installed_version(location) if self.exists(package_id) else None
        if installed is None:
            installed = self._install(package_id, version, location, action="install")
        elif not _same_version(installed, version):
            installed = self._install(package_id, version, location, action="update")
        else:
            self.last_action = "hit"

        entry = CacheEntry(package_id=package_id, version=installed, root=location)
        if not entry.template_dir.is_dir():
            raise CacheError(f"[{package_id}] template not found in {location}")
        return entry

    def list_entries(self) -> Iterator[CacheEntry]:
        base = self._root / PACKAGES_SUBDIR
        if not base.exists():
            return
        for candidate in sorted(base.iterdir()):
            if candidate.name.startswith(".") or not candidate.is_dir():
                continue
            if candidate.name.startswith("@"):
                scoped = [p for p in sorted(candidate.iterdir()) if p.is_dir()]
            else:
                scoped = [candidate]
            for package_root in scoped:
                version = read_installed_version(package_root)
                if version is None:
                    continue
                package_id = package_root.relative_to(base).as_posix()
                yield CacheEntry(package_id=package_id, version=version, root=package_root)

    def _install(self, package_id: str, version: str, location: Path, *, action: str) -> str:
        try:
            installed = self._store.install(package_id, version, location)
        except (PackageStoreError, OSError) as exc:
            raise CacheError(f"[{package_id}] {action} of {version} failed: {exc}") from exc
        self.last_action = action
        return installed or version


__all__ = ["PackageCache", "PACKAGES_SUBDIR"]
