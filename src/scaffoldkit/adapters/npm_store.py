"""Template packages fetched from an npm-compatible registry."""

from __future__ import annotations

import io
import shutil
import tarfile
import tempfile
from pathlib import Path
from typing import Any
from urllib.parse import quote

import requests

from scaffoldkit.ports.package_store import PackageStore, PackageStoreError

TARBALL_PREFIX = "package/"


class NpmPackageStore(PackageStore):
    def __init__(
        self,
        registry_url: str,
        session: requests.Session | None = None,
        *,
        timeout: float = 30.0,
    ) -> None:
        self._registry_url = registry_url.rstrip("/")
        self._session = session or requests.Session()
        self._timeout = timeout

    def install(self, package_id: str, version: str, destination: Path) -> str:
        document = self._fetch_document(package_id)
        resolved, meta = _resolve_version(document, package_id, version)
        tarball_url = (meta.get("dist") or {}).get("tarball")
        if not tarball_url:
            raise PackageStoreError(f"{package_id}@{resolved} has no tarball")
        archive = self._get(tarball_url, f"{package_id}@{resolved} tarball").content

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.TemporaryDirectory(dir=destination.parent, prefix=".staging-") as tmp_dir:
                staging = Path(tmp_dir) / "package"
                _extract_package(archive, staging)
                if destination.exists():
                    shutil.rmtree(destination)
                shutil.move(str(staging), str(destination))
        except OSError as exc:
            raise PackageStoreError(f"could not unpack {package_id}@{resolved} into {destination}: {exc}") from exc
        return resolved

    def _fetch_document(self, package_id: str) -> dict[str, Any]:
        url = f"{self._registry_url}/{quote(package_id, safe='@')}"
        response = self._get(url, package_id)
        try:
            payload = response.json()
        except ValueError as exc:
            raise PackageStoreError(f"registry returned invalid JSON for {package_id}: {exc}") from exc
        if not isinstance(payload, dict):
            raise PackageStoreError(f"registry document for {package_id} must be an object")
        return payload

    def _get(self, url: str, what: str) -> requests.Response:
        try:
            response = self._session.get(url, timeout=self._timeout)
        except requests.RequestException as exc:
            raise PackageStoreError(f"download of {what} failed: {exc}") from exc
        if response.status_code >= 400:
            raise PackageStoreError(f"download of {what} failed: HTTP {response.status_code}")
        return response


def _resolve_version(document: dict[str, Any], package_id: str, version: str) -> tuple[str, dict[str, Any]]:
    versions = document.get("versions") or {}
    if version not in versions:
        tagged = (document.get("dist-tags") or {}).get(version)
        if tagged is None or tagged not in versions:
            raise PackageStoreError(f"{package_id}@{version} not found in registry")
        version = tagged
    return version, versions[version]


def _extract_package(archive: bytes, staging: Path) -> None:
    staging.mkdir(parents=True)
    root = staging.resolve()
    try:
        with tarfile.open(fileobj=io.BytesIO(archive), mode="r:*") as tar:
            for member in tar.getmembers():
                if not member.name.startswith(TARBALL_PREFIX):
                    continue
                relative = member.name[len(TARBALL_PREFIX):]
                if not relative:
                    continue
                target = (staging / relative).resolve()
                if root not in target.parents:
                    raise PackageStoreError(f"refusing to extract {member.name} outside package root")
                if member.isdir():
                    target.mkdir(parents=True, exist_ok=True)
                    continue
                if not member.isfile():
                    continue
                handle = tar.extractfile(member)
                if handle is None:
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                with handle, target.open("wb") as out:
                    shutil.copyfileobj(handle, out)
                target.chmod(member.mode & 0o777 | 0o600)
    except tarfile.TarError as exc:
        raise PackageStoreError(f"invalid package archive: {exc}") from exc


__all__ = ["NpmPackageStore"]
