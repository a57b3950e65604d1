"""Port definition for fetching template packages."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path


class PackageStoreError(RuntimeError):
    pass


class PackageStore(ABC):
    @abstractmethod
    def install(self, package_id: str, version: str, destination: Path) -> str:
        """Place ``package_id@version`` at ``destination``; return the installed version."""
