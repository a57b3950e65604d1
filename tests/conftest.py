from __future__ import annotations

import json
import os
import shutil
import sys
from collections import deque
from pathlib import Path
from typing import Any, Callable, Iterable, Sequence

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
SANDBOX_HOME = ROOT / ".test_place" / "scaffold-home"
os.environ.setdefault("SCAFFOLDKIT_HOME", str(SANDBOX_HOME))
SANDBOX_HOME.mkdir(parents=True, exist_ok=True)
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from scaffoldkit.domain.cache import PACKAGE_MANIFEST  # noqa: E402
from scaffoldkit.ports.package_store import PackageStore, PackageStoreError  # noqa: E402
from scaffoldkit.ports.prompter import Choice  # noqa: E402
from scaffoldkit.settings import RuntimeSettings  # noqa: E402


class ScriptedPrompter:
    """Answers questions from a queue; records every question asked."""

    def __init__(self, answers: Iterable[Any]) -> None:
        self._answers = deque(answers)
        self.asked: list[tuple[str, str]] = []

    def _next(self, kind: str, message: str) -> Any:
        self.asked.append((kind, message))
        if not self._answers:
            raise AssertionError(f"no scripted answer for {kind}: {message}")
        return self._answers.popleft()

    def confirm(self, message: str, *, default: bool = False) -> bool:
        return bool(self._next("confirm", message))

    def text(self, message: str, *, default: str = "") -> str:
        answer = self._next("text", message)
        return default if answer is None else answer

    def select(self, message: str, choices: Sequence[Choice], *, default: str | None = None) -> str:
        answer = self._next("select", message)
        values = [choice.value for choice in choices]
        if answer not in values:
            raise AssertionError(f"answer {answer!r} not among {values}")
        return answer

    @property
    def remaining(self) -> int:
        return len(self._answers)


PackageFiles = dict[str, str]


def write_package(root: Path, package_id: str, version: str, files: PackageFiles, *, main: str | None = None) -> Path:
    """Lay out an unpacked template package under ``root``."""
    root.mkdir(parents=True, exist_ok=True)
    manifest: dict[str, Any] = {"name": package_id, "version": version}
    if main is not None:
        manifest["main"] = main
    (root / PACKAGE_MANIFEST).write_text(json.dumps(manifest), encoding="utf-8")
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


class FakeStore(PackageStore):
    """In-memory registry of template packages keyed by ``(id, version)``."""

    def __init__(self) -> None:
        self.packages: dict[tuple[str, str], tuple[PackageFiles, str | None]] = {}
        self.installs: list[tuple[str, str]] = []
        self.fail_with: str | None = None

    def publish(self, package_id: str, version: str, files: PackageFiles, *, main: str | None = None) -> None:
        self.packages[(package_id, version)] = (files, main)

    def install(self, package_id: str, version: str, destination: Path) -> str:
        self.installs.append((package_id, version))
        if self.fail_with:
            raise PackageStoreError(self.fail_with)
        if (package_id, version) not in self.packages:
            raise PackageStoreError(f"{package_id}@{version} not found in registry")
        files, main = self.packages[(package_id, version)]
        if destination.exists():
            shutil.rmtree(destination)
        write_package(destination, package_id, version, files, main=main)
        return version


@pytest.fixture()
def runtime_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> RuntimeSettings:
    home = tmp_path / "scaffold-home"
    settings = RuntimeSettings(
        home_dir=home,
        cache_dir=home,
        state_dir=home / "state",
        log_dir=home / "logs",
        catalog_url="http://catalog.test/project/template",
        npm_registry="http://npm.test",
    )
    for directory in (settings.home_dir, settings.state_dir, settings.log_dir):
        directory.mkdir(parents=True, exist_ok=True)
    return settings


@pytest.fixture()
def make_prompter() -> Callable[..., ScriptedPrompter]:
    def _factory(*answers: Any) -> ScriptedPrompter:
        return ScriptedPrompter(answers)

    return _factory


@pytest.fixture()
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture()
def package_writer() -> Callable[..., Path]:
    return write_package
