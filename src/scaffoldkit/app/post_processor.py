"""Dependency install or custom generator run after a template is acquired."""

from __future__ import annotations

import json
import shutil
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from scaffoldkit.domain.cache import CacheEntry
from scaffoldkit.domain.errors import PostProcessError
from scaffoldkit.domain.project import ProjectMetadata
from scaffoldkit.domain.template import TemplateDescriptor, TemplateKind
from scaffoldkit.settings import RuntimeSettings

PYTHON_SUFFIXES = {".py"}


@dataclass(frozen=True)
class PostProcessResult:
    kind: TemplateKind
    command: tuple[str, ...]
    exit_code: int


def build_generator_payload(
    target: Path,
    descriptor: TemplateDescriptor,
    metadata: ProjectMetadata,
    entry: CacheEntry,
) -> dict[str, Any]:
    template = descriptor.to_payload()
    template["path"] = str(entry.template_dir)
    template["sourcePath"] = str(entry.root)
    return {
        "targetPath": str(target),
        "data": metadata.to_template_data(),
        "template": template,
    }


def interpreter_for(entry_file: Path) -> list[str]:
    if entry_file.suffix in PYTHON_SUFFIXES:
        return [sys.executable]
    return [_which("node")]


def _which(executable: str) -> str:
    # npm and node ship as .cmd shims on Windows
    return shutil.which(executable) or executable


class PostProcessor:
    def __init__(self, settings: RuntimeSettings) -> None:
        self._settings = settings

    def run(
        self,
        descriptor: TemplateDescriptor,
        metadata: ProjectMetadata,
        entry: CacheEntry,
        target: Path,
    ) -> PostProcessResult:
        kind = descriptor.kind
        if kind is TemplateKind.NORMAL:
            return self.install_dependencies(target)
        return self.run_custom_generator(descriptor, metadata, entry, target)

    def install_command(self) -> list[str]:
        command = list(self._settings.install_command)
        command[0] = _which(command[0])
        return command + [f"--registry={self._settings.npm_registry}"]

    def install_dependencies(self, target: Path) -> PostProcessResult:
        command = self.install_command()
        try:
            result = subprocess.run(command, cwd=target)
        except OSError as exc:
            raise PostProcessError(f"dependency install could not start ({command[0]}): {exc}") from exc
        if result.returncode != 0:
            raise PostProcessError(f"dependency install failed with exit code {result.returncode}")
        return PostProcessResult(kind=TemplateKind.NORMAL, command=tuple(command), exit_code=0)

    def run_custom_generator(
        self,
        descriptor: TemplateDescriptor,
        metadata: ProjectMetadata,
        entry: CacheEntry,
        target: Path,
    ) -> PostProcessResult:
        entry_file = entry.entry_point()
        if not entry_file.is_file():
            raise PostProcessError(f"entry file not found: {entry_file}")
        payload = build_generator_payload(target, descriptor, metadata, entry)
        command = [*interpreter_for(entry_file), str(entry_file)]
        target.mkdir(parents=True, exist_ok=True)
        try:
            result = subprocess.run(
                command,
                input=json.dumps(payload, ensure_ascii=False),
                text=True,
                encoding="utf-8",
                cwd=target,
            )
        except OSError as exc:
            raise PostProcessError(f"custom generator could not start ({command[0]}): {exc}") from exc
        if result.returncode != 0:
            raise PostProcessError(
                f"custom generator {descriptor.package_id} failed with exit code {result.returncode}"
            )
        return PostProcessResult(kind=TemplateKind.CUSTOM, command=tuple(command), exit_code=0)


__all__ = ["PostProcessResult", "PostProcessor", "build_generator_payload", "interpreter_for"]
