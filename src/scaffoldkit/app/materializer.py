"""Copies a cached template into the target directory and renders placeholders.

Placeholders use EJS delimiters so that existing template packages render
unchanged: ``<%= name %>`` and ``<%- name %>`` both emit the value, ``<% ... %>``
blocks and ``<%# ... %>`` comments follow Jinja2 semantics.
"""

from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import Iterable, List, Sequence

from jinja2 import StrictUndefined, TemplateError
from jinja2.sandbox import SandboxedEnvironment
from wcmatch import glob

from scaffoldkit.domain.cache import CacheEntry
from scaffoldkit.domain.errors import MaterializeError
from scaffoldkit.domain.project import ProjectMetadata
from scaffoldkit.domain.template import TemplateDescriptor

COMPONENT_FILE = ".componentrc"
_GLOB_FLAGS = glob.GLOBSTAR | glob.DOTGLOB | glob.FORCEUNIX
BASE_IGNORE: tuple[str, ...] = (
    "**/node_modules/**",
    "**/.git/**",
    "**/.vscode/**",
    "**/.DS_Store",
    "**/README.md",
    "**/public/**",
)


def is_ignored(relative: str, patterns: Iterable[str]) -> bool:
    """Match a POSIX relative path against gitignore-style globs.

    ``*`` stays within one directory; only ``**`` crosses ``/`` (and also
    matches zero directories, so ``**/x`` matches ``x`` at the root).
    """
    return glob.globmatch(relative, list(patterns), flags=_GLOB_FLAGS)


def _build_environment() -> SandboxedEnvironment:
    return SandboxedEnvironment(
        block_start_string="<%",
        block_end_string="%>",
        variable_start_string="<%=",
        variable_end_string="%>",
        comment_start_string="<%#",
        comment_end_string="%>",
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )


class Materializer:
    def __init__(self) -> None:
        self._env = _build_environment()

    def materialize(
        self,
        source: Path,
        target: Path,
        metadata: ProjectMetadata,
        ignore: Sequence[str] = (),
    ) -> List[Path]:
        try:
            source.mkdir(parents=True, exist_ok=True)
            target.mkdir(parents=True, exist_ok=True)
            copied = sorted(
                path.relative_to(source).as_posix() for path in source.rglob("*") if path.is_file()
            )
            shutil.copytree(source, target, dirs_exist_ok=True)
        except OSError as exc:
            raise MaterializeError(f"failed to copy template from {source} to {target}: {exc}") from exc

        patterns = [*BASE_IGNORE, *ignore]
        context = metadata.to_template_data()
        rendered: List[Path] = []
        for relative in copied:
            if is_ignored(relative, patterns):
                continue
            path = target / relative
            if self.render_file(path, context):
                rendered.append(path)
        return rendered

    def render_file(self, path: Path, context: dict) -> bool:
        """Render ``path`` in place; return True when the content changed."""
        try:
            raw = path.read_bytes()
        except OSError as exc:
            raise MaterializeError(f"failed to read {path}: {exc}") from exc
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError:
            return False
        if "\x00" in text or "<%" not in text:
            return False
        try:
            output = self.render_text(text, context)
        except TemplateError as exc:
            raise MaterializeError(f"failed to render {path}: {exc}") from exc
        if output == text:
            return False
        try:
            path.write_text(output, encoding="utf-8")
        except OSError as exc:
            raise MaterializeError(f"failed to write {path}: {exc}") from exc
        return True

    def render_text(self, text: str, context: dict) -> str:
        return self._env.from_string(text.replace("<%-", "<%=")).render(**context)

    def write_component_manifest(
        self,
        target: Path,
        descriptor: TemplateDescriptor,
        metadata: ProjectMetadata,
        entry: CacheEntry,
    ) -> Path:
        payload = metadata.to_template_data()
        payload.update(
            {
                "buildPath": descriptor.build_path,
                "examplePath": descriptor.example_path,
                "npmName": descriptor.package_id,
                "npmVersion": entry.version,
            }
        )
        manifest = target / COMPONENT_FILE
        try:
            manifest.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
        except OSError as exc:
            raise MaterializeError(f"failed to write {manifest}: {exc}") from exc
        return manifest


__all__ = ["BASE_IGNORE", "COMPONENT_FILE", "Materializer", "is_ignored"]
