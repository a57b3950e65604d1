from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

import pytest

from scaffoldkit.app import post_processor as post_processor_module
from scaffoldkit.app.post_processor import PostProcessor, build_generator_payload, interpreter_for
from scaffoldkit.domain.cache import CacheEntry
from scaffoldkit.domain.errors import PostProcessError, TemplateConfigError
from scaffoldkit.domain.project import ProjectMetadata
from scaffoldkit.domain.template import TemplateDescriptor, TemplateKind

GENERATOR = """\
import json
import pathlib
import sys

payload = json.load(sys.stdin)
target = pathlib.Path(payload["targetPath"])
(target / "generated.json").write_text(json.dumps(payload), encoding="utf-8")
"""


def _descriptor(kind: str) -> TemplateDescriptor:
    return TemplateDescriptor.from_catalog_entry(
        {"npmName": "tpl-x", "name": "X", "version": "1.0.0", "tag": ["project"], "type": kind}
    )


def _entry(tmp_path: Path, package_writer, *, main: str | None, files: dict[str, str]) -> CacheEntry:
    root = package_writer(tmp_path / "cache" / "tpl-x", "tpl-x", "1.0.0", files, main=main)
    return CacheEntry(package_id="tpl-x", version="1.0.0", root=root)


def test_normal_runs_install_in_target(tmp_path: Path, runtime_settings, monkeypatch: pytest.MonkeyPatch, package_writer) -> None:
    calls: list[tuple[list[str], Path]] = []

    def fake_run(command, cwd=None, **kwargs):
        calls.append((command, cwd))
        return subprocess.CompletedProcess(command, 0)

    monkeypatch.setattr(post_processor_module.subprocess, "run", fake_run)
    monkeypatch.setattr(post_processor_module.shutil, "which", lambda name: None)
    target = tmp_path / "project"
    target.mkdir()

    result = PostProcessor(runtime_settings).run(
        _descriptor("normal"),
        ProjectMetadata.from_input("app", "1.0.0"),
        _entry(tmp_path, package_writer, main=None, files={"template/a.txt": "a"}),
        target,
    )

    assert result.kind is TemplateKind.NORMAL
    assert calls == [(["npm", "install", "--registry=http://npm.test"], target)]


def test_normal_install_failure(tmp_path: Path, runtime_settings, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        post_processor_module.subprocess, "run", lambda command, **kwargs: subprocess.CompletedProcess(command, 1)
    )
    with pytest.raises(PostProcessError, match="exit code 1"):
        PostProcessor(runtime_settings).install_dependencies(tmp_path)


def test_normal_install_spawn_error(tmp_path: Path, runtime_settings, monkeypatch: pytest.MonkeyPatch) -> None:
    def boom(command, **kwargs):
        raise FileNotFoundError(command[0])

    monkeypatch.setattr(post_processor_module.subprocess, "run", boom)
    with pytest.raises(PostProcessError, match="could not start"):
        PostProcessor(runtime_settings).install_dependencies(tmp_path)


def test_custom_generator_receives_payload(tmp_path: Path, runtime_settings, package_writer) -> None:
    entry = _entry(tmp_path, package_writer, main="generator.py", files={"generator.py": GENERATOR, "template/x": "x"})
    target = tmp_path / "project"
    metadata = ProjectMetadata.from_input("my app", "3.0.0")

    result = PostProcessor(runtime_settings).run(_descriptor("custom"), metadata, entry, target)

    assert result.kind is TemplateKind.CUSTOM
    assert result.command[0] == sys.executable
    payload = json.loads((target / "generated.json").read_text(encoding="utf-8"))
    assert payload["targetPath"] == str(target)
    assert payload["data"] == {"name": "MyApp", "className": "my-app", "version": "3.0.0"}
    assert payload["template"]["npmName"] == "tpl-x"
    assert payload["template"]["sourcePath"] == str(entry.root)


def test_custom_generator_missing_entry(tmp_path: Path, runtime_settings, package_writer) -> None:
    entry = _entry(tmp_path, package_writer, main="missing.js", files={"template/x": "x"})
    with pytest.raises(PostProcessError, match="entry file not found"):
        PostProcessor(runtime_settings).run(
            _descriptor("custom"), ProjectMetadata.from_input("app", "1.0.0"), entry, tmp_path / "project"
        )


def test_custom_generator_failure(tmp_path: Path, runtime_settings, package_writer) -> None:
    entry = _entry(tmp_path, package_writer, main="gen.py", files={"gen.py": "raise SystemExit(3)\n"})
    with pytest.raises(PostProcessError, match="exit code 3"):
        PostProcessor(runtime_settings).run(
            _descriptor("custom"), ProjectMetadata.from_input("app", "1.0.0"), entry, tmp_path / "project"
        )


def test_unknown_kind(tmp_path: Path, runtime_settings, package_writer) -> None:
    entry = _entry(tmp_path, package_writer, main=None, files={})
    with pytest.raises(TemplateConfigError):
        PostProcessor(runtime_settings).run(
            _descriptor("weird"), ProjectMetadata.from_input("app", "1.0.0"), entry, tmp_path
        )


def test_interpreter_selection(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(post_processor_module.shutil, "which", lambda name: f"/usr/bin/{name}")
    assert interpreter_for(tmp_path / "gen.py") == [sys.executable]
    assert interpreter_for(tmp_path / "index.js") == ["/usr/bin/node"]


def test_payload_includes_paths(tmp_path: Path) -> None:
    entry = CacheEntry(package_id="tpl-x", version="1.0.0", root=tmp_path)
    payload = build_generator_payload(
        tmp_path / "out", _descriptor("custom"), ProjectMetadata.from_input("app", "1.0.0"), entry
    )
    assert payload["template"]["path"] == str(tmp_path / "template")
