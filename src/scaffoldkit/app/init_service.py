"""Orchestrates the template provisioning and instantiation pipeline."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List

from scaffoldkit.app.directory_guard import DirectoryGuard
from scaffoldkit.app.materializer import Materializer
from scaffoldkit.app.package_cache import PackageCache
from scaffoldkit.app.post_processor import PostProcessor
from scaffoldkit.app.resolver import TemplateResolver
from scaffoldkit.domain.cache import CacheEntry
from scaffoldkit.domain.project import InitType
from scaffoldkit.domain.template import TemplateDescriptor, TemplateKind
from scaffoldkit.ports.prompter import Prompter
from scaffoldkit.ports.registry import TemplateRegistry
from scaffoldkit.settings import RuntimeSettings
from scaffoldkit.utils.telemetry import RunLog


@dataclass(frozen=True)
class InitOptions:
    target_path: Path
    force: bool = False


@dataclass
class InitResult:
    status: str
    target_path: Path
    template: TemplateDescriptor | None = None
    entry: CacheEntry | None = None
    rendered: List[Path] = field(default_factory=list)
    component_file: Path | None = None


def _silent(_: str) -> None:
    return None


class InitService:
    def __init__(
        self,
        registry: TemplateRegistry,
        cache: PackageCache,
        prompter: Prompter,
        settings: RuntimeSettings,
        *,
        materializer: Materializer | None = None,
        post_processor: PostProcessor | None = None,
        notify: Callable[[str], None] | None = None,
        run_log: RunLog | None = None,
    ) -> None:
        self._registry = registry
        self._cache = cache
        self._guard = DirectoryGuard(prompter)
        self._resolver = TemplateResolver(prompter)
        self._materializer = materializer or Materializer()
        self._post_processor = post_processor or PostProcessor(settings)
        self._notify = notify or _silent
        self.run_log = run_log or RunLog(settings)

    def run(self, options: InitOptions) -> InitResult:
        target = options.target_path
        decision = self._guard.assess_and_prepare(target, force=options.force)
        self.run_log.record(
            "init.guard",
            {"target": str(target), "force": options.force, "proceed": decision.proceed, "cleared": decision.cleared},
        )
        if not decision.proceed:
            return InitResult(status="aborted", target_path=target)

        kind = self._resolver.choose_init_type()
        templates = self._registry.fetch_templates()
        self.run_log.record("catalog.fetch", {"count": len(templates)})
        resolution = self._resolver.resolve(kind, templates)
        template = resolution.descriptor
        metadata = resolution.metadata
        # the kind is validated before anything is downloaded
        template_kind = template.kind

        entry = self._acquire(template)

        result = InitResult(status="completed", target_path=target, template=template, entry=entry)
        if template_kind is TemplateKind.NORMAL:
            self._notify("Installing template...")
            result.rendered = self._materializer.materialize(
                entry.template_dir, target, metadata, template.ignore
            )
            if template.has_tag(InitType.COMPONENT.value):
                result.component_file = self._materializer.write_component_manifest(
                    target, template, metadata, entry
                )
            self.run_log.record(
                "materialize",
                {"template": template.package_id, "rendered": len(result.rendered)},
            )
            self._notify("Template installed")
            self._notify("Installing dependencies...")
        else:
            self._notify("Running custom template generator...")

        started = time.monotonic()
        outcome = self._post_processor.run(template, metadata, entry, target)
        self.run_log.record(
            "postprocess",
            {"template": template.package_id, "kind": outcome.kind.value, "exit_code": outcome.exit_code},
            duration_ms=(time.monotonic() - started) * 1000,
        )
        if template_kind is TemplateKind.NORMAL:
            self._notify("Dependencies installed")
        else:
            self._notify("Custom template finished")
        return result

    def _acquire(self, template: TemplateDescriptor) -> CacheEntry:
        spec = f"{template.package_id}@{template.version}"
        if self._cache.exists(template.package_id):
            self._notify(f"Template {spec} is cached at {self._cache.root}; checking for updates...")
        else:
            self._notify(f"Downloading template {spec}...")
        entry = self._cache.acquire(template.package_id, template.version)
        self.run_log.record(
            "cache.acquire",
            {"template": template.package_id, "requested": template.version, "version": entry.version},
            status=self._cache.last_action,
        )
        self._notify(f"Template ready: {entry.package_id}@{entry.version}")
        return entry


__all__ = ["InitOptions", "InitResult", "InitService"]
