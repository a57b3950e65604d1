"""Binds the user's template choice and project metadata."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from scaffoldkit.domain.errors import CatalogError
from scaffoldkit.domain.project import DEFAULT_VERSION, InitType, ProjectMetadata, format_name
from scaffoldkit.domain.template import TemplateDescriptor
from scaffoldkit.ports.prompter import Choice, Prompter

_LABELS = {InitType.PROJECT: "project", InitType.COMPONENT: "component"}


@dataclass(frozen=True)
class Resolution:
    descriptor: TemplateDescriptor
    metadata: ProjectMetadata
    candidates: tuple[TemplateDescriptor, ...]


def filter_templates(kind: InitType, templates: Sequence[TemplateDescriptor]) -> list[TemplateDescriptor]:
    return [template for template in templates if template.has_tag(kind.value)]


def template_choices(templates: Sequence[TemplateDescriptor]) -> list[Choice]:
    return [Choice(label=template.name, value=template.package_id) for template in templates]


class TemplateResolver:
    def __init__(self, prompter: Prompter) -> None:
        self._prompter = prompter

    def choose_init_type(self) -> InitType:
        value = self._prompter.select(
            "Select what to initialise",
            [Choice("Project", InitType.PROJECT.value), Choice("Component", InitType.COMPONENT.value)],
            default=InitType.PROJECT.value,
        )
        return InitType(value)

    def resolve(self, kind: InitType, templates: Sequence[TemplateDescriptor]) -> Resolution:
        candidates = filter_templates(kind, templates)
        if not candidates:
            raise CatalogError(f"no {kind.value} templates available in catalog")
        metadata = self.collect_metadata(kind)
        package_id = self._prompter.select(
            f"Select a {_LABELS[kind]} template",
            template_choices(candidates),
        )
        for candidate in candidates:
            if candidate.package_id == package_id:
                return Resolution(descriptor=candidate, metadata=metadata, candidates=tuple(candidates))
        raise CatalogError(f"template '{package_id}' is not in the {kind.value} catalog")

    def collect_metadata(self, kind: InitType) -> ProjectMetadata:
        label = _LABELS[kind]
        raw_name = ""
        while not format_name(raw_name):
            raw_name = self._prompter.text(f"Enter the {label} name", default="")
        version = ""
        while not version.strip():
            version = self._prompter.text(f"Enter the {label} version", default=DEFAULT_VERSION)
        description = None
        if kind is InitType.COMPONENT:
            description = ""
            while not description.strip():
                description = self._prompter.text("Enter the component description", default="")
        return ProjectMetadata.from_input(raw_name, version, description)


__all__ = ["Resolution", "TemplateResolver", "filter_templates", "template_choices"]
