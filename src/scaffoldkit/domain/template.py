"""Domain model for catalog template descriptors."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from scaffoldkit.domain.errors import TemplateConfigError

_KNOWN_FIELDS = {"name", "npmName", "version", "tag", "type", "ignore", "buildPath", "examplePath"}


class TemplateKind(str, Enum):
    NORMAL = "normal"
    CUSTOM = "custom"


@dataclass(frozen=True)
class TemplateDescriptor:
    name: str
    package_id: str
    version: str
    tags: tuple[str, ...]
    template_type: str = TemplateKind.NORMAL.value
    ignore: tuple[str, ...] = ()
    build_path: str | None = None
    example_path: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_catalog_entry(cls, entry: Mapping[str, Any]) -> "TemplateDescriptor":
        tags_value = entry.get("tag", [])
        if isinstance(tags_value, str):
            tags = (tags_value.strip(),)
        else:
            tags = tuple(str(tag).strip() for tag in tags_value)
        ignore_value = entry.get("ignore") or []
        if isinstance(ignore_value, str):
            ignore_value = [ignore_value]
        return cls(
            name=str(entry.get("name") or entry["npmName"]).strip(),
            package_id=str(entry["npmName"]).strip(),
            version=str(entry["version"]).strip(),
            tags=tuple(tag for tag in tags if tag),
            template_type=str(entry.get("type") or TemplateKind.NORMAL.value).strip().lower(),
            ignore=tuple(str(pattern) for pattern in ignore_value),
            build_path=entry.get("buildPath"),
            example_path=entry.get("examplePath"),
            extra={k: v for k, v in entry.items() if k not in _KNOWN_FIELDS},
        )

    @property
    def kind(self) -> TemplateKind:
        try:
            return TemplateKind(self.template_type)
        except ValueError as exc:
            raise TemplateConfigError(
                f"unknown template type '{self.template_type}' for {self.package_id}"
            ) from exc

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = dict(self.extra)
        payload.update(
            {
                "name": self.name,
                "npmName": self.package_id,
                "version": self.version,
                "tag": list(self.tags),
                "type": self.template_type,
                "ignore": list(self.ignore),
            }
        )
        if self.build_path is not None:
            payload["buildPath"] = self.build_path
        if self.example_path is not None:
            payload["examplePath"] = self.example_path
        return payload


__all__ = ["TemplateDescriptor", "TemplateKind"]
