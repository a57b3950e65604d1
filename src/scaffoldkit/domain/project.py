"""Project metadata collected for a scaffold run."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

DEFAULT_VERSION = "1.0.0"

_SEPARATORS = r".*_/\\()&^!@#$%+=?<>~`\s"
_LEADING_NOISE = re.compile(rf"^[{_SEPARATORS}\d]+")
_SEPARATOR = re.compile(rf"[{_SEPARATORS}]")
_UPPER = re.compile(r"[A-Z]")


class InitType(str, Enum):
    PROJECT = "project"
    COMPONENT = "component"


def format_name(raw: str | None) -> str:
    """Normalise user input into a PascalCase project name.

    Leading punctuation, whitespace and digits are dropped, remaining separator
    characters become word boundaries and each word is capitalised. Digits
    exposed at the front once empty words are dropped (``"-1abc"``) are
    stripped as well.
    """
    if not raw:
        return ""
    name = _SEPARATOR.sub("-", _LEADING_NOISE.sub("", str(raw).strip()))
    joined = "".join(part[:1].upper() + part[1:] for part in name.split("-") if part)
    joined = _LEADING_NOISE.sub("", joined)
    return joined[:1].upper() + joined[1:]


def format_class_name(name: str) -> str:
    kebab = _UPPER.sub(lambda match: "-" + match.group(0).lower(), name)
    return re.sub(r"^-", "", kebab)


@dataclass(frozen=True)
class ProjectMetadata:
    raw_name: str
    name: str
    class_name: str
    version: str = DEFAULT_VERSION
    description: str | None = None

    @classmethod
    def from_input(cls, raw_name: str, version: str, description: str | None = None) -> "ProjectMetadata":
        name = format_name(raw_name)
        if not name:
            raise ValueError(f"project name '{raw_name}' is empty after formatting")
        version = (version or "").strip()
        if not version:
            raise ValueError("project version must not be empty")
        if description is not None:
            description = description.strip() or None
        return cls(
            raw_name=raw_name,
            name=name,
            class_name=format_class_name(name),
            version=version,
            description=description,
        )

    def to_template_data(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "className": self.class_name,
            "version": self.version,
        }
        if self.description is not None:
            data["description"] = self.description
        return data


__all__ = [
    "DEFAULT_VERSION",
    "InitType",
    "ProjectMetadata",
    "format_class_name",
    "format_name",
]
