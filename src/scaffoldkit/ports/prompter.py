"""Port definition for interactive questions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence


@dataclass(frozen=True)
class Choice:
    label: str
    value: str


class Prompter(Protocol):  # pragma: no cover
    def confirm(self, message: str, *, default: bool = False) -> bool:
        ...

    def text(self, message: str, *, default: str = "") -> str:
        ...

    def select(self, message: str, choices: Sequence[Choice], *, default: str | None = None) -> str:
        ...
