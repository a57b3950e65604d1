"""Confirm-before-clobber policy for the scaffold target directory."""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path

from scaffoldkit.ports.prompter import Prompter

IGNORED_ENTRIES = frozenset({"node_modules"})


@dataclass(frozen=True)
class GuardDecision:
    proceed: bool
    cleared: bool = False


def visible_entries(path: Path) -> list[str]:
    if not path.exists():
        return []
    return sorted(
        entry.name
        for entry in path.iterdir()
        if not entry.name.startswith(".") and entry.name not in IGNORED_ENTRIES
    )


def empty_directory(path: Path) -> None:
    for entry in path.iterdir():
        if entry.is_dir() and not entry.is_symlink():
            shutil.rmtree(entry)
        else:
            entry.unlink()


class DirectoryGuard:
    def __init__(self, prompter: Prompter) -> None:
        self._prompter = prompter

    def assess_and_prepare(self, path: Path, *, force: bool = False) -> GuardDecision:
        if not visible_entries(path):
            return GuardDecision(proceed=True)
        if not force:
            keep_going = self._prompter.confirm(
                "The current directory is not empty. Continue creating the project?",
                default=False,
            )
            if not keep_going:
                return GuardDecision(proceed=False)
        wipe = self._prompter.confirm(
            f"Remove ALL files in {path}? This cannot be undone.",
            default=False,
        )
        if wipe:
            empty_directory(path)
        return GuardDecision(proceed=True, cleared=wipe)


__all__ = ["DirectoryGuard", "GuardDecision", "empty_directory", "visible_entries"]
