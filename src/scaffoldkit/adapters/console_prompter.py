"""Prompter reading answers from the terminal."""

from __future__ import annotations

from typing import Callable, Sequence

from scaffoldkit.ports.prompter import Choice

_YES = {"y", "yes"}
_NO = {"n", "no"}


class ConsolePrompter:
    def __init__(self, reader: Callable[[str], str] = input, writer: Callable[[str], None] = print) -> None:
        self._read = reader
        self._write = writer

    def confirm(self, message: str, *, default: bool = False) -> bool:
        hint = "Y/n" if default else "y/N"
        while True:
            answer = self._read(f"{message} [{hint}]: ").strip().lower()
            if not answer:
                return default
            if answer in _YES:
                return True
            if answer in _NO:
                return False
            self._write("Please answer y or n.")

    def text(self, message: str, *, default: str = "") -> str:
        suffix = f" [{default}]" if default else ""
        answer = self._read(f"{message}{suffix}: ").strip()
        return answer or default

    def select(self, message: str, choices: Sequence[Choice], *, default: str | None = None) -> str:
        options = list(choices)
        if not options:
            raise ValueError("no choices to select from")
        default_index = 1
        for index, choice in enumerate(options, start=1):
            if choice.value == default:
                default_index = index
        self._write(message)
        for index, choice in enumerate(options, start=1):
            self._write(f"  {index}. {choice.label}")
        while True:
            answer = self._read(f"Select [{default_index}]: ").strip()
            if not answer:
                return options[default_index - 1].value
            if answer.isdigit():
                index = int(answer)
                if 1 <= index <= len(options):
                    return options[index - 1].value
            self._write(f"Enter a value between 1 and {len(options)}.")
