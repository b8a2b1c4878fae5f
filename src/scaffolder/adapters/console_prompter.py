"""Prompter reading answers from standard input."""

from __future__ import annotations

from typing import Callable, Sequence

from scaffolder.ports.prompter import Choice, Prompter, Transform, Validator

_YES = {"y", "yes"}
_NO = {"n", "no"}


class ConsolePrompter(Prompter):
    def __init__(
        self,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
    ) -> None:
        self._input = input_fn
        self._print = output_fn

    def select(self, message: str, choices: Sequence[Choice], default: str | None = None) -> str:
        options = list(choices)
        if not options:
            raise ValueError("select prompt requires at least one choice")
        default_index = 1
        for index, choice in enumerate(options, start=1):
            if choice.value == default:
                default_index = index
        self._print(message)
        for index, choice in enumerate(options, start=1):
            self._print(f"  {index}. {choice.label}")
        while True:
            answer = self._input(f"Select [{default_index}]: ").strip()
            if not answer:
                return options[default_index - 1].value
            if answer.isdigit():
                index = int(answer)
                if 1 <= index <= len(options):
                    return options[index - 1].value
            self._print(f"Enter a value between 1 and {len(options)}.")

    def confirm(self, message: str, default: bool = False) -> bool:
        hint = "Y/n" if default else "y/N"
        while True:
            answer = self._input(f"{message} ({hint}) ").strip().lower()
            if not answer:
                return default
            if answer in _YES:
                return True
            if answer in _NO:
                return False
            self._print("Please answer y or n.")

    def text(
        self,
        message: str,
        default: str = "",
        validate: Validator | None = None,
        transform: Transform | None = None,
    ) -> str:
        suffix = f" ({default})" if default else ""
        while True:
            answer = self._input(f"{message}{suffix}: ").strip() or default
            if transform is not None:
                answer = transform(answer)
            problem = validate(answer) if validate is not None else None
            if problem is None:
                return answer
            self._print(problem)


__all__ = ["ConsolePrompter"]
