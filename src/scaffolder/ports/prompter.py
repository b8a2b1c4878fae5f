"""Port definition for interactive prompts."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Sequence

Validator = Callable[[str], str | None]
Transform = Callable[[str], str]


@dataclass(frozen=True)
class Choice:
    value: str
    label: str


class Prompter(ABC):
    """Single-select, confirm and free-text prompts.

    Validators return ``None`` when the answer is accepted, otherwise the
    message to show before asking again. Transforms run before validation.
    """

    @abstractmethod
    def select(self, message: str, choices: Sequence[Choice], default: str | None = None) -> str:
        """Return the value of the chosen entry."""

    @abstractmethod
    def confirm(self, message: str, default: bool = False) -> bool:
        """Ask a yes/no question."""

    @abstractmethod
    def text(
        self,
        message: str,
        default: str = "",
        validate: Validator | None = None,
        transform: Transform | None = None,
    ) -> str:
        """Ask for free text until the validator accepts it."""


__all__ = ["Choice", "Prompter", "Transform", "Validator"]
