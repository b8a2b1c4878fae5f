"""Port definition for template catalog sources."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from scaffolder.domain.template import Template


class CatalogSource(ABC):
    @abstractmethod
    def load(self) -> Sequence[Template]:
        """Return the templates published by this source."""

    @abstractmethod
    def describe(self) -> str:
        """Human readable location of the source."""


__all__ = ["CatalogSource"]
