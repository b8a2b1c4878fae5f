"""Port definition for the local template package cache."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable


class PackageCacheError(RuntimeError):
    pass


class PackageCache(ABC):
    """Cached copy of one package, bound to a target root, store root, id and version."""

    @property
    @abstractmethod
    def package_id(self) -> str:
        """Package identifier this handle is bound to."""

    @property
    @abstractmethod
    def version(self) -> str:
        """Version this handle is currently bound to."""

    @property
    @abstractmethod
    def cache_file_path(self) -> Path:
        """Local directory holding the materialised package."""

    @abstractmethod
    def exists(self) -> bool:
        """Return True when the bound package is present in the cache."""

    @abstractmethod
    def install(self) -> None:
        """Fetch the bound package into the cache."""

    @abstractmethod
    def update(self) -> None:
        """Refresh the cached package to the newest available release."""


PackageCacheFactory = Callable[..., PackageCache]


__all__ = ["PackageCache", "PackageCacheError", "PackageCacheFactory"]
