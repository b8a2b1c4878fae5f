"""Error taxonomy for a scaffolding run.

Components raise these and let them bubble up; the bootstrap workflow is the
single place that catches them and reports a user-facing message.
"""

from __future__ import annotations


class ScaffoldError(RuntimeError):
    """Base class for every failure that ends a workflow run."""


class NoTemplatesAvailable(ScaffoldError):
    """Raised when the template catalog is empty or missing."""

    def __init__(self, message: str = "No project templates available") -> None:
        super().__init__(message)


class CatalogError(ScaffoldError):
    """Raised when a catalog source cannot be read or is malformed."""


class TemplateNotFound(ScaffoldError):
    def __init__(self, package_id: str) -> None:
        super().__init__(f"Template {package_id} not found in catalog")
        self.package_id = package_id


class InvalidProjectName(ScaffoldError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Invalid project name: {name!r}")
        self.name = name


class InvalidVersion(ScaffoldError):
    def __init__(self, version: str) -> None:
        super().__init__(f"Invalid version: {version!r}")
        self.version = version


class UnknownTemplateKind(ScaffoldError):
    def __init__(self, kind: str) -> None:
        super().__init__(f"Unrecognised template kind: {kind!r}")
        self.kind = kind


class UnrecognizedCommand(ScaffoldError):
    """Raised when a template command uses a verb outside the whitelist."""

    def __init__(self, command: str) -> None:
        super().__init__(f"Command not allowed: {command}")
        self.command = command


class ProcessError(ScaffoldError):
    """Raised when a child process cannot be spawned or exits non-zero."""

    def __init__(self, message: str, *, exit_code: int | None = None) -> None:
        super().__init__(message)
        self.exit_code = exit_code


class AcquisitionFailure(ScaffoldError):
    """Raised when the package cache fails to install or update a template."""


class CopyFailure(ScaffoldError):
    """Raised when copying the cached template into the target fails."""


__all__ = [
    "AcquisitionFailure",
    "CatalogError",
    "CopyFailure",
    "InvalidProjectName",
    "InvalidVersion",
    "NoTemplatesAvailable",
    "ProcessError",
    "ScaffoldError",
    "TemplateNotFound",
    "UnknownTemplateKind",
    "UnrecognizedCommand",
]
