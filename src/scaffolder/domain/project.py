"""Project information collected before a template is acquired."""

from __future__ import annotations

import re
from dataclasses import dataclass

from scaffolder.domain.errors import InvalidProjectName, InvalidVersion

PROJECT_KIND_PROJECT = "project"
PROJECT_KIND_COMPONENT = "component"
PROJECT_KINDS = (PROJECT_KIND_PROJECT, PROJECT_KIND_COMPONENT)

DEFAULT_PROJECT_VERSION = "1.0.0"

# 1. starts with a letter
# 2. "-" and "_" must be followed by a letter
# 3. ends with a letter or digit
_NAME_PATTERN = re.compile(
    r"[a-zA-Z]+(?:-[a-zA-Z][a-zA-Z0-9]*|_[a-zA-Z][a-zA-Z0-9]*|[a-zA-Z0-9])*"
)

_NUMERIC = r"0|[1-9][0-9]*"
_PRERELEASE_ID = r"0|[1-9][0-9]*|[0-9]*[a-zA-Z-][0-9a-zA-Z-]*"
_SEMVER_PATTERN = re.compile(
    rf"v?(?P<core>(?:{_NUMERIC})\.(?:{_NUMERIC})\.(?:{_NUMERIC}))"
    rf"(?:-(?P<prerelease>(?:{_PRERELEASE_ID})(?:\.(?:{_PRERELEASE_ID}))*))?"
    r"(?:\+(?P<build>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?"
)


def is_valid_project_name(name: str) -> bool:
    return bool(name) and _NAME_PATTERN.fullmatch(name) is not None


def validate_project_name(name: str) -> str:
    if not is_valid_project_name(name):
        raise InvalidProjectName(name)
    return name


def normalize_version(version: str) -> str | None:
    """Return the canonical form of a semantic version, or None if invalid.

    Surrounding whitespace and a leading ``v`` are accepted; build
    metadata is dropped from the canonical form.
    """

    match = _SEMVER_PATTERN.fullmatch(version.strip()) if version else None
    if match is None:
        return None
    canonical = match.group("core")
    if match.group("prerelease"):
        canonical = f"{canonical}-{match.group('prerelease')}"
    return canonical


def is_valid_version(version: str) -> bool:
    return normalize_version(version) is not None


def validate_version(version: str) -> str:
    canonical = normalize_version(version)
    if canonical is None:
        raise InvalidVersion(version)
    return canonical


@dataclass(frozen=True)
class ProjectInfo:
    kind: str
    name: str
    version: str
    template_id: str

    def __post_init__(self) -> None:
        if self.kind not in PROJECT_KINDS:
            raise ValueError(f"Unsupported project kind: {self.kind}")
        validate_project_name(self.name)
        object.__setattr__(self, "version", validate_version(self.version))
        if not self.template_id or not self.template_id.strip():
            raise ValueError("template_id must be a non-empty string")

    def as_dict(self) -> dict[str, str]:
        return {
            "kind": self.kind,
            "name": self.name,
            "version": self.version,
            "template_id": self.template_id,
        }


__all__ = [
    "DEFAULT_PROJECT_VERSION",
    "PROJECT_KINDS",
    "PROJECT_KIND_COMPONENT",
    "PROJECT_KIND_PROJECT",
    "ProjectInfo",
    "is_valid_project_name",
    "is_valid_version",
    "normalize_version",
    "validate_project_name",
    "validate_version",
]
