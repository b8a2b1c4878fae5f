"""Domain model for scaffolding templates and the catalog that lists them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Mapping, Sequence

from scaffolder.domain.errors import CatalogError, NoTemplatesAvailable, TemplateNotFound

TEMPLATE_KIND_NORMAL = "normal"
TEMPLATE_KIND_CUSTOM = "custom"
TEMPLATE_KINDS = (TEMPLATE_KIND_NORMAL, TEMPLATE_KIND_CUSTOM)

# older catalogs use camelCase keys
_KEY_ALIASES = {
    "npmName": "package_id",
    "npm_name": "package_id",
    "packageId": "package_id",
    "installCommand": "install_command",
    "startCommand": "start_command",
    "type": "kind",
    "tag": "tags",
}


@dataclass(frozen=True)
class Template:
    name: str
    package_id: str
    version: str
    install_command: str | None = None
    start_command: str | None = None
    kind: str = TEMPLATE_KIND_NORMAL
    tags: tuple[str, ...] = field(default_factory=tuple)

    def applies_to(self, project_kind: str) -> bool:
        return not self.tags or project_kind in self.tags

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Template":
        data: dict[str, Any] = {}
        for key, value in payload.items():
            data[_KEY_ALIASES.get(key, key)] = value
        package_id = str(data.get("package_id") or "").strip()
        if not package_id:
            raise CatalogError(f"Template entry missing package id: {dict(payload)}")
        name = str(data.get("name") or package_id).strip()
        version = str(data.get("version") or "latest").strip()
        kind = str(data.get("kind") or TEMPLATE_KIND_NORMAL).strip()
        tags_value = data.get("tags") or ()
        if isinstance(tags_value, str):
            tags_value = [tags_value]
        return cls(
            name=name,
            package_id=package_id,
            version=version,
            install_command=_optional_text(data.get("install_command")),
            start_command=_optional_text(data.get("start_command")),
            kind=kind,
            tags=tuple(str(tag).strip() for tag in tags_value if str(tag).strip()),
        )


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class TemplateCatalog:
    """Immutable, ordered set of templates keyed by package id."""

    def __init__(self, templates: Iterable[Template]) -> None:
        items = tuple(templates)
        if not items:
            raise NoTemplatesAvailable()
        index: dict[str, Template] = {}
        for template in items:
            if template.package_id in index:
                raise CatalogError(f"Duplicate template package id: {template.package_id}")
            index[template.package_id] = template
        self._templates = items
        self._index = index

    def __iter__(self) -> Iterator[Template]:
        return iter(self._templates)

    def __len__(self) -> int:
        return len(self._templates)

    def get(self, package_id: str) -> Template:
        try:
            return self._index[package_id]
        except KeyError:
            raise TemplateNotFound(package_id) from None

    def for_kind(self, project_kind: str) -> Sequence[Template]:
        return [template for template in self._templates if template.applies_to(project_kind)]


__all__ = [
    "TEMPLATE_KINDS",
    "TEMPLATE_KIND_CUSTOM",
    "TEMPLATE_KIND_NORMAL",
    "Template",
    "TemplateCatalog",
]
