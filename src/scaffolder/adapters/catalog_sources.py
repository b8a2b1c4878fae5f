"""Template catalog sources: local files, HTTP endpoints and the packaged default."""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Sequence

import requests
import yaml
from jsonschema import Draft202012Validator

from scaffolder.domain.errors import CatalogError
from scaffolder.domain.template import Template
from scaffolder.ports.catalog_source import CatalogSource
from scaffolder.settings import RuntimeSettings

_SCHEMA_PACKAGE = "scaffolder.resources"
_SCHEMA_RESOURCE = "catalog.schema.json"
PACKAGED_CATALOG = "catalog.yaml"


@lru_cache(maxsize=1)
def _validator() -> Draft202012Validator:
    resource = resources.files(_SCHEMA_PACKAGE) / _SCHEMA_RESOURCE
    with resource.open("r", encoding="utf-8") as handle:
        return Draft202012Validator(json.load(handle))


def parse_catalog_payload(payload: Any, *, origin: str) -> list[Template]:
    """Turn a decoded catalog document into templates.

    Accepts either a bare list of entries or a mapping with a ``templates`` key.
    """

    if payload is None:
        return []
    if isinstance(payload, list):
        payload = {"templates": payload}
    if not isinstance(payload, dict):
        raise CatalogError(f"Catalog {origin} must be a list or a mapping")
    errors = sorted(_validator().iter_errors(payload), key=lambda err: list(err.absolute_path))
    if errors:
        first = errors[0]
        path = ".".join(str(item) for item in first.absolute_path) or "<root>"
        raise CatalogError(f"Catalog {origin} invalid at {path}: {first.message}")
    return [Template.from_payload(entry) for entry in payload["templates"]]


class FileCatalogSource(CatalogSource):
    """Catalog stored as a YAML or JSON file."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def describe(self) -> str:
        return str(self._path)

    def load(self) -> Sequence[Template]:
        if not self._path.exists():
            raise CatalogError(f"Catalog file missing: {self._path}")
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise CatalogError(f"Catalog file unreadable: {self._path}: {exc}") from exc
        try:
            if self._path.suffix == ".json":
                payload = json.loads(raw)
            else:
                payload = yaml.safe_load(raw)
        except (json.JSONDecodeError, yaml.YAMLError) as exc:
            raise CatalogError(f"Catalog file {self._path} is not valid: {exc}") from exc
        return parse_catalog_payload(payload, origin=str(self._path))


class PackagedCatalogSource(CatalogSource):
    """Catalog shipped inside the package resources."""

    def describe(self) -> str:
        return f"{_SCHEMA_PACKAGE}/{PACKAGED_CATALOG}"

    def load(self) -> Sequence[Template]:
        resource = resources.files(_SCHEMA_PACKAGE) / PACKAGED_CATALOG
        payload = yaml.safe_load(resource.read_text("utf-8"))
        return parse_catalog_payload(payload, origin=self.describe())


class HttpCatalogSource(CatalogSource):
    """Catalog served as JSON by a template service."""

    def __init__(self, url: str, *, timeout: float = 30.0, session: requests.Session | None = None) -> None:
        self._url = url
        self._timeout = timeout
        self._session = session or requests.Session()

    def describe(self) -> str:
        return self._url

    def load(self) -> Sequence[Template]:
        try:
            response = self._session.get(self._url, timeout=self._timeout)
        except requests.RequestException as exc:
            raise CatalogError(f"Catalog request failed: {self._url}: {exc}") from exc
        if response.status_code >= 400:
            raise CatalogError(f"Catalog request failed: {response.status_code} {self._url}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise CatalogError(f"Catalog response from {self._url} is not JSON") from exc
        return parse_catalog_payload(payload, origin=self._url)


def resolve_catalog_source(settings: RuntimeSettings) -> CatalogSource:
    configured = settings.catalog_source
    if configured:
        if configured.startswith(("http://", "https://")):
            return HttpCatalogSource(configured, timeout=settings.http_timeout)
        return FileCatalogSource(Path(configured).expanduser())
    if settings.user_catalog_file.exists():
        return FileCatalogSource(settings.user_catalog_file)
    return PackagedCatalogSource()


__all__ = [
    "FileCatalogSource",
    "HttpCatalogSource",
    "PackagedCatalogSource",
    "parse_catalog_payload",
    "resolve_catalog_source",
]
