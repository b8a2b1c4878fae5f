"""Runtime settings for the scaffold CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

from scaffolder import __version__

DEFAULT_HOME_NAME = ".scaffolder"
DEFAULT_REGISTRY = "https://registry.npmjs.org"
DEFAULT_HTTP_TIMEOUT = 30.0


@dataclass(frozen=True)
class RuntimeSettings:
    home_dir: Path
    template_dir: Path
    template_store_dir: Path
    state_dir: Path
    log_dir: Path
    registry_url: str = DEFAULT_REGISTRY
    catalog_source: str | None = None
    update_url: str | None = None
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    debug: bool = False
    cli_version: str = __version__

    @property
    def user_catalog_file(self) -> Path:
        return self.home_dir / "catalog.yaml"

    def with_debug(self, enabled: bool) -> "RuntimeSettings":
        return replace(self, debug=enabled)


def _truthy(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _default_home_dir() -> Path:
    user_home = Path.home()
    override = os.environ.get("SCAFFOLDER_HOME")
    if override:
        # relative values live under the user's home directory
        return user_home / override if not Path(override).is_absolute() else Path(override)
    return user_home / DEFAULT_HOME_NAME


def _http_timeout() -> float:
    raw = os.environ.get("SCAFFOLDER_HTTP_TIMEOUT")
    if not raw:
        return DEFAULT_HTTP_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_HTTP_TIMEOUT
    return value if value > 0 else DEFAULT_HTTP_TIMEOUT


def load_settings() -> RuntimeSettings:
    base = _default_home_dir()
    template_dir = base / "template"
    return RuntimeSettings(
        home_dir=base,
        template_dir=template_dir,
        template_store_dir=template_dir / "node_modules",
        state_dir=base / "state",
        log_dir=base / "logs",
        registry_url=os.environ.get("SCAFFOLDER_REGISTRY", DEFAULT_REGISTRY).rstrip("/"),
        catalog_source=os.environ.get("SCAFFOLDER_CATALOG") or None,
        update_url=os.environ.get("SCAFFOLDER_UPDATE_URL") or None,
        http_timeout=_http_timeout(),
        debug=_truthy(os.environ.get("SCAFFOLDER_DEBUG")),
    )


SETTINGS = load_settings()
