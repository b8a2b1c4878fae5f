"""Fetch or refresh a template package in the local cache."""

from __future__ import annotations

import time
from functools import partial

from scaffolder.adapters.registry_package_cache import RegistryPackageCache
from scaffolder.domain.errors import AcquisitionFailure
from scaffolder.domain.template import Template
from scaffolder.ports.package_cache import PackageCache, PackageCacheError, PackageCacheFactory
from scaffolder.settings import RuntimeSettings
from scaffolder.utils.console import Reporter
from scaffolder.utils.telemetry import record_event


def registry_cache_factory(settings: RuntimeSettings) -> PackageCacheFactory:
    return partial(
        RegistryPackageCache,
        registry_url=settings.registry_url,
        timeout=settings.http_timeout,
    )


class AcquisitionEngine:
    """Installs a template package when it is not cached, updates it otherwise."""

    def __init__(
        self,
        settings: RuntimeSettings,
        reporter: Reporter,
        cache_factory: PackageCacheFactory | None = None,
    ) -> None:
        self._settings = settings
        self._reporter = reporter
        self._cache_factory = cache_factory or registry_cache_factory(settings)

    def acquire(self, template: Template) -> PackageCache:
        handle = self._cache_factory(
            target_root=self._settings.template_dir,
            store_root=self._settings.template_store_dir,
            package_id=template.package_id,
            version=template.version,
        )
        try:
            cached = handle.exists()
        except (PackageCacheError, OSError) as exc:
            raise AcquisitionFailure(f"Unable to inspect template cache: {exc}") from exc

        if cached:
            action, message, done = "update", "Updating template...", "Template updated"
        else:
            action, message, done = "install", "Downloading template...", "Template downloaded"
        self._reporter.verbose("acquire", f"{action} {template.package_id}@{template.version}")

        started = time.monotonic()
        with self._reporter.spinner(message):
            try:
                if cached:
                    handle.update()
                else:
                    handle.install()
            except (PackageCacheError, OSError) as exc:
                record_event(
                    self._settings,
                    f"acquire.{action}",
                    {"package": template.package_id, "version": template.version, "error": str(exc)},
                    level="error",
                    status="failed",
                )
                raise AcquisitionFailure(f"Template {action} failed: {exc}") from exc

        if not handle.exists():
            raise AcquisitionFailure(
                f"Template {template.package_id} missing from cache after {action}"
            )
        record_event(
            self._settings,
            f"acquire.{action}",
            {"package": template.package_id, "version": handle.version},
            status="ok",
            duration_ms=(time.monotonic() - started) * 1000,
        )
        self._reporter.success(done)
        return handle


__all__ = ["AcquisitionEngine", "registry_cache_factory"]
