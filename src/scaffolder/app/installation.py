"""Materialise a cached template into the target directory."""

from __future__ import annotations

import shutil
from pathlib import Path

from scaffolder.app.command_runner import CommandRunner
from scaffolder.domain.errors import CopyFailure, UnknownTemplateKind
from scaffolder.domain.template import TEMPLATE_KIND_CUSTOM, TEMPLATE_KIND_NORMAL, Template
from scaffolder.ports.package_cache import PackageCache
from scaffolder.utils.console import Reporter

INSTALL_FAILED_MESSAGE = "Dependency installation failed"
START_FAILED_MESSAGE = "Start command failed"


class InstallationEngine:
    def __init__(self, runner: CommandRunner, reporter: Reporter) -> None:
        self._runner = runner
        self._reporter = reporter

    def install(self, handle: PackageCache, template: Template, target_dir: Path) -> None:
        kind = template.kind or TEMPLATE_KIND_NORMAL
        if kind == TEMPLATE_KIND_NORMAL:
            self._install_normal(handle, template, target_dir)
        elif kind == TEMPLATE_KIND_CUSTOM:
            self._install_custom(handle, template, target_dir)
        else:
            raise UnknownTemplateKind(kind)

    def _install_normal(self, handle: PackageCache, template: Template, target_dir: Path) -> None:
        self._reporter.verbose("install", f"{handle.cache_file_path} -> {target_dir}")
        with self._reporter.spinner("Installing template..."):
            self._copy_template(handle.cache_file_path, target_dir)
        self._reporter.success("Template installed")
        # an install failure aborts before the start command runs
        self._runner.execute(template.install_command, INSTALL_FAILED_MESSAGE, cwd=target_dir)
        self._runner.execute(template.start_command, START_FAILED_MESSAGE, cwd=target_dir)

    def _install_custom(self, handle: PackageCache, template: Template, target_dir: Path) -> None:
        self._reporter.verbose("install", f"custom template {template.package_id} has no installer")

    def _copy_template(self, source: Path, destination: Path) -> None:
        try:
            source.mkdir(parents=True, exist_ok=True)
            destination.mkdir(parents=True, exist_ok=True)
            shutil.copytree(source, destination, dirs_exist_ok=True)
        except OSError as exc:
            raise CopyFailure(f"Template installation failed: {exc}") from exc


__all__ = ["INSTALL_FAILED_MESSAGE", "InstallationEngine", "START_FAILED_MESSAGE"]
