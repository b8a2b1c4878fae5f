"""Top-level bootstrap workflow: prepare, acquire, install."""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Any

from scaffolder.app.acquisition import AcquisitionEngine
from scaffolder.app.directory_guard import DirectorySafetyGuard
from scaffolder.app.installation import InstallationEngine
from scaffolder.domain.errors import NoTemplatesAvailable, ScaffoldError
from scaffolder.domain.project import (
    DEFAULT_PROJECT_VERSION,
    PROJECT_KIND_COMPONENT,
    PROJECT_KIND_PROJECT,
    ProjectInfo,
    is_valid_project_name,
    is_valid_version,
    normalize_version,
)
from scaffolder.domain.template import Template, TemplateCatalog
from scaffolder.ports.catalog_source import CatalogSource
from scaffolder.ports.package_cache import PackageCache
from scaffolder.ports.prompter import Choice, Prompter
from scaffolder.settings import RuntimeSettings
from scaffolder.utils.console import Reporter
from scaffolder.utils.telemetry import record_event, telemetry_enabled

KIND_CHOICES = (
    Choice(PROJECT_KIND_PROJECT, "Project"),
    Choice(PROJECT_KIND_COMPONENT, "Component"),
)


class WorkflowState(str, Enum):
    IDLE = "idle"
    PREPARING = "preparing"
    ACQUIRING = "acquiring"
    INSTALLING = "installing"
    DONE = "done"
    FAILED = "failed"


def validate_name_answer(value: str) -> str | None:
    if is_valid_project_name(value):
        return None
    return "Enter a valid name: start with a letter, use letters, digits, '-' or '_', end with a letter or digit."


def validate_version_answer(value: str) -> str | None:
    if is_valid_version(value):
        return None
    return "Enter a valid semantic version, e.g. 1.0.0"


def normalize_version_answer(value: str) -> str:
    return normalize_version(value) or value


class BootstrapWorkflow:
    """One scaffolding run; holds the catalog, project info and cache handle.

    ``run`` never raises: failures are reported once and leave the workflow in
    ``WorkflowState.FAILED``.
    """

    def __init__(
        self,
        settings: RuntimeSettings,
        *,
        catalog_source: CatalogSource,
        prompter: Prompter,
        reporter: Reporter,
        acquisition: AcquisitionEngine,
        installation: InstallationEngine,
        guard: DirectorySafetyGuard | None = None,
        target_dir: Path | None = None,
        project_name: str = "",
        force: bool = False,
    ) -> None:
        self._settings = settings
        self._catalog_source = catalog_source
        self._prompter = prompter
        self._reporter = reporter
        self._acquisition = acquisition
        self._installation = installation
        self._guard = guard or DirectorySafetyGuard(prompter)
        self._target_dir = target_dir or Path(os.getcwd())
        self._project_name = project_name
        self._force = force

        self.state = WorkflowState.IDLE
        self.catalog: TemplateCatalog | None = None
        self.project_info: ProjectInfo | None = None
        self.template: Template | None = None
        self.handle: PackageCache | None = None
        self.error: BaseException | None = None

    @property
    def target_dir(self) -> Path:
        return self._target_dir

    def run(self) -> WorkflowState:
        self._reporter.verbose("project_name", self._project_name)
        self._reporter.verbose("force", self._force)
        try:
            self._transition(WorkflowState.PREPARING)
            project_info = self.prepare()
            if project_info is None:
                self._record("workflow.aborted", {"cwd": str(self._target_dir)}, status="aborted")
                self._transition(WorkflowState.DONE)
                return self.state
            self.project_info = project_info
            self._reporter.verbose("project_info", project_info.as_dict())

            self._transition(WorkflowState.ACQUIRING)
            self.handle = self.acquire()

            self._transition(WorkflowState.INSTALLING)
            self.install()
        except KeyboardInterrupt as exc:
            self._fail(exc, message="Cancelled")
            return self.state
        except ScaffoldError as exc:
            self._fail(exc)
            return self.state
        except Exception as exc:  # noqa: BLE001 - single reporting point for the command
            self._fail(exc, message=f"Unexpected error: {exc}")
            return self.state

        self._transition(WorkflowState.DONE)
        self._record(
            "workflow.done",
            {
                "template": self.template.package_id if self.template else None,
                "version": self.handle.version if self.handle else None,
                "kind": self.project_info.kind if self.project_info else None,
            },
            status="ok",
        )
        return self.state

    def prepare(self) -> ProjectInfo | None:
        templates = list(self._catalog_source.load())
        if not templates:
            raise NoTemplatesAvailable()
        self.catalog = TemplateCatalog(templates)
        self._reporter.verbose("catalog", f"{len(self.catalog)} templates from {self._catalog_source.describe()}")
        if not self._guard.check(self._target_dir, force=self._force):
            return None
        return self.collect_project_info()

    def collect_project_info(self) -> ProjectInfo:
        assert self.catalog is not None
        kind = self._prompter.select("Select what to initialise", KIND_CHOICES, default=PROJECT_KIND_PROJECT)
        label = "Project" if kind == PROJECT_KIND_PROJECT else "Component"

        name = self._project_name
        if not is_valid_project_name(name):
            if name:
                self._reporter.warn(f"Ignoring invalid {label.lower()} name {name!r}")
            name = self._prompter.text(f"{label} name", validate=validate_name_answer)

        version = self._prompter.text(
            f"{label} version",
            default=DEFAULT_PROJECT_VERSION,
            validate=validate_version_answer,
            transform=normalize_version_answer,
        )

        candidates = self.catalog.for_kind(kind)
        if not candidates:
            raise NoTemplatesAvailable(f"No templates available for {label.lower()}s")
        template_id = self._prompter.select(
            f"Select a {label.lower()} template",
            [Choice(template.package_id, template.name) for template in candidates],
        )
        return ProjectInfo(kind=kind, name=name, version=version, template_id=template_id)

    def acquire(self) -> PackageCache:
        assert self.catalog is not None and self.project_info is not None
        self.template = self.catalog.get(self.project_info.template_id)
        return self._acquisition.acquire(self.template)

    def install(self) -> None:
        assert self.template is not None and self.handle is not None
        self._installation.install(self.handle, self.template, self._target_dir)

    def _transition(self, state: WorkflowState) -> None:
        self._reporter.verbose("state", f"{self.state.value} -> {state.value}")
        self.state = state

    def _record(self, event: str, payload: dict[str, Any], **kwargs: Any) -> None:
        if not record_event(self._settings, event, payload, **kwargs) and telemetry_enabled():
            self._reporter.verbose("telemetry", f"unable to write {event}")

    def _fail(self, exc: BaseException, *, message: str | None = None) -> None:
        failed_in = self.state
        self.error = exc
        self._transition(WorkflowState.FAILED)
        self._reporter.exception(exc, message)
        self._record(
            "workflow.failed",
            {"stage": failed_in.value, "error": exc.__class__.__name__, "message": str(exc)},
            level="error",
            status="failed",
        )


__all__ = [
    "BootstrapWorkflow",
    "WorkflowState",
    "normalize_version_answer",
    "validate_name_answer",
    "validate_version_answer",
]
