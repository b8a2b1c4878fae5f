"""Test doubles for prompts, package caches, child processes and HTTP."""

from __future__ import annotations

import io
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Sequence

from rich.console import Console

from scaffolder.domain.template import Template
from scaffolder.ports.catalog_source import CatalogSource
from scaffolder.ports.package_cache import PackageCache, PackageCacheError
from scaffolder.ports.prompter import Choice, Prompter, Transform, Validator
from scaffolder.utils.console import Reporter


def make_reporter(debug: bool = False) -> tuple[Reporter, io.StringIO]:
    buffer = io.StringIO()
    console = Console(file=buffer, force_terminal=False, color_system=None, width=200)
    return Reporter(console, debug=debug), buffer


class ScriptedPrompter(Prompter):
    """Answers prompts from a queue and records every question asked."""

    def __init__(self, answers: Sequence[Any] = ()) -> None:
        self._answers = list(answers)
        self.asked: list[tuple[str, str]] = []
        self.validation_messages: list[str] = []

    def _next(self, kind: str, message: str) -> Any:
        self.asked.append((kind, message))
        if not self._answers:
            raise AssertionError(f"unexpected {kind} prompt: {message}")
        return self._answers.pop(0)

    def select(self, message: str, choices: Sequence[Choice], default: str | None = None) -> str:
        answer = self._next("select", message)
        values = [choice.value for choice in choices]
        if answer is None:
            return default if default is not None else values[0]
        assert answer in values, f"{answer!r} not among {values}"
        return answer

    def confirm(self, message: str, default: bool = False) -> bool:
        answer = self._next("confirm", message)
        return default if answer is None else bool(answer)

    def text(
        self,
        message: str,
        default: str = "",
        validate: Validator | None = None,
        transform: Transform | None = None,
    ) -> str:
        while True:
            answer = self._next("text", message)
            value = default if answer is None else str(answer)
            if transform is not None:
                value = transform(value)
            problem = validate(value) if validate is not None else None
            if problem is None:
                return value
            self.validation_messages.append(problem)


@dataclass
class FakePackageCache(PackageCache):
    target_root: Path
    store_root: Path
    pkg: str
    ver: str
    cached: bool = False
    fail_with: str | None = None
    files: dict[str, str] = field(default_factory=lambda: {"package.json": "{}\n"})
    calls: list[str] = field(default_factory=list)

    @property
    def package_id(self) -> str:
        return self.pkg

    @property
    def version(self) -> str:
        return self.ver

    @property
    def cache_file_path(self) -> Path:
        return self.store_root / f"{self.pkg.replace('/', '+')}@{self.ver}"

    def exists(self) -> bool:
        self.calls.append("exists")
        return self.cached

    def install(self) -> None:
        self.calls.append("install")
        self._materialise()

    def update(self) -> None:
        self.calls.append("update")
        self._materialise()

    def _materialise(self) -> None:
        if self.fail_with:
            raise PackageCacheError(self.fail_with)
        for relative, content in self.files.items():
            path = self.cache_file_path / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        self.cached = True


class FakeCacheFactory:
    def __init__(self, *, cached: bool = False, fail_with: str | None = None, files: dict[str, str] | None = None) -> None:
        self._cached = cached
        self._fail_with = fail_with
        self._files = files
        self.handles: list[FakePackageCache] = []

    def __call__(self, *, target_root: Path, store_root: Path, package_id: str, version: str) -> FakePackageCache:
        handle = FakePackageCache(
            target_root=target_root,
            store_root=store_root,
            pkg=package_id,
            ver=version,
            cached=self._cached,
            fail_with=self._fail_with,
        )
        if self._files is not None:
            handle.files = dict(self._files)
        self.handles.append(handle)
        return handle

    @property
    def network_calls(self) -> int:
        return sum(1 for handle in self.handles for call in handle.calls if call in {"install", "update"})


class RecordingSpawn:
    """Stands in for ``subprocess.run``; exit codes are looked up by verb+args."""

    def __init__(self, exit_codes: dict[str, int] | None = None, *, missing: Sequence[str] = ()) -> None:
        self._exit_codes = exit_codes or {}
        self._missing = set(missing)
        self.calls: list[dict[str, Any]] = []

    def __call__(self, argv: list[str], **kwargs: Any) -> subprocess.CompletedProcess[bytes]:
        self.calls.append({"argv": list(argv), **kwargs})
        if argv[0] in self._missing:
            raise FileNotFoundError(2, "No such file or directory", argv[0])
        code = self._exit_codes.get(" ".join(argv), 0)
        return subprocess.CompletedProcess(argv, code)

    @property
    def commands(self) -> list[str]:
        return [" ".join(call["argv"]) for call in self.calls]


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, content: bytes = b"") -> None:
        self.status_code = status_code
        self._payload = payload
        self._content = content
        self.text = "" if payload is None else str(payload)

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("no JSON body")
        return self._payload

    def iter_content(self, chunk_size: int = 1024):
        for start in range(0, len(self._content), chunk_size):
            yield self._content[start:start + chunk_size]


class FakeSession:
    def __init__(self, routes: dict[str, FakeResponse | Exception]) -> None:
        self._routes = routes
        self.requested: list[str] = []

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.requested.append(url)
        route = self._routes.get(url)
        if route is None:
            return FakeResponse(404)
        if isinstance(route, Exception):
            raise route
        return route


class StaticCatalogSource(CatalogSource):
    def __init__(self, templates: Sequence[Template] = (), *, error: Exception | None = None) -> None:
        self._templates = list(templates)
        self._error = error

    def describe(self) -> str:
        return "memory"

    def load(self) -> Sequence[Template]:
        if self._error is not None:
            raise self._error
        return list(self._templates)
