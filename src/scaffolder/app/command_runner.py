"""Whitelisted execution of template install/start commands."""

from __future__ import annotations

import os
import shlex
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Sequence

from scaffolder.domain.errors import ProcessError, UnrecognizedCommand

ALLOWED_VERBS: frozenset[str] = frozenset({"npm", "cnpm"})


@dataclass(frozen=True)
class ExecutionRequest:
    raw_command: str
    verb: str
    args: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def parse(cls, raw_command: str) -> "ExecutionRequest":
        try:
            parts = shlex.split(raw_command)
        except ValueError as exc:
            raise UnrecognizedCommand(raw_command) from exc
        if not parts:
            raise UnrecognizedCommand(raw_command)
        return cls(raw_command=raw_command, verb=parts[0], args=tuple(parts[1:]))


class CommandWhitelist:
    """Only package-manager invocations may run on behalf of a template."""

    def __init__(self, allowed: Iterable[str] = ALLOWED_VERBS) -> None:
        self._allowed = frozenset(allowed)

    def check(self, command_name: str) -> str | None:
        if command_name in self._allowed:
            return command_name
        return None

    def require(self, raw_command: str) -> ExecutionRequest:
        request = ExecutionRequest.parse(raw_command)
        if self.check(request.verb) is None:
            raise UnrecognizedCommand(raw_command)
        return request


Spawn = Callable[..., "subprocess.CompletedProcess[bytes]"]


def platform_argv(verb: str, args: Sequence[str], *, platform: str | None = None) -> list[str]:
    """Windows resolves npm through cmd.exe, so wrap the verb there."""
    if (platform or sys.platform) == "win32":
        return ["cmd", "/c", verb, *args]
    return [verb, *args]


class CommandRunner:
    def __init__(
        self,
        whitelist: CommandWhitelist | None = None,
        *,
        spawn: Spawn = subprocess.run,
        platform: str | None = None,
    ) -> None:
        self._whitelist = whitelist or CommandWhitelist()
        self._spawn = spawn
        self._platform = platform

    def run(self, verb: str, args: Sequence[str], *, cwd: Path | None = None) -> int:
        argv = platform_argv(verb, args, platform=self._platform)
        try:
            # no stdio redirection: the child shares this terminal
            result = self._spawn(argv, cwd=str(cwd or Path(os.getcwd())), check=False)
        except OSError as exc:
            raise ProcessError(f"Failed to start {verb}: {exc}") from exc
        return result.returncode

    def execute(self, raw_command: str | None, error_message: str, *, cwd: Path | None = None) -> int | None:
        if not raw_command or not raw_command.strip():
            return None
        request = self._whitelist.require(raw_command)
        exit_code = self.run(request.verb, request.args, cwd=cwd)
        if exit_code != 0:
            raise ProcessError(error_message, exit_code=exit_code)
        return exit_code


__all__ = [
    "ALLOWED_VERBS",
    "CommandRunner",
    "CommandWhitelist",
    "ExecutionRequest",
    "platform_argv",
]
