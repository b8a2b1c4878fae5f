"""Notify the user when a newer scaffolder release is published."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import requests
from packaging.version import InvalidVersion, Version

from scaffolder.settings import RuntimeSettings
from scaffolder.utils.console import Reporter

PACKAGE_NAME = "scaffolder"
STATE_FILENAME = "update.json"
CHECK_INTERVAL = timedelta(hours=6)


@dataclass
class UpdateState:
    last_checked: datetime | None = None
    latest_version: str | None = None

    @classmethod
    def from_file(cls, path: Path) -> "UpdateState":
        if not path.exists():
            return cls()
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            return cls()
        if not isinstance(data, dict):
            return cls()
        last_checked = None
        ts = data.get("last_checked")
        if isinstance(ts, str):
            try:
                last_checked = datetime.fromisoformat(ts)
            except ValueError:
                last_checked = None
        if last_checked is not None and last_checked.tzinfo is None:
            last_checked = last_checked.replace(tzinfo=timezone.utc)
        latest = data.get("latest_version")
        return cls(last_checked=last_checked, latest_version=latest if isinstance(latest, str) else None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "last_checked": self.last_checked.isoformat() if self.last_checked else None,
            "latest_version": self.latest_version,
        }


def _truthy(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _state_path(settings: RuntimeSettings) -> Path:
    return settings.state_dir / STATE_FILENAME


def _store_state(settings: RuntimeSettings, state: UpdateState) -> None:
    path = _state_path(settings)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(state.to_dict(), indent=2) + "\n", encoding="utf-8")


def _parse_version(value: str | None) -> Version | None:
    if not value:
        return None
    try:
        return Version(value)
    except InvalidVersion:
        return None


def fetch_latest_version(
    url: str, session: requests.Session | None = None, *, timeout: float = 5.0
) -> str | None:
    """Newest stable release listed by a PyPI-style JSON endpoint (``{"releases": {...}}``)."""
    session = session or requests.Session()
    try:
        response = session.get(url, headers={"User-Agent": "scaffolder-update-check"}, timeout=timeout)
        if response.status_code >= 400:
            return None
        payload = response.json()
    except (requests.RequestException, ValueError):
        return None
    releases = payload.get("releases", {}) if isinstance(payload, dict) else {}
    versions = [parsed for name, files in releases.items() if files and (parsed := _parse_version(name))]
    stable = [version for version in versions if not version.is_prerelease]
    if not stable:
        return None
    return str(max(stable))


def check_for_update(
    settings: RuntimeSettings,
    reporter: Reporter,
    *,
    session: requests.Session | None = None,
    now: datetime | None = None,
) -> str | None:
    """Print a notice and return the newer version, if any. Never raises on network errors."""

    if not settings.update_url or _truthy(os.environ.get("SCAFFOLDER_NO_UPDATE_CHECK")):
        return None
    now = now or datetime.now(timezone.utc)
    state = UpdateState.from_file(_state_path(settings))
    latest = state.latest_version
    if state.last_checked is None or now - state.last_checked >= CHECK_INTERVAL:
        latest = fetch_latest_version(settings.update_url, session, timeout=min(settings.http_timeout, 5.0))
        state = UpdateState(last_checked=now, latest_version=latest)
        try:
            _store_state(settings, state)
        except OSError:
            reporter.verbose("update", "unable to persist update state")

    current = _parse_version(settings.cli_version)
    remote = _parse_version(latest)
    if current is None or remote is None or remote <= current:
        return None
    reporter.warn(
        f"Update available: {PACKAGE_NAME} {current} -> {remote}. "
        f"Run `pip install --upgrade {PACKAGE_NAME}`."
    )
    return str(remote)


__all__ = ["UpdateState", "check_for_update", "fetch_latest_version"]
