"""Package cache backed by an npm-compatible registry."""

from __future__ import annotations

import hashlib
import shutil
import tarfile
import tempfile
from pathlib import Path, PurePosixPath
from typing import Any
from urllib.parse import quote

import requests

from scaffolder.ports.package_cache import PackageCache, PackageCacheError
from scaffolder.settings import DEFAULT_HTTP_TIMEOUT, DEFAULT_REGISTRY

LATEST = "latest"
_CHUNK_SIZE = 64 * 1024


def cache_dir_name(package_id: str, version: str) -> str:
    return f"{package_id.replace('/', '+')}@{version}"


class RegistryPackageCache(PackageCache):
    """Downloads package tarballs into ``<store_root>/<name>@<version>``.

    A version of ``latest`` is resolved through the registry's dist-tags the
    first time the handle needs a concrete version.
    """

    def __init__(
        self,
        *,
        target_root: Path,
        store_root: Path,
        package_id: str,
        version: str = LATEST,
        registry_url: str = DEFAULT_REGISTRY,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        if not package_id:
            raise PackageCacheError("package_id must be provided")
        self._target_root = target_root
        self._store_root = store_root
        self._package_id = package_id
        self._version = version or LATEST
        self._registry_url = registry_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._packument: dict[str, Any] | None = None

    @property
    def package_id(self) -> str:
        return self._package_id

    @property
    def version(self) -> str:
        return self._version

    @property
    def target_root(self) -> Path:
        return self._target_root

    @property
    def store_root(self) -> Path:
        return self._store_root

    @property
    def cache_file_path(self) -> Path:
        return self._store_root / cache_dir_name(self._package_id, self._version)

    def exists(self) -> bool:
        if self._version == LATEST:
            self._version = self._latest_version()
        return self.cache_file_path.is_dir()

    def install(self) -> None:
        if self._version == LATEST:
            self._version = self._latest_version()
        self._install_version(self._version)

    def update(self) -> None:
        latest = self._latest_version()
        latest_path = self._store_root / cache_dir_name(self._package_id, latest)
        if not latest_path.is_dir():
            self._install_version(latest)
        self._version = latest

    def _install_version(self, version: str) -> None:
        dist = self._dist_for(version)
        tarball_url = dist.get("tarball")
        if not isinstance(tarball_url, str) or not tarball_url:
            raise PackageCacheError(f"Registry entry for {self._package_id}@{version} has no tarball")
        self._target_root.mkdir(parents=True, exist_ok=True)
        self._store_root.mkdir(parents=True, exist_ok=True)
        destination = self._store_root / cache_dir_name(self._package_id, version)
        with tempfile.TemporaryDirectory(dir=self._store_root, prefix=".download-") as tmp:
            tmp_path = Path(tmp)
            archive = tmp_path / "package.tgz"
            self._download(tarball_url, archive, expected_sha1=dist.get("shasum"))
            extracted = tmp_path / "extract"
            extracted.mkdir()
            _safe_extract(archive, extracted)
            package_root = _package_root(extracted)
            if destination.exists():
                shutil.rmtree(destination)
            package_root.rename(destination)

    def _download(self, url: str, archive: Path, *, expected_sha1: Any) -> None:
        try:
            response = self._session.get(url, stream=True, timeout=self._timeout)
        except requests.RequestException as exc:
            raise PackageCacheError(f"Download failed for {self._package_id}: {exc}") from exc
        if response.status_code >= 400:
            raise PackageCacheError(f"Download failed for {self._package_id}: HTTP {response.status_code}")
        digest = hashlib.sha1()
        with archive.open("wb") as fh:
            for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                if chunk:
                    digest.update(chunk)
                    fh.write(chunk)
        if isinstance(expected_sha1, str) and expected_sha1 and digest.hexdigest() != expected_sha1:
            raise PackageCacheError(f"Checksum mismatch for {self._package_id} tarball")

    def _latest_version(self) -> str:
        latest = self._fetch_packument().get("dist-tags", {}).get(LATEST)
        if not isinstance(latest, str) or not latest:
            raise PackageCacheError(f"Registry has no latest release for {self._package_id}")
        return latest

    def _dist_for(self, version: str) -> dict[str, Any]:
        versions = self._fetch_packument().get("versions", {})
        entry = versions.get(version) if isinstance(versions, dict) else None
        if not isinstance(entry, dict):
            raise PackageCacheError(f"Version {version} of {self._package_id} not found in registry")
        dist = entry.get("dist")
        if not isinstance(dist, dict):
            raise PackageCacheError(f"Registry entry for {self._package_id}@{version} has no dist info")
        return dist

    def _fetch_packument(self) -> dict[str, Any]:
        if self._packument is not None:
            return self._packument
        url = f"{self._registry_url}/{quote(self._package_id, safe='@')}"
        try:
            response = self._session.get(url, headers={"Accept": "application/json"}, timeout=self._timeout)
        except requests.RequestException as exc:
            raise PackageCacheError(f"Registry request failed for {self._package_id}: {exc}") from exc
        if response.status_code == 404:
            raise PackageCacheError(f"Package {self._package_id} not found in registry {self._registry_url}")
        if response.status_code >= 400:
            raise PackageCacheError(
                f"Registry request failed for {self._package_id}: HTTP {response.status_code}"
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise PackageCacheError(f"Registry response for {self._package_id} is not JSON") from exc
        if not isinstance(payload, dict):
            raise PackageCacheError(f"Registry response for {self._package_id} is malformed")
        self._packument = payload
        return payload


def _safe_extract(archive: Path, destination: Path) -> None:
    try:
        with tarfile.open(archive, "r:*") as tar:
            members = tar.getmembers()
            for member in members:
                name = PurePosixPath(member.name)
                if name.is_absolute() or ".." in name.parts:
                    raise PackageCacheError(f"Unsafe path in package archive: {member.name}")
                if member.issym() or member.islnk():
                    raise PackageCacheError(f"Links are not allowed in package archive: {member.name}")
                if not (member.isfile() or member.isdir()):
                    raise PackageCacheError(f"Unsupported entry in package archive: {member.name}")
            # extraction filters only exist on interpreters with the PEP 706 backport
            if hasattr(tarfile, "data_filter"):
                tar.extractall(destination, members=members, filter="data")
            else:
                tar.extractall(destination, members=members)
    except tarfile.TarError as exc:
        raise PackageCacheError(f"Package archive is corrupt: {exc}") from exc



def _package_root(extracted: Path) -> Path:
    # npm tarballs wrap their content in a single top-level directory, usually "package/"
    entries = list(extracted.iterdir())
    if len(entries) == 1 and entries[0].is_dir():
        return entries[0]
    return extracted


__all__ = ["LATEST", "RegistryPackageCache", "cache_dir_name"]
