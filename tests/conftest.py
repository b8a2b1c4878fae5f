from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
for entry in (SRC, ROOT):
    if str(entry) not in sys.path:
        sys.path.insert(0, str(entry))
os.environ.setdefault("SCAFFOLDER_NO_UPDATE_CHECK", "1")

from scaffolder import __version__  # noqa: E402
from scaffolder.settings import RuntimeSettings  # noqa: E402


@pytest.fixture()
def runtime_settings(tmp_path_factory: pytest.TempPathFactory) -> RuntimeSettings:
    # kept outside tmp_path so tests can scaffold into an empty tmp_path
    base = tmp_path_factory.mktemp("runtime")
    home = base / "home"
    template_dir = home / "template"
    state_dir = home / "state"
    log_dir = home / "logs"
    for directory in (home, state_dir, log_dir):
        directory.mkdir(parents=True, exist_ok=True)
    return RuntimeSettings(
        home_dir=home,
        template_dir=template_dir,
        template_store_dir=template_dir / "node_modules",
        state_dir=state_dir,
        log_dir=log_dir,
        registry_url="https://registry.test",
        cli_version=__version__,
    )
