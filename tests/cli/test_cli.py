from __future__ import annotations

import json
from pathlib import Path

import pytest

from scaffolder.app.command_runner import CommandRunner
from scaffolder.cli import main as cli_main
from scaffolder.settings import RuntimeSettings
from scaffolder.utils.telemetry import record_event
from tests._fakes import FakeCacheFactory, RecordingSpawn, ScriptedPrompter


@pytest.fixture()
def cli_settings(monkeypatch: pytest.MonkeyPatch, runtime_settings: RuntimeSettings) -> RuntimeSettings:
    monkeypatch.setattr(cli_main, "SETTINGS", runtime_settings)
    return runtime_settings


def _patch_workflow(monkeypatch: pytest.MonkeyPatch, answers: list, spawn: RecordingSpawn) -> dict:
    seen: dict = {}
    real_build_workflow = cli_main.build_workflow

    def fake_build_workflow(settings, reporter, **kwargs):
        seen.update(kwargs)
        return real_build_workflow(
            settings,
            reporter,
            prompter=ScriptedPrompter(answers),
            cache_factory=FakeCacheFactory(),
            runner=CommandRunner(spawn=spawn, platform="linux"),
            **kwargs,
        )

    monkeypatch.setattr(cli_main, "build_workflow", fake_build_workflow)
    return seen


def test_init_scaffolds_into_current_directory(
    cli_settings: RuntimeSettings, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    spawn = RecordingSpawn()
    seen = _patch_workflow(monkeypatch, ["project", "1.0.0", "@scaffolder/template-vue3"], spawn)
    monkeypatch.chdir(tmp_path)

    exit_code = cli_main.main(["init", "my-app"])

    assert exit_code == 0
    assert seen == {"project_name": "my-app", "force": False}
    assert (tmp_path / "package.json").exists()
    assert spawn.commands == ["npm install", "npm run serve"]
    assert all(call["cwd"] == str(tmp_path) for call in spawn.calls)


def test_init_returns_one_on_failure(
    cli_settings: RuntimeSettings,
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    spawn = RecordingSpawn({"npm install": 1})
    _patch_workflow(monkeypatch, ["project", "1.0.0", "@scaffolder/template-vue3"], spawn)
    monkeypatch.chdir(tmp_path)

    exit_code = cli_main.main(["init", "my-app", "--force"])

    assert exit_code == 1
    assert spawn.commands == ["npm install"]
    assert "Dependency installation failed" in capsys.readouterr().err


def test_templates_lists_packaged_catalog(cli_settings: RuntimeSettings, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_main.main(["templates"]) == 0
    out = capsys.readouterr().out
    assert "@scaffolder/template-vue3@1.0.0" in out
    assert "@scaffolder/template-vue3-component@latest" in out


def test_templates_reports_empty_catalog(cli_settings: RuntimeSettings, capsys: pytest.CaptureFixture[str]) -> None:
    cli_settings.user_catalog_file.write_text("templates: []\n", encoding="utf-8")
    assert cli_main.main(["templates"]) == 1
    assert "No templates available" in capsys.readouterr().err


def test_cleanup_removes_template_cache(cli_settings: RuntimeSettings, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_main.main(["cleanup"]) == 0
    assert "No template cache found." in capsys.readouterr().out

    cached = cli_settings.template_store_dir / "pkg@1.0.0"
    cached.mkdir(parents=True)
    (cached / "package.json").write_text("{}", encoding="utf-8")

    assert cli_main.main(["cleanup"]) == 0
    assert not cli_settings.template_dir.exists()
    assert "Removed template cache" in capsys.readouterr().out


def test_telemetry_report_and_clear(
    cli_settings: RuntimeSettings, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.delenv("SCAFFOLDER_TELEMETRY", raising=False)
    record_event(cli_settings, "workflow.done", {"template": "x"}, status="ok")
    record_event(cli_settings, "workflow.failed", {"stage": "acquiring"}, level="error", status="failed")

    assert cli_main.main(["telemetry", "report"]) == 0
    summary = json.loads(capsys.readouterr().out)
    assert summary["total"] == 2
    assert summary["runs"] == {"done": 1, "failed": 1, "aborted": 0}
    assert summary["templates"] == {"x": 1}

    assert cli_main.main(["telemetry", "report", "--recent", "1"]) == 0
    assert json.loads(capsys.readouterr().out)["runs"] == {"done": 0, "failed": 1, "aborted": 0}

    assert cli_main.main(["telemetry", "clear"]) == 0
    assert not (cli_settings.log_dir / "telemetry.jsonl").exists()
    assert "Telemetry log cleared" in capsys.readouterr().out
    assert cli_main.main(["telemetry", "clear"]) == 0
    assert "No telemetry log found." in capsys.readouterr().out


def test_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_main.main(["--version"])
    assert excinfo.value.code == 0
    assert capsys.readouterr().out.startswith("scaffold ")


def test_unknown_command_is_rejected() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_main.main(["deploy"])
    assert excinfo.value.code == 2
