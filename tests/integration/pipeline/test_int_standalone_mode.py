# tests/integration/pipeline/test_int_standalone_mode.py — v1
"""Standalone mode end to end: project descriptor -> git roots -> lint changes."""

from __future__ import annotations

import io
import json

import pytest

from incrlint.cache.json_store import JsonCacheStore
from incrlint.cache.project_cache import load_project_cache
from incrlint.config.settings import Settings
from incrlint.main import main
from incrlint.pipeline.runner import detect_changed_target, run_target
from incrlint.process.executor import ProcessExecutor

pytestmark = [pytest.mark.git]


@pytest.fixture
def workspace(tmp_path, git_repo, commit_all):
    """A git project whose descriptor references a checked-out package repo."""
    project = git_repo(tmp_path / "project")
    package = git_repo(project / "Packages" / "Kit")
    (package / "Kit.swift").write_text("struct Kit {}\n")
    commit_all(package, "kit")

    (project / ".gitignore").write_text("Packages/\n")
    bundle = project / "App.xcodeproj"
    bundle.mkdir()
    (bundle / "project.pbxproj").write_text(json.dumps({
        "objects": {
            "main": {"isa": "PBXGroup", "children": ["app", "kit"]},
            "app": {"isa": "PBXGroup", "path": "App", "children": ["f"]},
            "f": {"isa": "PBXFileReference", "path": "main.swift"},
            "kit": {"isa": "PBXFileReference", "path": "Packages/Kit"},
        }
    }))
    (project / "App").mkdir()
    (project / "App" / "main.swift").write_text("print(1)\n")
    commit_all(project, "initial")
    return project, package


@pytest.fixture
def standalone_settings(workspace, tmp_path):
    project, _ = workspace
    return Settings(
        _env_file=None,
        project_file_path=project / "App.xcodeproj",
        project_dir=project,
        work_directory=tmp_path / "work",
    )


class TestDetectChangedTarget:
    @pytest.mark.asyncio
    async def test_changes_from_project_and_package(self, workspace, standalone_settings):
        project, package = workspace
        (project / "App" / "main.swift").write_text("print(2)\n")
        (package / "Kit.swift").write_text("struct Kit { let v = 1 }\n")
        (project / "notes.txt").write_text("not source\n")

        target = await detect_changed_target(standalone_settings)

        paths = [f.path for f in target.input_files]
        assert str(project / "App" / "main.swift") in paths
        assert str(package / "Kit.swift") in paths
        assert target.source_files(".swift") == sorted([
            str(package / "Kit.swift"), str(project / "App" / "main.swift"),
        ])
        cached = load_project_cache(standalone_settings.work_directory)
        assert cached.git_root_folders == [str(package), str(project)]

    @pytest.mark.asyncio
    async def test_clean_checkout_has_no_inputs(self, standalone_settings, fake_tool):
        tool, log = fake_tool
        target = await detect_changed_target(standalone_settings)
        result = await run_target(standalone_settings, target, tool=str(tool))
        assert result.skipped_reason == "no input files"
        assert not log.exists()

    @pytest.mark.asyncio
    async def test_lints_changed_files(self, workspace, standalone_settings, fake_tool):
        project, _ = workspace
        tool, log = fake_tool
        main_swift = project / "App" / "main.swift"
        main_swift.write_text("print(3)\n")

        store = JsonCacheStore(standalone_settings.work_directory)
        out = io.StringIO()
        target = await detect_changed_target(standalone_settings)
        await run_target(
            standalone_settings, target, tool=str(tool), store=store,
            executor=ProcessExecutor(store, stdout=out),
        )

        assert f"{main_swift}:1:1: warning: fake finding" in out.getvalue()
        assert set(store.load()) == {str(main_swift)}
        assert log.read_text().split() == ["fix", "lint"]


class TestCli:
    def test_roots_command(self, workspace, tmp_path, monkeypatch, capsys):
        project, package = workspace
        monkeypatch.setenv("PROJECT_FILE_PATH", str(project / "App.xcodeproj"))
        monkeypatch.setenv("PROJECT_DIR", str(project))
        monkeypatch.chdir(tmp_path)

        assert main(["-w", str(tmp_path / "work"), "roots"]) == 0
        assert capsys.readouterr().out.split() == [str(package), str(project)]

    def test_changed_command(self, workspace, tmp_path, fake_tool, monkeypatch, capsys):
        project, _ = workspace
        tool, _ = fake_tool
        monkeypatch.setenv("PROJECT_FILE_PATH", str(project / "App.xcodeproj"))
        monkeypatch.setenv("PROJECT_DIR", str(project))
        monkeypatch.setenv("INCRLINT_TOOL_PATH", str(tool))
        monkeypatch.chdir(tmp_path)
        new_file = project / "App" / "New.swift"
        new_file.write_text("let n = 1\n")

        assert main(["-w", str(tmp_path / "work"), "changed"]) == 0
        assert f"{new_file}:1:1: warning: fake finding" in capsys.readouterr().out
