"""WorkspaceService 测试 — 注册表与 git 均为替身"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from libhub.core.config import Config
from libhub.core.models import STATUS_ERROR, STATUS_OK
from libhub.services.repo.runner import RepoOperationRunner
from libhub.services.workspace_service import (
    WorkspaceService,
    get_workspace_service,
    reset_workspace_service,
)
from libhub.utils.shell import CommandResult

from conftest import FakeExecutor, make_checkout


@pytest.fixture()
def build(config: Config, make_client):
    def _build(graph=None, responses=None) -> tuple[WorkspaceService, FakeExecutor]:
        ex = FakeExecutor(responses)
        svc = WorkspaceService(
            config,
            client=make_client(graph or {}),
            runner=RepoOperationRunner(ex, ssh_command="ssh", timeout=5),
        )
        return svc, ex
    return _build


class TestGetAndClone:
    def test_clone_queue_drains(self, build, tmp_path: Path) -> None:
        svc, ex = build({"A": ["B"], "B": [], "Z": []})
        resolution = svc.get(["A"])
        assert resolution.names == ["A", "B"]
        assert len(svc.clone_queue) == 2

        first = svc.clone_next()
        second = svc.clone_next()
        assert (first.name, second.name) == ("A", "B")
        assert svc.clone_next() is None
        assert ex.calls[0][0] == ["git", "clone", "git@example.com:libs/A.git", "A"]
        assert ex.calls[0][1] == str(tmp_path)

    def test_unknown_library_not_queued(self, build) -> None:
        svc, _ = build({"A": ["Missing"]})
        resolution = svc.get(["A"])
        assert [e.name for e in resolution.errors] == ["Missing"]
        assert len(svc.clone_queue) == 1

    def test_get_replaces_previous_queue(self, build) -> None:
        svc, _ = build({"A": [], "B": []})
        svc.get(["A"])
        svc.get(["B"])
        assert svc.clone_next().name == "B"
        assert svc.clone_next() is None

    def test_registry_fetched_once(self, build) -> None:
        svc, _ = build({"A": []})
        svc.list_libraries()
        svc.get(["A"])
        svc.get(["A"])
        assert svc.client.reads == 1


class TestSyncQueue:
    def test_pull_each_repository_once(self, build, tmp_path: Path) -> None:
        make_checkout(tmp_path, "H5P.B")
        make_checkout(tmp_path, "H5P.A")
        svc, ex = build()
        assert svc.prepare_update() == 2
        names = []
        while (result := svc.pull_next()) is not None:
            names.append(result.name)
        assert names == ["H5P.A", "H5P.B"]
        assert ex.subcommands == ["pull", "pull"]

    def test_push_uses_same_queue(self, build, tmp_path: Path) -> None:
        make_checkout(tmp_path, "H5P.A")
        svc, ex = build(responses={"push": CommandResult(0, "", "Everything up-to-date\n")})
        svc.prepare_update()
        assert svc.push_next().success
        assert svc.push_next() is None

    def test_empty_workspace(self, build) -> None:
        svc, _ = build()
        assert svc.prepare_update() == 0
        assert svc.pull_next() is None


class TestFanOut:
    def test_status_in_scan_order_with_isolated_failure(self, build, tmp_path: Path) -> None:
        for name in ("H5P.C", "H5P.A", "H5P.B"):
            make_checkout(tmp_path, name)

        def status(cmd, cwd):
            if cwd.endswith("H5P.B"):
                return CommandResult(128, "", "fatal: bad object HEAD\n")
            return CommandResult(0, "## main\n M x.js\n", "")

        svc, _ = build(responses={"status": status})
        results = svc.status_all()
        assert [r.name for r in results] == ["H5P.A", "H5P.B", "H5P.C"]
        assert [r.status for r in results] == [STATUS_OK, STATUS_ERROR, STATUS_OK]
        assert results[0].changes == [" M x.js"]

    def test_commit_message_passed(self, build, tmp_path: Path) -> None:
        make_checkout(tmp_path, "H5P.A")
        svc, ex = build(responses={"commit": CommandResult(0, "[main abc1234] fix\n", "")})
        results = svc.commit_all("fix")
        assert results[0].commit == "abc1234"
        assert ["git", "commit", "-m", "fix"] in [c[0] for c in ex.calls]

    def test_combined_diff(self, build, tmp_path: Path) -> None:
        make_checkout(tmp_path, "H5P.A")
        make_checkout(tmp_path, "H5P.B")
        raw = "diff --git a/x b/x\n--- a/x\n+++ b/x\n"
        svc, _ = build(responses={"diff": CommandResult(0, raw, "")})
        combined = svc.combined_diff(svc.diff_all())
        assert "a/H5P.A/x" in combined
        assert combined.index("H5P.A") < combined.index("H5P.B")

    def test_empty_workspace(self, build) -> None:
        svc, ex = build()
        assert svc.status_all() == []
        assert ex.calls == []


class TestPackAndVersion:
    def _library(self, root: Path, name: str) -> None:
        (root / name).mkdir()
        (root / name / "library.json").write_text(json.dumps({
            "machineName": name, "majorVersion": 1, "minorVersion": 0, "patchVersion": 2,
        }))

    def test_pack_relative_to_workspace(self, build, tmp_path: Path) -> None:
        self._library(tmp_path, "H5P.A")
        svc, _ = build()
        out = svc.pack(["H5P.A"], str(tmp_path / "bundle.h5p"))
        assert out.exists()

    def test_increase_patch_version(self, build, tmp_path: Path) -> None:
        self._library(tmp_path, "H5P.A")
        svc, _ = build()
        assert svc.increase_patch_version(["H5P.A"]) == {"H5P.A": 3}


class TestGlobal:
    def test_singleton_and_reset(self) -> None:
        first = get_workspace_service()
        assert get_workspace_service() is first
        reset_workspace_service()
        assert get_workspace_service() is not first
