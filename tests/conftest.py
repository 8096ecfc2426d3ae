"""共享测试夹具 — 假注册表 / 假 git 执行器 / 隔离配置"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from libhub.core.config import Config
from libhub.core.lib.registry import RegistryClient
from libhub.utils.shell import CommandResult

REGISTRY_URL = "http://registry.test/registry.json"


def registry_body(graph: dict[str, list[str]], api_version: int = 1) -> bytes:
    """由 {库名: [依赖]} 生成注册表 JSON"""
    libraries = {
        name: {
            "machineName": name,
            "majorVersion": 1,
            "minorVersion": 0,
            "patchVersion": 3,
            "repository": f"git@example.com:libs/{name}.git",
            "dependencies": deps,
        }
        for name, deps in graph.items()
    }
    return json.dumps({"apiVersion": api_version, "libraries": libraries}).encode()


@pytest.fixture()
def make_client() -> Callable[..., RegistryClient]:
    """构造不走网络的 RegistryClient，client.reads 记录实际拉取次数"""

    def _make(graph: dict[str, list[str]], api_version: int = 1) -> RegistryClient:
        client = RegistryClient(REGISTRY_URL, api_version=1, timeout=5)
        client.reads = 0  # type: ignore[attr-defined]
        body = registry_body(graph, api_version)

        def _read() -> bytes:
            client.reads += 1  # type: ignore[attr-defined]
            return body

        client._read = _read  # type: ignore[method-assign]
        return client

    return _make


class FakeExecutor:
    """按 git 子命令返回预设结果，并记录每次调用

    responses 的值可以是 CommandResult、异常实例，或 (cmd, cwd) -> CommandResult 的函数。
    """

    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        self.responses = responses or {}
        self.calls: list[tuple[list[str], str, dict[str, str] | None]] = []

    def execute(
        self,
        cmd: list[str],
        *,
        cwd: str = ".",
        env: dict[str, str] | None = None,
        timeout: int | None = None,
    ) -> CommandResult:
        self.calls.append((cmd, cwd, env))
        resp = self.responses.get(cmd[1], CommandResult(0, "", ""))
        if isinstance(resp, BaseException):
            raise resp
        if callable(resp):
            return resp(cmd, cwd)
        return resp

    @property
    def subcommands(self) -> list[str]:
        return [cmd[1] for cmd, _, _ in self.calls]


@pytest.fixture()
def fake_executor() -> FakeExecutor:
    return FakeExecutor()


def make_checkout(root: Path, name: str) -> Path:
    """在 root 下创建一个带 .git/config 的目录"""
    repo = root / name
    (repo / ".git").mkdir(parents=True)
    (repo / ".git" / "config").write_text("[core]\n")
    return repo


@pytest.fixture()
def config(tmp_path: Path) -> Config:
    return Config(
        registry_url=REGISTRY_URL,
        workspace_dir=str(tmp_path),
        max_workers=4,
        git_timeout=10,
    )


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch, config: Config) -> None:
    """全局配置与服务单例指向测试配置"""
    import libhub.core.config as cfgmod
    import libhub.services.workspace_service as wsmod
    monkeypatch.setattr(cfgmod, "_current", config)
    monkeypatch.setattr(wsmod, "_global", None)
